"""Fakes and builders shared by the tests."""

from typing import List, Optional

from backends.models import (
    FileMatch,
    LineFragment,
    LineMatch,
    Repository,
    SearchOptions,
    SearchResult,
)
from backends.search import AbstractSearchClient


class FakeSearchClient(AbstractSearchClient):
    """In-memory backend recording every call it gets."""

    def __init__(
        self,
        files: Optional[List[FileMatch]] = None,
        repositories: Optional[List[Repository]] = None,
        files_considered: int = 100,
    ) -> None:
        self.files = files or []
        self.repositories = repositories or []
        self.files_considered = files_considered
        self.queries: List[str] = []
        self.options: List[SearchOptions] = []
        self.error: Optional[Exception] = None

    def search(self, query: str, options: SearchOptions) -> SearchResult:
        if self.error is not None:
            raise self.error
        self.queries.append(query)
        self.options.append(options)
        return SearchResult(files=list(self.files), shard_files_considered=self.files_considered)

    def list_repositories(self, query: str = "") -> List[Repository]:
        self.queries.append(query)
        return list(self.repositories)


def make_file(
    repository: str,
    filename: str,
    lines: Optional[List[str]] = None,
    needle: str = "",
    checksum: bytes = b"",
    content: Optional[bytes] = None,
    branches: Optional[List[str]] = None,
) -> FileMatch:
    """Build a backend file whose line matches highlight ``needle``."""
    line_matches = []
    offset = 0
    for number, text in enumerate(lines or [], start=1):
        raw = text.encode("utf-8")
        fragments = []
        if needle and needle in text:
            start = raw.index(needle.encode("utf-8"))
            fragments.append(LineFragment(line_offset=start, match_length=len(needle.encode("utf-8"))))
        line_matches.append(
            LineMatch(
                line_number=number,
                line=raw,
                line_start=offset,
                line_end=offset + len(raw),
                fragments=fragments,
            )
        )
        offset += len(raw) + 1
    return FileMatch(
        repository=repository,
        filename=filename,
        checksum=checksum or f"{repository}:{filename}".encode("utf-8"),
        content=content,
        branches=branches or [],
        line_matches=line_matches,
    )

