"""Backend models for search results and options."""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class LineFragment:
    """A matched fragment within a line."""

    line_offset: int
    match_length: int


@dataclass
class LineMatch:
    """Represents a matched line in a file."""

    line_number: int
    line: bytes = b""
    line_start: int = 0
    line_end: int = 0
    fragments: List[LineFragment] = field(default_factory=list)


@dataclass
class FileMatch:
    """A file returned by the backend, with its line matches."""

    repository: str
    filename: str
    checksum: bytes = b""
    content: Optional[bytes] = None
    branches: List[str] = field(default_factory=list)
    line_matches: List[LineMatch] = field(default_factory=list)


@dataclass
class Repository:
    """A repository known to the backend."""

    name: str
    branches: List[str] = field(default_factory=list)


@dataclass
class SearchResult:
    """Search result returned by the backend."""

    files: List[FileMatch] = field(default_factory=list)
    shard_files_considered: int = 0


@dataclass
class SearchOptions:
    """Options forwarded to the backend with every search call."""

    max_wall_time: float = 10.0
    whole: bool = False
    estimate_doc_count: bool = False
    shard_max_match_count: int = 0
    total_max_match_count: int = 0
    shard_max_important_match: int = 0
    total_max_important_match: int = 0
    max_doc_display_count: int = 0

    def to_json(self) -> dict:
        """Render the options in the backend's JSON field names.

        Zero-valued caps are left out so the backend applies its own defaults.
        """
        opts = {
            # Go durations are nanoseconds.
            "MaxWallTime": int(self.max_wall_time * 1_000_000_000),
            "Whole": self.whole,
            "EstimateDocCount": self.estimate_doc_count,
        }
        caps = {
            "ShardMaxMatchCount": self.shard_max_match_count,
            "TotalMaxMatchCount": self.total_max_match_count,
            "ShardMaxImportantMatch": self.shard_max_important_match,
            "TotalMaxImportantMatch": self.total_max_important_match,
            "MaxDocDisplayCount": self.max_doc_display_count,
        }
        opts.update({key: value for key, value in caps.items() if value > 0})
        return opts
