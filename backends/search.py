"""Search backends for Zoekt."""

import base64
import binascii
import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional

import requests

from backends.models import (
    FileMatch,
    LineFragment,
    LineMatch,
    Repository,
    SearchOptions,
    SearchResult,
)
from core.errors import BackendError, QuerySyntaxError
from core.tickets import Ticket

if TYPE_CHECKING:
    from core.limiters import MatchLimiter

logger = logging.getLogger(__name__)

# Added to the backend's own wall-time budget for the HTTP round trip.
TIMEOUT_GRACE_SECONDS = 5.0


class AbstractSearchClient(ABC):
    """Abstract base class for search clients."""

    @abstractmethod
    def search(self, query: str, options: SearchOptions) -> SearchResult:
        """Search for code.

        Args:
            query: Backend query string
            options: Search options (wall time, match ceilings, whole files)

        Returns:
            Search result

        Raises:
            QuerySyntaxError: If the backend rejects the query
            BackendError: If the search fails
        """

    @abstractmethod
    def list_repositories(self, query: str = "") -> List[Repository]:
        """List repositories known to the backend.

        Args:
            query: Optional query restricting the listing

        Returns:
            List of repositories with their branches
        """

    def search_in_repository(
        self, ticket: Ticket, query: str, options: SearchOptions
    ) -> SearchResult:
        """Search with a query restricted to the repository of ``ticket``.

        The backend's repository filter is a substring match, so files from
        repositories merely containing the name are dropped here. A
        ``name@branch`` repository also drops files not on that branch.
        """
        result = self.search(query, options)
        name, branch = ticket.branch_scope()
        kept = [
            f
            for f in result.files
            if f.repository == name and (not branch or branch in f.branches)
        ]
        if len(kept) != len(result.files):
            logger.info(
                f"Dropped {len(result.files) - len(kept)} files not in repository {ticket.repository}"
            )
        result.files = kept
        return result

    def search_with_estimate(
        self, query: str, limiter: "MatchLimiter", whole: bool = False
    ) -> SearchResult:
        """Run a count-only query to size match ceilings, then the real search."""
        estimate = self.search(query, limiter.estimate_options())
        options = limiter.options_for(estimate.shard_files_considered, whole=whole)
        return self.search(query, options)


def _decode_bytes(value: Optional[str]) -> bytes:
    """Decode a base64 byte field of the JSON API (null means empty)."""
    if not value:
        return b""
    try:
        return base64.b64decode(value)
    except (binascii.Error, ValueError) as exc:
        raise BackendError(f"Malformed byte field in backend response: {exc}")


def _parse_line_match(data: Dict[str, Any]) -> LineMatch:
    return LineMatch(
        line_number=data.get("LineNumber", 0),
        line=_decode_bytes(data.get("Line")),
        line_start=data.get("LineStart", 0),
        line_end=data.get("LineEnd", 0),
        fragments=[
            LineFragment(
                line_offset=fragment.get("LineOffset", 0),
                match_length=fragment.get("MatchLength", 0),
            )
            for fragment in data.get("LineFragments") or []
        ],
    )


def _parse_file_match(data: Dict[str, Any]) -> FileMatch:
    content = data.get("Content")
    return FileMatch(
        repository=data.get("Repository", ""),
        filename=data.get("FileName", ""),
        checksum=_decode_bytes(data.get("Checksum")),
        content=_decode_bytes(content) if content is not None else None,
        branches=list(data.get("Branches") or []),
        line_matches=[_parse_line_match(lm) for lm in data.get("LineMatches") or []],
    )


class ZoektSearchClient(AbstractSearchClient):
    """Zoekt search client implementation, over the webserver's JSON API."""

    def __init__(self, base_url: str) -> None:
        """Initialize Zoekt client.

        Args:
            base_url: Zoekt API base URL
        """
        self.base_url = base_url.rstrip("/")

    def _post(self, endpoint: str, payload: Dict[str, Any], timeout: float) -> Dict[str, Any]:
        try:
            response = requests.post(
                f"{self.base_url}{endpoint}", json=payload, timeout=timeout
            )
        except requests.exceptions.RequestException as exc:
            raise BackendError(f"Search backend request failed: {exc}")

        if response.status_code == 400:
            raise QuerySyntaxError(self._error_message(response))
        if not response.ok:
            raise BackendError(
                f"Search backend returned {response.status_code}: {self._error_message(response)}"
            )
        try:
            return response.json()
        except ValueError as exc:
            raise BackendError(f"Search backend returned invalid JSON: {exc}")

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            return str(response.json().get("Error", response.text))
        except ValueError:
            return response.text

    def search(self, query: str, options: SearchOptions) -> SearchResult:
        """Search using Zoekt."""
        logger.info(f"query: {query}")
        data = self._post(
            "/api/search",
            {"Q": query, "Opts": options.to_json()},
            timeout=options.max_wall_time + TIMEOUT_GRACE_SECONDS,
        )
        result = data.get("Result") or {}
        stats = result.get("Stats") or {}
        return SearchResult(
            files=[_parse_file_match(f) for f in result.get("Files") or []],
            shard_files_considered=stats.get("ShardFilesConsidered", 0),
        )

    def list_repositories(self, query: str = "") -> List[Repository]:
        """List repositories using Zoekt."""
        data = self._post("/api/list", {"Q": query}, timeout=TIMEOUT_GRACE_SECONDS * 2)
        repos = (data.get("List") or {}).get("Repos") or []
        repositories = []
        for entry in repos:
            repo = entry.get("Repository") or {}
            repositories.append(
                Repository(
                    name=repo.get("Name", ""),
                    branches=[b.get("Name", "") for b in repo.get("Branches") or []],
                )
            )
        return repositories


class SearchClientFactory:
    """Factory for creating search clients."""

    @staticmethod
    def create_client(backend: str, **kwargs) -> AbstractSearchClient:
        """Create a search client for the given backend.

        Args:
            backend: Backend name (only 'zoekt' is supported)
            **kwargs: Backend-specific configuration

        Returns:
            Search client instance

        Raises:
            ValueError: If backend is not supported
        """
        backend = backend.lower()
        if backend == "zoekt":
            return ZoektSearchClient(base_url=kwargs.get("base_url", ""))
        else:
            raise ValueError(f"Unsupported backend: {backend}")
