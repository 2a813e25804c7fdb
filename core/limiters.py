"""Resource limiters for backend searches (match ceilings and result caps)."""

import logging
from typing import List, TypeVar

from backends.models import SearchOptions

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Above this many candidate documents, match counts are capped.
LARGE_CORPUS_DOCS = 10000


class MatchLimiter:
    """Sizes backend match ceilings from an estimated document count."""

    def __init__(self, num_results: int, max_wall_time: float = 10.0) -> None:
        """Initialize match limiter.

        Args:
            num_results: Number of files the caller wants to display
            max_wall_time: Wall-time budget of each backend call, in seconds
        """
        self.num_results = num_results
        self.max_wall_time = max_wall_time

    def estimate_options(self) -> SearchOptions:
        """Options for the cheap count-only query preceding a real search."""
        return SearchOptions(max_wall_time=self.max_wall_time, estimate_doc_count=True)

    def options_for(self, numdocs: int, whole: bool = False) -> SearchOptions:
        """Options for the real search, given the estimated document count.

        Args:
            numdocs: Files considered by the count-only query
            whole: Whether whole file contents should be returned

        Returns:
            Search options with match ceilings filled in
        """
        num = self.num_results
        opts = SearchOptions(max_wall_time=self.max_wall_time, whole=whole)
        if numdocs > LARGE_CORPUS_DOCS:
            # Eligible documents are counted after repository filtering, so
            # very large repositories are not covered fairly.
            # 10k docs, 50 num -> max match = (250 + 250 / 10)
            opts.shard_max_match_count = num * 5 + (5 * num) // (numdocs // 1000)
            # 10k docs, 50 num -> max important match = 4
            opts.shard_max_important_match = num // 20 + num // (numdocs // 500)
        else:
            # Virtually no limits for a small corpus.
            n = numdocs + num * 100
            opts.shard_max_important_match = n
            opts.shard_max_match_count = n
            opts.total_max_match_count = n
            opts.total_max_important_match = n
        opts.max_doc_display_count = num
        logger.debug(f"Match ceilings for {numdocs} docs: {opts}")
        return opts


class ResultCapLimiter:
    """Truncates result lists to a fixed cap, without reporting partial results."""

    def __init__(self, max_results: int) -> None:
        """Initialize result cap limiter.

        Args:
            max_results: Maximum number of results kept
        """
        self.max_results = max_results

    def apply(self, results: List[T]) -> List[T]:
        if len(results) > self.max_results:
            logger.info(f"Truncating {len(results)} results to {self.max_results}")
        return results[: self.max_results]
