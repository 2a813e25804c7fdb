"""Backend implementations for search and content fetching."""

from .content_fetcher import AbstractContentFetcher, ZoektContentFetcher
from .models import (
    FileMatch,
    LineFragment,
    LineMatch,
    Repository,
    SearchOptions,
    SearchResult,
)
from .search import AbstractSearchClient, SearchClientFactory, ZoektSearchClient

__all__ = [
    "AbstractSearchClient",
    "SearchClientFactory",
    "ZoektSearchClient",
    "AbstractContentFetcher",
    "ZoektContentFetcher",
    "FileMatch",
    "LineFragment",
    "LineMatch",
    "Repository",
    "SearchOptions",
    "SearchResult",
]
