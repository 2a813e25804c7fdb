"""Content fetchers returning whole source files."""

import logging
from abc import ABC, abstractmethod

from backends.models import SearchOptions
from backends.search import AbstractSearchClient
from core.errors import NotFoundError, RequestParameterError
from core.query import source_query
from core.tickets import Ticket

logger = logging.getLogger(__name__)


class AbstractContentFetcher(ABC):
    """Abstract base class for content fetchers."""

    @abstractmethod
    def get_content(self, ticket: Ticket) -> bytes:
        """Get file content.

        Args:
            ticket: Complete ticket addressing the file

        Returns:
            Raw file content

        Raises:
            RequestParameterError: If the ticket is incomplete
            NotFoundError: If the file doesn't exist
        """


class ZoektContentFetcher(AbstractContentFetcher):
    """Zoekt content fetcher, using a whole-file search for the exact path."""

    def __init__(self, search_client: AbstractSearchClient, max_wall_time: float = 10.0) -> None:
        """Initialize Zoekt content fetcher.

        Args:
            search_client: Client used to query the backend
            max_wall_time: Wall-time budget of the search, in seconds
        """
        self.search_client = search_client
        self.max_wall_time = max_wall_time

    def get_content(self, ticket: Ticket) -> bytes:
        """Get content from Zoekt."""
        if not ticket.complete():
            raise RequestParameterError("Expected ticket in repo:path format")

        query = source_query(ticket)
        options = SearchOptions(max_wall_time=self.max_wall_time, whole=True)
        # Normally exactly one file is left after the repository filter.
        result = self.search_client.search_in_repository(ticket, query, options)
        logger.info(f"source {ticket}: {len(result.files)} candidate files")
        for f in result.files:
            if f.filename == ticket.path and f.content is not None:
                return f.content
        raise NotFoundError(f"Requested file not in response. Query: {query}")
