"""Translation of tickets and selections into backend query strings."""

from enum import Enum
from typing import Optional

from core.tickets import Ticket

# Characters with a meaning in the backend query language or its regexps.
QUERY_SPECIAL_CHARS = frozenset(":()[]\\.*?^$+{}, ")

REPOSITORY_ATOM_PREFIXES = ("r:", "repo:")


class XrefMode(str, Enum):
    """How a cross-reference selection is turned into a query."""

    LAX = "Lax"
    BOUNDARY = "Boundary"
    RAW = "Raw"

    @classmethod
    def parse(cls, value: Optional[str]) -> "XrefMode":
        """Parse a mode, falling back to ``LAX`` for unknown values."""
        for mode in cls:
            if mode.value == value:
                return mode
        return cls.LAX


class Casing(str, Enum):
    """Case sensitivity forwarded to the backend."""

    YES = "yes"
    NO = "no"
    AUTO = "auto"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Casing":
        """Parse a casing value, falling back to ``AUTO`` for unknown values."""
        for casing in cls:
            if casing.value == value:
                return casing
        return cls.AUTO


def escape_literal_query(text: str) -> str:
    """Backslash-escape query metacharacters so ``text`` matches literally."""
    return "".join("\\" + char if char in QUERY_SPECIAL_CHARS else char for char in text)


def repository_atoms(ticket: Ticket) -> str:
    """Build the repository (and branch) restriction for a ticket.

    The backend matches ``r:`` as a substring, so results of such a query
    must be post-filtered to the exact repository. See
    ``AbstractSearchClient.search_in_repository``.
    """
    name, branch = ticket.branch_scope()
    atoms = "r:" + escape_literal_query(name)
    if branch:
        atoms += " b:" + escape_literal_query(branch)
    return atoms


def filetree_query(ticket: Ticket) -> str:
    """Build the query listing everything below ``ticket``.

    The backend never returns directories as matches, so every file below
    the requested level is fetched and directories are derived from paths.
    """
    if not ticket.repository:
        return "r:"
    query = repository_atoms(ticket)
    if not ticket.path:
        return query + " f:^.*$"
    return query + " f:^" + escape_literal_query(ticket.path) + "/.*$"


def source_query(ticket: Ticket) -> str:
    """Build the query fetching exactly the file addressed by ``ticket``."""
    return repository_atoms(ticket) + " f:^" + escape_literal_query(ticket.path) + "$"


def xref_query(selection: str, mode: XrefMode = XrefMode.LAX, casing: Casing = Casing.AUTO) -> str:
    """Build a cross-reference query for the selected text.

    Args:
        selection: Text selected in the source browser
        mode: ``LAX`` searches the literal text, ``BOUNDARY`` the literal text
            between word boundaries, ``RAW`` passes the selection through as
            a parenthesized query expression, so a top-level ``or`` stays
            under the casing atom
        casing: Case sensitivity of the search

    Returns:
        Backend query string
    """
    if mode is XrefMode.RAW:
        expression = f"({selection})"
    elif mode is XrefMode.BOUNDARY:
        expression = "\\b" + escape_literal_query(selection) + "\\b"
    else:
        expression = escape_literal_query(selection)
    return f"case:{casing.value} {expression}"


def is_repository_only(query: str) -> bool:
    """Tell whether a raw query consists of repository restrictions only."""
    atoms = query.split()
    return all(atom.startswith(REPOSITORY_ATOM_PREFIXES) for atom in atoms)
