"""Ticket addressing: the ``repository:path`` identifier used by the API.

Colons are not escaped. Paths containing a colon cannot be addressed, so
indexed corpora are expected to be free of them.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

SEPARATOR = ":"
BRANCH_SEPARATOR = "@"


@dataclass(frozen=True)
class Ticket:
    """A repository, or a file or directory inside one."""

    repository: str = ""
    path: str = ""

    @classmethod
    def parse(cls, text: Optional[str]) -> "Ticket":
        """Parse ``repository:path``, splitting on the first colon only.

        Never fails: missing parts are left empty.
        """
        if not text:
            return cls()
        repository, _, path = text.partition(SEPARATOR)
        return cls(repository=repository, path=path)

    def format(self) -> str:
        return f"{self.repository}{SEPARATOR}{self.path}"

    def complete(self) -> bool:
        return bool(self.repository) and bool(self.path)

    def branch_scope(self) -> Tuple[str, str]:
        """Split a ``name@branch`` repository into ``(name, branch)``.

        The branch is empty when the repository carries no branch suffix.
        """
        name, _, branch = self.repository.partition(BRANCH_SEPARATOR)
        return name, branch

    def __str__(self) -> str:
        return self.format()


def parse_ticket(text: Optional[str]) -> Ticket:
    return Ticket.parse(text)


def format_ticket(ticket: Ticket) -> str:
    return ticket.format()
