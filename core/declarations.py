"""Heuristic classification of matched lines as declarations.

Best effort only: a line is a declaration when any registered predicate
accepts it. The default predicates are regexes for a few languages, loaded
from ``declarations.yaml``.
"""

import logging
import pathlib
from typing import Callable, Iterable, List, Optional

from core.pattern_manager import PatternManager

logger = logging.getLogger(__name__)

DeclarationPredicate = Callable[[str], bool]

PATTERNS_FILE = pathlib.Path(__file__).parent / "declarations.yaml"


def regex_predicate(manager: PatternManager, name: str) -> DeclarationPredicate:
    """Predicate accepting lines matched by the patterns under ``name``."""
    regex = manager.compile(name)
    return lambda line: regex.search(line) is not None


class DeclarationClassifier:
    """Tells declaration-like lines apart from plain references."""

    def __init__(self, predicates: Optional[Iterable[DeclarationPredicate]] = None) -> None:
        self._predicates: List[DeclarationPredicate] = list(predicates or [])

    @classmethod
    def default(cls, languages: Optional[Iterable[str]] = None) -> "DeclarationClassifier":
        """Classifier using the bundled patterns.

        Args:
            languages: Languages to load, all of the bundled ones by default

        Returns:
            Declaration classifier
        """
        manager = PatternManager(file_path=PATTERNS_FILE, section_path="declarations")
        names = list(languages) if languages is not None else manager.sections()
        logger.debug(f"Loading declaration patterns for {names}")
        return cls(regex_predicate(manager, name) for name in names)

    def register(self, predicate: DeclarationPredicate) -> None:
        self._predicates.append(predicate)

    def is_declaration(self, line: str) -> bool:
        return any(predicate(line) for predicate in self._predicates)
