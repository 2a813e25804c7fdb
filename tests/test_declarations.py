"""Tests for the declaration heuristic."""

import pytest

from core.declarations import PATTERNS_FILE, DeclarationClassifier
from core.pattern_manager import PatternManager


@pytest.fixture(scope="module")
def classifier() -> DeclarationClassifier:
    return DeclarationClassifier.default()


@pytest.mark.parametrize(
    "line",
    [
        "parseQuery :: Text -> Either String Query",
        "  go' :: Int",
        "data Ticket = Ticket",
        "newtype Repo = Repo Text",
        "  { ticketRepo :: Text",
        "  , ticketPath :: Text",
        "  = FileNode",
        "  | DirNode [Node]",
    ],
)
def test_declarations(classifier, line):
    assert classifier.is_declaration(line)


@pytest.mark.parametrize(
    "line",
    [
        "  let q = parseQuery t",
        "result <- search ctx q",
        "import Data.Text (Text)",
        "",
    ],
)
def test_plain_references(classifier, line):
    assert not classifier.is_declaration(line)


def test_registered_predicates_extend_the_heuristic():
    classifier = DeclarationClassifier.default()
    assert not classifier.is_declaration("def parse(q):")
    classifier.register(lambda line: line.lstrip().startswith("def "))
    assert classifier.is_declaration("def parse(q):")


def test_no_predicates_means_no_declarations():
    assert not DeclarationClassifier().is_declaration("foo :: Int")


def test_pattern_manager_sections():
    manager = PatternManager(PATTERNS_FILE, section_path="declarations")
    assert "haskell" in manager.sections()
    assert manager.compile("haskell") is manager.compile("haskell")


def test_pattern_manager_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        PatternManager(tmp_path / "missing.yaml")

    patterns = tmp_path / "patterns.yaml"
    patterns.write_text("lang:\n  scalar: nope\n", encoding="utf-8")
    manager = PatternManager(patterns)
    with pytest.raises(ValueError):
        manager.load_patterns("lang.scalar")
    with pytest.raises(ValueError):
        manager.load_patterns("other")
    with pytest.raises(ValueError):
        PatternManager(patterns, section_path="lang.missing")
