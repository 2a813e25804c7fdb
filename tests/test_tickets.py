"""Tests for ticket parsing and formatting."""

import pytest

from core.tickets import Ticket, format_ticket, parse_ticket


@pytest.mark.parametrize(
    "repository,path",
    [
        ("github.com/google/zoekt", "query/parse.go"),
        ("repo", "a/b/c.txt"),
        ("r@main", "README"),
    ],
)
def test_round_trip(repository, path):
    ticket = Ticket(repository, path)
    assert ticket.complete()
    assert parse_ticket(format_ticket(ticket)) == ticket


def test_splits_on_first_colon_only():
    ticket = Ticket.parse("repo:path:with:colons")
    assert ticket.repository == "repo"
    assert ticket.path == "path:with:colons"


def test_partial_tickets():
    assert Ticket.parse("repo") == Ticket("repo", "")
    assert Ticket.parse("repo:") == Ticket("repo", "")
    assert Ticket.parse(":path") == Ticket("", "path")
    assert not Ticket.parse("repo").complete()
    assert not Ticket.parse(":path").complete()


def test_empty_input_never_fails():
    assert Ticket.parse("") == Ticket()
    assert Ticket.parse(None) == Ticket()
    assert not Ticket().complete()


def test_branch_scope():
    assert Ticket("repo@dev", "x").branch_scope() == ("repo", "dev")
    assert Ticket("repo", "x").branch_scope() == ("repo", "")


def test_str_is_canonical_form():
    assert str(Ticket("repo", "dir/file.go")) == "repo:dir/file.go"
