"""Tests for file tree assembly."""

from backends.models import Repository
from core.filetree import assemble_filetree, directory_nodes, repository_nodes, sort_nodes
from core.models import ChildState, FileTreeNode
from core.tickets import Ticket
from tests.helpers import FakeSearchClient, make_file


def _displays(nodes):
    return [node.display for node in nodes]


def test_directories_sort_before_files():
    nodes = [
        FileTreeNode(id="r:b.txt", display="b.txt", is_file=True),
        FileTreeNode(id="r:a", display="a", is_file=False),
        FileTreeNode(id="r:c", display="c", is_file=False),
    ]
    assert _displays(sort_nodes(nodes)) == ["a", "c", "b.txt"]


def test_files_directly_under_directory():
    files = [make_file("repo", "dir/a.txt"), make_file("repo", "dir/b.txt")]
    nodes = directory_nodes(Ticket("repo", "dir"), files)
    assert _displays(nodes) == ["a.txt", "b.txt"]
    assert all(node.is_file for node in nodes)
    assert [node.id for node in nodes] == ["repo:dir/a.txt", "repo:dir/b.txt"]


def test_nested_files_yield_one_directory_node():
    files = [
        make_file("repo", "src/x/one.go"),
        make_file("repo", "src/y.go"),
        make_file("repo", "src/x/two.go"),
        make_file("repo", "README"),
    ]
    nodes = directory_nodes(Ticket("repo", ""), files)
    assert _displays(nodes) == ["src", "README"]
    assert [node.is_file for node in nodes] == [False, True]
    assert nodes[0].id == "repo:src"
    assert all(node.child_state is ChildState.UNKNOWN for node in nodes)


def test_files_outside_top_are_ignored():
    files = [make_file("repo", "dir/a.txt"), make_file("repo", "dirt/b.txt")]
    nodes = directory_nodes(Ticket("repo", "dir"), files)
    assert _displays(nodes) == ["a.txt"]


def test_repository_nodes_with_and_without_branches():
    nodes = repository_nodes(
        [Repository("zoekt", ["main", "dev"]), Repository("alpha", [])]
    )
    assert _displays(nodes) == ["alpha", "zoekt@dev", "zoekt@main"]
    assert all(not node.is_file and node.children is None for node in nodes)


def test_assemble_lists_repositories_without_top():
    client = FakeSearchClient(repositories=[Repository("b"), Repository("a")])
    tree = assemble_filetree(Ticket(), client)
    assert tree.id == "toplevel"
    assert tree.child_state is ChildState.NONEMPTY
    assert _displays(tree.children) == ["a", "b"]
    assert client.queries == ["r:"]


def test_assemble_filters_substring_repositories():
    client = FakeSearchClient(
        files=[
            make_file("repo", "lib/a.py"),
            make_file("repo-fork", "other/b.py"),
            make_file("myrepo", "main.py"),
        ]
    )
    tree = assemble_filetree(Ticket("repo", ""), client)
    assert _displays(tree.children) == ["lib"]
    assert client.queries == ["r:repo f:^.*$"]


def test_assemble_branch_scoped_repository():
    client = FakeSearchClient(
        files=[
            make_file("repo", "a.py", branches=["main"]),
            make_file("repo", "b.py", branches=["dev"]),
        ]
    )
    tree = assemble_filetree(Ticket("repo@dev", ""), client)
    assert _displays(tree.children) == ["b.py"]
    assert tree.children[0].id == "repo@dev:b.py"


def test_known_empty_level():
    tree = assemble_filetree(Ticket("repo", "nothing"), FakeSearchClient())
    assert tree.children == []
    assert tree.child_state is ChildState.EMPTY


def test_serialized_tree():
    client = FakeSearchClient(files=[make_file("repo", "a.txt")])
    data = assemble_filetree(Ticket("repo", ""), client).model_dump(by_alias=True)
    assert data == {
        "id": "toplevel",
        "display": "wontshow",
        "onlyGenerated": False,
        "isFile": False,
        "children": [
            {
                "id": "repo:a.txt",
                "display": "a.txt",
                "onlyGenerated": False,
                "isFile": True,
                "children": None,
            }
        ],
    }
