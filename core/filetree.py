"""Derivation of one file tree level from a flat list of backend files."""

import logging
from typing import Iterable, List

from backends.models import FileMatch, Repository, SearchOptions
from backends.search import AbstractSearchClient
from core.models import FileTreeNode
from core.query import filetree_query
from core.tickets import BRANCH_SEPARATOR, Ticket

logger = logging.getLogger(__name__)

ROOT_ID = "toplevel"
ROOT_DISPLAY = "wontshow"


def sort_nodes(nodes: List[FileTreeNode]) -> List[FileTreeNode]:
    """Sort directories before files, then by display name."""
    return sorted(nodes, key=lambda node: (node.is_file, node.display))


def repository_nodes(repositories: Iterable[Repository]) -> List[FileTreeNode]:
    """One node per repository, or per ``repository@branch`` when branches are known."""
    nodes = []
    for repo in repositories:
        names = [f"{repo.name}{BRANCH_SEPARATOR}{b}" for b in repo.branches] or [repo.name]
        for name in names:
            nodes.append(FileTreeNode(id=name, display=name, is_file=False))
    return sort_nodes(nodes)


def directory_nodes(top: Ticket, files: Iterable[FileMatch]) -> List[FileTreeNode]:
    """Children of ``top`` derived from the paths of all files below it.

    Only files are ever returned by the backend, so every directory found
    this way is non-empty. The first file seen for a path segment decides
    whether the segment is a file or a directory.
    """
    prefix = top.path + "/" if top.path else ""
    seen = set()
    nodes = []
    for f in files:
        if not f.filename.startswith(prefix):
            continue
        relative = f.filename[len(prefix):]
        current_part, sep, _ = relative.partition("/")
        if not current_part or current_part in seen:
            continue
        seen.add(current_part)
        nodes.append(
            FileTreeNode(
                id=Ticket(top.repository, prefix + current_part).format(),
                display=current_part,
                is_file=not sep,
            )
        )
    return sort_nodes(nodes)


def root_node(children: List[FileTreeNode]) -> FileTreeNode:
    return FileTreeNode(id=ROOT_ID, display=ROOT_DISPLAY, is_file=False, children=children)


def assemble_filetree(
    top: Ticket, search_client: AbstractSearchClient, max_wall_time: float = 10.0
) -> FileTreeNode:
    """Fetch and assemble the level of the file tree below ``top``.

    Args:
        top: Ticket of the expanded node, empty for the list of repositories
        search_client: Client used to query the backend
        max_wall_time: Wall-time budget of the search, in seconds

    Returns:
        Synthetic root node whose children are the requested level
    """
    if not top.repository:
        return root_node(repository_nodes(search_client.list_repositories(filetree_query(top))))

    options = SearchOptions(max_wall_time=max_wall_time)
    # TODO: size the match ceilings from a document estimate, a huge
    #     repository may be truncated and hide some top-level entries.
    result = search_client.search_in_repository(top, filetree_query(top), options)
    children = directory_nodes(top, result.files)
    logger.info(f"filetree {top}: {len(result.files)} files, {len(children)} children")
    return root_node(children)
