"""Cross-reference result assembly: deduplication, grouping and ordering.

Two dedup axes are tracked independently. Files with the same content
checksum are marked as duplicates of the first one seen. Files whose matched
lines are byte-identical are clustered into one ``SiteGroup``, whatever the
rest of the file looks like.

All bookkeeping is local to a single call, so grouping the same input twice
gives the same output.
"""

import dataclasses
import hashlib
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from backends.models import FileMatch
from backends.search import AbstractSearchClient
from core.declarations import DeclarationClassifier
from core.limiters import MatchLimiter, ResultCapLimiter
from core.models import DisplayedFile, FileSite, RefCounts, SiteGroup, XrefResponse
from core.query import Casing, XrefMode, xref_query
from core.snippets import file_snippets
from core.tickets import Ticket

logger = logging.getLogger(__name__)

# Reference point used when the request names no ticket. No file has it.
NO_TICKET = Ticket(repository="<none>", path="<none>")


@dataclass
class GroupedSites:
    """Site groups of one result set, with their statistics."""

    groups: List[SiteGroup] = field(default_factory=list)
    counts: RefCounts = field(default_factory=RefCounts)


def snippets_hash(file_match: FileMatch) -> bytes:
    """Digest of all matched lines of a file, used for grouping only."""
    digest = hashlib.sha1()
    for line_match in file_match.line_matches:
        digest.update(line_match.line)
    return digest.digest()


def displayed_file(file_match: FileMatch) -> DisplayedFile:
    return DisplayedFile(
        ticket=Ticket(file_match.repository, file_match.filename).format(),
        display_name=file_match.filename,
    )


def file_site(file_match: FileMatch) -> FileSite:
    return FileSite(
        containing_file=displayed_file(file_match),
        snippets=file_snippets(file_match),
        file_checksum=file_match.checksum,
        snippets_hash=snippets_hash(file_match),
    )


def relevance_sort(sites: Iterable[FileSite], ticket: Ticket) -> List[FileSite]:
    """Stable sort putting sites in the ticket's repository first.

    Within that repository, sites at the ticket's path come first. Any other
    relative order is kept.
    """
    repository, _ = ticket.branch_scope()

    def key(site: FileSite) -> tuple:
        site_ticket = Ticket.parse(site.containing_file.ticket)
        same_repo = site_ticket.repository == repository
        same_path = same_repo and site_ticket.path == ticket.path
        return (not same_repo, not same_path)

    return sorted(sites, key=key)


def mark_duplicate_files(sites: Iterable[FileSite], counts: RefCounts) -> List[FileSite]:
    """Mark every site whose file checksum was seen before as a duplicate.

    Sites without a checksum are never considered duplicates, and neither
    are further sites of the same file, such as one-line declaration copies.
    """
    canonical: Dict[bytes, DisplayedFile] = {}
    marked = []
    for site in sites:
        counts.files += 1
        counts.lines += len(site.snippets)
        original = canonical.get(site.file_checksum) if site.file_checksum else None
        if original is not None and original != site.containing_file:
            counts.dup_files += 1
            site = site.model_copy(update={"is_dup_of": original})
        elif site.file_checksum and original is None:
            canonical[site.file_checksum] = site.containing_file
        marked.append(site)
    return marked


def group_by_matches(sites: Iterable[FileSite], counts: RefCounts) -> List[SiteGroup]:
    """Cluster sites with identical matched lines, in first-seen order."""
    groups: Dict[bytes, SiteGroup] = {}
    for site in sites:
        group = groups.get(site.snippets_hash)
        if group is None:
            groups[site.snippets_hash] = SiteGroup(file_sites=[site])
        else:
            counts.dup_matches += 1
            group.file_sites.append(site)
    return list(groups.values())


def group_file_sites(sites: Iterable[FileSite], ticket: Ticket) -> GroupedSites:
    """Deduplicate, order by relevance to ``ticket`` and group file sites.

    Args:
        sites: Per-file sites in backend order
        ticket: Reference point of the relevance ordering

    Returns:
        Site groups and the counters of both dedup axes
    """
    counts = RefCounts()
    marked = mark_duplicate_files(sites, counts)
    groups = group_by_matches(relevance_sort(marked, ticket), counts)
    return GroupedSites(groups=groups, counts=counts)


def declaration_matches(
    files: Iterable[FileMatch], classifier: DeclarationClassifier
) -> List[FileMatch]:
    """Copies of the files, one per matched line that looks like a declaration."""
    matches = []
    for f in files:
        for line_match in f.line_matches:
            text = line_match.line.decode("utf-8", errors="replace")
            if classifier.is_declaration(text):
                matches.append(dataclasses.replace(f, line_matches=[line_match]))
    return matches


def assemble_xref(
    files: List[FileMatch], ticket: Ticket, classifier: DeclarationClassifier
) -> XrefResponse:
    """Build the cross-reference response from the backend files."""
    refs = group_file_sites([file_site(f) for f in files], ticket)
    declarations = group_file_sites(
        [file_site(f) for f in declaration_matches(files, classifier)], ticket
    )
    logger.info(
        f"xref: {refs.counts.files} files in {len(refs.groups)} groups, "
        f"{declarations.counts.lines} declaration lines"
    )
    return XrefResponse(
        refs=refs.groups,
        ref_counts=refs.counts,
        declarations=declarations.groups,
    )


def search_xref(
    search_client: AbstractSearchClient,
    selection: str,
    ticket: Optional[Ticket] = None,
    mode: XrefMode = XrefMode.LAX,
    casing: Casing = Casing.AUTO,
    max_files: int = 50,
    max_wall_time: float = 10.0,
    classifier: Optional[DeclarationClassifier] = None,
) -> XrefResponse:
    """Search references of ``selection`` and assemble them.

    Args:
        search_client: Client used to query the backend
        selection: Selected text
        ticket: Ticket the selection was made in, used for ordering
        mode: How the selection is turned into a query
        casing: Case sensitivity of the search
        max_files: Maximum number of files searched and returned
        max_wall_time: Wall-time budget of each backend call, in seconds
        classifier: Declaration heuristic, the default one when omitted

    Returns:
        Cross-reference response
    """
    query = xref_query(selection, mode, casing)
    limiter = MatchLimiter(num_results=max_files, max_wall_time=max_wall_time)
    result = search_client.search_with_estimate(query, limiter)
    files = ResultCapLimiter(max_files).apply(result.files)
    return assemble_xref(files, ticket or NO_TICKET, classifier or DeclarationClassifier.default())
