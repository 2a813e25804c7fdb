"""Models of the JSON structures served to the source browser."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class WireModel(BaseModel):
    """Base for models serialized with their camelCase aliases."""

    model_config = ConfigDict(populate_by_name=True)


class ChildState(str, Enum):
    """Expansion state of a file tree node."""

    UNKNOWN = "unknown"
    EMPTY = "empty"
    NONEMPTY = "nonempty"


class FileTreeNode(WireModel):
    """One node of the file tree."""

    id: str = Field(..., description="ticket of the node, unique in the tree")
    display: str = Field(..., description="repository name or path component")
    only_generated: bool = Field(False, alias="onlyGenerated")
    is_file: bool = Field(False, alias="isFile")
    # None means not fetched yet, the client asks again to expand the node.
    children: Optional[List["FileTreeNode"]] = None

    @property
    def child_state(self) -> ChildState:
        if self.children is None:
            return ChildState.UNKNOWN
        if not self.children:
            return ChildState.EMPTY
        return ChildState.NONEMPTY


class Point(WireModel):
    line: int = Field(..., description="0-based line number")
    # Byte offset, not a character offset, for non-ASCII lines.
    column: int = Field(..., description="column of the point")


class Range(WireModel):
    from_: Point = Field(..., alias="from")
    to: Point


class Snippet(WireModel):
    """A matched line with its highlight spans."""

    text: str
    full_span: Range = Field(..., alias="fullSpan")
    occurrence_span: Range = Field(..., alias="occurrenceSpan")


class DisplayedFile(WireModel):
    ticket: str
    display_name: str = Field(..., alias="displayName")


class FileSite(WireModel):
    """The matches found in one file."""

    containing_file: DisplayedFile = Field(..., alias="sContainingFile")
    is_dup_of: Optional[DisplayedFile] = Field(None, alias="sDupOfFile")
    snippets: List[Snippet] = Field(default_factory=list, alias="sSnippets")
    file_checksum: bytes = Field(b"", exclude=True)
    snippets_hash: bytes = Field(b"", exclude=True)


class SiteGroup(WireModel):
    """File sites whose matched lines are identical."""

    file_sites: List[FileSite] = Field(default_factory=list, alias="sFileSites")


class RefCounts(WireModel):
    lines: int = Field(0, alias="rcLines")
    files: int = Field(0, alias="rcFiles")
    dup_files: int = Field(0, alias="rcDupFiles")
    dup_matches: int = Field(0, alias="rcDupMatches")


class XrefResponse(WireModel):
    """Cross-reference search result."""

    refs: List[SiteGroup] = Field(default_factory=list)
    ref_counts: RefCounts = Field(default_factory=RefCounts, alias="refCounts")
    # Call and definition lookups need semantic indexing and stay empty.
    calls: List[SiteGroup] = Field(default_factory=list)
    call_count: int = Field(0, alias="callCount")
    definitions: List[SiteGroup] = Field(default_factory=list)
    declarations: List[SiteGroup] = Field(default_factory=list)


class DecorResponse(WireModel):
    decors: List[str] = Field(default_factory=list)


class SearchFileResult(WireModel):
    """A file matched by a generic search."""

    repository: str
    file_name: str = Field(..., alias="fileName")
    snippets: List[Snippet] = Field(default_factory=list)
