"""Mapping of backend line matches to snippets with line/column spans.

Columns are byte offsets into the line. They are not converted to character
offsets, so highlights drift on lines with non-ASCII text.
"""

from typing import List

from backends.models import FileMatch, LineMatch
from core.models import Point, Range, Snippet

MAX_LINE_CHARS = 250
CLIP_KEEP_CHARS = 30
CLIP_MARKER = " [...] "


def clip_line(text: str) -> str:
    """Shorten an overlong line to its head and tail.

    Offsets pointing into the line are not adjusted.
    """
    if len(text) <= MAX_LINE_CHARS:
        return text
    return text[:CLIP_KEEP_CHARS] + CLIP_MARKER + text[-CLIP_KEEP_CHARS:]


def _span(line: int, start: int, end: int) -> Range:
    return Range(from_=Point(line=line, column=start), to=Point(line=line, column=end))


def line_match_snippet(match: LineMatch) -> Snippet:
    """Build the snippet of one matched line.

    Only the first fragment is highlighted, even when several fragments of
    the line matched.
    """
    line = match.line_number - 1
    text = match.line.decode("utf-8", errors="replace").rstrip("\r\n")
    full_span = _span(line, 0, match.line_end - match.line_start)
    if match.fragments:
        first = match.fragments[0]
        occurrence_span = _span(line, first.line_offset, first.line_offset + first.match_length)
    else:
        occurrence_span = _span(line, 0, 0)
    return Snippet(text=clip_line(text), full_span=full_span, occurrence_span=occurrence_span)


def file_snippets(file_match: FileMatch) -> List[Snippet]:
    return [line_match_snippet(lm) for lm in file_match.line_matches]
