"""
Google Docs Text Range Locator

Resolves targets to absolute [start_index, end_index) ranges over a flattened
tab: the Nth literal occurrence of a string, or the paragraph that contains a
given offset.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from gdocs.docs_model import FlatTextSequence, SegmentKind, utf16_len, utf16_to_char_offset
from gdocs.errors import DocsErrorBuilder, NotImplementedFeature

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TextRange:
    start_index: int
    end_index: int
    tab_id: Optional[str] = None

    @property
    def length(self) -> int:
        return self.end_index - self.start_index

    def to_api_range(self) -> dict:
        api_range = {"startIndex": self.start_index, "endIndex": self.end_index}
        if self.tab_id:
            api_range["tabId"] = self.tab_id
        return api_range


def _searchable_blocks(flat: FlatTextSequence) -> list[tuple[str, list[int]]]:
    """
    Split the text into blocks that a match may not cross.

    Runs within a paragraph, and consecutive paragraphs, are concatenated. Table,
    row and cell markers and section breaks close the current block. Inline
    objects are skipped without closing it.

    The index map holds the document index of every character; a character
    outside the BMP advances the index by two.
    """
    blocks: list[tuple[str, list[int]]] = []
    parts: list[str] = []
    index_map: list[int] = []

    for segment in flat.segments:
        if segment.kind == SegmentKind.TEXT:
            parts.append(segment.text)
            index = segment.start_index
            for char in segment.text:
                index_map.append(index)
                index += utf16_len(char)
        elif segment.kind in (SegmentKind.STRUCTURAL, SegmentKind.SECTION_BREAK):
            if parts:
                blocks.append(("".join(parts), index_map))
            parts, index_map = [], []

    if parts:
        blocks.append(("".join(parts), index_map))
    return blocks


def find_all_text_ranges(
    flat: FlatTextSequence,
    query: str,
    tab_id: Optional[str] = None
) -> list[TextRange]:
    """
    Find every non-overlapping, case-sensitive literal match of query.

    Matches are ordered by ascending start index. After a match the scan resumes
    at its end, so "aa" occurs twice in "aaaa", not three times.
    """
    if not query:
        return []

    ranges = []
    for text, index_map in _searchable_blocks(flat):
        pos = text.find(query)
        while pos != -1:
            last = pos + len(query) - 1
            end = index_map[last] + utf16_len(text[last])
            ranges.append(TextRange(index_map[pos], end, tab_id))
            pos = text.find(query, pos + len(query))
    return ranges


def find_text_range(
    flat: FlatTextSequence,
    query: str,
    instance: int = 1,
    tab_id: Optional[str] = None
) -> Optional[TextRange]:
    """
    Find the range of the instance-th (1-based) occurrence of query.

    Args:
        flat: Flattened tab body
        query: Literal text to find (case-sensitive)
        instance: Which occurrence to return, starting at 1
        tab_id: Tab id to attach to the resulting range

    Returns:
        The TextRange, or None if there are fewer than instance matches
    """
    if instance < 1:
        return None

    matches = find_all_text_ranges(flat, query, tab_id)
    if instance > len(matches):
        logger.debug(f"Found {len(matches)} matches for {query!r}, instance {instance} requested")
        return None
    return matches[instance - 1]


def get_paragraph_range(
    flat: FlatTextSequence,
    offset: int,
    tab_id: Optional[str] = None
) -> Optional[TextRange]:
    """
    Return the range of the top-level paragraph containing offset.

    Paragraphs inside table cells are not considered, so an offset within a
    table yields None.
    """
    for span in flat.paragraphs:
        if span.depth == 0 and span.start_index <= offset < span.end_index:
            return TextRange(span.start_index, span.end_index, tab_id)
    return None


def get_table_cell_range(
    flat: FlatTextSequence,
    table_start_index: int,
    row_index: int,
    column_index: int
) -> TextRange:
    """Content range of a single table cell. Not supported."""
    raise NotImplementedFeature(DocsErrorBuilder.not_implemented(
        "Editing table cells",
        "Resolving the content range of an individual table cell is not supported."
    ))


def extract_text_in_range(flat: FlatTextSequence, start_index: int, end_index: int) -> str:
    """
    Literal text of all runs overlapping [start_index, end_index), clipped to the range.

    Offsets are document indices (UTF-16 code units), not Python string offsets.
    """
    parts = []
    for segment in flat.segments:
        if segment.kind != SegmentKind.TEXT:
            continue
        if segment.end_index <= start_index or segment.start_index >= end_index:
            continue
        lo = utf16_to_char_offset(segment.text, max(0, start_index - segment.start_index))
        hi = utf16_to_char_offset(segment.text, end_index - segment.start_index)
        parts.append(segment.text[lo:hi])
    return "".join(parts)
