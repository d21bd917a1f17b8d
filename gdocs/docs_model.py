"""
Google Docs Document Model

This module turns the nested JSON returned by the Docs API into a small set of
typed content elements, and flattens a body into a linear sequence of segments
carrying absolute offsets. The flattened sequence is what both the range
locator and the markdown projection read from.

Offsets follow the Docs API convention: half-open [start_index, end_index)
ranges within a single tab. Structural characters that carry no text (the
markers opening a table, a row or a cell, the closing table marker and
section breaks) are emitted as zero-text marker segments so that the spans
of all segments add up to the body length.
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)


@dataclass
class TextStyle:
    """Character style of a text run. Unset attributes are None."""
    bold: Optional[bool] = None
    italic: Optional[bool] = None
    underline: Optional[bool] = None
    strikethrough: Optional[bool] = None
    font_family: Optional[str] = None
    font_size: Optional[float] = None
    foreground_color: Optional[dict[str, Any]] = None
    background_color: Optional[dict[str, Any]] = None
    link_url: Optional[str] = None


@dataclass
class TextRun:
    """
    One paragraph element.

    Literal text runs have kind "text". Other paragraph elements such as inline
    images, page breaks or footnote references occupy index space but have no
    content; their kind is the Docs API element name.
    """
    content: str
    start_index: int
    end_index: int
    style: TextStyle = field(default_factory=TextStyle)
    kind: str = "text"


@dataclass
class Paragraph:
    start_index: int
    end_index: int
    runs: list[TextRun] = field(default_factory=list)
    named_style_type: str = "NORMAL_TEXT"
    alignment: Optional[str] = None
    bullet_list_id: Optional[str] = None
    nesting_level: int = 0

    @property
    def text(self) -> str:
        return "".join(run.content for run in self.runs)

    @property
    def is_bullet(self) -> bool:
        return self.bullet_list_id is not None


@dataclass
class TableCell:
    start_index: int
    end_index: int
    content: list["ContentElement"] = field(default_factory=list)


@dataclass
class TableRow:
    start_index: int
    end_index: int
    cells: list[TableCell] = field(default_factory=list)


@dataclass
class Table:
    start_index: int
    end_index: int
    rows: list[TableRow] = field(default_factory=list)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def column_count(self) -> int:
        return max((len(row.cells) for row in self.rows), default=0)


@dataclass
class SectionBreak:
    start_index: int
    end_index: int


@dataclass
class TableOfContents:
    """A generated table of contents. Its entries are ordinary paragraphs."""
    start_index: int
    end_index: int
    content: list["ContentElement"] = field(default_factory=list)


ContentElement = Union[Paragraph, Table, SectionBreak, TableOfContents]


class SegmentKind(str, Enum):
    TEXT = "text"
    INLINE_OBJECT = "inline_object"
    STRUCTURAL = "structural"
    SECTION_BREAK = "section_break"


@dataclass
class FlatSegment:
    """A contiguous slice of the body with its absolute offsets."""
    text: str
    start_index: int
    end_index: int
    kind: SegmentKind
    depth: int = 0
    paragraph: Optional[Paragraph] = None

    @property
    def span(self) -> int:
        return self.end_index - self.start_index


@dataclass
class ParagraphSpan:
    """Range of a paragraph and how deeply it is nested inside tables."""
    start_index: int
    end_index: int
    depth: int
    paragraph: Paragraph


@dataclass
class FlatTextSequence:
    elements: list[ContentElement]
    segments: list[FlatSegment]
    paragraphs: list[ParagraphSpan]

    @property
    def start_index(self) -> int:
        return self.segments[0].start_index if self.segments else 0

    @property
    def end_index(self) -> int:
        return self.segments[-1].end_index if self.segments else 0

    @property
    def total_length(self) -> int:
        """Total declared length of the body: the end index of its last element."""
        return self.end_index

    @property
    def text(self) -> str:
        return "".join(segment.text for segment in self.segments)


def utf16_len(text: str) -> int:
    """
    Length of text in UTF-16 code units.

    Docs API indices count UTF-16 code units, so characters outside the BMP
    (most emoji) take two index positions.
    """
    return len(text.encode("utf-16-le")) // 2


def utf16_to_char_offset(text: str, units: int) -> int:
    """Python string offset of the character starting at the given UTF-16 offset."""
    counted = 0
    for i, char in enumerate(text):
        if counted >= units:
            return i
        counted += 2 if ord(char) >= 0x10000 else 1
    return len(text)


def _parse_text_style(style: dict[str, Any]) -> TextStyle:
    font_size = style.get("fontSize", {}).get("magnitude")
    link = style.get("link") or {}
    return TextStyle(
        bold=style.get("bold"),
        italic=style.get("italic"),
        underline=style.get("underline"),
        strikethrough=style.get("strikethrough"),
        font_family=style.get("weightedFontFamily", {}).get("fontFamily"),
        font_size=font_size,
        foreground_color=style.get("foregroundColor"),
        background_color=style.get("backgroundColor"),
        link_url=link.get("url"),
    )


def _parse_paragraph_element(element: dict[str, Any]) -> TextRun:
    start = element.get("startIndex", 0)
    end = element.get("endIndex", start)

    if "textRun" in element:
        text_run = element["textRun"]
        return TextRun(
            content=text_run.get("content", ""),
            start_index=start,
            end_index=end,
            style=_parse_text_style(text_run.get("textStyle", {})),
        )

    # Inline images, page breaks, footnote references, rich links, ...
    kind = next((key for key in element if key not in ("startIndex", "endIndex")), "unknown")
    return TextRun(content="", start_index=start, end_index=end, kind=kind)


def _parse_paragraph(element: dict[str, Any]) -> Paragraph:
    paragraph = element["paragraph"]
    style = paragraph.get("paragraphStyle", {})
    bullet = paragraph.get("bullet")
    return Paragraph(
        start_index=element.get("startIndex", 0),
        end_index=element.get("endIndex", 0),
        runs=[_parse_paragraph_element(pe) for pe in paragraph.get("elements", [])],
        named_style_type=style.get("namedStyleType", "NORMAL_TEXT"),
        alignment=style.get("alignment"),
        bullet_list_id=bullet.get("listId") if bullet else None,
        nesting_level=bullet.get("nestingLevel", 0) if bullet else 0,
    )


def _parse_table(element: dict[str, Any]) -> Table:
    rows = []
    for row in element["table"].get("tableRows", []):
        cells = [
            TableCell(
                start_index=cell.get("startIndex", 0),
                end_index=cell.get("endIndex", 0),
                content=parse_body(cell),
            )
            for cell in row.get("tableCells", [])
        ]
        rows.append(TableRow(
            start_index=row.get("startIndex", 0),
            end_index=row.get("endIndex", 0),
            cells=cells,
        ))
    return Table(
        start_index=element.get("startIndex", 0),
        end_index=element.get("endIndex", 0),
        rows=rows,
    )


def parse_content_element(element: dict[str, Any]) -> ContentElement:
    """
    Parse one structural element of a body.

    Raises:
        ValueError: If the element is of a kind this model does not know.
    """
    if "paragraph" in element:
        return _parse_paragraph(element)
    if "table" in element:
        return _parse_table(element)
    if "sectionBreak" in element:
        # The first section break of a body has no startIndex
        return SectionBreak(
            start_index=element.get("startIndex", 0),
            end_index=element.get("endIndex", 0),
        )
    if "tableOfContents" in element:
        return TableOfContents(
            start_index=element.get("startIndex", 0),
            end_index=element.get("endIndex", 0),
            content=parse_body(element["tableOfContents"]),
        )
    raise ValueError(f"Unsupported structural element with keys {sorted(element)}")


def parse_body(body: dict[str, Any]) -> list[ContentElement]:
    """Parse the 'content' list of a body, table cell or table of contents."""
    return [parse_content_element(element) for element in body.get("content", [])]


class _Flattener:
    def __init__(self):
        self.segments: list[FlatSegment] = []
        self.paragraphs: list[ParagraphSpan] = []

    def marker(self, start: int, end: int, depth: int, kind: SegmentKind = SegmentKind.STRUCTURAL):
        if end > start:
            self.segments.append(FlatSegment("", start, end, kind, depth))

    def walk(self, elements: list[ContentElement], depth: int):
        for element in elements:
            if isinstance(element, Paragraph):
                self.paragraph(element, depth)
            elif isinstance(element, Table):
                self.table(element, depth)
            elif isinstance(element, SectionBreak):
                self.marker(element.start_index, element.end_index, depth, SegmentKind.SECTION_BREAK)
            elif isinstance(element, TableOfContents):
                self.nested(element.start_index, element.end_index, element.content, depth)
            else:
                raise TypeError(f"Unhandled content element: {type(element).__name__}")

    def paragraph(self, paragraph: Paragraph, depth: int):
        self.paragraphs.append(
            ParagraphSpan(paragraph.start_index, paragraph.end_index, depth, paragraph)
        )
        for run in paragraph.runs:
            kind = SegmentKind.TEXT if run.kind == "text" else SegmentKind.INLINE_OBJECT
            self.segments.append(FlatSegment(
                run.content, run.start_index, run.end_index, kind, depth, paragraph
            ))

    def nested(self, start: int, end: int, content: list[ContentElement], depth: int):
        cursor = start
        if content:
            self.marker(cursor, content[0].start_index, depth)
            self.walk(content, depth)
            cursor = content[-1].end_index
        self.marker(cursor, end, depth)

    def table(self, table: Table, depth: int):
        cursor = table.start_index
        for row in table.rows:
            self.marker(cursor, row.start_index, depth)
            cursor = row.start_index
            for cell in row.cells:
                self.marker(cursor, cell.start_index, depth)
                self.nested(cell.start_index, cell.end_index, cell.content, depth + 1)
                cursor = cell.end_index
            self.marker(cursor, row.end_index, depth)
            cursor = row.end_index
        self.marker(cursor, table.end_index, depth)


def flatten(elements: list[ContentElement]) -> FlatTextSequence:
    """
    Flatten parsed content elements into a linear, offset-annotated sequence.

    Paragraph runs are emitted in document order; tables are walked row-major with
    each cell's content recursed into. Segment offsets are monotonically
    non-decreasing and, for a well-formed body, the spans add up to the body length.
    """
    flattener = _Flattener()
    flattener.walk(elements, depth=0)
    logger.debug(
        f"Flattened {len(elements)} elements into {len(flattener.segments)} segments"
    )
    return FlatTextSequence(
        elements=elements,
        segments=flattener.segments,
        paragraphs=flattener.paragraphs,
    )


def flatten_body(body: dict[str, Any]) -> FlatTextSequence:
    """Parse and flatten a raw body dict in one step."""
    return flatten(parse_body(body))
