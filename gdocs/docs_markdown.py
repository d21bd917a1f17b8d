"""
Google Docs Markdown and Plain-Text Projection

Read-side rendering of a flattened tab. Markdown output is best-effort and one
way: headings, bullets, character styles, links and tables are mapped to their
closest Markdown form, and underline (which Markdown lacks) to inline HTML.
"""
import logging
import re
from dataclasses import dataclass
from typing import Optional

from gdocs.docs_model import (
    ContentElement,
    FlatTextSequence,
    Paragraph,
    SectionBreak,
    SegmentKind,
    Table,
    TableOfContents,
    TextRun,
)

logger = logging.getLogger(__name__)

HEADING_LEVELS = {
    "TITLE": 1,
    "SUBTITLE": 2,
    "HEADING_1": 1,
    "HEADING_2": 2,
    "HEADING_3": 3,
    "HEADING_4": 4,
    "HEADING_5": 5,
    "HEADING_6": 6,
}


@dataclass
class ProjectionResult:
    content: str
    total_length: int
    truncated: bool = False

    @property
    def returned_length(self) -> int:
        return len(self.content)


def to_plain_text(flat: FlatTextSequence) -> str:
    """All run text in document order, table cells included, without styling."""
    return "".join(s.text for s in flat.segments if s.kind == SegmentKind.TEXT)


def _split_whitespace(text: str) -> tuple[str, str, str]:
    core = text.strip()
    if not core:
        return text, "", ""
    lead = text[:len(text) - len(text.lstrip())]
    trail = text[len(text.rstrip()):]
    return lead, core, trail


def _format_run(run: TextRun) -> str:
    lead, core, trail = _split_whitespace(run.content)
    if not core:
        return run.content

    style = run.style
    if style.bold and style.italic:
        core = f"***{core}***"
    elif style.bold:
        core = f"**{core}**"
    elif style.italic:
        core = f"*{core}*"

    if style.underline and not style.link_url:
        core = f"<u>{core}</u>"
    if style.strikethrough:
        core = f"~~{core}~~"
    if style.link_url:
        core = f"[{core}]({style.link_url})"

    return f"{lead}{core}{trail}"


def _paragraph_to_markdown(paragraph: Paragraph) -> str:
    text = "".join(_format_run(run) for run in paragraph.runs).strip()

    level = HEADING_LEVELS.get(paragraph.named_style_type)
    if level and text:
        return f"{'#' * level} {text}\n\n"
    if paragraph.is_bullet:
        indent = "  " * paragraph.nesting_level
        return f"{indent}- {text}\n"
    if text:
        return f"{text}\n\n"
    return "\n"


def _cell_text(content: list[ContentElement]) -> str:
    parts = []
    for element in content:
        if isinstance(element, Paragraph):
            parts.append(element.text.replace("\n", " ").strip())
        elif isinstance(element, Table):
            parts.append(" ".join(_cell_text(cell.content) for row in element.rows for cell in row.cells))
    return " ".join(p for p in parts if p)


def _table_to_markdown(table: Table) -> str:
    lines = []
    for row_number, row in enumerate(table.rows):
        cells = [_cell_text(cell.content) for cell in row.cells]
        lines.append("| " + " | ".join(cells) + " |")
        if row_number == 0:
            lines.append("| " + " | ".join("---" for _ in cells) + " |")
    return "\n" + "\n".join(lines) + "\n\n"


def _elements_to_markdown(elements: list[ContentElement]) -> str:
    output = []
    previous_bullet = False
    for element in elements:
        if isinstance(element, Paragraph):
            if previous_bullet and not element.is_bullet:
                output.append("\n")
            output.append(_paragraph_to_markdown(element))
            previous_bullet = element.is_bullet
            continue

        if previous_bullet:
            output.append("\n")
        previous_bullet = False

        if isinstance(element, Table):
            output.append(_table_to_markdown(element))
        elif isinstance(element, SectionBreak):
            # Every body opens with a section break at index 0
            if element.start_index > 0:
                output.append("\n---\n\n")
        elif isinstance(element, TableOfContents):
            output.append(_elements_to_markdown(element.content))
        else:
            raise TypeError(f"Unhandled content element: {type(element).__name__}")
    return "".join(output)


def to_markdown(flat: FlatTextSequence) -> str:
    markdown = _elements_to_markdown(flat.elements)
    markdown = re.sub(r"\n{3,}", "\n\n", markdown)
    return markdown.strip()


def project(flat: FlatTextSequence, fmt: str = "text", max_length: Optional[int] = None) -> ProjectionResult:
    """
    Render a flattened tab as plain text or Markdown.

    Args:
        flat: Flattened tab body
        fmt: "text" or "markdown"
        max_length: Optional cap on the returned content, in characters

    Returns:
        ProjectionResult carrying the (possibly truncated) content and the full length
    """
    if fmt == "text":
        content = to_plain_text(flat)
    elif fmt == "markdown":
        content = to_markdown(flat)
    else:
        raise ValueError(f"Unsupported projection format: {fmt}")

    total_length = len(content)
    if max_length is not None and max_length >= 0 and total_length > max_length:
        logger.info(f"Truncating {fmt} projection from {total_length} to {max_length} characters")
        return ProjectionResult(content[:max_length], total_length, truncated=True)
    return ProjectionResult(content, total_length)
