"""
Google Docs Helper Functions

This module converts declarative style and content intents into Docs API
batchUpdate requests. Style builders emit a single request whose 'fields' mask
names exactly the attributes that were provided, so that unset attributes are
left untouched by the service.
"""
import logging
import re
from dataclasses import dataclass, fields as dataclass_fields
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlparse

from gdocs.docs_locator import TextRange
from gdocs.docs_model import FlatTextSequence
from gdocs.errors import DocsErrorBuilder, InvalidStyleValue

logger = logging.getLogger(__name__)

HEX_COLOR_PATTERN = re.compile(r"^#?([0-9A-Fa-f]{3}|[0-9A-Fa-f]{6})$")

VALID_ALIGNMENTS = ("START", "CENTER", "END", "JUSTIFIED")
VALID_NAMED_STYLES = (
    "NORMAL_TEXT", "TITLE", "SUBTITLE",
    "HEADING_1", "HEADING_2", "HEADING_3", "HEADING_4", "HEADING_5", "HEADING_6",
)

BULLET_PRESETS = {
    "UNORDERED": "BULLET_DISC_CIRCLE_SQUARE",
    "ORDERED": "NUMBERED_DECIMAL_ALPHA_ROMAN",
}


@dataclass
class TextStyleArgs:
    """Sparse character style intent. None means "leave unchanged"."""
    bold: Optional[bool] = None
    italic: Optional[bool] = None
    underline: Optional[bool] = None
    strikethrough: Optional[bool] = None
    font_size: Optional[float] = None
    font_family: Optional[str] = None
    foreground_color: Optional[str] = None
    background_color: Optional[str] = None
    link_url: Optional[str] = None

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in dataclass_fields(self))


@dataclass
class ParagraphStyleArgs:
    """Sparse paragraph style intent. Dimensions are in points, line_spacing in percent."""
    alignment: Optional[str] = None
    named_style_type: Optional[str] = None
    indent_start: Optional[float] = None
    indent_end: Optional[float] = None
    indent_first_line: Optional[float] = None
    space_above: Optional[float] = None
    space_below: Optional[float] = None
    line_spacing: Optional[float] = None
    keep_with_next: Optional[bool] = None

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in dataclass_fields(self))


@dataclass
class StyleRequest:
    """A single style request and the fields it updates."""
    request: Dict[str, Any]
    fields: List[str]


def is_valid_hex_color(color: str) -> bool:
    return isinstance(color, str) and HEX_COLOR_PATTERN.match(color) is not None


def is_valid_http_url(url: str) -> bool:
    if not isinstance(url, str):
        return False
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def _parse_color(color_str: str, param_name: str = "color") -> Dict[str, Any]:
    """
    Parse a hex color (#RGB, #RRGGBB, with or without '#') to the Docs API color format.

    Raises:
        InvalidStyleValue: If the value is not a 3- or 6-digit hex color
    """
    if not is_valid_hex_color(color_str):
        raise InvalidStyleValue(DocsErrorBuilder.invalid_color_format(color_str, param_name))

    hex_color = color_str.lstrip('#')
    if len(hex_color) == 3:
        hex_color = ''.join(c * 2 for c in hex_color)
    r = int(hex_color[0:2], 16) / 255.0
    g = int(hex_color[2:4], 16) / 255.0
    b = int(hex_color[4:6], 16) / 255.0
    return {'color': {'rgbColor': {'red': r, 'green': g, 'blue': b}}}


def _points(value: float) -> Dict[str, Any]:
    return {'magnitude': value, 'unit': 'PT'}


def _location(index: int, tab_id: Optional[str] = None) -> Dict[str, Any]:
    location = {'index': index}
    if tab_id:
        location['tabId'] = tab_id
    return location


def _range(start_index: int, end_index: int, tab_id: Optional[str] = None) -> Dict[str, Any]:
    return TextRange(start_index, end_index, tab_id).to_api_range()


def build_text_style(style: TextStyleArgs) -> Tuple[Dict[str, Any], List[str]]:
    """
    Build the textStyle object and fields mask for an updateTextStyle request.

    Raises:
        InvalidStyleValue: For malformed colors, links or font sizes
    """
    text_style = {}
    fields = []

    if style.bold is not None:
        text_style['bold'] = style.bold
        fields.append('bold')

    if style.italic is not None:
        text_style['italic'] = style.italic
        fields.append('italic')

    if style.underline is not None:
        text_style['underline'] = style.underline
        fields.append('underline')

    if style.strikethrough is not None:
        text_style['strikethrough'] = style.strikethrough
        fields.append('strikethrough')

    if style.font_size is not None:
        if style.font_size <= 0:
            raise InvalidStyleValue(
                DocsErrorBuilder.invalid_style_value("font_size", style.font_size, "a positive number of points")
            )
        text_style['fontSize'] = _points(style.font_size)
        fields.append('fontSize')

    if style.font_family is not None:
        text_style['weightedFontFamily'] = {'fontFamily': style.font_family}
        fields.append('weightedFontFamily')

    if style.foreground_color is not None:
        text_style['foregroundColor'] = _parse_color(style.foreground_color, 'foreground_color')
        fields.append('foregroundColor')

    if style.background_color is not None:
        text_style['backgroundColor'] = _parse_color(style.background_color, 'background_color')
        fields.append('backgroundColor')

    if style.link_url is not None:
        if not is_valid_http_url(style.link_url):
            raise InvalidStyleValue(DocsErrorBuilder.invalid_url(style.link_url, 'link_url'))
        text_style['link'] = {'url': style.link_url}
        fields.append('link')

    return text_style, fields


def build_text_style_request(text_range: TextRange, style: TextStyleArgs) -> Optional[StyleRequest]:
    """
    Create an updateTextStyle request for a resolved range.

    Returns:
        The StyleRequest, or None if the style intent sets no attribute
    """
    text_style, fields = build_text_style(style)
    if not fields:
        return None

    return StyleRequest(
        request={
            'updateTextStyle': {
                'range': text_range.to_api_range(),
                'textStyle': text_style,
                'fields': ','.join(fields),
            }
        },
        fields=fields,
    )


def build_paragraph_style(style: ParagraphStyleArgs) -> Tuple[Dict[str, Any], List[str]]:
    """
    Build the paragraphStyle object and fields mask for an updateParagraphStyle request.

    Raises:
        InvalidStyleValue: For unknown alignments or named styles, or negative spacing
    """
    paragraph_style = {}
    fields = []

    if style.alignment is not None:
        alignment = style.alignment.upper()
        if alignment not in VALID_ALIGNMENTS:
            raise InvalidStyleValue(
                DocsErrorBuilder.invalid_style_value("alignment", style.alignment, list(VALID_ALIGNMENTS))
            )
        paragraph_style['alignment'] = alignment
        fields.append('alignment')

    if style.named_style_type is not None:
        named_style = style.named_style_type.upper()
        if named_style not in VALID_NAMED_STYLES:
            raise InvalidStyleValue(
                DocsErrorBuilder.invalid_style_value(
                    "named_style_type", style.named_style_type, list(VALID_NAMED_STYLES)
                )
            )
        paragraph_style['namedStyleType'] = named_style
        fields.append('namedStyleType')

    dimensions = [
        ('indent_start', 'indentStart'),
        ('indent_end', 'indentEnd'),
        ('indent_first_line', 'indentFirstLine'),
        ('space_above', 'spaceAbove'),
        ('space_below', 'spaceBelow'),
    ]
    for attr, api_name in dimensions:
        value = getattr(style, attr)
        if value is None:
            continue
        if value < 0:
            raise InvalidStyleValue(
                DocsErrorBuilder.invalid_style_value(attr, value, "a non-negative number of points")
            )
        paragraph_style[api_name] = _points(value)
        fields.append(api_name)

    if style.line_spacing is not None:
        if style.line_spacing <= 0:
            raise InvalidStyleValue(
                DocsErrorBuilder.invalid_style_value("line_spacing", style.line_spacing, "a positive percentage")
            )
        paragraph_style['lineSpacing'] = style.line_spacing
        fields.append('lineSpacing')

    if style.keep_with_next is not None:
        paragraph_style['keepWithNext'] = style.keep_with_next
        fields.append('keepWithNext')

    return paragraph_style, fields


def build_paragraph_style_request(
    text_range: TextRange,
    style: ParagraphStyleArgs
) -> Optional[StyleRequest]:
    """
    Create an updateParagraphStyle request for a resolved range.

    Returns:
        The StyleRequest, or None if the style intent sets no attribute
    """
    paragraph_style, fields = build_paragraph_style(style)
    if not fields:
        return None

    return StyleRequest(
        request={
            'updateParagraphStyle': {
                'range': text_range.to_api_range(),
                'paragraphStyle': paragraph_style,
                'fields': ','.join(fields),
            }
        },
        fields=fields,
    )


def create_insert_text_request(index: int, text: str, tab_id: Optional[str] = None) -> Dict[str, Any]:
    """
    Create an insertText request for Google Docs API.

    Args:
        index: Position to insert text
        text: Text to insert
        tab_id: Optional tab to insert into

    Returns:
        Dictionary representing the insertText request
    """
    return {
        'insertText': {
            'location': _location(index, tab_id),
            'text': text
        }
    }


def create_delete_range_request(
    start_index: int,
    end_index: int,
    tab_id: Optional[str] = None
) -> Dict[str, Any]:
    """Create a deleteContentRange request for Google Docs API."""
    return {
        'deleteContentRange': {
            'range': _range(start_index, end_index, tab_id)
        }
    }


def create_insert_table_request(
    index: int,
    rows: int,
    columns: int,
    tab_id: Optional[str] = None
) -> Dict[str, Any]:
    """Create an insertTable request for Google Docs API."""
    return {
        'insertTable': {
            'location': _location(index, tab_id),
            'rows': rows,
            'columns': columns
        }
    }


def create_insert_page_break_request(index: int, tab_id: Optional[str] = None) -> Dict[str, Any]:
    """Create an insertPageBreak request for Google Docs API."""
    return {
        'insertPageBreak': {
            'location': _location(index, tab_id)
        }
    }


def create_insert_image_request(
    index: int,
    image_uri: str,
    width: Optional[float] = None,
    height: Optional[float] = None,
    tab_id: Optional[str] = None
) -> Dict[str, Any]:
    """
    Create an insertInlineImage request for Google Docs API.

    Args:
        index: Position to insert image
        image_uri: Publicly readable URI of the image
        width: Image width in points
        height: Image height in points
        tab_id: Optional tab to insert into

    Returns:
        Dictionary representing the insertInlineImage request
    """
    request = {
        'insertInlineImage': {
            'location': _location(index, tab_id),
            'uri': image_uri
        }
    }

    object_size = {}
    if width is not None:
        object_size['width'] = _points(width)
    if height is not None:
        object_size['height'] = _points(height)

    if object_size:
        request['insertInlineImage']['objectSize'] = object_size

    return request


def create_bullet_list_request(
    start_index: int,
    end_index: int,
    list_type: str = "UNORDERED",
    tab_id: Optional[str] = None
) -> Dict[str, Any]:
    """
    Create a createParagraphBullets request for Google Docs API.

    Args:
        start_index: Start of text range to convert to list
        end_index: End of text range to convert to list
        list_type: Type of list ("UNORDERED" or "ORDERED")
        tab_id: Optional tab the range belongs to

    Returns:
        Dictionary representing the createParagraphBullets request
    """
    return {
        'createParagraphBullets': {
            'range': _range(start_index, end_index, tab_id),
            'bulletPreset': BULLET_PRESETS[list_type]
        }
    }


# A marker only counts when it starts the paragraph and is followed by a space
# and some content: "- item", "* item", "1. item", "2) item".
UNORDERED_MARKER = re.compile(r"^[-*] +(?=\S)")
ORDERED_MARKER = re.compile(r"^\d+[.)] +(?=\S)")

# A lone marked paragraph is more often prose ("2024. was a good year") than a list
MIN_LIST_ITEMS = 2


@dataclass
class _ListCandidate:
    start_index: int
    end_index: int
    list_type: str
    marker_length: int


def _classify_list_paragraph(text: str) -> Optional[Tuple[str, int]]:
    for list_type, pattern in (("UNORDERED", UNORDERED_MARKER), ("ORDERED", ORDERED_MARKER)):
        match = pattern.match(text)
        if match:
            return list_type, match.end()
    return None


def detect_and_format_lists(
    flat: FlatTextSequence,
    start_index: Optional[int] = None,
    end_index: Optional[int] = None,
    tab_id: Optional[str] = None
) -> List[Dict[str, Any]]:
    """
    Find paragraphs written as plain-text lists and build requests turning them into real lists.

    Only top-level NORMAL_TEXT paragraphs without an existing bullet, lying entirely
    inside [start_index, end_index), are considered; anything else is left alone.
    Consecutive paragraphs of the same list type become one list, and a group of
    fewer than MIN_LIST_ITEMS paragraphs is left as plain text. For each list a
    createParagraphBullets request is followed by deletions of the typed markers.
    Lists are emitted from the end of the document backwards so every request's
    offsets are still valid when the service applies it.

    Returns:
        The batchUpdate requests, possibly empty
    """
    lower = start_index if start_index is not None else flat.start_index
    upper = end_index if end_index is not None else flat.end_index

    candidates: List[Optional[_ListCandidate]] = []
    for span in flat.paragraphs:
        if span.depth != 0:
            continue
        if span.start_index < lower or span.end_index > upper:
            continue
        paragraph = span.paragraph
        classified = None
        if paragraph.named_style_type == "NORMAL_TEXT" and not paragraph.is_bullet:
            first_run = paragraph.runs[0] if paragraph.runs else None
            if first_run is not None and first_run.kind == "text":
                classified = _classify_list_paragraph(first_run.content)
        if classified is None:
            # A non-list paragraph breaks any run of list items
            candidates.append(None)
            continue
        list_type, marker_length = classified
        candidates.append(_ListCandidate(span.start_index, span.end_index, list_type, marker_length))

    groups: List[List[_ListCandidate]] = []
    current: List[_ListCandidate] = []
    for candidate in candidates:
        if candidate is not None and current and current[-1].list_type == candidate.list_type \
                and current[-1].end_index == candidate.start_index:
            current.append(candidate)
            continue
        if current:
            groups.append(current)
        current = [candidate] if candidate is not None else []
    if current:
        groups.append(current)
    groups = [group for group in groups if len(group) >= MIN_LIST_ITEMS]

    requests = []
    for group in reversed(groups):
        requests.append(create_bullet_list_request(
            group[0].start_index, group[-1].end_index, group[0].list_type, tab_id
        ))
        for item in reversed(group):
            requests.append(create_delete_range_request(
                item.start_index, item.start_index + item.marker_length, tab_id
            ))

    logger.info(
        f"List detection found {sum(len(g) for g in groups)} paragraphs in {len(groups)} lists"
    )
    return requests
