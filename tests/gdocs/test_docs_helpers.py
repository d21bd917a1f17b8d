"""
Unit tests for Google Docs request builders.

These tests verify:
1. Style builders emit exactly the fields that were provided
2. An empty style intent builds no request
3. Color and URL validation
4. Plain-text list detection
"""

import pytest

from gdocs.docs_helpers import (
    ParagraphStyleArgs,
    TextStyleArgs,
    build_paragraph_style_request,
    build_text_style,
    build_text_style_request,
    create_bullet_list_request,
    create_delete_range_request,
    create_insert_image_request,
    create_insert_table_request,
    create_insert_text_request,
    detect_and_format_lists,
    is_valid_hex_color,
    _parse_color,
)
from gdocs.docs_locator import TextRange
from gdocs.docs_model import flatten_body
from gdocs.errors import InvalidStyleValue
from doc_builders import create_body, create_mock_paragraph, create_mock_table


class TestTextStyleRequest:
    """Tests for build_text_style_request."""

    def test_empty_intent_builds_nothing(self):
        """An empty style intent is a no-op for any valid range."""
        for text_range in (TextRange(1, 2), TextRange(5, 500, "t.1")):
            assert build_text_style_request(text_range, TextStyleArgs()) is None

    def test_fields_mask_matches_provided_attributes(self):
        """Only provided attributes appear in the mask, including explicit False."""
        result = build_text_style_request(
            TextRange(1, 6), TextStyleArgs(bold=True, italic=False, font_size=12)
        )
        request = result.request["updateTextStyle"]

        assert result.fields == ["bold", "italic", "fontSize"]
        assert request["fields"] == "bold,italic,fontSize"
        assert request["textStyle"] == {
            "bold": True,
            "italic": False,
            "fontSize": {"magnitude": 12, "unit": "PT"},
        }
        assert request["range"] == {"startIndex": 1, "endIndex": 6}

    def test_includes_tab_id_in_range(self):
        """The tab id of the resolved range is forwarded."""
        result = build_text_style_request(TextRange(1, 6, "t.2"), TextStyleArgs(underline=True))
        assert result.request["updateTextStyle"]["range"]["tabId"] == "t.2"

    def test_link_and_font_family(self):
        """Links and font families use their API shapes."""
        style, fields = build_text_style(
            TextStyleArgs(link_url="https://example.com", font_family="Georgia")
        )
        assert style["link"] == {"url": "https://example.com"}
        assert style["weightedFontFamily"] == {"fontFamily": "Georgia"}
        assert fields == ["weightedFontFamily", "link"]

    def test_rejects_non_http_link(self):
        """Links must be absolute http(s) URLs."""
        with pytest.raises(InvalidStyleValue) as exc_info:
            build_text_style(TextStyleArgs(link_url="javascript:alert(1)"))
        assert exc_info.value.code == "INVALID_URL"

    def test_rejects_non_positive_font_size(self):
        with pytest.raises(InvalidStyleValue):
            build_text_style(TextStyleArgs(font_size=0))

    def test_rebuilding_is_identical(self):
        """The same intent always produces the same request."""
        style = TextStyleArgs(bold=True, foreground_color="#336699")
        first = build_text_style_request(TextRange(3, 9), style)
        second = build_text_style_request(TextRange(3, 9), style)
        assert first.request == second.request


class TestColors:
    """Tests for hex color validation and parsing."""

    @pytest.mark.parametrize("color", ["#FFF", "#FFFFFF", "FFFFFF", "fff", "#a1B2c3"])
    def test_accepts_hex_with_optional_hash(self, color):
        assert is_valid_hex_color(color)

    @pytest.mark.parametrize("color", ["red", "#FFFF", "#GGGGGG", "", "##FFF"])
    def test_rejects_other_values(self, color):
        assert not is_valid_hex_color(color)

    def test_short_form_expands(self):
        """#F00 is parsed the same as #FF0000."""
        assert _parse_color("#F00") == _parse_color("FF0000")
        assert _parse_color("#F00")["color"]["rgbColor"] == {"red": 1.0, "green": 0.0, "blue": 0.0}

    def test_invalid_color_raises_with_param_name(self):
        """Named colors are rejected, naming the offending parameter."""
        with pytest.raises(InvalidStyleValue) as exc_info:
            build_text_style(TextStyleArgs(background_color="yellow"))
        assert exc_info.value.code == "INVALID_COLOR_FORMAT"
        assert "background_color" in str(exc_info.value)


class TestParagraphStyleRequest:
    """Tests for build_paragraph_style_request."""

    def test_empty_intent_builds_nothing(self):
        assert build_paragraph_style_request(TextRange(1, 5), ParagraphStyleArgs()) is None

    def test_alignment_and_heading(self):
        """Alignment and named style are upper-cased and masked."""
        result = build_paragraph_style_request(
            TextRange(1, 5), ParagraphStyleArgs(alignment="center", named_style_type="heading_1")
        )
        request = result.request["updateParagraphStyle"]
        assert request["paragraphStyle"] == {"alignment": "CENTER", "namedStyleType": "HEADING_1"}
        assert request["fields"] == "alignment,namedStyleType"

    def test_dimensions_in_points(self):
        result = build_paragraph_style_request(
            TextRange(1, 5), ParagraphStyleArgs(indent_start=36, space_below=0, line_spacing=150)
        )
        style = result.request["updateParagraphStyle"]["paragraphStyle"]
        assert style["indentStart"] == {"magnitude": 36, "unit": "PT"}
        assert style["spaceBelow"] == {"magnitude": 0, "unit": "PT"}
        assert style["lineSpacing"] == 150

    def test_rejects_unknown_alignment(self):
        with pytest.raises(InvalidStyleValue):
            build_paragraph_style_request(TextRange(1, 5), ParagraphStyleArgs(alignment="MIDDLE"))

    def test_rejects_negative_indent(self):
        with pytest.raises(InvalidStyleValue):
            build_paragraph_style_request(TextRange(1, 5), ParagraphStyleArgs(indent_end=-1))


class TestRequestFactories:
    """Tests for the create_*_request helpers."""

    def test_insert_text_with_tab(self):
        assert create_insert_text_request(5, "Hi", "t.1") == {
            "insertText": {"location": {"index": 5, "tabId": "t.1"}, "text": "Hi"}
        }

    def test_delete_range_without_tab(self):
        assert create_delete_range_request(2, 4) == {
            "deleteContentRange": {"range": {"startIndex": 2, "endIndex": 4}}
        }

    def test_insert_table(self):
        request = create_insert_table_request(3, 2, 4)
        assert request["insertTable"] == {"location": {"index": 3}, "rows": 2, "columns": 4}

    def test_insert_image_size_is_optional(self):
        """objectSize is only present when a dimension is given."""
        without_size = create_insert_image_request(1, "https://example.com/a.png")
        with_size = create_insert_image_request(1, "https://example.com/a.png", width=100)
        assert "objectSize" not in without_size["insertInlineImage"]
        assert with_size["insertInlineImage"]["objectSize"] == {"width": {"magnitude": 100, "unit": "PT"}}

    def test_bullet_presets(self):
        assert create_bullet_list_request(1, 5)["createParagraphBullets"]["bulletPreset"] == \
            "BULLET_DISC_CIRCLE_SQUARE"
        assert create_bullet_list_request(1, 5, "ORDERED")["createParagraphBullets"]["bulletPreset"] == \
            "NUMBERED_DECIMAL_ALPHA_ROMAN"


class TestDetectAndFormatLists:
    """Tests for detect_and_format_lists."""

    def test_groups_and_orders_requests_from_the_end(self):
        """Each list gets bullets then marker deletions, last list first."""
        flat = flatten_body(create_body(
            create_mock_paragraph("- one", 1),
            create_mock_paragraph("- two", 7),
            create_mock_paragraph("Plain", 13),
            create_mock_paragraph("1. first", 19),
            create_mock_paragraph("2. second", 28),
        ))

        requests = detect_and_format_lists(flat)

        assert requests == [
            create_bullet_list_request(19, 38, "ORDERED"),
            create_delete_range_request(28, 31),
            create_delete_range_request(19, 22),
            create_bullet_list_request(1, 13, "UNORDERED"),
            create_delete_range_request(7, 9),
            create_delete_range_request(1, 3),
        ]

    def test_different_list_types_are_separate_lists(self):
        flat = flatten_body(create_body(
            create_mock_paragraph("* a", 1),
            create_mock_paragraph("* b", 5),
            create_mock_paragraph("1) c", 9),
            create_mock_paragraph("2) d", 14),
        ))
        requests = detect_and_format_lists(flat)
        bullets = [r for r in requests if "createParagraphBullets" in r]
        assert len(bullets) == 2

    def test_single_marked_paragraph_is_left_alone(self):
        """A lone numbered sentence is prose, not a one-item list."""
        flat = flatten_body(create_body(
            create_mock_paragraph("Intro", 1),
            create_mock_paragraph("2024. was a good year", 7),
            create_mock_paragraph("- aside", 29),
        ))
        assert detect_and_format_lists(flat) == []

    def test_ignores_non_candidates(self):
        """Headings, existing bullets, missing spaces and table cells are left alone."""
        flat = flatten_body(create_body(
            create_mock_paragraph("- heading", 1, "HEADING_1"),
            create_mock_paragraph("- bullet", 11, bullet={"listId": "kix.1"}),
            create_mock_paragraph("-nospace", 20),
            create_mock_paragraph("3.14 is pi", 29),
            create_mock_table(40, [["- in cell"]]),
        ))
        assert detect_and_format_lists(flat) == []

    def test_respects_range_and_tab(self):
        """Only paragraphs fully inside the range are converted."""
        flat = flatten_body(create_body(
            create_mock_paragraph("- one", 1),
            create_mock_paragraph("- two", 7),
            create_mock_paragraph("- six", 13),
        ))
        requests = detect_and_format_lists(flat, 7, 19, tab_id="t.1")
        assert requests == [
            create_bullet_list_request(7, 19, "UNORDERED", "t.1"),
            create_delete_range_request(13, 15, "t.1"),
            create_delete_range_request(7, 9, "t.1"),
        ]
