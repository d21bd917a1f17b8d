"""
Validation Manager

This module provides centralized input validation for Google Docs operations.
Every check runs before any remote call and raises the matching typed error,
so invalid input never reaches the Docs API.
"""
import logging
import os
from typing import Any, Dict, Optional

from gdocs.docs_helpers import is_valid_hex_color, is_valid_http_url
from gdocs.errors import (
    DocsErrorBuilder,
    InvalidParameter,
    InvalidRange,
    InvalidStyleValue,
)

logger = logging.getLogger(__name__)


class ValidationManager:
    """
    Centralized validation manager for Google Docs operations.

    Provides consistent validation patterns and error messages across
    all document operations.
    """

    def __init__(self):
        """Initialize the validation manager."""
        self.validation_rules = self._setup_validation_rules()

    def _setup_validation_rules(self) -> Dict[str, Any]:
        """Setup validation rules and constraints."""
        return {
            'table_max_rows': 1000,
            'table_max_columns': 20,
            'font_size_range': (1, 400),  # Google Docs font size limits
            'valid_image_extensions': ('.jpg', '.jpeg', '.png', '.gif', '.bmp', '.webp', '.svg'),
            'valid_read_formats': ('text', 'json', 'markdown'),
        }

    def validate_document_id(self, document_id: str) -> None:
        """Reject empty or non-string document IDs."""
        if not isinstance(document_id, str) or not document_id.strip():
            raise InvalidParameter(
                DocsErrorBuilder.invalid_param_value("document_id", document_id, "a non-empty document ID")
            )

    def validate_index(self, index: int, param_name: str = "index") -> None:
        """An insertion index must be an integer of at least 1."""
        if not isinstance(index, int) or isinstance(index, bool) or index < 1:
            raise InvalidRange(DocsErrorBuilder.invalid_param_value(param_name, index, "an integer >= 1"))

    def validate_index_range(self, start_index: int, end_index: int) -> None:
        """
        Validate a half-open range.

        Raises:
            InvalidRange: If start_index < 1 or end_index <= start_index
        """
        for name, value in (("start_index", start_index), ("end_index", end_index)):
            if not isinstance(value, int) or isinstance(value, bool):
                raise InvalidRange(DocsErrorBuilder.invalid_param_value(name, value, "an integer"))

        if start_index < 1 or end_index <= start_index:
            logger.warning(f"Rejected index range {start_index}-{end_index}")
            raise InvalidRange(DocsErrorBuilder.invalid_index_range(start_index, end_index))

    def validate_search_target(self, text_to_find: str, match_instance: int) -> None:
        if not text_to_find:
            raise InvalidParameter(DocsErrorBuilder.empty_search_text())
        if not isinstance(match_instance, int) or match_instance < 1:
            raise InvalidParameter(
                DocsErrorBuilder.invalid_param_value("match_instance", match_instance, "an integer >= 1")
            )

    def validate_color(self, color: Optional[str], param_name: str) -> None:
        """Colors are 3- or 6-digit hex with an optional leading '#'."""
        if color is not None and not is_valid_hex_color(color):
            raise InvalidStyleValue(DocsErrorBuilder.invalid_color_format(color, param_name))

    def validate_font_size(self, font_size: Optional[float]) -> None:
        if font_size is None:
            return
        low, high = self.validation_rules['font_size_range']
        if not low <= font_size <= high:
            raise InvalidStyleValue(
                DocsErrorBuilder.invalid_style_value("font_size", font_size, f"{low} to {high} points")
            )

    def validate_url(self, url: Optional[str], param_name: str) -> None:
        if url is not None and not is_valid_http_url(url):
            raise InvalidStyleValue(DocsErrorBuilder.invalid_url(url, param_name))

    def validate_table_dimensions(self, rows: int, columns: int) -> None:
        max_rows = self.validation_rules['table_max_rows']
        max_columns = self.validation_rules['table_max_columns']
        if not isinstance(rows, int) or not 1 <= rows <= max_rows:
            raise InvalidParameter(DocsErrorBuilder.invalid_param_value("rows", rows, f"1 to {max_rows}"))
        if not isinstance(columns, int) or not 1 <= columns <= max_columns:
            raise InvalidParameter(
                DocsErrorBuilder.invalid_param_value("columns", columns, f"1 to {max_columns}")
            )

    def validate_image_size(self, width: Optional[float], height: Optional[float]) -> None:
        for name, value in (("width", width), ("height", height)):
            if value is not None and value <= 0:
                raise InvalidParameter(
                    DocsErrorBuilder.invalid_param_value(name, value, "a positive number of points")
                )

    def validate_local_image_path(self, path: str) -> None:
        """The path must point to an existing file with a supported image extension."""
        extensions = self.validation_rules['valid_image_extensions']
        if not path or not os.path.isfile(path):
            raise InvalidParameter(
                DocsErrorBuilder.invalid_param_value("local_image_path", path, "an existing image file")
            )
        if os.path.splitext(path)[1].lower() not in extensions:
            raise InvalidParameter(
                DocsErrorBuilder.invalid_param_value("local_image_path", path, list(extensions))
            )

    def validate_read_format(self, fmt: str) -> None:
        formats = self.validation_rules['valid_read_formats']
        if fmt not in formats:
            raise InvalidParameter(DocsErrorBuilder.invalid_param_value("format", fmt, list(formats)))

    def validate_max_length(self, max_length: Optional[int]) -> None:
        """A content cap, when given, is a positive number of characters."""
        if max_length is None:
            return
        if not isinstance(max_length, int) or isinstance(max_length, bool) or max_length < 1:
            raise InvalidParameter(
                DocsErrorBuilder.invalid_param_value("max_length", max_length, "an integer >= 1")
            )
