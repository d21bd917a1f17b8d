"""
Google Docs Error Handling

This module provides structured, actionable error messages for Google Docs operations,
together with the typed exceptions raised by the range resolution and batching engine.

Every failure is reported with a category so that a calling agent can tell apart
"your input was invalid", "the target wasn't found", "you lack permission" and
"the remote service failed".
"""
import json
import logging
from enum import Enum
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    """Standardized error codes for Google Docs operations."""

    # Addressing errors
    TAB_NOT_FOUND = "TAB_NOT_FOUND"
    TAB_HAS_NO_CONTENT = "TAB_HAS_NO_CONTENT"

    # Targeting errors
    SEARCH_TEXT_NOT_FOUND = "SEARCH_TEXT_NOT_FOUND"
    PARAGRAPH_NOT_FOUND = "PARAGRAPH_NOT_FOUND"

    # Validation errors
    INVALID_INDEX_RANGE = "INVALID_INDEX_RANGE"
    INVALID_COLOR_FORMAT = "INVALID_COLOR_FORMAT"
    INVALID_URL = "INVALID_URL"
    INVALID_STYLE_VALUE = "INVALID_STYLE_VALUE"
    INVALID_PARAM_VALUE = "INVALID_PARAM_VALUE"
    EMPTY_SEARCH_TEXT = "EMPTY_SEARCH_TEXT"
    BATCH_TOO_LARGE = "BATCH_TOO_LARGE"

    # Remote errors
    DOCUMENT_NOT_FOUND = "DOCUMENT_NOT_FOUND"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    API_ERROR = "API_ERROR"

    # Unsupported capabilities
    NOT_IMPLEMENTED = "NOT_IMPLEMENTED"


class ErrorCategory(str, Enum):
    """Coarse classification a caller can use to decide whether to retry."""

    INVALID_INPUT = "invalid_input"
    NOT_FOUND = "not_found"
    PERMISSION = "permission"
    REMOTE_FAILURE = "remote_failure"
    UNSUPPORTED = "unsupported"


@dataclass
class ErrorContext:
    """Additional context for error messages."""
    received: Optional[Dict[str, Any]] = None
    expected: Optional[Dict[str, Any]] = None
    document_length: Optional[int] = None
    available_tabs: Optional[List[str]] = None
    total_found: Optional[int] = None
    http_status: Optional[int] = None
    upstream_message: Optional[str] = None
    possible_causes: Optional[List[str]] = None


@dataclass
class StructuredError:
    """
    Structured error response with actionable guidance.

    Attributes:
        error: Always True for error responses
        code: Machine-readable error code from ErrorCode enum
        category: Coarse failure category from ErrorCategory enum
        message: Human-readable error description
        reason: Explanation of why this error occurred
        suggestion: Actionable advice on how to fix the issue
        example: Optional example showing correct usage
        context: Additional context like received values, upstream status, etc.
    """
    error: bool = True
    code: str = ""
    category: str = ErrorCategory.INVALID_INPUT.value
    message: str = ""
    reason: str = ""
    suggestion: str = ""
    example: Optional[Dict[str, Any]] = None
    context: Optional[ErrorContext] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary, excluding None values."""
        result = {
            "error": self.error,
            "code": self.code,
            "category": self.category,
            "message": self.message,
        }

        if self.reason:
            result["reason"] = self.reason
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.example:
            result["example"] = self.example
        if self.context:
            ctx = asdict(self.context)
            ctx = {k: v for k, v in ctx.items() if v is not None}
            if ctx:
                result["context"] = ctx

        return result

    def to_json(self, indent: int = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)


class DocsOperationError(Exception):
    """
    Base class for every failure raised by the document engine.

    The wrapped StructuredError is what the tool boundary returns to the caller.
    """

    def __init__(self, error: StructuredError):
        super().__init__(error.message)
        self.error = error

    @property
    def code(self) -> str:
        return self.error.code

    @property
    def category(self) -> str:
        return self.error.category


class TabNotFound(DocsOperationError):
    pass


class TabHasNoContent(DocsOperationError):
    pass


class TextNotFound(DocsOperationError):
    pass


class ParagraphNotFound(DocsOperationError):
    pass


class InvalidRange(DocsOperationError):
    pass


class InvalidStyleValue(DocsOperationError):
    pass


class InvalidParameter(DocsOperationError):
    pass


class BatchTooLarge(DocsOperationError):
    pass


class DocumentNotFound(DocsOperationError):
    pass


class PermissionDenied(DocsOperationError):
    pass


class RemoteOperationFailed(DocsOperationError):
    pass


class NotImplementedFeature(DocsOperationError):
    """Raised for capabilities that are intentionally unsupported."""


class DocsErrorBuilder:
    """
    Builder for creating structured error messages.

    Usage:
        raise TextNotFound(DocsErrorBuilder.search_text_not_found("Hello", instance=2, total_found=1))
    """

    @staticmethod
    def tab_not_found(tab_id: str, available_tabs: Optional[List[str]] = None) -> StructuredError:
        """Error when the requested tab does not exist in the document."""
        return StructuredError(
            code=ErrorCode.TAB_NOT_FOUND.value,
            category=ErrorCategory.NOT_FOUND.value,
            message=f"Tab with ID '{tab_id}' not found in document",
            reason="No tab (or nested child tab) carries this identifier.",
            suggestion="Call list_doc_tabs to see the tab IDs of this document, then retry.",
            context=ErrorContext(
                received={"tab_id": tab_id},
                available_tabs=available_tabs or None,
            )
        )

    @staticmethod
    def tab_has_no_content(tab_id: str) -> StructuredError:
        """Error when a tab exists but is not a document tab."""
        return StructuredError(
            code=ErrorCode.TAB_HAS_NO_CONTENT.value,
            category=ErrorCategory.NOT_FOUND.value,
            message=f"Tab '{tab_id}' does not have content (may not be a document tab)",
            reason="The tab was found but it carries no document body.",
            suggestion="Pick a different tab from list_doc_tabs.",
            context=ErrorContext(received={"tab_id": tab_id})
        )

    @staticmethod
    def search_text_not_found(
        search_text: str,
        instance: int = 1,
        total_found: int = 0
    ) -> StructuredError:
        """Error when search text is not found, or fewer matches exist than requested."""
        if total_found:
            message = (
                f"Could not find instance {instance} of text '{search_text}' "
                f"(only {total_found} found)"
            )
            suggestion = f"Use match_instance between 1 and {total_found}."
        else:
            message = f"Could not find '{search_text}' in the document"
            suggestion = "Check spelling and case. Matching is case-sensitive and literal."

        return StructuredError(
            code=ErrorCode.SEARCH_TEXT_NOT_FOUND.value,
            category=ErrorCategory.NOT_FOUND.value,
            message=message,
            reason="The exact text was not found the requested number of times.",
            suggestion=suggestion,
            context=ErrorContext(
                received={"text_to_find": search_text, "match_instance": instance},
                total_found=total_found
            )
        )

    @staticmethod
    def paragraph_not_found(index: int) -> StructuredError:
        """Error when an offset does not fall inside any top-level paragraph."""
        return StructuredError(
            code=ErrorCode.PARAGRAPH_NOT_FOUND.value,
            category=ErrorCategory.NOT_FOUND.value,
            message=f"Could not find paragraph containing index {index}",
            reason="The index is outside every top-level paragraph, for example inside a table cell.",
            suggestion="Provide an explicit start_index/end_index range instead.",
            context=ErrorContext(received={"index": index})
        )

    @staticmethod
    def invalid_index_range(start_index: int, end_index: int) -> StructuredError:
        """Error when end_index is not greater than start_index or start is below 1."""
        if start_index < 1:
            message = f"start_index must be at least 1, got {start_index}"
        else:
            message = f"end_index ({end_index}) must be greater than start_index ({start_index})"
        return StructuredError(
            code=ErrorCode.INVALID_INDEX_RANGE.value,
            message=message,
            reason="Ranges are half-open [start_index, end_index) and index 0 is never addressable.",
            suggestion="Use read_doc or list_doc_tabs to find valid indices.",
            context=ErrorContext(
                received={"start_index": start_index, "end_index": end_index},
                expected={"start_index": ">= 1", "end_index": "> start_index"}
            )
        )

    @staticmethod
    def invalid_color_format(color_value: str, param_name: str) -> StructuredError:
        """Error for an invalid hex color."""
        return StructuredError(
            code=ErrorCode.INVALID_COLOR_FORMAT.value,
            message=f"Invalid color format for {param_name}: '{color_value}'",
            reason="Colors must be 3- or 6-digit hex, with an optional leading '#'.",
            suggestion="Use a value such as '#FF0000', '#F00' or 'FF0000'.",
            context=ErrorContext(
                received={param_name: color_value},
                expected={param_name: "#RGB or #RRGGBB"}
            )
        )

    @staticmethod
    def invalid_url(url: str, param_name: str) -> StructuredError:
        """Error for a URL that is not an absolute http(s) URL."""
        return StructuredError(
            code=ErrorCode.INVALID_URL.value,
            message=f"Invalid URL for {param_name}: '{url}'",
            reason="Only absolute http:// or https:// URLs are accepted.",
            suggestion="Provide a full URL such as 'https://example.com/page'.",
            context=ErrorContext(received={param_name: url})
        )

    @staticmethod
    def invalid_style_value(param_name: str, value: Any, valid_values: Any) -> StructuredError:
        """Error for a style attribute outside its accepted domain."""
        return StructuredError(
            code=ErrorCode.INVALID_STYLE_VALUE.value,
            message=f"Invalid value for {param_name}: {value!r}",
            suggestion=f"Use one of: {valid_values}",
            context=ErrorContext(
                received={param_name: value},
                expected={param_name: valid_values}
            )
        )

    @staticmethod
    def invalid_param_value(param_name: str, received_value: Any, valid_values: Any) -> StructuredError:
        """Error for a non-style parameter outside its accepted domain."""
        return StructuredError(
            code=ErrorCode.INVALID_PARAM_VALUE.value,
            message=f"Invalid value for '{param_name}': {received_value!r}",
            suggestion=f"Expected: {valid_values}",
            context=ErrorContext(
                received={param_name: received_value},
                expected={param_name: valid_values}
            )
        )

    @staticmethod
    def empty_search_text() -> StructuredError:
        """Error when the search text is empty."""
        return StructuredError(
            code=ErrorCode.EMPTY_SEARCH_TEXT.value,
            message="Search text cannot be empty",
            suggestion="Provide the exact text to locate in the document."
        )

    @staticmethod
    def batch_too_large(request_count: int, max_requests: int) -> StructuredError:
        """Error when a batch exceeds the configured request limit."""
        return StructuredError(
            code=ErrorCode.BATCH_TOO_LARGE.value,
            message=f"Batch of {request_count} requests exceeds the limit of {max_requests}",
            reason=(
                "Batches are submitted atomically and are never split, because later requests "
                "are positioned relative to the effects of earlier ones."
            ),
            suggestion="Reduce the scope of the operation, for example with a narrower range.",
            context=ErrorContext(received={"request_count": request_count},
                                 expected={"max_requests": max_requests})
        )

    @staticmethod
    def document_not_found(document_id: str, upstream_message: Optional[str] = None) -> StructuredError:
        """Error when document cannot be found."""
        return StructuredError(
            code=ErrorCode.DOCUMENT_NOT_FOUND.value,
            category=ErrorCategory.NOT_FOUND.value,
            message=f"Document '{document_id}' was not found",
            reason="The document ID may be incorrect or you may not have access to this document.",
            suggestion=(
                "Verify the document ID. It is the part of the URL between '/d/' and '/edit'."
            ),
            context=ErrorContext(
                received={"document_id": document_id},
                http_status=404,
                upstream_message=upstream_message,
                possible_causes=[
                    "Document ID is incorrect",
                    "Document was deleted",
                    "Document ID includes extra characters (quotes, spaces)",
                ]
            )
        )

    @staticmethod
    def permission_denied(
        document_id: str,
        http_status: int = 403,
        upstream_message: Optional[str] = None
    ) -> StructuredError:
        """Error when the credentials lack access to the document."""
        return StructuredError(
            code=ErrorCode.PERMISSION_DENIED.value,
            category=ErrorCategory.PERMISSION.value,
            message=f"Permission denied for document '{document_id}'",
            reason="The configured Google account cannot access or edit this document.",
            suggestion="Ask the owner to share the document, or configure an account with edit access.",
            context=ErrorContext(
                received={"document_id": document_id},
                http_status=http_status,
                upstream_message=upstream_message
            )
        )

    @staticmethod
    def api_error(
        operation: str,
        error_message: str,
        http_status: Optional[int] = None,
        document_id: Optional[str] = None
    ) -> StructuredError:
        """Error from a Google API call that has no more specific mapping."""
        context_data = {"operation": operation}
        if document_id:
            context_data["document_id"] = document_id

        status_note = f" (Code: {http_status})" if http_status else ""
        return StructuredError(
            code=ErrorCode.API_ERROR.value,
            category=ErrorCategory.REMOTE_FAILURE.value,
            message=f"Failed to {operation}: {error_message}{status_note}",
            reason="The Google API returned an error.",
            suggestion="Check the upstream message. The operation was not applied and may be retried.",
            context=ErrorContext(
                received=context_data,
                http_status=http_status,
                upstream_message=error_message
            )
        )

    @staticmethod
    def not_implemented(feature: str, detail: str = "") -> StructuredError:
        """Error for capabilities that are deliberately unsupported."""
        return StructuredError(
            code=ErrorCode.NOT_IMPLEMENTED.value,
            category=ErrorCategory.UNSUPPORTED.value,
            message=f"{feature} is not supported",
            reason=detail,
            suggestion="Use the lower-level range tools (insert_text, delete_range, apply_text_style) instead."
        )


def format_error(error: StructuredError) -> str:
    """
    Format a StructuredError for return to the user.

    Returns a JSON string that can be parsed by both humans and AI agents.
    """
    return error.to_json()
