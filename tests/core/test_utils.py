"""
Tests for the HTTP error mapping and the tool error boundary.
"""

import json

import pytest
from unittest.mock import MagicMock

from fastmcp.exceptions import ToolError
from googleapiclient.errors import HttpError

from core.utils import handle_docs_errors, translate_http_error
from gdocs.errors import (
    DocsErrorBuilder,
    DocumentNotFound,
    PermissionDenied,
    RemoteOperationFailed,
    TextNotFound,
)


def _http_error(status, content=b"Something failed", reason="Error"):
    mock_resp = MagicMock()
    mock_resp.status = status
    mock_resp.reason = reason
    return HttpError(mock_resp, content)


class TestTranslateHttpError:
    """Tests for translate_http_error."""

    def test_404(self):
        result = translate_http_error(_http_error(404, reason="Not Found"), "doc1")
        assert isinstance(result, DocumentNotFound)
        assert result.error.context.upstream_message == "Not Found"

    @pytest.mark.parametrize("status", [401, 403])
    def test_permission(self, status):
        result = translate_http_error(_http_error(status), "doc1")
        assert isinstance(result, PermissionDenied)
        assert result.error.context.http_status == status

    def test_other_status_keeps_upstream_message(self):
        content = json.dumps({"error": {"code": 429, "message": "Quota exceeded"}}).encode("utf-8")
        result = translate_http_error(_http_error(429, content), "doc1", operation="update document")
        assert isinstance(result, RemoteOperationFailed)
        assert result.error.message == "Failed to update document: Quota exceeded (Code: 429)"


class TestHandleDocsErrors:
    """Tests for the handle_docs_errors decorator."""

    @pytest.mark.asyncio
    async def test_passes_through_results(self):
        @handle_docs_errors("test_tool")
        async def tool(document_id: str):
            return f"ok {document_id}"

        assert await tool(document_id="doc1") == "ok doc1"
        assert tool.__name__ == "tool"

    @pytest.mark.asyncio
    async def test_domain_error_becomes_structured_json(self):
        @handle_docs_errors("test_tool")
        async def tool(document_id: str):
            raise TextNotFound(DocsErrorBuilder.search_text_not_found("missing"))

        parsed = json.loads(await tool(document_id="doc1"))
        assert parsed["code"] == "SEARCH_TEXT_NOT_FOUND"
        assert parsed["category"] == "not_found"

    @pytest.mark.asyncio
    async def test_http_error_is_translated(self):
        """A raw HttpError is mapped using the document_id keyword."""
        @handle_docs_errors("test_tool")
        async def tool(document_id: str):
            raise _http_error(404, reason="Not Found")

        parsed = json.loads(await tool(document_id="doc1"))
        assert parsed["code"] == "DOCUMENT_NOT_FOUND"
        assert parsed["context"]["received"]["document_id"] == "doc1"

    @pytest.mark.asyncio
    async def test_unexpected_error_becomes_tool_error(self):
        @handle_docs_errors("test_tool")
        async def tool():
            raise KeyError("boom")

        with pytest.raises(ToolError, match="An unexpected error occurred in test_tool"):
            await tool()
