"""
Unit tests for BatchOperationManager.

These tests verify:
1. Requests are submitted in one call, unmodified and in order
2. Empty batches make no remote call
3. Oversized batches are rejected before submission
4. HttpErrors are mapped to domain errors
"""

import json

import pytest
from unittest.mock import MagicMock

from googleapiclient.errors import HttpError

from gdocs.docs_helpers import create_delete_range_request, create_insert_text_request
from gdocs.errors import BatchTooLarge, DocumentNotFound, PermissionDenied, RemoteOperationFailed
from gdocs.managers.batch_operation_manager import BatchOperationManager, BatchResult, describe_request


def _mock_service(response=None):
    mock_service = MagicMock()
    mock_service.documents.return_value.batchUpdate.return_value.execute.return_value = (
        response if response is not None else {"replies": [{}, {}]}
    )
    return mock_service


def _http_error(status, content=b"error"):
    mock_resp = MagicMock()
    mock_resp.status = status
    mock_resp.reason = "Error"
    return HttpError(mock_resp, content)


class TestExecuteBatch:
    """Tests for BatchOperationManager.execute_batch."""

    @pytest.mark.asyncio
    async def test_submits_requests_unmodified_and_in_order(self):
        """A delete followed by an insert at the same offset is sent exactly as given."""
        mock_service = _mock_service()
        manager = BatchOperationManager(mock_service)
        requests = [
            create_delete_range_request(10, 20),
            create_insert_text_request(10, "X"),
        ]

        result = await manager.execute_batch("doc123", requests)

        mock_service.documents.return_value.batchUpdate.assert_called_once_with(
            documentId="doc123",
            body={"requests": [
                {"deleteContentRange": {"range": {"startIndex": 10, "endIndex": 20}}},
                {"insertText": {"location": {"index": 10}, "text": "X"}},
            ]},
        )
        assert result.requests_count == 2
        assert len(result.replies) == 2

    @pytest.mark.asyncio
    async def test_empty_batch_is_noop(self):
        """No requests means no remote call."""
        mock_service = _mock_service()
        manager = BatchOperationManager(mock_service)

        result = await manager.execute_batch("doc123", [])

        assert result.requests_count == 0
        mock_service.documents.return_value.batchUpdate.assert_not_called()

    @pytest.mark.asyncio
    async def test_rejects_oversized_batch(self):
        """Batches above the limit raise BatchTooLarge without a remote call."""
        mock_service = _mock_service()
        manager = BatchOperationManager(mock_service, max_batch_size=2)
        requests = [create_insert_text_request(1, "x") for _ in range(3)]

        with pytest.raises(BatchTooLarge) as exc_info:
            await manager.execute_batch("doc123", requests)

        assert exc_info.value.code == "BATCH_TOO_LARGE"
        mock_service.documents.return_value.batchUpdate.assert_not_called()

    @pytest.mark.asyncio
    async def test_batch_at_limit_is_accepted(self):
        mock_service = _mock_service()
        manager = BatchOperationManager(mock_service, max_batch_size=2)
        result = await manager.execute_batch("doc123", [create_insert_text_request(1, "x")] * 2)
        assert result.requests_count == 2

    @pytest.mark.asyncio
    async def test_revision_id_is_reported(self):
        mock_service = _mock_service({"replies": [], "writeControl": {"requiredRevisionId": "rev9"}})
        manager = BatchOperationManager(mock_service)
        result = await manager.execute_batch("doc123", [create_insert_text_request(1, "x")])
        assert result.revision_id == "rev9"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status,expected", [
        (404, DocumentNotFound),
        (403, PermissionDenied),
        (401, PermissionDenied),
        (400, RemoteOperationFailed),
        (500, RemoteOperationFailed),
    ])
    async def test_maps_http_errors(self, status, expected):
        """HTTP failures become the matching domain error."""
        mock_service = MagicMock()
        mock_service.documents.return_value.batchUpdate.return_value.execute.side_effect = _http_error(status)
        manager = BatchOperationManager(mock_service)

        with pytest.raises(expected):
            await manager.execute_batch("doc123", [create_insert_text_request(1, "x")])

    @pytest.mark.asyncio
    async def test_upstream_message_is_preserved(self):
        """The service's own error message survives the mapping."""
        content = json.dumps({"error": {"code": 400, "message": "Invalid requests[0].insertText"}})
        mock_service = MagicMock()
        mock_service.documents.return_value.batchUpdate.return_value.execute.side_effect = _http_error(
            400, content.encode("utf-8")
        )
        manager = BatchOperationManager(mock_service)

        with pytest.raises(RemoteOperationFailed) as exc_info:
            await manager.execute_batch("doc123", [create_insert_text_request(1, "x")])

        error = exc_info.value.error
        assert error.context.upstream_message == "Invalid requests[0].insertText"
        assert error.context.http_status == 400
        assert "(Code: 400)" in error.message


class TestBatchResult:
    """Tests for BatchResult and describe_request."""

    def test_defaults(self):
        result = BatchResult(document_id="abc", requests_count=1)
        assert result.replies == []
        assert result.revision_id is None

    def test_describe_request(self):
        assert describe_request(create_delete_range_request(3, 7)) == "deleteContentRange 3-7"
        assert describe_request(create_insert_text_request(4, "x")) == "insertText @4"
