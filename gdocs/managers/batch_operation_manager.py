"""
Batch Operation Manager

This module submits lists of Docs API requests as single atomic batchUpdate calls.

Requests are sent exactly as given and in the order given. The service applies
them one after another within one revision, so each request sees the offset
shifts caused by the requests before it. Callers building multi-request batches
account for those shifts themselves; nothing is re-positioned here, and an
oversized batch is rejected rather than split.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from googleapiclient.errors import HttpError

from core.config import MAX_BATCH_REQUESTS
from core.utils import translate_http_error
from gdocs.errors import BatchTooLarge, DocsErrorBuilder

logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    """Outcome of one batchUpdate call."""
    document_id: str
    requests_count: int
    replies: List[Dict[str, Any]] = field(default_factory=list)
    revision_id: Optional[str] = None


def describe_request(request: Dict[str, Any]) -> str:
    """Short human-readable description of a single request, for logs and summaries."""
    kind = next(iter(request), "unknown")
    body = request.get(kind, {})
    if "range" in body:
        r = body["range"]
        return f"{kind} {r.get('startIndex')}-{r.get('endIndex')}"
    if "location" in body:
        return f"{kind} @{body['location'].get('index')}"
    return kind


class BatchOperationManager:
    """
    Executes Google Docs batchUpdate calls.

    Handles:
    - Size guard before submission (BatchTooLarge)
    - One atomic remote call per batch
    - Mapping of transport failures to domain errors
    """

    def __init__(self, service, max_batch_size: int = MAX_BATCH_REQUESTS):
        """
        Initialize the batch operation manager.

        Args:
            service: Google Docs API service instance
            max_batch_size: Largest number of requests accepted in one batch
        """
        self.service = service
        self.max_batch_size = max_batch_size

    async def execute_batch(
        self,
        document_id: str,
        requests: List[Dict[str, Any]]
    ) -> BatchResult:
        """
        Submit requests as a single atomic batch.

        Args:
            document_id: ID of the document to update
            requests: Docs API requests, applied in list order

        Returns:
            BatchResult with the service replies. An empty request list is a no-op.

        Raises:
            BatchTooLarge: If more than max_batch_size requests are given
            DocumentNotFound, PermissionDenied, RemoteOperationFailed: On API failure
        """
        if not requests:
            logger.info(f"No requests to submit for document {document_id}")
            return BatchResult(document_id=document_id, requests_count=0)

        if len(requests) > self.max_batch_size:
            logger.warning(
                f"Rejecting batch of {len(requests)} requests for {document_id} "
                f"(limit {self.max_batch_size})"
            )
            raise BatchTooLarge(DocsErrorBuilder.batch_too_large(len(requests), self.max_batch_size))

        logger.info(
            f"Submitting {len(requests)} requests to document {document_id}: "
            f"{', '.join(describe_request(r) for r in requests[:5])}"
            f"{' ...' if len(requests) > 5 else ''}"
        )

        try:
            response = await self._execute_batch_requests(document_id, requests)
        except HttpError as error:
            logger.error(f"batchUpdate failed for document {document_id}: {error}", exc_info=True)
            raise translate_http_error(error, document_id, operation="update document") from error

        write_control = response.get("writeControl") or {}
        return BatchResult(
            document_id=document_id,
            requests_count=len(requests),
            replies=response.get("replies", []),
            revision_id=write_control.get("requiredRevisionId"),
        )

    async def _execute_batch_requests(
        self,
        document_id: str,
        requests: List[Dict[str, Any]]
    ) -> Dict[str, Any]:
        """Execute the batch requests against the Google Docs API."""
        return await asyncio.to_thread(
            self.service.documents().batchUpdate(
                documentId=document_id,
                body={'requests': requests}
            ).execute
        )
