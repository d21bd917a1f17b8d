import functools
import logging

from typing import Optional

from fastmcp.exceptions import ToolError
from googleapiclient.errors import HttpError

from gdocs.errors import (
    DocsErrorBuilder,
    DocsOperationError,
    DocumentNotFound,
    PermissionDenied,
    RemoteOperationFailed,
    format_error,
)

logger = logging.getLogger(__name__)


def _upstream_message(error: HttpError) -> str:
    """Best-effort extraction of the message the Google API sent back."""
    reason = getattr(error, "reason", None)
    if isinstance(reason, str) and reason:
        return reason
    content = error.content
    if isinstance(content, bytes):
        content = content.decode("utf-8", errors="replace")
    return content or str(error)


def translate_http_error(
    error: HttpError, document_id: Optional[str] = None, operation: str = "call the Google API"
) -> DocsOperationError:
    """
    Map a Google API HttpError to the matching domain error.

    404 becomes DocumentNotFound, 401/403 become PermissionDenied and every other
    status becomes RemoteOperationFailed. The upstream message is kept verbatim.
    """
    status = getattr(error.resp, "status", None)
    try:
        status = int(status)
    except (TypeError, ValueError):
        status = None
    message = _upstream_message(error)
    doc = document_id or "unknown"

    if status == 404:
        return DocumentNotFound(DocsErrorBuilder.document_not_found(doc, message))
    if status in (401, 403):
        return PermissionDenied(DocsErrorBuilder.permission_denied(doc, status, message))
    return RemoteOperationFailed(DocsErrorBuilder.api_error(operation, message, status, document_id))


def handle_docs_errors(tool_name: str):
    """
    A decorator that turns every failure of a tool into a typed, structured result.

    It wraps an async tool function. Domain errors and Google API HttpErrors are
    logged and returned as structured error JSON; nothing is retried. Any other
    exception is a bug and is re-raised as a ToolError with the tool name attached.

    Args:
        tool_name (str): The name of the tool being decorated (e.g., 'insert_text').
    """

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except DocsOperationError as e:
                logger.warning(f"[{tool_name}] {e.code}: {e}")
                return format_error(e.error)
            except HttpError as error:
                translated = translate_http_error(
                    error, kwargs.get("document_id"), operation=tool_name
                )
                logger.error(f"[{tool_name}] API error: {error}", exc_info=True)
                return format_error(translated.error)
            except Exception as e:
                message = f"An unexpected error occurred in {tool_name}: {e}"
                logger.exception(message)
                raise ToolError(message) from e

        return wrapper

    return decorator
