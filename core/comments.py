"""
Core Comments Module

Comment management for Google Docs. Comments live in the Drive API, not the
Docs API: they are addressed by document id and comment id only and are
independent of the document's tab tree.

Anchoring a comment to a text range is best-effort. Comments created through
the API show up in the comment list, but the Docs UI may not highlight the
anchored text.
"""

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from googleapiclient.errors import HttpError

from core.utils import handle_docs_errors, translate_http_error
from gdocs.docs_locator import extract_text_in_range
from gdocs.docs_tabs import get_document, resolve_tab
from gdocs.managers.validation_manager import ValidationManager

logger = logging.getLogger(__name__)

COMMENT_FIELDS = (
    "id,content,author,createdTime,modifiedTime,resolved,anchor,quotedFileContent,"
    "replies(id,content,author,createdTime,modifiedTime,action)"
)


@dataclass
class CommentReply:
    reply_id: str
    author: str
    content: str
    created_time: str = ""
    action: Optional[str] = None


@dataclass
class Comment:
    comment_id: str
    author: str
    content: str
    created_time: str = ""
    resolved: bool = False
    quoted_text: Optional[str] = None
    anchor: Optional[str] = None
    replies: List[CommentReply] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Comment":
        quoted = (data.get("quotedFileContent") or {}).get("value")
        return cls(
            comment_id=data.get("id", ""),
            author=data.get("author", {}).get("displayName", "Unknown"),
            content=data.get("content", ""),
            created_time=data.get("createdTime", ""),
            resolved=data.get("resolved", False),
            quoted_text=quoted or None,
            anchor=data.get("anchor") or None,
            replies=[
                CommentReply(
                    reply_id=reply.get("id", ""),
                    author=reply.get("author", {}).get("displayName", "Unknown"),
                    content=reply.get("content", ""),
                    created_time=reply.get("createdTime", ""),
                    action=reply.get("action"),
                )
                for reply in data.get("replies", [])
            ],
        )

    def format(self, include_replies: bool = True) -> List[str]:
        status = " [RESOLVED]" if self.resolved else ""
        lines = [
            f"Comment ID: {self.comment_id}",
            f"Author: {self.author}",
            f"Created: {self.created_time}{status}",
        ]
        if self.anchor:
            lines.append(f"Anchor: {self.anchor}")
        if self.quoted_text:
            lines.append(f"Quoted content: {self.quoted_text}")
        lines.append(f"Content: {self.content}")

        if self.replies:
            if include_replies:
                lines.append(f"  Replies ({len(self.replies)}):")
                for reply in self.replies:
                    lines.append(f"    Reply ID: {reply.reply_id}")
                    lines.append(f"    Author: {reply.author}")
                    lines.append(f"    Created: {reply.created_time}")
                    lines.append(f"    Content: {reply.content}")
            else:
                lines.append(f"  Replies: {len(self.replies)}")
        return lines


def build_text_anchor(document_id: str, start_index: int, end_index: int) -> str:
    """Drive anchor for a Docs text range. Drive offsets are 0-based."""
    length = end_index - start_index
    return json.dumps({
        "r": document_id,
        "a": [{"txt": {"o": start_index - 1, "l": length, "ml": length}}],
    })


async def _call(request, document_id: str, operation: str):
    try:
        return await asyncio.to_thread(request.execute)
    except HttpError as error:
        logger.error(f"Failed to {operation} on {document_id}: {error}")
        raise translate_http_error(error, document_id, operation=operation) from error


async def _list_comments_impl(drive_service, document_id: str) -> str:
    """List every comment of a document, following pagination."""
    logger.info(f"[list_comments] Reading comments for document {document_id}")

    comments: List[Comment] = []
    page_token = None
    while True:
        response = await _call(
            drive_service.comments().list(
                fileId=document_id,
                fields=f"nextPageToken,comments({COMMENT_FIELDS})",
                pageSize=100,
                pageToken=page_token,
            ),
            document_id,
            "list comments",
        )
        comments.extend(Comment.from_api(c) for c in response.get("comments", []))
        page_token = response.get("nextPageToken")
        if not page_token:
            break

    if not comments:
        return f"No comments found in document {document_id}"

    output = [f"Found {len(comments)} comments in document {document_id}:", ""]
    for comment in comments:
        output.extend(comment.format(include_replies=False))
        output.append("")
    return "\n".join(output)


async def _get_comment_impl(drive_service, document_id: str, comment_id: str) -> str:
    """Read one comment with its full reply thread."""
    logger.info(f"[get_comment] Reading comment {comment_id} in document {document_id}")
    data = await _call(
        drive_service.comments().get(fileId=document_id, commentId=comment_id, fields=COMMENT_FIELDS),
        document_id,
        "get comment",
    )
    return "\n".join(Comment.from_api(data).format())


async def _add_comment_impl(
    docs_service,
    drive_service,
    document_id: str,
    start_index: int,
    end_index: int,
    comment_text: str,
    tab_id: Optional[str] = None,
) -> str:
    """
    Create a comment anchored to [start_index, end_index).

    The quoted text is taken from the document itself so that the comment shows
    which passage it refers to even when the anchor is not rendered.
    """
    logger.info(
        f"[add_comment] Adding comment to range {start_index}-{end_index} in document {document_id}"
    )
    doc_data = await get_document(docs_service, document_id)
    flat = resolve_tab(doc_data, tab_id).flatten()
    quoted_text = extract_text_in_range(flat, start_index, end_index)

    body = {
        "content": comment_text,
        "quotedFileContent": {"value": quoted_text, "mimeType": "text/html"},
        "anchor": build_text_anchor(document_id, start_index, end_index),
    }
    created = await _call(
        drive_service.comments().create(fileId=document_id, body=body, fields=COMMENT_FIELDS),
        document_id,
        "add comment",
    )
    comment = Comment.from_api(created)
    return "Comment created successfully!\n" + "\n".join(comment.format())


async def _reply_to_comment_impl(
    drive_service, document_id: str, comment_id: str, reply_text: str
) -> str:
    """Add a reply to an existing comment."""
    logger.info(f"[reply_to_comment] Replying to comment {comment_id} in document {document_id}")
    reply = await _call(
        drive_service.replies().create(
            fileId=document_id,
            commentId=comment_id,
            body={"content": reply_text},
            fields="id,content,author,createdTime",
        ),
        document_id,
        "reply to comment",
    )
    author = reply.get("author", {}).get("displayName", "Unknown")
    return (
        f"Reply posted successfully!\nReply ID: {reply.get('id', '')}\n"
        f"Author: {author}\nCreated: {reply.get('createdTime', '')}\nContent: {reply_text}"
    )


async def _is_resolved(drive_service, document_id: str, comment_id: str) -> bool:
    data = await _call(
        drive_service.comments().get(fileId=document_id, commentId=comment_id, fields="resolved"),
        document_id,
        "verify comment",
    )
    return bool(data.get("resolved"))


async def _resolve_comment_impl(drive_service, document_id: str, comment_id: str) -> str:
    """
    Mark a comment as resolved and verify that the flag stuck.

    The comment is updated with resolved=True first. If a re-read shows it is
    still open, a reply carrying the 'resolve' action is posted instead. The
    result reports honestly when neither approach took effect.
    """
    logger.info(f"[resolve_comment] Resolving comment {comment_id} in document {document_id}")

    current = await _call(
        drive_service.comments().get(fileId=document_id, commentId=comment_id, fields="content"),
        document_id,
        "get comment",
    )
    await _call(
        drive_service.comments().update(
            fileId=document_id,
            commentId=comment_id,
            body={"content": current.get("content", ""), "resolved": True},
            fields="id,resolved",
        ),
        document_id,
        "resolve comment",
    )
    if await _is_resolved(drive_service, document_id, comment_id):
        return f"Comment {comment_id} has been marked as resolved."

    logger.info(f"[resolve_comment] Update did not persist for {comment_id}, posting resolve reply")
    await _call(
        drive_service.replies().create(
            fileId=document_id,
            commentId=comment_id,
            body={"content": "Marked as resolved.", "action": "resolve"},
            fields="id",
        ),
        document_id,
        "resolve comment",
    )
    if await _is_resolved(drive_service, document_id, comment_id):
        return f"Comment {comment_id} has been marked as resolved."

    return (
        f"Attempted to resolve comment {comment_id}, but the resolved status did not persist. "
        "The comment can be resolved manually in the Google Docs interface."
    )


async def _delete_comment_impl(drive_service, document_id: str, comment_id: str) -> str:
    logger.info(f"[delete_comment] Deleting comment {comment_id} from document {document_id}")
    await _call(
        drive_service.comments().delete(fileId=document_id, commentId=comment_id),
        document_id,
        "delete comment",
    )
    return f"Comment {comment_id} has been deleted."


def create_comment_tools(server, clients):
    """
    Register the comment tools on a FastMCP server.

    Args:
        server: The FastMCP instance to register on
        clients: ClientSet providing the Docs and Drive services

    Returns:
        Dict of the undecorated tool functions, keyed by tool name
    """
    validator = ValidationManager()

    @handle_docs_errors("list_comments")
    async def list_comments(document_id: str) -> str:
        """Lists all comments in a Google Document, with reply counts."""
        validator.validate_document_id(document_id)
        return await _list_comments_impl(clients.drive, document_id)

    @handle_docs_errors("get_comment")
    async def get_comment(document_id: str, comment_id: str) -> str:
        """Gets a specific comment with its full thread of replies."""
        validator.validate_document_id(document_id)
        return await _get_comment_impl(clients.drive, document_id, comment_id)

    @handle_docs_errors("add_comment")
    async def add_comment(
        document_id: str,
        start_index: int,
        end_index: int,
        comment_text: str,
        tab_id: Optional[str] = None,
    ) -> str:
        """
        Adds a comment anchored to a text range (start inclusive, end exclusive).

        Anchoring is best-effort: the comment appears in the comment list, but the
        Docs UI may not highlight the anchored text.
        """
        validator.validate_document_id(document_id)
        validator.validate_index_range(start_index, end_index)
        return await _add_comment_impl(
            clients.docs, clients.drive, document_id, start_index, end_index, comment_text, tab_id
        )

    @handle_docs_errors("reply_to_comment")
    async def reply_to_comment(document_id: str, comment_id: str, reply_text: str) -> str:
        """Adds a reply to an existing comment."""
        validator.validate_document_id(document_id)
        return await _reply_to_comment_impl(clients.drive, document_id, comment_id, reply_text)

    @handle_docs_errors("resolve_comment")
    async def resolve_comment(document_id: str, comment_id: str) -> str:
        """Marks a comment as resolved and reports whether the status persisted."""
        validator.validate_document_id(document_id)
        return await _resolve_comment_impl(clients.drive, document_id, comment_id)

    @handle_docs_errors("delete_comment")
    async def delete_comment(document_id: str, comment_id: str) -> str:
        """Deletes a comment from the document."""
        validator.validate_document_id(document_id)
        return await _delete_comment_impl(clients.drive, document_id, comment_id)

    tools = {
        "list_comments": list_comments,
        "get_comment": get_comment,
        "add_comment": add_comment,
        "reply_to_comment": reply_to_comment,
        "resolve_comment": resolve_comment,
        "delete_comment": delete_comment,
    }
    for tool in tools.values():
        server.tool()(tool)
    return tools
