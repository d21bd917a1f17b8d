"""
Tests for core comments functionality.

These tests verify:
1. Comment listing follows pagination and shows anchors and quoted content
2. Comment creation quotes the anchored text and builds the Drive anchor
3. Resolving verifies the result and falls back to a resolve reply
"""

import json

import pytest
from unittest.mock import MagicMock

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../.."))

from googleapiclient.errors import HttpError

from core.comments import (
    Comment,
    _add_comment_impl,
    _delete_comment_impl,
    _get_comment_impl,
    _list_comments_impl,
    _reply_to_comment_impl,
    _resolve_comment_impl,
    build_text_anchor,
    create_comment_tools,
)
from gdocs.errors import DocumentNotFound


def _comment(comment_id="c1", content="Test comment", **extra):
    data = {
        "id": comment_id,
        "content": content,
        "author": {"displayName": "Test User"},
        "createdTime": "2024-01-01T00:00:00Z",
        "resolved": False,
        "replies": [],
    }
    data.update(extra)
    return data


def _doc_with_text(text):
    end_index = 1 + len(text) + 1
    return {
        "title": "Doc",
        "body": {"content": [
            {"endIndex": 1, "sectionBreak": {}},
            {
                "startIndex": 1,
                "endIndex": end_index,
                "paragraph": {"elements": [
                    {"startIndex": 1, "endIndex": end_index, "textRun": {"content": text + "\n"}},
                ]},
            },
        ]},
    }


class TestListCommentsImpl:
    """Tests for _list_comments_impl."""

    @pytest.mark.asyncio
    async def test_includes_anchor_and_quoted_content(self):
        """Anchors and quoted text are shown for each comment."""
        mock_service = MagicMock()
        mock_service.comments.return_value.list.return_value.execute.return_value = {
            "comments": [_comment(anchor='{"r":"doc"}', quotedFileContent={"value": "quoted"})]
        }

        result = await _list_comments_impl(mock_service, "doc123")

        assert "Found 1 comments in document doc123:" in result
        assert 'Anchor: {"r":"doc"}' in result
        assert "Quoted content: quoted" in result

    @pytest.mark.asyncio
    async def test_follows_pagination(self):
        """Every page of comments is read."""
        mock_service = MagicMock()
        mock_service.comments.return_value.list.return_value.execute.side_effect = [
            {"comments": [_comment("c1")], "nextPageToken": "page2"},
            {"comments": [_comment("c2")]},
        ]

        result = await _list_comments_impl(mock_service, "doc123")

        assert "Comment ID: c1" in result
        assert "Comment ID: c2" in result
        page_tokens = [
            call.kwargs["pageToken"] for call in mock_service.comments.return_value.list.call_args_list
        ]
        assert page_tokens == [None, "page2"]

    @pytest.mark.asyncio
    async def test_no_comments(self):
        mock_service = MagicMock()
        mock_service.comments.return_value.list.return_value.execute.return_value = {"comments": []}
        assert await _list_comments_impl(mock_service, "doc123") == "No comments found in document doc123"

    @pytest.mark.asyncio
    async def test_missing_document(self):
        """A 404 from Drive becomes DocumentNotFound."""
        mock_resp = MagicMock()
        mock_resp.status = 404
        mock_resp.reason = "Not Found"
        mock_service = MagicMock()
        mock_service.comments.return_value.list.return_value.execute.side_effect = HttpError(
            mock_resp, b"File not found"
        )
        with pytest.raises(DocumentNotFound):
            await _list_comments_impl(mock_service, "missing")


class TestGetAndReply:
    """Tests for _get_comment_impl and _reply_to_comment_impl."""

    @pytest.mark.asyncio
    async def test_get_comment_shows_replies(self):
        mock_service = MagicMock()
        mock_service.comments.return_value.get.return_value.execute.return_value = _comment(
            resolved=True,
            replies=[{"id": "r1", "content": "Agreed", "author": {"displayName": "Other"}}],
        )

        result = await _get_comment_impl(mock_service, "doc123", "c1")

        assert "[RESOLVED]" in result
        assert "Replies (1):" in result
        assert "    Content: Agreed" in result

    @pytest.mark.asyncio
    async def test_reply(self):
        mock_service = MagicMock()
        mock_service.replies.return_value.create.return_value.execute.return_value = {
            "id": "r9", "author": {"displayName": "Me"}, "createdTime": "2024-02-02T00:00:00Z"
        }

        result = await _reply_to_comment_impl(mock_service, "doc123", "c1", "Thanks")

        assert "Reply ID: r9" in result
        assert mock_service.replies.return_value.create.call_args.kwargs["body"] == {"content": "Thanks"}


class TestAddCommentImpl:
    """Tests for _add_comment_impl."""

    @pytest.mark.asyncio
    async def test_quotes_range_and_builds_anchor(self):
        docs_service = MagicMock()
        docs_service.documents.return_value.get.return_value.execute.return_value = _doc_with_text(
            "Hello world"
        )
        drive_service = MagicMock()
        drive_service.comments.return_value.create.return_value.execute.return_value = _comment(
            "c5", "Check this", quotedFileContent={"value": "world"}
        )

        result = await _add_comment_impl(docs_service, drive_service, "doc123", 7, 12, "Check this")

        body = drive_service.comments.return_value.create.call_args.kwargs["body"]
        assert body["content"] == "Check this"
        assert body["quotedFileContent"] == {"value": "world", "mimeType": "text/html"}
        assert json.loads(body["anchor"]) == {
            "r": "doc123", "a": [{"txt": {"o": 6, "l": 5, "ml": 5}}]
        }
        assert result.startswith("Comment created successfully!")
        assert "Comment ID: c5" in result

    def test_anchor_offsets_are_zero_based(self):
        assert json.loads(build_text_anchor("d", 1, 4))["a"][0]["txt"]["o"] == 0


class TestResolveCommentImpl:
    """Tests for _resolve_comment_impl."""

    @pytest.mark.asyncio
    async def test_resolves_with_update(self):
        """The comment is updated with resolved=True and verified."""
        mock_service = MagicMock()
        mock_service.comments.return_value.get.return_value.execute.side_effect = [
            {"content": "Original"},
            {"resolved": True},
        ]

        result = await _resolve_comment_impl(mock_service, "doc123", "c1")

        assert result == "Comment c1 has been marked as resolved."
        update_kwargs = mock_service.comments.return_value.update.call_args.kwargs
        assert update_kwargs["body"] == {"content": "Original", "resolved": True}
        mock_service.replies.return_value.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_falls_back_to_resolve_reply(self):
        mock_service = MagicMock()
        mock_service.comments.return_value.get.return_value.execute.side_effect = [
            {"content": "Original"},
            {"resolved": False},
            {"resolved": True},
        ]

        result = await _resolve_comment_impl(mock_service, "doc123", "c1")

        assert result == "Comment c1 has been marked as resolved."
        reply_body = mock_service.replies.return_value.create.call_args.kwargs["body"]
        assert reply_body["action"] == "resolve"

    @pytest.mark.asyncio
    async def test_reports_when_status_does_not_persist(self):
        mock_service = MagicMock()
        mock_service.comments.return_value.get.return_value.execute.side_effect = [
            {"content": "Original"},
            {"resolved": False},
            {"resolved": False},
        ]

        result = await _resolve_comment_impl(mock_service, "doc123", "c1")

        assert "did not persist" in result


class TestDeleteAndTools:
    """Tests for deletion and tool registration."""

    @pytest.mark.asyncio
    async def test_delete(self):
        mock_service = MagicMock()
        result = await _delete_comment_impl(mock_service, "doc123", "c1")
        mock_service.comments.return_value.delete.assert_called_once_with(fileId="doc123", commentId="c1")
        assert result == "Comment c1 has been deleted."

    def test_comment_from_api_defaults(self):
        comment = Comment.from_api({"id": "c1"})
        assert comment.author == "Unknown"
        assert comment.quoted_text is None
        assert comment.replies == []

    @pytest.mark.asyncio
    async def test_tools_registered_and_validate_range(self):
        server = MagicMock()
        clients = MagicMock()

        tools = create_comment_tools(server, clients)

        assert set(tools) == {
            "list_comments", "get_comment", "add_comment",
            "reply_to_comment", "resolve_comment", "delete_comment",
        }
        assert server.tool.call_count == 6
        parsed = json.loads(await tools["add_comment"](
            document_id="doc123", start_index=10, end_index=4, comment_text="x"
        ))
        assert parsed["code"] == "INVALID_INDEX_RANGE"
        clients.docs.documents.assert_not_called()
