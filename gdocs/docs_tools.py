"""
Google Docs MCP Tools

This module provides MCP tools for reading and editing Google Docs. Every tool
resolves its target (tab, text match, paragraph or explicit range) against a
fresh document snapshot, builds the batchUpdate requests and submits them as a
single atomic batch.
"""

import json
import logging
from typing import Any, Dict, List, Literal, Optional

from core.config import DEFAULT_READ_FORMAT
from core.utils import handle_docs_errors
from gdocs.docs_helpers import (
    ParagraphStyleArgs,
    TextStyleArgs,
    build_paragraph_style,
    build_paragraph_style_request,
    build_text_style,
    build_text_style_request,
    create_delete_range_request,
    create_insert_image_request,
    create_insert_page_break_request,
    create_insert_table_request,
    create_insert_text_request,
    detect_and_format_lists,
)
from gdocs.docs_images import get_parent_folder_id, upload_image_to_drive
from gdocs.docs_locator import (
    TextRange,
    find_all_text_ranges,
    find_text_range,
    get_paragraph_range,
    get_table_cell_range,
)
from gdocs.docs_markdown import project
from gdocs.docs_model import FlatTextSequence
from gdocs.docs_tabs import get_document, get_tab_text_length, list_tabs, resolve_tab
from gdocs.errors import (
    DocsErrorBuilder,
    InvalidParameter,
    NotImplementedFeature,
    ParagraphNotFound,
    TextNotFound,
)
from gdocs.managers.batch_operation_manager import BatchOperationManager
from gdocs.managers.validation_manager import ValidationManager

logger = logging.getLogger(__name__)

validator = ValidationManager()


async def _verify_tab(docs_service, document_id: str, tab_id: Optional[str]) -> None:
    """Fail with TabNotFound/TabHasNoContent before submitting a batch to a missing tab."""
    if tab_id:
        doc_data = await get_document(docs_service, document_id)
        resolve_tab(doc_data, tab_id)


async def _load_flat(docs_service, document_id: str, tab_id: Optional[str]) -> FlatTextSequence:
    doc_data = await get_document(docs_service, document_id)
    return resolve_tab(doc_data, tab_id).flatten()


def _tab_note(tab_id: Optional[str]) -> str:
    return f" in tab {tab_id}" if tab_id else ""


def _size_note(width: Optional[float], height: Optional[float]) -> str:
    if width and height:
        return f" with size {width}x{height}pt"
    return ""


def _locate_text(
    flat: FlatTextSequence,
    text_to_find: str,
    match_instance: int,
    tab_id: Optional[str]
) -> TextRange:
    """Resolve the match_instance-th occurrence of text_to_find or raise TextNotFound."""
    text_range = find_text_range(flat, text_to_find, match_instance, tab_id)
    if text_range is None:
        total_found = len(find_all_text_ranges(flat, text_to_find, tab_id))
        raise TextNotFound(
            DocsErrorBuilder.search_text_not_found(text_to_find, match_instance, total_found)
        )
    return text_range


def _require_range_target(start_index: Optional[int], end_index: Optional[int]) -> None:
    if start_index is None or end_index is None:
        raise InvalidParameter(DocsErrorBuilder.invalid_param_value(
            "target",
            {"start_index": start_index, "end_index": end_index},
            "start_index and end_index, or text_to_find"
        ))
    validator.validate_index_range(start_index, end_index)


async def _read_doc_impl(
    docs_service,
    document_id: str,
    fmt: str = "text",
    max_length: Optional[int] = None,
    tab_id: Optional[str] = None
) -> str:
    validator.validate_read_format(fmt)
    validator.validate_max_length(max_length)
    logger.info(f"[read_doc] Reading document {document_id}, format={fmt}{_tab_note(tab_id)}")

    doc_data = await get_document(docs_service, document_id)
    tab = resolve_tab(doc_data, tab_id)

    if fmt == "json":
        source = doc_data if tab.is_implicit_root else {"tabId": tab.tab_id, "body": tab.body}
        json_content = json.dumps(source, indent=2)
        if max_length is not None and len(json_content) > max_length:
            return json_content[:max_length] + f"\n... [JSON truncated: {len(json_content)} total chars]"
        return json_content

    result = project(tab.flatten(), fmt, max_length)
    if not result.content.strip():
        return "Document found, but appears empty."

    if fmt == "markdown":
        if result.truncated:
            return (
                f"{result.content}\n\n... [Markdown truncated to {result.returned_length} chars of "
                f"{result.total_length} total. Use max_length to adjust the limit or remove it "
                "to get the full content.]"
            )
        return result.content

    if result.truncated:
        remaining = result.total_length - result.returned_length
        return (
            f"Content (truncated to {result.returned_length} chars of {result.total_length} total):\n"
            f"---\n{result.content}\n\n... [Document continues for {remaining} more characters. "
            "Use max_length to adjust the limit or remove it to get the full content.]"
        )
    return f"Content ({result.total_length} characters):\n---\n{result.content}"


async def _list_doc_tabs_impl(docs_service, document_id: str, include_content: bool = False) -> str:
    logger.info(f"[list_doc_tabs] Listing tabs for document {document_id}")

    doc_data = await get_document(docs_service, document_id)
    doc_title = doc_data.get("title", "Untitled Document")
    tabs = list_tabs(doc_data)
    single = len(tabs) == 1

    out = [
        f"Document: '{doc_title}' (ID: {document_id})",
        f"Total tabs: {len(tabs)}" + (" (single-tab document)" if single else ""),
        "",
        "Tabs:",
    ]
    for tab in tabs:
        indent = "  " * tab.level
        hierarchy_marker = "└─ " if tab.level > 0 else ""
        details = f"tab_id: {tab.tab_id or '(default)'}, index: {tab.index}"
        if tab.parent_tab_id:
            details += f", parent: {tab.parent_tab_id}"
        line = f"{indent}{hierarchy_marker}'{tab.title or 'Untitled Tab'}' ({details})"
        if include_content:
            length = get_tab_text_length(tab)
            line += f" - {length:,} chars" if length else " - Empty"
        out.append(line)

    if not single:
        out.append("")
        out.append("TIP: Pass a tab_id to the editing tools to target a specific tab.")
    return "\n".join(out)


async def _append_to_doc_impl(
    docs_service,
    document_id: str,
    text: str,
    add_newline_if_needed: bool = True,
    tab_id: Optional[str] = None
) -> str:
    if not text:
        return "Nothing to append."

    flat = await _load_flat(docs_service, document_id, tab_id)
    # The final newline of a body cannot be written past
    index = max(1, flat.end_index - 1)
    if add_newline_if_needed and index > 1:
        text = "\n" + text

    logger.info(f"[append_to_doc] Appending {len(text)} chars at index {index} of {document_id}")
    await BatchOperationManager(docs_service).execute_batch(
        document_id, [create_insert_text_request(index, text, tab_id)]
    )
    return f"Successfully appended text to {f'tab {tab_id} in ' if tab_id else ''}document {document_id}."


async def _insert_text_impl(
    docs_service,
    document_id: str,
    text: str,
    index: int,
    tab_id: Optional[str] = None
) -> str:
    validator.validate_index(index)
    await _verify_tab(docs_service, document_id, tab_id)

    logger.info(f"[insert_text] Inserting {len(text)} chars at index {index} of {document_id}")
    await BatchOperationManager(docs_service).execute_batch(
        document_id, [create_insert_text_request(index, text, tab_id)]
    )
    return f"Successfully inserted text at index {index}{_tab_note(tab_id)}."


async def _delete_range_impl(
    docs_service,
    document_id: str,
    start_index: int,
    end_index: int,
    tab_id: Optional[str] = None
) -> str:
    validator.validate_index_range(start_index, end_index)
    await _verify_tab(docs_service, document_id, tab_id)

    logger.info(f"[delete_range] Deleting {start_index}-{end_index} of {document_id}")
    await BatchOperationManager(docs_service).execute_batch(
        document_id, [create_delete_range_request(start_index, end_index, tab_id)]
    )
    return f"Successfully deleted content in range {start_index}-{end_index}{_tab_note(tab_id)}."


async def _apply_text_style_impl(
    docs_service,
    document_id: str,
    style: TextStyleArgs,
    start_index: Optional[int] = None,
    end_index: Optional[int] = None,
    text_to_find: Optional[str] = None,
    match_instance: int = 1,
    tab_id: Optional[str] = None
) -> str:
    """
    Apply character styling to an explicit range or to the Nth match of a text.

    The style is validated before the document is fetched, so malformed colors,
    links or sizes never cost a remote call.
    """
    validator.validate_font_size(style.font_size)
    validator.validate_color(style.foreground_color, "foreground_color")
    validator.validate_color(style.background_color, "background_color")
    _, fields = build_text_style(style)
    if not fields:
        return "No valid text styling options were provided."

    if text_to_find is not None:
        validator.validate_search_target(text_to_find, match_instance)
        flat = await _load_flat(docs_service, document_id, tab_id)
        text_range = _locate_text(flat, text_to_find, match_instance, tab_id)
    else:
        _require_range_target(start_index, end_index)
        await _verify_tab(docs_service, document_id, tab_id)
        text_range = TextRange(start_index, end_index, tab_id)

    style_request = build_text_style_request(text_range, style)
    await BatchOperationManager(docs_service).execute_batch(document_id, [style_request.request])

    logger.info(
        f"[apply_text_style] Styled {text_range.start_index}-{text_range.end_index} of {document_id} "
        f"(fields: {','.join(style_request.fields)})"
    )
    return (
        f"Successfully applied text style ({', '.join(style_request.fields)}) to range "
        f"{text_range.start_index}-{text_range.end_index}."
    )


async def _apply_paragraph_style_impl(
    docs_service,
    document_id: str,
    style: ParagraphStyleArgs,
    start_index: Optional[int] = None,
    end_index: Optional[int] = None,
    text_to_find: Optional[str] = None,
    match_instance: int = 1,
    index_within_paragraph: Optional[int] = None,
    tab_id: Optional[str] = None
) -> str:
    """
    Apply paragraph styling.

    The target is resolved in this order: text_to_find (the paragraph holding the
    match), index_within_paragraph (the paragraph holding that offset), then an
    explicit start_index/end_index range.
    """
    _, fields = build_paragraph_style(style)
    if not fields:
        return "No valid paragraph styling options were provided."

    if text_to_find is not None:
        validator.validate_search_target(text_to_find, match_instance)
        flat = await _load_flat(docs_service, document_id, tab_id)
        match = _locate_text(flat, text_to_find, match_instance, tab_id)
        text_range = get_paragraph_range(flat, match.start_index, tab_id)
        if text_range is None:
            raise ParagraphNotFound(DocsErrorBuilder.paragraph_not_found(match.start_index))
    elif index_within_paragraph is not None:
        validator.validate_index(index_within_paragraph, "index_within_paragraph")
        flat = await _load_flat(docs_service, document_id, tab_id)
        text_range = get_paragraph_range(flat, index_within_paragraph, tab_id)
        if text_range is None:
            raise ParagraphNotFound(DocsErrorBuilder.paragraph_not_found(index_within_paragraph))
    else:
        _require_range_target(start_index, end_index)
        await _verify_tab(docs_service, document_id, tab_id)
        text_range = TextRange(start_index, end_index, tab_id)

    style_request = build_paragraph_style_request(text_range, style)
    await BatchOperationManager(docs_service).execute_batch(document_id, [style_request.request])

    logger.info(
        f"[apply_paragraph_style] Styled paragraph {text_range.start_index}-{text_range.end_index} "
        f"of {document_id} (fields: {','.join(style_request.fields)})"
    )
    return (
        f"Successfully applied paragraph styles ({', '.join(style_request.fields)}) to the paragraph "
        f"at {text_range.start_index}-{text_range.end_index}."
    )


async def _insert_table_impl(
    docs_service,
    document_id: str,
    rows: int,
    columns: int,
    index: int,
    tab_id: Optional[str] = None
) -> str:
    validator.validate_table_dimensions(rows, columns)
    validator.validate_index(index)
    await _verify_tab(docs_service, document_id, tab_id)

    logger.info(f"[insert_table] Inserting {rows}x{columns} table at index {index} of {document_id}")
    await BatchOperationManager(docs_service).execute_batch(
        document_id, [create_insert_table_request(index, rows, columns, tab_id)]
    )
    return f"Successfully inserted a {rows}x{columns} table at index {index}{_tab_note(tab_id)}."


async def _edit_table_cell_impl(
    docs_service,
    document_id: str,
    table_start_index: int,
    row_index: int,
    column_index: int,
    text_content: Optional[str] = None,
    tab_id: Optional[str] = None
) -> str:
    """Replace the content of one table cell. Fails while cell ranges cannot be resolved."""
    flat = await _load_flat(docs_service, document_id, tab_id)
    cell_range = get_table_cell_range(flat, table_start_index, row_index, column_index)

    requests = [create_delete_range_request(cell_range.start_index, cell_range.end_index, tab_id)]
    if text_content:
        requests.append(create_insert_text_request(cell_range.start_index, text_content, tab_id))
    await BatchOperationManager(docs_service).execute_batch(document_id, requests)
    return f"Successfully edited cell ({row_index}, {column_index}) of the table at {table_start_index}."


async def _insert_page_break_impl(
    docs_service,
    document_id: str,
    index: int,
    tab_id: Optional[str] = None
) -> str:
    validator.validate_index(index)
    await _verify_tab(docs_service, document_id, tab_id)

    logger.info(f"[insert_page_break] Inserting page break at index {index} of {document_id}")
    await BatchOperationManager(docs_service).execute_batch(
        document_id, [create_insert_page_break_request(index, tab_id)]
    )
    return f"Successfully inserted page break at index {index}{_tab_note(tab_id)}."


async def _insert_image_from_url_impl(
    docs_service,
    document_id: str,
    image_url: str,
    index: int,
    width: Optional[float] = None,
    height: Optional[float] = None,
    tab_id: Optional[str] = None
) -> str:
    validator.validate_url(image_url, "image_url")
    validator.validate_index(index)
    validator.validate_image_size(width, height)
    await _verify_tab(docs_service, document_id, tab_id)

    logger.info(f"[insert_image_from_url] Inserting {image_url} at index {index} of {document_id}")
    await BatchOperationManager(docs_service).execute_batch(
        document_id, [create_insert_image_request(index, image_url, width, height, tab_id)]
    )
    return f"Successfully inserted image from URL at index {index}{_size_note(width, height)}."


async def _insert_local_image_impl(
    docs_service,
    drive_service,
    document_id: str,
    local_image_path: str,
    index: int,
    width: Optional[float] = None,
    height: Optional[float] = None,
    upload_to_same_folder: bool = True,
    tab_id: Optional[str] = None
) -> str:
    """Upload a local image to Drive, then insert it by its shareable URL."""
    validator.validate_local_image_path(local_image_path)
    validator.validate_index(index)
    validator.validate_image_size(width, height)
    await _verify_tab(docs_service, document_id, tab_id)

    parent_folder_id = None
    if upload_to_same_folder:
        parent_folder_id = await get_parent_folder_id(drive_service, document_id)
        if parent_folder_id:
            logger.info(f"[insert_local_image] Uploading into the document's folder {parent_folder_id}")

    image_url = await upload_image_to_drive(drive_service, local_image_path, parent_folder_id)

    await BatchOperationManager(docs_service).execute_batch(
        document_id, [create_insert_image_request(index, image_url, width, height, tab_id)]
    )
    logger.info(f"[insert_local_image] Inserted {local_image_path} at index {index} of {document_id}")
    return (
        f"Successfully uploaded image to Drive and inserted it at index {index}"
        f"{_size_note(width, height)}.\nImage URL: {image_url}"
    )


async def _fix_list_formatting_impl(
    docs_service,
    document_id: str,
    start_index: Optional[int] = None,
    end_index: Optional[int] = None,
    tab_id: Optional[str] = None
) -> str:
    if start_index is not None and end_index is not None:
        validator.validate_index_range(start_index, end_index)

    flat = await _load_flat(docs_service, document_id, tab_id)
    requests = detect_and_format_lists(flat, start_index, end_index, tab_id)
    if not requests:
        return "No plain-text lists were found to convert."

    list_count = sum(1 for r in requests if "createParagraphBullets" in r)
    await BatchOperationManager(docs_service).execute_batch(document_id, requests)
    logger.info(f"[fix_list_formatting] Converted {list_count} lists in {document_id}")
    return (
        f"Converted {list_count} plain-text list{'s' if list_count != 1 else ''} to formatted lists. "
        "Please review the document for accuracy."
    )


def _text_style_args(
    bold, italic, underline, strikethrough, font_size, font_family,
    foreground_color, background_color, link_url
) -> TextStyleArgs:
    return TextStyleArgs(
        bold=bold,
        italic=italic,
        underline=underline,
        strikethrough=strikethrough,
        font_size=font_size,
        font_family=font_family,
        foreground_color=foreground_color,
        background_color=background_color,
        link_url=link_url,
    )


def create_docs_tools(server, clients) -> Dict[str, Any]:
    """
    Register the Google Docs tools on a FastMCP server.

    Args:
        server: The FastMCP instance to register on
        clients: ClientSet providing the Docs and Drive services

    Returns:
        Dict of the tool functions, keyed by tool name
    """

    @handle_docs_errors("read_doc")
    async def read_doc(
        document_id: str,
        format: Literal["text", "json", "markdown"] = DEFAULT_READ_FORMAT,
        max_length: Optional[int] = None,
        tab_id: Optional[str] = None,
    ) -> str:
        """
        Reads the content of a Google Doc.

        Args:
            document_id: The ID of the Google Doc
            format: 'text' for plain text, 'markdown' for a Markdown rendering, 'json' for the raw structure
            max_length: Optional cap on the returned content, in characters
            tab_id: Optional tab to read. Defaults to the first tab.
        """
        validator.validate_document_id(document_id)
        return await _read_doc_impl(clients.docs, document_id, format, max_length, tab_id)

    @handle_docs_errors("list_doc_tabs")
    async def list_doc_tabs(document_id: str, include_content: bool = False) -> str:
        """
        Lists all tabs in a Google Doc, including nested child tabs.

        The tab_id values can be passed to the other tools to target a specific tab.
        With include_content, each tab's character count is reported as well.
        """
        validator.validate_document_id(document_id)
        return await _list_doc_tabs_impl(clients.docs, document_id, include_content)

    @handle_docs_errors("append_to_doc")
    async def append_to_doc(
        document_id: str,
        text: str,
        add_newline_if_needed: bool = True,
        tab_id: Optional[str] = None,
    ) -> str:
        """Appends text to the end of a document (or of one tab)."""
        validator.validate_document_id(document_id)
        return await _append_to_doc_impl(clients.docs, document_id, text, add_newline_if_needed, tab_id)

    @handle_docs_errors("insert_text")
    async def insert_text(document_id: str, text: str, index: int, tab_id: Optional[str] = None) -> str:
        """Inserts text at a 1-based index."""
        validator.validate_document_id(document_id)
        return await _insert_text_impl(clients.docs, document_id, text, index, tab_id)

    @handle_docs_errors("delete_range")
    async def delete_range(
        document_id: str, start_index: int, end_index: int, tab_id: Optional[str] = None
    ) -> str:
        """Deletes the content in [start_index, end_index)."""
        validator.validate_document_id(document_id)
        return await _delete_range_impl(clients.docs, document_id, start_index, end_index, tab_id)

    @handle_docs_errors("apply_text_style")
    async def apply_text_style(
        document_id: str,
        start_index: Optional[int] = None,
        end_index: Optional[int] = None,
        text_to_find: Optional[str] = None,
        match_instance: int = 1,
        bold: Optional[bool] = None,
        italic: Optional[bool] = None,
        underline: Optional[bool] = None,
        strikethrough: Optional[bool] = None,
        font_size: Optional[float] = None,
        font_family: Optional[str] = None,
        foreground_color: Optional[str] = None,
        background_color: Optional[str] = None,
        link_url: Optional[str] = None,
        tab_id: Optional[str] = None,
    ) -> str:
        """
        Applies character formatting to a range or to the Nth occurrence of a text.

        Target either start_index/end_index, or text_to_find with match_instance
        (1-based, case-sensitive). Only the attributes that are given are changed.
        Colors are hex ('#FF0000', '#F00' or 'FF0000').
        """
        validator.validate_document_id(document_id)
        style = _text_style_args(
            bold, italic, underline, strikethrough, font_size, font_family,
            foreground_color, background_color, link_url
        )
        return await _apply_text_style_impl(
            clients.docs, document_id, style, start_index, end_index, text_to_find, match_instance, tab_id
        )

    @handle_docs_errors("apply_paragraph_style")
    async def apply_paragraph_style(
        document_id: str,
        start_index: Optional[int] = None,
        end_index: Optional[int] = None,
        text_to_find: Optional[str] = None,
        match_instance: int = 1,
        index_within_paragraph: Optional[int] = None,
        alignment: Optional[Literal["START", "CENTER", "END", "JUSTIFIED"]] = None,
        named_style_type: Optional[str] = None,
        indent_start: Optional[float] = None,
        indent_end: Optional[float] = None,
        indent_first_line: Optional[float] = None,
        space_above: Optional[float] = None,
        space_below: Optional[float] = None,
        line_spacing: Optional[float] = None,
        keep_with_next: Optional[bool] = None,
        tab_id: Optional[str] = None,
    ) -> str:
        """
        Applies paragraph formatting to the paragraph containing a text or an index, or to a range.

        named_style_type is one of NORMAL_TEXT, TITLE, SUBTITLE, HEADING_1 to HEADING_6.
        Indents and spacing are in points, line_spacing in percent (100 = single).
        """
        validator.validate_document_id(document_id)
        style = ParagraphStyleArgs(
            alignment=alignment,
            named_style_type=named_style_type,
            indent_start=indent_start,
            indent_end=indent_end,
            indent_first_line=indent_first_line,
            space_above=space_above,
            space_below=space_below,
            line_spacing=line_spacing,
            keep_with_next=keep_with_next,
        )
        return await _apply_paragraph_style_impl(
            clients.docs, document_id, style, start_index, end_index,
            text_to_find, match_instance, index_within_paragraph, tab_id
        )

    @handle_docs_errors("format_matching_text")
    async def format_matching_text(
        document_id: str,
        text_to_find: str,
        match_instance: int = 1,
        bold: Optional[bool] = None,
        italic: Optional[bool] = None,
        underline: Optional[bool] = None,
        strikethrough: Optional[bool] = None,
        font_size: Optional[float] = None,
        font_family: Optional[str] = None,
        foreground_color: Optional[str] = None,
        background_color: Optional[str] = None,
        link_url: Optional[str] = None,
        tab_id: Optional[str] = None,
    ) -> str:
        """Finds the Nth occurrence of a text and applies character formatting to it."""
        validator.validate_document_id(document_id)
        style = _text_style_args(
            bold, italic, underline, strikethrough, font_size, font_family,
            foreground_color, background_color, link_url
        )
        result = await _apply_text_style_impl(
            clients.docs, document_id, style,
            text_to_find=text_to_find, match_instance=match_instance, tab_id=tab_id
        )
        if result.startswith("Successfully"):
            return f"Successfully applied formatting to instance {match_instance} of \"{text_to_find}\"."
        return result

    @handle_docs_errors("insert_table")
    async def insert_table(
        document_id: str, rows: int, columns: int, index: int, tab_id: Optional[str] = None
    ) -> str:
        """Inserts an empty table (1-1000 rows, 1-20 columns) at a 1-based index."""
        validator.validate_document_id(document_id)
        return await _insert_table_impl(clients.docs, document_id, rows, columns, index, tab_id)

    @handle_docs_errors("edit_table_cell")
    async def edit_table_cell(
        document_id: str,
        table_start_index: int,
        row_index: int,
        column_index: int,
        text_content: Optional[str] = None,
        tab_id: Optional[str] = None,
    ) -> str:
        """Edits the content of a single table cell. Not supported."""
        validator.validate_document_id(document_id)
        logger.warning(
            f"[edit_table_cell] Requested cell ({row_index}, {column_index}) of table at "
            f"{table_start_index} in {document_id}"
        )
        return await _edit_table_cell_impl(
            clients.docs, document_id, table_start_index, row_index, column_index, text_content, tab_id
        )

    @handle_docs_errors("insert_page_break")
    async def insert_page_break(document_id: str, index: int, tab_id: Optional[str] = None) -> str:
        """Inserts a page break at a 1-based index."""
        validator.validate_document_id(document_id)
        return await _insert_page_break_impl(clients.docs, document_id, index, tab_id)

    @handle_docs_errors("insert_image_from_url")
    async def insert_image_from_url(
        document_id: str,
        image_url: str,
        index: int,
        width: Optional[float] = None,
        height: Optional[float] = None,
        tab_id: Optional[str] = None,
    ) -> str:
        """Inserts an inline image from a publicly accessible http(s) URL. Sizes are in points."""
        validator.validate_document_id(document_id)
        return await _insert_image_from_url_impl(
            clients.docs, document_id, image_url, index, width, height, tab_id
        )

    @handle_docs_errors("insert_local_image")
    async def insert_local_image(
        document_id: str,
        local_image_path: str,
        index: int,
        width: Optional[float] = None,
        height: Optional[float] = None,
        upload_to_same_folder: bool = True,
        tab_id: Optional[str] = None,
    ) -> str:
        """
        Uploads a local image file to Google Drive and inserts it into the document.

        The file is placed in the document's folder when upload_to_same_folder is
        set (falling back to the Drive root) and made readable by link.
        """
        validator.validate_document_id(document_id)
        return await _insert_local_image_impl(
            clients.docs, clients.drive, document_id, local_image_path, index,
            width, height, upload_to_same_folder, tab_id
        )

    @handle_docs_errors("fix_list_formatting")
    async def fix_list_formatting(
        document_id: str,
        start_index: Optional[int] = None,
        end_index: Optional[int] = None,
        tab_id: Optional[str] = None,
    ) -> str:
        """
        EXPERIMENTAL: Converts paragraphs typed as '- item', '* item', '1. item' or '1) item' into real lists.

        Only plain NORMAL_TEXT paragraphs outside tables are considered.
        """
        validator.validate_document_id(document_id)
        return await _fix_list_formatting_impl(clients.docs, document_id, start_index, end_index, tab_id)

    @handle_docs_errors("find_element")
    async def find_element(
        document_id: str,
        text_query: Optional[str] = None,
        element_type: Optional[Literal["paragraph", "table", "list", "image"]] = None,
    ) -> str:
        """Finds elements by complex criteria. Not supported."""
        logger.warning(f"[find_element] Requested element search in {document_id}")
        raise NotImplementedFeature(DocsErrorBuilder.not_implemented(
            "Finding elements by complex criteria",
            "Element queries beyond literal text search are not supported."
        ))

    tools: Dict[str, Any] = {}
    registered: List[Any] = [
        read_doc, list_doc_tabs, append_to_doc, insert_text, delete_range,
        apply_text_style, apply_paragraph_style, format_matching_text,
        insert_table, edit_table_cell, insert_page_break,
        insert_image_from_url, insert_local_image, fix_list_formatting, find_element,
    ]
    for tool in registered:
        server.tool()(tool)
        tools[tool.__name__] = tool
    return tools
