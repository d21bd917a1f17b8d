"""
Google Docs Tab Resolution

Documents fetched with includeTabsContent=True expose a 'tabs' list whose entries
may nest further tabs under 'childTabs'. Documents that predate tabs (or were
fetched without tab content) only carry a root 'body', which is treated as a
single implicit tab without an identifier.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Optional

from googleapiclient.errors import HttpError

from core.utils import translate_http_error
from gdocs.docs_model import FlatTextSequence, flatten_body, utf16_len
from gdocs.errors import DocsErrorBuilder, TabHasNoContent, TabNotFound

logger = logging.getLogger(__name__)


@dataclass
class DocumentTab:
    """A tab of a document, or the implicit root of a legacy document."""
    tab_id: Optional[str]
    title: str
    index: int
    parent_tab_id: Optional[str]
    level: int
    body: Optional[dict[str, Any]]

    @property
    def is_implicit_root(self) -> bool:
        return self.tab_id is None

    def flatten(self) -> FlatTextSequence:
        """Flatten this tab's body. Raises TabHasNoContent for non-document tabs."""
        if self.body is None:
            raise TabHasNoContent(DocsErrorBuilder.tab_has_no_content(self.tab_id or "(default)"))
        return flatten_body(self.body)


def _to_document_tab(tab: dict[str, Any], level: int) -> DocumentTab:
    props = tab.get("tabProperties", {})
    document_tab = tab.get("documentTab")
    body = None
    if document_tab is not None:
        body = document_tab.get("body", {})
    return DocumentTab(
        tab_id=props.get("tabId"),
        title=props.get("title", ""),
        index=props.get("index", 0),
        parent_tab_id=props.get("parentTabId"),
        level=level,
        body=body,
    )


def _implicit_root(doc_data: dict[str, Any]) -> DocumentTab:
    return DocumentTab(
        tab_id=None,
        title=doc_data.get("title", ""),
        index=0,
        parent_tab_id=None,
        level=0,
        body=doc_data.get("body", {}),
    )


def list_tabs(doc_data: dict[str, Any]) -> list[DocumentTab]:
    """
    List every tab of a document, depth-first with parents before their children.

    Sibling tabs are ordered by their tab index. A legacy document yields a single
    implicit root tab.
    """
    tabs = doc_data.get("tabs")
    if not tabs:
        return [_implicit_root(doc_data)]

    result: list[DocumentTab] = []

    def visit(entries: list[dict[str, Any]], level: int):
        ordered = sorted(entries, key=lambda t: t.get("tabProperties", {}).get("index", 0))
        for tab in ordered:
            result.append(_to_document_tab(tab, level))
            visit(tab.get("childTabs", []), level + 1)

    visit(tabs, 0)
    return result


def _find_tab_recursive(tabs: list[dict[str, Any]], tab_id: str, level: int = 0):
    for tab in tabs:
        if tab.get("tabProperties", {}).get("tabId") == tab_id:
            return tab, level
        found = _find_tab_recursive(tab.get("childTabs", []), tab_id, level + 1)
        if found is not None:
            return found
    return None


def resolve_tab(doc_data: dict[str, Any], tab_id: Optional[str] = None) -> DocumentTab:
    """
    Locate the tab an operation targets.

    Args:
        doc_data: Raw document data from the Docs API
        tab_id: Optional tab identifier. When omitted, the first tab by index is
            used, or the implicit root of a legacy document.

    Returns:
        The resolved DocumentTab

    Raises:
        TabNotFound: If tab_id matches no tab (including every tab id on a legacy document)
        TabHasNoContent: If the matched tab is not a document tab
    """
    tabs = doc_data.get("tabs") or []

    if tab_id is None:
        if not tabs:
            return _implicit_root(doc_data)
        first = min(tabs, key=lambda t: t.get("tabProperties", {}).get("index", 0))
        tab = _to_document_tab(first, 0)
        if tab.body is None:
            raise TabHasNoContent(DocsErrorBuilder.tab_has_no_content(tab.tab_id or "(default)"))
        return tab

    found = _find_tab_recursive(tabs, tab_id)
    if found is None:
        available = [t.tab_id for t in list_tabs(doc_data) if t.tab_id]
        logger.warning(f"Tab '{tab_id}' not found; available tabs: {available}")
        raise TabNotFound(DocsErrorBuilder.tab_not_found(tab_id, available))

    raw_tab, level = found
    tab = _to_document_tab(raw_tab, level)
    if tab.body is None:
        raise TabHasNoContent(DocsErrorBuilder.tab_has_no_content(tab_id))
    return tab


def get_tab_text_length(tab: DocumentTab) -> int:
    """Text length (paragraph runs, including table cells) of a tab in UTF-16 code units."""
    if tab.body is None:
        return 0
    return utf16_len(tab.flatten().text)


async def get_document(docs_service, document_id: str) -> dict[str, Any]:
    """
    Fetch a document snapshot with the content of every tab.

    Raises:
        DocumentNotFound, PermissionDenied, RemoteOperationFailed: On API failure
    """
    try:
        return await asyncio.to_thread(
            docs_service.documents()
            .get(documentId=document_id, includeTabsContent=True)
            .execute
        )
    except HttpError as error:
        logger.error(f"Failed to fetch document {document_id}: {error}")
        raise translate_http_error(error, document_id, operation="read document") from error
