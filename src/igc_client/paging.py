"""
Multi-page result assembly.

IGC hands back one page of results plus a ``paging.next`` locator. The locator
is an absolute URL naming whatever host IGC believes it is running on, so the
host and port are stripped and the request is re-routed through the client's
configured base URL (allowing a proxy in front of IGC).

Locators for the next page of a single asset's relationship
(``/assets/<rid>/<attribute>?...``) come back wrapped in an envelope named
after the attribute; top-level search pages come back bare. Both are handled.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional, Sequence
from urllib.parse import unquote, urlsplit, urlunsplit

from igc_client.constants import EP_ASSET, WORKFLOW_DRAFT
from igc_client.contracts.references import ItemList, Paging, Reference
from igc_client.contracts.registry import decode_json

logger = logging.getLogger(__name__)


def relative_locator(url: str) -> str:
    """Drop scheme, host and port from a locator, keeping path and query."""
    parts = urlsplit(url)
    return urlunsplit(("", "", parts.path, parts.query, parts.fragment))


def relationship_attribute(url: str) -> Optional[str]:
    """Name of the relationship a sub-resource page locator continues, if any."""
    path = urlsplit(url).path
    prefix = EP_ASSET + "/"
    idx = path.find(prefix)
    if idx < 0:
        return None
    segments = [s for s in path[idx + len(prefix):].split("/") if s]
    if len(segments) < 2:
        return None
    return unquote(segments[1])


def unwrap_page(payload: Any, attribute: Optional[str]) -> Any:
    if attribute and isinstance(payload, dict) and "items" not in payload and attribute in payload:
        return payload[attribute]
    return payload


def with_workflow_mode(url: str) -> str:
    if WORKFLOW_DRAFT in url:
        return url
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{WORKFLOW_DRAFT}"


class PageAssembler:
    def __init__(
        self,
        fetch: Callable[[str], Optional[str]],
        build_item_list: Callable[[Any], ItemList],
        workflow_enabled: bool = False,
    ) -> None:
        self.fetch = fetch
        self.build_item_list = build_item_list
        self.workflow_enabled = workflow_enabled

    def next_page(self, paging: Optional[Paging]) -> ItemList:
        """The page after ``paging``, or an empty ItemList when there is none."""
        if paging is None or not paging.has_next_page():
            return ItemList()
        locator = paging.next_page_url
        if self.workflow_enabled:
            locator = with_workflow_mode(locator)
        body = self.fetch(relative_locator(locator))
        payload = unwrap_page(decode_json(body), relationship_attribute(locator))
        return self.build_item_list(payload)

    def collect_all_pages(self, items: Optional[Sequence[Reference]], paging: Optional[Paging]) -> List[Reference]:
        """
        Follow ``paging`` to the end of the result set.

        Returns page-1 items, page-2 items, ... in the order the pages were
        requested. The caller's ``items`` are never modified.
        """
        collected: List[Reference] = list(items or [])
        current = paging
        pages = 0
        followed = set()
        while current is not None and current.has_next_page():
            locator = relative_locator(current.next_page_url)
            if locator in followed:
                logger.warning("Page locator %s was already followed; stopping after %s page(s)", locator, pages)
                break
            followed.add(locator)
            page = self.next_page(current)
            if not page.items:
                break
            collected = collected + page.items
            current = page.paging
            pages += 1
        if pages:
            logger.debug("Collected %s additional page(s), %s items in total", pages, len(collected))
        return collected
