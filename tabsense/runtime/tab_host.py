"""
Live tab set as reported by the browser extension.

The extension is the source of truth for which tabs exist. It pushes lifecycle
events (and page HTML on load completion) to the API, which mirrors them into
a LiveTabRegistry. The controller, the extractor, the cleanup sweep and the
tab listing all read tabs through the TabHost protocol.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Protocol

from pydantic import BaseModel, ConfigDict, Field

from tabsense.observability.logging import get_logger

logger = get_logger(__name__)


class Tab(BaseModel):
    """Host tab state, field names as the chrome.tabs API sends them."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: int
    title: str | None = None
    url: str | None = None
    fav_icon_url: str | None = Field(default=None, alias="favIconUrl")
    window_id: int | None = Field(default=None, alias="windowId")
    pinned: bool = False
    active: bool = False
    status: str | None = None


class TabHost(Protocol):
    async def get_tab(self, tab_id: int) -> Tab | None: ...

    async def query_tabs(self) -> list[Tab]: ...

    async def get_page_html(self, tab_id: int) -> str | None: ...

    @property
    def synced(self) -> bool:
        """True once the host has reported its complete tab list."""
        ...


class LiveTabRegistry:
    """
    In-memory TabHost fed by extension events.

    Holds the latest Tab per id and the most recent HTML snapshot of each
    tab's page. Process-scoped; empty at startup until the extension sends a
    snapshot or its first events. Single events only ever show part of the
    browser, so the set counts as ``synced`` only after a full snapshot.
    """

    def __init__(self) -> None:
        self._tabs: dict[int, Tab] = {}
        self._pages: dict[int, str] = {}
        self._synced = False

    @property
    def synced(self) -> bool:
        return self._synced

    async def get_tab(self, tab_id: int) -> Tab | None:
        return self._tabs.get(tab_id)

    async def query_tabs(self) -> list[Tab]:
        return list(self._tabs.values())

    async def get_page_html(self, tab_id: int) -> str | None:
        return self._pages.get(tab_id)

    def upsert(self, tab: Tab, html: str | None = None) -> None:
        """Record new tab state; a page snapshot replaces the previous one."""
        self._tabs[tab.id] = tab
        if html is not None:
            self._pages[tab.id] = html

    def remove(self, tab_id: int) -> None:
        self._tabs.pop(tab_id, None)
        self._pages.pop(tab_id, None)

    def replace_all(self, tabs: Iterable[Tab], pages: Mapping[int, str] | None = None) -> None:
        """Reset the live set to exactly ``tabs`` (extension startup snapshot)."""
        new_tabs = {tab.id: tab for tab in tabs}
        self._pages = {
            tab_id: html for tab_id, html in self._pages.items() if tab_id in new_tabs
        }
        for tab_id, html in (pages or {}).items():
            if tab_id in new_tabs:
                self._pages[tab_id] = html
        self._tabs = new_tabs
        self._synced = True
        logger.info("Live tab set replaced: %d tabs", len(new_tabs))

    def __len__(self) -> int:
        return len(self._tabs)
