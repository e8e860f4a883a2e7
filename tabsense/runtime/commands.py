"""
Command surface used by the extension popup.

Mirrors the runtime message protocol (``{"action": ..., ...}``):
- getAllTabs → list of tab summaries, pinned first, newest first
- refreshTab {tabId} → {success, error?}
- setApiKey {apiKey} → {success: true}

The API layer calls these directly for its REST routes and through
``dispatch`` for the generic /messages endpoint.
"""

from __future__ import annotations

from typing import Any

from tabsense.classification.models import ANALYZING_SUMMARY
from tabsense.classification.topics import Topic
from tabsense.observability.logging import get_logger
from tabsense.observability.telemetry import counter
from tabsense.runtime.controller import CycleStatus, TabEventController
from tabsense.runtime.tab_host import Tab, TabHost
from tabsense.storage.models import TabRecord, now_ms
from tabsense.storage.tab_records import TabRecordStore
from tabsense.utils.urls import extract_domain, is_web_url

logger = get_logger(__name__)

REFRESH_ERRORS = {
    CycleStatus.BUSY: "Tab is already being processed",
    CycleStatus.NO_TEXT: "Could not extract text",
    CycleStatus.FAILED: "Could not extract text",
    CycleStatus.DISCARDED: "Tab was closed",
}


class UnknownActionError(ValueError):
    """Raised by dispatch for an unsupported message action."""


def tab_view(tab: Tab, record: TabRecord | None, now: int) -> dict[str, Any]:
    """One getAllTabs entry; uncached tabs get the "still analyzing" placeholder."""
    return {
        "id": tab.id,
        "title": tab.title or "Untitled",
        "url": tab.url,
        "favIconUrl": tab.fav_icon_url,
        "windowId": tab.window_id,
        "pinned": tab.pinned,
        "active": tab.active,
        "summary": record.summary if record else ANALYZING_SUMMARY,
        "topic": record.topic.value if record else Topic.OTHER.value,
        "domain": extract_domain(tab.url),
        "timestamp": record.timestamp if record else now,
    }


def sort_tab_views(views: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Pinned tabs first, then most recently classified first."""
    return sorted(views, key=lambda view: (not view["pinned"], -view["timestamp"]))


class TabCommands:
    def __init__(self, host: TabHost, store: TabRecordStore, controller: TabEventController):
        self.host = host
        self.store = store
        self.controller = controller

    async def get_all_tabs(self) -> list[dict[str, Any]]:
        """
        Aggregated view of open web tabs joined with their cached records.

        Returns an empty list if the host or the store fails.
        """
        try:
            tabs = await self.host.query_tabs()
            records = await self.store.get_all()
        except Exception as e:
            counter("commands.get_all_tabs.error")
            logger.error("Error in getAllTabs: %s", e)
            return []

        now = now_ms()
        views = [tab_view(tab, records.get(tab.id), now) for tab in tabs if is_web_url(tab.url)]
        return sort_tab_views(views)

    async def refresh_tab(self, tab_id: int) -> dict[str, Any]:
        """Re-run extraction and classification for one tab."""
        tab = await self.host.get_tab(tab_id)
        if tab is None:
            return {"success": False, "error": "Tab not found"}

        outcome = await self.controller.run_cycle(tab)
        if outcome.stored:
            return {"success": True}
        return {"success": False, "error": REFRESH_ERRORS.get(outcome.status, "Refresh failed")}

    async def set_api_key(self, api_key: str) -> dict[str, Any]:
        await self.store.set_api_key(api_key)
        return {"success": True}

    async def dispatch(self, message: dict[str, Any]) -> Any:
        """
        Route a runtime message by its ``action``.

        Raises:
            UnknownActionError: If the action is not supported
            ValueError: If a required field is missing or has the wrong type
        """
        action = message.get("action")
        if action == "getAllTabs":
            return await self.get_all_tabs()
        if action == "refreshTab":
            tab_id = message.get("tabId")
            if not isinstance(tab_id, int) or isinstance(tab_id, bool):
                raise ValueError("refreshTab requires an integer tabId")
            return await self.refresh_tab(tab_id)
        if action == "setApiKey":
            api_key = message.get("apiKey")
            if not isinstance(api_key, str) or not api_key.strip():
                raise ValueError("setApiKey requires a non-empty apiKey")
            return await self.set_api_key(api_key.strip())
        raise UnknownActionError(f"Unknown action: {action!r}")
