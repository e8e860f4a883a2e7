"""Pydantic request/response models for the TabSense API.

Field names follow the extension's camelCase wire format.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from tabsense.runtime.tab_host import Tab

MAX_HTML_CHARS = 5_000_000
MAX_SNAPSHOT_TABS = 2_000


class ChangeInfo(BaseModel):
    model_config = ConfigDict(extra="ignore")

    status: str | None = None


class TabUpdatedEvent(BaseModel):
    """chrome.tabs.onUpdated, plus the page HTML once loading completes."""

    model_config = ConfigDict(populate_by_name=True)

    tab_id: int = Field(alias="tabId")
    change_info: ChangeInfo = Field(default_factory=ChangeInfo, alias="changeInfo")
    tab: Tab
    html: str | None = Field(default=None, max_length=MAX_HTML_CHARS)

    @field_validator("tab")
    @classmethod
    def _tab_matches_id(cls, tab: Tab, info: ValidationInfo) -> Tab:
        tab_id = info.data.get("tab_id")
        if tab_id is not None and tab.id != tab_id:
            raise ValueError("tab.id must match tabId")
        return tab


class TabRemovedEvent(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    tab_id: int = Field(alias="tabId")


class TabsSnapshotEvent(BaseModel):
    """Full tab list sent on browser startup or extension install."""

    tabs: list[Tab] = Field(default_factory=list, max_length=MAX_SNAPSHOT_TABS)
    # Page HTML keyed by tab id, for tabs the extension could read
    pages: dict[int, str] = Field(default_factory=dict)
    reason: Literal["startup", "install"] = "startup"


class ApiKeyRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    api_key: str = Field(alias="apiKey", min_length=1, max_length=512)

    @field_validator("api_key")
    @classmethod
    def _strip(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("apiKey must not be blank")
        return value


class CommandResult(BaseModel):
    success: bool
    error: str | None = None


class EventAccepted(BaseModel):
    accepted: bool
    status: str | None = None
