"""Tab lifecycle endpoints called by the extension's background script.

- POST /events/tab-updated - chrome.tabs.onUpdated (+ page HTML)
- POST /events/tab-removed - chrome.tabs.onRemoved
- POST /events/tabs-snapshot - full tab list on startup / install
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query

from tabsense.api.dependencies import get_services
from tabsense.api.models import EventAccepted, TabRemovedEvent, TabsSnapshotEvent, TabUpdatedEvent
from tabsense.config import INSTALL_STAGGER_MAX_SECONDS
from tabsense.observability.logging import get_logger
from tabsense.observability.telemetry import counter
from tabsense.runtime.controller import CycleStatus, should_process
from tabsense.runtime.services import Services

logger = get_logger(__name__)

router = APIRouter(prefix="/events", tags=["events"])


@router.post("/tab-updated", response_model=EventAccepted, response_model_exclude_none=True)
async def tab_updated(
    event: TabUpdatedEvent,
    wait: bool = Query(False, description="Run the cycle inline and report its outcome"),
    services: Services = Depends(get_services),
) -> EventAccepted:
    """
    Mirror the tab into the live set and start a classification cycle if the
    event qualifies. The cycle runs in the background unless ``wait`` is set.
    """
    services.registry.upsert(event.tab, event.html)
    counter("api.events.tab_updated")

    status = event.change_info.status
    if wait:
        outcome = await services.controller.handle_tab_updated(status, event.tab)
        if outcome is None:
            return EventAccepted(accepted=False)
        return EventAccepted(accepted=True, status=outcome.status.value)

    if not should_process(status, event.tab):
        return EventAccepted(accepted=False)
    if services.guard.is_processing(event.tab.id):
        return EventAccepted(accepted=False, status=CycleStatus.BUSY.value)

    services.controller.schedule(services.controller.handle_tab_updated(status, event.tab))
    return EventAccepted(accepted=True, status="scheduled")


@router.post("/tab-removed", response_model=EventAccepted, response_model_exclude_none=True)
async def tab_removed(
    event: TabRemovedEvent, services: Services = Depends(get_services)
) -> EventAccepted:
    """Drop the tab from the live set, the guard and the store."""
    services.registry.remove(event.tab_id)
    await services.controller.handle_tab_removed(event.tab_id)
    counter("api.events.tab_removed")
    return EventAccepted(accepted=True)


@router.post("/tabs-snapshot")
async def tabs_snapshot(
    event: TabsSnapshotEvent, services: Services = Depends(get_services)
) -> dict[str, Any]:
    """Replace the live tab set and queue every already-loaded web tab."""
    services.registry.replace_all(event.tabs, event.pages)
    stagger = INSTALL_STAGGER_MAX_SECONDS if event.reason == "install" else 0.0
    queued = services.controller.process_existing_tabs(event.tabs, stagger_max=stagger)
    logger.info("Tab snapshot (%s): %d tabs, %d queued", event.reason, len(event.tabs), queued)
    return {"tabs": len(event.tabs), "queued": queued}
