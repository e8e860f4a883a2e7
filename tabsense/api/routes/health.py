"""Health check and debug endpoints.

- /health - Service status and whether a Gemini key is stored
- /debug/stats - Counters, guard and live-tab sizes (no page content)
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Depends

from tabsense.api.dependencies import get_services
from tabsense.config import APP_VERSION, GEMINI_MODEL
from tabsense.observability.telemetry import get_latency_stats, snapshot_counters
from tabsense.runtime.services import Services

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(services: Services = Depends(get_services)) -> dict[str, Any]:
    """Health check endpoint.

    Reports whether a Gemini key is stored (never the key itself); does not
    call the Gemini API.
    """
    has_api_key = await services.store.get_api_key() is not None
    return {
        "status": "healthy",
        "service": "TabSense API",
        "version": APP_VERSION,
        "timestamp": datetime.now(UTC).isoformat(),
        "llm": {"ready": has_api_key, "model": GEMINI_MODEL},
    }


@router.get("/debug/stats")
async def debug_stats(services: Services = Depends(get_services)) -> dict[str, Any]:
    """Aggregate pipeline statistics for debugging. Contains no page content."""
    records = await services.store.get_all()
    topics: dict[str, int] = {}
    for record in records.values():
        topics[record.topic.value] = topics.get(record.topic.value, 0) + 1

    return {
        "records": {"total": len(records), "by_topic": topics},
        "live_tabs": len(services.registry),
        "live_tabs_synced": services.registry.synced,
        "processing": sorted(services.guard.active),
        "pending_tasks": services.controller.pending,
        "cleanup_running": services.cleanup.running,
        "counters": snapshot_counters(),
        "gemini_latency": get_latency_stats("llm.gemini.latency"),
        "timestamp": datetime.now(UTC).isoformat(),
    }
