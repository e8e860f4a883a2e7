"""Popup command endpoints.

- POST /messages - runtime message dispatch ({"action": ...})
- GET /tabs - getAllTabs
- POST /tabs/{tab_id}/refresh - refreshTab
- POST /settings/api-key - setApiKey
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException

from tabsense.api.dependencies import get_services
from tabsense.api.models import ApiKeyRequest, CommandResult
from tabsense.observability.telemetry import counter, log_event
from tabsense.runtime.commands import UnknownActionError
from tabsense.runtime.services import Services
from tabsense.utils.error_sanitizer import get_safe_error_detail, sanitize_error_message

router = APIRouter(tags=["commands"])


@router.post("/messages")
async def handle_message(
    message: dict[str, Any] = Body(...),
    services: Services = Depends(get_services),
) -> Any:
    """Dispatch one runtime message by its ``action`` field."""
    try:
        result = await services.commands.dispatch(message)
    except UnknownActionError as e:
        counter("api.messages.unknown_action")
        raise HTTPException(status_code=400, detail=sanitize_error_message(str(e), 400)) from None
    except ValueError as e:
        raise HTTPException(status_code=400, detail=sanitize_error_message(str(e), 400)) from None
    except Exception as e:
        raise HTTPException(
            status_code=500, detail=get_safe_error_detail(e, 500, "Failed to handle message")
        ) from None

    log_event("api.messages.handled", action=message.get("action"))
    return result


@router.get("/tabs")
async def list_tabs(services: Services = Depends(get_services)) -> list[dict[str, Any]]:
    """Open web tabs with their cached summary and topic."""
    return await services.commands.get_all_tabs()


@router.post("/tabs/{tab_id}/refresh", response_model=CommandResult, response_model_exclude_none=True)
async def refresh_tab(tab_id: int, services: Services = Depends(get_services)) -> dict[str, Any]:
    """Re-classify one tab from its latest page snapshot."""
    return await services.commands.refresh_tab(tab_id)


@router.post("/settings/api-key", response_model=CommandResult, response_model_exclude_none=True)
async def set_api_key(
    request: ApiKeyRequest, services: Services = Depends(get_services)
) -> dict[str, Any]:
    """Store the Gemini API key."""
    try:
        return await services.commands.set_api_key(request.api_key)
    except Exception as e:
        raise HTTPException(
            status_code=500, detail=get_safe_error_detail(e, 500, "Failed to store API key")
        ) from None
