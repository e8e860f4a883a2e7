"""Service injection for route modules.

The app's lifespan builds the Services graph once and registers it here;
routes resolve it through ``get_services`` as a FastAPI dependency.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import HTTPException

if TYPE_CHECKING:
    from tabsense.runtime.services import Services

# Module-level storage for the service graph injected at startup
_services: Services | None = None


def set_services(services: Services | None) -> None:
    """Register (or clear) the service graph.

    Side Effects:
        - Sets module-level _services variable
    """
    global _services
    _services = services


def get_services() -> Services:
    if _services is None:
        raise HTTPException(status_code=503, detail="Service not initialized")
    return _services
