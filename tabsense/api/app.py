"""FastAPI server backing the TabSense browser extension"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from dotenv import load_dotenv
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tabsense.api.dependencies import set_services
from tabsense.api.routes.commands import router as commands_router
from tabsense.api.routes.events import router as events_router
from tabsense.api.routes.health import router as health_router
from tabsense.config import API_HOST, API_PORT, APP_VERSION, EXTENSION_ID, is_development
from tabsense.observability.logging import get_logger
from tabsense.observability.telemetry import counter
from tabsense.runtime.services import Services, build_services

# Load environment variables from .env file
load_dotenv()

logger = get_logger(__name__)


def allowed_origins() -> list[str]:
    origins: list[str] = []
    if EXTENSION_ID:
        origins.append(f"chrome-extension://{EXTENSION_ID}")
    # Unpacked extensions and local tooling in development only
    if is_development():
        origins.extend(["http://localhost:8000", "http://127.0.0.1:8000"])
    return origins


def create_app(services: Services | None = None) -> FastAPI:
    """
    Build the API.

    Args:
        services: Prebuilt service graph (tests); built from config when None
    """

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        graph = services if services is not None else build_services()
        set_services(graph)
        graph.cleanup.start()
        logger.info("TabSense API %s started", APP_VERSION)
        try:
            yield
        finally:
            await graph.aclose()
            set_services(None)

    app = FastAPI(title="TabSense API", version=APP_VERSION, lifespan=lifespan)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Return field names only, never the validation internals."""
        logger.warning("Validation error on %s: %d errors", request.url.path, len(exc.errors()))
        counter("api.validation_errors")
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "detail": "Invalid request format. Please check your request and try again.",
                "error_count": len(exc.errors()),
                "invalid_fields": [str(err["loc"][-1]) for err in exc.errors()],
            },
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins(),
        allow_origin_regex=r"chrome-extension://[a-p]{32}" if is_development() else None,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    app.include_router(health_router)
    app.include_router(commands_router)
    app.include_router(events_router)

    @app.get("/")
    def root() -> dict[str, Any]:
        return {
            "service": "TabSense API",
            "version": APP_VERSION,
            "status": "running",
            "endpoints": {
                "tabs": "/tabs",
                "messages": "/messages",
                "events": "/events/tab-updated",
                "health": "/health",
            },
        }

    return app


app = create_app()


def main() -> None:
    import uvicorn

    uvicorn.run("tabsense.api.app:app", host=API_HOST, port=API_PORT)
