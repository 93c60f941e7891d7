"""HTTP control endpoints for the dashboard hub."""

from __future__ import annotations

import logging
import time
from typing import Any

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .errors import InvalidView
from .hub import DashboardHub
from .models import available_views, utc_timestamp
from .views import unknown_view_message

logger = logging.getLogger(__name__)


class ModeRequest(BaseModel):
    mode: str | None = None


def _bad_request(error: str, message: str, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": error, "message": message, **extra})


def create_dashboard_router(hub: DashboardHub) -> APIRouter:
    """Create the dashboard router with a reference to the hub.

    This factory pattern lets us inject the hub without globals.
    """
    router = APIRouter(tags=["dashboard"])
    started = time.monotonic()

    async def snapshot_payload(mode: str | None) -> dict[str, Any]:
        # Unknown modes still get data (personal shape) plus a warning for this caller
        warning = unknown_view_message(mode) if mode is not None else None
        filtered = await hub.get_snapshot(mode)
        payload: dict[str, Any] = {"success": True, "data": filtered.to_dict(), "timestamp": utc_timestamp()}
        if warning is not None:
            payload["warning"] = warning
        return payload

    @router.get("/health")
    async def health() -> dict[str, Any]:
        return {
            "status": "healthy",
            "timestamp": utc_timestamp(),
            "uptime": round(time.monotonic() - started, 3),
            "connections": hub.get_connection_count(),
        }

    @router.get("/api/dashboard/data")
    async def dashboard_data(mode: str | None = None) -> dict[str, Any]:
        """Current data for ``mode`` (default: the current view). Does not broadcast."""
        return await snapshot_payload(mode)

    @router.post("/api/dashboard/mode")
    async def set_mode(body: ModeRequest):
        """Change the default view; connected clients get one update right away."""
        if not body.mode:
            return _bad_request("Missing mode", 'Request body must include "mode" field')
        try:
            mode = await hub.set_default_view(body.mode)
        except InvalidView as e:
            return _bad_request("Invalid mode", str(e), validModes=available_views())
        return {
            "success": True,
            "message": f"Mode updated to '{mode.value}'",
            "mode": mode.value,
            "timestamp": utc_timestamp(),
        }

    @router.get("/api/dashboard/refresh")
    async def refresh(mode: str | None = None) -> dict[str, Any]:
        """Force one broadcast cycle, then return fresh data for ``mode``."""
        await hub.trigger_refresh()
        payload = await snapshot_payload(mode)
        payload["message"] = "Dashboard data refreshed"
        return payload

    @router.get("/api/dashboard/connections")
    async def connections() -> dict[str, Any]:
        return {"count": hub.get_connection_count(), "clientIds": hub.connections.client_ids()}

    return router
