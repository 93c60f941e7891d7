"""Shared httpx plumbing for HTTP-backed sources."""

from __future__ import annotations

import math
from datetime import datetime

import httpx

from ..interface import DashboardSource

DEFAULT_TIMEOUT = 5.0


class HttpSource(DashboardSource):
    """DashboardSource that talks to a REST API through an httpx.AsyncClient.

    The client is created lazily so sources can be constructed outside an
    event loop. Pass ``client`` to share one (e.g. with a MockTransport in tests).
    """

    def __init__(self, client: httpx.AsyncClient | None = None, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                headers={"User-Agent": "LivingArt-Hub/1.0"},
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None


def js_round(value: float) -> int:
    """Round half up, matching what display clients expect (2.5 -> 3)."""
    return int(math.floor(value + 0.5))


def parse_iso(value: str) -> datetime:
    """Parse an ISO-8601 date or datetime. Naive values are taken as local time."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value).astimezone()


def format_time(moment: datetime) -> str:
    """Format as ``h:MM AM/PM`` in local time."""
    local = moment.astimezone()
    hours = local.hour % 12 or 12
    suffix = "PM" if local.hour >= 12 else "AM"
    return f"{hours}:{local.minute:02d} {suffix}"
