"""Abstract interface for upstream dashboard sources."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any


class DashboardSource(ABC):
    """Contract for upstream data providers (weather, calendar, task list).

    The hub never calls a source directly. Each source is wrapped in a
    SourceCache whose fetch function is ``fetch_and_parse``, and downstream
    code only ever sees the normalized record returned by ``parse``.

    Lifecycle:
        source = WeatherSource(api_key, lat, lon)
        cache = SourceCache("weather", source.fetch_and_parse, ttl=600)
        result = await cache.get()
        # ... app shutting down ...
        await source.aclose()
    """

    name: str = "source"

    @abstractmethod
    async def fetch_raw(self) -> Any:
        """Fetch the provider's raw payload.

        Raises a SourceError subclass on network, auth or quota problems.
        """

    @abstractmethod
    def parse(self, raw: Any, now: datetime | None = None) -> Any:
        """Map a raw payload to a normalized record. Pure; ``now`` defaults to the current time."""

    async def fetch_and_parse(self) -> Any:
        return self.parse(await self.fetch_raw())

    async def aclose(self) -> None:
        """Release network resources. Override if needed."""
