"""Snapshot aggregator: pulls every source and assembles one Snapshot."""

from __future__ import annotations

import asyncio
import logging
import random

from .cache import SourceCache
from .models import CalendarDay, LlmMessage, LocalEvent, Snapshot, TodoItem, ViewMode, WeatherReading
from .sources.static import InactiveLlmMessage, StaticLocalEvents
from .views import FilteredSnapshot, filter_snapshot

logger = logging.getLogger(__name__)

# Served when the weather source is unconfigured or has never succeeded.
DEFAULT_WEATHER = WeatherReading(
    temp=72,
    condition="Partly Cloudy",
    icon="02d",
    humidity=55,
    wind_speed=8,
    high=78,
    low=65,
)


class SnapshotAggregator:
    """Builds a Snapshot from the source caches, then filters it for a view.

    Each source is read independently and concurrently. A failed source
    contributes its fallback (DEFAULT_WEATHER, no event, empty lists), so one
    bad upstream never fails the whole aggregation. Sources are read-only.
    """

    def __init__(
        self,
        weather: SourceCache[WeatherReading] | None = None,
        calendar: SourceCache[CalendarDay] | None = None,
        todos: SourceCache[tuple[TodoItem, ...]] | None = None,
        local_events: StaticLocalEvents | None = None,
        llm_message: InactiveLlmMessage | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.weather = weather
        self.calendar = calendar
        self.todos = todos
        self.local_events = local_events or StaticLocalEvents()
        self.llm_message = llm_message or InactiveLlmMessage()
        self._rng = rng

    async def build(self, view: str | ViewMode) -> Snapshot:
        """Assemble the full, unfiltered snapshot tagged with ``view``."""
        weather, calendar, todos, local_events, llm_message = await asyncio.gather(
            self._weather(),
            self._calendar(),
            self._todos(),
            self._local_events(),
            self._llm_message(),
        )
        return Snapshot(
            view=str(view),
            weather=weather,
            next_event=calendar.next_event,
            todos=todos,
            agenda=calendar.agenda,
            local_events=local_events,
            llm_message=llm_message,
        )

    async def aggregate(self, view: str | ViewMode) -> FilteredSnapshot:
        """Build a snapshot for ``view`` and return it filtered for that view."""
        snapshot = await self.build(view)
        return filter_snapshot(view, snapshot, rng=self._rng)

    # --- Internal ---

    async def _weather(self) -> WeatherReading:
        if self.weather is None:
            logger.debug("Weather source not configured, using default reading")
            return DEFAULT_WEATHER
        result = await self.weather.get()
        return result.value if result.value is not None else DEFAULT_WEATHER

    async def _calendar(self) -> CalendarDay:
        if self.calendar is None:
            return CalendarDay()
        result = await self.calendar.get()
        return result.value if result.value is not None else CalendarDay()

    async def _todos(self) -> tuple[TodoItem, ...]:
        if self.todos is None:
            return ()
        result = await self.todos.get()
        return tuple(result.value) if result.value is not None else ()

    async def _local_events(self) -> tuple[LocalEvent, ...]:
        try:
            return tuple(await self.local_events.get())
        except Exception:
            logger.exception("Local events provider failed")
            return ()

    async def _llm_message(self) -> LlmMessage:
        try:
            return await self.llm_message.get()
        except Exception:
            logger.exception("Assistant message provider failed")
            return LlmMessage()
