"""Factory for wiring sources, caches and the hub from settings."""

from __future__ import annotations

import logging

import httpx

from .aggregator import SnapshotAggregator
from .cache import SourceCache
from .config import Settings
from .connections import ConnectionManager
from .hub import DashboardHub
from .interface import DashboardSource
from .scheduler import RefreshScheduler
from .sources import CalendarSource, DemoTodoSource, TodoistSource, WeatherSource

logger = logging.getLogger(__name__)


def create_sources(
    settings: Settings,
    client: httpx.AsyncClient | None = None,
) -> dict[str, DashboardSource]:
    """Pick a source per upstream based on which credentials are set.

    - Weather key + coordinates → WeatherSource, otherwise none (default reading)
    - Calendar id + API key      → CalendarSource, otherwise none (empty agenda)
    - Todoist token              → TodoistSource, otherwise DemoTodoSource

    Returned sources are unopened; their HTTP client is created on first use.
    """
    sources: dict[str, DashboardSource] = {}
    timeout = settings.source_timeout

    if settings.weather_configured:
        logger.info("Weather source: OpenWeatherMap")
        sources["weather"] = WeatherSource(
            api_key=settings.weather_api_key,
            lat=settings.weather_lat,
            lon=settings.weather_lon,
            client=client,
            timeout=timeout,
        )
    else:
        logger.warning("Weather API not configured (missing API key or coordinates)")

    if settings.calendar_configured:
        logger.info("Calendar source: Google Calendar")
        sources["calendar"] = CalendarSource(
            calendar_id=settings.google_calendar_id,
            api_key=settings.google_api_key,
            client=client,
            timeout=timeout,
        )
    else:
        logger.warning("Google Calendar not configured")

    if settings.todoist_api_token:
        logger.info("Task source: Todoist")
        sources["todos"] = TodoistSource(api_token=settings.todoist_api_token, client=client, timeout=timeout)
    else:
        logger.warning("Todoist not configured, serving demo tasks")
        sources["todos"] = DemoTodoSource()

    return sources


def create_aggregator(settings: Settings, sources: dict[str, DashboardSource]) -> SnapshotAggregator:
    """Wrap each source in its cache. Weather is cached; calendar and tasks always fetch live."""
    ttls = {"weather": settings.weather_cache_ttl, "calendar": 0, "todos": 0}
    caches = {
        key: SourceCache(
            name=source.name,
            fetch=source.fetch_and_parse,
            ttl=ttls[key],
            timeout=settings.source_timeout,
        )
        for key, source in sources.items()
    }
    return SnapshotAggregator(
        weather=caches.get("weather"),
        calendar=caches.get("calendar"),
        todos=caches.get("todos"),
    )


def create_hub(settings: Settings, sources: dict[str, DashboardSource] | None = None) -> DashboardHub:
    """Build the whole engine: aggregator, connection manager, scheduler, hub. Nothing is started."""
    if sources is None:
        sources = create_sources(settings)
    connections = ConnectionManager(heartbeat_interval=settings.heartbeat_interval)
    aggregator = create_aggregator(settings, sources)
    scheduler = RefreshScheduler(aggregator, connections, interval=settings.refresh_interval)
    return DashboardHub(aggregator, connections, scheduler)
