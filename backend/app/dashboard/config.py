"""Environment-driven settings."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    host: str = "0.0.0.0"
    port: int = 3001
    ws_port: int = 3002
    refresh_interval: int = 30
    heartbeat_interval: int = 30
    source_timeout: float = 5.0
    weather_cache_ttl: int = 600
    weather_api_key: str = ""
    weather_lat: float | None = None
    weather_lon: float | None = None
    google_calendar_id: str = ""
    google_api_key: str = ""
    todoist_api_token: str = ""
    cors_origin: str = "http://localhost:3000"
    log_level: str = "INFO"

    @property
    def weather_configured(self) -> bool:
        return bool(self.weather_api_key) and self.weather_lat is not None and self.weather_lon is not None

    @property
    def calendar_configured(self) -> bool:
        return bool(self.google_calendar_id and self.google_api_key)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Read settings from the environment. Blank values count as unset."""
        env = os.environ if environ is None else environ

        def text(name: str, default: str = "") -> str:
            return env.get(name, "").strip() or default

        def number(name: str, default, cast=int, minimum=None):
            raw = text(name)
            if not raw:
                return default
            try:
                value = cast(raw)
            except ValueError:
                logger.warning("Ignoring invalid %s=%r, using %s", name, raw, default)
                return default
            if minimum is not None and value < minimum:
                logger.warning("%s=%s is below %s, using %s", name, value, minimum, minimum)
                return minimum
            return value

        return cls(
            host=text("HOST", cls.host),
            port=number("PORT", cls.port),
            ws_port=number("WS_PORT", cls.ws_port),
            refresh_interval=number("REFRESH_INTERVAL", cls.refresh_interval, minimum=1),
            heartbeat_interval=number("HEARTBEAT_INTERVAL", cls.heartbeat_interval, minimum=1),
            source_timeout=number("SOURCE_TIMEOUT", cls.source_timeout, cast=float),
            weather_cache_ttl=number("WEATHER_CACHE_TTL", cls.weather_cache_ttl, minimum=0),
            weather_api_key=text("WEATHER_API_KEY"),
            weather_lat=number("WEATHER_LAT", None, cast=float),
            weather_lon=number("WEATHER_LON", None, cast=float),
            google_calendar_id=text("GOOGLE_CALENDAR_ID"),
            google_api_key=text("GOOGLE_API_KEY"),
            todoist_api_token=text("TODOIST_API_TOKEN"),
            cors_origin=text("CORS_ORIGIN", cls.cors_origin),
            log_level=text("LOG_LEVEL", cls.log_level).upper(),
        )
