"""OpenWeatherMap current-conditions source."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

import httpx

from ..errors import SourceNotConfigured, WeatherAPIError
from ..models import WeatherReading
from .http import DEFAULT_TIMEOUT, HttpSource, js_round

logger = logging.getLogger(__name__)

OPENWEATHER_BASE_URL = "https://api.openweathermap.org/data/2.5"


class WeatherSource(HttpSource):
    """Fetches current weather for a fixed location, in Fahrenheit."""

    name = "weather"

    def __init__(
        self,
        api_key: str,
        lat: float | None,
        lon: float | None,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        super().__init__(client=client, timeout=timeout)
        self._api_key = api_key
        self._lat = lat
        self._lon = lon

    async def fetch_raw(self) -> dict[str, Any]:
        if not self._api_key:
            raise SourceNotConfigured("Weather API key not configured", source=self.name)
        if self._lat is None or self._lon is None:
            raise SourceNotConfigured("Weather location (lat/lon) not configured", source=self.name)

        logger.info("Fetching fresh weather data...")
        try:
            response = await self.client.get(
                f"{OPENWEATHER_BASE_URL}/weather",
                params={"lat": self._lat, "lon": self._lon, "appid": self._api_key, "units": "imperial"},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise WeatherAPIError(
                f"Weather API error: {e.response.status_code} - {_error_message(e.response)}"
            ) from e
        except httpx.RequestError as e:
            raise WeatherAPIError("Weather API timeout or network error") from e
        return response.json()

    def parse(self, raw: dict[str, Any], now: datetime | None = None) -> WeatherReading:
        main = raw["main"]
        conditions = raw["weather"][0]
        reading = WeatherReading(
            temp=js_round(main["temp"]),
            condition=conditions["main"],
            icon=conditions.get("icon", ""),
            feels_like=js_round(main["feels_like"]),
            description=conditions.get("description", ""),
            humidity=main.get("humidity"),
            wind_speed=js_round(raw.get("wind", {}).get("speed", 0)),
            high=js_round(main["temp_max"]),
            low=js_round(main["temp_min"]),
        )
        logger.info("Weather data updated: %d°F, %s", reading.temp, reading.condition)
        return reading


def _error_message(response: httpx.Response) -> str:
    try:
        return response.json().get("message") or "Unknown error"
    except ValueError:
        return "Unknown error"
