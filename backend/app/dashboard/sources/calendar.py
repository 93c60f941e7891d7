"""Google Calendar source: today's agenda and the next upcoming event."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any
from urllib.parse import quote

import httpx

from ..errors import CalendarAPIError, SourceNotConfigured
from ..models import AgendaItem, CalendarDay, NextEvent
from .http import DEFAULT_TIMEOUT, HttpSource, format_time, parse_iso

logger = logging.getLogger(__name__)

GOOGLE_CALENDAR_BASE_URL = "https://www.googleapis.com/calendar/v3"
MAX_RESULTS = 50


class CalendarSource(HttpSource):
    """Reads today's events from a Google Calendar via the v3 REST API."""

    name = "calendar"

    def __init__(
        self,
        calendar_id: str,
        api_key: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        super().__init__(client=client, timeout=timeout)
        self._calendar_id = calendar_id
        self._api_key = api_key

    async def fetch_raw(self) -> list[dict[str, Any]]:
        if not self._calendar_id:
            raise SourceNotConfigured("Calendar ID not configured", source=self.name)
        if not self._api_key:
            raise SourceNotConfigured("Google API key not configured", source=self.name)

        now = datetime.now().astimezone()
        start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)
        end_of_day = start_of_day + timedelta(days=1)

        logger.info("Fetching calendar events...")
        try:
            response = await self.client.get(
                f"{GOOGLE_CALENDAR_BASE_URL}/calendars/{quote(self._calendar_id, safe='')}/events",
                params={
                    "key": self._api_key,
                    "timeMin": start_of_day.isoformat(),
                    "timeMax": end_of_day.isoformat(),
                    "singleEvents": "true",
                    "orderBy": "startTime",
                    "maxResults": MAX_RESULTS,
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 404:
                raise CalendarAPIError(f"Calendar not found: {self._calendar_id}") from e
            if status == 403:
                raise CalendarAPIError("Calendar access denied - check API key permissions") from e
            raise CalendarAPIError(f"Calendar API error: {status}") from e
        except httpx.RequestError as e:
            raise CalendarAPIError("Calendar API timeout or network error") from e
        return response.json().get("items") or []

    def parse(self, raw: list[dict[str, Any]], now: datetime | None = None) -> CalendarDay:
        """Pick the next event and build the agenda. ``done`` marks events already over."""
        if not raw:
            logger.info("No events found for today")
            return CalendarDay()

        now = now or datetime.now().astimezone()
        events = [_parse_event(item) for item in raw]

        next_event = None
        upcoming = [event for event in events if event["start"] > now]
        if upcoming:
            first = upcoming[0]
            next_event = NextEvent(
                title=first["title"],
                time=format_time(first["start"]),
                minutes_until=int((first["start"] - now).total_seconds() // 60),
                location=first["location"],
                start_time=first["start"].isoformat(),
            )

        agenda = tuple(
            AgendaItem(
                time="All Day" if event["all_day"] else format_time(event["start"]),
                title=event["title"],
                done=now > event["end"],
                location=event["location"],
                is_all_day=event["all_day"],
            )
            for event in events
        )
        logger.info("Found %d event(s) for today", len(events))
        return CalendarDay(next_event=next_event, agenda=agenda)


def _parse_event(event: dict[str, Any]) -> dict[str, Any]:
    start = event.get("start", {})
    end = event.get("end", {})
    return {
        "title": event.get("summary") or "(No title)",
        "location": event.get("location") or "",
        "start": parse_iso(start.get("dateTime") or start["date"]),
        "end": parse_iso(end.get("dateTime") or end["date"]),
        "all_day": "dateTime" not in start,
    }
