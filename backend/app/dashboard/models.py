"""Data models for the dashboard hub."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from .errors import InvalidView


class ViewMode(str, Enum):
    """The fixed set of dashboard views. The first member is the startup default."""

    PERSONAL = "personal"
    GUEST = "guest"
    BRIEFING = "briefing"
    WEATHER = "weather"
    ART = "art"

    def __str__(self) -> str:
        return self.value


def available_views() -> list[str]:
    """Return the view identifiers in declaration order."""
    return [mode.value for mode in ViewMode]


def parse_view(value: str | ViewMode) -> ViewMode:
    """Convert a raw identifier to a ViewMode. Raises InvalidView if unknown."""
    if isinstance(value, ViewMode):
        return value
    try:
        return ViewMode(value)
    except ValueError:
        raise InvalidView(value, available_views()) from None


def utc_timestamp(now: datetime | None = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2024-05-01T12:00:00.000Z."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def make_envelope(event: str, data: Any, timestamp: str | None = None) -> dict[str, Any]:
    """Build the wire envelope shared by every message sent to a client."""
    return {"event": event, "data": data, "timestamp": timestamp or utc_timestamp()}


# --- Normalized source records ---


@dataclass(frozen=True, slots=True)
class WeatherReading:
    """Current conditions, already normalized from the provider's response."""

    temp: int
    condition: str
    icon: str = ""
    feels_like: int | None = None
    description: str = ""
    humidity: int | None = None
    wind_speed: int | None = None
    high: int | None = None
    low: int | None = None

    def to_dict(self) -> dict:
        return {
            "temp": self.temp,
            "condition": self.condition,
            "icon": self.icon,
            "feelsLike": self.feels_like,
            "description": self.description,
            "humidity": self.humidity,
            "windSpeed": self.wind_speed,
            "high": self.high,
            "low": self.low,
        }


@dataclass(frozen=True, slots=True)
class NextEvent:
    title: str
    time: str
    minutes_until: int
    location: str = ""
    start_time: str | None = None  # ISO-8601

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "time": self.time,
            "minutesUntil": self.minutes_until,
            "location": self.location,
            "startTime": self.start_time,
        }


@dataclass(frozen=True, slots=True)
class TodoItem:
    """A task due today or overdue. ``urgent`` is set by the task-list mapper."""

    id: str
    text: str
    urgent: bool = False
    done: bool = False
    due_date: str | None = None  # ISO-8601
    priority: int = 1  # 1-4, 4 is highest
    labels: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "text": self.text,
            "urgent": self.urgent,
            "done": self.done,
            "dueDate": self.due_date,
            "priority": self.priority,
            "labels": list(self.labels),
        }


@dataclass(frozen=True, slots=True)
class AgendaItem:
    """One calendar entry for today. ``done`` is set by the calendar mapper."""

    time: str
    title: str
    done: bool = False
    location: str = ""
    is_all_day: bool = False

    def to_dict(self) -> dict:
        return {
            "time": self.time,
            "title": self.title,
            "done": self.done,
            "location": self.location,
            "isAllDay": self.is_all_day,
        }


@dataclass(frozen=True, slots=True)
class LocalEvent:
    title: str
    category: str
    time: str = ""
    venue: str = ""

    def to_dict(self) -> dict:
        return {"title": self.title, "type": self.category, "time": self.time, "venue": self.venue}


@dataclass(frozen=True, slots=True)
class LlmMessage:
    """Assistant message shown on the display, inactive until a provider fills it."""

    active: bool = False
    message: str = ""
    urgency: str = "none"

    def to_dict(self) -> dict:
        return {"active": self.active, "message": self.message, "urgency": self.urgency}


@dataclass(frozen=True, slots=True)
class Quote:
    text: str
    author: str

    def to_dict(self) -> dict:
        return {"text": self.text, "author": self.author}


@dataclass(frozen=True, slots=True)
class CalendarDay:
    """Normalized calendar record: the next upcoming event plus today's agenda."""

    next_event: NextEvent | None = None
    agenda: tuple[AgendaItem, ...] = ()


def _dict_or_none(record: Any) -> dict | None:
    return record.to_dict() if record is not None else None


@dataclass(frozen=True, slots=True)
class Snapshot:
    """Full, unfiltered dashboard state built by one aggregation cycle.

    ``view`` is the identifier the snapshot was requested for. It is kept as
    given so that an unknown identifier can still reach the view filter's
    fallback.
    """

    view: str
    weather: WeatherReading | None = None
    next_event: NextEvent | None = None
    todos: tuple[TodoItem, ...] = ()
    agenda: tuple[AgendaItem, ...] = ()
    local_events: tuple[LocalEvent, ...] = ()
    llm_message: LlmMessage = field(default_factory=LlmMessage)

    def to_dict(self) -> dict:
        """Serialize for JSON / WebSocket transmission."""
        return {
            "mode": str(self.view),
            "weather": _dict_or_none(self.weather),
            "nextEvent": _dict_or_none(self.next_event),
            "todos": [todo.to_dict() for todo in self.todos],
            "agenda": [item.to_dict() for item in self.agenda],
            "localEvents": [event.to_dict() for event in self.local_events],
            "llmMessage": self.llm_message.to_dict(),
        }
