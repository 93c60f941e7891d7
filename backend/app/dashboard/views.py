"""View filter: reshapes a full Snapshot into what a given view displays."""

from __future__ import annotations

import logging
import random
import warnings
from dataclasses import dataclass
from typing import Union

from .models import (
    AgendaItem,
    LocalEvent,
    NextEvent,
    Quote,
    Snapshot,
    ViewMode,
    WeatherReading,
)

logger = logging.getLogger(__name__)

GUEST_QUOTES: tuple[Quote, ...] = (
    Quote("The best time to plant a tree was 20 years ago. The second best time is now.", "Chinese Proverb"),
    Quote("Creativity is intelligence having fun.", "Albert Einstein"),
    Quote("The only way to do great work is to love what you do.", "Steve Jobs"),
    Quote("Art is not what you see, but what you make others see.", "Edgar Degas"),
    Quote("Every artist was first an amateur.", "Ralph Waldo Emerson"),
    Quote("Simplicity is the ultimate sophistication.", "Leonardo da Vinci"),
    Quote("Design is thinking made visual.", "Saul Bass"),
    Quote("The purpose of art is washing the dust of daily life off our souls.", "Pablo Picasso"),
    Quote("Color is my day-long obsession, joy and torment.", "Claude Monet"),
    Quote("Art enables us to find ourselves and lose ourselves at the same time.", "Thomas Merton"),
    Quote("To practice any art, no matter how well or badly, is a way to make your soul grow.", "Kurt Vonnegut"),
    Quote("Everything you can imagine is real.", "Pablo Picasso"),
)

ART_CATEGORIES = frozenset({"art", "music"})
UPCOMING_AGENDA_LIMIT = 3


class UnknownViewWarning(UserWarning):
    """Emitted when filtering falls back to the personal view."""


def unknown_view_message(view: str | ViewMode) -> str | None:
    """Why ``view`` will be served as personal, or None if it is a known view."""
    try:
        ViewMode(view)
    except ValueError:
        return f"Unknown mode '{view}', defaulting to personal"
    return None


def _dict_or_none(record) -> dict | None:
    return record.to_dict() if record is not None else None


@dataclass(frozen=True, slots=True)
class GuestView:
    """Public data only: weather, local events and a quote."""

    weather: WeatherReading | None
    local_events: tuple[LocalEvent, ...]
    guest_quote: Quote

    view = ViewMode.GUEST

    def to_dict(self) -> dict:
        return {
            "mode": self.view.value,
            "weather": _dict_or_none(self.weather),
            "localEvents": [event.to_dict() for event in self.local_events],
            "guestQuote": self.guest_quote.to_dict(),
        }


@dataclass(frozen=True, slots=True)
class BriefingSummary:
    weather: dict | None  # temp + condition only
    next_event: dict | None  # title, time, minutesUntil only
    todo_count: int
    urgent_todo_count: int
    agenda_count: int
    upcoming_agenda: tuple[AgendaItem, ...]

    def to_dict(self) -> dict:
        return {
            "weather": self.weather,
            "nextEvent": self.next_event,
            "todoCount": self.todo_count,
            "urgentTodoCount": self.urgent_todo_count,
            "agendaCount": self.agenda_count,
            "upcomingAgenda": [item.to_dict() for item in self.upcoming_agenda],
        }


@dataclass(frozen=True, slots=True)
class BriefingView:
    weather: WeatherReading | None
    summary: BriefingSummary

    view = ViewMode.BRIEFING

    def to_dict(self) -> dict:
        return {
            "mode": self.view.value,
            "weather": _dict_or_none(self.weather),
            "summary": self.summary.to_dict(),
        }


@dataclass(frozen=True, slots=True)
class WeatherView:
    weather: WeatherReading | None
    local_events: tuple[LocalEvent, ...]

    view = ViewMode.WEATHER

    def to_dict(self) -> dict:
        return {
            "mode": self.view.value,
            "weather": _dict_or_none(self.weather),
            "localEvents": [event.to_dict() for event in self.local_events],
        }


@dataclass(frozen=True, slots=True)
class ArtView:
    """Aesthetic view: only art and music events, plus a quote."""

    weather: WeatherReading | None
    local_events: tuple[LocalEvent, ...]
    guest_quote: Quote

    view = ViewMode.ART

    def to_dict(self) -> dict:
        return {
            "mode": self.view.value,
            "weather": _dict_or_none(self.weather),
            "localEvents": [event.to_dict() for event in self.local_events],
            "guestQuote": self.guest_quote.to_dict(),
        }


FilteredSnapshot = Union[Snapshot, GuestView, BriefingView, WeatherView, ArtView]


def random_quote(rng: random.Random | None = None) -> Quote:
    """Uniform draw from GUEST_QUOTES, fresh on every call."""
    return (rng or random).choice(GUEST_QUOTES)


def _briefing_next_event(event: NextEvent | None) -> dict | None:
    if event is None:
        return None
    return {"title": event.title, "time": event.time, "minutesUntil": event.minutes_until}


def create_briefing_summary(snapshot: Snapshot) -> BriefingSummary:
    """Condensed summary. Reads the urgent/done flags set by the source mappers."""
    weather = snapshot.weather
    return BriefingSummary(
        weather={"temp": weather.temp, "condition": weather.condition} if weather else None,
        next_event=_briefing_next_event(snapshot.next_event),
        todo_count=len(snapshot.todos),
        urgent_todo_count=sum(1 for todo in snapshot.todos if todo.urgent),
        agenda_count=len(snapshot.agenda),
        upcoming_agenda=tuple(item for item in snapshot.agenda if not item.done)[:UPCOMING_AGENDA_LIMIT],
    )


def filter_snapshot(
    view: str | ViewMode,
    snapshot: Snapshot,
    rng: random.Random | None = None,
) -> FilteredSnapshot:
    """Return the data appropriate for ``view``. Never mutates ``snapshot``.

    ``personal`` returns the snapshot object itself. An unknown identifier
    logs a warning, emits UnknownViewWarning and falls back to ``personal``.
    """
    message = unknown_view_message(view)
    if message is not None:
        logger.warning("%s", message)
        warnings.warn(message, UnknownViewWarning, stacklevel=2)
        return snapshot
    mode = ViewMode(view)

    if mode is ViewMode.PERSONAL:
        return snapshot
    if mode is ViewMode.GUEST:
        return GuestView(
            weather=snapshot.weather,
            local_events=snapshot.local_events,
            guest_quote=random_quote(rng),
        )
    if mode is ViewMode.BRIEFING:
        return BriefingView(weather=snapshot.weather, summary=create_briefing_summary(snapshot))
    if mode is ViewMode.WEATHER:
        return WeatherView(weather=snapshot.weather, local_events=snapshot.local_events)
    # ViewMode.ART
    return ArtView(
        weather=snapshot.weather,
        local_events=tuple(event for event in snapshot.local_events if event.category in ART_CATEGORIES),
        guest_quote=random_quote(rng),
    )
