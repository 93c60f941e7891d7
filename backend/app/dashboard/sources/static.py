"""View-independent local sources: local events and the assistant message."""

from __future__ import annotations

from ..models import LlmMessage, LocalEvent

DEFAULT_LOCAL_EVENTS: tuple[LocalEvent, ...] = (
    LocalEvent(title="Jazz Night", category="music", time="7:00 PM", venue="Blue Note"),
    LocalEvent(title="Art Gallery Opening", category="art", time="6:00 PM", venue="Modern Art Museum"),
)


class StaticLocalEvents:
    """Fixed list of local events. An events API can replace it behind the same call."""

    def __init__(self, events: tuple[LocalEvent, ...] = DEFAULT_LOCAL_EVENTS) -> None:
        self._events = tuple(events)

    async def get(self) -> tuple[LocalEvent, ...]:
        return self._events


class InactiveLlmMessage:
    """No assistant provider wired yet: always reports an inactive message."""

    async def get(self) -> LlmMessage:
        return LlmMessage()
