"""Fixtures for dashboard hub tests.

Provides an in-memory transport standing in for a WebSocket, a controllable
clock for cache TTL tests, and a fully populated sample snapshot.
"""

import asyncio
import json

import pytest

from app.dashboard.models import (
    AgendaItem,
    LlmMessage,
    LocalEvent,
    NextEvent,
    Snapshot,
    TodoItem,
    WeatherReading,
)


class FakeTransport:
    """Records what the manager sends; pings are answered unless told otherwise."""

    def __init__(self, inbound=(), fail_send=False, answer_pings=True):
        self.sent: list[str] = []
        self.closed: tuple[int, str] | None = None
        self.terminated = False
        self.fail_send = fail_send
        self.answer_pings = answer_pings
        self.pings = 0
        self._inbound = list(inbound)

    async def send(self, message: str) -> None:
        if self.fail_send:
            raise ConnectionError("socket gone")
        self.sent.append(message)

    async def ping(self):
        self.pings += 1
        waiter = asyncio.get_running_loop().create_future()
        if self.answer_pings:
            waiter.set_result(0.001)
        return waiter

    async def close(self, code: int = 1000, reason: str = "") -> None:
        self.closed = (code, reason)

    def terminate(self) -> None:
        self.terminated = True

    async def _iterate(self):
        for raw in self._inbound:
            yield raw

    def __aiter__(self):
        return self._iterate()

    @property
    def messages(self) -> list[dict]:
        return [json.loads(m) for m in self.sent]

    def events(self) -> list[str]:
        return [m["event"] for m in self.messages]


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def transport_factory():
    return FakeTransport


@pytest.fixture
def sample_snapshot():
    """A personal snapshot with every field populated."""
    return Snapshot(
        view="personal",
        weather=WeatherReading(temp=68, condition="Clear", icon="01d", feels_like=67, humidity=40),
        next_event=NextEvent(
            title="Standup",
            time="10:00 AM",
            minutes_until=25,
            location="Room 4",
            start_time="2024-05-01T10:00:00-04:00",
        ),
        todos=(
            TodoItem(id="1", text="Ship release", urgent=True, priority=4),
            TodoItem(id="2", text="Write notes", urgent=False, priority=2),
            TodoItem(id="3", text="Call plumber", urgent=True, priority=3),
        ),
        agenda=(
            AgendaItem(time="8:00 AM", title="Gym", done=True),
            AgendaItem(time="10:00 AM", title="Standup"),
            AgendaItem(time="12:00 PM", title="Lunch"),
            AgendaItem(time="All Day", title="Conference", is_all_day=True),
            AgendaItem(time="5:00 PM", title="Dinner"),
        ),
        local_events=(
            LocalEvent(title="Jazz Night", category="music", time="7:00 PM", venue="Blue Note"),
            LocalEvent(title="Farmers Market", category="food", time="9:00 AM", venue="Main St"),
            LocalEvent(title="Gallery Opening", category="art", time="6:00 PM", venue="MoMA"),
        ),
        llm_message=LlmMessage(active=True, message="Busy day ahead", urgency="low"),
    )
