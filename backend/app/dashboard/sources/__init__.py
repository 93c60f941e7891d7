"""Upstream source clients for the dashboard hub."""

from .calendar import CalendarSource
from .static import InactiveLlmMessage, StaticLocalEvents
from .todoist import DemoTodoSource, TodoistSource
from .weather import WeatherSource

__all__ = [
    "CalendarSource",
    "DemoTodoSource",
    "InactiveLlmMessage",
    "StaticLocalEvents",
    "TodoistSource",
    "WeatherSource",
]
