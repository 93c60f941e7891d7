"""Exception types for the dashboard hub."""

from __future__ import annotations


class DashboardError(Exception):
    """Base class for all dashboard errors."""


class SourceError(DashboardError):
    """An upstream source could not be fetched (network, auth, quota...)."""

    source: str = "unknown"

    def __init__(self, message: str, source: str | None = None) -> None:
        super().__init__(message)
        if source is not None:
            self.source = source


class SourceNotConfigured(SourceError):
    """The source is missing credentials or location settings."""


class WeatherAPIError(SourceError):
    source = "weather"


class CalendarAPIError(SourceError):
    source = "calendar"


class TodoistAPIError(SourceError):
    source = "todoist"


class InvalidView(DashboardError, ValueError):
    """Raised when a caller asks for a view identifier outside the fixed set."""

    def __init__(self, view: object, valid_views: list[str]) -> None:
        self.view = view
        self.valid_views = valid_views
        super().__init__(f"Mode '{view}' is not supported")


class MalformedMessage(DashboardError):
    """An inbound client payload could not be parsed."""


class CycleFailure(DashboardError):
    """A refresh cycle failed before its update could be broadcast."""
