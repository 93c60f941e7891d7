"""Todoist task-list source, plus a demo stand-in for unconfigured installs."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any

import httpx

from ..errors import SourceNotConfigured, TodoistAPIError
from ..interface import DashboardSource
from ..models import TodoItem
from .http import DEFAULT_TIMEOUT, HttpSource, parse_iso

logger = logging.getLogger(__name__)

TODOIST_BASE_URL = "https://api.todoist.com/rest/v2"
URGENT_THRESHOLD = timedelta(hours=2)


class TodoistSource(HttpSource):
    """Active Todoist tasks that are due today or overdue."""

    name = "todoist"

    def __init__(
        self,
        api_token: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        super().__init__(client=client, timeout=timeout)
        self._api_token = api_token

    async def fetch_raw(self) -> list[dict[str, Any]]:
        if not self._api_token:
            raise SourceNotConfigured("Todoist API token not configured", source=self.name)

        logger.info("Fetching tasks from Todoist...")
        try:
            response = await self.client.get(
                f"{TODOIST_BASE_URL}/tasks",
                headers={"Authorization": f"Bearer {self._api_token}"},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 401:
                raise TodoistAPIError("Todoist authentication failed - check API token") from e
            if status == 403:
                raise TodoistAPIError("Todoist access denied") from e
            raise TodoistAPIError(f"Todoist API error: {status} - {e.response.reason_phrase}") from e
        except httpx.RequestError as e:
            raise TodoistAPIError("Todoist API timeout or network error") from e
        return response.json() or []

    def parse(self, raw: list[dict[str, Any]], now: datetime | None = None) -> tuple[TodoItem, ...]:
        """Keep incomplete tasks due today or earlier, flag urgent ones, soonest first."""
        now = now or datetime.now().astimezone()
        todos: list[tuple[datetime, TodoItem]] = []
        for task in raw:
            if task.get("is_completed"):
                continue
            due = _due_date(task.get("due"))
            if due is None or due.date() > now.date():
                continue
            todos.append(
                (
                    due,
                    TodoItem(
                        id=str(task["id"]),
                        text=task.get("content", ""),
                        urgent=due - now <= URGENT_THRESHOLD,
                        done=False,
                        due_date=due.isoformat(),
                        priority=task.get("priority", 1),
                        labels=tuple(task.get("labels") or ()),
                    ),
                )
            )

        # Due date ascending, then priority descending (4 is highest)
        todos.sort(key=lambda pair: (pair[0], -pair[1].priority))
        logger.info("Found %d task(s) due today or overdue", len(todos))
        return tuple(todo for _, todo in todos)


class DemoTodoSource(DashboardSource):
    """Sample tasks served when no Todoist token is configured."""

    name = "todoist-demo"

    async def fetch_raw(self) -> list[dict[str, Any]]:
        return [
            {"id": "mock-1", "text": "Review PRs", "due_in_hours": 1, "priority": 4, "labels": ["work"]},
            {"id": "mock-2", "text": "Update documentation", "due_in_hours": 4, "priority": 2, "labels": ["work"]},
            {"id": "mock-3", "text": "Team sync", "due_in_hours": 4, "priority": 3, "labels": ["meeting"]},
        ]

    def parse(self, raw: list[dict[str, Any]], now: datetime | None = None) -> tuple[TodoItem, ...]:
        now = now or datetime.now().astimezone()
        items = []
        for task in raw:
            due = now + timedelta(hours=task["due_in_hours"])
            items.append(
                TodoItem(
                    id=task["id"],
                    text=task["text"],
                    urgent=due - now <= URGENT_THRESHOLD,
                    due_date=due.isoformat(),
                    priority=task["priority"],
                    labels=tuple(task["labels"]),
                )
            )
        return tuple(items)


def _due_date(due: dict[str, Any] | None) -> datetime | None:
    """Prefer the due datetime; fall back to the bare date at local midnight."""
    if not due:
        return None
    if due.get("datetime"):
        return parse_iso(due["datetime"])
    if due.get("date"):
        return parse_iso(due["date"])
    return None
