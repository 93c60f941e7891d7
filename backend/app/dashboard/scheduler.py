"""Refresh scheduler: periodic aggregate-filter-broadcast cycles."""

from __future__ import annotations

import asyncio
import logging

from .aggregator import SnapshotAggregator
from .connections import ConnectionManager
from .errors import CycleFailure
from .models import ViewMode, parse_view

logger = logging.getLogger(__name__)

REFRESH_INTERVAL = 30  # seconds
MIN_REFRESH_INTERVAL = 1


class RefreshScheduler:
    """Owns the process-wide default view and the refresh timer.

    Every trigger (timer tick, start, view change, manual refresh) goes
    through run_cycle(), so they all share one code path. Cycles only read
    shared state; the view is replaced in a single assignment.
    """

    def __init__(
        self,
        aggregator: SnapshotAggregator,
        connections: ConnectionManager,
        interval: int = REFRESH_INTERVAL,
        initial_view: ViewMode = ViewMode.PERSONAL,
    ) -> None:
        if int(interval) < MIN_REFRESH_INTERVAL:
            raise ValueError(f"interval must be at least {MIN_REFRESH_INTERVAL}s")
        self._aggregator = aggregator
        self._connections = connections
        self._interval = int(interval)
        self._view = parse_view(initial_view)
        self._task: asyncio.Task | None = None
        self._stopping: asyncio.Event | None = None

    @property
    def current_view(self) -> ViewMode:
        return self._view

    @property
    def interval(self) -> int:
        return self._interval

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Run one cycle right away, then keep ticking every ``interval`` seconds."""
        if self._stopping is not None:
            return  # already started or starting
        logger.info("Starting scheduler with %ds interval", self._interval)
        stopping = self._stopping = asyncio.Event()

        await self.run_cycle()
        if stopping.is_set():
            return  # stopped during the first cycle

        self._task = asyncio.create_task(self._tick_loop(stopping), name="dashboard-refresh")
        logger.info("Scheduler started")

    async def stop(self) -> None:
        """Stop ticking. A cycle already in progress is allowed to finish."""
        if self._stopping is not None:
            self._stopping.set()
        if self._task is not None:
            await self._task
            self._task = None
            logger.info("Scheduler stopped")
        self._stopping = None

    async def set_view(self, view: str | ViewMode) -> ViewMode:
        """Change the default view and broadcast it immediately.

        Raises InvalidView (leaving the current view untouched) if ``view`` is unknown.
        """
        mode = parse_view(view)
        logger.info("Changing dashboard mode: %s -> %s", self._view, mode)
        self._view = mode
        await self.run_cycle()
        return mode

    async def trigger_refresh(self) -> bool:
        logger.info("Manual refresh triggered")
        return await self.run_cycle()

    async def run_cycle(self) -> bool:
        """One refresh: aggregate the current view and broadcast it.

        Any failure is broadcast as an ``error`` event and swallowed so the
        timer keeps going. Returns True if an update was broadcast.
        """
        view = self._view
        logger.info("Refreshing dashboard data (mode: %s)...", view)
        try:
            await self._refresh(view)
        except CycleFailure as failure:
            logger.error("Error refreshing dashboard data: %s", failure, exc_info=failure.__cause__)
            await self._connections.broadcast(
                "error",
                {"message": "Failed to refresh dashboard data", "error": str(failure)},
            )
            return False

        logger.info(
            "Dashboard data refreshed and broadcast to %d client(s)",
            self._connections.count,
        )
        return True

    # --- Internal ---

    async def _refresh(self, view: ViewMode) -> None:
        try:
            filtered = await self._aggregator.aggregate(view)
            await self._connections.send_dashboard_update(filtered)
        except Exception as e:
            raise CycleFailure(str(e) or type(e).__name__) from e

    async def _tick_loop(self, stopping: asyncio.Event) -> None:
        """Tick on interval. The first cycle already ran in start()."""
        while True:
            try:
                await asyncio.wait_for(stopping.wait(), timeout=self._interval)
                return
            except asyncio.TimeoutError:
                pass
            await self.run_cycle()
