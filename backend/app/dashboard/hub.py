"""DashboardHub: the control operations the HTTP layer calls."""

from __future__ import annotations

import logging

from .aggregator import SnapshotAggregator
from .connections import ConnectionManager
from .models import ViewMode
from .scheduler import RefreshScheduler
from .views import FilteredSnapshot

logger = logging.getLogger(__name__)


class DashboardHub:
    """Ties the aggregator, connection manager and scheduler together.

    Built once at startup and handed to the routers, so nothing looks these
    components up globally.
    """

    def __init__(
        self,
        aggregator: SnapshotAggregator,
        connections: ConnectionManager,
        scheduler: RefreshScheduler,
    ) -> None:
        self.aggregator = aggregator
        self.connections = connections
        self.scheduler = scheduler

    @property
    def current_view(self) -> ViewMode:
        return self.scheduler.current_view

    async def get_snapshot(self, view: str | ViewMode | None = None) -> FilteredSnapshot:
        """Read-only: aggregate for ``view`` (default: the current view), no broadcast.

        Unknown identifiers fall back to the personal shape with an
        UnknownViewWarning rather than an error.
        """
        return await self.aggregator.aggregate(self.current_view if view is None else view)

    async def set_default_view(self, view: str | ViewMode) -> ViewMode:
        """Change the default view and broadcast once. Raises InvalidView."""
        return await self.scheduler.set_view(view)

    async def trigger_refresh(self) -> bool:
        return await self.scheduler.trigger_refresh()

    def get_connection_count(self) -> int:
        return self.connections.count

    async def start(self) -> None:
        self.connections.start_heartbeat()
        await self.scheduler.start()

    async def shutdown(self) -> None:
        await self.scheduler.stop()
        await self.connections.shutdown()
        logger.info("Dashboard hub stopped")
