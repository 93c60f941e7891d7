"""End-to-end tests through the DashboardHub control operations."""

import pytest

from app.dashboard.aggregator import SnapshotAggregator
from app.dashboard.cache import SourceCache
from app.dashboard.connections import ConnectionManager
from app.dashboard.errors import InvalidView
from app.dashboard.hub import DashboardHub
from app.dashboard.models import Snapshot, TodoItem, ViewMode
from app.dashboard.scheduler import RefreshScheduler
from app.dashboard.views import GuestView, UnknownViewWarning


def _hub(initial_view=ViewMode.PERSONAL, interval=60):
    async def todos():
        return (TodoItem(id="1", text="Water plants", urgent=True),)

    aggregator = SnapshotAggregator(todos=SourceCache("todos", todos))
    connections = ConnectionManager(heartbeat_interval=60)
    scheduler = RefreshScheduler(aggregator, connections, interval=interval, initial_view=initial_view)
    return DashboardHub(aggregator, connections, scheduler)


@pytest.mark.asyncio
class TestDashboardHub:
    """Control operations exposed to the HTTP layer."""

    async def test_get_snapshot_defaults_to_current_view(self):
        hub = _hub()
        result = await hub.get_snapshot()

        assert isinstance(result, Snapshot)
        assert result.todos[0].text == "Water plants"

    async def test_get_snapshot_does_not_change_state_or_broadcast(self, transport_factory):
        hub = _hub()
        transport = transport_factory()
        await hub.connections.accept(transport)

        await hub.get_snapshot("guest")

        assert hub.current_view is ViewMode.PERSONAL
        assert transport.events() == ["connection"]

    async def test_get_snapshot_unknown_view_falls_back(self):
        hub = _hub()
        with pytest.warns(UnknownViewWarning):
            result = await hub.get_snapshot("bogus")

        assert isinstance(result, Snapshot)
        assert {"todos", "agenda"} <= set(result.to_dict())

    async def test_set_default_view_invalid(self):
        hub = _hub(initial_view=ViewMode.WEATHER)

        with pytest.raises(InvalidView):
            await hub.set_default_view("bogus")

        assert hub.current_view is ViewMode.WEATHER

    async def test_set_guest_then_get_snapshot(self, transport_factory):
        hub = _hub()
        transports = [transport_factory() for _ in range(3)]
        for t in transports:
            await hub.connections.accept(t)

        await hub.set_default_view("guest")
        result = await hub.get_snapshot()

        assert isinstance(result, GuestView)
        assert set(result.to_dict()) == {"mode", "weather", "localEvents", "guestQuote"}
        for t in transports:
            assert t.events().count("dashboard:update") == 1

    async def test_start_with_weather_view(self, transport_factory):
        hub = _hub(initial_view=ViewMode.WEATHER)
        transport = transport_factory()
        await hub.connections.accept(transport)

        await hub.start()
        await hub.shutdown()

        update = next(m for m in transport.messages if m["event"] == "dashboard:update")
        assert "todos" not in update["data"]
        assert "agenda" not in update["data"]
        assert set(update["data"]) == {"mode", "weather", "localEvents"}

    async def test_trigger_refresh_and_count(self, transport_factory):
        hub = _hub()
        transport = transport_factory()
        await hub.connections.accept(transport)

        assert hub.get_connection_count() == 1
        assert await hub.trigger_refresh() is True
        assert transport.events()[-1] == "dashboard:update"

    async def test_shutdown_closes_clients(self, transport_factory):
        hub = _hub()
        transport = transport_factory()
        await hub.connections.accept(transport)
        await hub.start()

        await hub.shutdown()

        assert hub.get_connection_count() == 0
        assert transport.closed is not None
        assert not hub.scheduler.is_running
