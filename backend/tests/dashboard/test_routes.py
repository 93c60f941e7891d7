"""Tests for the HTTP control endpoints."""

import asyncio

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.dashboard.aggregator import SnapshotAggregator
from app.dashboard.cache import SourceCache
from app.dashboard.connections import ConnectionManager
from app.dashboard.hub import DashboardHub
from app.dashboard.models import ViewMode
from app.dashboard.routes import create_dashboard_router
from app.dashboard.scheduler import RefreshScheduler


@pytest.fixture
def hub():
    aggregator = SnapshotAggregator()
    connections = ConnectionManager()
    return DashboardHub(aggregator, connections, RefreshScheduler(aggregator, connections))


@pytest.fixture
def client(hub):
    app = FastAPI()
    app.include_router(create_dashboard_router(hub))
    return TestClient(app)


class TestRoutes:
    """Request/response behavior of the router."""

    def test_health(self, client):
        body = client.get("/health").json()
        assert body["status"] == "healthy"
        assert body["connections"] == 0
        assert body["uptime"] >= 0

    def test_data_defaults_to_current_view(self, client):
        body = client.get("/api/dashboard/data").json()
        assert body["success"] is True
        assert body["data"]["mode"] == "personal"
        assert "todos" in body["data"]

    def test_data_for_view(self, client):
        body = client.get("/api/dashboard/data", params={"mode": "weather"}).json()
        assert set(body["data"]) == {"mode", "weather", "localEvents"}

    def test_data_unknown_view_falls_back_with_warning(self, client):
        response = client.get("/api/dashboard/data", params={"mode": "bogus"})
        assert response.status_code == 200
        body = response.json()
        assert "todos" in body["data"]
        assert "bogus" in body["warning"]

    def test_set_mode(self, client, hub):
        response = client.post("/api/dashboard/mode", json={"mode": "art"})
        assert response.status_code == 200
        assert response.json()["mode"] == "art"
        assert hub.current_view is ViewMode.ART

    def test_set_mode_missing(self, client):
        response = client.post("/api/dashboard/mode", json={})
        assert response.status_code == 400
        assert response.json()["error"] == "Missing mode"

    def test_set_mode_invalid(self, client, hub):
        response = client.post("/api/dashboard/mode", json={"mode": "bogus"})
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Invalid mode"
        assert body["validModes"] == ["personal", "guest", "briefing", "weather", "art"]
        assert hub.current_view is ViewMode.PERSONAL

    def test_refresh(self, client, hub):
        client.post("/api/dashboard/mode", json={"mode": "briefing"})
        body = client.get("/api/dashboard/refresh").json()
        assert body["message"] == "Dashboard data refreshed"
        assert body["data"]["mode"] == "briefing"

    def test_connections(self, client):
        assert client.get("/api/dashboard/connections").json() == {"count": 0, "clientIds": []}


@pytest.mark.asyncio
class TestConcurrentRequests:
    """Overlapping requests each get their own fallback warning."""

    async def test_warning_stays_with_its_request(self):
        async def slow_todos():
            await asyncio.sleep(0.1)
            return ()

        aggregator = SnapshotAggregator(todos=SourceCache("todos", slow_todos))
        connections = ConnectionManager()
        hub = DashboardHub(aggregator, connections, RefreshScheduler(aggregator, connections))
        app = FastAPI()
        app.include_router(create_dashboard_router(hub))

        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://hub") as client:

            async def fetch(mode, delay):
                await asyncio.sleep(delay)
                response = await client.get("/api/dashboard/data", params={"mode": mode})
                return response.json()

            bogus, weather = await asyncio.gather(fetch("bogus", 0), fetch("weather", 0.02))

        assert "bogus" in bogus["warning"]
        assert "todos" in bogus["data"]
        assert "warning" not in weather
        assert weather["data"]["mode"] == "weather"
