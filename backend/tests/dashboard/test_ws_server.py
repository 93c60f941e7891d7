"""Integration tests for the websockets-backed transport."""

import asyncio
import json

import pytest
from websockets.asyncio.client import connect

from app.dashboard.connections import ConnectionManager
from app.dashboard.ws_server import WebSocketServer


async def _wait_for(predicate, timeout=2.0):
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.01)


@pytest.mark.asyncio
class TestWebSocketServer:
    """Real sockets on an ephemeral port."""

    async def test_handshake_ping_and_close(self):
        manager = ConnectionManager()
        server = WebSocketServer(manager, host="127.0.0.1", port=0)
        await server.start()
        try:
            async with connect(f"ws://127.0.0.1:{server.port}") as ws:
                welcome = json.loads(await ws.recv())
                assert welcome["event"] == "connection"
                assert manager.count == 1

                await ws.send(json.dumps({"type": "ping"}))
                assert json.loads(await ws.recv())["event"] == "pong"

                await ws.send("garbage")
                assert json.loads(await ws.recv())["event"] == "error"

            await _wait_for(lambda: manager.count == 0)
        finally:
            await manager.shutdown()
            await server.stop()

    async def test_heartbeat_pong_keeps_client(self):
        manager = ConnectionManager()
        server = WebSocketServer(manager, host="127.0.0.1", port=0)
        await server.start()
        try:
            async with connect(f"ws://127.0.0.1:{server.port}", ping_interval=None) as ws:
                await ws.recv()
                connection = manager.get(manager.client_ids()[0])

                await manager.check_heartbeat()
                # The client library answers the ping frame on its own
                await _wait_for(lambda: connection.is_alive)
                await manager.check_heartbeat()

                assert manager.count == 1
        finally:
            await manager.shutdown()
            await server.stop()

    async def test_broadcast_reaches_socket(self):
        manager = ConnectionManager()
        server = WebSocketServer(manager, host="127.0.0.1", port=0)
        await server.start()
        try:
            async with connect(f"ws://127.0.0.1:{server.port}") as ws:
                await ws.recv()
                assert await manager.broadcast("dashboard:update", {"mode": "art"}) == 1
                message = json.loads(await ws.recv())
                assert message["event"] == "dashboard:update"
                assert message["data"] == {"mode": "art"}
        finally:
            await manager.shutdown()
            await server.stop()
