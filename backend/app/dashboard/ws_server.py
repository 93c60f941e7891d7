"""WebSocket transport backed by the ``websockets`` asyncio server."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Awaitable
from typing import Any

from websockets.asyncio.server import Server, ServerConnection, serve

from .connections import ConnectionManager

logger = logging.getLogger(__name__)


class WebsocketsTransport:
    """Adapts a websockets ServerConnection to the manager's Transport protocol."""

    def __init__(self, ws: ServerConnection) -> None:
        self._ws = ws

    async def send(self, message: str) -> None:
        await self._ws.send(message)

    async def ping(self) -> Awaitable[Any]:
        # Resolves when the client's pong frame arrives
        return await self._ws.ping()

    async def close(self, code: int = 1000, reason: str = "") -> None:
        await self._ws.close(code, reason)

    def terminate(self) -> None:
        self._ws.transport.abort()

    def __aiter__(self) -> AsyncIterator[str | bytes]:
        return self._ws.__aiter__()


class WebSocketServer:
    """Accepts client sockets and hands each one to the ConnectionManager.

    Built-in keepalive pings are disabled; the manager runs its own heartbeat.
    """

    def __init__(self, connections: ConnectionManager, host: str = "0.0.0.0", port: int = 3002) -> None:
        self._connections = connections
        self._host = host
        self._port = port
        self._server: Server | None = None

    async def start(self) -> None:
        self._server = await serve(self._handler, self._host, self._port, ping_interval=None)
        logger.info("WebSocket server running on %s:%d", self._host, self._port)

    @property
    def port(self) -> int:
        """The bound port (useful when started with port 0)."""
        if self._server is None:
            return self._port
        return self._server.sockets[0].getsockname()[1]

    async def stop(self) -> None:
        if self._server is not None:
            self._server.close()
            await self._server.wait_closed()
            self._server = None
            logger.info("WebSocket server closed")

    async def _handler(self, ws: ServerConnection) -> None:
        await self._connections.serve_transport(WebsocketsTransport(ws))
