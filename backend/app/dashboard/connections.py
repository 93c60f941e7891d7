"""Connection manager: live client set, heartbeat and broadcast."""

from __future__ import annotations

import asyncio
import functools
import json
import logging
import secrets
import time
from collections.abc import AsyncIterator, Awaitable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

from .errors import MalformedMessage
from .models import make_envelope, utc_timestamp

logger = logging.getLogger(__name__)

HEARTBEAT_INTERVAL = 30.0  # seconds
PING_TIMEOUT = 5.0  # seconds a single ping write may take
WELCOME_MESSAGE = "Connected to Living Art hub"
SHUTDOWN_CODE = 1000
SHUTDOWN_REASON = "Server shutting down"

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


class Transport(Protocol):
    """What the manager needs from an accepted socket.

    ``ping`` sends a transport-level ping frame and returns an awaitable that
    completes when the peer's pong arrives. Iterating yields inbound messages
    until the peer goes away.
    """

    async def send(self, message: str) -> None: ...

    async def ping(self) -> Awaitable[Any]: ...

    async def close(self, code: int = 1000, reason: str = "") -> None: ...

    def terminate(self) -> None: ...

    def __aiter__(self) -> AsyncIterator[str | bytes]: ...


class ConnectionState(str, Enum):
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSING = "closing"
    CLOSED = "closed"


@dataclass(eq=False)
class Connection:
    """One client link. Identity-compared; ids are never reused."""

    id: str
    transport: Transport
    state: ConnectionState = ConnectionState.CONNECTING
    is_alive: bool = True  # Cleared each heartbeat round, set again by a pong
    connected_at: float = field(default_factory=time.time)


def generate_client_id() -> str:
    """``client_<epoch ms>_<9 random base36 chars>``."""
    bits = secrets.randbits(46)
    suffix = ""
    for _ in range(9):
        bits, rem = divmod(bits, 36)
        suffix = _BASE36[rem] + suffix
    return f"client_{int(time.time() * 1000)}_{suffix}"


def parse_client_message(raw: str | bytes) -> Any:
    """Decode one inbound payload. Raises MalformedMessage if it is not JSON."""
    try:
        if isinstance(raw, (bytes, bytearray)):
            raw = raw.decode("utf-8")
        return json.loads(raw)
    except (UnicodeDecodeError, ValueError) as e:
        raise MalformedMessage(f"Invalid message format: {e}") from e


class ConnectionManager:
    """Owns the set of live client connections.

    One instance per process, shared by the WebSocket server, the scheduler
    and the HTTP routes. All state changes happen on the event loop between
    awaits, so adding or removing a connection is a single uninterrupted step.

    Lifecycle:
        manager = ConnectionManager()
        manager.start_heartbeat()
        # ... transports call serve_transport() / accept() ...
        await manager.broadcast("dashboard:update", {...})
        # ... app shutting down ...
        await manager.shutdown()
    """

    def __init__(
        self,
        heartbeat_interval: float = HEARTBEAT_INTERVAL,
        ping_timeout: float = PING_TIMEOUT,
    ) -> None:
        self._connections: dict[str, Connection] = {}  # insertion order = broadcast order
        self._heartbeat_interval = heartbeat_interval
        self._ping_timeout = ping_timeout
        self._heartbeat_task: asyncio.Task | None = None
        self._pong_waiters: set[asyncio.Future] = set()

    # --- Transport events ---

    async def accept(self, transport: Transport) -> Connection:
        """Register a freshly handshaken transport and send it the welcome message."""
        connection = Connection(id=generate_client_id(), transport=transport)
        self._connections[connection.id] = connection
        connection.state = ConnectionState.OPEN
        logger.info("Client connected: %s", connection.id)

        await self._send(
            connection,
            make_envelope("connection", {"message": WELCOME_MESSAGE, "clientId": connection.id}),
        )
        logger.info("Active connections: %d", self.count)
        return connection

    async def on_message(self, connection: Connection, raw: str | bytes) -> None:
        """Answer a client message. Problems are reported to that client only."""
        try:
            message = parse_client_message(raw)
        except MalformedMessage as e:
            logger.warning("Error parsing message from %s: %s", connection.id, e)
            await self._send(connection, make_envelope("error", {"message": "Invalid message format"}))
            return

        logger.debug("Message from %s: %r", connection.id, message)
        if isinstance(message, dict) and message.get("type") == "ping":
            await self._send(connection, make_envelope("pong", {"timestamp": utc_timestamp()}))
            return

        # Generic acknowledgment; command handlers can hook in here
        await self._send(connection, make_envelope("echo", message))

    def on_close(self, connection: Connection) -> None:
        """Drop a connection from the live set. Safe to call more than once."""
        connection.state = ConnectionState.CLOSED
        if self._connections.get(connection.id) is connection:
            del self._connections[connection.id]
            logger.info("Client disconnected: %s", connection.id)
            logger.info("Active connections: %d", self.count)

    def on_error(self, connection: Connection, error: BaseException | None = None) -> None:
        logger.warning("WebSocket error for client %s: %s", connection.id, error)
        self.on_close(connection)

    def mark_alive(self, connection: Connection) -> None:
        """Record a transport-level pong."""
        if self._connections.get(connection.id) is connection:
            connection.is_alive = True

    async def serve_transport(self, transport: Transport) -> None:
        """Run one client for its whole lifetime: accept, receive loop, cleanup."""
        connection = await self.accept(transport)
        try:
            async for raw in transport:
                await self.on_message(connection, raw)
        except Exception as e:
            self.on_error(connection, e)
        finally:
            self.on_close(connection)

    # --- Delivery ---

    async def broadcast(self, event: str, data: Any) -> int:
        """Send one event to every OPEN connection. Returns the delivery count.

        The envelope is serialized once. Connections that fail mid-send are
        removed after the loop; the remaining connections still receive it.
        Connections accepted after the loop starts do not get this message.
        """
        message = json.dumps(make_envelope(event, data))
        sent = 0
        failed: list[Connection] = []

        for connection in list(self._connections.values()):
            if connection.state is not ConnectionState.OPEN:
                continue
            try:
                await connection.transport.send(message)
                sent += 1
            except Exception as e:
                logger.warning("Send to %s failed: %s", connection.id, e)
                failed.append(connection)

        for connection in failed:
            self.on_close(connection)

        logger.info("Broadcast '%s' to %d client(s)", event, sent)
        return sent

    async def send_dashboard_update(self, filtered: Any) -> int:
        """Broadcast a filtered snapshot as a ``dashboard:update`` event."""
        return await self.broadcast("dashboard:update", filtered.to_dict())

    async def send_to(self, connection_id: str, event: str, data: Any) -> bool:
        """Targeted delivery. Returns False if the client is unknown or not open."""
        connection = self._connections.get(connection_id)
        if connection is None:
            logger.debug("send_to: client %s not found", connection_id)
            return False
        return await self._send(connection, make_envelope(event, data))

    # --- Heartbeat ---

    def start_heartbeat(self) -> None:
        if self._heartbeat_task and not self._heartbeat_task.done():
            return
        self._heartbeat_task = asyncio.create_task(self._heartbeat_loop(), name="ws-heartbeat")
        logger.info("Heartbeat started (%.1fs interval)", self._heartbeat_interval)

    async def stop_heartbeat(self) -> None:
        if self._heartbeat_task and not self._heartbeat_task.done():
            self._heartbeat_task.cancel()
            try:
                await self._heartbeat_task
            except asyncio.CancelledError:
                pass
        self._heartbeat_task = None
        for waiter in list(self._pong_waiters):
            waiter.cancel()
        self._pong_waiters.clear()

    async def check_heartbeat(self) -> int:
        """Run one heartbeat round. Returns how many connections were terminated.

        Connections still presumed dead from the previous round are closed and
        removed; every other connection is presumed dead and pinged again.
        Pings go out concurrently, each bounded by ``ping_timeout``.
        """
        terminated = 0
        pings = []
        for connection in list(self._connections.values()):
            if self._connections.get(connection.id) is not connection:
                continue
            if not connection.is_alive:
                logger.info("Terminating dead connection: %s", connection.id)
                self._terminate(connection)
                terminated += 1
                continue

            connection.is_alive = False
            pings.append(self._ping(connection))

        if pings:
            await asyncio.gather(*pings)
        return terminated

    # --- Introspection ---

    @property
    def count(self) -> int:
        return len(self._connections)

    def get_connection_count(self) -> int:
        return self.count

    def client_ids(self) -> list[str]:
        return list(self._connections)

    def get(self, connection_id: str) -> Connection | None:
        return self._connections.get(connection_id)

    def __len__(self) -> int:
        return self.count

    def __contains__(self, connection_id: str) -> bool:
        return connection_id in self._connections

    # --- Shutdown ---

    async def shutdown(self) -> None:
        """Stop the heartbeat, close every connection and clear the set."""
        logger.info("Shutting down connection manager...")
        await self.stop_heartbeat()

        for connection in list(self._connections.values()):
            connection.state = ConnectionState.CLOSING
            try:
                await connection.transport.close(SHUTDOWN_CODE, SHUTDOWN_REASON)
            except Exception as e:
                logger.debug("Close for %s failed: %s", connection.id, e)
            connection.state = ConnectionState.CLOSED

        self._connections.clear()
        logger.info("Connection manager shut down")

    # --- Internal ---

    async def _send(self, connection: Connection, envelope: dict) -> bool:
        if connection.state is not ConnectionState.OPEN:
            return False
        try:
            await connection.transport.send(json.dumps(envelope))
        except Exception as e:
            logger.warning("Send to %s failed: %s", connection.id, e)
            self.on_close(connection)
            return False
        return True

    def _terminate(self, connection: Connection) -> None:
        connection.state = ConnectionState.CLOSING
        try:
            connection.transport.terminate()
        except Exception as e:
            logger.debug("Terminate for %s failed: %s", connection.id, e)
        self.on_close(connection)

    async def _ping(self, connection: Connection) -> None:
        try:
            waiter = await asyncio.wait_for(connection.transport.ping(), timeout=self._ping_timeout)
        except asyncio.TimeoutError:
            # Stays presumed dead; the next round terminates it
            logger.warning("Ping to %s timed out after %.1fs", connection.id, self._ping_timeout)
            return
        except Exception as e:
            logger.warning("Ping to %s failed: %s", connection.id, e)
            self.on_close(connection)
            return
        self._watch_pong(connection, waiter)

    def _watch_pong(self, connection: Connection, waiter: Awaitable[Any]) -> None:
        future = asyncio.ensure_future(waiter)
        self._pong_waiters.add(future)
        future.add_done_callback(self._pong_waiters.discard)
        future.add_done_callback(functools.partial(self._on_pong, connection))

    def _on_pong(self, connection: Connection, future: asyncio.Future) -> None:
        if future.cancelled() or future.exception() is not None:
            return
        self.mark_alive(connection)

    async def _heartbeat_loop(self) -> None:
        while True:
            await asyncio.sleep(self._heartbeat_interval)
            try:
                await self.check_heartbeat()
            except Exception:
                logger.exception("Heartbeat round failed")
