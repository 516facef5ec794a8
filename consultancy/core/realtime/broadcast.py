"""
Real-time broadcast context.

Owns the table of connected clients (renderer windows, mobile companions)
and fans events out to them. One context is constructed per process and
passed to whatever needs to publish; there is no module-level registry.
"""

import inspect
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from consultancy.utils.logger import LoggerMixin

# Delivers one event to one client: send(event_name, payload)
SendFn = Callable[[str, dict[str, Any]], Awaitable[None] | None]


@dataclass
class Connection:
    """A connected client."""

    client_id: str
    send: SendFn
    connected_at: float = field(default_factory=time.time)
    events_delivered: int = 0


class BroadcastContext(LoggerMixin):
    """Connection table plus fan-out of events to every client."""

    def __init__(self) -> None:
        self._connections: dict[str, Connection] = {}

    def connect(self, client_id: str, send: SendFn) -> Connection:
        """Register a client, replacing any previous connection with the same id."""
        connection = Connection(client_id=client_id, send=send)
        self._connections[client_id] = connection
        self.logger.info(f"Client connected: {client_id}")
        return connection

    def disconnect(self, client_id: str) -> bool:
        """Forget a client. Returns False if it was not connected."""
        if self._connections.pop(client_id, None) is None:
            return False
        self.logger.info(f"Client disconnected: {client_id}")
        return True

    def is_connected(self, client_id: str) -> bool:
        return client_id in self._connections

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    async def broadcast(self, event: str, data: dict[str, Any]) -> int:
        """
        Send ``event`` to every connected client.

        A client whose send raises is dropped from the table.

        Returns:
            Number of clients the event was delivered to
        """
        delivered = 0
        for connection in list(self._connections.values()):
            try:
                result = connection.send(event, data)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                self.logger.warning(f"Dropping client {connection.client_id}: {e}")
                self._connections.pop(connection.client_id, None)
                continue
            connection.events_delivered += 1
            delivered += 1

        self.logger.debug(f"Broadcast {event} to {delivered} client(s)")
        return delivered
