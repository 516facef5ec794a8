"""Real-time event fan-out to connected clients."""

from .broadcast import BroadcastContext, Connection, SendFn

__all__ = [
    "BroadcastContext",
    "Connection",
    "SendFn",
]
