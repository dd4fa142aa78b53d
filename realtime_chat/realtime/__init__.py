"""
Realtime fan-out: connection registry, broadcast channel, WebSocket connections
"""
from .registry import ConnectionRegistry, Connection, registry
from .channel import BroadcastChannel, channel, serialize_event
from .connection import WebSocketConnection

__all__ = [
    "ConnectionRegistry",
    "Connection",
    "registry",
    "BroadcastChannel",
    "channel",
    "serialize_event",
    "WebSocketConnection"
]
