"""
Connection registry - the set of currently live realtime connections
"""
import logging
import threading
from typing import Callable, Dict, List, Optional, Protocol

logger = logging.getLogger(__name__)


class Connection(Protocol):
    """Anything the broadcast channel can push a serialized event to"""
    id: str
    identity: Optional[str]

    def push(self, payload: str) -> None:
        """Hand off one serialized event without blocking; raise DeliveryError on refusal"""
        ...


class ConnectionRegistry:
    """
    Tracks live connections keyed by connection id.

    A user may hold several connections (tabs, devices); each one is a
    separate entry. Membership is only reachable through register,
    unregister and for_each, all serialized by one lock.
    """

    def __init__(self):
        self._connections: Dict[str, Connection] = {}
        self._lock = threading.Lock()

    def register(self, connection: Connection) -> bool:
        """
        Add a connection.

        Returns:
            False if a connection with the same id is already registered
        """
        with self._lock:
            if connection.id in self._connections:
                return False
            self._connections[connection.id] = connection
            total = len(self._connections)

        logger.info(
            f"✓ Connection {connection.id} registered. Total: {total}",
            extra={'connection_id': connection.id}
        )
        return True

    def unregister(self, connection_id: str) -> bool:
        """
        Remove a connection. Unknown ids are ignored since disconnects race.

        Returns:
            True if the connection was registered
        """
        with self._lock:
            removed = self._connections.pop(connection_id, None)
            total = len(self._connections)

        if removed is None:
            return False

        logger.info(
            f"✗ Connection {connection_id} unregistered. Total: {total}",
            extra={'connection_id': connection_id}
        )
        return True

    def for_each(self, fn: Callable[[Connection], None]) -> None:
        """
        Call fn once per connection registered at the time of the call.

        Connections registered afterwards are not visited. Connections
        unregistered while the loop runs may still be visited.
        """
        with self._lock:
            snapshot = list(self._connections.values())

        for connection in snapshot:
            fn(connection)

    def get(self, connection_id: str) -> Optional[Connection]:
        """Get connection by ID"""
        with self._lock:
            return self._connections.get(connection_id)

    def identities(self) -> List[str]:
        """Distinct identities announced by live connections"""
        with self._lock:
            names = {c.identity for c in self._connections.values() if c.identity}
        return sorted(names)

    def count(self) -> int:
        """Get number of live connections"""
        with self._lock:
            return len(self._connections)

    def __len__(self) -> int:
        return self.count()

    def __contains__(self, connection_id: str) -> bool:
        with self._lock:
            return connection_id in self._connections


# Global instance
registry = ConnectionRegistry()
