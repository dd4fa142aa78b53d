"""
Broadcast channel - fan-out of chat events to every live connection
"""
import json
import logging
from typing import Any, Dict

from realtime_chat.exceptions import DeliveryError
from realtime_chat.realtime.registry import ConnectionRegistry, Connection, registry

logger = logging.getLogger(__name__)

MESSAGE_EVENT = "message"
TYPING_EVENT = "typing"
STOP_TYPING_EVENT = "stop_typing"
ERROR_EVENT = "error"


def serialize_event(event: str, data: Any) -> str:
    """Encode one wire frame"""
    return json.dumps({"event": event, "data": data}, default=str)


class BroadcastChannel:
    """
    Publishes events to all registered connections, at most once each.

    Publishing never raises: a connection that refuses an event loses that
    event and nothing else. There is no retry; clients recover missed
    messages from the full history on reconnect.
    """

    def __init__(self, connections: ConnectionRegistry):
        self.connections = connections
        self.stats = {
            'published': 0,
            'delivered': 0,
            'dropped': 0,
        }

    def publish(self, message: Dict[str, Any]) -> int:
        """
        Push a stored message to every connection, the sender's included.

        Args:
            message: JSON-ready message record (store-assigned id and createdAt included)

        Returns:
            Number of connections that accepted the event
        """
        delivered = self._fan_out(MESSAGE_EVENT, message)
        logger.info(
            f"📡 Message {message.get('id')} → {delivered} connections",
            extra={'message_id': message.get('id'), 'recipients': delivered}
        )
        return delivered

    def publish_typing(self, identity: str, is_typing: bool) -> int:
        """
        Relay an ephemeral typing signal to every connection.

        Nobody is excluded here; receivers ignore their own identity.
        """
        event = TYPING_EVENT if is_typing else STOP_TYPING_EVENT
        delivered = self._fan_out(event, identity)
        logger.debug(
            f"✏️  {event} from {identity} → {delivered} connections",
            extra={'identity': identity, 'event': event, 'recipients': delivered}
        )
        return delivered

    def _fan_out(self, event: str, data: Any) -> int:
        payload = serialize_event(event, data)
        delivered = 0

        def deliver(connection: Connection):
            nonlocal delivered
            try:
                connection.push(payload)
            except DeliveryError as e:
                self.stats['dropped'] += 1
                logger.warning(
                    f"📭 {e}",
                    extra={'connection_id': connection.id, 'event': event}
                )
            except Exception:
                self.stats['dropped'] += 1
                logger.exception(
                    f"📭 Unexpected push failure on {connection.id}",
                    extra={'connection_id': connection.id, 'event': event}
                )
            else:
                delivered += 1

        self.connections.for_each(deliver)

        self.stats['published'] += 1
        self.stats['delivered'] += delivered
        return delivered

    def get_stats(self) -> dict:
        """Get fan-out counters"""
        return dict(self.stats)


# Global instance
channel = BroadcastChannel(registry)
