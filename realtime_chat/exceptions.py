"""
Chat error taxonomy
"""


class ChatError(Exception):
    """Base class for chat errors"""


class ValidationError(ChatError):
    """Submission is malformed (missing field for its type, unknown type)"""


class StorageError(ChatError):
    """Message store unavailable or rejected the write"""


class DeliveryError(ChatError):
    """A single connection could not accept an event"""

    def __init__(self, connection_id: str, reason: str):
        super().__init__(f"delivery to {connection_id} failed: {reason}")
        self.connection_id = connection_id
        self.reason = reason
