"""
WebSocket endpoint for live chat events
"""
import asyncio
import json
import logging
from typing import Optional
from fastapi import APIRouter, WebSocket
from pydantic import ValidationError as SchemaError

from realtime_chat.exceptions import DeliveryError
from realtime_chat.realtime import WebSocketConnection, registry, channel, serialize_event
from realtime_chat.realtime.channel import TYPING_EVENT, STOP_TYPING_EVENT, ERROR_EVENT
from realtime_chat.schemas.message import WireEvent

logger = logging.getLogger(__name__)

router = APIRouter(tags=["websocket"])

IDENTIFY_EVENT = "identify"

# RFC 6455 "internal error"
SEND_FAILED_CODE = 1011


def reply_error(connection: WebSocketConnection, reason: str):
    """Send an error frame to this connection only"""
    try:
        connection.push(serialize_event(ERROR_EVENT, reason))
    except DeliveryError as e:
        logger.warning(f"📭 {e}", extra={'connection_id': connection.id})


def handle_frame(connection: WebSocketConnection, raw: str):
    """Dispatch one client frame"""
    try:
        frame = WireEvent.model_validate(json.loads(raw))
    except (ValueError, SchemaError):
        reply_error(connection, "Frames must be JSON objects with an 'event' field")
        return

    data: Optional[str] = frame.data if isinstance(frame.data, str) else None

    if frame.event == IDENTIFY_EVENT:
        if not data:
            reply_error(connection, "identify requires a username")
            return
        connection.identity = data
        logger.info(
            f"🪪 Connection {connection.id} identified as {data}",
            extra={'connection_id': connection.id, 'identity': data}
        )

    elif frame.event in (TYPING_EVENT, STOP_TYPING_EVENT):
        identity = data or connection.identity
        if not identity:
            reply_error(connection, f"{frame.event} requires an identity")
            return
        channel.publish_typing(identity, frame.event == TYPING_EVENT)

    else:
        reply_error(connection, f"Unknown event '{frame.event}'")


@router.websocket("/ws")
async def chat_websocket(websocket: WebSocket, username: Optional[str] = None):
    """
    Live chat stream

    Server → client: message, typing, stop_typing, error
    Client → server: identify, typing, stop_typing
    """
    await websocket.accept()

    connection = WebSocketConnection(websocket, identity=username)
    registry.register(connection)

    reader = asyncio.create_task(read_frames(connection))
    writer = asyncio.create_task(
        connection.run_writer(on_failure=lambda c: registry.unregister(c.id))
    )

    try:
        await asyncio.wait({reader, writer}, return_when=asyncio.FIRST_COMPLETED)

        if writer.done():
            # Writer gave up: close the socket so the client reconnects and refetches
            await close_socket(connection, SEND_FAILED_CODE, "send failed")
        elif reader.exception() is not None:
            logger.error(
                f"❌ Receive loop for {connection.id} failed: {reader.exception()}",
                extra={'connection_id': connection.id}
            )
        else:
            logger.info(
                f"✗ {connection.identity or connection.id} disconnected",
                extra={'connection_id': connection.id}
            )

    finally:
        registry.unregister(connection.id)
        connection.close()
        for task in (reader, writer):
            task.cancel()
        await asyncio.gather(reader, writer, return_exceptions=True)


async def read_frames(connection: WebSocketConnection):
    """Dispatch client frames until the client disconnects"""
    while True:
        message = await connection.websocket.receive()

        if message["type"] == "websocket.disconnect":
            return

        raw = message.get("text")
        if raw is None:
            reply_error(connection, "Binary frames are not supported")
            continue

        handle_frame(connection, raw)


async def close_socket(connection: WebSocketConnection, code: int, reason: str):
    """Close from the server side, bounded by the send timeout"""
    logger.warning(
        f"🔌 Closing {connection.identity or connection.id}: {reason}",
        extra={'connection_id': connection.id, 'code': code}
    )
    try:
        await asyncio.wait_for(
            connection.websocket.close(code=code, reason=reason),
            timeout=connection.send_timeout
        )
    except Exception as e:
        logger.warning(
            f"⚠️ Close handshake for {connection.id} failed: {e}",
            extra={'connection_id': connection.id}
        )
