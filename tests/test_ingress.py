import json
import pytest
from unittest.mock import MagicMock
from sqlalchemy.exc import OperationalError

from conftest import FakeConnection
from realtime_chat.exceptions import ValidationError, StorageError
from realtime_chat.models import Message, MessageType
from realtime_chat.services import MessageIngress, MessageService


@pytest.fixture
def ingress(broadcast):
    return MessageIngress(broadcast)


@pytest.fixture
def listener(connections):
    conn = FakeConnection("listener")
    connections.register(conn)
    return conn


def test_submit_text_persists_and_broadcasts(db, alice, ingress, listener):
    """Valid text message gets store-assigned fields and reaches every connection"""
    stored = ingress.submit(db, alice, "text", "hi")

    assert stored.id is not None
    assert stored.created_at is not None
    assert stored.sender.username == "alice"
    assert stored.type == MessageType.TEXT
    assert stored.content == "hi"

    assert len(listener.received) == 1
    frame = json.loads(listener.received[0])
    assert frame["event"] == "message"
    assert frame["data"] == stored.model_dump(mode="json", by_alias=True)
    assert frame["data"]["createdAt"]
    assert "created_at" not in frame["data"]


def test_submit_defaults_to_text(db, alice, ingress):
    stored = ingress.submit(db, alice, None, "hello")
    assert stored.type == MessageType.TEXT


@pytest.mark.parametrize("content", [None, "", "   "])
def test_text_without_content_is_rejected(db, alice, ingress, listener, content):
    with pytest.raises(ValidationError):
        ingress.submit(db, alice, "text", content)

    assert listener.received == []
    assert MessageService.get_message_count(db) == 0


@pytest.mark.parametrize("message_type", ["image", "video"])
def test_media_without_file_url_is_rejected(db, alice, ingress, listener, message_type):
    """Media submissions missing fileUrl fail and nothing is broadcast"""
    with pytest.raises(ValidationError):
        ingress.submit(db, alice, message_type, "caption", None)

    assert listener.received == []
    assert MessageService.get_message_count(db) == 0


def test_unknown_type_is_rejected(db, alice, ingress):
    with pytest.raises(ValidationError):
        ingress.submit(db, alice, "audio", "hi")


def test_media_message_keeps_file_url(db, alice, ingress, listener):
    stored = ingress.submit(db, alice, "image", None, "/uploads/cat.png")

    assert stored.type == MessageType.IMAGE
    assert stored.file_url == "/uploads/cat.png"
    assert stored.content == ""
    assert len(listener.received) == 1


def test_text_message_drops_file_url(db, alice, ingress):
    stored = ingress.submit(db, alice, "text", "hi", "/uploads/ignored.png")
    assert stored.file_url is None


def test_storage_failure_skips_broadcast(db, alice, ingress, listener, monkeypatch):
    """A message that fails to persist is never broadcast"""
    def broken_commit():
        raise OperationalError("INSERT", {}, Exception("database is locked"))

    monkeypatch.setattr(db, "commit", broken_commit)

    with pytest.raises(StorageError):
        ingress.submit(db, alice, "text", "hi")

    assert listener.received == []


def test_submit_succeeds_with_no_connections(db, alice, broadcast):
    """Broadcast is best-effort; zero recipients is still success"""
    stored = MessageIngress(broadcast).submit(db, alice, "text", "anyone?")

    assert db.query(Message).filter(Message.id == stored.id).first() is not None


def test_submit_invalidates_history_cache(db, alice, broadcast):
    cache = MagicMock()
    MessageIngress(broadcast, cache=cache).submit(db, alice, "text", "hi")

    cache.invalidate_history.assert_called_once()


def test_history_is_in_submission_order(db, alice, bob, ingress):
    """Listing after M1, M2, M3 returns them in exactly that order"""
    first = ingress.submit(db, alice, "text", "M1")
    second = ingress.submit(db, bob, "text", "M2")
    third = ingress.submit(db, alice, "text", "M3")

    history = MessageService.list_all(db)

    assert [m.id for m in history] == [first.id, second.id, third.id]
    assert [m.content for m in history] == ["M1", "M2", "M3"]
