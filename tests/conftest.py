import os

# Must be set before realtime_chat.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CACHE_ENABLED"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient

from realtime_chat.database import engine, SessionLocal
from realtime_chat.exceptions import DeliveryError
from realtime_chat.models import Base, User
from realtime_chat.realtime import ConnectionRegistry, BroadcastChannel, registry


class FakeConnection:
    """In-memory subscriber that records pushed frames"""

    def __init__(self, id, identity=None, fail=False):
        self.id = id
        self.identity = identity
        self.fail = fail
        self.received = []

    def push(self, payload):
        if self.fail:
            raise DeliveryError(self.id, "outbox full")
        self.received.append(payload)


class FakeRedis:
    """Dict-backed subset of the redis client the cache service uses"""

    def __init__(self):
        self.store = {}

    def get(self, key):
        return self.store.get(key)

    def setex(self, key, ttl, value):
        self.store[key] = value

    def delete(self, key):
        self.store.pop(key, None)

    def incr(self, key):
        self.store[key] = str(int(self.store.get(key, 0)) + 1)
        return int(self.store[key])


@pytest.fixture(autouse=True)
def reset_db():
    """Fresh tables for each test"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def alice(db):
    user = User(username="alice", email="alice@example.com")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def bob(db):
    user = User(username="bob", email="bob@example.com")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def connections():
    return ConnectionRegistry()


@pytest.fixture
def broadcast(connections):
    return BroadcastChannel(connections)


@pytest.fixture
def client():
    """App client; the context manager keeps one event loop for HTTP and WebSocket"""
    from realtime_chat.main import app

    with TestClient(app) as test_client:
        yield test_client

    assert registry.count() == 0
