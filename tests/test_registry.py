import threading

from conftest import FakeConnection


def test_register_adds_connection(connections):
    """Test registering a new connection"""
    conn = FakeConnection("c1")

    assert connections.register(conn) is True
    assert connections.count() == 1
    assert "c1" in connections
    assert connections.get("c1") is conn


def test_register_same_id_twice_is_noop(connections):
    """Registering the same connection id twice leaves size unchanged"""
    connections.register(FakeConnection("c1"))

    assert connections.register(FakeConnection("c1")) is False
    assert len(connections) == 1


def test_unregister_unknown_id_is_noop(connections):
    """Unregistering an absent id is not an error"""
    assert connections.unregister("missing") is False
    assert connections.count() == 0


def test_unregister_removes_connection(connections):
    connections.register(FakeConnection("c1"))
    connections.register(FakeConnection("c2"))

    assert connections.unregister("c1") is True
    assert connections.unregister("c1") is False
    assert connections.count() == 1
    assert connections.get("c1") is None


def test_for_each_visits_every_connection_once(connections):
    for i in range(5):
        connections.register(FakeConnection(f"c{i}"))

    visited = []
    connections.for_each(lambda c: visited.append(c.id))

    assert sorted(visited) == [f"c{i}" for i in range(5)]


def test_for_each_tolerates_membership_changes(connections):
    """Mutating the registry from inside the callback must not break iteration"""
    for i in range(3):
        connections.register(FakeConnection(f"c{i}"))

    visited = []

    def visit(conn):
        visited.append(conn.id)
        connections.unregister(conn.id)
        connections.register(FakeConnection(f"late-{conn.id}"))

    connections.for_each(visit)

    assert sorted(visited) == ["c0", "c1", "c2"]
    assert connections.count() == 3


def test_identities_are_distinct_and_skip_anonymous(connections):
    """A user with two tabs appears once; anonymous connections are skipped"""
    connections.register(FakeConnection("c1", identity="alice"))
    connections.register(FakeConnection("c2", identity="alice"))
    connections.register(FakeConnection("c3", identity="bob"))
    connections.register(FakeConnection("c4"))

    assert connections.identities() == ["alice", "bob"]
    assert connections.count() == 4


def test_concurrent_register_unregister(connections):
    """Registry stays consistent under concurrent mutation and iteration"""
    def churn(prefix):
        for i in range(200):
            conn_id = f"{prefix}-{i}"
            connections.register(FakeConnection(conn_id))
            connections.for_each(lambda c: None)
            connections.unregister(conn_id)

    threads = [threading.Thread(target=churn, args=(f"t{n}",)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert connections.count() == 0
