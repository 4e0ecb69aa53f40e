"""Tests for ConnectionRegistry."""

import json
from unittest.mock import MagicMock

import pytest

from mcpcalc.server.errors import ConnectionNotFoundError, DuplicateConnectionError
from mcpcalc.server.registry import Connection, ConnectionRegistry


def _connection(registry: ConnectionRegistry) -> Connection:
    return Connection(id=registry.next_id(), send=MagicMock())


@pytest.fixture
def registry() -> ConnectionRegistry:
    return ConnectionRegistry()


class TestIdentifiers:
    def test_monotonic(self, registry: ConnectionRegistry) -> None:
        assert [registry.next_id() for _ in range(3)] == ["conn_1", "conn_2", "conn_3"]

    def test_not_reused_after_unregister(self, registry: ConnectionRegistry) -> None:
        conn = _connection(registry)
        registry.register(conn)
        registry.unregister(conn.id)
        assert registry.next_id() != conn.id

    def test_registries_are_independent(self) -> None:
        assert ConnectionRegistry().next_id() == ConnectionRegistry().next_id()


class TestRegisterLookup:
    def test_round_trip(self, registry: ConnectionRegistry) -> None:
        conn = _connection(registry)
        returned = registry.register(conn)
        assert returned == conn.id
        assert registry.get(returned) is conn
        assert conn.id in registry
        assert len(registry) == 1

    def test_unregister_then_not_found(self, registry: ConnectionRegistry) -> None:
        conn = _connection(registry)
        registry.register(conn)
        assert registry.unregister(conn.id) is True
        assert registry.get(conn.id) is None
        assert conn.id not in registry

    def test_duplicate_id_rejected(self, registry: ConnectionRegistry) -> None:
        conn = _connection(registry)
        registry.register(conn)
        with pytest.raises(DuplicateConnectionError):
            registry.register(Connection(id=conn.id, send=MagicMock()))
        assert registry.get(conn.id) is conn

    def test_unregister_is_idempotent(self, registry: ConnectionRegistry) -> None:
        keep = _connection(registry)
        gone = _connection(registry)
        registry.register(keep)
        registry.register(gone)
        registry.unregister(gone.id)

        assert registry.unregister(gone.id) is False
        assert registry.unregister("conn_999") is False
        assert registry.ids() == [keep.id]

    def test_created_at_is_set(self, registry: ConnectionRegistry) -> None:
        assert _connection(registry).created_at.tzinfo is not None


class TestMostRecent:
    def test_empty(self, registry: ConnectionRegistry) -> None:
        assert registry.most_recent() is None

    def test_last_inserted_wins(self, registry: ConnectionRegistry) -> None:
        a = _connection(registry)
        b = _connection(registry)
        registry.register(a)
        registry.register(b)
        assert registry.most_recent() is b

        registry.unregister(b.id)
        assert registry.most_recent() is a

    def test_lookup_does_not_change_order(self, registry: ConnectionRegistry) -> None:
        a = _connection(registry)
        b = _connection(registry)
        registry.register(a)
        registry.register(b)
        registry.get(a.id)
        registry.send(a.id, {"x": 1})
        assert registry.most_recent() is b

    def test_resolve(self, registry: ConnectionRegistry) -> None:
        a = _connection(registry)
        b = _connection(registry)
        registry.register(a)
        registry.register(b)
        assert registry.resolve(None) is b
        assert registry.resolve(a.id) is a
        assert registry.resolve("conn_404") is None


class TestSend:
    def test_frames_and_forwards(self, registry: ConnectionRegistry) -> None:
        conn = _connection(registry)
        registry.register(conn)

        delivered = registry.send(conn.id, {"jsonrpc": "2.0", "id": 1, "result": {}})

        assert delivered is conn
        frame = conn.send.call_args[0][0]  # type: ignore[attr-defined]
        assert frame.startswith("data: ")
        assert frame.endswith("\n\n")
        assert json.loads(frame[len("data: "):]) == {"jsonrpc": "2.0", "id": 1, "result": {}}

    def test_falls_back_to_most_recent(self, registry: ConnectionRegistry) -> None:
        a = _connection(registry)
        b = _connection(registry)
        registry.register(a)
        registry.register(b)

        registry.send(None, {"n": 1})

        a.send.assert_not_called()  # type: ignore[attr-defined]
        b.send.assert_called_once()  # type: ignore[attr-defined]

    def test_unknown_id_raises(self, registry: ConnectionRegistry) -> None:
        other = _connection(registry)
        registry.register(other)
        with pytest.raises(ConnectionNotFoundError, match="conn_77"):
            registry.send("conn_77", {"n": 1})
        other.send.assert_not_called()  # type: ignore[attr-defined]

    def test_empty_registry_raises(self, registry: ConnectionRegistry) -> None:
        with pytest.raises(ConnectionNotFoundError):
            registry.send(None, {"n": 1})

    def test_closed_connection_raises(self, registry: ConnectionRegistry) -> None:
        conn = _connection(registry)
        registry.register(conn)
        registry.unregister(conn.id)
        with pytest.raises(ConnectionNotFoundError):
            registry.send(conn.id, {"n": 1})


class TestCloseAll:
    def test_closes_and_empties(self, registry: ConnectionRegistry) -> None:
        closer = MagicMock()
        registry.register(Connection(id=registry.next_id(), send=MagicMock(), close=closer))
        registry.register(_connection(registry))

        assert registry.close_all() == 2
        closer.assert_called_once()
        assert len(registry) == 0

    def test_empty(self, registry: ConnectionRegistry) -> None:
        assert registry.close_all() == 0
