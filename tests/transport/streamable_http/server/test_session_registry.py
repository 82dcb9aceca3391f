import uuid
from unittest.mock import Mock

from chess_mcp.transport.streamable_http.server.session_registry import (
    SessionRegistry,
)


class TestSessionRegistry:
    def test_empty_registry_state(self):
        # Arrange
        registry = SessionRegistry()
        fake_id = str(uuid.uuid4())

        # Act & Assert
        assert registry.get(fake_id) is None
        assert fake_id not in registry
        assert len(registry) == 0
        assert registry.delete(fake_id) is False

    def test_put_then_get_returns_transport(self):
        # Arrange
        registry = SessionRegistry()
        session_id = str(uuid.uuid4())
        transport = Mock()

        # Act
        registry.put(session_id, transport)

        # Assert
        assert registry.get(session_id) is transport
        assert session_id in registry
        assert registry.session_ids() == [session_id]

    def test_delete_removes_entry(self):
        # Arrange
        registry = SessionRegistry()
        session_id = str(uuid.uuid4())
        registry.put(session_id, Mock())

        # Act
        removed = registry.delete(session_id)

        # Assert
        assert removed is True
        assert registry.get(session_id) is None
        assert len(registry) == 0

    def test_delete_is_idempotent(self):
        # Arrange
        registry = SessionRegistry()
        session_id = str(uuid.uuid4())
        registry.put(session_id, Mock())

        # Act
        first = registry.delete(session_id)
        second = registry.delete(session_id)

        # Assert
        assert first is True
        assert second is False

    def test_delete_leaves_others_intact(self):
        # Arrange
        registry = SessionRegistry()
        transports = {str(uuid.uuid4()): Mock() for _ in range(3)}
        for session_id, transport in transports.items():
            registry.put(session_id, transport)
        removed_id, *kept_ids = transports

        # Act
        registry.delete(removed_id)

        # Assert
        assert registry.get(removed_id) is None
        for session_id in kept_ids:
            assert registry.get(session_id) is transports[session_id]

    def test_transports_snapshot_survives_mutation(self):
        # Arrange
        registry = SessionRegistry()
        ids = [str(uuid.uuid4()) for _ in range(2)]
        for session_id in ids:
            registry.put(session_id, Mock())

        # Act
        for transport in registry.transports():
            registry.delete(ids.pop())

        # Assert
        assert len(registry) == 0
