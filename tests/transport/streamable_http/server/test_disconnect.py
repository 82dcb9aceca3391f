"""A client dropping a stream ends the session and clears its registry entry."""

import asyncio
from unittest.mock import AsyncMock, Mock

import pytest

from chess_mcp.transport.streamable_http.server.lifecycle import (
    TransportLifecycleManager,
)
from chess_mcp.transport.streamable_http.server.session_registry import (
    SessionRegistry,
)
from tests.helpers import initialize_message, mock_request

SESSION_ID = "123e4567-e89b-42d3-a456-426614174000"


async def drop_stream(response) -> None:
    """Start consuming a streaming response, then cancel as a dropped client would."""
    consumer = asyncio.create_task(response.body_iterator.__anext__())
    await asyncio.sleep(0)
    consumer.cancel()
    with pytest.raises(asyncio.CancelledError):
        await consumer


class TestDisconnect:
    @pytest.fixture
    def registry(self):
        return SessionRegistry()

    @pytest.fixture
    def lifecycle(self, registry):
        server = Mock()
        server.connect = AsyncMock()
        return TransportLifecycleManager(registry, Mock(return_value=server))

    async def test_dropped_get_stream_removes_explicit_session(
        self, registry, lifecycle
    ):
        # Arrange
        transport = await lifecycle.create_transport(SESSION_ID, mock_request("GET"))
        response = await transport.handle_request(mock_request("GET"))
        assert registry.get(SESSION_ID) is transport

        # Act
        await drop_stream(response)

        # Assert
        assert transport.is_open is False
        assert registry.get(SESSION_ID) is None

    async def test_dropped_post_stream_removes_generated_session(
        self, registry, lifecycle
    ):
        # Arrange
        request = mock_request(body=initialize_message())
        transport = await lifecycle.create_transport(None, request)
        tools_list = {"jsonrpc": "2.0", "id": 99, "method": "tools/list"}
        await transport.handle_request(request, initialize_message())
        session_id = transport.session_id
        assert registry.get(session_id) is transport

        # A request whose response the client never waits for
        response = await transport.handle_request(
            mock_request(headers={"mcp-session-id": session_id}), tools_list
        )

        # Act
        await drop_stream(response)

        # Assert
        assert registry.get(session_id) is None
        assert len(registry) == 0
