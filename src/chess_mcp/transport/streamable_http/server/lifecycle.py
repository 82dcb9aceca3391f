"""Creation and teardown wiring for per-session transports."""

import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from starlette.requests import Request

from chess_mcp.transport.streamable_http.server.session_id import generate_session_id
from chess_mcp.transport.streamable_http.server.session_registry import (
    SessionRegistry,
)
from chess_mcp.transport.streamable_http.server.transport import (
    StreamableHttpServerTransport,
)

if TYPE_CHECKING:
    from chess_mcp.server.session import McpServer

logger = logging.getLogger(__name__)

ServerFactory = Callable[
    [Request, StreamableHttpServerTransport], "McpServer | Awaitable[McpServer]"
]


class TransportLifecycleManager:
    """Builds transports bound to a fresh server and keeps the registry in sync.

    Registration happens exactly once per session: immediately for a resumed
    (explicit) id, or from the transport's initialization callback for a
    generated one. Removal happens only through the transport's close callback.
    """

    def __init__(self, registry: SessionRegistry, server_factory: ServerFactory):
        self._registry = registry
        self._server_factory = server_factory

    async def create_transport(
        self, explicit_id: str | None, request: Request
    ) -> StreamableHttpServerTransport:
        """Create a transport, connect a new server to it and wire cleanup.

        Args:
            explicit_id: Session id to resume under. None opens a new session
                whose id is generated during the initialize handshake.
            request: The request that triggered creation, passed to the
                server factory.

        Raises:
            Exception: Whatever the server factory or connect raised. The
                transport is closed first, so no registry entry survives.
        """
        if explicit_id is not None:
            transport = StreamableHttpServerTransport()
            transport.session_id = explicit_id
            self._registry.put(explicit_id, transport)
            logger.info(f"Resuming session {explicit_id}")
        else:
            transport = StreamableHttpServerTransport(
                session_id_generator=generate_session_id,
                on_session_initialized=lambda session_id: self._registry.put(
                    session_id, transport
                ),
            )

        transport.on_close = lambda: self._handle_close(transport)

        try:
            server = self._server_factory(request, transport)
            if inspect.isawaitable(server):
                server = await server
            await server.connect(transport)
        except Exception:
            logger.exception("Failed to set up server for new transport")
            await transport.close()
            raise

        return transport

    def _handle_close(self, transport: StreamableHttpServerTransport) -> None:
        if transport.session_id:
            self._registry.delete(transport.session_id)
