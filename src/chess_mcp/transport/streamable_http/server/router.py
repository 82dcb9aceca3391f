"""Session-aware HTTP routing for the streamable HTTP transport."""

import logging
from typing import Any

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse, Response
from starlette.routing import Route

from chess_mcp.protocol.base import INTERNAL_ERROR, SERVER_ERROR, error_envelope
from chess_mcp.shared.message_parser import MessageParser
from chess_mcp.transport.streamable_http.server.headers import (
    SESSION_ID_HEADER,
    extract_session_id,
)
from chess_mcp.transport.streamable_http.server.lifecycle import (
    ServerFactory,
    TransportLifecycleManager,
)
from chess_mcp.transport.streamable_http.server.session_id import is_valid_session_id
from chess_mcp.transport.streamable_http.server.session_registry import (
    SessionRegistry,
)

logger = logging.getLogger(__name__)

NO_VALID_SESSION_MESSAGE = "Bad Request: No valid session ID provided"


class SessionRouter:
    """Routes each MCP request to the transport of its session.

    POST and GET are routed the same way:
    - a registered session id resumes that session's transport
    - an initialize request without a session id, or an unregistered but
      well-formed session id, gets a new transport
    - anything else is unroutable and answered with 404

    DELETE only reaches registered sessions; everything else is a 400.
    """

    def __init__(
        self,
        server_factory: ServerFactory,
        endpoint_path: str = "/mcp",
        registry: SessionRegistry | None = None,
    ) -> None:
        self.endpoint_path = endpoint_path
        self.registry = registry if registry is not None else SessionRegistry()
        self._lifecycle = TransportLifecycleManager(self.registry, server_factory)
        self._message_parser = MessageParser()

        self._app = Starlette(
            routes=[
                Route(
                    endpoint_path,
                    self._handle_mcp_endpoint,
                    methods=["POST", "GET", "DELETE"],
                )
            ]
        )

    @property
    def app(self) -> Starlette:
        return self._app

    async def close(self) -> None:
        """Close every live session."""
        for transport in self.registry.transports():
            await transport.close()

    async def _handle_mcp_endpoint(self, request: Request) -> Response:
        try:
            if request.method == "DELETE":
                return await self._handle_delete_request(request)
            return await self._handle_stream_request(request)
        except Exception:
            logger.exception(f"Error handling MCP {request.method} request")
            return JSONResponse(
                error_envelope(INTERNAL_ERROR, "Internal server error"),
                status_code=500,
            )

    async def _handle_stream_request(self, request: Request) -> Response:
        """Handle POST and GET: resume, open a session, or reject."""
        session_id = extract_session_id(request.headers, SESSION_ID_HEADER)
        body = await self._read_body(request) if request.method == "POST" else None

        transport = self.registry.get(session_id) if session_id else None
        if transport is None:
            opens_session = (
                session_id is None and self._message_parser.is_initialize_request(body)
            ) or is_valid_session_id(session_id)
            if not opens_session:
                logger.warning(
                    f"Unroutable {request.method} request for session {session_id}"
                )
                return JSONResponse(
                    error_envelope(SERVER_ERROR, NO_VALID_SESSION_MESSAGE),
                    status_code=404,
                )
            transport = await self._lifecycle.create_transport(session_id, request)
            response = await transport.handle_request(request, body)
            if transport.session_id is None:
                # Rejected before initialize, so it was never registered
                await transport.close()
            return response

        return await transport.handle_request(request, body)

    async def _handle_delete_request(self, request: Request) -> Response:
        """Handle session termination."""
        session_id = extract_session_id(request.headers, SESSION_ID_HEADER)
        transport = self.registry.get(session_id) if session_id else None

        if transport is None:
            shown_id = session_id[:8] if session_id else "none"
            return PlainTextResponse(
                f"Invalid or missing session ID: {shown_id}", status_code=400
            )

        return await transport.handle_request(request)

    async def _read_body(self, request: Request) -> Any:
        """Parse the JSON body, or None if it is missing or malformed.

        The transport re-reads and reports a malformed body itself.
        """
        try:
            return await request.json()
        except ValueError:
            return None
