"""MCP server session: answers one client's requests over one transport."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from chess_mcp.protocol.base import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    METHOD_NOT_FOUND,
    Error,
    Notification,
    Request,
    Result,
    build_response,
)
from chess_mcp.protocol.common import EmptyResult, PingRequest
from chess_mcp.protocol.initialization import (
    ClientCapabilities,
    Implementation,
    InitializedNotification,
    InitializeRequest,
    InitializeResult,
    ServerCapabilities,
    ToolsCapability,
    negotiate_version,
)
from chess_mcp.protocol.tools import (
    CallToolRequest,
    CallToolResult,
    ListToolsRequest,
    ListToolsResult,
)
from chess_mcp.server.managers.tools import ToolManager
from chess_mcp.server.message_context import MessageContext
from chess_mcp.shared.message_parser import MessageParser
from chess_mcp.transport.base import Transport, TransportMessage

logger = logging.getLogger(__name__)

REQUEST_CLASSES: dict[str, type[Request]] = {
    "initialize": InitializeRequest,
    "ping": PingRequest,
    "tools/list": ListToolsRequest,
    "tools/call": CallToolRequest,
}

NOTIFICATION_CLASSES: dict[str, type[Notification]] = {
    "notifications/initialized": InitializedNotification,
}


@dataclass
class ServerConfig:
    info: Implementation
    capabilities: ServerCapabilities = field(
        default_factory=lambda: ServerCapabilities(tools=ToolsCapability())
    )
    instructions: str | None = None


@dataclass
class ClientState:
    capabilities: ClientCapabilities | None = None
    info: Implementation | None = None
    protocol_version: str | None = None


class McpServer:
    """Protocol handler for a single session.

    Create one per session, register tools, then `connect()` it to the
    session's transport. The server reads messages until the transport
    closes. Requests are handled as background tasks so a slow tool call
    doesn't hold up the rest of the session.
    """

    def __init__(self, config: ServerConfig):
        self.server_config = config
        self.client_state = ClientState()
        self.tools = ToolManager()
        self.transport: Transport | None = None

        self._received_initialized = False
        self._message_parser = MessageParser()
        self._message_loop_task: asyncio.Task[None] | None = None
        self._in_flight_requests: dict[str | int, asyncio.Task[None]] = {}

    @property
    def initialized(self) -> bool:
        return self._received_initialized

    @property
    def running(self) -> bool:
        """True if the message loop is actively processing messages."""
        return (
            self._message_loop_task is not None and not self._message_loop_task.done()
        )

    async def connect(self, transport: Transport) -> None:
        """Start processing messages from the transport.

        Raises:
            ConnectionError: If the transport is already closed.
            RuntimeError: If the server is already connected.
        """
        if self.running:
            raise RuntimeError("Server is already connected to a transport")
        if not transport.is_open:
            raise ConnectionError("Cannot connect: transport is closed")

        self.transport = transport
        self._message_loop_task = asyncio.create_task(self._message_loop())

    async def stop(self) -> None:
        """Stop message processing and cancel in-flight requests.

        Safe to call multiple times.
        """
        if self._message_loop_task is not None:
            self._message_loop_task.cancel()
            try:
                await self._message_loop_task
            except asyncio.CancelledError:
                pass
            self._message_loop_task = None
        self._cancel_in_flight_requests()

    async def _message_loop(self) -> None:
        """Process incoming messages until the transport closes.

        A bad message is logged and skipped; it doesn't end the session.
        Requests still running when the transport closes are cancelled.
        """
        async for transport_message in self.transport.messages():
            try:
                self._handle_message(transport_message)
            except Exception:
                logger.exception("Error handling message")
        logger.debug("Message loop finished: transport closed")
        self._cancel_in_flight_requests()

    def _cancel_in_flight_requests(self) -> None:
        for task in list(self._in_flight_requests.values()):
            task.cancel()
        self._in_flight_requests.clear()

    def _handle_message(self, transport_message: TransportMessage) -> None:
        payload = transport_message.payload
        session_id = transport_message.metadata.get("session_id")

        if self._message_parser.is_valid_request(payload):
            request_id = payload["id"]
            task = asyncio.create_task(
                self._handle_request(session_id, payload),
                name=f"handle_request_{request_id}",
            )
            self._in_flight_requests[request_id] = task
            task.add_done_callback(
                lambda t, request_id=request_id: self._in_flight_requests.pop(
                    request_id, None
                )
            )
        elif self._message_parser.is_valid_notification(payload):
            self._handle_notification(payload)
        elif self._message_parser.is_valid_response(payload):
            # This server never sends requests, so there is nothing to resolve.
            logger.debug(f"Ignoring response to unknown request {payload['id']}")
        else:
            raise ValueError(f"Unknown message type: {payload}")

    # ================================
    # Requests
    # ================================

    async def _handle_request(self, session_id: str | None, payload: dict[str, Any]) -> None:
        """Answer a request. Errors become JSON-RPC error responses."""
        request_id = payload["id"]
        try:
            request = self._message_parser.parse_request(payload, REQUEST_CLASSES)
        except ValidationError as e:
            result: Result | Error = Error(
                code=INVALID_PARAMS, message=f"Invalid params: {e.error_count()} errors"
            )
        else:
            if request is None:
                result = Error(
                    code=METHOD_NOT_FOUND,
                    message=f"Method not supported: {payload['method']}",
                )
            else:
                context = MessageContext(session_id=session_id, request_id=request_id)
                try:
                    result = await self._route_request(context, request)
                except Exception:
                    logger.exception(f"Error handling {payload['method']} request")
                    result = Error(code=INTERNAL_ERROR, message="Internal error")

        try:
            await self.transport.send(
                build_response(request_id, result), related_request_id=request_id
            )
        except ConnectionError:
            logger.info(f"Session closed before response to request {request_id}")

    async def _route_request(
        self, context: MessageContext, request: Request
    ) -> Result | Error:
        handlers: dict[
            str, Callable[[MessageContext, Any], Awaitable[Result | Error]]
        ] = {
            "initialize": self._handle_initialize,
            "ping": self._handle_ping,
            "tools/list": self._handle_list_tools,
            "tools/call": self._handle_call_tool,
        }
        return await handlers[request.method](context, request)

    async def _handle_initialize(
        self, context: MessageContext, request: InitializeRequest
    ) -> InitializeResult:
        """Record the client and answer with the server's capabilities.

        The client's protocol version is echoed back when supported, otherwise
        the server proposes its own.
        """
        self.client_state.capabilities = request.capabilities
        self.client_state.info = request.client_info
        self.client_state.protocol_version = request.protocol_version

        protocol_version = negotiate_version(request.protocol_version)
        logger.info(
            f"Client {request.client_info.name} {request.client_info.version}"
            f" initializing session {context.session_id} ({protocol_version})"
        )
        return InitializeResult(
            capabilities=self.server_config.capabilities,
            server_info=self.server_config.info,
            protocol_version=protocol_version,
            instructions=self.server_config.instructions,
        )

    async def _handle_ping(
        self, context: MessageContext, request: PingRequest
    ) -> EmptyResult:
        return EmptyResult()

    async def _handle_list_tools(
        self, context: MessageContext, request: ListToolsRequest
    ) -> ListToolsResult | Error:
        if self.server_config.capabilities.tools is None:
            return Error(
                code=METHOD_NOT_FOUND,
                message="Server does not support tools capability",
            )
        return await self.tools.handle_list(request)

    async def _handle_call_tool(
        self, context: MessageContext, request: CallToolRequest
    ) -> CallToolResult | Error:
        """Execute a tool call request.

        Tool execution failures come back as CallToolResult with is_error=True.
        Unknown tools are protocol errors.
        """
        if self.server_config.capabilities.tools is None:
            return Error(
                code=METHOD_NOT_FOUND,
                message="Server does not support tools capability",
            )
        try:
            return await self.tools.handle_call(context, request)
        except KeyError:
            return Error(code=INVALID_PARAMS, message=f"Unknown tool: {request.name}")

    # ================================
    # Notifications
    # ================================

    def _handle_notification(self, payload: dict[str, Any]) -> None:
        try:
            notification = self._message_parser.parse_notification(
                payload, NOTIFICATION_CLASSES
            )
        except ValidationError:
            logger.warning(f"Malformed notification: {payload['method']}")
            return

        if isinstance(notification, InitializedNotification):
            self._received_initialized = True
        elif notification is None:
            logger.debug(f"Ignoring notification: {payload['method']}")
