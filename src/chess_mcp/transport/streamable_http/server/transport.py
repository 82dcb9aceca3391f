"""Per-session streamable HTTP server transport."""

import asyncio
import logging
from collections.abc import Callable
from typing import Any, AsyncIterator

from starlette.requests import Request
from starlette.responses import JSONResponse, Response, StreamingResponse

from chess_mcp.protocol.base import (
    INVALID_REQUEST,
    PARSE_ERROR,
    SERVER_ERROR,
    SUPPORTED_PROTOCOL_VERSIONS,
    RequestId,
    error_envelope,
)
from chess_mcp.shared.message_parser import MessageParser
from chess_mcp.transport.base import Transport, TransportMessage
from chess_mcp.transport.streamable_http.server.headers import (
    PROTOCOL_VERSION_HEADER,
    SESSION_ID_HEADER,
    extract_session_id,
)
from chess_mcp.transport.streamable_http.server.sse_stream import SSEStream
from chess_mcp.transport.streamable_http.server.stream_manager import StreamManager

logger = logging.getLogger(__name__)


class StreamableHttpServerTransport(Transport):
    """Turns the HTTP exchanges of one session into a message stream.

    Two modes:
    - generated: `session_id_generator` is set. The id is assigned when the
      initialize request arrives, and `on_session_initialized` is called with
      it before the message is relayed.
    - explicit: no generator. The owner sets `session_id` up front, which is
      how a session presented by a client is resumed.

    The transport closes on DELETE, on a malformed body, or when the client
    drops one of its SSE streams. `on_close` fires exactly once, after the
    streams and the message iterator have been shut down.
    """

    def __init__(
        self,
        session_id_generator: Callable[[], str] | None = None,
        on_session_initialized: Callable[[str], None] | None = None,
    ) -> None:
        self.session_id: str | None = None
        self.on_close: Callable[[], None] | None = None

        self._session_id_generator = session_id_generator
        self._on_session_initialized = on_session_initialized
        self._initialized = False
        self._closed = False

        self._message_parser = MessageParser()
        self._stream_manager = StreamManager(on_disconnect=self._handle_disconnect)
        self._message_queue: asyncio.Queue[TransportMessage | None] = asyncio.Queue()

    @property
    def is_open(self) -> bool:
        return not self._closed

    @property
    def initialized(self) -> bool:
        return self._initialized

    # ================================
    # HTTP handling
    # ================================

    async def handle_request(self, request: Request, body: Any = None) -> Response:
        """Answer one HTTP request for this session.

        Args:
            request: The incoming request.
            body: The already-parsed JSON body, if the caller read it. When
                None, a POST body is read from the request.
        """
        if self._closed:
            return self._error_response(404, SERVER_ERROR, "Session not found")

        if request.method == "POST":
            return await self._handle_post_request(request, body)
        elif request.method == "GET":
            return await self._handle_get_request(request)
        elif request.method == "DELETE":
            return await self._handle_delete_request(request)
        else:
            return self._error_response(405, SERVER_ERROR, "Method not allowed")

    async def _handle_post_request(self, request: Request, body: Any) -> Response:
        """Handle HTTP POST request with one JSON-RPC message or a batch."""
        accept = request.headers.get("accept", "")
        if "application/json" not in accept or "text/event-stream" not in accept:
            return self._error_response(
                406,
                SERVER_ERROR,
                "Not Acceptable: Client must accept both application/json"
                " and text/event-stream",
            )

        content_type = request.headers.get("content-type", "")
        if "application/json" not in content_type:
            return self._error_response(
                415,
                SERVER_ERROR,
                "Unsupported Media Type: Content-Type must be application/json",
            )

        if body is None:
            try:
                body = await request.json()
            except ValueError:
                logger.warning(f"Malformed JSON body for session {self.session_id}")
                await self.close()
                return self._error_response(400, PARSE_ERROR, "Parse error")

        messages = body if isinstance(body, list) else [body]
        if not messages or not all(
            self._message_parser.is_valid_message(message) for message in messages
        ):
            logger.warning(f"Invalid JSON-RPC body for session {self.session_id}")
            await self.close()
            return self._error_response(
                400, INVALID_REQUEST, "Invalid Request: Body is not valid JSON-RPC"
            )

        if self._message_parser.is_initialize_request(messages):
            error = self._initialize(messages)
        else:
            error = self._validate_session(request) or self._validate_protocol_version(
                request
            )
        if error is not None:
            return error

        headers = self._build_response_headers()
        request_ids = [
            message["id"]
            for message in messages
            if self._message_parser.is_valid_request(message)
        ]

        if not request_ids:
            self._enqueue(messages)
            return Response(status_code=202, headers=headers)

        # Stream first, so responses to these requests always have a home.
        stream = self._stream_manager.create_request_stream(request_ids)
        self._enqueue(messages)
        return self._stream_response(stream, headers)

    async def _handle_get_request(self, request: Request) -> Response:
        """Open the standalone stream for server-initiated messages."""
        if "text/event-stream" not in request.headers.get("accept", ""):
            return self._error_response(
                406, SERVER_ERROR, "Not Acceptable: Client must accept text/event-stream"
            )

        error = self._validate_session(request) or self._validate_protocol_version(
            request
        )
        if error is not None:
            return error

        if self._stream_manager.has_standalone_stream:
            return self._error_response(
                409, SERVER_ERROR, "Conflict: Only one SSE stream is allowed per session"
            )

        stream = self._stream_manager.create_standalone_stream()
        return self._stream_response(stream, self._build_response_headers())

    async def _handle_delete_request(self, request: Request) -> Response:
        """Handle session termination."""
        error = self._validate_session(request)
        if error is not None:
            return error

        headers = self._build_response_headers()
        await self.close()
        return Response(status_code=200, headers=headers)

    def _initialize(self, messages: list[dict[str, Any]]) -> Response | None:
        """Start the session for an initialize request.

        Returns an error response if the request can't open a session.
        """
        if len(messages) > 1:
            return self._error_response(
                400,
                INVALID_REQUEST,
                "Invalid Request: Only one initialization request is allowed",
            )

        if self._session_id_generator is not None:
            if self._initialized:
                return self._error_response(
                    400, INVALID_REQUEST, "Invalid Request: Server already initialized"
                )
            self.session_id = self._session_id_generator()

        self._initialized = True
        logger.info(f"Session {self.session_id} initialized")

        if self.session_id is not None and self._on_session_initialized is not None:
            self._on_session_initialized(self.session_id)
        return None

    def _validate_session(self, request: Request) -> Response | None:
        """Check the request belongs to this session.

        Explicit-mode transports were already matched by id, so a missing
        header is accepted there; a mismatching one never is.
        """
        header_session_id = extract_session_id(request.headers, SESSION_ID_HEADER)

        if self._session_id_generator is None:
            if header_session_id is not None and header_session_id != self.session_id:
                return self._error_response(404, SERVER_ERROR, "Session not found")
            return None

        if not self._initialized:
            return self._error_response(
                400, SERVER_ERROR, "Bad Request: Server not initialized"
            )
        if header_session_id is None:
            return self._error_response(
                400, SERVER_ERROR, "Bad Request: Mcp-Session-Id header is required"
            )
        if header_session_id != self.session_id:
            return self._error_response(404, SERVER_ERROR, "Session not found")
        return None

    def _validate_protocol_version(self, request: Request) -> Response | None:
        """Reject an explicit but unsupported MCP-Protocol-Version header."""
        protocol_version = request.headers.get(PROTOCOL_VERSION_HEADER)
        if protocol_version is None or protocol_version in SUPPORTED_PROTOCOL_VERSIONS:
            return None

        logger.warning(f"Unsupported MCP-Protocol-Version header: {protocol_version}")
        return self._error_response(
            400,
            SERVER_ERROR,
            f"Bad Request: Unsupported protocol version: {protocol_version}"
            f" (supported versions: {', '.join(SUPPORTED_PROTOCOL_VERSIONS)})",
        )

    def _build_response_headers(self) -> dict[str, str]:
        headers = {"Cache-Control": "no-cache"}
        if self.session_id is not None:
            headers[SESSION_ID_HEADER] = self.session_id
        return headers

    def _error_response(self, status_code: int, code: int, message: str) -> Response:
        return JSONResponse(
            error_envelope(code, message),
            status_code=status_code,
            headers=self._build_response_headers(),
        )

    def _stream_response(
        self, stream: SSEStream, headers: dict[str, str]
    ) -> StreamingResponse:
        return StreamingResponse(
            stream.event_generator(),
            media_type="text/event-stream",
            headers={**headers, "Connection": "keep-alive"},
        )

    def _enqueue(self, messages: list[dict[str, Any]]) -> None:
        for message in messages:
            self._message_queue.put_nowait(
                TransportMessage(
                    payload=message, metadata={"session_id": self.session_id}
                )
            )

    # ================================
    # Transport interface
    # ================================

    async def send(
        self, payload: dict[str, Any], related_request_id: RequestId | None = None
    ) -> None:
        """Send a message to the client on the stream it belongs to.

        Raises:
            ConnectionError: If the transport is closed
        """
        if self._closed:
            raise ConnectionError("Transport closed")

        if not await self._stream_manager.send(payload, related_request_id):
            logger.warning(
                f"Dropping message for session {self.session_id}: no open stream"
            )

    async def messages(self) -> AsyncIterator[TransportMessage]:
        """Messages from the client, until the transport closes."""
        while True:
            message = await self._message_queue.get()
            if message is None:
                return
            yield message

    async def close(self) -> None:
        """Close the transport. Safe to call multiple times."""
        self._close()

    def _close(self) -> None:
        if self._closed:
            return
        self._closed = True

        self._stream_manager.close_all_streams()
        self._message_queue.put_nowait(None)
        logger.info(f"Session {self.session_id} closed")

        if self.on_close is not None:
            self.on_close()

    def _handle_disconnect(self, stream: SSEStream) -> None:
        logger.info(
            f"Client dropped stream {stream.stream_id}, closing session {self.session_id}"
        )
        self._close()
