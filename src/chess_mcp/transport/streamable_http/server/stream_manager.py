import logging
import uuid
from collections.abc import Callable
from typing import Any

from chess_mcp.protocol.base import RequestId
from chess_mcp.transport.streamable_http.server.sse_stream import SSEStream

logger = logging.getLogger(__name__)


class StreamManager:
    """Routes outgoing messages onto the SSE streams of one session."""

    def __init__(self, on_disconnect: Callable[[SSEStream], None] | None = None):
        self._request_streams: dict[RequestId, SSEStream] = {}
        self._standalone_stream: SSEStream | None = None
        self._on_disconnect = on_disconnect

    @property
    def has_standalone_stream(self) -> bool:
        return self._standalone_stream is not None

    def create_request_stream(self, request_ids: list[RequestId]) -> SSEStream:
        """Create a stream answering the given requests."""
        stream = SSEStream(
            str(uuid.uuid4()), request_ids, on_disconnect=self._handle_disconnect
        )
        for request_id in request_ids:
            self._request_streams[request_id] = stream

        logger.debug(f"Created stream {stream.stream_id} for requests {request_ids}")
        return stream

    def create_standalone_stream(self) -> SSEStream:
        """Create the server-to-client stream.

        Raises:
            RuntimeError: If the session already has one.
        """
        if self._standalone_stream is not None:
            raise RuntimeError("Standalone stream already open")
        stream = SSEStream(str(uuid.uuid4()), on_disconnect=self._handle_disconnect)
        self._standalone_stream = stream

        logger.debug(f"Created standalone stream {stream.stream_id}")
        return stream

    async def send(
        self, message: dict[str, Any], related_request_id: RequestId | None = None
    ) -> bool:
        """Send message to the stream it belongs to.

        Responses go to the stream holding their id. Other messages follow
        `related_request_id`, falling back to the standalone stream.

        Returns:
            True if message was sent, False if there was no stream for it
        """
        is_response = "id" in message and ("result" in message or "error" in message)
        request_id = message["id"] if is_response else related_request_id

        if request_id is not None:
            stream = self._request_streams.get(request_id)
            if is_response:
                self._request_streams.pop(request_id, None)
            if stream is not None and not stream.closed:
                await stream.send_message(message)
                return True
            if is_response:
                return False

        stream = self._standalone_stream
        if stream is not None and not stream.closed:
            await stream.send_message(message)
            return True
        return False

    def close_all_streams(self) -> None:
        """Close all streams."""
        streams = set(self._request_streams.values())
        if self._standalone_stream is not None:
            streams.add(self._standalone_stream)
        for stream in streams:
            stream.close()
        self._request_streams.clear()
        self._standalone_stream = None

    def _handle_disconnect(self, stream: SSEStream) -> None:
        self._forget(stream)
        if self._on_disconnect is not None:
            self._on_disconnect(stream)

    def _forget(self, stream: SSEStream) -> None:
        for request_id in stream.request_ids:
            if self._request_streams.get(request_id) is stream:
                del self._request_streams[request_id]
        if self._standalone_stream is stream:
            self._standalone_stream = None
