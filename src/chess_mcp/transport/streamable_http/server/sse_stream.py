import asyncio
import json
import logging
from collections.abc import Callable
from typing import Any, AsyncIterator

from chess_mcp.protocol.base import RequestId

logger = logging.getLogger(__name__)

_CLOSE = object()


class SSEStream:
    """A single SSE stream with its own lifecycle.

    Request streams carry the answers to the requests of one POST and finish
    once every one of them has a response. The standalone stream (opened by
    GET) has no request ids and stays open until closed.

    A stream that ends any other way was dropped by the client; that is
    reported through `on_disconnect`.
    """

    def __init__(
        self,
        stream_id: str,
        request_ids: list[RequestId] | None = None,
        on_disconnect: Callable[["SSEStream"], None] | None = None,
    ):
        self.stream_id = stream_id
        self.request_ids: tuple[RequestId, ...] = tuple(request_ids or ())
        self._pending: set[RequestId] = set(self.request_ids)
        self._on_disconnect = on_disconnect
        self._message_queue: asyncio.Queue[Any] = asyncio.Queue()
        self.closed = False

    @property
    def is_standalone(self) -> bool:
        return not self.request_ids

    async def send_message(self, message: dict[str, Any]) -> None:
        """Send message on this stream."""
        self._message_queue.put_nowait(message)

    def close(self) -> None:
        """Explicitly close the stream.

        Synchronous so it can run from a disconnect callback; the queue is
        unbounded, so the sentinel never blocks.
        """
        if self.closed:
            return
        self.closed = True
        self._message_queue.put_nowait(_CLOSE)
        logger.debug(f"Closed stream {self.stream_id}")

    def is_response(self, message: dict[str, Any]) -> bool:
        """Check if message is a JSON-RPC response."""
        id_value = message.get("id")
        has_valid_id = (
            id_value is not None
            and isinstance(id_value, (int, str))
            and not isinstance(id_value, bool)
        )
        has_result = "result" in message
        has_error = "error" in message
        return has_valid_id and (has_result ^ has_error)

    async def event_generator(self) -> AsyncIterator[str]:
        """Generate SSE events for this stream.

        Yields:
            str: SSE event data
        """
        completed = False
        try:
            while True:
                message = await self._message_queue.get()

                if message is _CLOSE:
                    completed = True
                    break

                event_data = json.dumps(message, separators=(",", ":"))
                yield f"data: {event_data}\n\n"

                if self.is_response(message):
                    self._pending.discard(message["id"])
                    if self.request_ids and not self._pending:
                        logger.debug(
                            f"All responses sent on stream {self.stream_id}, closing"
                        )
                        self.closed = True
                        completed = True
                        break
        finally:
            if not completed:
                logger.info(f"Client disconnected from stream {self.stream_id}")
                self.closed = True
                if self._on_disconnect is not None:
                    self._on_disconnect(self)
            logger.debug(f"Stream {self.stream_id} generator finished")
