from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import Any

from chess_mcp.protocol.base import RequestId


@dataclass
class TransportMessage:
    """An incoming JSON-RPC message plus where it came from.

    `metadata` holds the `session_id` of HTTP sessions.
    """

    payload: dict[str, Any]
    metadata: dict[str, Any]


class Transport(ABC):
    """One session's message pipe between a client and an McpServer.

    The server reads client messages from `messages()` and writes replies
    with `send()`. Transports know about framing and delivery, never about
    what a message means.
    """

    @property
    @abstractmethod
    def is_open(self) -> bool:
        """False once the transport has closed; it never reopens."""

    @abstractmethod
    async def send(
        self, payload: dict[str, Any], related_request_id: RequestId | None = None
    ) -> None:
        """Deliver a message to the client.

        Args:
            payload: JSON-RPC message.
            related_request_id: The request a non-response message belongs to.
                Lets HTTP transports put it on that request's stream.

        Raises:
            ConnectionError: If the transport is closed.
        """

    @abstractmethod
    def messages(self) -> AsyncIterator[TransportMessage]:
        """Client messages in arrival order. Ends when the transport closes."""

    @abstractmethod
    async def close(self) -> None:
        """Close the transport. Ends `messages()` iteration."""
