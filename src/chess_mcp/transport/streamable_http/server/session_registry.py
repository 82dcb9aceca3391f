"""Session registry for the streamable HTTP router."""

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from chess_mcp.transport.streamable_http.server.transport import (
        StreamableHttpServerTransport,
    )

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Maps session ids to their live transports.

    Entries are a lookup aid only: the transport owns its connection and
    reports its own closure, which is when the entry goes away. All access
    happens on the event loop, so no lock is needed; nothing here awaits.
    """

    def __init__(self) -> None:
        self._transports: dict[str, "StreamableHttpServerTransport"] = {}

    # ================================
    # Registration
    # ================================

    def put(self, session_id: str, transport: "StreamableHttpServerTransport") -> None:
        """Register the transport serving `session_id`."""
        self._transports[session_id] = transport
        logger.debug(f"Registered session {session_id}")

    # ================================
    # Access
    # ================================

    def get(self, session_id: str) -> "StreamableHttpServerTransport | None":
        """Get the transport for a session.

        Returns None if the session isn't registered.
        """
        return self._transports.get(session_id)

    def session_ids(self) -> list[str]:
        return list(self._transports)

    def transports(self) -> list["StreamableHttpServerTransport"]:
        """Snapshot of registered transports, safe to iterate while closing."""
        return list(self._transports.values())

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._transports

    def __len__(self) -> int:
        return len(self._transports)

    # ================================
    # Removal
    # ================================

    def delete(self, session_id: str) -> bool:
        """Remove a session.

        Returns True if the session existed and was removed, False otherwise.
        """
        if self._transports.pop(session_id, None) is not None:
            logger.debug(f"Removed session {session_id}")
            return True
        return False
