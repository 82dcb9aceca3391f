"""JSON-RPC message classification for MCP payloads.

Used by the transport to decide how to answer an HTTP request and by the
router to recognise the message that opens a session.
"""

from typing import Any

from chess_mcp.protocol.base import Notification, Request


class MessageParser:
    """Classifies raw JSON-RPC payloads and parses them into typed objects."""

    def parse_request(
        self, payload: dict[str, Any], request_classes: dict[str, type[Request]]
    ) -> Request | None:
        """Parse a request payload into its typed request.

        Returns None if the method is unknown.

        Raises:
            pydantic.ValidationError: If the params don't fit the request type.
        """
        request_class = request_classes.get(payload["method"])
        if request_class is None:
            return None
        return request_class.from_protocol(payload)

    def parse_notification(
        self,
        payload: dict[str, Any],
        notification_classes: dict[str, type[Notification]],
    ) -> Notification | None:
        """Parse a notification payload, or None for unknown methods."""
        notification_class = notification_classes.get(payload["method"])
        if notification_class is None:
            return None
        return notification_class.from_protocol(payload)

    def is_valid_request(self, payload: Any) -> bool:
        """Check if payload is a valid JSON-RPC request."""
        if not isinstance(payload, dict):
            return False
        return isinstance(payload.get("method"), str) and self._has_valid_id(payload)

    def is_valid_notification(self, payload: Any) -> bool:
        """Check if payload is a valid JSON-RPC notification."""
        if not isinstance(payload, dict):
            return False
        return isinstance(payload.get("method"), str) and "id" not in payload

    def is_valid_response(self, payload: Any) -> bool:
        """Check if payload is a valid JSON-RPC response."""
        if not isinstance(payload, dict):
            return False
        has_result = "result" in payload
        has_error = "error" in payload
        return self._has_valid_id(payload) and (has_result ^ has_error)

    def is_valid_message(self, payload: Any) -> bool:
        return (
            self.is_valid_request(payload)
            or self.is_valid_notification(payload)
            or self.is_valid_response(payload)
        )

    def is_initialize_request(self, payload: Any) -> bool:
        """True if payload is an initialize request, or a batch holding one."""
        if isinstance(payload, list):
            return any(self.is_initialize_request(item) for item in payload)
        return self.is_valid_request(payload) and payload["method"] == "initialize"

    def _has_valid_id(self, payload: dict[str, Any]) -> bool:
        id_value = payload.get("id")
        return isinstance(id_value, int | str) and not isinstance(id_value, bool)
