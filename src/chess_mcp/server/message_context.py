from dataclasses import dataclass

from chess_mcp.protocol.base import RequestId


@dataclass(frozen=True)
class MessageContext:
    """Context for handling a client -> server request.

    Tool handlers use `session_id` to key per-session state.
    """

    session_id: str | None
    request_id: RequestId
