from typing import Literal

from chess_mcp.protocol.base import Request, Result


class PingRequest(Request):
    """
    Liveness check. Either side may send it; the receiver answers promptly
    with an empty result.
    """

    method: Literal["ping"] = "ping"


class EmptyResult(Result):
    """A result that carries no data, only success."""
