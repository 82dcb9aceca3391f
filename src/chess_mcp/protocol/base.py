"""Core MCP protocol types shared by every message family.

Models use snake_case attributes with camelCase wire aliases. Requests and
notifications flatten their `params` onto the model; `from_protocol` and
`to_protocol` translate between the wire envelope and the Python API.
"""

from typing import Any, Self

from pydantic import BaseModel, ConfigDict

PROTOCOL_VERSION = "2025-06-18"
SUPPORTED_PROTOCOL_VERSIONS = ("2025-06-18", "2025-03-26", "2024-11-05")

JSONRPC_VERSION = "2.0"

# JSON-RPC error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

# Implementation-defined server error, used for transport/session failures.
SERVER_ERROR = -32000

RequestId = str | int


class ProtocolModel(BaseModel):
    """Base class for all protocol models."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class Request(ProtocolModel):
    """Base class for JSON-RPC requests.

    The request id is a transport concern and is tracked by the session, not
    the model.
    """

    method: str

    @classmethod
    def from_protocol(cls, data: dict[str, Any]) -> Self:
        """Build a typed request from a JSON-RPC request payload."""
        params = data.get("params") or {}
        return cls.model_validate({**params, "method": data["method"]})

    def to_protocol(self) -> dict[str, Any]:
        """Convert to a JSON-RPC request payload without the id."""
        params = self.model_dump(
            by_alias=True, exclude_none=True, exclude={"method"}, mode="json"
        )
        message: dict[str, Any] = {"jsonrpc": JSONRPC_VERSION, "method": self.method}
        if params:
            message["params"] = params
        return message


class Notification(Request):
    """Base class for JSON-RPC notifications. Same shape as a request, no id."""


class Result(ProtocolModel):
    """Base class for successful request results."""

    @classmethod
    def from_protocol(cls, data: dict[str, Any]) -> Self:
        return cls.model_validate(data.get("result") or {})

    def to_protocol(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class Error(ProtocolModel):
    """JSON-RPC error object."""

    code: int
    message: str
    data: Any | None = None

    @classmethod
    def from_protocol(cls, data: dict[str, Any]) -> Self:
        return cls.model_validate(data["error"])

    def to_protocol(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True, mode="json")


def build_response(request_id: RequestId, result: Result | Error) -> dict[str, Any]:
    """Wrap a result or error into a JSON-RPC response for `request_id`."""
    if isinstance(result, Error):
        return {
            "jsonrpc": JSONRPC_VERSION,
            "id": request_id,
            "error": result.to_protocol(),
        }
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "result": result.to_protocol()}


def error_envelope(
    code: int, message: str, request_id: RequestId | None = None
) -> dict[str, Any]:
    """JSON-RPC error response body used for HTTP-level rejections."""
    return {
        "jsonrpc": JSONRPC_VERSION,
        "error": {"code": code, "message": message},
        "id": request_id,
    }
