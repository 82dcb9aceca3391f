import json
from typing import Any
from unittest.mock import AsyncMock, Mock

from starlette.requests import Request

from chess_mcp.protocol.base import PROTOCOL_VERSION

STREAM_ACCEPT = "application/json, text/event-stream"


def initialize_message(request_id: int | str = 1) -> dict[str, Any]:
    return {
        "jsonrpc": "2.0",
        "id": request_id,
        "method": "initialize",
        "params": {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {},
            "clientInfo": {"name": "test-client", "version": "1.0"},
        },
    }


def initialized_notification() -> dict[str, Any]:
    return {"jsonrpc": "2.0", "method": "notifications/initialized"}


def tool_call_message(
    name: str, arguments: dict[str, Any], request_id: int | str = 2
) -> dict[str, Any]:
    return {
        "jsonrpc": "2.0",
        "id": request_id,
        "method": "tools/call",
        "params": {"name": name, "arguments": arguments},
    }


def mock_request(
    method: str = "POST",
    headers: dict[str, str] | None = None,
    body: Any = None,
) -> Mock:
    """Starlette request stand-in with lower-cased headers and a JSON body."""
    request = Mock(spec=Request)
    request.method = method
    default_headers = {}
    if method == "POST":
        default_headers = {"accept": STREAM_ACCEPT, "content-type": "application/json"}
    elif method == "GET":
        default_headers = {"accept": "text/event-stream"}
    request.headers = {**default_headers, **(headers or {})}
    request.json = AsyncMock(return_value=body)
    return request


def parse_sse_events(text: str) -> list[dict[str, Any]]:
    """Decode the JSON payloads of `data:` lines in an SSE body."""
    return [
        json.loads(line[len("data: ") :])
        for line in text.splitlines()
        if line.startswith("data: ")
    ]
