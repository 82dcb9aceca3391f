from typing import Any, Literal

from pydantic import Field

from chess_mcp.protocol.base import ProtocolModel, Request, Result
from chess_mcp.protocol.content import ContentList


class JSONSchema(ProtocolModel):
    """JSON Schema describing the arguments a tool accepts."""

    type: Literal["object"] = "object"
    properties: dict[str, Any] | None = None
    required: list[str] | None = None


class Tool(ProtocolModel):
    """
    Definition of a tool the client can call.
    """

    name: str
    description: str | None = None
    input_schema: JSONSchema = Field(alias="inputSchema")
    """
    Schema for the `arguments` of a tools/call request.
    """


class ListToolsRequest(Request):
    """Sent by the client to discover the server's tools."""

    method: Literal["tools/list"] = "tools/list"
    cursor: str | None = None


class ListToolsResult(Result):
    tools: list[Tool]
    next_cursor: str | None = Field(default=None, alias="nextCursor")


class CallToolRequest(Request):
    """Invoke a tool by name with arguments."""

    method: Literal["tools/call"] = "tools/call"
    name: str
    arguments: dict[str, Any] | None = None


class CallToolResult(Result):
    """
    Outcome of a tool call.

    Tool failures are reported here with `is_error=True` rather than as
    protocol errors, so the model can see what went wrong and recover.
    """

    content: ContentList
    is_error: bool = Field(default=False, alias="isError")
