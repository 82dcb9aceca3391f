from typing import Any, Literal

from pydantic import Field

from chess_mcp.protocol.base import ProtocolModel


class TextResourceContents(ProtocolModel):
    """
    Resource contents as readable text.

    The URI is kept as a plain string: UI resource URIs embed a FEN, which
    contains spaces and slashes that URL normalization would rewrite.
    """

    uri: str
    mime_type: str | None = Field(default=None, alias="mimeType")
    text: str
    meta: dict[str, Any] | None = Field(default=None, alias="_meta")
    """
    Client-specific hints, e.g. preferred frame size for UI resources.
    """


class TextContent(ProtocolModel):
    """
    Plain text content for tool results.
    """

    type: Literal["text"] = "text"
    text: str
    """The text content."""


class EmbeddedResource(ProtocolModel):
    """
    Server-sourced content embedded directly into tool call results.

    Used to ship the HTML chessboard alongside the textual board state.
    """

    type: Literal["resource"] = "resource"
    resource: TextResourceContents


AnyContent = TextContent | EmbeddedResource

ContentList = list[AnyContent]
