"""Handshake messages: the initialize request/result pair and the client's
`notifications/initialized` acknowledgement.

Capability objects only model what this server reads or advertises. Anything
else a client declares survives as a plain dict.
"""

from typing import Any, Literal

from pydantic import Field

from chess_mcp.protocol.base import (
    PROTOCOL_VERSION,
    SUPPORTED_PROTOCOL_VERSIONS,
    Notification,
    ProtocolModel,
    Request,
    Result,
)


def negotiate_version(requested: str | None) -> str:
    """Pick the protocol version to answer an initialize request with.

    A supported version is echoed back; anything else gets the latest one.
    """
    if requested in SUPPORTED_PROTOCOL_VERSIONS:
        return requested
    return PROTOCOL_VERSION


class Implementation(ProtocolModel):
    """Who is on the other end: product name and version."""

    name: str
    version: str


class ClientCapabilities(ProtocolModel):
    # Recorded for logging; no chess tool depends on them.
    experimental: dict[str, Any] | None = None
    roots: dict[str, Any] | None = None
    sampling: dict[str, Any] | None = None
    elicitation: dict[str, Any] | None = None


class ToolsCapability(ProtocolModel):
    list_changed: bool | None = Field(default=None, alias="listChanged")


class ServerCapabilities(ProtocolModel):
    """What the server offers. The chess server only offers tools."""

    tools: ToolsCapability | None = None
    logging: dict[str, Any] | None = None
    experimental: dict[str, Any] | None = None


class InitializeRequest(Request):
    """First request of a session.

    Over streamable HTTP, this is the only request that may arrive without an
    Mcp-Session-Id header: it's what gets a session id assigned.
    """

    method: Literal["initialize"] = "initialize"
    protocol_version: str = Field(default=PROTOCOL_VERSION, alias="protocolVersion")
    client_info: Implementation = Field(alias="clientInfo")
    capabilities: ClientCapabilities = Field(default_factory=ClientCapabilities)


class InitializeResult(Result):
    protocol_version: str = Field(default=PROTOCOL_VERSION, alias="protocolVersion")
    capabilities: ServerCapabilities
    server_info: Implementation = Field(alias="serverInfo")
    instructions: str | None = None


class InitializedNotification(Notification):
    """Client's acknowledgement of the InitializeResult."""

    method: Literal["notifications/initialized"] = "notifications/initialized"
