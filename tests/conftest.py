import httpx
import pytest

from chess_mcp.protocol.initialization import Implementation
from chess_mcp.protocol.content import TextContent
from chess_mcp.protocol.tools import CallToolResult, JSONSchema, Tool
from chess_mcp.server.session import McpServer, ServerConfig
from chess_mcp.transport.streamable_http.server.router import SessionRouter


def make_echo_server(request, transport) -> McpServer:
    """Server factory with a single tool that echoes the caller's session id."""
    server = McpServer(ServerConfig(info=Implementation(name="test", version="0.0.1")))

    async def whoami(context, call):
        return CallToolResult(content=[TextContent(text=str(context.session_id))])

    server.tools.register(
        Tool(name="whoami", description="Echo session id", input_schema=JSONSchema()),
        whoami,
    )
    return server


@pytest.fixture
def router():
    return SessionRouter(make_echo_server)


@pytest.fixture
async def client(router):
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=router.app), base_url="http://testserver"
    ) as client:
        yield client
    await router.close()
