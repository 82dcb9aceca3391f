from starlette.requests import Request

from chess_mcp.game.store import FileGameStore
from chess_mcp.game.tools import chess_move_tool, make_chess_move_handler
from chess_mcp.protocol.initialization import Implementation
from chess_mcp.server.session import McpServer, ServerConfig
from chess_mcp.transport.base import Transport

SERVER_NAME = "Chess MCP Server"
SERVER_VERSION = "0.0.1"


class ChessServerFactory:
    """Makes a fresh chess MCP server for each new session.

    Servers hold no game state of their own; every game lives in the store,
    keyed by session id.
    """

    def __init__(self, store: FileGameStore):
        self.store = store

    def __call__(self, request: Request, transport: Transport) -> McpServer:
        server = McpServer(
            ServerConfig(info=Implementation(name=SERVER_NAME, version=SERVER_VERSION))
        )
        server.tools.register(chess_move_tool, make_chess_move_handler(self.store))
        return server
