"""The `chess_move` tool: one persistent game per session."""

import logging

from chess_mcp.game import rules
from chess_mcp.game.store import FileGameStore
from chess_mcp.game.ui import board_ui_resource
from chess_mcp.protocol.content import TextContent
from chess_mcp.protocol.tools import CallToolRequest, CallToolResult, JSONSchema, Tool
from chess_mcp.server.message_context import MessageContext
from chess_mcp.server.managers.tools import ToolHandler

logger = logging.getLogger(__name__)

NEW_GAME = "new"

chess_move_tool = Tool(
    name="chess_move",
    description="Make a move in standard algebraic notation (e.g., e4, Nf3, O-O)",
    input_schema=JSONSchema(
        properties={
            "move": {
                "type": "string",
                "description": "The chess move in standard algebraic notation,"
                " or the string 'new' to start a new game",
            }
        },
        required=["move"],
    ),
)


def describe_position(fen: str, moves: list[str], ascii_board: str) -> str:
    return (
        "Current board state:\n"
        f"FEN: {fen}\n"
        f"VALID MOVES: {','.join(moves)}\n"
        "\n"
        f"{ascii_board}"
    )


def make_chess_move_handler(store: FileGameStore) -> ToolHandler:
    """Build the `chess_move` handler bound to a game store."""

    async def chess_move_handler(
        context: MessageContext, request: CallToolRequest
    ) -> CallToolResult:
        move = (request.arguments or {}).get("move")
        if not isinstance(move, str) or not move.strip():
            return CallToolResult(
                content=[TextContent(text="Missing required argument: move")],
                is_error=True,
            )
        move = move.strip()

        board = await store.load(context.session_id)
        if move == NEW_GAME or board is None:
            board = rules.new_position()

        if move != NEW_GAME:
            try:
                rules.apply_move(board, move)
            except rules.IllegalMoveError as e:
                return CallToolResult(content=[TextContent(text=str(e))], is_error=True)

        if context.session_id is not None:
            await store.save(context.session_id, board)
        else:
            logger.warning("chess_move called without a session; game not saved")

        fen = rules.position_fen(board)
        text = describe_position(
            fen, rules.legal_moves(board), rules.render_ascii(board)
        )
        return CallToolResult(content=[TextContent(text=text), board_ui_resource(fen)])

    return chess_move_handler
