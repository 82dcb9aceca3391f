import logging
from typing import Awaitable, Callable

from chess_mcp.protocol.content import TextContent
from chess_mcp.protocol.tools import (
    CallToolRequest,
    CallToolResult,
    ListToolsRequest,
    ListToolsResult,
    Tool,
)
from chess_mcp.server.message_context import MessageContext

logger = logging.getLogger(__name__)

ToolHandler = Callable[[MessageContext, CallToolRequest], Awaitable[CallToolResult]]


class ToolManager:
    """Tool definitions and their handlers, keyed by tool name."""

    def __init__(self):
        self.registered: dict[str, Tool] = {}
        self.handlers: dict[str, ToolHandler] = {}

    def register(self, tool: Tool, handler: ToolHandler) -> None:
        """Add a tool, replacing any tool with the same name.

        Handlers receive the calling session's context, so per-session state
        can be looked up by `context.session_id`. Expected failures (bad input,
        illegal moves) should come back as a result with `is_error=True`.
        """
        self.registered[tool.name] = tool
        self.handlers[tool.name] = handler

    async def handle_list(self, request: ListToolsRequest) -> ListToolsResult:
        # No pagination: the cursor is ignored.
        return ListToolsResult(tools=list(self.registered.values()))

    async def handle_call(
        self, context: MessageContext, request: CallToolRequest
    ) -> CallToolResult:
        """Run the named tool's handler.

        A handler that raises still produces a result, flagged as an error,
        so the model sees the failure as tool output.

        Raises:
            KeyError: If no tool has that name.
        """
        handler = self.handlers[request.name]
        try:
            return await handler(context, request)
        except Exception as e:
            logger.exception(f"Tool {request.name} failed")
            return CallToolResult(
                content=[TextContent(text=f"Tool execution failed: {e}")],
                is_error=True,
            )
