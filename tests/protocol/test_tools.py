from chess_mcp.protocol.content import (
    EmbeddedResource,
    TextContent,
    TextResourceContents,
)
from chess_mcp.protocol.tools import CallToolResult, JSONSchema, ListToolsResult, Tool


class TestTool:
    def test_input_schema_serializes_as_camel_case(self):
        # Arrange
        tool = Tool(
            name="chess_move",
            description="Make a move",
            input_schema=JSONSchema(
                properties={"move": {"type": "string"}}, required=["move"]
            ),
        )

        # Act
        wire = ListToolsResult(tools=[tool]).to_protocol()

        # Assert
        assert wire == {
            "tools": [
                {
                    "name": "chess_move",
                    "description": "Make a move",
                    "inputSchema": {
                        "type": "object",
                        "properties": {"move": {"type": "string"}},
                        "required": ["move"],
                    },
                }
            ]
        }


class TestCallToolResult:
    def test_mixed_content_serializes(self):
        # Arrange
        result = CallToolResult(
            content=[
                TextContent(text="board"),
                EmbeddedResource(
                    resource=TextResourceContents(
                        uri="ui://chess_board/8/8/8/8/8/8/8/8 w - - 0 1",
                        mime_type="text/html",
                        text="<html></html>",
                        meta={"mcpui.dev/ui-preferred-frame-size": ["1px", "2px"]},
                    )
                ),
            ]
        )

        # Act
        wire = result.to_protocol()

        # Assert
        assert wire["isError"] is False
        assert wire["content"][0] == {"type": "text", "text": "board"}
        assert wire["content"][1] == {
            "type": "resource",
            "resource": {
                "uri": "ui://chess_board/8/8/8/8/8/8/8/8 w - - 0 1",
                "mimeType": "text/html",
                "text": "<html></html>",
                "_meta": {"mcpui.dev/ui-preferred-frame-size": ["1px", "2px"]},
            },
        }

    def test_parses_content_by_type(self):
        # Arrange
        response = {
            "jsonrpc": "2.0",
            "id": 1,
            "result": {
                "content": [
                    {"type": "text", "text": "hi"},
                    {
                        "type": "resource",
                        "resource": {"uri": "ui://x", "text": "<p/>"},
                    },
                ],
                "isError": True,
            },
        }

        # Act
        result = CallToolResult.from_protocol(response)

        # Assert
        assert result.is_error is True
        assert isinstance(result.content[0], TextContent)
        assert isinstance(result.content[1], EmbeddedResource)
        assert result.content[1].resource.uri == "ui://x"
