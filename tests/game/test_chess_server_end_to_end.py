"""Playing chess through the HTTP endpoint, one game per session."""

import json

import chess
import httpx
import pytest

from chess_mcp.app import create_app
from chess_mcp.config import Settings
from tests.helpers import (
    STREAM_ACCEPT,
    initialize_message,
    initialized_notification,
    parse_sse_events,
    tool_call_message,
)

HEADERS = {"accept": STREAM_ACCEPT, "content-type": "application/json"}


@pytest.fixture
def games_dir(tmp_path):
    return tmp_path / "games"


@pytest.fixture
async def client(games_dir):
    app = create_app(Settings(games_dir=games_dir))
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app), base_url="http://testserver"
    ) as client:
        yield client
    await app.state.router.close()


async def start_session(client) -> str:
    response = await client.post("/mcp", json=initialize_message(), headers=HEADERS)
    [event] = parse_sse_events(response.text)
    assert event["result"]["serverInfo"] == {
        "name": "Chess MCP Server",
        "version": "0.0.1",
    }
    session_id = response.headers["mcp-session-id"]
    await client.post(
        "/mcp",
        json=initialized_notification(),
        headers={**HEADERS, "mcp-session-id": session_id},
    )
    return session_id


async def call(client, session_id: str, message: dict) -> dict:
    response = await client.post(
        "/mcp", json=message, headers={**HEADERS, "mcp-session-id": session_id}
    )
    assert response.status_code == 200
    [event] = parse_sse_events(response.text)
    return event


async def move(client, session_id: str, san: str, request_id: int = 2) -> dict:
    event = await call(
        client, session_id, tool_call_message("chess_move", {"move": san}, request_id)
    )
    return event["result"]


class TestChessOverHttp:
    async def test_tools_list_offers_chess_move(self, client):
        # Arrange
        session_id = await start_session(client)

        # Act
        event = await call(
            client, session_id, {"jsonrpc": "2.0", "id": 2, "method": "tools/list"}
        )

        # Assert
        [tool] = event["result"]["tools"]
        assert tool["name"] == "chess_move"
        assert tool["inputSchema"]["required"] == ["move"]

    async def test_game_is_saved_per_session(self, client, games_dir):
        # Arrange
        session_id = await start_session(client)

        # Act
        result = await move(client, session_id, "e4")

        # Assert
        assert result["isError"] is False
        text, resource = result["content"]
        assert text["type"] == "text"
        assert resource["type"] == "resource"
        assert resource["resource"]["mimeType"] == "text/html"
        assert resource["resource"]["uri"].startswith("ui://chess_board/")
        saved = json.loads((games_dir / f"{session_id}.json").read_text())
        assert saved == "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq - 0 1"

    async def test_sessions_play_independent_games(self, client, games_dir):
        # Arrange
        first = await start_session(client)
        second = await start_session(client)

        # Act
        await move(client, first, "e4")
        await move(client, first, "e5", request_id=3)
        await move(client, second, "d4")

        # Assert
        first_board = chess.Board(json.loads((games_dir / f"{first}.json").read_text()))
        second_board = chess.Board(
            json.loads((games_dir / f"{second}.json").read_text())
        )
        assert first_board.piece_at(chess.E5) is not None
        assert second_board.piece_at(chess.D4) is not None
        assert second_board.piece_at(chess.E4) is None

    async def test_illegal_move_reports_error_result(self, client):
        # Arrange
        session_id = await start_session(client)

        # Act
        result = await move(client, session_id, "Ke2")

        # Assert
        assert result["isError"] is True
        assert result["content"] == [{"type": "text", "text": "Illegal move: Ke2"}]

    async def test_game_survives_delete_and_resume(self, client, games_dir):
        # Arrange
        session_id = await start_session(client)
        await move(client, session_id, "e4")
        await client.delete("/mcp", headers={"mcp-session-id": session_id})

        # Act
        result = await move(client, session_id, "c5", request_id=4)

        # Assert
        assert result["isError"] is False
        board = chess.Board(json.loads((games_dir / f"{session_id}.json").read_text()))
        assert board.piece_at(chess.E4) is not None
        assert board.piece_at(chess.C5) is not None
