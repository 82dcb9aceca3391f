"""File-backed game store: one JSON file per session holding its FEN."""

import asyncio
import json
import logging
from pathlib import Path

import chess

from chess_mcp.transport.streamable_http.server.session_id import is_valid_session_id

logger = logging.getLogger(__name__)


class FileGameStore:
    """Keeps the current position of each session's game on disk.

    Keyed by the same session id as the transport registry, but otherwise
    independent of it: a closed session leaves its game file behind.
    """

    def __init__(self, directory: Path | str = "games"):
        self.directory = Path(directory)

    def path_for(self, session_id: str) -> Path:
        return self.directory / f"{session_id}.json"

    async def load(self, session_id: str | None) -> chess.Board | None:
        """Load the session's position, or None if it has no saved game."""
        if not is_valid_session_id(session_id):
            return None
        return await asyncio.to_thread(self._read, self.path_for(session_id))

    async def save(self, session_id: str, board: chess.Board) -> None:
        """Persist the session's position, replacing any previous one.

        Raises:
            ValueError: If the session id isn't a valid session id.
        """
        if not is_valid_session_id(session_id):
            raise ValueError(f"Invalid session ID: {session_id!r}")
        await asyncio.to_thread(self._write, self.path_for(session_id), board.fen())
        logger.debug(f"Saved game for session {session_id}")

    def _read(self, path: Path) -> chess.Board | None:
        if not path.exists():
            return None
        fen = json.loads(path.read_text(encoding="utf-8"))
        return chess.Board(fen)

    def _write(self, path: Path, fen: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(fen, indent=2), encoding="utf-8")
