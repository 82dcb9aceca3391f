"""Thin rules layer over python-chess.

Moves are accepted in SAN (``Nf3``), UCI (``g1f3``) or the board UI's
drag notation (``g1-f3``).
"""

import re

import chess

_SQUARE_MOVE = re.compile(r"^([a-h][1-8])-?([a-h][1-8])([qrbn])?$")


class IllegalMoveError(ValueError):
    """The move can't be parsed or isn't legal in the position."""


def new_position() -> chess.Board:
    return chess.Board()


def position_from_fen(fen: str) -> chess.Board:
    """Raises ValueError for a malformed FEN."""
    return chess.Board(fen)


def apply_move(board: chess.Board, move: str) -> chess.Move:
    """Play `move` on `board` in place.

    A pawn dragged to the last rank without a promotion piece becomes a queen.

    Raises:
        IllegalMoveError: If the move is malformed, ambiguous or illegal.
    """
    text = move.strip()
    try:
        parsed = _parse_square_move(board, text) or board.parse_san(text)
    except ValueError as e:
        raise IllegalMoveError(f"Illegal move: {text}") from e
    if not parsed:
        # python-chess reads "--" and "0000" as null moves
        raise IllegalMoveError(f"Illegal move: {text}")
    board.push(parsed)
    return parsed


def legal_moves(board: chess.Board) -> list[str]:
    """Legal moves in SAN."""
    return [board.san(move) for move in board.legal_moves]


def position_fen(board: chess.Board) -> str:
    return board.fen()


def render_ascii(board: chess.Board) -> str:
    """Framed text board, white at the bottom, with rank and file labels."""
    lines = ["   +------------------------+"]
    for rank in range(7, -1, -1):
        cells = []
        for file in range(8):
            piece = board.piece_at(chess.square(file, rank))
            cells.append(piece.symbol() if piece else ".")
        lines.append(f" {rank + 1} | " + "  ".join(cells) + " |")
    lines.append("   +------------------------+")
    lines.append("     a  b  c  d  e  f  g  h")
    return "\n".join(lines)


def _parse_square_move(board: chess.Board, text: str) -> chess.Move | None:
    match = _SQUARE_MOVE.match(text)
    if match is None:
        return None

    source, target, promotion = match.groups()
    candidate = chess.Move.from_uci(f"{source}{target}{promotion or ''}")
    if candidate in board.legal_moves:
        return candidate
    if promotion is None:
        queening = chess.Move.from_uci(f"{source}{target}q")
        if queening in board.legal_moves:
            return queening
    raise IllegalMoveError(f"Illegal move: {text}")
