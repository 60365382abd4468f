from __future__ import annotations

from .board import Board
from .pieces import Ambassador, Emperor, Governor
from .types import COLS, ROWS, Player, is_playable, sq

_BACK_ROW = "AAAEAAA"

def setup_standard(board: Board) -> None:
    # Player 2 (top)
    for i, kind in enumerate(_BACK_ROW):
        col = i + 1
        board.add_piece(sq(1, col), Emperor(Player.TWO) if kind == "E" else Ambassador(Player.TWO))
        board.add_piece(sq(2, col), Governor(Player.TWO))

    # Player 1 (bottom)
    for i, kind in enumerate(_BACK_ROW):
        col = i + 1
        board.add_piece(sq(8, col), Governor(Player.ONE))
        board.add_piece(sq(9, col), Emperor(Player.ONE) if kind == "E" else Ambassador(Player.ONE))

def ascii_board(board: Board) -> str:
    """Text grid; '.' marks empty interior squares, ':' the Sacrifice Zone.

    Trapped pieces are suffixed with '*'.
    """
    rows = ["   " + " ".join(f"{c:<2}" for c in range(COLS))]
    for r in range(ROWS):
        row = []
        for c in range(COLS):
            p = board.piece_at(sq(r, c))
            if p is None:
                row.append("." if is_playable(r, c) else ":")
            else:
                row.append(p.symbol + ("*" if p.is_trapped else ""))
        rows.append(f"{r:>2} " + " ".join(f"{cell:<2}" for cell in row))
    return "\n".join(rows)
