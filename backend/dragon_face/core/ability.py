from __future__ import annotations

from typing import Iterable, TYPE_CHECKING

if TYPE_CHECKING:
    from .board import Board
    from .piece import Piece
    from .moves import Move

class Ability:
    """Movement capability of one piece kind: generates pseudo-legal moves."""

    def generate_moves(self, board: "Board", s: int, piece: "Piece") -> Iterable["Move"]:
        return ()
