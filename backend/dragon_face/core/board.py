from __future__ import annotations

from typing import Dict, Iterator, List, Optional, Tuple

from .piece import Piece, PieceKind
from .types import Player, sq_name

class Board:
    def __init__(self) -> None:
        self._pieces: Dict[int, Piece] = {}

    def piece_at(self, s: int) -> Optional[Piece]:
        return self._pieces.get(s)

    def set_piece(self, s: int, p: Optional[Piece]) -> None:
        if p is None:
            self._pieces.pop(s, None)
        else:
            self._pieces[s] = p

    def add_piece(self, s: int, p: Piece) -> None:
        if s in self._pieces:
            raise ValueError(f"Square {sq_name(s)} occupied")
        self._pieces[s] = p

    def remove_piece(self, s: int) -> None:
        self._pieces.pop(s, None)

    def move_piece(self, from_sq: int, to_sq: int) -> Piece:
        if to_sq in self._pieces:
            raise ValueError(f"Square {sq_name(to_sq)} occupied")
        p = self._pieces.pop(from_sq)
        self._pieces[to_sq] = p
        return p

    def items(self) -> List[Tuple[int, Piece]]:
        return sorted(self._pieces.items())

    def iter_pieces_of(self, player: Player) -> Iterator[Tuple[int, Piece]]:
        for s, p in sorted(self._pieces.items()):
            if p.owner is player:
                yield s, p

    def pieces_of(self, player: Player) -> List[Tuple[int, Piece]]:
        return list(self.iter_pieces_of(player))

    def trapped_ambassadors_of(self, player: Player) -> List[int]:
        return [
            s for s, p in self.iter_pieces_of(player)
            if p.kind is PieceKind.AMBASSADOR and p.is_trapped
        ]

    def copy(self) -> "Board":
        b = Board()
        b._pieces = dict(self._pieces)
        return b

    def __len__(self) -> int:
        return len(self._pieces)
