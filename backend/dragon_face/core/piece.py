from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from .types import Player

class PieceKind(Enum):
    GOVERNOR = "governor"
    AMBASSADOR = "ambassador"
    EMPEROR = "emperor"

_SYMBOLS = {
    PieceKind.GOVERNOR: "G",
    PieceKind.AMBASSADOR: "A",
    PieceKind.EMPEROR: "E",
}

@dataclass(frozen=True)
class Piece:
    """Board cell value. Pieces never move by reference; the board stores copies."""
    kind: PieceKind
    owner: Player
    is_trapped: bool = False
    has_moved: bool = False

    @property
    def symbol(self) -> str:
        s = _SYMBOLS[self.kind]
        return s if self.owner is Player.ONE else s.lower()

    def flipped_to(self, owner: Player) -> "Piece":
        return replace(self, owner=owner)

    def moved(self) -> "Piece":
        if self.kind is PieceKind.GOVERNOR and not self.has_moved:
            return replace(self, has_moved=True)
        return self

    def trapped(self) -> "Piece":
        return replace(self, is_trapped=True)

    def released(self) -> "Piece":
        return replace(self, is_trapped=False)
