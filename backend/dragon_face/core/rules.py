from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Protocol, TYPE_CHECKING

from .abilities import GovernorAbility, KING8, SlideJumpAbility, StepJumpAbility
from .ability import Ability
from .moves import JumpMove, Move
from .piece import PieceKind

if TYPE_CHECKING:
    from .board import Board

class Rule(Protocol):
    def apply(self, board: "Board", moves: Iterable[Move]) -> Iterable[Move]:
        ...

class ImmunityRule:
    """Reject any jump over the piece flipped on the previous turn."""

    def __init__(self, immune_sq: Optional[int]) -> None:
        self.immune_sq = immune_sq

    def apply(self, board: "Board", moves: Iterable[Move]) -> Iterable[Move]:
        for m in moves:
            if isinstance(m, JumpMove) and m.jumped_sq == self.immune_sq:
                continue
            yield m

ABILITIES: Dict[PieceKind, Ability] = {
    PieceKind.GOVERNOR: GovernorAbility(),
    PieceKind.AMBASSADOR: SlideJumpAbility(KING8),
    PieceKind.EMPEROR: StepJumpAbility(KING8),
}

def moves_for(board: "Board", s: int, last_flipped: Optional[int]) -> List[Move]:
    """All moves for the piece on `s`. Callers exclude trapped pieces beforehand."""
    piece = board.piece_at(s)
    if piece is None:
        return []
    out: Iterable[Move] = ABILITIES[piece.kind].generate_moves(board, s, piece)
    for rule in (ImmunityRule(last_flipped),):
        out = rule.apply(board, out)
    return list(out)
