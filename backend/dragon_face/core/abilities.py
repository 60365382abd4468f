from __future__ import annotations

from typing import Iterable, Tuple

from .ability import Ability
from .moves import JumpMove, StepMove
from .types import col_of, in_bounds, is_playable, row_of, sq

# deltas as (d_row, d_col)
ORTH = ((1, 0), (-1, 0), (0, 1), (0, -1))
DIAG = ((1, 1), (1, -1), (-1, 1), (-1, -1))
KING8 = ORTH + DIAG

def _enemy_at(board, row: int, col: int, piece) -> bool:
    if not in_bounds(row, col):
        return False
    target = board.piece_at(sq(row, col))
    return target is not None and target.owner is not piece.owner

def _empty_at(board, row: int, col: int) -> bool:
    return in_bounds(row, col) and board.piece_at(sq(row, col)) is None

class GovernorAbility(Ability):
    """Forward steps, a one-time double step, and forward-diagonal jumps."""

    def generate_moves(self, board, s, piece):
        fwd = piece.owner.forward
        r0, c0 = row_of(s), col_of(s)

        for dc in (-1, 0, 1):
            r, c = r0 + fwd, c0 + dc
            if is_playable(r, c) and board.piece_at(sq(r, c)) is None:
                yield StepMove(s, sq(r, c))

        # the opening double step may not land in the Sacrifice Zone
        if not piece.has_moved:
            for dc in (-1, 0, 1):
                r1, c1 = r0 + fwd, c0 + dc
                r2, c2 = r0 + 2 * fwd, c0 + 2 * dc
                if not is_playable(r2, c2):
                    continue
                if board.piece_at(sq(r1, c1)) is None and board.piece_at(sq(r2, c2)) is None:
                    yield StepMove(s, sq(r2, c2))

        for dc in (-1, 1):
            jr, jc = r0 + fwd, c0 + dc
            tr, tc = r0 + 2 * fwd, c0 + 2 * dc
            if _enemy_at(board, jr, jc, piece) and _empty_at(board, tr, tc):
                yield JumpMove(s, sq(tr, tc), jumped_sq=sq(jr, jc))

class SlideJumpAbility(Ability):
    """Slide over empty interior squares, then optionally jump the first blocker."""

    def __init__(self, deltas: Iterable[Tuple[int, int]]):
        self.deltas = tuple(deltas)

    def generate_moves(self, board, s, piece):
        r0, c0 = row_of(s), col_of(s)
        for dr, dc in self.deltas:
            r, c = r0 + dr, c0 + dc
            while is_playable(r, c) and board.piece_at(sq(r, c)) is None:
                yield StepMove(s, sq(r, c))
                r += dr
                c += dc
            # (r, c) is now the first occupied or non-interior square
            if _enemy_at(board, r, c, piece) and _empty_at(board, r + dr, c + dc):
                yield JumpMove(s, sq(r + dr, c + dc), jumped_sq=sq(r, c))

class StepJumpAbility(Ability):
    """Single step in each direction, or a two-square jump over an adjacent enemy."""

    def __init__(self, deltas: Iterable[Tuple[int, int]]):
        self.deltas = tuple(deltas)

    def generate_moves(self, board, s, piece):
        r0, c0 = row_of(s), col_of(s)
        for dr, dc in self.deltas:
            r, c = r0 + dr, c0 + dc
            if is_playable(r, c) and board.piece_at(sq(r, c)) is None:
                yield StepMove(s, sq(r, c))
            if _enemy_at(board, r, c, piece) and _empty_at(board, r0 + 2 * dr, c0 + 2 * dc):
                yield JumpMove(s, sq(r0 + 2 * dr, c0 + 2 * dc), jumped_sq=sq(r, c))
