from __future__ import annotations

from dataclasses import dataclass

@dataclass(frozen=True)
class Move:
    from_sq: int
    to_sq: int

@dataclass(frozen=True)
class StepMove(Move):
    """Plain relocation onto an empty square."""

@dataclass(frozen=True)
class JumpMove(Move):
    """Jump over an adjacent enemy piece; the jumped piece is flipped, not removed."""
    jumped_sq: int = -1
