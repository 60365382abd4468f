from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .moves import Move
    from .types import Player

@dataclass(frozen=True)
class MoveApplied:
    move: "Move"
    player: "Player"
    flipped_sq: Optional[int]
    winner: Optional["Player"] = None

@dataclass(frozen=True)
class RescueApplied:
    player: "Player"
    governor_sq: int
    ambassador_sq: int

@dataclass(frozen=True)
class GameReset:
    pass

@dataclass(frozen=True)
class GameOver:
    winner: "Player"
