from __future__ import annotations

from enum import Enum
from typing import Tuple

class Player(Enum):
    ONE = 1
    TWO = 2

    def opponent(self) -> "Player":
        return Player.TWO if self is Player.ONE else Player.ONE

    @property
    def forward(self) -> int:
        # player 1 advances toward row 0, player 2 toward row 10
        return -1 if self is Player.ONE else 1

    @property
    def promotion_row(self) -> int:
        return 1 if self is Player.ONE else ROWS - 2

ROWS = 11
COLS = 9

def sq(row: int, col: int) -> int:
    return row * COLS + col

def row_of(s: int) -> int:
    return s // COLS

def col_of(s: int) -> int:
    return s % COLS

def coords(s: int) -> Tuple[int, int]:
    return row_of(s), col_of(s)

def in_bounds(row: int, col: int) -> bool:
    return 0 <= row < ROWS and 0 <= col < COLS

def is_playable(row: int, col: int) -> bool:
    """Interior 9x7 region; everything else on the grid is the Sacrifice Zone."""
    return 0 < row < ROWS - 1 and 0 < col < COLS - 1

def sq_name(s: int) -> str:
    return f"({row_of(s)},{col_of(s)})"
