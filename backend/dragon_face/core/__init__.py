from .types import Player, ROWS, COLS, sq, row_of, col_of, coords, in_bounds, is_playable, sq_name
from .piece import Piece, PieceKind
from .pieces import Governor, Ambassador, Emperor
from .board import Board
from .moves import Move, StepMove, JumpMove
from .rules import Rule, ImmunityRule, moves_for
from .events import MoveApplied, RescueApplied, GameReset, GameOver
from .game import Game, Phase, Listener
from .setup import setup_standard, ascii_board

__all__ = [
    "Player","ROWS","COLS","sq","row_of","col_of","coords","in_bounds","is_playable","sq_name",
    "Piece","PieceKind","Governor","Ambassador","Emperor",
    "Board",
    "Move","StepMove","JumpMove",
    "Rule","ImmunityRule","moves_for",
    "MoveApplied","RescueApplied","GameReset","GameOver",
    "Game","Phase","Listener",
    "setup_standard","ascii_board",
]
