from __future__ import annotations

from enum import Enum
from typing import List, Optional

from .board import Board
from .events import GameOver, GameReset, MoveApplied, RescueApplied
from .moves import JumpMove, Move
from .piece import PieceKind
from .rules import moves_for
from .setup import setup_standard
from .types import Player, col_of, is_playable, row_of

class Phase(Enum):
    AWAITING_SELECTION = "awaiting_selection"
    PIECE_SELECTED = "piece_selected"
    AWAITING_RESCUE_CHOICE = "awaiting_rescue_choice"
    GAME_OVER = "game_over"

class Listener:
    def on_event(self, game: "Game", event: object) -> None:
        return

class Game:
    """Turn state machine for one Dragon Face match.

    User-input methods (select_square, choose_destination, choose_rescue_target,
    handle_click) never raise; they return False and leave the state untouched
    when the input is not acceptable in the current phase.
    """

    def __init__(self, setup: bool = True) -> None:
        self.board = Board()
        self.listeners: List[Listener] = []
        self._reset_state()
        if setup:
            setup_standard(self.board)

    def _reset_state(self) -> None:
        self.current_player: Player = Player.ONE
        self.phase: Phase = Phase.AWAITING_SELECTION
        self.last_flipped: Optional[int] = None
        self.pending_rescue: Optional[int] = None
        self.winner: Optional[Player] = None

        # selection cache, cleared on every transition out of PIECE_SELECTED
        self.selected: Optional[int] = None
        self.selected_moves: List[Move] = []

    @property
    def is_over(self) -> bool:
        return self.phase is Phase.GAME_OVER

    def emit(self, event: object) -> None:
        for sys in list(self.listeners):
            sys.on_event(self, event)

    def reset(self) -> None:
        self.board = Board()
        setup_standard(self.board)
        self._reset_state()
        self.emit(GameReset())

    # --- queries ---
    def is_selectable(self, s: int) -> bool:
        p = self.board.piece_at(s)
        return p is not None and p.owner is self.current_player and not p.is_trapped

    def legal_moves_from(self, s: int) -> List[Move]:
        if self.phase not in (Phase.AWAITING_SELECTION, Phase.PIECE_SELECTED):
            return []
        if not self.is_selectable(s):
            return []
        return moves_for(self.board, s, self.last_flipped)

    def rescue_targets(self) -> List[int]:
        return self.board.trapped_ambassadors_of(self.current_player)

    # --- user input ---
    def select_square(self, s: int) -> bool:
        if self.phase is not Phase.AWAITING_SELECTION or not self.is_selectable(s):
            return False
        self.selected = s
        self.selected_moves = moves_for(self.board, s, self.last_flipped)
        self.phase = Phase.PIECE_SELECTED
        return True

    def clear_selection(self) -> bool:
        if self.phase is not Phase.PIECE_SELECTED:
            return False
        self.selected = None
        self.selected_moves = []
        self.phase = Phase.AWAITING_SELECTION
        return True

    def choose_destination(self, s: int) -> bool:
        if self.phase is not Phase.PIECE_SELECTED:
            return False
        for m in self.selected_moves:
            if m.to_sq == s:
                self.apply_move(m)
                return True
        return False

    def choose_rescue_target(self, s: int) -> bool:
        if self.phase is not Phase.AWAITING_RESCUE_CHOICE or s not in self.rescue_targets():
            return False
        self.apply_rescue(s)
        return True

    def handle_click(self, s: int) -> bool:
        """Single entry point for square clicks, dispatched on the current phase."""
        if self.phase is Phase.GAME_OVER:
            return False
        if self.phase is Phase.AWAITING_RESCUE_CHOICE:
            return self.choose_rescue_target(s)
        if self.phase is Phase.PIECE_SELECTED:
            if self.choose_destination(s):
                return True
            reselect = s != self.selected
            self.clear_selection()
            if reselect:
                self.select_square(s)
            return True
        return self.select_square(s)

    # --- mutation ---
    def apply_move(self, move: Move) -> None:
        board = self.board
        player = self.current_player
        mover = board.piece_at(move.from_sq)
        if mover is None:
            raise ValueError("No piece on from-square")

        self.selected = None
        self.selected_moves = []

        flipped: Optional[int] = None
        if isinstance(move, JumpMove):
            jumped = board.piece_at(move.jumped_sq)
            if jumped is None:
                raise ValueError("No piece on jumped square")
            if jumped.kind is PieceKind.EMPEROR:
                # terminal: nothing moves and nothing flips
                self.winner = player
                self.phase = Phase.GAME_OVER
                self.emit(MoveApplied(move=move, player=player, flipped_sq=None, winner=player))
                self.emit(GameOver(winner=player))
                return
            board.set_piece(move.jumped_sq, jumped.flipped_to(player))
            flipped = move.jumped_sq

        board.move_piece(move.from_sq, move.to_sq)
        moved = mover.moved()
        if not is_playable(row_of(move.to_sq), col_of(move.to_sq)) and moved.kind is not PieceKind.EMPEROR:
            moved = moved.trapped()
        board.set_piece(move.to_sq, moved)
        self.last_flipped = flipped

        if (
            moved.kind is PieceKind.GOVERNOR
            and row_of(move.to_sq) == player.promotion_row
            and self.rescue_targets()
        ):
            self.pending_rescue = move.to_sq
            self.phase = Phase.AWAITING_RESCUE_CHOICE
        else:
            self._end_turn()

        self.emit(MoveApplied(move=move, player=player, flipped_sq=flipped))

    def apply_rescue(self, ambassador_sq: int) -> None:
        gov_sq = self.pending_rescue
        if gov_sq is None:
            raise ValueError("No rescue pending")
        governor = self.board.piece_at(gov_sq)
        ambassador = self.board.piece_at(ambassador_sq)
        if governor is None or ambassador is None:
            raise ValueError("Invalid rescue state")

        player = self.current_player
        self.board.set_piece(ambassador_sq, governor.trapped())
        self.board.set_piece(gov_sq, ambassador.released())
        self._end_turn()
        self.emit(RescueApplied(player=player, governor_sq=gov_sq, ambassador_sq=ambassador_sq))

    def _end_turn(self) -> None:
        self.current_player = self.current_player.opponent()
        self.pending_rescue = None
        self.selected = None
        self.selected_moves = []
        self.phase = Phase.AWAITING_SELECTION
