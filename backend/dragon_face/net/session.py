from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, List, Optional

from ..api.facade import GameFacade
from ..core.events import GameReset, MoveApplied, RescueApplied
from ..core.game import Game, Listener, Phase
from ..core.moves import Move
from ..core.types import Player, sq_name
from .messages import (
    Message,
    MoveMessage,
    PromotionMessage,
    ProtocolError,
    ResetMessage,
    decode_message,
    encode_message,
)
from .transport import Transport, TransportError


LOGGER = logging.getLogger("dragon_face.net.session")


class _Replicator(Listener):
    """Turns locally originated game events into outbound wire messages."""

    def __init__(self, session: "GameSession") -> None:
        self.session = session

    def on_event(self, game: Game, event: object) -> None:
        if self.session._replaying:
            return
        if isinstance(event, MoveApplied):
            self.session.send_local_action(MoveMessage(move=event.move))
        elif isinstance(event, RescueApplied):
            self.session.send_local_action(PromotionMessage(square=event.ambassador_sq))
        elif isinstance(event, GameReset):
            self.session.send_local_action(ResetMessage())


class GameSession:
    """One peer's view of a match.

    Owns the Game, holds the transport, and keeps the two peers in lockstep by
    broadcasting local actions and replaying remote ones after checking them
    against the local move generator. With no transport the session is a local
    hot-seat game and both players act through handle_click.
    """

    def __init__(
        self,
        player: Optional[Player] = None,
        transport: Optional[Transport] = None,
        game: Optional[Game] = None,
    ) -> None:
        if (player is None) != (transport is None):
            raise ValueError("player and transport go together")
        self.player = player
        self.transport = transport
        self.game = game if game is not None else Game()
        self.facade = GameFacade(self.game)
        self.game.listeners.append(_Replicator(self))

        self.closed = False
        self.close_reason: Optional[str] = None
        self.on_update: List[Callable[["GameSession"], None]] = []

        self._lock = threading.RLock()
        self._replaying = False

    @classmethod
    def host(cls, transport: Transport) -> "GameSession":
        return cls(Player.ONE, transport)

    @classmethod
    def join(cls, transport: Transport) -> "GameSession":
        return cls(Player.TWO, transport)

    @property
    def networked(self) -> bool:
        return self.transport is not None

    @property
    def remote_player(self) -> Optional[Player]:
        return None if self.player is None else self.player.opponent()

    def start(self) -> None:
        if self.transport is not None:
            self.transport.start(self.on_remote_payload, self._on_transport_closed)

    def _notify(self) -> None:
        for cb in list(self.on_update):
            cb(self)

    # --- local side ---
    def is_local_turn(self) -> bool:
        return self.player is None or self.game.current_player is self.player

    def state(self) -> Dict[str, Any]:
        with self._lock:
            snap = self.facade.state()
            snap["player"] = None if self.player is None else int(self.player.value)
            snap["closed"] = self.closed
            snap["close_reason"] = self.close_reason
            return snap

    def handle_click(self, row: int, col: int) -> Optional[Dict[str, Any]]:
        """Route a square click into the game; returns the click result, or None if ignored."""
        with self._lock:
            if self.closed or self.game.is_over or not self.is_local_turn():
                return None
            res = self.facade.click(row, col)
        if res["changed"]:
            self._notify()
        return res

    def reset(self) -> None:
        with self._lock:
            if self.closed:
                return
            self.game.reset()
        self._notify()

    def send_local_action(self, msg: Message) -> None:
        if self.transport is None or self.closed:
            return
        try:
            self.transport.send(encode_message(msg))
        except TransportError as e:
            LOGGER.warning("send_failed", extra={"error": str(e)})
            self.close(str(e))

    # --- remote side ---
    def on_remote_payload(self, payload: Any) -> None:
        try:
            msg = decode_message(payload)
            self.on_remote_action(msg)
        except ProtocolError as e:
            LOGGER.warning("remote_action_rejected", extra={"error": str(e), "payload": payload})
            self.close(f"Protocol error: {e}")

    def on_remote_action(self, msg: Message) -> None:
        with self._lock:
            if self.closed:
                return
            self._replaying = True
            try:
                if isinstance(msg, ResetMessage):
                    self.game.reset()
                elif isinstance(msg, MoveMessage):
                    self._replay_move(msg.move)
                elif isinstance(msg, PromotionMessage):
                    self._replay_rescue(msg.square)
                else:
                    raise ProtocolError(f"Unhandled message: {msg!r}")
            finally:
                self._replaying = False
        self._notify()

    def _check_remote_turn(self) -> None:
        if self.game.is_over:
            raise ProtocolError("Game is over")
        if self.remote_player is not None and self.game.current_player is not self.remote_player:
            raise ProtocolError("Not the remote player's turn")

    def _replay_move(self, requested: Move) -> None:
        self._check_remote_turn()
        game = self.game
        game.clear_selection()
        for m in game.legal_moves_from(requested.from_sq):
            if m == requested:
                game.apply_move(m)
                return
        raise ProtocolError(f"Illegal remote move from {sq_name(requested.from_sq)} to {sq_name(requested.to_sq)}")

    def _replay_rescue(self, s: int) -> None:
        self._check_remote_turn()
        if self.game.phase is not Phase.AWAITING_RESCUE_CHOICE:
            raise ProtocolError("No rescue pending")
        if not self.game.choose_rescue_target(s):
            raise ProtocolError(f"Invalid rescue target {sq_name(s)}")

    # --- teardown ---
    def _on_transport_closed(self, reason: str) -> None:
        self.close(reason, from_transport=True)

    def close(self, reason: str = "Session closed", from_transport: bool = False) -> None:
        with self._lock:
            if self.closed:
                return
            self.closed = True
            self.close_reason = reason
        LOGGER.info("session_closed", extra={"reason": reason})
        if self.transport is not None and not from_transport:
            self.transport.close()
        self._notify()
