from __future__ import annotations

from pathlib import Path
import sys

# Ensure `backend/` is on sys.path so `import dragon_face` works.
BACKEND_DIR = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(BACKEND_DIR))

from dragon_face.api import status_text
from dragon_face.core import Player, ascii_board, sq
from dragon_face.core.pieces import Ambassador, Emperor, Governor
from dragon_face.net import GameSession, LoopbackTransport


def show(title: str, session: GameSession) -> None:
    print("\n" + "=" * 72)
    print(title)
    print(ascii_board(session.game.board))
    print(status_text(session.state()))


def _linked_sessions():
    a, b = LoopbackTransport.pair()
    host, joiner = GameSession.host(a), GameSession.join(b)
    host.start()
    joiner.start()
    return host, joiner


def demo_opening_replicated() -> None:
    host, joiner = _linked_sessions()

    # Player 1 double-steps a Governor, Player 2 answers
    host.handle_click(8, 4)
    host.handle_click(6, 4)
    joiner.handle_click(2, 3)
    joiner.handle_click(4, 3)

    show("Demo 1: opening double steps (host view)", host)
    show("Demo 1: same position on the joiner", joiner)


def demo_flip_and_rescue() -> None:
    host, joiner = _linked_sessions()
    for g in (host.game, joiner.game):
        board = g.board
        for s, _ in board.items():
            board.remove_piece(s)
        board.add_piece(sq(3, 3), Governor(Player.ONE).moved())
        board.add_piece(sq(2, 4), Ambassador(Player.TWO))
        board.add_piece(sq(10, 2), Ambassador(Player.ONE).trapped())
        board.add_piece(sq(5, 7), Emperor(Player.ONE))
        board.add_piece(sq(5, 1), Emperor(Player.TWO))

    # Governor jumps (2,4) and lands on (1,5): flip + promotion row
    host.handle_click(3, 3)
    host.handle_click(1, 5)
    show("Demo 2: flip capture onto the promotion row, rescue pending", host)

    host.handle_click(10, 2)
    show("Demo 2: rescue swap replicated to the joiner", joiner)


if __name__ == "__main__":
    demo_opening_replicated()
    demo_flip_and_rescue()
