from __future__ import annotations

import argparse
import logging
import threading
from typing import Callable, Optional, Tuple

from .api.facade import status_text
from .core import Game, ascii_board, in_bounds
from .net import GameSession, TcpHost, TransportError, tcp_connect


def _parse_square(text: str) -> Optional[Tuple[int, int]]:
    parts = text.replace(",", " ").split()
    if len(parts) != 2 or not all(p.lstrip("-").isdigit() for p in parts):
        return None
    row, col = int(parts[0]), int(parts[1])
    return (row, col) if in_bounds(row, col) else None


def _render(session: GameSession) -> str:
    state = session.state()
    lines = [ascii_board(session.game.board), "", status_text(state)]
    if session.player is not None:
        lines.append(f"You are Player {session.player.value}")
    if state["selected"] is not None:
        targets = " ".join(f"{m['r']},{m['c']}" for m in state["legal_moves"]) or "none"
        lines.append(f"Selected {state['selected']['r']},{state['selected']['c']} -> {targets}")
    if state["pending_rescue"] is not None:
        targets = " ".join(f"{t['r']},{t['c']}" for t in state["pending_rescue"]["targets"])
        lines.append(f"Rescue targets: {targets}")
    return "\n".join(lines)


def _play_loop(session: GameSession, read: Callable[[str], str] = input) -> int:
    def on_update(s: GameSession) -> None:
        # only redraw for updates arriving on the network thread
        if threading.current_thread() is not threading.main_thread():
            print()
            print(_render(s) if not s.closed else f"Session ended: {s.close_reason}")

    session.on_update.append(on_update)
    print(_render(session))
    while True:
        if session.closed:
            print(f"Session ended: {session.close_reason}")
            return 1
        try:
            line = read("> ").strip().lower()
        except EOFError:
            line = "quit"

        if line in ("quit", "exit"):
            session.close("Left the game")
            return 0
        if line == "reset":
            session.reset()
            print(_render(session))
            continue
        if not line:
            print(_render(session))
            continue

        target = _parse_square(line)
        if target is None:
            print("Enter a square as 'row col', or 'reset' / 'quit'.")
            continue
        if session.handle_click(*target) is None:
            print("Not your turn." if not session.is_local_turn() else "Game is over; 'reset' to play again.")
            continue
        print(_render(session))


def cmd_show(args: argparse.Namespace) -> int:
    g = Game()
    print(ascii_board(g.board))
    print()
    print(f"{len(g.board)} pieces")
    return 0


def cmd_play(args: argparse.Namespace) -> int:
    return _play_loop(GameSession())


def cmd_host(args: argparse.Namespace) -> int:
    try:
        host = TcpHost.listen(args.host, args.port)
    except TransportError as e:
        print(f"Error: {e}")
        return 1
    print(f"Session id: {host.session_id}")
    print("Waiting for a player to join...")
    try:
        transport = host.accept(timeout=args.timeout)
    except TransportError as e:
        print(f"Error: {e}")
        return 1
    finally:
        host.close()
    session = GameSession.host(transport)
    session.start()
    return _play_loop(session)


def cmd_join(args: argparse.Namespace) -> int:
    try:
        transport = tcp_connect(args.session_id)
    except (TransportError, ValueError) as e:
        print(f"Error: {e}")
        return 1
    session = GameSession.join(transport)
    session.start()
    return _play_loop(session)


def main(argv: Optional[list[str]] = None) -> int:
    ap = argparse.ArgumentParser(prog="dragon-face")
    ap.add_argument("--log-level", type=str, default="WARNING",
                    choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    sub = ap.add_subparsers(dest="cmd", required=True)

    ss = sub.add_parser("show", help="Show the starting board")
    ss.set_defaults(fn=cmd_show)

    pl = sub.add_parser("play", help="Hot-seat game in this terminal")
    pl.set_defaults(fn=cmd_play)

    hp = sub.add_parser("host", help="Host a networked game as Player 1")
    hp.add_argument("--host", type=str, default="127.0.0.1")
    hp.add_argument("--port", type=int, default=0)
    hp.add_argument("--timeout", type=float, default=None, help="seconds to wait for a joiner")
    hp.set_defaults(fn=cmd_host)

    jp = sub.add_parser("join", help="Join a hosted game as Player 2")
    jp.add_argument("session_id", type=str, help="host:port printed by the host")
    jp.set_defaults(fn=cmd_join)

    args = ap.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level))
    return int(args.fn(args))


if __name__ == "__main__":
    raise SystemExit(main())
