from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..core.game import Game
from ..core.moves import JumpMove, Move, StepMove
from ..core.types import Player, col_of, in_bounds, is_playable, row_of, sq


def coord_to_dict(s: int) -> Dict[str, int]:
    return {"r": row_of(s), "c": col_of(s)}


def dict_to_sq(d: Any, row_key: str = "r", col_key: str = "c") -> int:
    if not isinstance(d, dict):
        raise ValueError(f"Bad coordinate: {d!r}")
    try:
        r = d[row_key]
        c = d[col_key]
    except KeyError as e:
        raise ValueError(f"Missing coordinate field: {e.args[0]}") from e
    # bool is an int subclass; reject it explicitly
    if not isinstance(r, int) or not isinstance(c, int) or isinstance(r, bool) or isinstance(c, bool):
        raise ValueError(f"Bad coordinate: {d!r}")
    if not in_bounds(r, c):
        raise ValueError(f"Coordinate out of bounds: ({r},{c})")
    return sq(r, c)


def player_to_int(p: Optional[Player]) -> Optional[int]:
    return None if p is None else int(p.value)


def move_to_dict(m: Move) -> Dict[str, Any]:
    """Wire form of a move; the start square travels separately."""
    d: Dict[str, Any] = {"r": row_of(m.to_sq), "c": col_of(m.to_sq)}
    if isinstance(m, JumpMove):
        d["type"] = "capture"
        d["jumped"] = coord_to_dict(m.jumped_sq)
    else:
        d["type"] = "move"
    return d


def dict_to_move(d: Dict[str, Any], from_sq: int) -> Move:
    if not isinstance(d, dict):
        raise ValueError("Move must be an object")
    to = dict_to_sq(d)
    kind = d.get("type")

    if kind == "move":
        return StepMove(from_sq, to)

    if kind == "capture":
        if "jumped" not in d:
            raise ValueError("Capture without jumped square")
        return JumpMove(from_sq, to, jumped_sq=dict_to_sq(d["jumped"]))

    raise ValueError(f"Unknown move type: {kind!r}")


def _pieces(game: Game) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    for s, p in game.board.items():
        r, c = row_of(s), col_of(s)
        out.append(
            {
                "row": r,
                "col": c,
                "type": p.kind.value,
                "player": int(p.owner.value),
                "is_trapped": bool(p.is_trapped),
                "has_moved": bool(p.has_moved),
                "symbol": p.symbol,
                "playable": is_playable(r, c),
            }
        )
    return out


def snapshot(game: Game) -> Dict[str, Any]:
    """JSON-friendly, read-only view of the match for re-rendering."""

    out: Dict[str, Any] = {
        "current_player": int(game.current_player.value),
        "phase": game.phase.value,
        "is_over": game.is_over,
        "winner": player_to_int(game.winner),
        "last_flipped": coord_to_dict(game.last_flipped) if game.last_flipped is not None else None,
        "selected": coord_to_dict(game.selected) if game.selected is not None else None,
        "legal_moves": [move_to_dict(m) for m in game.selected_moves],
        "pending_rescue": None,
        "pieces": _pieces(game),
    }

    if game.pending_rescue is not None:
        out["pending_rescue"] = {
            "governor": coord_to_dict(game.pending_rescue),
            "targets": [coord_to_dict(s) for s in game.rescue_targets()],
        }

    return out
