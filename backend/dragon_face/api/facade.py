from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from ..core.game import Game
from ..core.types import in_bounds, sq
from .serde import move_to_dict, snapshot


def _index_by_square(snap: Dict[str, Any]) -> Dict[Tuple[int, int], Dict[str, Any]]:
    out: Dict[Tuple[int, int], Dict[str, Any]] = {}
    for p in snap.get("pieces", []):
        out[(int(p["row"]), int(p["col"]))] = p
    return out


def diff(before: Dict[str, Any], after: Dict[str, Any]) -> Dict[str, Any]:
    """Compute a per-square diff between two snapshots for the renderer."""
    b = _index_by_square(before)
    a = _index_by_square(after)

    vacated = [{"row": k[0], "col": k[1]} for k in sorted(b.keys() - a.keys())]
    occupied = [a[k] for k in sorted(a.keys() - b.keys())]

    changed: List[Dict[str, Any]] = []
    for k in sorted(a.keys() & b.keys()):
        if a[k] != b[k]:
            changed.append({"row": k[0], "col": k[1], "before": b[k], "after": a[k]})

    return {
        "vacated": vacated,
        "occupied": occupied,
        "changed": changed,
        "current_player": after.get("current_player"),
        "phase": after.get("phase"),
    }


def status_text(snap: Dict[str, Any]) -> str:
    if snap.get("is_over"):
        return f"Player {snap.get('winner')} Won!!!"
    if snap.get("pending_rescue") is not None:
        return f"Player {snap.get('current_player')}: choose an Ambassador to rescue"
    return f"Player {snap.get('current_player')}'s Turn"


class GameFacade:
    """A small, stable facade for UI/server integration.

    - every call returns JSON-friendly dicts
    - click returns before/after snapshots plus a diff for animation
    """

    def __init__(self, game: Optional[Game] = None) -> None:
        self.game = game if game is not None else Game()

    def state(self) -> Dict[str, Any]:
        snap = snapshot(self.game)
        snap["status"] = status_text(snap)
        return snap

    def legal_moves(self, row: int, col: int) -> List[Dict[str, Any]]:
        if not in_bounds(row, col):
            return []
        return [move_to_dict(m) for m in self.game.legal_moves_from(sq(row, col))]

    def click(self, row: int, col: int) -> Dict[str, Any]:
        before = self.state()
        # off-grid squares would alias onto real ones through sq()
        changed = in_bounds(row, col) and self.game.handle_click(sq(row, col))
        after = self.state()
        return {"changed": changed, "before": before, "after": after, "diff": diff(before, after)}

    def reset(self) -> Dict[str, Any]:
        self.game.reset()
        return self.state()
