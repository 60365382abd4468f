"""Stable backend boundary for a frontend.

This layer is **frontend-agnostic** and only speaks JSON-friendly structures:
- state snapshots
- move encode/decode in the wire shape
- click results with diffs suitable for animation
"""

from .facade import GameFacade, diff, status_text
from .serde import move_to_dict, dict_to_move, snapshot, coord_to_dict, dict_to_sq

__all__ = ["GameFacade", "diff", "status_text", "move_to_dict", "dict_to_move", "snapshot", "coord_to_dict", "dict_to_sq"]
