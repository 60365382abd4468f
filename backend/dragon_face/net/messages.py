from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Union

from ..api.serde import dict_to_move, dict_to_sq, move_to_dict
from ..core.moves import Move
from ..core.types import col_of, row_of


class ProtocolError(ValueError):
    pass


@dataclass(frozen=True)
class MoveMessage:
    move: Move

    @property
    def start_row(self) -> int:
        return row_of(self.move.from_sq)

    @property
    def start_col(self) -> int:
        return col_of(self.move.from_sq)


@dataclass(frozen=True)
class PromotionMessage:
    """Rescue choice: the trapped Ambassador swapped with the promoted Governor."""
    square: int

    @property
    def row(self) -> int:
        return row_of(self.square)

    @property
    def col(self) -> int:
        return col_of(self.square)


@dataclass(frozen=True)
class ResetMessage:
    pass


Message = Union[MoveMessage, PromotionMessage, ResetMessage]


def encode_message(msg: Message) -> Dict[str, Any]:
    if isinstance(msg, MoveMessage):
        return {
            "type": "move",
            "move": {
                "startRow": msg.start_row,
                "startCol": msg.start_col,
                "move": move_to_dict(msg.move),
            },
        }
    if isinstance(msg, PromotionMessage):
        return {"type": "promotion", "move": {"row": msg.row, "col": msg.col}}
    if isinstance(msg, ResetMessage):
        return {"type": "reset"}
    raise TypeError(f"Not a wire message: {msg!r}")


def decode_message(payload: Any) -> Message:
    """Decode one wire payload; unknown tags and malformed bodies raise ProtocolError."""
    if not isinstance(payload, dict):
        raise ProtocolError("Message must be a JSON object")
    tag = payload.get("type")

    try:
        if tag == "move":
            body = payload.get("move")
            if not isinstance(body, dict):
                raise ProtocolError("Move message without move body")
            start = dict_to_sq(body, "startRow", "startCol")
            return MoveMessage(move=dict_to_move(body.get("move"), start))

        if tag == "promotion":
            return PromotionMessage(square=dict_to_sq(payload.get("move"), "row", "col"))

        if tag == "reset":
            return ResetMessage()
    except ProtocolError:
        raise
    except ValueError as e:
        raise ProtocolError(f"Malformed {tag} message: {e}") from e

    raise ProtocolError(f"Unknown message type: {tag!r}")
