from __future__ import annotations

from .piece import Piece, PieceKind
from .types import Player

def Governor(owner: Player) -> Piece:
    return Piece(PieceKind.GOVERNOR, owner)

def Ambassador(owner: Player) -> Piece:
    return Piece(PieceKind.AMBASSADOR, owner)

def Emperor(owner: Player) -> Piece:
    return Piece(PieceKind.EMPEROR, owner)
