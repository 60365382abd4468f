"""Dragon Face (backend).

- core: board model, move generation and the turn state machine
- net: wire messages, transports and peer-to-peer session replication
- api: JSON-oriented snapshot/facade for UIs
"""

from . import core, api, net
from .core import Game, Phase, Player

__all__ = [
    "core","api","net",
    "Game","Phase","Player",
]
