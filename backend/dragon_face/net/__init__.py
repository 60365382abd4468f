"""Peer-to-peer session replication.

- messages: closed set of wire messages (move / promotion / reset) and their JSON codec
- transport: loopback and TCP transports between exactly two peers
- session: GameSession, keeping two peers' games in lockstep
"""

from .messages import (
    Message, MoveMessage, PromotionMessage, ResetMessage, ProtocolError,
    encode_message, decode_message,
)
from .transport import Transport, TransportError, LoopbackTransport, TcpTransport, TcpHost, tcp_connect, parse_session_id
from .session import GameSession

__all__ = [
    "Message","MoveMessage","PromotionMessage","ResetMessage","ProtocolError",
    "encode_message","decode_message",
    "Transport","TransportError","LoopbackTransport","TcpTransport","TcpHost","tcp_connect","parse_session_id",
    "GameSession",
]
