from __future__ import annotations

import json
import logging
import os
import socket
import threading
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple


LOGGER = logging.getLogger("dragon_face.net.transport")

OnMessage = Callable[[Any], None]
OnClose = Callable[[str], None]


class TransportError(ConnectionError):
    pass


class Transport(Protocol):
    """Reliable, ordered channel between exactly two peers."""

    def start(self, on_message: OnMessage, on_close: OnClose) -> None:
        ...

    def send(self, payload: Dict[str, Any]) -> None:
        ...

    def close(self) -> None:
        ...


def _encode(payload: Dict[str, Any]) -> bytes:
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":")).encode("utf-8") + b"\n"


class LoopbackTransport:
    """In-process transport pair; delivery is synchronous and in send order."""

    def __init__(self) -> None:
        self.peer: Optional["LoopbackTransport"] = None
        self.closed = False
        self._on_message: Optional[OnMessage] = None
        self._on_close: Optional[OnClose] = None
        self._backlog: List[Any] = []

    @classmethod
    def pair(cls) -> Tuple["LoopbackTransport", "LoopbackTransport"]:
        a, b = cls(), cls()
        a.peer, b.peer = b, a
        return a, b

    def start(self, on_message: OnMessage, on_close: OnClose) -> None:
        self._on_message = on_message
        self._on_close = on_close
        backlog, self._backlog = self._backlog, []
        for payload in backlog:
            on_message(payload)

    def send(self, payload: Dict[str, Any]) -> None:
        peer = self.peer
        if self.closed or peer is None or peer.closed:
            raise TransportError("Peer disconnected")
        # round-trip through the wire encoding so both ends only ever see JSON data
        peer._deliver(json.loads(_encode(payload).decode("utf-8")))

    def _deliver(self, payload: Any) -> None:
        if self._on_message is None:
            self._backlog.append(payload)
        else:
            self._on_message(payload)

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        peer = self.peer
        if peer is not None and not peer.closed:
            peer._peer_closed("Peer disconnected")

    def _peer_closed(self, reason: str) -> None:
        self.closed = True
        if self._on_close is not None:
            self._on_close(reason)


class TcpTransport:
    """Newline-delimited UTF-8 JSON over a connected socket.

    Inbound lines are read on a daemon thread and handed to on_message in order.
    on_close fires once when the peer goes away, never after a local close().
    """

    def __init__(self, sock: socket.socket, max_message: Optional[int] = None) -> None:
        self.sock = sock
        self.max_message = (
            int(os.environ.get("DRAGON_FACE_MAX_MESSAGE", "65536")) if max_message is None else int(max_message)
        )
        self.closed = False
        self._send_lock = threading.Lock()
        self._reader: Optional[threading.Thread] = None

    def start(self, on_message: OnMessage, on_close: OnClose) -> None:
        self._reader = threading.Thread(
            target=self._read_loop,
            args=(on_message, on_close),
            name="dragon-face-reader",
            daemon=True,
        )
        self._reader.start()

    def _read_loop(self, on_message: OnMessage, on_close: OnClose) -> None:
        reason = "Peer disconnected"
        rfile = self.sock.makefile("rb")
        try:
            while True:
                line = rfile.readline(self.max_message + 1)
                if not line:
                    break
                if len(line) > self.max_message and not line.endswith(b"\n"):
                    reason = "Message too large"
                    break
                line = line.strip()
                if not line:
                    continue
                try:
                    payload = json.loads(line.decode("utf-8"))
                except (UnicodeDecodeError, json.JSONDecodeError) as e:
                    LOGGER.warning("wire_decode_failed", extra={"error": str(e)})
                    reason = f"Invalid JSON: {e}"
                    break
                on_message(payload)
        except OSError as e:
            reason = f"Connection lost: {e}"
        finally:
            rfile.close()
            locally_closed = self.closed
            self.close()
            if not locally_closed:
                LOGGER.info("transport_closed", extra={"reason": reason})
                on_close(reason)

    def send(self, payload: Dict[str, Any]) -> None:
        if self.closed:
            raise TransportError("Transport closed")
        data = _encode(payload)
        try:
            with self._send_lock:
                self.sock.sendall(data)
        except OSError as e:
            raise TransportError(f"Send failed: {e}") from e

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        try:
            self.sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            # already disconnected
            pass
        self.sock.close()


def _connect_timeout() -> float:
    return float(os.environ.get("DRAGON_FACE_CONNECT_TIMEOUT", "10"))


def parse_session_id(session_id: str) -> Tuple[str, int]:
    host, sep, port = session_id.strip().rpartition(":")
    if not sep or not host or not port.isdigit():
        raise ValueError(f"Bad session id: {session_id!r}")
    return host, int(port)


class TcpHost:
    """Listening side of a session; the session id is what the joiner types in."""

    def __init__(self, sock: socket.socket) -> None:
        self._sock = sock

    @classmethod
    def listen(cls, host: str = "127.0.0.1", port: int = 0) -> "TcpHost":
        try:
            sock = socket.create_server((host, port))
        except OSError as e:
            raise TransportError(f"Could not listen on {host}:{port}: {e}") from e
        return cls(sock)

    @property
    def session_id(self) -> str:
        host, port = self._sock.getsockname()[:2]
        if host in ("", "0.0.0.0"):
            try:
                host = socket.gethostbyname(socket.gethostname())
            except OSError:
                host = "127.0.0.1"
        return f"{host}:{port}"

    def accept(self, timeout: Optional[float] = None) -> TcpTransport:
        self._sock.settimeout(timeout)
        try:
            conn, addr = self._sock.accept()
        except socket.timeout as e:
            raise TransportError("No peer joined") from e
        except OSError as e:
            raise TransportError(f"Accept failed: {e}") from e
        conn.settimeout(None)
        LOGGER.info("peer_joined", extra={"peer": f"{addr[0]}:{addr[1]}"})
        return TcpTransport(conn)

    def close(self) -> None:
        self._sock.close()


def tcp_connect(session_id: str, timeout: Optional[float] = None) -> TcpTransport:
    host, port = parse_session_id(session_id)
    try:
        sock = socket.create_connection((host, port), timeout=_connect_timeout() if timeout is None else timeout)
    except OSError as e:
        raise TransportError(f"Could not connect to {session_id}: {e}") from e
    sock.settimeout(None)
    return TcpTransport(sock)
