#!/usr/bin/env python3
"""Dragon Face: local HTTP adapter (stdlib only).

Serves a JSON API wrapping one GameSession, so a browser (or any HTTP client)
can render the board and forward square clicks. The session starts as a local
hot-seat game; /api/host and /api/join switch it to a networked game.

Run from repo root:
  python frontend/server.py

API:
  GET  /api/state
  GET  /api/legal?row=R&col=C
  POST /api/click   {"row": R, "col": C}
  POST /api/reset
  POST /api/host    {"port": P}        -> {"session_id": "host:port"}
  POST /api/join    {"session_id": "host:port"}
  POST /api/leave
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import socket
import sys
import threading
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, HTTPServer
from socketserver import ThreadingMixIn
from pathlib import Path
from typing import Any, Dict, Optional, Tuple
from urllib.parse import parse_qs, urlparse


REPO_ROOT = Path(__file__).resolve().parents[1]
BACKEND_ROOT = REPO_ROOT / "backend"

# Ensure backend package import works without an install
sys.path.insert(0, str(BACKEND_ROOT))

from dragon_face.core.types import in_bounds
from dragon_face.net import GameSession, TcpHost, TransportError, tcp_connect


LOGGER = logging.getLogger("dragon_face.frontend.server")


class PayloadTooLargeError(ValueError):
    pass


class RequestReadTimeoutError(ValueError):
    pass


def _json_read(
    rfile,
    *,
    content_length: Optional[int],
    max_bytes: int = 1_000_000,
    socket_obj: Optional[socket.socket] = None,
    read_timeout_s: Optional[float] = None,
) -> Dict[str, Any]:
    if content_length is None:
        raise ValueError("Missing Content-Length")

    max_allowed = int(os.environ.get("DRAGON_FACE_HTTP_MAX", str(max_bytes)))
    if content_length < 0:
        raise ValueError("Invalid Content-Length")
    if content_length > max_allowed:
        raise PayloadTooLargeError("Payload too large")

    prev_timeout = None
    if socket_obj is not None and read_timeout_s is not None:
        prev_timeout = socket_obj.gettimeout()
        socket_obj.settimeout(read_timeout_s)

    try:
        raw = rfile.read(content_length) if content_length > 0 else b""
    except TimeoutError as e:
        raise RequestReadTimeoutError("Request body read timed out") from e
    except socket.timeout as e:
        raise RequestReadTimeoutError("Request body read timed out") from e
    finally:
        if socket_obj is not None and read_timeout_s is not None:
            socket_obj.settimeout(prev_timeout)

    if not raw:
        return {}
    try:
        body = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ValueError(f"Invalid JSON: {e}") from e
    if not isinstance(body, dict):
        raise ValueError("JSON body must be an object")
    return body


def _json_write(handler: BaseHTTPRequestHandler, status: int, payload: Dict[str, Any]) -> None:
    data = json.dumps(payload, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
    handler.send_response(status)
    handler.send_header("Content-Type", "application/json; charset=utf-8")
    handler.send_header("Cache-Control", "no-store")
    handler.send_header("Content-Length", str(len(data)))
    # Same-origin by default; allow localhost tools to talk to it.
    handler.send_header("Access-Control-Allow-Origin", "*")
    handler.end_headers()
    handler.wfile.write(data)


def _bad(handler: BaseHTTPRequestHandler, msg: str, status: int = 400) -> None:
    _json_write(handler, status, {"ok": False, "error": msg})


def _square(obj: Dict[str, Any]) -> Tuple[int, int]:
    row, col = obj.get("row"), obj.get("col")
    if isinstance(row, str) and row.lstrip("-").isdigit():
        row = int(row)
    if isinstance(col, str) and col.lstrip("-").isdigit():
        col = int(col)
    if not isinstance(row, int) or not isinstance(col, int) or isinstance(row, bool) or isinstance(col, bool):
        raise ValueError("row and col must be integers")
    if not in_bounds(row, col):
        raise ValueError(f"Square out of bounds: ({row},{col})")
    return row, col


class _State:
    session: GameSession
    host: Optional[TcpHost]

    def __init__(self) -> None:
        self.session = GameSession()
        self.host = None

    def replace_session(self, session: GameSession) -> None:
        old = self.session
        self.session = session
        if old is not session:
            old.close("Replaced")

    def stop_hosting(self) -> None:
        if self.host is not None:
            self.host.close()
            self.host = None

STATE = _State()
STATE_LOCK = threading.RLock()


def _await_joiner(host: TcpHost) -> None:
    try:
        transport = host.accept()
    except TransportError as e:
        LOGGER.info("host_accept_stopped", extra={"error": str(e)})
        return
    with STATE_LOCK:
        if STATE.host is not host:
            transport.close()
            return
        STATE.stop_hosting()
        session = GameSession.host(transport)
        STATE.replace_session(session)
        session.start()


class ThreadingHTTPServer(ThreadingMixIn, HTTPServer):
    daemon_threads = True


class Handler(BaseHTTPRequestHandler):
    def log_message(self, format: str, *args: Any) -> None:
        LOGGER.debug("http_request", extra={"line": format % args})

    def do_OPTIONS(self) -> None:
        self.send_response(HTTPStatus.NO_CONTENT)
        self.send_header("Access-Control-Allow-Origin", "*")
        self.send_header("Access-Control-Allow-Methods", "GET,POST,OPTIONS")
        self.send_header("Access-Control-Allow-Headers", "Content-Type")
        self.end_headers()

    def do_GET(self) -> None:
        if self.path.startswith("/api/"):
            self._handle_api_get()
            return
        self.send_error(HTTPStatus.NOT_FOUND, "No such endpoint")

    def do_POST(self) -> None:
        if self.path.startswith("/api/"):
            self._handle_api_post()
            return
        self.send_error(HTTPStatus.NOT_FOUND, "No such endpoint")

    def _handle_api_get(self) -> None:
        url = urlparse(self.path)
        try:
            if url.path == "/api/state":
                with STATE_LOCK:
                    state = STATE.session.state()
                _json_write(self, 200, {"ok": True, "state": state})
                return
            if url.path == "/api/legal":
                query = {k: v[0] for k, v in parse_qs(url.query).items()}
                try:
                    row, col = _square(query)
                except ValueError as e:
                    _bad(self, str(e), 400)
                    return
                with STATE_LOCK:
                    moves = STATE.session.facade.legal_moves(row, col)
                _json_write(self, 200, {"ok": True, "moves": moves})
                return
        except Exception:
            LOGGER.exception("api_get_unhandled", extra={"path": self.path})
            _bad(self, "Internal error", 500)
            return

        self.send_error(HTTPStatus.NOT_FOUND, "No such endpoint")

    def _read_body(self) -> Optional[Dict[str, Any]]:
        try:
            length_header = self.headers.get("Content-Length")
            length = int(length_header) if length_header is not None else None
        except (TypeError, ValueError):
            _bad(self, "Invalid Content-Length", 400)
            return None

        try:
            return _json_read(
                self.rfile,
                content_length=length,
                socket_obj=self.connection,
                read_timeout_s=float(os.environ.get("DRAGON_FACE_HTTP_READ_TIMEOUT", "5.0")),
            )
        except PayloadTooLargeError as e:
            _bad(self, str(e), 413)
        except RequestReadTimeoutError as e:
            _bad(self, str(e), 408)
        except ValueError as e:
            msg = str(e)
            _bad(self, msg, 411 if msg == "Missing Content-Length" else 400)
        return None

    def _handle_api_post(self) -> None:
        body = self._read_body()
        if body is None:
            return

        path = urlparse(self.path).path
        try:
            if path == "/api/click":
                try:
                    row, col = _square(body)
                except ValueError as e:
                    _bad(self, str(e), 400)
                    return
                with STATE_LOCK:
                    session = STATE.session
                res = session.handle_click(row, col)
                if res is None:
                    _bad(self, "Click ignored: not your turn, game over or session closed", 409)
                    return
                _json_write(self, 200, {"ok": True, "result": res})
                return

            if path == "/api/reset":
                with STATE_LOCK:
                    session = STATE.session
                session.reset()
                _json_write(self, 200, {"ok": True, "state": session.state()})
                return

            if path == "/api/host":
                port = body.get("port", 0)
                if not isinstance(port, int) or isinstance(port, bool):
                    _bad(self, "port must be an integer")
                    return
                with STATE_LOCK:
                    STATE.stop_hosting()
                    try:
                        host = TcpHost.listen(str(body.get("bind", "127.0.0.1")), port)
                    except TransportError as e:
                        _bad(self, str(e), 400)
                        return
                    STATE.host = host
                threading.Thread(target=_await_joiner, args=(host,), daemon=True).start()
                _json_write(self, 200, {"ok": True, "session_id": host.session_id})
                return

            if path == "/api/join":
                session_id = body.get("session_id")
                if not isinstance(session_id, str):
                    _bad(self, "Missing session_id")
                    return
                try:
                    transport = tcp_connect(session_id)
                except (TransportError, ValueError) as e:
                    _bad(self, str(e), 400)
                    return
                session = GameSession.join(transport)
                with STATE_LOCK:
                    STATE.stop_hosting()
                    STATE.replace_session(session)
                session.start()
                _json_write(self, 200, {"ok": True, "state": session.state()})
                return

            if path == "/api/leave":
                with STATE_LOCK:
                    STATE.stop_hosting()
                    STATE.replace_session(GameSession())
                    state = STATE.session.state()
                _json_write(self, 200, {"ok": True, "state": state})
                return

        except Exception:
            LOGGER.exception("api_post_unhandled", extra={"path": self.path})
            _bad(self, "Internal error", 500)
            return

        self.send_error(HTTPStatus.NOT_FOUND, "No such endpoint")


def main() -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--host", default="127.0.0.1")
    ap.add_argument("--port", type=int, default=8000)
    ap.add_argument("--log-level", default="INFO")
    args = ap.parse_args()

    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))

    httpd = ThreadingHTTPServer((args.host, args.port), Handler)
    print(f"Dragon Face API at http://{args.host}:{args.port}/")
    print("API: /api/state /api/legal /api/click /api/reset /api/host /api/join /api/leave")
    httpd.serve_forever()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
