import os
import socket
import threading
import unittest
from unittest import mock

from dragon_face.core import Player, sq
from dragon_face.net import GameSession, TcpHost, TransportError, parse_session_id, tcp_connect


def _wait_for(session, predicate, timeout=5.0):
    done = threading.Event()

    def check(s):
        if predicate(s):
            done.set()

    session.on_update.append(check)
    return done, timeout


class TestTcpSession(unittest.TestCase):
    def _connect(self):
        host_srv = TcpHost.listen("127.0.0.1", 0)
        self.addCleanup(host_srv.close)
        accepted = {}
        t = threading.Thread(target=lambda: accepted.setdefault("t", host_srv.accept(timeout=5)))
        t.start()
        joiner_t = tcp_connect(host_srv.session_id, timeout=5)
        t.join(5)
        return accepted["t"], joiner_t

    def test_moves_replicate_over_tcp(self):
        host_t, joiner_t = self._connect()
        host = GameSession.host(host_t)
        joiner = GameSession.join(joiner_t)
        self.addCleanup(host.close)
        self.addCleanup(joiner.close)

        joiner_moved, timeout = _wait_for(joiner, lambda s: s.game.current_player is Player.TWO)
        host_moved, _ = _wait_for(host, lambda s: s.game.current_player is Player.ONE and s.game.board.piece_at(sq(4, 3)) is not None)
        host.start()
        joiner.start()

        host.handle_click(8, 4)
        host.handle_click(6, 4)
        self.assertTrue(joiner_moved.wait(timeout))
        self.assertIsNotNone(joiner.game.board.piece_at(sq(6, 4)))

        joiner.handle_click(2, 3)
        joiner.handle_click(4, 3)
        self.assertTrue(host_moved.wait(timeout))
        self.assertEqual(host.game.board.items(), joiner.game.board.items())

    def test_peer_disconnect_closes_session(self):
        host_t, joiner_t = self._connect()
        host = GameSession.host(host_t)
        joiner = GameSession.join(joiner_t)
        closed, timeout = _wait_for(host, lambda s: s.closed)
        host.start()
        joiner.start()

        joiner.close("Left the game")
        self.assertTrue(closed.wait(timeout))
        self.assertEqual(host.close_reason, "Peer disconnected")


class TestTcpWireErrors(unittest.TestCase):
    def _raw_session(self):
        host_srv = TcpHost.listen("127.0.0.1", 0)
        self.addCleanup(host_srv.close)
        client = socket.create_connection(parse_session_id(host_srv.session_id), timeout=5)
        self.addCleanup(client.close)
        session = GameSession.host(host_srv.accept(timeout=5))
        self.addCleanup(session.close)
        return session, client

    def test_invalid_json_closes(self):
        session, client = self._raw_session()
        closed, timeout = _wait_for(session, lambda s: s.closed)
        session.start()
        client.sendall(b"{not json\n")
        self.assertTrue(closed.wait(timeout))
        self.assertTrue(session.close_reason.startswith("Invalid JSON"))

    def test_unknown_message_closes_and_drops_peer(self):
        session, client = self._raw_session()
        closed, timeout = _wait_for(session, lambda s: s.closed)
        session.start()
        client.sendall(b'{"type":"undo"}\n')
        self.assertTrue(closed.wait(timeout))
        self.assertIn("Unknown message type", session.close_reason)
        self.assertEqual(client.recv(16), b"")

    def test_oversized_message_closes(self):
        with mock.patch.dict(os.environ, {"DRAGON_FACE_MAX_MESSAGE": "16"}):
            session, client = self._raw_session()
        closed, timeout = _wait_for(session, lambda s: s.closed)
        session.start()
        client.sendall(b'{"type":"reset","pad":"' + b"x" * 64 + b'"}\n')
        self.assertTrue(closed.wait(timeout))
        self.assertEqual(session.close_reason, "Message too large")

    def test_reset_message_over_raw_socket(self):
        session, client = self._raw_session()
        got_reset, timeout = _wait_for(session, lambda s: not s.closed)
        session.start()
        client.sendall(b'{"type":"reset"}\n')
        self.assertTrue(got_reset.wait(timeout))
        self.assertFalse(session.closed)


class TestSessionIds(unittest.TestCase):
    def test_parse(self):
        self.assertEqual(parse_session_id("127.0.0.1:5000"), ("127.0.0.1", 5000))
        self.assertEqual(parse_session_id(" example.org:80 "), ("example.org", 80))
        for bad in ("", "5000", ":5000", "host:", "host:port"):
            with self.subTest(bad=bad):
                with self.assertRaises(ValueError):
                    parse_session_id(bad)

    def test_connect_refused(self):
        srv = TcpHost.listen("127.0.0.1", 0)
        sid = srv.session_id
        srv.close()
        with self.assertRaises(TransportError):
            tcp_connect(sid, timeout=2)

    def test_accept_timeout(self):
        srv = TcpHost.listen("127.0.0.1", 0)
        self.addCleanup(srv.close)
        with self.assertRaisesRegex(TransportError, "No peer joined"):
            srv.accept(timeout=0.05)


if __name__ == "__main__":
    unittest.main()
