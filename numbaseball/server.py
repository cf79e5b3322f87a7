"""TCP server that hosts a two-player number baseball match."""

from __future__ import annotations

import logging
import selectors
import socket
import sys
import threading
from typing import Optional, Sequence

from .game import GameFull, GameManager
from .protocol import MAX_CLIENTS, ConnectionClosed, ProtocolError, recv_message

log = logging.getLogger(__name__)

_POLL_INTERVAL_SEC = 0.2


class BaseballServer:
    """Accepts players and relays their messages to a GameManager."""

    def __init__(self, port: int, host: str = "0.0.0.0") -> None:
        self.game = GameManager()
        self._listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            self._listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            self._listener.bind((host, port))
            self._listener.listen(MAX_CLIENTS)
        except OSError:
            self._listener.close()
            raise
        self.server_address = self._listener.getsockname()
        self._selector = selectors.DefaultSelector()
        self._selector.register(self._listener, selectors.EVENT_READ)
        self._stop = threading.Event()
        self._lock = threading.Lock()
        self._serving = False
        self._closed = False

    def __enter__(self) -> "BaseballServer":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def serve_forever(self) -> None:
        """Handle connections and messages until close() is called."""
        with self._lock:
            if self._stop.is_set():
                return
            self._serving = True
        try:
            while not self._stop.is_set():
                for key, _events in self._selector.select(timeout=_POLL_INTERVAL_SEC):
                    if self._stop.is_set():
                        break
                    if key.fileobj is self._listener:
                        self._accept()
                    else:
                        self._read(key.fileobj)
        finally:
            with self._lock:
                self._serving = False
                self._shutdown()

    def close(self) -> None:
        """Stop serving and release every socket."""
        with self._lock:
            self._stop.set()
            if not self._serving:
                self._shutdown()

    # ------------------------------------------------------------------

    def _shutdown(self) -> None:
        if self._closed:
            return
        self._closed = True
        for key in list(self._selector.get_map().values()):
            self._selector.unregister(key.fileobj)
            if key.fileobj is not self._listener:
                key.fileobj.close()
        self._selector.close()
        self._listener.close()

    def _accept(self) -> None:
        try:
            conn, addr = self._listener.accept()
        except OSError as exc:
            log.warning("accept failed: %s", exc)
            return
        try:
            player_id = self.game.add_player(conn)
        except GameFull:
            log.info("connection from %s refused", addr[0])
            conn.close()
            return
        self._selector.register(conn, selectors.EVENT_READ)
        log.info("player %d joined from %s", player_id, addr[0])
        self._sync()

    def _player_for(self, sock: socket.socket) -> Optional[int]:
        return next(
            (p.player_id for p in self.game.players if p.connected and p.conn is sock),
            None,
        )

    def _drop(self, sock: socket.socket) -> None:
        self._selector.unregister(sock)
        sock.close()

    def _read(self, sock: socket.socket) -> None:
        player_id = self._player_for(sock)
        if player_id is None:
            self._drop(sock)
            return
        try:
            message = recv_message(sock)
        except (ConnectionClosed, ProtocolError, OSError) as exc:
            log.info("player %d: %s", player_id, exc)
            self._drop(sock)
            self.game.handle_disconnect(player_id)
            self._sync()
            return
        self.game.handle_message(player_id, message)
        self._sync()

    def _sync(self) -> None:
        """Close sockets whose players the game no longer counts as connected."""
        live = {id(p.conn) for p in self.game.players if p.connected}
        for key in list(self._selector.get_map().values()):
            if key.fileobj is self._listener or id(key.fileobj) in live:
                continue
            self._drop(key.fileobj)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) != 1:
        print("사용법: numbaseball-server <포트>")
        return 1
    try:
        port = int(args[0])
    except ValueError:
        print("사용법: numbaseball-server <포트>")
        return 1

    logging.basicConfig(level=logging.INFO, format="[Server] %(message)s")
    try:
        server = BaseballServer(port)
    except OSError as exc:
        print(f"bind: {exc}")
        return 1

    log.info("number baseball server listening on port %d", port)
    log.info("waiting for two players...")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.close()
    return 0