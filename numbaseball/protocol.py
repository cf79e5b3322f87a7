"""Wire protocol, message helpers and scoring rules for number baseball.

Messages travel as a two-byte big-endian length followed by a UTF-8 JSON
document of that many bytes.
"""

from __future__ import annotations

import json
import socket
import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import Any

NETWORK_TIMEOUT_SEC = 30
HEARTBEAT_INTERVAL_SEC = 10
MAX_RETRY_COUNT = 3
RECV_TIMEOUT_SEC = 5
SEND_TIMEOUT_SEC = 5

ACTION_JOIN = "join"
ACTION_ASSIGN_ID = "assign_id"
ACTION_WAIT_PLAYER = "wait_player"
ACTION_GAME_START = "game_start"
ACTION_SET_NUMBER = "set_number"
ACTION_NUMBER_SET = "number_set"
ACTION_YOUR_TURN = "your_turn"
ACTION_WAIT_TURN = "wait_turn"
ACTION_GUESS = "guess"
ACTION_GUESS_RESULT = "guess_result"
ACTION_GAME_OVER = "game_over"
ACTION_ERROR = "error"
ACTION_HEARTBEAT = "heartbeat"
ACTION_TIMEOUT = "timeout"

MAX_CLIENTS = 2
NUMBER_LENGTH = 3
MAX_ATTEMPTS = 10
BUF_SIZE = 4096

_DIGITS = frozenset("0123456789")
_LENGTH = struct.Struct("!H")


class GameState(IntEnum):
    """Overall progress of a match."""

    WAITING = 0
    SETTING = 1
    PLAYING = 2
    FINISHED = 3


class PlayerState(IntEnum):
    """Progress of a single player within a match."""

    WAITING = 0
    SETTING = 1
    READY = 2
    TURN = 3
    WAITING_TURN = 4


class ProtocolError(Exception):
    """A message could not be framed or parsed."""


class ConnectionClosed(ConnectionError):
    """The peer closed the connection before a full message arrived."""


@dataclass(frozen=True)
class GuessResult:
    """Strikes and balls scored by one guess."""

    strikes: int
    balls: int

    @property
    def is_correct(self) -> bool:
        return self.strikes == NUMBER_LENGTH


def is_valid_number(number: Any) -> bool:
    """Return True for exactly three distinct ASCII digits."""
    if not isinstance(number, str) or len(number) != NUMBER_LENGTH:
        return False
    if not set(number) <= _DIGITS:
        return False
    return len(set(number)) == NUMBER_LENGTH


def calculate_result(secret: str, guess: str) -> GuessResult:
    """Score ``guess`` against ``secret``.

    A strike is a digit in the right place; a ball is a secret digit found
    at another position of the guess that is not itself a strike.
    """
    pairs = list(zip(secret[:NUMBER_LENGTH], guess[:NUMBER_LENGTH]))
    strikes = sum(1 for s, g in pairs if s == g)
    balls = sum(
        1
        for i, (s, g) in enumerate(pairs)
        if s != g
        and any(
            i != j and s == other_g and other_s != other_g
            for j, (other_s, other_g) in enumerate(pairs)
        )
    )
    return GuessResult(strikes=strikes, balls=balls)


def create_message(action: str, **kwargs: Any) -> dict[str, Any]:
    """Build a message with the given action and extra fields."""
    return {"action": action, **kwargs}


def create_error(message: str) -> dict[str, Any]:
    return create_message(ACTION_ERROR, message=message)


def create_timeout_message(reason: str) -> dict[str, Any]:
    return create_message(ACTION_TIMEOUT, reason=reason)


def create_heartbeat_message() -> dict[str, Any]:
    return create_message(ACTION_HEARTBEAT, timestamp="heartbeat")


def encode_message(message: Any) -> bytes:
    """Serialise a message into a length-prefixed frame."""
    payload = json.dumps(message, ensure_ascii=False).encode("utf-8")
    if len(payload) > 0xFFFF:
        raise ProtocolError(f"message too long: {len(payload)} bytes")
    return _LENGTH.pack(len(payload)) + payload


def decode_payload(payload: bytes) -> Any:
    """Parse the JSON body of a frame.

    Any JSON value is returned as parsed; callers decide what to do with
    values that are not objects.
    """
    try:
        return json.loads(payload.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ProtocolError(f"invalid JSON payload: {exc}") from exc


def send_message(sock: socket.socket, message: Any) -> None:
    """Send one framed message; socket errors propagate as OSError."""
    sock.sendall(encode_message(message))


def _recv_exact(sock: socket.socket, size: int) -> bytes:
    buffer = bytearray()
    while len(buffer) < size:
        chunk = sock.recv(size - len(buffer))
        if not chunk:
            break
        buffer += chunk
    return bytes(buffer)


def recv_message(sock: socket.socket) -> Any:
    """Receive one framed message.

    Raises ConnectionClosed when the peer hangs up and ProtocolError when
    the length is out of range or the body is not JSON.
    """
    header = _recv_exact(sock, _LENGTH.size)
    if len(header) < _LENGTH.size:
        raise ConnectionClosed("peer closed the connection")
    (length,) = _LENGTH.unpack(header)
    if length <= 0 or length > BUF_SIZE:
        raise ProtocolError(f"invalid message length: {length} bytes")
    payload = _recv_exact(sock, length)
    if len(payload) < length:
        raise ConnectionClosed("connection closed while reading message body")
    return decode_payload(payload)


def set_socket_timeout(sock: socket.socket, timeout_sec: float) -> None:
    """Apply a send and receive timeout to ``sock``."""
    sock.settimeout(timeout_sec)