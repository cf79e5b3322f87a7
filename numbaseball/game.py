"""Server-side match state for a two-player number baseball game.

The manager knows nothing about sockets: it is handed a ``send`` callable
that delivers one message to a connection object, and it reports which
connections should be closed.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .protocol import (
    ACTION_ASSIGN_ID,
    ACTION_GAME_OVER,
    ACTION_GAME_START,
    ACTION_GUESS,
    ACTION_GUESS_RESULT,
    ACTION_NUMBER_SET,
    ACTION_SET_NUMBER,
    ACTION_WAIT_PLAYER,
    ACTION_WAIT_TURN,
    ACTION_YOUR_TURN,
    HEARTBEAT_INTERVAL_SEC,
    MAX_CLIENTS,
    MAX_RETRY_COUNT,
    NETWORK_TIMEOUT_SEC,
    GameState,
    PlayerState,
    calculate_result,
    create_error,
    create_heartbeat_message,
    create_message,
    create_timeout_message,
    is_valid_number,
    send_message,
)

log = logging.getLogger(__name__)

RESTART_DELAY_SEC = 5

MSG_GAME_START = "게임이 시작되었습니다! 3자리 숫자를 설정하세요."
MSG_WAIT_PLAYER = "상대방을 기다리고 있습니다..."
MSG_YOUR_TURN = "당신의 턴입니다! 3자리 숫자를 추측하세요."
MSG_WAIT_TURN = "상대방의 턴입니다. 잠시 기다려주세요."
MSG_NUMBER_SET = "숫자가 설정되었습니다. 상대방을 기다리는 중..."
MSG_VICTORY = "🎉 축하합니다! 숫자를 맞추셨습니다!"
MSG_DEFEAT = "😢 아쉽네요! 상대방이 먼저 맞췄습니다."
MSG_OPPONENT_LEFT = "🎉 상대방이 나갔습니다. 당신의 승리!"
MSG_OPPONENT_LOST = "상대방이 연결을 잃었습니다"
ERR_IN_PROGRESS = "현재 게임이 진행 중입니다. 잠시 후 다시 시도해주세요."
ERR_FULL = "서버에 접속할 수 없습니다. 나중에 다시 시도해주세요."
ERR_CANNOT_SET = "지금은 숫자를 설정할 수 없습니다."
ERR_NOT_YOUR_TURN = "지금은 당신의 턴이 아닙니다."
ERR_INVALID_NUMBER = "올바르지 않은 숫자입니다. 3자리 서로 다른 숫자를 입력하세요."

_ACTIVE_STATES = (GameState.PLAYING, GameState.SETTING)


class GameFull(Exception):
    """Every player slot is taken; the new connection was refused."""


@dataclass
class Player:
    """One seat at the table."""

    player_id: int
    conn: Any = None
    connected: bool = False
    state: PlayerState = PlayerState.WAITING
    secret_number: str = ""
    attempts: int = 0
    is_winner: bool = False
    last_activity: float = 0.0
    retry_count: int = 0

    def touch(self, now: float) -> None:
        """Record activity at time ``now``."""
        self.last_activity = now

    def is_timed_out(self, now: float) -> bool:
        return now - self.last_activity > NETWORK_TIMEOUT_SEC

    def reset(self) -> None:
        """Free the seat, dropping the connection and all game data."""
        self.conn = None
        self.connected = False
        self.state = PlayerState.WAITING
        self.secret_number = ""
        self.attempts = 0
        self.is_winner = False
        self.retry_count = 0


def _as_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


class GameManager:
    """Turn-based match between two connected players."""

    def __init__(
        self,
        send: Callable[[Any, Any], None] = send_message,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._send = send
        self._clock = clock
        self._sleep = sleep
        now = clock()
        self.state = GameState.WAITING
        self.current_turn = 0
        self.players_ready = 0
        self.game_start_time = now
        self.last_heartbeat = now
        self.players = [Player(player_id=i, last_activity=now) for i in range(MAX_CLIENTS)]
        log.info(
            "game initialised: timeout %ds, heartbeat every %ds",
            NETWORK_TIMEOUT_SEC,
            HEARTBEAT_INTERVAL_SEC,
        )

    # ------------------------------------------------------------------
    # connections
    # ------------------------------------------------------------------

    def add_player(self, conn: Any) -> int:
        """Seat ``conn`` and return its player id.

        Raises GameFull after telling the connection why it was refused.
        """
        free = next((p for p in self.players if not p.connected), None)
        if free is None:
            text = ERR_IN_PROGRESS if self.state in _ACTIVE_STATES else ERR_FULL
            try:
                self._send(conn, create_error(text))
            except OSError as exc:
                log.warning("could not notify refused connection: %s", exc)
            raise GameFull(text)

        free.conn = conn
        free.connected = True
        free.state = PlayerState.WAITING
        self.players_ready += 1

        self.send_to_player(free.player_id, create_message(ACTION_ASSIGN_ID, player_id=free.player_id))
        log.info("player %d connected", free.player_id)

        if self.players_ready == 2:
            self.start_game()
        else:
            self.send_to_player(
                free.player_id, create_message(ACTION_WAIT_PLAYER, message=MSG_WAIT_PLAYER)
            )
        return free.player_id

    def handle_disconnect(self, player_id: int) -> None:
        """React to a player whose connection dropped."""
        log.info("player %d disconnected", player_id)
        player = self.players[player_id]
        player.connected = False
        player.conn = None
        self.players_ready -= 1

        if self.state in _ACTIVE_STATES:
            other = self.players[1 - player_id]
            if other.connected:
                self.send_to_player(
                    other.player_id,
                    create_message(ACTION_GAME_OVER, result="victory", message=MSG_OPPONENT_LEFT),
                )

    def cleanup_player(self, player_id: int) -> Optional[Any]:
        """Free a seat and return the connection the caller should close."""
        if not 0 <= player_id < MAX_CLIENTS:
            return None
        player = self.players[player_id]
        conn = player.conn
        player.reset()

        self.players_ready = max(0, self.players_ready - 1)
        if self.state in _ACTIVE_STATES:
            self.state = GameState.WAITING
            log.info("game aborted because a player left")
        return conn

    def check_timeouts(self) -> list[Any]:
        """Drop idle players; return the connections that were released."""
        now = self._clock()
        released = []
        for player in self.players:
            if not player.connected or not player.is_timed_out(now):
                continue
            log.info("player %d timed out", player.player_id)
            opponent = self.players[1 - player.player_id]
            if opponent.connected:
                try:
                    self._send(opponent.conn, create_timeout_message(MSG_OPPONENT_LOST))
                except OSError as exc:
                    log.warning("timeout notice to player %d failed: %s", opponent.player_id, exc)
            conn = self.cleanup_player(player.player_id)
            if conn is not None:
                released.append(conn)
        return released

    def send_heartbeats(self) -> bool:
        """Send a heartbeat to everyone if the interval has passed."""
        now = self._clock()
        if now - self.last_heartbeat < HEARTBEAT_INTERVAL_SEC:
            return False
        for player in self.players:
            if not player.connected:
                continue
            try:
                self._send(player.conn, create_heartbeat_message())
            except OSError:
                log.warning("heartbeat to player %d failed", player.player_id)
        self.last_heartbeat = now
        return True

    # ------------------------------------------------------------------
    # messaging
    # ------------------------------------------------------------------

    def broadcast(self, message: Any) -> int:
        """Send to every connected player; return how many received it."""
        sent = 0
        for player in self.players:
            if not player.connected:
                continue
            try:
                self._send(player.conn, message)
            except OSError:
                log.warning("broadcast to player %d failed", player.player_id)
                continue
            sent += 1
            player.touch(self._clock())
        log.info("broadcast delivered to %d player(s)", sent)
        return sent

    def send_to_player(self, player_id: int, message: Any) -> bool:
        """Send to one player; return whether it was delivered.

        Repeated failures mark the player as disconnected.
        """
        if not 0 <= player_id < MAX_CLIENTS:
            log.warning("invalid player id: %d", player_id)
            return False
        player = self.players[player_id]
        if not player.connected:
            log.warning("player %d is not connected", player_id)
            return False
        try:
            self._send(player.conn, message)
        except OSError:
            log.warning("send to player %d failed", player_id)
            player.retry_count += 1
            if player.retry_count >= MAX_RETRY_COUNT:
                log.warning("player %d exceeded retry limit", player_id)
                player.connected = False
            return False
        player.touch(self._clock())
        return True

    # ------------------------------------------------------------------
    # game flow
    # ------------------------------------------------------------------

    def start_game(self) -> None:
        if self.state != GameState.WAITING or self.players_ready < 2:
            return
        self.state = GameState.SETTING
        log.info("game started; players choose their numbers")
        self.broadcast(create_message(ACTION_GAME_START, message=MSG_GAME_START))
        for player in self.players:
            if player.connected:
                player.state = PlayerState.SETTING

    def check_all_numbers_set(self) -> None:
        ready = sum(1 for p in self.players if p.connected and p.state == PlayerState.READY)
        if ready == 2:
            self.state = GameState.PLAYING
            self.current_turn = 0
            log.info("both numbers set; play begins")
            self.start_turn()

    def start_turn(self) -> None:
        for player in self.players:
            if not player.connected:
                continue
            if player.player_id == self.current_turn:
                message = create_message(ACTION_YOUR_TURN, message=MSG_YOUR_TURN)
                player.state = PlayerState.TURN
            else:
                message = create_message(ACTION_WAIT_TURN, message=MSG_WAIT_TURN)
                player.state = PlayerState.WAITING_TURN
            self.send_to_player(player.player_id, message)

    def end_game(self, winner_id: int) -> None:
        self.state = GameState.FINISHED
        for player in self.players:
            if not player.connected:
                continue
            won = player.player_id == winner_id
            message = create_message(
                ACTION_GAME_OVER,
                result="victory" if won else "defeat",
                message=MSG_VICTORY if won else MSG_DEFEAT,
                your_number=player.secret_number,
                opponent_number=self.players[1 - player.player_id].secret_number,
            )
            self.send_to_player(player.player_id, message)

        log.info("game over: player %d wins; new game in %ds", winner_id, RESTART_DELAY_SEC)
        self._sleep(RESTART_DELAY_SEC)

        self.state = GameState.WAITING
        self.current_turn = 0
        for player in self.players:
            if player.connected:
                player.state = PlayerState.WAITING
                player.secret_number = ""
                player.attempts = 0
                player.is_winner = False
        log.info("ready for a new game")

    def handle_message(self, player_id: int, message: Any) -> None:
        """Apply one message received from ``player_id``."""
        if not isinstance(message, dict) or "action" not in message:
            return
        action = message["action"]
        player = self.players[player_id]

        if action == ACTION_SET_NUMBER:
            if player.state != PlayerState.SETTING:
                self.send_to_player(player_id, create_error(ERR_CANNOT_SET))
                return
            if "number" not in message:
                return
            number = _as_text(message["number"])
            if not is_valid_number(number):
                self.send_to_player(player_id, create_error(ERR_INVALID_NUMBER))
                return
            player.secret_number = number
            player.state = PlayerState.READY
            self.send_to_player(player_id, create_message(ACTION_NUMBER_SET, message=MSG_NUMBER_SET))
            log.info("player %d set a number", player_id)
            self.check_all_numbers_set()

        elif action == ACTION_GUESS:
            if player.state != PlayerState.TURN:
                self.send_to_player(player_id, create_error(ERR_NOT_YOUR_TURN))
                return
            if "guess" not in message:
                return
            guess = _as_text(message["guess"])
            if not is_valid_number(guess):
                self.send_to_player(player_id, create_error(ERR_INVALID_NUMBER))
                return
            opponent = self.players[1 - player_id]
            result = calculate_result(opponent.secret_number, guess)
            player.attempts += 1
            self.broadcast(
                create_message(
                    ACTION_GUESS_RESULT,
                    guess=guess,
                    strikes=result.strikes,
                    balls=result.balls,
                    attempts=player.attempts,
                    current_player=player_id,
                )
            )
            log.info("player %d guessed %s -> %dS %dB", player_id, guess, result.strikes, result.balls)
            if result.is_correct:
                self.end_game(player_id)
            else:
                self.current_turn = 1 - self.current_turn
                self.start_turn()