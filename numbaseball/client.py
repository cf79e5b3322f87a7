"""Interactive terminal client for number baseball."""

from __future__ import annotations

import json
import selectors
import socket
import sys
import time
from dataclasses import dataclass
from typing import Any, Optional, Sequence, TextIO

from . import ui
from .protocol import (
    ACTION_ASSIGN_ID,
    ACTION_ERROR,
    ACTION_GAME_OVER,
    ACTION_GAME_START,
    ACTION_GUESS,
    ACTION_GUESS_RESULT,
    ACTION_NUMBER_SET,
    ACTION_SET_NUMBER,
    ACTION_WAIT_PLAYER,
    ACTION_WAIT_TURN,
    ACTION_YOUR_TURN,
    ConnectionClosed,
    ProtocolError,
    create_message,
    is_valid_number,
    recv_message,
    send_message,
)

_INVALID_NUMBER = "올바르지 않은 숫자입니다! 3자리 서로 다른 숫자를 입력하세요."
_PROMPT_CLOSE = "└─────────────────────────────────────────────────────────────┘\n\n"
_USAGE = "사용법: numbaseball-client <서버IP> <포트>"
_RESULT_FIELDS = ("guess", "strikes", "balls", "attempts", "current_player")


@dataclass
class ClientState:
    """What the client knows about its own progress."""

    my_player_id: int = -1
    game_started: bool = False
    number_set: bool = False
    my_turn: bool = False


def _as_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


def _as_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


class BaseballClient:
    """Reacts to user commands and server messages over one connection."""

    def __init__(self, sock: socket.socket, out: TextIO = sys.stdout) -> None:
        self.sock = sock
        self.out = out
        self.state = ClientState()

    def _write(self, text: str) -> None:
        self.out.write(text)
        self.out.flush()

    def _send(self, message: dict[str, Any]) -> None:
        try:
            send_message(self.sock, message)
        except OSError:
            self._write("🚨 서버 통신 오류: 메시지 전송 실패\n")

    def handle_user_input(self, line: str) -> bool:
        """Process one command line; return False when the user quits."""
        self._write(ui.input_prompt())
        self._write(_PROMPT_CLOSE)
        command = line.split("\n", 1)[0]

        if not command:
            return True
        if command == "quit":
            self._write("🚪 게임을 종료합니다... 안녕히 가세요! 👋\n")
            return False
        if command == "help":
            self._write(ui.game_rules())
            return True

        if command.startswith("set "):
            if self.state.number_set:
                self._write(ui.error_message("이미 숫자를 설정했습니다!"))
                return True
            number = command[4:]
            if not is_valid_number(number):
                self._write(ui.error_message(_INVALID_NUMBER))
                self._write("   💡 예시: set 123, set 789\n\n")
                return True
            self._send(create_message(ACTION_SET_NUMBER, number=number))
            self._write(ui.success_message(f"숫자를 설정했습니다: {number} ✨"))
            return True

        if command.startswith("guess "):
            if not self.state.my_turn:
                self._write(ui.error_message("지금은 당신의 턴이 아닙니다!"))
                return True
            guess = command[6:]
            if not is_valid_number(guess):
                self._write(ui.error_message(_INVALID_NUMBER))
                self._write("   💡 예시: guess 123, guess 789\n\n")
                return True
            self._send(create_message(ACTION_GUESS, guess=guess))
            return True

        self._write(ui.error_message("알 수 없는 명령어입니다. 'help'를 입력하여 도움말을 확인하세요."))
        return True

    def handle_server_message(self, message: Any) -> bool:
        """Apply one server message; return False when the game is over."""
        if not isinstance(message, dict) or "action" not in message:
            return True
        action = message["action"]

        if action == ACTION_ASSIGN_ID:
            if "player_id" in message:
                self.state.my_player_id = _as_int(message["player_id"])
                self._write(ui.player_status(self.state.my_player_id, "연결됨 ✅"))
        elif action == ACTION_WAIT_PLAYER:
            self._write(ui.waiting_message())
        elif action == ACTION_GAME_START:
            self.state.game_started = True
            self._write(ui.CLEAR_SCREEN + ui.game_header() + ui.game_rules())
            self._write("🎮 게임이 시작되었습니다! 이제 당신의 비밀 숫자를 설정하세요!\n")
            self._write("💡 'set <3자리숫자>' 명령으로 숫자를 설정하세요! (예: set 123)\n\n")
        elif action == ACTION_NUMBER_SET:
            self.state.number_set = True
            self._write(ui.success_message("숫자가 성공적으로 설정되었습니다! 상대방을 기다리는 중..."))
        elif action == ACTION_YOUR_TURN:
            self.state.my_turn = True
            self._write(ui.turn_indicator(True))
        elif action == ACTION_WAIT_TURN:
            self.state.my_turn = False
            self._write(ui.turn_indicator(False))
        elif action == ACTION_GUESS_RESULT:
            if all(field in message for field in _RESULT_FIELDS):
                self._write(
                    ui.result_board(
                        _as_text(message["guess"]),
                        _as_int(message["strikes"]),
                        _as_int(message["balls"]),
                        _as_int(message["attempts"]),
                        _as_int(message["current_player"]),
                        self.state.my_player_id,
                    )
                )
        elif action == ACTION_GAME_OVER:
            if "result" in message:
                won = _as_text(message["result"]) == "victory"
                self._write(ui.victory_screen() if won else ui.defeat_screen())
            if "your_number" in message and "opponent_number" in message:
                self._write(
                    ui.game_over_info(
                        _as_text(message["your_number"]),
                        _as_text(message["opponent_number"]),
                    )
                )
            self._write("🚪 게임이 종료됩니다... 수고하셨습니다! 👏\n\n")
            return False
        elif action == ACTION_ERROR:
            if "message" in message:
                self._write(ui.error_message(_as_text(message["message"])))
        return True

    def _poll_server(self) -> bool:
        try:
            message = recv_message(self.sock)
        except ConnectionClosed:
            self._write("🔌 서버가 연결을 종료했습니다\n")
        except ProtocolError as exc:
            self._write(f"🚨 프로토콜 오류: {exc}\n")
        except OSError:
            self._write("🚨 네트워크 오류: 메시지 수신 실패\n")
        else:
            return self.handle_server_message(message)
        self._write(ui.error_message("서버와의 연결이 끊어졌습니다."))
        return False

    def run(self, stdin: TextIO = sys.stdin) -> None:
        """Serve server messages and user commands until either side ends."""
        with selectors.DefaultSelector() as selector:
            selector.register(stdin, selectors.EVENT_READ)
            selector.register(self.sock, selectors.EVENT_READ)
            while True:
                ready = {key.fileobj for key, _ in selector.select()}
                if self.sock in ready and not self._poll_server():
                    return
                if stdin in ready:
                    line = stdin.readline()
                    if not line or not self.handle_user_input(line):
                        return


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) != 2:
        print(_USAGE)
        return 1
    server_ip, port_text = args
    try:
        port = int(port_text)
    except ValueError:
        print(_USAGE)
        return 1

    out = sys.stdout
    out.write(ui.welcome_screen())
    out.flush()
    time.sleep(0.5)

    try:
        sock = socket.create_connection((server_ip, port))
    except OSError:
        out.write(ui.error_message("서버에 연결할 수 없습니다. 서버가 실행 중인지 확인해주세요."))
        out.flush()
        return 1

    with sock:
        out.write(ui.CLEAR_SCREEN + ui.game_header())
        out.write("🎊 서버에 성공적으로 연결되었습니다! 🎊\n\n")
        out.write(ui.game_rules())
        out.flush()
        BaseballClient(sock, out).run(sys.stdin)
    return 0