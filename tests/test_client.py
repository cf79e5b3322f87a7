import io
import os
import socket

import pytest

from numbaseball import ui
from numbaseball.client import BaseballClient, main
from numbaseball.protocol import (
    ACTION_ASSIGN_ID,
    ACTION_ERROR,
    ACTION_GAME_OVER,
    ACTION_GAME_START,
    ACTION_GUESS,
    ACTION_GUESS_RESULT,
    ACTION_NUMBER_SET,
    ACTION_SET_NUMBER,
    ACTION_WAIT_TURN,
    ACTION_YOUR_TURN,
    create_message,
    recv_message,
    send_message,
)


@pytest.fixture
def pair():
    a, b = socket.socketpair()
    b.settimeout(2)
    yield a, b
    a.close()
    b.close()


@pytest.fixture
def client(pair):
    return BaseballClient(pair[0], io.StringIO())


@pytest.fixture
def stdin_pipe():
    read_fd, write_fd = os.pipe()
    reader = os.fdopen(read_fd, "r")
    writer = os.fdopen(write_fd, "w")
    yield reader, writer
    reader.close()
    if not writer.closed:
        writer.close()


def _assert_nothing_sent(sock):
    sock.setblocking(False)
    with pytest.raises(BlockingIOError):
        sock.recv(1)


def test_set_sends_number(client, pair):
    assert client.handle_user_input("set 123\n") is True
    assert recv_message(pair[1]) == {"action": ACTION_SET_NUMBER, "number": "123"}
    assert ui.success_message("숫자를 설정했습니다: 123 ✨") in client.out.getvalue()


@pytest.mark.parametrize("line", ["set 112", "set 12", "set abc", "set 1234"])
def test_set_rejects_invalid_number(client, pair, line):
    assert client.handle_user_input(line) is True
    assert "올바르지 않은 숫자입니다!" in client.out.getvalue()
    _assert_nothing_sent(pair[1])


def test_set_refused_after_number_confirmed(client, pair):
    client.handle_server_message(create_message(ACTION_NUMBER_SET, message="ok"))
    assert client.state.number_set is True
    client.handle_user_input("set 123")
    assert ui.error_message("이미 숫자를 설정했습니다!") in client.out.getvalue()
    _assert_nothing_sent(pair[1])


def test_guess_refused_when_not_my_turn(client, pair):
    client.handle_user_input("guess 123")
    assert ui.error_message("지금은 당신의 턴이 아닙니다!") in client.out.getvalue()
    _assert_nothing_sent(pair[1])


def test_guess_sent_on_my_turn(client, pair):
    client.handle_server_message(create_message(ACTION_YOUR_TURN))
    assert client.state.my_turn is True
    assert ui.turn_indicator(True) in client.out.getvalue()
    assert client.handle_user_input("guess 789\n") is True
    assert recv_message(pair[1]) == {"action": ACTION_GUESS, "guess": "789"}


def test_wait_turn_clears_turn(client):
    client.handle_server_message(create_message(ACTION_YOUR_TURN))
    client.handle_server_message(create_message(ACTION_WAIT_TURN))
    assert client.state.my_turn is False
    assert ui.turn_indicator(False) in client.out.getvalue()


def test_quit_stops(client):
    assert client.handle_user_input("quit\n") is False
    assert "안녕히 가세요" in client.out.getvalue()


def test_help_shows_rules(client):
    assert client.handle_user_input("help") is True
    assert ui.game_rules() in client.out.getvalue()


def test_empty_line_is_ignored(client, pair):
    assert client.handle_user_input("\n") is True
    assert "오류" not in client.out.getvalue()
    _assert_nothing_sent(pair[1])


def test_unknown_command(client):
    assert client.handle_user_input("dance") is True
    assert "알 수 없는 명령어입니다" in client.out.getvalue()


def test_assign_id_records_player(client):
    assert client.handle_server_message(create_message(ACTION_ASSIGN_ID, player_id=1)) is True
    assert client.state.my_player_id == 1
    assert ui.player_status(1, "연결됨 ✅") in client.out.getvalue()


def test_game_start_marks_started(client):
    client.handle_server_message(create_message(ACTION_GAME_START, message="go"))
    assert client.state.game_started is True
    assert ui.game_rules() in client.out.getvalue()


def test_guess_result_renders_board(client):
    client.handle_server_message(create_message(ACTION_ASSIGN_ID, player_id=0))
    client.handle_server_message(
        create_message(
            ACTION_GUESS_RESULT, guess="123", strikes=1, balls=2, attempts=4, current_player=0
        )
    )
    assert ui.result_board("123", 1, 2, 4, 0, 0) in client.out.getvalue()


def test_guess_result_with_missing_fields_is_silent(client):
    assert client.handle_server_message(create_message(ACTION_GUESS_RESULT, guess="123")) is True
    assert client.out.getvalue() == ""


def test_victory_shows_numbers_and_ends(client):
    message = create_message(
        ACTION_GAME_OVER, result="victory", your_number="123", opponent_number="456"
    )
    assert client.handle_server_message(message) is False
    text = client.out.getvalue()
    assert ui.victory_screen() in text
    assert ui.game_over_info("123", "456") in text


def test_defeat_without_numbers(client):
    assert client.handle_server_message(create_message(ACTION_GAME_OVER, result="defeat")) is False
    text = client.out.getvalue()
    assert ui.defeat_screen() in text
    assert "FINAL RESULT" not in text


def test_error_message_is_shown(client):
    client.handle_server_message(create_message(ACTION_ERROR, message="nope"))
    assert ui.error_message("nope") in client.out.getvalue()


@pytest.mark.parametrize("message", [{"player_id": 1}, [1, 2], "text"])
def test_messages_without_action_are_ignored(client, message):
    assert client.handle_server_message(message) is True
    assert client.out.getvalue() == ""


def test_run_ends_on_game_over(client, pair, stdin_pipe):
    send_message(pair[1], create_message(ACTION_GAME_OVER, result="defeat"))
    client.run(stdin_pipe[0])
    assert ui.defeat_screen() in client.out.getvalue()


def test_run_ends_on_quit(client, stdin_pipe):
    reader, writer = stdin_pipe
    writer.write("quit\n")
    writer.flush()
    client.run(reader)
    assert "안녕히 가세요" in client.out.getvalue()


def test_run_ends_when_server_closes(client, pair, stdin_pipe):
    pair[1].close()
    client.run(stdin_pipe[0])
    assert ui.error_message("서버와의 연결이 끊어졌습니다.") in client.out.getvalue()


def test_main_requires_two_arguments(capsys):
    assert main(["127.0.0.1"]) == 1
    assert "사용법" in capsys.readouterr().out


def test_main_reports_unreachable_server(capsys):
    probe = socket.socket()
    probe.bind(("127.0.0.1", 0))
    port = probe.getsockname()[1]
    probe.close()
    assert main(["127.0.0.1", str(port)]) == 1
    assert "서버에 연결할 수 없습니다" in capsys.readouterr().out