import pytest

from numbaseball import ui

BOX_STARTS = ("╭", "│", "├", "╰")


def _box_lines(text):
    return [line for line in text.splitlines() if line]


def test_banner_mentions_game():
    text = ui.banner()
    assert "REAL-TIME NETWORK BASEBALL GAME" in text
    assert text.startswith("\n") and text.endswith("\n\n")


def test_welcome_screen_clears_and_shows_banner():
    text = ui.welcome_screen()
    assert text.startswith(ui.CLEAR_SCREEN)
    assert ui.banner() in text
    assert "100%" in text and "100%%" not in text


def test_game_header_frame():
    lines = _box_lines(ui.game_header())
    assert lines[0].startswith("╔") and lines[-1].startswith("╚")
    assert all(line.startswith("║") for line in lines[1:-1])


@pytest.mark.parametrize("player_id, role", [(0, "선공"), (1, "후공")])
def test_player_status_role(player_id, role):
    text = ui.player_status(player_id, "연결됨 ✅")
    assert f"ID: {player_id}" in text
    assert f"역할: {role}" in text
    assert "상태: 연결됨 ✅" in text


def test_game_rules_is_a_box():
    lines = _box_lines(ui.game_rules())
    assert lines[0].startswith("╭") and lines[-1].startswith("╰")
    assert all(line.startswith(BOX_STARTS) for line in lines)
    assert any("set 123" in line for line in lines)


def test_waiting_message():
    text = ui.waiting_message()
    assert "상대방을 기다리는 중..." in text
    assert text.endswith("\n\n")


def test_turn_indicator_differs():
    mine = ui.turn_indicator(True)
    theirs = ui.turn_indicator(False)
    assert "YOUR TURN" in mine and "YOUR TURN" not in theirs
    assert "WAITING" in theirs and "WAITING" not in mine
    assert mine.endswith("╯\n\n") and theirs.endswith("╯\n\n")


def test_result_board_marks():
    text = ui.result_board("123", 2, 1, 4, 0, 0)
    assert "🟢 당신" in text
    assert "🔥🔥⚪" in text
    assert "💎⚫⚫" in text
    assert "추측한 숫자: 123" in text
    assert "시도 횟수: 4번" in text
    assert "축하합니다" not in text


def test_result_board_mark_counts():
    for strikes in range(4):
        for balls in range(4 - strikes):
            text = ui.result_board("456", strikes, balls, 1, 1, 0)
            assert text.count("🔥") + text.count("⚪") == 3
            assert text.count("💎") + text.count("⚫") == 3
            assert "🔴 상대방" in text


def test_result_board_win_for_me():
    text = ui.result_board("789", 3, 0, 5, 1, 1)
    assert "축하합니다! 당신이 정답을 맞췄습니다!" in text


def test_result_board_win_for_opponent():
    text = ui.result_board("789", 3, 0, 5, 0, 1)
    assert "아쉽게도 상대방이 정답을 맞췄습니다" in text
    assert "상대방 시도 횟수: 5번" in text


def test_victory_and_defeat():
    assert "VICTORY" in ui.victory_screen()
    assert "VICTORY" not in ui.defeat_screen()
    assert ui.victory_screen().startswith("\n\n")
    assert ui.defeat_screen().startswith("\n\n")


def test_game_over_info():
    text = ui.game_over_info("123", "456")
    assert "당신의 숫자:   123" in text
    assert "상대방 숫자:   456" in text


def test_input_prompt_leaves_cursor_in_box():
    prompt = ui.input_prompt()
    assert prompt.endswith("│  ")
    assert prompt.count("\n") == 1


def test_success_and_error_messages():
    ok = ui.success_message("숫자를 설정했습니다: 123 ✨")
    bad = ui.error_message("이미 숫자를 설정했습니다!")
    assert "✅ 성공" in ok and "│  숫자를 설정했습니다: 123 ✨\n" in ok
    assert "❌ 오류" in bad and "│  이미 숫자를 설정했습니다!\n" in bad
    assert len(_box_lines(ok)) == 3 == len(_box_lines(bad))