"""Text screens shown by the number baseball client.

Every function returns the text to write; nothing is printed here.
"""

from __future__ import annotations

import unicodedata
from collections.abc import Iterable

CLEAR_SCREEN = "\033[2J\033[H"

_BOX_WIDTH = 61
_HEADER_WIDTH = 63
_FRAME_INDENTS = (3, 2, 1, 0, 1, 2, 3)


def _lines(*lines: str) -> str:
    return "".join(line + "\n" for line in lines)


def _display_width(text: str) -> int:
    width = 0
    for char in text:
        if unicodedata.combining(char) or unicodedata.category(char) in ("Mn", "Me", "Cf"):
            continue
        if char == "\ufe0f":
            continue
        width += 2 if unicodedata.east_asian_width(char) in ("W", "F") else 1
    return width


def _row(text: str, width: int = _BOX_WIDTH, edge: str = "│") -> str:
    padding = max(width - _display_width(text), 0)
    return f"{edge}{text}{' ' * padding}{edge}"


def _box(title: str, body: Iterable[str], width: int = _BOX_WIDTH) -> str:
    rule = "─" * width
    rows = [f"╭{rule}╮", _row("  " + title, width), f"├{rule}┤"]
    rows += [_row("  " + line if line else "", width) for line in body]
    rows.append(f"╰{rule}╯")
    return _lines(*rows)


def _emoji_frame(symbol: str, count: int, texts: dict[int, str]) -> str:
    edge = "    " + symbol * count
    rows = [edge]
    for position, indent in enumerate(_FRAME_INDENTS):
        inner_width = 52 + 2 * (3 - indent)
        text = texts.get(position, "")
        padding = max(inner_width - _display_width(text), 0)
        rows.append(f"{' ' * indent}{symbol}{text}{' ' * padding}{symbol}")
    rows.append(edge)
    return _lines(*rows)


def _notice(label: str, message: str) -> str:
    return _lines(
        f"┌─ {label} " + "─" * 50 + "┐",
        f"│  {message}",
        "└" + "─" * _BOX_WIDTH + "┘",
        "",
    )


def banner() -> str:
    frame = _emoji_frame(
        "⚾",
        30,
        {
            1: "     🎯 ✨ 숫자 야구 네트워크 게임 ✨ 🎯",
            3: "        🔥 REAL-TIME NETWORK BASEBALL GAME 🔥",
            5: "     ⭐ 1 vs 1 온라인 대전 ⭐",
        },
    )
    return "\n" + frame + "\n"


def welcome_screen() -> str:
    box = _box(
        "🌟 환영합니다! Welcome to Baseball Network Game! 🌟",
        [
            "",
            "🎮 서버에 연결 중... 잠시만 기다려주세요!",
            "",
            "💫 Connection Status: [" + "█" * 20 + "] 100%",
            "",
        ],
    )
    return CLEAR_SCREEN + banner() + box + "\n"


def game_header() -> str:
    rule = "═" * _HEADER_WIDTH
    return "\n" + _lines(
        f"╔{rule}╗",
        _row("  🎯 ⚾ 숫자 야구 네트워크 게임 ⚾ 🎯", _HEADER_WIDTH, "║"),
        _row("", _HEADER_WIDTH, "║"),
        _row("  🔥 실시간 1:1 대전 🔥    💎 3자리 숫자 맞추기 💎", _HEADER_WIDTH, "║"),
        f"╚{rule}╝",
    ) + "\n"


def player_status(player_id: int, status: str) -> str:
    role = "선공" if player_id == 0 else "후공"
    return _box(
        "👤 플레이어 정보",
        [f"🆔 ID: {player_id}", f"🎭 역할: {role}", f"📊 상태: {status}"],
    ) + "\n"


def game_rules() -> str:
    body = [
        "",
        "🎯 게임 목표:",
        "   상대방보다 먼저 3자리 비밀번호를 맞추면 승리!",
        "",
        "📝 게임 순서:",
        "   1️⃣ 각자 3자리 서로 다른 숫자 설정 (예: 123, 456)",
        "   2️⃣ 번갈아가며 상대방 숫자 추측",
        "   3️⃣ 결과 확인 후 다음 추측 진행",
        "   4️⃣ 3 스트라이크 먼저 내는 사람이 승리!",
        "",
        "📊 결과 해석 (중요!):",
        "   ⚡ 스트라이크: 숫자와 위치가 모두 정확",
        "      예) 정답 123, 추측 120 → 1, 2가 정확한 위치 = 2S",
        "   🔮 볼: 숫자는 맞지만 위치가 틀림",
        "      예) 정답 123, 추측 321 → 모든 숫자 있지만 위치 틀림 = 3B",
        "   💫 아웃: 맞는 숫자가 하나도 없음",
        "      예) 정답 123, 추측 456 → 공통 숫자 없음 = 0S 0B",
        "",
        "💻 사용 명령어:",
        "   🔹 set 123     - 내 비밀번호 설정 (서로 다른 3자리)",
        "   🔹 guess 456   - 상대방 번호 추측 (내 턴일 때만)",
        "   🔹 help        - 이 도움말 다시 보기",
        "   🔹 quit        - 게임 종료하고 나가기",
        "",
        "⚠️  주의사항:",
        "   • 같은 숫자 중복 사용 금지! (111, 223 등 불가)",
        "   • 0으로 시작하는 숫자 가능 (012, 034 등 가능)",
        "   • 턴제 게임이므로 상대방 턴에는 대기해야 함",
        "",
    ]
    return _box("📋 숫자야구 게임 완전 가이드 📋", body) + "\n"


def waiting_message() -> str:
    return _lines(
        "  ⏳ 상대방을 기다리는 중... 🎭",
        "  💫 곧 상대방이 접속할 예정입니다! 조금만 기다려주세요~",
        "",
    )


def turn_indicator(is_my_turn: bool) -> str:
    if is_my_turn:
        box = _box(
            "🎯 당신의 턴입니다! YOUR TURN! 🎯",
            [
                "",
                "🔥 상대방의 숫자를 추측해보세요!",
                "💡 명령어: guess <3자리숫자>",
                "📝 예시: guess 123, guess 456",
                "",
            ],
        )
    else:
        box = _box(
            "⏰ 상대방의 턴 - 대기 중... WAITING... ⏰",
            ["", "🤔 상대방이 추측하고 있습니다...", "☕ 커피 한 잔 하며 기다려보세요!", ""],
        )
    return box + "\n"


def result_board(
    guess: str,
    strikes: int,
    balls: int,
    attempts: int,
    current_player: int,
    my_player_id: int,
) -> str:
    mine = current_player == my_player_id
    player_name = "🟢 당신" if mine else "🔴 상대방"
    owner = "당신의" if mine else "상대방"
    strike_marks = "🔥" * strikes + "⚪" * (3 - strikes)
    ball_marks = "💎" * balls + "⚫" * (3 - balls)
    body = [
        "",
        f"🎯 추측한 숫자: {guess}",
        "",
        f"⚡ 스트라이크: {strikes}  {strike_marks}",
        f"🔮 볼: {balls}         {ball_marks}",
        "",
        f"📈 {owner} 시도 횟수: {attempts}번",
        "",
    ]
    if strikes == 3:
        if mine:
            body.append("🎊🎊🎊 축하합니다! 당신이 정답을 맞췄습니다! 🎊🎊🎊")
        else:
            body.append("😢😢😢 아쉽게도 상대방이 정답을 맞췄습니다... 😢😢😢")
    return _box(f"📊 {player_name}의 추측 결과 - GUESS RESULT 📊", body) + "\n"


def victory_screen() -> str:
    frame = _emoji_frame(
        "🎊",
        20,
        {
            1: "     🏆✨ VICTORY! 승리! CONGRATULATIONS! ✨🏆",
            3: "        🎯 YOU ARE THE BASEBALL CHAMPION! 🎯",
            5: "     🌟 최고의 추리 실력을 보여주셨습니다! 🌟",
        },
    )
    return "\n\n" + frame + "\n"


def defeat_screen() -> str:
    frame = _emoji_frame(
        "😢",
        20,
        {
            1: "     💪 아쉽지만 좋은 경기였습니다! 💪",
            3: "        🔥 다음번엔 더 잘할 수 있을 거예요! 🔥",
            5: "     ⭐ 포기하지 마세요! 재도전하세요! ⭐",
        },
    )
    return "\n\n" + frame + "\n"


def game_over_info(my_number: str, opponent_number: str) -> str:
    return _box(
        "📝 게임 결과 - FINAL RESULT 📝",
        [
            "",
            f"🔐 당신의 숫자:   {my_number}",
            f"🎭 상대방 숫자:   {opponent_number}",
            "",
            "💡 잘 기억해두세요! 다음 게임에 도움이 될 거예요!",
            "",
        ],
    ) + "\n"


def input_prompt() -> str:
    return "┌─ 💬 명령어 입력 " + "─" * 45 + "┐\n│  "


def success_message(message: str) -> str:
    return _notice("✅ 성공", message)


def error_message(message: str) -> str:
    return _notice("❌ 오류", message)