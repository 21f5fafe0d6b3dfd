"""Tests for rendering individual conversation turns."""

from cchistory.records import ConversationTurn, TextPart, ToolInvocation
from cchistory.turns import format_thinking, format_turn


def test_user_turn_without_timestamp() -> None:
    turn = ConversationTurn(role="user", message_content="Hi there")

    assert format_turn(turn) == "### 👤 User\n\nHi there\n"


def test_blank_user_turn_is_dropped() -> None:
    assert format_turn(ConversationTurn(role="user", message_content="   \n ")) == ""
    assert format_turn(ConversationTurn(role="user")) == ""


def test_user_turn_of_only_annotations_is_dropped() -> None:
    turn = ConversationTurn(role="user", message_content="<system-reminder>ctx</system-reminder>")

    assert format_turn(turn) == ""


def test_assistant_turn_with_thinking() -> None:
    turn = ConversationTurn(
        role="assistant", thinking="first\nsecond", content=[TextPart("The answer")]
    )

    result = format_turn(turn)

    assert result.startswith("### 🤖 Assistant\n")
    assert "> 🤔 **Thinking**\n>\n> first\n> second\n" in result
    assert result.index("Thinking") < result.index("The answer")


def test_thinking_alone_keeps_turn() -> None:
    turn = ConversationTurn(role="assistant", thinking="pondering", content=[])

    result = format_turn(turn)

    assert "> pondering" in result


def test_empty_assistant_turn_is_dropped() -> None:
    turn = ConversationTurn(role="assistant", thinking="  ", content=[TextPart("")])

    assert format_turn(turn) == ""


def test_assistant_falls_back_to_message_content() -> None:
    turn = ConversationTurn(role="assistant", message_content=[ToolInvocation("Read", {"path": "a"})])

    assert "**Tool Use**: Read" in format_turn(turn)


def test_system_turns_not_rendered() -> None:
    assert format_turn(ConversationTurn(role="system", content="boot")) == ""
    assert format_turn(ConversationTurn(role="summary", content="x")) == ""


def test_format_thinking_empty() -> None:
    assert format_thinking(None) == ""
    assert format_thinking("") == ""
