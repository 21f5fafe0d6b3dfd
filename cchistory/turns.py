"""Render a single conversation turn as a Markdown section."""

from __future__ import annotations

from cchistory.blocks import DEFAULT_MAX_RESULT_LENGTH, format_content
from cchistory.records import ConversationTurn, format_timestamp


def _title(label: str, turn: ConversationTurn) -> str:
    timestamp = format_timestamp(turn.timestamp)
    return f"### {label} {timestamp}".rstrip() + "\n"


def format_thinking(thinking: str | None) -> str:
    """Render assistant thinking as a quoted aside, or "" if there is none."""
    if not thinking or not thinking.strip():
        return ""
    quoted = "\n".join(f"> {line}" for line in thinking.split("\n"))
    return f"> 🤔 **Thinking**\n>\n{quoted}\n"


def format_turn(turn: ConversationTurn, max_result_length: int = DEFAULT_MAX_RESULT_LENGTH) -> str:
    """Render one turn. Returns "" when there is nothing worth showing.

    Only user and assistant turns are rendered. A turn whose content is blank
    after formatting is dropped; for assistant turns a thinking block on its
    own is enough to keep the turn.
    """
    if turn.role == "user":
        content = format_content(turn.body, max_result_length)
        if not content.strip():
            return ""
        return "\n".join([_title("👤 User", turn), content, ""])

    if turn.role == "assistant":
        thinking = format_thinking(turn.thinking)
        content = format_content(turn.body, max_result_length)
        if not thinking and not content.strip():
            return ""

        lines = [_title("🤖 Assistant", turn)]
        if thinking:
            lines.append(thinking)
        if content.strip():
            lines.append(content)
        lines.append("")
        return "\n".join(lines)

    return ""
