"""
Record model for conversation log entries.

One JSONL line becomes one ConversationTurn. Content parts are parsed into a
small sum type so the formatters can dispatch on class instead of poking at
raw dict keys.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Union


@dataclass(frozen=True)
class TextPart:
    """Plain text content."""

    text: str = ""


@dataclass(frozen=True)
class ToolInvocation:
    """A tool call made by the assistant."""

    name: str = ""
    input: dict[str, Any] | None = None


@dataclass(frozen=True)
class ToolResult:
    """Output returned by a tool (string or structured JSON value)."""

    content: Any = ""


@dataclass(frozen=True)
class UnknownPart:
    """Any content part with an unrecognised type tag. Renders as nothing."""

    type: str = "unknown"
    raw: dict[str, Any] = field(default_factory=dict)


ContentPart = Union[TextPart, ToolInvocation, ToolResult, UnknownPart]


def parse_content_part(data: Any) -> ContentPart:
    """Convert a raw content dict into a ContentPart."""
    if not isinstance(data, dict):
        return UnknownPart(type=type(data).__name__)

    part_type = data.get("type")
    if part_type == "text":
        text = data.get("text")
        return TextPart(text=text if isinstance(text, str) else "")
    if part_type == "tool_use":
        tool_input = data.get("input")
        return ToolInvocation(
            name=data.get("name") or "",
            input=tool_input if isinstance(tool_input, dict) else None,
        )
    if part_type == "tool_result":
        return ToolResult(content=data.get("content", ""))
    return UnknownPart(type=str(part_type or "unknown"), raw=data)


def _parse_content(raw: Any) -> str | list[ContentPart] | None:
    if raw is None:
        return None
    if isinstance(raw, str):
        return raw
    if isinstance(raw, list):
        return [parse_content_part(item) for item in raw]
    if isinstance(raw, dict):
        return [parse_content_part(raw)]
    return None


def _collect_thinking(raw: Any) -> str | None:
    """Join the text of {"type": "thinking"} blocks found in raw content."""
    if not isinstance(raw, list):
        return None
    texts = [
        item["thinking"]
        for item in raw
        if isinstance(item, dict)
        and item.get("type") == "thinking"
        and isinstance(item.get("thinking"), str)
    ]
    return "\n\n".join(texts) if texts else None


def _optional_str(value: Any) -> str | None:
    return value if isinstance(value, str) and value else None


@dataclass(frozen=True)
class ConversationTurn:
    """A single parsed conversation record."""

    role: str
    timestamp: str | None = None
    session_id: str | None = None
    working_directory: str | None = None
    tool_version: str | None = None
    thinking: str | None = None
    content: str | list[ContentPart] | None = None  # top-level (assistant/newer shape)
    message_content: str | list[ContentPart] | None = None  # message.content (user/legacy)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ConversationTurn:
        """Create a ConversationTurn from one decoded JSONL record."""
        message = data.get("message")
        if not isinstance(message, dict):
            message = {}

        raw_content = data.get("content")
        raw_message_content = message.get("content")

        thinking = _optional_str(data.get("thinking"))
        if thinking is None:
            thinking = _collect_thinking(raw_content) or _collect_thinking(raw_message_content)

        return cls(
            role=str(data.get("type") or data.get("role") or message.get("role") or "unknown"),
            timestamp=_optional_str(data.get("timestamp")),
            session_id=_optional_str(data.get("sessionId")),
            working_directory=_optional_str(data.get("cwd")),
            tool_version=_optional_str(data.get("version")),
            thinking=thinking,
            content=_parse_content(raw_content),
            message_content=_parse_content(raw_message_content),
        )

    @property
    def body(self) -> str | list[ContentPart]:
        """The turn's content.

        A record populates either the top-level content field or the nested
        message content. The top-level field wins when both are present; when
        neither is, the body is empty.
        """
        if self.content is not None:
            return self.content
        if self.message_content is not None:
            return self.message_content
        return ""

    @property
    def has_session_metadata(self) -> bool:
        return bool(
            self.session_id and self.timestamp and self.working_directory and self.tool_version
        )


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO-8601 timestamp and convert it to local time."""
    if not value:
        return None
    try:
        timestamp_str = value
        if timestamp_str.endswith("Z"):
            timestamp_str = timestamp_str[:-1] + "+00:00"
        dt = datetime.fromisoformat(timestamp_str)
        return dt.astimezone()
    except (ValueError, TypeError):
        return None


def format_timestamp(value: str | None, fmt: str = "%Y-%m-%d %H:%M:%S") -> str:
    """Format a timestamp for display, or return "" if it can't be parsed."""
    dt = parse_timestamp(value)
    return dt.strftime(fmt) if dt else ""
