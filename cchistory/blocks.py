"""
Content block formatting.

Turns the content of a conversation turn (a raw string, or a list of content
parts) into Markdown fragments. Text goes through a fixed sequence of
independent passes; tool calls and tool results get their own renderers.

Nothing in here raises on odd input: unrecognised shapes render as an empty
string or an inline placeholder.
"""

from __future__ import annotations

import json
import re
import textwrap
from collections.abc import Callable
from typing import Any

from cchistory.records import (
    ContentPart,
    TextPart,
    ToolInvocation,
    ToolResult,
    UnknownPart,
    parse_content_part,
)
from cchistory.scrubber import scrub_metadata

DEFAULT_MAX_RESULT_LENGTH = 3000

CONTINUATION_SENTINEL = "This session is being continued from a previous conversation"
TRUNCATION_MARKER = "... (truncated)"
FENCE = "```"

EMPTY_INPUT = "(empty)"
EMPTY_RESULT = "(empty result)"
EMPTY_CODE_BLOCK = "(empty code block)"
JSON_ERROR = "(error formatting JSON)"

# How far back from the limit truncation will look for a newline to cut at
NEWLINE_LOOKBACK = 100
HEADING_SHIFT = 3

_HEADING = re.compile(r"^(#{1,3}) ")
_CLOSING_FENCE = re.compile(r"^\s*`{3,}\s*$")
_LINE_NUMBER_PREFIX = re.compile(r"^[ \t]*\d+(?:→|\t)", re.MULTILINE)
_TRUNCATION_AT_END = re.compile(r"\.\.\. \(truncated[^)\n]*\)\s*$")

# `git status --short`: two status columns and a path. Output is often
# trimmed, which eats the leading blank status column of the first line.
_GIT_STATUS_LINE = re.compile(r"^(?:[ MTADRCU?!][MTADRCU?!]|[MTADRCU?!]) \S")
_GIT_STATUS_SHIFTED = re.compile(r"^[MTADRCU?!] \S")
# At least one line must carry a full code ("M  x", "MM x", "?? x").
_GIT_STATUS_FULL = re.compile(r"^(?:[MTADRCU][ MTADRCU]|\?\?|!!) \S")
# `git diff --stat`
_DIFF_STAT_LINE = re.compile(r"^\s*\S.*\s\|\s+(?:\d+(?:\s+[-+]*)?|Bin\b.*)$")
_DIFF_STAT_SUMMARY = re.compile(r"^\s*\d+ files? changed")

_TRAILING_OPERATOR = re.compile(r"(?:==|!=|<=|>=|&&|\|\||->|=>|\*\*|//|[-+*/%=&|^<>])$")
_TRAILING_WORD = re.compile(r"(?:^|\s)\w+$")
# Markdown that ends in operator characters: rules, emphasis, tags, table rows
_MARKDOWN_ENDING = re.compile(
    r"^\s*(?:[-*_]\s*){3,}$"
    r"|\*\*[^*\n]+\*\*$"
    r"|(?<!\*)\*[^*\s][^*\n]*\*$"
    r"|<[^<>\n]+>$"
    r"|^\s*\|.*\|$"
    r"|\d%$"
)


# --- Text passes ---


def fold_continuation_summary(text: str) -> str:
    """Collapse a "session continued" summary into a <details> block."""
    if not text.startswith(CONTINUATION_SENTINEL):
        return text

    first_line, _, remainder = text.partition("\n")
    return (
        f"<details>\n<summary>📋 <strong>{first_line}</strong></summary>\n\n"
        f"{remainder.strip()}\n</details>"
    )


def _is_fence(line: str) -> bool:
    return line.strip().startswith(FENCE)


def repair_empty_code_blocks(text: str) -> str:
    """Give fenced blocks with a blank body an explicit placeholder."""
    lines = text.split("\n")
    repaired: list[str] = []
    i = 0

    while i < len(lines):
        line = lines[i]
        if not _is_fence(line):
            repaired.append(line)
            i += 1
            continue

        close = i + 1
        while close < len(lines) and not _CLOSING_FENCE.match(lines[close]):
            close += 1
        if close == len(lines):
            # Unterminated fence: nothing to repair
            repaired.extend(lines[i:])
            break

        body = lines[i + 1 : close]
        repaired.append(line)
        if all(not b.strip() for b in body):
            repaired.append(EMPTY_CODE_BLOCK)
        else:
            repaired.extend(body)
        repaired.append(lines[close])
        i = close + 1

    return "\n".join(repaired)


def shift_heading_levels(text: str, increase_by: int = HEADING_SHIFT) -> str:
    """Push embedded h1-h3 headings down so they sit below the document's own."""
    if not text or increase_by <= 0:
        return text

    adjusted = []
    in_code_block = False

    for line in text.split("\n"):
        if _is_fence(line):
            in_code_block = not in_code_block
            adjusted.append(line)
            continue

        match = None if in_code_block else _HEADING.match(line)
        if match:
            level = len(match.group(1))
            adjusted.append("#" * (level + increase_by) + line[level:])
        else:
            adjusted.append(line)

    return "\n".join(adjusted)


TEXT_PASSES: tuple[Callable[[str], str], ...] = (
    scrub_metadata,
    fold_continuation_summary,
    repair_empty_code_blocks,
    shift_heading_levels,
)


def format_text(text: str) -> str:
    """Run a text block through every text pass in order."""
    if not text:
        return ""
    for text_pass in TEXT_PASSES:
        text = text_pass(text)
    return text


# --- Tool invocations ---


def _to_json(value: Any) -> str:
    try:
        return json.dumps(value, indent=2, ensure_ascii=False)
    except (TypeError, ValueError):
        return JSON_ERROR


def format_tool_invocation(part: ToolInvocation) -> str:
    tool_name = part.name or "Unknown Tool"
    body = _to_json(part.input) if part.input else EMPTY_INPUT
    return f"\n🔧 **Tool Use**: {tool_name}\n```json\n{body}\n```"


# --- Tool results ---


def strip_line_numbers(text: str) -> str:
    """Drop "   12→" / "   12<TAB>" prefixes left by file-viewing tools."""
    return _LINE_NUMBER_PREFIX.sub("", text)


def _non_blank(lines: list[str]) -> list[str]:
    return [line for line in lines if line.strip()]


def is_git_status(lines: list[str]) -> bool:
    content = _non_blank(lines)
    if not content or not any(_GIT_STATUS_FULL.match(line) for line in content):
        return False
    return all(_GIT_STATUS_LINE.match(line) for line in content)


def is_diff_stat(lines: list[str]) -> bool:
    content = _non_blank(lines)
    if not content or not any(_DIFF_STAT_SUMMARY.match(line) for line in content):
        return False
    return all(
        _DIFF_STAT_LINE.match(line) or _DIFF_STAT_SUMMARY.match(line) for line in content
    )


def normalize_indentation(text: str) -> str:
    """Line up tabular git output, or remove indentation shared by all lines."""
    lines = text.split("\n")

    if is_git_status(lines):
        return "\n".join(f" {line}" if _GIT_STATUS_SHIFTED.match(line) else line for line in lines)

    if is_diff_stat(lines):
        return "\n".join(
            f" {line}" if line.strip() and not line[0].isspace() else line for line in lines
        )

    return textwrap.dedent(text)


def ends_with_truncation_marker(text: str) -> bool:
    return bool(_TRUNCATION_AT_END.search(text))


def truncate_result(text: str, max_length: int) -> str:
    """Cut text to max_length, preferring a line break near the limit."""
    if ends_with_truncation_marker(text) or len(text) <= max_length:
        return text

    cut = text[:max_length]
    newline = cut.rfind("\n")
    if newline > 0 and newline >= max_length - NEWLINE_LOOKBACK:
        cut = cut[:newline]
    return f"{cut}\n{TRUNCATION_MARKER}"


def looks_incomplete(text: str) -> bool:
    """Best-effort guess that output was cut off mid-statement."""
    stripped = text.rstrip()
    if not stripped:
        return False

    last_line = stripped.split("\n")[-1]
    if last_line.endswith((",", "(", "[", "{", "\\")):
        return True
    if _TRAILING_OPERATOR.search(last_line):
        return not _MARKDOWN_ENDING.search(last_line)
    return bool(_TRAILING_WORD.search(last_line))


def repair_structure(text: str) -> str:
    """Close an unterminated fence, or flag output that stops mid-statement."""
    marker = _TRUNCATION_AT_END.search(text)

    if text.count(FENCE) % 2 == 1:
        if marker:
            body = text[: marker.start()].rstrip("\n")
            return f"{body}\n{FENCE}\n{text[marker.start():]}"
        return f"{text}\n{FENCE}"

    if not marker and looks_incomplete(text):
        return f"{text}\n{TRUNCATION_MARKER}"
    return text


def _result_block(text: str) -> str:
    return f"\n📤 **Tool Result**:\n```\n{text}\n```"


def format_tool_result(part: ToolResult, max_result_length: int = DEFAULT_MAX_RESULT_LENGTH) -> str:
    content = part.content
    if content is None:
        text = ""
    elif isinstance(content, str):
        text = strip_line_numbers(scrub_metadata(content))
    else:
        text = _to_json(content)

    if not text.strip():
        return _result_block(EMPTY_RESULT)

    text = normalize_indentation(text)
    text = truncate_result(text, max_result_length)
    text = repair_structure(text)
    return _result_block(text)


# --- Dispatch ---


def format_part(part: ContentPart, max_result_length: int = DEFAULT_MAX_RESULT_LENGTH) -> str:
    """Render a single content part."""
    if isinstance(part, TextPart):
        return format_text(part.text)
    if isinstance(part, ToolInvocation):
        return format_tool_invocation(part)
    if isinstance(part, ToolResult):
        return format_tool_result(part, max_result_length)
    return ""


def _format_element(item: Any, max_result_length: int) -> str:
    if isinstance(item, str):
        return format_text(item)
    if isinstance(item, dict):
        item = parse_content_part(item)
    if isinstance(item, (TextPart, ToolInvocation, ToolResult, UnknownPart)):
        return format_part(item, max_result_length)
    return ""


def format_content(content: Any, max_result_length: int = DEFAULT_MAX_RESULT_LENGTH) -> str:
    """Render a turn's content: a string, one content part, or a list of parts.

    List elements are rendered independently and joined with a newline, in
    their original order.
    """
    if isinstance(content, (list, tuple)):
        return "\n".join(_format_element(item, max_result_length) for item in content)
    return _format_element(content, max_result_length)
