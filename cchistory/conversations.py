"""
Conversation discovery and loading.

Claude Code keeps one JSONL file per session under
~/.claude/projects/{encoded-path}/, where the encoded path is the working
directory with every "/" replaced by "-" (e.g. -Users-alice-GitHub-my-app).
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

from cchistory.config import Config
from cchistory.paths import get_claude_projects_dir
from cchistory.records import ConversationTurn, parse_timestamp
from cchistory.scrubber import clean_xml_tags

logger = logging.getLogger(__name__)

UNKNOWN_DATE = "Unknown Date"
EPOCH_TIMESTAMP = "1970-01-01T00:00:00Z"
NO_PREVIEW = "No preview available"

# Directories people keep projects under; the project name is what follows
PARENT_DIRS = (
    "GitHub",
    "Documents",
    "Tools-cli",
    "Desktop",
    "Downloads",
    "Projects",
    "projects",
    "src",
    "repos",
    "code",
)

_HOME_PREFIX = re.compile(r"^-(?:Users|home)-([^-]+)-(.+)$")
_FILENAME_DATE = re.compile(r"(\d{4}-\d{2}-\d{2})")


@dataclass
class ConversationSummary:
    """One selectable conversation in the picker."""

    id: str
    project: str
    file_path: Path
    timestamp: str  # sort key, newest first
    start_time: str  # formatted for display
    message_count: int
    preview: str
    session_id: str


def _hidden_name(segment: str) -> str:
    """Map "-claude" to ".claude"; a "/." in the original path encodes as "--"."""
    return "." + segment.lstrip("-") if segment.startswith("-") else segment


def extract_project_name(encoded: str) -> str:
    """Derive a short project name from an encoded project directory name.

    Examples:
        -Users-alice-GitHub-my-project -> my-project
        -home-bob-src-api -> api
        -Users-alice--claude -> .claude
        -home-bob-scratch-notes -> scratch-notes
        my-project -> my-project

    The username is taken to be the single segment after Users/home, so
    usernames containing "-" are not split correctly.
    """
    if not encoded.startswith("-"):
        return encoded

    match = _HOME_PREFIX.match(encoded)
    if not match:
        segments = [s for s in encoded.split("-") if s]
        return segments[-1] if segments else encoded

    remaining = match.group(2)

    for parent in PARENT_DIRS:
        prefix = f"{parent}-"
        if remaining.startswith(prefix):
            index = 0
        else:
            index = remaining.find(f"-{prefix}")
            if index == -1:
                continue
            index += 1
        project = remaining[index + len(prefix) :]
        if project.strip("-"):
            return _hidden_name(project)

    return _hidden_name(remaining)


def _extract_text(content: Any) -> str:
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return " ".join(
            item["text"]
            for item in content
            if isinstance(item, dict) and item.get("type") == "text" and item.get("text")
        )
    return ""


def _build_preview(records: list[dict[str, Any]], max_length: int) -> str:
    for record in records:
        if record.get("type") != "user":
            continue
        message = record.get("message")
        if not isinstance(message, dict):
            continue
        cleaned = clean_xml_tags(_extract_text(message.get("content")))
        if cleaned:
            if len(cleaned) > max_length:
                return cleaned[:max_length] + "..."
            return cleaned
    return NO_PREVIEW


def _parse_lines(lines: list[str]) -> list[dict[str, Any]]:
    records = []
    for line in lines:
        try:
            data = json.loads(line)
        except json.JSONDecodeError:
            continue
        if isinstance(data, dict):
            records.append(data)
    return records


def _resolve_times(first: dict[str, Any], file_path: Path, date_format: str) -> tuple[str, str]:
    """Return (sort timestamp, display start time) for a conversation."""
    raw = first.get("timestamp")
    if isinstance(raw, str) and raw:
        parsed = parse_timestamp(raw)
        return raw, parsed.strftime(date_format) if parsed else UNKNOWN_DATE

    # Fall back to a date embedded in the file name
    match = _FILENAME_DATE.search(file_path.name)
    if match:
        try:
            parsed = datetime.strptime(match.group(1), "%Y-%m-%d")
            return match.group(1), parsed.strftime(date_format)
        except ValueError:
            pass
    return EPOCH_TIMESTAMP, UNKNOWN_DATE


def summarize_conversation(
    file_path: Path, project_dir_name: str, config: Config
) -> ConversationSummary | None:
    """Build the picker entry for one JSONL file, or None if it can't be read."""
    try:
        text = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Failed to read %s: %s", file_path.name, e)
        return None

    lines = [line for line in text.split("\n") if line.strip()]
    if not lines:
        return None

    try:
        first = json.loads(lines[0])
    except json.JSONDecodeError as e:
        logger.warning("Failed to parse %s: %s", file_path.name, e)
        return None
    if not isinstance(first, dict):
        logger.warning("Failed to parse %s: first line is not an object", file_path.name)
        return None

    timestamp, start_time = _resolve_times(first, file_path, config.date_format)

    session_id = first.get("sessionId")
    if not session_id and isinstance(first.get("cwd"), str):
        session_id = first["cwd"].rstrip("/").split("/")[-1]

    return ConversationSummary(
        id=file_path.stem,
        project=extract_project_name(project_dir_name),
        file_path=file_path,
        timestamp=timestamp,
        start_time=start_time,
        message_count=len(lines),
        preview=_build_preview(_parse_lines(lines), config.max_preview_length),
        session_id=session_id or "unknown",
    )


def load_conversations(config: Config, projects_dir: Path | None = None) -> list[ConversationSummary]:
    """
    Scan the projects directory for conversations, newest first.

    Args:
        config: Settings (date format and preview length are used)
        projects_dir: Directory to scan (default: ~/.claude/projects)

    Returns:
        list[ConversationSummary]: One entry per readable, non-empty JSONL file
    """
    root = projects_dir or get_claude_projects_dir()
    if not root.is_dir():
        logger.warning("Projects directory not found: %s", root)
        return []

    try:
        project_paths = sorted(root.iterdir())
    except OSError as e:
        logger.warning("Cannot read projects directory %s: %s", root, e)
        return []

    conversations: list[ConversationSummary] = []

    for project_path in project_paths:
        # Skip hidden files like .DS_Store
        if project_path.name.startswith(".") or not project_path.is_dir():
            continue

        for file_path in sorted(project_path.glob("*.jsonl")):
            summary = summarize_conversation(file_path, project_path.name, config)
            if summary:
                conversations.append(summary)

    conversations.sort(key=lambda c: c.timestamp, reverse=True)
    logger.debug("Found %d conversations in %s", len(conversations), root)
    return conversations


def load_conversation(file_path: Path) -> list[ConversationTurn]:
    """Parse every record of a JSONL conversation, skipping invalid lines."""
    turns = []

    with open(file_path, encoding="utf-8") as f:
        for line_number, line in enumerate(f, start=1):
            if not line.strip():
                continue
            try:
                data = json.loads(line)
            except json.JSONDecodeError:
                logger.warning("Invalid JSON line skipped: %s:%d", file_path.name, line_number)
                continue
            if not isinstance(data, dict):
                logger.warning("Non-object line skipped: %s:%d", file_path.name, line_number)
                continue
            turns.append(ConversationTurn.from_dict(data))

    return turns
