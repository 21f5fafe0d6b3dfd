"""Tests for discovering and loading conversation files."""

import json
import logging
from pathlib import Path

import pytest

from cchistory.config import Config
from cchistory.conversations import (
    NO_PREVIEW,
    UNKNOWN_DATE,
    extract_project_name,
    load_conversation,
    load_conversations,
)


def _write_jsonl(path: Path, records: list) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(r if isinstance(r, str) else json.dumps(r) for r in records) + "\n")
    return path


@pytest.mark.parametrize(
    ("encoded", "expected"),
    [
        ("-Users-thkt-GitHub-my-project", "my-project"),
        ("-Users-alice-Documents-notes", "notes"),
        ("-home-bob-src-api-server", "api-server"),
        ("-Users-thkt--claude", ".claude"),
        ("-home-bob-scratch", "scratch"),
        ("-Users-carol-work-GitHub-site", "site"),
        ("plain-name", "plain-name"),
        ("-tmp-demo", "demo"),
    ],
)
def test_extract_project_name(encoded: str, expected: str) -> None:
    assert extract_project_name(encoded) == expected


def test_load_conversations_builds_summaries(tmp_path: Path) -> None:
    _write_jsonl(
        tmp_path / "-Users-me-GitHub-app" / "older.jsonl",
        [
            {"type": "user", "timestamp": "2024-01-01T10:00:00Z", "sessionId": "s1",
             "message": {"content": "<command-name>/init</command-name> Set up the repo"}},
            {"type": "assistant", "message": {"content": [{"type": "text", "text": "ok"}]}},
        ],
    )
    _write_jsonl(
        tmp_path / "-Users-me-GitHub-app" / "newer.jsonl",
        [{"type": "user", "timestamp": "2024-02-01T10:00:00Z", "cwd": "/Users/me/GitHub/app",
          "message": {"content": [{"type": "text", "text": "x" * 150}]}}],
    )

    conversations = load_conversations(Config(max_preview_length=20), tmp_path)

    assert [c.id for c in conversations] == ["newer", "older"]
    newer, older = conversations
    assert older.project == "app"
    assert older.message_count == 2
    assert older.session_id == "s1"
    assert older.preview == "Set up the repo"
    assert newer.session_id == "app"
    assert newer.preview == "x" * 20 + "..."


def test_hidden_entries_and_bad_files_skipped(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    (tmp_path / ".DS_Store").write_text("")
    _write_jsonl(tmp_path / ".hidden" / "a.jsonl", [{"type": "user"}])
    _write_jsonl(tmp_path / "proj" / "broken.jsonl", ["{not json"])
    (tmp_path / "proj" / "empty.jsonl").write_text("\n\n")

    with caplog.at_level(logging.WARNING):
        conversations = load_conversations(Config(), tmp_path)

    assert conversations == []
    assert "broken.jsonl" in caplog.text


def test_date_falls_back_to_file_name(tmp_path: Path) -> None:
    _write_jsonl(tmp_path / "proj" / "log-2024-05-06.jsonl", [{"type": "system"}])
    _write_jsonl(tmp_path / "proj" / "undated.jsonl", [{"type": "system"}])

    by_id = {c.id: c for c in load_conversations(Config(date_format="%d.%m.%Y"), tmp_path)}

    assert by_id["log-2024-05-06"].start_time == "06.05.2024"
    assert by_id["undated"].start_time == UNKNOWN_DATE
    assert by_id["undated"].preview == NO_PREVIEW
    assert by_id["undated"].session_id == "unknown"


def test_missing_projects_dir(tmp_path: Path) -> None:
    assert load_conversations(Config(), tmp_path / "nope") == []


def test_load_conversation_skips_invalid_lines(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    path = _write_jsonl(
        tmp_path / "c.jsonl",
        [
            {"type": "user", "message": {"content": "hi"}},
            "not json at all",
            "[1, 2]",
            "",
            {"type": "assistant", "content": [{"type": "text", "text": "hello"}]},
        ],
    )

    with caplog.at_level(logging.WARNING):
        turns = load_conversation(path)

    assert [t.role for t in turns] == ["user", "assistant"]
    assert "c.jsonl:2" in caplog.text


def test_unreadable_projects_dir(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    _write_jsonl(tmp_path / "proj" / "a.jsonl", [{"type": "user"}])

    def deny(self: Path):
        raise PermissionError(13, "Permission denied", str(self))

    monkeypatch.setattr(Path, "iterdir", deny)

    with caplog.at_level(logging.WARNING):
        assert load_conversations(Config(), tmp_path) == []

    assert "Cannot read projects directory" in caplog.text
