#!/usr/bin/env python3
"""Browse Claude Code conversation history and export one as Markdown.

Usage:
    cchistory                 # pick a conversation interactively
    cchistory --list          # print recent conversations and exit
    cchistory --file PATH     # export a specific JSONL file

Exit codes:
    0: Exported, listed, cancelled, or nothing to export
    1: Export failed
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import questionary

from cchistory.config import Config, load_config
from cchistory.conversations import (
    ConversationSummary,
    load_conversation,
    load_conversations,
    summarize_conversation,
)
from cchistory.exporter import build_export_filename, export_conversation
from cchistory.paths import ExportPathError, get_claude_projects_dir

logger = logging.getLogger(__name__)


def _truncate(text: str, max_length: int) -> str:
    return text[:max_length] + "..." if len(text) > max_length else text


def format_choice(conversation: ConversationSummary, index: int) -> str:
    """Fixed-width row for the picker and --list output."""
    return (
        f"{index + 1:>3}  {conversation.start_time:<20}  {conversation.project:<25}  "
        f"{conversation.message_count:>8}  {_truncate(conversation.preview, 40)}"
    )


def export_selected(summary: ConversationSummary, config: Config) -> int:
    try:
        turns = load_conversation(summary.file_path)
        filepath = export_conversation(turns, build_export_filename(summary), config)
    except (ExportPathError, OSError) as e:
        print(f"❌ Export failed: {e}", file=sys.stderr)
        return 1

    print(f"✅ Export complete: {filepath}")
    return 0


def list_conversations(conversations: list[ConversationSummary], limit: int) -> None:
    for index, conversation in enumerate(conversations[:limit]):
        print(format_choice(conversation, index))
    if len(conversations) > limit:
        print(f"\n... and {len(conversations) - limit} more conversations")


def select_conversation(conversations: list[ConversationSummary]) -> ConversationSummary | None:
    choices = [
        questionary.Choice(title=format_choice(conversation, index), value=conversation)
        for index, conversation in enumerate(conversations)
    ]
    return questionary.select("Select a conversation to export:", choices=choices).ask()


def summary_for_file(file_path: Path, config: Config) -> ConversationSummary | None:
    return summarize_conversation(file_path, file_path.parent.name, config)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cchistory", description="Export Claude Code conversations to Markdown"
    )
    parser.add_argument("--list", action="store_true", help="List conversations and exit")
    parser.add_argument("--limit", type=int, default=20, help="Max conversations for --list")
    parser.add_argument("--file", type=Path, help="Export this JSONL file without prompting")
    parser.add_argument("--config", type=Path, help="Config file (default: ~/.config/cchistory/config.yaml)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    config = load_config(args.config)
    logger.debug("Export directory: %s", config.export_dir)

    if args.file:
        summary = summary_for_file(args.file, config) if args.file.is_file() else None
        if summary is None:
            print(f"❌ Not a readable conversation file: {args.file}", file=sys.stderr)
            return 1
        return export_selected(summary, config)

    print("\n🤖 Claude Conversation History Browser\n")

    conversations = load_conversations(config)
    if not conversations:
        print("❌ No conversation history found.")
        print(f"Search path: {get_claude_projects_dir()}")
        return 0

    count = len(conversations)
    print(f"✅ Found {count} conversation{'' if count == 1 else 's'}\n")

    if args.list:
        list_conversations(conversations, args.limit)
        return 0

    selected = select_conversation(conversations)
    if selected is None:
        # questionary returns None on Ctrl+C
        print("\n⚠️  Operation cancelled")
        return 0

    print(f"\nSelected conversation: {selected.project} ({selected.start_time})")
    return export_selected(selected, config)


if __name__ == "__main__":
    sys.exit(main())
