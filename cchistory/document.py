"""
Assemble a full Markdown document from a sequence of conversation turns.

Layout:

    # Claude Conversation

    ## Session Information      (only when the first record has it all)
    - **Session ID**: ...
    - **Started**: ...
    - **Working Directory**: ...
    - **Version**: ...

    ## Conversation

    ### 👤 User 2024-01-01 10:00:00
    ...
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from cchistory.blocks import DEFAULT_MAX_RESULT_LENGTH
from cchistory.records import ConversationTurn, format_timestamp
from cchistory.turns import format_turn

DOCUMENT_TITLE = "# Claude Conversation\n"
CONVERSATION_HEADER = "## Conversation\n"


@dataclass(frozen=True)
class SessionMetadata:
    session_id: str
    started: str
    working_directory: str
    version: str


def extract_session_metadata(first_turn: ConversationTurn) -> SessionMetadata | None:
    """Session metadata from the first record, if all four fields are present."""
    if not first_turn.has_session_metadata:
        return None
    return SessionMetadata(
        session_id=first_turn.session_id or "",
        started=format_timestamp(first_turn.timestamp) or first_turn.timestamp or "",
        working_directory=first_turn.working_directory or "",
        version=first_turn.tool_version or "",
    )


def format_session_metadata(metadata: SessionMetadata) -> list[str]:
    return [
        "## Session Information\n",
        f"- **Session ID**: {metadata.session_id}",
        f"- **Started**: {metadata.started}",
        f"- **Working Directory**: {metadata.working_directory}",
        f"- **Version**: {metadata.version}\n",
    ]


def assemble_document(
    turns: Sequence[ConversationTurn],
    max_result_length: int = DEFAULT_MAX_RESULT_LENGTH,
) -> str:
    """Build the complete Markdown document for a conversation."""
    lines = [DOCUMENT_TITLE]

    if turns:
        metadata = extract_session_metadata(turns[0])
        if metadata:
            lines.extend(format_session_metadata(metadata))

    lines.append(CONVERSATION_HEADER)

    for turn in turns:
        formatted = format_turn(turn, max_result_length)
        if formatted.strip():
            lines.append(formatted)

    return "\n".join(lines)
