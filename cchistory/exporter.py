"""
Write rendered conversations to disk.

The document is rendered in full before anything touches the filesystem and
then written atomically (temp file + rename), so a failed export never leaves
a partial file behind.
"""

from __future__ import annotations

import logging
import os
import re
import tempfile
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path

from cchistory.config import Config
from cchistory.conversations import ConversationSummary
from cchistory.document import assemble_document
from cchistory.paths import sanitize_output_path
from cchistory.records import ConversationTurn

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^\w.-]+")


def build_export_filename(summary: ConversationSummary, now: datetime | None = None) -> str:
    """claude_<project>_<YYYY-MM-DD_HHMMSS>.md"""
    stamp = (now or datetime.now()).strftime("%Y-%m-%d_%H%M%S")
    project = _UNSAFE_FILENAME_CHARS.sub("_", summary.project).strip("_") or "conversation"
    return f"claude_{project}_{stamp}.md"


def _default_file_mode() -> int:
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def write_document(path: Path, document: str) -> None:
    """Atomically write document to path, with the permissions a plain open() would give."""
    fd, temp_path_str = tempfile.mkstemp(prefix=f".{path.name}-", suffix=".tmp", dir=str(path.parent))
    temp_path = Path(temp_path_str)

    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(document)
        os.chmod(temp_path, _default_file_mode())
        temp_path.replace(path)
    except Exception:
        temp_path.unlink(missing_ok=True)
        raise


def export_conversation(turns: Sequence[ConversationTurn], filename: str, config: Config) -> Path:
    """
    Render turns and write them to config.export_dir/filename.

    Args:
        turns: Parsed conversation records, in file order
        filename: Bare file name for the export
        config: Settings (export_dir, allowed_base_path, max_result_length)

    Returns:
        Path: The written file

    Raises:
        ExportPathError: If the export directory is outside the allowed base
        OSError: If the directory can't be created or the file can't be written
    """
    export_dir = sanitize_output_path(config.export_dir, config.allowed_base_path)
    export_dir.mkdir(parents=True, exist_ok=True)

    document = assemble_document(turns, config.max_result_length)

    filepath = export_dir / Path(filename).name
    write_document(filepath, document)
    logger.info("Exported %d records to %s", len(turns), filepath)
    return filepath
