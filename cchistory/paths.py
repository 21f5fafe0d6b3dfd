"""
Path resolution for cchistory.

Conversation logs are read from Claude Code's projects directory and exports
are only ever written inside an allowed base directory (the user's home
directory unless configured otherwise).

Environment variables:
- $CLAUDE_CONFIG_DIR: Claude Code config root (default: ~/.claude)
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


class ExportPathError(ValueError):
    """Raised when an export destination falls outside the allowed base."""


def get_claude_dir() -> Path:
    """Get Claude Code's config root ($CLAUDE_CONFIG_DIR or ~/.claude)."""
    configured = os.environ.get("CLAUDE_CONFIG_DIR")
    if configured:
        return Path(configured).expanduser()
    return Path.home() / ".claude"


def get_claude_projects_dir() -> Path:
    """Get the directory holding one sub-directory of JSONL logs per project."""
    return get_claude_dir() / "projects"


def get_config_dir() -> Path:
    return Path.home() / ".config" / "cchistory"


def get_config_path() -> Path:
    return get_config_dir() / "config.yaml"


def expand_home(path: str | Path) -> Path:
    return Path(path).expanduser()


def sanitize_output_path(config_path: str | Path, allowed_base: str | Path | None = None) -> Path:
    """
    Resolve an export directory and make sure it stays inside allowed_base.

    Symlinks are resolved before the check, so a link pointing outside the
    base is rejected too. The directory does not need to exist yet.

    Args:
        config_path: Directory to resolve (may start with ~)
        allowed_base: Directory the result must live under (default: home)

    Returns:
        Path: Absolute, symlink-free path

    Raises:
        ExportPathError: If the path escapes the allowed base
    """
    resolved = expand_home(config_path).resolve()

    base_display = str(allowed_base) if allowed_base else "~"
    base = expand_home(allowed_base).resolve() if allowed_base else Path.home().resolve()

    if not resolved.is_relative_to(base):
        # Message must not echo the rejected path
        logger.debug("Rejected export path outside %s", base)
        raise ExportPathError(f"Export directory must be within {base_display}/")

    return resolved
