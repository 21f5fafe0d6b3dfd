"""
Metadata scrubbing for raw conversation text.

Claude Code injects out-of-band annotations into message text: hook output,
system reminders and slash-command bookkeeping tags. Hook and reminder tags
are dropped with their content; command tags are rewritten as callouts so the
exported transcript still shows what the user ran.
"""

from __future__ import annotations

import re

# Tags removed together with everything they enclose
STRIPPED_TAGS = ("user-prompt-submit-hook", "system-reminder")

BLOCK_PREVIEW_LINES = 5
BLOCK_MAX_LINES = 10

_SELF_CLOSING_PATTERNS = [re.compile(rf"<{tag}\b[^>]*/>") for tag in STRIPPED_TAGS]
_PAIRED_PATTERNS = [
    re.compile(rf"<{tag}\b[^>]*>.*?</{tag}>", re.DOTALL) for tag in STRIPPED_TAGS
]

_COMMAND_NAME = re.compile(r"<command-name>([^<]+)</command-name>")
_COMMAND_MESSAGE = re.compile(r"<command-message>([^<]+)</command-message>")
_COMMAND_ARGS = re.compile(r"<command-args>([^<]*)</command-args>")
_COMMAND_STDERR = re.compile(
    r"<(local-command-stderr|command-stderr)>(.*?)</\1>", re.DOTALL
)
_COMMAND_STDOUT = re.compile(
    r"<(local-command-stdout|command-stdout)>(.*?)</\1>", re.DOTALL
)

_EXCESS_NEWLINES = re.compile(r"\n(?:[ \t]*\n){2,}")


def strip_annotation_tags(text: str) -> str:
    """Remove hook and system-reminder tags, including their content."""
    # Self-closing first, otherwise the paired pattern treats "<tag/>" as an
    # opening tag and swallows text up to the next closing tag.
    for pattern in _SELF_CLOSING_PATTERNS:
        text = pattern.sub("", text)
    for pattern in _PAIRED_PATTERNS:
        text = pattern.sub("", text)
    return text


def _format_output_block(label: str, body: str) -> str:
    body = body.strip()
    if not body:
        shown = "(empty)"
    else:
        lines = body.split("\n")
        if len(lines) > BLOCK_MAX_LINES:
            preview = "\n".join(lines[:BLOCK_PREVIEW_LINES])
            shown = f"{preview}\n...\n({len(lines) - BLOCK_PREVIEW_LINES} more lines)"
        else:
            shown = body
    return f"\n> {label}:\n```\n{shown}\n```\n"


def format_command_tags(text: str) -> str:
    """Rewrite slash-command tags into Markdown callouts."""
    text = _COMMAND_NAME.sub(lambda m: f"\n> 💡 **Command**: `{m.group(1)}`\n", text)
    text = _COMMAND_MESSAGE.sub(lambda m: f"> ℹ️ **Status**: {m.group(1)}\n", text)
    text = _COMMAND_ARGS.sub(
        lambda m: f"> 📝 **Arguments**: `{m.group(1)}`\n" if m.group(1).strip() else "",
        text,
    )
    text = _COMMAND_STDERR.sub(
        lambda m: _format_output_block("⚠️ **Error Output**", m.group(2)), text
    )
    text = _COMMAND_STDOUT.sub(lambda m: _format_output_block("📤 **Output**", m.group(2)), text)
    return text


def collapse_blank_lines(text: str) -> str:
    """Squeeze runs of blank lines down to one and trim the ends."""
    return _EXCESS_NEWLINES.sub("\n\n", text).strip()


def scrub_metadata(raw: str) -> str:
    """Strip annotation tags, format command tags and tidy whitespace."""
    if not raw:
        return ""
    text = strip_annotation_tags(raw)
    text = format_command_tags(text)
    return collapse_blank_lines(text)


def clean_xml_tags(text: str) -> str:
    """Flatten text to a single line for previews.

    Command tags are removed with their content, any other tag is unwrapped,
    and whitespace is collapsed.
    """
    text = strip_annotation_tags(text)
    text = re.sub(r"<command-[^>]*>.*?</command-[^>]*>", "", text, flags=re.DOTALL)
    text = re.sub(r"<command-[^>]*/>", "", text)
    text = re.sub(r"<[^>]+>", "", text)
    return re.sub(r"\s+", " ", text).strip()
