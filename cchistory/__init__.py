"""Export Claude Code conversation history to Markdown."""

from cchistory.document import assemble_document
from cchistory.records import ConversationTurn

__all__ = ["ConversationTurn", "assemble_document"]
__version__ = "1.0.0"
