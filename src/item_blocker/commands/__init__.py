"""Administrative command handling for item-blocker."""
from __future__ import annotations

from item_blocker.commands.handler import (
    MAX_NAME_LENGTH,
    CommandHandler,
    CommandOutcome,
    CommandReply,
    format_list,
)

__all__ = [
    "MAX_NAME_LENGTH",
    "CommandHandler",
    "CommandOutcome",
    "CommandReply",
    "format_list",
]
