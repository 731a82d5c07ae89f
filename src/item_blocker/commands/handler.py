"""Administrative command dispatcher.

Handles ``list``, ``add``, ``remove``, ``reload``, ``loglist`` and
``help``.  Each request reaches exactly one terminal
:class:`CommandOutcome`; invalid or unauthorized input produces a reply,
never an exception.

Argument format for edits::

    add|remove <permanent|timed> <item|items|cloth|clothes|clothing|ammo> <name...>

The name may be several words; they are joined with single spaces and
trimmed.

Example
-------
>>> handler = CommandHandler(blocker)
>>> reply = handler.execute(None, ["add", "permanent", "item", "rifle.ak"])
>>> reply.outcome
<CommandOutcome.ADDED: 'added'>
"""
from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum

from item_blocker.audit.logger import DEFAULT_TAIL_BYTES, DEFAULT_TAIL_LINES
from item_blocker.audit.sanitizer import strip_rich_text
from item_blocker.errors import AuditLogUnavailable, ConfigNotWritable
from item_blocker.plugin.authorization import Caller
from item_blocker.plugin.blocker import ItemBlocker
from item_blocker.policies.store import (
    BlockKind,
    MutationOutcome,
    ResourceClass,
    parse_category,
    parse_kind,
)

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 256
EMPTY_PLACEHOLDER = "(none)"

_LIST_ORDER: tuple[tuple[ResourceClass, BlockKind], ...] = (
    (ResourceClass.ITEM, BlockKind.PERMANENT),
    (ResourceClass.CLOTHING, BlockKind.PERMANENT),
    (ResourceClass.AMMO, BlockKind.PERMANENT),
    (ResourceClass.ITEM, BlockKind.TIMED),
    (ResourceClass.CLOTHING, BlockKind.TIMED),
    (ResourceClass.AMMO, BlockKind.TIMED),
)


class CommandOutcome(str, Enum):
    """Terminal outcome of one command request."""

    USAGE = "usage"
    NOT_ALLOWED = "not_allowed"
    INVALID_ARGS = "invalid_args"
    NAME_TOO_LONG = "name_too_long"
    LISTED = "listed"
    ADDED = "added"
    ALREADY_PRESENT = "already_present"
    REMOVED = "removed"
    NOT_FOUND = "not_found"
    RELOADED = "reloaded"
    LOG_TAIL = "log_tail"
    ERROR = "error"


@dataclass
class CommandReply:
    """What the transport should show the caller."""

    outcome: CommandOutcome
    message: str
    lines: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.outcome not in (
            CommandOutcome.NOT_ALLOWED,
            CommandOutcome.INVALID_ARGS,
            CommandOutcome.NAME_TOO_LONG,
            CommandOutcome.ERROR,
        )


def format_list(names: Sequence[str]) -> str:
    """Join names for display with markup stripped; ``(none)`` when empty."""
    if not names:
        return EMPTY_PLACEHOLDER
    return ", ".join(strip_rich_text(name) for name in names)


class CommandHandler:
    """Routes administrative commands into an :class:`ItemBlocker`.

    Parameters
    ----------
    blocker:
        The blocker whose lists are edited.
    max_name_length:
        Longest accepted name for ``add`` / ``remove``.
    """

    def __init__(self, blocker: ItemBlocker, max_name_length: int = MAX_NAME_LENGTH) -> None:
        self._blocker = blocker
        self._max_name_length = max_name_length

    def execute(self, caller: Caller | None, args: Sequence[str] | None) -> CommandReply:
        """Run one command for ``caller`` (``None`` is the server console)."""
        language = caller.language if caller is not None else None
        msg = self._blocker.catalog

        if not self._blocker.is_authorized(caller):
            return CommandReply(CommandOutcome.NOT_ALLOWED, msg.get("NotAllowed", language))

        if not args:
            return self._usage(language)

        match args[0].lower():
            case "help" | "usage":
                return self._usage(language)
            case "list":
                return self._list(language)
            case "add" | "remove":
                return self._modify(caller, list(args), language)
            case "reload":
                self._blocker.reload()
                return CommandReply(CommandOutcome.RELOADED, msg.get("Reloaded", language))
            case "loglist":
                return self._log_list(language)
            case _:
                return self._usage(language)

    # ------------------------------------------------------------------
    # Sub-commands
    # ------------------------------------------------------------------

    def _usage(self, language: str | None) -> CommandReply:
        return CommandReply(CommandOutcome.USAGE, self._blocker.catalog.get("Usage", language))

    def _list(self, language: str | None) -> CommandReply:
        store = self._blocker.store
        rendered = [format_list(store.resolve(rc, kind)) for rc, kind in _LIST_ORDER]
        message = self._blocker.catalog.format("ListHeader", *rendered, language=language)
        return CommandReply(CommandOutcome.LISTED, message, lines=message.splitlines())

    def _modify(self, caller: Caller | None, args: list[str], language: str | None) -> CommandReply:
        msg = self._blocker.catalog
        if len(args) < 4:
            return CommandReply(CommandOutcome.INVALID_ARGS, msg.get("InvalidArgs", language))

        add = args[0].lower() == "add"
        type_token = args[1].lower()
        category_token = args[2].lower()
        name = " ".join(args[3:]).strip()

        kind = parse_kind(type_token)
        resource_class = parse_category(category_token)
        if kind is None or resource_class is None or not name:
            return CommandReply(CommandOutcome.INVALID_ARGS, msg.get("InvalidArgs", language))
        if len(name) > self._max_name_length:
            return CommandReply(
                CommandOutcome.NAME_TOO_LONG,
                msg.format("NameTooLong", self._max_name_length, language=language),
            )

        outcome = self._blocker.modify(add, resource_class, kind, name)
        display = strip_rich_text(name)
        text_args = (display, type_token, category_token)

        if outcome is MutationOutcome.NOT_FOUND:
            return CommandReply(CommandOutcome.NOT_FOUND, msg.format("NotFound", *text_args, language=language))
        if outcome is MutationOutcome.ALREADY_PRESENT:
            return CommandReply(
                CommandOutcome.ALREADY_PRESENT,
                msg.format("AlreadyPresent", *text_args, language=language),
            )

        result = CommandOutcome.ADDED if add else CommandOutcome.REMOVED
        reply = CommandReply(result, msg.format("Added" if add else "Removed", *text_args, language=language))

        try:
            self._blocker.save()
        except (OSError, ConfigNotWritable) as exc:
            logger.warning("Could not persist block lists: %s", exc)
            reply = CommandReply(CommandOutcome.ERROR, msg.format("SaveFailed", exc, language=language))

        try:
            self._blocker.audit.log_edit(
                caller.name if caller is not None else None,
                caller.id if caller is not None else None,
                add,
                name,
                type_token,
                category_token,
            )
        except OSError as exc:
            logger.warning("Could not write audit entry: %s", exc)
        return reply

    def _log_list(self, language: str | None) -> CommandReply:
        audit_settings = self._blocker.config.audit
        try:
            lines = self._blocker.audit.read_tail(
                max_lines=audit_settings.tail_max_lines or DEFAULT_TAIL_LINES,
                max_bytes=audit_settings.tail_max_bytes or DEFAULT_TAIL_BYTES,
            )
        except AuditLogUnavailable as exc:
            return CommandReply(CommandOutcome.ERROR, str(exc))
        except OSError as exc:
            return CommandReply(
                CommandOutcome.ERROR, self._blocker.catalog.format("LogReadFailed", exc, language=language)
            )
        return CommandReply(CommandOutcome.LOG_TAIL, "\n".join(lines), lines=lines)
