"""User-facing message catalogue and block notification rendering.

The default English strings are registered here; deployments can override
any key per language code.  Keys are stable across versions.

Example
-------
>>> catalog = MessageCatalog({"es": {"ItemBlocked": "No puedes usar este objeto."}})
>>> catalog.get("ItemBlocked", language="es")
'No puedes usar este objeto.'
"""
from __future__ import annotations

from collections.abc import Mapping
from datetime import timedelta

from item_blocker.plugin.access import AccessKind
from item_blocker.policies.engine import Verdict

DEFAULT_MESSAGES: dict[str, str] = {
    "ItemBlocked": "You cannot use this item.",
    "ClothBlocked": "You cannot wear this clothing item.",
    "AmmoBlocked": "You cannot use this ammunition.",
    "BuildBlocked": "You cannot deploy this item.",
    "TimedSuffix": "\n{0}d {1:02d}:{2:02d}:{3:02d} remaining until unblock.",
    "PermanentSuffix": "\nThis item is permanently blocked until removed by an admin.",
    "NotAllowed": "You do not have permission to use this command.",
    "InvalidArgs": "Invalid syntax. Use /itemblocker help for details.",
    "NameTooLong": "Item name is too long (max {0} characters).",
    "Added": "Added '{0}' to the {1} {2} list.",
    "AlreadyPresent": "'{0}' is already in the {1} {2} list.",
    "Removed": "Removed '{0}' from the {1} {2} list.",
    "NotFound": "'{0}' was not found in the {1} {2} list.",
    "ListHeader": (
        "Permanent Items: {0}\nPermanent Clothes: {1}\nPermanent Ammo: {2}\n"
        "Timed Items: {3}\nTimed Clothes: {4}\nTimed Ammo: {5}"
    ),
    "Reloaded": "Item blocker configuration reloaded.",
    "SaveFailed": "Error saving configuration: {0}",
    "LogReadFailed": "Error reading log: {0}",
    "Usage": (
        "Usage:\n /itemblocker list\n"
        " /itemblocker add <permanent|timed> <item|cloth|ammo> <name>\n"
        " /itemblocker remove <permanent|timed> <item|cloth|ammo> <name>\n"
        " /itemblocker reload\n /itemblocker loglist"
    ),
}

_BLOCK_KEYS: dict[AccessKind, str] = {
    AccessKind.EQUIP: "ItemBlocked",
    AccessKind.WEAR: "ClothBlocked",
    AccessKind.RELOAD: "AmmoBlocked",
    AccessKind.DEPLOY: "BuildBlocked",
}


class MessageCatalog:
    """Looks up message templates with optional per-language overrides.

    Parameters
    ----------
    overrides:
        ``{language_code: {key: template}}``.  Missing keys fall back to
        :data:`DEFAULT_MESSAGES`.
    """

    def __init__(self, overrides: Mapping[str, Mapping[str, str]] | None = None) -> None:
        self._overrides: dict[str, dict[str, str]] = {
            lang: dict(messages) for lang, messages in (overrides or {}).items()
        }

    def get(self, key: str, language: str | None = None) -> str:
        if language and key in self._overrides.get(language, {}):
            return self._overrides[language][key]
        return DEFAULT_MESSAGES.get(key, key)

    def format(self, key: str, *args: object, language: str | None = None) -> str:
        return self.get(key, language).format(*args)


def split_remaining(remaining: timedelta) -> tuple[int, int, int, int]:
    """Break a non-negative timedelta into days, hours, minutes, seconds."""
    if remaining < timedelta(0):
        remaining = timedelta(0)
    hours, rest = divmod(remaining.seconds, 3600)
    minutes, seconds = divmod(rest, 60)
    return remaining.days, hours, minutes, seconds


def render_block_message(
    catalog: MessageCatalog,
    kind: AccessKind,
    verdict: Verdict,
    remaining: timedelta | None,
    prefix: str,
    color: str,
    language: str | None = None,
) -> str:
    """Render the chat notification for a denied attempt.

    ``prefix`` and ``color`` are expected to be validated at config load.
    """
    message = catalog.get(_BLOCK_KEYS[kind], language)
    if verdict is Verdict.PERMANENT_DENY:
        message += catalog.get("PermanentSuffix", language)
    else:
        message += catalog.format("TimedSuffix", *split_remaining(remaining or timedelta(0)), language=language)
    return f"<color={color}>{prefix}</color> {message}"
