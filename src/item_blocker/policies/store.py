"""Ordered block lists keyed by resource class and block kind.

The PolicyStore is the single source of truth for what is blocked.  It owns
six ordered lists of names (three resource classes times two block kinds).
Lookups on the hot path never touch the store directly; they go through an
:class:`~item_blocker.policies.index.AliasIndex` rebuilt from it.

Example
-------
>>> store = PolicyStore()
>>> store.add(ResourceClass.ITEM, BlockKind.PERMANENT, "rifle.ak")
<MutationOutcome.ADDED: 'added'>
>>> store.add(ResourceClass.ITEM, BlockKind.PERMANENT, "RIFLE.AK")
<MutationOutcome.ALREADY_PRESENT: 'already_present'>
>>> store.resolve(ResourceClass.ITEM, BlockKind.PERMANENT)
['rifle.ak']
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from enum import Enum

logger = logging.getLogger(__name__)


class ResourceClass(str, Enum):
    """Category a blockable resource belongs to."""

    ITEM = "item"
    CLOTHING = "clothing"
    AMMO = "ammo"


class BlockKind(str, Enum):
    """Whether a block never expires or only applies inside the wipe window."""

    PERMANENT = "permanent"
    TIMED = "timed"


class MutationOutcome(str, Enum):
    """Typed result of a store mutation."""

    ADDED = "added"
    ALREADY_PRESENT = "already_present"
    REMOVED = "removed"
    NOT_FOUND = "not_found"
    INVALID_SELECTOR = "invalid_selector"

    @property
    def changed(self) -> bool:
        """``True`` when the outcome altered the store."""
        return self in (MutationOutcome.ADDED, MutationOutcome.REMOVED)


# Persisted field name for each (class, kind) collection.
FIELD_NAMES: dict[tuple[ResourceClass, BlockKind], str] = {
    (ResourceClass.ITEM, BlockKind.PERMANENT): "Permanent Blocked Items",
    (ResourceClass.CLOTHING, BlockKind.PERMANENT): "Permanent Blocked Clothes",
    (ResourceClass.AMMO, BlockKind.PERMANENT): "Permanent Blocked Ammo",
    (ResourceClass.ITEM, BlockKind.TIMED): "Timed Blocked Items",
    (ResourceClass.CLOTHING, BlockKind.TIMED): "Timed Blocked Clothes",
    (ResourceClass.AMMO, BlockKind.TIMED): "Timed Blocked Ammo",
}

CATEGORY_SYNONYMS: dict[str, ResourceClass] = {
    "item": ResourceClass.ITEM,
    "items": ResourceClass.ITEM,
    "cloth": ResourceClass.CLOTHING,
    "clothes": ResourceClass.CLOTHING,
    "clothing": ResourceClass.CLOTHING,
    "ammo": ResourceClass.AMMO,
}

KIND_TOKENS: dict[str, BlockKind] = {
    "permanent": BlockKind.PERMANENT,
    "timed": BlockKind.TIMED,
}


def parse_category(token: str | None) -> ResourceClass | None:
    """Map a user-supplied category word to a :class:`ResourceClass`."""
    if not token:
        return None
    return CATEGORY_SYNONYMS.get(token.strip().lower())


def parse_kind(token: str | None) -> BlockKind | None:
    """Map ``permanent`` / ``timed`` (any case) to a :class:`BlockKind`."""
    if not token:
        return None
    return KIND_TOKENS.get(token.strip().lower())


def coerce_alias_list(value: object, field_name: str = "") -> list[str]:
    """Coerce one persisted list field into a clean list of strings.

    ``None`` and missing values become an empty list.  Non-list values and
    non-string members are dropped with a warning rather than failing the
    whole load.
    """
    if value is None:
        return []
    if isinstance(value, str) or not isinstance(value, (list, tuple)):
        logger.warning("Block list %r is not a list; treating it as empty.", field_name)
        return []
    cleaned: list[str] = []
    for entry in value:
        if isinstance(entry, str):
            cleaned.append(entry)
        elif entry is None:
            continue
        else:
            logger.warning("Dropping non-string entry %r from %r.", entry, field_name)
    return cleaned


class PolicyStore:
    """Six ordered, case-insensitively unique lists of blocked names.

    Parameters
    ----------
    lists:
        Optional initial contents keyed by ``(ResourceClass, BlockKind)``.
        Missing keys start empty.
    """

    def __init__(
        self,
        lists: Mapping[tuple[ResourceClass, BlockKind], list[str]] | None = None,
    ) -> None:
        self._lists: dict[tuple[ResourceClass, BlockKind], list[str]] = {
            key: [] for key in FIELD_NAMES
        }
        if lists:
            for key, values in lists.items():
                self._lists[key] = coerce_alias_list(values, FIELD_NAMES.get(key, ""))

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add(self, resource_class: ResourceClass, kind: BlockKind, alias: str) -> MutationOutcome:
        """Append ``alias`` unless a case-insensitive match is already present."""
        target = self._lists[(resource_class, kind)]
        folded = alias.casefold()
        if any(existing.casefold() == folded for existing in target):
            return MutationOutcome.ALREADY_PRESENT
        target.append(alias)
        return MutationOutcome.ADDED

    def remove(self, resource_class: ResourceClass, kind: BlockKind, alias: str) -> MutationOutcome:
        """Remove every case-insensitive match of ``alias``."""
        target = self._lists[(resource_class, kind)]
        folded = alias.casefold()
        kept = [existing for existing in target if existing.casefold() != folded]
        if len(kept) == len(target):
            return MutationOutcome.NOT_FOUND
        target[:] = kept
        return MutationOutcome.REMOVED

    def modify(
        self,
        action: str,
        kind_token: str,
        category_token: str,
        alias: str,
    ) -> MutationOutcome:
        """Add or remove by textual selectors as typed by an operator.

        Unknown ``action``, ``kind_token`` or ``category_token`` values yield
        :attr:`MutationOutcome.INVALID_SELECTOR` and leave the store untouched.
        """
        kind = parse_kind(kind_token)
        resource_class = parse_category(category_token)
        if kind is None or resource_class is None:
            return MutationOutcome.INVALID_SELECTOR
        match action.lower():
            case "add":
                return self.add(resource_class, kind, alias)
            case "remove":
                return self.remove(resource_class, kind, alias)
            case _:
                return MutationOutcome.INVALID_SELECTOR

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def resolve(self, resource_class: ResourceClass, kind: BlockKind) -> list[str]:
        """Return a copy of one list in insertion order."""
        return list(self._lists[(resource_class, kind)])

    def items(self) -> list[tuple[tuple[ResourceClass, BlockKind], list[str]]]:
        """Return every ``((class, kind), names)`` pair."""
        return [(key, list(values)) for key, values in self._lists.items()]

    def __len__(self) -> int:
        return sum(len(values) for values in self._lists.values())

    # ------------------------------------------------------------------
    # Persistence bridge
    # ------------------------------------------------------------------

    def load_from_persisted(self, raw: Mapping[str, object] | None) -> None:
        """Replace all lists from a persisted record keyed by field name.

        Missing or ``None`` fields become empty lists.  A malformed field is
        coerced on its own; the remaining fields still load.
        """
        raw = raw or {}
        for key, field_name in FIELD_NAMES.items():
            self._lists[key] = coerce_alias_list(raw.get(field_name), field_name)
        logger.debug("Policy store loaded with %d entries", len(self))

    def to_persisted(self) -> dict[str, list[str]]:
        """Return the lists keyed by their persisted field names."""
        return {field_name: list(self._lists[key]) for key, field_name in FIELD_NAMES.items()}
