"""Case-insensitive lookup sets derived from a PolicyStore.

The index is a disposable cache.  It must be rebuilt after every store
mutation or reload; the owning :class:`~item_blocker.plugin.blocker.ItemBlocker`
does this under the same lock as the mutation.
"""
from __future__ import annotations

from item_blocker.policies.store import FIELD_NAMES, BlockKind, PolicyStore, ResourceClass


class AliasIndex:
    """Frozen, case-folded name sets per ``(ResourceClass, BlockKind)``."""

    def __init__(self) -> None:
        self._sets: dict[tuple[ResourceClass, BlockKind], frozenset[str]] = {
            key: frozenset() for key in FIELD_NAMES
        }

    @classmethod
    def build(cls, store: PolicyStore) -> "AliasIndex":
        """Return a new index populated from ``store``."""
        index = cls()
        index.rebuild(store)
        return index

    def rebuild(self, store: PolicyStore) -> None:
        """Replace every set in one pass over ``store``."""
        self._sets = {
            key: frozenset(alias.casefold() for alias in names)
            for key, names in store.items()
        }

    def clear(self) -> None:
        """Drop all entries (used on unload)."""
        self._sets = {key: frozenset() for key in FIELD_NAMES}

    def contains(self, resource_class: ResourceClass, kind: BlockKind, alias: str) -> bool:
        """O(1) case-insensitive membership test."""
        return alias.casefold() in self._sets[(resource_class, kind)]

    def size(self, resource_class: ResourceClass, kind: BlockKind) -> int:
        return len(self._sets[(resource_class, kind)])

    def is_active(self, resource_class: ResourceClass) -> bool:
        """``True`` when either list of ``resource_class`` has any entry."""
        return bool(
            self._sets[(resource_class, BlockKind.PERMANENT)]
            or self._sets[(resource_class, BlockKind.TIMED)]
        )
