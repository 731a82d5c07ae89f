"""Block evaluation for a single access attempt.

The engine combines the :class:`AliasIndex` with the :class:`TemporalWindow`
to classify an attempt as a permanent deny, a timed deny, or allow.  It sits
on the host's access-attempt hot path, so :meth:`EvaluationEngine.evaluate`
does nothing beyond a handful of set lookups.

Example
-------
>>> from item_blocker.policies.store import PolicyStore
>>> store = PolicyStore()
>>> store.add(ResourceClass.ITEM, BlockKind.PERMANENT, "Rocket Launcher")
<MutationOutcome.ADDED: 'added'>
>>> engine = EvaluationEngine(AliasIndex.build(store), TemporalWindow(0))
>>> engine.evaluate("rocket launcher", "rocket.launcher", ResourceClass.ITEM)
<Verdict.PERMANENT_DENY: 'permanent_deny'>
"""
from __future__ import annotations

from enum import Enum

from item_blocker.policies.index import AliasIndex
from item_blocker.policies.store import BlockKind, ResourceClass
from item_blocker.policies.window import TemporalWindow


class Verdict(str, Enum):
    """Outcome of evaluating one access attempt."""

    PERMANENT_DENY = "permanent_deny"
    TIMED_DENY = "timed_deny"
    ALLOW = "allow"

    @property
    def denied(self) -> bool:
        return self is not Verdict.ALLOW


class EvaluationEngine:
    """Classifies access attempts against the current index and window.

    Parameters
    ----------
    index:
        Alias index; the engine reads it and never mutates it.
    window:
        Post-wipe timed window.
    """

    def __init__(self, index: AliasIndex, window: TemporalWindow) -> None:
        self._index = index
        self._window = window

    @property
    def index(self) -> AliasIndex:
        return self._index

    @property
    def window(self) -> TemporalWindow:
        return self._window

    def evaluate(
        self,
        display_alias: str | None,
        short_alias: str | None,
        resource_class: ResourceClass,
    ) -> Verdict:
        """Return the verdict for a resource known by two aliases.

        ``None`` aliases (custom items without a display name) are treated as
        empty strings.  Permanent blocks win over timed blocks.
        """
        display = display_alias or ""
        short = short_alias or ""
        index = self._index

        if index.contains(resource_class, BlockKind.PERMANENT, display) or index.contains(
            resource_class, BlockKind.PERMANENT, short
        ):
            return Verdict.PERMANENT_DENY

        if self._window.is_active() and (
            index.contains(resource_class, BlockKind.TIMED, display)
            or index.contains(resource_class, BlockKind.TIMED, short)
        ):
            return Verdict.TIMED_DENY

        return Verdict.ALLOW
