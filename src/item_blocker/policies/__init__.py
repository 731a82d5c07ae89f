"""Policy data model and evaluation for item-blocker.

Exports the block-list store, its lookup index, the post-wipe window and
the evaluation engine used by the plugin and CLI layers.
"""
from __future__ import annotations

from item_blocker.policies.engine import EvaluationEngine, Verdict
from item_blocker.policies.index import AliasIndex
from item_blocker.policies.store import (
    BlockKind,
    MutationOutcome,
    PolicyStore,
    ResourceClass,
    parse_category,
    parse_kind,
)
from item_blocker.policies.window import TemporalWindow

__all__ = [
    "AliasIndex",
    "BlockKind",
    "EvaluationEngine",
    "MutationOutcome",
    "PolicyStore",
    "ResourceClass",
    "TemporalWindow",
    "Verdict",
    "parse_category",
    "parse_kind",
]
