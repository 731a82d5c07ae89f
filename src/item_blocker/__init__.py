"""item-blocker: Permanent and post-wipe timed blocking of game resources.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
>>> import item_blocker as ib
>>> ib.__version__
'4.2.0'
>>> blocker = ib.ItemBlocker()
>>> blocker.initialize()
>>> blocker.modify(True, ib.ResourceClass.ITEM, ib.BlockKind.PERMANENT, "rifle.ak")
<MutationOutcome.ADDED: 'added'>
>>> blocker.engine.evaluate("Assault Rifle", "rifle.ak", ib.ResourceClass.ITEM)
<Verdict.PERMANENT_DENY: 'permanent_deny'>
"""
from __future__ import annotations

__version__: str = "4.2.0"

# ---------------------------------------------------------------------------
# Policies
# ---------------------------------------------------------------------------
from item_blocker.policies.engine import EvaluationEngine, Verdict
from item_blocker.policies.index import AliasIndex
from item_blocker.policies.store import BlockKind, MutationOutcome, PolicyStore, ResourceClass
from item_blocker.policies.window import TemporalWindow

# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------
from item_blocker.dispatch.gate import Channel, DispatchGate, EventRegistrar, required_channels

# ---------------------------------------------------------------------------
# Audit
# ---------------------------------------------------------------------------
from item_blocker.audit.logger import AuditLogger
from item_blocker.audit.sanitizer import sanitize, strip_rich_text

# ---------------------------------------------------------------------------
# Plugin
# ---------------------------------------------------------------------------
from item_blocker.plugin.access import AccessAttempt, AccessDecision, AccessKind, Subject
from item_blocker.plugin.authorization import AuthorizationProvider, Caller, StaticAuthorization
from item_blocker.plugin.blocker import ItemBlocker
from item_blocker.plugin.config_loader import BlockerConfig, ConfigLoader
from item_blocker.plugin.exemptions import (
    CallableExemptionProvider,
    DuelExemption,
    DuelsManagerExemption,
    ExemptionChain,
    ExemptionProvider,
)
from item_blocker.plugin.messages import MessageCatalog

# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------
from item_blocker.commands.handler import CommandHandler, CommandOutcome, CommandReply

# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------
from item_blocker.errors import AuditLogUnavailable, CollaboratorError, ConfigNotWritable, ItemBlockerError

__all__ = [
    "__version__",
    # Policies
    "AliasIndex",
    "BlockKind",
    "EvaluationEngine",
    "MutationOutcome",
    "PolicyStore",
    "ResourceClass",
    "TemporalWindow",
    "Verdict",
    # Dispatch
    "Channel",
    "DispatchGate",
    "EventRegistrar",
    "required_channels",
    # Audit
    "AuditLogger",
    "sanitize",
    "strip_rich_text",
    # Plugin
    "AccessAttempt",
    "AccessDecision",
    "AccessKind",
    "AuthorizationProvider",
    "BlockerConfig",
    "CallableExemptionProvider",
    "Caller",
    "ConfigLoader",
    "DuelExemption",
    "DuelsManagerExemption",
    "ExemptionChain",
    "ExemptionProvider",
    "ItemBlocker",
    "MessageCatalog",
    "StaticAuthorization",
    "Subject",
    # Commands
    "CommandHandler",
    "CommandOutcome",
    "CommandReply",
    # Errors
    "AuditLogUnavailable",
    "CollaboratorError",
    "ConfigNotWritable",
    "ItemBlockerError",
]
