"""Plugin core package for item-blocker.

Exports the ItemBlocker entry point, host-facing access types, the
configuration loader, and the collaborator interfaces.
"""
from __future__ import annotations

from item_blocker.plugin.access import AccessAttempt, AccessDecision, AccessKind, Subject
from item_blocker.plugin.authorization import AuthorizationProvider, Caller, StaticAuthorization
from item_blocker.plugin.blocker import ItemBlocker
from item_blocker.plugin.config_loader import AuditSettings, BlockerConfig, ConfigLoader
from item_blocker.plugin.exemptions import (
    CallableExemptionProvider,
    DuelExemption,
    DuelsManagerExemption,
    ExemptionChain,
    ExemptionProvider,
)
from item_blocker.plugin.messages import DEFAULT_MESSAGES, MessageCatalog, render_block_message

__all__ = [
    "DEFAULT_MESSAGES",
    "AccessAttempt",
    "AccessDecision",
    "AccessKind",
    "AuditSettings",
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
    "render_block_message",
]
