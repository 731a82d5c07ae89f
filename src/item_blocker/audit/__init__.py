"""Audit trail package for item-blocker.

Provides the append-only pipe-delimited logger, its bounded tail reader,
and the sanitisers applied to every externally sourced string.
"""
from __future__ import annotations

from item_blocker.audit.logger import AuditLogger, tail_lines
from item_blocker.audit.sanitizer import sanitize, strip_rich_text

__all__ = [
    "AuditLogger",
    "sanitize",
    "strip_rich_text",
    "tail_lines",
]
