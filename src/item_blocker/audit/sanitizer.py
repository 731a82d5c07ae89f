"""Log-injection and rich-text sanitisers.

Every externally sourced string (player names, item names) passes through
:func:`sanitize` before it is written to the audit log.  Without it a player
named ``"\\n2099-01-01 00:00:00 | ADMIN fake_entry"`` could forge a line.
"""
from __future__ import annotations

import re

FIELD_DELIMITER = "|"

# ASCII control range, DEL, and the field delimiter.
_SANITIZE_PATTERN = re.compile(r"[\x00-\x1f\x7f|]")
_RICH_TEXT_PATTERN = re.compile(r"<[^>]+>")


def sanitize(text: str | None) -> str:
    """Replace control characters and ``|`` with a single space each."""
    if not text:
        return ""
    return _SANITIZE_PATTERN.sub(" ", text)


def strip_rich_text(text: str | None) -> str:
    """Remove ``<...>`` markup tags such as ``<color=#fff>`` or ``</b>``."""
    if not text:
        return ""
    return _RICH_TEXT_PATTERN.sub("", text)
