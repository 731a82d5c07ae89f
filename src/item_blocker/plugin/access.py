"""Access-attempt types exchanged with the host runtime."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum

from item_blocker.policies.engine import Verdict
from item_blocker.policies.store import ResourceClass

# Human player ids are 64-bit Steam ids at or above this value.
HUMAN_ID_FLOOR = 76560000000000000


class AccessKind(str, Enum):
    """What the subject is trying to do with the resource."""

    EQUIP = "equip"
    WEAR = "wear"
    RELOAD = "reload"
    DEPLOY = "deploy"

    @property
    def resource_class(self) -> ResourceClass:
        return _RESOURCE_CLASS[self]

    @property
    def log_category(self) -> str:
        """Word used for this kind in audit lines."""
        return _LOG_CATEGORY[self]


_RESOURCE_CLASS: dict[AccessKind, ResourceClass] = {
    AccessKind.EQUIP: ResourceClass.ITEM,
    AccessKind.DEPLOY: ResourceClass.ITEM,
    AccessKind.WEAR: ResourceClass.CLOTHING,
    AccessKind.RELOAD: ResourceClass.AMMO,
}

_LOG_CATEGORY: dict[AccessKind, str] = {
    AccessKind.EQUIP: "item",
    AccessKind.DEPLOY: "deployable",
    AccessKind.WEAR: "clothing",
    AccessKind.RELOAD: "ammunition",
}


@dataclass(frozen=True)
class Subject:
    """The player attempting an access.

    ``handle`` is the host's own player object, passed through untouched to
    exemption providers.
    """

    id: str
    name: str
    is_npc: bool = False
    position: tuple[float, float, float] | None = None
    language: str | None = None
    handle: object = None

    def looks_like_npc(self) -> bool:
        """``True`` for flagged NPCs and ids outside the human id range."""
        if self.is_npc:
            return True
        try:
            numeric = int(self.id)
        except (TypeError, ValueError):
            return False
        return not (numeric >= HUMAN_ID_FLOOR or numeric == 0)


@dataclass(frozen=True)
class AccessAttempt:
    """One attempt to equip, wear, reload or deploy a resource."""

    kind: AccessKind
    display_alias: str | None
    short_alias: str | None
    subject: Subject | None


@dataclass(frozen=True)
class AccessDecision:
    """Result returned to the host for one attempt.

    ``message`` is the rendered notification for the subject; empty when
    allowed or when the subject was skipped.
    """

    verdict: Verdict
    skipped: bool = False
    remaining: timedelta | None = None
    message: str = ""

    @property
    def allowed(self) -> bool:
        return self.verdict is Verdict.ALLOW
