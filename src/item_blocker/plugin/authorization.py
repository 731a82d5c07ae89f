"""Caller identity and the authorization provider boundary.

The host owns group and permission membership.  item-blocker only asks
yes/no questions through :class:`AuthorizationProvider`.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from dataclasses import dataclass


@dataclass(frozen=True)
class Caller:
    """A user issuing an administrative command.

    The server console and RCON are represented by ``None`` rather than a
    Caller and are always authorized.
    """

    id: str
    name: str
    is_admin: bool = False
    language: str | None = None


class AuthorizationProvider(ABC):
    """Answers permission membership questions for a subject id."""

    @abstractmethod
    def has_permission(self, subject_id: str, permission: str) -> bool:
        """Return ``True`` when ``subject_id`` holds ``permission``."""


class StaticAuthorization(AuthorizationProvider):
    """In-memory grants, keyed by subject id.

    Example
    -------
    >>> auth = StaticAuthorization({"76561198000000001": ["itemblocker.admin"]})
    >>> auth.has_permission("76561198000000001", "itemblocker.admin")
    True
    """

    def __init__(self, grants: Mapping[str, Iterable[str]] | None = None) -> None:
        self._grants: dict[str, set[str]] = {
            subject_id: {p.lower() for p in perms} for subject_id, perms in (grants or {}).items()
        }

    def grant(self, subject_id: str, permission: str) -> None:
        self._grants.setdefault(subject_id, set()).add(permission.lower())

    def revoke(self, subject_id: str, permission: str) -> None:
        self._grants.get(subject_id, set()).discard(permission.lower())

    def has_permission(self, subject_id: str, permission: str) -> bool:
        return permission.lower() in self._grants.get(subject_id, set())
