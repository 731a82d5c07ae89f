"""Optional exemption providers and the chain that queries them.

A provider answers "is this subject currently exempt from block checks?"
(for example because they are inside a duel arena).  Providers are optional
third-party collaborators, so a failing provider must never grant a bypass:
:class:`ExemptionChain` catches every failure, logs a warning naming the
provider, and treats it as "not exempt".

Example
-------
>>> chain = ExemptionChain([DuelsManagerExemption(duels_manager), DuelExemption(duel)])
>>> chain.is_exempt(player)
False
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable

from item_blocker.errors import CollaboratorError

logger = logging.getLogger(__name__)


class ExemptionProvider(ABC):
    """Capability interface for exemption collaborators."""

    name: str = "exemption"

    @abstractmethod
    def is_exempt(self, subject: object) -> bool:
        """Return ``True`` when ``subject`` should skip block checks.

        Raises
        ------
        CollaboratorError:
            When the underlying collaborator fails or answers oddly.
        """


class CallableExemptionProvider(ExemptionProvider):
    """Adapts a plain ``callable(subject) -> bool``."""

    def __init__(self, func: Callable[[object], object], name: str | None = None) -> None:
        self._func = func
        self.name = name or getattr(func, "__name__", "callable")

    def is_exempt(self, subject: object) -> bool:
        return _require_bool(self.name, self._func(subject))


class DuelsManagerExemption(ExemptionProvider):
    """Wraps a DuelsManager-style plugin exposing ``is_in_duel(a, b)``.

    Only one identity is available at the call site, so the subject is
    passed as both arguments.
    """

    name = "DuelsManager.IsInDuel"

    def __init__(self, plugin: object) -> None:
        self._plugin = plugin

    def is_exempt(self, subject: object) -> bool:
        method = getattr(self._plugin, "is_in_duel", None)
        if not callable(method):
            raise CollaboratorError(self.name, "plugin has no is_in_duel method")
        return _require_bool(self.name, method(subject, subject))


class DuelExemption(ExemptionProvider):
    """Wraps a Duel-style plugin exposing ``is_player_on_active_duel(p)``."""

    name = "Duel.IsPlayerOnActiveDuel"

    def __init__(self, plugin: object) -> None:
        self._plugin = plugin

    def is_exempt(self, subject: object) -> bool:
        method = getattr(self._plugin, "is_player_on_active_duel", None)
        if not callable(method):
            raise CollaboratorError(self.name, "plugin has no is_player_on_active_duel method")
        return _require_bool(self.name, method(subject))


class ExemptionChain:
    """Queries providers in order; the first ``True`` wins.

    Parameters
    ----------
    providers:
        Zero or more registered providers.
    """

    def __init__(self, providers: Iterable[ExemptionProvider] = ()) -> None:
        self._providers: list[ExemptionProvider] = list(providers)

    def register(self, provider: ExemptionProvider) -> None:
        self._providers.append(provider)

    @property
    def providers(self) -> list[ExemptionProvider]:
        return list(self._providers)

    def is_exempt(self, subject: object) -> bool:
        for provider in self._providers:
            try:
                if provider.is_exempt(subject):
                    return True
            except Exception as exc:  # noqa: BLE001
                logger.warning("%s call failed: %s", getattr(provider, "name", type(provider).__name__), exc)
        return False


def _require_bool(name: str, value: object) -> bool:
    if not isinstance(value, bool):
        raise CollaboratorError(name, f"expected bool, got {type(value).__name__}")
    return value
