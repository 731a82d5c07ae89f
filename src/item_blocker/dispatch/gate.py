"""Subscribe host event channels only while they have rules to enforce.

Access-attempt events fire very frequently on a busy host.  When a resource
class has no block entries at all, the channels it governs are unsubscribed
so the host never dispatches them to us.

Example
-------
>>> gate = DispatchGate(registrar)
>>> gate.apply(index)
frozenset({<Channel.WEAR_ATTEMPT: 'wear_attempt'>})
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum

from item_blocker.policies.index import AliasIndex
from item_blocker.policies.store import ResourceClass

logger = logging.getLogger(__name__)


class Channel(str, Enum):
    """Host event channels the engine can consume."""

    EQUIP_ATTEMPT = "equip_attempt"
    PLACEMENT_ATTEMPT = "placement_attempt"
    WEAR_ATTEMPT = "wear_attempt"
    RELOAD_ATTEMPT = "reload_attempt"


_CHANNELS_BY_CLASS: dict[ResourceClass, frozenset[Channel]] = {
    # Deployables are placed from inventory items, so placement follows items.
    ResourceClass.ITEM: frozenset({Channel.EQUIP_ATTEMPT, Channel.PLACEMENT_ATTEMPT}),
    ResourceClass.CLOTHING: frozenset({Channel.WEAR_ATTEMPT}),
    ResourceClass.AMMO: frozenset({Channel.RELOAD_ATTEMPT}),
}


def required_channels(resource_class: ResourceClass) -> frozenset[Channel]:
    """Return the channels governed by ``resource_class``."""
    return _CHANNELS_BY_CLASS[resource_class]


def wanted_channels(index: AliasIndex) -> frozenset[Channel]:
    """Return every channel whose governing class currently has rules."""
    wanted: set[Channel] = set()
    for resource_class in ResourceClass:
        if index.is_active(resource_class):
            wanted |= required_channels(resource_class)
    return frozenset(wanted)


class EventRegistrar(ABC):
    """Host-side event registration capability."""

    @abstractmethod
    def subscribe(self, channel: Channel) -> None:
        """Start delivering ``channel`` events."""

    @abstractmethod
    def unsubscribe(self, channel: Channel) -> None:
        """Stop delivering ``channel`` events."""


class NullRegistrar(EventRegistrar):
    """Registrar that records nothing; used when no host is attached."""

    def subscribe(self, channel: Channel) -> None:
        return None

    def unsubscribe(self, channel: Channel) -> None:
        return None


class DispatchGate:
    """Diffs wanted channels against the subscribed set and applies the change.

    Parameters
    ----------
    registrar:
        Host event registration interface.
    """

    def __init__(self, registrar: EventRegistrar | None = None) -> None:
        self._registrar = registrar or NullRegistrar()
        self._subscribed: frozenset[Channel] = frozenset()
        self._synced = False

    @property
    def subscribed(self) -> frozenset[Channel]:
        return self._subscribed

    def apply(self, index: AliasIndex) -> frozenset[Channel]:
        """Bring host subscriptions in line with ``index`` and return them.

        The first call issues an explicit subscribe or unsubscribe for every
        channel, since the host's initial state is unknown.  Later calls only
        touch channels whose state changes.
        """
        wanted = wanted_channels(index)
        for channel in Channel:
            enable = channel in wanted
            if self._synced and enable == (channel in self._subscribed):
                continue
            if enable:
                self._registrar.subscribe(channel)
            else:
                self._registrar.unsubscribe(channel)
        self._subscribed = wanted
        self._synced = True
        logger.debug("Subscribed channels: %s", sorted(c.value for c in wanted))
        return wanted

    def release(self) -> None:
        """Unsubscribe every channel."""
        for channel in Channel:
            self._registrar.unsubscribe(channel)
        self._subscribed = frozenset()
        self._synced = False
