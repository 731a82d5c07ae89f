"""Dispatch gating for host event channels."""
from __future__ import annotations

from item_blocker.dispatch.gate import (
    Channel,
    DispatchGate,
    EventRegistrar,
    NullRegistrar,
    required_channels,
    wanted_channels,
)

__all__ = [
    "Channel",
    "DispatchGate",
    "EventRegistrar",
    "NullRegistrar",
    "required_channels",
    "wanted_channels",
]
