"""Shared fixtures for the item-blocker test suite."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

T0 = datetime(2025, 6, 5, 18, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime = T0) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()
