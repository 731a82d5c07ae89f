"""Post-wipe timed block window.

The window is Active while ``now < block_end`` and Expired otherwise.  It is
re-armed only by an epoch event (a server wipe), which always restarts it at
``now + duration`` instead of extending it.  Expiry is detected by polling
:meth:`TemporalWindow.is_active`; there is no timer.

Example
-------
>>> from datetime import datetime, timezone
>>> window = TemporalWindow(duration_hours=30)
>>> window.arm_from(datetime(2025, 6, 1, tzinfo=timezone.utc))
>>> window.block_end
datetime.datetime(2025, 6, 2, 6, 0, tzinfo=datetime.timezone.utc)
"""
from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


class TemporalWindow:
    """Tracks when the timed block lists stop applying.

    Parameters
    ----------
    duration_hours:
        Length of the window after each wipe.  Negative values are clamped
        to ``0`` (timed blocking disabled, permanent blocks unaffected).
    clock:
        Callable returning the current timezone-aware UTC time.
    """

    def __init__(self, duration_hours: int = 30, clock: Clock | None = None) -> None:
        if duration_hours < 0:
            logger.warning("Block duration was %d hours; reset to 0.", duration_hours)
            duration_hours = 0
        self._duration = timedelta(hours=duration_hours)
        self._clock: Clock = clock or utc_now
        self._block_end: datetime = self._clock()

    @property
    def duration(self) -> timedelta:
        return self._duration

    @property
    def block_end(self) -> datetime:
        """UTC instant after which timed blocks no longer apply."""
        return self._block_end

    def set_duration_hours(self, duration_hours: int) -> None:
        """Change the configured length; takes effect on the next arm."""
        self._duration = timedelta(hours=max(0, duration_hours))

    def arm_from(self, epoch_time: datetime | None) -> None:
        """Anchor the window to the last known wipe time.

        Used at startup so a restart inside the window does not reset the
        countdown.  Falls back to the current time when ``epoch_time`` is
        unknown.
        """
        anchor = epoch_time if epoch_time is not None else self._clock()
        if anchor.tzinfo is None:
            anchor = anchor.replace(tzinfo=timezone.utc)
        self._block_end = anchor + self._duration

    def on_epoch(self) -> datetime:
        """Restart the window at ``now + duration`` and return the new end."""
        self._block_end = self._clock() + self._duration
        logger.info(
            "Wipe detected. Timed block window ends %s UTC.",
            self._block_end.strftime("%Y-%m-%d %H:%M:%S"),
        )
        return self._block_end

    def is_active(self) -> bool:
        return self._clock() < self._block_end

    def remaining(self) -> timedelta:
        """Time left in the window, never negative."""
        return max(self._block_end - self._clock(), timedelta(0))
