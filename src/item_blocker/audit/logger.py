"""Append-only, pipe-delimited audit logger with a bounded tail reader.

Every denial and administrative edit is written as one line::

    2025-06-01 12:00:00 | Alice (76561198000000001) added 'rifle.ak' to permanent item list.

Lines go to a daily file ``<base_name>_YYYY-MM-DD.txt`` inside the log
directory (UTC date).  The logger only appends and tail-reads; it never
rotates, compresses, or deletes files.

Appends are serialised with a ``threading.Lock`` so concurrent writers never
interleave partial lines.  :meth:`AuditLogger.read_tail` does not take the
lock: it inspects whatever byte range exists when it opens the file, so a
concurrent append may or may not appear in the result.

Example
-------
>>> from pathlib import Path
>>> audit = AuditLogger(Path("/tmp/item_blocker_logs"))
>>> audit.append("Server (Server) reloaded configuration.")
>>> audit.read_tail(max_lines=1)
['... | Server (Server) reloaded configuration.']
"""
from __future__ import annotations

import logging
import os
import threading
from collections.abc import Sequence
from pathlib import Path

from item_blocker.audit.sanitizer import FIELD_DELIMITER, sanitize
from item_blocker.errors import AuditLogUnavailable
from item_blocker.policies.window import Clock, utc_now

logger = logging.getLogger(__name__)

DEFAULT_TAIL_LINES = 20
DEFAULT_TAIL_BYTES = 65536
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
FIELD_SEPARATOR = f" {FIELD_DELIMITER} "

Position = Sequence[float]


class AuditLogger:
    """Writes sanitized audit lines and reads back a bounded tail.

    Parameters
    ----------
    log_dir:
        Directory holding the daily log files.  Created on first write.
    base_name:
        File name prefix; the UTC date and ``.txt`` are appended.
    clock:
        Callable returning the current timezone-aware UTC time.
    """

    def __init__(
        self,
        log_dir: Path,
        base_name: str = "item_blocker",
        clock: Clock | None = None,
    ) -> None:
        self._log_dir = Path(log_dir)
        self._base_name = base_name
        self._clock: Clock = clock or utc_now
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Write API
    # ------------------------------------------------------------------

    def append(self, *fields: str) -> str:
        """Append one line built from ``fields``, each sanitized.

        The UTC timestamp is always the first field.  Returns the line
        written, without its trailing newline.
        """
        now = self._clock()
        line = FIELD_SEPARATOR.join([now.strftime(TIMESTAMP_FORMAT), *(sanitize(f) for f in fields)])
        path = self._log_dir / f"{self._base_name}_{now:%Y-%m-%d}.txt"
        with self._lock:
            self._log_dir.mkdir(parents=True, exist_ok=True)
            with path.open("a", encoding="utf-8") as fh:
                fh.write(line + "\n")
        return line

    def log_denial(
        self,
        actor_name: str | None,
        actor_id: str | None,
        category: str,
        display_alias: str | None,
        short_alias: str | None,
        position: Position | None = None,
    ) -> str:
        """Record a blocked access attempt."""
        message = (
            f"{sanitize(actor_name)} ({sanitize(actor_id)}) attempted to use blocked "
            f"{category} '{sanitize(display_alias)} ({sanitize(short_alias)})'"
        )
        if position is not None and len(position) >= 3:
            x, y, z = position[0], position[1], position[2]
            message += f" at {x:.1f},{y:.1f},{z:.1f}"
        return self.append(message)

    def log_edit(
        self,
        actor_name: str | None,
        actor_id: str | None,
        added: bool,
        alias: str,
        kind: str,
        category: str,
    ) -> str:
        """Record an administrative add or remove."""
        verb, preposition = ("added", "to") if added else ("removed", "from")
        return self.append(
            f"{sanitize(actor_name or 'Server')} ({sanitize(actor_id or 'Server')}) "
            f"{verb} '{sanitize(alias)}' {preposition} {sanitize(kind)} {sanitize(category)} list."
        )

    # ------------------------------------------------------------------
    # Read API
    # ------------------------------------------------------------------

    def latest_log_file(self) -> Path:
        """Return the most recently written log file.

        Raises
        ------
        AuditLogUnavailable:
            When the directory or any accessible log file is missing.
        """
        resolved_dir = self._log_dir.resolve()
        if not resolved_dir.is_dir():
            raise AuditLogUnavailable("Log directory not found.")

        candidates = list(resolved_dir.glob(f"{self._base_name}_*.txt"))
        if not candidates:
            raise AuditLogUnavailable("No log file has been created yet.")

        # Keep only paths that resolve inside the log directory.
        safe = [p for p in candidates if p.resolve().is_relative_to(resolved_dir) and p.is_file()]
        if not safe:
            raise AuditLogUnavailable("No accessible log file found.")

        return max(safe, key=lambda p: (p.stat().st_mtime, p.name))

    def read_tail(
        self,
        max_lines: int = DEFAULT_TAIL_LINES,
        max_bytes: int = DEFAULT_TAIL_BYTES,
    ) -> list[str]:
        """Return up to ``max_lines`` trailing lines of the latest log file.

        Never reads more than ``max_bytes`` bytes, however large the file.
        """
        return tail_lines(self.latest_log_file(), max_lines=max_lines, max_bytes=max_bytes)

    @property
    def log_dir(self) -> Path:
        """Directory holding the daily log files."""
        return self._log_dir

    @property
    def base_name(self) -> str:
        return self._base_name

    def current_log_path(self) -> Path:
        """Path of the file today's entries are appended to."""
        return self._log_dir / f"{self._base_name}_{self._clock():%Y-%m-%d}.txt"


def tail_lines(
    path: Path,
    max_lines: int = DEFAULT_TAIL_LINES,
    max_bytes: int = DEFAULT_TAIL_BYTES,
) -> list[str]:
    """Read at most ``max_bytes`` from the end of ``path`` and split lines.

    A partial first line from the seek point is returned as-is.
    """
    if max_lines <= 0 or max_bytes <= 0:
        return []
    with path.open("rb") as fh:
        size = fh.seek(0, os.SEEK_END)
        fh.seek(max(0, size - max_bytes))
        data = fh.read(max_bytes)
    # Split on "\n" only; other Unicode line breaks may appear inside a field.
    lines = data.decode("utf-8", errors="replace").split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line.rstrip("\r") for line in lines[-max_lines:]]
