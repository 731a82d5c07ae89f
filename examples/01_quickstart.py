#!/usr/bin/env python3
"""Example: Quickstart for item-blocker

Minimal working example: block a few resources, evaluate access attempts
inside and after the post-wipe window, and read back the audit tail.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install item-blocker
"""
from __future__ import annotations

import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

import item_blocker as ib


def main() -> None:
    print(f"item-blocker version: {ib.__version__}")

    now = datetime.now(timezone.utc)
    log_dir = Path(tempfile.mkdtemp()) / "logs"

    # Step 1: Build an in-memory blocker and edit its lists
    blocker = ib.ItemBlocker(audit=ib.AuditLogger(log_dir))
    blocker.initialize(last_epoch_time=now - timedelta(hours=2))
    blocker.modify(True, ib.ResourceClass.ITEM, ib.BlockKind.PERMANENT, "rifle.ak")
    blocker.modify(True, ib.ResourceClass.AMMO, ib.BlockKind.TIMED, "ammo.rocket.hv")
    print(f"Blocker ready: {len(blocker.store)} entries, window ends {blocker.window.block_end:%Y-%m-%d %H:%M} UTC")

    # Step 2: Evaluate access attempts
    player = ib.Subject("76561198000000001", "Alice", position=(120.0, 4.5, -33.2))
    attempts = [
        (blocker.can_equip_item, "Assault Rifle", "rifle.ak"),
        (blocker.on_magazine_reload, "High Velocity Rocket", "ammo.rocket.hv"),
        (blocker.can_wear_item, "Hoodie", "hoodie"),
    ]

    print("\nAccess evaluation:")
    for check, display, short in attempts:
        decision = check(display, short, player)
        icon = "ALLOW" if decision.allowed else "DENY"
        print(f"  [{icon}] {display} ({short}) -> {decision.verdict.value}")

    # Step 3: Audit tail
    entries = blocker.audit.read_tail()
    print(f"\nAudit log: {len(entries)} entries")
    for entry in entries:
        print(f"  {entry}")


if __name__ == "__main__":
    main()
