"""Test that the quickstart API works for item-blocker."""
from __future__ import annotations

from pathlib import Path


def test_quickstart_import() -> None:
    from item_blocker import ItemBlocker

    blocker = ItemBlocker()
    assert blocker is not None


def test_quickstart_block_and_check(tmp_path: Path) -> None:
    import item_blocker as ib

    blocker = ib.ItemBlocker(audit=ib.AuditLogger(tmp_path / "logs"))
    blocker.initialize()
    blocker.modify(True, ib.ResourceClass.ITEM, ib.BlockKind.PERMANENT, "rifle.ak")
    decision = blocker.can_equip_item("Assault Rifle", "rifle.ak", ib.Subject("76561198000000001", "Ann"))
    assert decision.allowed is False


def test_quickstart_default_allows(tmp_path: Path) -> None:
    import item_blocker as ib

    blocker = ib.ItemBlocker(audit=ib.AuditLogger(tmp_path / "logs"))
    blocker.initialize()
    decision = blocker.can_wear_item("Hoodie", "hoodie", ib.Subject("76561198000000001", "Ann"))
    assert decision.allowed is True


def test_quickstart_command_handler() -> None:
    import item_blocker as ib

    reply = ib.CommandHandler(ib.ItemBlocker()).execute(None, ["list"])
    assert reply.outcome is ib.CommandOutcome.LISTED


def test_quickstart_version() -> None:
    import item_blocker as ib

    assert ib.__version__ == "4.2.0"
