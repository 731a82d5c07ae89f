"""Tests for plugin/messages.py and plugin/access.py."""
from __future__ import annotations

from datetime import timedelta

import pytest

from item_blocker.plugin.access import AccessKind, Subject
from item_blocker.plugin.messages import MessageCatalog, render_block_message, split_remaining
from item_blocker.policies.engine import Verdict
from item_blocker.policies.store import ResourceClass


class TestMessageCatalog:
    def test_default_lookup(self) -> None:
        assert MessageCatalog().get("Reloaded") == "Item blocker configuration reloaded."

    def test_language_override(self) -> None:
        catalog = MessageCatalog({"de": {"ItemBlocked": "Gesperrt."}})
        assert catalog.get("ItemBlocked", language="de") == "Gesperrt."
        assert catalog.get("ClothBlocked", language="de") == "You cannot wear this clothing item."

    def test_unknown_key_returns_key(self) -> None:
        assert MessageCatalog().get("Nope") == "Nope"

    def test_format(self) -> None:
        assert MessageCatalog().format("NameTooLong", 256) == "Item name is too long (max 256 characters)."


class TestRenderBlockMessage:
    def test_split_remaining(self) -> None:
        assert split_remaining(timedelta(days=1, hours=2, minutes=3, seconds=4)) == (1, 2, 3, 4)
        assert split_remaining(timedelta(seconds=-5)) == (0, 0, 0, 0)

    def test_timed_message_includes_countdown(self) -> None:
        text = render_block_message(
            MessageCatalog(),
            AccessKind.EQUIP,
            Verdict.TIMED_DENY,
            timedelta(hours=20, minutes=5, seconds=9),
            prefix="[ItemBlocker]",
            color="#f44253",
        )
        assert text.startswith("<color=#f44253>[ItemBlocker]</color> You cannot use this item.")
        assert text.endswith("0d 20:05:09 remaining until unblock.")

    def test_permanent_message(self) -> None:
        text = render_block_message(
            MessageCatalog(), AccessKind.WEAR, Verdict.PERMANENT_DENY, None, prefix="[IB]", color="#000000"
        )
        assert "You cannot wear this clothing item." in text
        assert text.endswith("permanently blocked until removed by an admin.")


class TestAccessKind:
    @pytest.mark.parametrize(
        ("kind", "resource_class", "category"),
        [
            (AccessKind.EQUIP, ResourceClass.ITEM, "item"),
            (AccessKind.DEPLOY, ResourceClass.ITEM, "deployable"),
            (AccessKind.WEAR, ResourceClass.CLOTHING, "clothing"),
            (AccessKind.RELOAD, ResourceClass.AMMO, "ammunition"),
        ],
    )
    def test_mapping(self, kind: AccessKind, resource_class: ResourceClass, category: str) -> None:
        assert kind.resource_class is resource_class
        assert kind.log_category == category


class TestSubject:
    def test_human_id_is_not_npc(self) -> None:
        assert not Subject("76561198000000001", "Ann").looks_like_npc()

    def test_small_id_is_npc(self) -> None:
        assert Subject("12345", "scientist").looks_like_npc()

    def test_zero_id_is_not_npc(self) -> None:
        assert not Subject("0", "Ann").looks_like_npc()

    def test_flagged_npc(self) -> None:
        assert Subject("76561198000000001", "bot", is_npc=True).looks_like_npc()
