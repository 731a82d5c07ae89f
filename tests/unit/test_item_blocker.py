"""Tests for the ItemBlocker facade."""
from __future__ import annotations

import json
from datetime import timedelta
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from conftest import T0, FakeClock
from item_blocker.audit.logger import AuditLogger
from item_blocker.dispatch.gate import Channel, EventRegistrar
from item_blocker.errors import ConfigNotWritable
from item_blocker.plugin.access import AccessAttempt, AccessKind, Subject
from item_blocker.plugin.authorization import AuthorizationProvider, Caller, StaticAuthorization
from item_blocker.plugin.blocker import ItemBlocker
from item_blocker.plugin.config_loader import ConfigLoader
from item_blocker.plugin.exemptions import CallableExemptionProvider, ExemptionChain
from item_blocker.policies.engine import Verdict
from item_blocker.policies.store import BlockKind, MutationOutcome, ResourceClass

PLAYER = Subject("76561198000000001", "Ann", position=(10.0, 0.0, -5.5))


@pytest.fixture()
def registrar() -> MagicMock:
    return MagicMock(spec=EventRegistrar)


@pytest.fixture()
def config_path(tmp_path: Path) -> Path:
    path = tmp_path / "item_blocker.json"
    path.write_text(
        json.dumps(
            {
                "Block Duration (Hours) after Wipe": 30,
                "Permanent Blocked Items": ["rifle.ak"],
                "Timed Blocked Clothes": ["Metal Facemask"],
                "audit": {"log_dir": str(tmp_path / "logs")},
            }
        ),
        encoding="utf-8",
    )
    return path


@pytest.fixture()
def blocker(config_path: Path, registrar: MagicMock, clock: FakeClock) -> ItemBlocker:
    blocker = ItemBlocker.from_path(config_path, registrar=registrar, clock=clock)
    blocker.initialize(last_epoch_time=T0)
    return blocker


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


class TestLifecycle:
    def test_initialize_gates_active_classes(self, blocker: ItemBlocker) -> None:
        assert blocker.gate.subscribed == {
            Channel.EQUIP_ATTEMPT,
            Channel.PLACEMENT_ATTEMPT,
            Channel.WEAR_ATTEMPT,
        }

    def test_initialize_anchors_to_last_epoch(self, config_path: Path, clock: FakeClock) -> None:
        blocker = ItemBlocker.from_path(config_path, clock=clock)
        blocker.initialize(last_epoch_time=T0 - timedelta(hours=25))
        assert blocker.window.remaining() == timedelta(hours=5)

    def test_on_new_save_restarts_window(self, blocker: ItemBlocker, clock: FakeClock) -> None:
        clock.advance(hours=40)
        assert not blocker.window.is_active()
        end = blocker.on_new_save()
        assert end == clock.now + timedelta(hours=30)
        assert blocker.window.is_active()

    def test_unload_releases_everything(self, blocker: ItemBlocker, registrar: MagicMock) -> None:
        registrar.reset_mock()
        blocker.unload()
        assert registrar.unsubscribe.call_count == len(Channel)
        assert blocker.gate.subscribed == frozenset()
        assert not blocker.index.is_active(ResourceClass.ITEM)

    def test_missing_config_creates_default(self, tmp_path: Path) -> None:
        path = tmp_path / "fresh.json"
        blocker = ItemBlocker.from_path(path)
        assert path.exists()
        assert len(blocker.store) == 0

    def test_in_memory_blocker(self, tmp_path: Path) -> None:
        blocker = ItemBlocker(audit=AuditLogger(tmp_path / "logs"))
        blocker.initialize()
        blocker.save()
        assert blocker.config_path is None


# ---------------------------------------------------------------------------
# Edits
# ---------------------------------------------------------------------------


class TestEdits:
    def test_modify_rebuilds_and_gates(self, blocker: ItemBlocker, registrar: MagicMock) -> None:
        registrar.reset_mock()
        outcome = blocker.modify(True, ResourceClass.AMMO, BlockKind.TIMED, "ammo.rifle.explosive")
        assert outcome is MutationOutcome.ADDED
        registrar.subscribe.assert_called_once_with(Channel.RELOAD_ATTEMPT)
        assert blocker.index.contains(ResourceClass.AMMO, BlockKind.TIMED, "AMMO.RIFLE.EXPLOSIVE")

    def test_unchanged_outcome_skips_gate(self, blocker: ItemBlocker, registrar: MagicMock) -> None:
        registrar.reset_mock()
        outcome = blocker.modify(False, ResourceClass.AMMO, BlockKind.TIMED, "Z")
        assert outcome is MutationOutcome.NOT_FOUND
        registrar.subscribe.assert_not_called()
        registrar.unsubscribe.assert_not_called()

    def test_save_persists_lists(self, blocker: ItemBlocker, config_path: Path) -> None:
        blocker.modify(True, ResourceClass.ITEM, BlockKind.TIMED, "explosive.timed")
        blocker.save()
        raw = json.loads(config_path.read_text(encoding="utf-8"))
        assert raw["Timed Blocked Items"] == ["explosive.timed"]
        assert raw["Permanent Blocked Items"] == ["rifle.ak"]

    def test_save_failure_propagates(self, blocker: ItemBlocker) -> None:
        loader = MagicMock(spec=ConfigLoader)
        loader.save.side_effect = OSError("disk full")
        blocker._config_loader = loader
        with pytest.raises(OSError):
            blocker.save()

    def test_invalid_file_is_never_overwritten(self, tmp_path: Path, clock: FakeClock) -> None:
        path = tmp_path / "item_blocker.json"
        path.write_text("{not json", encoding="utf-8")
        blocker = ItemBlocker.from_path(path, clock=clock)
        assert not blocker.writable
        blocker.modify(True, ResourceClass.ITEM, BlockKind.TIMED, "explosive.timed")
        with pytest.raises(ConfigNotWritable):
            blocker.save()
        assert path.read_text(encoding="utf-8") == "{not json"

    def test_reload_of_fixed_file_restores_saving(self, tmp_path: Path, clock: FakeClock) -> None:
        path = tmp_path / "item_blocker.json"
        path.write_text("{not json", encoding="utf-8")
        blocker = ItemBlocker.from_path(path, clock=clock)
        raw = {"Permanent Blocked Items": ["rifle.ak"], "audit": {"log_dir": str(tmp_path / "logs")}}
        path.write_text(json.dumps(raw), encoding="utf-8")
        blocker.reload()
        assert blocker.writable
        blocker.save()
        assert json.loads(path.read_text(encoding="utf-8"))["Permanent Blocked Items"] == ["rifle.ak"]

    def test_reload_picks_up_external_edit(self, blocker: ItemBlocker, config_path: Path) -> None:
        raw = json.loads(config_path.read_text(encoding="utf-8"))
        raw["Permanent Blocked Ammo"] = ["ammo.rocket.hv"]
        raw["Block Duration (Hours) after Wipe"] = 12
        config_path.write_text(json.dumps(raw), encoding="utf-8")
        end_before = blocker.window.block_end

        blocker.reload()

        assert blocker.index.contains(ResourceClass.AMMO, BlockKind.PERMANENT, "ammo.rocket.hv")
        assert Channel.RELOAD_ATTEMPT in blocker.gate.subscribed
        assert blocker.window.duration == timedelta(hours=12)
        assert blocker.window.block_end == end_before


# ---------------------------------------------------------------------------
# Access checks
# ---------------------------------------------------------------------------


class TestCheckAccess:
    def test_permanent_block_is_denied_and_audited(self, blocker: ItemBlocker) -> None:
        decision = blocker.can_equip_item("Assault Rifle", "rifle.ak", PLAYER)
        assert decision.verdict is Verdict.PERMANENT_DENY
        assert not decision.allowed
        assert "permanently blocked" in decision.message
        tail = blocker.audit.read_tail()
        assert tail[-1].endswith("Ann (76561198000000001) attempted to use blocked item 'Assault Rifle (rifle.ak)' at 10.0,0.0,-5.5")

    def test_deploy_uses_item_lists(self, blocker: ItemBlocker) -> None:
        decision = blocker.can_build("Assault Rifle", "rifle.ak", PLAYER)
        assert decision.verdict is Verdict.PERMANENT_DENY
        assert "blocked deployable" in blocker.audit.read_tail()[-1]

    def test_timed_block_reports_remaining(self, blocker: ItemBlocker, clock: FakeClock) -> None:
        clock.advance(hours=10)
        decision = blocker.can_wear_item("metal facemask", "metal.facemask", PLAYER)
        assert decision.verdict is Verdict.TIMED_DENY
        assert decision.remaining == timedelta(hours=20)
        assert "0d 20:00:00 remaining" in decision.message

    def test_timed_block_lifts_after_window(self, blocker: ItemBlocker, clock: FakeClock) -> None:
        clock.advance(hours=31)
        assert blocker.can_wear_item("Metal Facemask", "metal.facemask", PLAYER).allowed

    def test_unlisted_resource_allowed_without_audit(self, blocker: ItemBlocker) -> None:
        decision = blocker.on_magazine_reload("5.56 Rifle Ammo", "ammo.rifle", PLAYER)
        assert decision.allowed
        assert not decision.skipped
        assert not blocker.audit.log_dir.exists()

    def test_missing_subject_skipped(self, blocker: ItemBlocker) -> None:
        decision = blocker.can_equip_item("Assault Rifle", "rifle.ak", None)
        assert decision.allowed and decision.skipped

    def test_attempt_without_subject_skipped(self, blocker: ItemBlocker) -> None:
        decision = blocker.check_access(AccessAttempt(AccessKind.EQUIP, "Assault Rifle", "rifle.ak", None))
        assert decision.allowed and decision.skipped
        assert not blocker.audit.log_dir.exists()

    def test_npc_skipped(self, blocker: ItemBlocker) -> None:
        npc = Subject("1234567", "scientist")
        assert blocker.can_equip_item("Assault Rifle", "rifle.ak", npc).skipped

    def test_bypass_permission_skips(self, config_path: Path, clock: FakeClock) -> None:
        auth = StaticAuthorization({PLAYER.id: ["itemblocker.bypass"]})
        blocker = ItemBlocker.from_path(config_path, authorization=auth, clock=clock)
        blocker.initialize(last_epoch_time=T0)
        assert blocker.can_equip_item("Assault Rifle", "rifle.ak", PLAYER).skipped

    def test_exempt_subject_skips(self, config_path: Path, clock: FakeClock) -> None:
        handle = object()
        chain = ExemptionChain([CallableExemptionProvider(lambda s: s is handle, name="arena")])
        blocker = ItemBlocker.from_path(config_path, exemptions=chain, clock=clock)
        blocker.initialize(last_epoch_time=T0)
        dueller = Subject(PLAYER.id, "Ann", handle=handle)
        assert blocker.can_equip_item("Assault Rifle", "rifle.ak", dueller).skipped
        assert not blocker.can_equip_item("Assault Rifle", "rifle.ak", PLAYER).allowed

    def test_failing_authorization_is_not_bypass(self, config_path: Path, clock: FakeClock) -> None:
        auth = MagicMock(spec=AuthorizationProvider)
        auth.has_permission.side_effect = RuntimeError("permission backend down")
        blocker = ItemBlocker.from_path(config_path, authorization=auth, clock=clock)
        blocker.initialize(last_epoch_time=T0)
        assert blocker.can_equip_item("Assault Rifle", "rifle.ak", PLAYER).verdict is Verdict.PERMANENT_DENY

    def test_audit_failure_does_not_change_verdict(self, blocker: ItemBlocker) -> None:
        blocker._audit = MagicMock(spec=AuditLogger)
        blocker._audit.log_denial.side_effect = OSError("read-only")
        assert blocker.can_equip_item("Assault Rifle", "rifle.ak", PLAYER).verdict is Verdict.PERMANENT_DENY


class TestAuthorization:
    def test_console_is_authorized(self, blocker: ItemBlocker) -> None:
        assert blocker.is_authorized(None)

    def test_admin_flag_is_authorized(self, blocker: ItemBlocker) -> None:
        assert blocker.is_authorized(Caller("1", "root", is_admin=True))

    def test_permission_grant_is_authorized(self, config_path: Path) -> None:
        auth = StaticAuthorization({"5": ["itemblocker.admin"]})
        blocker = ItemBlocker.from_path(config_path, authorization=auth)
        assert blocker.is_authorized(Caller("5", "mod"))
        assert not blocker.is_authorized(Caller("6", "guest"))
