"""Unit tests for policies/window.py and policies/engine.py."""
from __future__ import annotations

from datetime import timedelta

import pytest

from conftest import T0, FakeClock
from item_blocker.policies.engine import EvaluationEngine, Verdict
from item_blocker.policies.index import AliasIndex
from item_blocker.policies.store import BlockKind, PolicyStore, ResourceClass
from item_blocker.policies.window import TemporalWindow


def _engine(store: PolicyStore, window: TemporalWindow) -> EvaluationEngine:
    return EvaluationEngine(AliasIndex.build(store), window)


# ---------------------------------------------------------------------------
# TemporalWindow
# ---------------------------------------------------------------------------


class TestTemporalWindow:
    def test_negative_duration_clamped(self, clock: FakeClock) -> None:
        window = TemporalWindow(-5, clock=clock)
        assert window.duration == timedelta(0)

    def test_active_until_block_end(self, clock: FakeClock) -> None:
        window = TemporalWindow(30, clock=clock)
        window.on_epoch()
        clock.advance(hours=29, minutes=59)
        assert window.is_active()
        clock.advance(minutes=1)
        assert not window.is_active()

    def test_zero_duration_expires_immediately(self, clock: FakeClock) -> None:
        window = TemporalWindow(0, clock=clock)
        window.on_epoch()
        assert not window.is_active()
        assert window.remaining() == timedelta(0)

    def test_epoch_restarts_rather_than_extends(self, clock: FakeClock) -> None:
        window = TemporalWindow(10, clock=clock)
        window.on_epoch()
        clock.advance(hours=4)
        window.on_epoch()
        assert window.block_end == T0 + timedelta(hours=14)

    def test_rapid_epochs_are_idempotent(self, clock: FakeClock) -> None:
        window = TemporalWindow(30, clock=clock)
        first = window.on_epoch()
        second = window.on_epoch()
        assert first == second == T0 + timedelta(hours=30)

    def test_arm_from_last_epoch(self, clock: FakeClock) -> None:
        window = TemporalWindow(30, clock=clock)
        window.arm_from(T0 - timedelta(hours=10))
        assert window.remaining() == timedelta(hours=20)

    def test_arm_from_unknown_epoch_uses_now(self, clock: FakeClock) -> None:
        window = TemporalWindow(6, clock=clock)
        window.arm_from(None)
        assert window.block_end == T0 + timedelta(hours=6)

    def test_arm_from_naive_datetime_treated_as_utc(self, clock: FakeClock) -> None:
        window = TemporalWindow(1, clock=clock)
        window.arm_from(T0.replace(tzinfo=None))
        assert window.block_end == T0 + timedelta(hours=1)

    def test_remaining_never_negative(self, clock: FakeClock) -> None:
        window = TemporalWindow(1, clock=clock)
        window.on_epoch()
        clock.advance(hours=5)
        assert window.remaining() == timedelta(0)


# ---------------------------------------------------------------------------
# EvaluationEngine
# ---------------------------------------------------------------------------


class TestEvaluationEngine:
    def test_permanent_deny_regardless_of_window(self, clock: FakeClock) -> None:
        store = PolicyStore()
        store.add(ResourceClass.ITEM, BlockKind.PERMANENT, "rifle.ak")
        window = TemporalWindow(0, clock=clock)
        engine = _engine(store, window)
        assert engine.evaluate("Assault Rifle", "rifle.ak", ResourceClass.ITEM) is Verdict.PERMANENT_DENY

    def test_display_alias_matches(self, clock: FakeClock) -> None:
        store = PolicyStore()
        store.add(ResourceClass.CLOTHING, BlockKind.PERMANENT, "Heavy Plate Jacket")
        engine = _engine(store, TemporalWindow(0, clock=clock))
        assert engine.evaluate("heavy plate jacket", "heavy.plate.jacket", ResourceClass.CLOTHING).denied

    def test_class_scoping(self, clock: FakeClock) -> None:
        store = PolicyStore()
        store.add(ResourceClass.AMMO, BlockKind.PERMANENT, "ammo.rocket.hv")
        engine = _engine(store, TemporalWindow(0, clock=clock))
        assert engine.evaluate(None, "ammo.rocket.hv", ResourceClass.ITEM) is Verdict.ALLOW

    def test_null_aliases_are_allowed(self, clock: FakeClock) -> None:
        store = PolicyStore()
        store.add(ResourceClass.ITEM, BlockKind.PERMANENT, "x")
        engine = _engine(store, TemporalWindow(30, clock=clock))
        assert engine.evaluate(None, None, ResourceClass.ITEM) is Verdict.ALLOW

    def test_scenario_a_timed_then_allowed(self, clock: FakeClock) -> None:
        store = PolicyStore()
        store.add(ResourceClass.ITEM, BlockKind.TIMED, "X")
        window = TemporalWindow(30, clock=clock)
        window.on_epoch()
        engine = _engine(store, window)

        clock.advance(hours=10)
        assert engine.evaluate("X", "x", ResourceClass.ITEM) is Verdict.TIMED_DENY

        clock.advance(hours=21)
        assert engine.evaluate("X", "x", ResourceClass.ITEM) is Verdict.ALLOW

    @pytest.mark.parametrize("hours_after_epoch", [0, 10, 29, 31, 1000])
    def test_scenario_b_permanent_precedes_timed(self, clock: FakeClock, hours_after_epoch: int) -> None:
        store = PolicyStore()
        store.add(ResourceClass.ITEM, BlockKind.PERMANENT, "Y")
        store.add(ResourceClass.ITEM, BlockKind.TIMED, "Y")
        window = TemporalWindow(30, clock=clock)
        window.on_epoch()
        engine = _engine(store, window)
        clock.advance(hours=hours_after_epoch)
        assert engine.evaluate("Y", "y", ResourceClass.ITEM) is Verdict.PERMANENT_DENY

    def test_engine_sees_index_rebuild(self, clock: FakeClock) -> None:
        store = PolicyStore()
        index = AliasIndex.build(store)
        engine = EvaluationEngine(index, TemporalWindow(0, clock=clock))
        store.add(ResourceClass.AMMO, BlockKind.PERMANENT, "ammo.pistol")
        index.rebuild(store)
        assert engine.evaluate("Pistol Bullet", "ammo.pistol", ResourceClass.AMMO) is Verdict.PERMANENT_DENY

    def test_verdict_denied_property(self) -> None:
        assert Verdict.TIMED_DENY.denied
        assert not Verdict.ALLOW.denied
