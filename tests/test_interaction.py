"""Тесты машины состояний жестов."""

from __future__ import annotations

import pytest

from photoveil.config.settings import Settings
from photoveil.controllers.interaction import (
    InteractionState,
    InteractionStateMachine,
    PointerTarget,
    Preview,
    hit_test,
)
from photoveil.models.region import EffectType, Point, Region
from photoveil.services.region_store import RegionStore


@pytest.fixture
def store(settings: Settings) -> RegionStore:
    return RegionStore(settings)


@pytest.fixture
def machine(store: RegionStore, settings: Settings) -> InteractionStateMachine:
    return InteractionStateMachine(store, settings)


def _add_region(store: RegionStore, x: float = 10, y: float = 10, w: float = 20, h: float = 20) -> Region:
    region = Region(store.next_id("auto"), x, y, w, h, True, store.effect_type, store.intensity)
    store.add(region)
    return region


def _draw(machine: InteractionStateMachine, start: Point, end: Point) -> None:
    machine.toggle_add_mode()
    machine.pointer_down(start)
    machine.pointer_move(end)
    machine.pointer_up()


def test_toggle_add_mode_arms_and_disarms(machine: InteractionStateMachine) -> None:
    machine.toggle_add_mode()
    assert machine.state == InteractionState.ARMED

    machine.toggle_add_mode()
    assert machine.state == InteractionState.IDLE


@pytest.mark.parametrize("end", [Point(14, 40), Point(40, 15), Point(15, 15)])
def test_small_drawings_are_discarded(machine: InteractionStateMachine, store: RegionStore, end: Point) -> None:
    _draw(machine, Point(10, 10), end)

    assert len(store) == 0
    assert machine.state == InteractionState.IDLE
    assert machine.preview is None


def test_drawing_commits_manual_region_with_current_defaults(
    machine: InteractionStateMachine, store: RegionStore
) -> None:
    store.set_effect_type(EffectType.MOSAIC)
    store.set_intensity(40)

    _draw(machine, Point(10, 10), Point(16.5, 30))

    (region,) = store.regions
    assert region.is_auto is False
    assert region.effect_type == EffectType.MOSAIC
    assert region.intensity == 40
    assert (region.x, region.y, region.width, region.height) == pytest.approx((10, 10, 6.5, 20))
    assert machine.state == InteractionState.IDLE


def test_preview_normalizes_direction(machine: InteractionStateMachine) -> None:
    machine.toggle_add_mode()
    machine.pointer_down(Point(50, 50))
    machine.pointer_move(Point(20, 30))

    assert machine.state == InteractionState.DRAWING
    assert machine.preview == Preview(x=20, y=30, width=30, height=20)


def test_pointer_leave_finalizes_drawing(machine: InteractionStateMachine, store: RegionStore) -> None:
    machine.toggle_add_mode()
    machine.pointer_down(Point(0, 0))
    machine.pointer_move(Point(30, 30))

    machine.pointer_leave()

    assert len(store) == 1
    assert machine.state == InteractionState.IDLE


def test_drag_commits_only_on_release(machine: InteractionStateMachine, store: RegionStore) -> None:
    original = _add_region(store)

    machine.pointer_down(Point(15, 15), PointerTarget(original.id))
    machine.pointer_move(Point(25, 20))
    machine.pointer_move(Point(33, 31))

    assert machine.state == InteractionState.DRAGGING
    assert store.get(original.id) == original
    assert (machine.drag_candidate.x, machine.drag_candidate.y) == pytest.approx((28, 26))

    machine.pointer_up(Point(40, 35))

    moved = store.get(original.id)
    assert (moved.x, moved.y) == pytest.approx((original.x + 25, original.y + 20))
    assert (moved.width, moved.height) == (original.width, original.height)
    assert machine.drag_candidate is None
    assert machine.state == InteractionState.IDLE


def test_drag_without_movement_keeps_region(machine: InteractionStateMachine, store: RegionStore) -> None:
    original = _add_region(store)

    machine.pointer_down(Point(15, 15), PointerTarget(original.id))
    machine.pointer_leave()

    assert store.get(original.id) == original


def test_delete_target_never_starts_drag(machine: InteractionStateMachine, store: RegionStore) -> None:
    original = _add_region(store)

    machine.pointer_down(Point(30, 10), PointerTarget(original.id, on_delete=True))
    machine.pointer_move(Point(50, 50))

    assert machine.state == InteractionState.IDLE
    assert machine.drag_candidate is None


def test_pointer_down_on_empty_canvas_stays_idle(machine: InteractionStateMachine) -> None:
    machine.pointer_down(Point(5, 5))

    assert machine.state == InteractionState.IDLE


def test_armed_pointer_down_on_region_draws(machine: InteractionStateMachine, store: RegionStore) -> None:
    region = _add_region(store)
    machine.toggle_add_mode()

    machine.pointer_down(Point(15, 15), PointerTarget(region.id))

    assert machine.state == InteractionState.DRAWING


def test_hit_test_prefers_topmost_region(store: RegionStore) -> None:
    lower = _add_region(store, 0, 0, 40, 40)
    upper = _add_region(store, 20, 20, 40, 40)

    assert hit_test(store.regions, Point(30, 30)) == upper.id
    assert hit_test(store.regions, Point(5, 5)) == lower.id
    assert hit_test(store.regions, Point(100, 100)) is None
