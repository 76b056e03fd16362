"""Тесты сеанса редактирования: детекция, интенсивность, жесты и экспорт."""

from __future__ import annotations

import io
import logging

from PIL import Image

from photoveil.config.settings import Settings
from photoveil.controllers.interaction import InteractionState, PointerTarget
from photoveil.controllers.session import EditorSession
from photoveil.models.region import EffectType, Point
from photoveil.services.detection_service import DetectedBox

from conftest import CrashingDetector, FailingDetector, FakeClock, FakeDetector, make_image_data


def test_load_image_prepares_layers_and_composite(session: EditorSession) -> None:
    assert session.has_image
    assert session.composite is not None
    assert session.composite.size == (64, 48)
    assert session.cache.recompute_count == 1
    assert session.regions == ()


def test_detection_creates_auto_regions_with_defaults(session: EditorSession) -> None:
    session.set_effect_type(EffectType.MOSAIC)
    detector = FakeDetector([DetectedBox(5, 5, 20, 20, 0.9), DetectedBox(30, 10, 15, 18, 0.7)])

    assert session.detect(detector) is True

    assert len(session.regions) == 2
    assert all(r.is_auto for r in session.regions)
    assert all(r.effect_type == EffectType.MOSAIC for r in session.regions)
    assert all(r.intensity == session.store.intensity for r in session.regions)
    assert session.is_busy is False


def test_second_detection_replaces_first(session: EditorSession) -> None:
    session.detect(FakeDetector([DetectedBox(5, 5, 20, 20), DetectedBox(30, 10, 15, 18)]))
    first_ids = {r.id for r in session.regions}

    session.detect(FakeDetector([DetectedBox(1, 2, 10, 12)]))

    (region,) = session.regions
    assert (region.x, region.y, region.width, region.height) == (1, 2, 10, 12)
    assert region.id not in first_ids


def test_failed_detection_leaves_store_unchanged(session: EditorSession) -> None:
    session.detect(FakeDetector([DetectedBox(5, 5, 20, 20)]))
    before = session.regions

    assert session.detect(FailingDetector()) is False

    assert session.regions == before
    assert session.is_busy is False


def test_unexpected_detector_exception_releases_busy_state(session: EditorSession) -> None:
    session.detect(FakeDetector([DetectedBox(5, 5, 20, 20)]))
    before = session.regions

    assert session.detect(CrashingDetector()) is False

    assert session.regions == before
    assert session.is_busy is False
    assert session.begin_detection() is True


def test_failed_detection_logs_traceback(session: EditorSession, caplog) -> None:
    with caplog.at_level(logging.ERROR, logger="photoveil.controllers.session"):
        session.detect(CrashingDetector())

    (record,) = [r for r in caplog.records if r.levelno == logging.ERROR]
    assert record.exc_info is not None
    assert record.exc_info[0] is RuntimeError


def test_detection_cannot_start_twice(session: EditorSession) -> None:
    assert session.begin_detection() is True
    assert session.begin_detection() is False

    session.finish_detection([])
    assert session.begin_detection() is True


def test_gestures_are_refused_while_busy(session: EditorSession) -> None:
    session.begin_detection()

    session.toggle_add_mode()
    session.pointer_down(Point(1, 1))

    assert session.interaction_state == InteractionState.IDLE


def test_stale_detection_result_is_discarded(session: EditorSession) -> None:
    old_image = session.image
    session.begin_detection()
    session.load_image(make_image_data(32, 32))

    session.finish_detection([DetectedBox(1, 1, 10, 10)], source=old_image)

    assert session.regions == ()
    assert session.is_busy is False


def test_intensity_changes_within_window_recompute_once(session: EditorSession, clock: FakeClock) -> None:
    session.detect(FakeDetector([DetectedBox(5, 5, 20, 20)]))
    (existing,) = session.regions
    baseline = session.cache.recompute_count

    for value in (30, 34, 38, 42, 46):
        session.propose_intensity(value)
        clock.advance(0.05)
        session.poll_intensity()

    assert session.cache.recompute_count == baseline
    assert session.proposed_intensity == 46

    clock.advance(0.25)
    session.poll_intensity()

    assert session.cache.recompute_count == baseline + 1
    assert session.cache.layers.intensity == 46
    assert session.store.intensity == 46
    assert session.regions[0].intensity == existing.intensity


def test_region_drawn_before_slider_settles_gets_new_intensity(
    session: EditorSession, clock: FakeClock
) -> None:
    baseline = session.cache.recompute_count

    session.propose_intensity(60)
    session.toggle_add_mode()
    session.pointer_down(Point(5, 5))
    session.pointer_move(Point(30, 30))
    drawn = session.pointer_up(Point(30, 30))

    assert drawn is not None
    assert drawn.intensity == 60
    assert session.cache.recompute_count == baseline

    clock.advance(0.5)
    session.poll_intensity()

    assert session.cache.recompute_count == baseline + 1
    assert session.cache.layers.intensity == 60
    assert session.regions[0].intensity == 60


def test_drag_moves_do_not_recomposite(session: EditorSession) -> None:
    session.detect(FakeDetector([DetectedBox(10, 10, 20, 20)]))
    (region,) = session.regions
    renders = []
    session.on_composite_change = renders.append

    session.pointer_down(Point(15, 15), PointerTarget(region.id))
    session.pointer_move(Point(20, 18))
    session.pointer_move(Point(25, 21))

    assert renders == []
    assert session.regions == (region,)

    session.pointer_up(Point(25, 21))

    assert len(renders) == 1
    assert (session.regions[0].x, session.regions[0].y) == (20, 16)


def test_remove_region_rerenders(session: EditorSession) -> None:
    session.detect(FakeDetector([DetectedBox(10, 10, 20, 20)]))
    (region,) = session.regions

    session.remove_region(region.id)

    assert session.regions == ()
    assert session.composite.tobytes() == session.image.pil_image.tobytes()


def test_export_requires_confirmation(session: EditorSession) -> None:
    assert session.export() is None

    session.set_export_confirmed(True)
    artifact = session.export(now=1700000000.5)

    assert artifact is not None
    assert artifact.filename == "student-privacy-blur-1700000000500.png"
    with Image.open(io.BytesIO(artifact.data)) as decoded:
        assert decoded.format == "PNG"
        assert decoded.size == (64, 48)
    assert session.export_confirmed is False
    assert session.export() is None


def test_closing_export_clears_confirmation(session: EditorSession) -> None:
    session.set_export_confirmed(True)

    session.close_export()

    assert session.export() is None


def test_reset_discards_session(session: EditorSession) -> None:
    session.detect(FakeDetector([DetectedBox(10, 10, 20, 20)]))
    session.set_export_confirmed(True)

    session.reset()

    assert session.has_image is False
    assert session.composite is None
    assert session.regions == ()
    assert session.export() is None


def test_session_without_image_ignores_actions(settings: Settings) -> None:
    session = EditorSession(settings)

    assert session.detect(FakeDetector([DetectedBox(1, 1, 10, 10)])) is False
    session.toggle_add_mode()

    assert session.interaction_state == InteractionState.IDLE
    assert session.regions == ()
