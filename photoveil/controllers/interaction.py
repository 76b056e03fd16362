"""Машина состояний жестов указателя: рисование новых и перемещение существующих областей.

Все координаты здесь уже в пикселях изображения; перевод с экрана выполняет
`CoordinateMapper` до вызова методов.

Состояния:
- IDLE: режим добавления выключен, жеста нет.
- ARMED: режим добавления включён, ждём нажатия.
- DRAWING: кнопка нажата, растягиваем новую область от точки привязки.
- DRAGGING: кнопка нажата на существующей области, двигаем её.

Во время перетаскивания новая позиция хранится только локально
(`drag_candidate`) и записывается в хранилище при отпускании кнопки.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from photoveil.config.settings import Settings
from photoveil.models.region import Point, Region
from photoveil.services.region_store import RegionStore

logger = logging.getLogger(__name__)


class InteractionState(str, Enum):
    IDLE = "idle"
    ARMED = "armed"
    DRAWING = "drawing"
    DRAGGING = "dragging"


@dataclass(frozen=True)
class PointerTarget:
    """Что находится под указателем при нажатии."""
    region_id: str
    on_delete: bool = False


@dataclass(frozen=True)
class Preview:
    """Прямоугольник рисуемой области (ещё не в хранилище)."""
    x: float
    y: float
    width: float
    height: float


def hit_test(regions: Iterable[Region], point: Point) -> Optional[str]:
    """Возвращает id верхней области, в прямоугольник которой попала точка."""
    hit = None
    for region in regions:
        if region.contains(point):
            hit = region.id
    return hit


class InteractionStateMachine:
    def __init__(self, store: RegionStore, settings: Settings) -> None:
        self._store = store
        self._settings = settings
        self._state = InteractionState.IDLE

        self._anchor: Optional[Point] = None
        self._preview: Optional[Preview] = None

        self._dragging_id: Optional[str] = None
        self._drag_offset: Point = Point(0.0, 0.0)
        self._drag_candidate: Optional[Region] = None

    # ---- State ----
    @property
    def state(self) -> InteractionState:
        return self._state

    @property
    def add_mode(self) -> bool:
        return self._state in (InteractionState.ARMED, InteractionState.DRAWING)

    @property
    def preview(self) -> Optional[Preview]:
        return self._preview

    @property
    def drag_candidate(self) -> Optional[Region]:
        return self._drag_candidate

    @property
    def is_gesture_active(self) -> bool:
        return self._state in (InteractionState.DRAWING, InteractionState.DRAGGING)

    def toggle_add_mode(self) -> None:
        if self._state == InteractionState.IDLE:
            self._state = InteractionState.ARMED
        elif self._state == InteractionState.ARMED:
            self._state = InteractionState.IDLE

    def reset(self) -> None:
        self._state = InteractionState.IDLE
        self._clear_gesture()

    # ---- Pointer events ----
    def pointer_down(self, point: Point, target: Optional[PointerTarget] = None) -> None:
        if self.is_gesture_active:
            return

        if self._state == InteractionState.ARMED:
            self._anchor = point
            self._preview = None
            self._state = InteractionState.DRAWING
            return

        if target is None or target.on_delete:
            # delete handle clicks are handled separately and never start a drag
            return
        region = self._store.get(target.region_id)
        if region is None:
            return
        self._dragging_id = region.id
        self._drag_offset = Point(point.x - region.x, point.y - region.y)
        self._drag_candidate = None
        self._state = InteractionState.DRAGGING

    def pointer_move(self, point: Point) -> None:
        if self._state == InteractionState.DRAWING and self._anchor is not None:
            anchor = self._anchor
            self._preview = Preview(
                x=min(anchor.x, point.x),
                y=min(anchor.y, point.y),
                width=abs(point.x - anchor.x),
                height=abs(point.y - anchor.y),
            )
        elif self._state == InteractionState.DRAGGING and self._dragging_id is not None:
            base = self._drag_candidate or self._store.get(self._dragging_id)
            if base is None:
                return
            self._drag_candidate = base.moved_to(
                point.x - self._drag_offset.x, point.y - self._drag_offset.y
            )

    def pointer_up(self, point: Optional[Point] = None) -> Optional[Region]:
        """Завершает жест. Возвращает созданную или перемещённую область, если она записана."""
        if point is not None:
            self.pointer_move(point)

        committed: Optional[Region] = None
        if self._state == InteractionState.DRAWING:
            committed = self._commit_preview()
            self._state = InteractionState.IDLE
        elif self._state == InteractionState.DRAGGING:
            if self._drag_candidate is not None:
                committed = self._drag_candidate
                self._store.update(committed)
            self._state = InteractionState.IDLE
        self._clear_gesture()
        return committed

    def pointer_leave(self) -> Optional[Region]:
        # leaving the surface finalizes the gesture, there is no cancel path
        return self.pointer_up()

    # ---- Helpers ----
    def _commit_preview(self) -> Optional[Region]:
        preview = self._preview
        threshold = self._settings.min_region_size
        if preview is None or preview.width <= threshold or preview.height <= threshold:
            return None
        region = Region(
            id=self._store.next_id("manual"),
            x=preview.x,
            y=preview.y,
            width=preview.width,
            height=preview.height,
            is_auto=False,
            effect_type=self._store.effect_type,
            intensity=self._store.intensity,
        )
        self._store.add(region)
        logger.debug("Manual region %s committed: %s", region.id, region)
        return region

    def _clear_gesture(self) -> None:
        self._anchor = None
        self._preview = None
        self._dragging_id = None
        self._drag_offset = Point(0.0, 0.0)
        self._drag_candidate = None
