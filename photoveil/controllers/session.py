"""Состояние сеанса редактирования.

Сеанс владеет изображением, хранилищем областей, кэшем слоёв, компоновщиком,
машиной жестов и отложенной интенсивностью. UI общается только с сеансом и
получает уведомления через колбэки `on_*`.

Принципы:
- SRP: оркестрация компонентов ядра без зависимостей от Tk.
- Все изменения синхронны; единственная асинхронная операция (детекция)
  разбита на `begin_detection` / `finish_detection` / `fail_detection`.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from PIL import Image

from photoveil.config.settings import Settings
from photoveil.controllers.debounce import DebouncedValue
from photoveil.controllers.interaction import (
    InteractionState,
    InteractionStateMachine,
    PointerTarget,
    Preview,
)
from photoveil.models.image_model import ImageData
from photoveil.models.region import EffectType, Point, Region
from photoveil.services.compositor import Compositor
from photoveil.services.detection_service import DetectedBox, FaceDetector
from photoveil.services.effect_layer_cache import EffectLayerCache
from photoveil.services.effects import build_effects
from photoveil.services.image_service import ImageService
from photoveil.services.region_store import RegionStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExportArtifact:
    filename: str
    data: bytes


class EditorSession:
    def __init__(
        self,
        settings: Settings,
        image_service: Optional[ImageService] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.settings = settings
        self._image_service = image_service or ImageService()
        self._image: Optional[ImageData] = None
        self._composite: Optional[Image.Image] = None

        self.store = RegionStore(settings)
        self.cache = EffectLayerCache(build_effects(settings.mosaic_min_cell))
        self.compositor = Compositor()
        self.interaction = InteractionStateMachine(self.store, settings)
        self.intensity = DebouncedValue(
            self.store.intensity,
            quiet_period=settings.intensity_debounce_ms / 1000.0,
            on_commit=self._commit_intensity,
            clock=clock,
        )

        self._busy = False
        self._export_confirmed = False

        # callbacks
        self.on_composite_change: Optional[Callable[[Image.Image], None]] = None
        self.on_regions_change: Optional[Callable[[Tuple[Region, ...]], None]] = None
        self.on_busy_change: Optional[Callable[[bool], None]] = None

        self.store.on_change = self._handle_store_change

    # ---- Reading ----
    @property
    def has_image(self) -> bool:
        return self._image is not None

    @property
    def image(self) -> Optional[ImageData]:
        return self._image

    @property
    def composite(self) -> Optional[Image.Image]:
        return self._composite

    @property
    def regions(self) -> Tuple[Region, ...]:
        return self.store.regions

    @property
    def effect_type(self) -> EffectType:
        return self.store.effect_type

    @property
    def proposed_intensity(self) -> int:
        return self.intensity.proposed

    @property
    def is_busy(self) -> bool:
        return self._busy

    @property
    def export_confirmed(self) -> bool:
        return self._export_confirmed

    @property
    def preview(self) -> Optional[Preview]:
        return self.interaction.preview

    @property
    def drag_candidate(self) -> Optional[Region]:
        return self.interaction.drag_candidate

    # ---- Image lifecycle ----
    def load_image(self, image_data: ImageData) -> None:
        """Новое изображение: области и слои сбрасываются, композиция пересчитывается."""
        self.reset()
        # pending slider value is committed without an image, so no layer work yet
        self.intensity.flush()
        self._image = image_data
        self.cache.refresh(image_data.pil_image, self.store.intensity)
        self._render()

    def reset(self) -> None:
        """«Выбрать другое фото»: сеанс очищается целиком."""
        self.interaction.reset()
        self._image = None
        self._composite = None
        self._export_confirmed = False
        self.cache.invalidate()
        self.store.clear()

    # ---- Effect parameters ----
    def set_effect_type(self, effect_type: EffectType) -> None:
        self.store.set_effect_type(effect_type)

    def propose_intensity(self, value: float) -> int:
        """Мгновенное обновление интенсивности.

        Новые области сразу получают это значение; пересчёт слоёв откладывается
        до паузы в движении ползунка.
        """
        clamped = self.settings.clamp_intensity(value)
        self.store.set_intensity(clamped)
        self.intensity.propose(clamped)
        return clamped

    def poll_intensity(self) -> bool:
        return self.intensity.poll()

    def flush_intensity(self) -> bool:
        return self.intensity.flush()

    # ---- Detection ----
    def begin_detection(self) -> bool:
        """Переводит сеанс в занятое состояние. False, если детекция уже идёт или нет фото."""
        if self._busy or self._image is None:
            return False
        self.interaction.reset()
        self._set_busy(True)
        logger.info("Face detection started")
        return True

    def finish_detection(
        self, boxes: Sequence[DetectedBox], source: Optional[ImageData] = None
    ) -> None:
        """Полностью заменяет области результатами детекции.

        Если передан `source` и он уже не текущее изображение, результат отбрасывается.
        """
        if not self._busy:
            return
        if source is not None and source is not self._image:
            logger.info("Discarding detection result for a replaced image")
            self._set_busy(False)
            return
        regions: List[Region] = [
            Region(
                id=self.store.next_id("auto"),
                x=box.x,
                y=box.y,
                width=box.width,
                height=box.height,
                is_auto=True,
                effect_type=self.store.effect_type,
                intensity=self.store.intensity,
            )
            for box in boxes
        ]
        logger.info("Face detection found %d face(s)", len(regions))
        self.store.replace_all(regions)
        self._set_busy(False)

    def fail_detection(self, error: BaseException) -> None:
        """Ошибка детекции: хранилище не меняется, занятость снимается."""
        logger.error("Face detection failed: %s", error, exc_info=error)
        self._set_busy(False)

    def detect(self, detector: FaceDetector) -> bool:
        """Синхронный запуск детекции. Возвращает True, если результаты применены."""
        image = self._image
        if image is None or not self.begin_detection():
            return False
        try:
            boxes = detector.detect(image.pil_image)
        except Exception as exc:
            # any detector failure leaves the store untouched
            self.fail_detection(exc)
            return False
        self.finish_detection(boxes, source=image)
        return True

    # ---- Gestures (image coordinates) ----
    def toggle_add_mode(self) -> None:
        if self._busy or self._image is None:
            return
        self.interaction.toggle_add_mode()

    @property
    def add_mode(self) -> bool:
        return self.interaction.add_mode

    @property
    def interaction_state(self) -> InteractionState:
        return self.interaction.state

    def pointer_down(self, point: Point, target: Optional[PointerTarget] = None) -> None:
        if self._busy or self._image is None:
            return
        self.interaction.pointer_down(point, target)

    def pointer_move(self, point: Point) -> None:
        self.interaction.pointer_move(point)

    def pointer_up(self, point: Optional[Point] = None) -> Optional[Region]:
        return self.interaction.pointer_up(point)

    def pointer_leave(self) -> Optional[Region]:
        return self.interaction.pointer_leave()

    def remove_region(self, region_id: str) -> None:
        if self._busy:
            return
        self.store.remove(region_id)

    # ---- Export ----
    def set_export_confirmed(self, confirmed: bool) -> None:
        self._export_confirmed = bool(confirmed)

    def close_export(self) -> None:
        self._export_confirmed = False

    def export_filename(self, now: Optional[float] = None) -> str:
        timestamp = int((time.time() if now is None else now) * 1000)
        return f"{self.settings.product_name}-{timestamp}.png"

    def export(self, now: Optional[float] = None) -> Optional[ExportArtifact]:
        """PNG текущей композиции; только после подтверждения, флаг затем сбрасывается."""
        if not self._export_confirmed or self._composite is None:
            return None
        artifact = ExportArtifact(
            filename=self.export_filename(now),
            data=self._image_service.encode_png(self._composite),
        )
        self._export_confirmed = False
        logger.info("Exported %s (%d bytes)", artifact.filename, len(artifact.data))
        return artifact

    # ---- Internals ----
    def _commit_intensity(self, value: int) -> None:
        if self._image is None:
            return
        if self.cache.refresh(self._image.pil_image, value):
            self._render()

    def _handle_store_change(self) -> None:
        if self.on_regions_change:
            self.on_regions_change(self.store.regions)
        self._render()

    def _render(self) -> None:
        if self._image is None:
            self._composite = None
            return
        self._composite = self.compositor.render(
            self._image.pil_image, self.store.regions, self.cache.layers
        )
        if self.on_composite_change:
            self.on_composite_change(self._composite)

    def _set_busy(self, busy: bool) -> None:
        self._busy = busy
        if self.on_busy_change:
            self.on_busy_change(busy)
