"""Преобразование координат между пикселями изображения и экраном.

Экранная область изображения меняется при зуме и изменении размера окна,
поэтому прямоугольники запрашиваются у провайдеров при каждом вызове и не
кэшируются.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Tuple

from photoveil.models.region import Point


@dataclass(frozen=True)
class Box:
    """Прямоугольник на экране: положение и отображаемый размер."""
    left: float
    top: float
    width: float
    height: float


BoxProvider = Callable[[], Box]


class CoordinateMapper:
    """Переводит точки экрана в координаты изображения и обратно.

    Args:
        intrinsic_size: Собственный размер изображения (ширина, высота), px.
        canvas_box: Провайдер прямоугольника, в котором отображается изображение.
        overlay_box: Провайдер прямоугольника слоя, на котором размещаются маркеры.
    """
    def __init__(
        self,
        intrinsic_size: Tuple[int, int],
        canvas_box: BoxProvider,
        overlay_box: BoxProvider,
    ) -> None:
        self._intrinsic_w, self._intrinsic_h = intrinsic_size
        self._canvas_box = canvas_box
        self._overlay_box = overlay_box

    def to_image(self, screen_x: float, screen_y: float) -> Point:
        box = self._canvas_box()
        scale_x = self._intrinsic_w / max(box.width, 1e-9)
        scale_y = self._intrinsic_h / max(box.height, 1e-9)
        return Point((screen_x - box.left) * scale_x, (screen_y - box.top) * scale_y)

    def to_overlay(self, image_x: float, image_y: float) -> Point:
        """Координаты точки изображения относительно слоя маркеров."""
        box = self._canvas_box()
        overlay = self._overlay_box()
        scale_x = box.width / self._intrinsic_w
        scale_y = box.height / self._intrinsic_h
        return Point(
            image_x * scale_x + (box.left - overlay.left),
            image_y * scale_y + (box.top - overlay.top),
        )

    def to_screen(self, image_x: float, image_y: float) -> Point:
        """Координаты точки изображения в той же системе, что и события указателя."""
        local = self.to_overlay(image_x, image_y)
        overlay = self._overlay_box()
        return Point(local.x + overlay.left, local.y + overlay.top)

    def size_to_overlay(self, width: float, height: float) -> Tuple[float, float]:
        box = self._canvas_box()
        return width * box.width / self._intrinsic_w, height * box.height / self._intrinsic_h
