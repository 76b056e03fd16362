"""Эффекты скрытия: размытие и мозаика.

Каждый вариант `EffectType` сопоставлен объекту с единым методом
`apply(image, intensity)`, который обрабатывает изображение целиком.
"""
from __future__ import annotations

import math
from typing import Dict, Protocol

from PIL import Image, ImageFilter

from photoveil.models.region import EffectType


class Effect(Protocol):
    def apply(self, image: Image.Image, intensity: float) -> Image.Image:
        ...


class BlurEffect:
    def apply(self, image: Image.Image, intensity: float) -> Image.Image:
        """
        Равномерное гауссово размытие всего изображения, радиус = intensity.
        """
        return image.filter(ImageFilter.GaussianBlur(radius=float(intensity)))


class MosaicEffect:
    def __init__(self, min_cell: int = 2) -> None:
        self._min_cell = min_cell

    def apply(self, image: Image.Image, intensity: float) -> Image.Image:
        """
        Мозаика: уменьшение до ceil(W/c) x ceil(H/c) с усреднением по площади,
        затем увеличение обратно до W x H без сглаживания (ближайший сосед).
        """
        cell = max(self._min_cell, float(intensity))
        w, h = image.size
        small_w = max(1, math.ceil(w / cell))
        small_h = max(1, math.ceil(h / cell))
        small = image.resize((small_w, small_h), Image.Resampling.BOX)
        return small.resize((w, h), Image.Resampling.NEAREST)


def build_effects(mosaic_min_cell: int = 2) -> Dict[EffectType, Effect]:
    return {
        EffectType.BLUR: BlurEffect(),
        EffectType.MOSAIC: MosaicEffect(min_cell=mosaic_min_cell),
    }
