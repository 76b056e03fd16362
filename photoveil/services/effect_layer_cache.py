"""Кэш слоёв эффектов: размытая и мозаичная копии всего изображения.

Слои пересчитываются только при смене изображения или интенсивности; при
перетаскивании и рисовании областей используется уже готовый результат.
Слои никогда не изменяются на месте: новое значение `EffectLayers`
подменяет старое целиком.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Dict, Optional

from PIL import Image

from photoveil.models.region import EffectType
from photoveil.services.effects import Effect, build_effects

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EffectLayers:
    """Готовые слои для одной пары (изображение, интенсивность)."""
    blur: Image.Image
    mosaic: Image.Image
    intensity: int

    def for_effect(self, effect_type: EffectType) -> Image.Image:
        if effect_type == EffectType.MOSAIC:
            return self.mosaic
        return self.blur


class EffectLayerCache:
    def __init__(self, effects: Optional[Dict[EffectType, Effect]] = None) -> None:
        self._effects = effects if effects is not None else build_effects()
        self._source: Optional[Image.Image] = None
        self._layers: Optional[EffectLayers] = None
        self.recompute_count: int = 0

    @property
    def layers(self) -> Optional[EffectLayers]:
        return self._layers

    def refresh(self, image: Image.Image, intensity: int) -> bool:
        """Пересчитывает оба слоя, если изменилось изображение или интенсивность.

        Returns:
            True, если слои были пересчитаны.
        """
        if (
            self._layers is not None
            and self._source is image
            and self._layers.intensity == intensity
        ):
            return False

        started = time.perf_counter()
        layers = EffectLayers(
            blur=self._effects[EffectType.BLUR].apply(image, intensity),
            mosaic=self._effects[EffectType.MOSAIC].apply(image, intensity),
            intensity=intensity,
        )
        # swap references only after both layers are ready
        self._source = image
        self._layers = layers
        self.recompute_count += 1
        logger.debug(
            "Effect layers recomputed for %sx%s at intensity %s in %.1f ms",
            image.width, image.height, intensity, (time.perf_counter() - started) * 1000,
        )
        return True

    def invalidate(self) -> None:
        self._source = None
        self._layers = None
