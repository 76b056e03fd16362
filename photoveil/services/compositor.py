"""Сборка итогового изображения: основа + эллиптические вставки из слоёв эффектов.

Принципы:
- SRP: только композиция; слои готовит `EffectLayerCache`.
- Исходное изображение не мутируется, результат всегда новый объект.
"""
from __future__ import annotations

from typing import Iterable, Optional

from PIL import Image, ImageDraw

from photoveil.models.region import Region
from photoveil.services.effect_layer_cache import EffectLayers


def ellipse_mask(width: int, height: int) -> Image.Image:
    """
    8-битная маска (L) размером width x height с вписанным белым эллипсом.
    """
    mask = Image.new("L", (width, height), 0)
    ImageDraw.Draw(mask).ellipse((0, 0, width - 1, height - 1), fill=255)
    return mask


class Compositor:
    def render(
        self,
        base: Image.Image,
        regions: Iterable[Region],
        layers: Optional[EffectLayers],
    ) -> Image.Image:
        """Рисует основу без масштабирования и по очереди вставляет области.

        Для каждой области берётся тот же прямоугольник из нужного слоя и
        вставляется через эллиптическую маску. Области рисуются в порядке
        хранилища; части за пределами изображения отсекаются.
        """
        out = base.copy()
        if layers is None:
            return out

        for region in regions:
            left, top, right, bottom = region.pixel_box()
            width, height = right - left, bottom - top
            if width <= 0 or height <= 0:
                continue
            patch = layers.for_effect(region.effect_type).crop((left, top, right, bottom))
            out.paste(patch, (left, top), ellipse_mask(width, height))
        return out
