"""Тесты компоновщика."""

from __future__ import annotations

import pytest
from PIL import Image

from photoveil.models.region import EffectType, Region
from photoveil.services.compositor import Compositor, ellipse_mask
from photoveil.services.effect_layer_cache import EffectLayerCache, EffectLayers


@pytest.fixture
def layers(checker: Image.Image) -> EffectLayers:
    cache = EffectLayerCache()
    cache.refresh(checker, 10)
    return cache.layers


def _region(region_id: str, x: float, y: float, w: float, h: float, effect: EffectType) -> Region:
    return Region(region_id, x, y, w, h, False, effect, 10)


def test_ellipse_mask_is_inscribed() -> None:
    mask = ellipse_mask(20, 10)

    assert mask.size == (20, 10)
    assert mask.getpixel((10, 5)) == 255
    assert mask.getpixel((0, 0)) == 0
    assert mask.getpixel((19, 9)) == 0


def test_render_without_regions_returns_base_copy(checker: Image.Image, layers: EffectLayers) -> None:
    out = Compositor().render(checker, [], layers)

    assert out is not checker
    assert out.tobytes() == checker.tobytes()


def test_region_paints_effect_inside_ellipse_only(checker: Image.Image, layers: EffectLayers) -> None:
    region = _region("a", 10, 10, 20, 20, EffectType.BLUR)

    out = Compositor().render(checker, [region], layers)

    assert out.getpixel((20, 20)) == layers.blur.getpixel((20, 20))
    assert out.getpixel((20, 20)) != checker.getpixel((20, 20))
    # bounding box corner lies outside the ellipse
    assert out.getpixel((10, 10)) == checker.getpixel((10, 10))
    assert out.getpixel((40, 40)) == checker.getpixel((40, 40))


def test_mosaic_region_uses_mosaic_layer(checker: Image.Image, layers: EffectLayers) -> None:
    region = _region("a", 10, 10, 20, 20, EffectType.MOSAIC)

    out = Compositor().render(checker, [region], layers)

    assert out.getpixel((20, 20)) == layers.mosaic.getpixel((20, 20))


def test_region_partially_outside_is_clipped(checker: Image.Image, layers: EffectLayers) -> None:
    region = _region("a", -10, -10, 30, 30, EffectType.BLUR)

    out = Compositor().render(checker, [region], layers)

    assert out.size == checker.size
    assert out.getpixel((5, 5)) == layers.blur.getpixel((5, 5))


def test_later_regions_paint_over_earlier(checker: Image.Image, layers: EffectLayers) -> None:
    first = _region("a", 10, 10, 20, 20, EffectType.BLUR)
    second = _region("b", 10, 10, 20, 20, EffectType.MOSAIC)

    out = Compositor().render(checker, [first, second], layers)

    assert out.getpixel((20, 20)) == layers.mosaic.getpixel((20, 20))


def test_render_does_not_touch_inputs(checker: Image.Image, layers: EffectLayers) -> None:
    before = checker.tobytes()

    Compositor().render(checker, [_region("a", 0, 0, 30, 30, EffectType.BLUR)], layers)

    assert checker.tobytes() == before
