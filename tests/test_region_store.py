"""Тесты хранилища областей."""

from __future__ import annotations

from photoveil.config.settings import Settings
from photoveil.models.region import EffectType, Region
from photoveil.services.region_store import RegionStore


def _region(store: RegionStore, x: float = 0, y: float = 0, w: float = 10, h: float = 10) -> Region:
    return Region(
        id=store.next_id("manual"),
        x=x,
        y=y,
        width=w,
        height=h,
        is_auto=False,
        effect_type=store.effect_type,
        intensity=store.intensity,
    )


def test_add_keeps_insertion_order(settings: Settings) -> None:
    store = RegionStore(settings)
    first, second = _region(store), _region(store, x=20)

    store.add(first)
    store.add(second)

    assert [r.id for r in store.regions] == [first.id, second.id]


def test_add_ignores_degenerate_regions(settings: Settings) -> None:
    store = RegionStore(settings)

    store.add(_region(store, w=0))
    store.add(_region(store, h=-3))

    assert len(store) == 0


def test_remove_and_update_are_noops_for_unknown_ids(settings: Settings) -> None:
    store = RegionStore(settings)
    region = _region(store)
    store.add(region)

    store.remove("missing")
    store.update(Region("missing", 1, 1, 5, 5, False, EffectType.BLUR, 10))

    assert store.regions == (region,)


def test_update_replaces_whole_region(settings: Settings) -> None:
    store = RegionStore(settings)
    region = _region(store)
    store.add(region)

    moved = region.moved_to(30, 40)
    store.update(moved)

    assert store.get(region.id) == moved


def test_ids_are_never_reused(settings: Settings) -> None:
    store = RegionStore(settings)
    region = _region(store)
    store.add(region)
    store.remove(region.id)

    again = _region(store)

    assert again.id != region.id


def test_set_effect_type_is_retroactive_and_idempotent(settings: Settings) -> None:
    store = RegionStore(settings)
    store.add(_region(store))
    store.add(_region(store, x=30))

    store.set_effect_type(EffectType.MOSAIC)
    store.set_effect_type(EffectType.MOSAIC)

    assert store.effect_type == EffectType.MOSAIC
    assert all(r.effect_type == EffectType.MOSAIC for r in store.regions)


def test_set_intensity_is_not_retroactive(settings: Settings) -> None:
    store = RegionStore(settings)
    old = _region(store)
    store.add(old)

    store.set_intensity(60)
    new = _region(store, x=30)
    store.add(new)

    assert store.get(old.id).intensity == settings.default_intensity
    assert store.get(new.id).intensity == 60


def test_set_intensity_clamps_to_range(settings: Settings) -> None:
    store = RegionStore(settings)

    store.set_intensity(500)
    assert store.intensity == settings.intensity_max

    store.set_intensity(1)
    assert store.intensity == settings.intensity_min


def test_replace_all_drops_degenerate_and_notifies(settings: Settings) -> None:
    store = RegionStore(settings)
    store.add(_region(store))
    calls = []
    store.on_change = lambda: calls.append(len(store))

    store.replace_all([_region(store, x=5), _region(store, w=0)])

    assert len(store) == 1
    assert calls == [1]
