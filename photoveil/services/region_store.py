"""Хранилище скрываемых областей и параметров эффекта по умолчанию.

Принципы:
- SRP: только данные и их изменение; отрисовка и жесты живут в других модулях.
- Порядок вставки сохраняется: он определяет порядок отрисовки и списка.
"""
from __future__ import annotations

import itertools
import logging
from dataclasses import replace
from typing import Callable, Iterable, List, Optional, Tuple

from photoveil.config.settings import Settings
from photoveil.models.region import EffectType, Region

logger = logging.getLogger(__name__)


class RegionStore:
    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._regions: List[Region] = []
        self._effect_type: EffectType = settings.default_effect
        self._intensity: int = settings.clamp_intensity(settings.default_intensity)
        self._ids = itertools.count(1)

        self.on_change: Optional[Callable[[], None]] = None

    # ---- Reading ----
    @property
    def regions(self) -> Tuple[Region, ...]:
        return tuple(self._regions)

    @property
    def effect_type(self) -> EffectType:
        return self._effect_type

    @property
    def intensity(self) -> int:
        return self._intensity

    def __len__(self) -> int:
        return len(self._regions)

    def get(self, region_id: str) -> Optional[Region]:
        for region in self._regions:
            if region.id == region_id:
                return region
        return None

    def next_id(self, prefix: str) -> str:
        """Возвращает новый идентификатор; счётчик не сбрасывается, id не повторяются."""
        return f"{prefix}-{next(self._ids)}"

    # ---- Mutations ----
    def add(self, region: Region) -> None:
        if region.is_degenerate:
            return
        if self.get(region.id) is not None:
            logger.warning("Region id %s already present, ignoring add", region.id)
            return
        self._regions.append(region)
        self._emit_change()

    def remove(self, region_id: str) -> None:
        before = len(self._regions)
        self._regions = [r for r in self._regions if r.id != region_id]
        if len(self._regions) != before:
            self._emit_change()

    def update(self, region: Region) -> None:
        """Полная замена области с тем же `id` (не частичное обновление)."""
        for index, current in enumerate(self._regions):
            if current.id == region.id:
                if region.is_degenerate:
                    return
                self._regions[index] = region
                self._emit_change()
                return

    def replace_all(self, regions: Iterable[Region]) -> None:
        """Заменяет весь список (результат детекции). Вырожденные области отбрасываются."""
        fresh: List[Region] = []
        seen = set()
        for region in regions:
            if region.is_degenerate or region.id in seen:
                continue
            seen.add(region.id)
            fresh.append(region)
        self._regions = fresh
        self._emit_change()

    def clear(self) -> None:
        if not self._regions:
            return
        self._regions = []
        self._emit_change()

    def set_effect_type(self, effect_type: EffectType) -> None:
        """Меняет эффект по умолчанию и перезаписывает его у всех существующих областей."""
        self._effect_type = EffectType(effect_type)
        self._regions = [replace(r, effect_type=self._effect_type) for r in self._regions]
        self._emit_change()

    def set_intensity(self, value: float) -> None:
        """Меняет интенсивность только для новых областей; существующие сохраняют свою."""
        self._intensity = self._settings.clamp_intensity(value)

    # ---- Helpers ----
    def _emit_change(self) -> None:
        if self.on_change:
            self.on_change()
