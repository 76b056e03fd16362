"""Модели данных для скрываемых областей.

Принципы:
- SRP: только структура данных и простые геометрические вычисления.
- Чистый код: неизменяемость (`frozen=True`), изменения через `dataclasses.replace`.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Tuple


class EffectType(str, Enum):
    """Способ скрытия области."""
    BLUR = "blur"
    MOSAIC = "mosaic"


@dataclass(frozen=True)
class Point:
    """Точка в координатах изображения или экрана (зависит от контекста)."""
    x: float
    y: float


@dataclass(frozen=True)
class Region:
    """Эллиптическая область, вписанная в прямоугольник.

    Fields:
        id: Уникальный идентификатор (не переиспользуется после удаления).
        x, y: Левый верхний угол в собственных пикселях изображения.
        width, height: Размер, px (> 0 для областей в хранилище).
        is_auto: True, если область найдена детектором лиц.
        effect_type: Эффект, применяемый к области.
        intensity: Радиус размытия или размер ячейки мозаики, px.
    """
    id: str
    x: float
    y: float
    width: float
    height: float
    is_auto: bool
    effect_type: EffectType
    intensity: int

    @property
    def is_degenerate(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def contains(self, point: Point) -> bool:
        """Попадание точки в ограничивающий прямоугольник (для hit-test)."""
        return (
            self.x <= point.x <= self.x + self.width
            and self.y <= point.y <= self.y + self.height
        )

    def moved_to(self, x: float, y: float) -> "Region":
        return replace(self, x=x, y=y)

    def pixel_box(self) -> Tuple[int, int, int, int]:
        """Прямоугольник (left, top, right, bottom), округлённый до пикселей."""
        left = int(round(self.x))
        top = int(round(self.y))
        return left, top, left + int(round(self.width)), top + int(round(self.height))
