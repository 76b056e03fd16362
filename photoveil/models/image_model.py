"""Модели данных для изображений.

Принципы:
- SRP: только структура данных, без логики обработки.
- Чистый код: неизменяемость (`frozen=True`) для предсказуемости.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from PIL import Image


@dataclass(frozen=True)
class ImageData:
    """Неизменяемая модель изображения и его метаданные.

    Fields:
        pil_image: Декодированное изображение PIL (RGBA).
        width: Собственная ширина, px.
        height: Собственная высота, px.
        mode: Режим PIL, например "RGBA".
        path: Путь к исходному файлу, если изображение загружено с диска.
        size_bytes: Размер исходных данных, если доступен.
    """
    pil_image: Image.Image
    width: int
    height: int
    mode: str
    path: Optional[Path] = None
    size_bytes: Optional[int] = None

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height


_SIZE_UNITS = ("Б", "КБ", "МБ", "ГБ")


def format_size_bytes(size_bytes: Optional[int]) -> str:
    """Человекочитаемый объём файла: "512 Б", "1.5 КБ", "3.0 МБ"; "—", если неизвестен."""
    if size_bytes is None:
        return "—"
    value = float(size_bytes)
    for unit in _SIZE_UNITS:
        if value < 1024 or unit == _SIZE_UNITS[-1]:
            break
        value /= 1024
    if unit == _SIZE_UNITS[0]:
        return f"{size_bytes} {unit}"
    return f"{value:.1f} {unit}"
