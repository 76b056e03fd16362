"""Загрузка изображений и кодирование результата в PNG.

Принципы:
- SRP: класс отвечает только за декодирование/кодирование и базовые свойства.
- OCP: новые источники (стрим, URL) можно добавить отдельными методами.
"""
from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Optional

from PIL import Image, UnidentifiedImageError

from photoveil.models.image_model import ImageData

logger = logging.getLogger(__name__)


class ImageService:
    def load_image(self, file_path: str | Path) -> ImageData:
        """Загружает изображение с диска и возвращает его вместе с метаданными.

        Args:
            file_path: Путь до файла изображения.

        Returns:
            `ImageData` c `PIL.Image.Image` (в режиме RGBA), размерами, режимом и размером файла.

        Raises:
            FileNotFoundError: если путь не существует или не указывает на файл.
            ValueError: если файл не распознан как изображение.
        """
        path = Path(file_path)
        if not path.exists() or not path.is_file():
            raise FileNotFoundError(f"Файл не найден: {path}")

        image_data = self.decode(path.read_bytes(), path=path)
        logger.info("Loaded %s (%sx%s)", path.name, image_data.width, image_data.height)
        return image_data

    def decode(self, data: bytes, path: Optional[Path] = None) -> ImageData:
        """Декодирует байты файла в `ImageData` (RGBA).

        Raises:
            ValueError: если данные не распознаны как изображение.
        """
        try:
            with Image.open(io.BytesIO(data)) as src:
                pil_image = src.convert("RGBA")
        except UnidentifiedImageError as exc:
            name = path if path is not None else "<bytes>"
            raise ValueError(f"Файл не является изображением: {name}") from exc

        width, height = pil_image.size
        return ImageData(
            pil_image=pil_image,
            width=width,
            height=height,
            mode=pil_image.mode,
            path=path,
            size_bytes=len(data),
        )

    def encode_png(self, image: Image.Image) -> bytes:
        """Кодирует изображение в PNG и возвращает байты."""
        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
        return buffer.getvalue()
