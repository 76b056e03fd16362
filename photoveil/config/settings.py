"""Настройки приложения.

Все значения задаются в коде; внешних источников конфигурации (переменные
окружения, файлы) нет.
"""
from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from photoveil.models.region import EffectType


@dataclass(frozen=True)
class Settings:
    """Параметры редактора, детектора и экспорта."""

    log_level: str = "INFO"
    product_name: str = "student-privacy-blur"

    # regions
    min_region_size: float = 5.0
    intensity_min: int = 5
    intensity_max: int = 80
    default_intensity: int = 25
    default_effect: EffectType = EffectType.BLUR

    # effect layers
    mosaic_min_cell: int = 2
    intensity_debounce_ms: int = 200

    # face detection
    detection_input_size: int = 512
    detection_score_threshold: float = 0.5
    detection_nms_threshold: float = 0.3
    face_model_path: Path = Path("models/face_detection_yunet_2023mar.onnx")

    def clamp_intensity(self, value: float) -> int:
        """Приводит значение к целому в диапазоне [intensity_min, intensity_max]."""
        return int(max(self.intensity_min, min(self.intensity_max, round(value))))


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()
