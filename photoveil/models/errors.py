"""Исключения предметной области."""
from __future__ import annotations


class PhotoVeilError(Exception):
    """Базовое исключение приложения."""


class DetectorUnavailableError(PhotoVeilError):
    """Модель детектора лиц не найдена или не инициализировалась."""


class DetectionError(PhotoVeilError):
    """Сбой отдельного вызова детектора."""
