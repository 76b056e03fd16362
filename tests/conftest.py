"""Общие фикстуры: настройки, синтетические изображения, управляемые часы."""

from __future__ import annotations

from typing import List

import numpy as np
import pytest
from PIL import Image

from photoveil.config.settings import Settings
from photoveil.controllers.session import EditorSession
from photoveil.models.errors import DetectionError
from photoveil.models.image_model import ImageData
from photoveil.services.detection_service import DetectedBox


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeDetector:
    def __init__(self, boxes: List[DetectedBox]) -> None:
        self.boxes = boxes
        self.calls = 0

    def detect(self, image: Image.Image) -> List[DetectedBox]:
        self.calls += 1
        return list(self.boxes)


class FailingDetector:
    def detect(self, image: Image.Image) -> List[DetectedBox]:
        raise DetectionError("model crashed")


class CrashingDetector:
    """Детектор, падающий с непредусмотренным исключением (не `DetectionError`)."""

    def detect(self, image: Image.Image) -> List[DetectedBox]:
        raise RuntimeError("onnx runtime exploded")


def make_checker(width: int = 64, height: int = 48, cell: int = 4) -> Image.Image:
    ys, xs = np.mgrid[0:height, 0:width]
    value = (((xs // cell) + (ys // cell)) % 2 * 255).astype(np.uint8)
    arr = np.stack([value, value, value, np.full_like(value, 255)], axis=-1)
    return Image.fromarray(arr, mode="RGBA")


def make_image_data(width: int = 64, height: int = 48) -> ImageData:
    image = make_checker(width, height)
    return ImageData(pil_image=image, width=width, height=height, mode=image.mode)


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def checker() -> Image.Image:
    return make_checker()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def session(settings: Settings, clock: FakeClock) -> EditorSession:
    editor = EditorSession(settings, clock=clock)
    editor.load_image(make_image_data())
    return editor
