"""Обнаружение лиц через OpenCV YuNet.

Ядро редактора знает детектор только как `FaceDetector`: изображение на
входе, список прямоугольников в собственных пикселях изображения на выходе.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Protocol

import cv2
import numpy as np
from PIL import Image

from photoveil.models.errors import DetectionError, DetectorUnavailableError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DetectedBox:
    x: float
    y: float
    width: float
    height: float
    score: float = 1.0


class FaceDetector(Protocol):
    def detect(self, image: Image.Image) -> List[DetectedBox]:
        ...


class YuNetFaceDetector:
    """Детектор на базе `cv2.FaceDetectorYN`.

    Изображение масштабируется так, чтобы длинная сторона равнялась
    `input_size`; найденные рамки пересчитываются обратно в пиксели оригинала.

    Raises:
        DetectorUnavailableError: если файл модели отсутствует или не загрузился.
    """
    def __init__(
        self,
        model_path: str | Path,
        input_size: int = 512,
        score_threshold: float = 0.5,
        nms_threshold: float = 0.3,
        top_k: int = 5000,
    ) -> None:
        path = Path(model_path)
        if not path.is_file():
            raise DetectorUnavailableError(f"Модель детектора не найдена: {path}")
        try:
            self._detector = cv2.FaceDetectorYN.create(
                str(path),
                "",
                (input_size, input_size),
                score_threshold,
                nms_threshold,
                top_k,
            )
        except cv2.error as exc:
            raise DetectorUnavailableError(f"Не удалось загрузить модель {path}: {exc}") from exc
        self._input_size = input_size
        logger.info("Face detector loaded from %s", path)

    def detect(self, image: Image.Image) -> List[DetectedBox]:
        w, h = image.size
        if w == 0 or h == 0:
            return []
        scale = self._input_size / max(w, h)
        det_w = max(1, int(round(w * scale)))
        det_h = max(1, int(round(h * scale)))

        try:
            # RGB(A) -> BGR for OpenCV
            bgr = cv2.cvtColor(np.asarray(image.convert("RGB")), cv2.COLOR_RGB2BGR)
            resized = cv2.resize(bgr, (det_w, det_h), interpolation=cv2.INTER_AREA)
            self._detector.setInputSize((det_w, det_h))
            _, faces = self._detector.detect(resized)
        except cv2.error as exc:
            raise DetectionError(f"Ошибка детектора: {exc}") from exc

        if faces is None:
            return []
        boxes: List[DetectedBox] = []
        for row in faces:
            x, y, bw, bh = (float(v) / scale for v in row[:4])
            boxes.append(DetectedBox(x=x, y=y, width=bw, height=bh, score=float(row[-1])))
        return boxes
