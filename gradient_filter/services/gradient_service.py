"""Движок градиентов: свёртка Собеля и величина градиента.

Принципы:
- SRP: чистая функция над изображением в памяти, без ввода-вывода и логов.
- Политика границы задаётся явно (`BoundaryPolicy`), по умолчанию — повтор края.
"""
from __future__ import annotations

from enum import Enum
from typing import Tuple

import numpy as np

from gradient_filter.models.errors import InvalidInputError
from gradient_filter.models.image_model import GradientResult, ImageData

# Классические ядра Собеля (применяются как корреляция, без переворота)
SOBEL_X = np.array([[-1, 0, 1],
                    [-2, 0, 2],
                    [-1, 0, 1]], dtype=np.int64)
SOBEL_Y = np.array([[-1, -2, -1],
                    [0, 0, 0],
                    [1, 2, 1]], dtype=np.int64)
SOBEL_X.setflags(write=False)
SOBEL_Y.setflags(write=False)

MIN_SIDE = 3


class BoundaryPolicy(str, Enum):
    """Значения за пределами сетки для окон, касающихся внешнего кольца.

    - replicate: ближайший отсчёт сетки (координаты зажимаются в [0, w-1] / [0, h-1]);
    - reflect: зеркально, без повторения крайнего отсчёта;
    - zero: нули.
    """
    REPLICATE = "replicate"
    REFLECT = "reflect"
    ZERO = "zero"

    @property
    def pad_mode(self) -> str:
        return {"replicate": "edge", "reflect": "reflect", "zero": "constant"}[self.value]


class GradientService:
    def __init__(self, boundary: BoundaryPolicy | str = BoundaryPolicy.REPLICATE) -> None:
        self.boundary = BoundaryPolicy(boundary)

    def compute(self, image: ImageData) -> GradientResult:
        """Горизонтальный, вертикальный градиенты и их величина.

        Сырые производные считаются один раз на пиксель и переиспользуются
        для всех трёх выходов; величина берётся из сырых (до зажима) значений:
            hedge   = clamp(|Gx|, 0, max)
            vedge   = clamp(|Gy|, 0, max)
            magedge = clamp(round(sqrt(Gx^2 + Gy^2)), 0, max)

        Raises:
            InvalidInputError: если ширина или высота меньше 3.
        """
        gx, gy = self.raw_derivatives(image)
        max_value = image.max_sample_value

        horizontal = np.clip(np.abs(gx), 0, max_value)
        vertical = np.clip(np.abs(gy), 0, max_value)
        magnitude = np.clip(np.rint(np.hypot(gx, gy)), 0, max_value).astype(np.int64)

        return GradientResult(
            horizontal=self._wrap(image, horizontal),
            vertical=self._wrap(image, vertical),
            magnitude=self._wrap(image, magnitude),
        )

    def raw_derivatives(self, image: ImageData) -> Tuple[np.ndarray, np.ndarray]:
        """Знаковые производные Gx, Gy (int64) той же формы, что и изображение."""
        if image.width < MIN_SIDE or image.height < MIN_SIDE:
            raise InvalidInputError(
                f"Изображение {image.width}x{image.height} меньше {MIN_SIDE}x{MIN_SIDE}: ядро не центрируется"
            )

        arr = image.samples.astype(np.int64)
        p = np.pad(arr, ((1, 1), (1, 1)), mode=self.boundary.pad_mode)

        # векторизованная свёртка через сдвиги: сумма по ненулевым весам ядра
        gx = np.zeros_like(arr)
        gy = np.zeros_like(arr)
        h, w = arr.shape
        for dy in range(3):
            for dx in range(3):
                window = p[dy:dy + h, dx:dx + w]
                if SOBEL_X[dy, dx]:
                    gx += SOBEL_X[dy, dx] * window
                if SOBEL_Y[dy, dx]:
                    gy += SOBEL_Y[dy, dx] * window
        return gx, gy

    def _wrap(self, source: ImageData, values: np.ndarray) -> ImageData:
        return ImageData(width=source.width, height=source.height,
                         max_sample_value=source.max_sample_value, samples=values)
