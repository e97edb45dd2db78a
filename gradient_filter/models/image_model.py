"""Модели данных для изображений.

Принципы:
- SRP: только структура данных и проверка инвариантов, без логики обработки.
- Чистый код: неизменяемость (`frozen=True`, read-only массив) для предсказуемости.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Sequence, Tuple

import numpy as np

from gradient_filter.models.errors import ImageConstructionError

MAX_SAMPLE_LIMIT = 65535


@dataclass(frozen=True, eq=False)
class ImageData:
    """Неизменяемое полутоновое изображение.

    Fields:
        width: Ширина, px.
        height: Высота, px.
        max_sample_value: Максимальное значение отсчёта (обычно 255).
        samples: Массив формы (height, width), построчно; только для чтения.

    Raises:
        ImageConstructionError: если размеры, форма или диапазон отсчётов неверны.
    """
    width: int
    height: int
    max_sample_value: int
    samples: np.ndarray

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ImageConstructionError(f"Размеры должны быть положительными: {self.width}x{self.height}")
        if not 1 <= self.max_sample_value <= MAX_SAMPLE_LIMIT:
            raise ImageConstructionError(f"max_sample_value вне [1, {MAX_SAMPLE_LIMIT}]: {self.max_sample_value}")

        arr = np.asarray(self.samples)
        if arr.shape != (self.height, self.width):
            raise ImageConstructionError(
                f"Форма отсчётов {arr.shape} не совпадает с {self.height}x{self.width}"
            )
        if arr.dtype.kind not in "iu":
            raise ImageConstructionError(f"Отсчёты должны быть целыми, получено {arr.dtype}")
        if arr.size and (int(arr.min()) < 0 or int(arr.max()) > self.max_sample_value):
            raise ImageConstructionError(f"Отсчёты вне диапазона [0, {self.max_sample_value}]")

        # собственная копия: вызывающий код не сможет изменить пиксели задним числом
        owned = arr.astype(self.sample_dtype(self.max_sample_value), copy=True)
        owned.setflags(write=False)
        object.__setattr__(self, "samples", owned)

    @staticmethod
    def sample_dtype(max_sample_value: int) -> np.dtype:
        return np.dtype(np.uint8) if max_sample_value <= 255 else np.dtype(np.uint16)

    @classmethod
    def from_sequence(cls, width: int, height: int, max_sample_value: int, samples: Sequence[int]) -> "ImageData":
        """Строит изображение из плоской последовательности отсчётов (row-major)."""
        flat = np.asarray(samples, dtype=np.int64)
        if flat.ndim != 1 or flat.size != width * height:
            raise ImageConstructionError(
                f"Ожидалось {width * height} отсчётов, получено {flat.size}"
            )
        return cls(width=width, height=height, max_sample_value=max_sample_value,
                   samples=flat.reshape(height, width))

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    def flat(self) -> np.ndarray:
        return self.samples.reshape(-1)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ImageData):
            return NotImplemented
        return (
            self.size == other.size
            and self.max_sample_value == other.max_sample_value
            and np.array_equal(self.samples, other.samples)
        )


@dataclass(frozen=True)
class GradientResult:
    """Тройка выходов движка градиентов.

    Все три изображения имеют ширину, высоту и `max_sample_value` исходника.
    """
    horizontal: ImageData
    vertical: ImageData
    magnitude: ImageData

    SUFFIXES = ("hedge", "vedge", "magedge")

    def __iter__(self) -> Iterator[Tuple[str, ImageData]]:
        return iter(zip(self.SUFFIXES, (self.horizontal, self.vertical, self.magnitude)))
