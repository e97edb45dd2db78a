"""Сравнение двух растров с допуском, отдельно для внутренней области и рамки."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from gradient_filter.models.image_model import ImageData


@dataclass(frozen=True)
class Mismatch:
    x: int
    y: int
    actual: int
    expected: int


def border_mask(width: int, height: int, border: int) -> np.ndarray:
    """Булева маска пикселей на расстоянии меньше `border` от любого края."""
    ys, xs = np.mgrid[0:height, 0:width]
    return (xs < border) | (ys < border) | (xs >= width - border) | (ys >= height - border)


def compare_with_tolerance(
    actual: ImageData,
    expected: ImageData,
    inner_tol: int = 1,
    edge_tol: int = -1,
    border: int = 3,
) -> Optional[Mismatch]:
    """Первое (в порядке строк) расхождение больше допуска или `None`.

    Отрицательный `edge_tol` означает, что рамка шириной `border` не сравнивается.

    Raises:
        ValueError: если размеры изображений различаются.
    """
    if actual.size != expected.size:
        raise ValueError(f"Размеры различаются: {actual.size} и {expected.size}")

    a = actual.samples.astype(np.int64)
    b = expected.samples.astype(np.int64)
    edge = border_mask(actual.width, actual.height, border)

    tol = np.where(edge, edge_tol, inner_tol)
    bad = np.abs(a - b) > tol
    if edge_tol < 0:
        bad &= ~edge

    hits = np.flatnonzero(bad)
    if hits.size == 0:
        return None
    y, x = divmod(int(hits[0]), actual.width)
    return Mismatch(x=x, y=y, actual=int(a[y, x]), expected=int(b[y, x]))
