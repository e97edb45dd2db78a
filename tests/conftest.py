from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
from PIL import Image, ImageDraw

from gradient_filter.models.image_model import ImageData
from gradient_filter.services.gradient_service import GradientService
from gradient_filter.services.pgm_service import PgmService

SCENE_WIDTH = 720
SCENE_HEIGHT = 576


def make_image(rows, max_value: int = 255) -> ImageData:
    arr = np.asarray(rows, dtype=np.int64)
    height, width = arr.shape
    return ImageData(width=width, height=height, max_sample_value=max_value, samples=arr)


def random_image(width: int, height: int, max_value: int = 255, seed: int = 0) -> ImageData:
    rng = np.random.default_rng(seed)
    return make_image(rng.integers(0, max_value + 1, size=(height, width)), max_value)


def write_pgm(path: Path, image: ImageData, fmt: str = "P5") -> Path:
    path.write_bytes(PgmService().encode(image, fmt))
    return path


@pytest.fixture
def pgm_service() -> PgmService:
    return PgmService()


@pytest.fixture
def gradient_service() -> GradientService:
    return GradientService()


@pytest.fixture(scope="session")
def scene() -> ImageData:
    """Синтетическая сцена 720x576: фон-градиент, фигуры, линии, шум."""
    base = Image.linear_gradient("L").resize((SCENE_WIDTH, SCENE_HEIGHT)).point(lambda v: 30 + v // 2)
    draw = ImageDraw.Draw(base)
    draw.rectangle((80, 60, 300, 240), fill=220)
    draw.ellipse((380, 120, 640, 420), fill=15, outline=250, width=4)
    draw.polygon([(100, 500), (260, 300), (340, 540)], fill=180)
    for x in range(0, SCENE_WIDTH, 48):
        draw.line((x, 0, x + 120, SCENE_HEIGHT - 1), fill=90, width=2)

    arr = np.asarray(base, dtype=np.int64)
    rng = np.random.default_rng(576)
    noisy = np.clip(arr + rng.integers(-6, 7, size=arr.shape), 0, 255)
    return make_image(noisy)
