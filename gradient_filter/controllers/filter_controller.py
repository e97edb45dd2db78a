"""Контроллер фильтра: оркестрация decode -> compute -> encode -> write.

SOLID:
- SRP: связывает сервисы и файловую систему, без логики обработки изображений.
- DIP: сервисы подставляются через поля dataclass; по умолчанию — конкретные реализации.
Clean Code:
- Запись «всё или ничего»: либо появляются все три файла, либо ни одного.
"""
from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Tuple

from gradient_filter.models.errors import WriteError
from gradient_filter.models.image_model import GradientResult
from gradient_filter.services.gradient_service import GradientService
from gradient_filter.services.pgm_service import PgmService

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION = ".pgm"


def output_paths(input_path: str | Path, stem: str | Path) -> Tuple[Path, Path, Path]:
    """`<stem>-hedge<ext>`, `<stem>-vedge<ext>`, `<stem>-magedge<ext>`.

    Расширение берётся у входного файла; если его нет — `.pgm`.
    """
    ext = Path(input_path).suffix or DEFAULT_EXTENSION
    stem = str(stem)
    hedge, vedge, magedge = (Path(f"{stem}-{suffix}{ext}") for suffix in GradientResult.SUFFIXES)
    return hedge, vedge, magedge


@dataclass
class FilterController:
    """Выполняет один запуск фильтра для одного входного файла.

    Ответственности:
    - Загрузка исходника через `PgmService`.
    - Расчёт градиентов через `GradientService`.
    - Кодирование трёх выходов в формате исходника и атомарная запись.
    """
    gradient_service: GradientService = field(default_factory=GradientService)
    pgm_service: PgmService = field(default_factory=PgmService)

    def run(self, input_path: str | Path, stem: str | Path) -> Tuple[Path, ...]:
        """Обрабатывает `input_path` и пишет три файла рядом с `stem`.

        Returns:
            Пути записанных файлов в порядке hedge, vedge, magedge.

        Raises:
            FileNotFoundError: входного файла нет.
            OSError: входной файл есть, но не читается (права доступа и т.п.).
            DecodeError, InvalidInputError, EncodeError, WriteError: см. `models.errors`.
        """
        image, fmt = self.pgm_service.load_image(input_path)
        logger.debug("Загружено %s: %dx%d, maxval=%d, формат %s",
                     input_path, image.width, image.height, image.max_sample_value, fmt)

        result = self.gradient_service.compute(image)
        logger.debug("Градиенты посчитаны, граница: %s", self.gradient_service.boundary.value)

        # сначала кодируем всё: ошибка кодирования не должна оставить файлов
        payloads = [self.pgm_service.encode(img, fmt) for _suffix, img in result]
        targets = output_paths(input_path, stem)
        self._write_all(list(zip(targets, payloads)))

        for target in targets:
            logger.info("Записано: %s", target)
        return targets

    # ---- Helpers ----
    def _write_all(self, items: List[Tuple[Path, bytes]]) -> None:
        """Пишет каждый payload во временный файл и переименовывает на место.

        Временные файлы удаляются всегда. При любой ошибке удаляются и уже
        переименованные выходы, и каталоги, созданные этим вызовом.
        """
        staged: List[Tuple[str, Path]] = []
        placed: List[Path] = []
        created: List[Path] = []
        completed = False
        try:
            for target, payload in items:
                created.extend(_missing_dirs(target.parent))
                target.parent.mkdir(parents=True, exist_ok=True)
                fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
                staged.append((tmp_name, target))
                with os.fdopen(fd, "wb") as fh:
                    fh.write(payload)
            for tmp_name, target in staged:
                os.replace(tmp_name, target)
                placed.append(target)
            completed = True
        except OSError as exc:
            raise WriteError(f"Не удалось записать выходные файлы: {exc}") from exc
        finally:
            # после успешного os.replace временного файла уже нет
            for tmp_name, _target in staged:
                _remove_quietly(Path(tmp_name))
            if not completed:
                for target in placed:
                    _remove_quietly(target)
                for directory in reversed(created):
                    _remove_empty_dir(directory)


def _missing_dirs(directory: Path) -> List[Path]:
    """Отсутствующие каталоги пути, от внешнего к внутреннему."""
    missing: List[Path] = []
    current = directory
    while not current.exists() and current != current.parent:
        missing.append(current)
        current = current.parent
    return list(reversed(missing))


def _remove_quietly(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass


def _remove_empty_dir(directory: Path) -> None:
    try:
        directory.rmdir()
    except OSError as exc:
        logger.debug("Каталог %s не удалён: %s", directory, exc)
