"""Точки входа командной строки."""
from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

from gradient_filter.controllers.filter_controller import FilterController
from gradient_filter.models.errors import GradientFilterError
from gradient_filter.services.compare_service import compare_with_tolerance
from gradient_filter.services.gradient_service import BoundaryPolicy, GradientService
from gradient_filter.services.pgm_service import PgmService

logger = logging.getLogger("gradient_filter")


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gradient-filter",
        description="Градиенты Собеля для полутонового PGM: -hedge, -vedge, -magedge.",
    )
    parser.add_argument("input", help="входной файл PGM (P2/P5)")
    parser.add_argument("stem", help="основа имени выходных файлов")
    parser.add_argument(
        "--boundary",
        choices=[p.value for p in BoundaryPolicy],
        default=BoundaryPolicy.REPLICATE.value,
        help="политика границы (по умолчанию replicate)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="подробный лог")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Запускает фильтр; возвращает код выхода (0 — успех, 1 — ошибка)."""
    args = build_parser().parse_args(argv)
    _setup_logging(args.verbose)

    controller = FilterController(gradient_service=GradientService(args.boundary))
    try:
        controller.run(args.input, args.stem)
    except (GradientFilterError, OSError) as exc:
        logger.error("%s", exc)
        return 1
    return 0


def build_compare_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gradient-compare",
        description="Сравнивает два PGM с допуском; рамка может игнорироваться.",
    )
    parser.add_argument("actual", help="полученный файл")
    parser.add_argument("expected", help="эталонный файл")
    parser.add_argument("--inner-tol", type=int, default=1, help="допуск во внутренней области")
    parser.add_argument("--edge-tol", type=int, default=-1, help="допуск на рамке; < 0 — не сравнивать")
    parser.add_argument("--border", type=int, default=3, help="ширина рамки, px")
    parser.add_argument("-v", "--verbose", action="store_true", help="подробный лог")
    return parser


def compare_main(argv: Optional[Sequence[str]] = None) -> int:
    """Код выхода 0, если файлы совпадают в пределах допуска, иначе 1."""
    args = build_compare_parser().parse_args(argv)
    _setup_logging(args.verbose)

    pgm = PgmService()
    try:
        actual, _ = pgm.load_image(args.actual)
        expected, _ = pgm.load_image(args.expected)
        mismatch = compare_with_tolerance(
            actual, expected, inner_tol=args.inner_tol, edge_tol=args.edge_tol, border=args.border
        )
    except (GradientFilterError, OSError, ValueError) as exc:
        logger.error("%s", exc)
        return 1

    if mismatch is not None:
        logger.error("Расхождение в (%d,%d): получено=%d, ожидалось=%d",
                     mismatch.x, mismatch.y, mismatch.actual, mismatch.expected)
        return 1
    logger.info("Совпадает: %s ~ %s", args.actual, args.expected)
    return 0


if __name__ == "__main__":
    sys.exit(main())
