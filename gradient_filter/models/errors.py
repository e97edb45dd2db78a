"""Иерархия ошибок фильтра.

Все ошибки терминальны для одного запуска: движок их не логирует и не
подавляет, они поднимаются до CLI, который сообщает и завершает процесс
с ненулевым кодом.
"""
from __future__ import annotations


class GradientFilterError(Exception):
    """Базовая ошибка конвейера decode -> compute -> encode -> write."""


class ImageConstructionError(ValueError):
    """Нарушен инвариант `ImageData` (размеры, диапазон отсчётов)."""


class DecodeError(GradientFilterError, ValueError):
    """Байты не разбираются как PGM: заголовок, усечённые данные и т.п."""


class InvalidInputError(GradientFilterError, ValueError):
    """Изображение слишком мало, чтобы центрировать ядро 3x3."""


class EncodeError(GradientFilterError, ValueError):
    """Изображение нельзя сериализовать в запрошенный формат."""


class WriteError(GradientFilterError, OSError):
    """Выходной путь недоступен для записи."""
