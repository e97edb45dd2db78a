"""Чтение и запись полутоновых растров семейства PGM (P2/P5).

Принципы:
- SRP: класс отвечает только за формат файла; никакой обработки пикселей.
- Заголовок разбирается честно (магия, комментарии, размеры, maxval),
  отсчёты читаются в прямом порядке.
"""
from __future__ import annotations

import re
from pathlib import Path
from typing import List, Tuple

import numpy as np

from gradient_filter.models.errors import DecodeError, EncodeError
from gradient_filter.models.image_model import MAX_SAMPLE_LIMIT, ImageData

FORMATS = ("P2", "P5")

_WHITESPACE = b" \t\r\n\v\f"
_DIGITS = re.compile(rb"[0-9]+")
_MAX_FIELD_DIGITS = 10


class PgmService:
    def detect_format(self, data: bytes) -> str:
        """Возвращает магию файла ("P2" или "P5").

        Raises:
            DecodeError: если байты не начинаются с поддерживаемой магии.
        """
        magic = data[:2].decode("ascii", errors="replace")
        if magic not in FORMATS:
            raise DecodeError(f"Неподдерживаемая сигнатура PGM: {magic!r}")
        if len(data) > 2 and data[2] not in _WHITESPACE:
            raise DecodeError("После сигнатуры PGM ожидается пробельный символ")
        return magic

    def decode(self, data: bytes) -> ImageData:
        """Разбирает байты PGM в `ImageData`.

        Raises:
            DecodeError: битый заголовок, maxval вне [1, 65535],
                усечённые данные или отсчёт больше maxval.
        """
        magic = self.detect_format(data)
        fields, offset = self._read_header_fields(data, count=3)
        width, height, max_value = fields

        if width <= 0 or height <= 0:
            raise DecodeError(f"Некорректные размеры: {width}x{height}")
        if not 1 <= max_value <= MAX_SAMPLE_LIMIT:
            raise DecodeError(f"maxval вне [1, {MAX_SAMPLE_LIMIT}]: {max_value}")

        count = width * height
        if magic == "P5":
            samples = self._decode_binary(data, offset, count, max_value)
        else:
            samples = self._decode_ascii(data, offset, count, max_value)

        if int(samples.min()) < 0:
            raise DecodeError("Отрицательный отсчёт в данных PGM")
        if int(samples.max()) > max_value:
            raise DecodeError(f"Отсчёт {int(samples.max())} превышает maxval {max_value}")

        return ImageData(width=width, height=height, max_sample_value=max_value,
                         samples=samples.reshape(height, width))

    def encode(self, image: ImageData, fmt: str = "P5") -> bytes:
        """Сериализует изображение; заголовок повторяет размеры и maxval исходника.

        Raises:
            EncodeError: если формат не из семейства P2/P5.
        """
        if fmt not in FORMATS:
            raise EncodeError(f"Неподдерживаемый формат вывода: {fmt!r}")

        header = f"{fmt}\n{image.width} {image.height}\n{image.max_sample_value}\n".encode("ascii")
        if fmt == "P5":
            if image.max_sample_value <= 255:
                body = image.samples.astype(np.uint8).tobytes()
            else:
                body = image.samples.astype(">u2").tobytes()
            return header + body

        # P2: одна строка текста на строку растра
        lines = [" ".join(str(int(v)) for v in row) for row in image.samples]
        return header + ("\n".join(lines) + "\n").encode("ascii")

    def load_image(self, file_path: str | Path) -> Tuple[ImageData, str]:
        """Загружает PGM с диска.

        Returns:
            Пара (`ImageData`, магия исходного файла).

        Raises:
            FileNotFoundError: если путь не существует или не указывает на файл.
            DecodeError: если файл не является корректным PGM.
        """
        path = Path(file_path)
        if not path.exists() or not path.is_file():
            raise FileNotFoundError(f"Файл не найден: {path}")

        data = path.read_bytes()
        try:
            return self.decode(data), self.detect_format(data)
        except DecodeError as exc:
            raise DecodeError(f"{path}: {exc}") from exc

    # ---------- Вспомогательные функции ----------
    def _read_header_fields(self, data: bytes, count: int) -> Tuple[List[int], int]:
        """Читает `count` десятичных полей после магии, пропуская комментарии.

        Возвращает поля и смещение первого байта данных: ровно один пробельный
        символ после maxval, как требует формат.
        """
        pos = 2
        fields: List[int] = []
        n = len(data)
        while len(fields) < count:
            while pos < n and data[pos] in _WHITESPACE:
                pos += 1
            if pos < n and data[pos:pos + 1] == b"#":
                while pos < n and data[pos:pos + 1] not in (b"\n", b"\r"):
                    pos += 1
                continue
            start = pos
            while pos < n and data[pos:pos + 1].isdigit():
                pos += 1
            if start == pos:
                raise DecodeError("Битый заголовок PGM: ожидалось целое число")
            digits = data[start:pos].lstrip(b"0") or b"0"
            if len(digits) > _MAX_FIELD_DIGITS:
                raise DecodeError(f"Битый заголовок PGM: слишком длинное число ({len(digits)} цифр)")
            fields.append(int(digits))

        if pos >= n or data[pos] not in _WHITESPACE:
            raise DecodeError("Битый заголовок PGM: нет разделителя перед данными")
        return fields, pos + 1

    def _decode_binary(self, data: bytes, offset: int, count: int, max_value: int) -> np.ndarray:
        dtype = np.dtype(np.uint8) if max_value <= 255 else np.dtype(">u2")
        needed = count * dtype.itemsize
        available = len(data) - offset
        if available < needed:
            raise DecodeError(f"Усечённые данные: ожидалось {needed} байт, есть {available}")
        return np.frombuffer(data, dtype=dtype, count=count, offset=offset).astype(np.int64)

    def _decode_ascii(self, data: bytes, offset: int, count: int, max_value: int) -> np.ndarray:
        # комментарии допустимы и в теле P2
        body = re.sub(rb"#[^\r\n]*", b" ", data[offset:])
        tokens = body.split()
        if len(tokens) < count:
            raise DecodeError(f"Усечённые данные: ожидалось {count} отсчётов, есть {len(tokens)}")

        values: List[int] = []
        for token in tokens[:count]:
            # только десятичные цифры: без знака, "_" и прочих литеральных форм int()
            if not _DIGITS.fullmatch(token):
                raise DecodeError(f"Нечисловой отсчёт в данных P2: {token[:16]!r}")
            digits = token.lstrip(b"0") or b"0"
            if len(digits) > _MAX_FIELD_DIGITS or int(digits) > max_value:
                raise DecodeError(f"Отсчёт {digits[:16].decode('ascii')} превышает maxval {max_value}")
            values.append(int(digits))
        return np.array(values, dtype=np.int64)
