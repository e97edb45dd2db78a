from __future__ import annotations

import io
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from gradient_filter.models.errors import DecodeError, EncodeError
from gradient_filter.services.pgm_service import PgmService

from conftest import make_image, random_image


def test_decode_binary_with_header_comments(pgm_service: PgmService) -> None:
    data = b"P5\n# created by hand\n3 2\n# maxval next\n255\n" + bytes([0, 1, 2, 250, 251, 255])
    img = pgm_service.decode(data)
    assert img.size == (3, 2)
    assert img.max_sample_value == 255
    assert img.samples.tolist() == [[0, 1, 2], [250, 251, 255]]


def test_decode_binary_keeps_data_byte_that_looks_like_whitespace(pgm_service: PgmService) -> None:
    img = pgm_service.decode(b"P5 2 1 255\n" + bytes([10, 32]))
    assert img.samples.tolist() == [[10, 32]]


def test_decode_ascii(pgm_service: PgmService) -> None:
    data = b"P2\n3 2\n15\n0 1 2\n# comment\n13 14 15\n"
    img = pgm_service.decode(data)
    assert img.max_sample_value == 15
    assert img.flat().tolist() == [0, 1, 2, 13, 14, 15]


def test_decode_ascii_accepts_leading_zeros(pgm_service: PgmService) -> None:
    img = pgm_service.decode(b"P2\n3 1\n255\n007 0255 000\n")
    assert img.flat().tolist() == [7, 255, 0]


def test_decode_sixteen_bit_is_big_endian(pgm_service: PgmService) -> None:
    data = b"P5\n2 1\n1023\n" + bytes([0x03, 0xFF, 0x01, 0x00])
    img = pgm_service.decode(data)
    assert img.samples.tolist() == [[1023, 256]]


def test_trailing_bytes_after_samples_are_ignored(pgm_service: PgmService) -> None:
    img = pgm_service.decode(b"P5\n2 1\n255\n" + bytes([4, 5, 6, 7]))
    assert img.flat().tolist() == [4, 5]


@pytest.mark.parametrize(
    "data",
    [
        b"",
        b"P6\n1 1\n255\n\x00\x00\x00",
        b"P5\n3 2\n255\n" + bytes(5),
        b"P5\n3\n",
        b"P5\n3 x\n255\n",
        b"P5\n0 2\n255\n",
        b"P5\n1 1\n0\n\x00",
        b"P5\n1 1\n70000\n\x00\x00",
        b"P2\n2 2\n255\n1 2 3\n",
        b"P2\n2 1\n10\n3 11\n",
        b"P2\n2 1\n10\n3 a\n",
        b"P5\n1 1\n255",
        b"P2\n1 1\n255\n" + b"9" * 30 + b"\n",
        b"P2\n1 1\n255\n" + b"9" * 5000 + b"\n",
        b"P2\n2 1\n255\n1_0 3\n",
        b"P2\n1 1\n255\n+5\n",
        b"P2\n1 1\n255\n-5\n",
        b"P5\n" + b"9" * 5000 + b" 1\n255\n\x00",
    ],
)
def test_malformed_input_raises_decode_error(pgm_service: PgmService, data: bytes) -> None:
    with pytest.raises(DecodeError):
        pgm_service.decode(data)


def test_detect_format(pgm_service: PgmService) -> None:
    assert pgm_service.detect_format(b"P5\n1 1\n255\n\x00") == "P5"
    assert pgm_service.detect_format(b"P2 1 1 255 0") == "P2"
    with pytest.raises(DecodeError):
        pgm_service.detect_format(b"P55")


def test_encode_reproduces_header_verbatim(pgm_service: PgmService) -> None:
    img = make_image([[0, 50, 100], [100, 50, 0]], max_value=100)
    data = pgm_service.encode(img)
    assert data.startswith(b"P5\n3 2\n100\n")
    assert data[len(b"P5\n3 2\n100\n"):] == bytes([0, 50, 100, 100, 50, 0])
    assert pgm_service.decode(data) == img


def test_encode_ascii_and_sixteen_bit(pgm_service: PgmService) -> None:
    img = make_image([[1023, 0], [7, 512]], max_value=1023)
    assert pgm_service.encode(img, "P2") == b"P2\n2 2\n1023\n1023 0\n7 512\n"
    assert pgm_service.encode(img, "P5").endswith(bytes([0x03, 0xFF, 0, 0, 0, 7, 0x02, 0x00]))


def test_encode_unknown_format_raises(pgm_service: PgmService) -> None:
    with pytest.raises(EncodeError):
        pgm_service.encode(make_image([[1]]), "P6")


def test_encoded_file_readable_by_pillow(pgm_service: PgmService) -> None:
    img = random_image(17, 9, seed=8)
    with Image.open(io.BytesIO(pgm_service.encode(img))) as pil:
        assert pil.mode == "L"
        assert pil.size == (17, 9)
        assert np.array_equal(np.asarray(pil), img.samples)


def test_decode_file_written_by_pillow(pgm_service: PgmService, tmp_path: Path) -> None:
    arr = np.arange(48, dtype=np.uint8).reshape(6, 8) * 5
    path = tmp_path / "pillow.pgm"
    Image.fromarray(arr).save(path)
    img, fmt = pgm_service.load_image(path)
    assert fmt == "P5"
    assert np.array_equal(img.samples, arr)


def test_load_missing_file(pgm_service: PgmService, tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        pgm_service.load_image(tmp_path / "nope.pgm")


def test_load_malformed_file_names_path(pgm_service: PgmService, tmp_path: Path) -> None:
    path = tmp_path / "bad.pgm"
    path.write_bytes(b"not an image")
    with pytest.raises(DecodeError, match="bad.pgm"):
        pgm_service.load_image(path)
