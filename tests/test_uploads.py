from __future__ import annotations

import os
from unittest.mock import patch

import pytest

from errors import PayloadTooLarge, UnsupportedMedia
from uploads import remove_payment_proof, sanitize_filename, store_payment_proof, validate_payment_proof

MAX = 5 * 1024 * 1024


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("valid.png", "valid.png"),
        ("../../etc/passwd", "passwd"),
        ("C:\\Users\\me\\scan 01.pdf", "scan_01.pdf"),
        (".hidden.png", "hidden.png"),
        ("", "upload"),
    ],
)
def test_sanitize_filename(raw: str, expected: str) -> None:
    assert sanitize_filename(raw) == expected


def test_validate_accepts_content_type_with_parameters() -> None:
    validate_payment_proof("scan.pdf", "application/pdf; charset=binary", 10, MAX)


@pytest.mark.parametrize(
    "filename,content_type",
    [
        ("scan.pdf", None),
        ("scan.pdf", "image/png"),
        ("scan", "application/pdf"),
        ("image.webp", "image/webp"),
    ],
)
def test_validate_rejects_mismatched_types(filename: str, content_type) -> None:
    with pytest.raises(UnsupportedMedia):
        validate_payment_proof(filename, content_type, 10, MAX)


def test_validate_rejects_oversized_file() -> None:
    with pytest.raises(PayloadTooLarge):
        validate_payment_proof("scan.png", "image/png", MAX + 1, MAX)


def test_store_prefixes_timestamp(tmp_path) -> None:
    with patch("uploads.time.time", return_value=1_700_000_000.5):
        stored = store_payment_proof(b"abc", "valid.png", str(tmp_path))

    assert stored == "1700000000500-valid.png"
    assert (tmp_path / stored).read_bytes() == b"abc"


def test_store_never_overwrites(tmp_path) -> None:
    with patch("uploads.time.time", return_value=1_700_000_000.0):
        first = store_payment_proof(b"one", "valid.png", str(tmp_path))
        second = store_payment_proof(b"two", "valid.png", str(tmp_path))

    assert first != second
    assert (tmp_path / first).read_bytes() == b"one"
    assert (tmp_path / second).read_bytes() == b"two"


def test_remove_missing_file_does_not_raise(tmp_path) -> None:
    remove_payment_proof("missing.png", str(tmp_path))
    assert os.listdir(tmp_path) == []
