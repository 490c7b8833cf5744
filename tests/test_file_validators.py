"""Tests for file validation utilities.

Tests cover:
- Magic number validation for the accepted image formats
- MIME type mapping
- Extension selection for stored uploads
- Size-limited upload reading
"""

import io

import pytest
from fastapi import UploadFile

from app.core.errors import ValidationAppError
from app.core.file_validation import read_upload_file_limited
from app.utils.file_validators import (
    extension_for,
    get_image_type_from_mime,
    validate_image_signature,
)

SIGNATURES = {
    "jpeg": b"\xff\xd8\xff\xe0\x00\x10JFIF",
    "png": b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR",
    "gif": b"GIF89a\x01\x00\x01\x00",
    "webp": b"RIFF\x24\x00\x00\x00WEBPVP8 ",
}


@pytest.mark.parametrize("image_type", list(SIGNATURES))
def test_valid_signatures(image_type: str) -> None:
    assert validate_image_signature(SIGNATURES[image_type], image_type) is True


@pytest.mark.parametrize(
    "data, image_type",
    [
        (SIGNATURES["png"], "jpeg"),
        (b"%PDF-1.4", "png"),
        (b"RIFF\x24\x00\x00\x00WAVEfmt ", "webp"),
        (b"", "gif"),
    ],
)
def test_mismatched_signatures(data: bytes, image_type: str) -> None:
    assert validate_image_signature(data, image_type) is False


@pytest.mark.parametrize(
    "mime, expected",
    [
        ("image/jpeg", "jpeg"),
        ("image/jpg", "jpeg"),
        ("IMAGE/PNG", "png"),
        ("image/webp", "webp"),
        ("image/gif", "gif"),
        ("image/svg+xml", None),
        ("application/pdf", None),
        (None, None),
    ],
)
def test_mime_mapping(mime, expected) -> None:
    assert get_image_type_from_mime(mime) == expected


def test_extension_prefers_client_image_extension() -> None:
    assert extension_for("Photo.JPEG", "jpeg") == "jpeg"
    assert extension_for("photo.exe", "png") == "png"
    assert extension_for(None, "webp") == "webp"
    assert extension_for("noext", "jpeg") == "jpg"


@pytest.mark.asyncio
async def test_read_upload_within_limit() -> None:
    upload = UploadFile(file=io.BytesIO(b"a" * 100), filename="a.jpg")

    assert await read_upload_file_limited(upload, max_bytes=100) == b"a" * 100


@pytest.mark.asyncio
async def test_read_upload_rejects_oversized_stream() -> None:
    upload = UploadFile(file=io.BytesIO(b"a" * 20_000), filename="a.jpg")

    with pytest.raises(ValidationAppError) as exc_info:
        await read_upload_file_limited(upload, max_bytes=10_000)

    assert exc_info.value.code == "file_too_large"
    assert exc_info.value.details == {"max_bytes": 10_000}


@pytest.mark.asyncio
async def test_read_upload_rejects_by_declared_size() -> None:
    upload = UploadFile(file=io.BytesIO(b""), filename="a.jpg", size=5_000_000)

    with pytest.raises(ValidationAppError):
        await read_upload_file_limited(upload, max_bytes=1024)
