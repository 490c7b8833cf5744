"""File validation utilities for uploaded images.

Validates file signatures (magic numbers) so a renamed non-image cannot be
stored just by sending an image Content-Type.
"""

from __future__ import annotations

import logging
from typing import Literal, Optional, cast

logger = logging.getLogger(__name__)

ImageType = Literal["jpeg", "png", "webp", "gif"]

ALLOWED_CONTENT_TYPES: dict[str, ImageType] = {
    "image/jpeg": "jpeg",
    "image/jpg": "jpeg",
    "image/png": "png",
    "image/webp": "webp",
    "image/gif": "gif",
}

EXTENSIONS: dict[ImageType, str] = {
    "jpeg": "jpg",
    "png": "png",
    "webp": "webp",
    "gif": "gif",
}

ALLOWED_EXTENSIONS = frozenset({"jpg", "jpeg", "png", "webp", "gif"})


def get_image_type_from_mime(mime_type: str | None) -> Optional[ImageType]:
    """Map an upload Content-Type to an internal image type, or None."""
    if not mime_type:
        return None
    return cast(Optional[ImageType], ALLOWED_CONTENT_TYPES.get(mime_type.lower()))


def validate_image_signature(data: bytes, expected_type: ImageType) -> bool:
    """Check the binary header of ``data`` against ``expected_type``.

    Args:
        data: File content as bytes.
        expected_type: Image type derived from the declared Content-Type.

    Returns:
        True if the signature matches, False otherwise.
    """
    if expected_type == "jpeg":
        matched = data.startswith(b"\xff\xd8\xff")
    elif expected_type == "png":
        matched = data.startswith(b"\x89PNG\r\n\x1a\n")
    elif expected_type == "gif":
        matched = data.startswith((b"GIF87a", b"GIF89a"))
    elif expected_type == "webp":
        matched = data[:4] == b"RIFF" and data[8:12] == b"WEBP"
    else:
        matched = False

    if not matched:
        logger.warning(
            "file_signature.invalid",
            extra={
                "expected_type": expected_type,
                "actual_prefix": data[:12].hex() if data else "EMPTY",
            },
        )
    return matched


def extension_for(original_name: str | None, image_type: ImageType) -> str:
    """Keep the client's extension when it is an image one, else derive it."""
    if original_name and "." in original_name:
        ext = original_name.rsplit(".", 1)[-1].lower()
        if ext in ALLOWED_EXTENSIONS:
            return ext
    return EXTENSIONS[image_type]
