"""Upload reading with size enforcement."""
from __future__ import annotations

import logging

from fastapi import UploadFile

from app.core.errors import ValidationAppError

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 8192


def _too_large(max_bytes: int) -> ValidationAppError:
    return ValidationAppError(
        code="file_too_large",
        message=f"File size too large. Maximum size is {max_bytes / (1024 * 1024):g}MB.",
        details={"max_bytes": max_bytes},
    )


async def read_upload_file_limited(file: UploadFile, max_bytes: int) -> bytes:
    """Read an uploaded file in chunks enforcing ``max_bytes``.

    Uses ``file.size`` from the multipart headers when available to reject
    early, then enforces the limit again while reading.

    Raises:
        ValidationAppError: If the file exceeds the limit.
    """
    file_size = getattr(file, "size", None)
    if file_size is not None and file_size > max_bytes:
        logger.warning(
            "file_validation.rejected_by_header",
            extra={"file_size": file_size, "max_bytes": max_bytes},
        )
        raise _too_large(max_bytes)

    size = 0
    chunks: list[bytes] = []

    while True:
        chunk = await file.read(_CHUNK_SIZE)
        if not chunk:
            break

        size += len(chunk)
        if size > max_bytes:
            logger.warning(
                "file_validation.rejected_by_chunked_read",
                extra={"size": size, "max_bytes": max_bytes},
            )
            raise _too_large(max_bytes)
        chunks.append(chunk)

    return b"".join(chunks)
