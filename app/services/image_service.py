"""Uploaded product image storage and retention.

Files live flat in one directory and are named ``product_<epoch_ms>_<token>.<ext>``.
Only files following that pattern are managed; anything else in the
directory is ignored by listing and cleanup.
"""

from __future__ import annotations

import logging
import re
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Iterable

from app.core.errors import StorageAppError, ValidationAppError
from app.schemas.image import CleanupResult, ImageInfo, ImageStats, UnusedCleanupResult, UploadedImage

logger = logging.getLogger(__name__)

_MANAGED_NAME = re.compile(r"^product_[^/\\]+\.(jpg|jpeg|png|webp|gif)$", re.IGNORECASE)


@dataclass(frozen=True)
class ImageFileInfo:
    filename: str
    path: Path
    upload_time: float
    size: int


class ImageManager:
    """Save, list and prune uploaded images.

    Attributes:
        uploads_dir: Directory holding managed images.
        max_images: Retention cap applied by :meth:`cleanup_old_images`.
        public_prefix: URL prefix the directory is served under.
    """

    def __init__(
        self,
        uploads_dir: Path,
        *,
        max_images: int = 30,
        public_prefix: str = "/uploads",
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.uploads_dir = Path(uploads_dir)
        self.max_images = max_images
        self.public_prefix = public_prefix.rstrip("/")
        self._clock = clock

    def url_for(self, filename: str) -> str:
        return f"{self.public_prefix}/{filename}"

    def list_images(self) -> list[ImageFileInfo]:
        """Managed images, oldest first."""
        if not self.uploads_dir.is_dir():
            return []

        images: list[ImageFileInfo] = []
        for entry in self.uploads_dir.iterdir():
            if not entry.is_file() or not _MANAGED_NAME.match(entry.name):
                continue
            try:
                stat = entry.stat()
            except FileNotFoundError:
                # Removed between listing and stat
                continue
            images.append(
                ImageFileInfo(
                    filename=entry.name,
                    path=entry,
                    upload_time=stat.st_mtime,
                    size=stat.st_size,
                )
            )

        images.sort(key=lambda img: (img.upload_time, img.filename))
        return images

    def describe(self, image: ImageFileInfo) -> ImageInfo:
        return ImageInfo(
            filename=image.filename,
            upload_time=datetime.fromtimestamp(image.upload_time, tz=timezone.utc),
            size=image.size,
            url=self.url_for(image.filename),
        )

    def delete_image(self, filename: str) -> bool:
        """Delete one managed image. Failures are logged and reported as False."""
        if not _MANAGED_NAME.match(filename):
            logger.warning("image.delete_rejected", extra={"image_filename": filename})
            return False

        try:
            (self.uploads_dir / filename).unlink()
        except OSError as e:
            logger.error(
                "image.delete_failed",
                extra={"image_filename": filename, "error_type": type(e).__name__, "error": str(e)},
            )
            return False

        logger.info("image.deleted", extra={"image_filename": filename})
        return True

    def cleanup_old_images(self) -> CleanupResult:
        """Delete the oldest images until at most ``max_images`` remain."""
        images = self.list_images()
        deleted: list[str] = []

        excess = len(images) - self.max_images
        if excess > 0:
            for image in images[:excess]:
                if self.delete_image(image.filename):
                    deleted.append(image.filename)
            images = self.list_images()

        logger.info(
            "image.cleanup_old",
            extra={"deleted_count": len(deleted), "remaining": len(images)},
        )
        return CleanupResult(
            deleted=deleted,
            remaining=len(images),
            total_size=sum(img.size for img in images),
        )

    def stats(self) -> ImageStats:
        images = self.list_images()
        return ImageStats(
            count=len(images),
            limit=self.max_images,
            can_upload=len(images) < self.max_images,
            total_size=sum(img.size for img in images),
            oldest_image=images[0].filename if images else None,
            newest_image=images[-1].filename if images else None,
        )

    def cleanup_unused_images(self, referenced_urls: Iterable[str]) -> UnusedCleanupResult:
        """Delete managed images whose public URL no product references."""
        referenced = set(referenced_urls)
        deleted: list[str] = []
        kept: list[str] = []

        for image in self.list_images():
            if self.url_for(image.filename) in referenced:
                kept.append(image.filename)
            elif self.delete_image(image.filename):
                deleted.append(image.filename)
            else:
                kept.append(image.filename)

        logger.info(
            "image.cleanup_unused",
            extra={"deleted_count": len(deleted), "kept_count": len(kept)},
        )
        return UnusedCleanupResult(deleted=deleted, kept=kept)

    def new_filename(self, extension: str) -> str:
        timestamp_ms = int(self._clock() * 1000)
        token = uuid.uuid4().hex[:13]
        return f"product_{timestamp_ms}_{token}.{extension.lower()}"

    def save_upload(self, data: bytes, *, extension: str, content_type: str) -> UploadedImage:
        """Write an already validated upload and return its public description."""
        if not data:
            raise ValidationAppError(code="empty_file", message="Uploaded file is empty")

        filename = self.new_filename(extension)
        target = self.uploads_dir / filename
        try:
            self.uploads_dir.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as e:
            logger.error(
                "image.save_failed",
                extra={"image_filename": filename, "error_type": type(e).__name__, "error": str(e)},
            )
            raise StorageAppError(code="upload_failed", message="Failed to upload image") from e

        logger.info(
            "image.uploaded",
            extra={"image_filename": filename, "size": len(data), "content_type": content_type},
        )
        return UploadedImage(
            url=self.url_for(filename),
            filename=filename,
            size=len(data),
            type=content_type,
        )
