import os
from pathlib import Path

import pytest

from app.core.errors import StorageAppError, ValidationAppError
from app.services.image_service import ImageManager


def _write_image(directory: Path, name: str, mtime: float, size: int = 10) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    path.write_bytes(b"x" * size)
    os.utime(path, (mtime, mtime))
    return path


@pytest.fixture
def manager(tmp_path: Path) -> ImageManager:
    return ImageManager(tmp_path / "uploads", max_images=2, clock=lambda: 1_700_000_000.5)


def test_list_images_only_managed_files_oldest_first(manager: ImageManager) -> None:
    _write_image(manager.uploads_dir, "product_3_c.png", 300)
    _write_image(manager.uploads_dir, "product_1_a.jpg", 100)
    _write_image(manager.uploads_dir, "product_2_b.GIF", 200)
    _write_image(manager.uploads_dir, "notes.txt", 50)
    _write_image(manager.uploads_dir, "avatar.png", 50)

    names = [img.filename for img in manager.list_images()]

    assert names == ["product_1_a.jpg", "product_2_b.GIF", "product_3_c.png"]


def test_list_images_with_missing_directory(manager: ImageManager) -> None:
    assert manager.list_images() == []
    assert manager.stats().count == 0


def test_stats(manager: ImageManager) -> None:
    _write_image(manager.uploads_dir, "product_1_a.jpg", 100, size=5)
    _write_image(manager.uploads_dir, "product_2_b.jpg", 200, size=7)

    stats = manager.stats()

    assert stats.count == 2
    assert stats.limit == 2
    assert stats.can_upload is False
    assert stats.total_size == 12
    assert stats.oldest_image == "product_1_a.jpg"
    assert stats.newest_image == "product_2_b.jpg"


def test_cleanup_old_images_keeps_newest(manager: ImageManager) -> None:
    for i in range(1, 5):
        _write_image(manager.uploads_dir, f"product_{i}_x.jpg", i * 100, size=3)

    result = manager.cleanup_old_images()

    assert result.deleted == ["product_1_x.jpg", "product_2_x.jpg"]
    assert result.remaining == 2
    assert result.total_size == 6
    assert [img.filename for img in manager.list_images()] == ["product_3_x.jpg", "product_4_x.jpg"]


def test_cleanup_old_images_under_limit_deletes_nothing(manager: ImageManager) -> None:
    _write_image(manager.uploads_dir, "product_1_x.jpg", 100)

    result = manager.cleanup_old_images()

    assert result.deleted == []
    assert result.remaining == 1


def test_cleanup_unused_images(manager: ImageManager) -> None:
    _write_image(manager.uploads_dir, "product_1_a.jpg", 100)
    _write_image(manager.uploads_dir, "product_2_b.jpg", 200)

    result = manager.cleanup_unused_images({"/uploads/product_2_b.jpg", "https://cdn.example.com/x.png"})

    assert result.deleted == ["product_1_a.jpg"]
    assert result.kept == ["product_2_b.jpg"]


def test_delete_image_failures_return_false(manager: ImageManager, caplog) -> None:
    assert manager.delete_image("product_404_x.jpg") is False
    assert manager.delete_image("../secrets.jpg") is False

    logged = [(r.getMessage(), getattr(r, "image_filename", None)) for r in caplog.records]
    assert ("image.delete_failed", "product_404_x.jpg") in logged
    assert ("image.delete_rejected", "../secrets.jpg") in logged


def test_save_upload_names_file_and_returns_public_url(manager: ImageManager) -> None:
    uploaded = manager.save_upload(b"\x89PNG\r\n\x1a\nrest", extension="PNG", content_type="image/png")

    assert uploaded.filename.startswith("product_1700000000500_")
    assert uploaded.filename.endswith(".png")
    assert uploaded.url == f"/uploads/{uploaded.filename}"
    assert uploaded.size == 12
    assert (manager.uploads_dir / uploaded.filename).read_bytes().startswith(b"\x89PNG")


def test_save_upload_rejects_empty(manager: ImageManager) -> None:
    with pytest.raises(ValidationAppError):
        manager.save_upload(b"", extension="jpg", content_type="image/jpeg")


def test_save_upload_storage_failure(tmp_path: Path) -> None:
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("file in the way")
    manager = ImageManager(blocker)

    with pytest.raises(StorageAppError):
        manager.save_upload(b"GIF89a", extension="gif", content_type="image/gif")
