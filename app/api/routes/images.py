from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Query, Request, UploadFile
from fastapi.concurrency import run_in_threadpool

from app.api.dependencies import get_image_manager, get_product_service
from app.core.errors import ValidationAppError
from app.core.file_validation import read_upload_file_limited
from app.core.rate_limit import require_admission
from app.schemas.image import (
    ImageActionRequest,
    ImageStats,
    ImageStatsWithList,
    UploadInfoResponse,
    UploadResponse,
)
from app.services.image_service import ImageManager
from app.services.product_service import ProductService
from app.utils.file_validators import (
    ALLOWED_CONTENT_TYPES,
    extension_for,
    get_image_type_from_mime,
    validate_image_signature,
)

router = APIRouter(tags=["Images"])


def _max_upload_bytes(request: Request) -> int:
    return request.app.state.container.settings.images.max_upload_bytes


@router.post(
    "/upload",
    response_model=UploadResponse,
    dependencies=[Depends(require_admission("strict"))],
)
async def upload_image(
    request: Request,
    image: Optional[UploadFile] = File(None, description="JPEG, PNG, WebP or GIF image"),
    manager: ImageManager = Depends(get_image_manager),
) -> UploadResponse:
    """Store a product image and return its public URL."""
    if image is None:
        raise ValidationAppError(code="missing_file", message="No file uploaded", details={"field": "image"})

    image_type = get_image_type_from_mime(image.content_type)
    if image_type is None:
        raise ValidationAppError(
            code="invalid_file_type",
            message="Invalid file type. Only JPEG, PNG, WebP, and GIF are allowed.",
            details={"allowed_types": list(ALLOWED_CONTENT_TYPES)},
        )

    data = await read_upload_file_limited(image, _max_upload_bytes(request))
    if not validate_image_signature(data, image_type):
        raise ValidationAppError(
            code="invalid_file_content",
            message="File content does not match its declared image type",
        )

    uploaded = await run_in_threadpool(
        manager.save_upload,
        data,
        extension=extension_for(image.filename, image_type),
        content_type=image.content_type or "",
    )
    return UploadResponse(data=uploaded)


@router.get(
    "/upload",
    response_model=UploadInfoResponse,
    response_model_by_alias=True,
    dependencies=[Depends(require_admission("api"))],
)
async def upload_info(request: Request) -> UploadInfoResponse:
    max_bytes = _max_upload_bytes(request)
    return UploadInfoResponse(
        max_size=f"{max_bytes / (1024 * 1024):g}MB",
        allowed_types=list(ALLOWED_CONTENT_TYPES),
    )


@router.get("/images", dependencies=[Depends(require_admission("api"))])
def image_overview(
    action: Optional[str] = Query(None, description="'stats' or 'list'"),
    manager: ImageManager = Depends(get_image_manager),
) -> dict:
    """Image statistics (default and ``stats``) or the full image list (``list``)."""
    images = [manager.describe(img) for img in manager.list_images()]
    if action == "list":
        return {"success": True, "data": [img.model_dump(by_alias=True, mode="json") for img in images]}

    data: ImageStats = manager.stats()
    if action == "stats":
        data = ImageStatsWithList(**data.model_dump(), images=images)
    return {"success": True, "data": data.model_dump(by_alias=True, mode="json")}


@router.post("/images", dependencies=[Depends(require_admission("strict"))])
async def manage_images(
    payload: ImageActionRequest,
    manager: ImageManager = Depends(get_image_manager),
    service: ProductService = Depends(get_product_service),
) -> dict:
    """Run a retention action: ``cleanup`` or ``cleanup-unused``."""
    if payload.action == "cleanup":
        result = await run_in_threadpool(manager.cleanup_old_images)
        return {
            "success": True,
            "data": result.model_dump(by_alias=True),
            "message": f"Cleaned up {len(result.deleted)} old images",
        }

    if payload.action == "cleanup-unused":
        referenced = await service.referenced_image_urls()
        unused = await run_in_threadpool(manager.cleanup_unused_images, referenced)
        return {
            "success": True,
            "data": unused.model_dump(),
            "message": f"Cleaned up {len(unused.deleted)} unused images",
        }

    raise ValidationAppError(
        code="invalid_action",
        message="Invalid action. Use 'cleanup' or 'cleanup-unused'",
    )
