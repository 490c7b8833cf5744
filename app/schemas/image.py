from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class UploadedImage(BaseModel):
    url: str
    filename: str
    size: int
    type: str


class UploadResponse(BaseModel):
    success: bool = True
    data: UploadedImage
    message: str = "Image uploaded successfully"


class UploadInfoResponse(_CamelModel):
    success: bool = True
    message: str = "Image upload endpoint is ready"
    max_size: str = Field(alias="maxSize")
    allowed_types: list[str] = Field(alias="allowedTypes")


class ImageInfo(_CamelModel):
    filename: str
    upload_time: datetime = Field(alias="uploadTime")
    size: int
    url: str


class ImageStats(_CamelModel):
    count: int
    limit: int
    can_upload: bool = Field(alias="canUpload")
    total_size: int = Field(alias="totalSize")
    oldest_image: Optional[str] = Field(default=None, alias="oldestImage")
    newest_image: Optional[str] = Field(default=None, alias="newestImage")


class ImageStatsWithList(ImageStats):
    images: list[ImageInfo] = Field(default_factory=list)


class CleanupResult(_CamelModel):
    deleted: list[str]
    remaining: int
    total_size: int = Field(alias="totalSize")


class UnusedCleanupResult(BaseModel):
    deleted: list[str]
    kept: list[str]


class ImageActionRequest(BaseModel):
    action: Optional[str] = None
