from enum import Enum
from pydantic import BaseModel, Field, model_validator
from typing import Optional, List
from datetime import datetime

from school_portal.config import settings


class MediaType(str, Enum):
    VIDEO = "video"
    WEBSITE = "website"
    DOCUMENT = "document"
    IMAGE = "image"


class NewsCreate(BaseModel):
    title: str = Field(min_length=1)
    content: str = Field(min_length=1)
    author_name: str = Field(min_length=1)
    category: str = "ข่าวประชาสัมพันธ์"
    cover_image: Optional[str] = None
    published_date: Optional[datetime] = None


class NewsUpdate(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    author_name: Optional[str] = None
    category: Optional[str] = None
    cover_image: Optional[str] = None
    published_date: Optional[datetime] = None


class NewsResponse(BaseModel):
    id: str
    title: str
    content: str
    author_name: str
    category: str
    cover_image: Optional[str] = None
    published_date: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


def _check_images(images: Optional[List[str]], cover_image_index: Optional[int]) -> None:
    if images is not None and len(images) > settings.max_activity_images:
        raise ValueError(f"สามารถอัปโหลดได้สูงสุด {settings.max_activity_images} ภาพ")
    if images and cover_image_index is not None and not 0 <= cover_image_index < len(images):
        raise ValueError("cover_image_index is out of range")


class ActivityCreate(BaseModel):
    title: str = Field(min_length=1)
    content: str = Field(min_length=1)
    author_name: str = Field(min_length=1)
    category: str = "กิจกรรมภายใน"
    images: List[str] = []
    cover_image_index: int = 0
    cover_image: Optional[str] = None

    @model_validator(mode="after")
    def check_images(self):
        _check_images(self.images, self.cover_image_index)
        return self


class ActivityUpdate(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    author_name: Optional[str] = None
    category: Optional[str] = None
    images: Optional[List[str]] = None
    cover_image_index: Optional[int] = None
    cover_image: Optional[str] = None

    @model_validator(mode="after")
    def check_images(self):
        _check_images(self.images, self.cover_image_index)
        return self


class ActivityResponse(BaseModel):
    id: str
    title: str
    content: str
    author_name: str
    category: Optional[str] = None
    images: Optional[List[str]] = None
    cover_image_index: Optional[int] = None
    cover_image: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class MediaCreate(BaseModel):
    title: str = Field(min_length=1)
    author_name: str = Field(min_length=1)
    description: str
    media_url: str = Field(min_length=1)
    media_type: MediaType
    thumbnail_url: Optional[str] = None
    published_date: Optional[datetime] = None


class MediaUpdate(BaseModel):
    title: Optional[str] = None
    author_name: Optional[str] = None
    description: Optional[str] = None
    media_url: Optional[str] = None
    media_type: Optional[MediaType] = None
    thumbnail_url: Optional[str] = None
    published_date: Optional[datetime] = None


class MediaResponse(BaseModel):
    id: str
    title: str
    author_name: str
    description: str
    media_url: str
    media_type: str
    thumbnail_url: Optional[str] = None
    published_date: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class UploadResponse(BaseModel):
    urls: List[str]


class DetailLinkResponse(BaseModel):
    kind: str
    item_id: str
    item: dict
