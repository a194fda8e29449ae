from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from school_portal.config import settings
from school_portal.core.dependencies import require_permission
from school_portal.core.storage import SupabaseStorage
from school_portal.database.supabase_client import get_supabase
from school_portal.modules.access.service import AuthContext
from school_portal.modules.content.deep_links import parse_detail_fragment
from school_portal.modules.content.schemas import (
    NewsCreate, NewsUpdate, NewsResponse,
    ActivityCreate, ActivityUpdate, ActivityResponse,
    MediaCreate, MediaUpdate, MediaResponse,
    UploadResponse, DetailLinkResponse
)
from school_portal.modules.content.service import ContentService, upload_images
from supabase import Client
from typing import List

news_router = APIRouter(prefix="/news", tags=["news"])
activities_router = APIRouter(prefix="/activities", tags=["activities"])
media_router = APIRouter(prefix="/media", tags=["media"])
links_router = APIRouter(prefix="/links", tags=["links"])


def get_news_service(supabase: Client = Depends(get_supabase)) -> ContentService:
    return ContentService(supabase, "news", NewsResponse, "ข่าวสาร")


def get_activity_service(supabase: Client = Depends(get_supabase)) -> ContentService:
    return ContentService(supabase, "activities", ActivityResponse, "กิจกรรม")


def get_media_service(supabase: Client = Depends(get_supabase)) -> ContentService:
    return ContentService(supabase, "media_resources", MediaResponse, "สื่อการเรียนรู้")


# News
@news_router.get("", response_model=List[NewsResponse])
async def list_news(
    limit: int = 20,
    offset: int = 0,
    service: ContentService = Depends(get_news_service)
):
    """Public news feed, newest first"""
    return service.list_items(limit=limit, offset=offset)


@news_router.get("/{news_id}", response_model=NewsResponse)
async def get_news(news_id: str, service: ContentService = Depends(get_news_service)):
    return service.get_item(news_id)


@news_router.post("", response_model=NewsResponse, status_code=201)
async def create_news(
    news_data: NewsCreate,
    user: AuthContext = Depends(require_permission("create_news")),
    service: ContentService = Depends(get_news_service)
):
    return service.create_item(news_data)


@news_router.put("/{news_id}", response_model=NewsResponse)
async def update_news(
    news_id: str,
    news_data: NewsUpdate,
    user: AuthContext = Depends(require_permission("edit_news")),
    service: ContentService = Depends(get_news_service)
):
    return service.update_item(news_id, news_data)


@news_router.delete("/{news_id}", status_code=204)
async def delete_news(
    news_id: str,
    user: AuthContext = Depends(require_permission("delete_news")),
    service: ContentService = Depends(get_news_service)
):
    service.delete_item(news_id)
    return None


@news_router.post("/cover-image", response_model=UploadResponse, status_code=201)
async def upload_news_cover(
    file: UploadFile = File(...),
    user: AuthContext = Depends(require_permission("create_news")),
    supabase: Client = Depends(get_supabase)
):
    storage = SupabaseStorage(supabase, settings.news_images_bucket)
    return UploadResponse(urls=await upload_images(storage, [file], "news"))


# Activities
@activities_router.get("", response_model=List[ActivityResponse])
async def list_activities(
    limit: int = 20,
    offset: int = 0,
    service: ContentService = Depends(get_activity_service)
):
    """Public activity feed, newest first"""
    return service.list_items(limit=limit, offset=offset)


@activities_router.get("/{activity_id}", response_model=ActivityResponse)
async def get_activity(activity_id: str, service: ContentService = Depends(get_activity_service)):
    return service.get_item(activity_id)


@activities_router.post("", response_model=ActivityResponse, status_code=201)
async def create_activity(
    activity_data: ActivityCreate,
    user: AuthContext = Depends(require_permission("create_activity")),
    service: ContentService = Depends(get_activity_service)
):
    return service.create_item(activity_data)


@activities_router.put("/{activity_id}", response_model=ActivityResponse)
async def update_activity(
    activity_id: str,
    activity_data: ActivityUpdate,
    user: AuthContext = Depends(require_permission("edit_activity")),
    service: ContentService = Depends(get_activity_service)
):
    return service.update_item(activity_id, activity_data)


@activities_router.delete("/{activity_id}", status_code=204)
async def delete_activity(
    activity_id: str,
    user: AuthContext = Depends(require_permission("delete_activity")),
    service: ContentService = Depends(get_activity_service)
):
    service.delete_item(activity_id)
    return None


@activities_router.post("/images", response_model=UploadResponse, status_code=201)
async def upload_activity_images(
    files: List[UploadFile] = File(...),
    user: AuthContext = Depends(require_permission("create_activity")),
    supabase: Client = Depends(get_supabase)
):
    """Upload up to max_activity_images pictures for an activity"""
    if len(files) > settings.max_activity_images:
        raise HTTPException(
            status_code=400,
            detail=f"สามารถอัปโหลดได้สูงสุด {settings.max_activity_images} ภาพ"
        )
    storage = SupabaseStorage(supabase, settings.media_files_bucket)
    return UploadResponse(urls=await upload_images(storage, files, "activities"))


# Media resources
@media_router.get("", response_model=List[MediaResponse])
async def list_media(
    limit: int = 20,
    offset: int = 0,
    service: ContentService = Depends(get_media_service)
):
    return service.list_items(limit=limit, offset=offset)


@media_router.get("/{media_id}", response_model=MediaResponse)
async def get_media(media_id: str, service: ContentService = Depends(get_media_service)):
    return service.get_item(media_id)


@media_router.post("", response_model=MediaResponse, status_code=201)
async def create_media(
    media_data: MediaCreate,
    user: AuthContext = Depends(require_permission("create_media")),
    service: ContentService = Depends(get_media_service)
):
    return service.create_item(media_data)


@media_router.put("/{media_id}", response_model=MediaResponse)
async def update_media(
    media_id: str,
    media_data: MediaUpdate,
    user: AuthContext = Depends(require_permission("edit_media")),
    service: ContentService = Depends(get_media_service)
):
    return service.update_item(media_id, media_data)


@media_router.delete("/{media_id}", status_code=204)
async def delete_media(
    media_id: str,
    user: AuthContext = Depends(require_permission("delete_media")),
    service: ContentService = Depends(get_media_service)
):
    service.delete_item(media_id)
    return None


@media_router.post("/thumbnail", response_model=UploadResponse, status_code=201)
async def upload_media_thumbnail(
    file: UploadFile = File(...),
    user: AuthContext = Depends(require_permission("create_media")),
    supabase: Client = Depends(get_supabase)
):
    storage = SupabaseStorage(supabase, settings.media_files_bucket)
    return UploadResponse(urls=await upload_images(storage, [file], "media"))


# Deep links
@links_router.get("/resolve", response_model=DetailLinkResponse)
async def resolve_detail_link(fragment: str, supabase: Client = Depends(get_supabase)):
    """Open a news or activity item from a '#news-detail-<id>' / '#activity-detail-<id>' fragment"""
    link = parse_detail_fragment(fragment)
    if link is None:
        raise HTTPException(status_code=400, detail="ลิงก์ไม่ถูกต้อง")
    if link.kind == "news":
        item = get_news_service(supabase).get_item(link.item_id)
    else:
        item = get_activity_service(supabase).get_item(link.item_id)
    return DetailLinkResponse(kind=link.kind, item_id=link.item_id, item=item.model_dump(mode="json"))
