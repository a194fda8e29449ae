from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from school_portal.config import settings
from school_portal.core.dependencies import require_permission
from school_portal.core.storage import SupabaseStorage, build_object_path
from school_portal.database.supabase_client import get_supabase
from school_portal.modules.access.service import AuthContext
from school_portal.modules.personnel.schemas import (
    PersonnelCreate, PersonnelUpdate, PersonnelResponse, PersonnelGroup, PhotoUploadResponse
)
from school_portal.modules.personnel.service import PersonnelService
from supabase import Client
from typing import List

router = APIRouter(prefix="/personnel", tags=["personnel"])


def get_personnel_service(supabase: Client = Depends(get_supabase)) -> PersonnelService:
    return PersonnelService(supabase)


@router.get("", response_model=List[PersonnelResponse])
async def list_personnel(service: PersonnelService = Depends(get_personnel_service)):
    return service.list_personnel()


@router.get("/report", response_model=List[PersonnelGroup])
async def personnel_report(service: PersonnelService = Depends(get_personnel_service)):
    """Public personnel report grouped by subject group"""
    return service.get_report()


@router.get("/{personnel_id}", response_model=PersonnelResponse)
async def get_personnel(personnel_id: str, service: PersonnelService = Depends(get_personnel_service)):
    return service.get_personnel(personnel_id)


@router.post("", response_model=PersonnelResponse, status_code=201)
async def create_personnel(
    personnel_data: PersonnelCreate,
    user: AuthContext = Depends(require_permission("manage_personnel")),
    service: PersonnelService = Depends(get_personnel_service)
):
    return service.create_personnel(personnel_data)


@router.put("/{personnel_id}", response_model=PersonnelResponse)
async def update_personnel(
    personnel_id: str,
    personnel_data: PersonnelUpdate,
    user: AuthContext = Depends(require_permission("manage_personnel")),
    service: PersonnelService = Depends(get_personnel_service)
):
    return service.update_personnel(personnel_id, personnel_data)


@router.delete("/{personnel_id}", status_code=204)
async def delete_personnel(
    personnel_id: str,
    user: AuthContext = Depends(require_permission("manage_personnel")),
    service: PersonnelService = Depends(get_personnel_service)
):
    service.delete_personnel(personnel_id)
    return None


@router.post("/photo", response_model=PhotoUploadResponse, status_code=201)
async def upload_personnel_photo(
    file: UploadFile = File(...),
    user: AuthContext = Depends(require_permission("manage_personnel")),
    supabase: Client = Depends(get_supabase)
):
    """Store a personnel photo; the returned URL goes into photo_url on create/update"""
    if not (file.content_type or "").startswith("image/"):
        raise HTTPException(status_code=400, detail="กรุณาเลือกไฟล์รูปภาพ")
    storage = SupabaseStorage(supabase, settings.avatars_bucket)
    content = await file.read()
    try:
        url = storage.upload_file(content, build_object_path(file.filename, "personnel"), content_type=file.content_type)
    except Exception:
        raise HTTPException(status_code=500, detail="อัปโหลดรูปภาพไม่สำเร็จ")
    return PhotoUploadResponse(photo_url=url)
