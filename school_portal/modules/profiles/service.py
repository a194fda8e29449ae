import logging
from datetime import datetime, timezone
from supabase import Client
from school_portal.config import settings
from school_portal.core.storage import SupabaseStorage
from school_portal.modules.profiles.schemas import ProfileUpdate, ProfileResponse
from typing import Optional
from fastapi import HTTPException

logger = logging.getLogger(__name__)


class ProfileService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_profile(self, user_id: str) -> ProfileResponse:
        """Profile of a user; an empty profile when none was saved yet"""
        try:
            result = self.supabase.table("profiles")\
                .select("*")\
                .eq("id", user_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            logger.error(f"Error fetching profile {user_id}: {e}")
            raise HTTPException(status_code=500, detail="ไม่สามารถโหลดข้อมูลผู้ใช้ได้")
        if not result.data:
            return ProfileResponse(id=user_id)
        return ProfileResponse(**result.data[0])

    def _upsert(self, payload: dict) -> ProfileResponse:
        payload["updated_at"] = datetime.now(timezone.utc).isoformat()
        try:
            result = self.supabase.table("profiles").upsert(payload).execute()
        except Exception as e:
            logger.error(f"Error saving profile {payload.get('id')}: {e}")
            raise HTTPException(status_code=500, detail="ไม่สามารถบันทึกข้อมูลผู้ใช้ได้")
        if not result.data:
            raise HTTPException(status_code=500, detail="ไม่สามารถบันทึกข้อมูลผู้ใช้ได้")
        return ProfileResponse(**result.data[0])

    def update_profile(self, user_id: str, profile_data: ProfileUpdate) -> ProfileResponse:
        display_name: Optional[str] = profile_data.display_name
        return self._upsert({"id": user_id, "display_name": display_name.strip() if display_name else None})

    def update_avatar(self, user_id: str, content: bytes, filename: Optional[str], content_type: str) -> ProfileResponse:
        """Overwrite the user's avatar object and point the profile at it"""
        ext = filename.rsplit(".", 1)[-1].lower() if filename and "." in filename else "png"
        storage = SupabaseStorage(self.supabase, settings.avatars_bucket)
        try:
            url = storage.upload_file(content, f"{user_id}/avatar.{ext}", content_type=content_type, upsert=True)
        except Exception:
            raise HTTPException(status_code=500, detail="อัปโหลดรูปโปรไฟล์ไม่สำเร็จ")
        return self._upsert({"id": user_id, "avatar_url": url})
