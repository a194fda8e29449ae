import logging
from datetime import datetime, timezone
from typing import Generic, List, Type, TypeVar

from fastapi import HTTPException, UploadFile
from pydantic import BaseModel
from supabase import Client

from school_portal.core.storage import SupabaseStorage, build_object_path

logger = logging.getLogger(__name__)

ResponseT = TypeVar("ResponseT", bound=BaseModel)


class ContentService(Generic[ResponseT]):
    """CRUD over one content table (news, activities, media_resources)"""

    def __init__(self, supabase: Client, table: str, response_model: Type[ResponseT], label: str):
        self.supabase = supabase
        self.table = table
        self.response_model = response_model
        self.label = label

    def list_items(self, limit: int = 20, offset: int = 0) -> List[ResponseT]:
        """Newest first"""
        try:
            result = self.supabase.table(self.table)\
                .select("*")\
                .order("created_at", desc=True)\
                .limit(limit)\
                .offset(offset)\
                .execute()
            return [self.response_model(**item) for item in result.data or []]
        except Exception as e:
            logger.error(f"Error listing {self.table}: {e}")
            raise HTTPException(status_code=500, detail=f"ไม่สามารถโหลดข้อมูล{self.label}ได้")

    def get_item(self, item_id: str) -> ResponseT:
        try:
            result = self.supabase.table(self.table)\
                .select("*")\
                .eq("id", item_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            logger.error(f"Error fetching {self.table} {item_id}: {e}")
            raise HTTPException(status_code=500, detail=f"ไม่สามารถโหลดข้อมูล{self.label}ได้")
        if not result.data:
            raise HTTPException(status_code=404, detail=f"ไม่พบ{self.label}")
        return self.response_model(**result.data[0])

    def create_item(self, data: BaseModel) -> ResponseT:
        try:
            result = self.supabase.table(self.table)\
                .insert(data.model_dump(mode="json", exclude_none=True))\
                .execute()
        except Exception as e:
            logger.error(f"Error creating {self.table}: {e}")
            raise HTTPException(status_code=500, detail=f"ไม่สามารถบันทึก{self.label}ได้")
        if not result.data:
            raise HTTPException(status_code=500, detail=f"ไม่สามารถบันทึก{self.label}ได้")
        logger.info(f"Created {self.table} {result.data[0].get('id')}")
        return self.response_model(**result.data[0])

    def update_item(self, item_id: str, data: BaseModel) -> ResponseT:
        update_data = data.model_dump(mode="json", exclude_unset=True)
        update_data["updated_at"] = datetime.now(timezone.utc).isoformat()
        try:
            result = self.supabase.table(self.table)\
                .update(update_data)\
                .eq("id", item_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error updating {self.table} {item_id}: {e}")
            raise HTTPException(status_code=500, detail=f"ไม่สามารถแก้ไข{self.label}ได้")
        if not result.data:
            raise HTTPException(status_code=404, detail=f"ไม่พบ{self.label}")
        return self.response_model(**result.data[0])

    def delete_item(self, item_id: str) -> bool:
        try:
            result = self.supabase.table(self.table)\
                .delete()\
                .eq("id", item_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error deleting {self.table} {item_id}: {e}")
            raise HTTPException(status_code=500, detail=f"ไม่สามารถลบ{self.label}ได้")
        if not result.data:
            raise HTTPException(status_code=404, detail=f"ไม่พบ{self.label}")
        return True


async def upload_images(storage: SupabaseStorage, files: List[UploadFile], prefix: str) -> List[str]:
    """Store image uploads and return their public URLs, in order"""
    urls = []
    for file in files:
        if not (file.content_type or "").startswith("image/"):
            raise HTTPException(status_code=400, detail=f"ไฟล์ {file.filename} ไม่ใช่รูปภาพ")
        content = await file.read()
        path = build_object_path(file.filename, prefix)
        try:
            urls.append(storage.upload_file(content, path, content_type=file.content_type))
        except Exception:
            raise HTTPException(status_code=500, detail="อัปโหลดรูปภาพไม่สำเร็จ")
    return urls
