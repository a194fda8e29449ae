import logging
from typing import Dict, Iterable, List, Tuple

from fastapi import HTTPException
from supabase import Client

from school_portal.config.access_config import PERMISSION_CATALOG
from school_portal.modules.admin.schemas import PermissionChange, PermissionSaveResponse

logger = logging.getLogger(__name__)

NOTHING_TO_SAVE = "ไม่มีการเปลี่ยนแปลงที่ต้องบันทึก"


class PermissionEditor:
    """
    Buffer of permission edits for the admin matrix. Nothing is written until
    save(); reads prefer a pending edit over what is stored.
    """

    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.pending: List[PermissionChange] = []

    def stage(self, changes: Iterable[PermissionChange]) -> None:
        self.pending.extend(changes)

    def value(self, user_id: str, permission_name: str, persisted: bool = False) -> bool:
        for change in reversed(self.pending):
            if change.user_id == user_id and change.permission_name == permission_name:
                return change.granted
        return persisted

    def load_matrix(self, user_ids: List[str]) -> Dict[str, Dict[str, bool]]:
        """{user_id: {permission: granted}} over the whole catalog; missing rows read as not granted"""
        if not user_ids:
            return {}
        try:
            result = self.supabase.table("user_permissions")\
                .select("user_id, permission_name, granted")\
                .in_("user_id", user_ids)\
                .execute()
        except Exception as e:
            logger.error(f"Error loading user permissions: {e}")
            raise HTTPException(status_code=500, detail="ไม่สามารถโหลดสิทธิ์ผู้ใช้ได้")

        stored: Dict[str, Dict[str, bool]] = {user_id: {} for user_id in user_ids}
        for row in result.data or []:
            if row.get("user_id") in stored and row.get("permission_name") in PERMISSION_CATALOG:
                stored[row["user_id"]][row["permission_name"]] = bool(row.get("granted"))

        return {
            user_id: {
                name: self.value(user_id, name, stored[user_id].get(name, False))
                for name in PERMISSION_CATALOG
            }
            for user_id in user_ids
        }

    def save(self) -> PermissionSaveResponse:
        """
        Write every pending edit in a single upsert so the save is all-or-nothing.
        On failure the buffer is kept for another attempt.
        """
        if not self.pending:
            return PermissionSaveResponse(saved_count=0, message=NOTHING_TO_SAVE)

        # one row per (user, permission); a batch upsert may not touch a key twice
        latest: Dict[Tuple[str, str], bool] = {}
        for change in self.pending:
            latest[(change.user_id, change.permission_name)] = change.granted
        rows = [
            {"user_id": user_id, "permission_name": name, "granted": granted}
            for (user_id, name), granted in latest.items()
        ]
        try:
            self.supabase.table("user_permissions")\
                .upsert(rows, on_conflict="user_id,permission_name")\
                .execute()
        except Exception as e:
            logger.error(f"Error saving {len(rows)} permission changes: {e}")
            raise HTTPException(status_code=500, detail="ไม่สามารถบันทึกสิทธิ์ได้")

        saved_count = len(rows)
        self.pending = []
        logger.info(f"Saved {saved_count} permission changes")
        return PermissionSaveResponse(saved_count=saved_count, message="สิทธิ์ผู้ใช้ได้รับการอัปเดตแล้ว")
