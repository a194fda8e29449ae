import logging
from datetime import datetime, timezone
from supabase import Client
from school_portal.modules.personnel.schemas import (
    PersonnelCreate, PersonnelUpdate, PersonnelResponse, PersonnelGroup
)
from typing import Dict, List
from fastapi import HTTPException

logger = logging.getLogger(__name__)

UNGROUPED = "ไม่ระบุกลุ่มสาระ"


class PersonnelService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_personnel(self) -> List[PersonnelResponse]:
        """Directory ordered by subject group, then name"""
        try:
            result = self.supabase.table("personnel")\
                .select("*")\
                .order("subject_group")\
                .order("full_name")\
                .execute()
            return [PersonnelResponse(**person) for person in result.data or []]
        except Exception as e:
            logger.error(f"Error listing personnel: {e}")
            raise HTTPException(status_code=500, detail="ไม่สามารถโหลดข้อมูลบุคลากรได้")

    def get_report(self) -> List[PersonnelGroup]:
        """Public report: personnel grouped by subject group, groups in directory order"""
        groups: Dict[str, List[PersonnelResponse]] = {}
        for person in self.list_personnel():
            groups.setdefault(person.subject_group or UNGROUPED, []).append(person)
        return [PersonnelGroup(subject_group=name, members=members) for name, members in groups.items()]

    def get_personnel(self, personnel_id: str) -> PersonnelResponse:
        try:
            result = self.supabase.table("personnel")\
                .select("*")\
                .eq("id", personnel_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            logger.error(f"Error fetching personnel {personnel_id}: {e}")
            raise HTTPException(status_code=500, detail="ไม่สามารถโหลดข้อมูลบุคลากรได้")
        if not result.data:
            raise HTTPException(status_code=404, detail="ไม่พบข้อมูลบุคลากร")
        return PersonnelResponse(**result.data[0])

    def create_personnel(self, personnel_data: PersonnelCreate) -> PersonnelResponse:
        try:
            result = self.supabase.table("personnel")\
                .insert(personnel_data.model_dump())\
                .execute()
        except Exception as e:
            logger.error(f"Error creating personnel: {e}")
            raise HTTPException(status_code=500, detail="ไม่สามารถเพิ่มข้อมูลบุคลากรได้")
        if not result.data:
            raise HTTPException(status_code=500, detail="ไม่สามารถเพิ่มข้อมูลบุคลากรได้")
        return PersonnelResponse(**result.data[0])

    def update_personnel(self, personnel_id: str, personnel_data: PersonnelUpdate) -> PersonnelResponse:
        update_data = personnel_data.model_dump(exclude_unset=True)
        update_data["updated_at"] = datetime.now(timezone.utc).isoformat()
        try:
            result = self.supabase.table("personnel")\
                .update(update_data)\
                .eq("id", personnel_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error updating personnel {personnel_id}: {e}")
            raise HTTPException(status_code=500, detail="ไม่สามารถแก้ไขข้อมูลบุคลากรได้")
        if not result.data:
            raise HTTPException(status_code=404, detail="ไม่พบข้อมูลบุคลากร")
        return PersonnelResponse(**result.data[0])

    def delete_personnel(self, personnel_id: str) -> bool:
        try:
            result = self.supabase.table("personnel")\
                .delete()\
                .eq("id", personnel_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error deleting personnel {personnel_id}: {e}")
            raise HTTPException(status_code=500, detail="ไม่สามารถลบข้อมูลบุคลากรได้")
        if not result.data:
            raise HTTPException(status_code=404, detail="ไม่พบข้อมูลบุคลากร")
        return True
