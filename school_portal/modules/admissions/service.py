import logging
from supabase import Client
from school_portal.modules.admissions.schemas import AdmissionCreate, AdmissionResponse, AdmissionSubmitted
from typing import List
from fastapi import HTTPException

logger = logging.getLogger(__name__)


class AdmissionService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def check_rate_limit(self, email: str, ip_address: str) -> bool:
        """Database-side submission throttle; True when the submission may proceed"""
        try:
            result = self.supabase.rpc("check_submission_rate_limit", {
                "p_email": email,
                "p_ip_address": ip_address
            }).execute()
        except Exception as e:
            logger.error(f"Rate limit check failed for {email}: {e}")
            raise HTTPException(status_code=500, detail="เกิดข้อผิดพลาด กรุณาลองใหม่อีกครั้ง")
        return bool(result.data)

    def submit(self, application: AdmissionCreate, ip_address: str) -> AdmissionSubmitted:
        if not self.check_rate_limit(application.parent_email, ip_address):
            logger.warning(f"Admission submission throttled for {application.parent_email} from {ip_address}")
            raise HTTPException(status_code=429, detail="ส่งใบสมัครบ่อยเกินไป กรุณาลองใหม่ภายหลัง")
        try:
            result = self.supabase.table("admission_applications")\
                .insert(application.model_dump(mode="json"))\
                .execute()
        except Exception as e:
            logger.error(f"Error submitting admission application: {e}")
            raise HTTPException(status_code=500, detail="เกิดข้อผิดพลาด กรุณาลองใหม่อีกครั้ง")
        application_id = result.data[0].get("id") if result.data else None
        logger.info(f"Admission application {application_id} submitted")
        return AdmissionSubmitted(id=application_id, message="ส่งใบสมัครสำเร็จ! เราจะติดต่อกลับภายใน 3-5 วันทำการ")

    def list_for_admin(self) -> List[AdmissionResponse]:
        """Decrypted applications through the admin-only database function"""
        try:
            result = self.supabase.rpc("get_admission_applications_for_admin", {}).execute()
        except Exception as e:
            logger.error(f"Error fetching admission applications: {e}")
            raise HTTPException(status_code=500, detail="ไม่สามารถโหลดใบสมัครได้")
        return [AdmissionResponse(**row) for row in result.data or []]
