import logging
import re
import time
from supabase import Client
from school_portal.config.access_config import approval_status
from school_portal.modules.admin.schemas import (
    UserRoleResponse, AdminUserResponse, BulkApprovalResponse, DeleteRolesResponse,
    RoleAssignmentAction, RoleAssignmentRow, RoleAssignmentResponse
)
from typing import Dict, List, Optional
from fastapi import HTTPException

logger = logging.getLogger(__name__)

UNKNOWN_EMAIL = "ไม่ระบุอีเมล"


def synthesize_user_id(email: str) -> str:
    """Placeholder id for a role row created before the person has an account"""
    return f"user_{re.sub(r'[^a-zA-Z0-9]', '_', email)}_{int(time.time() * 1000)}"


class AdminService:
    def __init__(self, supabase: Client, service_supabase: Optional[Client] = None):
        self.supabase = supabase
        self.service_supabase = service_supabase or supabase

    def list_role_rows(self, approved_only: bool = False) -> List[UserRoleResponse]:
        """All role assignments, oldest first"""
        try:
            query = self.supabase.table("user_roles").select("*")
            if approved_only:
                query = query.eq("approved", True)
            result = query.order("created_at").execute()
            return [UserRoleResponse(**row) for row in result.data or []]
        except Exception as e:
            logger.error(f"Error fetching user roles: {e}")
            raise HTTPException(status_code=500, detail="ไม่สามารถโหลดข้อมูลผู้ใช้ได้")

    def resolve_user_emails(self, user_ids: List[str]) -> Dict[str, str]:
        """Emails from the auth admin API (service role only). Unknown ids are left out."""
        if not user_ids:
            return {}
        wanted = set(user_ids)
        try:
            users = self.service_supabase.auth.admin.list_users()
        except Exception as e:
            logger.error(f"Error fetching users from auth admin API: {e}")
            raise HTTPException(status_code=500, detail="ไม่สามารถดึงอีเมลผู้ใช้ได้")
        user_email_map = {}
        for user in users or []:
            if user.id in wanted:
                user_email_map[user.id] = user.email or UNKNOWN_EMAIL
        return user_email_map

    def _fill_missing_emails(self, emails: Dict[str, Optional[str]]) -> Dict[str, str]:
        missing = [user_id for user_id, email in emails.items() if not email]
        resolved: Dict[str, str] = {}
        if missing:
            try:
                resolved = self.resolve_user_emails(missing)
            except HTTPException:
                logger.warning(f"Could not resolve emails for {len(missing)} users; showing ids")
        return {
            user_id: email or resolved.get(user_id) or user_id
            for user_id, email in emails.items()
        }

    def list_users(self) -> List[AdminUserResponse]:
        """Role rows grouped per user, in order of first assignment"""
        grouped: Dict[str, dict] = {}
        emails: Dict[str, Optional[str]] = {}
        for row in self.list_role_rows():
            entry = grouped.get(row.user_id)
            if entry is None:
                entry = {"user_id": row.user_id, "roles": [], "role_ids": [], "needs_approval": False}
                grouped[row.user_id] = entry
                emails[row.user_id] = row.email
            entry["roles"].append(row.role)
            entry["role_ids"].append(row.id)
            if not row.approved:
                entry["needs_approval"] = True
            emails[row.user_id] = emails[row.user_id] or row.email

        emails = self._fill_missing_emails(emails)
        return [
            AdminUserResponse(
                email=emails[user_id],
                status=approval_status(not entry["needs_approval"], entry["needs_approval"]),
                **entry
            )
            for user_id, entry in grouped.items()
        ]

    def list_approved_users(self) -> Dict[str, str]:
        """{user_id: email} for users holding at least one approved role"""
        emails: Dict[str, Optional[str]] = {}
        for row in self.list_role_rows(approved_only=True):
            emails[row.user_id] = emails.get(row.user_id) or row.email
        return {user_id: email or UNKNOWN_EMAIL for user_id, email in emails.items()}

    def approve_user(self, user_id: str) -> int:
        """Approve every role row of a user; returns the number of rows updated"""
        try:
            result = self.supabase.table("user_roles")\
                .update({"approved": True, "pending_approval": False})\
                .eq("user_id", user_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error approving user {user_id}: {e}")
            raise HTTPException(status_code=500, detail="ไม่สามารถอนุมัติผู้ใช้ได้")
        if not result.data:
            raise HTTPException(status_code=404, detail="ไม่พบผู้ใช้")
        logger.info(f"Approved {len(result.data)} role rows for {user_id}")
        return len(result.data)

    def approve_all_pending(self) -> BulkApprovalResponse:
        """Approve each user with an unapproved role, one user at a time; failures do not stop the rest"""
        try:
            result = self.supabase.table("user_roles")\
                .select("user_id")\
                .eq("approved", False)\
                .execute()
        except Exception as e:
            logger.error(f"Error fetching pending users: {e}")
            raise HTTPException(status_code=500, detail="ไม่สามารถโหลดข้อมูลผู้ใช้ได้")

        pending_ids = list(dict.fromkeys(row["user_id"] for row in result.data or []))
        approved, failed = [], []
        for user_id in pending_ids:
            try:
                self.approve_user(user_id)
                approved.append(user_id)
            except HTTPException:
                failed.append(user_id)

        if not pending_ids:
            message = "ไม่มีผู้ใช้ที่รอการอนุมัติ"
        else:
            message = f"อนุมัติสำเร็จ {len(approved)} คน, ไม่สำเร็จ {len(failed)} คน"
        return BulkApprovalResponse(approved_user_ids=approved, failed_user_ids=failed, message=message)

    def delete_role(self, role_id: str) -> bool:
        try:
            result = self.supabase.table("user_roles")\
                .delete()\
                .eq("id", role_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error deleting role {role_id}: {e}")
            raise HTTPException(status_code=500, detail="ไม่สามารถลบสิทธิ์ผู้ใช้ได้")
        if not result.data:
            raise HTTPException(status_code=404, detail="ไม่พบสิทธิ์ที่ต้องการลบ")
        return True

    def delete_user_roles(self, user_id: str) -> DeleteRolesResponse:
        """Delete a user's role rows one by one. Not atomic: a failure mid-way leaves the rest in place."""
        try:
            result = self.supabase.table("user_roles")\
                .select("id")\
                .eq("user_id", user_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error fetching roles of {user_id}: {e}")
            raise HTTPException(status_code=500, detail="ไม่สามารถโหลดข้อมูลผู้ใช้ได้")
        if not result.data:
            raise HTTPException(status_code=404, detail="ไม่พบผู้ใช้")

        deleted, failed = [], []
        for row in result.data:
            try:
                self.delete_role(row["id"])
                deleted.append(row["id"])
            except HTTPException:
                failed.append(row["id"])
        return DeleteRolesResponse(user_id=user_id, deleted_role_ids=deleted, failed_role_ids=failed)

    def assign_roles(self, rows: List[RoleAssignmentRow]) -> RoleAssignmentResponse:
        """
        Manual role form: rows need an email and at least one role. Each row is
        its own request; a failed row is reported in failed_rows and the others
        still go through.
        """
        numbered = [(number, row) for number, row in enumerate(rows, start=1) if row.email.strip() and row.roles]
        if not numbered:
            raise HTTPException(status_code=400, detail="กรุณากรอกอีเมลและเลือกสิทธิ์อย่างน้อย 1 แถว")

        inserted: List[UserRoleResponse] = []
        deleted_count = 0
        failed_rows: List[int] = []
        for number, row in numbered:
            email = row.email.strip()
            try:
                if row.action == RoleAssignmentAction.APPROVE:
                    user_id = synthesize_user_id(email)
                    result = self.supabase.table("user_roles").insert([
                        {
                            "user_id": user_id,
                            "role": role.value,
                            "email": email,
                            "approved": True,
                            "pending_approval": False
                        }
                        for role in row.roles
                    ]).execute()
                    inserted.extend(UserRoleResponse(**item) for item in result.data or [])
                elif row.action == RoleAssignmentAction.DELETE:
                    result = self.supabase.table("user_roles")\
                        .delete()\
                        .eq("email", email)\
                        .in_("role", [role.value for role in row.roles])\
                        .execute()
                    deleted_count += len(result.data or [])
            except Exception as e:
                logger.error(f"Error assigning roles for row {number} ({email}): {e}")
                failed_rows.append(number)

        if failed_rows:
            message = f"กำหนดสิทธิ์ไม่สำเร็จ {len(failed_rows)} แถว"
        else:
            message = "กำหนดสิทธิ์ผู้ใช้สำเร็จแล้ว"
        return RoleAssignmentResponse(
            inserted=inserted,
            deleted_count=deleted_count,
            failed_rows=failed_rows,
            message=message
        )
