from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from school_portal.config.access_config import PERMISSION_CATALOG
from school_portal.core.dependencies import require_admin
from school_portal.database.supabase_client import get_supabase, get_service_supabase
from school_portal.modules.access.service import AuthContext
from school_portal.modules.admin.csv_import import CsvRoleImporter
from school_portal.modules.admin.permission_editor import PermissionEditor
from school_portal.modules.admin.schemas import (
    UserRoleResponse, AdminUserResponse, BulkApprovalResponse, DeleteRolesResponse,
    RoleAssignmentRequest, RoleAssignmentResponse, UserEmailsRequest, UserEmailsResponse,
    CsvImportResponse, PermissionSaveRequest, PermissionSaveResponse,
    PermissionDefinition, PermissionMatrixResponse, UserPermissionsResponse
)
from school_portal.modules.admin.service import AdminService
from supabase import Client
from typing import List

router = APIRouter(prefix="/admin", tags=["admin"])


def get_admin_service(
    supabase: Client = Depends(get_supabase),
    service_supabase: Client = Depends(get_service_supabase)
) -> AdminService:
    return AdminService(supabase, service_supabase)


def get_permission_editor(supabase: Client = Depends(get_supabase)) -> PermissionEditor:
    return PermissionEditor(supabase)


def get_csv_importer(supabase: Client = Depends(get_supabase)) -> CsvRoleImporter:
    return CsvRoleImporter(supabase)


# Users and role assignments
@router.get("/users", response_model=List[AdminUserResponse])
async def list_users(
    admin: AuthContext = Depends(require_admin),
    service: AdminService = Depends(get_admin_service)
):
    """Every user with role assignments, grouped, with approval status"""
    return service.list_users()


@router.get("/roles", response_model=List[UserRoleResponse])
async def list_role_rows(
    admin: AuthContext = Depends(require_admin),
    service: AdminService = Depends(get_admin_service)
):
    return service.list_role_rows()


@router.post("/users/approve-pending", response_model=BulkApprovalResponse)
async def approve_all_pending(
    admin: AuthContext = Depends(require_admin),
    service: AdminService = Depends(get_admin_service)
):
    """Approve every user that has an unapproved role"""
    return service.approve_all_pending()


@router.post("/users/{user_id}/approve")
async def approve_user(
    user_id: str,
    admin: AuthContext = Depends(require_admin),
    service: AdminService = Depends(get_admin_service)
):
    updated = service.approve_user(user_id)
    return {"user_id": user_id, "updated_count": updated, "message": "อนุมัติผู้ใช้เข้าสู่ระบบสำเร็จแล้ว"}


@router.delete("/users/{user_id}/roles", response_model=DeleteRolesResponse)
async def delete_user_roles(
    user_id: str,
    admin: AuthContext = Depends(require_admin),
    service: AdminService = Depends(get_admin_service)
):
    """Delete all role rows of a user"""
    return service.delete_user_roles(user_id)


@router.delete("/roles/{role_id}", status_code=204)
async def delete_role(
    role_id: str,
    admin: AuthContext = Depends(require_admin),
    service: AdminService = Depends(get_admin_service)
):
    service.delete_role(role_id)
    return None


@router.post("/roles/assign", response_model=RoleAssignmentResponse)
async def assign_roles(
    request: RoleAssignmentRequest,
    admin: AuthContext = Depends(require_admin),
    service: AdminService = Depends(get_admin_service)
):
    """Manual role form: approve inserts approved roles, delete removes them"""
    return service.assign_roles(request.rows)


@router.post("/roles/import", response_model=CsvImportResponse)
async def import_roles(
    file: UploadFile = File(...),
    admin: AuthContext = Depends(require_admin),
    importer: CsvRoleImporter = Depends(get_csv_importer)
):
    """
    Import pending role assignments from a CSV file with the columns
    ชื่อ, อีเมล, รหัสผ่าน, สถานะ (ครู / นักเรียน / ผู้ปกครอง).
    """
    if not file.filename or not file.filename.lower().endswith(".csv"):
        raise HTTPException(status_code=400, detail="รองรับเฉพาะไฟล์ .csv เท่านั้น")
    content = await file.read()
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="ไฟล์ต้องเข้ารหัสแบบ UTF-8")
    return importer.run(text)


@router.post("/user-emails", response_model=UserEmailsResponse)
async def get_user_emails(
    request: UserEmailsRequest,
    admin: AuthContext = Depends(require_admin),
    service: AdminService = Depends(get_admin_service)
):
    """Resolve user ids to emails with service-role privileges"""
    return UserEmailsResponse(user_email_map=service.resolve_user_emails(request.user_ids))


# Permission matrix
@router.get("/permissions", response_model=PermissionMatrixResponse)
async def get_permission_matrix(
    admin: AuthContext = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
    editor: PermissionEditor = Depends(get_permission_editor)
):
    """Catalog of permissions and the grants of every approved user"""
    users = service.list_approved_users()
    matrix = editor.load_matrix(list(users))
    return PermissionMatrixResponse(
        permissions=[PermissionDefinition(name=name, label=label) for name, label in PERMISSION_CATALOG.items()],
        users=[
            UserPermissionsResponse(user_id=user_id, email=email, permissions=matrix[user_id])
            for user_id, email in users.items()
        ]
    )


@router.get("/permissions/{user_id}", response_model=UserPermissionsResponse)
async def get_user_permissions(
    user_id: str,
    admin: AuthContext = Depends(require_admin),
    editor: PermissionEditor = Depends(get_permission_editor)
):
    return UserPermissionsResponse(user_id=user_id, permissions=editor.load_matrix([user_id])[user_id])


@router.put("/permissions", response_model=PermissionSaveResponse)
async def save_permissions(
    request: PermissionSaveRequest,
    admin: AuthContext = Depends(require_admin),
    editor: PermissionEditor = Depends(get_permission_editor)
):
    """Persist pending permission edits"""
    editor.stage(request.changes)
    return editor.save()
