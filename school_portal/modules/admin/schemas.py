from enum import Enum
from pydantic import BaseModel, field_validator
from typing import Optional, List, Dict
from datetime import datetime

from school_portal.config.access_config import ApprovalStatus, PERMISSION_NAMES, Role


class UserRoleResponse(BaseModel):
    id: str
    user_id: str
    role: Role
    email: Optional[str] = None
    approved: bool
    pending_approval: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AdminUserResponse(BaseModel):
    user_id: str
    email: str
    roles: List[Role]
    role_ids: List[str]
    needs_approval: bool
    status: ApprovalStatus


class BulkApprovalResponse(BaseModel):
    approved_user_ids: List[str]
    failed_user_ids: List[str]
    message: str


class DeleteRolesResponse(BaseModel):
    user_id: str
    deleted_role_ids: List[str]
    failed_role_ids: List[str]


class RoleAssignmentAction(str, Enum):
    APPROVE = "approve"
    DELETE = "delete"
    NONE = ""


class RoleAssignmentRow(BaseModel):
    email: str = ""
    roles: List[Role] = []
    action: RoleAssignmentAction = RoleAssignmentAction.NONE


class RoleAssignmentRequest(BaseModel):
    rows: List[RoleAssignmentRow]


class RoleAssignmentResponse(BaseModel):
    inserted: List[UserRoleResponse]
    deleted_count: int
    failed_rows: List[int] = []  # 1-based positions in the submitted rows
    message: str


class UserEmailsRequest(BaseModel):
    user_ids: List[str]


class UserEmailsResponse(BaseModel):
    user_email_map: Dict[str, str]


class ImportRowError(BaseModel):
    row: int
    message: str
    value: Optional[str] = None


class CsvImportResponse(BaseModel):
    success_count: int
    errors: List[ImportRowError]
    message: str


class PermissionChange(BaseModel):
    user_id: str
    permission_name: str
    granted: bool

    @field_validator("permission_name")
    @classmethod
    def known_permission(cls, value: str) -> str:
        if value not in PERMISSION_NAMES:
            raise ValueError(f"Unknown permission: {value}")
        return value


class PermissionSaveRequest(BaseModel):
    changes: List[PermissionChange] = []


class PermissionSaveResponse(BaseModel):
    saved_count: int
    message: str


class PermissionDefinition(BaseModel):
    name: str
    label: str


class UserPermissionsResponse(BaseModel):
    user_id: str
    email: Optional[str] = None
    permissions: Dict[str, bool]


class PermissionMatrixResponse(BaseModel):
    permissions: List[PermissionDefinition]
    users: List[UserPermissionsResponse]
