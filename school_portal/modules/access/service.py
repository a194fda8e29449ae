import logging
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Optional

from fastapi import HTTPException
from supabase import Client

from school_portal.config.access_config import PERMISSION_NAMES, Role, parse_role

logger = logging.getLogger(__name__)

LOOKUP_FAILED_DETAIL = "ไม่สามารถตรวจสอบสิทธิ์ผู้ใช้ได้"


@dataclass(frozen=True)
class AuthContext:
    """Resolved identity of the caller, computed once per request."""
    user_id: str
    email: Optional[str] = None
    role: Optional[Role] = None
    permissions: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def can(self, permission: str) -> bool:
        return self.is_admin or permission in self.permissions


class AccessService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_role(self, user_id: str) -> Optional[Role]:
        """Approved role of the user; unapproved assignments count as no role. Admin wins over other roles."""
        result = self.supabase.table("user_roles")\
            .select("role, approved, created_at")\
            .eq("user_id", user_id)\
            .eq("approved", True)\
            .order("created_at")\
            .execute()
        roles = [parse_role(row.get("role")) for row in result.data or []]
        if not roles:
            return None
        if Role.ADMIN in roles:
            return Role.ADMIN
        return roles[0]

    def get_permissions(self, user_id: str) -> FrozenSet[str]:
        """Names of the permissions explicitly granted to the user"""
        result = self.supabase.table("user_permissions")\
            .select("permission_name, granted")\
            .eq("user_id", user_id)\
            .eq("granted", True)\
            .execute()
        names = set()
        for row in result.data or []:
            name = row.get("permission_name")
            if name not in PERMISSION_NAMES:
                logger.warning(f"Ignoring unknown permission {name!r} granted to {user_id}")
                continue
            names.add(name)
        return frozenset(names)

    def build_context(self, user_data: Dict[str, Any]) -> AuthContext:
        user_id = user_data["id"]
        try:
            role = self.get_role(user_id)
            permissions = self.get_permissions(user_id)
        except Exception as e:
            logger.error(f"Error resolving access for {user_id}: {e}")
            raise HTTPException(status_code=500, detail=LOOKUP_FAILED_DETAIL)
        return AuthContext(
            user_id=user_id,
            email=user_data.get("email"),
            role=role,
            permissions=permissions,
        )
