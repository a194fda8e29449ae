"""
Core dependencies for route protection and permission checking
"""

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from school_portal.database.supabase_client import (
    get_service_supabase, get_session_client_factory, get_supabase
)
from school_portal.modules.auth.service import AuthService
from school_portal.modules.access.service import AccessService, AuthContext
from supabase import Client
from typing import Any, Callable, Dict, Optional
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer()
optional_security = HTTPBearer(auto_error=False)

FORBIDDEN_DETAIL = "คุณไม่มีสิทธิ์เข้าถึงหน้านี้"


def get_auth_service(
    supabase: Client = Depends(get_supabase),
    session_client_factory: Callable[[], Client] = Depends(get_session_client_factory),
    admin_supabase: Client = Depends(get_service_supabase)
) -> AuthService:
    return AuthService(supabase, session_client_factory, admin_supabase)


def get_access_service(supabase: Client = Depends(get_supabase)) -> AccessService:
    return AccessService(supabase)


def get_current_token(
    credentials: HTTPAuthorizationCredentials = Security(security)
) -> str:
    """Extract JWT token from Authorization header"""
    return credentials.credentials


def get_optional_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(optional_security)
) -> Optional[str]:
    return credentials.credentials if credentials else None


def get_current_user_id(
    token: str = Depends(get_current_token),
    auth_service: AuthService = Depends(get_auth_service)
) -> Dict[str, Any]:
    """Extract current user info from JWT token"""
    return auth_service.get_current_user(token)


def get_auth_context(
    request: Request,
    user_data: Dict[str, Any] = Depends(get_current_user_id),
    access_service: AccessService = Depends(get_access_service)
) -> AuthContext:
    """Role and permissions of the caller, resolved once and kept on request.state"""
    cached = getattr(request.state, "auth_context", None)
    if cached is not None and cached.user_id == user_data["id"]:
        return cached
    context = access_service.build_context(user_data)
    request.state.auth_context = context
    return context


def require_admin(context: AuthContext = Depends(get_auth_context)) -> AuthContext:
    if not context.is_admin:
        logger.info(f"Admin access denied for {context.user_id}")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=FORBIDDEN_DETAIL)
    return context


def require_permission(required_permission: str):
    """Factory function to create permission check dependency"""
    def check_permission(context: AuthContext = Depends(get_auth_context)) -> AuthContext:
        if not context.can(required_permission):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"{FORBIDDEN_DETAIL} (ต้องการสิทธิ์: {required_permission})"
            )
        return context
    return check_permission
