"""
Supabase Auth provides:
- auth.sign_up() / auth.sign_in_with_password() - email and password accounts
- auth.sign_in_with_oauth() - Google, Facebook and Apple (PKCE flow)
- auth.exchange_code_for_session() - turns the ?code= callback into a session
- auth.get_user() - current user from JWT token

Navigation endpoints let the front-end ask where a visitor should be sent
after an auth event, on page load, or when opening a protected page.
"""
from fastapi import APIRouter, Depends, Request
from school_portal.config import settings
from school_portal.core.rate_limit import limiter
from school_portal.modules.auth.schemas import (
    LoginRequest, RegisterRequest, TokenResponse, RegisterResponse,
    OAuthProvider, OAuthUrlResponse, CodeExchangeRequest,
    NavigationRequest, NavigationDecision, CallbackResponse,
    GuardResponse, MeResponse
)
from school_portal.modules.auth.service import AuthService
from school_portal.modules.auth.session import Location, RouteGuard, on_auth_event, on_mount
from school_portal.modules.access.service import AuthContext
from school_portal.core.dependencies import (
    get_auth_service, get_current_token, get_optional_token, get_auth_context
)
from typing import Optional

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    register_data: RegisterRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Register a new user"""
    return service.register(register_data)


@router.post("/login", response_model=TokenResponse)
@limiter.limit("10/minute")
async def login(
    request: Request,
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Login and get access token"""
    return service.login(login_data)


@router.post("/logout", status_code=200)
async def logout(
    token: str = Depends(get_current_token),
    service: AuthService = Depends(get_auth_service)
):
    """Logout and invalidate token"""
    service.logout(token)
    return {"message": "ออกจากระบบเรียบร้อยแล้ว"}


@router.get("/oauth/{provider}", response_model=OAuthUrlResponse)
async def oauth_sign_in(
    provider: OAuthProvider,
    redirect_to: Optional[str] = None,
    service: AuthService = Depends(get_auth_service)
):
    """Provider URL to send the browser to"""
    return service.oauth_url(provider, redirect_to)


@router.post("/callback", response_model=CallbackResponse)
async def oauth_callback(
    exchange: CodeExchangeRequest,
    service: AuthService = Depends(get_auth_service)
):
    """PKCE code exchange. A failed exchange yields no session and no redirect."""
    location = Location.from_url(exchange.url)
    session = None
    if location.has_auth_code and not location.has_auth_error:
        session = service.exchange_code(exchange)
    return CallbackResponse(
        session=session,
        navigation=on_mount(location, exchanged_session=session is not None, has_session=exchange.has_session),
    )


@router.post("/navigation", response_model=NavigationDecision)
async def navigation(body: NavigationRequest):
    """Where to go after an auth-state event, or on page load when no event is given"""
    location = Location.from_url(body.url)
    if body.event is None:
        return on_mount(location, has_session=body.has_session)
    return on_auth_event(body.event, location)


@router.get("/guard", response_model=GuardResponse)
async def guard(
    url: str = settings.dashboard_path,
    token: Optional[str] = Depends(get_optional_token),
    service: AuthService = Depends(get_auth_service)
):
    """Route guard verdict for a protected page"""
    route_guard = RouteGuard()
    state = route_guard.start(Location.from_url(url), has_session=service.find_user(token) is not None)
    return GuardResponse(state=state, redirect_to=route_guard.redirect_to)


@router.get("/me", response_model=MeResponse)
async def get_current_user(context: AuthContext = Depends(get_auth_context)):
    """Current authenticated user with role and permissions (for frontend UI)."""
    return MeResponse(
        id=context.user_id,
        email=context.email,
        role=context.role.value if context.role else None,
        permissions=sorted(context.permissions),
    )
