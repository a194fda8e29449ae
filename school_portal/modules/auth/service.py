import hashlib
import logging
import time
from supabase import Client
from school_portal.modules.auth.schemas import (
    LoginRequest, RegisterRequest, TokenResponse, RegisterResponse,
    OAuthProvider, OAuthUrlResponse, CodeExchangeRequest
)
from school_portal.config.settings import settings
from school_portal.database.supabase_client import code_verifier_of
from fastapi import HTTPException
from typing import Callable, Dict, Any, Optional

logger = logging.getLogger(__name__)

# In-memory cache for get_current_user to reduce Supabase auth calls (e.g. many parallel requests with same token)
_AUTH_USER_CACHE: Dict[str, tuple] = {}
_AUTH_CACHE_TTL_SEC = 60
_AUTH_CACHE_MAX_SIZE = 500


def clear_auth_cache():
    _AUTH_USER_CACHE.clear()


def _drop_expired(now: float):
    for key in [key for key, (_, expiry) in _AUTH_USER_CACHE.items() if expiry <= now]:
        del _AUTH_USER_CACHE[key]


class AuthService:
    def __init__(
        self,
        supabase: Client,
        session_client_factory: Callable[[], Client],
        admin_supabase: Optional[Client] = None
    ):
        # token checks use the shared client, revocation the service-role one;
        # anything that creates a session gets its own client
        self.supabase = supabase
        self.session_client_factory = session_client_factory
        self.admin_supabase = admin_supabase or supabase

    def register(self, register_data: RegisterRequest) -> RegisterResponse:
        """Register a new user using Supabase Auth"""
        try:
            user_metadata = {}
            if register_data.display_name:
                user_metadata["display_name"] = register_data.display_name

            auth_response = self.session_client_factory().auth.sign_up({
                "email": register_data.email,
                "password": register_data.password,
                "options": {
                    "data": user_metadata,
                    "email_redirect_to": settings.oauth_redirect_url()
                }
            })

            if not auth_response.user:
                raise HTTPException(status_code=400, detail="ไม่สามารถสมัครสมาชิกได้")

            return RegisterResponse(
                user_id=auth_response.user.id,
                email=auth_response.user.email or register_data.email,
                message="สมัครสมาชิกสำเร็จ กรุณารอผู้ดูแลระบบอนุมัติสิทธิ์"
            )
        except HTTPException:
            raise
        except Exception as e:
            error_message = str(e)
            if "already registered" in error_message.lower() or "already exists" in error_message.lower():
                raise HTTPException(status_code=400, detail="อีเมลนี้ถูกใช้งานแล้ว")
            logger.error(f"Registration failed for {register_data.email}: {error_message}")
            raise HTTPException(status_code=500, detail=f"Registration failed: {error_message}")

    def login(self, login_data: LoginRequest) -> TokenResponse:
        """Authenticate user with email and password"""
        try:
            auth_response = self.session_client_factory().auth.sign_in_with_password({
                "email": login_data.email,
                "password": login_data.password
            })

            if not auth_response.user or not auth_response.session:
                raise HTTPException(status_code=401, detail="อีเมลหรือรหัสผ่านไม่ถูกต้อง")

            return TokenResponse(
                access_token=auth_response.session.access_token,
                refresh_token=auth_response.session.refresh_token,
                token_type="bearer",
                user_id=auth_response.user.id,
                email=auth_response.user.email or login_data.email
            )
        except HTTPException:
            raise
        except Exception as e:
            error_message = str(e)
            if "invalid" in error_message.lower() or "credentials" in error_message.lower():
                raise HTTPException(status_code=401, detail="อีเมลหรือรหัสผ่านไม่ถูกต้อง")
            logger.error(f"Login failed for {login_data.email}: {error_message}")
            raise HTTPException(status_code=500, detail=f"Login failed: {error_message}")

    def oauth_url(self, provider: OAuthProvider, redirect_to: Optional[str] = None) -> OAuthUrlResponse:
        """
        Start an OAuth sign-in; the provider redirects back with ?code= (PKCE).
        The browser keeps code_verifier and posts it to /auth/callback with the code.
        """
        try:
            client = self.session_client_factory()
            response = client.auth.sign_in_with_oauth({
                "provider": provider.value,
                "options": {"redirect_to": redirect_to or settings.oauth_redirect_url()}
            })
            # the client is dropped after this call, so its verifier travels with the URL
            return OAuthUrlResponse(provider=provider, url=response.url, code_verifier=code_verifier_of(client))
        except Exception as e:
            logger.error(f"OAuth sign-in with {provider.value} failed: {e}")
            raise HTTPException(status_code=502, detail="ไม่สามารถเข้าสู่ระบบด้วยบัญชีภายนอกได้")

    def exchange_code(self, exchange: CodeExchangeRequest) -> Optional[TokenResponse]:
        """Exchange a PKCE authorization code for a session. Failures are logged, not raised."""
        try:
            auth_response = self.session_client_factory().auth.exchange_code_for_session({
                "auth_code": exchange.code,
                "code_verifier": exchange.code_verifier,
                "redirect_to": exchange.redirect_to or settings.oauth_redirect_url()
            })
        except Exception as e:
            logger.error(f"OAuth code exchange failed: {e}")
            return None
        if not auth_response or not auth_response.session or not auth_response.user:
            logger.error("OAuth code exchange returned no session")
            return None
        return TokenResponse(
            access_token=auth_response.session.access_token,
            refresh_token=auth_response.session.refresh_token,
            token_type="bearer",
            user_id=auth_response.user.id,
            email=auth_response.user.email or ""
        )

    def get_current_user(self, token: str) -> Dict[str, Any]:
        """Get current user details from Supabase Auth token. Uses short TTL cache to reduce auth API calls."""
        try:
            cache_key = hashlib.sha256(token.encode()).hexdigest()
            now = time.monotonic()
            if cache_key in _AUTH_USER_CACHE:
                user_data, expiry = _AUTH_USER_CACHE[cache_key]
                if now < expiry:
                    return user_data
                del _AUTH_USER_CACHE[cache_key]
            user_response = self.supabase.auth.get_user(jwt=token)
            if not user_response or not user_response.user:
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            user = user_response.user
            user_data = {
                "id": user.id,
                "email": user.email,
                "user_metadata": user.user_metadata or {},
                "app_metadata": user.app_metadata or {},
                "created_at": user.created_at,
            }
            if len(_AUTH_USER_CACHE) >= _AUTH_CACHE_MAX_SIZE:
                _drop_expired(now)
            if len(_AUTH_USER_CACHE) < _AUTH_CACHE_MAX_SIZE:
                _AUTH_USER_CACHE[cache_key] = (user_data, now + _AUTH_CACHE_TTL_SEC)
            return user_data
        except HTTPException:
            raise
        except Exception as e:
            error_msg = str(e)
            if "JWT" in error_msg or "expired" in error_msg.lower() or "invalid" in error_msg.lower():
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            raise HTTPException(status_code=401, detail="Authentication failed")

    def find_user(self, token: Optional[str]) -> Optional[Dict[str, Any]]:
        """Like get_current_user but returns None instead of raising when there is no valid session"""
        if not token:
            return None
        try:
            return self.get_current_user(token)
        except HTTPException:
            return None

    def logout(self, token: str) -> bool:
        """Revoke the caller's refresh tokens and forget the cached user"""
        _AUTH_USER_CACHE.pop(hashlib.sha256(token.encode()).hexdigest(), None)
        try:
            self.admin_supabase.auth.admin.sign_out(token)
            return True
        except Exception as e:
            logger.warning(f"Sign out failed: {e}")
            return False
