from enum import Enum
from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List


class OAuthProvider(str, Enum):
    GOOGLE = "google"
    FACEBOOK = "facebook"
    APPLE = "apple"


class AuthEvent(str, Enum):
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"
    USER_UPDATED = "USER_UPDATED"
    PASSWORD_RECOVERY = "PASSWORD_RECOVERY"
    INITIAL_SESSION = "INITIAL_SESSION"


class GuardState(str, Enum):
    CHECKING = "checking"
    AUTHENTICATED = "authenticated"
    REDIRECTING = "unauthenticated-redirecting"


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "bearer"
    user_id: str
    email: str


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)
    display_name: Optional[str] = None


class RegisterResponse(BaseModel):
    user_id: str
    email: str
    message: str


class OAuthUrlResponse(BaseModel):
    provider: OAuthProvider
    url: str
    code_verifier: Optional[str] = None  # None outside the PKCE flow


class CodeExchangeRequest(BaseModel):
    url: str
    code: str
    code_verifier: str
    redirect_to: Optional[str] = None
    has_session: bool = False  # a session the browser already held before the exchange


class NavigationRequest(BaseModel):
    url: str
    event: Optional[AuthEvent] = None
    has_session: bool = False


class NavigationDecision(BaseModel):
    # replace_url rewrites the current history entry; it never pushes a new one
    replace_url: Optional[str] = None
    redirect_to: Optional[str] = None


class CallbackResponse(BaseModel):
    session: Optional[TokenResponse] = None
    navigation: NavigationDecision


class GuardResponse(BaseModel):
    state: GuardState
    redirect_to: Optional[str] = None


class MeResponse(BaseModel):
    id: str
    email: Optional[str] = None
    role: Optional[str] = None
    permissions: List[str]
