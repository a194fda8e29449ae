"""
Session resolution and route guarding.

The browser reports where it is (URL) and what the auth client just told it
(event, whether a session exists); these functions decide where it should go.
URL rewrites are always history *replacements* so that stripped tokens and
authorization codes never come back through the back button.
"""
import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import parse_qs, urlsplit

from school_portal.config import settings
from school_portal.modules.auth.schemas import AuthEvent, GuardState, NavigationDecision

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Location:
    path: str
    query: str = ""
    fragment: str = ""

    @classmethod
    def from_url(cls, url: str) -> "Location":
        parts = urlsplit(url)
        return cls(path=parts.path or "/", query=parts.query, fragment=parts.fragment)

    def param(self, name: str) -> Optional[str]:
        values = parse_qs(self.query).get(name)
        return values[0] if values else None

    @property
    def has_auth_code(self) -> bool:
        return bool(self.param("code"))

    @property
    def has_auth_error(self) -> bool:
        return bool(self.param("error"))

    @property
    def has_token_fragment(self) -> bool:
        return "access_token" in self.fragment

    @property
    def handshake_in_flight(self) -> bool:
        return self.has_auth_code or self.has_token_fragment

    def without_fragment(self) -> str:
        return self.path + (f"?{self.query}" if self.query else "")


def _in_dashboard(location: Location) -> bool:
    return location.path.startswith(settings.dashboard_path)


def on_auth_event(event: Optional[AuthEvent], location: Location) -> NavigationDecision:
    """React to an auth-state transition reported by the browser's auth client"""
    if event == AuthEvent.SIGNED_IN:
        return NavigationDecision(
            replace_url=location.without_fragment() if location.has_token_fragment else None,
            redirect_to=None if _in_dashboard(location) else settings.dashboard_path,
        )
    if event == AuthEvent.SIGNED_OUT:
        if location.path != settings.public_root_path:
            return NavigationDecision(redirect_to=settings.public_root_path)
    return NavigationDecision()


def on_mount(
    location: Location,
    exchanged_session: Optional[bool] = None,
    has_session: bool = False,
) -> NavigationDecision:
    """
    Initial page load. With ?code= and no ?error= a successful PKCE exchange
    strips the query and moves on to the dashboard. Otherwise, including a
    failed or pending exchange, an existing session on the public root moves
    the visitor to the dashboard.
    """
    if location.has_auth_code and not location.has_auth_error and exchanged_session:
        return NavigationDecision(
            replace_url=location.path,
            redirect_to=None if _in_dashboard(location) else settings.dashboard_path,
        )
    if has_session and location.path == settings.public_root_path:
        return NavigationDecision(redirect_to=settings.dashboard_path)
    return NavigationDecision()


class RouteGuard:
    """Gate for a protected page: checking -> authenticated | redirecting."""

    def __init__(self):
        self.state = GuardState.CHECKING
        self.redirect_to: Optional[str] = None

    @property
    def settled(self) -> bool:
        return self.state != GuardState.CHECKING

    def start(self, location: Location, has_session: bool) -> GuardState:
        """Direct session check on entry"""
        if self.settled:
            return self.state
        if has_session:
            self.state = GuardState.AUTHENTICATED
        elif not location.handshake_in_flight:
            self.state = GuardState.REDIRECTING
            self.redirect_to = settings.public_root_path
        else:
            # No timeout: an abandoned handshake leaves the guard checking
            logger.debug("Route guard waiting for auth handshake on %s", location.path)
        return self.state

    def on_auth_event(self, event: Optional[AuthEvent], has_session: bool) -> GuardState:
        if self.state == GuardState.CHECKING and has_session:
            self.state = GuardState.AUTHENTICATED
        return self.state
