"""
Supabase clients.

One anon client and one service-role client are shared by every request, so
neither may ever hold a user session. Calls that create a session (sign-up,
sign-in, code exchange) go through a throwaway client from new_session_client().
Such a client keeps an OAuth PKCE verifier only in its own memory storage, so
the verifier is handed to the browser, which sends it back with the code.
"""
from typing import Callable, Optional

from supabase import create_client, Client
from supabase.client import ClientOptions

from school_portal.config import settings

# key under which the auth client keeps the PKCE verifier from sign_in_with_oauth
CODE_VERIFIER_KEY = "supabase.auth.token-code-verifier"


def _options() -> ClientOptions:
    return ClientOptions(
        postgrest_client_timeout=settings.supabase_timeout,
        storage_client_timeout=settings.supabase_timeout,
        auto_refresh_token=False,
        persist_session=False,
    )


class SupabaseClient:
    _client: Client = None
    _service_client: Client = None

    @classmethod
    def get_client(cls) -> Client:
        if cls._client is None:
            cls._client = create_client(settings.supabase_url, settings.supabase_key, options=_options())
        return cls._client

    @classmethod
    def get_service_client(cls) -> Client:
        """Client with service_role key; bypasses RLS. Needed for auth admin calls (user emails)."""
        if cls._service_client is None and settings.supabase_service_role_key:
            cls._service_client = create_client(
                settings.supabase_url, settings.supabase_service_role_key, options=_options()
            )
        return cls._service_client or cls.get_client()

    @classmethod
    def new_session_client(cls) -> Client:
        """Uncached anon client; whatever session it picks up dies with it"""
        return create_client(settings.supabase_url, settings.supabase_key, options=_options())


def code_verifier_of(client: Client) -> Optional[str]:
    """PKCE verifier a session client generated for its last OAuth URL, if any"""
    return client.options.storage.get_item(CODE_VERIFIER_KEY)


def get_supabase() -> Client:
    return SupabaseClient.get_client()


def get_service_supabase() -> Client:
    return SupabaseClient.get_service_client()


def get_session_client_factory() -> Callable[[], Client]:
    return SupabaseClient.new_session_client
