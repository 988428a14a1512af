"""Supabase access, split by capability.

``BrowserGateway`` uses the anon key and is bound to one user session, so
every row it touches is subject to row level security. ``ServiceGateway`` uses
the service role key and bypasses row level security; it is only created
inside request handlers, after the caller's bearer token has been checked
against Supabase.
"""
import logging
from functools import lru_cache
from typing import Callable, Optional

from sqlalchemy.orm import Session
from supabase import AuthError as SupabaseAuthError
from supabase import Client, ClientOptions, create_client

from ..config import settings
from ..errors import AuthError, ConfigurationError, ValidationError
from ..models import UserProfile
from ..schemas.auth import AuthResponse, AuthSession, AuthUser

logger = logging.getLogger(__name__)


def create_browser_client() -> Client:
    """New anon-key client. Each one holds at most one user session."""
    return create_client(settings.SUPABASE_URL, settings.SUPABASE_ANON_KEY)


@lru_cache
def create_service_client() -> Client:
    """Service role client. Bypasses row level security: server side only."""
    if not settings.SUPABASE_SERVICE_ROLE_KEY:
        raise ConfigurationError("Missing Supabase service role key")

    return create_client(
        settings.SUPABASE_URL,
        settings.SUPABASE_SERVICE_ROLE_KEY,
        options=ClientOptions(auto_refresh_token=False, persist_session=False),
    )


def to_auth_user(user) -> AuthUser:
    return AuthUser(
        id=str(user.id),
        email=getattr(user, "email", None),
        user_metadata=getattr(user, "user_metadata", None) or {},
    )


def _to_auth_response(response) -> AuthResponse:
    session = None
    if response.session is not None:
        session = AuthSession(
            access_token=response.session.access_token,
            refresh_token=response.session.refresh_token,
            expires_in=getattr(response.session, "expires_in", None),
        )
    user = to_auth_user(response.user) if response.user is not None else None
    return AuthResponse(user=user, session=session)


class BrowserGateway:
    """Session lifecycle on behalf of an end user (anon key)"""

    def __init__(self, client_factory: Callable[[], Client] = create_browser_client):
        self._client_factory = client_factory

    def sign_up(self, email: str, password: str, full_name: Optional[str] = None) -> AuthResponse:
        client = self._client_factory()
        try:
            response = client.auth.sign_up({
                "email": email,
                "password": password,
                "options": {"data": {"full_name": full_name or ""}},
            })
        except SupabaseAuthError as e:
            raise ValidationError(e.message)
        return _to_auth_response(response)

    def sign_in(self, email: str, password: str) -> AuthResponse:
        client = self._client_factory()
        try:
            response = client.auth.sign_in_with_password({"email": email, "password": password})
        except SupabaseAuthError as e:
            raise AuthError(e.message)
        return _to_auth_response(response)

    def sign_out(self, access_token: str, refresh_token: str):
        client = self._client_factory()
        try:
            client.auth.set_session(access_token, refresh_token)
            client.auth.sign_out()
        except SupabaseAuthError as e:
            raise AuthError(e.message)

    def reset_password(self, email: str):
        client = self._client_factory()
        try:
            client.auth.reset_password_for_email(
                email, {"redirect_to": f"{settings.APP_URL}/reset-password"}
            )
        except SupabaseAuthError as e:
            raise ValidationError(e.message)


class ServiceGateway:
    """Privileged identity lookup and record access for request handlers"""

    def __init__(self, client: Client, db: Session):
        self._client = client
        self.db = db

    def get_user(self, token: str) -> AuthUser:
        """Resolve a bearer token to the Supabase user it belongs to"""
        if not token:
            raise AuthError()

        try:
            response = self._client.auth.get_user(token)
        except SupabaseAuthError as e:
            logger.info("Rejected access token: %s", e.message)
            raise AuthError()

        if response is None or response.user is None:
            raise AuthError()
        return to_auth_user(response.user)

    def get_profile(self, user_id: str) -> Optional[UserProfile]:
        return self.db.get(UserProfile, user_id)

    def increment_generations(self, user_id: str):
        """Bump the user's generation counter, creating the profile row if needed"""
        updated = (
            self.db.query(UserProfile)
            .filter(UserProfile.id == user_id)
            .update(
                {UserProfile.total_generations: UserProfile.total_generations + 1},
                synchronize_session=False,
            )
        )
        if not updated:
            self.db.add(UserProfile(id=user_id, total_generations=1))
        self.db.commit()
