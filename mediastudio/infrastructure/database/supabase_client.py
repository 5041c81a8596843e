from __future__ import annotations

import logging
import os
import uuid
from dataclasses import dataclass

from supabase import Client, create_client

from mediastudio.infrastructure.database.repositories.user_repository import (
    UserRepository,
    verify_password,
)

logger = logging.getLogger(__name__)

# identity used for the Google button while Supabase is disabled
LOCAL_GOOGLE_EMAIL = "google.user@localhost"
LOCAL_GOOGLE_NAME = "Google User"
_LOCAL_CODE_PREFIX = "local-"


class AuthFailed(ValueError):
    """Credentials or token were rejected."""


@dataclass(slots=True)
class UserInfo:
    id: str
    email: str | None
    name: str | None = None


@dataclass(frozen=True)
class AuthResult:
    user: UserInfo
    token: str


def _supabase_disabled() -> bool:
    return os.getenv("SUPABASE_DISABLED", "0") == "1"


class SupabaseAuthAdapter:
    """Email/password and Google sign-in backed by Supabase Auth.

    When SUPABASE_DISABLED=1, or no project is configured, accounts and
    tokens live in memory through ``UserRepository``.
    """

    def __init__(self, users: UserRepository | None = None) -> None:
        self.disabled = _supabase_disabled()
        self.url = os.getenv("SUPABASE_URL")
        self.key = os.getenv("SUPABASE_ANON_KEY")
        self.users = users or UserRepository()
        self._client: Client | None = None
        if not self.disabled and self.url and self.key:
            self._client = get_supabase_client()

    @property
    def local(self) -> bool:
        return self.disabled or self._client is None

    def sign_in(self, email: str, password: str) -> AuthResult:
        if self.local:
            user = self.users.find_by_email(email)
            if user is not None and user.password_hash is None:
                raise AuthFailed(
                    'This account was created using Google Sign-In. Please use the "Continue with Google" button.'
                )
            if user is None or not verify_password(password, user.password_hash):
                raise AuthFailed("Invalid email or password")
            return AuthResult(
                user=UserInfo(id=user.id, email=user.email, name=user.name),
                token=self.users.issue_token(user.id),
            )
        try:  # pragma: no cover - network
            res = self._client.auth.sign_in_with_password({"email": email, "password": password})
        except Exception as exc:  # pragma: no cover - network
            raise AuthFailed("Invalid email or password") from exc
        return self._result_from(res)  # pragma: no cover - network

    def sign_up(self, name: str, email: str, password: str) -> AuthResult:
        if self.local:
            user = self.users.create(email, name, password)
            logger.info("created local account %s", user.id)
            return AuthResult(
                user=UserInfo(id=user.id, email=user.email, name=user.name),
                token=self.users.issue_token(user.id),
            )
        try:  # pragma: no cover - network
            res = self._client.auth.sign_up(
                {"email": email, "password": password, "options": {"data": {"name": name}}}
            )
        except Exception as exc:  # pragma: no cover - network
            raise ValueError(f"Sign up failed: {exc}") from exc
        if res.session is None:  # pragma: no cover - network
            raise ValueError("Please confirm your email address, then sign in.")
        return self._result_from(res)  # pragma: no cover - network

    def oauth_url(self, redirect_to: str) -> str:
        """Where to send the browser to start Google sign-in."""
        if self.local:
            # no identity provider; jump straight to our own callback
            sep = "&" if "?" in redirect_to else "?"
            return f"{redirect_to}{sep}code={_LOCAL_CODE_PREFIX}{uuid.uuid4().hex}"
        res = self._client.auth.sign_in_with_oauth(  # pragma: no cover - network
            {"provider": "google", "options": {"redirect_to": redirect_to}}
        )
        return res.url  # pragma: no cover - network

    def exchange_code(self, code: str) -> AuthResult:
        if not code:
            raise AuthFailed("Missing authorization code")
        if self.local:
            if not code.startswith(_LOCAL_CODE_PREFIX):
                raise AuthFailed("Invalid authorization code")
            user = self.users.find_by_email(LOCAL_GOOGLE_EMAIL)
            if user is None:
                user = self.users.create(LOCAL_GOOGLE_EMAIL, LOCAL_GOOGLE_NAME, google_linked=True)
            else:
                user = self.users.link_google(user.id)
            return AuthResult(
                user=UserInfo(id=user.id, email=user.email, name=user.name),
                token=self.users.issue_token(user.id),
            )
        try:  # pragma: no cover - network
            res = self._client.auth.exchange_code_for_session({"auth_code": code})
        except Exception as exc:  # pragma: no cover - network
            raise AuthFailed(f"Google sign-in failed: {exc}") from exc
        return self._result_from(res)  # pragma: no cover - network

    def validate_token(self, token: str) -> UserInfo:
        if not token:
            raise AuthFailed("Missing access token")
        if self.local:
            user = self.users.resolve_token(token)
            if user is None:
                raise AuthFailed("Invalid access token")
            return UserInfo(id=user.id, email=user.email, name=user.name)
        # Real validation via Supabase Auth API
        try:  # pragma: no cover - network
            res = self._client.auth.get_user(token)
            user = res.user
            if not user:
                raise AuthFailed("Invalid access token")
            return self._user_info(user)
        except AuthFailed:  # pragma: no cover - network
            raise
        except Exception as exc:  # pragma: no cover - network
            raise AuthFailed(f"Invalid access token: {exc}") from exc

    @staticmethod
    def _user_info(user) -> UserInfo:  # pragma: no cover - network
        metadata = getattr(user, "user_metadata", None) or {}
        return UserInfo(
            id=user.id,
            email=user.email,
            name=metadata.get("name") or metadata.get("full_name"),
        )

    def _result_from(self, res) -> AuthResult:  # pragma: no cover - network
        if res.user is None or res.session is None:
            raise AuthFailed("Authentication did not return a session")
        return AuthResult(user=self._user_info(res.user), token=res.session.access_token)


# Simple reusable singleton client getter for repositories
_CLIENT_SINGLETON: Client | None = None


def get_supabase_client() -> Client | None:
    global _CLIENT_SINGLETON
    url = os.getenv("SUPABASE_URL")
    key = os.getenv("SUPABASE_ANON_KEY")
    if _supabase_disabled() or not url or not key:
        return None
    if _CLIENT_SINGLETON is None:
        _CLIENT_SINGLETON = create_client(url, key)
    return _CLIENT_SINGLETON
