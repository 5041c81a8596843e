from __future__ import annotations

import hashlib
import hmac
import secrets
import uuid
from datetime import UTC, datetime

from mediastudio.domain.entities.user import UserEntity

# module-level in-memory store for disabled mode
_MEM_USERS: dict[str, UserEntity] = {}
_MEM_TOKENS: dict[str, str] = {}  # token -> user id

_PBKDF2_ROUNDS = 200_000


def hash_password(password: str, *, salt: bytes | None = None) -> str:
    salt = salt or secrets.token_bytes(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, _PBKDF2_ROUNDS)
    return f"pbkdf2_sha256${_PBKDF2_ROUNDS}${salt.hex()}${digest.hex()}"


def verify_password(password: str, encoded: str) -> bool:
    try:
        _, rounds, salt_hex, digest_hex = encoded.split("$")
    except ValueError:
        return False
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), bytes.fromhex(salt_hex), int(rounds))
    return hmac.compare_digest(digest.hex(), digest_hex)


class UserRepository:
    """Local accounts and bearer tokens used while Supabase is disabled."""

    def create(
        self,
        email: str,
        name: str | None,
        password: str | None = None,
        *,
        google_linked: bool = False,
    ) -> UserEntity:
        email = email.strip().lower()
        if self.find_by_email(email) is not None:
            raise ValueError("User already exists")
        entity = UserEntity(
            id=f"user_{uuid.uuid4().hex[:16]}",
            email=email,
            name=name,
            created_at=datetime.now(UTC),
            password_hash=hash_password(password) if password else None,
            google_linked=google_linked,
        )
        _MEM_USERS[entity.id] = entity
        return entity

    def get(self, user_id: str) -> UserEntity | None:
        return _MEM_USERS.get(user_id)

    def find_by_email(self, email: str) -> UserEntity | None:
        email = email.strip().lower()
        return next((u for u in _MEM_USERS.values() if u.email == email), None)

    def link_google(self, user_id: str) -> UserEntity:
        user = _MEM_USERS[user_id]
        if not user.google_linked:
            user = UserEntity(
                id=user.id,
                email=user.email,
                name=user.name,
                created_at=user.created_at,
                password_hash=user.password_hash,
                google_linked=True,
            )
            _MEM_USERS[user.id] = user
        return user

    def issue_token(self, user_id: str) -> str:
        token = secrets.token_urlsafe(32)
        _MEM_TOKENS[token] = user_id
        return token

    def resolve_token(self, token: str) -> UserEntity | None:
        user_id = _MEM_TOKENS.get(token)
        return _MEM_USERS.get(user_id) if user_id else None
