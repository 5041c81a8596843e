from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class UserEntity:
    id: str
    email: str
    name: str | None
    created_at: datetime
    password_hash: str | None = None  # None for accounts created through Google
    google_linked: bool = False
