from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class UserIdentity:
    id: str
    name: str | None
    email: str | None


@dataclass(frozen=True)
class Session:
    identity: UserIdentity
    token: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.identity.id,
            "name": self.identity.name,
            "email": self.identity.email,
            "token": self.token,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Session:
        """Build a session from the backend's user payload.

        Accepts ``_id`` as well as ``id``; older backends sent the
        former.
        """
        user_id = data.get("id") or data.get("_id")
        token = data.get("token")
        if not user_id or not token:
            raise ValueError("User payload is missing an id or token")
        identity = UserIdentity(id=str(user_id), name=data.get("name"), email=data.get("email"))
        return cls(identity=identity, token=str(token))
