from __future__ import annotations

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """Credentials for email/password sign-in."""
    email: str = Field(..., min_length=1, description="Account email", examples=["user@example.com"])
    password: str = Field(..., min_length=1, description="Account password")


class SignupRequest(BaseModel):
    """Details for a new email/password account."""
    name: str = Field(..., min_length=1, max_length=100, description="Display name", examples=["Jane Doe"])
    email: str = Field(..., min_length=3, description="Account email", examples=["user@example.com"])
    password: str = Field(..., min_length=6, description="Account password (at least 6 characters)")


class AuthUserResponse(BaseModel):
    """The signed-in user together with the bearer token for later requests."""
    id: str = Field(..., description="Unique identifier of the user")
    name: str | None = Field(None, description="Display name of the user", examples=["Jane Doe"])
    email: str | None = Field(None, description="Email address of the user", examples=["user@example.com"])
    token: str = Field(..., description="Bearer token to send in the Authorization header")


class CurrentUserResponse(BaseModel):
    """Identity behind the bearer token."""
    id: str = Field(..., description="Unique identifier of the user")
    name: str | None = Field(None, description="Display name of the user")
    email: str | None = Field(None, description="Email address of the user")
