from __future__ import annotations

import json
import logging
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import RedirectResponse

from mediastudio.application.dtos.auth_dto import (
    AuthUserResponse,
    CurrentUserResponse,
    LoginRequest,
    SignupRequest,
)
from mediastudio.config import Settings
from mediastudio.infrastructure.api.dependencies import get_app_settings, get_auth_adapter, get_current_user
from mediastudio.infrastructure.database.supabase_client import AuthFailed, AuthResult, SupabaseAuthAdapter

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/auth",
    tags=["Authentication"],
    responses={
        422: {"description": "Validation Error - Invalid request format"},
    },
)


def _user_payload(result: AuthResult) -> AuthUserResponse:
    return AuthUserResponse(
        id=result.user.id,
        name=result.user.name,
        email=result.user.email,
        token=result.token,
    )


@router.post(
    "/login",
    response_model=AuthUserResponse,
    status_code=status.HTTP_200_OK,
    summary="Sign In",
    description="""
    Authenticate with email and password.

    Returns the user together with a bearer token. Accounts created through
    Google Sign-In have no password and are told to use the Google button.
    """,
    responses={401: {"description": "Unauthorized - Invalid email or password"}},
)
def login(body: LoginRequest, auth: SupabaseAuthAdapter = Depends(get_auth_adapter)):
    """Sign in with email and password."""
    try:
        result = auth.sign_in(body.email, body.password)
    except AuthFailed as e:
        raise HTTPException(status_code=401, detail=str(e)) from e
    return _user_payload(result)


@router.post(
    "/signup",
    response_model=AuthUserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Account",
    description="Register a new email/password account and sign it in.",
    responses={400: {"description": "Bad Request - User already exists or invalid data"}},
)
def signup(body: SignupRequest, auth: SupabaseAuthAdapter = Depends(get_auth_adapter)):
    """Create an account."""
    try:
        result = auth.sign_up(body.name.strip(), body.email, body.password)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return _user_payload(result)


@router.get(
    "/google",
    status_code=status.HTTP_307_TEMPORARY_REDIRECT,
    summary="Start Google Sign-In",
    description="Redirects the browser into the Google OAuth flow.",
)
def google_login(request: Request, auth: SupabaseAuthAdapter = Depends(get_auth_adapter)):
    callback = str(request.url_for("google_callback"))
    return RedirectResponse(auth.oauth_url(callback), status_code=status.HTTP_307_TEMPORARY_REDIRECT)


@router.get(
    "/google/callback",
    name="google_callback",
    summary="Google Sign-In Callback",
    description="""
    Finish Google Sign-In and hand the session back to the frontend.

    On success the browser lands on `FRONTEND_URL?user=<json>&token=<token>`;
    on failure on `FRONTEND_URL?error=google-auth-failed`.
    """,
)
def google_callback(
    code: str | None = None,
    auth: SupabaseAuthAdapter = Depends(get_auth_adapter),
    settings: Settings = Depends(get_app_settings),
):
    frontend = settings.frontend_url
    sep = "&" if "?" in frontend else "?"
    try:
        result = auth.exchange_code(code or "")
    except ValueError as e:
        logger.warning("google sign-in failed: %s", e)
        return RedirectResponse(f"{frontend}{sep}error=google-auth-failed", status_code=status.HTTP_302_FOUND)
    user = _user_payload(result).model_dump()
    user_param = quote(json.dumps(user))
    return RedirectResponse(
        f"{frontend}{sep}user={user_param}&token={quote(result.token)}",
        status_code=status.HTTP_302_FOUND,
    )


@router.get(
    "/me",
    response_model=CurrentUserResponse,
    summary="Get Current User",
    description="Return the identity behind the bearer token.",
    responses={401: {"description": "Unauthorized - Invalid or missing authentication token"}},
)
def get_me(user=Depends(get_current_user)):
    """Get the current user."""
    return CurrentUserResponse(id=user.id, name=user.name, email=user.email)
