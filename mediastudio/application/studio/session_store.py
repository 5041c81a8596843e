from __future__ import annotations

import json
import logging

import httpx

from mediastudio.domain.entities.session import Session

logger = logging.getLogger(__name__)

# query parameters written by the backend's OAuth callback redirect
REDIRECT_PARAMS = ("user", "token", "error")


class RedirectLocation:
    """The address the app was opened with, as a browser's location bar.

    ``replace`` mirrors ``history.replaceState``: it rewrites the current URL
    without creating a back-navigation entry.
    """

    def __init__(self, url: str | httpx.URL) -> None:
        self.url = httpx.URL(url)

    def replace(self, url: str | httpx.URL) -> None:
        self.url = httpx.URL(url)


class SessionStore:
    """Owns the authenticated session and its durable copy."""

    def __init__(self, storage, location: RedirectLocation | None = None) -> None:
        self.storage = storage
        self.location = location
        self.session: Session | None = None
        self.auth_error: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.session is not None

    @property
    def token(self) -> str | None:
        return self.session.token if self.session else None

    def login(self, session: Session) -> None:
        self.storage.save(session.to_dict())
        self.session = session
        self.auth_error = None
        logger.info("signed in as %s", session.identity.email or session.identity.id)

    def logout(self) -> None:
        self.storage.clear()
        self.session = None
        logger.info("signed out")

    def rehydrate(self) -> Session | None:
        """Restore the session at startup.

        A payload carried on the redirect URL wins and is removed from the URL
        before anything else happens, so it can only be consumed once.
        """
        redirected = self._consume_redirect()
        if redirected is not None:
            self.login(redirected)
            return redirected

        record = self.storage.load()
        if record is None:
            return None
        try:
            self.session = Session.from_dict(record)
        except ValueError as exc:
            logger.warning("Failed to parse persisted session: %s", exc)
            self.storage.clear()
            self.session = None
        return self.session

    def auth_headers(self) -> dict[str, str]:
        if self.session is None:
            return {}
        return {"Authorization": f"Bearer {self.session.token}"}

    def _consume_redirect(self) -> Session | None:
        if self.location is None:
            return None
        url = self.location.url
        params = url.params
        if not any(name in params for name in REDIRECT_PARAMS):
            return None

        user_raw = params.get("user")
        token = params.get("token")
        error = params.get("error")

        cleaned = url
        for name in REDIRECT_PARAMS:
            cleaned = cleaned.copy_remove_param(name)
        self.location.replace(cleaned)

        if error:
            logger.warning("OAuth sign-in failed: %s", error)
            self.auth_error = error
            return None
        if not user_raw:
            return None
        try:
            data = json.loads(user_raw)
            if not isinstance(data, dict):
                raise ValueError("user payload is not an object")
            if token:
                data["token"] = token
            return Session.from_dict(data)
        except ValueError as exc:
            logger.warning("Ignoring malformed sign-in redirect: %s", exc)
            return None
