from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from mediastudio.config import Settings
from mediastudio.domain.entities.artifact import ArtifactRef
from mediastudio.domain.entities.session import Session
from mediastudio.domain.errors import AuthError, JobFailure, TransportError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = httpx.Timeout(120.0, connect=10.0)
UNEXPECTED_RESPONSE = "The server sent an unexpected response. Please try again."


@dataclass(frozen=True)
class EditResult:
    image: ArtifactRef | None
    text: str | None


@dataclass(frozen=True)
class VideoSubmission:
    operation_name: str | None = None
    video: bytes | None = None  # set when the backend answered with the file itself


@dataclass(frozen=True)
class VideoStatus:
    pending: bool
    video: bytes | None = None
    mime_type: str = "video/mp4"


class BackendClient:
    """Async client for the backend proxy's JSON API.

    The bearer token is read from the session store on every request, so a
    login or logout takes effect immediately.
    """

    def __init__(self, http: httpx.AsyncClient, session_store) -> None:
        self.http = http
        self.session_store = session_store

    @classmethod
    def from_settings(cls, settings: Settings, session_store) -> BackendClient:
        http = httpx.AsyncClient(base_url=settings.backend_url, timeout=DEFAULT_TIMEOUT)
        return cls(http, session_store)

    async def aclose(self) -> None:
        await self.http.aclose()

    # --- auth -----------------------------------------------------------

    async def login(self, email: str, password: str) -> Session:
        resp = await self._send(
            "POST", "/api/auth/login", json={"email": email, "password": password}, auth=False
        )
        return _session_from(resp)

    async def signup(self, name: str, email: str, password: str) -> Session:
        resp = await self._send(
            "POST",
            "/api/auth/signup",
            json={"name": name, "email": email, "password": password},
            auth=False,
        )
        return _session_from(resp)

    def google_login_url(self) -> str:
        return str(self.http.base_url.join("/api/auth/google"))

    # --- generative endpoints -------------------------------------------

    async def edit_image(self, image: ArtifactRef, prompt: str, model: str) -> EditResult:
        body = {"image": image.data, "mimeType": image.mime_type, "prompt": prompt, "model": model}
        data = _json(await self._send("POST", "/api/gemini/edit-image", json=body))
        new_image = data.get("newImageBase64")
        return EditResult(
            image=ArtifactRef(data=new_image, mime_type=data.get("mimeType") or "image/png")
            if new_image
            else None,
            text=data.get("text"),
        )

    async def generate_images(self, prompt: str, count: int, aspect_ratio: str) -> list[ArtifactRef]:
        body = {"prompt": prompt, "numberOfImages": count, "aspectRatio": aspect_ratio}
        data = _json(await self._send("POST", "/api/gemini/generate-images", json=body))
        return [ArtifactRef(data=img, mime_type="image/jpeg") for img in data.get("images") or []]

    async def submit_video(self, prompt: str, start_image: ArtifactRef | None = None) -> VideoSubmission:
        body: dict[str, Any] = {"prompt": prompt}
        if start_image is not None:
            body["startImage"] = {"base64": start_image.data, "mimeType": start_image.mime_type}
        resp = await self._send("POST", "/api/gemini/generate-video", json=body)
        if _is_video(resp):
            return VideoSubmission(video=resp.content)
        operation_name = _json(resp).get("operationName")
        if not operation_name:
            raise JobFailure("The server did not return a video job handle.")
        return VideoSubmission(operation_name=operation_name)

    async def video_status(self, operation_name: str) -> VideoStatus:
        resp = await self._send("GET", f"/api/gemini/video-status/{operation_name}")
        if _is_video(resp):
            return VideoStatus(pending=False, video=resp.content, mime_type=_content_type(resp))
        data = _json(resp)
        if data.get("status") == "pending":
            return VideoStatus(pending=True)
        raise JobFailure(_message_from(data))

    # --- plumbing -------------------------------------------------------

    async def _send(
        self, method: str, path: str, *, json: dict[str, Any] | None = None, auth: bool = True
    ) -> httpx.Response:
        headers = self.session_store.auth_headers() if auth else {}
        try:
            resp = await self.http.request(method, path, json=json, headers=headers)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise TransportError() from exc
        if resp.status_code == 401:
            logger.info("%s %s rejected with 401", method, path)
            # for login the server explains why; elsewhere the session is stale
            raise AuthError(_error_message(resp) if not auth else None)
        if resp.is_error:
            logger.warning("%s %s returned %s", method, path, resp.status_code)
            raise TransportError(_error_message(resp), status_code=resp.status_code)
        return resp


def _content_type(resp: httpx.Response) -> str:
    return resp.headers.get("content-type", "").split(";")[0].strip()


def _is_video(resp: httpx.Response) -> bool:
    return _content_type(resp).startswith("video/")


def _message_from(data: Any) -> str | None:
    if not isinstance(data, dict):
        return None
    for key in ("message", "error", "detail"):
        value = data.get(key)
        if isinstance(value, str) and value:
            return value
        # FastAPI 422 bodies carry a list of {"msg": ...}
        if isinstance(value, list) and value:
            return "; ".join(str(item.get("msg", item)) if isinstance(item, dict) else str(item) for item in value)
    return None


def _error_message(resp: httpx.Response) -> str:
    try:
        message = _message_from(resp.json())
    except ValueError:
        message = None
    return message or f"HTTP error! status: {resp.status_code}"


def _json(resp: httpx.Response) -> dict[str, Any]:
    """Decode a 2xx body, which must be a JSON object."""
    try:
        data = resp.json()
    except ValueError as exc:
        logger.warning("%s returned a non-JSON body", resp.request.url.path)
        raise TransportError(UNEXPECTED_RESPONSE, status_code=resp.status_code) from exc
    if not isinstance(data, dict):
        logger.warning("%s returned a JSON %s", resp.request.url.path, type(data).__name__)
        raise TransportError(UNEXPECTED_RESPONSE, status_code=resp.status_code)
    return data


def _session_from(resp: httpx.Response) -> Session:
    try:
        return Session.from_dict(_json(resp))
    except ValueError as exc:
        raise TransportError(UNEXPECTED_RESPONSE, status_code=resp.status_code) from exc
