import io
import os
import sys
import uuid
from pathlib import Path

import numpy as np
import pytest
from fastapi.testclient import TestClient
from PIL import Image

# Ensure project root is on sys.path so 'mediastudio' is importable during tests
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("SUPABASE_DISABLED", "1")
os.environ.setdefault("GEMINI_API_KEY", "test-key")

from mediastudio.domain.entities.artifact import ArtifactRef  # noqa: E402
from mediastudio.domain.services.media_encoding import MediaEncoding  # noqa: E402
from mediastudio.infrastructure.providers.gemini_provider import (  # noqa: E402
    EditedImage,
    VideoOperationStatus,
)


def make_png_bytes(w=4, h=4, color=(128, 64, 32)) -> bytes:
    arr = np.zeros((h, w, 3), dtype=np.uint8)
    arr[:, :] = color
    img = Image.fromarray(arr)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def make_artifact(color=(128, 64, 32), mime_type="image/png") -> ArtifactRef:
    return ArtifactRef(data=MediaEncoding.encode(make_png_bytes(color=color)), mime_type=mime_type)


class FakeProvider:
    """Stands in for GeminiProvider; records calls and returns canned results."""

    def __init__(self, configured=True):
        self.configured = configured
        self.edit_result = EditedImage(data=make_png_bytes(color=(1, 2, 3)), mime_type="image/png", text="done")
        self.images = [b"jpeg-1", b"jpeg-2"]
        self.pending_polls = 1
        self.video = b"\x00\x00\x00\x18ftypmp42"
        self.video_error = None
        self.calls = []

    def edit_image(self, image, mime_type, prompt, model=None):
        self.calls.append(("edit", mime_type, prompt, model))
        return self.edit_result

    def generate_images(self, prompt, count, aspect_ratio):
        self.calls.append(("images", prompt, count, aspect_ratio))
        return self.images[:count]

    def start_video(self, prompt, start_image=None, start_mime_type=None):
        self.calls.append(("video", prompt, start_image is not None))
        return f"models/veo/operations/{uuid.uuid4().hex[:8]}"

    def video_status(self, operation_name):
        self.calls.append(("status", operation_name))
        if self.pending_polls > 0:
            self.pending_polls -= 1
            return VideoOperationStatus(done=False)
        if self.video_error:
            return VideoOperationStatus(done=True, error=self.video_error)
        return VideoOperationStatus(done=True, video=self.video)


@pytest.fixture(scope="session")
def app():
    # lazy import after env configured
    from mediastudio.main import create_app

    return create_app()


@pytest.fixture()
def provider(app):
    from mediastudio.infrastructure.api.dependencies import get_provider

    fake = FakeProvider()
    app.dependency_overrides[get_provider] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_provider, None)


@pytest.fixture()
def client(app) -> TestClient:
    return TestClient(app)


def signup(client, name="Test User", email=None, password="secret123"):
    email = email or f"user_{uuid.uuid4().hex[:8]}@example.com"
    r = client.post("/api/auth/signup", json={"name": name, "email": email, "password": password})
    assert r.status_code == 201, r.text
    return r.json()


@pytest.fixture()
def auth_header(client) -> dict[str, str]:
    # tokens must be issued by the local account store in disabled mode
    user = signup(client)
    return {"Authorization": f"Bearer {user['token']}"}


@pytest.fixture()
def png_bytes():
    return make_png_bytes


@pytest.fixture()
def artifact():
    return make_artifact


@pytest.fixture()
def new_user(client):
    return lambda **kwargs: signup(client, **kwargs)
