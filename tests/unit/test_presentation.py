from __future__ import annotations

import asyncio
import dataclasses
import json
from urllib.parse import quote
from unittest.mock import AsyncMock, MagicMock

import pytest

from mediastudio.application.studio.orchestrator import RequestOrchestrator
from mediastudio.application.studio.presentation import (
    PHOTO_SUGGESTIONS,
    VIDEO_LOADING_MESSAGES,
    VIDEO_SUGGESTIONS,
    EditorMode,
    StudioViewModel,
    loading_message,
)
from mediastudio.application.studio.session_store import RedirectLocation, SessionStore
from mediastudio.application.studio.workspace import Workspace
from mediastudio.config import get_settings
from mediastudio.domain.entities.artifact import ArtifactRef
from mediastudio.domain.entities.generation_job import JobState
from mediastudio.domain.entities.session import Session, UserIdentity
from mediastudio.domain.errors import AuthError, ProviderRefusal, TransportError
from mediastudio.infrastructure.client.backend_client import EditResult, VideoStatus, VideoSubmission
from mediastudio.infrastructure.storage.session_storage import MemorySessionStorage
from mediastudio.infrastructure.storage.transient_store import TransientArtifactStore


async def _no_sleep(seconds):
    return None


@pytest.fixture()
def backend():
    mock = AsyncMock()
    mock.google_login_url = MagicMock(return_value="http://backend/api/auth/google")
    mock.edit_image.return_value = EditResult(image=ArtifactRef("ZWRpdA=="), text=None)
    mock.submit_video.return_value = VideoSubmission(operation_name="op-1")
    mock.video_status.return_value = VideoStatus(pending=False, video=b"mp4")
    return mock


@pytest.fixture()
def vm(backend, tmp_path):
    orchestrator = RequestOrchestrator(backend, Workspace(), TransientArtifactStore(tmp_path), sleep=_no_sleep)
    return StudioViewModel(orchestrator, SessionStore(MemorySessionStorage()))


def test_suggestions_follow_mode(vm):
    assert vm.suggestions == PHOTO_SUGGESTIONS
    vm.set_mode("video")
    assert vm.suggestions == VIDEO_SUGGESTIONS


def test_loading_message_rotates_every_five_seconds():
    assert loading_message(0) == VIDEO_LOADING_MESSAGES[0]
    assert loading_message(4.9) == VIDEO_LOADING_MESSAGES[0]
    assert loading_message(5) == VIDEO_LOADING_MESSAGES[1]
    assert loading_message(5 * len(VIDEO_LOADING_MESSAGES)) == VIDEO_LOADING_MESSAGES[0]


def test_edit_success_updates_image_and_clears_loading(vm, artifact):
    vm.upload([artifact()])
    vm.prompt = "make it pop"
    assert vm.can_submit
    assert asyncio.run(vm.submit()) is True
    assert vm.is_edited and vm.can_undo
    assert vm.is_loading is False
    assert vm.error is None
    assert vm.undo() is True
    assert vm.current_image == vm.original_image


def test_error_is_shown_and_loading_cleared(vm, backend, artifact):
    backend.edit_image.side_effect = TransportError("Failed to communicate with the AI model.")
    vm.upload([artifact()])
    vm.prompt = "x"
    assert asyncio.run(vm.request_edit()) is False
    assert vm.error == "Failed to communicate with the AI model."
    assert vm.is_loading is False


def test_refusal_keeps_model_text(vm, backend, artifact):
    backend.edit_image.return_value = EditResult(image=None, text="I cannot edit faces.")
    vm.upload([artifact()])
    vm.prompt = "swap the faces"
    assert asyncio.run(vm.request_edit()) is False
    assert vm.error == ProviderRefusal.default_message
    assert vm.response_text == "I cannot edit faces."
    assert not vm.is_edited


def test_out_of_range_slider_sets_error(vm):
    vm.set_adjustments(brightness=150)
    assert vm.error.startswith("brightness must be between")
    assert vm.adjustments.is_neutral


def test_submit_without_image_reports_validation_error(vm, backend):
    vm.prompt = "x"
    assert not vm.can_submit
    asyncio.run(vm.request_edit())
    assert vm.error == "Please select an image and provide an editing prompt."
    backend.edit_image.assert_not_awaited()


def test_request_ignored_while_loading(vm, backend, artifact):
    vm.upload([artifact()])
    vm.prompt = "x"
    vm.is_loading = True
    assert asyncio.run(vm.request_edit()) is False
    backend.edit_image.assert_not_awaited()


def test_select_out_of_range_sets_error(vm, artifact):
    vm.upload([artifact()])
    vm.select(3)
    assert vm.error == "No image at position 3."


def test_upload_rejects_unreadable_file(vm, tmp_path):
    bad = tmp_path / "notes.txt"
    bad.write_text("hello")
    vm.upload([bad])
    assert vm.error.startswith("Could not read image")
    assert len(vm.workspace) == 0


def test_preview_does_not_touch_history(vm, artifact):
    vm.upload([artifact(color=(100, 100, 100))])
    before = vm.workspace.active_history
    vm.set_adjustments(brightness=50)
    preview = vm.preview_adjustments()
    assert preview is not None and preview != vm.current_image
    assert vm.workspace.active_history is before


def test_download_current(vm, artifact, tmp_path, png_bytes):
    vm.upload([artifact()])
    out = vm.download_current(tmp_path / "out" / "image.png")
    assert out.read_bytes() == png_bytes()


def test_video_flow_and_mode_switch_releases_video(vm):
    vm.set_mode(EditorMode.VIDEO)
    vm.prompt = "ocean"
    assert asyncio.run(vm.submit()) is True
    assert vm.video_state is JobState.SUCCEEDED
    assert vm.video_uri.startswith("file://")
    artifact = vm.orchestrator.video.artifact
    vm.set_mode(EditorMode.GENERATION)
    assert artifact.released
    assert vm.video_uri is None
    assert vm.prompt == ""


def test_failed_video_sets_error(vm, backend):
    backend.video_status.return_value = VideoStatus(pending=False, video=None)
    vm.set_mode(EditorMode.VIDEO)
    vm.prompt = "ocean"
    assert asyncio.run(vm.submit()) is False
    assert vm.video_state is JobState.FAILED
    assert vm.error == "Video generation completed but no video was returned."


def test_login_and_logout(vm, backend):
    backend.login.return_value = Session(UserIdentity("u1", "Ada", "ada@example.com"), "tok")
    assert asyncio.run(vm.login("ada@example.com", "pw")) is True
    assert vm.session.is_authenticated
    vm.logout()
    assert not vm.session.is_authenticated


def test_login_failure_message_from_server(vm, backend):
    backend.login.side_effect = AuthError("Invalid email or password")
    assert asyncio.run(vm.login("ada@example.com", "wrong")) is False
    assert vm.error == "Invalid email or password"


def test_signup_requires_all_fields(vm, backend):
    assert asyncio.run(vm.signup("", "a@b.c", "pw")) is False
    assert vm.error == "Please provide name, email, and password."
    backend.signup.assert_not_awaited()


def test_from_settings_restores_redirected_session(tmp_path):
    settings = dataclasses.replace(
        get_settings(),
        backend_url="http://backend.test",
        session_file=tmp_path / "session.json",
        transient_dir=tmp_path / "videos",
        video_poll_interval=2.5,
    )
    user = quote(json.dumps({"id": "u9", "name": "Lin", "email": "lin@example.com"}))
    location = RedirectLocation(f"http://localhost:5173/?user={user}&token=abc")

    vm = StudioViewModel.from_settings(settings, location)
    try:
        assert vm.session.token == "abc"
        assert (tmp_path / "session.json").exists()
        assert vm.orchestrator.video.poll_interval == 2.5
        assert vm.google_login_url() == "http://backend.test/api/auth/google"
    finally:
        asyncio.run(vm.aclose())
