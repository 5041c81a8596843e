"""
Drives the client core against the real FastAPI app in-process.
"""
from __future__ import annotations

import asyncio

import httpx
import pytest

from mediastudio.application.studio.orchestrator import EditRequest, GenerationRequest, RequestOrchestrator
from mediastudio.application.studio.session_store import SessionStore
from mediastudio.application.studio.video_job import VideoRequest
from mediastudio.application.studio.workspace import Workspace
from mediastudio.domain.entities.generation_job import JobState
from mediastudio.domain.errors import AuthError
from mediastudio.infrastructure.client.backend_client import BackendClient
from mediastudio.infrastructure.storage.session_storage import MemorySessionStorage
from mediastudio.infrastructure.storage.transient_store import TransientArtifactStore


async def _no_sleep(seconds):
    return None


@pytest.fixture()
def make_client(app, provider):
    def factory():
        session = SessionStore(MemorySessionStorage())
        http = httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://testserver")
        return BackendClient(http, session), session

    return factory


def test_signup_edit_generate_and_video(make_client, artifact, tmp_path, provider):
    async def scenario():
        backend, session = make_client()
        session.login(await backend.signup("Round Trip", "round.trip@example.com", "secret123"))
        orchestrator = RequestOrchestrator(
            backend, Workspace(), TransientArtifactStore(tmp_path), sleep=_no_sleep
        )

        orchestrator.workspace.add([artifact()])
        outcome = await orchestrator.edit(EditRequest(prompt="add snow"))
        images = await orchestrator.generate_images(GenerationRequest(prompt="a cat", count=2))

        orchestrator.submit_video(VideoRequest(prompt="waves"))
        job = await orchestrator.video.wait()
        video = orchestrator.video.artifact.read_bytes()
        orchestrator.close()
        await backend.aclose()
        return outcome, images, job, video

    outcome, images, job, video = asyncio.run(scenario())
    assert outcome.text == "done"
    assert outcome.history.is_edited
    assert [img.mime_type for img in images] == ["image/jpeg", "image/jpeg"]
    assert job.state is JobState.SUCCEEDED
    assert job.polls == 1
    assert video == provider.video


def test_bad_login_surfaces_server_message(make_client):
    async def scenario():
        backend, _ = make_client()
        try:
            with pytest.raises(AuthError) as exc:
                await backend.login("nobody@example.com", "nope")
            return exc.value.message
        finally:
            await backend.aclose()

    assert asyncio.run(scenario()) == "Invalid email or password"


def test_stale_token_is_an_auth_error(make_client):
    async def scenario():
        backend, session = make_client()
        session.storage.save({"id": "u1", "token": "expired"})
        session.rehydrate()
        try:
            with pytest.raises(AuthError) as exc:
                await backend.generate_images("a cat", 1, "1:1")
            return exc.value.message
        finally:
            await backend.aclose()

    assert asyncio.run(scenario()) == AuthError.default_message
