from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from mediastudio.application.studio.video_job import VIDEO_POLL_INTERVAL, VideoJobController, VideoRequest
from mediastudio.application.studio.workspace import Workspace
from mediastudio.domain.entities.artifact import ArtifactRef
from mediastudio.domain.entities.edit_history import EditHistory
from mediastudio.domain.errors import ProviderRefusal, ValidationError
from mediastudio.domain.services.prompt_builder import (
    MAX_IMAGE_COUNT,
    MIN_IMAGE_COUNT,
    PHOTO_MODELS,
    Adjustments,
    AspectRatio,
    build_edit_instruction,
)
from mediastudio.infrastructure.storage.transient_store import TransientArtifactStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EditRequest:
    prompt: str
    adjustments: Adjustments = field(default_factory=Adjustments)
    model: str = PHOTO_MODELS[0].id


@dataclass(frozen=True)
class EditOutcome:
    history: EditHistory
    instruction: str
    text: str | None = None


@dataclass(frozen=True)
class GenerationRequest:
    prompt: str
    count: int = 1
    aspect_ratio: AspectRatio | str = AspectRatio.SQUARE


class RequestOrchestrator:
    """Turns user intent into backend requests and folds results into state.

    Photo edits land in the workspace's histories; generated images replace
    ``generated_images`` wholesale; videos go through ``video``.
    Failures are raised as ``StudioError`` subclasses and leave state as it was.
    """

    def __init__(
        self,
        backend,
        workspace: Workspace,
        artifacts: TransientArtifactStore,
        *,
        poll_interval: float = VIDEO_POLL_INTERVAL,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.backend = backend
        self.workspace = workspace
        self.generated_images: list[ArtifactRef] = []
        self.video = VideoJobController(backend, artifacts, poll_interval=poll_interval, sleep=sleep)

    async def edit(self, request: EditRequest) -> EditOutcome:
        subject = self.workspace.active_subject
        if subject is None or not request.prompt or not request.prompt.strip():
            raise ValidationError("Please select an image and provide an editing prompt.")
        if request.model not in {m.id for m in PHOTO_MODELS}:
            raise ValidationError(f"Unknown model: {request.model}")

        history = self.workspace.histories[subject.id]
        current = history.current
        # send the edit with the subject's original MIME type
        image = ArtifactRef(data=current.data, mime_type=subject.mime_type)
        instruction = build_edit_instruction(request.prompt, request.adjustments)
        logger.info("editing %s (%d bytes) with %s", subject.id, image.size, request.model)

        result = await self.backend.edit_image(image, instruction, request.model)
        if result.image is None:
            raise ProviderRefusal(text=result.text)
        # the subject may have been removed while the request was in flight
        updated = self.workspace.append_edit(result.image, subject_id=subject.id)
        return EditOutcome(history=updated, instruction=instruction, text=result.text)

    async def generate_images(self, request: GenerationRequest) -> list[ArtifactRef]:
        if not request.prompt or not request.prompt.strip():
            raise ValidationError("Please provide a prompt to generate an image.")
        if not MIN_IMAGE_COUNT <= request.count <= MAX_IMAGE_COUNT:
            raise ValidationError(
                f"Number of images must be between {MIN_IMAGE_COUNT} and {MAX_IMAGE_COUNT}."
            )
        try:
            aspect_ratio = AspectRatio(request.aspect_ratio)
        except ValueError as exc:
            raise ValidationError(f"Unsupported aspect ratio: {request.aspect_ratio}") from exc

        self.generated_images = []
        images = await self.backend.generate_images(request.prompt.strip(), request.count, aspect_ratio.value)
        if not images:
            raise ProviderRefusal(
                "The AI did not return any images. It might have refused the request. "
                "Please try a different prompt."
            )
        self.generated_images = list(images)
        logger.info("generated %d image(s)", len(images))
        return self.generated_images

    def submit_video(self, request: VideoRequest) -> asyncio.Task:
        return self.video.submit(request)

    def close(self) -> None:
        self.video.close()
