from __future__ import annotations

import logging
from dataclasses import dataclass

from mediastudio.domain.entities.video_job import VideoJobEntity
from mediastudio.domain.services.media_encoding import ACCEPTED_IMAGE_TYPES, MediaEncoding
from mediastudio.infrastructure.database.repositories.video_job_repository import VideoJobRepository
from mediastudio.infrastructure.providers.gemini_provider import GeminiProvider, VideoOperationStatus

logger = logging.getLogger(__name__)


class VideoJobNotFound(LookupError):
    """No such operation, or it belongs to someone else."""


@dataclass
class StartVideoUseCase:
    provider: GeminiProvider
    jobs: VideoJobRepository

    def execute(
        self,
        user_id: str,
        prompt: str,
        start_image: str | None = None,
        start_mime_type: str | None = None,
    ) -> VideoJobEntity:
        """
        Submit a video job and record who owns it.

        The provider keeps the job running; callers poll ``VideoStatusUseCase``.
        """
        if not prompt.strip():
            raise ValueError("A prompt is required to generate a video.")
        image_bytes = None
        if start_image:
            if start_mime_type and start_mime_type not in ACCEPTED_IMAGE_TYPES:
                raise ValueError(f"Unsupported image type: {start_mime_type}")
            image_bytes = MediaEncoding.decode(start_image)
        operation_name = self.provider.start_video(prompt.strip(), image_bytes, start_mime_type)
        return self.jobs.create(operation_name, user_id, prompt.strip(), has_start_image=image_bytes is not None)


@dataclass
class VideoStatusUseCase:
    provider: GeminiProvider
    jobs: VideoJobRepository

    def execute(self, user_id: str, operation_name: str) -> VideoOperationStatus:
        job = self.jobs.get_for_user(operation_name, user_id)
        if job is None:
            raise VideoJobNotFound(f"Video job not found: {operation_name}")
        status = self.provider.video_status(operation_name)
        if status.done:
            outcome = "succeeded" if status.video else "failed"
            if job.status != outcome:
                self.jobs.mark_status(operation_name, outcome)
                logger.info("video job %s %s", operation_name, outcome)
        return status
