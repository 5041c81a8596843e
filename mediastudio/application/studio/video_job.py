from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from mediastudio.domain.entities.artifact import ArtifactRef
from mediastudio.domain.entities.generation_job import GenerationJob, JobState
from mediastudio.domain.errors import JobFailure, StudioError, ValidationError
from mediastudio.domain.services.prompt_builder import (
    MAX_VIDEO_DURATION,
    MIN_VIDEO_DURATION,
    VideoEffect,
    VideoQuality,
    VideoStyle,
    build_video_instruction,
)
from mediastudio.infrastructure.storage.transient_store import TransientArtifact, TransientArtifactStore

logger = logging.getLogger(__name__)

VIDEO_POLL_INTERVAL = 10.0


@dataclass(frozen=True)
class VideoRequest:
    prompt: str
    duration: int = 5
    quality: VideoQuality | str = VideoQuality.HIGH
    style: VideoStyle | str = VideoStyle.CINEMATIC
    effect: VideoEffect | str = VideoEffect.NONE
    start_image: ArtifactRef | None = None

    def instruction(self) -> str:
        """Validate the request and build the model instruction.

        Raises:
            ValidationError: on a blank prompt or an out-of-range setting.
        """
        if not self.prompt or not self.prompt.strip():
            raise ValidationError("Please provide a prompt to generate a video.")
        if not MIN_VIDEO_DURATION <= self.duration <= MAX_VIDEO_DURATION:
            raise ValidationError(
                f"Duration must be between {MIN_VIDEO_DURATION} and {MAX_VIDEO_DURATION} seconds."
            )
        try:
            quality = VideoQuality(self.quality)
            style = VideoStyle(self.style)
            effect = VideoEffect(self.effect)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc
        return build_video_instruction(self.prompt, self.duration, quality, style, effect)


class VideoJobController:
    """Drives one video job at a time through submit, poll and result.

    At most one poller runs: a new submission cancels the previous one and
    releases its video. ``close()`` does the same when the owner goes away.
    Stopping local polling never cancels the job on the provider's side.
    """

    def __init__(
        self,
        backend,
        artifacts: TransientArtifactStore,
        *,
        poll_interval: float = VIDEO_POLL_INTERVAL,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        on_change: Callable[[GenerationJob], None] | None = None,
    ) -> None:
        self.backend = backend
        self.artifacts = artifacts
        self.poll_interval = poll_interval
        self._sleep = sleep
        self._on_change = on_change
        self.job = GenerationJob(prompt="")
        self._task: asyncio.Task | None = None
        self._generation = 0
        self._artifact: TransientArtifact | None = None

    @property
    def state(self) -> JobState:
        return self.job.state

    @property
    def artifact(self) -> TransientArtifact | None:
        return self._artifact

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def submit(self, request: VideoRequest) -> asyncio.Task:
        """Start a job and return the task driving it.

        Validation happens before anything else, so a rejected request leaves
        the current job untouched. Must be called from a running event loop.
        """
        instruction = request.instruction()
        self._cancel_polling()
        self._release_artifact()
        self._generation += 1
        self._set(GenerationJob(prompt=instruction).advance(JobState.SUBMITTING))
        self._task = asyncio.get_running_loop().create_task(
            self._run(self._generation, request.start_image)
        )
        return self._task

    async def wait(self) -> GenerationJob:
        task = self._task
        if task is not None:
            await asyncio.wait([task])
            if not task.cancelled():
                task.result()
        return self.job

    def close(self) -> None:
        self._cancel_polling()
        self._release_artifact()

    async def _run(self, generation: int, start_image: ArtifactRef | None) -> None:
        try:
            submission = await self.backend.submit_video(self.job.prompt, start_image)
            if submission.video is not None:
                self._succeed(generation, submission.video, "video/mp4")
                return
            self._set(self.job.advance(JobState.POLLING, operation_name=submission.operation_name))
            logger.info("video job %s accepted", submission.operation_name)
            while True:
                await self._sleep(self.poll_interval)
                status = await self.backend.video_status(submission.operation_name)
                if status.pending:
                    self._set(self.job.advance(JobState.POLLING, polls=self.job.polls + 1))
                    continue
                if not status.video:
                    raise JobFailure("Video generation completed but no video was returned.")
                self._succeed(generation, status.video, status.mime_type)
                return
        except asyncio.CancelledError:
            logger.info("stopped polling video job %s", self.job.operation_name)
            raise
        except StudioError as exc:
            self._fail(generation, exc.message)
        except Exception:
            logger.exception("video job crashed")
            self._fail(generation, JobFailure.default_message)
            raise

    def _succeed(self, generation: int, video: bytes, mime_type: str) -> None:
        if generation != self._generation or self.job.state.is_terminal:
            return
        artifact = self.artifacts.put(video, mime_type)
        self._artifact = artifact
        self._set(self.job.advance(JobState.SUCCEEDED, result=artifact))
        logger.info("video job %s succeeded (%d bytes)", self.job.operation_name, artifact.size)

    def _fail(self, generation: int, message: str | None) -> None:
        if generation != self._generation or self.job.state.is_terminal:
            return
        message = message or JobFailure.default_message
        self._set(self.job.advance(JobState.FAILED, error_message=message))
        logger.warning("video job %s failed: %s", self.job.operation_name, message)

    def _set(self, job: GenerationJob) -> None:
        self.job = job
        if self._on_change is not None:
            self._on_change(job)

    def _cancel_polling(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    def _release_artifact(self) -> None:
        if self._artifact is not None:
            artifact, self._artifact = self._artifact, None
            artifact.release()
