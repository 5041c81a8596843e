from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable
from enum import Enum
from pathlib import Path

from mediastudio.application.studio.orchestrator import EditRequest, GenerationRequest, RequestOrchestrator
from mediastudio.application.studio.session_store import RedirectLocation, SessionStore
from mediastudio.application.studio.video_job import VideoRequest
from mediastudio.application.studio.workspace import Workspace
from mediastudio.config import Settings, get_settings
from mediastudio.domain.entities.artifact import ArtifactRef
from mediastudio.domain.entities.generation_job import JobState
from mediastudio.domain.errors import ProviderRefusal, StudioError, ValidationError
from mediastudio.domain.services.media_encoding import MediaEncoding
from mediastudio.domain.services.processing_service import ProcessingService
from mediastudio.domain.services.prompt_builder import (
    PHOTO_MODELS,
    Adjustments,
    AspectRatio,
    VideoEffect,
    VideoQuality,
    VideoStyle,
)
from mediastudio.infrastructure.client.backend_client import BackendClient
from mediastudio.infrastructure.storage.session_storage import FileSessionStorage
from mediastudio.infrastructure.storage.transient_store import TransientArtifactStore

logger = logging.getLogger(__name__)


class EditorMode(str, Enum):
    PHOTO = "photo"
    VIDEO = "video"
    GENERATION = "generation"


PHOTO_SUGGESTIONS = (
    "Transform into a detailed Japanese Ukiyo-e woodblock print",
    "Reimagine this as a colorful fauvist painting",
    "Apply a pop-art effect with bold outlines and vibrant colors",
    "Make it look like a delicate watercolor sketch",
    "Give it a dramatic, film noir look with deep shadows and high contrast",
    "Drench the scene in neon-noir, cyberpunk city lights",
    "Add a moody, atmospheric fog or mist",
    "Surround the subject with magical, glowing particles",
    "Place the scene on a fantastical alien planet with two moons",
    "Apply a faded, 1970s polaroid photo effect",
    "Give it a grainy, sepia-toned old-timey photo look",
    "Add a glitchy, 80s VHS tape aesthetic",
)

VIDEO_SUGGESTIONS = (
    "An epic cinematic shot of a car driving through a neon-lit city at night",
    "A time-lapse of a flower blooming in hyper-detail",
    "A cute, animated character waving hello",
    "A drone shot flying over a majestic mountain range at sunrise",
    "Slow motion shot of a single drop of rain hitting a puddle",
    "A futuristic robot assembling a complex device",
    "A cozy, crackling fireplace scene, looping",
    "A magical portal opening up in a forest",
    "A fleet of spaceships flying through an asteroid field",
    "An abstract animation of flowing liquid colors",
    "A chef expertly tossing a pizza in the air, slow motion",
    "A time-lapse of clouds moving across the sky",
)

GENERATION_SUGGESTIONS = (
    "A hyper-realistic photo of a cat astronaut on the moon",
    "A surreal oil painting of a whale swimming in a cloudy sky",
    'A logo for a coffee shop named "The Starship Brew"',
    "Pixel art of a fantasy castle on a floating island",
    "A cinematic 8k photo of a futuristic cyberpunk city in the rain",
    "A watercolor illustration of a fox reading a book in a forest",
    "A 3D render of a delicious, colorful donut with sprinkles",
    "A vintage travel poster for a trip to Mars",
    "An abstract pattern of geometric shapes in pastel colors",
    "A detailed vector illustration of a robotic hummingbird",
    "A cute sticker of a smiling avocado with sunglasses",
    "A dramatic concept art of a knight facing a dragon",
)

SUGGESTIONS: dict[EditorMode, tuple[str, ...]] = {
    EditorMode.PHOTO: PHOTO_SUGGESTIONS,
    EditorMode.VIDEO: VIDEO_SUGGESTIONS,
    EditorMode.GENERATION: GENERATION_SUGGESTIONS,
}

VIDEO_LOADING_MESSAGES = (
    "Generating your video...",
    "This can take over a minute on the free service...",
    "The AI model might be warming up...",
    "Thanks for your patience...",
)
LOADING_MESSAGE_PERIOD = 5.0


def loading_message(elapsed: float) -> str:
    """Video loading message shown ``elapsed`` seconds into a job."""
    step = int(max(elapsed, 0.0) // LOADING_MESSAGE_PERIOD)
    return VIDEO_LOADING_MESSAGES[step % len(VIDEO_LOADING_MESSAGES)]


class StudioViewModel:
    """Everything a UI needs to render the studio and dispatch user intents.

    Each ``request_*`` coroutine is the error boundary for its action: a
    ``StudioError`` ends up in ``error`` and ``is_loading`` is always cleared.
    While one request is in flight further submits are ignored.
    """

    def __init__(self, orchestrator: RequestOrchestrator, session: SessionStore, backend=None) -> None:
        self.orchestrator = orchestrator
        self.session = session
        self.backend = backend or orchestrator.backend
        self.mode = EditorMode.PHOTO
        self.is_loading = False
        self.error: str | None = None
        self.response_text: str | None = None
        self._reset_inputs()

    @classmethod
    def from_settings(
        cls, settings: Settings | None = None, location: RedirectLocation | None = None
    ) -> StudioViewModel:
        """Wire the client from environment settings and restore any saved session."""
        settings = settings or get_settings()
        session = SessionStore(FileSessionStorage(settings.session_file), location)
        session.rehydrate()
        backend = BackendClient.from_settings(settings, session)
        orchestrator = RequestOrchestrator(
            backend,
            Workspace(),
            TransientArtifactStore(settings.transient_dir),
            poll_interval=settings.video_poll_interval,
        )
        return cls(orchestrator, session)

    # --- derived state --------------------------------------------------

    @property
    def workspace(self):
        return self.orchestrator.workspace

    @property
    def current_image(self) -> ArtifactRef | None:
        history = self.workspace.active_history
        return history.current if history else None

    @property
    def original_image(self) -> ArtifactRef | None:
        history = self.workspace.active_history
        return history.original if history else None

    @property
    def can_undo(self) -> bool:
        history = self.workspace.active_history
        return bool(history and history.can_undo)

    @property
    def can_redo(self) -> bool:
        history = self.workspace.active_history
        return bool(history and history.can_redo)

    @property
    def is_edited(self) -> bool:
        history = self.workspace.active_history
        return bool(history and history.is_edited)

    @property
    def suggestions(self) -> tuple[str, ...]:
        return SUGGESTIONS[self.mode]

    @property
    def generated_images(self) -> list[ArtifactRef]:
        return self.orchestrator.generated_images

    @property
    def video_state(self) -> JobState:
        return self.orchestrator.video.state

    @property
    def video_uri(self) -> str | None:
        artifact = self.orchestrator.video.artifact
        return artifact.uri if artifact else None

    @property
    def can_submit(self) -> bool:
        if self.is_loading or not self.prompt.strip():
            return False
        if self.mode is EditorMode.PHOTO:
            return self.workspace.active_subject is not None
        return True

    # --- mode and inputs ------------------------------------------------

    def _reset_inputs(self) -> None:
        self.prompt = ""
        self.adjustments = Adjustments()
        self.model = PHOTO_MODELS[0].id
        self.video_duration = 5
        self.video_quality = VideoQuality.HIGH
        self.video_style = VideoStyle.CINEMATIC
        self.video_effect = VideoEffect.NONE
        self.video_start_image: ArtifactRef | None = None
        self.image_count = 1
        self.aspect_ratio = AspectRatio.SQUARE

    def set_mode(self, mode: EditorMode | str) -> None:
        """Switch editor mode; everything from the old mode is discarded."""
        mode = EditorMode(mode)
        if mode is self.mode:
            return
        self.orchestrator.close()
        self.workspace.clear()
        self.orchestrator.generated_images = []
        self._reset_inputs()
        self.is_loading = False
        self.error = None
        self.response_text = None
        self.mode = mode

    def reset_adjustments(self) -> None:
        self.adjustments = Adjustments()

    def set_adjustments(self, brightness: int = 0, contrast: int = 0, saturation: int = 0) -> None:
        try:
            self.adjustments = Adjustments(brightness, contrast, saturation)
        except ValidationError as exc:
            self.error = exc.message

    # --- photo mode -----------------------------------------------------

    def upload(self, images: Iterable[ArtifactRef | str | Path]) -> None:
        if self.mode is not EditorMode.PHOTO:
            return
        artifacts = []
        try:
            for image in images:
                if isinstance(image, ArtifactRef):
                    artifacts.append(image)
                else:
                    artifacts.append(MediaEncoding.artifact_from_file(image))
        except (OSError, ValueError) as exc:
            self.error = f"Could not read image: {exc}"
            return
        self.workspace.add(artifacts)
        self.error = None
        self.response_text = None

    def select(self, index: int) -> None:
        self._guard(lambda: self.workspace.select(index))

    def remove(self, index: int) -> None:
        self._guard(lambda: self.workspace.remove(index))

    def undo(self) -> bool:
        return self.workspace.undo()

    def redo(self) -> bool:
        return self.workspace.redo()

    def preview_adjustments(self) -> ArtifactRef | None:
        """Approximate the sliders locally on the current image; nothing is stored."""
        current = self.current_image
        if current is None or self.adjustments.is_neutral:
            return current
        array = MediaEncoding.to_array(current)
        return MediaEncoding.from_array(ProcessingService.apply_adjustments(array, self.adjustments))

    def download_current(self, path: str | Path) -> Path | None:
        current = self.current_image
        if current is None:
            return None
        return MediaEncoding.write_file(current, path)

    # --- requests -------------------------------------------------------

    async def submit(self) -> bool:
        if self.mode is EditorMode.PHOTO:
            return await self.request_edit()
        if self.mode is EditorMode.VIDEO:
            return await self.request_video()
        return await self.request_generation()

    async def request_edit(self) -> bool:
        async def run() -> None:
            try:
                outcome = await self.orchestrator.edit(
                    EditRequest(prompt=self.prompt, adjustments=self.adjustments, model=self.model)
                )
            except ProviderRefusal as exc:
                self.response_text = exc.text
                raise
            self.response_text = outcome.text

        return await self._dispatch("edit", run)

    async def request_generation(self) -> bool:
        async def run() -> None:
            await self.orchestrator.generate_images(
                GenerationRequest(prompt=self.prompt, count=self.image_count, aspect_ratio=self.aspect_ratio)
            )

        return await self._dispatch("generation", run)

    async def request_video(self) -> bool:
        async def run() -> None:
            self.orchestrator.submit_video(
                VideoRequest(
                    prompt=self.prompt,
                    duration=self.video_duration,
                    quality=self.video_quality,
                    style=self.video_style,
                    effect=self.video_effect,
                    start_image=self.video_start_image,
                )
            )
            job = await self.orchestrator.video.wait()
            if job.state is JobState.FAILED:
                self.error = job.error_message

        return await self._dispatch("video", run)

    # --- session --------------------------------------------------------

    async def login(self, email: str, password: str) -> bool:
        async def run() -> None:
            if not email or not password:
                raise ValidationError("Please provide email and password.")
            self.session.login(await self.backend.login(email, password))

        return await self._dispatch("login", run)

    async def signup(self, name: str, email: str, password: str) -> bool:
        async def run() -> None:
            if not name or not email or not password:
                raise ValidationError("Please provide name, email, and password.")
            self.session.login(await self.backend.signup(name, email, password))

        return await self._dispatch("signup", run)

    def google_login_url(self) -> str:
        return self.backend.google_login_url()

    def logout(self) -> None:
        self.close()
        self.session.logout()

    def close(self) -> None:
        """Tear down: stop polling and release held video handles."""
        self.orchestrator.close()

    async def aclose(self) -> None:
        self.close()
        await self.backend.aclose()

    # --- plumbing -------------------------------------------------------

    async def _dispatch(self, action: str, run: Callable[[], Awaitable[None]]) -> bool:
        if self.is_loading:
            logger.debug("ignoring %s request: another request is in flight", action)
            return False
        self.is_loading = True
        self.error = None
        self.response_text = None
        try:
            await run()
        except StudioError as exc:
            logger.info("%s request failed: %s", action, exc)
            self.error = exc.message
        finally:
            self.is_loading = False
        return self.error is None

    def _guard(self, action: Callable[[], object]) -> None:
        try:
            action()
        except StudioError as exc:
            self.error = exc.message
