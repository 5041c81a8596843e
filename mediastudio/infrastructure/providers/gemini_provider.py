from __future__ import annotations

import logging
from dataclasses import dataclass

from google import genai
from google.genai import errors, types

from mediastudio.config import Settings, get_settings

logger = logging.getLogger(__name__)


class ProviderError(RuntimeError):
    """The generative provider failed or answered with something unusable."""


class ProviderNotConfiguredError(ProviderError):
    """No API key is configured on the server."""


@dataclass(frozen=True)
class EditedImage:
    data: bytes | None
    mime_type: str
    text: str | None


@dataclass(frozen=True)
class VideoOperationStatus:
    done: bool
    video: bytes | None = None
    error: str | None = None


class GeminiProvider:
    """Thin wrapper over the google-genai client.

    Every SDK failure is re-raised as ``ProviderError`` so routes only have to
    know about one exception family. The client is created lazily, which lets
    the app boot without an API key.
    """

    def __init__(
        self,
        api_key: str | None,
        *,
        edit_model: str,
        image_model: str,
        video_model: str,
        client: genai.Client | None = None,
    ) -> None:
        self.api_key = api_key
        self.edit_model = edit_model
        self.image_model = image_model
        self.video_model = video_model
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> GeminiProvider:
        settings = settings or get_settings()
        return cls(
            settings.gemini_api_key,
            edit_model=settings.edit_model,
            image_model=settings.image_model,
            video_model=settings.video_model,
        )

    @property
    def configured(self) -> bool:
        return self._client is not None or bool(self.api_key)

    @property
    def client(self) -> genai.Client:
        if self._client is None:
            if not self.api_key:
                raise ProviderNotConfiguredError("GEMINI_API_KEY is not set")
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    def edit_image(self, image: bytes, mime_type: str, prompt: str, model: str | None = None) -> EditedImage:
        try:
            response = self.client.models.generate_content(
                model=model or self.edit_model,
                contents=[types.Part.from_bytes(data=image, mime_type=mime_type), prompt],
                config=types.GenerateContentConfig(response_modalities=["IMAGE", "TEXT"]),
            )
        except errors.APIError as exc:
            raise ProviderError(f"Image edit failed: {exc}") from exc

        data, out_mime, text = None, "image/png", None
        candidates = response.candidates or []
        parts = candidates[0].content.parts if candidates and candidates[0].content else None
        for part in parts or []:
            inline = getattr(part, "inline_data", None)
            if inline is not None and inline.data:
                data = inline.data
                out_mime = inline.mime_type or out_mime
            elif part.text:
                text = part.text
        if data is None:
            logger.info("edit model returned no image (text=%r)", text)
        return EditedImage(data=data, mime_type=out_mime, text=text)

    def generate_images(self, prompt: str, count: int, aspect_ratio: str) -> list[bytes]:
        try:
            response = self.client.models.generate_images(
                model=self.image_model,
                prompt=prompt,
                config=types.GenerateImagesConfig(
                    number_of_images=count,
                    output_mime_type="image/jpeg",
                    aspect_ratio=aspect_ratio,
                ),
            )
        except errors.APIError as exc:
            raise ProviderError(f"Image generation failed: {exc}") from exc
        return [
            generated.image.image_bytes
            for generated in response.generated_images or []
            if generated.image is not None and generated.image.image_bytes
        ]

    def start_video(
        self, prompt: str, start_image: bytes | None = None, start_mime_type: str | None = None
    ) -> str:
        """Submit a video job and return its operation name."""
        image = None
        if start_image is not None:
            image = types.Image(image_bytes=start_image, mime_type=start_mime_type or "image/png")
        try:
            operation = self.client.models.generate_videos(
                model=self.video_model,
                prompt=prompt,
                image=image,
                config=types.GenerateVideosConfig(number_of_videos=1),
            )
        except errors.APIError as exc:
            raise ProviderError(f"Video submission failed: {exc}") from exc
        if not operation.name:
            raise ProviderError("Video submission returned no operation name")
        logger.info("started video operation %s", operation.name)
        return operation.name

    def video_status(self, operation_name: str) -> VideoOperationStatus:
        try:
            operation = self.client.operations.get(types.GenerateVideosOperation(name=operation_name))
        except errors.APIError as exc:
            raise ProviderError(f"Video status check failed: {exc}") from exc
        if not operation.done:
            return VideoOperationStatus(done=False)
        if operation.error:
            return VideoOperationStatus(done=True, error=str(operation.error.get("message", operation.error)))

        result = operation.result or operation.response
        videos = result.generated_videos if result is not None else None
        if not videos or videos[0].video is None:
            return VideoOperationStatus(
                done=True, error="Video generation completed but no video was returned."
            )
        video = videos[0].video
        try:
            data = video.video_bytes or self.client.files.download(file=video)
        except errors.APIError as exc:
            raise ProviderError(f"Video download failed: {exc}") from exc
        return VideoOperationStatus(done=True, video=data)
