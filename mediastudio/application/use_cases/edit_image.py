from __future__ import annotations

import logging
from dataclasses import dataclass

from mediastudio.domain.services.media_encoding import ACCEPTED_IMAGE_TYPES, MediaEncoding
from mediastudio.domain.services.prompt_builder import PHOTO_MODELS
from mediastudio.infrastructure.providers.gemini_provider import EditedImage, GeminiProvider

logger = logging.getLogger(__name__)


@dataclass
class EditImageUseCase:
    provider: GeminiProvider

    def execute(self, image: str, mime_type: str, prompt: str, model: str | None = None) -> EditedImage:
        """
        Send one image and an instruction to the edit model.

        Raises:
            ValueError: blank prompt, unknown model, unsupported MIME type or
                undecodable image data.
            ProviderError: the provider call failed.
        """
        if not prompt.strip():
            raise ValueError("Missing required fields for image editing.")
        if model is not None and model not in {m.id for m in PHOTO_MODELS}:
            raise ValueError(f"Unsupported model: {model}")
        if mime_type not in ACCEPTED_IMAGE_TYPES:
            raise ValueError(f"Unsupported image type: {mime_type}")
        data = MediaEncoding.decode(image)
        logger.info("edit request: %d bytes of %s", len(data), mime_type)
        return self.provider.edit_image(data, mime_type, prompt.strip(), model)
