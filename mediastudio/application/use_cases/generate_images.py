from __future__ import annotations

from dataclasses import dataclass

from mediastudio.domain.services.prompt_builder import MAX_IMAGE_COUNT, MIN_IMAGE_COUNT, AspectRatio
from mediastudio.infrastructure.providers.gemini_provider import GeminiProvider


@dataclass
class GenerateImagesUseCase:
    provider: GeminiProvider

    def execute(self, prompt: str, count: int, aspect_ratio: AspectRatio | str) -> list[bytes]:
        if not prompt.strip():
            raise ValueError("A prompt is required to generate images.")
        if not MIN_IMAGE_COUNT <= count <= MAX_IMAGE_COUNT:
            raise ValueError(f"numberOfImages must be between {MIN_IMAGE_COUNT} and {MAX_IMAGE_COUNT}")
        ratio = AspectRatio(aspect_ratio)
        return self.provider.generate_images(prompt.strip(), count, ratio.value)
