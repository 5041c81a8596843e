from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from mediastudio.domain.services.prompt_builder import MAX_IMAGE_COUNT, MIN_IMAGE_COUNT, AspectRatio


class _CamelModel(BaseModel):
    # wire names are camelCase; python attributes stay snake_case
    model_config = ConfigDict(populate_by_name=True)


class EditImageRequest(_CamelModel):
    """Request model for a prompt-driven photo edit."""
    image: str = Field(..., min_length=1, description="Base64 image data (a data URL is accepted too)")
    mime_type: str = Field(..., alias="mimeType", description="MIME type of the image", examples=["image/png"])
    prompt: str = Field(..., min_length=1, description="Full editing instruction")
    model: str | None = Field(None, description="Model id; the server default is used when omitted")


class EditImageResponse(_CamelModel):
    """Edited image, or null when the model declined."""
    new_image_base64: str | None = Field(None, alias="newImageBase64", description="Base64 of the edited image")
    mime_type: str | None = Field(None, alias="mimeType", description="MIME type of the edited image")
    text: str | None = Field(None, description="Any text the model returned alongside the image")


class GenerateImagesRequest(_CamelModel):
    """Request model for text-to-image generation."""
    prompt: str = Field(..., min_length=1, description="What to generate")
    number_of_images: int = Field(
        1, alias="numberOfImages", ge=MIN_IMAGE_COUNT, le=MAX_IMAGE_COUNT, description="How many images to return"
    )
    aspect_ratio: AspectRatio = Field(AspectRatio.SQUARE, alias="aspectRatio", description="Output aspect ratio")


class GenerateImagesResponse(_CamelModel):
    """Generated JPEG images as base64 strings."""
    images: list[str] = Field(default_factory=list, description="Base64 JPEG images")


class StartImage(_CamelModel):
    base64: str = Field(..., min_length=1, description="Base64 image data")
    mime_type: str = Field("image/png", alias="mimeType", description="MIME type of the image")


class GenerateVideoRequest(_CamelModel):
    """Request model for starting a video job."""
    prompt: str = Field(..., min_length=1, description="Full video instruction")
    start_image: StartImage | None = Field(None, alias="startImage", description="Optional first frame")


class GenerateVideoResponse(_CamelModel):
    """Handle of the started job; poll it on the video-status endpoint."""
    operation_name: str = Field(..., alias="operationName", description="Provider operation name")


class VideoStatusResponse(_CamelModel):
    """Returned while the job is still running, or once it has failed."""
    status: str = Field("pending", description="Job status", examples=["pending"])
    message: str | None = Field(None, description="Why the job failed, when status is failed")
