from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status

from mediastudio.application.dtos.gemini_dto import (
    EditImageRequest,
    EditImageResponse,
    GenerateImagesRequest,
    GenerateImagesResponse,
    GenerateVideoRequest,
    GenerateVideoResponse,
    VideoStatusResponse,
)
from mediastudio.application.use_cases.edit_image import EditImageUseCase
from mediastudio.application.use_cases.generate_images import GenerateImagesUseCase
from mediastudio.application.use_cases.generate_video import (
    StartVideoUseCase,
    VideoJobNotFound,
    VideoStatusUseCase,
)
from mediastudio.domain.services.media_encoding import MediaEncoding
from mediastudio.infrastructure.api.dependencies import get_current_user, get_provider, get_video_job_repo
from mediastudio.infrastructure.providers.gemini_provider import (
    GeminiProvider,
    ProviderError,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/gemini",
    tags=["Generative Media"],
    responses={
        400: {"description": "Bad Request - Invalid image or parameters"},
        401: {"description": "Unauthorized - Invalid or missing authentication token"},
        422: {"description": "Validation Error - Invalid request format"},
        500: {"description": "Provider not configured or provider call failed"},
    },
)


def _require_configured(provider: GeminiProvider, service: str) -> None:
    if not provider.configured:
        raise HTTPException(status_code=500, detail=f"{service} service is not configured on the server.")


@router.post(
    "/edit-image",
    response_model=EditImageResponse,
    summary="Edit Image",
    description="""
    Apply a natural-language edit to one image.

    `newImageBase64` is null when the model declined to return an image; any
    text it sent back is in `text`.
    """,
)
def edit_image(
    body: EditImageRequest,
    user=Depends(get_current_user),
    provider: GeminiProvider = Depends(get_provider),
):
    _require_configured(provider, "Image editing")
    uc = EditImageUseCase(provider=provider)
    try:
        edited = uc.execute(body.image, body.mime_type, body.prompt, body.model)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except ProviderError as e:
        logger.error("edit-image failed for %s: %s", user.id, e)
        raise HTTPException(
            status_code=500,
            detail="Failed to communicate with the AI model for image editing. Please try again.",
        ) from e
    return EditImageResponse(
        new_image_base64=MediaEncoding.encode(edited.data) if edited.data else None,
        mime_type=edited.mime_type if edited.data else None,
        text=edited.text,
    )


@router.post(
    "/generate-images",
    response_model=GenerateImagesResponse,
    summary="Generate Images",
    description="Generate between one and four JPEG images from a text prompt.",
)
def generate_images(
    body: GenerateImagesRequest,
    user=Depends(get_current_user),
    provider: GeminiProvider = Depends(get_provider),
):
    _require_configured(provider, "Image generation")
    uc = GenerateImagesUseCase(provider=provider)
    try:
        images = uc.execute(body.prompt, body.number_of_images, body.aspect_ratio)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except ProviderError as e:
        logger.error("generate-images failed for %s: %s", user.id, e)
        raise HTTPException(status_code=500, detail="Failed to generate images. Please try again.") from e
    return GenerateImagesResponse(images=[MediaEncoding.encode(img) for img in images])


@router.post(
    "/generate-video",
    response_model=GenerateVideoResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Start Video Generation",
    description="""
    Start a video job and return its operation name immediately.

    Poll `GET /api/gemini/video-status/{operationName}` until it returns the
    video. Generation can take several minutes.
    """,
)
def generate_video(
    body: GenerateVideoRequest,
    user=Depends(get_current_user),
    provider: GeminiProvider = Depends(get_provider),
    jobs=Depends(get_video_job_repo),
):
    _require_configured(provider, "Video generation")
    uc = StartVideoUseCase(provider=provider, jobs=jobs)
    start = body.start_image
    try:
        job = uc.execute(
            user.id,
            body.prompt,
            start.base64 if start else None,
            start.mime_type if start else None,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except ProviderError as e:
        logger.error("generate-video failed for %s: %s", user.id, e)
        raise HTTPException(status_code=500, detail="Failed to start video generation. Please try again.") from e
    return GenerateVideoResponse(operation_name=job.operation_name)


@router.get(
    "/video-status/{operation_name:path}",
    summary="Video Job Status",
    description="""
    Check a video job started by the current user.

    - still running: `{"status": "pending"}`
    - finished: the MP4 itself (`video/mp4`)
    - failed: `{"status": "failed", "message": "..."}`

    Jobs started by other users are reported as not found.
    """,
    responses={
        200: {
            "content": {"video/mp4": {}, "application/json": {}},
            "description": "Pending/failed status as JSON, or the finished video",
        },
        404: {"description": "Not Found - No such job for this user"},
    },
)
def video_status(
    operation_name: str,
    user=Depends(get_current_user),
    provider: GeminiProvider = Depends(get_provider),
    jobs=Depends(get_video_job_repo),
):
    _require_configured(provider, "Video generation")
    uc = VideoStatusUseCase(provider=provider, jobs=jobs)
    try:
        result = uc.execute(user.id, operation_name)
    except VideoJobNotFound as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except ProviderError as e:
        logger.error("video-status failed for %s: %s", operation_name, e)
        raise HTTPException(
            status_code=500,
            detail="Failed to generate video. This can take several minutes. If it fails, please try again.",
        ) from e
    if not result.done:
        return VideoStatusResponse(status="pending")
    if result.video is None:
        return VideoStatusResponse(status="failed", message=result.error)
    return Response(content=result.video, media_type="video/mp4")
