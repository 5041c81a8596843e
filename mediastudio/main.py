from __future__ import annotations

import logging

from fastapi import FastAPI

from mediastudio.application.dtos.common_dto import HealthResponse, RootResponse
from mediastudio.config import configure_logging, get_settings
from mediastudio.infrastructure.api.middlewares import add_default_middlewares
from mediastudio.infrastructure.api.routes.auth_routes import router as auth_router
from mediastudio.infrastructure.api.routes.gemini_routes import router as gemini_router

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    configure_logging()
    settings = get_settings()
    app = FastAPI(
        title="MediaStudio Backend",
        version="0.1.0",
        description="""
        ## MediaStudio Backend API

        Authenticated proxy between the MediaStudio client and Google's
        generative media models. Keeps the provider API key on the server.

        ### Features
        - **Authentication**: email/password and Google sign-in (Supabase Auth)
        - **Photo editing**: natural-language edits of an uploaded image
        - **Image generation**: one to four images from a prompt
        - **Video generation**: long-running jobs, polled by operation name

        ### Authentication
        All `/api/gemini` endpoints and `/api/auth/me` require a bearer token
        in the Authorization header:
        ```
        Authorization: Bearer your-token
        ```

        ### Error Responses
        - **400 Bad Request**: undecodable image or invalid parameters
        - **401 Unauthorized**: missing or invalid token, wrong credentials
        - **404 Not Found**: video job does not exist or belongs to someone else
        - **422 Unprocessable Entity**: validation error in request body
        - **500 Internal Server Error**: provider not configured or provider failure
        """,
    )
    add_default_middlewares(app)

    @app.get(
        "/",
        response_model=RootResponse,
        summary="API Root",
        description="Get basic information about the MediaStudio API",
    )
    def root():
        """Get API root information."""
        return {"status": "ok", "service": "mediastudio-backend", "version": app.version}

    @app.get(
        "/health",
        response_model=HealthResponse,
        summary="Health Check",
        description="Check if the API service is running and healthy",
    )
    def health():
        """Check API health status."""
        return {"status": "healthy"}

    app.include_router(auth_router)
    app.include_router(gemini_router)

    if not settings.gemini_api_key:
        logger.warning("GEMINI_API_KEY environment variable not set. AI features will not work.")
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=3001)
