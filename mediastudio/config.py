from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

DEFAULT_EDIT_MODEL = "gemini-2.5-flash-image-preview"
DEFAULT_IMAGE_MODEL = "imagen-4.0-generate-001"
DEFAULT_VIDEO_MODEL = "veo-2.0-generate-001"

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


@dataclass(frozen=True)
class Settings:
    env: str
    gemini_api_key: str | None
    frontend_url: str
    backend_url: str
    supabase_url: str | None
    supabase_anon_key: str | None
    supabase_disabled: bool
    edit_model: str
    image_model: str
    video_model: str
    video_poll_interval: float
    transient_dir: Path
    session_file: Path
    log_level: str

    @classmethod
    def from_env(cls) -> Settings:
        return cls(
            env=os.getenv("ENV", "development"),
            # API_KEY is accepted for older deployments
            gemini_api_key=os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY") or None,
            frontend_url=os.getenv("FRONTEND_URL", "http://localhost:5173"),
            backend_url=os.getenv("MEDIASTUDIO_BACKEND_URL", "http://localhost:3001"),
            supabase_url=os.getenv("SUPABASE_URL"),
            supabase_anon_key=os.getenv("SUPABASE_ANON_KEY"),
            supabase_disabled=os.getenv("SUPABASE_DISABLED", "0") == "1",
            edit_model=os.getenv("GEMINI_EDIT_MODEL", DEFAULT_EDIT_MODEL),
            image_model=os.getenv("GEMINI_IMAGE_MODEL", DEFAULT_IMAGE_MODEL),
            video_model=os.getenv("GEMINI_VIDEO_MODEL", DEFAULT_VIDEO_MODEL),
            video_poll_interval=float(os.getenv("VIDEO_POLL_INTERVAL", "10")),
            transient_dir=Path(
                os.getenv(
                    "MEDIASTUDIO_TRANSIENT_DIR",
                    str(Path(tempfile.gettempdir()) / "mediastudio"),
                )
            ),
            session_file=Path(
                os.getenv(
                    "MEDIASTUDIO_SESSION_FILE",
                    str(Path.home() / ".mediastudio" / "session.json"),
                )
            ),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )


def get_settings() -> Settings:
    return Settings.from_env()


def configure_logging(level: str | None = None) -> None:
    """Configure root logging once; later calls only adjust the level."""
    level = (level or get_settings().log_level).upper()
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT)
    else:
        root.setLevel(level)
