from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class VideoJobEntity:
    operation_name: str  # provider's long-running operation id
    user_id: str
    prompt: str
    created_at: datetime
    status: str = "pending"  # pending | succeeded | failed
    has_start_image: bool = False
