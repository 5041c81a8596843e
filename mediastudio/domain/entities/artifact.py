from __future__ import annotations

import uuid
from dataclasses import dataclass, field


@dataclass(frozen=True)
class ArtifactRef:
    """An encoded image payload as it travels between client and backend."""

    data: str  # base64, no data-URL prefix
    mime_type: str = "image/png"

    @property
    def size(self) -> int:
        # decoded byte length without decoding
        padding = self.data.count("=", max(len(self.data) - 2, 0))
        return len(self.data) * 3 // 4 - padding


@dataclass(frozen=True)
class Subject:
    original: ArtifactRef
    filename: str | None = None
    id: str = field(default_factory=lambda: f"subj_{uuid.uuid4().hex[:12]}")

    @property
    def mime_type(self) -> str:
        return self.original.mime_type
