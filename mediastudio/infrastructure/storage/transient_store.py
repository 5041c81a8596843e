from __future__ import annotations

import logging
import mimetypes
import uuid
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class TransientArtifact:
    """Locally addressable copy of a large binary result (e.g. a generated video).

    Must be released exactly once by whoever created it.
    """

    path: Path
    mime_type: str
    size: int
    _store: TransientArtifactStore = field(repr=False)
    released: bool = False

    @property
    def uri(self) -> str:
        return self.path.resolve().as_uri()

    def read_bytes(self) -> bytes:
        if self.released:
            raise RuntimeError(f"Transient artifact {self.path.name} was already released")
        return self.path.read_bytes()

    def release(self) -> None:
        self._store.release(self)


class TransientArtifactStore:
    """Writes binary results under a local directory and tracks live handles."""

    def __init__(self, local_dir: str | Path) -> None:
        self.local_dir = Path(local_dir)
        self._live: dict[Path, TransientArtifact] = {}

    @property
    def live_count(self) -> int:
        return len(self._live)

    def put(self, data: bytes, mime_type: str = "video/mp4") -> TransientArtifact:
        ext = mimetypes.guess_extension(mime_type) or ".bin"
        full_path = self.local_dir / f"{uuid.uuid4()}{ext}"
        full_path.parent.mkdir(parents=True, exist_ok=True)
        full_path.write_bytes(data)
        handle = TransientArtifact(path=full_path, mime_type=mime_type, size=len(data), _store=self)
        self._live[full_path] = handle
        logger.debug("acquired transient artifact %s (%d bytes)", full_path.name, len(data))
        return handle

    def release(self, handle: TransientArtifact) -> None:
        if handle.released or self._live.get(handle.path) is not handle:
            raise RuntimeError(f"Transient artifact {handle.path.name} was already released")
        handle.released = True
        del self._live[handle.path]
        if handle.path.exists():
            handle.path.unlink()
        logger.debug("released transient artifact %s", handle.path.name)

    def close(self) -> None:
        """Release every handle still outstanding."""
        for handle in list(self._live.values()):
            self.release(handle)
