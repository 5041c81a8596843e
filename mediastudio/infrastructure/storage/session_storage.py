from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class MemorySessionStorage:
    """Session storage that lives as long as the process."""

    def __init__(self) -> None:
        self._record: dict[str, Any] | None = None

    def load(self) -> dict[str, Any] | None:
        return dict(self._record) if self._record is not None else None

    def save(self, record: dict[str, Any]) -> None:
        self._record = dict(record)

    def clear(self) -> None:
        self._record = None


class FileSessionStorage:
    """Durable session storage in a single JSON file readable only by the owner."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> dict[str, Any] | None:
        if not self.path.exists():
            return None
        try:
            record = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Discarding unreadable session file %s: %s", self.path, exc)
            self.clear()
            return None
        if not isinstance(record, dict):
            logger.warning("Discarding malformed session file %s", self.path)
            self.clear()
            return None
        return record

    def save(self, record: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(record), encoding="utf-8")
        os.chmod(tmp, 0o600)
        tmp.replace(self.path)

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)
