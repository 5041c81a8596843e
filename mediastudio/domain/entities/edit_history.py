from __future__ import annotations

from dataclasses import dataclass

from mediastudio.domain.entities.artifact import ArtifactRef


@dataclass(frozen=True)
class EditHistory:
    edits: tuple[ArtifactRef, ...]
    current_index: int = 0

    def __post_init__(self) -> None:
        if not self.edits:
            raise ValueError("An edit history needs at least the original artifact")
        if not 0 <= self.current_index < len(self.edits):
            raise ValueError(
                f"current_index {self.current_index} outside [0, {len(self.edits) - 1}]"
            )

    @property
    def original(self) -> ArtifactRef:
        return self.edits[0]

    @property
    def current(self) -> ArtifactRef:
        return self.edits[self.current_index]

    @property
    def can_undo(self) -> bool:
        return self.current_index > 0

    @property
    def can_redo(self) -> bool:
        return self.current_index < len(self.edits) - 1

    @property
    def is_edited(self) -> bool:
        return self.current_index > 0
