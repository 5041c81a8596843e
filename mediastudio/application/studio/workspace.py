from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from mediastudio.domain.entities.artifact import ArtifactRef, Subject
from mediastudio.domain.entities.edit_history import EditHistory
from mediastudio.domain.errors import ValidationError
from mediastudio.domain.services.edit_history_service import EditHistoryStore

logger = logging.getLogger(__name__)


@dataclass
class Workspace:
    """Ordered subjects in photo mode, each owning one edit history.

    Callers address subjects by dense position ``0..n-1``. Histories are keyed
    by the subject's stable id, so removing a subject never moves another
    subject's history.
    """

    subjects: list[Subject] = field(default_factory=list)
    histories: dict[str, EditHistory] = field(default_factory=dict)
    active_index: int | None = None

    def __len__(self) -> int:
        return len(self.subjects)

    @property
    def active_subject(self) -> Subject | None:
        if self.active_index is None:
            return None
        return self.subjects[self.active_index]

    @property
    def active_history(self) -> EditHistory | None:
        subject = self.active_subject
        return self.histories[subject.id] if subject else None

    def history_at(self, index: int) -> EditHistory:
        return self.histories[self._subject_at(index).id]

    def add(self, artifacts: Iterable[ArtifactRef | Subject]) -> list[Subject]:
        """Add uploaded images; the first new one becomes active."""
        added: list[Subject] = []
        for item in artifacts:
            subject = item if isinstance(item, Subject) else Subject(original=item)
            self.subjects.append(subject)
            self.histories[subject.id] = EditHistoryStore.create(subject.original)
            added.append(subject)
        if added:
            self.active_index = len(self.subjects) - len(added)
            logger.debug("added %d subject(s), active=%s", len(added), self.active_index)
        return added

    def select(self, index: int) -> Subject:
        subject = self._subject_at(index)
        self.active_index = index
        return subject

    def remove(self, index: int) -> Subject:
        subject = self._subject_at(index)
        del self.subjects[index]
        del self.histories[subject.id]
        self.active_index = self._active_after_removal(index)
        logger.debug("removed subject %s at %d, active=%s", subject.id, index, self.active_index)
        return subject

    def _active_after_removal(self, removed: int) -> int | None:
        active = self.active_index
        if active is None:
            return None
        if active == removed:
            if not self.subjects:
                return None
            return min(removed, len(self.subjects) - 1)
        if active > removed:
            return active - 1
        return active

    def append_edit(self, artifact: ArtifactRef, subject_id: str | None = None) -> EditHistory:
        """Append a new edit to the given subject, or to the active one."""
        key = subject_id or self._require_active().id
        if key not in self.histories:
            raise ValidationError("The image being edited was removed.")
        self.histories[key] = EditHistoryStore.append(self.histories[key], artifact)
        return self.histories[key]

    def undo(self) -> bool:
        """Step the active history back; False when there is nothing to undo."""
        return self._step(EditHistoryStore.undo)

    def redo(self) -> bool:
        return self._step(EditHistoryStore.redo)

    def _step(self, op) -> bool:
        subject = self.active_subject
        if subject is None:
            return False
        before = self.histories[subject.id]
        after = op(before)
        self.histories[subject.id] = after
        return after is not before

    def clear(self) -> None:
        self.subjects.clear()
        self.histories.clear()
        self.active_index = None

    def _require_active(self) -> Subject:
        subject = self.active_subject
        if subject is None:
            raise ValidationError("Please select an image and provide an editing prompt.")
        return subject

    def _subject_at(self, index: int) -> Subject:
        if not 0 <= index < len(self.subjects):
            raise ValidationError(f"No image at position {index}.")
        return self.subjects[index]
