from __future__ import annotations

import logging

from mediastudio.domain.entities.artifact import ArtifactRef
from mediastudio.domain.entities.edit_history import EditHistory

logger = logging.getLogger(__name__)


class EditHistoryStore:
    """Linear undo/redo over immutable EditHistory values.

    Every operation returns a history; undo/redo at a boundary return the
    input unchanged.
    """

    @staticmethod
    def create(initial: ArtifactRef) -> EditHistory:
        return EditHistory(edits=(initial,), current_index=0)

    # Appending after an undo discards the redo branch for good.
    @staticmethod
    def append(history: EditHistory, artifact: ArtifactRef) -> EditHistory:
        kept = history.edits[: history.current_index + 1]
        edits = (*kept, artifact)
        return EditHistory(edits=edits, current_index=len(edits) - 1)

    @staticmethod
    def undo(history: EditHistory) -> EditHistory:
        if not history.can_undo:
            logger.debug("cannot undo: already at the original")
            return history
        return EditHistory(edits=history.edits, current_index=history.current_index - 1)

    @staticmethod
    def redo(history: EditHistory) -> EditHistory:
        if not history.can_redo:
            logger.debug("cannot redo: already at the latest edit")
            return history
        return EditHistory(edits=history.edits, current_index=history.current_index + 1)
