from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any


class JobState(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    POLLING = "polling"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobState.SUCCEEDED, JobState.FAILED)


# Allowed forward transitions; POLLING -> POLLING is the poll self-loop.
_TRANSITIONS: dict[JobState, frozenset[JobState]] = {
    JobState.IDLE: frozenset({JobState.SUBMITTING}),
    JobState.SUBMITTING: frozenset({JobState.POLLING, JobState.SUCCEEDED, JobState.FAILED}),
    JobState.POLLING: frozenset({JobState.POLLING, JobState.SUCCEEDED, JobState.FAILED}),
    JobState.SUCCEEDED: frozenset(),
    JobState.FAILED: frozenset(),
}


@dataclass(frozen=True)
class GenerationJob:
    prompt: str
    state: JobState = JobState.IDLE
    operation_name: str | None = None
    result: Any = None  # TransientArtifact once SUCCEEDED
    error_message: str | None = None
    polls: int = 0

    def advance(self, state: JobState, **changes: Any) -> GenerationJob:
        if state not in _TRANSITIONS[self.state]:
            raise ValueError(f"Illegal job transition {self.state.value} -> {state.value}")
        return replace(self, state=state, **changes)
