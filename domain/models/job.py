"""
Job Domain Model

A job is one file's end-to-end transcode pipeline within a batch run.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, FrozenSet, Optional

from ..exceptions import InvalidTransitionError


class JobStatus(Enum):
    """Status of a transcode job."""
    PENDING = "pending"
    STARTED = "started"
    PUBLISHING = "publishing"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL


_TERMINAL: FrozenSet[JobStatus] = frozenset({
    JobStatus.COMPLETED,
    JobStatus.FAILED,
    JobStatus.CANCELLED,
})

_TRANSITIONS: Dict[JobStatus, FrozenSet[JobStatus]] = {
    JobStatus.PENDING: frozenset({JobStatus.STARTED, JobStatus.CANCELLED}),
    JobStatus.STARTED: frozenset({JobStatus.PUBLISHING, JobStatus.FAILED, JobStatus.CANCELLED}),
    JobStatus.PUBLISHING: frozenset({JobStatus.COMPLETED, JobStatus.FAILED, JobStatus.CANCELLED}),
    JobStatus.COMPLETED: frozenset(),
    JobStatus.FAILED: frozenset(),
    JobStatus.CANCELLED: frozenset(),
}


@dataclass(frozen=True)
class JobInput:
    """A file submitted for processing, identified by the collaborator's id."""

    input_path: Path
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def __post_init__(self):
        object.__setattr__(self, 'input_path', Path(self.input_path))


@dataclass(frozen=True)
class JobResult:
    """Outcome of a successfully completed job."""

    id: str
    input_path: Path
    output_path: Path

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'id': self.id,
            'input_path': str(self.input_path),
            'output_path': str(self.output_path),
        }


@dataclass
class Job:
    """
    A job and its state machine.

    PENDING -> STARTED -> PUBLISHING -> {COMPLETED | FAILED | CANCELLED}.
    A pending job may be cancelled before it starts; a started job may fail
    or be cancelled before publishing. Terminal states are final.
    """

    id: str
    input_path: Path
    output_path: Optional[Path] = None
    status: JobStatus = JobStatus.PENDING
    error: Optional[str] = None

    # Timing
    created_at: datetime = field(default_factory=datetime.now)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @classmethod
    def from_input(cls, job_input: JobInput) -> Job:
        return cls(id=job_input.id, input_path=job_input.input_path)

    @property
    def duration(self) -> Optional[float]:
        """Get job duration in seconds."""
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    def can_transition(self, target: JobStatus) -> bool:
        return target in _TRANSITIONS[self.status]

    def transition(self, target: JobStatus, error: Optional[str] = None) -> None:
        """
        Move the job to ``target``.

        Raises:
            InvalidTransitionError: If ``target`` is not reachable from the
                current status.
        """
        if not self.can_transition(target):
            raise InvalidTransitionError(
                f"Job {self.id}: cannot move from {self.status.value} to {target.value}"
            )

        self.status = target
        if target == JobStatus.STARTED:
            self.started_at = datetime.now()
        if target.is_terminal:
            self.completed_at = datetime.now()
        if target == JobStatus.FAILED:
            self.error = error

    def to_result(self) -> JobResult:
        if self.status != JobStatus.COMPLETED or self.output_path is None:
            raise InvalidTransitionError(f"Job {self.id} has not completed")
        return JobResult(id=self.id, input_path=self.input_path, output_path=self.output_path)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'id': self.id,
            'input_path': str(self.input_path),
            'output_path': str(self.output_path) if self.output_path else None,
            'status': self.status.value,
            'error': self.error,
            'duration': self.duration,
        }
