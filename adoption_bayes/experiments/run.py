"""Replicate run tracking."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..data.types import RunStatus


@dataclass
class ReplicateRun:
    """One simulated dataset fitted with both likelihoods.

    Attributes:
        run_id: Unique identifier within experiment.
        experiment_id: Parent experiment identifier.
        replicate: Replicate index.
        seed: Seed used for simulation and fitting.
        status: Current run status.
        failure_reason: Reason if FAILED.
        started_at: Start timestamp.
        completed_at: Completion timestamp.
        n_subjects: Subjects in the simulated dataset.
        censoring_rate: Share of censored subjects.
    """

    # Identity
    run_id: str
    experiment_id: str
    replicate: int
    seed: int

    # Status
    status: RunStatus = RunStatus.PENDING
    failure_reason: Optional[str] = None

    # Timing
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    # Data
    n_subjects: int = 0
    censoring_rate: Optional[float] = None

    @classmethod
    def create(cls, experiment_id: str, replicate: int, seed: int) -> "ReplicateRun":
        """Create a new replicate run."""
        return cls(
            run_id=f"replicate_{replicate:04d}",
            experiment_id=experiment_id,
            replicate=replicate,
            seed=seed,
        )

    def start(self) -> None:
        """Mark run as started."""
        self.status = RunStatus.RUNNING
        self.started_at = datetime.now()

    def complete(self, n_subjects: int, censoring_rate: float) -> None:
        """Mark run as completed.

        Args:
            n_subjects: Subjects in the simulated dataset.
            censoring_rate: Share of censored subjects.
        """
        self.status = RunStatus.COMPLETED
        self.completed_at = datetime.now()
        self.n_subjects = n_subjects
        self.censoring_rate = censoring_rate

    def fail(self, reason: str) -> None:
        """Mark run as failed.

        Args:
            reason: Failure reason.
        """
        self.status = RunStatus.FAILED
        self.completed_at = datetime.now()
        self.failure_reason = reason

    @property
    def duration_seconds(self) -> Optional[float]:
        """Get run duration in seconds."""
        if self.started_at is None:
            return None
        end = self.completed_at or datetime.now()
        return (end - self.started_at).total_seconds()

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "run_id": self.run_id,
            "experiment_id": self.experiment_id,
            "replicate": self.replicate,
            "seed": self.seed,
            "status": self.status.name,
            "failure_reason": self.failure_reason,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "duration_seconds": self.duration_seconds,
            "n_subjects": self.n_subjects,
            "censoring_rate": self.censoring_rate,
        }
