"""Experiment configuration and management."""

import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union

import numpy as np

from ..data.scenarios import SimulationScenario
from ..data.types import RunStatus
from ..models.config import InferenceConfig


@dataclass
class Experiment:
    """Complete naive-vs-censored experiment configuration.

    Each replicate simulates one dataset from the scenario and fits it
    with both likelihoods.

    Attributes:
        experiment_id: Unique identifier (auto-generated if not provided).
        name: Human-readable experiment name.
        description: Optional description.
        seed: Random seed for all operations.
        scenario: Data generation configuration.
        inference: Posterior engine configuration.
        n_replicates: Number of simulated datasets.
        save_data: Whether to store each replicate's dataset.
        created_at: Creation timestamp.
        started_at: Start timestamp.
        completed_at: Completion timestamp.
        status: Current experiment status.
    """

    # Identity
    name: str
    seed: int

    # Data
    scenario: SimulationScenario

    # Inference
    inference: InferenceConfig = field(default_factory=InferenceConfig)
    n_replicates: int = 20
    save_data: bool = False

    # Identity (auto-generated)
    experiment_id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    description: str = ""

    # Timestamps
    created_at: datetime = field(default_factory=datetime.now)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    # Status
    status: RunStatus = RunStatus.PENDING

    def __post_init__(self) -> None:
        """Validate after initialization."""
        self.validate()

    def validate(self) -> None:
        """Validate the experiment configuration.

        Raises:
            ValueError: If configuration is invalid.
        """
        if not self.name:
            raise ValueError("name cannot be empty")

        if self.n_replicates < 1:
            raise ValueError(f"n_replicates must be >= 1, got {self.n_replicates}")

    def replicate_seeds(self) -> List[int]:
        """Independent, reproducible seeds for every replicate."""
        state = np.random.SeedSequence(self.seed).generate_state(self.n_replicates)
        return [int(s) for s in state]

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "experiment_id": self.experiment_id,
            "name": self.name,
            "description": self.description,
            "seed": self.seed,
            "data": self.scenario.to_dict(),
            "inference": self.inference.to_dict(),
            "n_replicates": self.n_replicates,
            "save_data": self.save_data,
            "status": self.status.name,
            "created_at": self.created_at.isoformat(),
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Experiment":
        """Create from dictionary.

        Args:
            data: Dictionary with experiment configuration. ``data`` may be
                a scenario dictionary or the name of a predefined scenario.

        Returns:
            Experiment instance.
        """
        data_config = data.get("data", "fixed_window")
        if isinstance(data_config, dict):
            scenario = SimulationScenario.from_dict(data_config)
        else:
            # Assume it's a scenario name
            from ..data.scenarios import get_scenario
            scenario = get_scenario(data_config)

        status_str = data.get("status", "PENDING")
        status = RunStatus[status_str.upper()]

        created_at = data.get("created_at")
        if created_at and isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at)
        else:
            created_at = datetime.now()

        started_at = data.get("started_at")
        if started_at and isinstance(started_at, str):
            started_at = datetime.fromisoformat(started_at)

        completed_at = data.get("completed_at")
        if completed_at and isinstance(completed_at, str):
            completed_at = datetime.fromisoformat(completed_at)

        return cls(
            experiment_id=data.get("experiment_id", str(uuid.uuid4())[:8]),
            name=data.get("name", "Unnamed Experiment"),
            description=data.get("description", ""),
            seed=data["seed"],
            scenario=scenario,
            inference=InferenceConfig.from_dict(data.get("inference", {})),
            n_replicates=data.get("n_replicates", 20),
            save_data=data.get("save_data", False),
            status=status,
            created_at=created_at,
            started_at=started_at,
            completed_at=completed_at,
        )

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "Experiment":
        """Load experiment from JSON file.

        Args:
            path: Path to JSON file.

        Returns:
            Experiment instance.
        """
        with open(path, "r") as f:
            data = json.load(f)
        return cls.from_dict(data)

    def to_json(self, path: Union[str, Path]) -> None:
        """Save experiment to JSON file.

        Args:
            path: Path to save JSON file.
        """
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    def start(self) -> None:
        """Mark experiment as started."""
        self.status = RunStatus.RUNNING
        self.started_at = datetime.now()

    def complete(self) -> None:
        """Mark experiment as completed."""
        self.status = RunStatus.COMPLETED
        self.completed_at = datetime.now()

    def fail(self) -> None:
        """Mark experiment as failed."""
        self.status = RunStatus.FAILED
        self.completed_at = datetime.now()
