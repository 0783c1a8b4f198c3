"""Simulation scenario configuration for synthetic adoption data."""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Union

from .censoring import (
    CensoringPolicy,
    FixedCensoring,
    NoCensoring,
    RandomCensoring,
    censoring_policy_from_dict,
)
from .validation import check_positive_int, check_probabilities


@dataclass
class SimulationScenario:
    """Configuration for synthetic adoption data generation.

    Attributes:
        name: Unique identifier (e.g., "fixed_window")
        description: Human-readable description
        n_subjects: Number of subjects per dataset
        group_labels: Label of each group, in parameter order
        group_probabilities: Per-day adoption probability of each group
        censoring: Censoring policy applied to every subject
    """

    # Identity
    name: str
    description: str = ""

    # Sample Configuration
    n_subjects: int = 1000

    # Groups
    group_labels: List[str] = field(default_factory=lambda: ["A", "B"])
    group_probabilities: List[float] = field(default_factory=lambda: [0.1, 0.15])

    # Censoring
    censoring: CensoringPolicy = field(default_factory=NoCensoring)

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self.validate()

    def validate(self) -> None:
        """Validate the scenario configuration.

        Raises:
            ValueError: If configuration is invalid.
        """
        check_positive_int(self.n_subjects, "n_subjects")
        check_probabilities(self.group_probabilities)

        if len(self.group_labels) != len(self.group_probabilities):
            raise ValueError(
                f"group_labels ({len(self.group_labels)}) and group_probabilities "
                f"({len(self.group_probabilities)}) must have the same length"
            )

        if len(set(self.group_labels)) != len(self.group_labels):
            raise ValueError(f"group_labels must be unique, got {self.group_labels}")

        if not isinstance(self.censoring, (NoCensoring, FixedCensoring, RandomCensoring)):
            raise ValueError(f"Unknown censoring policy: {self.censoring!r}")

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "description": self.description,
            "n_subjects": self.n_subjects,
            "group_labels": list(self.group_labels),
            "group_probabilities": list(self.group_probabilities),
            "censoring": self.censoring.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SimulationScenario":
        """Create from dictionary.

        Args:
            data: Dictionary with scenario configuration.

        Returns:
            SimulationScenario instance.
        """
        probabilities = list(data.get("group_probabilities", [0.1, 0.15]))
        labels = data.get("group_labels")
        if labels is None:
            labels = [chr(ord("A") + i) for i in range(len(probabilities))]

        return cls(
            name=data["name"],
            description=data.get("description", ""),
            n_subjects=data.get("n_subjects", 1000),
            group_labels=list(labels),
            group_probabilities=probabilities,
            censoring=censoring_policy_from_dict(data.get("censoring")),
        )

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "SimulationScenario":
        """Load scenario from JSON file.

        Args:
            path: Path to JSON file.

        Returns:
            SimulationScenario instance.
        """
        with open(path, "r") as f:
            data = json.load(f)
        return cls.from_dict(data)

    def to_json(self, path: Union[str, Path]) -> None:
        """Save scenario to JSON file.

        Args:
            path: Path to save JSON file.
        """
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    def with_n_subjects(self, n_subjects: int) -> "SimulationScenario":
        """Create a copy with a different subject count."""
        data = self.to_dict()
        data["n_subjects"] = n_subjects
        return SimulationScenario.from_dict(data)


# Predefined scenarios
PREDEFINED_SCENARIOS = {
    "uncensored": SimulationScenario(
        name="uncensored",
        description="Two groups observed until adoption, no censoring",
        group_probabilities=[0.1, 0.15],
        censoring=NoCensoring(),
    ),
    "fixed_window": SimulationScenario(
        name="fixed_window",
        description="Two groups observed for at most 20 days",
        group_probabilities=[0.1, 0.15],
        censoring=FixedCensoring(limit=20),
    ),
    "random_window": SimulationScenario(
        name="random_window",
        description="Two groups with a geometric observation window (p=0.05)",
        group_probabilities=[0.1, 0.15],
        censoring=RandomCensoring(censor_probability=0.05),
    ),
}


def get_scenario(name: str) -> SimulationScenario:
    """Get a predefined scenario by name.

    Args:
        name: Scenario name.

    Returns:
        SimulationScenario instance.

    Raises:
        ValueError: If scenario name is not found.
    """
    if name not in PREDEFINED_SCENARIOS:
        raise ValueError(
            f"Unknown scenario: {name}. "
            f"Available: {list(PREDEFINED_SCENARIOS.keys())}"
        )
    return PREDEFINED_SCENARIOS[name]
