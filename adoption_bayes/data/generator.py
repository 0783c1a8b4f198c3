"""Synthetic adoption-time generator and dataset container."""

import string
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List, NamedTuple, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from .censoring import CensoringPolicy, NoCensoring, apply_censoring
from .scenarios import SimulationScenario
from .validation import check_positive_int, check_probabilities
from ..errors import InvalidParameterError

SeedLike = Optional[Union[int, np.random.Generator]]


class SubjectRecord(NamedTuple):
    """One observed subject (e.g. a cat)."""

    group: str
    elapsed_time: int
    event_occurred: bool


@dataclass(frozen=True, eq=False)
class AdoptionDataset:
    """Immutable columnar container for event-time data.

    Attributes:
        group: Group index of each subject, into ``group_labels``.
        elapsed_time: Observed time steps (>= 1). Equals the censoring time
            for censored subjects.
        event_occurred: True if the event happened during observation.
        group_labels: Label of each group, in parameter order.
        true_event_time: Uncensored event times when known (simulation only).
    """

    group: np.ndarray
    elapsed_time: np.ndarray
    event_occurred: np.ndarray
    group_labels: Tuple[str, ...]
    true_event_time: Optional[np.ndarray] = None

    def __post_init__(self) -> None:
        group = np.array(self.group, dtype=np.int64)
        elapsed = np.array(self.elapsed_time, dtype=np.int64)
        event = np.array(self.event_occurred, dtype=bool)
        labels = tuple(str(label) for label in self.group_labels)

        if not labels:
            raise InvalidParameterError("group_labels cannot be empty")
        if len(set(labels)) != len(labels):
            raise InvalidParameterError(f"group_labels must be unique, got {labels}")
        if not len(group) == len(elapsed) == len(event):
            raise InvalidParameterError(
                "group, elapsed_time and event_occurred must have the same length, "
                f"got {len(group)}, {len(elapsed)}, {len(event)}"
            )
        if np.any(elapsed < 1):
            raise InvalidParameterError("elapsed_time must be >= 1 for every subject")
        if np.any((group < 0) | (group >= len(labels))):
            raise InvalidParameterError(
                f"group indices must be in [0, {len(labels)}), got {np.unique(group)}"
            )

        arrays = [group, elapsed, event]
        true_times = None
        if self.true_event_time is not None:
            true_times = np.array(self.true_event_time, dtype=np.int64)
            if len(true_times) != len(group):
                raise InvalidParameterError(
                    "true_event_time must have one entry per subject"
                )
            arrays.append(true_times)

        for array in arrays:
            array.setflags(write=False)

        object.__setattr__(self, "group", group)
        object.__setattr__(self, "elapsed_time", elapsed)
        object.__setattr__(self, "event_occurred", event)
        object.__setattr__(self, "group_labels", labels)
        object.__setattr__(self, "true_event_time", true_times)

    def __len__(self) -> int:
        return len(self.elapsed_time)

    def _key_arrays(self) -> Tuple[Optional[np.ndarray], ...]:
        return (self.group, self.elapsed_time, self.event_occurred, self.true_event_time)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AdoptionDataset):
            return NotImplemented
        if self.group_labels != other.group_labels:
            return False
        for mine, theirs in zip(self._key_arrays(), other._key_arrays()):
            if (mine is None) != (theirs is None):
                return False
            if mine is not None and not np.array_equal(mine, theirs):
                return False
        return True

    def __hash__(self) -> int:
        # Arrays are read-only after construction
        return hash((
            self.group_labels,
            *(None if a is None else a.tobytes() for a in self._key_arrays()),
        ))

    @property
    def n_groups(self) -> int:
        return len(self.group_labels)

    def records(self) -> Iterator[SubjectRecord]:
        """Iterate over subjects as records."""
        for g, t, e in zip(self.group, self.elapsed_time, self.event_occurred):
            yield SubjectRecord(self.group_labels[g], int(t), bool(e))

    @classmethod
    def from_records(
        cls,
        records: Iterable[Union[SubjectRecord, Tuple[str, int, bool]]],
        group_labels: Optional[Sequence[str]] = None,
    ) -> "AdoptionDataset":
        """Build a dataset from (group, elapsed_time, event_occurred) records.

        Args:
            records: Subject records.
            group_labels: Group order. Defaults to labels in order of first
                appearance.

        Returns:
            AdoptionDataset instance.
        """
        records = [SubjectRecord(*record) for record in records]
        if group_labels is None:
            group_labels = list(dict.fromkeys(r.group for r in records))
        labels = [str(label) for label in group_labels]
        index = {label: i for i, label in enumerate(labels)}

        unknown = {str(r.group) for r in records} - set(index)
        if unknown:
            raise InvalidParameterError(f"Records reference unknown groups: {sorted(unknown)}")

        return cls(
            group=np.array([index[str(r.group)] for r in records], dtype=np.int64),
            elapsed_time=np.array([r.elapsed_time for r in records], dtype=np.int64),
            event_occurred=np.array([r.event_occurred for r in records], dtype=bool),
            group_labels=tuple(labels),
        )

    def subset(self, group: Union[int, str]) -> "AdoptionDataset":
        """Return the subjects of a single group, keeping all group labels."""
        index = self.group_index(group)
        mask = self.group == index
        return AdoptionDataset(
            group=self.group[mask],
            elapsed_time=self.elapsed_time[mask],
            event_occurred=self.event_occurred[mask],
            group_labels=self.group_labels,
            true_event_time=(
                self.true_event_time[mask] if self.true_event_time is not None else None
            ),
        )

    def group_index(self, group: Union[int, str]) -> int:
        """Resolve a group label or index to an index."""
        if isinstance(group, str):
            if group not in self.group_labels:
                raise InvalidParameterError(
                    f"Unknown group: {group}. Available: {list(self.group_labels)}"
                )
            return self.group_labels.index(group)
        if not 0 <= group < self.n_groups:
            raise InvalidParameterError(
                f"group index must be in [0, {self.n_groups}), got {group}"
            )
        return int(group)

    def censoring_rate(self) -> float:
        """Fraction of subjects whose observation ended before the event."""
        if len(self) == 0:
            return 0.0
        return float(1.0 - np.mean(self.event_occurred))

    def to_frame(self) -> pd.DataFrame:
        """Convert to a DataFrame with one row per subject."""
        frame = pd.DataFrame(
            {
                "group": [self.group_labels[g] for g in self.group],
                "elapsed_time": self.elapsed_time,
                "event_occurred": self.event_occurred,
            }
        )
        if self.true_event_time is not None:
            frame["true_event_time"] = self.true_event_time
        return frame

    def to_csv(self, path: Union[str, Path]) -> None:
        """Save data to a CSV file."""
        self.to_frame().to_csv(path, index=False)

    def save(self, path: Union[str, Path]) -> None:
        """Save data to npz file.

        Args:
            path: Path to save file.
        """
        arrays = {
            "group": self.group,
            "elapsed_time": self.elapsed_time,
            "event_occurred": self.event_occurred,
            "group_labels": np.array(self.group_labels),
        }
        if self.true_event_time is not None:
            arrays["true_event_time"] = self.true_event_time
        np.savez(path, **arrays)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "AdoptionDataset":
        """Load data from npz file.

        Args:
            path: Path to npz file.

        Returns:
            AdoptionDataset instance.
        """
        data = np.load(path)
        return cls(
            group=data["group"],
            elapsed_time=data["elapsed_time"],
            event_occurred=data["event_occurred"],
            group_labels=tuple(str(label) for label in data["group_labels"]),
            true_event_time=data["true_event_time"] if "true_event_time" in data else None,
        )


def default_group_labels(n_groups: int) -> List[str]:
    """Labels "A", "B", ... for ``n_groups`` groups."""
    if n_groups <= len(string.ascii_uppercase):
        return list(string.ascii_uppercase[:n_groups])
    return [f"G{i}" for i in range(n_groups)]


def simulate(
    n: int,
    group_probabilities: Sequence[float],
    censoring_policy: Optional[CensoringPolicy] = None,
    seed: SeedLike = None,
    group_labels: Optional[Sequence[str]] = None,
) -> AdoptionDataset:
    """Simulate adoption times for ``n`` subjects.

    Each subject is assigned a group uniformly at random, draws a true event
    time from a shifted geometric distribution with that group's probability
    (P(T = k) = p * (1 - p)**(k - 1), k >= 1), and is then censored according
    to ``censoring_policy``.

    Args:
        n: Number of subjects.
        group_probabilities: Per-step event probability of each group.
        censoring_policy: Censoring policy (default: no censoring).
        seed: Seed or generator for reproducibility. ``None`` draws fresh entropy.
        group_labels: Optional labels, one per group.

    Returns:
        AdoptionDataset with ground-truth event times attached.

    Raises:
        InvalidParameterError: If ``n`` or any probability is out of range.
    """
    n = check_positive_int(n, "n")
    probabilities = check_probabilities(group_probabilities)
    if censoring_policy is None:
        censoring_policy = NoCensoring()

    if group_labels is None:
        group_labels = default_group_labels(len(probabilities))
    elif len(group_labels) != len(probabilities):
        raise InvalidParameterError(
            f"Expected {len(probabilities)} group labels, got {len(group_labels)}"
        )

    rng = np.random.default_rng(seed)

    group = rng.integers(0, len(probabilities), size=n)
    # numpy's geometric counts trials up to and including the first success
    true_times = rng.geometric(probabilities[group]).astype(np.int64)
    elapsed, event = apply_censoring(true_times, censoring_policy, rng)

    return AdoptionDataset(
        group=group,
        elapsed_time=elapsed,
        event_occurred=event,
        group_labels=tuple(group_labels),
        true_event_time=true_times,
    )


class AdoptionDataGenerator:
    """Generator for synthetic adoption data from a scenario.

    Args:
        scenario: Simulation scenario configuration.
        seed: Random seed for reproducibility.
    """

    def __init__(self, scenario: SimulationScenario, seed: int = 42):
        self.scenario = scenario
        self.seed = seed
        self.rng = np.random.default_rng(seed)

    def generate(self) -> AdoptionDataset:
        """Generate one dataset.

        Successive calls continue the same random stream, so each call yields
        a fresh replicate.
        """
        return simulate(
            n=self.scenario.n_subjects,
            group_probabilities=self.scenario.group_probabilities,
            censoring_policy=self.scenario.censoring,
            seed=self.rng,
            group_labels=self.scenario.group_labels,
        )
