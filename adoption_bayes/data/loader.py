"""Loading observed adoption records from delimited text."""

from pathlib import Path
from typing import Optional, Sequence, Union

import numpy as np
import pandas as pd

from .generator import AdoptionDataset
from ..errors import InvalidParameterError


def dataset_from_frame(
    frame: pd.DataFrame,
    time_column: str = "time",
    outcome_column: str = "outcome",
    group_column: str = "group",
    event_outcomes: Sequence[str] = ("Adoption",),
    groups: Optional[Sequence[str]] = None,
) -> AdoptionDataset:
    """Convert a table of observed subjects to an AdoptionDataset.

    A row is an event when its outcome is one of ``event_outcomes``; any
    other outcome (e.g. still in the shelter, transferred) is treated as
    censored at the recorded time.

    Args:
        frame: One row per subject.
        time_column: Column with elapsed time in whole time steps.
        outcome_column: Column with the outcome category.
        group_column: Column with the group label.
        event_outcomes: Outcome values that count as the event, compared
            as strings (so ``("True",)`` reads a boolean column).
        groups: Groups to keep, in parameter order. Defaults to all groups
            in sorted order.

    Returns:
        AdoptionDataset instance.

    Raises:
        ValueError: If a required column is missing.
        InvalidParameterError: If elapsed times are not positive integers.
    """
    missing = [c for c in (time_column, outcome_column, group_column) if c not in frame.columns]
    if missing:
        raise ValueError(f"Missing columns: {missing}. Available: {list(frame.columns)}")

    frame = frame.dropna(subset=[time_column, outcome_column, group_column])
    group_values = frame[group_column].astype(str)

    if groups is None:
        groups = sorted(group_values.unique())
    else:
        groups = [str(g) for g in groups]
        frame = frame[group_values.isin(groups)]
        group_values = group_values[group_values.isin(groups)]

    times = frame[time_column].to_numpy(dtype=float)
    if np.any(times != np.round(times)):
        raise InvalidParameterError(f"{time_column} must hold whole time steps")
    if np.any(times < 1):
        raise InvalidParameterError(f"{time_column} must be >= 1 for every subject")

    index = {label: i for i, label in enumerate(groups)}
    events = frame[outcome_column].astype(str).isin([str(o) for o in event_outcomes])
    return AdoptionDataset(
        group=group_values.map(index).to_numpy(dtype=np.int64),
        elapsed_time=times.astype(np.int64),
        event_occurred=events.to_numpy(dtype=bool),
        group_labels=tuple(groups),
    )


def load_adoption_csv(
    path: Union[str, Path],
    time_column: str = "time",
    outcome_column: str = "outcome",
    group_column: str = "group",
    event_outcomes: Sequence[str] = ("Adoption",),
    groups: Optional[Sequence[str]] = None,
    sep: str = ",",
) -> AdoptionDataset:
    """Load an AdoptionDataset from a CSV file.

    See :func:`dataset_from_frame` for the column semantics.
    """
    frame = pd.read_csv(path, sep=sep)
    return dataset_from_frame(
        frame,
        time_column=time_column,
        outcome_column=outcome_column,
        group_column=group_column,
        event_outcomes=event_outcomes,
        groups=groups,
    )
