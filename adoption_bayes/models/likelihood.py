"""Censored shifted-geometric log-likelihood."""

import warnings
from dataclasses import dataclass
from typing import List, Sequence, Union

import numpy as np
import torch

from ..data.generator import AdoptionDataset
from ..data.types import LikelihoodKind
from ..data.validation import check_probabilities
from ..errors import EmptyDatasetWarning, InvalidParameterError


def _check_open_unit(probability: Union[float, np.ndarray]) -> np.ndarray:
    p = np.asarray(probability, dtype=float)
    if not np.all((p > 0.0) & (p < 1.0)):
        raise InvalidParameterError(f"probability must be in (0, 1), got {probability}")
    return p


def log_pmf(
    elapsed_time: Union[int, np.ndarray], probability: Union[float, np.ndarray]
) -> Union[float, np.ndarray]:
    """Log probability that the event happens exactly at ``elapsed_time``.

    log P(T = t) = log(p) + (t - 1) * log(1 - p)
    """
    t = np.asarray(elapsed_time)
    p = _check_open_unit(probability)
    return np.log(p) + (t - 1) * np.log(1 - p)


def log_survival(
    elapsed_time: Union[int, np.ndarray], probability: Union[float, np.ndarray]
) -> Union[float, np.ndarray]:
    """Log probability that the event has not happened after ``elapsed_time`` steps.

    log P(T > t) = t * log(1 - p)
    """
    t = np.asarray(elapsed_time)
    p = _check_open_unit(probability)
    return t * np.log(1 - p)


def _subject_probabilities(
    dataset: AdoptionDataset, group_probabilities: Sequence[float]
) -> np.ndarray:
    probabilities = check_probabilities(group_probabilities)
    if len(probabilities) != dataset.n_groups:
        raise InvalidParameterError(
            f"Expected {dataset.n_groups} group probabilities "
            f"({list(dataset.group_labels)}), got {len(probabilities)}"
        )
    return probabilities[dataset.group]


def subject_log_likelihood(
    dataset: AdoptionDataset, group_probabilities: Sequence[float]
) -> np.ndarray:
    """Per-subject log-likelihood contributions.

    Subjects with an observed event contribute the log pmf at their elapsed
    time; censored subjects contribute the log survival function.

    Args:
        dataset: Observed subjects.
        group_probabilities: Event probability of each group, in the order of
            ``dataset.group_labels``.

    Returns:
        Array of contributions, one per subject.
    """
    p = _subject_probabilities(dataset, group_probabilities)
    t = dataset.elapsed_time
    return np.where(
        dataset.event_occurred,
        np.log(p) + (t - 1) * np.log(1 - p),
        t * np.log(1 - p),
    )


def log_likelihood(
    dataset: AdoptionDataset, group_probabilities: Sequence[float]
) -> float:
    """Total log-likelihood of a dataset under per-group event probabilities.

    An empty dataset carries no information: the result is 0.0 and an
    EmptyDatasetWarning is issued.

    Raises:
        InvalidParameterError: If a probability is outside (0, 1) or the
            number of probabilities does not match the number of groups.
    """
    contributions = subject_log_likelihood(dataset, group_probabilities)
    if len(contributions) == 0:
        warnings.warn(
            "Log-likelihood of an empty dataset is 0 and carries no information",
            EmptyDatasetWarning,
            stacklevel=2,
        )
        return 0.0
    return float(np.sum(contributions))


def naive_log_likelihood(
    dataset: AdoptionDataset, group_probabilities: Sequence[float]
) -> float:
    """Log-likelihood that ignores censored subjects.

    Dropping censored subjects discards the information that the event had
    not happened by their censoring time, which biases the estimated
    probabilities upward. Kept for comparison with :func:`log_likelihood`.
    """
    contributions = subject_log_likelihood(dataset, group_probabilities)
    if len(contributions) == 0:
        warnings.warn(
            "Log-likelihood of an empty dataset is 0 and carries no information",
            EmptyDatasetWarning,
            stacklevel=2,
        )
        return 0.0
    return float(np.sum(contributions[dataset.event_occurred]))


@dataclass(frozen=True)
class GroupStatistics:
    """Sufficient statistics of one group.

    The group log-likelihood is ``n_events * log(p) + exposure * log(1 - p)``.

    Attributes:
        label: Group label.
        n_subjects: Subjects contributing to the likelihood.
        n_events: Subjects with an observed event.
        exposure: Number of steps on which the event did not happen.
    """

    label: str
    n_subjects: int
    n_events: int
    exposure: int

    def log_likelihood(self, probability: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        """Evaluate the group log-likelihood at one or many probabilities."""
        p = _check_open_unit(probability)
        return self.n_events * np.log(p) + self.exposure * np.log(1 - p)


def group_statistics(
    dataset: AdoptionDataset,
    likelihood: LikelihoodKind = LikelihoodKind.CENSORED,
) -> List[GroupStatistics]:
    """Compute sufficient statistics for every group.

    Args:
        dataset: Observed subjects.
        likelihood: CENSORED counts the full observed time of censored
            subjects as exposure; NAIVE drops censored subjects.

    Returns:
        One GroupStatistics per group, in label order.
    """
    stats = []
    event = dataset.event_occurred
    t = dataset.elapsed_time

    for index, label in enumerate(dataset.group_labels):
        in_group = dataset.group == index
        events = in_group & event
        censored = in_group & ~event

        exposure = int(np.sum(t[events] - 1))
        n_subjects = int(np.sum(events))
        if likelihood == LikelihoodKind.CENSORED:
            exposure += int(np.sum(t[censored]))
            n_subjects += int(np.sum(censored))

        stats.append(
            GroupStatistics(
                label=label,
                n_subjects=n_subjects,
                n_events=int(np.sum(events)),
                exposure=exposure,
            )
        )

    return stats


def torch_log_likelihood(
    probabilities: torch.Tensor,
    group: torch.Tensor,
    elapsed_time: torch.Tensor,
    event_occurred: torch.Tensor,
    likelihood: LikelihoodKind = LikelihoodKind.CENSORED,
) -> torch.Tensor:
    """Differentiable log-likelihood for gradient-based fitting.

    Args:
        probabilities: Per-group probabilities, shape (n_groups,).
        group: Group index of each subject.
        elapsed_time: Observed times.
        event_occurred: Event indicators (bool).
        likelihood: Whether censored subjects contribute.

    Returns:
        Scalar tensor.
    """
    p = probabilities[group.long()]
    t = elapsed_time.to(p.dtype)
    event = event_occurred.bool()

    log_p = torch.log(p)
    log_q = torch.log1p(-p)
    observed = log_p + (t - 1) * log_q

    if likelihood == LikelihoodKind.NAIVE:
        return observed[event].sum()

    return torch.where(event, observed, t * log_q).sum()
