"""Bias of the naive likelihood relative to the censored likelihood.

Dropping censored subjects keeps only the subjects who adopted quickly,
so the naive posterior overstates the adoption probability whenever
censoring is present. The censored likelihood keeps the survival term
of every censored subject and does not suffer from this.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import numpy as np

from .significance import compute_confidence_interval, paired_significance_test
from ..data.generator import AdoptionDataset, SeedLike
from ..data.types import LikelihoodKind
from ..data.validation import check_probabilities
from ..models.config import InferenceConfig
from ..models.posterior import PosteriorResult, fit_posterior


@dataclass
class BiasReport:
    """Naive vs censored posterior means for one group of one dataset.

    Attributes:
        group: Group label.
        true_probability: Probability the data were simulated with.
        censored_mean: Posterior mean under the censored likelihood.
        naive_mean: Posterior mean under the naive likelihood.
        censoring_rate: Share of the group's subjects that were censored.
        replicate: Replicate index, when part of an experiment.
    """

    group: str
    true_probability: float
    censored_mean: float
    naive_mean: float
    censoring_rate: float = 0.0
    replicate: Optional[int] = None

    @property
    def censored_bias(self) -> float:
        return self.censored_mean - self.true_probability

    @property
    def naive_bias(self) -> float:
        return self.naive_mean - self.true_probability

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "group": self.group,
            "replicate": self.replicate,
            "true_probability": self.true_probability,
            "censored_mean": self.censored_mean,
            "naive_mean": self.naive_mean,
            "censored_bias": self.censored_bias,
            "naive_bias": self.naive_bias,
            "censoring_rate": self.censoring_rate,
        }


def compare_likelihoods(
    dataset: AdoptionDataset,
    true_probabilities: Sequence[float],
    config: Optional[InferenceConfig] = None,
    seed: SeedLike = None,
    replicate: Optional[int] = None,
) -> List[BiasReport]:
    """Fit a dataset with both likelihoods and report the bias per group.

    Args:
        dataset: Observed subjects.
        true_probabilities: Simulation probabilities, in label order.
        config: Inference configuration shared by both fits.
        seed: Seed for the posterior engines.
        replicate: Replicate index recorded in each report.

    Returns:
        One BiasReport per group, in label order.

    Raises:
        ValueError: If the number of probabilities does not match the groups.
    """
    true_probabilities = check_probabilities(true_probabilities, "true_probabilities")
    if len(true_probabilities) != dataset.n_groups:
        raise ValueError(
            f"Expected {dataset.n_groups} true probabilities, got {len(true_probabilities)}"
        )

    rng = np.random.default_rng(seed)
    censored = fit_posterior(dataset, config, LikelihoodKind.CENSORED, rng)
    naive = fit_posterior(dataset, config, LikelihoodKind.NAIVE, rng)
    return bias_reports(dataset, true_probabilities, censored, naive, replicate)


def bias_reports(
    dataset: AdoptionDataset,
    true_probabilities: Sequence[float],
    censored: PosteriorResult,
    naive: PosteriorResult,
    replicate: Optional[int] = None,
) -> List[BiasReport]:
    """Build bias reports from posteriors already fitted with both likelihoods."""
    reports = []
    for i, label in enumerate(dataset.group_labels):
        mask = dataset.group == i
        rate = float(1.0 - np.mean(dataset.event_occurred[mask])) if mask.any() else 0.0
        reports.append(
            BiasReport(
                group=label,
                true_probability=float(true_probabilities[i]),
                censored_mean=censored.posterior_mean(label),
                naive_mean=naive.posterior_mean(label),
                censoring_rate=rate,
                replicate=replicate,
            )
        )
    return reports


def aggregate_bias(
    reports: Sequence[BiasReport],
    confidence: float = 0.95,
) -> Dict[str, dict]:
    """Aggregate bias reports across replicates, per group.

    For each group: mean bias with a confidence interval for both
    likelihoods and, with two or more replicates, a paired t-test of the
    absolute errors (naive minus censored).

    Args:
        reports: Reports from several replicates.
        confidence: Confidence level for intervals.

    Returns:
        Dictionary keyed by group label.
    """
    if not reports:
        raise ValueError("reports cannot be empty")

    by_group: Dict[str, List[BiasReport]] = {}
    for report in reports:
        by_group.setdefault(report.group, []).append(report)

    summary = {}
    for group, items in by_group.items():
        censored_bias = np.array([r.censored_bias for r in items])
        naive_bias = np.array([r.naive_bias for r in items])

        entry = {"n_replicates": len(items)}
        for name, values in (("censored", censored_bias), ("naive", naive_bias)):
            mean, lower, upper = compute_confidence_interval(values, confidence)
            entry[name] = {
                "mean_bias": mean,
                "std_bias": float(np.std(values, ddof=1)) if len(values) > 1 else 0.0,
                "ci_lower": lower,
                "ci_upper": upper,
                "mean_absolute_error": float(np.mean(np.abs(values))),
            }

        if len(items) >= 2:
            entry["absolute_error_test"] = paired_significance_test(
                np.abs(censored_bias), np.abs(naive_bias), confidence=confidence
            )
        summary[group] = entry

    return summary
