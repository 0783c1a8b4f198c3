"""Posterior summary statistics."""

from dataclasses import dataclass
from typing import List

import numpy as np

from ..models.posterior import PosteriorResult


@dataclass
class PosteriorSummary:
    """Summary of one group's posterior draws.

    Attributes:
        group: Group label.
        mean: Posterior mean.
        median: Posterior median.
        std: Posterior standard deviation.
        ci_lower: Lower bound of the equal-tailed credible interval.
        ci_upper: Upper bound of the equal-tailed credible interval.
        credible_interval: Interval width (e.g. 0.9).
        n_draws: Number of draws summarized.
    """

    group: str
    mean: float
    median: float
    std: float
    ci_lower: float
    ci_upper: float
    credible_interval: float
    n_draws: int

    def contains(self, value: float) -> bool:
        """Whether ``value`` lies inside the credible interval."""
        return self.ci_lower <= value <= self.ci_upper

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "group": self.group,
            "mean": self.mean,
            "median": self.median,
            "std": self.std,
            "ci_lower": self.ci_lower,
            "ci_upper": self.ci_upper,
            "credible_interval": self.credible_interval,
            "n_draws": self.n_draws,
        }


def summarize_draws(
    draws: np.ndarray,
    group: str = "",
    credible_interval: float = 0.9,
) -> PosteriorSummary:
    """Summarize posterior draws of a single probability.

    Args:
        draws: Posterior draws.
        group: Group label for reporting.
        credible_interval: Width of the equal-tailed interval.

    Returns:
        PosteriorSummary.

    Raises:
        ValueError: If there are no draws or the interval width is invalid.
    """
    draws = np.asarray(draws, dtype=float).ravel()
    if len(draws) == 0:
        raise ValueError("draws cannot be empty")
    if not 0.0 < credible_interval < 1.0:
        raise ValueError(
            f"credible_interval must be in (0, 1), got {credible_interval}"
        )

    tail = (1.0 - credible_interval) / 2
    lower, median, upper = np.quantile(draws, [tail, 0.5, 1.0 - tail])

    return PosteriorSummary(
        group=group,
        mean=float(np.mean(draws)),
        median=float(median),
        std=float(np.std(draws, ddof=1)) if len(draws) > 1 else 0.0,
        ci_lower=float(lower),
        ci_upper=float(upper),
        credible_interval=credible_interval,
        n_draws=len(draws),
    )


def summarize_posterior(
    result: PosteriorResult, credible_interval: float = 0.9
) -> List[PosteriorSummary]:
    """Summarize every group of a posterior result, in label order.

    When the engine provides exact means, they replace the sample mean.
    """
    summaries = []
    for label in result.group_labels:
        summary = summarize_draws(result.draws[label], label, credible_interval)
        if result.exact_means is not None:
            summary.mean = result.exact_means[label]
        summaries.append(summary)
    return summaries
