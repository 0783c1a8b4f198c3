"""Analysis utilities for adoption posteriors."""

from .summary import PosteriorSummary, summarize_draws, summarize_posterior
from .bias import BiasReport, compare_likelihoods, bias_reports, aggregate_bias
from .significance import (
    paired_significance_test,
    compute_confidence_interval,
)

__all__ = [
    "PosteriorSummary",
    "summarize_draws",
    "summarize_posterior",
    "BiasReport",
    "compare_likelihoods",
    "bias_reports",
    "aggregate_bias",
    "paired_significance_test",
    "compute_confidence_interval",
]
