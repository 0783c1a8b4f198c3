"""Statistical tests for comparing estimators across replicates."""

from typing import Dict, Tuple

import numpy as np
from scipy import stats


def paired_significance_test(
    values_a: np.ndarray,
    values_b: np.ndarray,
    alternative: str = "two-sided",
    confidence: float = 0.95,
) -> Dict[str, float]:
    """Paired t-test between two estimators evaluated on the same replicates.

    Args:
        values_a: Values from estimator A (one per replicate).
        values_b: Values from estimator B (same replicates as A).
        alternative: "two-sided", "less", or "greater".
        confidence: Confidence level for the mean difference interval.

    Returns:
        Dictionary with:
            - t_statistic, p_value: paired t-test result
            - mean_diff: Mean difference (B - A)
            - std_diff: Std of differences
            - cohens_d: Effect size
            - ci_lower, ci_upper: Interval for the mean difference
            - n: Number of pairs

    Raises:
        ValueError: If the arrays differ in length or hold fewer than two pairs.
    """
    values_a = np.asarray(values_a, dtype=float)
    values_b = np.asarray(values_b, dtype=float)

    if len(values_a) != len(values_b):
        raise ValueError("Arrays must have same length for paired test")
    if len(values_a) < 2:
        raise ValueError("Paired test needs at least two pairs")

    differences = values_b - values_a
    n = len(differences)
    mean_diff = np.mean(differences)
    std_diff = np.std(differences, ddof=1)

    if std_diff > 0:
        t_stat, p_value = stats.ttest_rel(values_b, values_a, alternative=alternative)
    else:
        # Constant differences: the t statistic is undefined
        t_stat, p_value = np.nan, np.nan

    cohens_d = mean_diff / std_diff if std_diff > 0 else 0.0

    se = std_diff / np.sqrt(n)
    t_crit = stats.t.ppf(1 - (1 - confidence) / 2, df=n - 1)

    return {
        "t_statistic": float(t_stat),
        "p_value": float(p_value),
        "mean_diff": float(mean_diff),
        "std_diff": float(std_diff),
        "cohens_d": float(cohens_d),
        "ci_lower": float(mean_diff - t_crit * se),
        "ci_upper": float(mean_diff + t_crit * se),
        "n": int(n),
    }


def compute_confidence_interval(
    values: np.ndarray,
    confidence: float = 0.95,
) -> Tuple[float, float, float]:
    """Compute confidence interval for mean.

    Args:
        values: Sample values.
        confidence: Confidence level (default 0.95 for 95% CI).

    Returns:
        Tuple of (mean, ci_lower, ci_upper). With a single value the
        interval collapses to the mean.
    """
    values = np.asarray(values, dtype=float)
    n = len(values)
    if n == 0:
        raise ValueError("values cannot be empty")
    mean = float(np.mean(values))
    if n == 1:
        return mean, mean, mean

    se = stats.sem(values)
    alpha = 1 - confidence
    t_crit = stats.t.ppf(1 - alpha / 2, df=n - 1)

    return mean, float(mean - t_crit * se), float(mean + t_crit * se)
