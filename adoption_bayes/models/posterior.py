"""Posterior estimation for per-group adoption probabilities.

Three engines live here or are dispatched from here:

- CONJUGATE: the Beta prior is conjugate to the censored geometric
  likelihood, so the posterior for a group with ``k`` events and exposure
  ``s`` is Beta(alpha + k, beta + s).
- GRID: log prior plus group log-likelihood evaluated on a probability grid.
- MCMC / MAP: delegated to :mod:`.sampler` (PyMC) and :mod:`.trainer` (torch).

Groups are a priori independent and share no parameters, so each group's
posterior only depends on its own sufficient statistics.
"""

import numbers
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

import numpy as np
from scipy.special import logsumexp

from .config import InferenceConfig
from .likelihood import group_statistics
from ..data.generator import AdoptionDataset, SeedLike
from ..data.types import InferenceMethod, LikelihoodKind


@dataclass
class PosteriorResult:
    """Posterior draws for every group.

    Attributes:
        group_labels: Group labels, in parameter order.
        draws: Posterior draws per group label.
        method: Engine that produced the draws.
        likelihood: Likelihood used (censored or naive).
        exact_means: Posterior means computed without sampling error, when
            the engine provides them. MAP stores the mode here.
        beta_parameters: Posterior Beta parameters (CONJUGATE only).
        diagnostics: Engine-specific diagnostics (R-hat, ESS, loss history).
    """

    group_labels: Tuple[str, ...]
    draws: Dict[str, np.ndarray]
    method: InferenceMethod
    likelihood: LikelihoodKind
    exact_means: Optional[Dict[str, float]] = None
    beta_parameters: Optional[Dict[str, Tuple[float, float]]] = None
    diagnostics: Dict[str, Any] = field(default_factory=dict)

    def posterior_mean(self, group: Union[int, str]) -> float:
        """Posterior mean of one group's probability."""
        label = self.group_labels[group] if isinstance(group, numbers.Integral) else group
        if self.exact_means is not None:
            return self.exact_means[label]
        return float(np.mean(self.draws[label]))

    def means(self) -> List[float]:
        """Posterior means in label order."""
        return [self.posterior_mean(label) for label in self.group_labels]

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization (draws excluded)."""
        return {
            "group_labels": list(self.group_labels),
            "method": self.method.name.lower(),
            "likelihood": self.likelihood.name.lower(),
            "means": dict(zip(self.group_labels, self.means())),
            "n_draws": {label: int(len(d)) for label, d in self.draws.items()},
            "beta_parameters": (
                {k: list(v) for k, v in self.beta_parameters.items()}
                if self.beta_parameters is not None
                else None
            ),
            "diagnostics": self.diagnostics,
        }


def fit_conjugate(
    dataset: AdoptionDataset,
    config: InferenceConfig,
    likelihood: LikelihoodKind = LikelihoodKind.CENSORED,
    seed: SeedLike = None,
) -> PosteriorResult:
    """Exact Beta posterior per group.

    Args:
        dataset: Observed subjects.
        config: Inference configuration (prior, number of draws).
        likelihood: Censored or naive treatment of censored subjects.
        seed: Seed or generator for the posterior draws.

    Returns:
        PosteriorResult with exact means and Beta parameters.
    """
    rng = np.random.default_rng(seed)
    prior = config.prior

    draws = {}
    means = {}
    parameters = {}
    for stats in group_statistics(dataset, likelihood):
        a = prior.alpha + stats.n_events
        b = prior.beta + stats.exposure
        parameters[stats.label] = (float(a), float(b))
        means[stats.label] = a / (a + b)
        draws[stats.label] = rng.beta(a, b, size=config.n_draws)

    return PosteriorResult(
        group_labels=dataset.group_labels,
        draws=draws,
        method=InferenceMethod.CONJUGATE,
        likelihood=likelihood,
        exact_means=means,
        beta_parameters=parameters,
    )


def probability_grid(grid_size: int) -> np.ndarray:
    """Midpoints of ``grid_size`` equal cells covering (0, 1)."""
    return (np.arange(grid_size) + 0.5) / grid_size


def fit_grid(
    dataset: AdoptionDataset,
    config: InferenceConfig,
    likelihood: LikelihoodKind = LikelihoodKind.CENSORED,
    seed: SeedLike = None,
) -> PosteriorResult:
    """Grid approximation of the posterior per group.

    Args:
        dataset: Observed subjects.
        config: Inference configuration (prior, grid size, number of draws).
        likelihood: Censored or naive treatment of censored subjects.
        seed: Seed or generator for resampling draws from the grid.

    Returns:
        PosteriorResult with grid expectations as exact means.
    """
    rng = np.random.default_rng(seed)
    grid = probability_grid(config.grid_size)
    log_prior = config.prior.logpdf(grid)

    draws = {}
    means = {}
    for stats in group_statistics(dataset, likelihood):
        log_post = log_prior + stats.log_likelihood(grid)
        weights = np.exp(log_post - logsumexp(log_post))
        weights /= weights.sum()

        means[stats.label] = float(np.sum(grid * weights))
        draws[stats.label] = rng.choice(grid, size=config.n_draws, p=weights)

    return PosteriorResult(
        group_labels=dataset.group_labels,
        draws=draws,
        method=InferenceMethod.GRID,
        likelihood=likelihood,
        exact_means=means,
        diagnostics={"grid_size": config.grid_size},
    )


def fit_posterior(
    dataset: AdoptionDataset,
    config: Optional[InferenceConfig] = None,
    likelihood: LikelihoodKind = LikelihoodKind.CENSORED,
    seed: SeedLike = None,
) -> PosteriorResult:
    """Fit per-group adoption probabilities with the configured engine.

    Args:
        dataset: Observed subjects.
        config: Inference configuration (default: conjugate, Beta(1, 5)).
        likelihood: Censored or naive treatment of censored subjects.
        seed: Seed for any randomness in the engine.

    Returns:
        PosteriorResult.
    """
    if config is None:
        config = InferenceConfig()

    if config.method == InferenceMethod.CONJUGATE:
        return fit_conjugate(dataset, config, likelihood, seed)
    elif config.method == InferenceMethod.GRID:
        return fit_grid(dataset, config, likelihood, seed)
    elif config.method == InferenceMethod.MCMC:
        from .sampler import fit_mcmc

        return fit_mcmc(dataset, config, likelihood, seed)
    elif config.method == InferenceMethod.MAP:
        from .trainer import fit_map

        return fit_map(dataset, config, likelihood, seed)
    else:
        raise ValueError(f"Unknown inference method: {config.method}")
