"""Likelihood, priors and posterior estimation engines."""

from .likelihood import (
    log_pmf,
    log_survival,
    subject_log_likelihood,
    log_likelihood,
    naive_log_likelihood,
    GroupStatistics,
    group_statistics,
    torch_log_likelihood,
)
from .priors import BetaPrior, DEFAULT_PRIOR
from .config import InferenceConfig
from .posterior import (
    PosteriorResult,
    fit_conjugate,
    fit_grid,
    fit_posterior,
    probability_grid,
)
from .sampler import HAS_PYMC, build_model, fit_mcmc
from .trainer import MAPTrainer, TrainingState, fit_map

__all__ = [
    # Likelihood
    "log_pmf",
    "log_survival",
    "subject_log_likelihood",
    "log_likelihood",
    "naive_log_likelihood",
    "GroupStatistics",
    "group_statistics",
    "torch_log_likelihood",
    # Prior and configuration
    "BetaPrior",
    "DEFAULT_PRIOR",
    "InferenceConfig",
    # Posterior
    "PosteriorResult",
    "fit_conjugate",
    "fit_grid",
    "fit_posterior",
    "probability_grid",
    # Engines
    "HAS_PYMC",
    "build_model",
    "fit_mcmc",
    "MAPTrainer",
    "TrainingState",
    "fit_map",
]
