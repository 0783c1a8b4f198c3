"""MCMC sampling of adoption probabilities with PyMC.

The probabilistic model is:

    p[g] ~ Beta(alpha, beta)                 for every group g
    log L = sum_i event_i * (log p + (t_i - 1) log(1 - p))
            + (1 - event_i) * t_i * log(1 - p)

The likelihood enters the model as a ``pm.Potential`` so that it is exactly
the function defined in :mod:`.likelihood`. Sampler failures (divergences,
non-convergence, compilation errors) are not caught here; R-hat and ESS are
reported in the result diagnostics for the caller to act on.
"""

from typing import Dict

import numpy as np

try:
    import arviz as az
    import pymc as pm
    HAS_PYMC = True
except ImportError:
    HAS_PYMC = False

from .config import InferenceConfig
from .posterior import PosteriorResult
from ..data.generator import AdoptionDataset, SeedLike
from ..data.types import InferenceMethod, LikelihoodKind


def _require_pymc() -> None:
    if not HAS_PYMC:
        raise ImportError(
            "PyMC not available. Install with: pip install 'adoption-bayes[sampling]'"
        )


def build_model(
    dataset: AdoptionDataset,
    config: InferenceConfig,
    likelihood: LikelihoodKind = LikelihoodKind.CENSORED,
) -> "pm.Model":
    """Build the PyMC model for a dataset.

    A new model is built on every call; nothing is cached between calls.

    Args:
        dataset: Observed subjects.
        config: Inference configuration (prior).
        likelihood: Censored or naive treatment of censored subjects.

    Returns:
        PyMC model with a ``p`` variable of dims ``group``.
    """
    _require_pymc()

    event = np.asarray(dataset.event_occurred)
    group = np.asarray(dataset.group)
    t = np.asarray(dataset.elapsed_time, dtype=float)

    if likelihood == LikelihoodKind.NAIVE:
        group, t, event = group[event], t[event], event[event]

    coords = {"group": list(dataset.group_labels)}
    with pm.Model(coords=coords) as model:
        p = pm.Beta("p", alpha=config.prior.alpha, beta=config.prior.beta, dims="group")

        p_subject = p[group]
        log_q = pm.math.log(1 - p_subject)
        contribution = pm.math.switch(
            event,
            pm.math.log(p_subject) + (t - 1) * log_q,
            t * log_q,
        )
        pm.Potential("log_likelihood", pm.math.sum(contribution))

    return model


def convergence_diagnostics(trace: "az.InferenceData") -> Dict[str, Dict[str, float]]:
    """R-hat and bulk ESS per group.

    Args:
        trace: InferenceData with a ``p`` posterior variable.

    Returns:
        Mapping of group label to {"r_hat": ..., "ess_bulk": ...}.
    """
    _require_pymc()

    rhat = az.rhat(trace, var_names=["p"])["p"]
    ess = az.ess(trace, var_names=["p"])["p"]

    result = {}
    for label in trace.posterior["p"].coords["group"].values:
        result[str(label)] = {
            "r_hat": float(rhat.sel(group=label)),
            "ess_bulk": float(ess.sel(group=label)),
        }
    return result


def fit_mcmc(
    dataset: AdoptionDataset,
    config: InferenceConfig,
    likelihood: LikelihoodKind = LikelihoodKind.CENSORED,
    seed: SeedLike = None,
) -> PosteriorResult:
    """Sample the posterior with NUTS.

    Args:
        dataset: Observed subjects.
        config: Inference configuration (prior, draws, chains, tuning).
        likelihood: Censored or naive treatment of censored subjects.
        seed: Random seed passed to ``pm.sample``.

    Returns:
        PosteriorResult with draws pooled across chains and convergence
        diagnostics.
    """
    _require_pymc()

    model = build_model(dataset, config, likelihood)
    with model:
        trace = pm.sample(
            draws=config.n_draws,
            tune=config.n_tune,
            chains=config.n_chains,
            cores=config.cores,
            target_accept=config.target_accept,
            progressbar=config.progressbar,
            random_seed=seed,
            return_inferencedata=True,
        )

    posterior = trace.posterior["p"]
    draws = {
        label: posterior.sel(group=label).values.reshape(-1)
        for label in dataset.group_labels
    }

    diagnostics: Dict[str, object] = {
        "convergence": convergence_diagnostics(trace),
        "n_chains": config.n_chains,
    }
    if "diverging" in trace.sample_stats:
        diagnostics["divergences"] = int(trace.sample_stats["diverging"].values.sum())

    return PosteriorResult(
        group_labels=dataset.group_labels,
        draws=draws,
        method=InferenceMethod.MCMC,
        likelihood=likelihood,
        diagnostics=diagnostics,
    )
