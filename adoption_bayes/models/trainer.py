"""Maximum a posteriori estimation of adoption probabilities with torch."""

import math
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np
import torch

from .config import InferenceConfig
from .likelihood import torch_log_likelihood
from .posterior import PosteriorResult
from .priors import BetaPrior
from ..data.generator import AdoptionDataset, SeedLike
from ..data.types import InferenceMethod, LikelihoodKind


@dataclass
class TrainingState:
    """Current state of optimization."""

    step: int = 0
    best_loss: float = float("inf")
    converged: bool = False
    failed: bool = False
    failure_reason: Optional[str] = None
    loss_history: List[float] = field(default_factory=list)


class MAPTrainer:
    """Gradient-based MAP estimator.

    Probabilities are parameterized by unconstrained logits, one per group,
    and the negative log posterior (likelihood plus Beta prior) is minimized
    with Adam.

    Args:
        dataset: Observed subjects.
        prior: Beta prior shared by all groups.
        likelihood: Censored or naive treatment of censored subjects.
        learning_rate: Adam learning rate.
        max_steps: Maximum optimizer steps.
        tolerance: Largest logit change per step that counts as converged.
        lr_decay: Multiplicative learning-rate decay per step.
    """

    def __init__(
        self,
        dataset: AdoptionDataset,
        prior: BetaPrior,
        likelihood: LikelihoodKind = LikelihoodKind.CENSORED,
        learning_rate: float = 0.05,
        max_steps: int = 5000,
        tolerance: float = 1e-9,
        lr_decay: float = 0.999,
    ):
        self.dataset = dataset
        self.prior = prior
        self.likelihood = likelihood
        self.max_steps = max_steps
        self.tolerance = tolerance

        self.group = torch.from_numpy(np.array(dataset.group, dtype=np.int64))
        self.elapsed_time = torch.from_numpy(np.array(dataset.elapsed_time, dtype=np.float64))
        self.event_occurred = torch.from_numpy(np.array(dataset.event_occurred, dtype=bool))

        initial = math.log(prior.mean / (1.0 - prior.mean))
        self.logits = torch.full(
            (dataset.n_groups,), initial, dtype=torch.float64, requires_grad=True
        )
        self.optimizer = torch.optim.Adam([self.logits], lr=learning_rate)
        self.scheduler = torch.optim.lr_scheduler.ExponentialLR(self.optimizer, gamma=lr_decay)

        self.state = TrainingState()

    def probabilities(self) -> torch.Tensor:
        return torch.sigmoid(self.logits)

    def loss(self) -> torch.Tensor:
        """Negative log posterior, up to a constant."""
        p = self.probabilities()
        log_lik = torch_log_likelihood(
            p, self.group, self.elapsed_time, self.event_occurred, self.likelihood
        )
        log_prior = (
            (self.prior.alpha - 1) * torch.log(p)
            + (self.prior.beta - 1) * torch.log1p(-p)
        ).sum()
        return -(log_lik + log_prior)

    def train(self) -> TrainingState:
        """Run the optimization loop.

        Returns:
            Final training state.
        """
        for step in range(self.max_steps):
            self.state.step = step
            before = self.logits.detach().clone()

            self.optimizer.zero_grad()
            loss = self.loss()
            loss.backward()
            self.optimizer.step()
            self.scheduler.step()

            value = float(loss.detach())
            self.state.loss_history.append(value)

            if not math.isfinite(value):
                self.state.failed = True
                self.state.failure_reason = f"Non-finite loss at step {step}"
                break

            self.state.best_loss = min(self.state.best_loss, value)
            change = float((self.logits.detach() - before).abs().max())
            if change < self.tolerance:
                self.state.converged = True
                break

        return self.state


def fit_map(
    dataset: AdoptionDataset,
    config: InferenceConfig,
    likelihood: LikelihoodKind = LikelihoodKind.CENSORED,
    seed: SeedLike = None,
) -> PosteriorResult:
    """Point estimate at the posterior mode.

    The result holds a single "draw" per group: the mode. ``seed`` is
    accepted for interface parity with the sampling engines and unused.

    Raises:
        RuntimeError: If optimization produced a non-finite loss.
    """
    trainer = MAPTrainer(
        dataset,
        prior=config.prior,
        likelihood=likelihood,
        learning_rate=config.learning_rate,
        max_steps=config.max_steps,
        tolerance=config.tolerance,
    )
    state = trainer.train()
    if state.failed:
        raise RuntimeError(f"MAP optimization failed: {state.failure_reason}")

    estimates = trainer.probabilities().detach().numpy()
    draws = {
        label: np.array([estimates[i]]) for i, label in enumerate(dataset.group_labels)
    }

    return PosteriorResult(
        group_labels=dataset.group_labels,
        draws=draws,
        method=InferenceMethod.MAP,
        likelihood=likelihood,
        exact_means={label: float(estimates[i]) for i, label in enumerate(dataset.group_labels)},
        diagnostics={
            "steps": state.step + 1,
            "converged": state.converged,
            "final_loss": state.loss_history[-1],
        },
    )
