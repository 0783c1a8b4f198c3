"""Beta prior over per-group adoption probabilities."""

from dataclasses import dataclass
from typing import Union

import numpy as np
from scipy import stats

from ..errors import InvalidParameterError


@dataclass(frozen=True)
class BetaPrior:
    """Beta(alpha, beta) prior applied independently to every group.

    The default Beta(1, 5) puts most mass on small daily probabilities.

    Attributes:
        alpha: First shape parameter (> 0).
        beta: Second shape parameter (> 0).
    """

    alpha: float = 1.0
    beta: float = 5.0

    def __post_init__(self) -> None:
        if self.alpha <= 0:
            raise InvalidParameterError(f"alpha must be > 0, got {self.alpha}")
        if self.beta <= 0:
            raise InvalidParameterError(f"beta must be > 0, got {self.beta}")

    @property
    def mean(self) -> float:
        return self.alpha / (self.alpha + self.beta)

    def logpdf(self, probability: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        """Log density at ``probability``."""
        return stats.beta.logpdf(probability, self.alpha, self.beta)

    def sample(self, size: int, rng: np.random.Generator) -> np.ndarray:
        return rng.beta(self.alpha, self.beta, size=size)

    def to_dict(self) -> dict:
        return {"alpha": self.alpha, "beta": self.beta}

    @classmethod
    def from_dict(cls, data: dict) -> "BetaPrior":
        return cls(alpha=data.get("alpha", 1.0), beta=data.get("beta", 5.0))


DEFAULT_PRIOR = BetaPrior(alpha=1.0, beta=5.0)
