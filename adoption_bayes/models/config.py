"""Inference configuration for posterior estimation."""

from dataclasses import dataclass, field

from .priors import BetaPrior
from ..data.types import InferenceMethod


@dataclass
class InferenceConfig:
    """Configuration for fitting per-group adoption probabilities.

    Attributes:
        method: Inference engine.
        prior: Beta prior shared by all groups.
        n_draws: Posterior draws per group (per chain for MCMC).
        credible_interval: Width of reported credible intervals.
        grid_size: Number of grid points (GRID only).
        n_chains: Number of MCMC chains.
        n_tune: MCMC tuning steps per chain.
        target_accept: NUTS target acceptance rate.
        cores: Parallel chains for MCMC.
        progressbar: Show the sampler progress bar.
        learning_rate: Adam learning rate (MAP only).
        max_steps: Maximum optimizer steps (MAP only).
        tolerance: Stop when no logit moves more than this in one step (MAP only).
    """

    # Engine
    method: InferenceMethod = InferenceMethod.CONJUGATE
    prior: BetaPrior = field(default_factory=BetaPrior)

    # Output
    n_draws: int = 4000
    credible_interval: float = 0.9

    # Grid
    grid_size: int = 2000

    # MCMC
    n_chains: int = 4
    n_tune: int = 1000
    target_accept: float = 0.9
    cores: int = 1
    progressbar: bool = False

    # MAP
    learning_rate: float = 0.05
    max_steps: int = 5000
    tolerance: float = 1e-9

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self.validate()

    def validate(self) -> None:
        """Validate the inference configuration.

        Raises:
            ValueError: If configuration is invalid.
        """
        if not isinstance(self.method, InferenceMethod):
            raise ValueError(f"method must be an InferenceMethod, got {self.method!r}")

        if self.n_draws < 1:
            raise ValueError(f"n_draws must be >= 1, got {self.n_draws}")

        if not 0.0 < self.credible_interval < 1.0:
            raise ValueError(
                f"credible_interval must be in (0, 1), got {self.credible_interval}"
            )

        if self.grid_size < 10:
            raise ValueError(f"grid_size must be >= 10, got {self.grid_size}")

        if self.n_chains < 1:
            raise ValueError(f"n_chains must be >= 1, got {self.n_chains}")

        if self.n_tune < 0:
            raise ValueError(f"n_tune must be >= 0, got {self.n_tune}")

        if not 0.0 < self.target_accept < 1.0:
            raise ValueError(
                f"target_accept must be in (0, 1), got {self.target_accept}"
            )

        if self.cores < 1:
            raise ValueError(f"cores must be >= 1, got {self.cores}")

        if self.learning_rate <= 0:
            raise ValueError(f"learning_rate must be > 0, got {self.learning_rate}")

        if self.max_steps < 1:
            raise ValueError(f"max_steps must be >= 1, got {self.max_steps}")

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "method": self.method.name.lower(),
            "prior": self.prior.to_dict(),
            "n_draws": self.n_draws,
            "credible_interval": self.credible_interval,
            "grid_size": self.grid_size,
            "n_chains": self.n_chains,
            "n_tune": self.n_tune,
            "target_accept": self.target_accept,
            "cores": self.cores,
            "progressbar": self.progressbar,
            "learning_rate": self.learning_rate,
            "max_steps": self.max_steps,
            "tolerance": self.tolerance,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "InferenceConfig":
        """Create from dictionary.

        Args:
            data: Dictionary with inference configuration.

        Returns:
            InferenceConfig instance.
        """
        method = InferenceMethod[data.get("method", "conjugate").upper()]
        return cls(
            method=method,
            prior=BetaPrior.from_dict(data.get("prior", {})),
            n_draws=data.get("n_draws", 4000),
            credible_interval=data.get("credible_interval", 0.9),
            grid_size=data.get("grid_size", 2000),
            n_chains=data.get("n_chains", 4),
            n_tune=data.get("n_tune", 1000),
            target_accept=data.get("target_accept", 0.9),
            cores=data.get("cores", 1),
            progressbar=data.get("progressbar", False),
            learning_rate=data.get("learning_rate", 0.05),
            max_steps=data.get("max_steps", 5000),
            tolerance=data.get("tolerance", 1e-9),
        )

    def with_method(self, method: InferenceMethod) -> "InferenceConfig":
        """Create a copy using a different engine."""
        config_dict = self.to_dict()
        config_dict["method"] = method.name.lower()
        return InferenceConfig.from_dict(config_dict)
