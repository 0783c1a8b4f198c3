"""Core enumerations for simulation and inference."""

from enum import Enum, auto


class CensoringKind(Enum):
    """How observation of a subject can be cut off."""

    NONE = auto()
    FIXED = auto()  # Same observation window for every subject
    RANDOM = auto()  # Geometric observation window per subject


class LikelihoodKind(Enum):
    """Treatment of censored subjects in the likelihood."""

    CENSORED = auto()  # Censored subjects contribute their survival term
    NAIVE = auto()  # Censored subjects are dropped


class InferenceMethod(Enum):
    """Engine used to obtain the posterior over adoption probabilities."""

    CONJUGATE = auto()
    GRID = auto()
    MCMC = auto()
    MAP = auto()


class RunStatus(Enum):
    """Status of an experiment or a single replicate."""

    PENDING = auto()
    RUNNING = auto()
    COMPLETED = auto()
    FAILED = auto()
