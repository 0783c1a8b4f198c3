"""Censoring policies and censoring-rate utilities."""

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Optional, Sequence, Tuple, Union

import numpy as np

from .types import CensoringKind
from .validation import check_positive_int, check_probabilities, check_probability
from ..errors import InvalidParameterError

if TYPE_CHECKING:
    from .generator import AdoptionDataset


@dataclass(frozen=True)
class NoCensoring:
    """Every subject is observed until the event happens."""

    kind = CensoringKind.NONE

    def to_dict(self) -> dict:
        return {"kind": "none"}


@dataclass(frozen=True)
class FixedCensoring:
    """Every subject is observed for exactly ``limit`` time steps.

    Attributes:
        limit: Length of the observation window.
    """

    limit: int
    kind = CensoringKind.FIXED

    def __post_init__(self) -> None:
        check_positive_int(self.limit, "limit")

    def to_dict(self) -> dict:
        return {"kind": "fixed", "limit": self.limit}


@dataclass(frozen=True)
class RandomCensoring:
    """Each subject's observation window is an independent shifted geometric draw.

    Attributes:
        censor_probability: Probability that observation ends on any given step.
    """

    censor_probability: float
    kind = CensoringKind.RANDOM

    def __post_init__(self) -> None:
        check_probability(self.censor_probability, "censor_probability")

    def to_dict(self) -> dict:
        return {"kind": "random", "censor_probability": self.censor_probability}


CensoringPolicy = Union[NoCensoring, FixedCensoring, RandomCensoring]


def censoring_policy_from_dict(data: Optional[dict]) -> CensoringPolicy:
    """Create a censoring policy from its dictionary form.

    Args:
        data: Dictionary with a ``kind`` key ("none", "fixed" or "random").
            ``None`` means no censoring.

    Returns:
        The matching policy instance.

    Raises:
        ValueError: If the kind is unknown.
    """
    if data is None:
        return NoCensoring()

    kind = str(data.get("kind", "none")).upper()
    if kind not in CensoringKind.__members__:
        raise ValueError(
            f"Unknown censoring kind: {data.get('kind')}. "
            f"Available: {[k.name.lower() for k in CensoringKind]}"
        )

    kind = CensoringKind[kind]
    if kind == CensoringKind.NONE:
        return NoCensoring()
    elif kind == CensoringKind.FIXED:
        return FixedCensoring(limit=data["limit"])
    return RandomCensoring(censor_probability=data["censor_probability"])


def apply_censoring(
    true_times: np.ndarray,
    policy: CensoringPolicy,
    rng: np.random.Generator,
) -> Tuple[np.ndarray, np.ndarray]:
    """Apply a censoring policy to true event times.

    Args:
        true_times: True event times (integers >= 1).
        policy: Censoring policy.
        rng: Random number generator, used only by ``RandomCensoring``.

    Returns:
        Tuple of (elapsed times, event indicators).
    """
    true_times = np.asarray(true_times, dtype=np.int64)

    if isinstance(policy, NoCensoring):
        return true_times.copy(), np.ones(len(true_times), dtype=bool)

    if isinstance(policy, FixedCensoring):
        observed_until = np.full(len(true_times), policy.limit, dtype=np.int64)
    elif isinstance(policy, RandomCensoring):
        observed_until = rng.geometric(
            policy.censor_probability, size=len(true_times)
        ).astype(np.int64)
    else:
        raise TypeError(f"Unknown censoring policy: {policy!r}")

    event = true_times <= observed_until
    elapsed = np.where(event, true_times, observed_until)
    return elapsed, event


def expected_censoring_rate(probability: float, policy: CensoringPolicy) -> float:
    """Theoretical fraction of censored subjects for one group.

    For an adoption probability ``p`` and ``q = 1 - p``:

    - no censoring: 0
    - fixed(L): ``q**L``
    - random(c): ``c*q / (1 - (1 - c)*q)``, i.e. P(T > C) for independent
      shifted geometric T and C.

    Args:
        probability: Per-step event probability of the group.
        policy: Censoring policy.

    Returns:
        Expected censoring rate in [0, 1).
    """
    p = check_probability(probability)
    q = 1.0 - p

    if isinstance(policy, NoCensoring):
        return 0.0
    if isinstance(policy, FixedCensoring):
        return q ** policy.limit
    if isinstance(policy, RandomCensoring):
        c = policy.censor_probability
        return c * q / (1.0 - (1.0 - c) * q)
    raise TypeError(f"Unknown censoring policy: {policy!r}")


def calibrate_censoring(
    probability: float,
    target_rate: float,
    kind: CensoringKind = CensoringKind.RANDOM,
) -> CensoringPolicy:
    """Find a censoring policy that achieves a target censoring rate.

    Fixed windows are discrete, so the smallest limit whose expected rate
    does not exceed the target is returned. The random policy is solved in
    closed form: ``c = r*p / ((1 - p)*(1 - r))``.

    Args:
        probability: Per-step event probability being censored.
        target_rate: Desired fraction of censored subjects, in [0, 1).
        kind: Kind of policy to calibrate.

    Returns:
        Censoring policy.

    Raises:
        InvalidParameterError: If the target cannot be reached with this kind.
    """
    p = check_probability(probability)
    q = 1.0 - p

    if not 0.0 <= target_rate < 1.0:
        raise InvalidParameterError(
            f"target_rate must be in [0, 1), got {target_rate}"
        )

    if target_rate == 0.0 or kind == CensoringKind.NONE:
        return NoCensoring()

    if kind == CensoringKind.FIXED:
        limit = max(1, math.ceil(math.log(target_rate) / math.log(q)))
        # The log ratio can land on either side of an exact integer
        while limit > 1 and q ** (limit - 1) <= target_rate:
            limit -= 1
        while q ** limit > target_rate:
            limit += 1
        return FixedCensoring(limit=limit)

    c = target_rate * p / (q * (1.0 - target_rate))
    if not 0.0 < c < 1.0:
        raise InvalidParameterError(
            f"Censoring rate {target_rate} is not reachable with random censoring "
            f"for probability {p}: needs censor_probability {c:.4f}"
        )
    return RandomCensoring(censor_probability=c)


def validate_censoring_rate(
    dataset: "AdoptionDataset",
    group_probabilities: Sequence[float],
    policy: CensoringPolicy,
    tolerance: float = 0.03,
) -> Dict[str, Tuple[float, float, bool]]:
    """Compare observed and theoretical censoring rates per group.

    Args:
        dataset: Simulated dataset.
        group_probabilities: Probabilities used to simulate it.
        policy: Censoring policy used to simulate it.
        tolerance: Acceptable absolute deviation.

    Returns:
        Mapping of group label to (observed rate, expected rate, within tolerance).
    """
    probabilities = check_probabilities(group_probabilities)
    result = {}

    for index, label in enumerate(dataset.group_labels):
        mask = dataset.group == index
        if not np.any(mask):
            continue
        observed = float(1.0 - np.mean(dataset.event_occurred[mask]))
        expected = expected_censoring_rate(probabilities[index], policy)
        result[label] = (observed, expected, abs(observed - expected) <= tolerance)

    return result
