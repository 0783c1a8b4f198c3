"""Argument checks shared by the simulator, likelihood and priors."""

import numbers
from typing import Sequence

import numpy as np

from ..errors import InvalidParameterError


def check_probability(value: float, name: str = "probability") -> float:
    """Ensure ``value`` lies in the open interval (0, 1).

    Args:
        value: Candidate probability.
        name: Parameter name used in the error message.

    Returns:
        The value as a float.

    Raises:
        InvalidParameterError: If the value is not a real number in (0, 1).
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidParameterError(f"{name} must be a real number, got {value!r}")
    value = float(value)
    if not 0.0 < value < 1.0:
        raise InvalidParameterError(f"{name} must be in (0, 1), got {value}")
    return value


def check_probabilities(
    values: Sequence[float], name: str = "group_probabilities"
) -> np.ndarray:
    """Validate a non-empty sequence of probabilities.

    Returns:
        Float array with one entry per group.
    """
    if isinstance(values, np.ndarray):
        values = values.tolist()
    values = list(values)
    if not values:
        raise InvalidParameterError(f"{name} cannot be empty")
    return np.array(
        [check_probability(v, f"{name}[{i}]") for i, v in enumerate(values)],
        dtype=float,
    )


def check_positive_int(value: int, name: str) -> int:
    """Ensure ``value`` is an integer >= 1.

    Raises:
        InvalidParameterError: If the value is not a positive integer.
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise InvalidParameterError(f"{name} must be an integer, got {value!r}")
    if value <= 0:
        raise InvalidParameterError(f"{name} must be > 0, got {value}")
    return int(value)
