"""
Numeric helpers for metric calculations.

Guards every division explicitly so empty or degenerate inputs
produce zeros instead of NaN or infinity.
"""

import math
from collections.abc import Sequence
from typing import Final


# Epsilon for floating point comparisons
EPSILON: Final[float] = 1e-12


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """
    Safely divide two numbers, returning default on division by zero.

    Args:
        numerator: The dividend.
        denominator: The divisor.
        default: Value to return if denominator is zero.

    Returns:
        Result of division or default value.
    """
    if abs(denominator) < EPSILON:
        return default
    return numerator / denominator


def clamp(value: float, low: float, high: float) -> float:
    """
    Clamp a value into [low, high].

    Example:
        >>> clamp(250.0, 0.0, 42.0)
        42.0
    """
    return max(low, min(high, value))


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean, 0 for an empty sequence."""
    return safe_divide(sum(values), len(values))


def population_std(values: Sequence[float]) -> float:
    """
    Population standard deviation (divide by n).

    Returns 0 for an empty sequence.
    """
    if not values:
        return 0.0
    mu = mean(values)
    return math.sqrt(sum((v - mu) ** 2 for v in values) / len(values))


def moving_average(values: Sequence[float], window: int) -> list[float]:
    """
    Trailing windowed mean.

    Each point averages itself and up to ``window - 1`` predecessors.

    Example:
        >>> moving_average([1.0, 2.0, 3.0, 4.0], 2)
        [1.0, 1.5, 2.5, 3.5]
    """
    if window < 1:
        raise ValueError(f"window must be >= 1, got {window}")

    result: list[float] = []
    for i in range(len(values)):
        start = max(0, i - window + 1)
        chunk = values[start : i + 1]
        result.append(sum(chunk) / len(chunk))
    return result
