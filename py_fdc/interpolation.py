"""Interpolation utilities for firing table lookups.

Linear interpolation (interpolate_2_pt) requires 2 points and is also used for linear
extrapolation outside the pair. Derivative extrapolation (extrapolate_derivative) projects
a single table row using the per-100 m rate of change published with it.
"""

from enum import Enum
from typing_extensions import Literal

__all__ = [
    "InterpolationMethod",
    "InterpolationMethodEnum",
    "interpolate_2_pt",
    "extrapolate_derivative",
]

InterpolationMethod = Literal["exact", "derivative", "linear"]


class InterpolationMethodEnum(str, Enum):
    """Interpolation method used to produce a ballistic solution.

    Values map to accepted string identifiers so callers may compare against either the
    enum variant or the string directly.

    - EXACT: Table row at exactly the requested range.
    - DERIVATIVE: Nearest row projected with its published per-100 m derivatives.
    - LINEAR: Linear interpolation (or extrapolation) between adjacent rows.
    """

    EXACT = "exact"
    DERIVATIVE = "derivative"
    LINEAR = "linear"


def interpolate_2_pt(x: float, x0: float, y0: float, x1: float, y1: float) -> float:
    """Linear interpolation between two points.

    Args:
        x: Evaluation point.
        x0, y0: First data point.
        x1, y1: Second data point.

    Returns:
        Interpolated y-value at x.

    Raises:
        ZeroDivisionError: If x0 == x1.
    """

    if x1 == x0:
        raise ZeroDivisionError("Duplicate x-values in linear interpolation")
    t = (x - x0) / (x1 - x0)
    return y0 + t * (y1 - y0)


def extrapolate_derivative(x: float, x0: float, y0: float, dy_per_100: float) -> float:
    """Project `y0` from `x0` to `x` using a rate of change per 100 units of x.

    Args:
        x: Evaluation point.
        x0, y0: Known data point.
        dy_per_100: Change of y per 100 units of x.

    Returns:
        Extrapolated y-value at x.
    """

    return y0 + dy_per_100 * ((x - x0) / 100)
