"""py_fdc exception types.

Exception Hierarchy
-------------------

Exception (built-in Python)
├── ValueError
│   └── GridError
│       ├── MalformedGridError
│       └── OutOfGridRangeError
└── RuntimeError
    └── SolverRuntimeError
        ├── NoBallisticDataError
        └── RangeUnattainableError

Exception Types
---------------

Grid-Related Exceptions:

- GridError: Base class for grid reference failures. Not raised directly.

- MalformedGridError: Raised when a grid string is not a 6, 8 or 10 digit numeral. Contains:
  - grid: The offending input
  - reason: Why it was rejected

- OutOfGridRangeError: Raised when a computed point leaves the single 100 km square. Contains:
  - easting, northing: The rounded out-of-range components in meters

Solver-Related Exceptions:

- SolverRuntimeError: Base class for ballistic lookup failures.

- NoBallisticDataError: Raised when the table store has no rows for a system/round
  (or for the requested charge). Contains:
  - system_id, round_id, charge_level

- RangeUnattainableError: Raised when the requested range lies farther than the
  configured extrapolation tolerance from every charge's table coverage. Contains:
  - requested_range: The range that was requested, meters
  - min_range, max_range: Table coverage for the system/round, meters
  - tolerance: Maximum extrapolation distance in effect, meters

All errors are deterministic validation failures: there is nothing transient to retry.
"""
from __future__ import annotations

from typing import Optional

__all__ = (
    'GridError',
    'MalformedGridError',
    'OutOfGridRangeError',
    'SolverRuntimeError',
    'NoBallisticDataError',
    'RangeUnattainableError',
)


class GridError(ValueError):
    """Grid reference error."""


class MalformedGridError(GridError):
    """Exception for grid strings that cannot be parsed."""

    def __init__(self, grid: str, reason: str = ""):
        self.grid: str = grid
        self.reason: str = reason
        msg = f"Invalid grid reference {grid!r}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class OutOfGridRangeError(GridError):
    """Exception for points that fall outside the representable grid square."""

    def __init__(self, easting: int, northing: int):
        self.easting: int = easting
        self.northing: int = northing
        super().__init__(f"Point ({easting}, {northing}) is outside the 100 km grid square")


class SolverRuntimeError(RuntimeError):
    """Solver error."""


class NoBallisticDataError(SolverRuntimeError):
    """Exception raised when the table store has no rows for the request."""

    def __init__(self, system_id: int, round_id: int, charge_level: Optional[int] = None):
        self.system_id = system_id
        self.round_id = round_id
        self.charge_level = charge_level
        msg = f"No ballistic data for system {system_id}, round {round_id}"
        if charge_level is not None:
            msg += f", charge {charge_level}"
        super().__init__(msg)


class RangeUnattainableError(SolverRuntimeError):
    """Exception raised when the requested range is beyond the extrapolation tolerance.

    Contains:
    - The requested range
    - The covered table range
    - The tolerance in effect
    """

    def __init__(self, requested_range: float, min_range: float, max_range: float, tolerance: float):
        self.requested_range = requested_range
        self.min_range = min_range
        self.max_range = max_range
        self.tolerance = tolerance
        super().__init__(
            f"Range {requested_range}m is unattainable: table covers {min_range}-{max_range}m "
            f"(extrapolation limit {tolerance}m)"
        )
