"""Firing table lookup with charge selection and interpolation policy.

The module provides:
- Interpolator configuration through InterpolatorConfig and InterpolatorConfigDict
- BallisticInterpolator, which resolves a range into elevation, time of flight and charge
  from rows supplied by an injected table store

Lookup policy, in order:
    1. Charge selection: the lowest charge whose rows bracket the range, otherwise the
       nearest charge (lowest minimum below the table, highest maximum above it).
    2. Exact match: a row at exactly the requested range is returned verbatim.
    3. Derivative extrapolation: outside the selected charge's bracket, the nearest row is
       projected with its published per-100 m derivatives. A field without a derivative
       falls back to linear extrapolation through the two nearest rows.
    4. Linear interpolation between the rows immediately below and above the range.

Requests farther outside the table than `max_extrapolation_m` raise RangeUnattainableError,
and a system/round without rows raises NoBallisticDataError. Every non-exact result is
flagged with `interpolated=True` and the method used.
"""
from __future__ import annotations

import bisect
from dataclasses import dataclass, asdict

from typing_extensions import Dict, List, NamedTuple, Optional, Sequence, TypedDict

from py_fdc.config import get_config
from py_fdc.constants import cMaxExtrapolationM
from py_fdc.exceptions import NoBallisticDataError, RangeUnattainableError
from py_fdc.interpolation import InterpolationMethodEnum, interpolate_2_pt, extrapolate_derivative
from py_fdc.logger import logger
from py_fdc.tables import BallisticRow, TableStoreProtocol

__all__ = (
    'InterpolatorConfig',
    'InterpolatorConfigDict',
    'create_interpolator_config',
    'DerivativeAccuracy',
    'ChargeCoverage',
    'RangeCapabilities',
    'BallisticSolution',
    'BallisticInterpolator',
)


@dataclass
class InterpolatorConfig:
    """Configuration for BallisticInterpolator.

    Attributes:
        max_extrapolation_m: Largest distance (m) outside a charge's table coverage that
            may be extrapolated. Requests beyond it raise RangeUnattainableError.
            Defaults to the library configuration (200 m).
    """

    max_extrapolation_m: float = cMaxExtrapolationM


class InterpolatorConfigDict(TypedDict, total=False):
    """TypedDict for partial interpolator configuration.

    Fields:
        - max_extrapolation_m: Extrapolation tolerance in meters.
    """

    max_extrapolation_m: Optional[float]


def create_interpolator_config(interface_config: Optional[InterpolatorConfigDict] = None) -> InterpolatorConfig:
    """Create InterpolatorConfig from optional dictionary configuration.

    Unspecified (or None) fields take their values from the library configuration
    returned by `py_fdc.config.get_config()`.

    Args:
        interface_config: Optional dictionary containing configuration overrides.

    Returns:
        InterpolatorConfig instance with merged configuration values.

    Raises:
        TypeError: If interface_config is not None and not a dictionary.
        ValueError: If the extrapolation tolerance is negative.
    """
    config = asdict(InterpolatorConfig(max_extrapolation_m=get_config().max_extrapolation_m))
    if interface_config is not None:
        if not isinstance(interface_config, dict):
            raise TypeError("Invalid config type provided, expected dict or None")
        config.update({k: v for k, v in interface_config.items() if v is not None})
    if config['max_extrapolation_m'] < 0:
        raise ValueError("max_extrapolation_m must be non-negative")
    return InterpolatorConfig(**config)


class DerivativeAccuracy(NamedTuple):
    elevation_uses_derivative: bool
    tof_uses_derivative: bool


class ChargeCoverage(NamedTuple):
    charge_level: int
    min_range_m: int
    max_range_m: int


class RangeCapabilities(NamedTuple):
    min_range_m: int
    max_range_m: int


@dataclass(frozen=True)
class BallisticSolution:
    """Result of a firing table lookup.

    Attributes:
        system_id: Mortar system the lookup was made for.
        round_id: Round the lookup was made for.
        range_m: Requested range in meters.
        charge_level: Selected charge.
        elevation_mils: Quadrant elevation in mils (not rounded).
        time_of_flight_s: Time of flight in seconds (not rounded).
        avg_dispersion_m: Mean radial error in meters.
        interpolated: False only for an exact table match.
        interpolation_method: How the values were obtained.
        derivative_accuracy: Which fields used a derivative, for derivative results only.
    """

    system_id: int
    round_id: int
    range_m: float
    charge_level: int
    elevation_mils: float
    time_of_flight_s: float
    avg_dispersion_m: float
    interpolated: bool
    interpolation_method: InterpolationMethodEnum
    derivative_accuracy: Optional[DerivativeAccuracy] = None


class BallisticInterpolator:
    """Resolves ranges into firing data from an injected table store."""

    def __init__(self, table_store: TableStoreProtocol,
                 config: Optional[InterpolatorConfig] = None) -> None:
        if not isinstance(table_store, TableStoreProtocol):
            raise TypeError(f"{type(table_store).__name__} does not implement TableStoreProtocol")
        self.table_store = table_store
        self.config = config if config is not None else create_interpolator_config()

    def _charge_groups(self, system_id: int, round_id: int) -> Dict[int, List[BallisticRow]]:
        rows = self.table_store.get_ballistic_rows(system_id, round_id)
        if not rows:
            logger.error(f"No ballistic data found for system {system_id}, round {round_id}")
            raise NoBallisticDataError(system_id, round_id)
        groups: Dict[int, List[BallisticRow]] = {}
        for row in sorted(rows, key=lambda r: (r.charge_level, r.range_m)):
            groups.setdefault(row.charge_level, []).append(row)
        return groups

    def charge_coverage(self, system_id: int, round_id: int) -> List[ChargeCoverage]:
        """Range covered by each charge, ordered by charge level."""
        return [ChargeCoverage(charge, rows[0].range_m, rows[-1].range_m)
                for charge, rows in self._charge_groups(system_id, round_id).items()]

    def range_capabilities(self, system_id: int, round_id: int) -> RangeCapabilities:
        """Shortest and longest range in the table across all charges."""
        coverage = self.charge_coverage(system_id, round_id)
        return RangeCapabilities(min(c.min_range_m for c in coverage),
                                 max(c.max_range_m for c in coverage))

    def is_range_valid(self, system_id: int, round_id: int, range_m: float) -> bool:
        """True when some charge covers `range_m` without extrapolation."""
        try:
            coverage = self.charge_coverage(system_id, round_id)
        except NoBallisticDataError:
            return False
        return any(c.min_range_m <= range_m <= c.max_range_m for c in coverage)

    def rows_near(self, system_id: int, round_id: int, range_m: float, window_m: float) -> List[BallisticRow]:
        """Table rows (all charges) within `window_m` meters of `range_m`."""
        return [row for rows in self._charge_groups(system_id, round_id).values()
                for row in rows if abs(row.range_m - range_m) <= window_m]

    @staticmethod
    def _select_charge(groups: Dict[int, List[BallisticRow]], range_m: float) -> int:
        viable = [charge for charge, rows in groups.items()
                  if rows[0].range_m <= range_m <= rows[-1].range_m]
        if viable:
            return min(viable)

        lowest = min(rows[0].range_m for rows in groups.values())
        highest = max(rows[-1].range_m for rows in groups.values())
        if range_m < lowest:
            return min(charge for charge, rows in groups.items() if rows[0].range_m == lowest)
        if range_m > highest:
            return max(charge for charge, rows in groups.items() if rows[-1].range_m == highest)

        # between the coverage of two charges
        def gap(charge: int) -> float:
            rows = groups[charge]
            return max(rows[0].range_m - range_m, range_m - rows[-1].range_m)

        return min(groups, key=lambda charge: (gap(charge), charge))

    def lookup(self, system_id: int, round_id: int, range_m: float,
               charge_level: Optional[int] = None) -> BallisticSolution:
        """Firing data for `range_m`.

        Args:
            system_id: Mortar system identifier.
            round_id: Round identifier.
            range_m: Range to the target in meters.
            charge_level: Use this charge instead of selecting one.

        Returns:
            BallisticSolution flagged with the interpolation method used.

        Raises:
            NoBallisticDataError: If there are no rows for the system/round (or charge).
            RangeUnattainableError: If the range is beyond the extrapolation tolerance.
        """
        groups = self._charge_groups(system_id, round_id)
        if charge_level is None:
            charge = self._select_charge(groups, range_m)
        elif charge_level in groups:
            charge = charge_level
        else:
            raise NoBallisticDataError(system_id, round_id, charge_level)

        rows = groups[charge]
        lo, hi = rows[0].range_m, rows[-1].range_m
        overshoot = max(lo - range_m, range_m - hi, 0.0)
        if overshoot > self.config.max_extrapolation_m:
            if charge_level is None:
                lo = min(r[0].range_m for r in groups.values())
                hi = max(r[-1].range_m for r in groups.values())
            raise RangeUnattainableError(range_m, lo, hi, self.config.max_extrapolation_m)

        logger.debug(f"Lookup {range_m}m: system {system_id}, round {round_id}, charge {charge} ({lo}-{hi}m)")

        def make(elevation: float, tof: float, dispersion: float, method: InterpolationMethodEnum,
                 accuracy: Optional[DerivativeAccuracy] = None) -> BallisticSolution:
            return BallisticSolution(system_id=system_id, round_id=round_id, range_m=range_m,
                                     charge_level=charge, elevation_mils=elevation,
                                     time_of_flight_s=tof, avg_dispersion_m=dispersion,
                                     interpolated=method is not InterpolationMethodEnum.EXACT,
                                     interpolation_method=method, derivative_accuracy=accuracy)

        ranges = [row.range_m for row in rows]
        index = bisect.bisect_left(ranges, range_m)
        if index < len(rows) and rows[index].range_m == range_m:
            row = rows[index]
            return make(row.elevation_mils, row.time_of_flight_s, row.avg_dispersion_m,
                        InterpolationMethodEnum.EXACT)

        if lo < range_m < hi:
            lower, upper = rows[index - 1], rows[index]
            return make(
                interpolate_2_pt(range_m, lower.range_m, lower.elevation_mils, upper.range_m, upper.elevation_mils),
                interpolate_2_pt(range_m, lower.range_m, lower.time_of_flight_s,
                                 upper.range_m, upper.time_of_flight_s),
                interpolate_2_pt(range_m, lower.range_m, lower.avg_dispersion_m,
                                 upper.range_m, upper.avg_dispersion_m),
                InterpolationMethodEnum.LINEAR,
            )

        return self._extrapolate(rows, range_m, make)

    @staticmethod
    def _extrapolate(rows: Sequence[BallisticRow], range_m: float, make) -> BallisticSolution:
        """Project the nearest row outside the charge's bracket.

        A field is projected with the row's derivative when one is published, otherwise
        linearly through the two nearest rows. A single-row charge without a derivative
        for a field has nothing to project from and raises RangeUnattainableError.
        """
        if range_m < rows[0].range_m:
            nearest, neighbor = rows[0], (rows[1] if len(rows) > 1 else None)
        else:
            nearest, neighbor = rows[-1], (rows[-2] if len(rows) > 1 else None)

        def project(value: str, derivative: Optional[float]):
            if derivative is not None:
                return extrapolate_derivative(range_m, nearest.range_m, getattr(nearest, value), derivative), True
            if neighbor is not None:
                return interpolate_2_pt(range_m, neighbor.range_m, getattr(neighbor, value),
                                        nearest.range_m, getattr(nearest, value)), False
            raise RangeUnattainableError(range_m, nearest.range_m, nearest.range_m, 0.0)

        elevation, elevation_derivative = project('elevation_mils', nearest.d_elev_per_100m_mils)
        tof, tof_derivative = project('time_of_flight_s', nearest.d_tof_per_100m_s)

        logger.warning(f"Range {range_m}m is outside charge {nearest.charge_level} table "
                       f"({rows[0].range_m}-{rows[-1].range_m}m), extrapolating")
        if elevation_derivative or tof_derivative:
            return make(elevation, tof, nearest.avg_dispersion_m, InterpolationMethodEnum.DERIVATIVE,
                        DerivativeAccuracy(elevation_derivative, tof_derivative))
        return make(elevation, tof, nearest.avg_dispersion_m, InterpolationMethodEnum.LINEAR)
