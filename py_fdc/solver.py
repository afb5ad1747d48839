"""Fire direction solver.

Combines grid geodesy with firing table lookups into fire solutions for a single tube:

    - solve: mortar and target grids to azimuth, elevation, charge and time of flight
    - solve_adjusted: applies an observer's range/direction correction to the target first
    - compute_target_from_polar: observer polar plot to a target grid

Tactical methods change only how the charge is chosen. Candidate table rows within
`tactical_window_m` of the range are ranked by the method's criterion and the chosen
charge is then looked up at the true range, so every value still carries its
interpolation flags.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any

from typing_extensions import Optional, Tuple

from py_fdc.config import get_config
from py_fdc.constants import cTimeOfFlightDecimals, cDispersionDecimals
from py_fdc.geodesy import (ObserverAdjustment, FireMissionData, apply_observer_adjustment,
                            fire_mission, project_polar)
from py_fdc.grid import GridLike, as_coordinate, format_grid
from py_fdc.interpolation import InterpolationMethodEnum
from py_fdc.interpolator import BallisticInterpolator, BallisticSolution, DerivativeAccuracy
from py_fdc.logger import logger
from py_fdc.tables import BallisticRow

__all__ = (
    'FireMissionMethodEnum',
    'FireSolution',
    'AdjustedFireSolution',
    'FireDirectionSolver',
)


class FireMissionMethodEnum(str, Enum):
    """Charge selection strategies.

    - STANDARD: Lowest charge that brackets the range (table policy).
    - EFFICIENCY: Lowest charge with a row near the range.
    - SPEED: Shortest time of flight.
    - HIGH_ANGLE: Highest elevation, for clearing obstacles.
    - AREA_TARGET: Widest dispersion within `max_dispersion_m`.
    """

    STANDARD = "standard"
    EFFICIENCY = "efficiency"
    SPEED = "speed"
    HIGH_ANGLE = "high_angle"
    AREA_TARGET = "area_target"


DEFAULT_MAX_DISPERSION_M = 35.0


@dataclass(frozen=True)
class FireSolution:
    """Firing data for one tube against one target.

    Attributes:
        azimuth_mils: Whole-mil azimuth from mortar to target, [0, 6400).
        back_azimuth_mils: Whole-mil azimuth from target back to mortar.
        elevation_mils: Whole-mil quadrant elevation.
        charge_level: Propellant charge.
        time_of_flight_s: Time of flight, seconds, one decimal.
        range_meters: Mortar to target range, whole meters.
        avg_dispersion_m: Mean radial error at the target, one decimal.
        interpolated: True unless the table had a row at exactly this range.
        interpolation_method: exact, derivative or linear.
        derivative_accuracy: Per-field derivative use for derivative lookups.
        mortar_grid: 10 digit mortar grid.
        target_grid: 10 digit target grid.
        system_id: Mortar system.
        round_id: Round.
        method: Charge selection method used.
        reasoning: Explanation for tactical method choices.
    """

    azimuth_mils: int
    back_azimuth_mils: int
    elevation_mils: int
    charge_level: int
    time_of_flight_s: float
    range_meters: int
    avg_dispersion_m: float
    interpolated: bool
    interpolation_method: Optional[InterpolationMethodEnum]
    derivative_accuracy: Optional[DerivativeAccuracy]
    mortar_grid: str
    target_grid: str
    system_id: int
    round_id: int
    method: FireMissionMethodEnum = FireMissionMethodEnum.STANDARD
    reasoning: Optional[str] = None


@dataclass(frozen=True)
class AdjustedFireSolution:
    """Fire solution against an observer-adjusted target.

    Attribute access falls through to `solution`, so an adjusted result reads like a
    FireSolution with the adjustment details added.
    """

    solution: FireSolution
    adjusted_target_grid: str
    original_target_grid: str
    adjustment: ObserverAdjustment
    observer_azimuth_to_target: int

    def __getattr__(self, item: str) -> Any:
        if item == 'solution':
            raise AttributeError(item)
        return getattr(self.solution, item)


class FireDirectionSolver:
    """Single-gun fire solutions on top of a BallisticInterpolator."""

    def __init__(self, interpolator: BallisticInterpolator, tactical_window_m: Optional[float] = None) -> None:
        self.interpolator = interpolator
        self.tactical_window_m = (tactical_window_m if tactical_window_m is not None
                                  else get_config().tactical_window_m)

    def _tactical_charge(self, system_id: int, round_id: int, range_m: int,
                         method: FireMissionMethodEnum,
                         max_dispersion_m: Optional[float]) -> Tuple[Optional[int], str]:
        candidates = self.interpolator.rows_near(system_id, round_id, range_m, self.tactical_window_m)
        if not candidates:
            return None, (f"{method.value}: no table rows within {self.tactical_window_m}m, "
                          "using interpolated standard solution")

        best: BallisticRow
        if method is FireMissionMethodEnum.EFFICIENCY:
            best = min(candidates, key=lambda r: r.charge_level)
            reason = (f"Efficiency mode: Charge {best.charge_level} for minimum propellant use "
                      f"({best.avg_dispersion_m}m dispersion)")
        elif method is FireMissionMethodEnum.SPEED:
            best = min(candidates, key=lambda r: (r.time_of_flight_s, r.charge_level))
            reason = f"Speed mode: Charge {best.charge_level} for fastest delivery ({best.time_of_flight_s}s)"
        elif method is FireMissionMethodEnum.HIGH_ANGLE:
            best = max(candidates, key=lambda r: (r.elevation_mils, -r.charge_level))
            reason = f"High angle mode: Charge {best.charge_level} for maximum trajectory ({best.elevation_mils} mils)"
        else:
            limit = max_dispersion_m if max_dispersion_m is not None else DEFAULT_MAX_DISPERSION_M
            wide = [r for r in candidates if r.avg_dispersion_m <= limit]
            if wide:
                best = max(wide, key=lambda r: (r.avg_dispersion_m, -r.charge_level))
                reason = f"Area target mode: Charge {best.charge_level} for {best.avg_dispersion_m}m spread"
            else:
                best = min(candidates, key=lambda r: r.charge_level)
                reason = (f"Area target mode: no option within {limit}m dispersion, "
                          f"using efficient Charge {best.charge_level}")
        return best.charge_level, reason

    def solve(self, mortar_grid: GridLike, target_grid: GridLike, system_id: int, round_id: int,
              method: FireMissionMethodEnum = FireMissionMethodEnum.STANDARD,
              max_dispersion_m: Optional[float] = None) -> FireSolution:
        """Fire solution from a mortar position to a target.

        Args:
            mortar_grid: Mortar grid (string or GridCoordinate).
            target_grid: Target grid (string or GridCoordinate).
            system_id: Mortar system identifier.
            round_id: Round identifier.
            method: Charge selection method. Defaults to the table policy.
            max_dispersion_m: Dispersion ceiling for AREA_TARGET.

        Raises:
            MalformedGridError: If a grid cannot be parsed.
            NoBallisticDataError: If the table has no rows for the system/round.
            RangeUnattainableError: If the range is beyond the extrapolation tolerance.
        """
        method = FireMissionMethodEnum(method)
        mortar, target = as_coordinate(mortar_grid), as_coordinate(target_grid)
        mission: FireMissionData = fire_mission(mortar, target)
        range_m = int(round(mission.distance_meters))

        charge: Optional[int] = None
        reasoning: Optional[str] = None
        if method is not FireMissionMethodEnum.STANDARD:
            charge, reasoning = self._tactical_charge(system_id, round_id, range_m, method, max_dispersion_m)
            logger.info(reasoning)

        ballistic: BallisticSolution = self.interpolator.lookup(system_id, round_id, range_m, charge)
        if ballistic.interpolated:
            logger.debug(f"Solution at {range_m}m is {ballistic.interpolation_method.value}")

        return FireSolution(
            azimuth_mils=mission.azimuth_mils,
            back_azimuth_mils=mission.back_azimuth_mils,
            elevation_mils=int(round(ballistic.elevation_mils)),
            charge_level=ballistic.charge_level,
            time_of_flight_s=round(ballistic.time_of_flight_s, cTimeOfFlightDecimals),
            range_meters=range_m,
            avg_dispersion_m=round(ballistic.avg_dispersion_m, cDispersionDecimals),
            interpolated=ballistic.interpolated,
            interpolation_method=ballistic.interpolation_method,
            derivative_accuracy=ballistic.derivative_accuracy,
            mortar_grid=format_grid(mortar),
            target_grid=format_grid(target),
            system_id=system_id,
            round_id=round_id,
            method=method,
            reasoning=reasoning,
        )

    def solve_adjusted(self, observer_grid: GridLike, mortar_grid: GridLike, target_grid: GridLike,
                       system_id: int, round_id: int, range_adj_m: float, dir_adj_mils: float,
                       method: FireMissionMethodEnum = FireMissionMethodEnum.STANDARD,
                       max_dispersion_m: Optional[float] = None) -> AdjustedFireSolution:
        """Fire solution after applying an observer correction to the target.

        Args:
            observer_grid: Observer grid.
            mortar_grid: Mortar grid.
            target_grid: Target grid the correction refers to.
            system_id: Mortar system identifier.
            round_id: Round identifier.
            range_adj_m: Add (+) or drop (-) in meters along the observer's line of sight.
            dir_adj_mils: Right (+) or left (-) in mils.

        Raises:
            OutOfGridRangeError: If the adjusted target leaves the grid square.
        """
        observer, target = as_coordinate(observer_grid), as_coordinate(target_grid)
        adjustment = ObserverAdjustment(range=range_adj_m, direction=dir_adj_mils)
        adjusted = apply_observer_adjustment(observer, target, adjustment)
        logger.debug(f"Observer adjustment {adjustment} moved target {format_grid(target)} "
                     f"to {format_grid(adjusted)}")

        solution = self.solve(mortar_grid, adjusted, system_id, round_id, method, max_dispersion_m)
        return AdjustedFireSolution(
            solution=solution,
            adjusted_target_grid=format_grid(adjusted),
            original_target_grid=format_grid(target),
            adjustment=adjustment,
            observer_azimuth_to_target=fire_mission(observer, target).azimuth_mils,
        )

    @staticmethod
    def compute_target_from_polar(observer_grid: GridLike, azimuth_mils: float, distance_m: float) -> str:
        """Target grid from an observer's azimuth and distance.

        Raises:
            OutOfGridRangeError: If the target falls outside the grid square.
        """
        return format_grid(project_polar(observer_grid, azimuth_mils, distance_m))

    @staticmethod
    def fire_mission(from_grid: GridLike, to_grid: GridLike) -> FireMissionData:
        return fire_mission(from_grid, to_grid)
