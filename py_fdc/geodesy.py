"""Planar geodesy on a single 100 km grid square.

All angles are NATO mils measured clockwise from grid north (0 = north, 1600 = east),
all distances are meters. Grid components are treated as Cartesian meters; no
cross-zone or convergence handling is attempted.

Functions:
    distance: Euclidean distance between two grid positions.
    azimuth: Bearing from one position to another.
    back_azimuth: Reverse bearing.
    project_polar: Position at a bearing and distance from an origin.
    apply_observer_adjustment: Shift a target by an observer's range/direction correction.
    fire_mission: Distance, azimuth and back azimuth rounded for fire commands.
"""
import math

from typing_extensions import NamedTuple

from py_fdc.constants import cMilCircle, cHalfMilCircle
from py_fdc.grid import GridCoordinate, GridLike, as_coordinate

__all__ = (
    'ObserverAdjustment',
    'FireMissionData',
    'mils_to_rad',
    'rad_to_mils',
    'degrees_to_mils',
    'mils_to_degrees',
    'normalize_mils',
    'signed_mils',
    'distance',
    'azimuth',
    'back_azimuth',
    'project_polar',
    'apply_observer_adjustment',
    'fire_mission',
)


class ObserverAdjustment(NamedTuple):
    """Observer correction relative to the observer's line of sight to the target.

    Attributes:
        range: Meters, positive = add (move target away from observer), negative = drop.
        direction: Mils, positive = right (clockwise), negative = left.
    """

    range: float = 0.0
    direction: float = 0.0


class FireMissionData(NamedTuple):
    distance_meters: float
    azimuth_mils: int
    back_azimuth_mils: int


def mils_to_rad(mils: float) -> float:
    return mils * 2 * math.pi / cMilCircle


def rad_to_mils(rad: float) -> float:
    return rad * cMilCircle / (2 * math.pi)


def degrees_to_mils(degrees: float) -> float:
    return degrees * cMilCircle / 360


def mils_to_degrees(mils: float) -> float:
    return mils * 360 / cMilCircle


def normalize_mils(mils: float) -> float:
    """Wrap an angle into [0, 6400)."""
    value = mils % cMilCircle
    # float modulo of a tiny negative number rounds up to the full circle
    if value >= cMilCircle:
        value -= cMilCircle
    return value


def signed_mils(mils: float) -> float:
    """Wrap an angular difference into (-3200, 3200]."""
    value = normalize_mils(mils)
    if value > cHalfMilCircle:
        value -= cMilCircle
    return value


def distance(a: GridLike, b: GridLike) -> float:
    """Distance in meters between two grid positions."""
    a, b = as_coordinate(a), as_coordinate(b)
    return math.hypot(b.easting - a.easting, b.northing - a.northing)


def azimuth(a: GridLike, b: GridLike) -> float:
    """Bearing from `a` to `b` in mils, clockwise from grid north, in [0, 6400).

    Coincident points have an azimuth of 0.
    """
    a, b = as_coordinate(a), as_coordinate(b)
    rad = math.atan2(b.easting - a.easting, b.northing - a.northing)
    return normalize_mils(rad_to_mils(rad))


def back_azimuth(a: GridLike, b: GridLike) -> float:
    """Bearing from `b` back to `a`, i.e. `(azimuth(a, b) + 3200) mod 6400`."""
    return normalize_mils(azimuth(a, b) + cHalfMilCircle)


def project_polar(origin: GridLike, azimuth_mils: float, distance_m: float) -> GridCoordinate:
    """Position `distance_m` meters from `origin` along `azimuth_mils`.

    Raises:
        OutOfGridRangeError: If the rounded point leaves the 100 km square.
    """
    origin = as_coordinate(origin)
    rad = mils_to_rad(azimuth_mils)
    return GridCoordinate.from_meters(origin.easting + distance_m * math.sin(rad),
                                      origin.northing + distance_m * math.cos(rad))


def apply_observer_adjustment(observer: GridLike, target: GridLike,
                              adjustment: ObserverAdjustment) -> GridCoordinate:
    """Shift `target` by an observer correction expressed along the observer's line of sight.

    The range component moves the target along the observer-target bearing, the direction
    component moves it perpendicular to that bearing. The lateral shift is the arc that
    `adjustment.direction` mils subtend at the observer-target distance.

    Args:
        observer: Observer position.
        target: Target position the correction refers to.
        adjustment: Range (m) and direction (mils) correction.

    Returns:
        Adjusted target coordinate, rounded to the nearest meter.

    Raises:
        OutOfGridRangeError: If the adjusted target leaves the 100 km square.
    """
    observer, target = as_coordinate(observer), as_coordinate(target)
    line_of_sight = mils_to_rad(azimuth(observer, target))
    lateral_m = distance(observer, target) * mils_to_rad(adjustment.direction)

    # forward unit vector is (sin, cos); the observer's right is (cos, -sin)
    d_east = adjustment.range * math.sin(line_of_sight) + lateral_m * math.cos(line_of_sight)
    d_north = adjustment.range * math.cos(line_of_sight) - lateral_m * math.sin(line_of_sight)
    return GridCoordinate.from_meters(target.easting + d_east, target.northing + d_north)


def fire_mission(from_grid: GridLike, to_grid: GridLike) -> FireMissionData:
    """Distance and whole-mil azimuths between two positions."""
    azimuth_mils = int(round(azimuth(from_grid, to_grid))) % cMilCircle
    return FireMissionData(
        distance_meters=distance(from_grid, to_grid),
        azimuth_mils=azimuth_mils,
        back_azimuth_mils=(azimuth_mils + cHalfMilCircle) % cMilCircle,
    )
