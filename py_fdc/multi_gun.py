"""Multi-gun fire coordination.

Classes:
    GunPosition: One tube of a section, with optional offsets from the master gun.
    MultiGunSpread: Formation and positions of the tubes.
    GunSolution: Per-tube firing data, corrections relative to the master and fire delay.
    SynchronizedFireSolution: Every tube's solution against one target.
    LoadDistribution: Rounds per tube and firing phases.
    MultiGunCoordinator: Builds spreads, synchronizes solutions, distributes loads.

Every tube is solved independently from its own position, since a displaced tube sees a
different range and azimuth. For simultaneous impact the tube with the longest time of
flight fires first and every other tube waits `max_tof - tof` seconds, where `max_tof`
also counts the base gun's own flight.
"""
from __future__ import annotations

import dataclasses
import math
from dataclasses import dataclass

from typing_extensions import Dict, List, Literal, NamedTuple, Optional, Sequence, Tuple, get_args

from py_fdc.config import get_config
from py_fdc.constants import cMilCircle, cQuarterMilCircle, cHalfMilCircle, cTimeOfFlightDecimals
from py_fdc.geodesy import distance, normalize_mils, project_polar, signed_mils
from py_fdc.grid import as_coordinate, format_grid
from py_fdc.logger import logger
from py_fdc.solver import FireDirectionSolver, FireSolution

__all__ = (
    'GunStatus',
    'Formation',
    'DistributionMethod',
    'GunPosition',
    'MultiGunSpread',
    'GunSolution',
    'SpreadPattern',
    'SynchronizedFireSolution',
    'GunAssignment',
    'FiringPhase',
    'LoadDistribution',
    'SpreadValidation',
    'FireCommand',
    'MultiGunCoordinator',
)

GunStatus = Literal['active', 'inactive', 'maintenance']
Formation = Literal['line', 'arc', 'dispersed', 'custom']
DistributionMethod = Literal['equal', 'weighted', 'priority', 'custom']

MAX_ARC_MILS = 800
ARC_STEP_MILS = 200
PHASE_INTERVAL_S = 10


@dataclass(frozen=True)
class GunPosition:
    """A tube in the section.

    Attributes:
        id: Gun identifier, e.g. "gun-1".
        name: Display name, e.g. "Gun 1".
        position: Grid of the tube.
        azimuth_offset: Mils added to this gun's commanded azimuth.
        elevation_offset: Mils added to this gun's commanded elevation.
        status: Only active guns take part in a fire mission.
    """

    id: str
    name: str
    position: str
    azimuth_offset: float = 0.0
    elevation_offset: float = 0.0
    status: GunStatus = 'active'

    def __post_init__(self) -> None:
        if self.status not in get_args(GunStatus):
            raise ValueError(f"Unknown gun status {self.status!r}")


@dataclass(frozen=True)
class MultiGunSpread:
    formation: Formation
    spacing: float
    orientation: float
    gun_positions: Tuple[GunPosition, ...]
    total_spread: float = 0.0

    def active_guns(self) -> Tuple[GunPosition, ...]:
        return tuple(gun for gun in self.gun_positions if gun.status == 'active')


@dataclass(frozen=True)
class GunSolution:
    gun_id: str
    gun_name: str
    position: str
    fire_solution: FireSolution
    azimuth_correction: int
    elevation_correction: int
    time_delay: float


class SpreadPattern(NamedTuple):
    """Spread of the section's firing data.

    Attributes:
        range_spread_m: Difference between the longest and shortest gun-target range.
        azimuth_spread_mils: Difference between the extreme azimuth corrections.
        center: Target grid all tubes are laid on.
    """

    range_spread_m: int
    azimuth_spread_mils: int
    center: str


@dataclass(frozen=True)
class SynchronizedFireSolution:
    target_grid: str
    master_gun_solution: FireSolution
    gun_solutions: Tuple[GunSolution, ...]
    simultaneous_impact: bool
    total_time_of_flight: float
    spread_pattern: SpreadPattern


@dataclass(frozen=True)
class GunAssignment:
    gun_id: str
    gun_name: str
    assigned_rounds: int
    round_type: str
    firing_order: int
    justification: str


class FiringPhase(NamedTuple):
    phase: int
    guns: Tuple[str, ...]
    rounds_per_gun: int
    interval: int


@dataclass(frozen=True)
class LoadDistribution:
    total_rounds: int
    distribution_method: DistributionMethod
    gun_assignments: Tuple[GunAssignment, ...]
    firing_sequence: Tuple[FiringPhase, ...]


class SpreadValidation(NamedTuple):
    is_valid: bool
    errors: Tuple[str, ...]


class FireCommand(NamedTuple):
    gun_id: str
    gun_name: str
    command: str


def _gun(index: int, position: str) -> GunPosition:
    return GunPosition(id=f"gun-{index + 1}", name=f"Gun {index + 1}", position=position)


class MultiGunCoordinator:
    """Coordinates a section of tubes firing on one target."""

    def __init__(self, solver: FireDirectionSolver,
                 min_spacing_m: Optional[float] = None,
                 max_spacing_m: Optional[float] = None) -> None:
        config = get_config()
        self.solver = solver
        self.min_spacing_m = min_spacing_m if min_spacing_m is not None else config.min_gun_spacing_m
        self.max_spacing_m = max_spacing_m if max_spacing_m is not None else config.max_gun_spacing_m

    def calculate_gun_spread(self, base_position: str, number_of_guns: int, formation: Formation,
                             spacing: float, orientation: float = 0.0) -> MultiGunSpread:
        """Lay out a section around the base gun.

        Formations:
            - line / custom: guns every `spacing` meters perpendicular (right) of `orientation`.
            - arc: guns at `spacing` meters from the base, spread over at most 800 mils
              centered on `orientation`.
            - dispersed: guns on the N, E, S, W points around the base, one more `spacing`
              out on every lap.

        Args:
            base_position: Grid of gun 1.
            number_of_guns: Section size, 1 or more.
            formation: Layout to use.
            spacing: Meters between guns.
            orientation: Direction of fire of the section in mils.

        Raises:
            ValueError: If the section size, spacing or formation is invalid.
            OutOfGridRangeError: If a gun would fall outside the grid square.
        """
        if number_of_guns < 1:
            raise ValueError("At least one gun is required")
        if spacing <= 0:
            raise ValueError("Gun spacing must be positive")
        if formation not in get_args(Formation):
            raise ValueError(f"Unknown formation {formation!r}")

        base = format_grid(as_coordinate(base_position))
        positions = [base]
        if formation == 'arc':
            arc = min(MAX_ARC_MILS, (number_of_guns - 1) * ARC_STEP_MILS)
            step = arc / (number_of_guns - 1) if number_of_guns > 1 else 0
            for i in range(1, number_of_guns):
                bearing = normalize_mils(orientation - arc / 2 + step * i)
                positions.append(format_grid(project_polar(base, bearing, spacing)))
        elif formation == 'dispersed':
            bearings = (0, cQuarterMilCircle, cHalfMilCircle, cMilCircle - cQuarterMilCircle)
            for i in range(1, number_of_guns):
                bearing = bearings[(i - 1) % len(bearings)]
                ring = math.ceil(i / len(bearings))
                positions.append(format_grid(project_polar(base, bearing, spacing * ring)))
        else:
            for i in range(1, number_of_guns):
                bearing = normalize_mils(orientation + cQuarterMilCircle)
                positions.append(format_grid(project_polar(base, bearing, spacing * i)))

        guns = tuple(_gun(i, p) for i, p in enumerate(positions))
        return MultiGunSpread(formation=formation, spacing=spacing, orientation=orientation,
                              gun_positions=guns, total_spread=self.total_spread(guns))

    @staticmethod
    def total_spread(guns: Sequence[GunPosition]) -> float:
        """Largest distance between any two guns, whole meters."""
        widest = 0.0
        for i, a in enumerate(guns):
            for b in guns[i + 1:]:
                widest = max(widest, distance(a.position, b.position))
        return float(round(widest))

    def validate_gun_spread(self, spread: MultiGunSpread) -> SpreadValidation:
        errors: List[str] = []
        if not spread.gun_positions:
            errors.append("At least one gun position is required")
        if spread.spacing < self.min_spacing_m:
            errors.append(f"Gun spacing should be at least {self.min_spacing_m} meters for safety")
        if spread.spacing > self.max_spacing_m:
            errors.append(f"Gun spacing should not exceed {self.max_spacing_m} meters for effective control")

        grids = []
        for gun in spread.gun_positions:
            try:
                grids.append(format_grid(as_coordinate(gun.position)))
            except ValueError as exc:
                errors.append(f"{gun.name}: {exc}")
        if len(set(grids)) != len(grids):
            errors.append("Duplicate gun positions detected")
        return SpreadValidation(not errors, tuple(errors))

    def _apply_offsets(self, solution: FireSolution, gun: GunPosition) -> FireSolution:
        if not gun.azimuth_offset and not gun.elevation_offset:
            return solution
        return dataclasses.replace(
            solution,
            azimuth_mils=int(round(normalize_mils(solution.azimuth_mils + gun.azimuth_offset))) % cMilCircle,
            elevation_mils=int(round(solution.elevation_mils + gun.elevation_offset)),
        )

    def synchronize(self, master_solution: FireSolution, spread: MultiGunSpread,
                    simultaneous_impact: bool = True) -> SynchronizedFireSolution:
        """Solve every active gun against the master solution's target.

        Args:
            master_solution: Solution of the base gun; supplies target, system and round.
            spread: Section layout.
            simultaneous_impact: Stagger fire so all rounds land together.

        Returns:
            SynchronizedFireSolution with one GunSolution per active gun.

        Raises:
            ValueError: If the spread has no active gun.
            NoBallisticDataError, RangeUnattainableError: From a tube's own solution.
        """
        guns = spread.active_guns()
        if not guns:
            raise ValueError("Gun spread has no active guns")

        solved: List[Tuple[GunPosition, FireSolution]] = []
        for gun in guns:
            solution = self.solver.solve(gun.position, master_solution.target_grid,
                                         master_solution.system_id, master_solution.round_id,
                                         master_solution.method)
            solved.append((gun, self._apply_offsets(solution, gun)))

        # the base gun fires too, whether or not the spread lists it
        max_tof = max([master_solution.time_of_flight_s] + [solution.time_of_flight_s for _, solution in solved])
        gun_solutions = []
        for gun, solution in solved:
            delay = round(max_tof - solution.time_of_flight_s, cTimeOfFlightDecimals) if simultaneous_impact else 0.0
            gun_solutions.append(GunSolution(
                gun_id=gun.id,
                gun_name=gun.name,
                position=solution.mortar_grid,
                fire_solution=solution,
                azimuth_correction=int(round(signed_mils(solution.azimuth_mils - master_solution.azimuth_mils))),
                elevation_correction=solution.elevation_mils - master_solution.elevation_mils,
                time_delay=delay,
            ))
            logger.debug(f"{gun.name}: az {solution.azimuth_mils}, el {solution.elevation_mils}, "
                         f"tof {solution.time_of_flight_s}s, delay {delay}s")

        ranges = [g.fire_solution.range_meters for g in gun_solutions]
        corrections = [g.azimuth_correction for g in gun_solutions]
        return SynchronizedFireSolution(
            target_grid=master_solution.target_grid,
            master_gun_solution=master_solution,
            gun_solutions=tuple(gun_solutions),
            simultaneous_impact=simultaneous_impact,
            total_time_of_flight=max_tof,
            spread_pattern=SpreadPattern(range_spread_m=max(ranges) - min(ranges),
                                         azimuth_spread_mils=max(corrections) - min(corrections),
                                         center=master_solution.target_grid),
        )

    @staticmethod
    def calculate_load_distribution(number_of_guns: int, total_rounds: int,
                                    method: DistributionMethod = 'equal',
                                    priorities: Optional[Dict[str, float]] = None,
                                    round_type: str = 'HE') -> LoadDistribution:
        """Distribute a mission's rounds over the section.

        Methods:
            - equal: even split, remainder to the first guns.
            - weighted: even share scaled by each gun's priority weight (default 1), at least 1.
            - priority: guns in descending priority each take an even share (rounded up)
              until the rounds run out.
            - custom: even share rounded down, the rest left for manual assignment.

        Args:
            number_of_guns: Section size.
            total_rounds: Rounds in the mission.
            method: Distribution method.
            priorities: Gun id to priority weight.
            round_type: Round designation put on every assignment.

        Raises:
            ValueError: On a non-positive section size, negative rounds or unknown method.
        """
        if number_of_guns < 1:
            raise ValueError("At least one gun is required")
        if total_rounds < 0:
            raise ValueError("Total rounds must not be negative")
        if method not in get_args(DistributionMethod):
            raise ValueError(f"Unknown distribution method {method!r}")
        priorities = priorities or {}

        assignments: List[GunAssignment] = []
        share = total_rounds / number_of_guns
        if method == 'equal':
            per_gun, remainder = divmod(total_rounds, number_of_guns)
            for i in range(number_of_guns):
                rounds = per_gun + (1 if i < remainder else 0)
                assignments.append(GunAssignment(f"gun-{i + 1}", f"Gun {i + 1}", rounds, round_type, i + 1,
                                                 f"Equal distribution: {rounds} rounds assigned"))
        elif method == 'weighted':
            for i in range(number_of_guns):
                weight = priorities.get(f"gun-{i + 1}", 1)
                rounds = max(1, int(round(share * weight)))
                assignments.append(GunAssignment(f"gun-{i + 1}", f"Gun {i + 1}", rounds, round_type, i + 1,
                                                 f"Weighted distribution based on gun priority ({weight})"))
        elif method == 'priority':
            names = {f"gun-{i + 1}": f"Gun {i + 1}" for i in range(number_of_guns)}
            ranked = sorted(priorities, key=lambda gun_id: priorities[gun_id], reverse=True)
            ranked += [gun_id for gun_id in names if gun_id not in priorities]
            remaining = total_rounds
            for i, gun_id in enumerate(ranked[:number_of_guns]):
                if remaining <= 0:
                    break
                rounds = min(remaining, math.ceil(share))
                remaining -= rounds
                assignments.append(GunAssignment(gun_id, names.get(gun_id, gun_id), rounds, round_type,
                                                 i + 1, f"Priority assignment: {rounds} rounds"))
        else:
            for i in range(number_of_guns):
                assignments.append(GunAssignment(f"gun-{i + 1}", f"Gun {i + 1}", total_rounds // number_of_guns,
                                                 round_type, i + 1,
                                                 "Custom distribution (manual assignment required)"))

        phases = []
        for phase in range(1, max((a.assigned_rounds for a in assignments), default=0) + 1):
            guns = tuple(a.gun_id for a in assignments if a.assigned_rounds >= phase)
            phases.append(FiringPhase(phase, guns, 1, PHASE_INTERVAL_S))

        return LoadDistribution(total_rounds=total_rounds, distribution_method=method,
                                gun_assignments=tuple(assignments), firing_sequence=tuple(phases))

    @staticmethod
    def generate_fire_commands(synchronized: SynchronizedFireSolution, load: LoadDistribution,
                               round_type: str = 'HE') -> List[FireCommand]:
        """Voice fire commands for every gun in a synchronized solution."""
        rounds_by_gun = {a.gun_id: a.assigned_rounds for a in load.gun_assignments}
        commands = []
        for gun in synchronized.gun_solutions:
            fs = gun.fire_solution
            rounds = rounds_by_gun.get(gun.gun_id, 1)
            delay = f", Delay {gun.time_delay}s" if gun.time_delay > 0 else ""
            commands.append(FireCommand(
                gun.gun_id, gun.gun_name,
                f"{gun.gun_name}, {rounds} rounds {round_type}, Charge {fs.charge_level}, "
                f"Deflection {fs.azimuth_mils}, Elevation {fs.elevation_mils}{delay}, Fire when ready, Over",
            ))
        return commands
