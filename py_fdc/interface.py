"""Fire direction calculator interface.

This module provides `FireDirectionCalculator`, the primary entry point for fire direction
work. It wires a table store into the interpolator, solver, multi-gun coordinator and FPF
analyzer and exposes their public operations in one place.

Key Classes:
    - FireDirectionCalculator: Facade over the fire direction components
"""
from dataclasses import dataclass, field
from typing import Any

from typing_extensions import Optional, Sequence

from py_fdc.fpf import FPFCoverageAnalysis, FPFCoverageAnalyzer, FPFSector
from py_fdc.geodesy import FireMissionData
from py_fdc.grid import GridLike
from py_fdc.interpolator import BallisticInterpolator, InterpolatorConfig, RangeCapabilities
from py_fdc.multi_gun import MultiGunCoordinator, MultiGunSpread, SynchronizedFireSolution
from py_fdc.solver import AdjustedFireSolution, FireDirectionSolver, FireMissionMethodEnum, FireSolution
from py_fdc.tables import TableStoreProtocol

__all__ = ('FireDirectionCalculator',)


@dataclass
class FireDirectionCalculator:
    """Basic interface for the fire direction calculator.

    Attributes:
        table_store: Source of ballistic rows.
        config: Interpolator configuration. Library defaults are used when None.

    Examples:
        >>> from py_fdc import BallisticTable, BallisticRow
        >>> table = BallisticTable([BallisticRow(1, 1, 0, 1000, 800, 20.0, 10.0),
        ...                         BallisticRow(1, 1, 0, 2000, 1000, 25.0, 20.0)])
        >>> fdc = FireDirectionCalculator(table)
        >>> fdc.solve("1000010000", "1000011500", 1, 1).elevation_mils
        900
    """

    table_store: TableStoreProtocol
    config: Optional[InterpolatorConfig] = field(default=None)
    _interpolator: BallisticInterpolator = field(init=False, repr=False, compare=False)
    _solver: FireDirectionSolver = field(init=False, repr=False, compare=False)
    _coordinator: MultiGunCoordinator = field(init=False, repr=False, compare=False)
    _fpf: FPFCoverageAnalyzer = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self._interpolator = BallisticInterpolator(self.table_store, self.config)
        self._solver = FireDirectionSolver(self._interpolator)
        self._coordinator = MultiGunCoordinator(self._solver)
        self._fpf = FPFCoverageAnalyzer()

    def __getattr__(self, item: str) -> Any:
        """Delegate remaining attribute access to the multi-gun coordinator and FPF analyzer.

        Raises:
            AttributeError: If neither component has the attribute.
        """
        if item.startswith('_'):
            raise AttributeError(item)
        for component in (self._coordinator, self._fpf):
            if hasattr(component, item):
                return getattr(component, item)
        raise AttributeError(
            f"'{self.__class__.__name__}' object or its components have no attribute '{item}'"
        )

    @property
    def interpolator(self) -> BallisticInterpolator:
        return self._interpolator

    def solve(self, mortar_grid: GridLike, target_grid: GridLike, system_id: int, round_id: int,
              method: FireMissionMethodEnum = FireMissionMethodEnum.STANDARD,
              max_dispersion_m: Optional[float] = None) -> FireSolution:
        """Fire solution from a mortar to a target. See `FireDirectionSolver.solve`."""
        return self._solver.solve(mortar_grid, target_grid, system_id, round_id, method, max_dispersion_m)

    def solve_adjusted(self, observer_grid: GridLike, mortar_grid: GridLike, target_grid: GridLike,
                       system_id: int, round_id: int, range_adj_m: float, dir_adj_mils: float,
                       method: FireMissionMethodEnum = FireMissionMethodEnum.STANDARD,
                       max_dispersion_m: Optional[float] = None) -> AdjustedFireSolution:
        """Fire solution after an observer correction. See `FireDirectionSolver.solve_adjusted`."""
        return self._solver.solve_adjusted(observer_grid, mortar_grid, target_grid, system_id, round_id,
                                           range_adj_m, dir_adj_mils, method, max_dispersion_m)

    def compute_target_from_polar(self, observer_grid: GridLike, azimuth_mils: float, distance_m: float) -> str:
        return self._solver.compute_target_from_polar(observer_grid, azimuth_mils, distance_m)

    def fire_mission(self, from_grid: GridLike, to_grid: GridLike) -> FireMissionData:
        return self._solver.fire_mission(from_grid, to_grid)

    def synchronize(self, master_solution: FireSolution, spread: MultiGunSpread,
                    simultaneous_impact: bool = True) -> SynchronizedFireSolution:
        return self._coordinator.synchronize(master_solution, spread, simultaneous_impact)

    def analyze_coverage(self, sectors: Sequence[FPFSector]) -> FPFCoverageAnalysis:
        return self._fpf.analyze_coverage(sectors)

    def range_capabilities(self, system_id: int, round_id: int) -> RangeCapabilities:
        return self._interpolator.range_capabilities(system_id, round_id)
