"""Final Protective Fire sector planning.

Sectors are arcs on the mil circle `[0, 6400)`, half-open `[azimuth_start, azimuth_end)`.
A sector whose end is smaller than its start wraps through north, and a sector whose
start equals its end is empty. Analysis never mutates its inputs; target assignment
returns new sector objects.

Typical use:

    >>> analyzer = FPFCoverageAnalyzer()
    >>> analysis = analyzer.analyze_coverage([
    ...     FPFSector('s1', 'Alpha', 0, 1600),
    ...     FPFSector('s2', 'Bravo', 2400, 4000),
    ... ])
    >>> analysis.gaps_in_coverage[0]
    CoverageGap(start_azimuth=1600, end_azimuth=2400, gap_size=800)
"""
from __future__ import annotations

import dataclasses
import math
from dataclasses import dataclass

from typing_extensions import Dict, List, Literal, NamedTuple, Optional, Sequence, Tuple, Union, get_args

from py_fdc.config import get_config
from py_fdc.constants import cMilCircle
from py_fdc.geodesy import azimuth
from py_fdc.grid import GridLike
from py_fdc.logger import logger

__all__ = (
    'FPFPriority',
    'FPFSector',
    'FPFTarget',
    'CoverageGap',
    'SectorOverlap',
    'FPFCoverageAnalysis',
    'FPFFireDistribution',
    'FPFCoverageAnalyzer',
)

FPFPriority = Literal['primary', 'alternate', 'supplemental']

Mils = Union[int, float]
_Segment = Tuple[Mils, Mils]

SECTOR_NAMES = ('Alpha', 'Bravo', 'Charlie', 'Delta', 'Echo', 'Foxtrot', 'Golf', 'Hotel')
DEFAULT_SECTOR_SIZE_MILS = 800
CRITICAL_GAP_MILS = 200

_PRIORITY_ORDER: Dict[str, int] = {'primary': 1, 'alternate': 2, 'supplemental': 3}
_TUBE_SHARE: Dict[str, Tuple[float, int]] = {'primary': (0.4, 2), 'alternate': (0.3, 1), 'supplemental': (0.2, 1)}
_ROUNDS_PER_TUBE: Dict[str, int] = {'primary': 12, 'alternate': 8, 'supplemental': 4}
_PRIORITY_JUSTIFICATION: Dict[str, str] = {
    'primary': 'Critical defensive position requiring maximum firepower.',
    'alternate': 'Secondary defensive position with substantial fire support.',
    'supplemental': 'Additional coverage for defensive flexibility.',
}


def _check_priority(priority: str) -> None:
    if priority not in get_args(FPFPriority):
        raise ValueError(f"Unknown FPF priority {priority!r}")


@dataclass(frozen=True)
class FPFSector:
    """Angular FPF sector.

    Attributes:
        id: Sector identifier.
        name: Display name.
        azimuth_start: First mil of the sector, [0, 6400).
        azimuth_end: Mil where the sector stops, [0, 6400); smaller than start to wrap.
        priority: primary, alternate or supplemental.
        assigned_targets: Ids of the FPF targets laid in this sector.
        description: Free text.

    Raises:
        ValueError: If an azimuth is outside [0, 6400) or the priority is unknown.
    """

    id: str
    name: str
    azimuth_start: Mils
    azimuth_end: Mils
    priority: FPFPriority = 'primary'
    assigned_targets: Tuple[str, ...] = ()
    description: str = ''

    def __post_init__(self) -> None:
        for name in ('azimuth_start', 'azimuth_end'):
            value = getattr(self, name)
            if not 0 <= value < cMilCircle:
                raise ValueError(f"{name} must be within [0, {cMilCircle}), got {value}")
        _check_priority(self.priority)
        object.__setattr__(self, 'assigned_targets', tuple(self.assigned_targets))

    @property
    def width(self) -> Mils:
        return (self.azimuth_end - self.azimuth_start) % cMilCircle

    def segments(self) -> List[_Segment]:
        """The sector as non-wrapping `(start, end)` pieces of `[0, 6400]`."""
        if self.azimuth_start == self.azimuth_end:
            return []
        if self.azimuth_start < self.azimuth_end:
            return [(self.azimuth_start, self.azimuth_end)]
        pieces: List[_Segment] = [(self.azimuth_start, cMilCircle)]
        if self.azimuth_end > 0:
            pieces.append((0, self.azimuth_end))
        return pieces

    def contains(self, azimuth_mils: float) -> bool:
        return any(a <= azimuth_mils < b for a, b in self.segments())


@dataclass(frozen=True)
class FPFTarget:
    id: str
    name: str
    target_grid: str
    priority: FPFPriority = 'primary'

    def __post_init__(self) -> None:
        _check_priority(self.priority)


class CoverageGap(NamedTuple):
    start_azimuth: Mils
    end_azimuth: Mils
    gap_size: Mils


class SectorOverlap(NamedTuple):
    sector1_id: str
    sector2_id: str
    overlap_start_azimuth: Mils
    overlap_end_azimuth: Mils
    overlap_size: Mils


@dataclass(frozen=True)
class FPFCoverageAnalysis:
    """Result of analyze_coverage.

    Attributes:
        total_coverage_angle: Mils covered by at least one sector.
        gaps_in_coverage: Uncovered arcs, ascending by start; a gap may wrap through north.
        overlapping_areas: Arcs shared by a pair of sectors.
        recommendations: Templated planning notes.
    """

    total_coverage_angle: Mils
    gaps_in_coverage: Tuple[CoverageGap, ...]
    overlapping_areas: Tuple[SectorOverlap, ...]
    recommendations: Tuple[str, ...]


class FPFFireDistribution(NamedTuple):
    target_id: str
    recommended_tubes: int
    recommended_rounds: int
    firing_order: int
    justification: str


def _union(segments: Sequence[_Segment]) -> List[_Segment]:
    merged: List[List[Mils]] = []
    for start, end in sorted(segments):
        if merged and start <= merged[-1][1]:
            merged[-1][1] = max(merged[-1][1], end)
        else:
            merged.append([start, end])
    return [(start, end) for start, end in merged]


def _intersect(first: Sequence[_Segment], second: Sequence[_Segment]) -> List[_Segment]:
    shared = []
    for a_start, a_end in first:
        for b_start, b_end in second:
            start, end = max(a_start, b_start), min(a_end, b_end)
            if end > start:
                shared.append((start, end))
    return sorted(shared)


def _join_through_north(segments: List[_Segment]) -> List[_Segment]:
    """Merge a piece ending at 6400 with one starting at 0 into a single wrapping arc."""
    if len(segments) > 1 and segments[0][0] == 0 and segments[-1][1] == cMilCircle:
        return [(segments[-1][0], segments[0][1])] + segments[1:-1]
    return segments


def _arc_size(start: Mils, end: Mils) -> Mils:
    return end - start if end > start else cMilCircle - start + end


class FPFCoverageAnalyzer:
    """Gap, overlap and fire distribution analysis over FPF sectors."""

    def __init__(self, optimal_overlap_mils: Optional[float] = None) -> None:
        self.optimal_overlap_mils = (optimal_overlap_mils if optimal_overlap_mils is not None
                                     else get_config().optimal_overlap_mils)

    def analyze_coverage(self, sectors: Sequence[FPFSector]) -> FPFCoverageAnalysis:
        """Coverage of the mil circle by a set of sectors.

        Args:
            sectors: Sectors in any order; they are not modified.

        Returns:
            FPFCoverageAnalysis with total coverage, gaps, pairwise overlaps and
            recommendations.
        """
        ordered = sorted(sectors, key=lambda s: (s.azimuth_start, s.id))
        covered = _union([piece for sector in ordered for piece in sector.segments()])
        total = sum(end - start for start, end in covered)

        gaps = self._find_gaps(covered)
        overlaps = []
        for i, first in enumerate(ordered):
            for second in ordered[i + 1:]:
                for start, end in _join_through_north(_intersect(first.segments(), second.segments())):
                    overlaps.append(SectorOverlap(first.id, second.id, start % cMilCircle,
                                                  end % cMilCircle, _arc_size(start, end)))

        recommendations = []
        if gaps:
            recommendations.append(f"{len(gaps)} coverage gaps identified. "
                                   "Consider repositioning sectors or adding FPF targets.")
        if len(overlaps) > 3:
            recommendations.append(f"{len(overlaps)} overlapping areas detected. "
                                   "Review sector boundaries for efficiency.")
        unassigned = [s for s in ordered if not s.assigned_targets]
        if unassigned:
            recommendations.append(f"{len(unassigned)} sectors have no assigned targets. "
                                   "Consider consolidating or reassigning.")

        logger.debug(f"FPF coverage {total} mils, {len(gaps)} gaps, {len(overlaps)} overlaps")
        return FPFCoverageAnalysis(total_coverage_angle=total, gaps_in_coverage=tuple(gaps),
                                   overlapping_areas=tuple(overlaps),
                                   recommendations=tuple(recommendations))

    @staticmethod
    def _find_gaps(covered: List[_Segment]) -> List[CoverageGap]:
        if not covered:
            return [CoverageGap(0, 0, cMilCircle)]
        uncovered: List[_Segment] = []
        position: Mils = 0
        for start, end in covered:
            if start > position:
                uncovered.append((position, start))
            position = end
        if position < cMilCircle:
            uncovered.append((position, cMilCircle))
        return [CoverageGap(start % cMilCircle, end % cMilCircle, _arc_size(start, end))
                for start, end in _join_through_north(uncovered)]

    @staticmethod
    def create_default_sectors(base_azimuth: Mils = 0) -> List[FPFSector]:
        """Eight 800 mil sectors (Alpha to Hotel) clockwise from `base_azimuth`.

        The first three are primary, the next three alternate and the last two supplemental.
        """
        sectors = []
        for index, name in enumerate(SECTOR_NAMES):
            priority: FPFPriority = 'primary' if index < 3 else 'alternate' if index < 6 else 'supplemental'
            sectors.append(FPFSector(
                id=f"sector-{index + 1}",
                name=name,
                azimuth_start=(base_azimuth + index * DEFAULT_SECTOR_SIZE_MILS) % cMilCircle,
                azimuth_end=(base_azimuth + (index + 1) * DEFAULT_SECTOR_SIZE_MILS) % cMilCircle,
                priority=priority,
                description=f"Sector {name} - {DEFAULT_SECTOR_SIZE_MILS} mils coverage",
            ))
        return sectors

    @staticmethod
    def assign_targets_to_sectors(mortar_grid: GridLike, targets: Sequence[FPFTarget],
                                  sectors: Sequence[FPFSector]) -> List[FPFSector]:
        """Assign each target to the first sector containing its azimuth from the mortar.

        Returns:
            New sectors, in input order, with the target ids appended. A target outside
            every sector stays unassigned.

        Raises:
            MalformedGridError: If a grid cannot be parsed.
        """
        assigned: Dict[str, List[str]] = {s.id: list(s.assigned_targets) for s in sectors}
        for target in targets:
            bearing = azimuth(mortar_grid, target.target_grid)
            sector = next((s for s in sectors if s.contains(bearing)), None)
            if sector is None:
                logger.warning(f"FPF target {target.id} at {bearing:.0f} mils is outside every sector")
                continue
            if target.id not in assigned[sector.id]:
                assigned[sector.id].append(target.id)
        return [dataclasses.replace(s, assigned_targets=tuple(assigned[s.id])) for s in sectors]

    @staticmethod
    def calculate_fire_distribution(targets: Sequence[FPFTarget], sectors: Sequence[FPFSector],
                                    number_of_guns: int) -> List[FPFFireDistribution]:
        """Tubes and rounds per target in priority order.

        Primary targets get 40% of the tubes (at least 2), alternate 30% and supplemental
        20% (at least 1), never more than the section has. Rounds per tube are 12, 8 and 4.
        """
        if number_of_guns < 1:
            raise ValueError("At least one gun is required")
        distribution = []
        ordered = sorted(targets, key=lambda t: _PRIORITY_ORDER[t.priority])
        for order, target in enumerate(ordered, start=1):
            share, minimum = _TUBE_SHARE[target.priority]
            tubes = min(number_of_guns, max(minimum, math.floor(number_of_guns * share)))
            rounds = _ROUNDS_PER_TUBE[target.priority]
            sector = next((s for s in sectors if target.id in s.assigned_targets), None)
            sector_name = sector.name if sector is not None else 'Unassigned'
            distribution.append(FPFFireDistribution(
                target_id=target.id,
                recommended_tubes=tubes,
                recommended_rounds=rounds,
                firing_order=order,
                justification=(f"{target.priority.upper()} target in Sector {sector_name}: "
                               f"{tubes} tubes, {rounds} rds/tube. {_PRIORITY_JUSTIFICATION[target.priority]}"),
            ))
        return distribution

    def generate_tactical_recommendations(self, targets: Sequence[FPFTarget], sectors: Sequence[FPFSector],
                                          analysis: FPFCoverageAnalysis, number_of_guns: int) -> List[str]:
        """Planning warnings for large gaps, excessive overlap and tube shortages."""
        recommendations = []
        if analysis.gaps_in_coverage:
            largest = max(analysis.gaps_in_coverage, key=lambda g: g.gap_size)
            if largest.gap_size > CRITICAL_GAP_MILS:
                recommendations.append(
                    f"CRITICAL: Large coverage gap of {largest.gap_size} mils from {largest.start_azimuth} "
                    f"to {largest.end_azimuth} mils. Consider additional FPF targets.")

        limit = self.optimal_overlap_mils * 2
        excessive = [o for o in analysis.overlapping_areas if o.overlap_size > limit]
        if excessive:
            recommendations.append(f"Consider reducing overlap between sectors - {len(excessive)} areas "
                                   f"have excessive overlap > {limit:g} mils.")

        if targets and number_of_guns < len(targets):
            recommendations.append(f"WARNING: {len(targets)} FPF targets for {number_of_guns} guns. "
                                   "Consider prioritizing targets or requesting additional tubes.")

        assigned_ids = {target_id for s in sectors for target_id in s.assigned_targets}
        unassigned_primary = [t for t in targets if t.priority == 'primary' and t.id not in assigned_ids]
        if unassigned_primary:
            recommendations.append(f"{len(unassigned_primary)} primary FPF targets not assigned to sectors. "
                                   "Review sector boundaries.")
        return recommendations
