import pytest

from py_fdc import FireDirectionCalculator, FPFSector, InterpolatorConfig, RangeUnattainableError
from py_fdc.multi_gun import SynchronizedFireSolution

from tests.fixtures_and_helpers import ROUND, SYSTEM

MORTAR = "1000010000"
TARGET = "1000011500"


@pytest.fixture
def fdc(table):
    return FireDirectionCalculator(table)


class TestFireDirectionCalculator:

    def test_solve(self, fdc):
        solution = fdc.solve(MORTAR, TARGET, SYSTEM, ROUND)
        assert (solution.elevation_mils, solution.charge_level) == (1100, 0)

    def test_solve_adjusted_noop(self, fdc):
        adjusted = fdc.solve_adjusted("1000009000", MORTAR, TARGET, SYSTEM, ROUND, 0, 0)
        assert adjusted.solution == fdc.solve(MORTAR, TARGET, SYSTEM, ROUND)

    def test_geometry(self, fdc):
        assert fdc.compute_target_from_polar(MORTAR, 0, 1500) == TARGET
        assert fdc.fire_mission(MORTAR, TARGET).azimuth_mils == 0

    def test_synchronize(self, fdc):
        master = fdc.solve(MORTAR, TARGET, SYSTEM, ROUND)
        spread = fdc.calculate_gun_spread(MORTAR, 2, 'line', 100)
        sync = fdc.synchronize(master, spread)
        assert isinstance(sync, SynchronizedFireSolution)
        assert len(sync.gun_solutions) == 2

    def test_analyze_coverage(self, fdc):
        analysis = fdc.analyze_coverage([FPFSector("a", "Alpha", 0, 1600), FPFSector("b", "Bravo", 2400, 4000)])
        assert analysis.gaps_in_coverage[0].gap_size == 800
        assert len(fdc.create_default_sectors()) == 8

    def test_range_capabilities(self, fdc):
        assert fdc.range_capabilities(SYSTEM, ROUND) == (500, 2000)

    def test_config(self, table):
        fdc = FireDirectionCalculator(table, InterpolatorConfig(max_extrapolation_m=0))
        assert fdc.interpolator.config.max_extrapolation_m == 0
        with pytest.raises(RangeUnattainableError):
            fdc.solve(MORTAR, "1000012100", SYSTEM, ROUND)

    def test_unknown_attribute(self, fdc):
        with pytest.raises(AttributeError, match="no attribute 'unknown_method'"):
            fdc.unknown_method()

    def test_rejects_non_store(self):
        with pytest.raises(TypeError):
            FireDirectionCalculator(table_store={})  # type: ignore[arg-type]
