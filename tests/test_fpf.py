import pytest

from py_fdc.fpf import CoverageGap, FPFCoverageAnalyzer, FPFSector, FPFTarget, SectorOverlap

MORTAR = "5000050000"


def sector(sector_id, start, end, **kwargs):
    return FPFSector(sector_id, sector_id.title(), start, end, **kwargs)


@pytest.fixture
def analyzer():
    return FPFCoverageAnalyzer()


class TestSector:

    @pytest.mark.parametrize("start, end", [(-1, 100), (0, 6400), (6400, 0)])
    def test_azimuth_domain(self, start, end):
        with pytest.raises(ValueError):
            sector("s", start, end)

    def test_unknown_priority(self):
        with pytest.raises(ValueError):
            sector("s", 0, 100, priority='urgent')

    @pytest.mark.parametrize(
        "start, end, width, inside, outside",
        [
            (0, 1600, 1600, [0, 1599], [1600, 6399]),
            (6000, 400, 800, [6000, 6399, 0, 399], [400, 5999]),
            (5600, 0, 800, [5600, 6399], [0, 5599]),
            (100, 100, 0, [], [100]),
        ],
    )
    def test_width_and_contains(self, start, end, width, inside, outside):
        s = sector("s", start, end)
        assert s.width == width
        assert all(s.contains(a) for a in inside)
        assert not any(s.contains(a) for a in outside)


class TestAnalyzeCoverage:

    def test_gap_between_two_sectors(self, analyzer):
        analysis = analyzer.analyze_coverage([sector("a", 0, 1600), sector("b", 2400, 4000)])
        assert CoverageGap(1600, 2400, 800) in analysis.gaps_in_coverage
        assert analysis.gaps_in_coverage == (CoverageGap(1600, 2400, 800), CoverageGap(4000, 0, 2400))
        assert analysis.total_coverage_angle == 3200
        assert analysis.overlapping_areas == ()

    def test_input_order_irrelevant(self, analyzer):
        sectors = [sector("b", 2400, 4000), sector("a", 0, 1600)]
        assert analyzer.analyze_coverage(sectors) == analyzer.analyze_coverage(sectors[::-1])

    def test_gap_through_north(self, analyzer):
        analysis = analyzer.analyze_coverage([sector("a", 1000, 5000)])
        assert analysis.gaps_in_coverage == (CoverageGap(5000, 1000, 2400),)

    def test_wrapping_sector_closes_gap(self, analyzer):
        analysis = analyzer.analyze_coverage([sector("a", 0, 3200), sector("b", 3200, 0)])
        assert analysis.gaps_in_coverage == ()
        assert analysis.total_coverage_angle == 6400

    def test_no_sectors(self, analyzer):
        analysis = analyzer.analyze_coverage([])
        assert analysis.gaps_in_coverage == (CoverageGap(0, 0, 6400),)
        assert analysis.total_coverage_angle == 0

    def test_overlap(self, analyzer):
        analysis = analyzer.analyze_coverage([sector("a", 0, 1000), sector("b", 800, 2000)])
        assert analysis.overlapping_areas == (SectorOverlap("a", "b", 800, 1000, 200),)
        assert analysis.total_coverage_angle == 2000

    def test_overlap_through_north(self, analyzer):
        analysis = analyzer.analyze_coverage([sector("a", 6000, 400), sector("b", 6200, 800)])
        assert analysis.overlapping_areas == (SectorOverlap("a", "b", 6200, 400, 600),)
        assert analysis.total_coverage_angle == 1200

    def test_nested_sector(self, analyzer):
        analysis = analyzer.analyze_coverage([sector("a", 0, 3000), sector("b", 1000, 1500)])
        assert analysis.overlapping_areas == (SectorOverlap("a", "b", 1000, 1500, 500),)

    def test_adjacent_sectors_do_not_overlap(self, analyzer):
        analysis = analyzer.analyze_coverage([sector("a", 0, 800), sector("b", 800, 1600)])
        assert analysis.overlapping_areas == ()

    def test_sectors_not_mutated(self, analyzer):
        sectors = [sector("a", 0, 1600, assigned_targets=("t1",)), sector("b", 2400, 4000)]
        before = list(sectors)
        analyzer.analyze_coverage(sectors)
        assert sectors == before

    def test_recommendations(self, analyzer):
        sectors = [sector("a", 0, 1600, assigned_targets=("t1",)), sector("b", 2400, 4000)]
        recommendations = analyzer.analyze_coverage(sectors).recommendations
        assert any("2 coverage gaps" in r for r in recommendations)
        assert any("1 sectors have no assigned targets" in r for r in recommendations)

    def test_many_overlaps_recommendation(self, analyzer):
        sectors = [sector(f"s{i}", 0, 1000 + i) for i in range(3)]
        recommendations = analyzer.analyze_coverage(sectors).recommendations
        assert not any("overlapping areas" in r for r in recommendations)
        sectors.append(sector("s3", 500, 1500))
        recommendations = analyzer.analyze_coverage(sectors).recommendations
        assert any("6 overlapping areas" in r for r in recommendations)


class TestDefaultSectors:

    def test_eight_sectors_cover_circle(self, analyzer):
        sectors = analyzer.create_default_sectors()
        assert [s.name for s in sectors][:3] == ['Alpha', 'Bravo', 'Charlie']
        assert len(sectors) == 8
        assert all(s.width == 800 for s in sectors)
        assert [s.priority for s in sectors].count('primary') == 3
        assert [s.priority for s in sectors].count('supplemental') == 2
        analysis = analyzer.analyze_coverage(sectors)
        assert analysis.gaps_in_coverage == ()
        assert analysis.overlapping_areas == ()
        assert analysis.total_coverage_angle == 6400

    def test_rotated(self, analyzer):
        sectors = analyzer.create_default_sectors(base_azimuth=400)
        assert (sectors[0].azimuth_start, sectors[0].azimuth_end) == (400, 1200)
        assert (sectors[-1].azimuth_start, sectors[-1].azimuth_end) == (6000, 400)


class TestTargets:
    TARGETS = [
        FPFTarget("t-north", "North", "5000051000", 'primary'),
        FPFTarget("t-east", "East", "5100049900", 'alternate'),
        FPFTarget("t-sw", "South-west", "4900048500", 'supplemental'),
    ]

    def test_assign_by_true_azimuth(self, analyzer):
        sectors = analyzer.create_default_sectors()
        assigned = analyzer.assign_targets_to_sectors(MORTAR, self.TARGETS, sectors)
        by_id = {s.id: s.assigned_targets for s in assigned}
        assert by_id['sector-1'] == ("t-north",)
        # about 1702 mils
        assert by_id['sector-3'] == ("t-east",)
        # about 3799 mils
        assert by_id['sector-5'] == ("t-sw",)
        assert all(s.assigned_targets == () for s in sectors)

    def test_target_outside_all_sectors(self, analyzer):
        assigned = analyzer.assign_targets_to_sectors(MORTAR, self.TARGETS, [sector("s", 0, 100)])
        assert assigned[0].assigned_targets == ("t-north",)

    def test_fire_distribution(self, analyzer):
        sectors = analyzer.assign_targets_to_sectors(MORTAR, self.TARGETS, analyzer.create_default_sectors())
        distribution = analyzer.calculate_fire_distribution(list(reversed(self.TARGETS)), sectors, 4)
        assert [d.target_id for d in distribution] == ["t-north", "t-east", "t-sw"]
        assert [d.firing_order for d in distribution] == [1, 2, 3]
        assert [d.recommended_tubes for d in distribution] == [2, 1, 1]
        assert [d.recommended_rounds for d in distribution] == [12, 8, 4]
        assert distribution[0].justification.startswith("PRIMARY target in Sector Alpha: 2 tubes, 12 rds/tube.")

    @pytest.mark.parametrize("guns, tubes", [(1, [1, 1, 1]), (10, [4, 3, 2])])
    def test_tubes_scale_with_section(self, analyzer, guns, tubes):
        distribution = analyzer.calculate_fire_distribution(self.TARGETS, [], guns)
        assert [d.recommended_tubes for d in distribution] == tubes
        assert "Sector Unassigned" in distribution[0].justification

    def test_fire_distribution_needs_guns(self, analyzer):
        with pytest.raises(ValueError):
            analyzer.calculate_fire_distribution(self.TARGETS, [], 0)

    def test_tactical_recommendations(self, analyzer):
        sectors = [sector("a", 0, 1600), sector("b", 1400, 2400), sector("c", 4000, 4800)]
        analysis = analyzer.analyze_coverage(sectors)
        recommendations = analyzer.generate_tactical_recommendations(self.TARGETS, sectors, analysis, 2)
        assert recommendations[0].startswith("CRITICAL: Large coverage gap of 1600 mils from 2400 to 4000")
        assert any("excessive overlap > 100 mils" in r for r in recommendations)
        assert any("3 FPF targets for 2 guns" in r for r in recommendations)
        assert any("1 primary FPF targets not assigned" in r for r in recommendations)

    def test_tactical_recommendations_clean(self):
        analyzer = FPFCoverageAnalyzer(optimal_overlap_mils=200)
        sectors = analyzer.assign_targets_to_sectors(MORTAR, self.TARGETS, analyzer.create_default_sectors())
        analysis = analyzer.analyze_coverage(sectors)
        assert analyzer.generate_tactical_recommendations(self.TARGETS, sectors, analysis, 3) == []
