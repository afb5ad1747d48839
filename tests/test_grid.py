import pytest

from py_fdc.exceptions import MalformedGridError, OutOfGridRangeError
from py_fdc.grid import GridCoordinate, as_coordinate, format_grid, is_valid_grid, parse_grid


class TestParseGrid:

    @pytest.mark.parametrize(
        "text, easting, northing, precision",
        [
            ("123456", 12300, 45600, 6),
            ("12345678", 12340, 56780, 8),
            ("1234567890", 12345, 67890, 10),
            ("0000000000", 0, 0, 10),
            ("9999999999", 99999, 99999, 10),
            ("12345 67890", 12345, 67890, 10),
            ("  1000010000\n", 10000, 10000, 10),
        ],
    )
    def test_parse_precisions(self, text, easting, northing, precision):
        coord = parse_grid(text)
        assert (coord.easting, coord.northing, coord.precision) == (easting, northing, precision)

    def test_short_grids_snap_to_cell_corner(self):
        six, eight, ten = parse_grid("100100"), parse_grid("10001000"), parse_grid("1000010000")
        assert (six.easting, six.northing) == (10000, 10000)
        assert (eight.easting, eight.northing) == (10000, 10000)
        assert format_grid(six) == format_grid(eight) == format_grid(ten) == "1000010000"

    @pytest.mark.parametrize(
        "text",
        ["12345", "100001000", "1234", "123456789012", "12a456", "12-456", "", "   ", "١٢٣٤٥٦"],
    )
    def test_malformed(self, text):
        with pytest.raises(MalformedGridError) as exc_info:
            parse_grid(text)
        assert exc_info.value.grid == text
        assert not is_valid_grid(text)

    def test_non_string_rejected(self):
        with pytest.raises(MalformedGridError):
            parse_grid(1234567890)  # type: ignore[arg-type]

    def test_odd_length_reason(self):
        with pytest.raises(MalformedGridError, match="odd"):
            parse_grid("12345")

    def test_malformed_is_value_error(self):
        with pytest.raises(ValueError):
            parse_grid("abc")


class TestFormatGrid:

    def test_zero_padding(self):
        assert format_grid(GridCoordinate(5, 7)) == "0000500007"
        assert str(GridCoordinate(12345, 67890)) == "1234567890"

    def test_ten_digit_round_trip(self):
        for text in ("0000000000", "1234567890", "9999900001"):
            assert format_grid(parse_grid(text)) == text

    def test_as_coordinate_passthrough(self):
        coord = GridCoordinate(1, 2)
        assert as_coordinate(coord) is coord
        assert as_coordinate("0000100002") == GridCoordinate(1, 2)


class TestGridCoordinate:

    @pytest.mark.parametrize("easting, northing", [(-1, 0), (0, -1), (100000, 0), (0, 100000)])
    def test_out_of_range(self, easting, northing):
        with pytest.raises(OutOfGridRangeError) as exc_info:
            GridCoordinate(easting, northing)
        assert (exc_info.value.easting, exc_info.value.northing) == (easting, northing)

    def test_from_meters_rounds(self):
        assert GridCoordinate.from_meters(10.4, 20.6) == GridCoordinate(10, 21)

    def test_from_meters_out_of_range(self):
        with pytest.raises(OutOfGridRangeError):
            GridCoordinate.from_meters(-0.6, 0)
