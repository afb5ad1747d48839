"""Numeric grid references within a single 100 km square.

Grid strings carry an easting half followed by a northing half. Six, eight and ten digit
references are accepted; every coordinate is normalized to five digits per axis (1 m
resolution) by right-padding each half with zeros, so a shorter reference denotes the
south-west corner of its cell:

    >>> parse_grid("123456")
    GridCoordinate(easting=12300, northing=45600, precision=6)
    >>> format_grid(parse_grid("123456"))
    '1230045600'

Formatting always produces ten digits. The round trip is therefore lossy for 6 and 8
digit inputs; precision is lost to the cell's south-west corner.
"""
from dataclasses import dataclass

from typing_extensions import Union

from py_fdc.constants import cGridDigitsPerAxis, cGridMax, cGridPrecisions
from py_fdc.exceptions import MalformedGridError, OutOfGridRangeError

__all__ = ('GridCoordinate', 'GridLike', 'parse_grid', 'format_grid', 'is_valid_grid', 'as_coordinate')


@dataclass(frozen=True)
class GridCoordinate:
    """Normalized grid position.

    Attributes:
        easting: Easting in meters inside the 100 km square, [0, 99999].
        northing: Northing in meters inside the 100 km square, [0, 99999].
        precision: Number of digits of the grid it was parsed from (6, 8 or 10).
    """

    easting: int
    northing: int
    precision: int = 10

    def __post_init__(self) -> None:
        if not (0 <= self.easting <= cGridMax and 0 <= self.northing <= cGridMax):
            raise OutOfGridRangeError(self.easting, self.northing)

    @classmethod
    def from_meters(cls, easting: float, northing: float) -> 'GridCoordinate':
        """Round a Cartesian position to the nearest meter and wrap it as a coordinate.

        Raises:
            OutOfGridRangeError: If either rounded component is outside [0, 99999].
        """
        return cls(int(round(easting)), int(round(northing)))

    def __str__(self) -> str:
        return format_grid(self)


GridLike = Union[str, GridCoordinate]


def parse_grid(text: str) -> GridCoordinate:
    """Parse a 6, 8 or 10 digit grid reference.

    Whitespace anywhere in the string is ignored.

    Args:
        text: Grid reference string.

    Returns:
        Normalized GridCoordinate.

    Raises:
        MalformedGridError: On odd or unsupported length, or any non-digit character.
    """
    if not isinstance(text, str):
        raise MalformedGridError(repr(text), "grid must be a string")
    clean = "".join(text.split())
    if not clean:
        raise MalformedGridError(text, "empty grid")
    if not (clean.isascii() and clean.isdigit()):
        raise MalformedGridError(text, "grid must contain digits only")
    if len(clean) % 2 != 0:
        raise MalformedGridError(text, f"odd number of digits ({len(clean)})")
    if len(clean) not in cGridPrecisions:
        raise MalformedGridError(text, f"unsupported precision ({len(clean)} digits)")

    half = len(clean) // 2
    easting = clean[:half].ljust(cGridDigitsPerAxis, '0')
    northing = clean[half:].ljust(cGridDigitsPerAxis, '0')
    return GridCoordinate(int(easting), int(northing), len(clean))


def format_grid(coord: GridCoordinate) -> str:
    """Render a coordinate as a zero-padded 10 digit grid string."""
    return f"{coord.easting:0{cGridDigitsPerAxis}d}{coord.northing:0{cGridDigitsPerAxis}d}"


def is_valid_grid(text: str) -> bool:
    try:
        parse_grid(text)
    except MalformedGridError:
        return False
    return True


def as_coordinate(grid: GridLike) -> GridCoordinate:
    """Accept either a grid string or an already parsed coordinate."""
    if isinstance(grid, GridCoordinate):
        return grid
    return parse_grid(grid)
