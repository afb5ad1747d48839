"""Ballistic table rows and table stores.

The interpolator never reads files itself; it is handed an object implementing
`TableStoreProtocol`. `BallisticTable` is the in-memory implementation, validated once
when rows are added, and `load_table_csv` fills one from a CSV export.

CSV layout (header row required, derivative columns may be empty):

    system_id,round_id,charge_level,range_m,elevation_mils,time_of_flight_s,avg_dispersion_m,d_elev_per_100m_mils,d_tof_per_100m_s
    1,1,0,100,1540,13.0,4,-18.5,-0.1
"""
from __future__ import annotations

import csv
import math
import os
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, TextIO, Union

from typing_extensions import Protocol, runtime_checkable

from py_fdc.constants import cMilCircle
from py_fdc.logger import logger

__all__ = (
    'BallisticRow',
    'TableStoreProtocol',
    'BallisticTable',
    'load_table_csv',
    'CSV_FIELDS',
)

CSV_FIELDS: Tuple[str, ...] = (
    'system_id', 'round_id', 'charge_level', 'range_m', 'elevation_mils',
    'time_of_flight_s', 'avg_dispersion_m', 'd_elev_per_100m_mils', 'd_tof_per_100m_s',
)


@dataclass(frozen=True)
class BallisticRow:
    """One firing table entry for a system/round/charge at a given range.

    Attributes:
        system_id: Mortar system identifier.
        round_id: Ammunition identifier.
        charge_level: Propellant charge, 0 or greater.
        range_m: Horizontal range in meters.
        elevation_mils: Quadrant elevation in mils.
        time_of_flight_s: Time of flight in seconds.
        avg_dispersion_m: Mean radial error at this range in meters.
        d_elev_per_100m_mils: Optional elevation change per 100 m of range.
        d_tof_per_100m_s: Optional time of flight change per 100 m of range.

    Raises:
        ValueError: If any field is out of its physical domain.
    """

    system_id: int
    round_id: int
    charge_level: int
    range_m: int
    elevation_mils: int
    time_of_flight_s: float
    avg_dispersion_m: float
    d_elev_per_100m_mils: Optional[float] = None
    d_tof_per_100m_s: Optional[float] = None

    def __post_init__(self) -> None:
        if self.charge_level < 0:
            raise ValueError(f"charge_level must be non-negative, got {self.charge_level}")
        if self.range_m < 0:
            raise ValueError(f"range_m must be non-negative, got {self.range_m}")
        if not 0 < self.elevation_mils < cMilCircle:
            raise ValueError(f"elevation_mils must be within (0, {cMilCircle}), got {self.elevation_mils}")
        if not self.time_of_flight_s > 0:
            raise ValueError(f"time_of_flight_s must be positive, got {self.time_of_flight_s}")
        if self.avg_dispersion_m < 0:
            raise ValueError(f"avg_dispersion_m must be non-negative, got {self.avg_dispersion_m}")
        for name in ('d_elev_per_100m_mils', 'd_tof_per_100m_s'):
            value = getattr(self, name)
            if value is not None and not math.isfinite(value):
                raise ValueError(f"{name} must be finite, got {value}")

    @property
    def key(self) -> Tuple[int, int, int, int]:
        return self.system_id, self.round_id, self.charge_level, self.range_m


@runtime_checkable
class TableStoreProtocol(Protocol):
    """Source of ballistic rows for a system/round pair.

    Implementations return rows sorted, or sortable, by `(charge_level, range_m)`.
    An empty sequence means there is no data for the pair.
    """

    def get_ballistic_rows(self, system_id: int, round_id: int) -> Sequence[BallisticRow]:
        ...


class BallisticTable:
    """In-memory table store keyed by (system_id, round_id)."""

    def __init__(self, rows: Iterable[BallisticRow] = ()) -> None:
        self._rows: Dict[Tuple[int, int], List[BallisticRow]] = {}
        self._keys: set = set()
        self.extend(rows)

    def add(self, row: BallisticRow) -> None:
        if not isinstance(row, BallisticRow):
            raise TypeError(f"Expected BallisticRow, got {type(row).__name__}")
        if row.key in self._keys:
            raise ValueError(f"Duplicate ballistic row for system {row.system_id}, round {row.round_id}, "
                             f"charge {row.charge_level}, range {row.range_m}m")
        self._keys.add(row.key)
        bucket = self._rows.setdefault((row.system_id, row.round_id), [])
        bucket.append(row)
        bucket.sort(key=lambda r: (r.charge_level, r.range_m))

    def extend(self, rows: Iterable[BallisticRow]) -> None:
        for row in rows:
            self.add(row)

    def get_ballistic_rows(self, system_id: int, round_id: int) -> Sequence[BallisticRow]:
        return tuple(self._rows.get((system_id, round_id), ()))

    def pairs(self) -> List[Tuple[int, int]]:
        """Available (system_id, round_id) pairs."""
        return sorted(self._rows)

    def __len__(self) -> int:
        return len(self._keys)


def _optional_float(value: Optional[str]) -> Optional[float]:
    if value is None or not value.strip():
        return None
    return float(value)


def _read_rows(stream: TextIO, source: str) -> List[BallisticRow]:
    reader = csv.DictReader(stream)
    missing = [name for name in CSV_FIELDS[:7] if name not in (reader.fieldnames or ())]
    if missing:
        raise ValueError(f"{source}: missing CSV columns {', '.join(missing)}")

    rows = []
    for record in reader:
        try:
            rows.append(BallisticRow(
                system_id=int(record['system_id']),
                round_id=int(record['round_id']),
                charge_level=int(record['charge_level']),
                range_m=int(record['range_m']),
                elevation_mils=int(record['elevation_mils']),
                time_of_flight_s=float(record['time_of_flight_s']),
                avg_dispersion_m=float(record['avg_dispersion_m']),
                d_elev_per_100m_mils=_optional_float(record.get('d_elev_per_100m_mils')),
                d_tof_per_100m_s=_optional_float(record.get('d_tof_per_100m_s')),
            ))
        except (TypeError, ValueError) as exc:
            raise ValueError(f"{source}, line {reader.line_num}: {exc}") from exc
    return rows


def load_table_csv(*sources: Union[str, 'os.PathLike[str]', TextIO]) -> BallisticTable:
    """Build a BallisticTable from one or more CSV files or open text streams.

    Raises:
        ValueError: If a required column is missing or a row fails validation.
            The message names the source and line.
    """
    table = BallisticTable()
    for source in sources:
        if hasattr(source, 'read'):
            rows = _read_rows(source, getattr(source, 'name', '<stream>'))  # type: ignore[arg-type]
        else:
            with open(source, newline='', encoding='utf-8') as fp:
                rows = _read_rows(fp, os.fspath(source))
        table.extend(rows)
        logger.info(f"Loaded {len(rows)} ballistic rows from {getattr(source, 'name', source)}")
    return table
