import logging

import pytest

from py_fdc.__main__ import get_arg_parser, main
from py_fdc.logger import logger

CSV_TEXT = """\
system_id,round_id,charge_level,range_m,elevation_mils,time_of_flight_s,avg_dispersion_m
1,1,0,1000,800,20.0,10
1,1,0,2000,1000,25.0,20
"""


@pytest.fixture
def table_csv(tmp_path):
    path = tmp_path / "table.csv"
    path.write_text(CSV_TEXT, encoding="utf-8")
    return str(path)


def test_mission(capsys):
    assert main(["mission", "1000010000", "1100010000"]) == 0
    out = capsys.readouterr().out
    assert "Distance: 1000.0 m" in out
    assert "Azimuth: 1600 mils" in out
    assert "Back azimuth: 4800 mils" in out


def test_polar(capsys):
    assert main(["polar", "1000010000", "3200", "500"]) == 0
    assert capsys.readouterr().out.strip() == "1000009500"


def test_solve(capsys, table_csv):
    assert main(["solve", "1000010000", "1000011500", "--table", table_csv, "--system", "1", "--round", "1"]) == 0
    out = capsys.readouterr().out
    assert "Elevation: 900 mils" in out
    assert "Interpolated: linear" in out


def test_solve_adjusted(capsys, table_csv):
    assert main(["solve", "1000010000", "1000011500", "-t", table_csv, "-s", "1", "-r", "1",
                 "--observer", "1000009000", "--range-adj", "100"]) == 0
    out = capsys.readouterr().out
    assert "Adjusted target: 1000011600" in out
    assert "Range: 1600 m" in out


@pytest.mark.parametrize(
    "args",
    [
        ["mission", "12345", "1000010000"],
        ["polar", "0000000000", "3200", "10"],
    ],
)
def test_errors_exit_1(args):
    assert main(args) == 1


def test_unattainable_range_exits_1(table_csv):
    assert main(["solve", "1000010000", "1000015000", "-t", table_csv, "-s", "1", "-r", "1"]) == 1


def test_command_required():
    with pytest.raises(SystemExit):
        get_arg_parser().parse_args([])


def test_log_file_records_errors(tmp_path):
    path = tmp_path / "pyfdc.log"
    assert main(["--log-file", str(path), "mission", "12345", "1000010000"]) == 1
    assert "ERROR:py_fdc:" in path.read_text(encoding="utf-8")
    assert not any(isinstance(h, logging.FileHandler) for h in logger.handlers)
