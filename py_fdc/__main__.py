import argparse
import logging
import sys
from importlib import metadata

from py_fdc import logger
from py_fdc.exceptions import GridError, SolverRuntimeError
from py_fdc.interface import FireDirectionCalculator
from py_fdc.logger import disable_file_logging, enable_file_logging
from py_fdc.solver import FireDirectionSolver, FireMissionMethodEnum
from py_fdc.tables import load_table_csv

version = metadata.metadata("py_fdc")['Version']


def add_mission_parser(subparsers):
    mission = subparsers.add_parser('mission', help="Distance and azimuths between two grids")
    mission.add_argument("from_grid", help="Origin grid")
    mission.add_argument("to_grid", help="Destination grid")


def add_polar_parser(subparsers):
    polar = subparsers.add_parser('polar', help="Target grid from an observer polar plot")
    polar.add_argument("observer", help="Observer grid")
    polar.add_argument("azimuth", type=float, help="Azimuth to target, mils")
    polar.add_argument("distance", type=float, help="Distance to target, meters")


def add_solve_parser(subparsers):
    solve = subparsers.add_parser('solve', help="Fire solution from a firing table")
    solve.add_argument("mortar", help="Mortar grid")
    solve.add_argument("target", help="Target grid")

    table = solve.add_argument_group('Table', 'Firing table selection')
    table.add_argument("-t", "--table", required=True, nargs='+', help="Firing table CSV file(s)")
    table.add_argument("-s", "--system", required=True, type=int, help="Mortar system id")
    table.add_argument("-r", "--round", required=True, type=int, help="Round id")
    table.add_argument("-m", "--method", default=FireMissionMethodEnum.STANDARD.value,
                       choices=[m.value for m in FireMissionMethodEnum], help="Charge selection method")

    adjust = solve.add_argument_group('Adjustment', 'Observer correction')
    adjust.add_argument("-o", "--observer", help="Observer grid")
    adjust.add_argument("-ra", "--range-adj", type=float, default=0.0, help="Add (+) / drop (-), meters")
    adjust.add_argument("-da", "--dir-adj", type=float, default=0.0, help="Right (+) / left (-), mils")


def get_arg_parser():
    parser = argparse.ArgumentParser(
        prog='pyfdc',
        description="Tool for mortar fire direction calculations"
    )
    parser.add_argument("-v", "--version", action='version',
                        version=f'pyfdc v{version}', help="Show version")
    parser.add_argument("-d", "--debug", action="store_true", help="Enable debug messages")
    parser.add_argument("-l", "--log-file", help="Also write messages to this file")

    subparsers = parser.add_subparsers(dest='command', required=True)
    add_mission_parser(subparsers)
    add_polar_parser(subparsers)
    add_solve_parser(subparsers)
    return parser


def run(argv) -> None:
    if argv.command == 'mission':
        data = FireDirectionSolver.fire_mission(argv.from_grid, argv.to_grid)
        print(f"Distance: {data.distance_meters:.1f} m")
        print(f"Azimuth: {data.azimuth_mils} mils")
        print(f"Back azimuth: {data.back_azimuth_mils} mils")
    elif argv.command == 'polar':
        print(FireDirectionSolver.compute_target_from_polar(argv.observer, argv.azimuth, argv.distance))
    else:
        fdc = FireDirectionCalculator(load_table_csv(*argv.table))
        if argv.observer:
            solution = fdc.solve_adjusted(argv.observer, argv.mortar, argv.target, argv.system, argv.round,
                                          argv.range_adj, argv.dir_adj, argv.method)
            print(f"Adjusted target: {solution.adjusted_target_grid}")
        else:
            solution = fdc.solve(argv.mortar, argv.target, argv.system, argv.round, argv.method)
        print(f"Azimuth: {solution.azimuth_mils} mils")
        print(f"Elevation: {solution.elevation_mils} mils")
        print(f"Charge: {solution.charge_level}")
        print(f"Time of flight: {solution.time_of_flight_s} s")
        print(f"Range: {solution.range_meters} m")
        if solution.interpolated:
            print(f"Interpolated: {solution.interpolation_method.value}")
        if solution.reasoning:
            print(solution.reasoning)


def main(args=None) -> int:
    parser = get_arg_parser()
    argv = parser.parse_args(args)

    if argv.debug:
        logger.setLevel(logging.DEBUG)
        logger.info("Debug messages enabled")

    if argv.log_file:
        enable_file_logging(argv.log_file, level=logging.DEBUG if argv.debug else logging.INFO)

    try:
        run(argv)
    except (GridError, SolverRuntimeError, ValueError, OSError) as exc:
        logger.error(exc)
        return 1
    finally:
        disable_file_logging()
    return 0


if __name__ == '__main__':
    sys.exit(main())
