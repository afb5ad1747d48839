"""Fire direction library for mortar firing solutions."""

import importlib.metadata

__version__ = importlib.metadata.version("py_fdc")
__author__ = "py_fdc developers"

__credits__ = ["py_fdc developers"]

# Standard library imports
import os
import sys

# Third-party imports
from typing_extensions import Any, Optional

# Local imports
from .config import FdcConfig, basic_config, get_config
from .logger import logger as log

if sys.version_info[:2] < (3, 11):
    import tomli as tomllib
else:
    import tomllib


def _load_config(filepath: Optional[str] = None, suppress_warnings: bool = False) -> None:
    """Load configuration from a .pyfdc.toml file.

    Args:
        filepath: Path to configuration file. If None, searches for .pyfdc.toml or pyfdc.toml
        suppress_warnings: If True, suppress warning messages
    """
    def find_pyfdc_toml(start_dir: str = os.getcwd()) -> Optional[str]:
        """Search for the pyfdc.toml file starting from the specified directory.

        Args:
            start_dir: The directory to start searching from. Default is the current working directory.

        Returns:
            The absolute path to the pyfdc.toml file if found, otherwise None.
        """
        current_dir = os.path.abspath(start_dir)
        while True:
            for candidate in (os.path.join(current_dir, '.pyfdc.toml'),
                              os.path.join(current_dir, 'pyfdc.toml')):
                if os.path.exists(candidate):
                    return os.path.abspath(candidate)

            parent_dir = os.path.dirname(current_dir)
            # reached the filesystem root
            if parent_dir == current_dir:
                return None
            current_dir = parent_dir

    if filepath is None:
        filepath = find_pyfdc_toml()

    if filepath is not None:
        log.debug(f"Found {os.path.basename(filepath)} at {os.path.dirname(filepath)}")

        with open(filepath, "rb") as fp:
            _config = tomllib.load(fp)

        if _pyfdc := _config.get('pyfdc'):
            unknown = set(_pyfdc) - set(FdcConfig._fields)
            if unknown and not suppress_warnings:
                log.warning(f"Config has unknown `pyfdc` keys: {', '.join(sorted(unknown))}")
            basic_config(get_config()._replace(**{k: float(v) for k, v in _pyfdc.items()
                                                  if k in FdcConfig._fields}))
        else:
            if not suppress_warnings:
                log.warning("Config has no `pyfdc` section")

    log.debug("Fire direction config load success")


def _basic_config(filename: Optional[str] = None, suppress_warnings: bool = False, **overrides: Any) -> None:
    """Load library configuration from file or keyword overrides.

    Args:
        filename: Configuration file path
        suppress_warnings: If True, suppress warning messages
        **overrides: FdcConfig fields to set directly

    Raises:
        ValueError: If both filename and overrides are provided, or an override is unknown
    """
    if filename and overrides:
        raise ValueError("Can't use config overrides and config file at same time")
    if overrides:
        unknown = set(overrides) - set(FdcConfig._fields)
        if unknown:
            raise ValueError(f"Unknown config fields: {', '.join(sorted(unknown))}")
        basic_config(get_config()._replace(**overrides))
    else:
        # trying to load definitions from pyfdc.toml
        _load_config(filename, suppress_warnings)


basicConfig = _basic_config

basicConfig()


from .config import restore_defaults
from .exceptions import (GridError, MalformedGridError, OutOfGridRangeError,
                         SolverRuntimeError, NoBallisticDataError, RangeUnattainableError)
from .fpf import (FPFSector, FPFTarget, CoverageGap, SectorOverlap, FPFCoverageAnalysis,
                  FPFFireDistribution, FPFCoverageAnalyzer)
from .geodesy import (ObserverAdjustment, FireMissionData, distance, azimuth, back_azimuth,
                      project_polar, apply_observer_adjustment, fire_mission, normalize_mils)
from .grid import GridCoordinate, parse_grid, format_grid, is_valid_grid
from .interface import FireDirectionCalculator
from .interpolation import InterpolationMethod, InterpolationMethodEnum, interpolate_2_pt
from .interpolator import (create_interpolator_config, InterpolatorConfig, InterpolatorConfigDict,
                           BallisticInterpolator, BallisticSolution, DerivativeAccuracy, RangeCapabilities)
from .logger import logger, enable_file_logging, disable_file_logging
from .multi_gun import (GunPosition, MultiGunSpread, GunSolution, SynchronizedFireSolution,
                        LoadDistribution, MultiGunCoordinator)
from .solver import FireMissionMethodEnum, FireSolution, AdjustedFireSolution, FireDirectionSolver
from .tables import BallisticRow, BallisticTable, TableStoreProtocol, load_table_csv

# DRY: build __all__ from global symbols
_SKIP_GLOBALS = {
    # Skip Python builtins
    "__name__", "__doc__", "__package__", "__loader__", "__spec__",
    "__file__", "__cached__", "__builtins__",
    # Skip imported modules
    "tomllib", "sys", "os", "importlib",
    # Skip typing helpers and submodules
    "Any", "Optional", "config", "exceptions", "fpf", "geodesy", "grid", "interface",
    "interpolation", "interpolator", "multi_gun", "solver", "tables",
    # Skip private/internal symbols
    "_load_config", "_basic_config",
}
# Build __all__ from the module's global namespace
__all__ = [
    name for name in globals()
    if not name.startswith("_") and name not in _SKIP_GLOBALS
]