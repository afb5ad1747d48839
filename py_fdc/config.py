from typing import NamedTuple

from py_fdc.constants import (cMaxExtrapolationM, cTacticalWindowM, cMinGunSpacingM,
                              cMaxGunSpacingM, cOptimalOverlapMils)

__all__ = ('FdcConfig', 'basic_config', 'get_config', 'restore_defaults')


class FdcConfig(NamedTuple):
    max_extrapolation_m: float = cMaxExtrapolationM
    tactical_window_m: float = cTacticalWindowM
    min_gun_spacing_m: float = cMinGunSpacingM
    max_gun_spacing_m: float = cMaxGunSpacingM
    optimal_overlap_mils: float = cOptimalOverlapMils


_PYFDC_CONFIG = FdcConfig()


def basic_config(config: FdcConfig):
    global _PYFDC_CONFIG
    _PYFDC_CONFIG = config


def get_config() -> FdcConfig:
    return _PYFDC_CONFIG


def restore_defaults():
    basic_config(FdcConfig())
