"""Angular and grid constants for fire direction calculations.

Constant Categories:
    - Angular constants: the NATO mil circle
    - Grid constants: single 100 km square resolution
    - Runtime defaults: tolerances used when no configuration is loaded
"""

# Third-party imports
from typing_extensions import Final, Tuple

# =============================================================================
# Angular Constants
# =============================================================================

cMilCircle: Final[int] = 6400
"""Mils in a full circle"""

cHalfMilCircle: Final[int] = 3200
"""Mils in a half circle, used for back azimuths"""

cQuarterMilCircle: Final[int] = 1600
"""Mils in a right angle"""

# =============================================================================
# Grid Constants
# =============================================================================

cGridDigitsPerAxis: Final[int] = 5
"""Internal resolution of each grid component (1 m)"""

cGridMax: Final[int] = 99999
"""Largest representable easting/northing inside one 100 km square"""

cGridPrecisions: Final[Tuple[int, ...]] = (6, 8, 10)
"""Accepted grid string lengths"""

# =============================================================================
# Runtime Defaults
# =============================================================================

cMaxExtrapolationM: Final[float] = 200.0
"""Maximum distance outside table coverage that may be extrapolated (m)"""

cTacticalWindowM: Final[float] = 50.0
"""Table rows within this distance of the range are tactical candidates (m)"""

cMinGunSpacingM: Final[float] = 10.0
"""Minimum safe spacing between guns (m)"""

cMaxGunSpacingM: Final[float] = 1000.0
"""Maximum spacing for effective fire control (m)"""

cOptimalOverlapMils: Final[float] = 50.0
"""Desired overlap between adjacent FPF sectors (mils)"""

cTimeOfFlightDecimals: Final[int] = 1
"""Decimal places kept for commanded times of flight (s)"""

cDispersionDecimals: Final[int] = 1
"""Decimal places kept for average dispersion (m)"""
