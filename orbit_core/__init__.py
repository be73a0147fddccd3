"""
orbit_core: TLE ingestion and near-Earth SGP4 propagation.

    from orbit_core import Satellite

    sat = Satellite.from_tle(text)
    pv = sat.propagate(90.0)  # minutes since epoch, or a datetime
"""

from orbit_core.errors import (
    ERROR_CODES,
    InvalidElementsError,
    KeplerConvergenceError,
    PropagationError,
    SatelliteDecayedError,
    SGP4Error,
    TLEFormatError,
    UnsupportedRegimeError,
)
from orbit_core.gravity import GravityConst, GravityModel, constants
from orbit_core.propagator import PositionVelocity, propagate
from orbit_core.satellite import Satellite, from_tle
from orbit_core.tle_parser import RawElements, parse_lines, parse_tle

__version__ = "0.1.0"

__all__ = [
    "ERROR_CODES",
    "GravityConst",
    "GravityModel",
    "InvalidElementsError",
    "KeplerConvergenceError",
    "PositionVelocity",
    "PropagationError",
    "RawElements",
    "Satellite",
    "SatelliteDecayedError",
    "SGP4Error",
    "TLEFormatError",
    "UnsupportedRegimeError",
    "constants",
    "from_tle",
    "parse_lines",
    "parse_tle",
    "propagate",
]
