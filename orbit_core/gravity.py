"""
Gravity Constant Sets

Earth gravity constants used by SGP4, one immutable set per model.

Models:
    WGS72OLD: legacy constants with a hard-coded xke (matches old SGP4 output)
    WGS72:    standard WGS-72 constants, xke derived from mu and radius
    WGS84:    WGS-84 constants, xke derived from mu and radius

References:
    Vallado, D. A., Crawford, P., Hujsak, R., & Kelso, T. S. (2006).
    Revisiting Spacetrack Report #3. AIAA 2006-6753.
"""

import math
from enum import Enum
from typing import NamedTuple, Optional, Union


class GravityModel(Enum):
    """Gravity model identifiers"""

    WGS72OLD = "wgs72old"
    WGS72 = "wgs72"
    WGS84 = "wgs84"


class GravityConst(NamedTuple):
    mu: float  # km^3/s^2
    radius_earth_km: float  # km
    xke: float  # sqrt(mu) in earth radii^1.5 / min
    tumin: float  # minutes per time unit
    j2: float
    j3: float
    j4: float
    j3oj2: float


def _build(mu: float, radius_earth_km: float, j2: float, j3: float, j4: float,
           xke: Optional[float] = None) -> GravityConst:
    if xke is None:
        xke = 60.0 / math.sqrt(radius_earth_km * radius_earth_km * radius_earth_km / mu)
    return GravityConst(
        mu=mu,
        radius_earth_km=radius_earth_km,
        xke=xke,
        tumin=1.0 / xke,
        j2=j2,
        j3=j3,
        j4=j4,
        j3oj2=j3 / j2,
    )


# Built once at import; every satellite shares these instances
_GRAVITY_CONSTANTS = {
    GravityModel.WGS72OLD: _build(
        mu=398600.79964,
        radius_earth_km=6378.135,
        j2=0.001082616,
        j3=-0.00000253881,
        j4=-0.00000165597,
        xke=0.0743669161,
    ),
    GravityModel.WGS72: _build(
        mu=398600.8,
        radius_earth_km=6378.135,
        j2=0.001082616,
        j3=-0.00000253881,
        j4=-0.00000165597,
    ),
    GravityModel.WGS84: _build(
        mu=398600.5,
        radius_earth_km=6378.137,
        j2=0.00108262998905,
        j3=-0.00000253215306,
        j4=-0.00000161098761,
    ),
}


def resolve_model(model: Union[GravityModel, str]) -> GravityModel:
    """
    Resolve a gravity model identifier.

    Args:
        model: GravityModel member or its case-insensitive name ("wgs72", ...)

    Returns:
        GravityModel member

    Raises:
        ValueError: If the name is not a known model
    """
    if isinstance(model, GravityModel):
        return model
    try:
        return GravityModel(str(model).strip().lower())
    except ValueError:
        known = ", ".join(m.value for m in GravityModel)
        raise ValueError(f"Unknown gravity model {model!r} (expected one of: {known})")


def constants(model: Union[GravityModel, str] = GravityModel.WGS72) -> GravityConst:
    """Return the shared constant set for a gravity model."""
    return _GRAVITY_CONSTANTS[resolve_model(model)]
