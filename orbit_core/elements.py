"""
SGP4 Element Initialization

Converts raw TLE elements to SGP4 units and derives the one-time
initialization state used by every propagation call: the Brouwer (un-Kozai)
mean motion and semi-major axis, the atmospheric drag coefficients, and the
secular rates of node, perigee and mean anomaly due to J2, J3 and J4.

Units inside SGP4 are earth radii for distance, minutes for time and
radians for angles.

Implementation details:
- Follows the near-Earth branch of sgp4init/initl in Vallado et al. (2006)
- Perigee-dependent density parameters s and q0 for perigees below 156 km
- Drag terms above first order are dropped for perigees below 220 km
- Mean-anomaly and perigee drag terms vanish for e <= 1e-4 instead of
  dividing by the eccentricity
- The 1 + cos(i) divisor of the long-period coefficient is floored at
  1.5e-12 for retrograde equatorial orbits
- Near the critical inclination (1 - 5 cos^2 i = 0) the apsidal rate is a
  polynomial in cos^2 i and is evaluated directly, never divided by

References:
- Vallado, D. A., et al. (2006). "Revisiting Spacetrack Report #3." AIAA 2006-6753
- Hoots, F. R., & Roehrich, R. L. (1980). "Spacetrack Report No. 3"
"""

import logging
import math
from typing import NamedTuple, Tuple

from orbit_core.errors import InvalidElementsError
from orbit_core.gravity import GravityConst
from orbit_core.tle_parser import RawElements

logger = logging.getLogger(__name__)

DEG2RAD = math.pi / 180.0
TWOPI = 2.0 * math.pi
XPDOTP = 1440.0 / (2.0 * math.pi)  # rev/day to rad/min
X2O3 = 2.0 / 3.0

DEEP_SPACE_PERIOD_MINUTES = 225.0
SIMPLIFIED_DRAG_PERIGEE_KM = 220.0
SMALL_ECCENTRICITY = 1.0e-4
RETROGRADE_DIVISOR_FLOOR = 1.5e-12

NEAR_EARTH = "near_earth"
DEEP_SPACE = "deep_space"


class CanonicalElements(NamedTuple):
    """Mean elements at epoch in radians and radians per minute."""

    inclination: float
    raan: float
    eccentricity: float
    arg_perigee: float
    mean_anomaly: float
    no_kozai: float  # rad/min
    ndot: float  # rad/min^2
    nddot: float  # rad/min^3
    bstar: float  # 1/earth radii
    semi_major_axis: float  # earth radii
    apogee_radius: float  # a(1 + e) - 1, earth radii
    perigee_radius: float  # a(1 - e) - 1, earth radii


class InitState(NamedTuple):
    """Coefficients computed once per satellite and read by every propagation."""

    no_unkozai: float  # Brouwer mean motion (rad/min)
    ao: float  # Brouwer semi-major axis (earth radii)
    altp: float  # perigee height above the surface (earth radii)
    alta: float  # apogee height above the surface (earth radii)
    isimp: int  # 1 when perigee < 220 km: higher-order drag terms dropped
    regime: str
    # inclination invariants
    sinio: float
    cosio: float
    con41: float
    x1mth2: float
    x7thm1: float
    # drag
    eta: float
    cc1: float
    cc4: float
    cc5: float
    d2: float
    d3: float
    d4: float
    delmo: float
    sinmao: float
    omgcof: float
    xmcof: float
    t2cof: float
    t3cof: float
    t4cof: float
    t5cof: float
    # secular gravity rates (rad/min)
    mdot: float
    argpdot: float
    nodedot: float
    nodecf: float
    # long-period coefficients
    xlcof: float
    aycof: float

    @property
    def period_minutes(self) -> float:
        return TWOPI / self.no_unkozai

    @property
    def is_deep_space(self) -> bool:
        return self.regime == DEEP_SPACE


def to_canonical(raw: RawElements, gravity: GravityConst) -> CanonicalElements:
    """
    Convert raw TLE elements to SGP4 units.

    Args:
        raw: Elements as parsed from the TLE text
        gravity: Gravity constant set

    Returns:
        CanonicalElements

    Raises:
        InvalidElementsError: If the mean motion is not a positive finite
            number or the eccentricity is outside [0, 1)
    """
    if not math.isfinite(raw.mean_motion_rev_per_day) or raw.mean_motion_rev_per_day <= 0.0:
        raise InvalidElementsError(
            f"Mean motion must be positive and finite (got {raw.mean_motion_rev_per_day} rev/day)",
            code=2,
        )
    if not 0.0 <= raw.eccentricity < 1.0:
        raise InvalidElementsError(
            f"Eccentricity must lie in [0, 1) (got {raw.eccentricity})",
            code=1,
        )

    no_kozai = raw.mean_motion_rev_per_day / XPDOTP
    a = math.pow(no_kozai * gravity.tumin, -X2O3)

    return CanonicalElements(
        inclination=raw.inclination_deg * DEG2RAD,
        raan=raw.raan_deg * DEG2RAD,
        eccentricity=raw.eccentricity,
        arg_perigee=raw.arg_perigee_deg * DEG2RAD,
        mean_anomaly=raw.mean_anomaly_deg * DEG2RAD,
        no_kozai=no_kozai,
        ndot=raw.ndot / (XPDOTP * 1440.0),
        nddot=raw.nddot / (XPDOTP * 1440.0 * 1440),
        bstar=raw.bstar,
        semi_major_axis=a,
        apogee_radius=a * (1.0 + raw.eccentricity) - 1.0,
        perigee_radius=a * (1.0 - raw.eccentricity) - 1.0,
    )


def recover_mean_motion(elements: CanonicalElements, gravity: GravityConst) -> Tuple[float, float]:
    """
    Recover the Brouwer mean motion from the Kozai mean motion of the TLE.

    Returns:
        Tuple of (no_unkozai in rad/min, semi-major axis in earth radii)
    """
    ecco = elements.eccentricity
    omeosq = 1.0 - ecco * ecco
    rteosq = math.sqrt(omeosq)
    cosio = math.cos(elements.inclination)
    cosio2 = cosio * cosio

    ak = math.pow(gravity.xke / elements.no_kozai, X2O3)
    d1 = 0.75 * gravity.j2 * (3.0 * cosio2 - 1.0) / (rteosq * omeosq)
    delta = d1 / (ak * ak)
    adel = ak * (1.0 - delta * delta - delta * (1.0 / 3.0 + 134.0 * delta * delta / 81.0))
    delta = d1 / (adel * adel)
    no_unkozai = elements.no_kozai / (1.0 + delta)

    ao = math.pow(gravity.xke / no_unkozai, X2O3)
    return no_unkozai, ao


def initialize(raw: RawElements, gravity: GravityConst) -> Tuple[CanonicalElements, InitState]:
    """
    Derive canonical elements and the SGP4 initialization state.

    Args:
        raw: Parsed TLE elements
        gravity: Gravity constant set

    Returns:
        Tuple of (CanonicalElements, InitState)
    """
    elements = to_canonical(raw, gravity)

    radius = gravity.radius_earth_km
    j2 = gravity.j2
    j3oj2 = gravity.j3oj2
    j4 = gravity.j4

    ecco = elements.eccentricity
    inclo = elements.inclination
    argpo = elements.arg_perigee
    mo = elements.mean_anomaly
    bstar = elements.bstar

    # Density function parameters
    ss = 78.0 / radius + 1.0
    qzms2ttemp = (120.0 - 78.0) / radius
    qzms2t = qzms2ttemp * qzms2ttemp * qzms2ttemp * qzms2ttemp

    # Brouwer mean motion and inclination invariants
    no_unkozai, ao = recover_mean_motion(elements, gravity)
    eccsq = ecco * ecco
    omeosq = 1.0 - eccsq
    rteosq = math.sqrt(omeosq)
    cosio = math.cos(inclo)
    cosio2 = cosio * cosio
    sinio = math.sin(inclo)
    po = ao * omeosq
    con42 = 1.0 - 5.0 * cosio2
    con41 = -con42 - cosio2 - cosio2
    posq = po * po
    rp = ao * (1.0 - ecco)

    a = math.pow(no_unkozai * gravity.tumin, -X2O3)
    alta = a * (1.0 + ecco) - 1.0
    altp = a * (1.0 - ecco) - 1.0

    regime = NEAR_EARTH
    if TWOPI / no_unkozai >= DEEP_SPACE_PERIOD_MINUTES:
        regime = DEEP_SPACE

    isimp = 0
    if rp < SIMPLIFIED_DRAG_PERIGEE_KM / radius + 1.0:
        isimp = 1

    # For perigees below 156 km the values of s and q0 are altered
    sfour = ss
    qzms24 = qzms2t
    perige = (rp - 1.0) * radius
    if perige < 156.0:
        sfour = perige - 78.0
        if perige < 98.0:
            sfour = 20.0
        qzms24temp = (120.0 - sfour) / radius
        qzms24 = qzms24temp * qzms24temp * qzms24temp * qzms24temp
        sfour = sfour / radius + 1.0

    pinvsq = 1.0 / posq

    tsi = 1.0 / (ao - sfour)
    eta = ao * ecco * tsi
    etasq = eta * eta
    eeta = ecco * eta
    psisq = math.fabs(1.0 - etasq)
    coef = qzms24 * math.pow(tsi, 4.0)
    coef1 = coef / math.pow(psisq, 3.5)
    cc2 = coef1 * no_unkozai * (
        ao * (1.0 + 1.5 * etasq + eeta * (4.0 + etasq))
        + 0.375 * j2 * tsi / psisq * con41 * (8.0 + 3.0 * etasq * (8.0 + etasq))
    )
    cc1 = bstar * cc2
    cc3 = 0.0
    if ecco > SMALL_ECCENTRICITY:
        cc3 = -2.0 * coef * tsi * j3oj2 * no_unkozai * sinio / ecco
    x1mth2 = 1.0 - cosio2
    cc4 = 2.0 * no_unkozai * coef1 * ao * omeosq * (
        eta * (2.0 + 0.5 * etasq)
        + ecco * (0.5 + 2.0 * etasq)
        - j2 * tsi / (ao * psisq) * (
            -3.0 * con41 * (1.0 - 2.0 * eeta + etasq * (1.5 - 0.5 * eeta))
            + 0.75 * x1mth2 * (2.0 * etasq - eeta * (1.0 + etasq)) * math.cos(2.0 * argpo)
        )
    )
    cc5 = 2.0 * coef1 * ao * omeosq * (1.0 + 2.75 * (etasq + eeta) + eeta * etasq)

    # Secular rates from J2, J2^2 and J4
    cosio4 = cosio2 * cosio2
    temp1 = 1.5 * j2 * pinvsq * no_unkozai
    temp2 = 0.5 * temp1 * j2 * pinvsq
    temp3 = -0.46875 * j4 * pinvsq * pinvsq * no_unkozai
    mdot = (no_unkozai + 0.5 * temp1 * rteosq * con41
            + 0.0625 * temp2 * rteosq * (13.0 - 78.0 * cosio2 + 137.0 * cosio4))
    argpdot = (-0.5 * temp1 * con42
               + 0.0625 * temp2 * (7.0 - 114.0 * cosio2 + 395.0 * cosio4)
               + temp3 * (3.0 - 36.0 * cosio2 + 49.0 * cosio4))
    xhdot1 = -temp1 * cosio
    nodedot = xhdot1 + (0.5 * temp2 * (4.0 - 19.0 * cosio2)
                        + 2.0 * temp3 * (3.0 - 7.0 * cosio2)) * cosio

    omgcof = bstar * cc3 * math.cos(argpo)
    xmcof = 0.0
    if ecco > SMALL_ECCENTRICITY:
        xmcof = -X2O3 * coef * bstar / eeta
    nodecf = 3.5 * omeosq * xhdot1 * cc1
    t2cof = 1.5 * cc1

    if math.fabs(cosio + 1.0) > RETROGRADE_DIVISOR_FLOOR:
        xlcof = -0.25 * j3oj2 * sinio * (3.0 + 5.0 * cosio) / (1.0 + cosio)
    else:
        xlcof = -0.25 * j3oj2 * sinio * (3.0 + 5.0 * cosio) / RETROGRADE_DIVISOR_FLOOR
    aycof = -0.5 * j3oj2 * sinio

    delmotemp = 1.0 + eta * math.cos(mo)
    delmo = delmotemp * delmotemp * delmotemp
    sinmao = math.sin(mo)
    x7thm1 = 7.0 * cosio2 - 1.0

    d2 = d3 = d4 = 0.0
    t3cof = t4cof = t5cof = 0.0
    if isimp != 1:
        cc1sq = cc1 * cc1
        d2 = 4.0 * ao * tsi * cc1sq
        temp = d2 * tsi * cc1 / 3.0
        d3 = (17.0 * ao + sfour) * temp
        d4 = 0.5 * temp * ao * tsi * (221.0 * ao + 31.0 * sfour) * cc1
        t3cof = d2 + 2.0 * cc1sq
        t4cof = 0.25 * (3.0 * d3 + cc1 * (12.0 * d2 + 10.0 * cc1sq))
        t5cof = 0.2 * (3.0 * d4 + 12.0 * cc1 * d3 + 6.0 * d2 * d2
                       + 15.0 * cc1sq * (2.0 * d2 + cc1sq))

    if rp < 1.0:
        logger.warning(
            f"Satellite {raw.satnum}: epoch elements are sub-orbital "
            f"(perigee radius {rp * radius:.1f} km)"
        )
    logger.debug(
        f"Initialized satellite {raw.satnum}: regime={regime} isimp={isimp} "
        f"period={TWOPI / no_unkozai:.2f} min"
    )

    state = InitState(
        no_unkozai=no_unkozai,
        ao=ao,
        altp=altp,
        alta=alta,
        isimp=isimp,
        regime=regime,
        sinio=sinio,
        cosio=cosio,
        con41=con41,
        x1mth2=x1mth2,
        x7thm1=x7thm1,
        eta=eta,
        cc1=cc1,
        cc4=cc4,
        cc5=cc5,
        d2=d2,
        d3=d3,
        d4=d4,
        delmo=delmo,
        sinmao=sinmao,
        omgcof=omgcof,
        xmcof=xmcof,
        t2cof=t2cof,
        t3cof=t3cof,
        t4cof=t4cof,
        t5cof=t5cof,
        mdot=mdot,
        argpdot=argpdot,
        nodedot=nodedot,
        nodecf=nodecf,
        xlcof=xlcof,
        aycof=aycof,
    )
    return elements, state
