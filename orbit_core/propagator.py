"""
SGP4 Near-Earth Propagator

Advances the mean elements of an initialized satellite to a time offset
from epoch and returns position and velocity in the TEME frame.

The computation is a chain of pure stages, each taking and returning an
explicit state value:

    secular_update -> check_decay -> long_period_periodics
        -> solve_kepler -> short_period_periodics -> to_teme

Every stage is a closed-form function of the initialization state and the
requested time, so calls never depend on one another and may run
concurrently on the same satellite.

References:
- Vallado, D. A., et al. (2006). "Revisiting Spacetrack Report #3." AIAA 2006-6753
- Hoots, F. R., & Roehrich, R. L. (1980). "Spacetrack Report No. 3"
"""

import logging
import math
from typing import NamedTuple

import numpy as np

from orbit_core.elements import X2O3, TWOPI, CanonicalElements, InitState
from orbit_core.errors import (
    KeplerConvergenceError,
    SatelliteDecayedError,
    UnsupportedRegimeError,
)
from orbit_core.gravity import GravityConst

logger = logging.getLogger(__name__)

KEPLER_TOLERANCE = 1.0e-12
KEPLER_MAX_ITERATIONS = 10
KEPLER_MAX_STEP = 0.95

MIN_ECCENTRICITY = 1.0e-6
ECCENTRICITY_DECAY_FLOOR = -0.001


class PositionVelocity(NamedTuple):
    """TEME position (km) and velocity (km/s) at one instant."""

    x: float
    y: float
    z: float
    xv: float
    yv: float
    zv: float

    @property
    def position(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z])

    @property
    def velocity(self) -> np.ndarray:
        return np.array([self.xv, self.yv, self.zv])

    @property
    def radius(self) -> float:
        return float(np.linalg.norm(self.position))

    @property
    def speed(self) -> float:
        return float(np.linalg.norm(self.velocity))


class MeanState(NamedTuple):
    """Mean elements at time t after secular gravity and drag updates."""

    tsince: float
    drag_factor: float  # a(t) / a0 = drag_factor^2
    am: float  # semi-major axis (earth radii)
    em: float
    nm: float  # mean motion (rad/min)
    inclm: float
    nodem: float
    argpm: float
    mm: float


class LongPeriodState(NamedTuple):
    """Elements with the J3 long-period terms applied, ready for Kepler."""

    axnl: float  # e cos(argp)
    aynl: float  # e sin(argp) plus the long-period term
    u: float  # mean longitude less node, the Kepler right-hand side
    nodep: float
    inclp: float


class KeplerSolution(NamedTuple):
    eo1: float  # eccentric longitude, E + argp
    sineo1: float
    coseo1: float
    iterations: int


class OsculatingState(NamedTuple):
    """Osculating radius, argument of latitude, node and inclination."""

    mrt: float  # radius (earth radii)
    su: float  # argument of latitude
    xnode: float
    xinc: float
    mvt: float  # radial velocity (earth radii per time unit)
    rvdot: float  # transverse velocity (earth radii per time unit)


def secular_update(init: InitState, elements: CanonicalElements, gravity: GravityConst,
                   tsince: float) -> MeanState:
    """
    Evaluate the secular effects of gravity and drag at time tsince.

    Args:
        init: Initialization state of the satellite
        elements: Canonical epoch elements
        gravity: Gravity constant set
        tsince: Minutes since epoch

    Returns:
        MeanState at tsince (eccentricity not yet range-checked)
    """
    t = tsince

    xmdf = elements.mean_anomaly + init.mdot * t
    argpdf = elements.arg_perigee + init.argpdot * t
    nodedf = elements.raan + init.nodedot * t
    argpm = argpdf
    mm = xmdf
    t2 = t * t
    nodem = nodedf + init.nodecf * t2
    tempa = 1.0 - init.cc1 * t
    tempe = elements.bstar * init.cc4 * t
    templ = init.t2cof * t2

    if init.isimp != 1:
        delomg = init.omgcof * t
        delmtemp = 1.0 + init.eta * math.cos(xmdf)
        delm = init.xmcof * (delmtemp * delmtemp * delmtemp - init.delmo)
        temp = delomg + delm
        mm = xmdf + temp
        argpm = argpdf - temp
        t3 = t2 * t
        t4 = t3 * t
        tempa = tempa - init.d2 * t2 - init.d3 * t3 - init.d4 * t4
        tempe = tempe + elements.bstar * init.cc5 * (math.sin(mm) - init.sinmao)
        templ = templ + init.t3cof * t3 + t4 * (init.t4cof + t * init.t5cof)

    am = math.pow(gravity.xke / init.no_unkozai, X2O3) * tempa * tempa
    nm = gravity.xke / math.pow(am, 1.5) if am > 0.0 else 0.0

    return MeanState(
        tsince=t,
        drag_factor=tempa,
        am=am,
        em=elements.eccentricity - tempe,
        nm=nm,
        inclm=elements.inclination,
        nodem=nodem,
        argpm=argpm,
        mm=mm + init.no_unkozai * templ,
    )


def check_decay(mean: MeanState) -> MeanState:
    """
    Reject orbits that have left their physical domain.

    Args:
        mean: Mean state with drag applied

    Returns:
        The mean state with angles reduced modulo 2 pi and a floor on
        eccentricity

    Raises:
        SatelliteDecayedError: If the semi-major axis is below one earth
            radius or the eccentricity is outside its valid range
    """
    t = mean.tsince
    if mean.drag_factor <= 0.0:
        raise SatelliteDecayedError(
            f"Satellite has decayed at t={t:.1f} min: drag term collapsed "
            f"(factor {mean.drag_factor:.6f})",
            tsince=t,
        )
    if mean.am < 1.0:
        raise SatelliteDecayedError(
            f"Satellite has decayed at t={t:.1f} min: semi-major axis "
            f"{mean.am:.6f} earth radii is below the surface",
            tsince=t,
        )
    if mean.em >= 1.0 or mean.em < ECCENTRICITY_DECAY_FLOOR:
        raise SatelliteDecayedError(
            f"Mean eccentricity {mean.em:.6f} left [0, 1) at t={t:.1f} min",
            tsince=t,
            code=1,
        )

    em = mean.em
    if em < MIN_ECCENTRICITY:
        em = MIN_ECCENTRICITY

    xlm = mean.mm + mean.argpm + mean.nodem
    nodem = math.fmod(mean.nodem, TWOPI)
    argpm = math.fmod(mean.argpm, TWOPI)
    xlm = math.fmod(xlm, TWOPI)
    mm = math.fmod(xlm - argpm - nodem, TWOPI)

    return mean._replace(em=em, nodem=nodem, argpm=argpm, mm=mm)


def long_period_periodics(mean: MeanState, init: InitState) -> LongPeriodState:
    """Apply the J3 long-period corrections to eccentricity and mean longitude."""
    ep = mean.em
    argpp = mean.argpm
    nodep = mean.nodem

    axnl = ep * math.cos(argpp)
    temp = 1.0 / (mean.am * (1.0 - ep * ep))
    aynl = ep * math.sin(argpp) + temp * init.aycof
    xl = mean.mm + argpp + nodep + temp * init.xlcof * axnl

    return LongPeriodState(
        axnl=axnl,
        aynl=aynl,
        u=math.fmod(xl - nodep, TWOPI),
        nodep=nodep,
        inclp=mean.inclm,
    )


def solve_kepler(u: float, axnl: float, aynl: float,
                 tolerance: float = KEPLER_TOLERANCE,
                 max_iterations: int = KEPLER_MAX_ITERATIONS,
                 tsince: float = 0.0) -> KeplerSolution:
    """
    Solve Kepler's equation in the eccentric longitude E + w.

    Solves u = Ew - axnl*sin(Ew) + aynl*cos(Ew) by Newton-Raphson seeded at
    u, each step limited to 0.95 rad. With axnl = e and aynl = 0 this is the
    classical M = E - e*sin(E).

    Args:
        u: Mean longitude less node (rad)
        axnl: e*cos(w)
        aynl: e*sin(w)
        tolerance: Convergence threshold on the Newton step (rad)
        max_iterations: Iteration bound
        tsince: Propagation time, reported in errors

    Returns:
        KeplerSolution

    Raises:
        KeplerConvergenceError: If the step is still above tolerance after
            max_iterations iterations
    """
    eo1 = u
    tem5 = 9999.9
    sineo1 = math.sin(eo1)
    coseo1 = math.cos(eo1)
    iterations = 0

    while math.fabs(tem5) >= tolerance and iterations < max_iterations:
        sineo1 = math.sin(eo1)
        coseo1 = math.cos(eo1)
        tem5 = 1.0 - coseo1 * axnl - sineo1 * aynl
        tem5 = (u - aynl * coseo1 + axnl * sineo1 - eo1) / tem5
        if math.fabs(tem5) >= KEPLER_MAX_STEP:
            tem5 = KEPLER_MAX_STEP if tem5 > 0.0 else -KEPLER_MAX_STEP
        eo1 = eo1 + tem5
        iterations += 1

    if math.fabs(tem5) >= tolerance:
        raise KeplerConvergenceError(
            f"Kepler's equation did not converge in {max_iterations} iterations "
            f"at t={tsince:.1f} min (last step {tem5:.3e} rad, "
            f"e={math.hypot(axnl, aynl):.6f})",
            tsince=tsince,
        )

    return KeplerSolution(eo1=eo1, sineo1=sineo1, coseo1=coseo1, iterations=iterations)


def short_period_periodics(mean: MeanState, lp: LongPeriodState, kepler: KeplerSolution,
                           init: InitState, gravity: GravityConst) -> OsculatingState:
    """
    Apply the J2 short-period corrections to radius, argument of latitude,
    node and inclination.

    Raises:
        SatelliteDecayedError: If the semi-latus rectum is negative or the
            osculating radius is below one earth radius
    """
    t = mean.tsince
    am = mean.am
    axnl = lp.axnl
    aynl = lp.aynl
    sineo1 = kepler.sineo1
    coseo1 = kepler.coseo1

    ecose = axnl * coseo1 + aynl * sineo1
    esine = axnl * sineo1 - aynl * coseo1
    el2 = axnl * axnl + aynl * aynl
    pl = am * (1.0 - el2)
    if pl < 0.0:
        raise SatelliteDecayedError(
            f"Semi-latus rectum is negative ({pl:.6f}) at t={t:.1f} min",
            tsince=t,
            code=4,
            stage="short_period",
        )

    rl = am * (1.0 - ecose)
    rdotl = math.sqrt(am) * esine / rl
    rvdotl = math.sqrt(pl) / rl
    betal = math.sqrt(1.0 - el2)
    temp = esine / (1.0 + betal)
    sinu = am / rl * (sineo1 - aynl - axnl * temp)
    cosu = am / rl * (coseo1 - axnl + aynl * temp)
    su = math.atan2(sinu, cosu)
    sin2u = (cosu + cosu) * sinu
    cos2u = 1.0 - 2.0 * sinu * sinu
    temp = 1.0 / pl
    temp1 = 0.5 * gravity.j2 * temp
    temp2 = temp1 * temp

    cosip = math.cos(lp.inclp)
    sinip = math.sin(lp.inclp)

    mrt = rl * (1.0 - 1.5 * temp2 * betal * init.con41) + 0.5 * temp1 * init.x1mth2 * cos2u
    su = su - 0.25 * temp2 * init.x7thm1 * sin2u
    xnode = lp.nodep + 1.5 * temp2 * cosip * sin2u
    xinc = lp.inclp + 1.5 * temp2 * cosip * sinip * cos2u
    mvt = rdotl - mean.nm * temp1 * init.x1mth2 * sin2u / gravity.xke
    rvdot = rvdotl + mean.nm * temp1 * (init.x1mth2 * cos2u + 1.5 * init.con41) / gravity.xke

    if mrt < 1.0:
        raise SatelliteDecayedError(
            f"Satellite has decayed at t={t:.1f} min: radius "
            f"{mrt * gravity.radius_earth_km:.1f} km is below the surface",
            tsince=t,
            stage="short_period",
        )

    return OsculatingState(mrt=mrt, su=su, xnode=xnode, xinc=xinc, mvt=mvt, rvdot=rvdot)


def to_teme(osc: OsculatingState, gravity: GravityConst) -> PositionVelocity:
    """Rotate the orbital-plane state into TEME and scale to km and km/s."""
    vkmpersec = gravity.radius_earth_km * gravity.xke / 60.0

    sinsu = math.sin(osc.su)
    cossu = math.cos(osc.su)
    snod = math.sin(osc.xnode)
    cnod = math.cos(osc.xnode)
    sini = math.sin(osc.xinc)
    cosi = math.cos(osc.xinc)
    xmx = -snod * cosi
    xmy = cnod * cosi
    ux = xmx * sinsu + cnod * cossu
    uy = xmy * sinsu + snod * cossu
    uz = sini * sinsu
    vx = xmx * cossu - cnod * sinsu
    vy = xmy * cossu - snod * sinsu
    vz = sini * cossu

    mr = osc.mrt * gravity.radius_earth_km
    return PositionVelocity(
        x=mr * ux,
        y=mr * uy,
        z=mr * uz,
        xv=(osc.mvt * ux + osc.rvdot * vx) * vkmpersec,
        yv=(osc.mvt * uy + osc.rvdot * vy) * vkmpersec,
        zv=(osc.mvt * uz + osc.rvdot * vz) * vkmpersec,
    )


def propagate_elements(init: InitState, elements: CanonicalElements, gravity: GravityConst,
                       tsince: float) -> PositionVelocity:
    """
    Run every propagation stage for one time.

    Args:
        init: Initialization state
        elements: Canonical epoch elements
        gravity: Gravity constant set the state was built with
        tsince: Minutes since epoch

    Returns:
        PositionVelocity in TEME (km, km/s)

    Raises:
        ValueError: If tsince is NaN or infinite
        UnsupportedRegimeError: For deep-space satellites
        SatelliteDecayedError: If the orbit has decayed at tsince
        KeplerConvergenceError: If Kepler's equation does not converge
    """
    # NaN passes none of the decay comparisons and would come out as a NaN state
    if not math.isfinite(tsince):
        raise ValueError(f"tsince must be a finite number of minutes, not {tsince}")

    if init.is_deep_space:
        logger.debug(f"Rejecting deep-space propagation at t={tsince:.1f} min")
        raise UnsupportedRegimeError(
            f"Orbital period {init.period_minutes:.1f} min is in the deep-space "
            f"regime (>= 225 min); SDP4 is not implemented",
            tsince=tsince,
        )

    mean = secular_update(init, elements, gravity, tsince)
    mean = check_decay(mean)
    lp = long_period_periodics(mean, init)
    kepler = solve_kepler(lp.u, lp.axnl, lp.aynl, tsince=tsince)
    osc = short_period_periodics(mean, lp, kepler, init, gravity)
    return to_teme(osc, gravity)


def propagate(satellite, tsince: float) -> PositionVelocity:
    """Propagate a Satellite to tsince minutes from its epoch."""
    return propagate_elements(satellite.init_state, satellite.elements, satellite.gravity, tsince)

