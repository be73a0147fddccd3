"""
SGP4 Orbital Propagation Demonstration

This script demonstrates the key capabilities of orbit_core:
- TLE parsing and validation
- Near-Earth SGP4 propagation in the TEME frame
- B* drag coefficient sensitivity analysis

Usage:
    python demo.py [--record NAME] [--gravity-model MODEL] [--sensitivity] [--verbose]

Arguments:
    --record: Sample record to use (noaa18, iss, vanguard1)
    --gravity-model: wgs72old, wgs72 or wgs84
    --sensitivity: Run B* drag sensitivity analysis
    --verbose: Enable debug logging

References:
    Vallado, D. A., Crawford, P., Hujsak, R., & Kelso, T. S. (2006).
    Revisiting Spacetrack Report #3. AIAA 2006-6753.
"""

import argparse
import logging
from typing import Dict, List, Tuple

import numpy as np

from config import (
    DEFAULT_GRAVITY_MODEL,
    DEMO_SPAN_MINUTES,
    DEMO_STEP_MINUTES,
    SAMPLE_TLES,
    tle_text,
)
from logging_config import configure_logging, get_logger
from orbit_core import ERROR_CODES, SGP4Error, Satellite

logger = get_logger(__name__)


def demonstrate_tle_parsing(text: str, gravity_model: str) -> Satellite:
    """
    Parse a TLE record and report its elements.

    Parameters
    ----------
    text : str
        TLE record in two- or three-line form
    gravity_model : str
        Gravity model name

    Returns
    -------
    Satellite
        Initialized satellite
    """
    satellite = Satellite.from_tle(text, gravity_model, verify_checksum=True)
    data = satellite.to_dict()

    logger.info(f"Parsed TLE for {data['name'] or 'unnamed satellite'}")
    logger.info(f"NORAD ID: {data['satnum']}")
    logger.info(f"Epoch: {data['epoch_datetime']}")
    logger.info(f"Inclination: {data['inclination_deg']:.4f} degrees")
    logger.info(f"RAAN: {data['raan_deg']:.4f} degrees")
    logger.info(f"Eccentricity: {data['eccentricity']:.7f}")
    logger.info(f"Argument of Perigee: {data['arg_perigee_deg']:.4f} degrees")
    logger.info(f"Mean Anomaly: {data['mean_anomaly_deg']:.4f} degrees")
    logger.info(f"Mean Motion: {data['mean_motion_rev_per_day']:.8f} rev/day")
    logger.info(f"B* Drag: {data['bstar']:.8e}")
    logger.info(
        f"Period: {data['period_minutes']:.2f} min, "
        f"perigee {data['perigee_altitude_km']:.1f} km, "
        f"apogee {data['apogee_altitude_km']:.1f} km"
    )
    return satellite


def demonstrate_propagation(satellite: Satellite) -> None:
    """
    Propagate at fixed intervals and log a TEME state table.

    Parameters
    ----------
    satellite : Satellite
        Initialized satellite
    """
    time_points = np.arange(0.0, DEMO_SPAN_MINUTES + DEMO_STEP_MINUTES, DEMO_STEP_MINUTES)
    errors, positions, velocities = satellite.propagate_batch(time_points)

    logger.info("Orbital propagation results (TEME coordinates)")
    for tsince, error, pos, vel in zip(time_points, errors, positions, velocities):
        if error:
            logger.info(f"t={tsince:6.1f}min: error {error} ({ERROR_CODES[error]})")
            continue
        logger.info(
            f"t={tsince:6.1f}min: "
            f"x={pos[0]:10.2f}km y={pos[1]:10.2f}km z={pos[2]:10.2f}km "
            f"r={np.linalg.norm(pos):9.2f}km v={np.linalg.norm(vel):6.3f}km/s"
        )


def analyze_bstar_sensitivity(
    satellite: Satellite,
    variations: Tuple[int, ...] = (-50, -25, -10, 0, 10, 25, 50),
) -> List[Tuple[int, float]]:
    """
    Analyze trajectory sensitivity to B* drag coefficient variations.

    Parameters
    ----------
    satellite : Satellite
        Nominal satellite
    variations : tuple of int
        B* percentage variations to test

    Returns
    -------
    divergences : list of tuple
        List of (variation, max_divergence_km) pairs

    References
    ----------
    The B* drag term models atmospheric drag effects. Small variations can lead
    to significant position errors over time, especially for LEO satellites.
    """
    logger.info("Starting B* drag sensitivity analysis")
    logger.info(f"Variations: {list(variations)}%")
    logger.info("Analysis period: 7 days")

    # 0 to 7 days, 3-hour intervals
    time_points = np.linspace(0, 7 * 24 * 60, 57)
    trajectories: Dict[int, np.ndarray] = {}

    for variation in variations:
        raw = satellite.raw._replace(bstar=satellite.raw.bstar * (1 + variation / 100.0))
        variant = Satellite(raw, satellite.gravity_model, satellite.name)
        errors, positions, _ = variant.propagate_batch(time_points)

        failed = np.count_nonzero(errors)
        if failed:
            logger.warning(f"B* {variation:+d}%: {failed} of {len(time_points)} points failed")
        trajectories[variation] = positions

    nominal = trajectories[0]
    divergences = []
    logger.info("Position divergence analysis:")

    for variation in variations:
        if variation == 0:
            continue
        divergence = np.linalg.norm(trajectories[variation] - nominal, axis=1)
        max_div = float(np.nanmax(divergence))
        divergences.append((variation, max_div))
        logger.info(
            f"B* {variation:+3d}%: "
            f"max={max_div:.1f}km final={divergence[-1]:.1f}km "
            f"avg={np.nanmean(divergence):.1f}km"
        )

    return divergences


def main() -> None:
    """Main demonstration entry point."""
    parser = argparse.ArgumentParser(
        description="SGP4 Orbital Propagation Demonstration"
    )
    parser.add_argument(
        "--record", choices=sorted(SAMPLE_TLES), default="iss", help="Sample TLE record"
    )
    parser.add_argument(
        "--gravity-model",
        choices=["wgs72old", "wgs72", "wgs84"],
        default=DEFAULT_GRAVITY_MODEL,
        help="Gravity model constants",
    )
    parser.add_argument(
        "--sensitivity", action="store_true", help="Run B* drag sensitivity analysis"
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    args = parser.parse_args()

    # Configure logging
    if args.verbose:
        configure_logging(level=logging.DEBUG)
    else:
        configure_logging()

    logger.info("SGP4 Orbital Propagation Demonstration")
    logger.info("=" * 60)

    try:
        satellite = demonstrate_tle_parsing(tle_text(SAMPLE_TLES[args.record]), args.gravity_model)
        logger.info("")
        demonstrate_propagation(satellite)
    except SGP4Error as e:
        logger.error(f"Demonstration failed: {e}")
        raise SystemExit(1)

    if args.sensitivity:
        logger.info("")
        analyze_bstar_sensitivity(satellite)
        logger.info("Sensitivity analysis complete")

    logger.info("=" * 60)
    logger.info("Demonstration complete")


if __name__ == "__main__":
    main()
