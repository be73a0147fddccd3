"""
Project Configuration and Sample Data

Sample TLE records and run-time defaults shared by the demo and the tests.
Algorithm constants live in the orbit_core modules that use them.

Environment overrides:
    ORBIT_CORE_GRAVITY_MODEL: Default gravity model ("wgs72old", "wgs72", "wgs84")
    ORBIT_CORE_LOG_LEVEL: Default log level name (e.g. "DEBUG", "INFO")

Sample TLE Data:
    NOAA 18 and Vanguard 1 are the reference records of Vallado et al. (2006);
    the ISS record is a snapshot from September 2023. Sample epochs are fixed
    on purpose: the test suite compares against values computed for them.

    Sources for current TLEs:
    - Space-Track.org (requires free registration)
    - CelesTrak.org (public access)

References:
    Vallado, D. A., Crawford, P., Hujsak, R., & Kelso, T. S. (2006).
    Revisiting Spacetrack Report #3. AIAA 2006-6753.
"""

import os
from typing import Any, Dict

DEFAULT_GRAVITY_MODEL: str = os.environ.get("ORBIT_CORE_GRAVITY_MODEL", "wgs72").lower()
LOG_LEVEL: str = os.environ.get("ORBIT_CORE_LOG_LEVEL", "INFO").upper()

# Demo propagation table: step and span in minutes
DEMO_STEP_MINUTES: float = 30.0
DEMO_SPAN_MINUTES: float = 120.0

NOAA18_TLE: Dict[str, Any] = {
    'name': 'NOAA 18',
    'norad_id': 28654,
    'line1': '1 28654U 05018A   15053.51663152  .00000205  00000-0  13711-3 0  9995',
    'line2': '2 28654  99.1770  43.4120 0013283 282.3899 185.0991 14.12152816502890',
}

ISS_TLE: Dict[str, Any] = {
    'name': 'ISS (ZARYA)',
    'norad_id': 25544,
    'line1': '1 25544U 98067A   23259.57580000  .00012022  00000-0  21844-3 0  9995',
    'line2': '2 25544  51.6416 220.9944 0004263 122.0101 312.2755 15.49541986415598',
}

VANGUARD1_TLE: Dict[str, Any] = {
    'name': 'VANGUARD 1',
    'norad_id': 5,
    'line1': '1 00005U 58002B   00179.78495062  .00000023  00000-0  28098-4 0  4753',
    'line2': '2 00005  34.2682 348.7242 1859667 331.7664  19.3264 10.82419157413667',
}

SAMPLE_TLES: Dict[str, Dict[str, Any]] = {
    'noaa18': NOAA18_TLE,
    'iss': ISS_TLE,
    'vanguard1': VANGUARD1_TLE,
}


def tle_text(record: Dict[str, Any]) -> str:
    """Render a sample record in three-line form."""
    return f"{record['name']}\n{record['line1']}\n{record['line2']}\n"
