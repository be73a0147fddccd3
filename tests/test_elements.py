"""
Unit Tests for SGP4 Element Initialization

Initialization results are compared against the sgp4 package, which is the
reference implementation of Vallado et al. (2006).

Run with:
    python -m pytest tests/test_elements.py -v
"""

import math
import unittest

from sgp4.api import WGS72
from sgp4.model import Satrec

from tle_fixtures import (
    CIRCULAR_LINE2,
    DEEP_SPACE_LINE2,
    ISS_LINE1,
    LOW_PERIGEE_LINE2,
    NEAR_EARTH_RECORDS,
    NOAA18_LINE1,
    NOAA18_LINE2,
    RETROGRADE_EQUATORIAL_LINE2,
    SUBSURFACE_LINE2,
    with_mean_motion,
)

from orbit_core.elements import (
    DEEP_SPACE,
    NEAR_EARTH,
    XPDOTP,
    initialize,
    recover_mean_motion,
    to_canonical,
)
from orbit_core.errors import InvalidElementsError
from orbit_core.gravity import GravityModel, constants
from orbit_core.tle_parser import parse_lines


class TestCanonicalElements(unittest.TestCase):
    """Test suite for unit conversion."""

    def setUp(self):
        self.gravity = constants(GravityModel.WGS72)
        self.raw = parse_lines(NOAA18_LINE1, NOAA18_LINE2)
        self.elements = to_canonical(self.raw, self.gravity)

    def test_angles_in_radians(self):
        self.assertAlmostEqual(self.elements.inclination, math.radians(99.1770), places=12)
        self.assertAlmostEqual(self.elements.raan, math.radians(43.4120), places=12)
        self.assertAlmostEqual(self.elements.arg_perigee, math.radians(282.3899), places=12)
        self.assertAlmostEqual(self.elements.mean_anomaly, math.radians(185.0991), places=12)

    def test_mean_motion_in_radians_per_minute(self):
        self.assertAlmostEqual(XPDOTP, 229.1831180523293, places=10)
        self.assertAlmostEqual(
            self.elements.no_kozai, 14.12152816 * 2 * math.pi / 1440.0, places=14
        )

    def test_semi_major_axis_and_radii(self):
        a = self.elements.semi_major_axis
        e = self.elements.eccentricity
        # About 850 km altitude
        self.assertGreater(a, 1.1)
        self.assertLess(a, 1.2)
        self.assertAlmostEqual(self.elements.apogee_radius, a * (1 + e) - 1, places=14)
        self.assertAlmostEqual(self.elements.perigee_radius, a * (1 - e) - 1, places=14)

    def test_non_positive_mean_motion_rejected(self):
        line2 = with_mean_motion(NOAA18_LINE2, "0.00000000")
        raw = parse_lines(NOAA18_LINE1, line2)
        with self.assertRaises(InvalidElementsError) as ctx:
            to_canonical(raw, self.gravity)
        self.assertEqual(ctx.exception.code, 2)

    def test_non_finite_mean_motion_rejected(self):
        for value in (float("inf"), float("nan")):
            with self.subTest(mean_motion=value):
                raw = self.raw._replace(mean_motion_rev_per_day=value)
                with self.assertRaises(InvalidElementsError) as ctx:
                    initialize(raw, self.gravity)
                self.assertEqual(ctx.exception.code, 2)

    def test_eccentricity_out_of_range_rejected(self):
        for ecc in (1.0, 1.5, -0.1):
            with self.subTest(eccentricity=ecc):
                with self.assertRaises(InvalidElementsError) as ctx:
                    to_canonical(self.raw._replace(eccentricity=ecc), self.gravity)
                self.assertEqual(ctx.exception.code, 1)


class TestInitialization(unittest.TestCase):
    """Test suite for the SGP4 initialization state."""

    def setUp(self):
        self.gravity = constants(GravityModel.WGS72)

    def _init(self, line1, line2):
        return initialize(parse_lines(line1, line2), self.gravity)

    def test_matches_reference_library(self):
        for name, (line1, line2) in NEAR_EARTH_RECORDS.items():
            with self.subTest(record=name):
                elements, state = self._init(line1, line2)
                reference = Satrec.twoline2rv(line1, line2, WGS72)

                self.assertAlmostEqual(state.no_unkozai, reference.no_unkozai, places=13)
                self.assertAlmostEqual(elements.no_kozai, reference.no_kozai, places=13)
                self.assertAlmostEqual(state.mdot, reference.mdot, places=13)
                self.assertAlmostEqual(state.argpdot, reference.argpdot, places=13)
                self.assertAlmostEqual(state.nodedot, reference.nodedot, places=13)
                self.assertAlmostEqual(state.alta, reference.alta, places=11)
                self.assertAlmostEqual(state.altp, reference.altp, places=11)

    def test_recovered_mean_motion(self):
        raw = parse_lines(NOAA18_LINE1, NOAA18_LINE2)
        elements, state = initialize(raw, self.gravity)
        no_unkozai, ao = recover_mean_motion(elements, self.gravity)
        self.assertEqual(no_unkozai, state.no_unkozai)
        self.assertEqual(ao, state.ao)
        # J2 correction is small but not zero
        self.assertNotEqual(no_unkozai, elements.no_kozai)
        self.assertLess(abs(no_unkozai / elements.no_kozai - 1.0), 1e-3)

    def test_near_earth_regime(self):
        _, state = self._init(NOAA18_LINE1, NOAA18_LINE2)
        self.assertEqual(state.regime, NEAR_EARTH)
        self.assertFalse(state.is_deep_space)
        self.assertGreater(state.period_minutes, 101.8)
        self.assertLess(state.period_minutes, 102.1)
        self.assertEqual(state.isimp, 0)

    def test_deep_space_regime(self):
        _, state = self._init(NOAA18_LINE1, DEEP_SPACE_LINE2)
        self.assertEqual(state.regime, DEEP_SPACE)
        self.assertTrue(state.is_deep_space)
        self.assertGreaterEqual(state.period_minutes, 225.0)

    def test_low_perigee_uses_simplified_drag(self):
        _, state = self._init(ISS_LINE1, LOW_PERIGEE_LINE2)
        self.assertEqual(state.isimp, 1)
        self.assertLess(state.altp * self.gravity.radius_earth_km, 220.0)
        for name in ("d2", "d3", "d4", "t3cof", "t4cof", "t5cof"):
            self.assertEqual(getattr(state, name), 0.0, name)

    def test_higher_order_drag_terms_present(self):
        _, state = self._init(NOAA18_LINE1, NOAA18_LINE2)
        self.assertNotEqual(state.d2, 0.0)
        self.assertNotEqual(state.t3cof, 0.0)

    def test_circular_orbit_has_no_eccentricity_drag_terms(self):
        _, state = self._init(NOAA18_LINE1, CIRCULAR_LINE2)
        self.assertEqual(state.xmcof, 0.0)
        self.assertEqual(state.omgcof, 0.0)
        self.assertTrue(all(math.isfinite(value) for value in state if isinstance(value, float)))

    def test_retrograde_equatorial_is_finite(self):
        _, state = self._init(NOAA18_LINE1, RETROGRADE_EQUATORIAL_LINE2)
        self.assertTrue(math.isfinite(state.xlcof))
        self.assertTrue(all(math.isfinite(value) for value in state if isinstance(value, float)))

    def test_subsurface_epoch_still_initializes(self):
        with self.assertLogs("orbit_core.elements", level="WARNING"):
            _, state = self._init(NOAA18_LINE1, SUBSURFACE_LINE2)
        self.assertLess(state.ao, 1.0)

    def test_state_is_immutable(self):
        _, state = self._init(NOAA18_LINE1, NOAA18_LINE2)
        with self.assertRaises(AttributeError):
            state.cc1 = 0.0


if __name__ == "__main__":
    unittest.main()
