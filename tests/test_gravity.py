"""
Unit Tests for Gravity Constant Sets

Run with:
    python -m pytest tests/test_gravity.py -v
"""

import unittest

from sgp4 import earth_gravity

from orbit_core.gravity import GravityModel, constants, resolve_model


class TestGravityConstants(unittest.TestCase):
    """Test suite for gravity model constants."""

    def test_wgs72old_uses_fixed_xke(self):
        gravity = constants(GravityModel.WGS72OLD)
        self.assertEqual(gravity.xke, 0.0743669161)
        self.assertEqual(gravity.tumin, 1.0 / 0.0743669161)

    def test_wgs72_derives_xke(self):
        gravity = constants(GravityModel.WGS72)
        self.assertEqual(gravity.radius_earth_km, 6378.135)
        self.assertEqual(gravity.mu, 398600.8)
        self.assertAlmostEqual(gravity.xke, 0.0743669161, places=10)
        self.assertAlmostEqual(gravity.j3oj2, gravity.j3 / gravity.j2, places=15)

    def test_wgs84_constants(self):
        gravity = constants(GravityModel.WGS84)
        self.assertEqual(gravity.radius_earth_km, 6378.137)
        self.assertEqual(gravity.j2, 0.00108262998905)

    def test_matches_reference_library(self):
        """Every model should match the constants of the sgp4 package."""
        pairs = [
            (GravityModel.WGS72OLD, earth_gravity.wgs72old),
            (GravityModel.WGS72, earth_gravity.wgs72),
            (GravityModel.WGS84, earth_gravity.wgs84),
        ]
        for model, reference in pairs:
            with self.subTest(model=model.value):
                gravity = constants(model)
                self.assertAlmostEqual(gravity.mu, reference.mu, places=8)
                self.assertAlmostEqual(gravity.radius_earth_km, reference.radiusearthkm, places=8)
                self.assertAlmostEqual(gravity.xke, reference.xke, places=14)
                self.assertAlmostEqual(gravity.tumin, reference.tumin, places=12)
                self.assertAlmostEqual(gravity.j2, reference.j2, places=15)
                self.assertAlmostEqual(gravity.j3, reference.j3, places=15)
                self.assertAlmostEqual(gravity.j4, reference.j4, places=15)
                self.assertAlmostEqual(gravity.j3oj2, reference.j3oj2, places=14)

    def test_constant_sets_are_shared(self):
        self.assertIs(constants(GravityModel.WGS84), constants(GravityModel.WGS84))
        self.assertIs(constants("WGS84"), constants(GravityModel.WGS84))

    def test_default_model_is_wgs72(self):
        self.assertIs(constants(), constants(GravityModel.WGS72))

    def test_resolve_model_names(self):
        self.assertEqual(resolve_model("wgs72old"), GravityModel.WGS72OLD)
        self.assertEqual(resolve_model(" Wgs72 "), GravityModel.WGS72)
        self.assertEqual(resolve_model(GravityModel.WGS84), GravityModel.WGS84)

    def test_unknown_model_raises(self):
        with self.assertRaises(ValueError):
            constants("egm96")


if __name__ == "__main__":
    unittest.main()
