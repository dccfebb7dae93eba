"""
Tests for Campaign Analysis Helpers

Run with:
    python -m pytest tests/test_analysis.py -v
"""

import math
import unittest

from laser_deorbit.analysis import (
    calculate_risk_reduction,
    compare_debris_removal_efficiency,
    estimate_debris_properties,
    estimate_passes_per_day,
)
from laser_deorbit.models import DebrisTarget


class TestDebrisProperties(unittest.TestCase):
    """Test property estimates from size."""

    def test_fragment(self):
        """A 1 m aluminium fragment."""
        props = estimate_debris_properties(1.0, "FRAGMENT")

        self.assertAlmostEqual(props.mass_kg, 1350.0, places=9)
        self.assertAlmostEqual(props.area_m2, 0.5, places=12)
        self.assertAlmostEqual(props.area_to_mass, 0.5 / 1350.0, places=12)
        self.assertAlmostEqual(props.ballistic_coefficient, 1350.0 / (2.2 * 0.5), places=9)
        self.assertEqual(props.material, "ALUMINUM")

    def test_scaling(self):
        """Mass grows with the cube of size, area with the square."""
        small = estimate_debris_properties(1.0, "PAYLOAD")
        large = estimate_debris_properties(2.0, "payload")

        self.assertAlmostEqual(large.mass_kg / small.mass_kg, 8.0, places=9)
        self.assertAlmostEqual(large.area_m2 / small.area_m2, 4.0, places=9)

    def test_unknown_type(self):
        """Unknown types use generic assumptions."""
        props = estimate_debris_properties(1.0, "ASTEROID")
        self.assertAlmostEqual(props.mass_kg, 800.0, places=9)
        self.assertAlmostEqual(props.area_m2, 0.4, places=12)


class TestRemovalEfficiency(unittest.TestCase):
    """Test efficiency ranking."""

    def test_ranking(self):
        """Lighter targets rank first."""
        light = DebrisTarget(name="LIGHT", size_m=0.5, mass_kg=15.0, area_to_mass=0.02,
                             perigee_km=480.0, apogee_km=520.0)
        heavy = light.model_copy(update={"name": "HEAVY", "mass_kg": 800.0, "size_m": 3.0})

        ranking = compare_debris_removal_efficiency([heavy, light])

        self.assertEqual([entry.name for entry in ranking], ["LIGHT", "HEAVY"])
        for entry in ranking:
            self.assertGreater(entry.delta_v_per_pass_ms, 0.0)
            self.assertGreaterEqual(entry.estimated_passes, 1)
            self.assertEqual(entry.estimated_days, entry.estimated_passes * 1.5)
            self.assertAlmostEqual(entry.efficiency, entry.delta_v_per_pass_ms / entry.mass_kg, places=12)

    def test_pass_count(self):
        """Passes cover 5% of orbital speed."""
        light = DebrisTarget(name="LIGHT", size_m=0.5, mass_kg=15.0, area_to_mass=0.02,
                             perigee_km=480.0, apogee_km=520.0)
        entry = compare_debris_removal_efficiency([light])[0]

        required = 0.05 * math.sqrt(398600.4418 / 6871.0) * 1e3
        self.assertEqual(entry.estimated_passes, math.ceil(required / entry.delta_v_per_pass_ms))

    def test_empty(self):
        """No targets, no ranking."""
        self.assertEqual(compare_debris_removal_efficiency([]), [])


class TestRiskReduction(unittest.TestCase):
    """Test collision-risk reduction."""

    def test_congested_shell(self):
        """Removing 10% at the most congested altitude."""
        risk = calculate_risk_reduction(10, 100, 800.0)

        self.assertAlmostEqual(risk.removal_fraction, 0.1, places=12)
        self.assertAlmostEqual(risk.relative_probability_reduction, 0.19, places=12)
        self.assertEqual(risk.altitude_risk_factor, 1.0)
        self.assertAlmostEqual(risk.effective_risk_reduction, 0.19, places=12)

    def test_altitude_weighting(self):
        """The benefit falls off away from the congested shell."""
        risk = calculate_risk_reduction(10, 100, 1000.0)
        self.assertAlmostEqual(risk.altitude_risk_factor, math.exp(-1.0), places=12)
        self.assertLess(risk.effective_risk_reduction, 0.19)

    def test_empty_population(self):
        """The population must be positive."""
        with self.assertRaises(ValueError):
            calculate_risk_reduction(1, 0, 800.0)


class TestPassesPerDay(unittest.TestCase):
    """Test daily pass estimates."""

    def test_out_of_reach(self):
        """Stations far poleward of the inclination see no passes."""
        self.assertEqual(estimate_passes_per_day(80.0, 51.6), 0)

    def test_at_inclination(self):
        """A station at the inclination latitude sees two passes."""
        self.assertEqual(estimate_passes_per_day(51.6, 51.6), 2)
        self.assertEqual(estimate_passes_per_day(-51.6, 51.6), 2)

    def test_polar_orbit_from_equator(self):
        """An equatorial station under a polar orbit."""
        self.assertEqual(estimate_passes_per_day(0.0, 90.0), 4)


if __name__ == "__main__":
    unittest.main()
