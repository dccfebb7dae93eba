"""
Tests for the Thermal Budget Tracker

Run with:
    python -m pytest tests/test_thermal.py -v
"""

import math
import unittest

from laser_deorbit.config import MaterialProfile
from laser_deorbit.laser import fluence_at_range
from laser_deorbit.models import LaserConfig, SkipReason
from laser_deorbit.thermal import ThermalBudgetTracker

# Fluence at 600 km slant range with the default laser (~0.555 J/cm²)
FLUENCE = fluence_at_range(600e3, LaserConfig())


class TestHeating(unittest.TestCase):
    """Test heating acceptance and rejection."""

    def setUp(self):
        """Set up test fixtures."""
        self.tracker = ThermalBudgetTracker("ALUMINUM", mass_kg=15.0, area_m2=0.3)

    def test_initial_state(self):
        """The tracker starts at ambient with the full margin."""
        self.assertEqual(self.tracker.current_temp_k, 270.0)
        self.assertAlmostEqual(self.tracker.area_to_mass, 0.02, places=12)
        self.assertEqual(self.tracker.safety_margin_k, 100.0)
        self.assertTrue(self.tracker.state.is_safe)

    def test_temperature_rise_linear(self):
        """Temperature rise is proportional to pulse count."""
        single = self.tracker.temperature_rise(1, FLUENCE)
        self.assertAlmostEqual(single, 0.0864, places=3)
        self.assertAlmostEqual(self.tracker.temperature_rise(1000, FLUENCE), 1000 * single, places=9)

    def test_heating_accepted(self):
        """A pass within the margin heats the object."""
        result = self.tracker.apply_heating(1000, FLUENCE, timestamp=0.0)

        self.assertTrue(result.accepted)
        self.assertIsNone(result.reason)
        self.assertEqual(result.temperature_before_k, 270.0)
        self.assertAlmostEqual(self.tracker.current_temp_k, 270.0 + result.temperature_rise_k, places=9)
        self.assertEqual(len(self.tracker.heat_history), 1)
        self.assertAlmostEqual(self.tracker.safety_margin_k, 100.0 - result.temperature_rise_k, places=9)

    def test_temperature_limit(self):
        """A pass beyond the safe rise is rejected and leaves state unchanged."""
        result = self.tracker.apply_heating(1200, FLUENCE)

        self.assertFalse(result.accepted)
        self.assertEqual(result.reason, SkipReason.TEMP_LIMIT_EXCEEDED)
        self.assertGreater(result.temperature_after_k, 370.0)
        self.assertEqual(self.tracker.current_temp_k, 270.0)
        self.assertEqual(self.tracker.heat_history, [])

    def test_melting_risk(self):
        """Reaching the melting point is rejected even within the rise budget."""
        material = MaterialProfile("TEST", 1000.0, 900.0, 100.0, 400.0, 1.0)
        tracker = ThermalBudgetTracker(material, mass_kg=15.0, area_m2=0.3, initial_temp_k=350.0)

        result = tracker.apply_heating(700, FLUENCE)

        self.assertFalse(result.accepted)
        self.assertEqual(result.reason, SkipReason.MELTING_RISK)
        self.assertEqual(tracker.current_temp_k, 350.0)

    def test_melting_takes_priority(self):
        """When both limits are broken the melting risk is reported."""
        material = MaterialProfile("TEST", 1000.0, 900.0, 100.0, 400.0, 1.0)
        tracker = ThermalBudgetTracker(material, mass_kg=15.0, area_m2=0.3, initial_temp_k=350.0)

        result = tracker.apply_heating(1500, FLUENCE)
        self.assertEqual(result.reason, SkipReason.MELTING_RISK)

    def test_invalid_construction(self):
        """Mass and area must be positive; the material must be known."""
        with self.assertRaises(ValueError):
            ThermalBudgetTracker("ALUMINUM", mass_kg=0.0, area_m2=0.3)
        with self.assertRaises(ValueError):
            ThermalBudgetTracker("ALUMINUM", mass_kg=15.0, area_m2=-1.0)
        with self.assertRaises(ValueError):
            ThermalBudgetTracker("UNOBTAINIUM", mass_kg=15.0, area_m2=0.3)

    def test_material_lookup_case_insensitive(self):
        """Material identifiers are case-insensitive."""
        tracker = ThermalBudgetTracker("steel", mass_kg=15.0, area_m2=0.3)
        self.assertEqual(tracker.material.name, "STEEL")
        self.assertEqual(tracker.max_temp_rise_k, 200.0)


class TestCooling(unittest.TestCase):
    """Test radiative cooling and cooldown estimates."""

    def setUp(self):
        """Set up test fixtures."""
        self.tracker = ThermalBudgetTracker("ALUMINUM", mass_kg=15.0, area_m2=0.3)
        self.tracker.current_temp_k = 370.0

    def test_time_constant(self):
        """Time constant at 370 K for 15 kg of aluminium."""
        self.assertAlmostEqual(self.tracker._time_constant(), 4900.0, delta=50.0)

    def test_exponential_relaxation(self):
        """After one time constant the excess temperature falls by 1/e."""
        tau = self.tracker._time_constant()
        self.tracker.apply_cooling(tau)
        self.assertAlmostEqual(self.tracker.current_temp_k, 270.0 + 100.0 / math.e, places=9)

    def test_long_cooling_reaches_ambient(self):
        """Cooling converges to ambient and never undershoots."""
        self.tracker.apply_cooling(1e7)
        self.assertAlmostEqual(self.tracker.current_temp_k, 270.0, places=6)
        self.assertGreaterEqual(self.tracker.current_temp_k, 270.0)

    def test_no_elapsed_time(self):
        """Zero or negative elapsed time changes nothing."""
        self.assertEqual(self.tracker.apply_cooling(0.0), 370.0)
        self.assertEqual(self.tracker.apply_cooling(-10.0), 370.0)


class TestRequiredCooldown(unittest.TestCase):
    """Test cooldown estimates."""

    def setUp(self):
        """Set up test fixtures."""
        self.tracker = ThermalBudgetTracker("ALUMINUM", mass_kg=15.0, area_m2=0.3)

    def test_no_cooldown_needed(self):
        """A pass that already fits needs no cooldown."""
        self.assertEqual(self.tracker.required_cooldown(500, FLUENCE), 0.0)

    def test_cooldown_makes_pass_safe(self):
        """Waiting the required cooldown lets the next pass through."""
        self.tracker.apply_heating(1000, FLUENCE)
        cooldown = self.tracker.required_cooldown(1000, FLUENCE)

        self.assertGreater(cooldown, 0.0)
        self.assertTrue(math.isfinite(cooldown))

        self.tracker.apply_cooling(cooldown)
        self.assertTrue(self.tracker.apply_heating(1000, FLUENCE).accepted)

    def test_cooldown_includes_safety_factor(self):
        """The residual rise after cooldown is the remaining budget over 1.5."""
        self.tracker.apply_heating(1000, FLUENCE)
        next_rise = self.tracker.temperature_rise(1000, FLUENCE)

        self.tracker.apply_cooling(self.tracker.required_cooldown(1000, FLUENCE))

        residual = self.tracker.current_temp_k - self.tracker.ambient_temp_k
        self.assertAlmostEqual(residual, (100.0 - next_rise) / 1.5, places=6)

    def test_impossible_pass(self):
        """A pass that exceeds the budget from ambient can never be made safe."""
        self.tracker.apply_heating(100, FLUENCE)
        self.assertEqual(self.tracker.required_cooldown(1200, FLUENCE), math.inf)

    def test_impossible_pass_at_ambient(self):
        """At ambient there is nothing to cool."""
        self.assertEqual(self.tracker.required_cooldown(1200, FLUENCE), math.inf)


class TestStatus(unittest.TestCase):
    """Test status reporting."""

    def test_status(self):
        """Status reports temperature, margin and melting distance."""
        tracker = ThermalBudgetTracker("ALUMINUM", mass_kg=15.0, area_m2=0.3)
        tracker.current_temp_k = 320.0
        status = tracker.status()

        self.assertEqual(status["temp_rise_k"], 50.0)
        self.assertEqual(status["safety_margin_k"], 50.0)
        self.assertEqual(status["distance_to_melting_k"], 613.0)
        self.assertTrue(status["is_safe"])


if __name__ == "__main__":
    unittest.main()
