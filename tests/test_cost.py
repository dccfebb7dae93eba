"""
Tests for the Cost/Comparison Estimator

Run with:
    python -m pytest tests/test_cost.py -v
"""

import math
import unittest

from laser_deorbit.config import ADR_REFERENCE_COSTS
from laser_deorbit.cost import calculate_mission_cost, compare_with_method


class TestMissionCost(unittest.TestCase):
    """Test campaign cost estimates."""

    def test_cost_breakdown(self):
        """1 GJ over 10 days."""
        cost = calculate_mission_cost(1.0, 10.0)

        self.assertAlmostEqual(cost.electricity_cost, 111.1112, places=4)
        self.assertEqual(cost.operating_cost, 50000.0)
        self.assertAlmostEqual(cost.total_cost, 50111.1112, places=4)
        self.assertEqual(cost.total_energy_gj, 1.0)
        self.assertEqual(cost.duration_days, 10.0)

    def test_comparisons(self):
        """Every reference method is compared."""
        cost = calculate_mission_cost(1.0, 10.0)

        self.assertEqual(set(cost.comparisons), set(ADR_REFERENCE_COSTS))
        spacecraft = cost.comparisons["spacecraft_capture"]
        self.assertAlmostEqual(spacecraft.times_cheaper, 100e6 / cost.total_cost, places=9)
        self.assertAlmostEqual(spacecraft.savings, 100e6 - cost.total_cost, places=6)
        self.assertGreater(spacecraft.savings_percent, 99.9)
        self.assertEqual(cost.comparison_to_spacecraft, spacecraft.times_cheaper)

    def test_custom_reference_costs(self):
        """Reference costs can be replaced."""
        cost = calculate_mission_cost(0.0, 1.0, reference_costs={"tether": 10000.0})

        self.assertEqual(list(cost.comparisons), ["tether"])
        self.assertEqual(cost.comparisons["tether"].times_cheaper, 2.0)

    def test_zero_cost(self):
        """A campaign that costs nothing is infinitely cheaper."""
        cost = calculate_mission_cost(0.0, 0.0)

        self.assertEqual(cost.total_cost, 0.0)
        self.assertEqual(cost.comparisons["harpoon"].times_cheaper, math.inf)


class TestCompareWithMethod(unittest.TestCase):
    """Test a single method comparison."""

    def test_more_expensive_campaign(self):
        """Savings go negative when the campaign costs more."""
        comparison = compare_with_method("net_capture", 1000.0, 4000.0)

        self.assertEqual(comparison.times_cheaper, 0.25)
        self.assertEqual(comparison.savings, -3000.0)
        self.assertEqual(comparison.savings_percent, -300.0)

    def test_free_reference(self):
        """A zero reference cost gives no savings percentage."""
        self.assertEqual(compare_with_method("free", 0.0, 10.0).savings_percent, 0.0)


if __name__ == "__main__":
    unittest.main()
