"""
Tests for Input Validation

Run with:
    python -m pytest tests/test_validation.py -v
"""

import unittest

from laser_deorbit.models import DebrisTarget, GroundStation
from laser_deorbit.orbital_mechanics import OrbitalElements
from laser_deorbit.validation import (
    MissionInputError,
    validate_debris_parameters,
    validate_mission_inputs,
    validate_stations,
)

ISS_LINE1 = "1 25544U 98067A   23259.57580000  .00012022  00000-0  21844-3 0  9995"
ISS_LINE2 = "2 25544  51.6416 220.9944 0004263 122.0101 312.2755 15.49541986415598"

FRAGMENT = DebrisTarget(
    name="FRAGMENT",
    size_m=0.5,
    mass_kg=15.0,
    area_to_mass=0.02,
    perigee_km=480.0,
    apogee_km=520.0,
)


class TestDebrisValidation(unittest.TestCase):
    """Test debris parameter checks."""

    def test_valid_fragment(self):
        """A typical fragment passes cleanly."""
        report = validate_debris_parameters(FRAGMENT)
        self.assertTrue(report.valid)
        self.assertEqual(report.warnings, [])

    def test_valid_tle_target(self):
        """A TLE-only target passes."""
        debris = DebrisTarget(size_m=0.5, mass_kg=15.0, area_to_mass=0.02,
                              tle_line1=ISS_LINE1, tle_line2=ISS_LINE2)
        self.assertTrue(validate_debris_parameters(debris).valid)

    def test_all_errors_reported(self):
        """Every violation is collected, not just the first."""
        debris = FRAGMENT.model_copy(update={"mass_kg": -1.0, "size_m": 0.0, "material": "WOOD"})
        errors = validate_debris_parameters(debris).errors

        self.assertIn("Mass must be positive", errors)
        self.assertIn("Size must be positive", errors)
        self.assertIn("Cross-sectional area must be positive", errors)
        self.assertTrue(any("Unknown material" in error for error in errors))

    def test_no_orbit(self):
        """A target needs some orbit description."""
        debris = DebrisTarget(size_m=0.5, mass_kg=15.0, area_to_mass=0.02)
        errors = validate_debris_parameters(debris).errors
        self.assertTrue(any("No orbit" in error for error in errors))

    def test_single_tle_line(self):
        """Half a TLE is an error."""
        debris = FRAGMENT.model_copy(update={"tle_line1": ISS_LINE1})
        self.assertIn("TLE requires both lines", validate_debris_parameters(debris).errors)

    def test_bad_tle_checksum(self):
        """TLE format problems are errors."""
        debris = DebrisTarget(size_m=0.5, mass_kg=15.0, area_to_mass=0.02,
                              tle_line1=ISS_LINE1[:68] + "0", tle_line2=ISS_LINE2)
        errors = validate_debris_parameters(debris).errors
        self.assertEqual(len(errors), 1)
        self.assertIn("checksum", errors[0])

    def test_orbit_errors(self):
        """Sub-surface and unbound orbits are rejected."""
        buried = FRAGMENT.model_copy(update={"elements": OrbitalElements(a=6000.0, e=0.0)})
        unbound = FRAGMENT.model_copy(update={"elements": OrbitalElements(a=8000.0, e=1.2)})

        self.assertIn("Semi-major axis must be above Earth surface",
                      validate_debris_parameters(buried).errors)
        self.assertIn("Eccentricity must be between 0 and 1",
                      validate_debris_parameters(unbound).errors)

    def test_low_perigee_warning(self):
        """A perigee already below 200 km is a warning."""
        report = validate_debris_parameters(FRAGMENT.model_copy(update={"perigee_km": 150.0}))
        self.assertTrue(report.valid)
        self.assertIn("Perigee already below re-entry altitude", report.warnings)

    def test_high_orbit_warning(self):
        """Very high orbits are a warning."""
        debris = FRAGMENT.model_copy(update={"perigee_km": 2500.0, "apogee_km": 2600.0})
        self.assertTrue(any("Very high orbit" in w for w in validate_debris_parameters(debris).warnings))

    def test_unusual_area_to_mass(self):
        """Extreme area-to-mass ratios are a warning."""
        debris = FRAGMENT.model_copy(update={"area_to_mass": 5.0})
        self.assertTrue(any("area-to-mass" in w for w in validate_debris_parameters(debris).warnings))

    def test_conflicting_area_to_mass(self):
        """Area and area-to-mass that disagree are an error."""
        debris = FRAGMENT.model_copy(update={"area_m2": 0.3, "area_to_mass": 0.5})
        errors = validate_debris_parameters(debris).errors

        self.assertEqual(len(errors), 1)
        self.assertIn("disagrees with area / mass", errors[0])

    def test_consistent_area_to_mass(self):
        """Area and area-to-mass may both be given when they agree."""
        debris = FRAGMENT.model_copy(update={"area_m2": 0.3, "area_to_mass": 0.02})
        report = validate_debris_parameters(debris)

        self.assertTrue(report.valid)
        self.assertAlmostEqual(debris.cross_section_m2 / debris.mass_kg, debris.area_to_mass_ratio)

    def test_small_debris(self):
        """Objects under 10 cm are hard to track."""
        debris = FRAGMENT.model_copy(update={"size_m": 0.05})
        self.assertIn("Debris may be too small to track accurately",
                      validate_debris_parameters(debris).warnings)


class TestStationValidation(unittest.TestCase):
    """Test ground station checks."""

    def test_too_many_stations(self):
        """More than five stations is an error."""
        stations = [GroundStation(name=f"S{k}", latitude_deg=0.0, longitude_deg=float(k)) for k in range(6)]
        report = validate_stations(stations)
        self.assertFalse(report.valid)
        self.assertEqual(len(report.errors), 1)

    def test_custom_limit(self):
        """The station limit is configurable."""
        stations = [GroundStation(name=f"S{k}", latitude_deg=0.0, longitude_deg=float(k)) for k in range(3)]
        self.assertTrue(validate_stations(stations).valid)
        self.assertFalse(validate_stations(stations, max_stations=2).valid)

    def test_duplicate_names(self):
        """Duplicate names are a warning."""
        stations = [GroundStation(name="Alpha", latitude_deg=0.0, longitude_deg=0.0)] * 2
        report = validate_stations(stations)
        self.assertTrue(report.valid)
        self.assertEqual(report.warnings, ["Duplicate station names: Alpha"])


class TestMissionInputs(unittest.TestCase):
    """Test combined validation."""

    def test_warnings_logged(self):
        """Warnings are logged against the debris name."""
        debris = FRAGMENT.model_copy(update={"size_m": 0.05})
        with self.assertLogs("laser_deorbit.validation", level="WARNING") as logs:
            report = validate_mission_inputs([], debris)

        self.assertTrue(report.valid)
        self.assertIn("FRAGMENT", logs.output[0])

    def test_raise_if_invalid(self):
        """Errors become a MissionInputError listing all of them."""
        debris = FRAGMENT.model_copy(update={"mass_kg": -1.0, "size_m": 0.0})
        stations = [GroundStation(name=f"S{k}", latitude_deg=0.0, longitude_deg=float(k)) for k in range(6)]
        report = validate_mission_inputs(stations, debris)

        with self.assertRaises(MissionInputError) as ctx:
            report.raise_if_invalid()

        self.assertIsInstance(ctx.exception, ValueError)
        self.assertEqual(ctx.exception.errors, report.errors)
        self.assertGreaterEqual(len(ctx.exception.errors), 3)

    def test_valid_inputs_do_not_raise(self):
        """Valid inputs pass through."""
        validate_mission_inputs([], FRAGMENT).raise_if_invalid()


if __name__ == "__main__":
    unittest.main()
