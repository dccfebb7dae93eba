"""
Input validation

Every problem with a mission's inputs is collected and reported together
rather than failing on the first one. Errors block the simulation;
warnings are logged and carried along.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from laser_deorbit.config import (
    EARTH_RADIUS_KM,
    MATERIALS,
    MAX_GROUND_STATIONS,
    MIN_DEBRIS_SIZE_M,
    REENTRY_ALTITUDE_KM,
)
from laser_deorbit.models import DebrisTarget, GroundStation
from laser_deorbit.tle import check_tle_lines

logger = logging.getLogger(__name__)

MIN_AREA_TO_MASS = 0.001  # m²/kg
MAX_AREA_TO_MASS = 1.0
AREA_TO_MASS_REL_TOLERANCE = 1e-3
HIGH_ORBIT_PERIGEE_KM = 2000.0


class MissionInputError(ValueError):
    """Mission inputs are invalid; ``errors`` lists every violation."""

    def __init__(self, errors: Sequence[str], warnings: Sequence[str] = ()):
        self.errors = list(errors)
        self.warnings = list(warnings)
        super().__init__("Invalid mission inputs: " + "; ".join(self.errors))


@dataclass
class ValidationReport:
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    def extend(self, other: "ValidationReport") -> None:
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)

    def raise_if_invalid(self) -> None:
        if self.errors:
            raise MissionInputError(self.errors, self.warnings)


def validate_debris_parameters(debris: DebrisTarget) -> ValidationReport:
    """
    Check a debris target's physical and orbital parameters.

    Args:
        debris: Target to check

    Returns:
        ValidationReport with all errors and warnings found
    """
    report = ValidationReport()
    errors, warnings = report.errors, report.warnings

    if debris.mass_kg <= 0:
        errors.append("Mass must be positive")
    if debris.cross_section_m2 <= 0:
        errors.append("Cross-sectional area must be positive")
    if debris.size_m <= 0:
        errors.append("Size must be positive")
    if debris.material.upper() not in MATERIALS:
        errors.append(f"Unknown material '{debris.material}' (known: {', '.join(MATERIALS)})")

    tle_ok = True
    if bool(debris.tle_line1) != bool(debris.tle_line2):
        errors.append("TLE requires both lines")
        tle_ok = False
    elif debris.has_tle:
        problems = check_tle_lines(debris.tle_line1, debris.tle_line2)
        errors.extend(problems)
        tle_ok = not problems

    has_catalog_orbit = debris.perigee_km is not None and debris.apogee_km is not None
    if debris.elements is None and not has_catalog_orbit and not debris.has_tle:
        errors.append("No orbit given (orbital elements, perigee/apogee or TLE)")
    elif debris.elements is not None or has_catalog_orbit or tle_ok:
        elements = debris.initial_elements()

        if elements.a <= EARTH_RADIUS_KM:
            errors.append("Semi-major axis must be above Earth surface")
        if elements.e < 0 or elements.e >= 1:
            errors.append("Eccentricity must be between 0 and 1")

        perigee = elements.perigee_altitude_km
        if perigee < REENTRY_ALTITUDE_KM:
            warnings.append("Perigee already below re-entry altitude")
        if perigee > HIGH_ORBIT_PERIGEE_KM:
            warnings.append("Very high orbit - removal may take years")

    if debris.mass_kg > 0 and debris.area_m2 is not None and debris.area_to_mass is not None:
        derived = debris.area_m2 / debris.mass_kg
        if not math.isclose(derived, debris.area_to_mass, rel_tol=AREA_TO_MASS_REL_TOLERANCE):
            errors.append(
                f"Area-to-mass ratio {debris.area_to_mass:.4g} m²/kg disagrees with "
                f"area / mass = {derived:.4g} m²/kg"
            )

    if debris.mass_kg > 0 and debris.cross_section_m2 > 0:
        area_to_mass = debris.area_to_mass_ratio
        if area_to_mass < MIN_AREA_TO_MASS or area_to_mass > MAX_AREA_TO_MASS:
            warnings.append(f"Unusual area-to-mass ratio: {area_to_mass:.3f} m²/kg")

    if 0 < debris.size_m < MIN_DEBRIS_SIZE_M:
        warnings.append("Debris may be too small to track accurately")

    return report


def validate_stations(stations: Sequence[GroundStation],
                      max_stations: int = MAX_GROUND_STATIONS) -> ValidationReport:
    report = ValidationReport()
    if len(stations) > max_stations:
        report.errors.append(f"At most {max_stations} ground stations are supported, got {len(stations)}")

    names = [station.name for station in stations]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        report.warnings.append(f"Duplicate station names: {', '.join(duplicates)}")
    return report


def validate_mission_inputs(
    stations: Sequence[GroundStation],
    debris: DebrisTarget,
    max_stations: int = MAX_GROUND_STATIONS,
) -> ValidationReport:
    """
    Validate everything a mission run needs.

    Raises nothing; call ``raise_if_invalid`` on the result to turn errors
    into a MissionInputError.
    """
    report = validate_debris_parameters(debris)
    report.extend(validate_stations(stations, max_stations))

    for warning in report.warnings:
        logger.warning(f"{debris.name}: {warning}")
    return report
