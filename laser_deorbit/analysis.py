"""
Campaign analysis helpers

Quick estimates used for target selection before a full campaign run:
debris properties from size alone, relative removal efficiency across a
list of targets, collision-risk reduction, and how often a station sees
an orbit.
"""

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

from laser_deorbit.config import DRAG_COEFFICIENT, MU_EARTH, STATION_RANGE_OFFSET_KM
from laser_deorbit.laser import cumulative_delta_v, fluence_at_range
from laser_deorbit.models import DebrisTarget, LaserConfig

# Shape assumptions by debris type: (density kg/m³, area factor)
DEBRIS_TYPES = {
    "FRAGMENT": (2700.0, 0.5),  # aluminium, irregular
    "ROCKET_BODY": (1500.0, 0.3),  # lightweight cylinder
    "PAYLOAD": (800.0, 0.4),  # hollow box
}
DEFAULT_DEBRIS_TYPE = (2000.0, 0.4)

# Planning assumptions for efficiency ranking
PULSES_PER_PASS_ESTIMATE = 100
REENTRY_VELOCITY_FRACTION = 0.05
DAYS_BETWEEN_PASSES = 1.5

# Most congested shell and its width
CONGESTED_ALTITUDE_KM = 800.0
CONGESTED_WIDTH_KM = 200.0


@dataclass(frozen=True)
class DebrisProperties:
    mass_kg: float
    area_m2: float
    area_to_mass: float
    material: str
    ballistic_coefficient: float
    volume_m3: float


def estimate_debris_properties(size_m: float, debris_type: str = "FRAGMENT") -> DebrisProperties:
    """
    Rough mass and area from a characteristic size.

    Args:
        size_m: Characteristic dimension (m)
        debris_type: FRAGMENT, ROCKET_BODY or PAYLOAD; anything else uses
            generic assumptions

    Returns:
        DebrisProperties
    """
    density, area_factor = DEBRIS_TYPES.get(debris_type.upper(), DEFAULT_DEBRIS_TYPE)

    volume = area_factor * size_m ** 3
    mass = density * volume
    area = area_factor * size_m ** 2

    return DebrisProperties(
        mass_kg=mass,
        area_m2=area,
        area_to_mass=area / mass,
        material="ALUMINUM",
        ballistic_coefficient=mass / (DRAG_COEFFICIENT * area),
        volume_m3=volume,
    )


@dataclass(frozen=True)
class RemovalEfficiency:
    name: str
    size_m: float
    mass_kg: float
    delta_v_per_pass_ms: float
    estimated_passes: int
    estimated_days: float
    efficiency: float  # m/s per kg per pass


def compare_debris_removal_efficiency(debris_list: Sequence[DebrisTarget],
                                      laser: Optional[LaserConfig] = None) -> List[RemovalEfficiency]:
    """
    Rank targets by delta-V gained per kilogram per pass, best first.

    Assumes a fixed number of pulses per pass and that re-entry needs a
    velocity change of 5% of orbital speed.
    """
    laser = laser or LaserConfig()
    results = []

    for debris in debris_list:
        elements = debris.initial_elements()
        mean_altitude = (elements.perigee_altitude_km + elements.apogee_altitude_km) / 2.0
        range_m = (mean_altitude + STATION_RANGE_OFFSET_KM) * 1e3

        fluence = fluence_at_range(range_m, laser)
        dv_per_pass = cumulative_delta_v(
            PULSES_PER_PASS_ESTIMATE, fluence, debris.mass_kg, laser.pulse_energy_j
        )

        orbital_velocity_ms = math.sqrt(MU_EARTH / elements.a) * 1e3
        required_dv = orbital_velocity_ms * REENTRY_VELOCITY_FRACTION
        passes = math.ceil(required_dv / dv_per_pass)

        results.append(RemovalEfficiency(
            name=debris.name,
            size_m=debris.size_m,
            mass_kg=debris.mass_kg,
            delta_v_per_pass_ms=dv_per_pass,
            estimated_passes=passes,
            estimated_days=passes * DAYS_BETWEEN_PASSES,
            efficiency=dv_per_pass / debris.mass_kg,
        ))

    return sorted(results, key=lambda result: result.efficiency, reverse=True)


@dataclass(frozen=True)
class RiskReduction:
    debris_removed: int
    removal_fraction: float
    relative_probability_reduction: float
    altitude_risk_factor: float
    effective_risk_reduction: float


def calculate_risk_reduction(debris_removed: int, total_debris: int, altitude_km: float) -> RiskReduction:
    """
    Collision-risk reduction from removing objects from a shell.

    Collision probability scales with the square of the population, and
    the benefit is weighted by a Gaussian centred on the most congested
    altitude.
    """
    if total_debris <= 0:
        raise ValueError("Total debris population must be positive")

    fraction = debris_removed / total_debris
    relative = 1.0 - (1.0 - fraction) ** 2
    multiplier = math.exp(-((altitude_km - CONGESTED_ALTITUDE_KM) / CONGESTED_WIDTH_KM) ** 2)

    return RiskReduction(
        debris_removed=debris_removed,
        removal_fraction=fraction,
        relative_probability_reduction=relative,
        altitude_risk_factor=multiplier,
        effective_risk_reduction=relative * multiplier,
    )


def estimate_passes_per_day(station_latitude_deg: float, inclination_deg: float) -> int:
    """
    Approximate daily passes of an orbit over a station.

    Stations more than 10° poleward of the inclination see nothing.
    """
    lat = abs(station_latitude_deg)
    inc = abs(inclination_deg)

    if lat > inc + 10.0:
        return 0

    return math.floor(2.0 * (1.0 + abs(lat - inc) / 90.0))
