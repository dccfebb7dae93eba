"""
Orbital Evolution Model

How laser delta-V increments change the debris orbit, and how long the
atmosphere then needs to finish the job.

Two burn models are provided:

- ``track_perigee_evolution``: apogee-anchored recurrence over a sequence
  of delta-V values. Every burn is assumed to happen instantaneously at
  apogee, so apogee radius stays fixed and only perigee drops. This is an
  approximation; real engagements happen wherever the pass geometry puts
  the object.
- ``calculate_orbital_changes``: a single tangential burn at a given true
  anomaly via vis-viva and h = r·v. The campaign planner uses this model
  with the true anomaly set to apogee by default.

``propagate_with_laser_passes`` applies burns to full state vectors at the
actual propagated positions.
"""

import math
import logging
from bisect import bisect_left
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np

from laser_deorbit.config import (
    DRAG_COEFFICIENT,
    EARTH_RADIUS_KM,
    LIFETIME_END_ALTITUDE_KM,
    MU_EARTH,
    REENTRY_ALTITUDE_KM,
)
from laser_deorbit.models import BurnDirection, DecayEstimate
from laser_deorbit.orbital_mechanics import (
    OrbitalElements,
    StateVector,
    state_to_elements,
)

logger = logging.getLogger(__name__)


# Atmospheric density bands: (lower altitude bound km, density kg/km³).
# A perigee exactly on a bound belongs to the band below it.
DENSITY_BANDS: Tuple[Tuple[float, float], ...] = (
    (-math.inf, 1e-10),
    (200.0, 1e-11),
    (300.0, 1e-12),
    (400.0, 1e-13),
    (600.0, 1e-15),
)

# Exponential atmosphere for re-entry time estimates
REFERENCE_DENSITY_KG_M3 = 4e-12  # at 400 km
REFERENCE_ALTITUDE_M = 400e3
SCALE_HEIGHT_M = 70e3


def is_reentry_achieved(perigee_km: float) -> bool:
    return perigee_km < REENTRY_ALTITUDE_KM


def orbital_period_minutes(semi_major_axis_km: float) -> float:
    return 2.0 * math.pi * math.sqrt(semi_major_axis_km ** 3 / MU_EARTH) / 60.0


def apply_delta_v(state: StateVector, delta_v_ms: float,
                  direction: Union[BurnDirection, str] = BurnDirection.RETROGRADE) -> StateVector:
    """
    Add a velocity increment along the velocity or radial direction.

    Args:
        state: Inertial state (km, km/s)
        delta_v_ms: Magnitude of the increment (m/s)
        direction: prograde, retrograde, radial-in or radial-out

    Returns:
        New state with the same position
    """
    direction = BurnDirection(direction)
    r = state.r
    v = state.v
    dv_km_s = delta_v_ms / 1000.0

    if direction in (BurnDirection.PROGRADE, BurnDirection.RETROGRADE):
        unit = v / np.linalg.norm(v)
    else:
        unit = r / np.linalg.norm(r)

    if direction in (BurnDirection.RETROGRADE, BurnDirection.RADIAL_IN):
        unit = -unit

    return StateVector(state.position, tuple(float(x) for x in v + unit * dv_km_s))


@dataclass(frozen=True)
class OrbitalChange:
    """Effect of a tangential burn on the orbit"""

    old_a_km: float
    old_e: float
    new_a_km: float
    new_e: float

    @property
    def delta_a_km(self) -> float:
        return self.new_a_km - self.old_a_km

    @property
    def delta_e(self) -> float:
        return self.new_e - self.old_e

    @property
    def old_perigee_km(self) -> float:
        return self.old_a_km * (1.0 - self.old_e) - EARTH_RADIUS_KM

    @property
    def new_perigee_km(self) -> float:
        return self.new_a_km * (1.0 - self.new_e) - EARTH_RADIUS_KM

    @property
    def old_apogee_km(self) -> float:
        return self.old_a_km * (1.0 + self.old_e) - EARTH_RADIUS_KM

    @property
    def new_apogee_km(self) -> float:
        return self.new_a_km * (1.0 + self.new_e) - EARTH_RADIUS_KM

    @property
    def perigee_change_km(self) -> float:
        return self.new_perigee_km - self.old_perigee_km


def calculate_orbital_changes(delta_v_ms: float, semi_major_axis_km: float,
                              eccentricity: float, true_anomaly: float = math.pi) -> OrbitalChange:
    """
    Orbit after a tangential burn at the given true anomaly.

    The burn is treated as purely along-track: the new speed comes from
    v + ΔV, the new semi-major axis from vis-viva at the same radius, and
    the new eccentricity from h = r·v.

    Args:
        delta_v_ms: Velocity change (m/s), negative for retrograde
        semi_major_axis_km: Current semi-major axis (km)
        eccentricity: Current eccentricity
        true_anomaly: Where the burn is applied (rad), default apogee

    Returns:
        OrbitalChange with old and new a/e

    Raises:
        ValueError: If the burn would unbind the orbit
    """
    a, e = semi_major_axis_km, eccentricity
    r = a * (1.0 - e * e) / (1.0 + e * math.cos(true_anomaly))
    v = math.sqrt(MU_EARTH * (2.0 / r - 1.0 / a))

    v_new = v + delta_v_ms / 1000.0
    inverse_a = 2.0 / r - v_new * v_new / MU_EARTH
    if inverse_a <= 0:
        raise ValueError(f"Burn of {delta_v_ms} m/s reaches escape velocity")
    a_new = 1.0 / inverse_a

    h_new = r * v_new
    e_new = math.sqrt(max(0.0, 1.0 - h_new * h_new / (MU_EARTH * a_new)))

    return OrbitalChange(a, e, a_new, e_new)


@dataclass(frozen=True)
class PerigeeStep:
    pass_number: int
    perigee_km: float
    apogee_km: float
    semi_major_axis_km: float
    eccentricity: float
    delta_v_ms: float = 0.0
    reentry: bool = False


def track_perigee_evolution(perigee_km: float, apogee_km: float,
                            delta_vs: Sequence[float]) -> List[PerigeeStep]:
    """
    Perigee after each of a sequence of retrograde burns at apogee.

    Apogee radius is held fixed; the reduced apogee speed gives the new
    semi-major axis via vis-viva and perigee follows as 2a - r_a.

    Args:
        perigee_km: Initial perigee altitude
        apogee_km: Initial apogee altitude
        delta_vs: Retrograde delta-V per pass (m/s)

    Returns:
        Steps starting with the initial orbit as pass 0
    """
    ra = apogee_km + EARTH_RADIUS_KM
    rp = perigee_km + EARTH_RADIUS_KM
    a = (rp + ra) / 2.0

    steps = [PerigeeStep(0, perigee_km, apogee_km, a, (ra - rp) / (ra + rp))]

    for index, dv in enumerate(delta_vs, start=1):
        v_apogee = math.sqrt(MU_EARTH * (2.0 / ra - 1.0 / a))
        v_new = v_apogee - dv / 1000.0
        a = 1.0 / (2.0 / ra - v_new * v_new / MU_EARTH)
        rp = 2.0 * a - ra

        perigee_alt = rp - EARTH_RADIUS_KM
        steps.append(PerigeeStep(
            pass_number=index,
            perigee_km=perigee_alt,
            apogee_km=ra - EARTH_RADIUS_KM,
            semi_major_axis_km=a,
            eccentricity=(ra - rp) / (ra + rp),
            delta_v_ms=dv,
            reentry=is_reentry_achieved(perigee_alt),
        ))

    return steps


def first_reentry_pass(steps: Sequence[PerigeeStep]) -> Optional[int]:
    """Pass number at which perigee first drops below the re-entry altitude."""
    for step in steps:
        if step.reentry:
            return step.pass_number
    return None


def atmospheric_density(altitude_km: float) -> float:
    """Density (kg/km³) of the band containing ``altitude_km``."""
    bounds = [bound for bound, _ in DENSITY_BANDS]
    index = bisect_left(bounds, altitude_km) - 1
    return DENSITY_BANDS[max(index, 0)][1]


def estimate_atmospheric_decay(perigee_km: float, area_to_mass: float) -> DecayEstimate:
    """
    Passive decay rate and lifetime from drag at perigee.

    Args:
        perigee_km: Perigee altitude (km)
        area_to_mass: Area-to-mass ratio (m²/kg)

    Returns:
        DecayEstimate with rate in km/day and lifetime to 100 km in days
    """
    rho = atmospheric_density(perigee_km)
    v_perigee = math.sqrt(MU_EARTH / (EARTH_RADIUS_KM + perigee_km))
    decay_rate = 0.5 * DRAG_COEFFICIENT * rho * area_to_mass * v_perigee ** 2 * 86400.0 / 1000.0

    if decay_rate > 0:
        lifetime = (perigee_km - LIFETIME_END_ALTITUDE_KM) / decay_rate
    else:
        lifetime = math.inf

    return DecayEstimate(
        perigee_km=perigee_km,
        decay_rate_km_per_day=decay_rate,
        estimated_lifetime_days=lifetime,
        natural_decay=perigee_km < 600.0,
    )


def estimate_reentry_time(perigee_km: float, apogee_km: float, ballistic_coefficient: float) -> float:
    """
    Time to re-entry (s) from a simplified King-Hele decay model.

    Args:
        perigee_km: Perigee altitude
        apogee_km: Apogee altitude
        ballistic_coefficient: m / (C_d·A) in kg/m²

    Returns:
        Seconds until perigee reaches the re-entry altitude; 0 if it
        already has
    """
    if perigee_km <= REENTRY_ALTITUDE_KM:
        return 0.0

    perigee_m = perigee_km * 1e3
    rho = REFERENCE_DENSITY_KG_M3 * math.exp(-(perigee_m - REFERENCE_ALTITUDE_M) / SCALE_HEIGHT_M)

    a_m = ((perigee_km + apogee_km) / 2.0 + EARTH_RADIUS_KM) * 1e3
    velocity = math.sqrt(MU_EARTH * 1e9 / a_m)

    # dh/dt ≈ (3π/2) ρ v H / B
    decay_rate = (3.0 * math.pi / 2.0) * rho * velocity * SCALE_HEIGHT_M / ballistic_coefficient

    return (perigee_km - REENTRY_ALTITUDE_KM) * 1e3 / decay_rate


@dataclass(frozen=True)
class BurnRecord:
    time: datetime
    pass_number: int
    before: OrbitalElements
    after: OrbitalElements
    delta_v_ms: float
    cumulative_delta_v_ms: float

    @property
    def perigee_km(self) -> float:
        return self.after.perigee_altitude_km

    @property
    def apogee_km(self) -> float:
        return self.after.apogee_altitude_km

    @property
    def reentry_approaching(self) -> bool:
        return is_reentry_achieved(self.perigee_km)


@dataclass(frozen=True)
class BurnHistory:
    history: Tuple[BurnRecord, ...]
    total_delta_v_ms: float

    @property
    def final_elements(self) -> Optional[OrbitalElements]:
        return self.history[-1].after if self.history else None

    @property
    def reentry_achieved(self) -> bool:
        return bool(self.history) and self.history[-1].reentry_approaching


def propagate_with_laser_passes(propagator, burns: Sequence[Tuple[datetime, float]]) -> BurnHistory:
    """
    Apply retrograde burns to the propagated state at each burn instant.

    The propagator is not updated with the post-burn orbit, so each burn
    is evaluated independently against the unperturbed trajectory.

    Args:
        propagator: Any propagation.Propagator
        burns: (time, delta-V in m/s) pairs, in any order

    Returns:
        BurnHistory ordered by time
    """
    history = []
    cumulative = 0.0

    for number, (when, dv) in enumerate(sorted(burns, key=lambda burn: burn[0]), start=1):
        r, v = propagator.propagate(when)
        state = StateVector.from_arrays(r, v)

        before = state_to_elements(state)
        after = state_to_elements(apply_delta_v(state, dv, BurnDirection.RETROGRADE))
        cumulative += dv

        history.append(BurnRecord(when, number, before, after, dv, cumulative))
        logger.debug(
            f"Burn {number} at {when.isoformat()}: perigee "
            f"{before.perigee_altitude_km:.1f} -> {after.perigee_altitude_km:.1f} km"
        )

    return BurnHistory(tuple(history), cumulative)
