"""
Mission Campaign Planner

Walks an ordered list of visibility passes and decides, pass by pass,
whether and how hard to engage the debris.

Per pass:
    1. Cool the target for the time since the previous pass
    2. Slant range from the current orbit (mean altitude + station offset)
    3. Fluence at that range
    4. Adaptive pulse budget from the thermal margin and repetition rate
    5. Skip if the required cooldown exceeds the elapsed gap
    6. Engage: intensity gate, pulse caps, heating, delta-V, orbit update
    7. Stop once perigee is below the re-entry altitude

Skipped passes are kept with their reason code. Each planner run owns its
thermal tracker and orbital elements; nothing is shared between runs.
"""

import math
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence

from laser_deorbit.config import (
    DEFAULT_PASS_DURATION_S,
    LEO_AMBIENT_TEMP_K,
    STATION_RANGE_OFFSET_KM,
)
from laser_deorbit.laser import (
    beam_radius_at_range,
    delta_v_per_pulse,
    exceeds_intensity_limit,
    fluence_at_range,
    intensity_at_range,
    max_pulses_per_pass,
)
from laser_deorbit.models import (
    DebrisTarget,
    LaserConfig,
    LimitingFactor,
    PassEngagementResult,
    PerigeePoint,
    SkipReason,
    VisibilityPass,
)
from laser_deorbit.orbital_evolution import (
    OrbitalChange,
    calculate_orbital_changes,
    estimate_reentry_time,
    is_reentry_achieved,
)
from laser_deorbit.orbital_mechanics import OrbitalElements
from laser_deorbit.thermal import HeatingResult, ThermalBudgetTracker

logger = logging.getLogger(__name__)

# Fraction of the thermal margin above which heat is the binding constraint
THERMAL_UTILIZATION_LIMIT = 0.95

# Absorbs rounding in rate × duration products before flooring to whole pulses
PULSE_ROUNDING_TOLERANCE = 1e-9


@dataclass(frozen=True)
class PulseBudget:
    """Repetition rate and pulse count chosen for one pass"""

    repetition_rate_hz: float
    pulses: int
    temp_rise_per_pulse_k: float
    thermal_utilization: float
    time_utilization: float
    limiting_factor: LimitingFactor

    @property
    def total_temp_rise_k(self) -> float:
        return self.pulses * self.temp_rise_per_pulse_k


def calculate_adaptive_rep_rate(tracker: ThermalBudgetTracker, fluence: float,
                                pass_duration_s: float, max_rate_hz: float) -> PulseBudget:
    """
    Slow the laser down so the pass uses, but does not exceed, the thermal margin.

    Small fragments with a large margin run at the instrument's maximum
    rate; objects close to their limit get fewer, slower pulses.
    """
    rise = tracker.temperature_rise(1, fluence)
    margin = tracker.safety_margin_k

    if rise <= 0 or pass_duration_s <= 0 or margin <= 0:
        return PulseBudget(
            repetition_rate_hz=0.0,
            pulses=0,
            temp_rise_per_pulse_k=rise,
            thermal_utilization=1.0 if margin <= 0 else 0.0,
            time_utilization=0.0,
            limiting_factor=LimitingFactor.THERMAL if margin <= 0 else LimitingFactor.LASER_SYSTEM,
        )

    max_pulses_by_temp = math.floor(margin / rise)
    ideal_rate = max_pulses_by_temp / pass_duration_s
    rate = min(ideal_rate, max_rate_hz)
    pulses = math.floor(rate * pass_duration_s + PULSE_ROUNDING_TOLERANCE)

    thermal_utilization = min(pulses * rise / margin, 1.0)
    if max_pulses_by_temp == 0 or thermal_utilization >= THERMAL_UTILIZATION_LIMIT:
        limiting = LimitingFactor.THERMAL
    else:
        limiting = LimitingFactor.LASER_SYSTEM

    return PulseBudget(
        repetition_rate_hz=rate,
        pulses=pulses,
        temp_rise_per_pulse_k=rise,
        thermal_utilization=thermal_utilization,
        time_utilization=rate / max_rate_hz,
        limiting_factor=limiting,
    )


@dataclass
class LaserPassOutcome:
    """Physics of one engagement attempt"""

    success: bool
    elements: OrbitalElements
    reason: Optional[SkipReason] = None
    beam_radius_m: float = 0.0
    fluence_j_cm2: float = 0.0
    intensity_w_cm2: float = 0.0
    pulses: int = 0
    max_pulses_thermal: int = 0
    max_pulses_time: int = 0
    limiting_factor: Optional[LimitingFactor] = None
    delta_v_per_pulse_ms: float = 0.0
    delta_v_ms: float = 0.0
    energy_j: float = 0.0
    heating: Optional[HeatingResult] = None
    orbital_change: Optional[OrbitalChange] = None
    reentry_achieved: bool = False
    time_to_reentry_s: Optional[float] = None


def simulate_laser_pass(
    debris: DebrisTarget,
    elements: OrbitalElements,
    laser: LaserConfig,
    range_m: float,
    tracker: ThermalBudgetTracker,
    pass_duration_s: float = DEFAULT_PASS_DURATION_S,
    repetition_rate_hz: Optional[float] = None,
    timestamp: Optional[datetime] = None,
    burn_true_anomaly: float = math.pi,
) -> LaserPassOutcome:
    """
    Engage the debris for one pass.

    Only an accepted engagement changes the tracker; the returned
    ``elements`` are the post-burn orbit on success and the input orbit
    otherwise.

    Args:
        debris: Target properties (size, mass, area)
        elements: Orbit before the pass
        laser: Laser configuration
        range_m: Slant range to the target
        tracker: Thermal tracker of the target
        pass_duration_s: Engagement window
        repetition_rate_hz: Pulse rate, defaults to the laser maximum
        timestamp: Recorded in the heat history
        burn_true_anomaly: Where the tangential burn is applied

    Returns:
        LaserPassOutcome
    """
    rate = laser.max_repetition_rate_hz if repetition_rate_hz is None else repetition_rate_hz

    beam_radius = beam_radius_at_range(range_m, laser)
    fluence = fluence_at_range(range_m, laser)
    intensity = intensity_at_range(range_m, laser)

    outcome = LaserPassOutcome(
        success=False,
        elements=elements,
        beam_radius_m=beam_radius,
        fluence_j_cm2=fluence,
        intensity_w_cm2=intensity,
    )

    if exceeds_intensity_limit(debris.size_m, intensity):
        outcome.reason = SkipReason.INTENSITY_TOO_HIGH
        return outcome

    max_by_thermal = max_pulses_per_pass(
        tracker.safety_margin_k, fluence, tracker.area_to_mass, tracker.material.specific_heat
    )
    max_by_time = math.floor(pass_duration_s * rate + PULSE_ROUNDING_TOLERANCE)
    pulses = min(max_by_thermal, max_by_time)

    outcome.max_pulses_thermal = max_by_thermal
    outcome.max_pulses_time = max_by_time
    outcome.limiting_factor = LimitingFactor.THERMAL if pulses == max_by_thermal else LimitingFactor.TIME

    if pulses < 1:
        outcome.reason = SkipReason.THERMAL_LIMIT_REACHED
        return outcome

    heating = tracker.apply_heating(pulses, fluence, timestamp)
    outcome.heating = heating
    if not heating.accepted:
        outcome.reason = heating.reason
        return outcome

    dv_single = delta_v_per_pulse(fluence, debris.mass_kg, laser.pulse_energy_j)
    total_dv = dv_single * pulses

    change = calculate_orbital_changes(-total_dv, elements.a, elements.e, burn_true_anomaly)
    new_elements = elements.with_changes(a=change.new_a_km, e=change.new_e)
    reentry = is_reentry_achieved(change.new_perigee_km)

    outcome.success = True
    outcome.elements = new_elements
    outcome.pulses = pulses
    outcome.delta_v_per_pulse_ms = dv_single
    outcome.delta_v_ms = total_dv
    outcome.energy_j = laser.pulse_energy_j * pulses
    outcome.orbital_change = change
    outcome.reentry_achieved = reentry
    if not reentry:
        outcome.time_to_reentry_s = estimate_reentry_time(
            change.new_perigee_km, change.new_apogee_km, debris.effective_ballistic_coefficient
        )
    return outcome


@dataclass
class CampaignPlan:
    """Result of a planner run"""

    initial_elements: OrbitalElements
    final_elements: OrbitalElements
    results: List[PassEngagementResult] = field(default_factory=list)
    perigee_series: List[PerigeePoint] = field(default_factory=list)
    completed: bool = False
    reentry_pass_number: Optional[int] = None
    total_pulses: int = 0
    total_energy_j: float = 0.0
    total_delta_v_ms: float = 0.0
    duration_days: float = 0.0
    final_temperature_k: float = LEO_AMBIENT_TEMP_K
    max_temperature_k: float = LEO_AMBIENT_TEMP_K

    @property
    def passes_succeeded(self) -> int:
        return sum(1 for result in self.results if not result.skipped)

    @property
    def passes_skipped(self) -> int:
        return sum(1 for result in self.results if result.skipped)


class MissionPlanner:
    """
    Campaign state machine for one debris target.

    Args:
        debris: Target to deorbit
        laser: Laser configuration (defaults if omitted)
        initial_temp_k: Starting and ambient temperature of the target
        burn_true_anomaly: True anomaly used for the tangential burn model
        station_range_offset_km: Added to the mean altitude to approximate
            the slant range from a ground station
    """

    def __init__(
        self,
        debris: DebrisTarget,
        laser: Optional[LaserConfig] = None,
        initial_temp_k: float = LEO_AMBIENT_TEMP_K,
        burn_true_anomaly: float = math.pi,
        station_range_offset_km: float = STATION_RANGE_OFFSET_KM,
    ):
        self.debris = debris
        self.laser = laser or LaserConfig()
        self.initial_temp_k = initial_temp_k
        self.burn_true_anomaly = burn_true_anomaly
        self.station_range_offset_km = station_range_offset_km

    def slant_range_km(self, elements: OrbitalElements) -> float:
        mean_altitude = (elements.perigee_altitude_km + elements.apogee_altitude_km) / 2.0
        return mean_altitude + self.station_range_offset_km

    def plan(self, passes: Sequence[VisibilityPass]) -> CampaignPlan:
        """
        Run the campaign over ``passes`` (chronological order).

        Returns:
            CampaignPlan with every processed pass, accepted or skipped
        """
        debris = self.debris
        tracker = ThermalBudgetTracker(
            debris.material, debris.mass_kg, debris.cross_section_m2, self.initial_temp_k
        )
        elements = debris.initial_elements()

        plan = CampaignPlan(
            initial_elements=elements,
            final_elements=elements,
            final_temperature_k=tracker.current_temp_k,
            max_temperature_k=tracker.current_temp_k,
        )
        plan.perigee_series.append(
            PerigeePoint(pass_number=0, perigee_km=elements.perigee_altitude_km,
                         apogee_km=elements.apogee_altitude_km)
        )

        if not passes:
            return plan

        first_start = passes[0].start_time
        last_processed = first_start

        logger.info(
            f"Planning campaign for {debris.name}: {len(passes)} passes, "
            f"perigee {elements.perigee_altitude_km:.1f} km"
        )

        for index, visibility_pass in enumerate(passes):
            pass_number = index + 1
            last_processed = visibility_pass.start_time
            elapsed = (visibility_pass.start_time - first_start).total_seconds()

            gap = None
            if index > 0:
                gap = (visibility_pass.start_time - passes[index - 1].start_time).total_seconds()
                tracker.apply_cooling(gap)

            temp_before = tracker.current_temp_k
            range_km = self.slant_range_km(elements)
            fluence = fluence_at_range(range_km * 1e3, self.laser)
            duration = visibility_pass.duration_s

            budget = calculate_adaptive_rep_rate(
                tracker, fluence, duration, self.laser.max_repetition_rate_hz
            )
            required = tracker.required_cooldown(budget.pulses, fluence)

            common = dict(
                pass_number=pass_number,
                station_name=visibility_pass.station_name,
                start_time=visibility_pass.start_time,
                elapsed_s=elapsed,
                duration_s=duration,
                fluence_j_cm2=fluence,
                slant_range_km=range_km,
                temperature_before_k=temp_before,
                limiting_factor=budget.limiting_factor,
                repetition_rate_hz=budget.repetition_rate_hz,
                required_cooldown_s=required,
                actual_cooldown_s=gap,
            )

            if gap is not None and required > gap:
                logger.debug(f"Pass {pass_number} skipped: cooldown {required:.0f} s > gap {gap:.0f} s")
                plan.results.append(self._skipped(common, SkipReason.INSUFFICIENT_COOLDOWN,
                                                  tracker, elements, plan.total_delta_v_ms))
                continue

            outcome = simulate_laser_pass(
                debris,
                elements,
                self.laser,
                range_km * 1e3,
                tracker,
                pass_duration_s=duration,
                repetition_rate_hz=budget.repetition_rate_hz,
                timestamp=visibility_pass.start_time,
                burn_true_anomaly=self.burn_true_anomaly,
            )
            common["intensity_w_cm2"] = outcome.intensity_w_cm2

            if not outcome.success:
                logger.debug(f"Pass {pass_number} skipped: {outcome.reason.value}")
                plan.results.append(self._skipped(common, outcome.reason,
                                                  tracker, elements, plan.total_delta_v_ms))
                continue

            elements = outcome.elements
            plan.total_pulses += outcome.pulses
            plan.total_energy_j += outcome.energy_j
            plan.total_delta_v_ms += outcome.delta_v_ms
            plan.max_temperature_k = max(plan.max_temperature_k, tracker.current_temp_k)

            time_to_reentry = (
                outcome.time_to_reentry_s / 86400.0 if outcome.time_to_reentry_s is not None else None
            )
            plan.results.append(PassEngagementResult(
                skipped=False,
                pulses=outcome.pulses,
                delta_v_ms=outcome.delta_v_ms,
                cumulative_delta_v_ms=plan.total_delta_v_ms,
                temperature_after_k=tracker.current_temp_k,
                thermal_delta_k=outcome.heating.temperature_rise_k,
                elements=elements,
                perigee_km=elements.perigee_altitude_km,
                apogee_km=elements.apogee_altitude_km,
                time_to_reentry_days=time_to_reentry,
                **common,
            ))
            plan.perigee_series.append(PerigeePoint(
                pass_number=pass_number,
                perigee_km=elements.perigee_altitude_km,
                apogee_km=elements.apogee_altitude_km,
            ))

            logger.debug(
                f"Pass {pass_number}: {outcome.pulses} pulses, ΔV {outcome.delta_v_ms:.2f} m/s, "
                f"perigee {elements.perigee_altitude_km:.1f} km, T {tracker.current_temp_k:.1f} K"
            )

            if outcome.reentry_achieved:
                plan.completed = True
                plan.reentry_pass_number = pass_number
                logger.info(f"Re-entry perigee reached on pass {pass_number}")
                break

        plan.final_elements = elements
        plan.final_temperature_k = tracker.current_temp_k
        plan.duration_days = (last_processed - first_start).total_seconds() / 86400.0
        return plan

    @staticmethod
    def _skipped(common: dict, reason: SkipReason, tracker: ThermalBudgetTracker,
                 elements: OrbitalElements, cumulative_dv: float) -> PassEngagementResult:
        return PassEngagementResult(
            skipped=True,
            reason=reason,
            cumulative_delta_v_ms=cumulative_dv,
            temperature_after_k=tracker.current_temp_k,
            elements=elements,
            perigee_km=elements.perigee_altitude_km,
            apogee_km=elements.apogee_altitude_km,
            **common,
        )
