"""
Data models exchanged with the surrounding application.

Inputs (ground stations, debris selection, laser and scan settings) and
outputs (visibility passes, per-pass engagement results, the mission report)
are pydantic models so collaborators get validated, stable field names and
``model_dump()`` for serialization. Units are encoded in the field names:
altitudes and ranges in km, durations in seconds, delta-V in m/s.
"""

import math
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from laser_deorbit import config
from laser_deorbit.orbital_mechanics import OrbitalElements
from laser_deorbit.tle import tle_to_elements


class SkipReason(Enum):
    """Why a pass was not engaged"""

    INTENSITY_TOO_HIGH = "INTENSITY_TOO_HIGH"
    MELTING_RISK = "MELTING_RISK"
    TEMP_LIMIT_EXCEEDED = "TEMP_LIMIT_EXCEEDED"
    INSUFFICIENT_COOLDOWN = "INSUFFICIENT_COOLDOWN"
    THERMAL_LIMIT_REACHED = "THERMAL_LIMIT_REACHED"


class LimitingFactor(Enum):
    """Constraint that bounded the pulse count of a pass"""

    THERMAL = "THERMAL"
    LASER_SYSTEM = "LASER_SYSTEM"
    TIME = "TIME"


class BurnDirection(Enum):
    """Direction of a delta-V increment"""

    PROGRADE = "prograde"
    RETROGRADE = "retrograde"
    RADIAL_IN = "radial-in"
    RADIAL_OUT = "radial-out"


class CampaignStatus(Enum):
    COMPLETED = "COMPLETED"
    INCOMPLETE = "INCOMPLETE"


class GroundStation(BaseModel):
    """Laser ground station location"""

    model_config = ConfigDict(frozen=True)

    name: str = "Station"
    latitude_deg: float = Field(ge=-90.0, le=90.0)
    longitude_deg: float = Field(ge=-180.0, le=180.0)
    height_km: float = 0.0


class DebrisTarget(BaseModel):
    """
    Debris object selected for removal.

    The orbit may be given as explicit elements, as catalog perigee/apogee
    altitudes, and/or as TLE lines. Physical checks live in
    ``validation.validate_debris_parameters``, which reports every problem
    at once.
    """

    model_config = ConfigDict(frozen=True)

    name: str = "DEBRIS"
    size_m: float
    mass_kg: float
    material: str = "ALUMINUM"
    area_m2: Optional[float] = None
    area_to_mass: Optional[float] = None
    tle_line1: Optional[str] = None
    tle_line2: Optional[str] = None
    elements: Optional[OrbitalElements] = None
    epoch: Optional[datetime] = None
    perigee_km: Optional[float] = None
    apogee_km: Optional[float] = None
    inclination_deg: Optional[float] = None
    ballistic_coefficient: Optional[float] = None  # kg/m²

    @property
    def has_tle(self) -> bool:
        return bool(self.tle_line1 and self.tle_line2)

    @property
    def cross_section_m2(self) -> float:
        if self.area_m2 is not None:
            return self.area_m2
        if self.area_to_mass is not None:
            return self.area_to_mass * self.mass_kg
        return 0.0

    @property
    def area_to_mass_ratio(self) -> float:
        if self.area_to_mass is not None:
            return self.area_to_mass
        if self.mass_kg:
            return self.cross_section_m2 / self.mass_kg
        return 0.0

    @property
    def effective_ballistic_coefficient(self) -> float:
        if self.ballistic_coefficient is not None:
            return self.ballistic_coefficient
        area = self.cross_section_m2
        return self.mass_kg / (config.DRAG_COEFFICIENT * area) if area > 0 else math.inf

    def initial_elements(self) -> OrbitalElements:
        """
        Orbital state used by the campaign physics.

        Explicit elements take precedence, then catalog perigee/apogee
        altitudes, then the TLE mean elements.
        """
        if self.elements is not None:
            return self.elements
        if self.perigee_km is not None and self.apogee_km is not None:
            return OrbitalElements.from_altitudes(
                self.perigee_km, self.apogee_km,
                i=math.radians(self.inclination_deg or 0.0),
            )
        if self.has_tle:
            elements, _ = tle_to_elements(self.tle_line1, self.tle_line2)
            return elements
        raise ValueError(f"Debris '{self.name}' has no orbit (elements, perigee/apogee or TLE)")


class LaserConfig(BaseModel):
    """Ground laser configuration"""

    model_config = ConfigDict(frozen=True)

    pulse_energy_j: float = Field(default=config.PULSE_ENERGY_J, gt=0)
    wavelength_m: float = Field(default=config.WAVELENGTH_M, gt=0)
    pulse_duration_s: float = Field(default=config.PULSE_DURATION_S, gt=0)
    transmitter_diameter_m: float = Field(default=config.TRANSMITTER_DIAMETER_M, gt=0)
    beam_quality: float = Field(default=config.BEAM_QUALITY_M2, ge=1.0)
    max_repetition_rate_hz: float = Field(default=config.MAX_REPETITION_RATE_HZ, gt=0)
    atmospheric_transmission: float = Field(default=config.ATMOSPHERIC_TRANSMISSION, gt=0, le=1)


class ScanParameters(BaseModel):
    """Visibility scan settings"""

    model_config = ConfigDict(frozen=True)

    start_time: Optional[datetime] = None
    horizon_days: float = Field(default=config.SCAN_HORIZON_DAYS, ge=0)
    min_elevation_deg: float = Field(default=config.MIN_ELEVATION_DEG, ge=-90, le=90)
    step_minutes: float = Field(default=config.SCAN_STEP_MINUTES, gt=0)
    min_pass_duration_s: float = config.MIN_PASS_DURATION_S

    @classmethod
    def from_config(cls, sim_config: config.SimulationConfig,
                    start_time: Optional[datetime] = None) -> "ScanParameters":
        return cls(
            start_time=start_time,
            horizon_days=sim_config.horizon_days,
            min_elevation_deg=sim_config.min_elevation_deg,
            step_minutes=sim_config.step_minutes,
        )


class VisibilityPass(BaseModel):
    """Interval during which the target is above the minimum elevation"""

    model_config = ConfigDict(frozen=True)

    station_name: str
    station_index: int = 0
    start_time: datetime
    end_time: datetime
    duration_s: float
    max_elevation_deg: float
    start_azimuth_deg: float


class StationScanFailure(BaseModel):
    """A station scan that was terminated by a propagation failure"""

    model_config = ConfigDict(frozen=True)

    station_name: str
    error_code: int
    message: str
    failed_at: Optional[datetime] = None


class PassEngagementResult(BaseModel):
    """Outcome of one pass in the campaign"""

    model_config = ConfigDict(frozen=True)

    pass_number: int
    station_name: str
    start_time: datetime
    elapsed_s: float
    duration_s: float
    skipped: bool
    reason: Optional[SkipReason] = None
    pulses: int = 0
    delta_v_ms: float = 0.0
    cumulative_delta_v_ms: float = 0.0
    fluence_j_cm2: float = 0.0
    intensity_w_cm2: float = 0.0
    slant_range_km: float = 0.0
    temperature_before_k: float
    temperature_after_k: float
    thermal_delta_k: float = 0.0
    limiting_factor: Optional[LimitingFactor] = None
    repetition_rate_hz: float = 0.0
    required_cooldown_s: Optional[float] = None
    actual_cooldown_s: Optional[float] = None
    elements: OrbitalElements
    perigee_km: float
    apogee_km: float
    time_to_reentry_days: Optional[float] = None


class PerigeePoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    pass_number: int
    perigee_km: float
    apogee_km: float


class DecayEstimate(BaseModel):
    """Passive atmospheric decay estimate at a given perigee"""

    model_config = ConfigDict(frozen=True)

    perigee_km: float
    decay_rate_km_per_day: float
    estimated_lifetime_days: float
    natural_decay: bool


class MethodComparison(BaseModel):
    model_config = ConfigDict(frozen=True)

    method: str
    reference_cost: float
    times_cheaper: float
    savings: float
    savings_percent: float


class CostBreakdown(BaseModel):
    """Mission cost estimate with comparison against alternative removal methods"""

    model_config = ConfigDict(frozen=True)

    total_energy_gj: float
    duration_days: float
    electricity_cost: float
    operating_cost: float
    total_cost: float
    comparisons: Dict[str, MethodComparison]

    @property
    def comparison_to_spacecraft(self) -> float:
        return self.comparisons["spacecraft_capture"].times_cheaper


class MissionReport(BaseModel):
    """Aggregate result of a campaign run; immutable once built"""

    model_config = ConfigDict(frozen=True)

    debris_name: str
    station_count: int
    status: CampaignStatus
    reentry_achieved: bool
    reentry_pass_number: Optional[int] = None
    total_passes: int
    passes_attempted: int
    passes_succeeded: int
    passes_skipped: int
    total_pulses: int
    total_energy_j: float
    total_energy_gj: float
    total_delta_v_ms: float
    initial_perigee_km: float
    initial_apogee_km: float
    final_perigee_km: float
    final_apogee_km: float
    perigee_reduction_km: float
    duration_days: float
    final_temperature_k: float
    max_temperature_k: float
    passes: Tuple[PassEngagementResult, ...] = ()
    perigee_series: Tuple[PerigeePoint, ...] = ()
    atmospheric_decay: Optional[DecayEstimate] = None
    cost: Optional[CostBreakdown] = None
    truncated_passes: int = 0
    scan_failures: Tuple[StationScanFailure, ...] = ()

    @property
    def skipped_reasons(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for result in self.passes:
            if result.skipped and result.reason is not None:
                counts[result.reason.value] = counts.get(result.reason.value, 0) + 1
        return counts

    def accepted_passes(self) -> List[PassEngagementResult]:
        return [p for p in self.passes if not p.skipped]
