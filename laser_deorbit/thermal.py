"""
Thermal Budget Tracker

Tracks the bulk temperature of a debris object across laser engagements.

Heating:
    Absorbed energy Q = A · η(F) · F per pulse, so the bulk temperature rise
    is ΔT = (A/m) / c_p · η(F) · F · pulses.

Cooling:
    Radiative cooling dT/dt = -(εσA / m c_p)(T⁴ - T_amb⁴), linearised about
    the current temperature into an exponential relaxation toward ambient
    with time constant τ = 1 / (4kT³), k = εσA / (m c_p).

An engagement is accepted only if the temperature stays within the
material's safe rise above ambient and below its melting point. A rejected
engagement leaves the tracker untouched.
"""

import math
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Union

from laser_deorbit.config import (
    COOLDOWN_SAFETY_FACTOR,
    EMISSIVITY,
    LEO_AMBIENT_TEMP_K,
    STEFAN_BOLTZMANN,
    MaterialProfile,
    get_material,
)
from laser_deorbit.laser import absorption_efficiency
from laser_deorbit.models import SkipReason

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ThermalState:
    """Snapshot of the tracker's thermal status"""

    temperature_k: float
    ambient_k: float
    material: str
    max_temp_rise_k: float
    melting_point_k: float

    @property
    def temperature_rise_k(self) -> float:
        return self.temperature_k - self.ambient_k

    @property
    def safety_margin_k(self) -> float:
        return self.max_temp_rise_k - self.temperature_rise_k

    @property
    def distance_to_melting_k(self) -> float:
        return self.melting_point_k - self.temperature_k

    @property
    def is_safe(self) -> bool:
        return self.temperature_rise_k <= self.max_temp_rise_k


@dataclass(frozen=True)
class HeatingResult:
    """Outcome of an attempted heating step"""

    accepted: bool
    temperature_before_k: float
    temperature_after_k: float  # attempted temperature when rejected
    temperature_rise_k: float
    reason: Optional[SkipReason] = None


@dataclass(frozen=True)
class HeatRecord:
    timestamp: Union[datetime, float, None]
    temperature_k: float
    temperature_rise_k: float
    total_rise_k: float


class ThermalBudgetTracker:
    """
    Thermal state of one debris object during a campaign.

    Args:
        material: Material identifier or profile
        mass_kg: Debris mass
        area_m2: Cross-sectional area exposed to the beam
        initial_temp_k: Starting temperature, also used as the ambient
            equilibrium temperature
    """

    def __init__(
        self,
        material: Union[str, MaterialProfile],
        mass_kg: float,
        area_m2: float,
        initial_temp_k: float = LEO_AMBIENT_TEMP_K,
    ):
        if mass_kg <= 0 or area_m2 <= 0:
            raise ValueError(f"Mass and area must be positive (mass={mass_kg}, area={area_m2})")

        self.material = material if isinstance(material, MaterialProfile) else get_material(material)
        self.mass_kg = mass_kg
        self.area_m2 = area_m2
        self.area_to_mass = area_m2 / mass_kg

        self.current_temp_k = initial_temp_k
        self.ambient_temp_k = initial_temp_k
        self.heat_history: List[HeatRecord] = []

    @property
    def max_temp_rise_k(self) -> float:
        return self.material.max_temp_rise

    @property
    def safety_margin_k(self) -> float:
        return self.material.max_temp_rise - (self.current_temp_k - self.ambient_temp_k)

    def temperature_rise(self, pulses: int, fluence: float) -> float:
        """Temperature increase (K) from ``pulses`` pulses at ``fluence`` J/cm²."""
        absorbed_per_area = absorption_efficiency(fluence) * fluence * 1e4 * pulses
        return (self.area_to_mass / self.material.specific_heat) * absorbed_per_area

    def apply_heating(self, pulses: int, fluence: float,
                      timestamp: Union[datetime, float, None] = None) -> HeatingResult:
        """
        Heat the object if the resulting temperature is safe.

        Returns:
            HeatingResult; on rejection ``reason`` is MELTING_RISK or
            TEMP_LIMIT_EXCEEDED and the tracker state is unchanged
        """
        before = self.current_temp_k
        rise = self.temperature_rise(pulses, fluence)
        new_temp = before + rise
        total_rise = new_temp - self.ambient_temp_k

        within_budget = total_rise <= self.material.max_temp_rise
        would_melt = new_temp >= self.material.melting_point

        if within_budget and not would_melt:
            self.current_temp_k = new_temp
            self.heat_history.append(HeatRecord(timestamp, new_temp, rise, total_rise))
            return HeatingResult(True, before, new_temp, rise)

        reason = SkipReason.MELTING_RISK if would_melt else SkipReason.TEMP_LIMIT_EXCEEDED
        logger.debug(
            f"Heating rejected ({reason.value}): {before:.1f} K -> {new_temp:.1f} K, "
            f"limit {self.ambient_temp_k + self.material.max_temp_rise:.1f} K"
        )
        return HeatingResult(False, before, new_temp, rise, reason)

    def _time_constant(self) -> float:
        k = EMISSIVITY * STEFAN_BOLTZMANN * self.area_m2 / (self.mass_kg * self.material.specific_heat)
        return 1.0 / (4.0 * k * self.current_temp_k ** 3)

    def apply_cooling(self, elapsed_s: float) -> float:
        """
        Relax toward ambient for ``elapsed_s`` seconds.

        Returns:
            New temperature (K)
        """
        if elapsed_s <= 0:
            return self.current_temp_k

        tau = self._time_constant()
        diff = self.current_temp_k - self.ambient_temp_k
        self.current_temp_k = self.ambient_temp_k + diff * math.exp(-elapsed_s / tau)
        return self.current_temp_k

    def required_cooldown(self, pulses: int, fluence: float) -> float:
        """
        Cooling time (s) needed before a pass of ``pulses`` pulses is safe.

        Zero when the pass already fits the margin. The allowed residual
        rise is reduced by the cooldown safety factor. Infinite when the
        pass exceeds the budget even from ambient temperature.
        """
        next_rise = self.temperature_rise(pulses, fluence)
        current_diff = self.current_temp_k - self.ambient_temp_k

        if next_rise <= self.material.max_temp_rise - current_diff:
            return 0.0

        required_diff = (self.material.max_temp_rise - next_rise) / COOLDOWN_SAFETY_FACTOR
        if required_diff <= 0 or current_diff <= 0:
            return math.inf

        cooldown = -self._time_constant() * math.log(required_diff / current_diff)
        return max(0.0, cooldown)

    @property
    def state(self) -> ThermalState:
        return ThermalState(
            temperature_k=self.current_temp_k,
            ambient_k=self.ambient_temp_k,
            material=self.material.name,
            max_temp_rise_k=self.material.max_temp_rise,
            melting_point_k=self.material.melting_point,
        )

    def status(self) -> dict:
        state = self.state
        return {
            "current_temp_k": state.temperature_k,
            "ambient_temp_k": state.ambient_k,
            "temp_rise_k": state.temperature_rise_k,
            "max_allowed_rise_k": state.max_temp_rise_k,
            "safety_margin_k": state.safety_margin_k,
            "melting_point_k": state.melting_point_k,
            "distance_to_melting_k": state.distance_to_melting_k,
            "is_safe": state.is_safe,
        }
