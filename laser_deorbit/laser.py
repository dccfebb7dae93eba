"""
Laser-Beam Model

Physics of a pulsed ground laser acting on a debris object: beam
propagation to the target, fluence and intensity on target, momentum
coupling, heat absorption, and the intensity safety gate.

Beam propagation:
    θ = M²λ / (π w₀)          divergence half-angle
    z_R = π w₀² / (M² λ)      Rayleigh range
    w(r) = w₀ + rθ            far field (r > 10 z_R)
    w(r) = w₀ √(1 + (r/z_R)²) otherwise

Momentum coupling c_m (µN·s/J) and heat absorption η are piecewise-linear
in fluence (J/cm²), fitted to ablation measurements on aluminium.

References:
    Phipps, C. R. et al. (2012). Removing orbital debris with lasers.
    Advances in Space Research 49, 1283-1300.
"""

import math
from bisect import bisect_right
from dataclasses import dataclass
from typing import Optional, Sequence

from laser_deorbit.config import (
    LARGE_DEBRIS_SIZE_M,
    MAX_SOLAR_CONSTANT_MULTIPLIER,
    SOLAR_CONSTANT_W_M2,
)
from laser_deorbit.models import LaserConfig


@dataclass(frozen=True)
class CurveSegment:
    """Linear piece ``value + slope * (x - start)``, optionally floored"""

    start: float
    value: float
    slope: float
    floor: Optional[float] = None


class PiecewiseLinearCurve:
    """
    Piecewise-linear function defined by an ordered breakpoint table.

    A point exactly on a breakpoint belongs to the segment starting there;
    points below the first breakpoint use the first segment.
    """

    def __init__(self, segments: Sequence[CurveSegment]):
        self.segments = tuple(segments)
        self._starts = [segment.start for segment in self.segments]
        if self._starts != sorted(self._starts):
            raise ValueError("Curve segments must be ordered by start")

    def __call__(self, x: float) -> float:
        index = max(bisect_right(self._starts, x) - 1, 0)
        segment = self.segments[index]
        value = segment.value + segment.slope * (x - segment.start)
        if segment.floor is not None:
            value = max(segment.floor, value)
        return value


# Momentum coupling coefficient (µN·s/J) vs fluence (J/cm²)
COUPLING_COEFFICIENT_CURVE = PiecewiseLinearCurve([
    CurveSegment(0.0, 5.0, 0.5),  # below ablation threshold
    CurveSegment(10.0, 10.0, 0.375),  # rising to optimum
    CurveSegment(50.0, 25.0, -0.05),  # plasma shielding begins
    CurveSegment(150.0, 20.0, -0.05, floor=10.0),
])

# Fraction of incident energy absorbed as heat vs fluence (J/cm²)
ABSORPTION_EFFICIENCY_CURVE = PiecewiseLinearCurve([
    CurveSegment(0.0, 0.7, 0.0),
    CurveSegment(20.0, 0.7, -0.003),
    CurveSegment(100.0, 0.46, -0.001, floor=0.3),
])


def beam_waist_radius(laser: LaserConfig) -> float:
    return laser.transmitter_diameter_m / 2.0


def beam_divergence(laser: LaserConfig) -> float:
    """Far-field divergence half-angle (rad)."""
    return laser.beam_quality * laser.wavelength_m / (math.pi * beam_waist_radius(laser))


def rayleigh_range(laser: LaserConfig) -> float:
    """Rayleigh range (m)."""
    w0 = beam_waist_radius(laser)
    return math.pi * w0 ** 2 / (laser.beam_quality * laser.wavelength_m)


def beam_radius_at_range(range_m: float, laser: LaserConfig) -> float:
    """
    Beam radius at the target.

    Args:
        range_m: Slant range from transmitter to target (m)
        laser: Laser configuration

    Returns:
        Beam radius (m)
    """
    w0 = beam_waist_radius(laser)
    z_r = rayleigh_range(laser)

    if range_m > 10.0 * z_r:
        return w0 + range_m * beam_divergence(laser)
    return w0 * math.sqrt(1.0 + (range_m / z_r) ** 2)


def fluence_at_range(range_m: float, laser: LaserConfig) -> float:
    """Fluence on target (J/cm²) after atmospheric transmission."""
    w = beam_radius_at_range(range_m, laser)
    delivered = laser.pulse_energy_j * laser.atmospheric_transmission
    return delivered / (math.pi * w ** 2) / 1e4


def intensity_at_range(range_m: float, laser: LaserConfig) -> float:
    """Peak intensity on target (W/cm²)."""
    w = beam_radius_at_range(range_m, laser)
    peak_power = laser.pulse_energy_j / laser.pulse_duration_s
    return peak_power / (math.pi * w ** 2) / 1e4


def coupling_coefficient(fluence: float) -> float:
    """Momentum coupling coefficient c_m (µN·s/J)."""
    return COUPLING_COEFFICIENT_CURVE(fluence)


def absorption_efficiency(fluence: float) -> float:
    """Fraction of pulse energy deposited as heat."""
    return ABSORPTION_EFFICIENCY_CURVE(fluence)


def max_safe_intensity() -> float:
    """Intensity limit for large objects (W/cm²)."""
    return SOLAR_CONSTANT_W_M2 * MAX_SOLAR_CONSTANT_MULTIPLIER / 1e4


def exceeds_intensity_limit(size_m: float, intensity_w_cm2: float) -> bool:
    """Large objects may be intact satellites and must not be illuminated above the limit."""
    return size_m > LARGE_DEBRIS_SIZE_M and intensity_w_cm2 > max_safe_intensity()


def delta_v_per_pulse(fluence: float, mass_kg: float, pulse_energy_j: float) -> float:
    """
    Velocity change from one pulse (m/s).

    The impulse is p = c_m·E, so ΔV = c_m·10⁻⁶·E / m.
    """
    return coupling_coefficient(fluence) * 1e-6 * pulse_energy_j / mass_kg


def cumulative_delta_v(pulses: int, fluence: float, mass_kg: float, pulse_energy_j: float) -> float:
    return delta_v_per_pulse(fluence, mass_kg, pulse_energy_j) * pulses


def temperature_rise_per_pulse(fluence: float, area_to_mass: float, specific_heat: float) -> float:
    """Bulk temperature rise from one pulse (K): ΔT = (A/m)/c_p · η · F."""
    return (area_to_mass / specific_heat) * absorption_efficiency(fluence) * fluence * 1e4


def max_pulses_per_pass(margin_k: float, fluence: float, area_to_mass: float, specific_heat: float) -> int:
    """
    Pulses that fit in the remaining thermal margin, never fewer than one.

    Raises:
        ValueError: If a pulse deposits no heat (non-positive fluence)
    """
    rise = temperature_rise_per_pulse(fluence, area_to_mass, specific_heat)
    if rise <= 0:
        raise ValueError(f"Temperature rise per pulse must be positive (fluence={fluence})")
    return max(1, math.floor(margin_k / rise))
