"""
Laser Deorbit Configuration and Constants

This module contains the physical constants, laser system defaults, material
properties and cost assumptions used throughout the project.

Constants:
    Orbital constants use a spherical Earth of mean radius 6371 km for all
    perigee/apogee altitude bookkeeping. Station positions use the WGS-84
    ellipsoid; SGP4 itself uses its own WGS-72 constants internally.

Laser defaults:
    Pulsed Yb:YAG ground station based on the DLR laser-momentum-transfer
    studies (100 kJ pulses, 1030 nm, 4 m transmitter).

Runtime settings:
    Scan and worker settings can be overridden through LASER_DEORBIT_*
    environment variables, see SimulationConfig.from_env().
"""

import os
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional

# Orbital constants
EARTH_RADIUS_KM: float = 6371.0  # Earth mean radius (km)
MU_EARTH: float = 398600.4418  # Earth gravitational parameter (km³/s²)
EARTH_ROTATION_RATE: float = 7.2921159e-5  # rad/s
REENTRY_ALTITUDE_KM: float = 200.0  # perigee below which drag guarantees decay
DECAY_FLOOR_ALTITUDE_KM: float = 98.0  # below this an orbit cannot be propagated
LIFETIME_END_ALTITUDE_KM: float = 100.0  # lifetime estimates run down to this altitude

# WGS-84 ellipsoid for ground stations
WGS84_A_KM: float = 6378.137
WGS84_F: float = 1.0 / 298.257223563

# Laser system defaults
PULSE_ENERGY_J: float = 100e3  # 100 kJ per pulse
WAVELENGTH_M: float = 1030e-9  # Yb:YAG
PULSE_DURATION_S: float = 5e-9
TRANSMITTER_DIAMETER_M: float = 4.0
BEAM_QUALITY_M2: float = 1.2
MAX_REPETITION_RATE_HZ: float = 10.0
ATMOSPHERIC_TRANSMISSION: float = 0.7

# Safety and operational limits
SOLAR_CONSTANT_W_M2: float = 1361.0
MAX_SOLAR_CONSTANT_MULTIPLIER: float = 100.0
LARGE_DEBRIS_SIZE_M: float = 5.0  # intensity gate applies above this size
MIN_DEBRIS_SIZE_M: float = 0.1
MAX_DEBRIS_SIZE_M: float = 10.0
COOLDOWN_SAFETY_FACTOR: float = 1.5

# Thermal model
STEFAN_BOLTZMANN: float = 5.67e-8  # W/(m²·K⁴)
EMISSIVITY: float = 0.8
LEO_AMBIENT_TEMP_K: float = 270.0

# Campaign geometry
STATION_RANGE_OFFSET_KM: float = 100.0  # added to mean altitude for slant range
DEFAULT_PASS_DURATION_S: float = 300.0
DRAG_COEFFICIENT: float = 2.2

# Visibility scan defaults
SCAN_HORIZON_DAYS: float = 90.0
MIN_ELEVATION_DEG: float = 20.0
SCAN_STEP_MINUTES: float = 1.0
MIN_PASS_DURATION_S: float = 30.0
MAX_GROUND_STATIONS: int = 5

# Cost assumptions (USD)
ELECTRICITY_COST_PER_KWH: float = 0.10
WALL_PLUG_EFFICIENCY: float = 0.25
OPERATING_COST_PER_DAY: float = 5000.0
KWH_PER_GJ: float = 277.778

# Reference costs of alternative active-debris-removal methods (USD)
ADR_REFERENCE_COSTS: Mapping[str, float] = MappingProxyType({
    "spacecraft_capture": 100e6,
    "electric_tug": 50e6,
    "harpoon": 30e6,
    "net_capture": 20e6,
})


@dataclass(frozen=True)
class MaterialProfile:
    """Thermal properties of a debris material."""

    name: str
    density: float  # kg/m³
    specific_heat: float  # J/(kg·K)
    max_temp_rise: float  # K, safe increase above ambient
    melting_point: float  # K
    thermal_conductivity: float  # W/(m·K)


MATERIALS: Mapping[str, MaterialProfile] = MappingProxyType({
    "ALUMINUM": MaterialProfile("ALUMINUM", 2700.0, 900.0, 100.0, 933.0, 237.0),
    "STEEL": MaterialProfile("STEEL", 7850.0, 470.0, 200.0, 1811.0, 50.0),
    # Multi-layer insulation blankets (effective density)
    "MLI": MaterialProfile("MLI", 100.0, 1000.0, 80.0, 600.0, 0.05),
})


def get_material(name: str) -> MaterialProfile:
    """Look up a material profile by identifier (case-insensitive)."""
    try:
        return MATERIALS[name.upper()]
    except KeyError:
        raise ValueError(
            f"Unknown material '{name}'. Known materials: {', '.join(MATERIALS)}"
        ) from None


@dataclass(frozen=True)
class SimulationConfig:
    """Runtime settings for a simulation run."""

    horizon_days: float = SCAN_HORIZON_DAYS
    min_elevation_deg: float = MIN_ELEVATION_DEG
    step_minutes: float = SCAN_STEP_MINUTES
    chunk_samples: int = 1440  # samples per propagator batch / cancellation check
    max_workers: int = 4
    max_stations: int = MAX_GROUND_STATIONS
    initial_temp_k: float = LEO_AMBIENT_TEMP_K

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "SimulationConfig":
        """
        Build a configuration from LASER_DEORBIT_* environment variables.

        Parameters
        ----------
        environ : mapping, optional
            Environment to read from (default: os.environ)

        Returns
        -------
        SimulationConfig
            Configuration with defaults for unset variables
        """
        env = os.environ if environ is None else environ
        return cls(
            horizon_days=float(env.get("LASER_DEORBIT_HORIZON_DAYS", SCAN_HORIZON_DAYS)),
            min_elevation_deg=float(env.get("LASER_DEORBIT_MIN_ELEVATION_DEG", MIN_ELEVATION_DEG)),
            step_minutes=float(env.get("LASER_DEORBIT_STEP_MINUTES", SCAN_STEP_MINUTES)),
            chunk_samples=int(env.get("LASER_DEORBIT_CHUNK_SAMPLES", "1440")),
            max_workers=int(env.get("LASER_DEORBIT_MAX_WORKERS", "4")),
            max_stations=int(env.get("LASER_DEORBIT_MAX_STATIONS", MAX_GROUND_STATIONS)),
            initial_temp_k=float(env.get("LASER_DEORBIT_INITIAL_TEMP_K", LEO_AMBIENT_TEMP_K)),
        )
