"""
Propagation Adapter

Wraps an orbit propagator and turns its inertial output into topocentric
look angles (azimuth, elevation, slant range) for a ground station.

Two propagators are provided:
- SGP4Propagator: TLE targets, using the proven sgp4 library
- KeplerianPropagator: targets known only by orbital elements and an epoch

Frame chain: TEME/inertial -> ECEF (rotation by Greenwich sidereal time at
the query instant) -> station east-north-up frame on the WGS-84 ellipsoid.

An unpropagable orbit raises PropagationError with the propagator's error
code and a physical interpretation; callers decide how to surface it.
"""

import math
import logging
from datetime import datetime, timezone, timedelta
from typing import Any, Dict, NamedTuple, Optional, Tuple

import numpy as np
from sgp4.api import Satrec

from laser_deorbit.config import (
    DECAY_FLOOR_ALTITUDE_KM,
    EARTH_RADIUS_KM,
    WGS84_A_KM,
    WGS84_F,
)
from laser_deorbit.models import GroundStation
from laser_deorbit.orbital_mechanics import (
    OrbitalElements,
    elements_to_state,
    propagate_elements,
)
from laser_deorbit.tle import epoch_to_datetime

logger = logging.getLogger(__name__)


# SGP4 error code meanings
SGP4_ERROR_CODES = {
    0: "No error",
    1: "Mean eccentricity < 0.0 or > 1.0",
    2: "Mean motion < 0.0",
    3: "Perturbed eccentricity < 0.0 or > 1.0",
    4: "Semi-latus rectum < 0.0",
    5: "Satellite has decayed",
    6: "Satellite has decayed (low altitude)",
}


class PropagationError(RuntimeError):
    """The propagator could not produce a state for the requested instant."""

    def __init__(self, error_code: int, timestamp: Optional[datetime] = None,
                 diagnostics: Optional[Dict[str, Any]] = None):
        self.error_code = error_code
        self.error_message = SGP4_ERROR_CODES.get(error_code, f"Unknown error code {error_code}")
        self.timestamp = timestamp
        self.diagnostics = diagnostics or {}
        when = f" at {timestamp.isoformat()}" if timestamp else ""
        super().__init__(f"Propagation error {error_code}: {self.error_message}{when}")


class LookAngles(NamedTuple):
    azimuth_deg: float
    elevation_deg: float
    range_km: float


def datetime_to_jd_fr(dt: datetime) -> Tuple[float, float]:
    """
    Convert datetime to Julian date and fraction.

    Naive datetimes are taken to be UTC.

    Args:
        dt: Datetime object

    Returns:
        Tuple of (julian_day, fraction)
    """
    microsecond = dt.microsecond
    if dt.tzinfo is not None:
        dt = dt.utctimetuple()
    else:
        dt = dt.timetuple()

    year, month, day = dt.tm_year, dt.tm_mon, dt.tm_mday
    hour, minute, second = dt.tm_hour, dt.tm_min, dt.tm_sec + microsecond / 1e6

    # Julian day calculation
    if month <= 2:
        year -= 1
        month += 12

    a = int(year / 100)
    b = 2 - a + int(a / 4)

    jd = int(365.25 * (year + 4716)) + int(30.6001 * (month + 1)) + day + b - 1524.5

    # Fractional part
    fr = (hour + minute / 60.0 + second / 3600.0) / 24.0

    return jd, fr


def greenwich_sidereal_time(jd, fr):
    """
    Greenwich mean sidereal time in radians (IAU 1982).

    This is the TEME -> ECEF rotation angle; TEME is defined against the
    mean equinox, so no equation of equinoxes is added. Agrees with
    sgp4.propagation.gstime but accepts scalars or numpy arrays for jd/fr.
    """
    T = (jd - 2451545.0 + fr) / 36525.0

    gmst_sec = (
        67310.54841 +
        (876600.0 * 3600.0 + 8640184.812866) * T +
        0.093104 * T * T -
        6.2e-6 * T * T * T
    )
    return np.mod(gmst_sec, 86400.0) * (2.0 * math.pi / 86400.0)


def teme_to_ecef(r_teme: np.ndarray, jd, fr) -> np.ndarray:
    """
    Rotate TEME positions into the Earth-fixed frame.

    Args:
        r_teme: Position(s) in TEME, shape (3,) or (N, 3), km
        jd, fr: Julian date and fraction (scalars or arrays of length N)

    Returns:
        ECEF position(s) with the same shape
    """
    r_teme = np.asarray(r_teme, dtype=float)
    gmst = greenwich_sidereal_time(jd, fr)
    cos_gmst = np.cos(gmst)
    sin_gmst = np.sin(gmst)

    x, y, z = r_teme[..., 0], r_teme[..., 1], r_teme[..., 2]
    return np.stack([
        cos_gmst * x + sin_gmst * y,
        -sin_gmst * x + cos_gmst * y,
        z,
    ], axis=-1)


def geodetic_to_ecef(latitude_deg: float, longitude_deg: float, height_km: float = 0.0) -> np.ndarray:
    """Station position on the WGS-84 ellipsoid (km)."""
    e2 = 2.0 * WGS84_F - WGS84_F * WGS84_F
    lat = math.radians(latitude_deg)
    lon = math.radians(longitude_deg)
    sin_lat = math.sin(lat)
    N = WGS84_A_KM / math.sqrt(1.0 - e2 * sin_lat * sin_lat)

    return np.array([
        (N + height_km) * math.cos(lat) * math.cos(lon),
        (N + height_km) * math.cos(lat) * math.sin(lon),
        (N * (1.0 - e2) + height_km) * sin_lat,
    ])


def ecef_to_look_angles(r_ecef: np.ndarray, station: GroundStation):
    """
    Topocentric azimuth/elevation/range of ECEF position(s) from a station.

    Args:
        r_ecef: Target position(s), shape (3,) or (N, 3), km
        station: Observing ground station

    Returns:
        Tuple of (azimuth_deg, elevation_deg, range_km), scalars or arrays
    """
    site = geodetic_to_ecef(station.latitude_deg, station.longitude_deg, station.height_km)
    rho = np.asarray(r_ecef, dtype=float) - site

    lat = math.radians(station.latitude_deg)
    lon = math.radians(station.longitude_deg)
    sin_lat, cos_lat = math.sin(lat), math.cos(lat)
    sin_lon, cos_lon = math.sin(lon), math.cos(lon)

    rx, ry, rz = rho[..., 0], rho[..., 1], rho[..., 2]
    east = -sin_lon * rx + cos_lon * ry
    north = -sin_lat * cos_lon * rx - sin_lat * sin_lon * ry + cos_lat * rz
    up = cos_lat * cos_lon * rx + cos_lat * sin_lon * ry + sin_lat * rz

    range_km = np.sqrt(east * east + north * north + up * up)
    elevation = np.degrees(np.arctan2(up, np.hypot(east, north)))
    azimuth = np.mod(np.degrees(np.arctan2(east, north)), 360.0)

    return azimuth, elevation, range_km


class Propagator:
    """
    Base class for propagators used by the visibility scanner.

    Subclasses implement ``propagate_offsets`` returning inertial (TEME)
    positions and velocities for instants given as offsets from a start time.
    """

    name = "propagator"

    def propagate_offsets(self, start: datetime, offsets_s: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        raise NotImplementedError

    def clone(self) -> "Propagator":
        raise NotImplementedError

    def propagate(self, timestamp: datetime) -> Tuple[np.ndarray, np.ndarray]:
        """
        Propagate to a single instant.

        Returns:
            Tuple of (position, velocity) in km and km/s
        """
        r, v = self.propagate_offsets(timestamp, np.zeros(1))
        return r[0], v[0]

    def look_angles(self, station: GroundStation, timestamp: datetime) -> LookAngles:
        az, el, rng = self.look_angles_batch(station, timestamp, np.zeros(1))
        return LookAngles(float(az[0]), float(el[0]), float(rng[0]))

    def look_angles_batch(self, station: GroundStation, start: datetime, offsets_s: np.ndarray):
        """
        Look angles for many instants at once.

        Args:
            station: Observing station
            start: Reference instant
            offsets_s: Seconds after start for each sample

        Returns:
            Tuple of numpy arrays (azimuth_deg, elevation_deg, range_km)
        """
        offsets_s = np.asarray(offsets_s, dtype=float)
        r_teme, _ = self.propagate_offsets(start, offsets_s)
        jd, fr0 = datetime_to_jd_fr(start)
        r_ecef = teme_to_ecef(r_teme, jd, fr0 + offsets_s / 86400.0)
        return ecef_to_look_angles(r_ecef, station)


class SGP4Propagator(Propagator):
    """
    SGP4/SDP4 propagation of a TLE target using the sgp4 library.

    Errors are reported, never replaced with a fallback state: a decayed
    or corrupt orbit must reach the caller.
    """

    def __init__(self, line1: str, line2: str, name: Optional[str] = None):
        try:
            self.satellite = Satrec.twoline2rv(line1, line2)
        except Exception as e:
            raise ValueError(f"Failed to load TLE: {e}") from e

        self.line1 = line1
        self.line2 = line2
        self.name = name or f"SAT_{self.satellite.satnum}"

    @property
    def epoch(self) -> datetime:
        return epoch_to_datetime(self.satellite.epochyr, self.satellite.epochdays)

    def clone(self) -> "SGP4Propagator":
        return SGP4Propagator(self.line1, self.line2, self.name)

    def propagate_offsets(self, start: datetime, offsets_s: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        offsets_s = np.asarray(offsets_s, dtype=float)
        jd, fr0 = datetime_to_jd_fr(start)
        jd_array = np.full(offsets_s.shape, jd)
        fr_array = fr0 + offsets_s / 86400.0

        errors, r, v = self.satellite.sgp4_array(jd_array, fr_array)

        failed = np.flatnonzero(errors)
        if failed.size:
            index = int(failed[0])
            timestamp = start + timedelta(seconds=float(offsets_s[index]))
            error = int(errors[index])
            diagnostics = self._get_error_diagnostics(error, timestamp)
            logger.error(f"SGP4 error {error} for {self.name} at {timestamp.isoformat()}")
            raise PropagationError(error, timestamp, diagnostics)

        return np.asarray(r), np.asarray(v)

    def _get_error_diagnostics(self, error_code: int, timestamp: datetime) -> Dict[str, Any]:
        """
        Get detailed physical diagnostics for SGP4 error.

        Args:
            error_code: SGP4 error code
            timestamp: Propagation timestamp

        Returns:
            Dictionary with diagnostic information
        """
        satellite = self.satellite
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)

        diagnostics = {
            "error_code": error_code,
            "error_description": SGP4_ERROR_CODES.get(error_code, f"Unknown error {error_code}"),
            "orbital_parameters": {
                "eccentricity": satellite.ecco,
                "inclination_deg": math.degrees(satellite.inclo),
                "mean_motion_rev_day": satellite.no_kozai * 1440.0 / (2 * math.pi),
                "bstar_drag": satellite.bstar,
                "epoch_age_days": (timestamp - self.epoch).total_seconds() / 86400.0,
            },
        }

        # Physical interpretation based on error code
        if error_code in [1, 2]:
            diagnostics["physical_meaning"] = (
                "The mean elements are outside their valid range. "
                "This indicates corrupted TLE data or an orbit that is no longer bound."
            )
            diagnostics["recommended_action"] = "Obtain fresh TLE data for this object."

        elif error_code in [3, 4]:
            diagnostics["physical_meaning"] = (
                "SGP4 computed perturbed orbital elements that are unphysical. "
                "This typically occurs when propagating far from the TLE epoch or "
                "for objects with very high drag in decaying orbits."
            )
            diagnostics["recommended_action"] = (
                "Use more recent TLE data or shorten the scan horizon."
            )

        elif error_code in [5, 6]:
            diagnostics["physical_meaning"] = (
                "The object has decayed and re-entered the atmosphere. "
                "No further visibility passes are possible."
            )
            diagnostics["recommended_action"] = "Remove this object from the campaign."

        return diagnostics


class KeplerianPropagator(Propagator):
    """
    Two-body propagation of a target given by orbital elements.

    The inertial frame of the elements is treated as TEME for the Earth
    rotation step.
    """

    def __init__(self, elements: OrbitalElements, epoch: datetime, name: str = "KEPLER"):
        self.elements = elements
        self.epoch = epoch if epoch.tzinfo is not None else epoch.replace(tzinfo=timezone.utc)
        self.name = name

    def clone(self) -> "KeplerianPropagator":
        return KeplerianPropagator(self.elements, self.epoch, self.name)

    def propagate_offsets(self, start: datetime, offsets_s: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        if start.tzinfo is None:
            start = start.replace(tzinfo=timezone.utc)

        if self.elements.e >= 1.0 or self.elements.a <= 0:
            raise PropagationError(1, start, {"eccentricity": self.elements.e, "a_km": self.elements.a})

        if self.elements.perigee_radius_km < EARTH_RADIUS_KM + DECAY_FLOOR_ALTITUDE_KM:
            raise PropagationError(6, start, {
                "perigee_altitude_km": self.elements.perigee_altitude_km,
                "physical_meaning": "Perigee is below the decay floor; the orbit has re-entered.",
            })

        base = (start - self.epoch).total_seconds()
        offsets_s = np.asarray(offsets_s, dtype=float)
        r = np.empty((offsets_s.size, 3))
        v = np.empty((offsets_s.size, 3))
        for k, offset in enumerate(offsets_s):
            state = elements_to_state(propagate_elements(self.elements, base + offset))
            r[k] = state.position
            v[k] = state.velocity
        return r, v


def propagator_for(debris) -> Propagator:
    """
    Build the propagator for a debris target.

    TLE data is preferred; otherwise the target's elements and epoch are
    propagated with two-body dynamics.
    """
    if debris.has_tle:
        return SGP4Propagator(debris.tle_line1, debris.tle_line2, debris.name)

    epoch = debris.epoch or datetime.now(timezone.utc)
    return KeplerianPropagator(debris.initial_elements(), epoch, debris.name)
