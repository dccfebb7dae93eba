"""
Two-Body Orbital Mechanics

Classical orbital elements, inertial state vectors, and the conversions
between them, plus a Keplerian (two-body) propagator.

The two-body problem assumes only the central gravitational force of Earth
(no drag, no perturbations). It is used to propagate targets that are given
as orbital elements rather than TLE data, and as the state representation
that laser delta-V increments are applied to.

References:
    Vallado, D. A. (2013). Fundamentals of Astrodynamics and Applications (4th ed.).
"""

import math
from dataclasses import dataclass, replace
from typing import Tuple

import numpy as np

from laser_deorbit.config import EARTH_RADIUS_KM, MU_EARTH

# Below this eccentricity or node-vector magnitude the angle is undefined
SMALL = 1e-10


@dataclass(frozen=True)
class OrbitalElements:
    """
    Classical Keplerian elements.

    Distances in km, angles in radians. Instances are immutable; use
    ``with_changes`` or the conversion functions to obtain a new set.
    """

    a: float  # semi-major axis
    e: float  # eccentricity
    i: float = 0.0  # inclination
    raan: float = 0.0  # right ascension of ascending node
    argp: float = 0.0  # argument of perigee
    nu: float = 0.0  # true anomaly

    @property
    def perigee_radius_km(self) -> float:
        return self.a * (1.0 - self.e)

    @property
    def apogee_radius_km(self) -> float:
        return self.a * (1.0 + self.e)

    @property
    def perigee_altitude_km(self) -> float:
        return self.perigee_radius_km - EARTH_RADIUS_KM

    @property
    def apogee_altitude_km(self) -> float:
        return self.apogee_radius_km - EARTH_RADIUS_KM

    @property
    def mean_motion(self) -> float:
        """Mean motion (rad/s)."""
        return math.sqrt(MU_EARTH / abs(self.a) ** 3)

    @property
    def period_s(self) -> float:
        return 2.0 * math.pi / self.mean_motion

    @property
    def mean_anomaly(self) -> float:
        return true_to_mean_anomaly(self.nu, self.e)

    @property
    def specific_angular_momentum(self) -> float:
        return math.sqrt(MU_EARTH * self.a * (1.0 - self.e ** 2))

    def with_changes(self, **changes) -> "OrbitalElements":
        return replace(self, **changes)

    @classmethod
    def from_mean_anomaly(cls, a: float, e: float, i: float, raan: float,
                          argp: float, mean_anomaly: float) -> "OrbitalElements":
        """Build elements from a mean anomaly (as given by TLE data)."""
        E = solve_kepler_equation(mean_anomaly % (2.0 * math.pi), e)
        return cls(a, e, i, raan, argp, eccentric_to_true_anomaly(E, e))

    @classmethod
    def from_altitudes(cls, perigee_km: float, apogee_km: float, i: float = 0.0,
                       raan: float = 0.0, argp: float = 0.0, nu: float = 0.0) -> "OrbitalElements":
        """Build elements from perigee and apogee altitudes above the mean Earth radius."""
        rp = perigee_km + EARTH_RADIUS_KM
        ra = apogee_km + EARTH_RADIUS_KM
        if ra < rp:
            rp, ra = ra, rp
        return cls((rp + ra) / 2.0, (ra - rp) / (ra + rp), i, raan, argp, nu)


@dataclass(frozen=True)
class StateVector:
    """Inertial position (km) and velocity (km/s)."""

    position: Tuple[float, float, float]
    velocity: Tuple[float, float, float]

    @property
    def r(self) -> np.ndarray:
        return np.array(self.position, dtype=float)

    @property
    def v(self) -> np.ndarray:
        return np.array(self.velocity, dtype=float)

    @classmethod
    def from_arrays(cls, r: np.ndarray, v: np.ndarray) -> "StateVector":
        return cls(tuple(float(x) for x in r), tuple(float(x) for x in v))


def solve_kepler_equation(M: float, e: float, tolerance: float = 1e-12, max_iter: int = 50) -> float:
    """
    Solve Kepler's equation for eccentric anomaly.

    Args:
        M: Mean anomaly (rad)
        e: Eccentricity
        tolerance: Convergence tolerance
        max_iter: Maximum iterations

    Returns:
        Eccentric anomaly E (rad)
    """
    if e < 0.8:
        E = M
    else:
        E = math.pi if M > math.pi else -math.pi

    # Newton-Raphson iteration
    for _ in range(max_iter):
        f = E - e * math.sin(E) - M
        fp = 1.0 - e * math.cos(E)

        if abs(f) < tolerance:
            break

        if abs(fp) < 1e-12:
            break

        E = E - f / fp

    return E


def eccentric_to_true_anomaly(E: float, e: float) -> float:
    return 2.0 * math.atan2(
        math.sqrt(1.0 + e) * math.sin(E / 2.0),
        math.sqrt(1.0 - e) * math.cos(E / 2.0)
    )


def true_to_mean_anomaly(nu: float, e: float) -> float:
    E = 2.0 * math.atan2(
        math.sqrt(1.0 - e) * math.sin(nu / 2.0),
        math.sqrt(1.0 + e) * math.cos(nu / 2.0)
    )
    return (E - e * math.sin(E)) % (2.0 * math.pi)


def _acos(x: float) -> float:
    return math.acos(float(np.clip(x, -1.0, 1.0)))


def state_to_elements(state: StateVector) -> OrbitalElements:
    """
    Convert position and velocity to classical orbital elements.

    Equatorial and circular orbits fall back to the longitude of periapsis,
    argument of latitude or true longitude so that the conversion stays
    invertible.

    Args:
        state: Inertial state vector (km, km/s)

    Returns:
        OrbitalElements for the osculating orbit
    """
    r_vec = state.r
    v_vec = state.v

    r_mag = np.linalg.norm(r_vec)
    v_mag = np.linalg.norm(v_vec)

    # Specific angular momentum
    h_vec = np.cross(r_vec, v_vec)
    h_mag = np.linalg.norm(h_vec)

    # Node vector
    k_vec = np.array([0.0, 0.0, 1.0])
    n_vec = np.cross(k_vec, h_vec)
    n_mag = np.linalg.norm(n_vec)

    # Eccentricity vector
    e_vec = ((v_mag**2 - MU_EARTH / r_mag) * r_vec - np.dot(r_vec, v_vec) * v_vec) / MU_EARTH
    e = float(np.linalg.norm(e_vec))

    # Semi-major axis from specific orbital energy
    energy = v_mag**2 / 2 - MU_EARTH / r_mag
    if abs(e - 1.0) > SMALL:
        a = float(-MU_EARTH / (2 * energy))
    else:
        a = float("inf")

    i = _acos(h_vec[2] / h_mag)
    equatorial = n_mag < SMALL * h_mag
    circular = e < SMALL

    if not equatorial:
        raan = _acos(n_vec[0] / n_mag)
        if n_vec[1] < 0:
            raan = 2 * math.pi - raan
    else:
        raan = 0.0

    if circular:
        argp = 0.0
    elif not equatorial:
        argp = _acos(np.dot(n_vec, e_vec) / (n_mag * e))
        if e_vec[2] < 0:
            argp = 2 * math.pi - argp
    else:
        # Longitude of periapsis, measured in the direction of motion
        argp = math.atan2(e_vec[1], e_vec[0]) % (2 * math.pi)
        if h_vec[2] < 0:
            argp = (2 * math.pi - argp) % (2 * math.pi)

    if not circular:
        nu = _acos(np.dot(e_vec, r_vec) / (e * r_mag))
        if np.dot(r_vec, v_vec) < 0:
            nu = 2 * math.pi - nu
    elif not equatorial:
        # Argument of latitude
        nu = _acos(np.dot(n_vec, r_vec) / (n_mag * r_mag))
        if r_vec[2] < 0:
            nu = 2 * math.pi - nu
    else:
        # True longitude
        nu = math.atan2(r_vec[1], r_vec[0]) % (2 * math.pi)
        if h_vec[2] < 0:
            nu = (2 * math.pi - nu) % (2 * math.pi)

    return OrbitalElements(a=a, e=e, i=i, raan=raan, argp=argp, nu=nu)


def perifocal_rotation(i: float, raan: float, argp: float) -> np.ndarray:
    """Rotation matrix from the perifocal frame to the inertial frame."""
    cos_raan, sin_raan = math.cos(raan), math.sin(raan)
    cos_i, sin_i = math.cos(i), math.sin(i)
    cos_argp, sin_argp = math.cos(argp), math.sin(argp)

    R_raan = np.array([
        [cos_raan, -sin_raan, 0],
        [sin_raan, cos_raan, 0],
        [0, 0, 1]
    ])

    R_i = np.array([
        [1, 0, 0],
        [0, cos_i, -sin_i],
        [0, sin_i, cos_i]
    ])

    R_argp = np.array([
        [cos_argp, -sin_argp, 0],
        [sin_argp, cos_argp, 0],
        [0, 0, 1]
    ])

    return R_raan @ R_i @ R_argp


def elements_to_state(elements: OrbitalElements) -> StateVector:
    """
    Convert classical orbital elements to an inertial state vector.

    Args:
        elements: Orbital elements (km, rad)

    Returns:
        StateVector with position in km and velocity in km/s
    """
    a, e, nu = elements.a, elements.e, elements.nu

    p = a * (1 - e**2)
    r_mag = p / (1 + e * math.cos(nu))

    # Position and velocity in orbital plane
    r_op = np.array([r_mag * math.cos(nu), r_mag * math.sin(nu), 0.0])
    h = math.sqrt(MU_EARTH * p)
    v_op = np.array([
        -MU_EARTH / h * math.sin(nu),
        MU_EARTH / h * (e + math.cos(nu)),
        0.0
    ])

    R = perifocal_rotation(elements.i, elements.raan, elements.argp)
    return StateVector.from_arrays(R @ r_op, R @ v_op)


def propagate_elements(elements: OrbitalElements, dt_seconds: float) -> OrbitalElements:
    """Advance the true anomaly of an elliptical orbit by dt seconds."""
    if elements.a <= 0 or elements.e >= 1.0 or not math.isfinite(elements.a):
        raise ValueError(f"Cannot propagate non-elliptical orbit (a={elements.a}, e={elements.e})")

    M = (elements.mean_anomaly + elements.mean_motion * dt_seconds) % (2 * math.pi)
    E = solve_kepler_equation(M, elements.e)
    return elements.with_changes(nu=eccentric_to_true_anomaly(E, elements.e))


def propagate_two_body(state: StateVector, dt_seconds: float) -> StateVector:
    """
    Propagate an inertial state using two-body dynamics.

    Args:
        state: Initial state vector (km, km/s)
        dt_seconds: Time to propagate (seconds)

    Returns:
        State vector at time dt
    """
    return elements_to_state(propagate_elements(state_to_elements(state), dt_seconds))
