"""
TLE Parser Module

Utilities for parsing Two-Line Element (TLE) sets: structured field
extraction via the sgp4 library, checksum validation, epoch conversion, and
conversion of the mean elements into the OrbitalElements used by the
campaign physics.
"""

import math
from datetime import datetime, timezone, timedelta
from typing import Any, Dict, List, Tuple

from sgp4.api import Satrec

from laser_deorbit.config import MU_EARTH
from laser_deorbit.orbital_mechanics import OrbitalElements


def tle_checksum(line: str) -> int:
    """Calculate TLE checksum (modulo-10 sum of digits, '-' counts as 1)."""
    checksum = 0
    for char in line[:68]:
        if char.isdigit():
            checksum += int(char)
        elif char == "-":
            checksum += 1
    return checksum % 10


def check_tle_lines(line1: str, line2: str) -> List[str]:
    """
    Check the structure and checksums of a TLE pair.

    Args:
        line1: First line of TLE
        line2: Second line of TLE

    Returns:
        List of problems found (empty when the lines look valid)
    """
    problems = []
    for number, line in ((1, line1), (2, line2)):
        if len(line) < 69:
            problems.append(f"TLE line {number} is {len(line)} characters, expected 69")
            continue
        if line[0] != str(number):
            problems.append(f"TLE line {number} must start with '{number}'")
        if not line[68].isdigit() or int(line[68]) != tle_checksum(line):
            problems.append(
                f"TLE line {number} checksum mismatch (expected {tle_checksum(line)}, got '{line[68]}')"
            )
    if not problems and line1[2:7] != line2[2:7]:
        problems.append("TLE lines refer to different catalog numbers")
    return problems


def epoch_to_datetime(epoch_year: int, epoch_days: float) -> datetime:
    """
    Convert TLE epoch to datetime.

    Args:
        epoch_year: Two-digit year
        epoch_days: Day of year with fractional part

    Returns:
        Datetime object in UTC
    """
    year = 1900 + epoch_year if epoch_year >= 57 else 2000 + epoch_year
    # -1 because day 1 is Jan 1
    return datetime(year, 1, 1, tzinfo=timezone.utc) + timedelta(days=epoch_days - 1.0)


def parse_tle(line1: str, line2: str, name: str = "") -> Dict[str, Any]:
    """
    Parse TLE lines into structured data.

    Args:
        line1: First line of TLE
        line2: Second line of TLE
        name: Optional object name

    Returns:
        Dictionary containing parsed TLE data
    """
    satellite = Satrec.twoline2rv(line1, line2)

    # no_kozai is in rad/min
    mean_motion_rev_day = satellite.no_kozai * 1440.0 / (2.0 * math.pi)

    return {
        "name": name,
        "norad_id": satellite.satnum,
        "classification": getattr(satellite, "classification", "U"),
        "epoch_year": satellite.epochyr,
        "epoch_days": satellite.epochdays,
        "epoch_datetime": epoch_to_datetime(satellite.epochyr, satellite.epochdays),
        "bstar_drag": satellite.bstar,
        "inclination_deg": math.degrees(satellite.inclo),
        "raan_deg": math.degrees(satellite.nodeo),
        "eccentricity": satellite.ecco,
        "arg_perigee_deg": math.degrees(satellite.argpo),
        "mean_anomaly_deg": math.degrees(satellite.mo),
        "mean_motion_rev_per_day": mean_motion_rev_day,
        "line1": line1,
        "line2": line2,
    }


def tle_to_elements(line1: str, line2: str) -> Tuple[OrbitalElements, datetime]:
    """
    Convert TLE mean elements to OrbitalElements at the TLE epoch.

    The semi-major axis follows from the Kozai mean motion via Kepler's
    third law; this is adequate for perigee/apogee bookkeeping but is not
    an osculating state.

    Returns:
        Tuple of (elements, epoch)
    """
    satellite = Satrec.twoline2rv(line1, line2)
    n_rad_s = satellite.no_kozai / 60.0
    a = (MU_EARTH / n_rad_s**2) ** (1.0 / 3.0)
    elements = OrbitalElements.from_mean_anomaly(
        a=a,
        e=satellite.ecco,
        i=satellite.inclo,
        raan=satellite.nodeo,
        argp=satellite.argpo,
        mean_anomaly=satellite.mo,
    )
    return elements, epoch_to_datetime(satellite.epochyr, satellite.epochdays)
