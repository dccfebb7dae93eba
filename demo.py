"""
Laser Deorbit Campaign Demonstration

This script demonstrates the key capabilities of the laser deorbit package:
- TLE parsing and validation
- Visibility pass prediction from several ground stations
- Pass-by-pass laser campaign planning with thermal limits
- Perigee evolution, decay estimates and cost comparison

Usage:
    python demo.py [--horizon-days N] [--stations N] [--verbose]

Arguments:
    --horizon-days: Visibility scan horizon (default 14)
    --stations: Number of demo ground stations to use (default 3)
    --verbose: Enable debug logging
    --log-file: Also write the log to this file

References:
    Phipps, C. R. et al. (2012). Removing orbital debris with lasers.
    Advances in Space Research 49, 1283-1300.
"""

import argparse
import logging
from dataclasses import replace

from laser_deorbit.analysis import compare_debris_removal_efficiency, estimate_passes_per_day
from laser_deorbit.config import SimulationConfig
from laser_deorbit.mission import run_mission
from laser_deorbit.models import DebrisTarget, GroundStation, MissionReport
from laser_deorbit.orbital_evolution import first_reentry_pass, track_perigee_evolution
from laser_deorbit.tle import parse_tle
from logging_config import configure_logging, get_logger, level_from_env

logger = get_logger(__name__)

# ISS TLE data (as of September 2023), used as a representative LEO orbit
ISS_LINE1 = "1 25544U 98067A   23259.57580000  .00012022  00000-0  21844-3 0  9995"
ISS_LINE2 = "2 25544  51.6416 220.9944 0004263 122.0101 312.2755 15.49541986415598"

DEMO_STATIONS = [
    GroundStation(name="Stuttgart", latitude_deg=48.78, longitude_deg=9.18, height_km=0.25),
    GroundStation(name="Tenerife", latitude_deg=28.30, longitude_deg=-16.51, height_km=2.39),
    GroundStation(name="Canberra", latitude_deg=-35.40, longitude_deg=148.98, height_km=0.69),
    GroundStation(name="Kourou", latitude_deg=5.25, longitude_deg=-52.80, height_km=0.01),
    GroundStation(name="Svalbard", latitude_deg=78.23, longitude_deg=15.39, height_km=0.45),
]

DEMO_DEBRIS = DebrisTarget(
    name="FRAGMENT-25544",
    size_m=0.5,
    mass_kg=15.0,
    material="ALUMINUM",
    area_to_mass=0.02,
    tle_line1=ISS_LINE1,
    tle_line2=ISS_LINE2,
)


def summarize_report(report: MissionReport) -> None:
    """Log the headline numbers of a mission report."""
    logger.info(f"Status: {report.status.value}")
    logger.info(f"Passes found: {report.total_passes} "
                f"(used {report.passes_succeeded}, skipped {report.passes_skipped})")
    if report.skipped_reasons:
        logger.info(f"Skip reasons: {report.skipped_reasons}")
    logger.info(f"Total pulses: {report.total_pulses}")
    logger.info(f"Total energy: {report.total_energy_gj:.3f} GJ")
    logger.info(f"Total delta-V: {report.total_delta_v_ms:.2f} m/s")
    logger.info(f"Perigee: {report.initial_perigee_km:.1f} km -> {report.final_perigee_km:.1f} km")
    logger.info(f"Campaign duration: {report.duration_days:.2f} days")
    logger.info(f"Peak temperature: {report.max_temperature_k:.1f} K")

    if report.reentry_achieved:
        logger.info(f"Re-entry perigee reached on pass {report.reentry_pass_number}")

    if report.truncated_passes:
        logger.info(f"Passes truncated at scan horizon: {report.truncated_passes}")
    for failure in report.scan_failures:
        logger.warning(f"Scan failure at {failure.station_name}: {failure.message}")

    if report.atmospheric_decay is not None:
        decay = report.atmospheric_decay
        logger.info(
            f"Natural decay at final perigee: {decay.decay_rate_km_per_day:.3e} km/day, "
            f"lifetime {decay.estimated_lifetime_days:.1f} days"
        )

    if report.cost is not None:
        cost = report.cost
        logger.info(f"Cost: ${cost.total_cost:,.0f} "
                    f"(electricity ${cost.electricity_cost:,.0f}, operations ${cost.operating_cost:,.0f})")
        for comparison in cost.comparisons.values():
            logger.info(f"  vs {comparison.method}: {comparison.times_cheaper:.0f}x cheaper")


def demonstrate_perigee_evolution(report: MissionReport) -> None:
    """Replay the accepted burns with the apogee-anchored model."""
    delta_vs = [result.delta_v_ms for result in report.accepted_passes()]
    steps = track_perigee_evolution(report.initial_perigee_km, report.initial_apogee_km, delta_vs)

    logger.info("Perigee evolution (burns at apogee):")
    for step in steps:
        logger.info(f"  Pass {step.pass_number:3d}: perigee {step.perigee_km:8.1f} km")

    reentry_pass = first_reentry_pass(steps)
    if reentry_pass is not None:
        logger.info(f"Apogee model reaches re-entry on burn {reentry_pass}")


def main() -> None:
    """Main demonstration entry point."""
    parser = argparse.ArgumentParser(
        description="Ground-Laser Debris Deorbit Demonstration"
    )
    parser.add_argument("--horizon-days", type=float, default=14.0, help="Scan horizon in days")
    parser.add_argument("--stations", type=int, default=3, help="Number of demo stations (1-5)")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--log-file", default=None, help="Also log to this file")

    args = parser.parse_args()

    configure_logging(level=logging.DEBUG if args.verbose else level_from_env(), log_file=args.log_file)

    logger.info("Laser Deorbit Campaign Demonstration")
    logger.info("=" * 60)

    tle_data = parse_tle(ISS_LINE1, ISS_LINE2, DEMO_DEBRIS.name)
    logger.info(f"Target: {DEMO_DEBRIS.name} (NORAD {tle_data['norad_id']})")
    logger.info(f"Inclination: {tle_data['inclination_deg']:.4f} degrees")
    logger.info(f"Epoch: {tle_data['epoch_datetime'].isoformat()}")

    stations = DEMO_STATIONS[:max(0, min(args.stations, len(DEMO_STATIONS)))]
    for station in stations:
        logger.info(
            f"Station {station.name}: ~{estimate_passes_per_day(station.latitude_deg, tle_data['inclination_deg'])} "
            f"passes/day"
        )

    config = replace(SimulationConfig.from_env(), horizon_days=args.horizon_days)

    logger.info("")
    report = run_mission(stations, DEMO_DEBRIS, config=config)

    logger.info("")
    summarize_report(report)

    logger.info("")
    demonstrate_perigee_evolution(report)

    logger.info("")
    ranking = compare_debris_removal_efficiency([
        DEMO_DEBRIS,
        DEMO_DEBRIS.model_copy(update={"name": "ROCKET-STAGE", "size_m": 3.0, "mass_kg": 800.0}),
    ])
    logger.info("Removal efficiency ranking:")
    for entry in ranking:
        logger.info(f"  {entry.name}: {entry.delta_v_per_pass_ms:.2f} m/s per pass, "
                    f"~{entry.estimated_passes} passes")

    logger.info("=" * 60)
    logger.info("Demonstration complete")


if __name__ == "__main__":
    main()
