"""
Mission orchestration

End-to-end campaign run: validate inputs, predict visibility passes from
every ground station, plan the engagements, and assemble the report.
"""

import logging
import threading
from typing import Optional, Sequence

from laser_deorbit.config import SimulationConfig
from laser_deorbit.cost import calculate_mission_cost
from laser_deorbit.models import (
    CampaignStatus,
    DebrisTarget,
    GroundStation,
    LaserConfig,
    MissionReport,
    ScanParameters,
)
from laser_deorbit.orbital_evolution import estimate_atmospheric_decay
from laser_deorbit.planner import CampaignPlan, MissionPlanner
from laser_deorbit.propagation import propagator_for
from laser_deorbit.validation import validate_mission_inputs
from laser_deorbit.visibility import ScanResult, VisibilityScanner

logger = logging.getLogger(__name__)


def build_report(debris: DebrisTarget, station_count: int,
                 scan_result: ScanResult, plan: CampaignPlan) -> MissionReport:
    """Combine scan diagnostics and a campaign plan into a MissionReport."""
    initial = plan.initial_elements
    final = plan.final_elements
    total_energy_gj = plan.total_energy_j / 1e9

    return MissionReport(
        debris_name=debris.name,
        station_count=station_count,
        status=CampaignStatus.COMPLETED if plan.completed else CampaignStatus.INCOMPLETE,
        reentry_achieved=plan.completed,
        reentry_pass_number=plan.reentry_pass_number,
        total_passes=len(scan_result.passes),
        passes_attempted=len(plan.results),
        passes_succeeded=plan.passes_succeeded,
        passes_skipped=plan.passes_skipped,
        total_pulses=plan.total_pulses,
        total_energy_j=plan.total_energy_j,
        total_energy_gj=total_energy_gj,
        total_delta_v_ms=plan.total_delta_v_ms,
        initial_perigee_km=initial.perigee_altitude_km,
        initial_apogee_km=initial.apogee_altitude_km,
        final_perigee_km=final.perigee_altitude_km,
        final_apogee_km=final.apogee_altitude_km,
        perigee_reduction_km=initial.perigee_altitude_km - final.perigee_altitude_km,
        duration_days=plan.duration_days,
        final_temperature_k=plan.final_temperature_k,
        max_temperature_k=plan.max_temperature_k,
        passes=tuple(plan.results),
        perigee_series=tuple(plan.perigee_series),
        atmospheric_decay=estimate_atmospheric_decay(final.perigee_altitude_km, debris.area_to_mass_ratio),
        cost=calculate_mission_cost(total_energy_gj, plan.duration_days),
        truncated_passes=scan_result.truncated_passes,
        scan_failures=tuple(scan_result.failures),
    )


def run_mission(
    stations: Sequence[GroundStation],
    debris: DebrisTarget,
    laser: Optional[LaserConfig] = None,
    scan: Optional[ScanParameters] = None,
    config: Optional[SimulationConfig] = None,
    cancel_event: Optional[threading.Event] = None,
) -> MissionReport:
    """
    Simulate a complete deorbit campaign.

    Args:
        stations: Ground stations, in priority order
        debris: Target to deorbit
        laser: Laser configuration (defaults if omitted)
        scan: Visibility scan settings (from ``config`` if omitted)
        config: Runtime settings (from the environment if omitted)
        cancel_event: Set to abort the visibility scan

    Returns:
        MissionReport

    Raises:
        MissionInputError: If any input is invalid
        ScanCancelled: If ``cancel_event`` is set during the scan
    """
    config = config or SimulationConfig.from_env()
    laser = laser or LaserConfig()
    scan = scan or ScanParameters.from_config(config)

    validate_mission_inputs(stations, debris, config.max_stations).raise_if_invalid()

    planner = MissionPlanner(debris, laser, initial_temp_k=config.initial_temp_k)

    if not stations:
        logger.info(f"No ground stations for {debris.name}; nothing to plan")
        return build_report(debris, 0, ScanResult(passes=[], station_scans=[]), planner.plan([]))

    scanner = VisibilityScanner(
        propagator_for(debris),
        scan,
        chunk_samples=config.chunk_samples,
        max_workers=config.max_workers,
        cancel_event=cancel_event,
    )
    scan_result = scanner.scan_stations(stations)

    plan = planner.plan(scan_result.passes)
    report = build_report(debris, len(stations), scan_result, plan)

    logger.info(
        f"{debris.name}: {report.status.value}, {report.passes_succeeded}/{report.total_passes} passes used, "
        f"ΔV {report.total_delta_v_ms:.1f} m/s, perigee {report.final_perigee_km:.1f} km"
    )
    return report
