"""
Cost/Comparison Estimator

Operating cost of a laser campaign and how it compares with other active
debris removal methods.
"""

import math
from typing import Mapping, Optional

from laser_deorbit.config import (
    ADR_REFERENCE_COSTS,
    ELECTRICITY_COST_PER_KWH,
    KWH_PER_GJ,
    OPERATING_COST_PER_DAY,
    WALL_PLUG_EFFICIENCY,
)
from laser_deorbit.models import CostBreakdown, MethodComparison


def compare_with_method(method: str, reference_cost: float, total_cost: float) -> MethodComparison:
    times_cheaper = reference_cost / total_cost if total_cost > 0 else math.inf
    savings = reference_cost - total_cost
    savings_percent = 100.0 * savings / reference_cost if reference_cost > 0 else 0.0
    return MethodComparison(
        method=method,
        reference_cost=reference_cost,
        times_cheaper=times_cheaper,
        savings=savings,
        savings_percent=savings_percent,
    )


def calculate_mission_cost(
    total_energy_gj: float,
    duration_days: float,
    reference_costs: Optional[Mapping[str, float]] = None,
) -> CostBreakdown:
    """
    Estimate campaign cost.

    Electricity is billed on wall-plug energy, i.e. optical energy divided
    by the laser's electrical efficiency.

    Args:
        total_energy_gj: Optical energy delivered (GJ)
        duration_days: Campaign duration (days)
        reference_costs: Alternative methods and their cost (USD),
            defaults to ADR_REFERENCE_COSTS

    Returns:
        CostBreakdown in USD
    """
    reference_costs = ADR_REFERENCE_COSTS if reference_costs is None else reference_costs

    electrical_kwh = total_energy_gj * KWH_PER_GJ / WALL_PLUG_EFFICIENCY
    electricity_cost = electrical_kwh * ELECTRICITY_COST_PER_KWH
    operating_cost = OPERATING_COST_PER_DAY * duration_days
    total_cost = electricity_cost + operating_cost

    return CostBreakdown(
        total_energy_gj=total_energy_gj,
        duration_days=duration_days,
        electricity_cost=electricity_cost,
        operating_cost=operating_cost,
        total_cost=total_cost,
        comparisons={
            method: compare_with_method(method, cost, total_cost)
            for method, cost in reference_costs.items()
        },
    )
