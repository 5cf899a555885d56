# src/atlascarbon/energy/estimator.py

"""
Energy and emissions model.

Implements the Green Algorithms formula
(https://onlinelibrary.wiley.com/doi/10.1002/advs.202100707):

    E = t × (n_c × P_c × u_c + n_m × P_m + n_s × P_s) × PUE × 0.001 × CI

- P_c: 12.4 W per core, the average of the Green Algorithms TDP per core table
  (https://github.com/GreenAlgorithms/green-algorithms-tool/blob/master/data/TDP_cpu.csv)
- P_m: 0.3725 W per GB of memory
- P_s: 0.001 W per GB of storage

The memory term uses the memory capacity of the instance, not the amount in use.
"""

import logging
from typing import Iterable

from atlascarbon.core.config import Config
from atlascarbon.core.exceptions import AggregationDomainError
from atlascarbon.models.metrics import Equivalences, ProcessEstimate

logger = logging.getLogger(__name__)

WATTS_PER_CORE = 12.4
WATTS_PER_GB_MEMORY = 0.3725
WATTS_PER_GB_STORAGE = 0.001
KILO = 0.001

# Monthly equivalences assume the estimated window repeats for 30 days
DAYS_PER_MONTH = 30
GRAMS_CO2_PER_CAR_KM = 251
GRAMS_CO2_PER_FLIGHT_JFK_SFO = 570_000
TREES_PER_KG_CO2_MONTH = 0.11


def estimate_co2e_grams(
    running_time_hours: float,
    cpu_core_count: int,
    cpu_utilization: float,
    memory_capacity_gb: float,
    disk_size_gb: float,
    pue: float,
    carbon_intensity: float,
) -> float:
    """Grams of CO2e emitted over `running_time_hours`."""
    power_watts = (
        cpu_core_count * WATTS_PER_CORE * cpu_utilization
        + memory_capacity_gb * WATTS_PER_GB_MEMORY
        + disk_size_gb * WATTS_PER_GB_STORAGE
    )
    return running_time_hours * power_watts * pue * KILO * carbon_intensity


def fleet_total(emissions: Iterable[float]) -> float:
    """Sum of per-process emissions. An empty fleet has no total."""
    values = list(emissions)
    if not values:
        raise AggregationDomainError("Cannot compute a fleet total without any process estimate")
    return sum(values)


def compute_equivalences(total_co2e_grams: float) -> Equivalences:
    """Monthly equivalents of an emission figure for one day."""
    return Equivalences(
        monthly_kg_co2e=total_co2e_grams / 1000 * DAYS_PER_MONTH,
        car_km=total_co2e_grams * DAYS_PER_MONTH / GRAMS_CO2_PER_CAR_KM,
        flights_jfk_sfo=total_co2e_grams * DAYS_PER_MONTH / GRAMS_CO2_PER_FLIGHT_JFK_SFO,
        trees_to_offset=total_co2e_grams / 1000 * DAYS_PER_MONTH * TREES_PER_KG_CO2_MONTH,
    )


class EnergyEstimator:
    """
    Applies the emissions model to process estimates over the configured
    running window.
    """

    def __init__(self, settings: Config):
        self.running_time_hours = float(getattr(settings, "RUNNING_TIME_HOURS", 24))

    def estimate(self, process: ProcessEstimate) -> ProcessEstimate:
        """Returns a copy of `process` with `co2e_grams` filled in."""
        grams = estimate_co2e_grams(
            running_time_hours=self.running_time_hours,
            cpu_core_count=process.cpu_core_count,
            cpu_utilization=process.normalized_cpu_utilization,
            memory_capacity_gb=process.memory_capacity_gb,
            disk_size_gb=process.disk_size_gb,
            pue=process.effective_pue,
            carbon_intensity=process.effective_carbon_intensity,
        )
        logger.debug("Process %s emitted %.2f gCO2e over %sh", process.process_id, grams, self.running_time_hours)
        return process.model_copy(update={"co2e_grams": grams})
