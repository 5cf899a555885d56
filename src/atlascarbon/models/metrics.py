# src/atlascarbon/models/metrics.py
"""
This module defines the Pydantic data models for all values derived by the
estimation pipeline. These models are the single source of truth for the
data passed between the processor, the estimator and the reporters.
"""

from datetime import datetime, timezone
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class EnvironmentalFactors(BaseModel):
    """
    Holds the environmental factors resolved for a provider region.
    """

    model_config = ConfigDict(frozen=True)

    pue: float = Field(..., description="Power Usage Effectiveness of the data center.")
    carbon_intensity: float = Field(..., description="Carbon intensity of the grid in gCO2e/kWh.")
    datacenter_matched: bool = Field(False, description="Whether a datacenter record matched the region.")
    intensity_matched: bool = Field(False, description="Whether the carbon intensity came from the reference table.")


class ProcessDescriptor(BaseModel):
    """
    One mongod/mongos process of a cluster, with the PUE and carbon intensity
    of the region it runs in. The environmental factors are resolved once when
    the descriptor is built.
    """

    model_config = ConfigDict(frozen=True)

    process_id: str = Field(..., description="host:port of the process.")
    cluster_name: str = Field(..., description="The cluster the process belongs to.")
    provider_name: str = Field(..., description="Cloud provider, upper-cased.")
    region_name: str = Field(..., description="Provider region as reported by Atlas.")
    instance_size_name: str = Field(..., description="Atlas instance size (e.g. M30).")
    disk_size_gb: float = Field(..., description="Provisioned disk size in GB.")
    effective_pue: float = Field(..., description="PUE applied to this process.")
    effective_carbon_intensity: float = Field(..., description="gCO2e/kWh applied to this process.")


class ProcessEstimate(ProcessDescriptor):
    """
    Utilization and hardware figures for a single process, and the emissions
    computed from them over the running window.
    """

    memory_used_gb: float = Field(..., description="Average available memory reported by Atlas, in GB.")
    normalized_cpu_utilization: float = Field(..., description="Sum of the CPU time category averages.")
    cpu_core_count: int = Field(..., description="vCPUs of the instance size.")
    memory_capacity_gb: float = Field(..., description="Memory of the instance size in GB.")
    co2e_grams: float = Field(0.0, description="Emissions over the running window in grams of CO2e.")


class SkippedCluster(BaseModel):
    """A cluster left out of the estimate because its tier has no monitoring data."""

    cluster_name: str
    instance_size_name: str
    reason: str


class FailedProcess(BaseModel):
    """A process whose estimate could not be computed."""

    process_id: str
    cluster_name: str
    reason: str


class Equivalences(BaseModel):
    """Monthly equivalents of a daily emission figure, assuming 30 similar days."""

    monthly_kg_co2e: float
    car_km: float
    flights_jfk_sfo: float
    trees_to_offset: float


class FleetEstimate(BaseModel):
    """
    The result of one estimation run over all processes of a project.
    """

    project_id: str
    project_name: str
    running_time_hours: float
    total_co2e_grams: float
    equivalences: Equivalences
    processes: List[ProcessEstimate] = Field(default_factory=list)
    skipped_clusters: List[SkippedCluster] = Field(default_factory=list)
    failed_processes: List[FailedProcess] = Field(default_factory=list)
    generated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the estimate was computed.",
    )
