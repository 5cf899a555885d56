# src/atlascarbon/models/reference.py
"""
Pydantic models for the static reference datasets: hardware specs per
instance size, cloud datacenters and aggregated grid carbon intensity.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class HardwareProfile(BaseModel):
    """
    Physical resources behind one Atlas instance size on one provider.

    Attributes:
        provider_name: Cloud provider as reported by Atlas (e.g., "AWS", "GCP", "AZURE")
        instance_size_name: Atlas tier (e.g., "M10", "M30")
        cpu_core_count: Number of vCPUs
        memory_capacity_gb: Memory available to the process, in GB
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    provider_name: str = Field(..., min_length=1, description="Cloud provider name")
    instance_size_name: str = Field(..., min_length=1, description="Atlas instance size")
    cpu_core_count: int = Field(..., ge=1, description="vCPU count")
    memory_capacity_gb: float = Field(..., ge=0, description="Memory capacity in GB")

    @property
    def key(self) -> tuple[str, str]:
        return (self.provider_name.upper(), self.instance_size_name.upper())


class DatacenterRecord(BaseModel):
    """
    One row of the cloud providers datacenter table.

    `pue_override` is None when the table leaves the PUE column empty, which
    means the provider default applies.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    provider_name: str = Field(..., min_length=1, description="Cloud provider name")
    region_name: str = Field(..., min_length=1, description="Provider region identifier")
    carbon_intensity_key: str = Field(..., description="Location key into the carbon intensity table")
    pue_override: Optional[float] = Field(None, gt=0, description="Datacenter specific PUE")
    location_description: Optional[str] = Field(None, description="Location description")

    @field_validator("pue_override", mode="before")
    @classmethod
    def _empty_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class CarbonIntensityRecord(BaseModel):
    """Average grid carbon intensity for a location."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    key: str = Field(..., min_length=1, description="Location key")
    g_co2_per_kwh: float = Field(..., ge=0, description="Carbon intensity in gCO2e/kWh")
