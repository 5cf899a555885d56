# src/atlascarbon/models/atlas.py
"""
Pydantic models for the payloads returned by the Atlas Admin API (v1.0).
Only the fields consumed by the estimation pipeline are declared; the rest
of each payload is ignored.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

MONGODB_URI_SCHEME = "mongodb://"
MONGODB_SRV_SCHEME = "mongodb+srv://"


class Project(BaseModel):
    """An Atlas project (called a "group" by the API)."""

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str


class ProviderSettings(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    provider_name: str = Field(..., alias="providerName")
    region_name: str = Field("", alias="regionName")
    instance_size_name: str = Field(..., alias="instanceSizeName")


class Cluster(BaseModel):
    """
    A cluster as listed by `GET /groups/{id}/clusters`.

    The member processes are not listed by that endpoint; they are derived from
    the hosts in `mongoURI` (`mongodb://host1:27017,host2:27017,...`).
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str
    provider_settings: ProviderSettings = Field(..., alias="providerSettings")
    disk_size_gb: float = Field(..., alias="diskSizeGB")
    mongo_uri: Optional[str] = Field(None, alias="mongoURI")

    @property
    def provider_name(self) -> str:
        return self.provider_settings.provider_name

    @property
    def region_name(self) -> str:
        return self.provider_settings.region_name

    @property
    def instance_size_name(self) -> str:
        return self.provider_settings.instance_size_name

    @property
    def uses_srv_record(self) -> bool:
        """True when `mongoURI` names a DNS seed list instead of the hosts."""
        return bool(self.mongo_uri) and self.mongo_uri.startswith(MONGODB_SRV_SCHEME)

    @property
    def process_ids(self) -> List[str]:
        """
        Host:port pairs of every process in the cluster, in URI order.

        An SRV connection string only names a DNS record, so no process can be
        derived from it.
        """
        if not self.mongo_uri or self.uses_srv_record:
            return []
        hosts = self.mongo_uri
        if hosts.startswith(MONGODB_URI_SCHEME):
            hosts = hosts[len(MONGODB_URI_SCHEME) :]
        # Drop any database path or options following the host list
        hosts = hosts.split("/", 1)[0]
        return [h.strip() for h in hosts.split(",") if h.strip()]


class DataPoint(BaseModel):
    """A single timestamped sample. Atlas reports `null` for empty buckets."""

    model_config = ConfigDict(extra="ignore")

    timestamp: datetime
    value: Optional[float] = None


class Measurement(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str
    units: Optional[str] = None
    data_points: List[DataPoint] = Field(default_factory=list, alias="dataPoints")


class MeasurementSet(BaseModel):
    """Response of `GET /groups/{id}/processes/{pid}/measurements`."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    process_id: Optional[str] = Field(None, alias="processId")
    granularity: Optional[str] = None
    measurements: List[Measurement] = Field(default_factory=list)


class MeasurementWindow(BaseModel):
    """Granularity and lookback period requested for every process."""

    model_config = ConfigDict(frozen=True)

    granularity: str = "PT5M"
    period: str = "P1D"

    def as_params(self) -> dict:
        return {"granularity": self.granularity, "period": self.period}
