# src/atlascarbon/data/reference_store.py

"""
Loads and indexes the three static reference datasets used by the estimator:

- hardware_profiles.csv: vCPU count and memory per Atlas instance size and provider.
- cloud_providers_datacenters.csv: provider regions, optional PUE, and the
  location key into the carbon intensity table.
- ci_aggregated.csv: average grid carbon intensity (gCO2e/kWh) per location.

Sources:
- Atlas tiers: https://www.mongodb.com/docs/atlas/manage-clusters/#cluster-tier
- Datacenters and carbon intensity: Green Algorithms
  (https://github.com/GreenAlgorithms/green-algorithms-tool/tree/master/data)

Every file starts with a header row naming its columns. Fields are plain
comma-separated values; quoting is not used by these files.
"""

import csv
import logging
import re
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from pydantic import ValidationError

from atlascarbon.core.exceptions import MalformedReferenceRow, ReferenceDataMissing
from atlascarbon.models.reference import CarbonIntensityRecord, DatacenterRecord, HardwareProfile

logger = logging.getLogger(__name__)

HARDWARE_PROFILES_FILE = "hardware_profiles.csv"
DATACENTERS_FILE = "cloud_providers_datacenters.csv"
CARBON_INTENSITY_FILE = "ci_aggregated.csv"

_REGION_SEPARATORS = re.compile(r"[_\- ]")


def normalize_region(region: str) -> str:
    """Strips '_', '-' and spaces and upper-cases, so 'us-east-1' == 'US_EAST_1' == 'useast1'."""
    return _REGION_SEPARATORS.sub("", region or "").upper()


def _default_data_dir() -> Path:
    # Imported lazily so the loaders can be used without a configured environment
    from atlascarbon.core.config import config

    return config.REFERENCE_DATA_DIR


def _read_rows(path: Path, required_columns: Tuple[str, ...]) -> Iterator[Tuple[int, Dict[str, str]]]:
    """
    Yields (line number, row) pairs from a CSV resource, header excluded.

    Short rows get empty strings for their missing trailing fields and extra
    trailing fields are dropped.
    """
    if not path.is_file():
        raise ReferenceDataMissing(f"Reference data file not found: {path}")

    with open(path, "r", newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f, restval="")
        header = [h.strip() for h in (reader.fieldnames or [])]
        missing = [c for c in required_columns if c not in header]
        if missing:
            raise MalformedReferenceRow(path.name, 1, f"missing column(s) {', '.join(missing)}")
        reader.fieldnames = header

        for row in reader:
            yield reader.line_num, {k: (v or "").strip() for k, v in row.items() if k is not None}


def load_hardware_profiles(data_dir: Optional[Path] = None) -> Dict[Tuple[str, str], HardwareProfile]:
    """
    Load hardware profiles keyed by (PROVIDER, INSTANCE_SIZE).

    A row that does not validate aborts the load: a missing profile cannot be
    covered by any default.
    """
    path = Path(data_dir or _default_data_dir()) / HARDWARE_PROFILES_FILE
    profiles: Dict[Tuple[str, str], HardwareProfile] = {}

    for line, row in _read_rows(path, ("instance_size", "provider", "cpu", "memory_gb")):
        try:
            profile = HardwareProfile(
                provider_name=row["provider"],
                instance_size_name=row["instance_size"],
                cpu_core_count=row["cpu"],
                memory_capacity_gb=row["memory_gb"],
            )
        except ValidationError as e:
            raise MalformedReferenceRow(path.name, line, str(e)) from e

        if profile.key in profiles:
            logger.warning("Duplicate hardware profile %s at %s:%d ignored", profile.key, path.name, line)
            continue
        profiles[profile.key] = profile

    logger.debug("Loaded %d hardware profiles from %s", len(profiles), path)
    return profiles


def load_datacenter_records(data_dir: Optional[Path] = None) -> List[DatacenterRecord]:
    """
    Load datacenter records in file order. Invalid rows are skipped with a warning.
    """
    path = Path(data_dir or _default_data_dir()) / DATACENTERS_FILE
    records: List[DatacenterRecord] = []

    for line, row in _read_rows(path, ("provider", "region_name", "location", "pue")):
        try:
            record = DatacenterRecord(
                provider_name=row["provider"],
                region_name=row["region_name"],
                carbon_intensity_key=row["location"],
                pue_override=row["pue"],
                location_description=row.get("city") or None,
            )
        except ValidationError as e:
            logger.warning("Skipping invalid row in datacenter CSV: %s", MalformedReferenceRow(path.name, line, str(e)))
            continue
        records.append(record)

    logger.debug("Loaded %d datacenter records from %s", len(records), path)
    return records


def load_carbon_intensity(data_dir: Optional[Path] = None) -> Dict[str, CarbonIntensityRecord]:
    """
    Load carbon intensity records keyed by location. Invalid rows are skipped
    with a warning; on duplicate keys the first row wins.
    """
    path = Path(data_dir or _default_data_dir()) / CARBON_INTENSITY_FILE
    intensities: Dict[str, CarbonIntensityRecord] = {}

    for line, row in _read_rows(path, ("location", "carbon_intensity")):
        try:
            record = CarbonIntensityRecord(key=row["location"], g_co2_per_kwh=row["carbon_intensity"])
        except ValidationError as e:
            logger.warning(
                "Skipping invalid row in carbon intensity CSV: %s", MalformedReferenceRow(path.name, line, str(e))
            )
            continue
        intensities.setdefault(record.key, record)

    logger.debug("Loaded %d carbon intensity records from %s", len(intensities), path)
    return intensities


class ReferenceDataStore:
    """
    Read-only view over the hardware, datacenter and carbon intensity tables.

    Build it with `ReferenceDataStore.load()` for the packaged CSV files, or
    pass records directly (useful in tests).
    """

    def __init__(
        self,
        hardware_profiles: Iterable[HardwareProfile],
        datacenters: Iterable[DatacenterRecord],
        carbon_intensity: Iterable[CarbonIntensityRecord],
    ):
        hardware: Dict[Tuple[str, str], HardwareProfile] = {}
        for profile in hardware_profiles:
            hardware.setdefault(profile.key, profile)
        self._hardware = MappingProxyType(hardware)

        self._datacenters = tuple(datacenters)

        # (PROVIDER, NORMALIZED_REGION) -> first record in table order
        index: Dict[Tuple[str, str], DatacenterRecord] = {}
        for record in self._datacenters:
            index.setdefault((record.provider_name.upper(), normalize_region(record.region_name)), record)
        self._datacenter_index = MappingProxyType(index)

        intensities: Dict[str, CarbonIntensityRecord] = {}
        for record in carbon_intensity:
            intensities.setdefault(record.key, record)
        self._carbon_intensity = MappingProxyType(intensities)

    @classmethod
    def load(cls, data_dir: Optional[Path] = None) -> "ReferenceDataStore":
        data_dir = Path(data_dir or _default_data_dir())
        logger.info("Loading reference data from %s", data_dir)
        return cls(
            hardware_profiles=load_hardware_profiles(data_dir).values(),
            datacenters=load_datacenter_records(data_dir),
            carbon_intensity=load_carbon_intensity(data_dir).values(),
        )

    @property
    def datacenters(self) -> Tuple[DatacenterRecord, ...]:
        return self._datacenters

    def get_hardware_profile(self, provider: str, instance_size: str) -> HardwareProfile:
        """
        Raises:
            ReferenceDataMissing: If no profile exists for the pair.
        """
        key = ((provider or "").upper(), (instance_size or "").upper())
        profile = self._hardware.get(key)
        if profile is None:
            raise ReferenceDataMissing(f"No hardware profile for instance size '{instance_size}' on '{provider}'")
        return profile

    def find_datacenter(self, provider: str, region: str) -> Optional[DatacenterRecord]:
        return self._datacenter_index.get(((provider or "").upper(), normalize_region(region)))

    def get_carbon_intensity(self, key: str) -> Optional[CarbonIntensityRecord]:
        return self._carbon_intensity.get(key)
