# tests/conftest.py

import pytest

from atlascarbon.data.reference_store import ReferenceDataStore
from atlascarbon.models.atlas import DataPoint, Measurement, MeasurementSet
from atlascarbon.models.reference import CarbonIntensityRecord, DatacenterRecord, HardwareProfile

CPU_METRIC_NAMES = [
    "SYSTEM_NORMALIZED_CPU_USER",
    "SYSTEM_NORMALIZED_CPU_KERNEL",
    "SYSTEM_NORMALIZED_CPU_NICE",
    "SYSTEM_NORMALIZED_CPU_IOWAIT",
    "SYSTEM_NORMALIZED_CPU_IRQ",
    "SYSTEM_NORMALIZED_CPU_SOFTIRQ",
    "SYSTEM_NORMALIZED_CPU_GUEST",
    "SYSTEM_NORMALIZED_CPU_STEAL",
]


@pytest.fixture(autouse=True)
def mock_settings_env_vars(monkeypatch):
    """
    Pytest fixture to mock environment variables for the config module.

    This fixture runs automatically for every test (`autouse=True`). It uses
    monkeypatch to set environment variables, ensuring that the application's
    config is predictable and isolated from the actual environment.
    """
    monkeypatch.setenv("ATLAS_PUBLIC_KEY", "test-public-key")
    monkeypatch.setenv("ATLAS_PRIVATE_KEY", "test-private-key")
    monkeypatch.delenv("REFERENCE_DATA_DIR", raising=False)


@pytest.fixture
def reference_data():
    """
    An in-memory reference store:
    - AWS us-east-1 is deliberately absent from the datacenter table.
    - GCP central-us has a PUE override and a known location.
    - AZURE europe-west has a location with no carbon intensity record.
    """
    return ReferenceDataStore(
        hardware_profiles=[
            HardwareProfile(provider_name="AWS", instance_size_name="M10", cpu_core_count=2, memory_capacity_gb=8),
            HardwareProfile(provider_name="AWS", instance_size_name="M30", cpu_core_count=2, memory_capacity_gb=8),
            HardwareProfile(provider_name="GCP", instance_size_name="M30", cpu_core_count=2, memory_capacity_gb=8),
            HardwareProfile(provider_name="AZURE", instance_size_name="M40", cpu_core_count=4, memory_capacity_gb=16),
        ],
        datacenters=[
            DatacenterRecord(provider_name="AWS", region_name="eu-west-3", carbon_intensity_key="FR"),
            DatacenterRecord(
                provider_name="GCP", region_name="central-us", carbon_intensity_key="US-IA", pue_override=1.11
            ),
            DatacenterRecord(
                provider_name="GCP", region_name="CENTRAL_US", carbon_intensity_key="DE", pue_override=1.5
            ),
            DatacenterRecord(
                provider_name="AZURE", region_name="europe-west", carbon_intensity_key="NL", pue_override=1.4
            ),
        ],
        carbon_intensity=[
            CarbonIntensityRecord(key="FR", g_co2_per_kwh=51.28),
            CarbonIntensityRecord(key="US-IA", g_co2_per_kwh=453.38),
            CarbonIntensityRecord(key="DE", g_co2_per_kwh=338.66),
        ],
    )


def make_measurement_set(cpu_values=None, memory_values=None, process_id="host-0:27017", skip=()):
    """
    Builds a MeasurementSet with every CPU sub-metric and the memory metric.

    cpu_values maps a metric name to its sample values; metrics not listed get
    three samples of 0.125 so that the eight averages sum to 1.0.
    """
    cpu_values = cpu_values or {}
    memory_values = memory_values if memory_values is not None else [4_000_000.0, 4_000_000.0]
    measurements = []
    for name in CPU_METRIC_NAMES:
        if name in skip:
            continue
        values = cpu_values.get(name, [0.125, 0.125, 0.125])
        measurements.append(_measurement(name, values))
    if "SYSTEM_MEMORY_AVAILABLE" not in skip:
        measurements.append(_measurement("SYSTEM_MEMORY_AVAILABLE", memory_values, units="KILOBYTES"))
    return MeasurementSet(process_id=process_id, granularity="PT5M", measurements=measurements)


def _measurement(name, values, units="PERCENT"):
    return Measurement(
        name=name,
        units=units,
        data_points=[
            DataPoint(timestamp=f"2026-10-18T00:{i:02d}:00Z", value=value) for i, value in enumerate(values)
        ],
    )


@pytest.fixture
def measurement_set_factory():
    return make_measurement_set
