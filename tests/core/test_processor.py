# tests/core/test_processor.py

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from atlascarbon.collectors.base_collector import BaseCollector
from atlascarbon.core.calculator import CarbonCalculator
from atlascarbon.core.exceptions import AggregationDomainError, TelemetryFetchFailure
from atlascarbon.core.processor import FleetProcessor
from atlascarbon.energy.estimator import EnergyEstimator
from atlascarbon.models.atlas import Cluster, Project

PROJECT = Project(id="5f1a", name="production")


def _cluster(name, size="M30", provider="AWS", region="US_EAST_1", hosts=("host-0:27017",), disk=10):
    return Cluster.model_validate(
        {
            "name": name,
            "providerSettings": {"providerName": provider, "regionName": region, "instanceSizeName": size},
            "diskSizeGB": disk,
            "mongoURI": "mongodb://" + ",".join(hosts),
        }
    )


class FakeCollector(BaseCollector):
    def __init__(self, clusters, measurements, failing=()):
        self.clusters = clusters
        self.measurements = measurements
        self.failing = set(failing)
        self.requested = []

    async def list_projects(self):
        return [PROJECT]

    async def list_clusters(self, project_id):
        return self.clusters

    async def list_measurements(self, project_id, process_id):
        self.requested.append(process_id)
        await asyncio.sleep(0)
        if process_id in self.failing:
            raise TelemetryFetchFailure(f"Atlas API error 500 for {process_id}", status_code=500)
        return self.measurements[process_id]


@pytest.fixture
def make_processor(reference_data):
    def _make(collector):
        return FleetProcessor(
            collector=collector,
            reference_data=reference_data,
            calculator=CarbonCalculator(reference_data),
            estimator=EnergyEstimator(SimpleNamespace(RUNNING_TIME_HOURS=24)),
            max_concurrency=4,
        )

    return _make


def test_shared_tier_clusters_contribute_no_process(make_processor):
    processor = make_processor(FakeCollector([], {}))
    clusters = [
        _cluster("free", size="M0", provider="TENANT"),
        _cluster("shared2", size="M2", provider="TENANT"),
        _cluster("shared5", size="M5", provider="TENANT"),
        _cluster("dedicated", hosts=("a:27017", "b:27017", "c:27017")),
    ]

    descriptors, skipped = processor.build_descriptors(clusters)

    assert {s.cluster_name for s in skipped} == {"free", "shared2", "shared5"}
    assert [d.process_id for d in descriptors] == ["a:27017", "b:27017", "c:27017"]
    assert all(d.cluster_name == "dedicated" for d in descriptors)


def test_descriptors_carry_resolved_factors(make_processor):
    processor = make_processor(FakeCollector([], {}))

    descriptors, _ = processor.build_descriptors([_cluster("gcp", provider="GCP", region="CENTRAL_US")])

    assert descriptors[0].provider_name == "GCP"
    assert descriptors[0].effective_pue == pytest.approx(1.11)
    assert descriptors[0].effective_carbon_intensity == pytest.approx(453.38)


@pytest.mark.asyncio
async def test_end_to_end_reference_scenario(make_processor, measurement_set_factory):
    collector = FakeCollector(
        [_cluster("Cluster0", size="M10", region="us-east-1")],
        {"host-0:27017": measurement_set_factory()},
    )

    estimate = await make_processor(collector).run(PROJECT)

    assert len(estimate.processes) == 1
    process = estimate.processes[0]
    assert process.effective_pue == pytest.approx(1.2)
    assert process.effective_carbon_intensity == 475
    assert process.normalized_cpu_utilization == pytest.approx(1.0)
    assert process.memory_used_gb == pytest.approx(4.0)
    expected = 24 * (2 * 12.4 * 1.0 + 8 * 0.3725 + 10 * 0.001) * 1.2 * 0.001 * 475
    assert estimate.total_co2e_grams == pytest.approx(expected)
    assert estimate.total_co2e_grams == pytest.approx(380.17, abs=0.01)
    assert estimate.equivalences.monthly_kg_co2e == pytest.approx(estimate.total_co2e_grams / 1000 * 30)


@pytest.mark.asyncio
async def test_fleet_total_sums_all_processes(make_processor, measurement_set_factory):
    hosts = ("a:27017", "b:27017")
    collector = FakeCollector(
        [_cluster("Cluster0", hosts=hosts), _cluster("Cluster1", size="M40", provider="AZURE", hosts=("c:27017",))],
        {h: measurement_set_factory(process_id=h) for h in ("a:27017", "b:27017", "c:27017")},
    )

    estimate = await make_processor(collector).run(PROJECT)

    assert len(estimate.processes) == 3
    assert estimate.total_co2e_grams == pytest.approx(sum(p.co2e_grams for p in estimate.processes))
    assert sorted(collector.requested) == ["a:27017", "b:27017", "c:27017"]


@pytest.mark.asyncio
async def test_missing_hardware_profile_fails_only_that_process(make_processor, measurement_set_factory):
    collector = FakeCollector(
        [_cluster("known"), _cluster("unknown", size="M700", hosts=("x:27017",))],
        {"host-0:27017": measurement_set_factory()},
    )

    estimate = await make_processor(collector).run(PROJECT)

    assert [p.cluster_name for p in estimate.processes] == ["known"]
    assert len(estimate.failed_processes) == 1
    assert estimate.failed_processes[0].process_id == "x:27017"
    assert "M700" in estimate.failed_processes[0].reason
    # No measurement request is made for a process that cannot be estimated
    assert "x:27017" not in collector.requested


@pytest.mark.asyncio
async def test_missing_metric_fails_only_that_process(make_processor, measurement_set_factory):
    collector = FakeCollector(
        [_cluster("Cluster0", hosts=("a:27017", "b:27017"))],
        {
            "a:27017": measurement_set_factory(process_id="a:27017"),
            "b:27017": measurement_set_factory(process_id="b:27017", skip=("SYSTEM_MEMORY_AVAILABLE",)),
        },
    )

    estimate = await make_processor(collector).run(PROJECT)

    assert [p.process_id for p in estimate.processes] == ["a:27017"]
    assert [f.process_id for f in estimate.failed_processes] == ["b:27017"]


@pytest.mark.asyncio
async def test_fetch_failure_aborts_the_batch(make_processor, measurement_set_factory):
    collector = FakeCollector(
        [_cluster("Cluster0", hosts=("a:27017", "b:27017", "c:27017"))],
        {h: measurement_set_factory(process_id=h) for h in ("a:27017", "c:27017")},
        failing=("b:27017",),
    )

    with pytest.raises(TelemetryFetchFailure):
        await make_processor(collector).run(PROJECT)


@pytest.mark.asyncio
async def test_empty_fleet_raises(make_processor):
    collector = FakeCollector([_cluster("free", size="M0", provider="TENANT")], {})

    with pytest.raises(AggregationDomainError):
        await make_processor(collector).run(PROJECT)


@pytest.mark.asyncio
async def test_cluster_list_failure_propagates(make_processor):
    collector = FakeCollector([], {})
    collector.list_clusters = AsyncMock(side_effect=TelemetryFetchFailure("unauthorized", status_code=401))

    with pytest.raises(TelemetryFetchFailure):
        await make_processor(collector).run(PROJECT)


class InFlightCollector(FakeCollector):
    """Records how many measurement requests are pending at once."""

    def __init__(self, clusters, measurements, failing=()):
        super().__init__(clusters, measurements, failing)
        self.in_flight = 0
        self.peak = 0
        self.cancelled = []
        self.hang = False

    async def list_measurements(self, project_id, process_id):
        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        try:
            if process_id in self.failing:
                await asyncio.sleep(0.01)
                raise TelemetryFetchFailure(f"Atlas API error 500 for {process_id}", status_code=500)
            if self.hang:
                await asyncio.Event().wait()
            await asyncio.sleep(0.01)
            return self.measurements[process_id]
        except asyncio.CancelledError:
            self.cancelled.append(process_id)
            raise
        finally:
            self.in_flight -= 1


@pytest.mark.asyncio
async def test_concurrent_fetches_are_capped(reference_data, measurement_set_factory):
    hosts = tuple(f"h{i}:27017" for i in range(6))
    collector = InFlightCollector(
        [_cluster("Cluster0", hosts=hosts)],
        {h: measurement_set_factory(process_id=h) for h in hosts},
    )
    processor = FleetProcessor(
        collector=collector,
        reference_data=reference_data,
        calculator=CarbonCalculator(reference_data),
        estimator=EnergyEstimator(SimpleNamespace(RUNNING_TIME_HOURS=24)),
        max_concurrency=2,
    )

    estimate = await processor.run(PROJECT)

    assert len(estimate.processes) == 6
    assert collector.peak == 2


@pytest.mark.asyncio
async def test_fetch_failure_cancels_pending_fetches(make_processor, measurement_set_factory):
    collector = InFlightCollector(
        [_cluster("Cluster0", hosts=("a:27017", "b:27017", "c:27017"))],
        {h: measurement_set_factory(process_id=h) for h in ("b:27017", "c:27017")},
        failing=("a:27017",),
    )
    collector.hang = True

    with pytest.raises(TelemetryFetchFailure):
        await make_processor(collector).run(PROJECT)

    assert sorted(collector.cancelled) == ["b:27017", "c:27017"]
    assert collector.in_flight == 0


def test_srv_cluster_is_skipped_with_reason(make_processor):
    srv = Cluster.model_validate(
        {
            "name": "Cluster1",
            "providerSettings": {"providerName": "AWS", "regionName": "US_EAST_1", "instanceSizeName": "M30"},
            "diskSizeGB": 10,
            "mongoURI": "mongodb+srv://cluster1.abcd.mongodb.net",
        }
    )
    processor = make_processor(FakeCollector([], {}))

    descriptors, skipped = processor.build_descriptors([srv, _cluster("Cluster0")])

    assert [d.cluster_name for d in descriptors] == ["Cluster0"]
    assert [s.cluster_name for s in skipped] == ["Cluster1"]
    assert "SRV" in skipped[0].reason
