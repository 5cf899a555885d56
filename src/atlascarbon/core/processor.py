# src/atlascarbon/core/processor.py
import asyncio
import logging
from typing import Iterable, List, Optional, Tuple

from ..collectors.base_collector import BaseCollector
from ..data.reference_store import ReferenceDataStore
from ..energy.estimator import EnergyEstimator, compute_equivalences, fleet_total
from ..models.atlas import Cluster, Project
from ..models.metrics import FailedProcess, FleetEstimate, ProcessDescriptor, ProcessEstimate, SkippedCluster
from .aggregator import memory_available_average, memory_to_gb, normalized_cpu_utilization
from .calculator import CarbonCalculator
from .config import config
from .exceptions import AggregationDomainError, ReferenceDataError

logger = logging.getLogger(__name__)

# Shared tiers expose no process level monitoring
UNMONITORED_INSTANCE_SIZES = frozenset({"M0", "M2", "M5"})


class FleetProcessor:
    """Orchestrates telemetry collection and the emission estimate of a project."""

    def __init__(
        self,
        collector: BaseCollector,
        reference_data: ReferenceDataStore,
        calculator: CarbonCalculator,
        estimator: EnergyEstimator,
        max_concurrency: Optional[int] = None,
    ):
        self.collector = collector
        self.reference_data = reference_data
        self.calculator = calculator
        self.estimator = estimator
        self.max_concurrency = max_concurrency or config.MAX_CONCURRENT_FETCHES

    def build_descriptors(self, clusters: Iterable[Cluster]) -> Tuple[List[ProcessDescriptor], List[SkippedCluster]]:
        """Turns clusters into one descriptor per member process.

        Clusters on shared tiers are left out before any process is built.
        """
        descriptors: List[ProcessDescriptor] = []
        skipped: List[SkippedCluster] = []

        for cluster in clusters:
            instance = cluster.instance_size_name
            if instance.upper() in UNMONITORED_INSTANCE_SIZES:
                logger.info(
                    "Cluster %s is a %s instance. Full monitoring is not available on clusters less than M10.",
                    cluster.name,
                    instance,
                )
                skipped.append(
                    SkippedCluster(
                        cluster_name=cluster.name,
                        instance_size_name=instance,
                        reason="Full monitoring is not available on clusters less than M10",
                    )
                )
                continue

            process_ids = cluster.process_ids
            if not process_ids:
                if cluster.uses_srv_record:
                    reason = "SRV connection string does not list the cluster processes"
                else:
                    reason = "No processes found"
                logger.warning("Cluster %s skipped: %s.", cluster.name, reason)
                skipped.append(SkippedCluster(cluster_name=cluster.name, instance_size_name=instance, reason=reason))
                continue

            provider = cluster.provider_name.upper()
            factors = self.calculator.resolve(provider, cluster.region_name)
            logger.info(
                "Cluster %s is a %s instance on %s (%s). PUE: %s, gCO2/kWh: %s",
                cluster.name,
                instance,
                provider,
                cluster.region_name.upper(),
                factors.pue,
                factors.carbon_intensity,
            )

            for process_id in process_ids:
                descriptors.append(
                    ProcessDescriptor(
                        process_id=process_id,
                        cluster_name=cluster.name,
                        provider_name=provider,
                        region_name=cluster.region_name,
                        instance_size_name=instance,
                        disk_size_gb=cluster.disk_size_gb,
                        effective_pue=factors.pue,
                        effective_carbon_intensity=factors.carbon_intensity,
                    )
                )

        return descriptors, skipped

    async def estimate_process(self, project_id: str, descriptor: ProcessDescriptor) -> ProcessEstimate:
        """Fetches the measurements of one process and computes its emissions.

        Raises:
            ReferenceDataMissing: No hardware profile for the instance size.
            TelemetryFetchFailure: The measurements could not be fetched.
            AggregationDomainError: A required metric is missing or empty.
        """
        hardware = self.reference_data.get_hardware_profile(descriptor.provider_name, descriptor.instance_size_name)

        logger.debug("Calculating measurements for %s", descriptor.process_id)
        measurements = await self.collector.list_measurements(project_id, descriptor.process_id)

        estimate = ProcessEstimate(
            **descriptor.model_dump(),
            memory_used_gb=memory_to_gb(memory_available_average(measurements)),
            normalized_cpu_utilization=normalized_cpu_utilization(measurements),
            cpu_core_count=hardware.cpu_core_count,
            memory_capacity_gb=hardware.memory_capacity_gb,
        )
        return self.estimator.estimate(estimate)

    async def estimate_processes(
        self, project_id: str, descriptors: List[ProcessDescriptor]
    ) -> Tuple[List[ProcessEstimate], List[FailedProcess]]:
        """Estimates every process concurrently.

        Reference data and aggregation errors only fail the affected process.
        Any other error (notably TelemetryFetchFailure) cancels the remaining
        requests and propagates.
        """
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def _estimate(descriptor: ProcessDescriptor):
            async with semaphore:
                try:
                    return await self.estimate_process(project_id, descriptor)
                except (ReferenceDataError, AggregationDomainError) as e:
                    logger.error(
                        "Could not estimate process %s (%s): %s", descriptor.process_id, descriptor.cluster_name, e
                    )
                    return FailedProcess(
                        process_id=descriptor.process_id,
                        cluster_name=descriptor.cluster_name,
                        reason=str(e),
                    )

        tasks = [asyncio.ensure_future(_estimate(d)) for d in descriptors]
        try:
            results = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        estimates = [r for r in results if isinstance(r, ProcessEstimate)]
        failures = [r for r in results if isinstance(r, FailedProcess)]
        return estimates, failures

    async def run(self, project: Project) -> FleetEstimate:
        """Executes the estimation pipeline for a project.

        Raises:
            TelemetryFetchFailure: Any request to the monitoring API failed.
            AggregationDomainError: No process could be estimated.
        """
        logger.info("Starting carbon estimate for project %s...", project.name)

        clusters = await self.collector.list_clusters(project.id)
        descriptors, skipped = self.build_descriptors(clusters)
        logger.info(
            "Found %d processes running on %d clusters",
            len(descriptors),
            len({d.cluster_name for d in descriptors}),
        )

        estimates, failures = await self.estimate_processes(project.id, descriptors)
        logger.info("All data collected from %d processes. Calculating environmental impact", len(estimates))

        total = fleet_total(e.co2e_grams for e in estimates)

        return FleetEstimate(
            project_id=project.id,
            project_name=project.name,
            running_time_hours=self.estimator.running_time_hours,
            total_co2e_grams=total,
            equivalences=compute_equivalences(total),
            processes=estimates,
            skipped_clusters=skipped,
            failed_processes=failures,
        )
