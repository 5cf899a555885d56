# src/atlascarbon/core/aggregator.py
"""
Reduces the raw measurement series returned by Atlas to the scalar
utilization figures used by the energy model.
"""

from typing import Iterable, List

from ..models.atlas import DataPoint, MeasurementSet
from .exceptions import AggregationDomainError

MEMORY_AVAILABLE_METRIC = "SYSTEM_MEMORY_AVAILABLE"

# CPU time categories summed into the normalized CPU utilization
CPU_METRICS = {
    "user": "SYSTEM_NORMALIZED_CPU_USER",
    "kernel": "SYSTEM_NORMALIZED_CPU_KERNEL",
    "nice": "SYSTEM_NORMALIZED_CPU_NICE",
    "iowait": "SYSTEM_NORMALIZED_CPU_IOWAIT",
    "irq": "SYSTEM_NORMALIZED_CPU_IRQ",
    "softirq": "SYSTEM_NORMALIZED_CPU_SOFTIRQ",
    "guest": "SYSTEM_NORMALIZED_CPU_GUEST",
    "steal": "SYSTEM_NORMALIZED_CPU_STEAL",
}

BYTES_PER_GB = 1_000_000


def get_measurement(measurements: MeasurementSet, metric: str) -> List[DataPoint]:
    """Return the data points of the metric named exactly `metric`.

    Raises AggregationDomainError when the metric is absent from the set.
    """
    for measurement in measurements.measurements:
        if measurement.name == metric:
            return measurement.data_points
    raise AggregationDomainError(f"Metric '{metric}' not found in measurements for process {measurements.process_id}")


def average_of(samples: Iterable[DataPoint]) -> float:
    """Arithmetic mean of the sample values.

    Samples without a value (empty buckets) count as 0 but still count toward
    the number of samples. Raises AggregationDomainError on an empty series.
    """
    values = [s.value or 0.0 for s in samples]
    if not values:
        raise AggregationDomainError("Cannot average an empty sample series")
    return sum(values) / len(values)


def _metric_average(measurements: MeasurementSet, metric: str) -> float:
    data_points = get_measurement(measurements, metric)
    try:
        return average_of(data_points)
    except AggregationDomainError as e:
        raise AggregationDomainError(f"No samples for metric '{metric}' of process {measurements.process_id}") from e


def normalized_cpu_utilization(measurements: MeasurementSet) -> float:
    """Sum of the averages of every CPU time category. May exceed 1.0."""
    total = 0.0
    for metric in CPU_METRICS.values():
        total += _metric_average(measurements, metric)
    return total


def memory_available_average(measurements: MeasurementSet) -> float:
    """Average available memory, in the unit reported by Atlas."""
    return _metric_average(measurements, MEMORY_AVAILABLE_METRIC)


def memory_to_gb(value: float) -> float:
    # Decimal mega, kept for compatibility with published figures
    return value / BYTES_PER_GB
