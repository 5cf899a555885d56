# src/atlascarbon/collectors/base_collector.py
"""
This module defines the abstract base class for telemetry collectors.
The estimation pipeline only relies on the three operations below, so any
monitoring backend exposing them can feed it.
"""

from abc import ABC, abstractmethod
from typing import List

from ..models.atlas import Cluster, MeasurementSet, Project


class BaseCollector(ABC):
    """
    Abstract Base Class for telemetry collectors.
    """

    @abstractmethod
    async def list_projects(self) -> List[Project]:
        """Projects visible with the configured credentials."""
        pass

    @abstractmethod
    async def list_clusters(self, project_id: str) -> List[Cluster]:
        """Clusters of a project."""
        pass

    @abstractmethod
    async def list_measurements(self, project_id: str, process_id: str) -> MeasurementSet:
        """Resource usage series of one process over the configured window."""
        pass

    async def close(self):
        """
        Clean up resources (e.g., close HTTP sessions or API clients).
        """
        pass

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()
