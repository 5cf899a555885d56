# src/atlascarbon/reporters/base_reporter.py
"""
Defines the abstract base class for all reporters.
"""

from abc import ABC, abstractmethod

from ..models.metrics import FleetEstimate


class BaseReporter(ABC):
    """
    Abstract Base Class for all reporters.
    """

    @abstractmethod
    def report(self, estimate: FleetEstimate):
        """
        Takes the fleet estimate and presents it in a specific format
        (e.g., console, JSON).
        """
        pass
