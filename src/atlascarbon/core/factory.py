# src/atlascarbon/core/factory.py
"""
Factory functions to instantiate core components like the FleetProcessor
and the ReferenceDataStore.
"""

import logging
from functools import lru_cache

from ..collectors.atlas_collector import AtlasCollector
from ..collectors.base_collector import BaseCollector
from ..data.reference_store import ReferenceDataStore
from ..energy.estimator import EnergyEstimator
from .calculator import CarbonCalculator
from .config import config
from .processor import FleetProcessor

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_reference_data() -> ReferenceDataStore:
    """
    Loads the packaged (or REFERENCE_DATA_DIR) reference tables once.
    Uses lru_cache to act as a singleton.
    """
    return ReferenceDataStore.load(config.REFERENCE_DATA_DIR)


def get_collector() -> AtlasCollector:
    return AtlasCollector()


def get_processor(collector: BaseCollector) -> FleetProcessor:
    """
    Wires a FleetProcessor around the given collector.
    """
    reference_data = get_reference_data()
    return FleetProcessor(
        collector=collector,
        reference_data=reference_data,
        calculator=CarbonCalculator(reference_data),
        estimator=EnergyEstimator(config),
    )
