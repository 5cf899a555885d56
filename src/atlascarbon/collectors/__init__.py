from .atlas_collector import AtlasCollector
from .base_collector import BaseCollector

__all__ = ["AtlasCollector", "BaseCollector"]
