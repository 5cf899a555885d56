# src/atlascarbon/core/calculator.py

import logging
from typing import Dict, Tuple

from ..data.datacenter_pue_profiles import DEFAULT_CARBON_INTENSITY, get_pue_for_provider
from ..data.reference_store import ReferenceDataStore, normalize_region
from ..models.metrics import EnvironmentalFactors

logger = logging.getLogger(__name__)


class CarbonCalculator:
    """Resolves the PUE and grid carbon intensity that apply to a provider region."""

    def __init__(self, reference_data: ReferenceDataStore):
        """Initialize with the reference data store.

        Resolved factors are cached per (provider, normalized region) for the
        lifetime of the calculator; the reference data never changes.
        """
        self.reference_data = reference_data
        self._factors_cache: Dict[Tuple[str, str], EnvironmentalFactors] = {}

    def clear_cache(self):
        """Clears the internal factors cache."""
        self._factors_cache.clear()

    def resolve(self, provider: str, region: str) -> EnvironmentalFactors:
        """Return the PUE and carbon intensity for a provider region.

        1. Start from the provider default PUE (1.67 for unknown providers).
        2. Find the datacenter record for (provider, normalized region). Without
           one, the default PUE and the fallback intensity are used.
        3. With one, its PUE (if set) replaces the default and the intensity is
           read from the carbon intensity table, falling back when the location
           is unknown.
        """
        provider = (provider or "").upper()
        cache_key = (provider, normalize_region(region))
        cached = self._factors_cache.get(cache_key)
        if cached is not None:
            return cached

        pue = get_pue_for_provider(provider)
        logger.debug("Using a PUE factor %s for provider %s", pue, provider)

        record = self.reference_data.find_datacenter(provider, region)
        if record is None:
            logger.debug(
                "No datacenter record for %s %s; using default carbon intensity %s gCO2e/kWh",
                provider,
                region,
                DEFAULT_CARBON_INTENSITY,
            )
            factors = EnvironmentalFactors(pue=pue, carbon_intensity=DEFAULT_CARBON_INTENSITY)
            self._factors_cache[cache_key] = factors
            return factors

        if record.pue_override is not None:
            pue = record.pue_override

        intensity = self.reference_data.get_carbon_intensity(record.carbon_intensity_key)
        if intensity is None:
            logger.warning(
                "Carbon intensity missing for location '%s' (%s %s); using default %s gCO2e/kWh",
                record.carbon_intensity_key,
                provider,
                region,
                DEFAULT_CARBON_INTENSITY,
            )
            factors = EnvironmentalFactors(
                pue=pue,
                carbon_intensity=DEFAULT_CARBON_INTENSITY,
                datacenter_matched=True,
            )
        else:
            factors = EnvironmentalFactors(
                pue=pue,
                carbon_intensity=intensity.g_co2_per_kwh,
                datacenter_matched=True,
                intensity_matched=True,
            )

        logger.debug("Using carbon intensity %s gCO2e/kWh for %s %s", factors.carbon_intensity, provider, region)
        self._factors_cache[cache_key] = factors
        return factors
