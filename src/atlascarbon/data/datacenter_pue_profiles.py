# src/atlascarbon/data/datacenter_pue_profiles.py

"""
Default Power Usage Effectiveness (PUE) per cloud provider, and the fallback
values used when the reference tables have nothing better.

Source: Lannelongue et al., "Green Algorithms: Quantifying the Carbon
Footprint of Computation", Adv. Sci. 2021 (https://doi.org/10.1002/advs.202100707)
"""

# Provider defaults, keyed by the upper-cased Atlas provider name.
# A datacenter record with its own PUE takes precedence over these.
DATACENTER_PUE_PROFILES = {
    # --- GCP ---
    "GCP": 1.11,

    # --- Azure ---
    "AZURE": 1.125,

    # --- AWS ---
    "AWS": 1.20,
}

# Average datacenter PUE, used for providers not listed above
DEFAULT_PUE = 1.67

# World average grid intensity in gCO2e/kWh, used when the region is unknown
DEFAULT_CARBON_INTENSITY = 475.0


def get_pue_for_provider(provider: str) -> float:
    """Returns the default PUE for a provider, matched case-insensitively."""
    if not provider:
        return DEFAULT_PUE
    return DATACENTER_PUE_PROFILES.get(provider.upper(), DEFAULT_PUE)
