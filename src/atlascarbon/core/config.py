# src/atlascarbon/core/config.py

import logging
import os
import re
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from a .env file located in the project root
dotenv_path = os.path.join(os.path.dirname(__file__), "..", "..", "..", ".env")
load_dotenv(dotenv_path=dotenv_path)

# ISO-8601 durations accepted by the Atlas measurements endpoint (e.g. PT5M, P1D, PT1H)
_ISO_DURATION = re.compile(r"^P(?:\d+[DWMY])*(?:T(?:\d+[HMS])+)?$")


def _env_bool(key: str, default: str = "False") -> bool:
    return os.getenv(key, default).lower() in ("true", "1", "t", "y", "yes")


class Config:
    """
    Handles the application's configuration by loading values from environment variables.
    """

    def __init__(self):
        # --- Atlas API credentials ---
        self.ATLAS_PUBLIC_KEY = self._get_secret("ATLAS_PUBLIC_KEY")
        self.ATLAS_PRIVATE_KEY = self._get_secret("ATLAS_PRIVATE_KEY")

    @staticmethod
    def _get_secret(key: str, default: str = None) -> str:
        """
        Retrieves a secret from a file (Docker secret/volume) or falls back to environment variable.

        Raises:
            PermissionError: If the secret file exists but cannot be read due to permissions.
            IOError: If the secret file exists but cannot be read due to I/O errors.
        """
        secret_file = f"/etc/atlascarbon/secrets/{key}"
        if os.path.exists(secret_file):
            try:
                with open(secret_file, "r") as f:
                    value = f.read().strip()
                    logging.getLogger(__name__).debug(f"Loaded secret '{key}' from {secret_file}")
                    return value
            except PermissionError as e:
                raise PermissionError(
                    f"Secret file '{secret_file}' exists but cannot be read due to permission denied. "
                    f"Please check file permissions or run with appropriate privileges."
                ) from e
            except (IOError, OSError) as e:
                raise IOError(
                    f"Secret file '{secret_file}' exists but cannot be read: {e}. "
                    f"Please check the file integrity and system resources."
                ) from e
        return os.getenv(key, default)

    # --- Atlas API variables ---
    ATLAS_BASE_URL = os.getenv("ATLAS_BASE_URL", "https://cloud.mongodb.com/api/atlas/v1.0")
    ATLAS_ITEMS_PER_PAGE = int(os.getenv("ATLAS_ITEMS_PER_PAGE", "500"))
    ATLAS_VERIFY_CERTS = _env_bool("ATLAS_VERIFY_CERTS", "True")

    # --- Measurement window ---
    # Granularity and period are sent as-is to the measurements endpoint.
    MEASUREMENT_GRANULARITY = os.getenv("MEASUREMENT_GRANULARITY", "PT5M")
    MEASUREMENT_PERIOD = os.getenv("MEASUREMENT_PERIOD", "P1D")
    RUNNING_TIME_HOURS = float(os.getenv("RUNNING_TIME_HOURS", "24"))

    # Upper bound on simultaneous per-process measurement requests
    MAX_CONCURRENT_FETCHES = int(os.getenv("MAX_CONCURRENT_FETCHES", "8"))

    # --- HTTP client ---
    DEFAULT_TIMEOUT_CONNECT = float(os.getenv("DEFAULT_TIMEOUT_CONNECT", "5"))
    DEFAULT_TIMEOUT_READ = float(os.getenv("DEFAULT_TIMEOUT_READ", "30"))
    USER_AGENT = os.getenv("USER_AGENT", "atlascarbon")

    # --- Logging variables ---
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # --- Reference data ---
    # Directory holding hardware_profiles.csv, cloud_providers_datacenters.csv and ci_aggregated.csv.
    # Resolved at access time so tests can point it elsewhere with monkeypatch.
    @property
    def REFERENCE_DATA_DIR(self) -> Path:
        override = os.getenv("REFERENCE_DATA_DIR")
        if override:
            return Path(override)
        return Path(__file__).resolve().parent.parent / "data"

    def validate_instance(self):
        for key in ("MEASUREMENT_GRANULARITY", "MEASUREMENT_PERIOD"):
            value = getattr(self, key)
            if not value or not _ISO_DURATION.match(value.upper()) or value.upper() in ("P", "PT"):
                raise ValueError(f"{key} must be an ISO-8601 duration such as 'PT5M' or 'P1D', got '{value}'.")
        if self.RUNNING_TIME_HOURS <= 0:
            raise ValueError("RUNNING_TIME_HOURS must be a positive number.")
        if self.MAX_CONCURRENT_FETCHES < 1:
            raise ValueError("MAX_CONCURRENT_FETCHES must be at least 1.")
        if self.ATLAS_ITEMS_PER_PAGE < 1:
            raise ValueError("ATLAS_ITEMS_PER_PAGE must be at least 1.")
        if not self.ATLAS_PUBLIC_KEY or not self.ATLAS_PRIVATE_KEY:
            logging.warning("ATLAS_PUBLIC_KEY / ATLAS_PRIVATE_KEY are not set.")


# Instantiate the config to be imported by other modules
config = Config()
config.validate_instance()
