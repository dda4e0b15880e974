"""Application configuration helpers."""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


class ConfigError(RuntimeError):
    """Raised when mandatory configuration is missing."""


@dataclass(frozen=True)
class Settings:
    hubspot_access_token: str
    mapbox_access_token: str
    default_batch_size: int = 10
    request_timeout: float = 10.0
    port: int = 8080

    def require_credentials(self) -> None:
        missing = [
            name
            for name, value in (
                ("HUBSPOT_ACCESS_TOKEN", self.hubspot_access_token),
                ("MAPBOX_ACCESS_TOKEN", self.mapbox_access_token),
            )
            if not value
        ]
        if missing:
            raise ConfigError(f"{', '.join(missing)} must be set to look up nearby companies.")


def _first_env(*names: str) -> Optional[str]:
    for name in names:
        value = os.getenv(name)
        if value:
            return value
    return None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings from environment variables with sensible defaults."""
    load_dotenv()

    # Lower-case names match the secret names of the HubSpot serverless app deployment.
    hubspot_access_token = _first_env("HUBSPOT_ACCESS_TOKEN", "hubspot_access_token") or ""
    mapbox_access_token = _first_env("MAPBOX_ACCESS_TOKEN", "mapbox") or ""
    default_batch_size = int(os.getenv("DEFAULT_BATCH_SIZE", "10"))
    request_timeout = float(os.getenv("REQUEST_TIMEOUT", "10"))
    port = int(os.getenv("PORT", "8080"))

    if not hubspot_access_token:
        logger.warning("HUBSPOT_ACCESS_TOKEN is not configured; HubSpot requests will fail.")
    if not mapbox_access_token:
        logger.warning("MAPBOX_ACCESS_TOKEN is not configured; geocoding requests will fail.")

    return Settings(
        hubspot_access_token=hubspot_access_token,
        mapbox_access_token=mapbox_access_token,
        default_batch_size=default_batch_size,
        request_timeout=request_timeout,
        port=port,
    )
