"""Client utilities for the Mapbox forward geocoding API."""

import logging
from typing import Any, Dict
from urllib.parse import quote

import requests

from company_proximity.core.models import Coordinates

logger = logging.getLogger(__name__)
_SESSION = requests.Session()
_BASE_URL = "https://api.mapbox.com/geocoding/v5/mapbox.places"


class MapboxError(RuntimeError):
    """Raised when an address cannot be geocoded."""


def forward_geocode(query: str, access_token: str, limit: int = 1, timeout: float = 10) -> Dict[str, Any]:
    params = {"access_token": access_token, "limit": limit}
    response = _SESSION.get(f"{_BASE_URL}/{quote(query, safe='')}.json", params=params, timeout=timeout)
    if response.status_code >= 400:
        try:
            message = response.json().get("message")
        except ValueError:
            message = None
        logger.error("forward_geocode failed: status=%s, message=%s", response.status_code, message)
        raise MapboxError(message or f"HTTP {response.status_code}")
    return response.json()


def geocode_address(address: str, access_token: str, timeout: float = 10) -> Coordinates:
    """Return the coordinates of the best candidate for a free-text address."""
    if not address or not address.strip():
        raise MapboxError("address is empty")
    payload = forward_geocode(address, access_token, timeout=timeout)
    features = payload.get("features") or []
    if not features:
        raise MapboxError(f"no geocoding match for {address!r}")
    try:
        longitude, latitude = features[0]["geometry"]["coordinates"][:2]
    except (KeyError, TypeError, ValueError) as exc:
        raise MapboxError(f"malformed geocoding feature for {address!r}") from exc
    return Coordinates(float(longitude), float(latitude))
