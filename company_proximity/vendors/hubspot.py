"""Client utilities for the HubSpot CRM v3 API."""

import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence

import requests

logger = logging.getLogger(__name__)
_SESSION = requests.Session()
_BASE_URL = "https://api.hubapi.com/crm/v3"
_OWNERS_PAGE_LIMIT = 500


class HubSpotError(RuntimeError):
    """Raised when the CRM API returns a non-successful response."""


def _get(path: str, access_token: str, params: Dict[str, Any], timeout: float) -> Dict[str, Any]:
    headers = {"Authorization": f"Bearer {access_token}", "Accept": "application/json"}
    response = _SESSION.get(f"{_BASE_URL}{path}", params=params, headers=headers, timeout=timeout)
    if response.status_code >= 400:
        payload = _safe_json(response)
        message = payload.get("message") or f"HTTP {response.status_code}"
        logger.error(
            "HubSpot request failed: path=%s, status=%s, category=%s, message=%s",
            path,
            response.status_code,
            payload.get("category"),
            message,
        )
        raise HubSpotError(message)
    return response.json()


def _safe_json(response: Any) -> Dict[str, Any]:
    try:
        payload = response.json()
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {}


def get_companies_page(
    limit: int,
    properties: Sequence[str],
    access_token: str,
    after: Optional[str] = None,
    timeout: float = 10,
) -> Dict[str, Any]:
    """Fetch a single page of company objects with the requested properties."""
    params: Dict[str, Any] = {"limit": limit, "properties": ",".join(properties), "archived": "false"}
    if after:
        params["after"] = after
    payload = _get("/objects/companies", access_token, params, timeout)
    logger.debug("Fetched %d companies (limit=%d)", len(payload.get("results", [])), limit)
    return payload


def get_owners_by_ids(owner_ids: Iterable[str], access_token: str, timeout: float = 10) -> List[Dict[str, Any]]:
    """Look up owners for a set of ids.

    The owners endpoint has no batch read, so owner pages are walked until every
    requested id has been seen or the listing is exhausted.
    """
    wanted = {str(owner_id) for owner_id in owner_ids if owner_id}
    if not wanted:
        return []

    found: List[Dict[str, Any]] = []
    after: Optional[str] = None
    while wanted:
        params: Dict[str, Any] = {"limit": _OWNERS_PAGE_LIMIT, "archived": "false"}
        if after:
            params["after"] = after
        payload = _get("/owners", access_token, params, timeout)
        for owner in payload.get("results", []):
            owner_id = str(owner.get("id"))
            if owner_id in wanted:
                found.append(owner)
                wanted.discard(owner_id)
        after = ((payload.get("paging") or {}).get("next") or {}).get("after")
        if not after:
            break

    if wanted:
        logger.info("Owners not found in HubSpot: %s", sorted(wanted))
    return found
