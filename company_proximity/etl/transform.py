"""Utilities for transforming HubSpot payloads into company records and back."""

import logging
from dataclasses import fields
from typing import Any, Dict, Mapping, Optional

from company_proximity.core.models import CompanyRecord, Coordinates

logger = logging.getLogger(__name__)

PROPERTIES_TO_FETCH = (
    "hs_object_id",
    "city",
    "state",
    "address",
    "domain",
    "phone",
    "name",
    "annualrevenue",
    "branch_location",
    "hubspot_owner_id",
)

_ENVELOPE_FIELDS = {"createdAt": "created_at", "updatedAt": "updated_at", "archived": "archived"}
_RECORD_FIELDS = {f.name for f in fields(CompanyRecord)}
_DERIVED_FIELDS = {"coordinates", "distance", "owner_name", "extra"}
# Keys written by to_response_item; stale copies on input are never echoed back.
_OUTPUT_ONLY_KEYS = {"coordinates", "distance", "ownerName", "owner_name", "extra"}


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def to_company_record(raw: Mapping[str, Any]) -> CompanyRecord:
    """Normalize a HubSpot company object, or a flat property map, into a CompanyRecord.

    Values under ``properties`` are applied after the envelope, so a property wins
    when both carry the same key.
    """
    merged: Dict[str, Any] = {key: value for key, value in raw.items() if key != "properties"}
    merged.update(raw.get("properties") or {})

    values: Dict[str, Any] = {}
    extra: Dict[str, Any] = {}
    for key, value in merged.items():
        name = _ENVELOPE_FIELDS.get(key, key)
        if name in _RECORD_FIELDS and name not in _DERIVED_FIELDS:
            values[name] = value
        elif key not in _OUTPUT_ONLY_KEYS:
            extra[key] = value

    for name in ("id", "hs_object_id", "hubspot_owner_id"):
        values[name] = _as_text(values.get(name))
    # Records without hs_object_id (e.g. hand-built references) fall back to the object id.
    if values.get("hs_object_id") is None:
        values["hs_object_id"] = values.get("id")

    return CompanyRecord(extra=extra, **values)


def build_full_address(company: CompanyRecord) -> str:
    """Single-line address in ``city state address`` order, missing parts left blank."""
    return " ".join("" if part is None else str(part) for part in (company.city, company.state, company.address))


def _coordinates_payload(coordinates: Coordinates) -> list:
    return [coordinates.longitude, coordinates.latitude]


def to_response_item(company: CompanyRecord) -> Dict[str, Any]:
    item: Dict[str, Any] = dict(company.extra)
    if company.id is not None:
        item["id"] = company.id
    for key, name in _ENVELOPE_FIELDS.items():
        value = getattr(company, name)
        if value is not None:
            item[key] = value
    for name in PROPERTIES_TO_FETCH:
        item[name] = getattr(company, name)
    if company.coordinates is not None:
        item["coordinates"] = _coordinates_payload(company.coordinates)
    if company.distance is not None:
        item["distance"] = company.distance
    if company.owner_name is not None:
        item["ownerName"] = company.owner_name
    return item
