"""Nearby-companies lookup: geocode a reference company and measure one CRM batch against it."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, TypeVar

from company_proximity.core.config import Settings, get_settings
from company_proximity.core.geo import haversine_miles
from company_proximity.core.models import (
    CompanyRecord,
    Coordinates,
    EnrichmentResult,
    InvocationContext,
    OwnerRecord,
)
from company_proximity.etl.transform import (
    PROPERTIES_TO_FETCH,
    build_full_address,
    to_company_record,
    to_response_item,
)
from company_proximity.vendors import hubspot, mapbox

logger = logging.getLogger(__name__)

REFERENCE_LOCATION_MESSAGE = "Unable to calculate geo coordinates. Please specify an address for the record."
UNKNOWN_OWNER = "Unknown"

T = TypeVar("T")
R = TypeVar("R")


class ReferenceLocationError(RuntimeError):
    """Raised when the reference company's own address cannot be geocoded."""

    def __init__(self, message: str = REFERENCE_LOCATION_MESSAGE) -> None:
        super().__init__(message)


class InvalidRequestError(ValueError):
    """Raised when the invocation context is missing or malformed."""


def _fan_out(fn: Callable[[T], R], items: Iterable[T]) -> List[R]:
    """Run ``fn`` over every item at once and return results in input order."""
    items = list(items)
    if not items:
        return []
    with ThreadPoolExecutor(max_workers=len(items)) as executor:
        return list(executor.map(fn, items))


# ---------- Reference resolver ----------


def extend_with_coordinates(company: CompanyRecord, settings: Settings) -> EnrichmentResult:
    address = None
    try:
        address = build_full_address(company)
        coordinates = mapbox.geocode_address(
            address, settings.mapbox_access_token, timeout=settings.request_timeout
        )
    except Exception as exc:  # noqa: BLE001
        logger.warning("Failed to geocode company %s (%r): %s", company.hs_object_id, address, exc)
        return EnrichmentResult.failure(company, str(exc))
    return EnrichmentResult.success(company.with_coordinates(coordinates))


def resolve_reference(reference: CompanyRecord, settings: Settings) -> CompanyRecord:
    result = extend_with_coordinates(reference, settings)
    if not result.ok:
        raise ReferenceLocationError()
    logger.info("Reference company %s located at %s", reference.hs_object_id, result.company.coordinates)
    return result.company


# ---------- Batch fetcher ----------


def fetch_other_companies(reference: CompanyRecord, batch_size: int, settings: Settings) -> List[CompanyRecord]:
    """Fetch the first page of companies, leaving out the reference record."""
    payload = hubspot.get_companies_page(
        limit=batch_size,
        properties=PROPERTIES_TO_FETCH,
        access_token=settings.hubspot_access_token,
        timeout=settings.request_timeout,
    )
    companies = [to_company_record(raw) for raw in payload.get("results", [])]
    if reference.hs_object_id is None:
        return companies
    others = [company for company in companies if company.hs_object_id != reference.hs_object_id]
    logger.info("Fetched %d companies, %d after excluding the reference", len(companies), len(others))
    return others


# ---------- Enrichment ----------


def geocode_companies(companies: Iterable[CompanyRecord], settings: Settings) -> List[EnrichmentResult]:
    return _fan_out(lambda company: extend_with_coordinates(company, settings), companies)


def extend_with_distance(origin: Coordinates, companies: Iterable[CompanyRecord]) -> List[CompanyRecord]:
    def _measure(company: CompanyRecord) -> CompanyRecord:
        if company.coordinates is None:
            raise ValueError(f"company {company.hs_object_id} has no coordinates")
        return company.with_distance(haversine_miles(origin, company.coordinates))

    return _fan_out(_measure, companies)


def get_owner_names(owner_ids: Iterable[str], settings: Settings) -> Dict[str, str]:
    """Map owner id to ``"first last"`` using a single owners lookup."""
    ids = sorted({owner_id for owner_id in owner_ids if owner_id})
    if not ids:
        return {}
    owners = hubspot.get_owners_by_ids(
        ids, access_token=settings.hubspot_access_token, timeout=settings.request_timeout
    )
    records = [
        OwnerRecord(id=str(owner.get("id")), first_name=owner.get("firstName"), last_name=owner.get("lastName"))
        for owner in owners
    ]
    return {record.id: record.display_name for record in records}


def attach_owner_names(companies: Iterable[CompanyRecord], owner_names: Mapping[str, str]) -> List[CompanyRecord]:
    return [
        company.with_owner_name(owner_names.get(company.hubspot_owner_id or "") or UNKNOWN_OWNER)
        for company in companies
    ]


# ---------- Assembler ----------


def assemble_result(companies: Iterable[CompanyRecord]) -> Dict[str, List[Dict[str, Any]]]:
    return {"companies": [to_response_item(company) for company in companies]}


# ---------- Entry points ----------


def find_nearby_companies(context: InvocationContext) -> Dict[str, List[Dict[str, Any]]]:
    settings = context.settings
    reference = resolve_reference(context.reference, settings)

    others = fetch_other_companies(reference, context.batch_size, settings)
    results = geocode_companies(others, settings)

    located = [result.company for result in results if result.ok]
    unlocated = [result for result in results if not result.ok]
    if unlocated:
        logger.info(
            "Dropping %d companies without coordinates: %s",
            len(unlocated),
            [result.company.hs_object_id for result in unlocated],
        )

    measured = extend_with_distance(reference.coordinates, located)
    owner_names = get_owner_names((company.hubspot_owner_id for company in measured), settings)
    annotated = attach_owner_names(measured, owner_names)

    logger.info("Returning %d nearby companies", len(annotated))
    return assemble_result(annotated)


def _parse_batch_size(raw: Any, default: int) -> int:
    if raw is None:
        return default
    if isinstance(raw, bool):
        raise InvalidRequestError("batchSize must be an integer")
    try:
        batch_size = int(raw)
    except (TypeError, ValueError) as exc:
        raise InvalidRequestError("batchSize must be an integer") from exc
    if batch_size <= 0:
        raise InvalidRequestError("batchSize must be positive")
    return batch_size


def build_context(raw: Mapping[str, Any], settings: Settings) -> InvocationContext:
    """Translate the ``{propertiesToSend, event: {payload: {batchSize}}}`` shape into an InvocationContext."""
    if not isinstance(raw, Mapping):
        raise InvalidRequestError("invocation context must be an object")
    properties = raw.get("propertiesToSend")
    if not isinstance(properties, Mapping):
        raise InvalidRequestError("propertiesToSend is required")
    event = raw.get("event") or {}
    if not isinstance(event, Mapping):
        raise InvalidRequestError("event must be an object")
    payload = event.get("payload") or {}
    if not isinstance(payload, Mapping):
        raise InvalidRequestError("event.payload must be an object")
    return InvocationContext(
        reference=to_company_record(properties),
        batch_size=_parse_batch_size(payload.get("batchSize"), settings.default_batch_size),
        settings=settings,
    )


def main(context: Optional[Mapping[str, Any]] = None, settings: Optional[Settings] = None) -> Dict[str, Any]:
    """Run one nearby-companies lookup for a serverless-style invocation context."""
    settings = settings or get_settings()
    settings.require_credentials()
    return find_nearby_companies(build_context(context or {}, settings))
