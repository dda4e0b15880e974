"""Core data models shared by the nearby-companies pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, NamedTuple, Optional

from company_proximity.core.config import Settings


class Coordinates(NamedTuple):
    """Geographic point in GeoJSON order."""

    longitude: float
    latitude: float


@dataclass(frozen=True, slots=True)
class CompanyRecord:
    """Normalized HubSpot company with the fields the lookup reads and returns."""

    id: Optional[str] = None
    hs_object_id: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    address: Optional[str] = None
    domain: Optional[str] = None
    phone: Optional[str] = None
    name: Optional[str] = None
    annualrevenue: Optional[str] = None
    branch_location: Optional[str] = None
    hubspot_owner_id: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    archived: Optional[bool] = None
    coordinates: Optional[Coordinates] = None
    distance: Optional[float] = None
    owner_name: Optional[str] = None
    # Properties outside the known field set, kept so the response echoes them back.
    extra: Dict[str, Any] = field(default_factory=dict, repr=False)

    def with_coordinates(self, coordinates: Coordinates) -> CompanyRecord:
        return replace(self, coordinates=coordinates)

    def with_distance(self, distance: float) -> CompanyRecord:
        return replace(self, distance=distance)

    def with_owner_name(self, owner_name: str) -> CompanyRecord:
        return replace(self, owner_name=owner_name)


@dataclass(frozen=True, slots=True)
class OwnerRecord:
    id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    @property
    def display_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}"


@dataclass(frozen=True, slots=True)
class EnrichmentResult:
    """Outcome of one per-record enrichment step.

    A failed result still carries the untouched record so the caller decides
    explicitly whether to keep or drop it.
    """

    company: CompanyRecord
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, company: CompanyRecord) -> EnrichmentResult:
        return cls(company=company)

    @classmethod
    def failure(cls, company: CompanyRecord, error: str) -> EnrichmentResult:
        return cls(company=company, error=error)


@dataclass(frozen=True, slots=True)
class InvocationContext:
    """Everything one lookup needs: who is asking, how many to fetch, and credentials."""

    reference: CompanyRecord
    batch_size: int
    settings: Settings
