"""Capture Schemas: caller payloads for captured licenses, converted to core entries.

Invariants:
    - Restrictions accepted either structured ({"driver": [...], "vehicle": [...]})
      or as the legacy flat numeric list, always converted to the structured form
    - Unknown legacy codes raise LegacyRestrictionError; they are never dropped

Design Decisions:
    - field_validator(mode="before") for the legacy conversion: models stay declarative
"""

from collections.abc import Iterable
from datetime import date

from pydantic import BaseModel, Field, field_validator

from license_engine.core.domain_types import EntryId, LicenseCategory
from license_engine.core.errors import ErrorContext, LegacyRestrictionError
from license_engine.core.licenses import CapturedLicenseEntry, LicenseRestrictions


LEGACY_DRIVER_CODES: dict[str, str] = {
    "01": "Corrective Lenses Required",
    "02": "Prosthetics",
}
LEGACY_VEHICLE_CODES: dict[str, str] = {
    "03": "Automatic Transmission Only",
    "04": "Electric Vehicles Only",
    "05": "Disability Adapted Vehicles",
    "06": "Tractor Vehicles Only",
    "07": "Industrial/Agriculture Only",
}


def restrictions_from_legacy(codes: Iterable[str]) -> LicenseRestrictions:
    """Split a legacy flat code list into driver and vehicle restrictions."""
    driver: list[str] = []
    vehicle: list[str] = []
    for raw in codes:
        code = str(raw).strip().zfill(2)
        if code in LEGACY_DRIVER_CODES:
            target = driver
        elif code in LEGACY_VEHICLE_CODES:
            target = vehicle
        else:
            raise LegacyRestrictionError(str(raw), ErrorContext(source="legacy restrictions"))
        if code not in target:
            target.append(code)
    return LicenseRestrictions(driver=tuple(sorted(driver)), vehicle=tuple(sorted(vehicle)))


class RestrictionsPayload(BaseModel):
    driver: list[str] = Field(default_factory=list)
    vehicle: list[str] = Field(default_factory=list)


class CapturedLicenseEntryPayload(BaseModel):
    """One captured license as submitted by the capture form."""
    id: str = Field(min_length=1)
    category: LicenseCategory
    issue_date: date | None = None
    restrictions: RestrictionsPayload = Field(default_factory=RestrictionsPayload)
    verified: bool = False
    notes: str = Field("", max_length=1000)
    license_number: str | None = None

    @field_validator("restrictions", mode="before")
    @classmethod
    def accept_legacy_list(cls, v):
        if isinstance(v, (list, tuple)):
            structured = restrictions_from_legacy(v)
            return {"driver": list(structured.driver), "vehicle": list(structured.vehicle)}
        return v

    @field_validator("notes")
    @classmethod
    def strip_notes(cls, v: str) -> str:
        return v.strip()

    def to_entry(self) -> CapturedLicenseEntry:
        return CapturedLicenseEntry(
            id=EntryId(self.id),
            category=self.category,
            issue_date=self.issue_date,
            restrictions=LicenseRestrictions(
                driver=tuple(self.restrictions.driver),
                vehicle=tuple(self.restrictions.vehicle),
            ),
            verified=self.verified,
            notes=self.notes,
            license_number=self.license_number,
        )
