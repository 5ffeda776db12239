"""License Snapshots: read-only views of licenses supplied by the caller.

Invariants:
    - The engine never mutates these records; all are frozen dataclasses
    - Category codes are coerced to LicenseCategory on construction; unknown
      codes raise UnknownCategoryError
    - Only ActiveLicense records with is_valid contribute authorizations
    - CapturedLicenseEntry edits produce new instances (dataclasses.replace)
    - Restrictions are always structured as driver / vehicle code lists
"""

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, timedelta

from license_engine.core.category_catalog import CategoryCatalog, coerce_category
from license_engine.core.domain_types import (
    EntryId,
    LicenseCategory,
    LicenseSource,
    is_learner_code,
    sort_categories,
)


RENEWAL_WINDOW = timedelta(days=6 * 30)


def _coerce_all(categories: Iterable) -> frozenset[LicenseCategory]:
    return frozenset(coerce_category(c) for c in categories)


@dataclass(frozen=True)
class ActiveLicense:
    """A license recorded in the system of record."""
    categories: frozenset[LicenseCategory]
    is_valid: bool = True
    issue_date: date | None = None
    expiry_date: date | None = None
    license_number: str | None = None

    source = LicenseSource.SYSTEM

    def __post_init__(self):
        object.__setattr__(self, "categories", _coerce_all(self.categories))

    @property
    def is_learner_permit(self) -> bool:
        return any(is_learner_code(c) for c in self.categories)


@dataclass(frozen=True)
class ExternalLicenseDetails:
    """A claim about a license not recorded in this system, pending clerk verification."""
    categories: frozenset[LicenseCategory]
    expiry_date: date
    verified_by_clerk: bool = False
    issue_date: date | None = None
    license_number: str | None = None

    source = LicenseSource.EXTERNAL

    def __post_init__(self):
        object.__setattr__(self, "categories", _coerce_all(self.categories))


@dataclass(frozen=True)
class LicenseRestrictions:
    driver: tuple[str, ...] = ()
    vehicle: tuple[str, ...] = ()

    def all_codes(self) -> tuple[str, ...]:
        return self.driver + self.vehicle

    def to_dict(self) -> dict:
        return {"driver": list(self.driver), "vehicle": list(self.vehicle)}


@dataclass(frozen=True)
class CapturedLicenseEntry:
    """One pre-existing license being registered in a capture session."""
    id: EntryId
    category: LicenseCategory
    issue_date: date | None = None
    restrictions: LicenseRestrictions = field(default_factory=LicenseRestrictions)
    verified: bool = False
    notes: str = ""
    license_number: str | None = None

    def __post_init__(self):
        object.__setattr__(self, "category", coerce_category(self.category))


def valid_system_categories(existing: Iterable[ActiveLicense]) -> frozenset[LicenseCategory]:
    """Categories directly held on valid system records."""
    held: set[LicenseCategory] = set()
    for license_ in existing:
        if license_.is_valid:
            held |= license_.categories
    return frozenset(held)


def existing_authorized_categories(
    catalog: CategoryCatalog, existing: Iterable[ActiveLicense],
) -> frozenset[LicenseCategory]:
    """Union of authorized closures over all valid existing licenses."""
    return catalog.authorized_categories(valid_system_categories(existing))


def find_duplicate_authorizations(
    catalog: CategoryCatalog, existing: Iterable[ActiveLicense],
) -> tuple[LicenseCategory, ...]:
    """Categories authorized by the closures of more than one valid record.

    Holding {A} on one record and {A1} on another reports A1. A clean
    system of record returns an empty tuple.
    """
    counts: Counter[LicenseCategory] = Counter()
    for license_ in existing:
        if license_.is_valid:
            counts.update(catalog.authorized_categories(license_.categories))
    return sort_categories(c for c, n in counts.items() if n > 1)


def find_system_learner_permits(existing: Iterable[ActiveLicense]) -> tuple[ActiveLicense, ...]:
    """Valid system records carrying a learner's-permit code, in input order."""
    return tuple(
        license_ for license_ in existing
        if license_.is_valid and license_.is_learner_permit
    )


def renewal_due(
    existing: Iterable[ActiveLicense], on: date,
) -> tuple[LicenseCategory, ...]:
    """Full categories on valid records expiring within RENEWAL_WINDOW of `on`.

    Already-expired records are included. Records without an expiry date never are.
    """
    due: set[LicenseCategory] = set()
    for license_ in existing:
        if not license_.is_valid or license_.expiry_date is None:
            continue
        if license_.expiry_date - on <= RENEWAL_WINDOW:
            due |= {c for c in license_.categories if not is_learner_code(c)}
    return sort_categories(due)
