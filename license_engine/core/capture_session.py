"""Capture Session Validation: batch rules for registering pre-existing licenses.

Invariants:
    - All functions are PURE: sessions are frozen, mutations return new sessions
    - Every mutation (add, edit, remove) re-validates the WHOLE batch; the
      prerequisite relation is session-global, not per entry
    - Prerequisites may be met by existing system closures or by the closures
      of OTHER entries in the session, never by the entry itself
    - Duplicate-with-system uses exact category match unless the "closure"
      policy is selected
    - Editing an entry never resets another entry's `verified` flag
    - An empty error map means the batch is valid and may be persisted
"""

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, replace
from datetime import date

from license_engine.core.category_catalog import CategoryCatalog
from license_engine.core.domain_types import DuplicatePolicy, EntryId, sort_categories
from license_engine.core.enforce_age import calculate_age
from license_engine.core.licenses import (
    ActiveLicense,
    CapturedLicenseEntry,
    existing_authorized_categories,
    valid_system_categories,
)


@dataclass(frozen=True)
class CaptureSession:
    """Entries plus the person context they are validated against."""
    entries: tuple[CapturedLicenseEntry, ...] = ()
    existing_licenses: tuple[ActiveLicense, ...] | None = ()
    birth_date: date | None = None
    evaluation_date: date | None = None
    duplicate_policy: DuplicatePolicy = "exact"


@dataclass(frozen=True)
class CaptureUpdate:
    session: CaptureSession
    errors: dict[str, list[str]]

    @property
    def is_valid(self) -> bool:
        return not self.errors


# --- Batch validation ---------------------------------------------------------

def validate_capture_session(
    catalog: CategoryCatalog,
    entries: Iterable[CapturedLicenseEntry],
    existing_licenses: Iterable[ActiveLicense] | None,
    duplicate_policy: DuplicatePolicy = "exact",
    birth_date: date | None = None,
    on: date | None = None,
) -> dict[str, list[str]]:
    """Map entry id -> error messages for every invalid entry."""
    entries = tuple(entries)
    if existing_licenses is None:
        return {
            entry.id: ["Insufficient data to validate capture: existing-license snapshot not supplied"]
            for entry in entries
        }

    existing_licenses = tuple(existing_licenses)
    system_exact = valid_system_categories(existing_licenses)
    system_authorized = existing_authorized_categories(catalog, existing_licenses)
    blocked = system_authorized if duplicate_policy == "closure" else system_exact
    counts = Counter(entry.category for entry in entries)
    age = calculate_age(birth_date, on) if birth_date and on else None

    errors: dict[str, list[str]] = {}
    for entry in entries:
        entry_errors = (
            _duplicate_in_session(entry, counts)
            + _duplicate_with_system(entry, blocked, duplicate_policy)
            + _missing_prerequisites(catalog, entry, entries, system_authorized)
            + _age_requirement(catalog, entry, age)
        )
        if entry_errors:
            errors[entry.id] = entry_errors
    return errors


def _duplicate_in_session(entry: CapturedLicenseEntry, counts: Counter) -> list[str]:
    if counts[entry.category] > 1:
        return [
            f"Duplicate license category {entry.category.value} - "
            f"cannot add the same category multiple times"
        ]
    return []


def _duplicate_with_system(
    entry: CapturedLicenseEntry, blocked: frozenset, policy: DuplicatePolicy,
) -> list[str]:
    if entry.category not in blocked:
        return []
    if policy == "closure":
        return [f"Category {entry.category.value} is already authorized by an existing license"]
    return [f"Category {entry.category.value} is already recorded in the system"]


def _missing_prerequisites(
    catalog: CategoryCatalog,
    entry: CapturedLicenseEntry,
    entries: tuple[CapturedLicenseEntry, ...],
    system_authorized: frozenset,
) -> list[str]:
    siblings = catalog.authorized_categories(
        other.category for other in entries if other.id != entry.id
    )
    missing = sort_categories(
        catalog.lookup(entry.category).prerequisites - (system_authorized | siblings)
    )
    if missing:
        return [
            f"Category {entry.category.value} requires: "
            f"{', '.join(c.value for c in missing)}"
        ]
    return []


def _age_requirement(
    catalog: CategoryCatalog, entry: CapturedLicenseEntry, age: int | None,
) -> list[str]:
    if age is None:
        return []
    rule = catalog.lookup(entry.category)
    if age < rule.min_age:
        return [
            f"Age requirement not met for category {entry.category.value}: "
            f"minimum age is {rule.min_age}, person is {age}"
        ]
    return []


# --- Session mutations --------------------------------------------------------

def revalidate(catalog: CategoryCatalog, session: CaptureSession) -> CaptureUpdate:
    errors = validate_capture_session(
        catalog,
        session.entries,
        session.existing_licenses,
        session.duplicate_policy,
        session.birth_date,
        session.evaluation_date,
    )
    return CaptureUpdate(session=session, errors=errors)


def add_entry(
    catalog: CategoryCatalog, session: CaptureSession, entry: CapturedLicenseEntry,
) -> CaptureUpdate:
    if any(existing.id == entry.id for existing in session.entries):
        raise ValueError(f"Entry id {entry.id!r} already present in session")
    return revalidate(catalog, replace(session, entries=session.entries + (entry,)))


def edit_entry(
    catalog: CategoryCatalog, session: CaptureSession, entry_id: EntryId, **changes,
) -> CaptureUpdate:
    """Replace fields of one entry; other entries are left untouched."""
    _require_entry(session, entry_id)
    entries = tuple(
        replace(entry, **changes) if entry.id == entry_id else entry
        for entry in session.entries
    )
    return revalidate(catalog, replace(session, entries=entries))


def remove_entry(
    catalog: CategoryCatalog, session: CaptureSession, entry_id: EntryId,
) -> CaptureUpdate:
    _require_entry(session, entry_id)
    entries = tuple(entry for entry in session.entries if entry.id != entry_id)
    return revalidate(catalog, replace(session, entries=entries))


def _require_entry(session: CaptureSession, entry_id: EntryId) -> CapturedLicenseEntry:
    for entry in session.entries:
        if entry.id == entry_id:
            return entry
    raise KeyError(f"Entry id {entry_id!r} not found in session")


# --- Authorization readiness --------------------------------------------------

def validate_for_authorization(session: CaptureSession) -> list[str]:
    """Completeness checks before a validated batch may be persisted."""
    entries = session.entries
    if not entries:
        return ["No licenses captured"]

    errors: list[str] = []
    for number, entry in enumerate(entries, start=1):
        if entry.issue_date is None:
            errors.append(f"License #{number}: Issue date is required")
        if not entry.verified:
            errors.append(f"License #{number}: License must be verified before authorization")
    return errors
