"""Domain Types: closed enumerations and identity types for the licensing rules.

Invariants:
    - LicenseCategory is a closed set: 14 full categories plus 3 learner's-permit codes
    - Learner codes ("1", "2", "3") are distinct from full license categories
    - Declaration order of LicenseCategory is the canonical display/sort order
    - All valid states encoded as Enums, no raw string matching in rule code

Design Decisions:
    - str Enums: serialize to JSON without custom encoders
    - NewType for session-local entry ids: zero runtime cost, full type-checker support
"""

from enum import Enum
from typing import Literal, NewType


# ─── Identity Types ──────────────────────────────────────────────

EntryId = NewType("EntryId", str)      # local to one capture session


# ─── Enums ───────────────────────────────────────────────────────

class LicenseCategory(str, Enum):
    """License categories and learner's-permit codes."""
    # Motorcycles and mopeds
    A1 = "A1"
    A2 = "A2"
    A = "A"
    # Light vehicles
    B1 = "B1"
    B = "B"
    B2 = "B2"
    BE = "BE"
    # Heavy goods vehicles
    C1 = "C1"
    C = "C"
    C1E = "C1E"
    CE = "CE"
    # Passenger transport
    D1 = "D1"
    D = "D"
    D2 = "D2"
    # Learner's permit codes
    LEARNERS_1 = "1"
    LEARNERS_2 = "2"
    LEARNERS_3 = "3"


class ApplicationType(str, Enum):
    """Application flows the engine decides on."""
    NEW_LICENSE = "NEW_LICENSE"
    LEARNERS_PERMIT = "LEARNERS_PERMIT"
    DRIVERS_LICENSE_CAPTURE = "DRIVERS_LICENSE_CAPTURE"
    LEARNERS_PERMIT_CAPTURE = "LEARNERS_PERMIT_CAPTURE"


class TransmissionType(str, Enum):
    AUTOMATIC = "AUTOMATIC"
    MANUAL = "MANUAL"


class RestrictionCode(str, Enum):
    """Restriction codes printed on a license. Declaration order is emission order."""
    AUTOMATIC_ONLY = "AUTOMATIC_ONLY"
    MODIFIED_VEHICLE_ONLY = "MODIFIED_VEHICLE_ONLY"
    CORRECTIVE_LENSES = "CORRECTIVE_LENSES"
    VISION_RESTRICTED = "VISION_RESTRICTED"


class LicenseSource(str, Enum):
    """Where a license record comes from."""
    SYSTEM = "SYSTEM"
    EXTERNAL = "EXTERNAL"


CategoryFamily = Literal["A", "B", "C", "D", "L"]
DuplicatePolicy = Literal["exact", "closure"]

LEARNER_CODES: frozenset[LicenseCategory] = frozenset({
    LicenseCategory.LEARNERS_1,
    LicenseCategory.LEARNERS_2,
    LicenseCategory.LEARNERS_3,
})

_CATEGORY_ORDER: dict[LicenseCategory, int] = {
    category: index for index, category in enumerate(LicenseCategory)
}


def is_learner_code(category: LicenseCategory) -> bool:
    return category in LEARNER_CODES


def full_license_categories() -> tuple[LicenseCategory, ...]:
    """All full license categories in canonical order."""
    return tuple(c for c in LicenseCategory if c not in LEARNER_CODES)


def learner_permit_categories() -> tuple[LicenseCategory, ...]:
    return tuple(c for c in LicenseCategory if c in LEARNER_CODES)


def category_sort_key(category: LicenseCategory) -> int:
    return _CATEGORY_ORDER[category]


def sort_categories(categories) -> tuple[LicenseCategory, ...]:
    """Deterministic canonical ordering for any iterable of categories."""
    return tuple(sorted(set(categories), key=category_sort_key))


def category_family(category: LicenseCategory) -> CategoryFamily:
    """Vehicle family of a category; learner codes belong to family "L"."""
    if category in LEARNER_CODES:
        return "L"
    return category.value[0]  # type: ignore[return-value]
