"""Medical Requirement Resolution: is medical clearance mandatory for a category/age.

Invariants:
    - PURE and total: never raises for a catalogued category
    - "always" takes precedence over the age rule when both hold
    - MEDICAL_AGE_THRESHOLD (60) is the single source of truth for the age cutoff
"""

from dataclasses import dataclass

from license_engine.core.category_catalog import CategoryCatalog
from license_engine.core.domain_types import LicenseCategory


MEDICAL_AGE_THRESHOLD: int = 60

REASON_ALWAYS = "always required — passenger/commercial transport"
REASON_AGE = f"required at age {MEDICAL_AGE_THRESHOLD}+"
REASON_NONE = "not required"


@dataclass(frozen=True)
class MedicalRequirement:
    required: bool
    reason: str

    def to_dict(self) -> dict:
        return {"required": self.required, "reason": self.reason}


def is_medical_required(
    catalog: CategoryCatalog, category: LicenseCategory, age: int,
) -> MedicalRequirement:
    rule = catalog.lookup(category)
    if rule.requires_medical_always:
        return MedicalRequirement(True, REASON_ALWAYS)
    if age >= MEDICAL_AGE_THRESHOLD and rule.requires_medical_60_plus:
        return MedicalRequirement(True, REASON_AGE)
    return MedicalRequirement(False, REASON_NONE)
