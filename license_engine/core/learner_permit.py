"""Learner's Permit Linkage: a new full license must be backed by a matching permit.

Invariants:
    - All functions are PURE: no IO, the evaluation date is an input
    - Applies only to full categories whose rule allows a learner's permit
    - Checks run in fixed order: presence, expiry, clerk verification, coverage
    - Each failure has its own verdict code and names the learner code that
      would cover the target (reported in missing_prerequisites)
    - System permits are trusted once is_valid; external permits also need
      verified_by_clerk
    - An explicit permit wins; otherwise a learner record from the system
      snapshot stands in for it
"""

from collections.abc import Iterable
from datetime import date

from license_engine.core.category_catalog import CategoryCatalog
from license_engine.core.domain_types import (
    LicenseCategory,
    is_learner_code,
    learner_permit_categories,
)
from license_engine.core.licenses import (
    ActiveLicense,
    ExternalLicenseDetails,
    find_system_learner_permits,
)
from license_engine.core.verdict import EligibilityVerdict, VerdictCode

LearnerPermit = ActiveLicense | ExternalLicenseDetails


def requires_learner_permit(catalog: CategoryCatalog, category: LicenseCategory) -> bool:
    rule = catalog.lookup(category)
    return rule.allows_learners_permit and not is_learner_code(rule.category)


def required_learner_code(
    catalog: CategoryCatalog, category: LicenseCategory,
) -> LicenseCategory:
    """First learner code (in canonical order) whose permit closure reaches the category.

    Falls back to the category itself when no learner code covers it.
    """
    target = catalog.lookup(category).category
    for code in learner_permit_categories():
        if target in catalog.permit_closure(code):
            return code
    return target


def permit_reach(catalog: CategoryCatalog, permit: LearnerPermit) -> frozenset[LicenseCategory]:
    """Every category the permit's own categories prepare for."""
    reach: set[LicenseCategory] = set()
    for category in permit.categories:
        reach |= catalog.permit_closure(category)
    return frozenset(reach)


def check_learner_permit(
    catalog: CategoryCatalog,
    category: LicenseCategory,
    permit: LearnerPermit | None,
    on: date,
) -> EligibilityVerdict | None:
    """New full licenses need a current, verified, covering learner's permit."""
    if not requires_learner_permit(catalog, category):
        return None

    target = catalog.lookup(category).category
    code = required_learner_code(catalog, target)
    label = f"learner's permit code {code.value}"

    if permit is None or (isinstance(permit, ActiveLicense) and not permit.is_valid):
        return _invalid(
            VerdictCode.LEARNER_PERMIT_MISSING, code,
            f"A valid {label} is required for category {target.value}",
        )

    if permit.expiry_date is not None and permit.expiry_date < on:
        return _invalid(
            VerdictCode.LEARNER_PERMIT_EXPIRED, code,
            f"Learner's permit expired on {permit.expiry_date.isoformat()}; "
            f"a current {label} is required for category {target.value}",
        )

    if isinstance(permit, ExternalLicenseDetails) and not permit.verified_by_clerk:
        return _invalid(
            VerdictCode.LEARNER_PERMIT_UNVERIFIED, code,
            f"External learner's permit must be verified by a clerk before "
            f"applying for category {target.value}",
        )

    if target not in permit_reach(catalog, permit):
        held = ", ".join(sorted(c.value for c in permit.categories)) or "none"
        return _invalid(
            VerdictCode.LEARNER_PERMIT_CATEGORY_MISMATCH, code,
            f"Learner's permit ({held}) does not cover category {target.value}; "
            f"a {label} is required",
        )

    return None


def system_learner_permit(
    catalog: CategoryCatalog,
    category: LicenseCategory,
    existing: Iterable[ActiveLicense],
    on: date,
) -> ActiveLicense | None:
    """Learner's permit on record for the applicant, if any.

    Prefers a record that passes the linkage check for `category`, otherwise
    the first learner record so the failure names its actual problem.
    """
    candidates = find_system_learner_permits(existing)
    for permit in candidates:
        if check_learner_permit(catalog, category, permit, on) is None:
            return permit
    return candidates[0] if candidates else None


def validate_learner_permit(
    catalog: CategoryCatalog,
    category: LicenseCategory,
    permit: LearnerPermit | None,
    on: date,
) -> EligibilityVerdict:
    verdict = check_learner_permit(catalog, category, permit, on)
    if verdict is not None:
        return verdict
    if requires_learner_permit(catalog, category):
        return EligibilityVerdict.ok("Valid learner's permit found")
    return EligibilityVerdict.ok("No learner's permit required for this category")


def _invalid(code: str, required: LicenseCategory, message: str) -> EligibilityVerdict:
    return EligibilityVerdict.invalid(code, message, missing_prerequisites=[required])
