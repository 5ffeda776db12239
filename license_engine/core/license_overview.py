"""License Overview: what an applicant's existing licenses allow next.

Invariants:
    - PURE: the evaluation date is an input, nothing reads the clock
    - Only valid system records count; external claims are not part of the overview
    - can_apply_for and upgrade_options never contain an already-authorized category
    - overlapping_authorizations is empty for a clean system of record
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date

from license_engine.core.category_catalog import CategoryCatalog
from license_engine.core.domain_types import (
    LicenseCategory,
    full_license_categories,
    sort_categories,
)
from license_engine.core.enforce_holdings import upgrade_options
from license_engine.core.licenses import (
    ActiveLicense,
    find_duplicate_authorizations,
    find_system_learner_permits,
    renewal_due,
    valid_system_categories,
)


@dataclass(frozen=True)
class LicenseOverview:
    authorized_categories: tuple[LicenseCategory, ...]
    can_apply_for: tuple[LicenseCategory, ...]
    upgrade_options: tuple[LicenseCategory, ...]
    renewal_due: tuple[LicenseCategory, ...]
    overlapping_authorizations: tuple[LicenseCategory, ...]
    learner_permit: ActiveLicense | None = None

    @property
    def has_active_licenses(self) -> bool:
        return bool(self.authorized_categories)

    @property
    def has_learners_permit(self) -> bool:
        return self.learner_permit is not None

    def to_dict(self) -> dict:
        permit = self.learner_permit
        return {
            "authorized_categories": [c.value for c in self.authorized_categories],
            "can_apply_for": [c.value for c in self.can_apply_for],
            "upgrade_options": [c.value for c in self.upgrade_options],
            "renewal_due": [c.value for c in self.renewal_due],
            "overlapping_authorizations": [c.value for c in self.overlapping_authorizations],
            "learner_permit": (
                sorted(c.value for c in permit.categories) if permit else None
            ),
        }


def summarize_existing_licenses(
    catalog: CategoryCatalog, existing: Iterable[ActiveLicense], on: date,
) -> LicenseOverview:
    existing = tuple(existing)
    held = valid_system_categories(existing)
    authorized = catalog.authorized_categories(held)
    permits = find_system_learner_permits(existing)
    return LicenseOverview(
        authorized_categories=sort_categories(authorized),
        can_apply_for=tuple(c for c in full_license_categories() if c not in authorized),
        upgrade_options=upgrade_options(catalog, held),
        renewal_due=renewal_due(existing, on),
        overlapping_authorizations=find_duplicate_authorizations(catalog, existing),
        learner_permit=permits[0] if permits else None,
    )
