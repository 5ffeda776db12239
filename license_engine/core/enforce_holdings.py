"""Holdings Enforcement: duplicate-authorization and prerequisite rules.

Invariants:
    - All functions are PURE: no IO, no side effects
    - `existing` is the set of categories directly held; every check expands it
      to authorized closures through the catalog
    - An already-authorized category is a duplicate, distinct from a missing prerequisite
    - Missing prerequisites are reported in canonical category order
    - check_* return a verdict on violation, None on success
"""

from collections.abc import Iterable

from license_engine.core.category_catalog import CategoryCatalog
from license_engine.core.domain_types import (
    LicenseCategory,
    full_license_categories,
    sort_categories,
)
from license_engine.core.verdict import EligibilityVerdict, VerdictCode


def check_not_already_held(
    catalog: CategoryCatalog,
    category: LicenseCategory,
    existing: Iterable[LicenseCategory],
) -> EligibilityVerdict | None:
    """A category already authorized cannot be granted again."""
    rule = catalog.lookup(category)
    if rule.category in catalog.authorized_categories(existing):
        return EligibilityVerdict.invalid(
            VerdictCode.CATEGORY_ALREADY_HELD,
            f"Category {rule.category.value} is already authorized by an existing "
            f"license. Use renewal or upgrade instead.",
            invalid_combinations=[f"Duplicate category: {rule.category.value}"],
        )
    return None


def check_prerequisites(
    catalog: CategoryCatalog,
    category: LicenseCategory,
    existing: Iterable[LicenseCategory],
) -> EligibilityVerdict | None:
    """Every prerequisite must be covered by existing authorizations."""
    rule = catalog.lookup(category)
    missing = missing_prerequisites(catalog, rule.category, existing)
    if missing:
        names = ", ".join(c.value for c in missing)
        return EligibilityVerdict.invalid(
            VerdictCode.MISSING_PREREQUISITES,
            f"Category {rule.category.value} requires Category {names}",
            missing_prerequisites=missing,
        )
    return None


def missing_prerequisites(
    catalog: CategoryCatalog,
    category: LicenseCategory,
    existing: Iterable[LicenseCategory],
) -> tuple[LicenseCategory, ...]:
    rule = catalog.lookup(category)
    return sort_categories(rule.prerequisites - catalog.authorized_categories(existing))


def validate_not_already_held(
    catalog: CategoryCatalog,
    category: LicenseCategory,
    existing: Iterable[LicenseCategory],
) -> EligibilityVerdict:
    return (
        check_not_already_held(catalog, category, existing)
        or EligibilityVerdict.ok("Category is not yet authorized")
    )


def validate_prerequisites(
    catalog: CategoryCatalog,
    category: LicenseCategory,
    existing: Iterable[LicenseCategory],
) -> EligibilityVerdict:
    return (
        check_prerequisites(catalog, category, existing)
        or EligibilityVerdict.ok("Prerequisites satisfied")
    )


# --- Whole-selection checks ---------------------------------------------------

def check_selection_not_held(
    catalog: CategoryCatalog,
    selected: Iterable[LicenseCategory],
    existing: Iterable[LicenseCategory],
) -> EligibilityVerdict | None:
    """No selected category may already be authorized by an existing license."""
    existing = tuple(existing)
    authorized = catalog.authorized_categories(existing)
    held = [c for c in sort_categories(selected) if c in authorized]
    if not held:
        return None
    if len(held) == 1:
        return check_not_already_held(catalog, held[0], existing)
    names = ", ".join(c.value for c in held)
    return EligibilityVerdict.invalid(
        VerdictCode.CATEGORY_ALREADY_HELD,
        f"Categories {names} are already authorized by an existing license. "
        f"Use renewal or upgrade instead.",
        invalid_combinations=[f"Duplicate category: {c.value}" for c in held],
    )


def check_selection_prerequisites(
    catalog: CategoryCatalog,
    selected: Iterable[LicenseCategory],
    existing: Iterable[LicenseCategory],
) -> EligibilityVerdict | None:
    """Prerequisites may be met by existing licenses or by being selected too.

    A selected sibling counts only as itself, never through its closure.
    """
    selected = sort_categories(selected)
    covered = catalog.authorized_categories(existing) | set(selected)
    messages: list[str] = []
    missing: set[LicenseCategory] = set()
    for category in selected:
        gap = sort_categories(catalog.lookup(category).prerequisites - covered)
        if gap:
            missing.update(gap)
            messages.append(
                f"Category {category.value} requires Category "
                f"{', '.join(c.value for c in gap)}"
            )
    if not messages:
        return None
    return EligibilityVerdict.invalid(
        VerdictCode.MISSING_PREREQUISITES,
        "; ".join(messages),
        missing_prerequisites=missing,
        invalid_combinations=messages,
    )


# --- Advisory helpers ---------------------------------------------------------

def suggest_prerequisites(
    catalog: CategoryCatalog, selected: Iterable[LicenseCategory],
) -> tuple[LicenseCategory, ...]:
    """Prerequisites of each selected category not covered by the OTHER selections."""
    selected = sort_categories(selected)
    needed: set[LicenseCategory] = set()
    for category in selected:
        others = catalog.authorized_categories(c for c in selected if c != category)
        needed |= catalog.lookup(category).prerequisites - others
    return sort_categories(needed)


def upgrade_options(
    catalog: CategoryCatalog, existing: Iterable[LicenseCategory],
) -> tuple[LicenseCategory, ...]:
    """Full categories not yet authorized whose prerequisites are already met."""
    authorized = catalog.authorized_categories(existing)
    return tuple(
        category for category in full_license_categories()
        if category not in authorized
        and catalog.lookup(category).prerequisites <= authorized
    )
