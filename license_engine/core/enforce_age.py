"""Age Enforcement: minimum-age rule per category.

Invariants:
    - All functions are PURE: no IO, no clock reads (the evaluation date is an input)
    - Age is whole elapsed years, decremented when the birthday has not yet
      been reached in the evaluation year
    - Minimum age is strict for every category; there are no exceptions
    - check_age returns a verdict on violation, None on success
"""

from collections.abc import Iterable
from datetime import date

from license_engine.core.category_catalog import CategoryCatalog
from license_engine.core.domain_types import LicenseCategory, sort_categories
from license_engine.core.verdict import (
    AgeViolation,
    EligibilityVerdict,
    VerdictCode,
)


def calculate_age(birth_date: date, on: date) -> int:
    """Whole years between birth_date and on."""
    age = on.year - birth_date.year
    if (on.month, on.day) < (birth_date.month, birth_date.day):
        age -= 1
    return age


def check_age(
    catalog: CategoryCatalog, birth_date: date, category: LicenseCategory, on: date,
) -> EligibilityVerdict | None:
    """Applicant must have reached the category's minimum age."""
    rule = catalog.lookup(category)
    age = calculate_age(birth_date, on)
    if age < rule.min_age:
        return EligibilityVerdict.invalid(
            VerdictCode.AGE_REQUIREMENT_NOT_MET,
            f"Age requirement not met for category {rule.category.value}: "
            f"minimum age is {rule.min_age}, applicant is {age}",
            age_violations=[AgeViolation(rule.category, rule.min_age, age)],
        )
    return None


def check_ages(
    catalog: CategoryCatalog,
    birth_date: date,
    categories: Iterable[LicenseCategory],
    on: date,
) -> EligibilityVerdict | None:
    """Every selected category checked at once; all violations are reported."""
    age = calculate_age(birth_date, on)
    violations = [
        AgeViolation(rule.category, rule.min_age, age)
        for rule in (catalog.lookup(c) for c in sort_categories(categories))
        if age < rule.min_age
    ]
    if not violations:
        return None
    if len(violations) == 1:
        return check_age(catalog, birth_date, violations[0].category, on)
    names = ", ".join(v.category.value for v in violations)
    return EligibilityVerdict.invalid(
        VerdictCode.AGE_REQUIREMENT_NOT_MET,
        f"Age requirements not met for categories {names}: applicant is {age}",
        age_violations=violations,
    )


def validate_age(
    catalog: CategoryCatalog, birth_date: date, category: LicenseCategory, on: date,
) -> EligibilityVerdict:
    return (
        check_age(catalog, birth_date, category, on)
        or EligibilityVerdict.ok("Age requirements satisfied")
    )
