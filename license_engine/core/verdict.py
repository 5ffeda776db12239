"""Eligibility Verdict: structured, caller-renderable outcome of every rule check.

Invariants:
    - Verdicts are frozen and built from tuples, so equal inputs give equal verdicts
    - is_valid=False always carries a non-OK code and enough detail (exact category,
      exact ages) for the caller to render a remedy without further lookups
    - to_dict() is JSON-safe (no Enums, no tuples, no sets)
"""

from dataclasses import dataclass

from license_engine.core.domain_types import LicenseCategory, sort_categories


class VerdictCode:
    """Stable machine-readable verdict codes."""
    OK = "OK"
    AGE_REQUIREMENT_NOT_MET = "AGE_REQUIREMENT_NOT_MET"
    CATEGORY_ALREADY_HELD = "CATEGORY_ALREADY_HELD"
    MISSING_PREREQUISITES = "MISSING_PREREQUISITES"
    LEARNER_PERMIT_MISSING = "LEARNER_PERMIT_MISSING"
    LEARNER_PERMIT_EXPIRED = "LEARNER_PERMIT_EXPIRED"
    LEARNER_PERMIT_UNVERIFIED = "LEARNER_PERMIT_UNVERIFIED"
    LEARNER_PERMIT_CATEGORY_MISMATCH = "LEARNER_PERMIT_CATEGORY_MISMATCH"
    INSUFFICIENT_DATA = "INSUFFICIENT_DATA"
    INVALID_APPLICATION_CATEGORY = "INVALID_APPLICATION_CATEGORY"


@dataclass(frozen=True)
class AgeViolation:
    category: LicenseCategory
    required_age: int
    current_age: int

    def to_dict(self) -> dict:
        return {
            "category": self.category.value,
            "required_age": self.required_age,
            "current_age": self.current_age,
        }


@dataclass(frozen=True)
class EligibilityVerdict:
    """Outcome of a single check or of the full evaluation chain."""
    is_valid: bool
    message: str
    code: str = VerdictCode.OK
    missing_prerequisites: tuple[LicenseCategory, ...] = ()
    age_violations: tuple[AgeViolation, ...] = ()
    invalid_combinations: tuple[str, ...] = ()

    @classmethod
    def ok(cls, message: str) -> "EligibilityVerdict":
        return cls(is_valid=True, message=message)

    @classmethod
    def invalid(
        cls,
        code: str,
        message: str,
        *,
        missing_prerequisites=(),
        age_violations=(),
        invalid_combinations=(),
    ) -> "EligibilityVerdict":
        return cls(
            is_valid=False,
            message=message,
            code=code,
            missing_prerequisites=sort_categories(missing_prerequisites),
            age_violations=tuple(age_violations),
            invalid_combinations=tuple(invalid_combinations),
        )

    def to_dict(self) -> dict:
        return {
            "is_valid": self.is_valid,
            "code": self.code,
            "message": self.message,
            "missing_prerequisites": [c.value for c in self.missing_prerequisites],
            "age_violations": [v.to_dict() for v in self.age_violations],
            "invalid_combinations": list(self.invalid_combinations),
        }


def insufficient_data(missing: str) -> EligibilityVerdict:
    """Explicit refusal to guess when upstream data was not supplied."""
    return EligibilityVerdict.invalid(
        VerdictCode.INSUFFICIENT_DATA,
        f"Insufficient data to determine eligibility: {missing} not supplied",
    )
