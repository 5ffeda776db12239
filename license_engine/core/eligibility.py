"""Eligibility Evaluation: chains every application rule into one verdict.

Invariants:
    - PURE: the evaluation date, existing licenses and permit are explicit inputs
    - Fixed order, first failure wins, later checks never run:
      data guard -> category/application match -> age -> not already held
      -> prerequisites -> learner's permit (NEW_LICENSE only)
    - Missing upstream data is never assumed valid: INSUFFICIENT_DATA verdict
    - Only successful assessments carry the authorized closure, medical
      requirement and restriction codes
    - A selection is evaluated as one application: each category's
      prerequisites may come from the other selections, and all age
      violations are reported together
    - NEW_LICENSE without an explicit permit falls back to a learner's
      permit held in the system snapshot
"""

from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from datetime import date

from license_engine.core.category_catalog import CategoryCatalog, coerce_category
from license_engine.core.domain_types import (
    ApplicationType,
    LicenseCategory,
    RestrictionCode,
    TransmissionType,
    is_learner_code,
    sort_categories,
)
from license_engine.core.enforce_age import calculate_age, check_age, check_ages
from license_engine.core.enforce_holdings import (
    check_not_already_held,
    check_prerequisites,
    check_selection_not_held,
    check_selection_prerequisites,
)
from license_engine.core.learner_permit import (
    LearnerPermit,
    check_learner_permit,
    system_learner_permit,
)
from license_engine.core.licenses import ActiveLicense, valid_system_categories
from license_engine.core.medical import MedicalRequirement, is_medical_required
from license_engine.core.restrictions import calculate_restrictions
from license_engine.core.verdict import (
    EligibilityVerdict,
    VerdictCode,
    insufficient_data,
)


LEARNER_APPLICATIONS = frozenset({
    ApplicationType.LEARNERS_PERMIT, ApplicationType.LEARNERS_PERMIT_CAPTURE,
})


@dataclass(frozen=True)
class ApplicationRequest:
    """Applicant snapshot for one category application."""
    category: LicenseCategory
    birth_date: date | None
    existing_licenses: tuple[ActiveLicense, ...] | None
    evaluation_date: date
    application_type: ApplicationType = ApplicationType.NEW_LICENSE
    learner_permit: LearnerPermit | None = None
    transmission: TransmissionType | None = None
    has_disability_modification: bool = False
    vision_flags: tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "category", coerce_category(self.category))


@dataclass(frozen=True)
class EligibilityAssessment:
    """Verdict plus supplementary, non-blocking information on success."""
    verdict: EligibilityVerdict
    authorized_categories: tuple[LicenseCategory, ...] = ()
    medical: MedicalRequirement | None = None
    restrictions: tuple[RestrictionCode, ...] = ()

    @property
    def is_valid(self) -> bool:
        return self.verdict.is_valid

    def to_dict(self) -> dict:
        return {
            "verdict": self.verdict.to_dict(),
            "authorized_categories": [c.value for c in self.authorized_categories],
            "medical": self.medical.to_dict() if self.medical else None,
            "restrictions": [r.value for r in self.restrictions],
        }


def check_required_data(request: ApplicationRequest) -> EligibilityVerdict | None:
    if request.birth_date is None:
        return insufficient_data("applicant birth date")
    if request.existing_licenses is None:
        return insufficient_data("existing-license snapshot")
    return None


def check_application_category(
    catalog: CategoryCatalog, category: LicenseCategory, application_type: ApplicationType,
) -> EligibilityVerdict | None:
    """Learner's-permit codes only for learner applications, full categories otherwise."""
    category = catalog.lookup(category).category
    wants_learner = application_type in LEARNER_APPLICATIONS
    if wants_learner != is_learner_code(category):
        kind = "learner's permit code" if wants_learner else "full license category"
        return EligibilityVerdict.invalid(
            VerdictCode.INVALID_APPLICATION_CATEGORY,
            f"{application_type.value} applications require a {kind}; "
            f"got {category.value}",
            invalid_combinations=[f"{application_type.value}:{category.value}"],
        )
    return None


def evaluate_application(
    catalog: CategoryCatalog, request: ApplicationRequest,
) -> EligibilityAssessment:
    """Run the full rule chain for one application."""
    verdict = check_required_data(request)
    if verdict is None:
        held = valid_system_categories(request.existing_licenses)
        verdict = (
            check_application_category(catalog, request.category, request.application_type)
            or check_age(catalog, request.birth_date, request.category, request.evaluation_date)
            or check_not_already_held(catalog, request.category, held)
            or check_prerequisites(catalog, request.category, held)
            or _check_permit(catalog, request, request.category)
        )
    if verdict is not None:
        return EligibilityAssessment(verdict=verdict)

    age = calculate_age(request.birth_date, request.evaluation_date)
    return EligibilityAssessment(
        verdict=EligibilityVerdict.ok("Application validation passed"),
        authorized_categories=sort_categories(catalog.closure(request.category)),
        medical=is_medical_required(catalog, request.category, age),
        restrictions=_restrictions(request),
    )


def evaluate_categories(
    catalog: CategoryCatalog,
    request: ApplicationRequest,
    categories: Iterable[LicenseCategory],
) -> dict[LicenseCategory, EligibilityAssessment]:
    """Evaluate the same applicant against several candidate categories."""
    return {
        category: evaluate_application(catalog, _with_category(request, category))
        for category in sort_categories(categories)
    }


@dataclass(frozen=True)
class SelectionAssessment:
    """Outcome of applying for several categories together."""
    verdict: EligibilityVerdict
    categories: tuple[LicenseCategory, ...] = ()
    authorized_categories: tuple[LicenseCategory, ...] = ()
    medical: dict[LicenseCategory, MedicalRequirement] = field(default_factory=dict)
    restrictions: tuple[RestrictionCode, ...] = ()

    @property
    def is_valid(self) -> bool:
        return self.verdict.is_valid

    def to_dict(self) -> dict:
        return {
            "verdict": self.verdict.to_dict(),
            "categories": [c.value for c in self.categories],
            "authorized_categories": [c.value for c in self.authorized_categories],
            "medical": {c.value: m.to_dict() for c, m in self.medical.items()},
            "restrictions": [r.value for r in self.restrictions],
        }


def evaluate_selection(
    catalog: CategoryCatalog,
    request: ApplicationRequest,
    categories: Iterable[LicenseCategory | str],
) -> SelectionAssessment:
    """Evaluate one application covering several categories at once.

    Selected categories satisfy each other's prerequisites, and every age
    violation in the selection is reported together. request.category is
    ignored.
    """
    selected = sort_categories(coerce_category(c) for c in categories)
    verdict = check_required_data(request) if selected else insufficient_data("selected categories")
    if verdict is None:
        held = valid_system_categories(request.existing_licenses)
        verdict = (
            _first(
                check_application_category(catalog, c, request.application_type)
                for c in selected
            )
            or check_ages(catalog, request.birth_date, selected, request.evaluation_date)
            or check_selection_not_held(catalog, selected, held)
            or check_selection_prerequisites(catalog, selected, held)
            or _first(_check_permit(catalog, request, c) for c in selected)
        )
    if verdict is not None:
        return SelectionAssessment(verdict=verdict, categories=selected)

    age = calculate_age(request.birth_date, request.evaluation_date)
    return SelectionAssessment(
        verdict=EligibilityVerdict.ok("Application validation passed"),
        categories=selected,
        authorized_categories=sort_categories(catalog.authorized_categories(selected)),
        medical={c: is_medical_required(catalog, c, age) for c in selected},
        restrictions=_restrictions(request),
    )


def _check_permit(
    catalog: CategoryCatalog, request: ApplicationRequest, category: LicenseCategory,
) -> EligibilityVerdict | None:
    if request.application_type != ApplicationType.NEW_LICENSE:
        return None
    permit = request.learner_permit or system_learner_permit(
        catalog, category, request.existing_licenses or (), request.evaluation_date,
    )
    return check_learner_permit(catalog, category, permit, request.evaluation_date)


def _with_category(request: ApplicationRequest, category: LicenseCategory) -> ApplicationRequest:
    return replace(request, category=category)


def _restrictions(request: ApplicationRequest) -> tuple[RestrictionCode, ...]:
    if request.transmission is None:
        return ()
    return calculate_restrictions(
        request.transmission,
        request.has_disability_modification,
        request.vision_flags,
    )


def _first(verdicts: Iterable[EligibilityVerdict | None]) -> EligibilityVerdict | None:
    return next((v for v in verdicts if v is not None), None)
