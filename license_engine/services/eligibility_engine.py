"""Eligibility Engine: the facade callers use, wiring settings, catalog and logging.

Invariants:
    - The catalog is built once per engine and never mutated; engines are safe to share
    - Catalog faults surface at construction (fail fast), never mid-evaluation
    - Every decision delegates to a pure core function; this layer only logs

Design Decisions:
    - Catalog and Settings injectable for tests; defaults come from get_settings()
    - get_engine() cached like get_settings(): one engine per process, and
      the one place logging is configured from Settings
"""

import logging
from collections.abc import Iterable
from datetime import date
from functools import lru_cache

from license_engine.config import Settings, get_settings
from license_engine.core.capture_session import (
    CaptureSession,
    CaptureUpdate,
    add_entry,
    edit_entry,
    remove_entry,
    revalidate,
    validate_capture_session,
    validate_for_authorization,
)
from license_engine.core.category_catalog import CategoryCatalog, build_default_catalog
from license_engine.core.domain_types import (
    DuplicatePolicy,
    EntryId,
    LicenseCategory,
    RestrictionCode,
    TransmissionType,
)
from license_engine.core.eligibility import (
    ApplicationRequest,
    EligibilityAssessment,
    SelectionAssessment,
    evaluate_application,
    evaluate_categories,
    evaluate_selection,
)
from license_engine.core.license_overview import LicenseOverview, summarize_existing_licenses
from license_engine.core.licenses import ActiveLicense, CapturedLicenseEntry
from license_engine.core.medical import MedicalRequirement, is_medical_required
from license_engine.core.restrictions import calculate_restrictions
from license_engine.infrastructure.catalog_loader import load_catalog
from license_engine.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


class LicenseEligibilityEngine:
    """Eligibility, capture validation and supplementary rule lookups."""

    def __init__(
        self, catalog: CategoryCatalog | None = None, settings: Settings | None = None,
    ):
        self.settings = settings or get_settings()
        self.catalog = catalog or self._build_catalog()

    def _build_catalog(self) -> CategoryCatalog:
        path = self.settings.catalog_path
        if path:
            return load_catalog(path)
        logger.info("Using built-in category catalog", extra={"catalog_source": "default"})
        return build_default_catalog()

    # ─── Applications ────────────────────────────────────────────

    def evaluate_application(self, request: ApplicationRequest) -> EligibilityAssessment:
        assessment = evaluate_application(self.catalog, request)
        verdict = assessment.verdict
        if verdict.is_valid:
            logger.debug(
                "Application accepted for category %s", request.category.value,
                extra={
                    "category": request.category.value,
                    "application_type": request.application_type.value,
                    "verdict_code": verdict.code,
                },
            )
        else:
            logger.info(
                "Application rejected: %s", verdict.message,
                extra={
                    "category": request.category.value,
                    "application_type": request.application_type.value,
                    "verdict_code": verdict.code,
                },
            )
        return assessment

    def evaluate_categories(
        self, request: ApplicationRequest, categories: Iterable[LicenseCategory],
    ) -> dict[LicenseCategory, EligibilityAssessment]:
        return evaluate_categories(self.catalog, request, categories)

    def evaluate_selection(
        self, request: ApplicationRequest, categories: Iterable[LicenseCategory | str],
    ) -> SelectionAssessment:
        assessment = evaluate_selection(self.catalog, request, categories)
        verdict = assessment.verdict
        extra = {
            "categories": assessment.categories,
            "application_type": request.application_type.value,
            "verdict_code": verdict.code,
        }
        if verdict.is_valid:
            logger.debug("Selection accepted", extra=extra)
        else:
            extra["missing_prerequisites"] = verdict.missing_prerequisites or None
            logger.info("Selection rejected: %s", verdict.message, extra=extra)
        return assessment

    def summarize_existing_licenses(
        self, existing: Iterable[ActiveLicense], on: date,
    ) -> LicenseOverview:
        overview = summarize_existing_licenses(self.catalog, existing, on)
        if overview.overlapping_authorizations:
            logger.warning(
                "Existing licenses authorize the same categories more than once",
                extra={"overlapping_authorizations": overview.overlapping_authorizations},
            )
        return overview

    # ─── Capture sessions ────────────────────────────────────────

    def new_capture_session(
        self,
        existing_licenses: Iterable[ActiveLicense] | None,
        birth_date: date | None = None,
        evaluation_date: date | None = None,
    ) -> CaptureSession:
        return CaptureSession(
            entries=(),
            existing_licenses=None if existing_licenses is None else tuple(existing_licenses),
            birth_date=birth_date,
            evaluation_date=evaluation_date,
            duplicate_policy=self.settings.capture_duplicate_policy,
        )

    def validate_capture_session(
        self,
        entries: Iterable[CapturedLicenseEntry],
        existing_licenses: Iterable[ActiveLicense] | None,
        duplicate_policy: DuplicatePolicy | None = None,
        birth_date: date | None = None,
        on: date | None = None,
    ) -> dict[str, list[str]]:
        errors = validate_capture_session(
            self.catalog,
            entries,
            existing_licenses,
            duplicate_policy or self.settings.capture_duplicate_policy,
            birth_date,
            on,
        )
        self._log_capture_errors(errors)
        return errors

    def revalidate(self, session: CaptureSession) -> CaptureUpdate:
        return self._logged(revalidate(self.catalog, session))

    def add_entry(self, session: CaptureSession, entry: CapturedLicenseEntry) -> CaptureUpdate:
        return self._logged(add_entry(self.catalog, session, entry))

    def edit_entry(self, session: CaptureSession, entry_id: EntryId, **changes) -> CaptureUpdate:
        return self._logged(edit_entry(self.catalog, session, entry_id, **changes))

    def remove_entry(self, session: CaptureSession, entry_id: EntryId) -> CaptureUpdate:
        return self._logged(remove_entry(self.catalog, session, entry_id))

    def validate_for_authorization(self, session: CaptureSession) -> list[str]:
        """Batch-level errors plus completeness errors, in that order."""
        update = self.revalidate(session)
        errors = [
            message
            for entry_errors in update.errors.values()
            for message in entry_errors
        ]
        return errors + validate_for_authorization(session)

    def _logged(self, update: CaptureUpdate) -> CaptureUpdate:
        self._log_capture_errors(update.errors)
        return update

    def _log_capture_errors(self, errors: dict[str, list[str]]) -> None:
        for entry_id, messages in errors.items():
            logger.info(
                "Captured license rejected: %s", "; ".join(messages),
                extra={"entry_id": entry_id},
            )

    # ─── Supplementary lookups ───────────────────────────────────

    def is_medical_required(self, category: LicenseCategory, age: int) -> MedicalRequirement:
        return is_medical_required(self.catalog, category, age)

    def calculate_restrictions(
        self,
        transmission: TransmissionType,
        has_disability_modification: bool = False,
        vision_flags: Iterable[str] = (),
    ) -> tuple[RestrictionCode, ...]:
        return calculate_restrictions(transmission, has_disability_modification, vision_flags)

    def closure(self, category: LicenseCategory) -> frozenset[LicenseCategory]:
        return self.catalog.closure(category)

    def has_authorization_for_category(
        self, category: LicenseCategory, existing: Iterable[LicenseCategory],
    ) -> bool:
        return self.catalog.has_authorization_for_category(category, existing)


@lru_cache
def get_engine() -> LicenseEligibilityEngine:
    """Process-wide engine; configures engine logging from settings first."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    return LicenseEligibilityEngine(settings=settings)
