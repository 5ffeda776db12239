"""Learner's Permit Linkage: tests for the permit check on new full licenses.

Tests cover:
    - only categories allowing a learner's permit require one
    - missing, invalid, expired, unverified and non-covering permits each get their own code
    - every failure names the learner code that would cover the target
    - expiry on the evaluation date still counts as current
    - system_learner_permit picks the record that covers the target
"""

from datetime import date

from license_engine.core.domain_types import LicenseCategory
from license_engine.core.learner_permit import (
    check_learner_permit,
    permit_reach,
    required_learner_code,
    requires_learner_permit,
    system_learner_permit,
    validate_learner_permit,
)
from license_engine.core.licenses import ActiveLicense, ExternalLicenseDetails
from license_engine.core.verdict import VerdictCode

LC = LicenseCategory
ON = date(2024, 6, 1)


def _make_permit(code=LC.LEARNERS_2, expiry=date(2024, 12, 31), is_valid=True) -> ActiveLicense:
    return ActiveLicense(categories=frozenset({code}), is_valid=is_valid, expiry_date=expiry)


def _make_external(code=LC.LEARNERS_2, verified=False) -> ExternalLicenseDetails:
    return ExternalLicenseDetails(
        categories=frozenset({code}), expiry_date=date(2024, 12, 31), verified_by_clerk=verified,
    )


# ─── applicability ───────────────────────────────────────────────

def test_requires_learner_permit(catalog):
    assert requires_learner_permit(catalog, LC.B)
    assert requires_learner_permit(catalog, LC.A)
    assert not requires_learner_permit(catalog, LC.C)
    assert not requires_learner_permit(catalog, LC.LEARNERS_1)


def test_required_learner_code(catalog):
    assert required_learner_code(catalog, LC.A) == LC.LEARNERS_1
    assert required_learner_code(catalog, LC.B) == LC.LEARNERS_2
    assert required_learner_code(catalog, LC.B1) == LC.LEARNERS_2


def test_category_without_permit_rule_passes_without_permit(catalog):
    assert check_learner_permit(catalog, LC.C, None, ON) is None
    verdict = validate_learner_permit(catalog, LC.C, None, ON)
    assert verdict.is_valid
    assert verdict.message == "No learner's permit required for this category"


# ─── failures ────────────────────────────────────────────────────

def test_missing_permit(catalog):
    verdict = check_learner_permit(catalog, LC.B, None, ON)
    assert verdict.code == VerdictCode.LEARNER_PERMIT_MISSING
    assert verdict.missing_prerequisites == (LC.LEARNERS_2,)


def test_invalidated_system_permit_counts_as_missing(catalog):
    verdict = check_learner_permit(catalog, LC.B, _make_permit(is_valid=False), ON)
    assert verdict.code == VerdictCode.LEARNER_PERMIT_MISSING


def test_expired_permit(catalog):
    verdict = check_learner_permit(catalog, LC.B, _make_permit(expiry=date(2024, 1, 1)), ON)
    assert verdict.code == VerdictCode.LEARNER_PERMIT_EXPIRED
    assert "2024-01-01" in verdict.message
    assert verdict.missing_prerequisites == (LC.LEARNERS_2,)


def test_permit_expiring_on_evaluation_date_is_current(catalog):
    assert check_learner_permit(catalog, LC.B, _make_permit(expiry=ON), ON) is None


def test_unverified_external_permit(catalog):
    verdict = check_learner_permit(catalog, LC.B, _make_external(verified=False), ON)
    assert verdict.code == VerdictCode.LEARNER_PERMIT_UNVERIFIED


def test_verified_external_permit(catalog):
    assert check_learner_permit(catalog, LC.B, _make_external(verified=True), ON) is None


def test_permit_for_other_vehicles_does_not_cover(catalog):
    verdict = check_learner_permit(catalog, LC.B, _make_permit(code=LC.LEARNERS_1), ON)
    assert verdict.code == VerdictCode.LEARNER_PERMIT_CATEGORY_MISMATCH
    assert verdict.missing_prerequisites == (LC.LEARNERS_2,)


# ─── coverage ────────────────────────────────────────────────────

def test_code_three_covers_light_vehicles(catalog):
    assert check_learner_permit(catalog, LC.B, _make_permit(code=LC.LEARNERS_3), ON) is None


def test_permit_reach_includes_closures(catalog):
    reach = permit_reach(catalog, _make_permit(code=LC.LEARNERS_1))
    assert {LC.A, LC.A2, LC.A1} <= reach
    assert LC.B not in reach


def test_valid_permit_message(catalog):
    verdict = validate_learner_permit(catalog, LC.A1, _make_permit(code=LC.LEARNERS_1), ON)
    assert verdict.is_valid
    assert verdict.message == "Valid learner's permit found"


# ─── permits on record ───────────────────────────────────────────

def test_system_permit_prefers_covering_record(catalog):
    motorcycle = _make_permit(LC.LEARNERS_1)
    light = _make_permit(LC.LEARNERS_2)
    existing = [ActiveLicense(categories=frozenset({LC.B1})), motorcycle, light]
    assert system_learner_permit(catalog, LC.B, existing, ON) is light
    assert system_learner_permit(catalog, LC.A, existing, ON) is motorcycle


def test_system_permit_falls_back_to_first_record(catalog):
    expired = _make_permit(expiry=date(2024, 1, 1))
    assert system_learner_permit(catalog, LC.B, [expired], ON) is expired


def test_no_system_permit(catalog):
    existing = [_make_permit(is_valid=False), ActiveLicense(categories=frozenset({LC.B}))]
    assert system_learner_permit(catalog, LC.B, existing, ON) is None
