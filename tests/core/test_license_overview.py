"""License Overview: tests for the summary of what existing licenses allow next.

Tests cover:
    - authorized closure, can-apply-for and upgrade options from valid records
    - renewal due within six months, expired records included
    - overlapping authorizations across records
    - learner's permit on record
"""

from datetime import date

from license_engine.core.domain_types import LicenseCategory, full_license_categories
from license_engine.core.license_overview import summarize_existing_licenses
from license_engine.core.licenses import ActiveLicense

LC = LicenseCategory
ON = date(2024, 6, 1)


def _make_license(*categories, is_valid=True, expiry_date=date(2030, 1, 1)) -> ActiveLicense:
    return ActiveLicense(
        categories=frozenset(categories), is_valid=is_valid, expiry_date=expiry_date,
    )


def test_empty_history(catalog):
    overview = summarize_existing_licenses(catalog, [], ON)
    assert not overview.has_active_licenses
    assert not overview.has_learners_permit
    assert overview.can_apply_for == full_license_categories()
    assert overview.upgrade_options == (LC.A1, LC.B1, LC.B)
    assert overview.renewal_due == ()


def test_light_vehicle_holder(catalog):
    overview = summarize_existing_licenses(catalog, [_make_license(LC.B)], ON)
    assert overview.authorized_categories == (LC.B1, LC.B)
    assert LC.B not in overview.can_apply_for
    assert LC.B1 not in overview.can_apply_for
    assert overview.upgrade_options == (LC.A1, LC.B2, LC.BE, LC.C1, LC.C, LC.D1)


def test_invalid_records_are_ignored(catalog):
    overview = summarize_existing_licenses(catalog, [_make_license(LC.B, is_valid=False)], ON)
    assert overview.authorized_categories == ()


def test_renewal_due(catalog):
    existing = [
        _make_license(LC.B, expiry_date=date(2024, 9, 1)),
        _make_license(LC.A, expiry_date=date(2026, 1, 1)),
    ]
    assert summarize_existing_licenses(catalog, existing, ON).renewal_due == (LC.B,)


def test_overlapping_authorizations(catalog):
    existing = [_make_license(LC.A), _make_license(LC.A1)]
    assert summarize_existing_licenses(catalog, existing, ON).overlapping_authorizations == (LC.A1,)


def test_learner_permit_on_record(catalog):
    permit = _make_license(LC.LEARNERS_2)
    overview = summarize_existing_licenses(catalog, [permit], ON)
    assert overview.learner_permit is permit
    assert overview.to_dict()["learner_permit"] == ["2"]
