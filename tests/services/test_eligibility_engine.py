"""Eligibility Engine: tests for the service facade.

Tests cover:
    - engine builds the default catalog or loads one from settings.catalog_path
    - evaluations delegate to the core and log rejections
    - selections and the existing-license overview log their outcome
    - get_engine configures engine logging from settings
    - capture-session operations apply the configured duplicate policy
    - validate_for_authorization combines batch and completeness errors
"""

import logging
from datetime import date

import pytest

from license_engine.config import Settings
from license_engine.core.capture_session import CaptureSession
from license_engine.core.domain_types import (
    EntryId,
    LicenseCategory,
    RestrictionCode,
    TransmissionType,
)
from license_engine.core.eligibility import ApplicationRequest
from license_engine.core.errors import InvalidCatalogError
from license_engine.core.licenses import ActiveLicense, CapturedLicenseEntry
from license_engine.core.verdict import VerdictCode
from license_engine.infrastructure.catalog_loader import dump_catalog
from license_engine.infrastructure.observability import ENGINE_LOGGER, JSONFormatter
from license_engine.services.eligibility_engine import LicenseEligibilityEngine, get_engine

LC = LicenseCategory
ON = date(2024, 6, 1)


def _make_engine(**settings) -> LicenseEligibilityEngine:
    return LicenseEligibilityEngine(settings=Settings(_env_file=None, **settings))


def _entry(entry_id: str, category: LicenseCategory, **fields) -> CapturedLicenseEntry:
    return CapturedLicenseEntry(id=EntryId(entry_id), category=category, **fields)


# ─── construction ────────────────────────────────────────────────

def test_default_catalog():
    engine = _make_engine()
    assert engine.closure(LC.A) == {LC.A, LC.A2, LC.A1}


def test_catalog_loaded_from_settings_path(catalog, tmp_path):
    path = dump_catalog(catalog, tmp_path / "catalog.json")
    engine = _make_engine(catalog_path=str(path))
    assert engine.closure(LC.CE) == catalog.closure(LC.CE)


def test_bad_catalog_path_fails_fast(tmp_path):
    with pytest.raises(InvalidCatalogError):
        _make_engine(catalog_path=str(tmp_path / "missing.json"))


def test_injected_catalog_is_used(catalog):
    engine = LicenseEligibilityEngine(catalog=catalog, settings=Settings(_env_file=None))
    assert engine.catalog is catalog


def test_get_engine_is_cached():
    get_engine.cache_clear()
    try:
        assert get_engine() is get_engine()
    finally:
        get_engine.cache_clear()


def test_get_engine_configures_logging(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("LOG_FORMAT", "text")
    get_engine.cache_clear()
    try:
        get_engine()
    finally:
        get_engine.cache_clear()
    engine_logger = logging.getLogger(ENGINE_LOGGER)
    assert engine_logger.level == logging.DEBUG
    installed = [h for h in engine_logger.handlers if getattr(h, "_license_engine", False)]
    assert len(installed) == 1
    assert not isinstance(installed[0].formatter, JSONFormatter)


# ─── applications ────────────────────────────────────────────────

def test_evaluate_application_logs_rejection(caplog):
    engine = _make_engine()
    request = ApplicationRequest(
        category=LC.C, birth_date=date(1990, 1, 1), existing_licenses=(), evaluation_date=ON,
    )
    with caplog.at_level(logging.INFO, logger="license_engine.services.eligibility_engine"):
        assessment = engine.evaluate_application(request)
    assert assessment.verdict.code == VerdictCode.MISSING_PREREQUISITES
    record = next(r for r in caplog.records if r.getMessage().startswith("Application rejected"))
    assert record.category == "C"
    assert record.verdict_code == VerdictCode.MISSING_PREREQUISITES


def test_evaluate_selection_logs_rejection(caplog):
    engine = _make_engine()
    request = ApplicationRequest(
        category=LC.B, birth_date=date(1990, 1, 1), existing_licenses=(), evaluation_date=ON,
    )
    assert engine.evaluate_selection(request, ["B", "C"]).verdict.code == VerdictCode.LEARNER_PERMIT_MISSING
    with caplog.at_level(logging.INFO, logger="license_engine.services.eligibility_engine"):
        assessment = engine.evaluate_selection(request, [LC.C, LC.CE])
    assert assessment.verdict.code == VerdictCode.MISSING_PREREQUISITES
    record = next(r for r in caplog.records if r.getMessage().startswith("Selection rejected"))
    assert record.categories == (LC.C, LC.CE)
    assert record.missing_prerequisites == (LC.B,)


def test_overview_warns_on_overlap(caplog):
    engine = _make_engine()
    existing = [ActiveLicense(frozenset({LC.A})), ActiveLicense(frozenset({LC.A1}))]
    with caplog.at_level(logging.WARNING, logger="license_engine.services.eligibility_engine"):
        overview = engine.summarize_existing_licenses(existing, ON)
    assert overview.overlapping_authorizations == (LC.A1,)
    record = next(r for r in caplog.records if r.levelno == logging.WARNING)
    assert record.overlapping_authorizations == (LC.A1,)


def test_supplementary_lookups():
    engine = _make_engine()
    assert engine.is_medical_required(LC.D1, 30).required
    assert engine.calculate_restrictions(TransmissionType.AUTOMATIC) == (RestrictionCode.AUTOMATIC_ONLY,)
    assert engine.has_authorization_for_category(LC.A1, [LC.A])


# ─── capture sessions ────────────────────────────────────────────

def test_configured_duplicate_policy_applies():
    engine = _make_engine(capture_duplicate_policy="closure")
    errors = engine.validate_capture_session([_entry("e1", LC.B1)], [ActiveLicense(frozenset({LC.B}))])
    assert "e1" in errors
    assert _make_engine().validate_capture_session(
        [_entry("e1", LC.B1)], [ActiveLicense(frozenset({LC.B}))],
    ) == {}


def test_new_capture_session_carries_policy():
    session = _make_engine(capture_duplicate_policy="closure").new_capture_session([], evaluation_date=ON)
    assert session.duplicate_policy == "closure"
    assert session.existing_licenses == ()


def test_session_mutations_through_engine(caplog):
    engine = _make_engine()
    session = engine.new_capture_session([])
    with caplog.at_level(logging.INFO, logger="license_engine.services.eligibility_engine"):
        update = engine.add_entry(session, _entry("e1", LC.C))
    assert update.errors == {"e1": ["Category C requires: B"]}
    assert any(getattr(r, "entry_id", None) == "e1" for r in caplog.records)

    update = engine.add_entry(update.session, _entry("e2", LC.B))
    assert update.is_valid
    update = engine.edit_entry(update.session, EntryId("e2"), verified=True)
    assert update.session.entries[1].verified
    update = engine.remove_entry(update.session, EntryId("e1"))
    assert [e.id for e in update.session.entries] == ["e2"]


def test_edit_entry_with_category_code():
    engine = _make_engine()
    update = engine.add_entry(engine.new_capture_session([]), _entry("e1", LC.B))
    update = engine.add_entry(update.session, _entry("e2", LC.B1))
    update = engine.edit_entry(update.session, EntryId("e2"), category="C")
    assert update.is_valid
    assert update.session.entries[1].category is LC.C


def test_validate_for_authorization_combines_errors():
    engine = _make_engine()
    session = CaptureSession(entries=(_entry("e1", LC.C, issue_date=date(2010, 1, 1), verified=True),))
    assert engine.validate_for_authorization(session) == ["Category C requires: B"]

    ready = CaptureSession(entries=(
        _entry("e1", LC.B, issue_date=date(2010, 1, 1), verified=True),
        _entry("e2", LC.C, issue_date=date(2012, 1, 1), verified=True),
    ))
    assert engine.validate_for_authorization(ready) == []
