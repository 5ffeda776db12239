"""Holdings Enforcement: tests for duplicate-authorization and prerequisite rules.

Tests cover:
    - prerequisites satisfied directly or through superseding closures
    - missing prerequisites reported in canonical order
    - already-authorized categories rejected as duplicates, not as missing prerequisites
    - suggest_prerequisites and upgrade_options advisory helpers
    - whole-selection checks: selected categories count as themselves only
"""

from license_engine.core.domain_types import LicenseCategory
from license_engine.core.enforce_holdings import (
    check_not_already_held,
    check_prerequisites,
    check_selection_not_held,
    check_selection_prerequisites,
    missing_prerequisites,
    suggest_prerequisites,
    upgrade_options,
    validate_not_already_held,
    validate_prerequisites,
)
from license_engine.core.verdict import VerdictCode

LC = LicenseCategory


# ─── validate_prerequisites ──────────────────────────────────────

def test_c_without_b_is_missing_prerequisite(catalog):
    verdict = validate_prerequisites(catalog, LC.C, [])
    assert not verdict.is_valid
    assert verdict.code == VerdictCode.MISSING_PREREQUISITES
    assert verdict.missing_prerequisites == (LC.B,)
    assert verdict.message == "Category C requires Category B"


def test_c_with_b_is_valid(catalog):
    assert validate_prerequisites(catalog, LC.C, [LC.B]).is_valid


def test_prerequisite_met_through_superseding(catalog):
    assert check_prerequisites(catalog, LC.C, [LC.C1]) is None
    assert check_prerequisites(catalog, LC.A2, [LC.A]) is None


def test_chain_reports_direct_prerequisite_only(catalog):
    assert missing_prerequisites(catalog, LC.D2, [LC.B]) == (LC.D,)
    assert missing_prerequisites(catalog, LC.D, [LC.B]) == (LC.D1,)


# ─── validate_not_already_held ───────────────────────────────────

def test_category_held_directly_is_duplicate(catalog):
    verdict = validate_not_already_held(catalog, LC.B, [LC.B])
    assert not verdict.is_valid
    assert verdict.code == VerdictCode.CATEGORY_ALREADY_HELD
    assert verdict.invalid_combinations == ("Duplicate category: B",)


def test_category_authorized_by_superseding_is_duplicate(catalog):
    assert check_not_already_held(catalog, LC.A1, [LC.A]) is not None
    assert check_not_already_held(catalog, LC.B, [LC.CE]) is not None


def test_new_category_is_not_held(catalog):
    verdict = validate_not_already_held(catalog, LC.C, [LC.B])
    assert verdict.is_valid
    assert verdict.missing_prerequisites == ()


# ─── advisory helpers ────────────────────────────────────────────

def test_suggest_prerequisites_for_lone_selection(catalog):
    assert suggest_prerequisites(catalog, [LC.C]) == (LC.B,)
    assert suggest_prerequisites(catalog, [LC.D]) == (LC.D1,)


def test_suggest_prerequisites_satisfied_within_selection(catalog):
    assert suggest_prerequisites(catalog, [LC.B, LC.C]) == ()
    assert suggest_prerequisites(catalog, [LC.D1, LC.D]) == ()
    assert suggest_prerequisites(catalog, [LC.C1E, LC.A]) == (LC.A2, LC.C1)


def test_upgrade_options_without_licenses(catalog):
    assert upgrade_options(catalog, []) == (LC.A1, LC.B1, LC.B)


def test_upgrade_options_with_b(catalog):
    assert upgrade_options(catalog, [LC.B]) == (LC.A1, LC.B2, LC.BE, LC.C1, LC.C, LC.D1)


# ─── whole selection ─────────────────────────────────────────────

def test_selected_prerequisite_counts(catalog):
    assert check_selection_prerequisites(catalog, [LC.B, LC.C, LC.CE], []) is None


def test_selected_sibling_closure_does_not_count(catalog):
    verdict = check_selection_prerequisites(catalog, [LC.C, LC.CE], [])
    assert verdict.code == VerdictCode.MISSING_PREREQUISITES
    assert verdict.missing_prerequisites == (LC.B,)


def test_selection_prerequisites_use_existing_closures(catalog):
    assert check_selection_prerequisites(catalog, [LC.C1E], [LC.C]) is None


def test_selection_not_held_single_category_message(catalog):
    verdict = check_selection_not_held(catalog, [LC.B1, LC.C], [LC.B])
    assert verdict.code == VerdictCode.CATEGORY_ALREADY_HELD
    assert verdict.message.startswith("Category B1 is already authorized")


def test_selection_not_held_passes_for_new_categories(catalog):
    assert check_selection_not_held(catalog, [LC.C, LC.CE], [LC.B]) is None
