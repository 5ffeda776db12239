"""Restriction Calculation: derive restriction codes from applicant conditions.

Invariants:
    - PURE and total: always returns, never raises
    - Emission order is fixed: AUTOMATIC_ONLY, MODIFIED_VEHICLE_ONLY,
      CORRECTIVE_LENSES, VISION_RESTRICTED
    - Unrecognized vision flags are ignored, not rejected
    - Vehicle codes and driver codes split deterministically into LicenseRestrictions
"""

from collections.abc import Iterable

from license_engine.core.domain_types import RestrictionCode, TransmissionType
from license_engine.core.licenses import LicenseRestrictions


VISION_CODES: tuple[RestrictionCode, ...] = (
    RestrictionCode.CORRECTIVE_LENSES,
    RestrictionCode.VISION_RESTRICTED,
)
VEHICLE_CODES: frozenset[RestrictionCode] = frozenset({
    RestrictionCode.AUTOMATIC_ONLY,
    RestrictionCode.MODIFIED_VEHICLE_ONLY,
})


def normalize_vision_flag(flag: object) -> RestrictionCode | None:
    """Map a caller-supplied flag ("corrective lenses", "VISION_RESTRICTED", ...) to a code."""
    if isinstance(flag, RestrictionCode):
        return flag if flag in VISION_CODES else None
    if not isinstance(flag, str):
        return None
    key = flag.strip().upper().replace("-", "_").replace(" ", "_")
    for code in VISION_CODES:
        if code.value == key:
            return code
    return None


def calculate_restrictions(
    transmission: TransmissionType | str,
    has_disability_modification: bool = False,
    vision_flags: Iterable[object] = (),
) -> tuple[RestrictionCode, ...]:
    codes: list[RestrictionCode] = []
    if str(getattr(transmission, "value", transmission)).upper() == TransmissionType.AUTOMATIC.value:
        codes.append(RestrictionCode.AUTOMATIC_ONLY)
    if has_disability_modification:
        codes.append(RestrictionCode.MODIFIED_VEHICLE_ONLY)

    present = {normalize_vision_flag(flag) for flag in vision_flags}
    codes.extend(code for code in VISION_CODES if code in present)
    return tuple(codes)


def split_restrictions(codes: Iterable[RestrictionCode]) -> LicenseRestrictions:
    """Structured driver/vehicle form of a computed code list, order preserved."""
    codes = tuple(codes)
    return LicenseRestrictions(
        driver=tuple(c.value for c in codes if c not in VEHICLE_CODES),
        vehicle=tuple(c.value for c in codes if c in VEHICLE_CODES),
    )
