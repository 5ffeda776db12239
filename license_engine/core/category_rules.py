"""Category Rules: the static per-category rule table and superseding edges.

Invariants:
    - Exactly one CategoryRule per LicenseCategory member
    - Rules are frozen; the tables below are read-only configuration
    - DEFAULT_SUPERSEDING_EDGES lists DIRECT edges only; transitive closure is
      computed by CategoryCatalog, never spelled out here
    - Learner's-permit codes supersede nothing; their reach is LEARNER_PERMIT_SCOPE
"""

from dataclasses import dataclass, field

from license_engine.core.domain_types import LicenseCategory as LC


@dataclass(frozen=True)
class CategoryRule:
    """Per-category eligibility rule."""
    category: LC
    min_age: int
    prerequisites: frozenset[LC] = field(default_factory=frozenset)
    vehicle_types: tuple[str, ...] = ()
    allows_learners_permit: bool = False
    requires_medical_always: bool = False
    requires_medical_60_plus: bool = False
    description: str = ""


def _rule(
    category: LC, min_age: int, prerequisites: tuple[LC, ...] = (),
    vehicle_types: tuple[str, ...] = (), *, learners: bool = False,
    medical_always: bool = False, medical_60: bool = False, description: str = "",
) -> CategoryRule:
    return CategoryRule(
        category=category,
        min_age=min_age,
        prerequisites=frozenset(prerequisites),
        vehicle_types=vehicle_types,
        allows_learners_permit=learners,
        requires_medical_always=medical_always,
        requires_medical_60_plus=medical_60,
        description=description,
    )


DEFAULT_CATEGORY_RULES: dict[LC, CategoryRule] = {
    # Motorcycles
    LC.A1: _rule(
        LC.A1, 16, (), ("moped", "motorcycle_125cc"), learners=True,
        description="Small motorcycles and mopeds (<125 cc)",
    ),
    LC.A2: _rule(
        LC.A2, 18, (LC.A1,), ("motorcycle_35kw",), learners=True,
        description="Mid-range motorcycles (power-limited <=35 kW)",
    ),
    LC.A: _rule(
        LC.A, 18, (LC.A2,), ("motorcycle",), learners=True,
        description="Unlimited motorcycles (no power restriction)",
    ),
    # Light vehicles
    LC.B1: _rule(
        LC.B1, 16, (), ("motor_tricycle", "light_quadricycle"), learners=True,
        description="Light quadricycles (motorized tricycles, quadricycles)",
    ),
    LC.B: _rule(
        LC.B, 18, (), ("passenger_car", "light_goods_vehicle"), learners=True,
        description="Standard passenger cars and light goods vehicles (<=3,500 kg, <=8 seats)",
    ),
    LC.B2: _rule(
        LC.B2, 18, (LC.B,), ("taxi", "commercial_passenger_vehicle"),
        medical_60=True,
        description="Taxis or commercial passenger vehicles",
    ),
    LC.BE: _rule(
        LC.BE, 18, (LC.B,), ("passenger_car_with_trailer",),
        description="B vehicles towing trailers (>750 kg trailer)",
    ),
    # Heavy goods vehicles
    LC.C1: _rule(
        LC.C1, 18, (LC.B,), ("medium_goods_vehicle",), medical_60=True,
        description="Medium goods vehicles (3,500-7,500 kg)",
    ),
    LC.C: _rule(
        LC.C, 21, (LC.B,), ("heavy_goods_vehicle",), medical_60=True,
        description="Heavy goods vehicles (>7,500 kg)",
    ),
    LC.C1E: _rule(
        LC.C1E, 21, (LC.C1,), ("medium_goods_vehicle_with_trailer",), medical_60=True,
        description="C1 vehicles with heavy trailer (>750 kg)",
    ),
    LC.CE: _rule(
        LC.CE, 21, (LC.C,), ("heavy_combination",), medical_60=True,
        description="Full heavy combinations (tractors + large/semi-trailers)",
    ),
    # Passenger transport
    LC.D1: _rule(
        LC.D1, 21, (LC.B,), ("minibus",), medical_always=True, medical_60=True,
        description="Small buses (<=16 passengers)",
    ),
    LC.D: _rule(
        LC.D, 24, (LC.D1,), ("bus", "coach"), medical_always=True, medical_60=True,
        description="Standard buses/coaches (>16 passengers)",
    ),
    LC.D2: _rule(
        LC.D2, 24, (LC.D,), ("articulated_bus",), medical_always=True, medical_60=True,
        description="Specialized public-transport vehicles (articulated buses)",
    ),
    # Learner's permits
    LC.LEARNERS_1: _rule(
        LC.LEARNERS_1, 16, (), ("motorcycle", "motor_tricycle", "motor_quadricycle"),
        learners=True,
        description=(
            "Learner's permit for motor cycles, motor tricycles and motor "
            "quadricycles with engine of any capacity"
        ),
    ),
    LC.LEARNERS_2: _rule(
        LC.LEARNERS_2, 17, (), ("light_motor_vehicle",), learners=True,
        description=(
            "Learner's permit for light motor vehicles, other than motor "
            "cycles, motor tricycles or motor quadricycles"
        ),
    ),
    LC.LEARNERS_3: _rule(
        LC.LEARNERS_3, 18, (), ("motor_vehicle",), learners=True,
        description=(
            "Learner's permit for any motor vehicle other than motor cycles, "
            "motor tricycles or motor quadricycles"
        ),
    ),
}


# Direct "holding X authorizes Y" edges. Must stay acyclic.
# B -> B2 and A1 -> A2 are absent: each would close a cycle
# with B2 -> B and A2 -> A1.
DEFAULT_SUPERSEDING_EDGES: dict[LC, frozenset[LC]] = {
    LC.A: frozenset({LC.A2}),
    LC.A2: frozenset({LC.A1}),
    LC.B: frozenset({LC.B1}),
    LC.B2: frozenset({LC.B}),
    LC.BE: frozenset({LC.B, LC.B2}),
    LC.C1: frozenset({LC.B, LC.B2}),
    LC.C: frozenset({LC.C1}),
    LC.C1E: frozenset({LC.C1, LC.C, LC.BE}),
    LC.CE: frozenset({LC.C, LC.BE}),
    LC.D1: frozenset({LC.B, LC.B2, LC.C1, LC.C}),
    LC.D: frozenset({LC.D1}),
    LC.D2: frozenset({LC.D, LC.CE, LC.C1E, LC.BE}),
}


# Full categories a learner's permit code prepares for.
LEARNER_PERMIT_SCOPE: dict[LC, frozenset[LC]] = {
    LC.LEARNERS_1: frozenset({LC.A1, LC.A2, LC.A}),
    LC.LEARNERS_2: frozenset({LC.B1, LC.B}),
    LC.LEARNERS_3: frozenset({LC.B, LC.C1, LC.C, LC.D1, LC.D, LC.D2}),
}
