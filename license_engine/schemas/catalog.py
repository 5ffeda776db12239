"""Catalog Schemas: serialized form of the rule table and superseding graph.

Invariants:
    - Field-level validation only (types, non-negative ages, unique categories);
      graph-level checks (cycles, completeness) belong to CategoryCatalog
    - from_catalog() emits categories in canonical order, so dumps are stable
    - from_catalog(c).to_catalog() reproduces identical rules, closures and scope
"""

from pydantic import BaseModel, Field, model_validator

from license_engine.core.category_catalog import CategoryCatalog
from license_engine.core.category_rules import CategoryRule
from license_engine.core.domain_types import LicenseCategory, sort_categories


class CategoryRuleDocument(BaseModel):
    """One rule as stored on disk."""
    category: LicenseCategory
    min_age: int = Field(ge=0)
    prerequisites: list[LicenseCategory] = Field(default_factory=list)
    vehicle_types: list[str] = Field(default_factory=list)
    allows_learners_permit: bool = False
    requires_medical_always: bool = False
    requires_medical_60_plus: bool = False
    description: str = ""

    @classmethod
    def from_rule(cls, rule: CategoryRule) -> "CategoryRuleDocument":
        return cls(
            category=rule.category,
            min_age=rule.min_age,
            prerequisites=list(sort_categories(rule.prerequisites)),
            vehicle_types=list(rule.vehicle_types),
            allows_learners_permit=rule.allows_learners_permit,
            requires_medical_always=rule.requires_medical_always,
            requires_medical_60_plus=rule.requires_medical_60_plus,
            description=rule.description,
        )

    def to_rule(self) -> CategoryRule:
        return CategoryRule(
            category=self.category,
            min_age=self.min_age,
            prerequisites=frozenset(self.prerequisites),
            vehicle_types=tuple(self.vehicle_types),
            allows_learners_permit=self.allows_learners_permit,
            requires_medical_always=self.requires_medical_always,
            requires_medical_60_plus=self.requires_medical_60_plus,
            description=self.description,
        )


class CatalogDocument(BaseModel):
    """Whole catalog: rules, direct superseding edges, learner's-permit scope."""
    rules: list[CategoryRuleDocument]
    superseding: dict[LicenseCategory, list[LicenseCategory]] = Field(default_factory=dict)
    learner_scope: dict[LicenseCategory, list[LicenseCategory]] = Field(default_factory=dict)

    @model_validator(mode="after")
    def check_unique_categories(self) -> "CatalogDocument":
        seen: set[LicenseCategory] = set()
        for rule in self.rules:
            if rule.category in seen:
                raise ValueError(f"duplicate rule for category {rule.category.value}")
            seen.add(rule.category)
        return self

    @classmethod
    def from_catalog(cls, catalog: CategoryCatalog) -> "CatalogDocument":
        return cls(
            rules=[CategoryRuleDocument.from_rule(rule) for rule in catalog.rules()],
            superseding={
                source: list(sort_categories(targets))
                for source, targets in sorted(
                    catalog.edges().items(), key=lambda item: item[0].value,
                )
            },
            learner_scope={
                code: list(sort_categories(scope))
                for code, scope in catalog.learner_scope().items()
            },
        )

    def to_catalog(self) -> CategoryCatalog:
        """Build a validated catalog; raises CatalogConfigurationError on graph faults."""
        return CategoryCatalog(
            {rule.category: rule.to_rule() for rule in self.rules},
            self.superseding,
            self.learner_scope,
        )
