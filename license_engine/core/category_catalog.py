"""Category Catalog: validated rule table + superseding DAG with precomputed closures.

Invariants:
    - Construction either yields a complete, consistent catalog or raises
      CatalogConfigurationError. There is no partially initialized catalog.
    - closure(C) contains C (reflexive)
    - If A supersedes B, closure(A) is a superset of closure(B)
    - Closures are computed once at construction and returned as frozensets
    - The catalog is read-only after construction; safe to share across callers

Design Decisions:
    - Cycle check by depth-first search with an explicit path stack so the
      error names the exact cycle
    - Catalog is injected into every rule function instead of being module state
"""

from collections.abc import Iterable, Mapping

from license_engine.core.category_rules import (
    CategoryRule,
    DEFAULT_CATEGORY_RULES,
    DEFAULT_SUPERSEDING_EDGES,
    LEARNER_PERMIT_SCOPE,
)
from license_engine.core.domain_types import (
    LicenseCategory,
    is_learner_code,
    sort_categories,
)
from license_engine.core.errors import (
    ErrorContext,
    InvalidCatalogError,
    SupersedingCycleError,
    UnknownCategoryError,
)


def coerce_category(value: LicenseCategory | str) -> LicenseCategory:
    """Accept an enum member or its code; raise UnknownCategoryError otherwise."""
    if isinstance(value, LicenseCategory):
        return value
    try:
        return LicenseCategory(value)
    except ValueError:
        raise UnknownCategoryError(value) from None


class CategoryCatalog:
    """Static category rules and the superseding relation."""

    def __init__(
        self,
        rules: Mapping[LicenseCategory, CategoryRule],
        edges: Mapping[LicenseCategory, Iterable[LicenseCategory]],
        learner_scope: Mapping[LicenseCategory, Iterable[LicenseCategory]] | None = None,
    ):
        self._rules: dict[LicenseCategory, CategoryRule] = dict(rules)
        self._validate_rules()
        self._validate_edges(edges)

        self._edges: dict[LicenseCategory, frozenset[LicenseCategory]] = {
            category: frozenset(coerce_category(c) for c in edges.get(category, ()))
            for category in self._rules
        }
        self._learner_scope: dict[LicenseCategory, frozenset[LicenseCategory]] = {
            coerce_category(code): frozenset(coerce_category(c) for c in scope)
            for code, scope in (learner_scope or {}).items()
        }

        self._validate_learner_scope()
        _check_acyclic(self._edges)
        self._closures = _compute_closures(self._edges)

    # ─── Lookups ─────────────────────────────────────────────────

    def lookup(self, category: LicenseCategory | str) -> CategoryRule:
        category = coerce_category(category)
        rule = self._rules.get(category)
        if rule is None:
            raise UnknownCategoryError(category)
        return rule

    def closure(self, category: LicenseCategory | str) -> frozenset[LicenseCategory]:
        """Category plus everything it transitively supersedes."""
        category = coerce_category(category)
        if category not in self._closures:
            raise UnknownCategoryError(category)
        return self._closures[category]

    def directly_superseded(self, category: LicenseCategory | str) -> frozenset[LicenseCategory]:
        category = coerce_category(category)
        if category not in self._edges:
            raise UnknownCategoryError(category)
        return self._edges[category]

    def supersedes(self, broader: LicenseCategory, narrower: LicenseCategory) -> bool:
        return coerce_category(narrower) in self.closure(broader)

    def permit_closure(self, category: LicenseCategory | str) -> frozenset[LicenseCategory]:
        """Categories a learner's permit in this category prepares for.

        A learner code reaches the closures of every full category in its
        scope; a full category reaches its ordinary closure.
        """
        category = coerce_category(category)
        reach = set(self.closure(category))
        for covered in self._learner_scope.get(category, ()):
            reach |= self._closures[covered]
        return frozenset(reach)

    def authorized_categories(
        self, categories: Iterable[LicenseCategory | str],
    ) -> frozenset[LicenseCategory]:
        """Union of closures of all given categories."""
        authorized: set[LicenseCategory] = set()
        for category in categories:
            authorized |= self.closure(category)
        return frozenset(authorized)

    def has_authorization_for_category(
        self,
        category: LicenseCategory | str,
        existing: Iterable[LicenseCategory | str],
    ) -> bool:
        return coerce_category(category) in self.authorized_categories(existing)

    # ─── Read-only views ─────────────────────────────────────────

    def categories(self) -> tuple[LicenseCategory, ...]:
        return sort_categories(self._rules)

    def rules(self) -> tuple[CategoryRule, ...]:
        return tuple(self._rules[c] for c in self.categories())

    def edges(self) -> dict[LicenseCategory, frozenset[LicenseCategory]]:
        return {c: e for c, e in self._edges.items() if e}

    def learner_scope(self) -> dict[LicenseCategory, frozenset[LicenseCategory]]:
        return dict(self._learner_scope)

    # ─── Construction checks ─────────────────────────────────────

    def _validate_rules(self) -> None:
        for key, rule in self._rules.items():
            if not isinstance(key, LicenseCategory):
                raise UnknownCategoryError(key)
            if rule.category != key:
                raise InvalidCatalogError(
                    f"Rule keyed {key.value!r} describes category {rule.category.value!r}",
                    ErrorContext(category=key.value),
                )
            if rule.min_age < 0:
                raise InvalidCatalogError(
                    f"Category {key.value} has negative minimum age {rule.min_age}",
                    ErrorContext(category=key.value),
                )
            if key in rule.prerequisites:
                raise InvalidCatalogError(
                    f"Category {key.value} lists itself as a prerequisite",
                    ErrorContext(category=key.value),
                )
            for prerequisite in rule.prerequisites:
                if prerequisite not in self._rules:
                    raise UnknownCategoryError(
                        prerequisite, ErrorContext(source=f"prerequisite of {key.value}"),
                    )

        missing = [c.value for c in LicenseCategory if c not in self._rules]
        if missing:
            raise InvalidCatalogError(f"No rule defined for categories: {', '.join(missing)}")

    def _validate_edges(self, edges: Mapping) -> None:
        for source, targets in edges.items():
            source = coerce_category(source)
            if source not in self._rules:
                raise UnknownCategoryError(source, ErrorContext(source="superseding edge"))
            for target in targets:
                if coerce_category(target) not in self._rules:
                    raise UnknownCategoryError(
                        target, ErrorContext(source=f"superseded by {source.value}"),
                    )

    def _validate_learner_scope(self) -> None:
        for code, scope in self._learner_scope.items():
            code = coerce_category(code)
            if code not in self._rules:
                raise UnknownCategoryError(code, ErrorContext(source="learner scope"))
            if not is_learner_code(code):
                raise InvalidCatalogError(
                    f"Learner scope defined for full category {code.value}",
                    ErrorContext(category=code.value),
                )
            for covered in scope:
                covered = coerce_category(covered)
                if covered not in self._rules:
                    raise UnknownCategoryError(covered, ErrorContext(source="learner scope"))
                if is_learner_code(covered):
                    raise InvalidCatalogError(
                        f"Learner code {code.value} cannot cover learner code {covered.value}",
                        ErrorContext(category=code.value),
                    )


def _check_acyclic(edges: Mapping[LicenseCategory, frozenset[LicenseCategory]]) -> None:
    """Raise SupersedingCycleError naming the first cycle found."""
    visiting: set[LicenseCategory] = set()
    done: set[LicenseCategory] = set()
    path: list[LicenseCategory] = []

    def visit(node: LicenseCategory) -> None:
        visiting.add(node)
        path.append(node)
        for child in sort_categories(edges.get(node, ())):
            if child in visiting:
                start = path.index(child)
                raise SupersedingCycleError(path[start:] + [child])
            if child not in done:
                visit(child)
        path.pop()
        visiting.discard(node)
        done.add(node)

    for node in sort_categories(edges):
        if node not in done:
            visit(node)


def _compute_closures(
    edges: Mapping[LicenseCategory, frozenset[LicenseCategory]],
) -> dict[LicenseCategory, frozenset[LicenseCategory]]:
    """Memoized DFS over an acyclic graph."""
    closures: dict[LicenseCategory, frozenset[LicenseCategory]] = {}

    def resolve(node: LicenseCategory) -> frozenset[LicenseCategory]:
        if node not in closures:
            reach = {node}
            for child in edges.get(node, ()):
                reach |= resolve(child)
            closures[node] = frozenset(reach)
        return closures[node]

    for node in edges:
        resolve(node)
    return closures


def build_default_catalog() -> CategoryCatalog:
    """Catalog built from the built-in rule table."""
    return CategoryCatalog(
        DEFAULT_CATEGORY_RULES, DEFAULT_SUPERSEDING_EDGES, LEARNER_PERMIT_SCOPE,
    )
