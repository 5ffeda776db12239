"""Error Hierarchy: typed, categorized exceptions for engine failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Only configuration and import-time faults are raised; user-input problems
      are returned as EligibilityVerdict values, never raised
    - to_response() produces a JSON-safe envelope for the calling layer
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with LicenseEngineError base: one except clause catches all
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and caller handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    CONFIGURATION = "configuration"
    VALIDATION = "validation"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    category: str | None = None
    entry_id: str | None = None
    source: str | None = None
    debug_info: dict[str, Any] | None = None


class LicenseEngineError(Exception):
    """Base exception for all engine errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()

    def to_response(self) -> dict:
        """Convert to standardized error envelope."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "category": self.context.category,
                    "entry_id": self.context.entry_id,
                    "source": self.context.source,
                },
            }
        }


# ─── Configuration Errors (fatal) ───────────────────────────────

class CatalogConfigurationError(LicenseEngineError):
    """Rule catalog or superseding graph is inconsistent. Deployment fault."""
    def __init__(
        self, message: str, code: str = "CATALOG_CONFIGURATION_ERROR",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.CONFIGURATION,
            ErrorSeverity.CRITICAL, context,
        )


class UnknownCategoryError(CatalogConfigurationError):
    """A category code is not part of the catalog."""
    def __init__(self, category: object, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.category = str(getattr(category, "value", category))
        super().__init__(
            f"Unknown license category: {ctx.category!r}",
            "UNKNOWN_CATEGORY", ctx,
        )
        self.unknown_category = category


class SupersedingCycleError(CatalogConfigurationError):
    """The superseding relation contains a cycle."""
    def __init__(self, cycle: list, context: ErrorContext | None = None):
        path = " -> ".join(str(getattr(c, "value", c)) for c in cycle)
        super().__init__(
            f"Superseding graph contains a cycle: {path}",
            "SUPERSEDING_CYCLE", context,
        )
        self.cycle = cycle


class InvalidCatalogError(CatalogConfigurationError):
    """A catalog table or serialized document is malformed."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(message, "INVALID_CATALOG", context)


# ─── Import Errors ──────────────────────────────────────────────

class LegacyRestrictionError(LicenseEngineError):
    """A legacy flat restriction code cannot be mapped to the structured form."""
    def __init__(self, code: str, context: ErrorContext | None = None):
        super().__init__(
            f"Unknown legacy restriction code: {code!r}",
            "UNKNOWN_LEGACY_RESTRICTION", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context,
        )
        self.legacy_code = code
