"""Error Hierarchy — typed, categorized exceptions for all compliance-engine failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Input errors (4xx) reject a submission before any verdict exists
    - Collaborator errors (5xx) never carry or replace an already-computed verdict
    - Business non-conformance (value out of limit, catches over threshold,
      overdue calibration) is a verdict, never an exception
    - to_response() produces the REST envelope

Design Decisions:
    - Single hierarchy with HaccpError base: FastAPI global handler catches all (ADR: uniform error shape)
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    source_id: str | None = None
    parameter_code: str | None = None
    user_message: str | None = None
    debug_info: dict[str, Any] | None = None


class HaccpError(Exception):
    """Base exception for all compliance-engine errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.context.user_message or self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "source_id": self.context.source_id,
                    "parameter_code": self.context.parameter_code,
                },
            }
        }


# ─── Input Errors (4xx) ─────────────────────────────────────────

class UnknownParameterError(HaccpError):
    """Measurement references a parameter code absent from the CCP's limit set."""
    def __init__(
        self, parameter_code: str, ccp_id: str | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.parameter_code = parameter_code
        ctx.source_id = ccp_id
        super().__init__(
            f"Parameter '{parameter_code}' has no critical limit"
            + (f" in CCP '{ccp_id}'" if ccp_id else ""),
            "UNKNOWN_PARAMETER", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, ctx, 422,
        )
        self.parameter_code = parameter_code


class InvalidMeasurementError(HaccpError):
    """Measurement value is missing or not a finite number."""
    def __init__(
        self, parameter_code: str, raw_value: object,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.parameter_code = parameter_code
        super().__init__(
            f"Measurement for '{parameter_code}' is not a finite number: {raw_value!r}",
            "INVALID_MEASUREMENT", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, ctx, 422,
        )
        self.parameter_code = parameter_code
        self.raw_value = raw_value


class EmptyMeasurementSetError(HaccpError):
    """CCP record submitted with zero measurements."""
    def __init__(self, ccp_id: str | None = None, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.source_id = ccp_id
        super().__init__(
            "A CCP record requires at least one measurement.",
            "EMPTY_MEASUREMENT_SET", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, ctx, 422,
        )


class MissingDeviationActionError(HaccpError):
    """Non-conforming record submitted without a deviation action."""
    def __init__(
        self, failing_parameters: list[str], ccp_id: str | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.source_id = ccp_id
        super().__init__(
            f"Out-of-limit parameters {failing_parameters} require a deviation action.",
            "MISSING_DEVIATION_ACTION", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, ctx, 422,
        )
        self.failing_parameters = failing_parameters


class InvalidLimitError(HaccpError):
    """Critical limit definition violates its invariants."""
    def __init__(self, message: str, parameter_code: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.parameter_code = parameter_code
        super().__init__(
            message, "INVALID_LIMIT", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, ctx, 422,
        )


class InvalidStandardError(HaccpError):
    """Pest standards table violates its invariants (duplicate key, level order)."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_STANDARD", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 422,
        )


class InvalidCatchCountError(HaccpError):
    """Trap catch count is negative or not an integer."""
    def __init__(self, trap_location_id: str, raw_count: object, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.source_id = trap_location_id
        super().__init__(
            f"Catch count for trap '{trap_location_id}' must be a non-negative integer: {raw_count!r}",
            "INVALID_CATCH_COUNT", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, ctx, 422,
        )


class UnknownTrapLocationError(HaccpError):
    """Catch count submitted for a trap absent from the trap snapshot."""
    def __init__(self, trap_location_id: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.source_id = trap_location_id
        super().__init__(
            f"Trap location '{trap_location_id}' is not configured",
            "UNKNOWN_TRAP_LOCATION", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, ctx, 422,
        )
        self.trap_location_id = trap_location_id


class DuplicateTrapReadingError(HaccpError):
    """Same trap location submitted more than once in one check."""
    def __init__(self, trap_location_id: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.source_id = trap_location_id
        super().__init__(
            f"Trap location '{trap_location_id}' appears more than once in this check",
            "DUPLICATE_TRAP_READING", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, ctx, 422,
        )
        self.trap_location_id = trap_location_id


class EmptyTrapCheckSetError(HaccpError):
    """Pest control check submitted with no trap readings."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "A pest control check requires at least one trap reading.",
            "EMPTY_TRAP_CHECK_SET", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 422,
        )


class RecordAlreadyVerifiedError(HaccpError):
    """Attempt to modify or re-verify a verified monitoring record."""
    def __init__(self, record_id: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.source_id = record_id
        super().__init__(
            f"Record '{record_id}' is verified and can no longer change",
            "RECORD_ALREADY_VERIFIED", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, ctx, 409,
        )


class ResourceNotFoundError(HaccpError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


# ─── Collaborator Errors (5xx) ──────────────────────────────────

class CatalogUnavailableError(HaccpError):
    """Catalog snapshot could not be read; no evaluation was attempted."""
    def __init__(self, catalog: str, message: str, context: ErrorContext | None = None):
        super().__init__(
            f"Catalog '{catalog}' unavailable: {message}",
            "CATALOG_UNAVAILABLE", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.catalog = catalog


class DeviationDeliveryError(HaccpError):
    """Corrective-action hand-off failed. The verdict it belongs to stays valid."""
    def __init__(self, source_id: str, message: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.source_id = source_id
        super().__init__(
            f"Deviation hand-off for '{source_id}' failed: {message}",
            "DEVIATION_DELIVERY_FAILED", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.WARNING, ctx, 502,
        )


class DatabaseError(HaccpError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
