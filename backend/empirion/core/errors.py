"""Error Hierarchy — one exception type per plan, history and advisor failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Local validation errors (400-level) are reported synchronously, never corrected
    - Remote errors (RepositoryUnavailable, ValidationRejected) propagate unchanged
    - to_response() produces the REST envelope
    - No internal details leaked in user-facing messages

Design Decisions:
    - EmpirionError base carries http_status, so routes raise domain errors directly
      and one FastAPI handler renders them (ADR: uniform error shape)
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
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    team_id: str | None = None
    round_number: int | None = None
    plan_version: int | None = None
    user_message: str | None = None
    debug_info: dict[str, Any] | None = None
    retry_after_ms: int | None = None


class EmpirionError(Exception):
    """Base exception for all Empirion errors."""

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
                    "team_id": self.context.team_id,
                    "round_number": self.context.round_number,
                    "plan_version": self.context.plan_version,
                    "retry_after_ms": self.context.retry_after_ms,
                },
            }
        }


# ─── Local Validation Errors (400-level) ────────────────────────

class InvalidStepError(EmpirionError):
    """Wizard step index outside the configured range."""
    def __init__(self, step_index: int, step_count: int, context: ErrorContext | None = None):
        super().__init__(
            f"Step index {step_index} is outside the wizard range 0..{step_count - 1}",
            "INVALID_STEP", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.step_index = step_index
        self.step_count = step_count


class UnknownFieldError(EmpirionError):
    """Block name or enumerated value outside the fixed plan schema."""
    def __init__(self, section: str, name: str, context: ErrorContext | None = None):
        super().__init__(
            f"Unknown {section} field '{name}'",
            "UNKNOWN_FIELD", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.section = section
        self.name = name


class InvalidRoundError(EmpirionError):
    """Round number is not a positive integer."""
    def __init__(self, round_number: object, context: ErrorContext | None = None):
        super().__init__(
            f"Round must be a positive integer, got {round_number!r}",
            "INVALID_ROUND", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.round_number = round_number


class InvalidTransitionError(EmpirionError):
    """Status change would move a plan lineage backward or skip a reviewer step."""
    def __init__(
        self, current: str | None, target: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Cannot move plan from '{current or 'none'}' to '{target}'",
            "INVALID_TRANSITION", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 409,
        )
        self.current = current
        self.target = target


class DuplicateRoundError(EmpirionError):
    """KPI history contains more than one snapshot for the same round."""
    def __init__(self, round_number: int, context: ErrorContext | None = None):
        super().__init__(
            f"KPI history contains round {round_number} more than once",
            "DUPLICATE_ROUND", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 422,
        )
        self.round_number = round_number


class UnknownIndicatorError(EmpirionError):
    """Indicator name is not in the KPI catalogue."""
    def __init__(self, indicator: str, context: ErrorContext | None = None):
        super().__init__(
            f"Unknown KPI indicator '{indicator}'",
            "UNKNOWN_INDICATOR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.indicator = indicator


# ─── Remote Errors (500-level / server-side rejection) ──────────

class RepositoryUnavailableError(EmpirionError):
    """Plan/KPI persistence round-trip failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Repository {operation} failed: {message}",
            "REPOSITORY_UNAVAILABLE", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class ValidationRejectedError(EmpirionError):
    """Persistence layer rejected the record (schema mismatch or version conflict)."""
    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_REJECTED",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 422,
        )


class SuggestionServiceError(EmpirionError):
    """Advisory AI call failed. Never propagated past PlanAdvisor."""
    def __init__(
        self,
        message: str,
        api_error_type: str,
        retry_after_ms: int | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.retry_after_ms = retry_after_ms
        super().__init__(
            f"Suggestion service error ({api_error_type}): {message}",
            "SUGGESTION_SERVICE_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.WARNING, ctx, 503,
        )
        self.api_error_type = api_error_type
