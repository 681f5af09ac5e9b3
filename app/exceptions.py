# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
# Every error tells the caller HOW to fix it, not just WHAT failed.
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse


class CRMException(Exception):
    """
    Base exception for the CRM API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "CRM_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Not Found
# =============================================================================

class LeadNotFoundError(CRMException):
    """Raised when a lead ID doesn't exist."""

    def __init__(self, lead_id: str):
        super().__init__(
            message=f"Lead not found: {lead_id}",
            code="LEAD_NOT_FOUND",
            status_code=404,
            suggestion="Check that the lead_id is correct and the lead hasn't been deleted",
            details={"lead_id": lead_id}
        )


class AccountingEntryNotFoundError(CRMException):
    """Raised when an accounting entry ID doesn't exist."""

    def __init__(self, entry_id: str):
        super().__init__(
            message=f"Accounting entry not found: {entry_id}",
            code="ENTRY_NOT_FOUND",
            status_code=404,
            suggestion="Refresh the accounting table, the entry may have been deleted",
            details={"entry_id": entry_id}
        )


class PlanningNotFoundError(CRMException):
    """Raised when a training session ID doesn't exist."""

    def __init__(self, planning_id: str):
        super().__init__(
            message=f"Training session not found: {planning_id}",
            code="PLANNING_NOT_FOUND",
            status_code=404,
            suggestion="Refresh the planning view, the session may have been merged or deleted",
            details={"planning_id": planning_id}
        )


# =============================================================================
# Accounting
# =============================================================================

class InvalidFieldError(CRMException):
    """Raised when an inline edit targets a column that cannot be edited."""

    def __init__(self, field: str, allowed: tuple[str, ...] | list[str]):
        super().__init__(
            message=f"Field cannot be edited: {field}",
            code="FIELD_NOT_EDITABLE",
            status_code=400,
            suggestion=f"Only these fields can be edited: {', '.join(allowed)}",
            details={"field": field, "allowed_fields": list(allowed)}
        )


class InvalidAmountError(CRMException):
    """Raised when an amount is not a non-negative number."""

    def __init__(self, value: Any):
        super().__init__(
            message=f"Invalid amount: {value!r}",
            code="INVALID_AMOUNT",
            status_code=422,
            suggestion="Send a positive number such as 250 or 249.90",
            details={"value": str(value)}
        )


class MissingPriceError(CRMException):
    """Raised when a payment is marked on a lead without an agreed price."""

    def __init__(self, lead_id: str, field: str):
        super().__init__(
            message=f"Lead {lead_id} has no {field}",
            code="MISSING_PRICE",
            status_code=400,
            suggestion=f"Set {field} on the lead before recording the payment",
            details={"lead_id": lead_id, "field": field}
        )


class PaymentConflictError(CRMException):
    """Raised when a payment contradicts the payments already recorded."""

    def __init__(self, lead_id: str, reason: str):
        super().__init__(
            message=reason,
            code="PAYMENT_CONFLICT",
            status_code=409,
            suggestion="Check the lead's accounting entries before recording another payment",
            details={"lead_id": lead_id}
        )


# =============================================================================
# Planning
# =============================================================================

class InvalidScheduleError(CRMException):
    """Raised when session dates cannot be computed from the given inputs."""

    def __init__(self, reason: str, details: dict[str, Any] | None = None):
        super().__init__(
            message=reason,
            code="INVALID_SCHEDULE",
            status_code=400,
            suggestion="Monthly sessions run on Saturdays ('sat') or Sundays ('sun')",
            details=details,
        )


# =============================================================================
# Auth
# =============================================================================

class ForbiddenError(CRMException):
    """Raised when the user's role does not allow the action."""

    def __init__(self, required: list[str] | tuple[str, ...]):
        super().__init__(
            message="You are not allowed to perform this action",
            code="FORBIDDEN",
            status_code=403,
            suggestion=f"Ask an administrator; required role: {' or '.join(required)}",
            details={"required_roles": list(required)}
        )


class UserAlreadyExistsError(CRMException):
    """Raised when another account already uses the email."""

    def __init__(self, email: str | None):
        super().__init__(
            message="An account already exists with this email",
            code="USER_EXISTS",
            status_code=409,
            suggestion="Use another email or edit the existing account",
            details={"email": email}
        )


class UserNotFoundError(CRMException):
    """Raised when a CRM user ID doesn't exist."""

    def __init__(self, user_id: str):
        super().__init__(
            message=f"User not found: {user_id}",
            code="USER_NOT_FOUND",
            status_code=404,
            details={"user_id": user_id}
        )


class UserAccountError(CRMException):
    """Raised when Supabase Auth refuses an account change for another reason."""

    def __init__(self, error: str):
        super().__init__(
            message=f"Account change refused: {error}",
            code="USER_ACCOUNT_ERROR",
            status_code=400,
            suggestion="Check the email and password, then try again",
            details={"error": error}
        )


# =============================================================================
# AI Reports
# =============================================================================

class AIUnavailableError(CRMException):
    """Raised when no AI provider is configured."""

    def __init__(self):
        super().__init__(
            message="No AI API key configured",
            code="AI_UNAVAILABLE",
            status_code=503,
            suggestion="Set OPENAI_API_KEY in the environment to enable reports",
        )


class AIRateLimitedError(CRMException):
    """Raised when the AI provider refuses the call because of quota."""

    def __init__(self):
        super().__init__(
            message="AI quota exhausted",
            code="AI_RATE_LIMITED",
            status_code=429,
            suggestion="Try again in 15 minutes; cached reports are still served",
        )


class ReportGenerationError(CRMException):
    """Raised when the AI provider fails for any other reason."""

    def __init__(self, error: str):
        super().__init__(
            message=f"Report generation failed: {error}",
            code="REPORT_FAILED",
            status_code=502,
            suggestion="Try again later or use the /context endpoint for raw figures",
            details={"error": error}
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def crm_exception_handler(
    request: Request,
    exc: CRMException
) -> JSONResponse:
    """
    Convert CRMException to JSON response.

    Returns structured error with:
    - detail: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )
