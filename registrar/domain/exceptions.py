"""
Rich Domain Exceptions

Exception hierarchy for the registrar's caller-facing errors.
Soft outcomes (failed validation, out-of-order grade transitions) are never
raised; these exceptions cover unknown identifiers, malformed input and lock
contention at the facade and data-store layer.
"""

from enum import Enum
from typing import Any

import structlog

logger = structlog.get_logger(__name__)


class ErrorCode(str, Enum):
    """Standard error codes for domain exceptions."""

    # Domain errors
    DOMAIN_VALIDATION_ERROR = "DOMAIN_VALIDATION_ERROR"
    BUSINESS_RULE_VIOLATION = "BUSINESS_RULE_VIOLATION"
    ENTITY_NOT_FOUND = "ENTITY_NOT_FOUND"
    ENTITY_ALREADY_EXISTS = "ENTITY_ALREADY_EXISTS"

    # Grading errors
    INVALID_GRADE_LETTER = "INVALID_GRADE_LETTER"

    # System errors
    LOCK_ACQUISITION_FAILED = "LOCK_ACQUISITION_FAILED"


class DomainException(Exception):
    """
    Base class for all domain exceptions.

    Provides structured error information with error codes, context, and metadata.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        status_code: int = 500,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ):
        """
        Initialize domain exception.

        Args:
            message: Human-readable error message
            error_code: Standard error code
            status_code: HTTP-style status code for the calling layer (default: 500)
            context: Additional context data
            cause: Underlying exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.context = context or {}
        self.cause = cause

        logger.error(
            "Domain exception raised",
            error_code=error_code.value,
            message=message,
            status_code=status_code,
            context=context,
            exception_type=type(self).__name__,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for caller responses."""
        result = {
            "error": self.error_code.value,
            "message": self.message,
            "type": type(self).__name__,
        }
        if self.context:
            result["context"] = self.context
        return result


class ValidationError(DomainException):
    """Raised when caller input fails domain validation."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any | None = None,
        **kwargs
    ):
        context = kwargs.pop("context", {})
        if field:
            context["field"] = field
        if value is not None:
            context["value"] = str(value)

        super().__init__(
            message=message,
            error_code=kwargs.pop("error_code", ErrorCode.DOMAIN_VALIDATION_ERROR),
            status_code=400,
            context=context,
            **kwargs
        )


class InvalidGradeLetterError(ValidationError):
    """Raised when a grade letter is not on the configured scale."""

    def __init__(self, letter: str | None, allowed: list[str], **kwargs):
        super().__init__(
            message=f"Invalid grade letter: {letter}",
            field="letter",
            value=letter,
            error_code=ErrorCode.INVALID_GRADE_LETTER,
            context={"allowed": list(allowed)},
            **kwargs
        )
        self.letter = letter


class BusinessRuleViolationError(DomainException):
    """Raised when a business rule is violated."""

    def __init__(
        self,
        message: str,
        rule_name: str | None = None,
        **kwargs
    ):
        context = kwargs.pop("context", {})
        if rule_name:
            context["rule_name"] = rule_name

        super().__init__(
            message=message,
            error_code=ErrorCode.BUSINESS_RULE_VIOLATION,
            status_code=400,
            context=context,
            **kwargs
        )


class EntityNotFoundError(DomainException):
    """Raised when an entity is not found."""

    def __init__(
        self,
        entity_type: str,
        entity_id: str | None = None,
        **kwargs
    ):
        message = kwargs.pop("message", None) or f"{entity_type} not found"
        if entity_id:
            message += f" (ID: {entity_id})"

        context = kwargs.pop("context", {})
        context["entity_type"] = entity_type
        if entity_id:
            context["entity_id"] = entity_id

        super().__init__(
            message=message,
            error_code=ErrorCode.ENTITY_NOT_FOUND,
            status_code=404,
            context=context,
            **kwargs
        )
        self.entity_type = entity_type
        self.entity_id = entity_id


class EntityAlreadyExistsError(DomainException):
    """Raised when attempting to register an entity that already exists."""

    def __init__(
        self,
        entity_type: str,
        entity_id: str | None = None,
        **kwargs
    ):
        message = kwargs.pop("message", None) or f"{entity_type} already exists"
        if entity_id:
            message += f" (ID: {entity_id})"

        context = kwargs.pop("context", {})
        context["entity_type"] = entity_type
        if entity_id:
            context["entity_id"] = entity_id

        super().__init__(
            message=message,
            error_code=ErrorCode.ENTITY_ALREADY_EXISTS,
            status_code=409,
            context=context,
            **kwargs
        )


class LockAcquisitionError(DomainException):
    """Raised when a resource lock cannot be obtained within the wait timeout."""

    def __init__(
        self,
        resource_id: str,
        wait_timeout: float | None = None,
        **kwargs
    ):
        context = kwargs.pop("context", {})
        context["resource_id"] = resource_id
        if wait_timeout is not None:
            context["wait_timeout"] = wait_timeout

        super().__init__(
            message=f"Could not lock {resource_id}",
            error_code=ErrorCode.LOCK_ACQUISITION_FAILED,
            status_code=409,
            context=context,
            **kwargs
        )
        self.resource_id = resource_id
