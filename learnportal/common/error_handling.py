"""
Error Handling System for LearnPortal

This module provides the engine's error taxonomy and its structured
rendering:
1. A custom exception hierarchy keyed by stable error codes
2. Structured error info (pydantic) for logs and API responses
3. Helpers to convert foreign exceptions, render responses and log errors

Every failure an engine operation raises is a ``PortalError`` so the
presentation layer can render ``code`` and ``message`` directly.
"""

import logging
import traceback
from enum import Enum
from typing import Any, Dict, List, Optional, Union
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)


class ErrorSeverity(Enum):
    """Severity levels for errors"""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCode(Enum):
    """Standard error codes for LearnPortal"""
    UNKNOWN_ERROR = "unknown_error"
    VALIDATION_ERROR = "validation_error"
    NOT_FOUND_ERROR = "not_found_error"
    CONFLICT_ERROR = "conflict_error"
    DUPLICATE_ERROR = "duplicate_error"
    DATABASE_ERROR = "database_error"


class ErrorInfo(BaseModel):
    """Structured information about an error"""
    model_config = ConfigDict(use_enum_values=True)

    code: ErrorCode
    message: str
    timestamp: datetime = Field(default_factory=datetime.now)
    severity: ErrorSeverity = ErrorSeverity.ERROR
    details: Optional[Dict[str, Any]] = None
    exception_type: Optional[str] = None
    stack_trace: Optional[List[str]] = None
    context: Optional[Dict[str, Any]] = None

    @field_validator('stack_trace', mode='before')
    @classmethod
    def validate_stack_trace(cls, v):
        """Split a stack trace given as one string into lines"""
        if isinstance(v, str):
            return v.splitlines()
        return v


class PortalError(Exception):
    """Base exception class for all LearnPortal errors"""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.severity = severity
        self.details = details or {}
        self.cause = cause
        self.context = context or {}
        self.timestamp = datetime.now()

    def to_error_info(self, include_stack_trace: bool = False) -> ErrorInfo:
        """Convert the exception to an ErrorInfo object"""
        stack_trace = None
        if include_stack_trace:
            stack_trace = traceback.format_exception(type(self), self, self.__traceback__)

        details = dict(self.details)
        if self.cause is not None:
            details["cause"] = {
                "type": type(self.cause).__name__,
                "message": str(self.cause)
            }

        return ErrorInfo(
            code=self.code,
            message=self.message,
            timestamp=self.timestamp,
            severity=self.severity,
            details=details or None,
            exception_type=type(self).__name__,
            stack_trace=stack_trace,
            context=self.context or None
        )

    def to_dict(self, include_stack_trace: bool = False) -> Dict[str, Any]:
        """Convert the exception to a dictionary"""
        return self.to_error_info(include_stack_trace).model_dump(mode="json")

    def __str__(self) -> str:
        base_str = f"{self.code.value}: {self.message}"
        if self.details:
            base_str += f" (details: {self.details})"
        if self.cause:
            base_str += f" caused by {type(self.cause).__name__}: {self.cause}"
        return base_str


class ValidationError(PortalError):
    """Malformed identifiers or out-of-range field values; always caller-fixable"""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code=ErrorCode.VALIDATION_ERROR,
            severity=ErrorSeverity.WARNING,
            details=details,
            cause=cause,
            context=context
        )


class NotFoundError(PortalError):
    """Referenced entity is absent or soft-deleted"""

    def __init__(
        self,
        resource_type: str,
        resource_id: Any,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message or f"{resource_type} with ID {resource_id} not found",
            code=ErrorCode.NOT_FOUND_ERROR,
            severity=ErrorSeverity.WARNING,
            details={"resource_type": resource_type, "resource_id": str(resource_id)},
            context=context
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class ConflictError(PortalError):
    """State-machine violation, e.g. a second active attempt or a resubmission"""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        context: Optional[Dict[str, Any]] = None,
        code: ErrorCode = ErrorCode.CONFLICT_ERROR
    ):
        super().__init__(
            message=message,
            code=code,
            severity=ErrorSeverity.WARNING,
            details=details,
            cause=cause,
            context=context
        )


class DuplicateError(ConflictError):
    """Storage-level uniqueness violation"""

    def __init__(self, resource_type: str, identifier: Any, cause: Optional[Exception] = None):
        super().__init__(
            message=f"Duplicate {resource_type} with identifier {identifier}",
            details={"resource_type": resource_type, "identifier": str(identifier)},
            cause=cause,
            code=ErrorCode.DUPLICATE_ERROR
        )
        self.resource_type = resource_type
        self.identifier = identifier


class DatabaseError(PortalError):
    """Persistence failure reported by a storage backend"""

    def __init__(
        self,
        message: str,
        cause: Optional[Exception] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=f"Database error: {message}",
            code=ErrorCode.DATABASE_ERROR,
            severity=ErrorSeverity.ERROR,
            cause=cause,
            context=context
        )


def convert_exception(
    exception: Exception,
    default_message: str = "An unexpected error occurred",
    context: Optional[Dict[str, Any]] = None
) -> PortalError:
    """
    Convert a standard exception to a PortalError.

    Args:
        exception: The exception to convert
        default_message: Message used when the exception has none
        context: Optional additional context

    Returns:
        The exception itself if it already is a PortalError, otherwise a
        PortalError wrapping it
    """
    if isinstance(exception, PortalError):
        if context:
            exception.context.update(context)
        return exception

    return PortalError(
        message=str(exception) or default_message,
        code=ErrorCode.UNKNOWN_ERROR,
        severity=ErrorSeverity.ERROR,
        cause=exception,
        context=context
    )


def error_response(
    error: Union[PortalError, Exception],
    include_details: bool = True
) -> Dict[str, Any]:
    """
    Generate a standardized API error response.

    Args:
        error: The error to generate a response for
        include_details: Whether to include error details

    Returns:
        ``{"status": "error", "code": ..., "message": ..., "details"?: ...}``
    """
    if not isinstance(error, PortalError):
        error = convert_exception(error)

    response = {
        "status": "error",
        "code": error.code.value,
        "message": error.message
    }

    if include_details and error.details:
        response["details"] = {k: v for k, v in error.details.items() if k != "cause"}

    return response


def log_error(
    error: Union[PortalError, Exception],
    level: Optional[int] = None,
    include_stack_trace: bool = False,
    context: Optional[Dict[str, Any]] = None,
    log: Optional[logging.Logger] = None
) -> None:
    """
    Log an error with standardized format.

    Args:
        error: The error to log
        level: Logging level; defaults to WARNING for caller-fixable errors
            and ERROR otherwise
        include_stack_trace: Whether to include the stack trace
        context: Additional context to include
        log: Logger to write to; defaults to this module's logger
    """
    if not isinstance(error, PortalError):
        error = convert_exception(error, context=context)
    elif context:
        error.context.update(context)

    if level is None:
        level = logging.WARNING if error.severity == ErrorSeverity.WARNING else logging.ERROR

    message = f"ERROR [{error.code.value}]: {error.message}"

    if error.context:
        context_str = ", ".join(f"{k}={v}" for k, v in error.context.items())
        message += f" (context: {context_str})"

    if error.cause:
        message += f" caused by {type(error.cause).__name__}: {error.cause}"

    (log or logger).log(level, message, exc_info=error if include_stack_trace else None)
