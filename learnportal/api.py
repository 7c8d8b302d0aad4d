"""
Central API utilities for the LearnPortal assessment engine.

This module provides:
- The standard success/error response structure
- Exception handlers rendering engine errors and request validation errors
- The dependency giving routes access to the service container
"""

from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from learnportal.common.error_handling import ErrorCode, PortalError, error_response, log_error
from learnportal.common.logger import app_logger
from learnportal.container import ServiceContainer

# Setup module logger
logger = app_logger.getChild("api")

# HTTP status for each engine error code
STATUS_BY_ERROR_CODE = {
    ErrorCode.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorCode.NOT_FOUND_ERROR: status.HTTP_404_NOT_FOUND,
    ErrorCode.CONFLICT_ERROR: status.HTTP_409_CONFLICT,
    ErrorCode.DUPLICATE_ERROR: status.HTTP_409_CONFLICT,
    ErrorCode.DATABASE_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.UNKNOWN_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def get_services(request: Request) -> ServiceContainer:
    """Dependency returning the application's service container."""
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise RuntimeError("Services not initialized")
    return services


async def portal_error_handler(request: Request, exc: PortalError) -> JSONResponse:
    """
    Render an engine error as a structured response.

    Caller-fixable errors are logged at WARNING, the rest at ERROR.
    """
    status_code = STATUS_BY_ERROR_CODE.get(exc.code, status.HTTP_500_INTERNAL_SERVER_ERROR)
    log_error(
        exc,
        include_stack_trace=status_code >= 500,
        context={"path": request.url.path},
        log=logger
    )
    return JSONResponse(
        status_code=status_code,
        content=error_response(exc, include_details=status_code < 500)
    )


# Common validation error handler
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Handle request validation errors and return a standardized response.

    Args:
        request: The incoming request
        exc: The validation exception

    Returns:
        A JSON response with error details
    """
    error_details = []
    for error in exc.errors():
        error_details.append({
            "location": list(error.get("loc", [])),
            "message": error.get("msg", "Unknown validation error"),
            "type": error.get("type", "")
        })

    return JSONResponse(
        status_code=422,
        content=APIResponse.error(
            "Validation error",
            details=error_details,
            code=ErrorCode.VALIDATION_ERROR.value
        )
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PortalError, portal_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)


# Standard API response model
class APIResponse:
    """Standard API response structure"""

    @staticmethod
    def success(data: Any = None, message: str = "Success") -> Dict[str, Any]:
        """
        Create a success response.

        Args:
            data: Response data
            message: Success message

        Returns:
            Response dictionary
        """
        return {
            "status": "success",
            "message": message,
            "data": data
        }

    @staticmethod
    def error(message: str, details: Optional[Any] = None,
              code: Optional[str] = None) -> Dict[str, Any]:
        """
        Create an error response.

        Args:
            message: Error message
            details: Optional error details
            code: Optional error code

        Returns:
            Response dictionary
        """
        response = {
            "status": "error",
            "message": message
        }

        if details:
            response["details"] = details

        if code:
            response["code"] = code

        return response
