"""
Custom Exceptions and Error Handling
Standardized error responses across the application
"""

from functools import wraps
from typing import Optional
from fastapi import HTTPException, status
from fastapi.responses import JSONResponse
from fastapi import Request
from pydantic import ValidationError
from pymongo.errors import PyMongoError
import logging

logger = logging.getLogger(__name__)


class AvailabilityServiceException(Exception):
    """Base exception for the availability service"""

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        details: Optional[dict] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(message)

    def to_response(self) -> dict:
        """Convert to API response format"""
        response = {
            "success": False,
            "error": {
                "code": self.code,
                "message": self.message
            }
        }
        if self.details:
            response["error"]["details"] = self.details
        return response


# Validation Exceptions
class InvalidSlotError(AvailabilityServiceException):
    """Time slot list is malformed, unordered or overlapping"""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            code="INVALID_SLOT",
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details
        )


class InvalidOccupancyError(AvailabilityServiceException):
    """Occupancy interval is empty or inverted"""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            code="INVALID_OCCUPANCY",
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details
        )


class InvalidDateError(AvailabilityServiceException):
    """Date or timestamp could not be parsed"""

    def __init__(self, field: str, value: Optional[str] = None):
        message = f"Invalid {field}: expected an ISO-8601 date or timestamp"
        super().__init__(
            code="INVALID_DATE",
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"field": field, "value": value} if value is not None else {"field": field}
        )


class InvalidTimezoneError(AvailabilityServiceException):
    """Unknown IANA timezone"""

    def __init__(self, timezone_name: str):
        super().__init__(
            code="INVALID_TIMEZONE",
            message=f"Unknown timezone '{timezone_name}'",
            status_code=status.HTTP_400_BAD_REQUEST
        )


class InvalidWindowError(AvailabilityServiceException):
    """Bookable window length out of range"""

    def __init__(self, window_minutes: int, minimum: int, maximum: int):
        super().__init__(
            code="INVALID_WINDOW",
            message=f"windowMinutes must be between {minimum} and {maximum}",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"window_minutes": window_minutes}
        )


class MissingUserError(AvailabilityServiceException):
    """No acting user on the request"""

    def __init__(self):
        super().__init__(
            code="MISSING_USER",
            message="Missing user id (X-User-Id header)",
            status_code=status.HTTP_400_BAD_REQUEST
        )


# Resource Exceptions
class ResourceNotFoundError(AvailabilityServiceException):
    """Requested resource not found"""

    def __init__(self, resource_type: str, resource_id: Optional[str] = None):
        message = f"{resource_type} not found"
        if resource_id:
            message = f"{resource_type} '{resource_id}' not found"
        super().__init__(
            code=f"{resource_type.upper().replace(' ', '_')}_NOT_FOUND",
            message=message,
            status_code=status.HTTP_404_NOT_FOUND
        )


# Persistence Exceptions
class StoreError(AvailabilityServiceException):
    """Underlying persistence failure"""

    def __init__(self, operation: str):
        super().__init__(
            code="STORE_ERROR",
            message=f"Storage failure during {operation}",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
        )


def translate_store_errors(operation: str):
    """
    Decorator for store coroutines: re-raise pymongo failures as StoreError

    Usage:
        @translate_store_errors("get base availability")
        async def get_base_availability(self, ...):
            ...
    """
    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except PyMongoError as e:
                logger.error(f"Store failure in {operation}: {e}")
                raise StoreError(operation) from e
        return wrapper
    return decorator


# Exception Handlers for FastAPI
async def availability_exception_handler(
    request: Request, exc: AvailabilityServiceException
) -> JSONResponse:
    """Handle custom service exceptions"""
    if exc.status_code >= 500:
        logger.error(f"Service exception: {exc.code} - {exc.message}", exc_info=exc.__cause__)
    else:
        logger.warning(f"Service exception: {exc.code} - {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response()
    )


async def validation_exception_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Handle Pydantic validation errors"""
    errors = []
    for error in exc.errors():
        errors.append({
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"]
        })

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "success": False,
            "error": {
                "code": "VALIDATION_ERROR",
                "message": "Input validation failed",
                "details": {"errors": errors}
            }
        }
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle FastAPI HTTP exceptions"""
    detail = exc.detail
    if isinstance(detail, dict):
        code = detail.get("code", "HTTP_ERROR")
        message = detail.get("message", str(detail))
    else:
        code = "HTTP_ERROR"
        message = str(detail)

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": {
                "code": code,
                "message": message
            }
        }
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions"""
    logger.error(f"Unexpected error: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "error": {
                "code": "INTERNAL_SERVER_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


def register_exception_handlers(app):
    """Register all exception handlers with the FastAPI app"""
    from fastapi.exceptions import RequestValidationError

    app.add_exception_handler(AvailabilityServiceException, availability_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
