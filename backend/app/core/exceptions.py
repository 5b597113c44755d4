"""
Custom exceptions and error handlers for consistent error responses.

Provides standardized error codes and global exception handlers.
"""

import logging
from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from typing import Any, Dict, Optional

logger = logging.getLogger("fleet.errors")


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        message: str,
        error_code: str,
        status_code: int = 500,
        details: Dict[str, Any] = None,
        headers: Optional[Dict[str, str]] = None
    ):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        self.headers = headers
        super().__init__(message)


class ResourceNotFoundError(AppException):
    """Raised when requested resource is not found."""

    def __init__(self, resource: str, resource_id: Any = None):
        message = f"{resource} not found"
        if resource_id:
            message = f"{resource} with ID {resource_id} not found"
        super().__init__(
            message=message,
            error_code="ERR_NOT_FOUND_001",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource": resource, "id": resource_id}
        )


class InvalidFieldError(AppException):
    """Raised when an update names an unknown or unwritable field, or carries an invalid value."""

    def __init__(self, message: str, fields: list = None, errors: list = None):
        details: Dict[str, Any] = {"fields": fields or []}
        if errors:
            details["errors"] = errors
        super().__init__(
            message=message,
            error_code="ERR_INVALID_FIELD_001",
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details
        )


class VersionConflictError(AppException):
    """
    Raised when the caller's base version is older than the stored version.

    Carries the current record and its version so the caller can
    re-fetch, merge, and resubmit.
    """

    def __init__(self, resource: str, resource_id: Any, current: Dict[str, Any], current_version: int):
        self.resource = resource
        self.resource_id = resource_id
        self.current = current
        self.current_version = current_version
        super().__init__(
            message=f"{resource} {resource_id} has been modified by another user. Refresh and try again.",
            error_code="ERR_CONFLICT_001",
            status_code=status.HTTP_412_PRECONDITION_FAILED,
            details={
                "resource": resource,
                "id": resource_id,
                "current_version": current_version,
                "current": current
            },
            headers={"ETag": f'"{current_version}"'}
        )


class StoreUnavailableError(AppException):
    """Raised when the record store cannot be reached or times out."""

    def __init__(self, message: str = "Record store is unavailable"):
        super().__init__(
            message=message,
            error_code="ERR_UNAVAILABLE_001",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE
        )


class PreconditionRequiredError(AppException):
    """Raised when a conditional update is sent without If-Match."""

    def __init__(self):
        super().__init__(
            message="Updates require an If-Match header with the record's ETag",
            error_code="ERR_PRECONDITION_001",
            status_code=status.HTTP_428_PRECONDITION_REQUIRED
        )


class InvalidPreconditionError(AppException):
    """Raised when the If-Match header cannot be parsed as a version tag."""

    def __init__(self, value: str):
        super().__init__(
            message=f"Invalid If-Match value: {value!r}",
            error_code="ERR_PRECONDITION_002",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"if_match": value}
        )


# Global Exception Handlers

async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handler for custom application exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": exc.error_code,
            "message": exc.message,
            "details": jsonable_encoder(exc.details)
        },
        headers=exc.headers
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handler for FastAPI HTTPException with standardized format."""
    # Map status code to error code
    error_code_map = {
        400: "ERR_BAD_REQUEST",
        404: "ERR_NOT_FOUND",
        405: "ERR_METHOD_NOT_ALLOWED",
        412: "ERR_PRECONDITION_FAILED",
        500: "ERR_INTERNAL_SERVER"
    }

    error_code = error_code_map.get(exc.status_code, "ERR_UNKNOWN")

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": error_code,
            "message": exc.detail,
            "details": {}
        },
        headers=getattr(exc, "headers", None)
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handler for Pydantic validation errors."""
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error_code": "ERR_VALIDATION",
            "message": "Validation error",
            "details": {
                "errors": jsonable_errors(exc.errors())
            }
        }
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handler for unhandled exceptions."""
    logger.exception("Unhandled exception: %s: %s", type(exc).__name__, exc)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error_code": "ERR_INTERNAL_SERVER",
            "message": "An internal server error occurred",
            "details": {}
        }
    )


def jsonable_errors(errors) -> list:
    """Strip non-serializable context (e.g. exception instances) from pydantic errors."""
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in errors
    ]
