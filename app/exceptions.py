# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
# Every error carries a machine-readable code and, where it helps, a
# suggestion telling the caller how to fix the request.
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse


class GuitarVaultException(Exception):
    """
    Base exception for the GuitarVault API.

    All custom exceptions inherit from this class.
    """

    def __init__(
        self,
        message: str,
        code: str = "GUITARVAULT_ERROR",
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
# Guitar Exceptions
# =============================================================================

class GuitarValidationError(GuitarVaultException):
    """
    Raised when a guitar payload or filter fails validation.

    `subject` names what was invalid, e.g. "guitar data" or "filters".
    """

    def __init__(self, errors: list[dict[str, str]], subject: str = "guitar data"):
        summary = "; ".join(f"{e['field']}: {e['message']}" for e in errors)
        super().__init__(
            message=f"Invalid {subject}: {summary}" if summary else f"Invalid {subject}",
            code="VALIDATION_ERROR",
            status_code=400,
            details={"errors": errors},
        )
        self.errors = errors


class GuitarNotFoundError(GuitarVaultException):
    """Raised when a guitar ID doesn't exist."""

    def __init__(self, guitar_id: str):
        super().__init__(
            message="Guitar not found",
            code="GUITAR_NOT_FOUND",
            status_code=404,
            details={"guitar_id": guitar_id},
        )


class GuitarStoreError(GuitarVaultException):
    """Raised when the guitar table cannot be read or written."""

    def __init__(self, operation: str):
        super().__init__(
            message=f"Failed to {operation}",
            code="GUITAR_STORE_ERROR",
            status_code=500,
            suggestion="Try again later or contact support if the issue persists",
        )


# =============================================================================
# Object Storage Exceptions
# =============================================================================

class ObjectNotFoundError(GuitarVaultException):
    """Raised when an object path doesn't resolve to a stored object."""

    def __init__(self, path: str | None = None):
        super().__init__(
            message="Object not found",
            code="OBJECT_NOT_FOUND",
            status_code=404,
            details={"path": path} if path else None,
        )


class ObjectStorageConfigError(GuitarVaultException):
    """Raised when a required object storage setting is missing."""

    def __init__(self, variable: str, hint: str):
        super().__init__(
            message=f"{variable} not set",
            code="OBJECT_STORAGE_CONFIG_ERROR",
            status_code=500,
            suggestion=hint,
            details={"variable": variable},
        )


class StorageUploadError(GuitarVaultException):
    """
    Raised when issuing an upload URL or writing object metadata fails.

    The storage error itself is logged where it happens, never returned.
    """

    def __init__(self):
        super().__init__(
            message="Failed to prepare object upload",
            code="STORAGE_UPLOAD_ERROR",
            status_code=500,
            suggestion="Try again later or contact support if the issue persists",
        )


class StorageDownloadError(GuitarVaultException):
    """Raised when an object cannot be read before streaming starts."""

    def __init__(self, path: str):
        super().__init__(
            message="Error downloading file",
            code="STORAGE_DOWNLOAD_ERROR",
            status_code=500,
            suggestion="Try again later or contact support if the issue persists",
            details={"path": path},
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def guitarvault_exception_handler(
    request: Request,
    exc: GuitarVaultException
) -> JSONResponse:
    """
    Convert GuitarVaultException to JSON response.

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
