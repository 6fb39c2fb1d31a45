"""Custom exception hierarchy for Folio."""

from enum import Enum
from typing import Optional, Dict, Any


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # Auth errors
    UNAUTHENTICATED = "UNAUTHENTICATED"
    PERMISSION_DENIED = "PERMISSION_DENIED"

    # Lookup errors
    NOT_FOUND = "NOT_FOUND"

    # Input errors
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Store errors
    DEPENDENCY_ERROR = "DEPENDENCY_ERROR"
    DEADLINE_EXCEEDED = "DEADLINE_EXCEEDED"


class FolioException(Exception):
    """
    Base exception for all Folio errors.

    Provides structured error responses with:
    - Human-readable message
    - Machine-readable error code
    - HTTP status code
    - Optional additional details
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        return {
            "error": self.error_code.value,
            "message": self.message,
            "details": self.details
        }


class AuthenticationError(FolioException):
    """No caller identity where one is required."""

    def __init__(self, message: str = "Missing or invalid caller identity"):
        super().__init__(
            message,
            ErrorCode.UNAUTHENTICATED,
            status_code=401,
        )


class PermissionDeniedError(FolioException):
    """The relationship check denied the requested relation.

    Never carries the object id in its details: a denial must look the same
    whether or not the object exists.
    """

    def __init__(self, relation: str = "viewer"):
        super().__init__(
            f"Caller lacks the '{relation}' relation on the requested object",
            ErrorCode.PERMISSION_DENIED,
            status_code=403,
            details={"relation": relation},
        )


class FolderNotFoundError(FolioException):
    """Folder row missing from the metadata store."""

    def __init__(self, folder_id: str):
        super().__init__(
            f"Folder not found: {folder_id}",
            ErrorCode.NOT_FOUND,
            status_code=404,
            details={"folder_id": folder_id}
        )


class DocumentNotFoundError(FolioException):
    """Document row missing from the metadata store."""

    def __init__(self, document_id: str):
        super().__init__(
            f"Document not found: {document_id}",
            ErrorCode.NOT_FOUND,
            status_code=404,
            details={"document_id": document_id}
        )


class ValidationError(FolioException):
    """Validation failed for user input."""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(
            message,
            ErrorCode.VALIDATION_ERROR,
            status_code=400,
            details=details
        )


class DependencyError(FolioException):
    """A call to the relationship store or the metadata store failed."""

    def __init__(self, dependency: str, message: str, original_error: Optional[Exception] = None):
        details = {"dependency": dependency}
        if original_error:
            details["original_error"] = str(original_error)

        super().__init__(
            message,
            ErrorCode.DEPENDENCY_ERROR,
            status_code=502,
            details=details
        )
        self.original_error = original_error


class DeadlineExceededError(FolioException):
    """The caller's deadline expired before the named step could run."""

    def __init__(self, step: str):
        super().__init__(
            f"Deadline exceeded before {step}",
            ErrorCode.DEADLINE_EXCEEDED,
            status_code=504,
            details={"step": step},
        )
