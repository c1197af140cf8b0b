"""Custom exception classes and error handling."""

from typing import Any

from fastapi import HTTPException, status


class AppException(HTTPException):
    """Base application exception."""

    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(
            status_code=status_code,
            detail={
                "success": False,
                "error": {
                    "code": code,
                    "message": message,
                    "details": details or {},
                },
            },
        )


class AuthenticationError(AppException):
    """Authentication failed."""

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            code="AUTH_FAILED",
            message=message,
        )


class PermissionDeniedError(AppException):
    """Permission denied for the requested action."""

    def __init__(self, message: str = "Permission denied"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            code="PERMISSION_DENIED",
            message=message,
        )


class ValidationError(AppException):
    """Data validation failed."""

    def __init__(
        self,
        message: str = "Validation error",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            code="VALIDATION_ERROR",
            message=message,
            details=details,
        )


class ImportRowError(ValidationError):
    """A single import row could not be turned into a record.

    Raised and collected inside the importer; never escapes an import call.
    """

    def __init__(
        self,
        row: int,
        message: str,
        value: Any = None,
    ):
        self.row = row
        self.value = value
        details: dict[str, Any] = {"row": row}
        if value is not None:
            details["value"] = str(value)
        super().__init__(message=message, details=details)


class UploadError(AppException):
    """File upload failed."""

    def __init__(
        self,
        message: str = "Upload failed",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            code="UPLOAD_FAILED",
            message=message,
            details=details,
        )


class NotFoundError(AppException):
    """Resource not found."""

    def __init__(
        self,
        resource: str = "Resource",
        identifier: str | None = None,
    ):
        details = {}
        if identifier:
            details["identifier"] = identifier
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            code="NOT_FOUND",
            message=f"{resource} not found",
            details=details,
        )
