"""
Custom exception classes for the application.

Every error carries a stable code, an HTTP status and a details dict so
routes can hand it straight to the client via to_dict().
"""

from typing import Optional, Any
from datetime import datetime, timezone


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "MAPPING_INCOMPLETE")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class ConflictError(AppError):
    """Conflict with existing resource (409)."""

    def __init__(
        self,
        message: str,
        code: str = "CONFLICT",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=409,
            details=details
        )


class DatabaseError(AppError):
    """Database operation failed (500)."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="DATABASE_ERROR",
            message=f"Database {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})}
        )


# ===================
# DATA TYPE ERRORS
# ===================

class UnknownDataTypeError(NotFoundError):
    """Data type id is not in the import registry."""

    def __init__(self, data_type_id: str):
        super().__init__(
            resource="Data type",
            identifier=data_type_id,
            code="DATA_TYPE_NOT_FOUND"
        )


# ===================
# FILE PARSER ERRORS
# ===================

class FileParseError(ValidationError):
    """Uploaded file could not be read into rows."""

    def __init__(
        self,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="FILE_PARSE_ERROR",
            message=message,
            details=details
        )


# ===================
# IMPORT ERRORS
# ===================

class MappingIncompleteError(ValidationError):
    """Required fields have no source column assigned."""

    def __init__(self, missing_fields: list[str]):
        super().__init__(
            code="MAPPING_INCOMPLETE",
            message=f"Please map all fields: {', '.join(missing_fields)}",
            details={"missing_fields": missing_fields}
        )


class MappingInvalidColumnError(ValidationError):
    """Mapping points at columns the file does not contain."""

    def __init__(self, invalid: dict[str, str], available: list[str]):
        super().__init__(
            code="MAPPING_INVALID_COLUMN",
            message=f"Mapped columns not found in file: {', '.join(invalid.values())}",
            details={"invalid": invalid, "available_columns": available}
        )


class MappingUnknownFieldError(ValidationError):
    """Mapping names fields the data type does not declare."""

    def __init__(self, fields: list[str], data_type_id: str):
        super().__init__(
            code="MAPPING_UNKNOWN_FIELD",
            message=f"Fields not defined for {data_type_id}: {', '.join(fields)}",
            details={"fields": fields, "data_type": data_type_id}
        )


class ImportTooLargeError(ValidationError):
    """Upload exceeds the configured row ceiling."""

    def __init__(self, row_count: int, max_rows: int):
        super().__init__(
            code="IMPORT_TOO_LARGE",
            message=f"Upload has {row_count} rows, maximum is {max_rows}",
            details={"row_count": row_count, "max_rows": max_rows}
        )


class ImportValidationError(ValidationError):
    """
    One or more rows failed schema validation.

    The whole batch is rejected. The message shows the first
    display_limit errors, details carry all of them. Row numbers count
    data rows after the header, skipping blank rows.
    """

    ROW_COUNTING_NOTE = "rows are counted from the first data row, blank rows excluded"

    def __init__(self, errors: list[dict], display_limit: int = 3):
        shown = [
            f"Row {e['row']}: {e['field']}: {e['message']}"
            for e in errors[:display_limit]
        ]
        message = "; ".join(shown)
        if len(errors) > display_limit:
            message += f" (and {len(errors) - display_limit} more)"
        super().__init__(
            code="IMPORT_VALIDATION_FAILED",
            message=(
                f"Upload validation failed with {len(errors)} errors: {message}"
                f" ({self.ROW_COUNTING_NOTE})"
            ),
            details={"errors": errors, "total": len(errors), "row_numbering": self.ROW_COUNTING_NOTE}
        )


class ReconciliationPersistenceError(AppError):
    """Bulk insert failed; nothing from this batch was committed."""

    def __init__(self, table: str, message: str, details: Optional[dict] = None):
        super().__init__(
            code="IMPORT_PERSISTENCE_FAILED",
            message=f"Writing to {table} failed: {message}",
            status_code=500,
            details={"table": table, **(details or {})}
        )
