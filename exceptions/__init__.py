"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    ConflictError,
    DatabaseError,

    # Data types
    UnknownDataTypeError,

    # File parser
    FileParseError,

    # Imports
    MappingIncompleteError,
    MappingInvalidColumnError,
    MappingUnknownFieldError,
    ImportTooLargeError,
    ImportValidationError,
    ReconciliationPersistenceError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "DatabaseError",

    # Data types
    "UnknownDataTypeError",

    # File parser
    "FileParseError",

    # Imports
    "MappingIncompleteError",
    "MappingInvalidColumnError",
    "MappingUnknownFieldError",
    "ImportTooLargeError",
    "ImportValidationError",
    "ReconciliationPersistenceError",
]
