"""
Schema validation for transformed import rows.

Every row is checked independently and all errors are collected, but a
batch is only accepted when every row passes. There is no partial import.
"""

from dataclasses import dataclass, field
from typing import Any, Union
import structlog

from pydantic import ValidationError as PydanticValidationError

from models.base import OpenRowSchema
from models.imports import RowError
from exceptions import ImportValidationError

logger = structlog.get_logger(__name__)


@dataclass
class BatchValidationResult:
    """Result of validating a batch of rows."""
    rows: list[dict[str, Any]] = field(default_factory=list)
    errors: list[RowError] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """True if no row failed."""
        return len(self.errors) == 0

    def error_dicts(self) -> list[dict]:
        """Errors in API response format."""
        return [e.model_dump() for e in self.errors]


def validate_row(
    row: dict[str, Any],
    schema: type[OpenRowSchema],
    row_number: int,
) -> Union[dict[str, Any], list[RowError]]:
    """
    Validate one row against its schema.

    Args:
        row: Transformed row (fields + provenance)
        schema: Row schema of the data type
        row_number: 1-based position in the upload, used in errors

    Returns:
        JSON-ready validated row, or the list of field errors
    """
    try:
        model = schema.model_validate(row)
    except PydanticValidationError as e:
        return [
            RowError(
                row=row_number,
                field=".".join(str(part) for part in err["loc"]) or "row",
                message=err["msg"],
            )
            for err in e.errors()
        ]
    return model.model_dump(mode="json")


def validate_batch(
    rows: list[dict[str, Any]],
    schema: type[OpenRowSchema],
) -> BatchValidationResult:
    """
    Validate all rows, collecting every error.

    result.rows is left empty when any row fails, so callers cannot
    accidentally write a partial batch.
    """
    result = BatchValidationResult()
    validated: list[dict[str, Any]] = []

    for index, row in enumerate(rows, start=1):
        outcome = validate_row(row, schema, index)
        if isinstance(outcome, list):
            result.errors.extend(outcome)
        else:
            validated.append(outcome)

    if result.success:
        result.rows = validated

    logger.debug(
        "batch_validated",
        schema=schema.__name__,
        rows=len(rows),
        error_count=len(result.errors),
    )
    return result


def validate_or_raise(
    rows: list[dict[str, Any]],
    schema: type[OpenRowSchema],
    display_limit: int = 3,
) -> list[dict[str, Any]]:
    """
    Validate a batch and return its rows, or reject it entirely.

    Raises:
        ImportValidationError: If any row fails
    """
    result = validate_batch(rows, schema)
    if not result.success:
        logger.warning(
            "import_validation_failed",
            schema=schema.__name__,
            error_count=len(result.errors),
        )
        raise ImportValidationError(result.error_dicts(), display_limit=display_limit)
    return result.rows
