"""
Automatic column-to-field matching for spreadsheet uploads.

Suggests which file column feeds each target field. The operator reviews
and can change the suggestion before submitting; check_mapping() then
guards the submission.
"""

from typing import Optional, Sequence
import structlog

from models.data_types import DataTypeDescriptor
from models.imports import ColumnMapping
from utils.text_utils import similarity_score
from exceptions import (
    MappingIncompleteError,
    MappingInvalidColumnError,
    MappingUnknownFieldError,
)

logger = structlog.get_logger(__name__)

# Minimum similarity for an automatic assignment
MATCH_THRESHOLD = 0.6


def map_columns(fields: Sequence[str], columns: Sequence[str]) -> ColumnMapping:
    """
    Greedily assign each field its best-matching unused column.

    Fields are processed in declared order and a column is consumed as
    soon as it is assigned, so an earlier field can take a column that
    would have fit a later field better. This is the accepted behaviour
    (it decides ties the same way existing uploads were mapped); it is
    not a globally optimal assignment.

    Among equally scored columns the first one in file order wins.

    Args:
        fields: Target fields in declared order
        columns: File columns in first-seen order

    Returns:
        Mapping for every field; None where no column reached MATCH_THRESHOLD
    """
    mapping: ColumnMapping = {}
    used: set[str] = set()

    for field in fields:
        best_column: Optional[str] = None
        best_score = 0.0

        for column in columns:
            if column in used:
                continue
            score = similarity_score(field, column)
            if score > best_score:
                best_score = score
                best_column = column

        if best_column is not None and best_score >= MATCH_THRESHOLD:
            mapping[field] = best_column
            used.add(best_column)
            logger.debug("column_auto_mapped", field=field, column=best_column, score=round(best_score, 3))
        else:
            mapping[field] = None
            logger.debug("column_not_mapped", field=field, best_score=round(best_score, 3))

    return mapping


def unmapped_fields(fields: Sequence[str], mapping: ColumnMapping) -> list[str]:
    """Fields with no column assigned, in declared order."""
    return [f for f in fields if not mapping.get(f)]


def check_mapping(
    descriptor: DataTypeDescriptor,
    mapping: ColumnMapping,
    columns: Sequence[str],
) -> ColumnMapping:
    """
    Validate an operator-submitted mapping before any write.

    Args:
        descriptor: Active data type
        mapping: Field → column as submitted
        columns: Columns present in the file

    Returns:
        Mapping restricted to the descriptor's fields

    Raises:
        MappingUnknownFieldError: Mapping names fields the type lacks
        MappingIncompleteError: A declared field has no column
        MappingInvalidColumnError: A column is not in the file
    """
    unknown = [f for f in mapping if f not in descriptor.fields]
    if unknown:
        raise MappingUnknownFieldError(unknown, descriptor.id)

    missing = unmapped_fields(descriptor.fields, mapping)
    if missing:
        logger.warning("mapping_incomplete", data_type=descriptor.id, missing=missing)
        raise MappingIncompleteError(missing)

    available = set(columns)
    invalid = {
        field: mapping[field]
        for field in descriptor.fields
        if mapping[field] not in available
    }
    if invalid:
        raise MappingInvalidColumnError(invalid, list(columns))

    return {field: mapping[field] for field in descriptor.fields}
