"""
Cell coercion for uploaded rows.

Projects a loosely typed source row onto the target fields of a data
type, applying the per-field rules, and stamps provenance onto it.
"""

import math
from typing import Any, Optional

from models.data_types import FieldRules, DEFAULT_FIELD_RULES
from models.imports import ColumnMapping, SourceRecord

# Flag values that mean "yes" (compared lowercased and trimmed)
FLAG_TRUE_VALUES = frozenset({"y", "yes", "true", "1"})

# Stored flag values
FLAG_SET = "Y"
FLAG_UNSET = ""


def _is_missing(value: Any) -> bool:
    """None, empty string, or a NaN cell."""
    if value is None:
        return True
    if isinstance(value, str) and value == "":
        return True
    return isinstance(value, float) and math.isnan(value)


def parse_number(value: Any) -> Optional[float]:
    """
    Parse a cell as float.

    Returns None instead of raising, and never returns NaN or infinity.
    Digit-group underscores ("1_000") are rejected.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, str) and "_" in value:
        return None
    try:
        number = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def parse_flag(value: Any) -> str:
    """
    Normalize a yes/no marker cell.

    "yes", "Y", "true", "1" → "Y"; anything else → "" (not None).
    """
    return FLAG_SET if str(value).strip().lower() in FLAG_TRUE_VALUES else FLAG_UNSET


def transform_value(field: str, value: Any, rules: FieldRules = DEFAULT_FIELD_RULES) -> Any:
    """Apply the coercion rule for one field."""
    if _is_missing(value):
        return None
    if field in rules.numeric:
        return parse_number(value)
    if field in rules.flags:
        return parse_flag(value)
    if isinstance(value, str):
        return value.strip()
    return value


def transform_row(
    row: SourceRecord,
    mapping: ColumnMapping,
    provenance: dict[str, Any],
    rules: FieldRules = DEFAULT_FIELD_RULES,
) -> dict[str, Any]:
    """
    Build a typed row from a source row.

    Args:
        row: Column header → raw cell value
        mapping: Field → source column; fields without a column are skipped
        provenance: Injected keys (upload_id, user_id, tenant_id)
        rules: Numeric and flag field sets

    Returns:
        Field → coerced value, plus provenance keys
    """
    transformed: dict[str, Any] = dict(provenance)
    for field, column in mapping.items():
        if not column:
            continue
        transformed[field] = transform_value(field, row.get(column), rules)
    return transformed
