"""
Insert-vs-update partitioning for imports with a natural key.

Products are identified by (product, manufacturer), case-insensitively.
Rows matching an existing record become updates carrying its id; the
rest become inserts.
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional
import structlog

logger = structlog.get_logger(__name__)

ReconciliationKey = tuple[str, str]


def reconciliation_key(row: dict[str, Any]) -> ReconciliationKey:
    """
    Normalized natural key of a product row.

    Kept as a pair rather than a concatenation so ("ab", "c") and
    ("a", "bc") stay distinct. A missing manufacturer counts as "".
    """
    product = row.get("product") or ""
    manufacturer = row.get("manufacturer") or ""
    return (str(product).lower(), str(manufacturer).lower())


@dataclass
class ReconciliationPlan:
    """
    Rows split into inserts and updates.

    update_row_numbers[i] is the 1-based upload row of to_update[i].
    """
    to_insert: list[dict[str, Any]] = field(default_factory=list)
    to_update: list[dict[str, Any]] = field(default_factory=list)
    update_row_numbers: list[int] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.to_insert and not self.to_update


def build_key_index(existing: Iterable[dict[str, Any]]) -> dict[ReconciliationKey, str]:
    """
    Map reconciliation key → existing record id.

    If the snapshot itself holds duplicates, the first one wins; callers
    pass the snapshot newest first.
    """
    index: dict[ReconciliationKey, str] = {}
    for record in existing:
        index.setdefault(reconciliation_key(record), str(record["id"]))
    return index


def reconcile(
    rows: list[dict[str, Any]],
    existing: Iterable[dict[str, Any]],
) -> ReconciliationPlan:
    """
    Partition validated rows against a snapshot of existing records.

    A row whose key repeats earlier in the same batch replaces that
    earlier row (the later one wins), so each key is written at most once.

    Args:
        rows: Validated rows, in upload order
        existing: Snapshot with at least id, product, manufacturer,
                  captured once right before this call

    Returns:
        ReconciliationPlan
    """
    index = build_key_index(existing)
    plan = ReconciliationPlan()

    # key → ("insert" | "update", position in that list)
    seen: dict[ReconciliationKey, tuple[str, int]] = {}

    for row_number, row in enumerate(rows, start=1):
        key = reconciliation_key(row)
        existing_id: Optional[str] = index.get(key)

        if key in seen:
            target, position = seen[key]
            if target == "update":
                plan.to_update[position] = {**row, "id": existing_id}
                plan.update_row_numbers[position] = row_number
            else:
                plan.to_insert[position] = row
            continue

        if existing_id is not None:
            seen[key] = ("update", len(plan.to_update))
            plan.to_update.append({**row, "id": existing_id})
            plan.update_row_numbers.append(row_number)
        else:
            seen[key] = ("insert", len(plan.to_insert))
            plan.to_insert.append(row)

    logger.debug(
        "rows_reconciled",
        rows=len(rows),
        to_insert=len(plan.to_insert),
        to_update=len(plan.to_update),
    )
    return plan
