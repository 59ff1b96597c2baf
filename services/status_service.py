"""
Optimization status derivation.

Single home for the rule that turns a project's optimization records
into its pipeline stage. Every list, filter and chart that shows a
project status goes through derive_status(); nothing here touches the
database.
"""

import calendar
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, Optional, Sequence

from pydantic import TypeAdapter

from models.optimization import (
    CANDIDATE_STATUS_ORDER,
    STATUS_ORDER,
    CandidateStatus,
    CandidateStatusCount,
    DerivedStatus,
    OptimizationRecord,
    ProjectGroup,
    ProjectMeta,
)

# Unviewed projects younger than this show as "Neu"
FRESHNESS_WINDOW = timedelta(days=7)

# Candidate statuses that count as done
COMPLETED_CANDIDATE_STATUSES = frozenset({
    CandidateStatus.AKZEPTIERT.value,
    CandidateStatus.REGISTRIERT.value,
})

_DATETIME = TypeAdapter(Optional[datetime])


def as_utc(value: datetime) -> datetime:
    """Treat naive timestamps as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ===================
# DERIVATION
# ===================

def manual_override(records: Sequence[OptimizationRecord]) -> Optional[DerivedStatus]:
    """
    Highest manually set status, ignoring "Neu".

    A project cannot be forced back to "Neu". Unrecognised status strings
    still count as an override but rank below every known stage, so on
    their own they resolve to "Offen".
    """
    manual = [
        r.optimization_status
        for r in records
        if r.optimization_status and r.optimization_status != DerivedStatus.NEU.value
    ]
    if not manual:
        return None

    highest = DerivedStatus.OFFEN
    for value in manual:
        try:
            status = DerivedStatus(value)
        except ValueError:
            continue
        if STATUS_ORDER[status] > STATUS_ORDER[highest]:
            highest = status
    return highest


def candidate_statuses(records: Sequence[OptimizationRecord]) -> list[str]:
    """Lifecycle statuses of all named candidates that have one."""
    statuses: list[str] = []
    for r in records:
        if r.cross_sell_product_name and r.cross_sell_status:
            statuses.append(r.cross_sell_status)
        if r.alternative_product_name and r.alternative_status:
            statuses.append(r.alternative_status)
    return statuses


def is_fresh(meta: ProjectMeta, now: Optional[datetime] = None) -> bool:
    """True if the viewer never opened the project and it is under a week old."""
    if meta.was_viewed_by_current_user or meta.created_at is None:
        return False
    now = as_utc(now or _utcnow())
    return as_utc(meta.created_at) > now - FRESHNESS_WINDOW


def derive_status(
    meta: ProjectMeta,
    records: Sequence[OptimizationRecord],
    now: Optional[datetime] = None,
) -> DerivedStatus:
    """
    Compute the display status of a project.

    Rules are checked top to bottom, first match wins:
    1. Manual override (highest non-"Neu" status set on any record)
    2. Unviewed and created within the last 7 days → Neu
    3. No records → Offen
    4. No cross-sell or alternative named → Offen
    5. Candidates named but none has a status → Prüfung
    6. Any candidate "Identifiziert" → Prüfung
    7. Any candidate "Vorgeschlagen" → Validierung
    8. All candidates "Akzeptiert" or "Registriert" → Abgeschlossen
    9. Otherwise → Offen

    The order of 6-8 matters: one Identifiziert and one Vorgeschlagen
    candidate give Prüfung.

    Args:
        meta: Project creation time and whether the viewer has seen it
        records: Optimization records of this project (may be empty)
        now: Reference time, defaults to current UTC time

    Returns:
        DerivedStatus
    """
    override = manual_override(records)
    if override is not None:
        return override

    if is_fresh(meta, now):
        return DerivedStatus.NEU

    if not records:
        return DerivedStatus.OFFEN

    has_candidates = any(
        r.cross_sell_product_name or r.alternative_product_name
        for r in records
    )
    if not has_candidates:
        return DerivedStatus.OFFEN

    statuses = candidate_statuses(records)
    if not statuses:
        return DerivedStatus.PRUEFUNG

    if CandidateStatus.IDENTIFIZIERT.value in statuses:
        return DerivedStatus.PRUEFUNG

    if CandidateStatus.VORGESCHLAGEN.value in statuses:
        return DerivedStatus.VALIDIERUNG

    if all(s in COMPLETED_CANDIDATE_STATUSES for s in statuses):
        return DerivedStatus.ABGESCHLOSSEN

    return DerivedStatus.OFFEN


# ===================
# PROJECT GROUPING
# ===================

def _label(value: Any) -> Optional[str]:
    """Cell value as display string; joined rows arrive as dicts."""
    if isinstance(value, dict):
        value = next(iter(value.values()), None)
    if value is None or value == "":
        return None
    return str(value)


def group_projects(rows: Iterable[dict[str, Any]]) -> list[ProjectGroup]:
    """
    Group customer_projects rows by (customer, project_name).

    Applications, products and project numbers are collected without
    duplicates in first-seen order; created_at is the earliest in the group.
    """
    groups: dict[tuple[str, str], dict[str, Any]] = {}

    for row in rows:
        key = (row.get("customer") or "", row.get("project_name") or "")
        created_at = _DATETIME.validate_python(row.get("created_at"))
        group = groups.get(key)

        if group is None:
            group = {
                "customer": key[0],
                "project_name": key[1],
                "created_at": created_at,
                "applications": [],
                "products": [],
                "source_ids": [],
                "project_numbers": [],
            }
            groups[key] = group
        elif created_at is not None and (
            group["created_at"] is None
            or as_utc(created_at) < as_utc(group["created_at"])
        ):
            group["created_at"] = created_at

        for target, value in (
            ("applications", _label(row.get("application"))),
            ("products", _label(row.get("product"))),
            ("source_ids", _label(row.get("id"))),
            ("project_numbers", _label(row.get("project_number"))),
        ):
            if value and value not in group[target]:
                group[target].append(value)

    return [ProjectGroup(**g) for g in groups.values()]


def records_for_project(
    group: ProjectGroup,
    records: Iterable[OptimizationRecord],
) -> list[OptimizationRecord]:
    """Records whose project_number belongs to the group."""
    numbers = set(group.project_numbers)
    return [r for r in records if r.project_number in numbers]


def was_viewed(group: ProjectGroup, history: Iterable[dict[str, Any]]) -> bool:
    """True if any history entry points at one of the group's rows."""
    ids = set(group.source_ids)
    return any(entry.get("project_id") in ids for entry in history)


def derive_project_status(
    group: ProjectGroup,
    records: Iterable[OptimizationRecord],
    history: Iterable[dict[str, Any]],
    now: Optional[datetime] = None,
) -> DerivedStatus:
    """derive_status() for a grouped project."""
    meta = ProjectMeta(
        created_at=group.created_at,
        was_viewed_by_current_user=was_viewed(group, history),
    )
    return derive_status(meta, records_for_project(group, records), now)


# ===================
# SUMMARIES
# ===================

def months_ago(now: datetime, months: int) -> datetime:
    """Same day-of-month `months` earlier, clamped to the month's length."""
    month_index = now.year * 12 + (now.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(now.day, calendar.monthrange(year, month)[1])
    return now.replace(year=year, month=month, day=day)


def count_statuses(statuses: Iterable[DerivedStatus]) -> dict[str, int]:
    """Count per status; every status is present, in pipeline order."""
    counts = {status.value: 0 for status in DerivedStatus}
    for status in statuses:
        counts[status.value] += 1
    return counts


def summarize_candidate_statuses(
    records: Iterable[OptimizationRecord],
    since: datetime,
) -> list[CandidateStatusCount]:
    """
    Count cross-sells and alternatives per lifecycle status.

    Only candidates added on or after `since` are counted; a candidate
    without a status counts as "Neu". Known statuses come first in
    lifecycle order, then the rest by total, largest first.
    """
    since = as_utc(since)
    counts: dict[str, CandidateStatusCount] = {}

    def bump(status: Optional[str], attr: str) -> None:
        key = status or DerivedStatus.NEU.value
        entry = counts.setdefault(key, CandidateStatusCount(status=key))
        setattr(entry, attr, getattr(entry, attr) + 1)

    for r in records:
        if r.cross_sell_product_name and r.cross_sell_date_added:
            if as_utc(r.cross_sell_date_added) >= since:
                bump(r.cross_sell_status, "cross_sells")
        if r.alternative_product_name and r.alternative_date_added:
            if as_utc(r.alternative_date_added) >= since:
                bump(r.alternative_status, "alternatives")

    def sort_key(entry: CandidateStatusCount) -> tuple[int, int]:
        if entry.status in CANDIDATE_STATUS_ORDER:
            return (0, CANDIDATE_STATUS_ORDER.index(entry.status))
        return (1, -(entry.cross_sells + entry.alternatives))

    return sorted(counts.values(), key=sort_key)
