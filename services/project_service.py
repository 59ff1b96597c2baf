"""
Project status service.

Loads customer projects, optimization records and the viewer's project
history, then derives each project's status via services.status_service.
"""

from datetime import datetime, timezone
from typing import Any, Optional
import structlog

from config import get_supabase_client
from models.optimization import (
    CandidateSummaryResponse,
    OptimizationRecord,
    ProjectWithStatus,
    StatusSummaryResponse,
)
from services.status_service import (
    as_utc,
    count_statuses,
    derive_project_status,
    group_projects,
    months_ago,
    summarize_candidate_statuses,
)
from exceptions import DatabaseError

logger = structlog.get_logger(__name__)


class ProjectStatusService:
    """
    Project listing and status aggregation.

    tenant_id None is the cross-tenant view: every tenant's projects and
    every user's history (a project anyone has opened is no longer new).
    """

    def __init__(self):
        self.db = get_supabase_client()

    # ===================
    # DATA ACCESS
    # ===================

    def _scoped(self, table: str, tenant_id: Optional[str], columns: str = "*"):
        query = self.db.table(table).select(columns)
        if tenant_id is None:
            return query.not_.is_("tenant_id", "null")
        return query.eq("tenant_id", tenant_id)

    def _fetch(self, operation: str, query) -> list[dict[str, Any]]:
        try:
            return query.execute().data or []
        except Exception as e:
            logger.error(f"{operation}_failed", error=str(e))
            raise DatabaseError("select", str(e), details={"operation_name": operation})

    def get_project_rows(self, tenant_id: Optional[str]) -> list[dict[str, Any]]:
        """Raw customer_projects rows, newest first."""
        query = self._scoped("customer_projects", tenant_id).order("created_at", desc=True)
        return self._fetch("get_project_rows", query)

    def get_optimization_records(self, tenant_id: Optional[str]) -> list[OptimizationRecord]:
        """All optimization records in scope."""
        rows = self._fetch("get_optimization_records", self._scoped("opps_optimization", tenant_id))
        return [OptimizationRecord(**row) for row in rows]

    def get_view_history(self, user_id: str, tenant_id: Optional[str]) -> list[dict[str, Any]]:
        """Project views by this user (or by anyone in the cross-tenant view)."""
        if tenant_id is None:
            query = self._scoped("user_project_history", None, "project_id, viewed_at")
        else:
            query = (
                self.db.table("user_project_history")
                .select("project_id, viewed_at")
                .eq("user_id", user_id)
            )
        return self._fetch("get_view_history", query.order("viewed_at", desc=True))

    # ===================
    # STATUS
    # ===================

    def list_projects(
        self,
        user_id: str,
        tenant_id: Optional[str],
        now: Optional[datetime] = None,
    ) -> list[ProjectWithStatus]:
        """
        Grouped projects with their derived status.

        Args:
            user_id: Current viewer
            tenant_id: Tenant UUID, None for all tenants
            now: Reference time (defaults to now, UTC)

        Returns:
            Projects in the order their newest row was created
        """
        now = now or datetime.now(timezone.utc)
        logger.info("listing_projects", user_id=user_id, tenant_id=tenant_id)

        groups = group_projects(self.get_project_rows(tenant_id))
        records = self.get_optimization_records(tenant_id)
        history = self.get_view_history(user_id, tenant_id)

        projects = [
            ProjectWithStatus(
                **group.model_dump(),
                status=derive_project_status(group, records, history, now),
            )
            for group in groups
        ]

        logger.info("projects_listed", count=len(projects))
        return projects

    def status_summary(
        self,
        user_id: str,
        tenant_id: Optional[str],
        months: int = 3,
        now: Optional[datetime] = None,
    ) -> StatusSummaryResponse:
        """Projects created within the last `months` months, counted per status."""
        now = now or datetime.now(timezone.utc)
        threshold = months_ago(now, months)

        projects = [
            p for p in self.list_projects(user_id, tenant_id, now)
            if p.created_at is not None and as_utc(p.created_at) >= threshold
        ]
        counts = count_statuses(p.status for p in projects)

        logger.info("status_summary_computed", months=months, total=len(projects))
        return StatusSummaryResponse(months=months, total=len(projects), counts=counts)

    def candidate_summary(
        self,
        tenant_id: Optional[str],
        months: int = 3,
        now: Optional[datetime] = None,
    ) -> CandidateSummaryResponse:
        """Cross-sells and alternatives added in the last `months` months, per lifecycle status."""
        now = now or datetime.now(timezone.utc)
        records = self.get_optimization_records(tenant_id)
        data = summarize_candidate_statuses(records, months_ago(now, months))
        return CandidateSummaryResponse(months=months, data=data)


_project_service: Optional[ProjectStatusService] = None


def get_project_service() -> ProjectStatusService:
    """Get or create ProjectStatusService instance."""
    global _project_service
    if _project_service is None:
        _project_service = ProjectStatusService()
    return _project_service
