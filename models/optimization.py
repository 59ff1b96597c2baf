"""
Optimization status schemas.

A project's pipeline stage is never stored; it is derived from the
optimization records attached to the project (see services.status_service).
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from enum import Enum
from datetime import datetime

from models.base import BaseSchema


class DerivedStatus(str, Enum):
    """Pipeline stage of a project, lowest to highest."""
    NEU = "Neu"
    OFFEN = "Offen"
    PRUEFUNG = "Prüfung"
    VALIDIERUNG = "Validierung"
    ABGESCHLOSSEN = "Abgeschlossen"


# Rank for comparing stages (higher = further along)
STATUS_ORDER = {
    DerivedStatus.NEU: 0,
    DerivedStatus.OFFEN: 1,
    DerivedStatus.PRUEFUNG: 2,
    DerivedStatus.VALIDIERUNG: 3,
    DerivedStatus.ABGESCHLOSSEN: 4,
}


class CandidateStatus(str, Enum):
    """Lifecycle of a cross-sell or alternative attached to a project."""
    IDENTIFIZIERT = "Identifiziert"
    VORGESCHLAGEN = "Vorgeschlagen"
    AKZEPTIERT = "Akzeptiert"
    REGISTRIERT = "Registriert"
    ABGELEHNT = "Abgelehnt"


# Display order for candidate status summaries
CANDIDATE_STATUS_ORDER = [
    CandidateStatus.IDENTIFIZIERT.value,
    CandidateStatus.VORGESCHLAGEN.value,
    CandidateStatus.AKZEPTIERT.value,
    CandidateStatus.REGISTRIERT.value,
    CandidateStatus.ABGELEHNT.value,
]


class OptimizationRecord(BaseModel):
    """
    One candidate product attached to a project (opps_optimization row).

    Statuses are kept as plain strings: rows written by older clients can
    carry values outside the enums, and derivation must tolerate them.
    """
    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    project_number: Optional[str] = None
    tenant_id: Optional[str] = None
    optimization_status: Optional[str] = Field(None, description="Manually set overall status")

    cross_sell_product_name: Optional[str] = None
    cross_sell_status: Optional[str] = None
    cross_sell_date_added: Optional[datetime] = None

    alternative_product_name: Optional[str] = None
    alternative_status: Optional[str] = None
    alternative_date_added: Optional[datetime] = None


class ProjectMeta(BaseModel):
    """What derivation needs to know about the project itself."""
    created_at: Optional[datetime] = None
    was_viewed_by_current_user: bool = False


class ProjectGroup(BaseSchema):
    """
    Customer projects grouped by (customer, project_name).

    One upload row exists per project/application/product link; the
    dashboard shows them as one project.
    """
    customer: str
    project_name: str
    created_at: Optional[datetime] = Field(None, description="Earliest created_at in the group")
    applications: list[str] = Field(default_factory=list)
    products: list[str] = Field(default_factory=list)
    source_ids: list[str] = Field(default_factory=list)
    project_numbers: list[str] = Field(default_factory=list)


class ProjectWithStatus(ProjectGroup):
    """Project group plus its derived status."""
    status: DerivedStatus


class StatusSummaryResponse(BaseModel):
    """Count of projects per derived status."""
    months: int
    total: int
    counts: dict[str, int]


class CandidateStatusCount(BaseModel):
    """Candidate counts for one lifecycle status."""
    status: str
    cross_sells: int = 0
    alternatives: int = 0


class CandidateSummaryResponse(BaseModel):
    """Candidate counts per lifecycle status."""
    months: int
    data: list[CandidateStatusCount]
