"""
Project status routes.

Statuses are derived on every request from the optimization records;
nothing here writes.
"""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
from typing import Optional
import structlog

from models.optimization import (
    CandidateSummaryResponse,
    ProjectWithStatus,
    StatusSummaryResponse,
)
from services.project_service import get_project_service
from exceptions import AppError

logger = structlog.get_logger(__name__)

router = APIRouter()


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


# ===================
# ROUTES
# ===================

@router.get("", response_model=list[ProjectWithStatus])
async def list_projects(
    user_id: str = Query(..., min_length=1, description="Current viewer"),
    tenant_id: Optional[str] = Query(None, description="Tenant UUID, omit for all tenants"),
):
    """List grouped customer projects with their derived status."""
    try:
        return get_project_service().list_projects(user_id, tenant_id)
    except Exception as e:
        return handle_error(e)


@router.get("/status-summary", response_model=StatusSummaryResponse)
async def project_status_summary(
    user_id: str = Query(..., min_length=1, description="Current viewer"),
    tenant_id: Optional[str] = Query(None, description="Tenant UUID, omit for all tenants"),
    months: int = Query(3, ge=1, le=24, description="Look-back window in months"),
):
    """Count recent projects per derived status."""
    try:
        return get_project_service().status_summary(user_id, tenant_id, months=months)
    except Exception as e:
        return handle_error(e)


@router.get("/candidate-summary", response_model=CandidateSummaryResponse)
async def candidate_status_summary(
    tenant_id: Optional[str] = Query(None, description="Tenant UUID, omit for all tenants"),
    months: int = Query(3, ge=1, le=24, description="Look-back window in months"),
):
    """Count recently added cross-sells and alternatives per lifecycle status."""
    try:
        return get_project_service().candidate_summary(tenant_id, months=months)
    except Exception as e:
        return handle_error(e)
