"""
Product maintenance routes.
"""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
from typing import Optional
import structlog

from models.imports import DuplicateRemovalResult
from services.product_service import get_product_service
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
    # Unexpected error
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

@router.post("/remove-duplicates", response_model=DuplicateRemovalResult)
async def remove_duplicate_products(
    tenant_id: Optional[str] = Query(None, description="Tenant UUID, omit for the global catalogue")
):
    """
    Delete duplicate products, keeping the newest of each group.

    Products are duplicates when product name and manufacturer match,
    ignoring case.
    """
    try:
        return get_product_service().remove_duplicates(tenant_id)
    except Exception as e:
        return handle_error(e)
