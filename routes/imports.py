"""
Import API routes.

Two-step upload flow: POST .../preview suggests a column mapping, the
operator reviews it, then POST /{data_type} runs the import with the
confirmed mapping.
"""

import json
from typing import Optional

from fastapi import APIRouter, File, Form, Query, UploadFile
from fastapi.responses import JSONResponse
from pydantic import TypeAdapter, ValidationError as PydanticValidationError
import structlog

from config import settings
from models.data_types import DATA_TYPES
from models.imports import (
    ColumnMapping,
    ImportPreviewResponse,
    ImportResult,
    Provenance,
    UploadHistoryEntry,
)
from parsers.upload_parser import ParsedUpload, parse_upload
from services.import_service import get_import_service
from services.upload_history_service import get_upload_history_service
from exceptions import AppError, FileParseError, ValidationError

logger = structlog.get_logger(__name__)

router = APIRouter()

_MAPPING = TypeAdapter(ColumnMapping)


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
# HELPERS
# ===================

async def _read_upload(file: UploadFile) -> ParsedUpload:
    """Read and parse an uploaded file, enforcing the size limit."""
    content = await file.read()
    if len(content) > settings.import_max_file_bytes:
        raise FileParseError(
            f"File exceeds {settings.import_max_file_mb} MB limit",
            details={"filename": file.filename, "size": len(content)},
        )
    return parse_upload(file.filename or "", content)


def _parse_mapping(raw: str) -> ColumnMapping:
    """Decode the mapping form field (JSON object of field → column)."""
    try:
        return _MAPPING.validate_json(raw)
    except PydanticValidationError as e:
        raise ValidationError(
            "Mapping must be a JSON object of field names to column names",
            code="MAPPING_MALFORMED",
            details={"errors": json.loads(e.json(include_url=False))},
        )


# ===================
# ROUTES
# ===================

@router.get("/data-types")
async def list_data_types():
    """List importable data types with their fields."""
    return {"data": [d.to_dict() for d in DATA_TYPES.values()]}


@router.get("/history", response_model=list[UploadHistoryEntry])
async def list_upload_history(
    tenant_id: Optional[str] = Query(None, description="Tenant UUID, omit for global uploads"),
    limit: int = Query(50, ge=1, le=500, description="Max entries"),
):
    """Most recent uploads, newest first."""
    try:
        return get_upload_history_service().list_uploads(tenant_id, limit=limit)
    except Exception as e:
        return handle_error(e)


@router.post("/{data_type}/preview", response_model=ImportPreviewResponse)
async def preview_import(
    data_type: str,
    file: UploadFile = File(..., description="CSV or Excel file"),
):
    """
    Parse a file and suggest a column mapping.

    Nothing is written. The response lists the file's columns, the
    suggested field → column mapping and any fields left unmapped.
    """
    logger.info("import_preview_requested", data_type=data_type, filename=file.filename)

    try:
        parsed = await _read_upload(file)
        return get_import_service().preview(data_type, parsed.records)
    except Exception as e:
        return handle_error(e)


@router.post("/{data_type}", response_model=ImportResult)
async def run_import(
    data_type: str,
    file: UploadFile = File(..., description="CSV or Excel file"),
    mapping: str = Form(..., description="JSON object: field → column"),
    user_id: str = Form(..., description="Uploading user"),
    tenant_id: Optional[str] = Form(None, description="Tenant UUID, omit for global data"),
):
    """
    Import a file with an operator-confirmed mapping.

    All rows are validated first; if any row fails, nothing is written
    and the response carries the row errors. Products are reconciled
    against existing records by (product, manufacturer).

    Raises:
        422: Mapping incomplete, invalid file or failed row validation
        404: Unknown data type
        500: Database write failed
    """
    logger.info(
        "import_requested",
        data_type=data_type,
        filename=file.filename,
        user_id=user_id,
        tenant_id=tenant_id,
    )

    try:
        if not user_id.strip():
            raise ValidationError("user_id is required", code="USER_REQUIRED")
        confirmed = _parse_mapping(mapping)
        parsed = await _read_upload(file)
        provenance = Provenance(user_id=user_id, tenant_id=tenant_id or None)
        return get_import_service().run_import(
            data_type,
            parsed.records,
            confirmed,
            provenance,
            filename=parsed.filename,
        )
    except Exception as e:
        return handle_error(e)
