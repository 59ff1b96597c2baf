"""
Spreadsheet import request/response models.
"""

from typing import Any, Optional
from pydantic import BaseModel, Field

from models.base import BaseSchema

# Field name → chosen source column (None = unmapped)
ColumnMapping = dict[str, Optional[str]]

# One row as read from the file: column header → raw cell value
SourceRecord = dict[str, Any]


class Provenance(BaseSchema):
    """Who uploaded a batch and for which tenant."""
    user_id: str = Field(..., min_length=1, description="Uploading user")
    tenant_id: Optional[str] = Field(None, description="Tenant UUID, None for global data")


class ImportPreviewResponse(BaseModel):
    """Suggested mapping shown to the operator before submission."""
    data_type: str
    columns: list[str]
    mapping: ColumnMapping
    unmapped_fields: list[str] = Field(default_factory=list)
    row_count: int
    sample_rows: list[SourceRecord] = Field(default_factory=list)


class RowError(BaseModel):
    """Validation failure for one field of one row (1-based)."""
    row: int
    field: str
    message: str


class FailedUpdate(BaseModel):
    """An existing record that could not be updated."""
    row: int
    id: str
    error: str


class ImportResult(BaseModel):
    """Outcome of a completed import."""
    success: bool
    data_type: str
    upload_id: str
    row_count: int
    inserted: int = 0
    updated: int = 0
    failed_updates: list[FailedUpdate] = Field(default_factory=list)
    message: str


class UploadHistoryEntry(BaseModel):
    """Row of the upload_history table."""
    id: str
    user_id: Optional[str] = None
    tenant_id: Optional[str] = None
    filename: str
    data_type: str
    row_count: int = 0
    status: str
    error_message: Optional[str] = None
    uploaded_at: Optional[str] = None


class DuplicateGroup(BaseModel):
    """Products sharing a reconciliation key."""
    product: str
    manufacturer: Optional[str] = None
    count: int
    kept_id: str
    kept_created_at: Optional[str] = None


class DuplicateRemovalResult(BaseModel):
    """Outcome of duplicate product cleanup."""
    message: str
    duplicates_removed: int = 0
    duplicate_groups: int = 0
    details: list[DuplicateGroup] = Field(default_factory=list)
