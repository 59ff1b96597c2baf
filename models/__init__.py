"""
Pydantic models for validation and serialization.
"""

from models.base import (
    BaseSchema,
    OpenRowSchema,
)
from models.rows import (
    ProductLifecycle,
    ProductRow,
    ApplicationRow,
    CrossSellRow,
    ProductAlternativeRow,
    ApplicationInsightRow,
    CustomerRow,
    CustomerProjectRow,
)
from models.data_types import (
    FieldRules,
    DataTypeDescriptor,
    DATA_TYPES,
    DEFAULT_FIELD_RULES,
    get_data_type,
)
from models.imports import (
    ColumnMapping,
    SourceRecord,
    Provenance,
    ImportPreviewResponse,
    RowError,
    FailedUpdate,
    ImportResult,
    UploadHistoryEntry,
    DuplicateRemovalResult,
)
from models.optimization import (
    DerivedStatus,
    CandidateStatus,
    OptimizationRecord,
    ProjectMeta,
    ProjectGroup,
    ProjectWithStatus,
)

__all__ = [
    # Base
    "BaseSchema",
    "OpenRowSchema",

    # Rows
    "ProductLifecycle",
    "ProductRow",
    "ApplicationRow",
    "CrossSellRow",
    "ProductAlternativeRow",
    "ApplicationInsightRow",
    "CustomerRow",
    "CustomerProjectRow",

    # Data types
    "FieldRules",
    "DataTypeDescriptor",
    "DATA_TYPES",
    "DEFAULT_FIELD_RULES",
    "get_data_type",

    # Imports
    "ColumnMapping",
    "SourceRecord",
    "Provenance",
    "ImportPreviewResponse",
    "RowError",
    "FailedUpdate",
    "ImportResult",
    "UploadHistoryEntry",
    "DuplicateRemovalResult",

    # Optimization
    "DerivedStatus",
    "CandidateStatus",
    "OptimizationRecord",
    "ProjectMeta",
    "ProjectGroup",
    "ProjectWithStatus",
]
