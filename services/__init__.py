"""
Business logic services.

Each service handles one domain area. The *_service modules without a
class (column mapping, row transform, validation, reconciliation,
status) are pure functions and never touch the database.
"""

from services.product_service import ProductService, get_product_service
from services.upload_history_service import UploadHistoryService, get_upload_history_service
from services.import_service import ImportService, get_import_service
from services.project_service import ProjectStatusService, get_project_service
from services.status_service import derive_status

__all__ = [
    "ProductService",
    "get_product_service",
    "UploadHistoryService",
    "get_upload_history_service",
    "ImportService",
    "get_import_service",
    "ProjectStatusService",
    "get_project_service",
    "derive_status",
]
