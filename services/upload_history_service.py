"""
Upload history: one entry per import attempt.

The entry id doubles as the batch identifier (upload_id) stamped on
every imported row, so an upload can be traced or rolled back later.
"""
import structlog
from typing import Optional

from config import get_supabase_client, scope_to_tenant
from models.imports import Provenance, UploadHistoryEntry
from exceptions import DatabaseError

logger = structlog.get_logger(__name__)

STATUS_PROCESSING = "processing"
STATUS_SUCCESS = "success"
STATUS_PARTIAL = "partial"
STATUS_ERROR = "error"


class UploadHistoryService:
    def __init__(self):
        self.db = get_supabase_client()
        self.table = "upload_history"

    def start_upload(
        self,
        provenance: Provenance,
        filename: str,
        data_type: str,
        row_count: int,
    ) -> str:
        """
        Open a history entry for an import.

        Returns:
            Entry id, used as the batch's upload_id

        Raises:
            DatabaseError: If the entry cannot be created
        """
        try:
            result = self.db.table(self.table).insert({
                "user_id": provenance.user_id,
                "tenant_id": provenance.tenant_id,
                "filename": filename,
                "data_type": data_type,
                "row_count": row_count,
                "status": STATUS_PROCESSING,
            }).execute()
        except Exception as e:
            logger.error("upload_start_failed", filename=filename, error=str(e))
            raise DatabaseError("insert", str(e))

        upload_id = str(result.data[0]["id"])
        logger.info(
            "upload_started",
            upload_id=upload_id,
            data_type=data_type,
            filename=filename,
            row_count=row_count,
        )
        return upload_id

    def finish_upload(self, upload_id: str, row_count: int, status: str = STATUS_SUCCESS) -> None:
        """Mark an import as done (success or partial)."""
        try:
            self.db.table(self.table).update({
                "status": status,
                "row_count": row_count,
            }).eq("id", upload_id).execute()
        except Exception as e:
            # Data is already written; a stale history status is not worth failing the import
            logger.warning("upload_finish_not_recorded", upload_id=upload_id, error=str(e))
            return
        logger.info("upload_finished", upload_id=upload_id, status=status, row_count=row_count)

    def fail_upload(self, upload_id: str, error_message: str) -> None:
        """Record why an import failed."""
        # Truncate error message to prevent excessively long entries
        truncated_msg = error_message[:2000] if error_message else "Unknown error"
        try:
            self.db.table(self.table).update({
                "status": STATUS_ERROR,
                "error_message": truncated_msg,
            }).eq("id", upload_id).execute()
            logger.info(
                "failed_upload_recorded",
                upload_id=upload_id,
                error=truncated_msg[:200],
            )
        except Exception as log_err:
            # Never let failure logging break the error response
            logger.warning(
                "failed_to_record_upload_error",
                upload_id=upload_id,
                log_error=str(log_err),
            )

    def list_uploads(self, tenant_id: Optional[str], limit: int = 50) -> list[UploadHistoryEntry]:
        """Most recent uploads for a tenant (or the global dataset)."""
        try:
            query = self.db.table(self.table).select("*")
            result = (
                scope_to_tenant(query, tenant_id)
                .order("uploaded_at", desc=True)
                .limit(limit)
                .execute()
            )
        except Exception as e:
            logger.error("list_uploads_failed", tenant_id=tenant_id, error=str(e))
            raise DatabaseError("select", str(e))

        return [UploadHistoryEntry(**row) for row in result.data]


_service: Optional[UploadHistoryService] = None


def get_upload_history_service() -> UploadHistoryService:
    global _service
    if _service is None:
        _service = UploadHistoryService()
    return _service
