"""
Import service for spreadsheet uploads.

Runs an upload through mapping check → transform → validation →
reconciliation → write. Validation is all-or-nothing: if any row fails,
no data row is written. Writes happen in two phases for reconciled
types: one bulk insert, then one update per matched row.
"""

from typing import Any, Optional
import structlog

from config import get_supabase_client, settings
from models.data_types import DataTypeDescriptor, get_data_type
from models.imports import (
    ColumnMapping,
    FailedUpdate,
    ImportPreviewResponse,
    ImportResult,
    Provenance,
    SourceRecord,
)
from parsers.upload_parser import collect_columns
from services.column_mapping_service import check_mapping, map_columns, unmapped_fields
from services.row_transform_service import transform_row
from services.validation_service import validate_or_raise
from services.reconciliation_service import reconcile
from services.product_service import ProductService, get_product_service
from services.upload_history_service import (
    STATUS_PARTIAL,
    STATUS_SUCCESS,
    UploadHistoryService,
    get_upload_history_service,
)
from exceptions import (
    AppError,
    DatabaseError,
    FileParseError,
    ImportTooLargeError,
    ReconciliationPersistenceError,
)

logger = structlog.get_logger(__name__)

# Rows echoed back in a preview
PREVIEW_SAMPLE_SIZE = 5


class ImportService:
    """
    Spreadsheet import orchestration.

    Handles:
    - Mapping suggestions for the review step
    - Guarded, all-or-nothing imports with upload history
    - Insert/update reconciliation for data types with a natural key
    """

    def __init__(
        self,
        upload_history_service: UploadHistoryService,
        product_service: ProductService,
    ):
        self.db = get_supabase_client()
        self.history = upload_history_service
        self.products = product_service

    # ===================
    # PREVIEW
    # ===================

    def preview(self, data_type_id: str, records: list[SourceRecord]) -> ImportPreviewResponse:
        """
        Suggest a column mapping for an upload.

        Nothing is written; the operator reviews the mapping and submits it
        to run_import().
        """
        descriptor = get_data_type(data_type_id)
        columns = collect_columns(records)
        mapping = map_columns(descriptor.fields, columns)
        missing = unmapped_fields(descriptor.fields, mapping)

        logger.info(
            "import_preview",
            data_type=descriptor.id,
            columns=len(columns),
            mapped=len(descriptor.fields) - len(missing),
            fields=len(descriptor.fields),
        )
        if missing:
            logger.warning("import_preview_unmapped_fields", data_type=descriptor.id, fields=missing)

        return ImportPreviewResponse(
            data_type=descriptor.id,
            columns=columns,
            mapping=mapping,
            unmapped_fields=missing,
            row_count=len(records),
            sample_rows=records[:PREVIEW_SAMPLE_SIZE],
        )

    # ===================
    # IMPORT
    # ===================

    def run_import(
        self,
        data_type_id: str,
        records: list[SourceRecord],
        mapping: ColumnMapping,
        provenance: Provenance,
        filename: str,
    ) -> ImportResult:
        """
        Import an upload.

        Args:
            data_type_id: Registry id of the target data type
            records: Rows from the parsed file
            mapping: Operator-confirmed field → column mapping
            provenance: Uploading user and tenant
            filename: Original filename, for upload history

        Returns:
            ImportResult with insert/update counts and failed updates

        Raises:
            UnknownDataTypeError: Unknown data type
            MappingIncompleteError: Required field without a column
            ImportValidationError: Any row failed validation
            ReconciliationPersistenceError: Bulk insert failed
        """
        descriptor = get_data_type(data_type_id)

        if not records:
            raise FileParseError("File contains no data rows", details={"filename": filename})
        if len(records) > settings.import_max_rows:
            raise ImportTooLargeError(len(records), settings.import_max_rows)

        mapping = check_mapping(descriptor, mapping, collect_columns(records))

        logger.info(
            "import_started",
            data_type=descriptor.id,
            filename=filename,
            rows=len(records),
            tenant_id=provenance.tenant_id,
        )

        upload_id = self.history.start_upload(provenance, filename, descriptor.title, len(records))

        try:
            stamp = {
                "upload_id": upload_id,
                "user_id": provenance.user_id,
                "tenant_id": provenance.tenant_id,
            }
            rows = [transform_row(r, mapping, stamp, descriptor.rules) for r in records]
            validated = validate_or_raise(
                rows,
                descriptor.schema,
                display_limit=settings.import_error_display_limit,
            )

            if descriptor.dedup:
                result = self._import_reconciled(descriptor, validated, provenance, upload_id)
            else:
                inserted = self._bulk_insert(descriptor.table, validated)
                result = ImportResult(
                    success=True,
                    data_type=descriptor.id,
                    upload_id=upload_id,
                    row_count=len(validated),
                    inserted=inserted,
                    message=f"{inserted} rows imported",
                )
        except AppError as e:
            self.history.fail_upload(upload_id, e.message)
            raise

        status = STATUS_PARTIAL if result.failed_updates else STATUS_SUCCESS
        self.history.finish_upload(upload_id, result.row_count, status=status)

        logger.info(
            "import_complete",
            data_type=descriptor.id,
            upload_id=upload_id,
            inserted=result.inserted,
            updated=result.updated,
            failed_updates=len(result.failed_updates),
        )
        return result

    def _import_reconciled(
        self,
        descriptor: DataTypeDescriptor,
        rows: list[dict[str, Any]],
        provenance: Provenance,
        upload_id: str,
    ) -> ImportResult:
        """
        Insert new products, then update matched ones one by one.

        The snapshot is read once, right before partitioning. Updates only
        start after the bulk insert has finished; a failed update is
        reported and does not undo the insert or earlier updates.
        """
        snapshot = self.products.get_reconciliation_snapshot(provenance.tenant_id)
        plan = reconcile(rows, snapshot)

        try:
            inserted = self.products.bulk_insert(plan.to_insert)
        except DatabaseError as e:
            raise ReconciliationPersistenceError(descriptor.table, e.message)

        updated = 0
        failed: list[FailedUpdate] = []
        for row_number, row in zip(plan.update_row_numbers, plan.to_update):
            try:
                self.products.update(row["id"], row)
            except DatabaseError as e:
                failed.append(FailedUpdate(row=row_number, id=row["id"], error=e.message))
                continue
            updated += 1

        if failed:
            logger.warning(
                "import_updates_failed",
                upload_id=upload_id,
                failed=len(failed),
                updated=updated,
            )

        message = f"{inserted} rows inserted, {updated} rows updated"
        if failed:
            message += f", {len(failed)} updates failed"

        return ImportResult(
            success=not failed,
            data_type=descriptor.id,
            upload_id=upload_id,
            row_count=len(rows),
            inserted=inserted,
            updated=updated,
            failed_updates=failed,
            message=message,
        )

    def _bulk_insert(self, table: str, rows: list[dict[str, Any]]) -> int:
        """Insert all rows in one request."""
        try:
            result = self.db.table(table).insert(rows).execute()
        except Exception as e:
            logger.error("bulk_insert_failed", table=table, count=len(rows), error=str(e))
            raise ReconciliationPersistenceError(table, str(e))
        return len(result.data)


# =============================================================================
# Singleton
# =============================================================================

_import_service: Optional[ImportService] = None


def get_import_service() -> ImportService:
    """Get or create ImportService instance."""
    global _import_service
    if _import_service is None:
        _import_service = ImportService(get_upload_history_service(), get_product_service())
    return _import_service
