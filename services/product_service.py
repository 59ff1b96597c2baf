"""
Product persistence for imports and catalogue maintenance.

Supplies the existing-record snapshot used for reconciliation, applies
the resulting inserts and updates, and cleans up duplicate products.
"""

from typing import Any, Optional
import structlog

from config import get_supabase_client, scope_to_tenant
from models.imports import DuplicateGroup, DuplicateRemovalResult
from services.reconciliation_service import reconciliation_key
from exceptions import DatabaseError

logger = structlog.get_logger(__name__)

# Rows per delete request during duplicate cleanup
DELETE_BATCH_SIZE = 100

# Rows per snapshot request; PostgREST caps responses at max-rows (1000 by default)
SNAPSHOT_PAGE_SIZE = 1000


class ProductService:
    """
    Product data access.

    Every read is scoped to one tenant, or to the global catalogue
    (tenant_id IS NULL) when tenant_id is None.
    """

    def __init__(self):
        self.db = get_supabase_client()
        self.table = "products"

    # ===================
    # READ OPERATIONS
    # ===================

    def get_reconciliation_snapshot(self, tenant_id: Optional[str]) -> list[dict[str, Any]]:
        """
        Existing products keyed for reconciliation, newest first.

        Reads page by page until a short page comes back, so catalogues
        larger than the server row cap are loaded completely.

        Args:
            tenant_id: Tenant UUID, or None for the global catalogue

        Returns:
            List of {id, product, manufacturer, created_at}
        """
        logger.debug("getting_reconciliation_snapshot", tenant_id=tenant_id)

        products: list[dict[str, Any]] = []
        offset = 0

        while True:
            try:
                query = self.db.table(self.table).select("id, product, manufacturer, created_at")
                result = (
                    scope_to_tenant(query, tenant_id)
                    .order("created_at", desc=True)
                    # id breaks created_at ties so pages never overlap
                    .order("id")
                    .range(offset, offset + SNAPSHOT_PAGE_SIZE - 1)
                    .execute()
                )
            except Exception as e:
                logger.error(
                    "get_reconciliation_snapshot_failed",
                    tenant_id=tenant_id,
                    offset=offset,
                    error=str(e)
                )
                raise DatabaseError("select", str(e))

            products.extend(result.data)
            if len(result.data) < SNAPSHOT_PAGE_SIZE:
                break
            offset += SNAPSHOT_PAGE_SIZE

        logger.info("reconciliation_snapshot_loaded", tenant_id=tenant_id, count=len(products))
        return products

    # ===================
    # WRITE OPERATIONS
    # ===================

    def bulk_insert(self, rows: list[dict[str, Any]]) -> int:
        """
        Insert new products in one request.

        Returns:
            Number of rows inserted

        Raises:
            DatabaseError: If the insert fails (nothing is written)
        """
        if not rows:
            return 0

        logger.info("bulk_inserting_products", count=len(rows))

        try:
            result = self.db.table(self.table).insert(rows).execute()
        except Exception as e:
            logger.error("bulk_insert_products_failed", count=len(rows), error=str(e))
            raise DatabaseError("insert", str(e))

        return len(result.data)

    def update(self, product_id: str, row: dict[str, Any]) -> None:
        """
        Overwrite one product with freshly imported values.

        Raises:
            DatabaseError: If the update fails
        """
        update_data = {k: v for k, v in row.items() if k != "id"}

        try:
            self.db.table(self.table).update(update_data).eq("id", product_id).execute()
        except Exception as e:
            logger.error("update_product_failed", product_id=product_id, error=str(e))
            raise DatabaseError("update", str(e), details={"id": product_id})

        logger.debug("product_updated", product_id=product_id)

    # ===================
    # MAINTENANCE
    # ===================

    def remove_duplicates(self, tenant_id: Optional[str]) -> DuplicateRemovalResult:
        """
        Delete duplicate products, keeping the newest of each group.

        Products are duplicates when their reconciliation keys match.
        Deletes run in batches; a failed batch is logged and skipped.

        Args:
            tenant_id: Tenant UUID, or None for the global catalogue

        Returns:
            DuplicateRemovalResult with per-group details
        """
        logger.info("removing_duplicate_products", tenant_id=tenant_id)

        products = self.get_reconciliation_snapshot(tenant_id)
        if not products:
            return DuplicateRemovalResult(message="No products found")

        # Snapshot is newest first, so the first product of each group is kept
        groups: dict[tuple[str, str], list[dict[str, Any]]] = {}
        for product in products:
            groups.setdefault(reconciliation_key(product), []).append(product)

        details: list[DuplicateGroup] = []
        ids_to_delete: list[str] = []

        for members in groups.values():
            if len(members) < 2:
                continue
            keep, *duplicates = members
            details.append(DuplicateGroup(
                product=keep["product"],
                manufacturer=keep.get("manufacturer"),
                count=len(members),
                kept_id=str(keep["id"]),
                kept_created_at=keep.get("created_at"),
            ))
            ids_to_delete.extend(str(d["id"]) for d in duplicates)

        if not ids_to_delete:
            return DuplicateRemovalResult(message="No duplicates found")

        total_deleted = 0
        for start in range(0, len(ids_to_delete), DELETE_BATCH_SIZE):
            batch = ids_to_delete[start:start + DELETE_BATCH_SIZE]
            try:
                self.db.table(self.table).delete().in_("id", batch).execute()
            except Exception as e:
                logger.error(
                    "delete_duplicate_batch_failed",
                    batch=start // DELETE_BATCH_SIZE + 1,
                    size=len(batch),
                    error=str(e),
                )
                continue
            total_deleted += len(batch)

        logger.info(
            "duplicate_products_removed",
            tenant_id=tenant_id,
            removed=total_deleted,
            groups=len(details),
        )

        return DuplicateRemovalResult(
            message="Duplicates removed successfully",
            duplicates_removed=total_deleted,
            duplicate_groups=len(details),
            details=details,
        )


# Singleton instance for convenience
_product_service: Optional[ProductService] = None

def get_product_service() -> ProductService:
    """Get or create ProductService instance."""
    global _product_service
    if _product_service is None:
        _product_service = ProductService()
    return _product_service
