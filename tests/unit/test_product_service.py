"""
Unit tests for ProductService.

Run: pytest tests/unit/test_product_service.py -v
Run with coverage: pytest tests/unit/test_product_service.py --cov=services/product_service
"""

import pytest

from services.product_service import (
    DELETE_BATCH_SIZE,
    SNAPSHOT_PAGE_SIZE,
    ProductService,
    get_product_service,
)
from exceptions import DatabaseError

from tests.factories import ExistingProductFactory


class TestReconciliationSnapshot:
    """Tests for ProductService.get_reconciliation_snapshot()"""

    def test_returns_rows(self, mock_db, mock_supabase):
        # Arrange
        rows = [ExistingProductFactory.create("Spot"), ExistingProductFactory.create("Lamp")]
        mock_supabase.set_table_data("products", rows)
        service = ProductService()

        # Act
        snapshot = service.get_reconciliation_snapshot("tenant-1")

        # Assert
        assert [r["product"] for r in snapshot] == ["Spot", "Lamp"]

    def test_global_scope_filters_null_tenant(self, mock_db, mock_supabase):
        service = ProductService()

        service.get_reconciliation_snapshot(None)

        assert mock_supabase.operations[0]["filters"] == [("is", "tenant_id", "null")]

    def test_database_failure_raises(self, mock_db, mock_supabase):
        mock_supabase.set_table_error("products", Exception("connection reset"))
        service = ProductService()

        with pytest.raises(DatabaseError):
            service.get_reconciliation_snapshot("tenant-1")

    def test_reads_every_page(self, mock_db, mock_supabase):
        # Arrange: two full pages and a partial one
        total = 2 * SNAPSHOT_PAGE_SIZE + 5
        rows = [ExistingProductFactory.create(f"Product {i}", id=f"p-{i}") for i in range(total)]
        mock_supabase.set_table_data("products", rows)

        # Act
        snapshot = ProductService().get_reconciliation_snapshot("tenant-1")

        # Assert
        assert len(snapshot) == total
        assert snapshot[-1]["id"] == f"p-{total - 1}"
        ranges = [op["range"] for op in mock_supabase.writes("products", "select")]
        assert ranges == [
            (0, SNAPSHOT_PAGE_SIZE - 1),
            (SNAPSHOT_PAGE_SIZE, 2 * SNAPSHOT_PAGE_SIZE - 1),
            (2 * SNAPSHOT_PAGE_SIZE, 3 * SNAPSHOT_PAGE_SIZE - 1),
        ]

    def test_exact_page_multiple_stops_on_empty_page(self, mock_db, mock_supabase):
        rows = [ExistingProductFactory.create(f"Product {i}") for i in range(SNAPSHOT_PAGE_SIZE)]
        mock_supabase.set_table_data("products", rows)

        snapshot = ProductService().get_reconciliation_snapshot("tenant-1")

        assert len(snapshot) == SNAPSHOT_PAGE_SIZE
        assert len(mock_supabase.writes("products", "select")) == 2

    def test_failure_on_later_page_raises(self, mock_db, mock_supabase):
        rows = [ExistingProductFactory.create(f"Product {i}") for i in range(SNAPSHOT_PAGE_SIZE + 1)]
        mock_supabase.set_table_data("products", rows)
        mock_supabase.set_table_error(
            "products",
            Exception("statement timeout"),
            when=lambda q: q._range is not None and q._range[0] > 0,
        )

        with pytest.raises(DatabaseError):
            ProductService().get_reconciliation_snapshot("tenant-1")


class TestWrites:
    """Tests for ProductService.bulk_insert() and update()"""

    def test_bulk_insert_returns_count(self, mock_db, mock_supabase):
        service = ProductService()

        inserted = service.bulk_insert([{"product": "A"}, {"product": "B"}])

        assert inserted == 2

    def test_bulk_insert_empty_is_noop(self, mock_db, mock_supabase):
        service = ProductService()

        assert service.bulk_insert([]) == 0
        assert mock_supabase.operations == []

    def test_bulk_insert_failure_raises(self, mock_db, mock_supabase):
        mock_supabase.set_table_error("products", Exception("duplicate key"), operation="insert")
        service = ProductService()

        with pytest.raises(DatabaseError):
            service.bulk_insert([{"product": "A"}])

    def test_update_targets_id_and_strips_it(self, mock_db, mock_supabase):
        service = ProductService()

        service.update("p-1", {"id": "p-1", "product": "Spot", "product_price": 3.0})

        op = mock_supabase.writes("products", "update")[0]
        assert op["payload"] == {"product": "Spot", "product_price": 3.0}
        assert op["filters"] == [("eq", "id", "p-1")]

    def test_update_failure_carries_id(self, mock_db, mock_supabase):
        mock_supabase.set_table_error("products", Exception("row locked"), operation="update")
        service = ProductService()

        with pytest.raises(DatabaseError) as exc_info:
            service.update("p-1", {"product": "Spot"})

        assert exc_info.value.details["id"] == "p-1"


class TestRemoveDuplicates:
    """Tests for ProductService.remove_duplicates()"""

    def test_keeps_newest_of_each_group(self, mock_db, mock_supabase):
        # Arrange: snapshot order is newest first
        mock_supabase.set_table_data("products", [
            ExistingProductFactory.create("Spot", id="s-new", created_at="2025-06-01T00:00:00+00:00"),
            ExistingProductFactory.create("Lamp", id="l-1"),
            ExistingProductFactory.create("SPOT", manufacturer="lumatec", id="s-old"),
            ExistingProductFactory.create("Spot", manufacturer="Other", id="s-other"),
        ])
        service = ProductService()

        # Act
        result = service.remove_duplicates("tenant-1")

        # Assert
        assert result.duplicates_removed == 1
        assert result.duplicate_groups == 1
        assert result.details[0].kept_id == "s-new"
        assert result.details[0].count == 2
        deletes = mock_supabase.writes("products", "delete")
        assert deletes[0]["filters"] == [("in", "id", ["s-old"])]

    def test_finds_duplicates_across_pages(self, mock_db, mock_supabase):
        # Arrange: the older copy sits beyond the first page
        rows = [ExistingProductFactory.create(f"Product {i}") for i in range(SNAPSHOT_PAGE_SIZE)]
        rows.insert(0, ExistingProductFactory.create("Spot", id="s-new"))
        rows.append(ExistingProductFactory.create("Spot", id="s-old"))
        mock_supabase.set_table_data("products", rows)

        # Act
        result = ProductService().remove_duplicates("tenant-1")

        # Assert
        assert result.duplicates_removed == 1
        assert result.details[0].kept_id == "s-new"
        assert mock_supabase.writes("products", "delete")[0]["filters"] == [("in", "id", ["s-old"])]

    def test_no_products(self, mock_db, mock_supabase):
        result = ProductService().remove_duplicates(None)

        assert result.message == "No products found"
        assert result.duplicates_removed == 0

    def test_no_duplicates(self, mock_db, mock_supabase):
        mock_supabase.set_table_data("products", [
            ExistingProductFactory.create("Spot"),
            ExistingProductFactory.create("Lamp"),
        ])

        result = ProductService().remove_duplicates("tenant-1")

        assert result.message == "No duplicates found"
        assert mock_supabase.writes("products", "delete") == []

    def test_deletes_in_batches_and_skips_failed_batch(self, mock_db, mock_supabase):
        # Arrange: 251 copies → 250 deletes in batches of 100, 100, 50
        rows = [ExistingProductFactory.create("Spot", id=f"dup-{i:03d}") for i in range(251)]
        mock_supabase.set_table_data("products", rows)
        mock_supabase.set_table_error(
            "products",
            Exception("statement timeout"),
            operation="delete",
            when=lambda q: "dup-101" in q.filters[0][2],
        )
        service = ProductService()

        # Act
        result = service.remove_duplicates("tenant-1")

        # Assert
        batches = mock_supabase.writes("products", "delete")
        assert [len(b["filters"][0][2]) for b in batches] == [DELETE_BATCH_SIZE, DELETE_BATCH_SIZE, 50]
        assert result.duplicates_removed == 150
        assert result.details[0].kept_id == "dup-000"


class TestGetProductService:
    """Tests for get_product_service()"""

    def test_returns_singleton(self, mock_db):
        assert get_product_service() is get_product_service()
