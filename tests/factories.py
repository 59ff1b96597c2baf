"""
Test data factories.

Uses factory pattern to generate consistent test data.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import uuid4

from models.optimization import OptimizationRecord


class ProductRowFactory:
    """
    Factory for product rows as read from an upload (column → value).

    Usage:
        # Create with defaults
        record = ProductRowFactory.create()

        # Create with overrides
        record = ProductRowFactory.create(product="LED Panel 60x60", product_price="12.50")

        # Create multiple
        records = ProductRowFactory.create_batch(5)
    """

    _counter = 0

    @classmethod
    def _next_counter(cls) -> int:
        cls._counter += 1
        return cls._counter

    @classmethod
    def create(
        cls,
        product: Optional[str] = None,
        manufacturer: str = "Lumatec",
        product_family: str = "Panels",
        product_description: str = "",
        manufacturer_link: str = "",
        product_price: str = "10.00",
        product_inventory: str = "5",
        product_lead_time: str = "14",
        product_lifecycle: str = "Active",
        product_new: str = "",
        product_top: str = "",
    ) -> dict:
        """
        Create a single upload record keyed by the product field names.

        Values are strings, as the parser delivers them.
        """
        counter = cls._next_counter()
        return {
            "product": product or f"TEST PRODUCT {counter}",
            "product_family": product_family,
            "product_description": product_description,
            "manufacturer": manufacturer,
            "manufacturer_link": manufacturer_link,
            "product_price": product_price,
            "product_inventory": product_inventory,
            "product_lead_time": product_lead_time,
            "product_lifecycle": product_lifecycle,
            "product_new": product_new,
            "product_top": product_top,
        }

    @classmethod
    def create_batch(cls, count: int, **overrides) -> list:
        """Create multiple upload records."""
        return [cls.create(**overrides) for _ in range(count)]


class ExistingProductFactory:
    """Factory for rows returned by the products reconciliation snapshot."""

    @classmethod
    def create(
        cls,
        product: str,
        manufacturer: Optional[str] = "Lumatec",
        id: Optional[str] = None,
        created_at: Optional[str] = None,
    ) -> dict:
        return {
            "id": id or str(uuid4()),
            "product": product,
            "manufacturer": manufacturer,
            "created_at": created_at or datetime.now(timezone.utc).isoformat(),
        }


class ProjectRowFactory:
    """
    Factory for customer_projects rows.

    Usage:
        row = ProjectRowFactory.create(customer="Acme", project_name="Hall 3")
    """

    _counter = 0

    @classmethod
    def _next_counter(cls) -> int:
        cls._counter += 1
        return cls._counter

    @classmethod
    def create(
        cls,
        customer: str = "Acme GmbH",
        project_name: str = "Hall 3",
        application: Optional[str] = "Lighting",
        product: Optional[str] = "LED Panel",
        project_number: Optional[str] = None,
        id: Optional[str] = None,
        created_at: Optional[datetime] = None,
        tenant_id: Optional[str] = "tenant-1",
    ) -> dict:
        counter = cls._next_counter()
        created = created_at or datetime.now(timezone.utc) - timedelta(days=30)
        return {
            "id": id or str(uuid4()),
            "customer": customer,
            "project_name": project_name,
            "application": application,
            "product": product,
            "project_number": project_number or f"P-{counter:04d}",
            "created_at": created.isoformat(),
            "tenant_id": tenant_id,
        }


class OptimizationRecordFactory:
    """
    Factory for opps_optimization records.

    Usage:
        # Record with a cross-sell in review
        record = OptimizationRecordFactory.create(cross_sell_status="Identifiziert")

        # Record with no candidates at all
        record = OptimizationRecordFactory.bare()
    """

    @classmethod
    def create(
        cls,
        project_number: str = "P-0001",
        optimization_status: Optional[str] = None,
        cross_sell_product_name: Optional[str] = "Dimmer X",
        cross_sell_status: Optional[str] = None,
        cross_sell_date_added: Optional[datetime] = None,
        alternative_product_name: Optional[str] = None,
        alternative_status: Optional[str] = None,
        alternative_date_added: Optional[datetime] = None,
    ) -> OptimizationRecord:
        return OptimizationRecord(
            id=str(uuid4()),
            project_number=project_number,
            optimization_status=optimization_status,
            cross_sell_product_name=cross_sell_product_name,
            cross_sell_status=cross_sell_status,
            cross_sell_date_added=cross_sell_date_added,
            alternative_product_name=alternative_product_name,
            alternative_status=alternative_status,
            alternative_date_added=alternative_date_added,
        )

    @classmethod
    def bare(cls, project_number: str = "P-0001", **overrides) -> OptimizationRecord:
        """Record without any cross-sell or alternative named."""
        return cls.create(
            project_number=project_number,
            cross_sell_product_name=None,
            **overrides,
        )
