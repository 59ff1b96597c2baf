"""
Row schemas for spreadsheet imports.

One schema per importable data type. A transformed row must validate
against its schema before anything is written. Schemas are open: keys
they do not declare are kept as-is.
"""

from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import AnyHttpUrl, Field, TypeAdapter, field_validator
from pydantic import ValidationError as PydanticValidationError

from models.base import OpenRowSchema


class ProductLifecycle(str, Enum):
    """Lifecycle state of a catalogue product."""
    COMING_SOON = "Coming Soon"
    ACTIVE = "Active"
    NFND = "NFND"
    DISCONTINUED = "Discontinued"


_HTTP_URL = TypeAdapter(AnyHttpUrl)


class ProvenanceMixin(OpenRowSchema):
    """Fields injected by the import, never read from the file."""
    upload_id: UUID = Field(..., description="Upload batch identifier")
    user_id: str = Field(..., min_length=1, description="Uploading user")
    tenant_id: Optional[str] = Field(None, description="Tenant scope, None for global data")


# ===================
# CATALOGUE
# ===================

class ProductRow(ProvenanceMixin):
    """
    Product catalogue row.

    Required: product
    Numbers must be non-negative; inventory and lead time are whole numbers.
    """

    product: str = Field(..., min_length=1, max_length=255)
    product_family: Optional[str] = Field(None, max_length=100)
    product_description: Optional[str] = Field(None, max_length=2000)
    manufacturer: Optional[str] = Field(None, max_length=255)
    manufacturer_link: Optional[str] = Field(None, max_length=500)
    product_price: Optional[float] = Field(None, ge=0)
    product_inventory: Optional[int] = Field(None, ge=0)
    product_lead_time: Optional[int] = Field(None, ge=0)
    product_lifecycle: Optional[ProductLifecycle] = None
    product_new: Optional[str] = Field(None, max_length=10)
    product_top: Optional[str] = Field(None, max_length=10)

    @field_validator("manufacturer_link")
    @classmethod
    def link_is_url_or_empty(cls, v: Optional[str]) -> Optional[str]:
        """Link must be an http(s) URL; empty string means no link."""
        if v is None or v == "":
            return v
        try:
            _HTTP_URL.validate_python(v)
        except PydanticValidationError:
            raise ValueError("Invalid URL format")
        return v


class ApplicationRow(ProvenanceMixin):
    """Application ↔ related product pairing."""

    application: str = Field(..., min_length=1, max_length=255)
    related_product: str = Field(..., min_length=1, max_length=255)


class CrossSellRow(ProvenanceMixin):
    """Cross-sell suggestion for a base product within an application."""

    application: str = Field(..., min_length=1, max_length=255)
    base_product: str = Field(..., min_length=1, max_length=255)
    cross_sell_product: str = Field(..., min_length=1, max_length=255)


class ProductAlternativeRow(ProvenanceMixin):
    """Alternative for a base product, with similarity in percent."""

    base_product: str = Field(..., min_length=1, max_length=255)
    alternative_product: str = Field(..., min_length=1, max_length=255)
    similarity: Optional[float] = Field(None, ge=0, le=100)


class ApplicationInsightRow(ProvenanceMixin):
    """Market insight for an application."""

    application: str = Field(..., min_length=1, max_length=255)
    industry: Optional[str] = Field(None, max_length=255)
    application_description: Optional[str] = Field(None, max_length=5000)
    application_trends: Optional[str] = Field(None, max_length=5000)
    score: Optional[float] = Field(None, ge=0, le=100)


# ===================
# CUSTOMERS
# ===================

class CustomerRow(ProvenanceMixin):
    """Customer master data."""

    customer: str = Field(..., min_length=1, max_length=255)
    industry: Optional[str] = Field(None, max_length=255)
    country: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=255)


class CustomerProjectRow(ProvenanceMixin):
    """Link between a customer project, an application and a product."""

    customer: str = Field(..., min_length=1, max_length=255)
    project_name: str = Field(..., min_length=1, max_length=255)
    application: str = Field(..., min_length=1, max_length=255)
    product: str = Field(..., min_length=1, max_length=255)
