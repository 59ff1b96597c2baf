"""
Registry of importable data types.

Each DataTypeDescriptor names the target table, the ordered list of
fields an upload must map, and the row schema used for validation.
"""

from dataclasses import dataclass
from typing import Optional

from models.base import OpenRowSchema
from models.rows import (
    ApplicationInsightRow,
    ApplicationRow,
    CrossSellRow,
    CustomerProjectRow,
    CustomerRow,
    ProductAlternativeRow,
    ProductRow,
)
from exceptions import UnknownDataTypeError


@dataclass(frozen=True)
class FieldRules:
    """Field-level coercion rules applied before validation."""
    numeric: frozenset[str]
    flags: frozenset[str]


# Parsed as float; unparseable → None
NUMERIC_FIELDS = frozenset({
    "product_price",
    "product_inventory",
    "product_lead_time",
    "similarity",
    "score",
})

# Truthy → "Y", anything else → ""
FLAG_FIELDS = frozenset({"product_new", "product_top"})

DEFAULT_FIELD_RULES = FieldRules(numeric=NUMERIC_FIELDS, flags=FLAG_FIELDS)


@dataclass(frozen=True)
class DataTypeDescriptor:
    """
    Static definition of one importable entity.

    Attributes:
        id: Registry key, also used in URLs
        title: Display title (German, as shown to operators)
        fields: Fields to map, in matching order
        table: Target Supabase table
        schema: Row schema for validation
        dedup: True if rows are reconciled against existing records
    """
    id: str
    title: str
    fields: tuple[str, ...]
    table: str
    schema: type[OpenRowSchema]
    dedup: bool = False
    rules: FieldRules = DEFAULT_FIELD_RULES

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "id": self.id,
            "title": self.title,
            "fields": list(self.fields),
            "dedup": self.dedup,
        }


CUSTOMER_PROJECTS = DataTypeDescriptor(
    id="customer_projects",
    title="Kundenprojekte",
    fields=("customer", "project_name", "application", "product"),
    table="customer_projects",
    schema=CustomerProjectRow,
)

CUSTOMERS = DataTypeDescriptor(
    id="customers",
    title="Kunden",
    fields=("customer", "industry", "country", "city"),
    table="customers",
    schema=CustomerRow,
)

APPLICATIONS = DataTypeDescriptor(
    id="applications",
    title="Applikationen",
    fields=("application", "related_product"),
    table="applications",
    schema=ApplicationRow,
)

PRODUCTS = DataTypeDescriptor(
    id="products",
    title="Produkte",
    fields=(
        "product",
        "product_family",
        "product_description",
        "manufacturer",
        "manufacturer_link",
        "product_price",
        "product_inventory",
        "product_lead_time",
        "product_lifecycle",
        "product_new",
        "product_top",
    ),
    table="products",
    schema=ProductRow,
    dedup=True,
)

CROSS_SELLS = DataTypeDescriptor(
    id="cross_sells",
    title="Cross-Sells",
    fields=("application", "base_product", "cross_sell_product"),
    table="cross_sells",
    schema=CrossSellRow,
)

PRODUCT_ALTERNATIVES = DataTypeDescriptor(
    id="product_alternatives",
    title="Produktalternativen",
    fields=("base_product", "alternative_product", "similarity"),
    table="product_alternatives",
    schema=ProductAlternativeRow,
)

APP_INSIGHTS = DataTypeDescriptor(
    id="app_insights",
    title="Applikations-Insights",
    fields=(
        "application",
        "industry",
        "application_description",
        "application_trends",
        "score",
    ),
    table="app_insights",
    schema=ApplicationInsightRow,
)

DATA_TYPES: dict[str, DataTypeDescriptor] = {
    dt.id: dt
    for dt in (
        CUSTOMER_PROJECTS,
        CUSTOMERS,
        APPLICATIONS,
        PRODUCTS,
        CROSS_SELLS,
        PRODUCT_ALTERNATIVES,
        APP_INSIGHTS,
    )
}


def get_data_type(data_type_id: str) -> DataTypeDescriptor:
    """
    Look up a data type by id.

    Raises:
        UnknownDataTypeError: If the id is not registered
    """
    descriptor: Optional[DataTypeDescriptor] = DATA_TYPES.get(data_type_id)
    if descriptor is None:
        raise UnknownDataTypeError(data_type_id)
    return descriptor
