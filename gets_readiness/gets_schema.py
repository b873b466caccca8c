"""
The GETS v0.1 field catalogue.

The catalogue is fixed: coverage is always measured against this list,
in this order.
"""

from typing import Final, Sequence

from .schemas import FieldType, SchemaField


GETS_VERSION: Final[str] = "0.1"

GETS_SCHEMA: Final[tuple[SchemaField, ...]] = (
    # Invoice header
    SchemaField(path="invoice.id", type=FieldType.STRING, required=True),
    SchemaField(path="invoice.issue_date", type=FieldType.DATE, required=True),
    SchemaField(path="invoice.due_date", type=FieldType.DATE, required=False),
    SchemaField(path="invoice.currency", type=FieldType.ENUM, required=True),
    SchemaField(path="invoice.total_excl_vat", type=FieldType.NUMBER, required=True),
    SchemaField(path="invoice.vat_amount", type=FieldType.NUMBER, required=True),
    SchemaField(path="invoice.total_incl_vat", type=FieldType.NUMBER, required=True),
    # Seller
    SchemaField(path="seller.name", type=FieldType.STRING, required=True),
    SchemaField(path="seller.trn", type=FieldType.STRING, required=True),
    SchemaField(path="seller.address", type=FieldType.STRING, required=False),
    # Buyer
    SchemaField(path="buyer.name", type=FieldType.STRING, required=True),
    SchemaField(path="buyer.trn", type=FieldType.STRING, required=True),
    SchemaField(path="buyer.address", type=FieldType.STRING, required=False),
    # Line items
    SchemaField(path="lines[].description", type=FieldType.STRING, required=True),
    SchemaField(path="lines[].qty", type=FieldType.NUMBER, required=True),
    SchemaField(path="lines[].unit_price", type=FieldType.NUMBER, required=True),
    SchemaField(path="lines[].line_total", type=FieldType.NUMBER, required=True),
    SchemaField(path="lines[].vat_rate", type=FieldType.NUMBER, required=False),
)


def required_fields(schema: Sequence[SchemaField] = GETS_SCHEMA) -> list[SchemaField]:
    """Get the fields of ``schema`` that are mandatory."""
    return [field for field in schema if field.required]
