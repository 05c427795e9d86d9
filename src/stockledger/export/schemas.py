"""Pydantic schemas for the JSON export.

These are the external contract for exported data, kept separate from the
protean domain elements they are built from.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class ProductRecord(BaseModel):
    id: str
    name: str
    sku: str
    category: str = ""
    price: Decimal = Field(ge=0)
    quantity_in_stock: int = Field(ge=0)
    reorder_level: int
    created_at: datetime
    last_restocked_at: datetime | None = None
    is_discontinued: bool = False
    needs_reorder: bool = False


class TransactionRecord(BaseModel):
    id: str
    sequence: int = Field(ge=1)
    product_id: str
    kind: str
    delta: int
    reason: str = ""
    occurred_at: datetime
    performed_by: str = ""


class InventoryExport(BaseModel):
    products: list[ProductRecord]
    transactions: list[TransactionRecord]
    exported_at: datetime
