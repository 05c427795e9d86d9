"""Read-only views derived from the registry and the ledger.

None of these are stored; the service builds them fresh on every call.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class InventorySummary:
    """Aggregate figures across the whole catalog."""

    total_products: int
    total_value: Decimal
    products_needing_reorder: int
    discontinued_products: int
    total_transactions: int


@dataclass(frozen=True)
class StockDiscrepancy:
    """A product whose stock disagrees with the sum of its ledger deltas."""

    product_id: str
    sku: str
    quantity_in_stock: int
    ledger_quantity: int

    @property
    def difference(self) -> int:
        return self.quantity_in_stock - self.ledger_quantity


@dataclass(frozen=True)
class InventorySnapshot:
    """Everything an exporter needs, captured at one instant."""

    products: tuple
    transactions: tuple
    exported_at: datetime


def summarize(products, transaction_count) -> InventorySummary:
    products = list(products)
    return InventorySummary(
        total_products=len(products),
        total_value=sum((p.stock_value for p in products), Decimal("0")),
        products_needing_reorder=sum(1 for p in products if p.needs_reorder),
        discontinued_products=sum(1 for p in products if p.is_discontinued),
        total_transactions=transaction_count,
    )
