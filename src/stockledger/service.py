"""Inventory service, the single entry point for stock changes.

Each mutating operation follows the same order:

    1. validate the request
    2. locate the product
    3. check the change against the product's current state
    4. prepare the ledger entry
    5. apply the change to the product and append the entry

Steps 1-4 never touch state, so a rejected request leaves the registry and
the ledger exactly as they were.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError

from stockledger.ledger.ledger import TransactionLedger
from stockledger.ledger.transaction import StockTransaction, TransactionKind
from stockledger.product.product import Product, require_positive_quantity, require_whole_number
from stockledger.product.registry import ProductRegistry
from stockledger.reports import InventorySnapshot, InventorySummary, StockDiscrepancy, summarize
from stockledger.utils.logging import get_logger

logger = get_logger(__name__)

RESTOCK_REASON = "Restock"
SALE_REASON = "Sale"
RETURN_REASON = "Customer return"
DEFAULT_ADJUSTMENT_REASON = "Manual adjustment"


class InventoryService:
    """Keeps product stock and the transaction ledger in step."""

    def __init__(self, registry: ProductRegistry | None = None, ledger: TransactionLedger | None = None):
        if registry is not None and ledger is not None and registry.ledger is not ledger:
            raise ValueError("registry must record into the same ledger the service reads")

        if registry is not None:
            ledger = registry.ledger
        self.ledger = ledger if ledger is not None else TransactionLedger()
        self.registry = registry if registry is not None else ProductRegistry(self.ledger)

    # -------------------------------------------------------------------
    # Catalog
    # -------------------------------------------------------------------
    def add_product(self, name, sku, category, price, quantity, reorder_level) -> Product:
        product = self.registry.add(name, sku, category, price, quantity, reorder_level)
        logger.info(
            "product_added",
            product_id=str(product.id),
            sku=product.sku,
            quantity=product.quantity_in_stock,
        )
        return product

    def find_product(self, product_id) -> Product | None:
        return self.registry.find_by_id(product_id)

    def find_by_sku(self, sku) -> Product | None:
        return self.registry.find_by_sku(sku)

    def list_products(self) -> list[Product]:
        return self.registry.all()

    def list_by_category(self, category) -> list[Product]:
        return self.registry.list_by_category(category)

    def search(self, term) -> list[Product]:
        return self.registry.search(term)

    def discontinue(self, product_id) -> Product:
        product = self.registry.discontinue(product_id)
        logger.info("product_discontinued", product_id=str(product.id), sku=product.sku)
        return product

    # -------------------------------------------------------------------
    # Stock movements
    # -------------------------------------------------------------------
    def restock(self, product_id, quantity, performed_by) -> StockTransaction:
        require_positive_quantity(quantity, "Restock")
        product = self.registry.get(product_id)
        product.check_can_receive(quantity)

        entry = self.ledger.prepare(product.id, TransactionKind.RESTOCK, quantity, RESTOCK_REASON, performed_by)
        product.receive(quantity, received_at=entry.occurred_at)
        return self._commit(product, entry)

    def record_sale(self, product_id, quantity, performed_by) -> StockTransaction:
        require_positive_quantity(quantity, "Sale")
        product = self.registry.get(product_id)
        product.check_can_remove(quantity)

        entry = self.ledger.prepare(product.id, TransactionKind.SALE, -quantity, SALE_REASON, performed_by)
        product.remove(quantity, label="Sale")
        return self._commit(product, entry)

    def adjust_stock(self, product_id, delta, reason, performed_by) -> StockTransaction:
        require_whole_number(delta, "delta")
        product = self.registry.get(product_id)
        product.check_can_adjust(delta)

        reason = reason.strip() if reason and reason.strip() else DEFAULT_ADJUSTMENT_REASON
        entry = self.ledger.prepare(product.id, TransactionKind.ADJUSTMENT, delta, reason, performed_by)
        product.adjust(delta)
        return self._commit(product, entry)

    def record_return(self, product_id, quantity, performed_by, reason=RETURN_REASON) -> StockTransaction:
        """Put returned units back on the shelf. Allowed for discontinued products."""
        require_positive_quantity(quantity, "Return")
        product = self.registry.get(product_id)

        reason = reason.strip() if reason and reason.strip() else RETURN_REASON
        entry = self.ledger.prepare(product.id, TransactionKind.RETURN, quantity, reason, performed_by)
        product.adjust(quantity)
        return self._commit(product, entry)

    def record_damage(self, product_id, quantity, reason, performed_by) -> StockTransaction:
        """Write damaged units out of stock."""
        require_positive_quantity(quantity, "Damage")
        if not reason or not reason.strip():
            raise ValidationError({"reason": ["Reason is required for damaged stock"]})
        product = self.registry.get(product_id)
        product.check_can_remove(quantity)

        entry = self.ledger.prepare(product.id, TransactionKind.DAMAGE, -quantity, reason.strip(), performed_by)
        product.remove(quantity, label="Damage")
        return self._commit(product, entry)

    def record_stock_check(self, product_id, counted_quantity, performed_by) -> StockTransaction | None:
        """Record a physical count, adjusting stock to match when they differ.

        Returns the adjustment entry, or ``None`` when the count matched.
        """
        require_whole_number(counted_quantity, "counted_quantity")
        if counted_quantity < 0:
            raise ValidationError({"counted_quantity": ["Counted quantity cannot be negative"]})
        product = self.registry.get(product_id)

        expected = product.quantity_in_stock
        discrepancy = counted_quantity - expected
        if discrepancy == 0:
            logger.info("stock_check_matched", product_id=str(product.id), sku=product.sku, quantity=expected)
            return None

        return self.adjust_stock(
            product.id,
            discrepancy,
            f"Stock check: counted {counted_quantity}, expected {expected}",
            performed_by,
        )

    def _commit(self, product, entry):
        self.ledger.append(entry)
        logger.info(
            "stock_changed",
            product_id=str(product.id),
            sku=product.sku,
            kind=entry.kind,
            delta=entry.delta,
            quantity=product.quantity_in_stock,
            performed_by=entry.performed_by,
        )
        return entry

    # -------------------------------------------------------------------
    # Reports
    # -------------------------------------------------------------------
    def reorder_report(self) -> list[Product]:
        """Products at or below their reorder level, most urgent first."""
        return sorted(
            (p for p in self.registry if p.needs_reorder),
            key=lambda p: (p.quantity_in_stock, p.sku),
        )

    def summary(self) -> InventorySummary:
        return summarize(self.registry, len(self.ledger))

    def history(self, product_id) -> list[StockTransaction]:
        product = self.registry.get(product_id)
        return self.ledger.history_for(product.id)

    def recent_transactions(self, count=10) -> list[StockTransaction]:
        return self.ledger.recent(count)

    def reconcile(self) -> list[StockDiscrepancy]:
        """Compare every product with the sum of its ledger deltas."""
        discrepancies = []
        for product in self.registry.all():
            ledger_quantity = self.ledger.net_change(product.id)
            if ledger_quantity != product.quantity_in_stock:
                discrepancies.append(
                    StockDiscrepancy(
                        product_id=str(product.id),
                        sku=product.sku,
                        quantity_in_stock=product.quantity_in_stock,
                        ledger_quantity=ledger_quantity,
                    )
                )
        if discrepancies:
            logger.warning("ledger_discrepancies_found", count=len(discrepancies))
        return discrepancies

    def snapshot(self) -> InventorySnapshot:
        return InventorySnapshot(
            products=tuple(self.registry.all()),
            transactions=self.ledger.entries(),
            exported_at=datetime.now(UTC),
        )
