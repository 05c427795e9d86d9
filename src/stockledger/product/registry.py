"""Product registry: the in-memory catalog keyed by product identity."""

from protean.exceptions import ValidationError

from stockledger.errors import ConflictError, NotFoundError
from stockledger.ledger.ledger import TransactionLedger
from stockledger.ledger.transaction import TransactionKind
from stockledger.product.product import Product

INITIAL_STOCK_REASON = "Initial stock"
SYSTEM_PERFORMER = "System"


def _by_name(products):
    return sorted(products, key=lambda product: (product.name, product.sku))


class ProductRegistry:
    """Owns the ``id -> Product`` mapping and the SKU uniqueness index.

    Initial stock given at creation is written to ``ledger`` so that every
    unit a product holds can be traced back to a ledger entry.
    """

    def __init__(self, ledger: TransactionLedger):
        self.ledger = ledger
        self._products: dict[str, Product] = {}
        self._ids_by_sku: dict[str, str] = {}

    def __len__(self):
        return len(self._products)

    def __iter__(self):
        return iter(tuple(self._products.values()))

    def __contains__(self, product_id):
        return str(product_id) in self._products

    def add(self, name, sku, category, price, quantity, reorder_level) -> Product:
        product = Product.create(
            name=name,
            sku=sku,
            category=category,
            price=price,
            quantity=quantity,
            reorder_level=reorder_level,
        )

        key = product.sku.casefold()
        if key in self._ids_by_sku:
            raise ConflictError("sku", f"Product with SKU '{product.sku}' already exists")

        initial_entry = None
        if product.quantity_in_stock > 0:
            initial_entry = self.ledger.prepare(
                product.id,
                TransactionKind.RESTOCK,
                product.quantity_in_stock,
                INITIAL_STOCK_REASON,
                SYSTEM_PERFORMER,
            )

        self._products[str(product.id)] = product
        self._ids_by_sku[key] = str(product.id)
        if initial_entry is not None:
            self.ledger.append(initial_entry)

        return product

    def find_by_id(self, product_id) -> Product | None:
        return self._products.get(str(product_id))

    def get(self, product_id) -> Product:
        product = self.find_by_id(product_id)
        if product is None:
            raise NotFoundError(product_id)
        return product

    def find_by_sku(self, sku) -> Product | None:
        if sku is None or not sku.strip():
            return None
        product_id = self._ids_by_sku.get(sku.strip().casefold())
        return self._products.get(product_id) if product_id else None

    def all(self) -> list[Product]:
        return _by_name(self._products.values())

    def list_by_category(self, category) -> list[Product]:
        if category is None or not category.strip():
            raise ValidationError({"category": ["Category cannot be empty"]})
        wanted = category.strip().casefold()
        return _by_name(p for p in self._products.values() if (p.category or "").casefold() == wanted)

    def search(self, term) -> list[Product]:
        if term is None or not term.strip():
            return []
        needle = term.strip().casefold()
        return _by_name(
            p
            for p in self._products.values()
            if needle in p.name.casefold() or needle in p.sku.casefold() or needle in (p.category or "").casefold()
        )

    def discontinue(self, product_id) -> Product:
        product = self.get(product_id)
        product.discontinue()
        return product
