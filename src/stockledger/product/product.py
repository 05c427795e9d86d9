"""Product aggregate: a catalog entry and its current stock position.

Stock quantity is only ever changed through the methods below, and the
inventory service pairs each change with a ledger entry. The aggregate
guards its own invariants:

    quantity_in_stock  never negative (enforced by the field itself)
    name, sku          never blank
    unit_price         exact, finite, non-negative decimal

``needs_reorder`` is derived on every read and never stored.
"""

from datetime import UTC, datetime
from decimal import Decimal, InvalidOperation

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Integer, String, Text

from stockledger.domain import stockledger
from stockledger.errors import ConflictError, InsufficientStockError


def parse_price(value) -> Decimal:
    """Convert a price to an exact ``Decimal``.

    Floats go through their string form so ``9.99`` stays ``Decimal("9.99")``.
    """
    if isinstance(value, bool):
        raise ValidationError({"price": ["Price must be a decimal amount"]})
    if isinstance(value, float):
        value = str(value)
    try:
        amount = value if isinstance(value, Decimal) else Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError({"price": ["Price must be a decimal amount"]}) from None

    if not amount.is_finite():
        raise ValidationError({"price": ["Price must be a decimal amount"]})
    if amount < 0:
        raise ValidationError({"price": ["Price cannot be negative"]})
    return amount


def require_whole_number(value, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError({field: [f"{field.replace('_', ' ').capitalize()} must be a whole number"]})
    return value


def require_positive_quantity(quantity, label: str) -> int:
    """Reject zero, negative and non-integer transaction quantities."""
    require_whole_number(quantity, "quantity")
    if quantity <= 0:
        raise ValidationError({"quantity": [f"{label} quantity must be positive"]})
    return quantity


@stockledger.aggregate
class Product:
    """A product in the catalog together with its stock on hand."""

    name = String(required=True, max_length=255)
    sku = String(required=True, max_length=50)
    category = Text()
    # Stored as text so the amount stays exact; read it through ``price``.
    unit_price = String(required=True, max_length=40)
    quantity_in_stock = Integer(default=0, min_value=0)
    reorder_level = Integer(default=0)
    created_at = DateTime(required=True)
    last_restocked_at = DateTime()
    is_discontinued = Boolean(default=False)

    @invariant.post
    def name_and_sku_must_not_be_blank(self):
        if not (self.name or "").strip():
            raise ValidationError({"name": ["Product name cannot be empty"]})
        if not (self.sku or "").strip():
            raise ValidationError({"sku": ["SKU cannot be empty"]})

    @invariant.post
    def unit_price_must_be_a_non_negative_decimal(self):
        if self.unit_price is None:
            return
        parse_price(self.unit_price)

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, name, sku, category, price, quantity=0, reorder_level=0):
        """Validate raw input and build a new, active product.

        Text fields are stored stripped. Uniqueness of the SKU is the
        registry's concern, not the aggregate's.
        """
        if name is None or not str(name).strip():
            raise ValidationError({"name": ["Product name cannot be empty"]})
        if sku is None or not str(sku).strip():
            raise ValidationError({"sku": ["SKU cannot be empty"]})

        amount = parse_price(price)

        require_whole_number(quantity, "quantity")
        if quantity < 0:
            raise ValidationError({"quantity": ["Quantity cannot be negative"]})
        require_whole_number(reorder_level, "reorder_level")

        return cls(
            name=str(name).strip(),
            sku=str(sku).strip(),
            category=(category or "").strip(),
            unit_price=str(amount),
            quantity_in_stock=quantity,
            reorder_level=reorder_level,
            created_at=datetime.now(UTC),
            is_discontinued=False,
        )

    # -------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------
    @property
    def price(self) -> Decimal:
        return Decimal(self.unit_price)

    @property
    def needs_reorder(self) -> bool:
        return self.quantity_in_stock <= self.reorder_level and not self.is_discontinued

    @property
    def stock_value(self) -> Decimal:
        return self.price * self.quantity_in_stock

    # -------------------------------------------------------------------
    # Stock movements
    # -------------------------------------------------------------------
    def check_can_receive(self, quantity):
        """Raise if ``receive`` would be rejected, without changing anything."""
        require_positive_quantity(quantity, "Restock")
        if self.is_discontinued:
            raise ConflictError("is_discontinued", "Cannot restock a discontinued product")

    def receive(self, quantity, received_at=None):
        """Add restocked units and stamp the restock time."""
        self.check_can_receive(quantity)

        with atomic_change(self):
            self.quantity_in_stock = self.quantity_in_stock + quantity
            self.last_restocked_at = received_at or datetime.now(UTC)

    def check_can_remove(self, quantity):
        """Raise if ``quantity`` units cannot be taken out of stock."""
        if self.quantity_in_stock < quantity:
            raise InsufficientStockError(available=self.quantity_in_stock, requested=quantity)

    def remove(self, quantity, label="Sale"):
        """Take units out of stock (sale or damage)."""
        require_positive_quantity(quantity, label)
        self.check_can_remove(quantity)
        self.quantity_in_stock = self.quantity_in_stock - quantity

    def check_can_adjust(self, delta):
        require_whole_number(delta, "delta")
        if self.quantity_in_stock + delta < 0:
            raise InsufficientStockError(
                available=self.quantity_in_stock,
                requested=-delta,
                field="delta",
            )

    def adjust(self, delta):
        """Apply a signed correction; the whole delta or nothing."""
        self.check_can_adjust(delta)
        self.quantity_in_stock = self.quantity_in_stock + delta

    def discontinue(self):
        """Mark the product discontinued. Calling it again changes nothing."""
        if not self.is_discontinued:
            self.is_discontinued = True
