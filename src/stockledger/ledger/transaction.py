"""StockTransaction, one immutable entry in the stock ledger."""

from enum import Enum

from protean.fields import DateTime, Integer, String, Text

from stockledger.domain import stockledger


class TransactionKind(Enum):
    RESTOCK = "Restock"
    SALE = "Sale"
    ADJUSTMENT = "Adjustment"
    RETURN = "Return"
    DAMAGE = "Damage"


@stockledger.value_object
class StockTransaction:
    """A signed change to one product's stock.

    Value objects reject attribute assignment once built, which is what keeps
    ledger entries append-only. ``sequence`` is the entry's 1-based position
    in its ledger and orders entries that share a timestamp.
    """

    transaction_id = String(required=True, max_length=36)
    sequence = Integer(required=True, min_value=1)
    product_id = String(required=True, max_length=36)
    kind = String(required=True, choices=TransactionKind)
    delta = Integer(required=True)
    reason = Text()
    occurred_at = DateTime(required=True)
    performed_by = Text()

    @property
    def is_increase(self) -> bool:
        return self.delta > 0
