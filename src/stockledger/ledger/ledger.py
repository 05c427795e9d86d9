"""Transaction ledger: the ordered, append-only record of stock changes."""

from datetime import UTC, datetime
from uuid import uuid4

from protean.exceptions import ValidationError

from stockledger.ledger.transaction import StockTransaction, TransactionKind


def _most_recent_first(entries):
    return sorted(entries, key=lambda entry: (entry.occurred_at, entry.sequence), reverse=True)


class TransactionLedger:
    """Owns the list of ``StockTransaction`` entries.

    The ledger trusts its caller for referential validity and for the sign of
    each delta; the inventory service is the only writer in practice.
    """

    def __init__(self):
        self._entries: list[StockTransaction] = []

    def __len__(self):
        return len(self._entries)

    def __iter__(self):
        return iter(tuple(self._entries))

    def entries(self) -> tuple[StockTransaction, ...]:
        """All entries in the order they were written."""
        return tuple(self._entries)

    # -------------------------------------------------------------------
    # Writing
    # -------------------------------------------------------------------
    def prepare(self, product_id, kind, delta, reason, performed_by) -> StockTransaction:
        """Build the next entry without appending it.

        Building validates every field, so a caller can prepare first and only
        then mutate the product it describes.
        """
        kind = kind.value if isinstance(kind, TransactionKind) else kind
        return StockTransaction(
            transaction_id=str(uuid4()),
            sequence=len(self._entries) + 1,
            product_id=str(product_id),
            kind=kind,
            delta=delta,
            reason=reason,
            occurred_at=datetime.now(UTC),
            performed_by=performed_by,
        )

    def append(self, entry: StockTransaction) -> StockTransaction:
        if entry.sequence != len(self._entries) + 1:
            raise ValidationError(
                {"sequence": [f"Expected ledger position {len(self._entries) + 1}, got {entry.sequence}"]}
            )
        self._entries.append(entry)
        return entry

    def record(self, product_id, kind, delta, reason, performed_by) -> StockTransaction:
        """Append a new entry stamped with the current time."""
        return self.append(self.prepare(product_id, kind, delta, reason, performed_by))

    # -------------------------------------------------------------------
    # Reading
    # -------------------------------------------------------------------
    def history_for(self, product_id) -> list[StockTransaction]:
        product_id = str(product_id)
        return _most_recent_first(entry for entry in self._entries if entry.product_id == product_id)

    def recent(self, count=10) -> list[StockTransaction]:
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            raise ValidationError({"count": ["Count must be a non-negative whole number"]})
        return _most_recent_first(self._entries)[:count]

    def net_change(self, product_id) -> int:
        """Sum of every delta recorded for a product."""
        product_id = str(product_id)
        return sum(entry.delta for entry in self._entries if entry.product_id == product_id)
