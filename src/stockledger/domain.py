"""Stock ledger bounded context: product registry and stock transaction ledger.

Tracks catalog entries and their stock positions for a single operator. Every
change to a stock quantity is paired with an entry in an append-only ledger,
so the ledger can always explain the current quantity.
"""

from protean.domain import Domain

stockledger = Domain(name="stockledger")
