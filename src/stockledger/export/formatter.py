"""Render an ``InventorySnapshot`` as JSON."""

from stockledger.export.schemas import InventoryExport, ProductRecord, TransactionRecord
from stockledger.reports import InventorySnapshot


def product_record(product) -> ProductRecord:
    return ProductRecord(
        id=str(product.id),
        name=product.name,
        sku=product.sku,
        category=product.category or "",
        price=product.price,
        quantity_in_stock=product.quantity_in_stock,
        reorder_level=product.reorder_level,
        created_at=product.created_at,
        last_restocked_at=product.last_restocked_at,
        is_discontinued=product.is_discontinued,
        needs_reorder=product.needs_reorder,
    )


def transaction_record(entry) -> TransactionRecord:
    return TransactionRecord(
        id=entry.transaction_id,
        sequence=entry.sequence,
        product_id=entry.product_id,
        kind=entry.kind,
        delta=entry.delta,
        reason=entry.reason or "",
        occurred_at=entry.occurred_at,
        performed_by=entry.performed_by or "",
    )


def build_export(snapshot: InventorySnapshot) -> InventoryExport:
    return InventoryExport(
        products=[product_record(p) for p in snapshot.products],
        transactions=[transaction_record(t) for t in snapshot.transactions],
        exported_at=snapshot.exported_at,
    )


def export_json(snapshot: InventorySnapshot, indent: int = 2) -> str:
    """Serialize a snapshot; prices come out as decimal strings."""
    return build_export(snapshot).model_dump_json(indent=indent)
