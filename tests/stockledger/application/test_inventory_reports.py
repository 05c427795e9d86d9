"""Reports, history and reconciliation on the inventory service."""

from decimal import Decimal

import pytest
from protean.exceptions import ValidationError
from stockledger.errors import NotFoundError
from stockledger.reports import InventorySummary


class TestReorderReport:
    def test_lists_products_at_or_below_reorder_level(self, service, add_product):
        low = add_product(name="Cable", sku="C-1", quantity=5, reorder_level=20)
        at_level = add_product(name="Chair", sku="F-1", quantity=5, reorder_level=5)
        add_product(name="Mouse", sku="M-1", quantity=45, reorder_level=10)

        assert {p.sku for p in service.reorder_report()} == {low.sku, at_level.sku}

    def test_most_urgent_first(self, service, add_product):
        add_product(name="A", sku="A-1", quantity=4, reorder_level=10)
        add_product(name="B", sku="B-1", quantity=0, reorder_level=10)
        add_product(name="C", sku="C-1", quantity=2, reorder_level=10)
        assert [p.sku for p in service.reorder_report()] == ["B-1", "C-1", "A-1"]

    def test_ties_are_broken_by_sku(self, service, add_product):
        add_product(name="Zeta", sku="Z-1", quantity=1, reorder_level=5)
        add_product(name="Alpha", sku="A-1", quantity=1, reorder_level=5)
        assert [p.sku for p in service.reorder_report()] == ["A-1", "Z-1"]

    def test_discontinued_products_are_excluded(self, service, add_product):
        product = add_product(quantity=0, reorder_level=5)
        service.discontinue(product.id)
        assert service.reorder_report() == []

    def test_restocking_above_level_removes_product(self, service, add_product):
        product = add_product(quantity=2, reorder_level=5)
        service.restock(product.id, 10, "alice")
        assert service.reorder_report() == []


class TestSummary:
    def test_empty_inventory(self, service):
        assert service.summary() == InventorySummary(
            total_products=0,
            total_value=Decimal("0"),
            products_needing_reorder=0,
            discontinued_products=0,
            total_transactions=0,
        )

    def test_totals_are_exact(self, service, add_product):
        add_product(name="Mouse", sku="M-1", price=Decimal("29.99"), quantity=45, reorder_level=10)
        add_product(name="Cable", sku="C-1", price=Decimal("12.99"), quantity=5, reorder_level=20)
        chair = add_product(name="Chair", sku="F-1", price=Decimal("199.99"), quantity=12, reorder_level=5)
        service.discontinue(chair.id)

        summary = service.summary()
        assert summary.total_products == 3
        assert summary.total_value == Decimal("3814.38")
        assert summary.products_needing_reorder == 1
        assert summary.discontinued_products == 1
        assert summary.total_transactions == 3

    def test_cent_amounts_do_not_drift(self, service, add_product):
        add_product(sku="P-1", price=Decimal("0.10"), quantity=1)
        add_product(sku="P-2", price=Decimal("0.20"), quantity=1)
        assert service.summary().total_value == Decimal("0.30")


class TestHistory:
    def test_history_is_most_recent_first(self, service, add_product):
        product = add_product(quantity=10)
        service.restock(product.id, 5, "alice")
        service.record_sale(product.id, 2, "bob")
        assert [e.delta for e in service.history(product.id)] == [-2, 5, 10]

    def test_history_only_covers_the_product(self, service, add_product):
        first = add_product(sku="A-1", quantity=1)
        add_product(sku="B-1", quantity=2)
        assert [e.delta for e in service.history(first.id)] == [1]

    def test_history_of_product_without_movements_is_empty(self, service, add_product):
        product = add_product(quantity=0)
        assert service.history(product.id) == []

    def test_history_of_unknown_product(self, service):
        with pytest.raises(NotFoundError):
            service.history("missing")


class TestRecentTransactions:
    def test_recent_spans_products(self, service, add_product):
        first = add_product(sku="A-1", quantity=1)
        second = add_product(sku="B-1", quantity=2)
        service.record_sale(first.id, 1, "alice")
        recent = service.recent_transactions()
        assert [e.product_id for e in recent] == [str(first.id), str(second.id), str(first.id)]

    def test_recent_respects_count(self, service, add_product):
        product = add_product(quantity=1)
        for _ in range(4):
            service.restock(product.id, 1, "alice")
        assert len(service.recent_transactions(3)) == 3
        assert service.recent_transactions(0) == []

    def test_negative_count_is_invalid(self, service):
        with pytest.raises(ValidationError):
            service.recent_transactions(-2)


class TestSnapshot:
    def test_snapshot_captures_products_and_entries(self, service, add_product):
        add_product(name="Beta", sku="B-1", quantity=1)
        add_product(name="Alpha", sku="A-1", quantity=2)
        snapshot = service.snapshot()
        assert [p.name for p in snapshot.products] == ["Alpha", "Beta"]
        assert [t.sequence for t in snapshot.transactions] == [1, 2]
        assert snapshot.exported_at.tzinfo is not None
