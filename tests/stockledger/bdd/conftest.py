"""Shared BDD fixtures and step definitions for the stock ledger."""

from decimal import Decimal

import pytest
from pytest_bdd import given, parsers, then
from stockledger.errors import ConflictError, InsufficientStockError


@pytest.fixture()
def outcome():
    """Holds the error raised by the last When step, if any."""
    return {"error": None}


def _product(service, sku):
    product = service.find_by_sku(sku)
    assert product is not None, f"no product with SKU {sku}"
    return product


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a product "{sku}" with {quantity:d} units and a reorder level of {reorder_level:d}'))
def _(add_product, sku, quantity, reorder_level):
    add_product(
        name=f"Product {sku}",
        sku=sku,
        price=Decimal("9.99"),
        quantity=quantity,
        reorder_level=reorder_level,
    )


@given(parsers.cfparse('"{sku}" is discontinued'))
def _(service, sku):
    service.discontinue(_product(service, sku).id)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('"{sku}" has {quantity:d} units in stock'))
def _(service, sku, quantity):
    assert _product(service, sku).quantity_in_stock == quantity


@then(parsers.cfparse('the history of "{sku}" shows deltas "{deltas}"'))
def _(service, sku, deltas):
    expected = [int(delta) for delta in deltas.split(",")]
    assert [entry.delta for entry in service.history(_product(service, sku).id)] == expected


@then(parsers.cfparse('the history of "{sku}" shows reasons "{reasons}"'))
def _(service, sku, reasons):
    expected = [reason.strip() for reason in reasons.split(",")]
    assert [entry.reason for entry in service.history(_product(service, sku).id)] == expected


@then(parsers.cfparse('"{sku}" is on the reorder report'))
def _(service, sku):
    assert sku in [p.sku for p in service.reorder_report()]


@then(parsers.cfparse('"{sku}" is not on the reorder report'))
def _(service, sku):
    assert sku not in [p.sku for p in service.reorder_report()]


@then(parsers.cfparse('the action fails with an insufficient stock error mentioning "{text}"'))
def _(outcome, text):
    assert isinstance(outcome["error"], InsufficientStockError)
    assert text in str(outcome["error"])


@then("the action fails with a conflict error")
def _(outcome):
    assert isinstance(outcome["error"], ConflictError)


@then(parsers.cfparse("the catalog holds {count:d} product"))
def _(service, count):
    assert len(service.list_products()) == count


@then("the ledger reconciles with the catalog")
def _(service):
    assert service.reconcile() == []
    for product in service.list_products():
        assert product.quantity_in_stock == service.ledger.net_change(product.id)
