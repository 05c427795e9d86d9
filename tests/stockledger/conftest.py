from decimal import Decimal

import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def stockledger_bed():
    from stockledger.domain import stockledger

    bed = DomainFixture(stockledger)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(stockledger_bed):
    with stockledger_bed.domain_context():
        yield


@pytest.fixture()
def service():
    from stockledger.service import InventoryService

    return InventoryService()


@pytest.fixture()
def add_product(service):
    """Add a product through the service with sensible defaults."""

    def _add(**overrides):
        defaults = {
            "name": "Widget",
            "sku": "W-1",
            "category": "Tools",
            "price": Decimal("9.99"),
            "quantity": 10,
            "reorder_level": 3,
        }
        defaults.update(overrides)
        return service.add_product(**defaults)

    return _add
