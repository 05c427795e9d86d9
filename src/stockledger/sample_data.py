"""Sample catalog used when the CLI starts without ``--empty``."""

from decimal import Decimal

SAMPLE_PRODUCTS = [
    {
        "name": "Wireless Mouse",
        "sku": "ELEC-001",
        "category": "Electronics",
        "price": Decimal("29.99"),
        "quantity": 45,
        "reorder_level": 10,
    },
    {
        "name": "USB-C Cable",
        "sku": "ELEC-002",
        "category": "Electronics",
        "price": Decimal("12.99"),
        "quantity": 5,
        "reorder_level": 20,
    },
    {
        "name": "Office Chair",
        "sku": "FURN-001",
        "category": "Furniture",
        "price": Decimal("199.99"),
        "quantity": 12,
        "reorder_level": 5,
    },
]


def load_sample_catalog(service):
    """Add the sample products through the service so their stock is on the ledger."""
    return [service.add_product(**product) for product in SAMPLE_PRODUCTS]
