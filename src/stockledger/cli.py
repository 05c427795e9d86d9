"""Stock ledger command-line interface.

Every run starts from a fresh in-memory inventory (the sample catalog unless
``--empty`` is given); nothing is persisted between runs.

Usage:
    stockledger list [category]
    stockledger add <name> <sku> <category> <price> <quantity> <reorder-level>
    stockledger restock <sku> <quantity>
    stockledger sale <sku> <quantity>
    stockledger summary
    stockledger export
"""

import argparse
import sys

from protean.exceptions import ValidationError

from stockledger.domain import stockledger
from stockledger.errors import ConflictError, InsufficientStockError, NotFoundError, error_message
from stockledger.export import export_json
from stockledger.sample_data import load_sample_catalog
from stockledger.service import InventoryService
from stockledger.utils.logging import add_context, clear_context, configure_logging

DEFAULT_PERFORMER = "CLI User"


def _product_for(service, sku):
    product = service.find_by_sku(sku)
    if product is None:
        raise NotFoundError(sku, field="sku")
    return product


def _display_products(products):
    for p in products:
        status = "[DISCONTINUED]" if p.is_discontinued else ("[REORDER]" if p.needs_reorder else "")
        print(
            f"  {p.sku:<12} | {p.name:<25} | {p.category or '':<15} | "
            f"${p.price:>8,.2f} | Stock: {p.quantity_in_stock:>4} {status}".rstrip()
        )


def _display_transactions(entries):
    for tx in entries:
        sign = "+" if tx.is_increase else ""
        print(
            f"  {tx.occurred_at:%Y-%m-%d %H:%M} | {tx.kind:<12} | {sign}{tx.delta:>6} | "
            f"{tx.reason or ''} | by {tx.performed_by or ''}"
        )


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------
def handle_list(service, args):
    if args.category:
        products = service.list_by_category(args.category)
        print(f"Products in category '{args.category}':\n")
    else:
        products = service.list_products()
        print("All products:\n")
    _display_products(products)


def handle_add(service, args):
    product = service.add_product(args.name, args.sku, args.category, args.price, args.quantity, args.reorder_level)
    print(f"Added product: {product.name} (SKU: {product.sku})")


def handle_search(service, args):
    print(f"Search results for '{args.term}':\n")
    _display_products(service.search(args.term))


def handle_restock(service, args):
    product = _product_for(service, args.sku)
    service.restock(product.id, args.quantity, args.performer)
    print(f"Restocked {args.quantity} units of {product.name}. New stock: {product.quantity_in_stock}")


def handle_sale(service, args):
    product = _product_for(service, args.sku)
    service.record_sale(product.id, args.quantity, args.performer)
    print(f"Recorded sale of {args.quantity} units of {product.name}. Remaining stock: {product.quantity_in_stock}")


def handle_adjust(service, args):
    product = _product_for(service, args.sku)
    service.adjust_stock(product.id, args.delta, args.reason, args.performer)
    print(f"Adjusted {product.name} by {args.delta:+d}. New stock: {product.quantity_in_stock}")


def handle_return(service, args):
    product = _product_for(service, args.sku)
    service.record_return(product.id, args.quantity, args.performer)
    print(f"Returned {args.quantity} units of {product.name} to stock. New stock: {product.quantity_in_stock}")


def handle_damage(service, args):
    product = _product_for(service, args.sku)
    service.record_damage(product.id, args.quantity, args.reason, args.performer)
    print(f"Wrote off {args.quantity} damaged units of {product.name}. Remaining stock: {product.quantity_in_stock}")


def handle_count(service, args):
    product = _product_for(service, args.sku)
    entry = service.record_stock_check(product.id, args.counted, args.performer)
    if entry is None:
        print(f"Count matches for {product.name}: {product.quantity_in_stock}")
    else:
        print(f"Stock check adjusted {product.name} by {entry.delta:+d}. New stock: {product.quantity_in_stock}")


def handle_discontinue(service, args):
    product = _product_for(service, args.sku)
    service.discontinue(product.id)
    print(f"Discontinued {product.name} (SKU: {product.sku})")


def handle_reorder(service, args):
    products = service.reorder_report()
    print("Products needing reorder:\n")
    _display_products(products)
    if not products:
        print("  No products need reordering.")


def handle_history(service, args):
    product = _product_for(service, args.sku)
    entries = service.history(product.id)
    print(f"Transaction history for {product.name} (SKU: {product.sku}):\n")
    _display_transactions(entries)
    if not entries:
        print("  No transactions recorded.")


def handle_recent(service, args):
    entries = service.recent_transactions(args.count)
    print(f"Most recent {len(entries)} transactions:\n")
    _display_transactions(entries)


def handle_summary(service, args):
    summary = service.summary()
    print("Inventory Summary:")
    print(f"  Total Products:           {summary.total_products}")
    print(f"  Total Inventory Value:    ${summary.total_value:,.2f}")
    print(f"  Products Needing Reorder: {summary.products_needing_reorder}")
    print(f"  Discontinued Products:    {summary.discontinued_products}")
    print(f"  Total Transactions:       {summary.total_transactions}")


def handle_export(service, args):
    print(export_json(service.snapshot()))


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------
def build_parser():
    parser = argparse.ArgumentParser(prog="stockledger", description="Stock ledger inventory tool")
    parser.add_argument("--performer", default=DEFAULT_PERFORMER, help="Name recorded on stock transactions")
    parser.add_argument("--empty", action="store_true", help="Start without the sample catalog")
    parser.add_argument("--log-level", default=None, help="Override the log level (default: from environment)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="List all products (optionally by category)")
    list_parser.add_argument("category", nargs="?")
    list_parser.set_defaults(handler=handle_list)

    add_parser = subparsers.add_parser("add", help="Add a new product")
    add_parser.add_argument("name")
    add_parser.add_argument("sku")
    add_parser.add_argument("category")
    add_parser.add_argument("price")
    add_parser.add_argument("quantity", type=int)
    add_parser.add_argument("reorder_level", type=int)
    add_parser.set_defaults(handler=handle_add)

    search_parser = subparsers.add_parser("search", help="Search products by name, SKU or category")
    search_parser.add_argument("term")
    search_parser.set_defaults(handler=handle_search)

    for name, handler, help_text in (
        ("restock", handle_restock, "Restock a product"),
        ("sale", handle_sale, "Record a sale"),
        ("return", handle_return, "Return units to stock"),
    ):
        movement_parser = subparsers.add_parser(name, help=help_text)
        movement_parser.add_argument("sku")
        movement_parser.add_argument("quantity", type=int)
        movement_parser.set_defaults(handler=handler)

    adjust_parser = subparsers.add_parser("adjust", help="Adjust stock by a signed amount")
    adjust_parser.add_argument("sku")
    adjust_parser.add_argument("delta", type=int)
    adjust_parser.add_argument("reason", nargs="?", default="")
    adjust_parser.set_defaults(handler=handle_adjust)

    damage_parser = subparsers.add_parser("damage", help="Write off damaged units")
    damage_parser.add_argument("sku")
    damage_parser.add_argument("quantity", type=int)
    damage_parser.add_argument("reason")
    damage_parser.set_defaults(handler=handle_damage)

    count_parser = subparsers.add_parser("count", help="Record a physical stock count")
    count_parser.add_argument("sku")
    count_parser.add_argument("counted", type=int)
    count_parser.set_defaults(handler=handle_count)

    discontinue_parser = subparsers.add_parser("discontinue", help="Discontinue a product")
    discontinue_parser.add_argument("sku")
    discontinue_parser.set_defaults(handler=handle_discontinue)

    history_parser = subparsers.add_parser("history", help="Show transaction history")
    history_parser.add_argument("sku")
    history_parser.set_defaults(handler=handle_history)

    recent_parser = subparsers.add_parser("recent", help="Show the most recent transactions")
    recent_parser.add_argument("--count", type=int, default=10)
    recent_parser.set_defaults(handler=handle_recent)

    subparsers.add_parser("reorder", help="Show products needing reorder").set_defaults(handler=handle_reorder)
    subparsers.add_parser("summary", help="Show inventory summary").set_defaults(handler=handle_summary)
    subparsers.add_parser("export", help="Export inventory to JSON").set_defaults(handler=handle_export)

    return parser


def execute(args, service=None):
    """Run one parsed command. Needs an active ``stockledger`` domain context."""
    if service is None:
        service = InventoryService()
        if not args.empty:
            load_sample_catalog(service)

    try:
        args.handler(service, args)
    except (ValidationError, NotFoundError, ConflictError, InsufficientStockError) as exc:
        print(f"Error: {error_message(exc)}", file=sys.stderr)
        return 1
    return 0


def main(argv=None):
    args = build_parser().parse_args(argv)
    configure_logging(level=args.log_level)

    add_context(command=args.command, performer=args.performer)

    stockledger.init()
    try:
        with stockledger.domain_context():
            return execute(args)
    finally:
        clear_context()


if __name__ == "__main__":
    sys.exit(main())
