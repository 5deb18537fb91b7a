#!/usr/bin/env python3
"""Command-line access to the compra-rapida store.

Commands:
- init-db: create the PostgreSQL tables (postgres backend only)
- seed: fill the store with sample customers and purchases
- stats: print dashboard figures
- customers / purchases: list or search entities

The backend comes from STORE_BACKEND (embedded or postgres) unless
--backend is given.
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from compra_rapida.config import BACKENDS, CompraRapidaConfig
from compra_rapida.exceptions import CompraRapidaError
from compra_rapida.formatters import format_cpf, format_currency, format_date, format_phone
from compra_rapida.generators import SampleDataGenerator
from compra_rapida.logging import setup_logging
from compra_rapida.store import EntityStore, create_store

logger = logging.getLogger(__name__)


def cmd_init_db(store: EntityStore, config: CompraRapidaConfig, args: argparse.Namespace) -> None:
    from compra_rapida.store.postgres import PostgresBackend

    if not isinstance(store.backend, PostgresBackend):
        print("init-db only applies to the postgres backend; nothing to do.")
        return
    store.backend.create_schema()
    print("Database tables created successfully.")


def cmd_seed(store: EntityStore, config: CompraRapidaConfig, args: argparse.Namespace) -> None:
    generator = SampleDataGenerator(seed=args.seed)
    customers, purchases = generator.populate(
        store, args.customers, purchases_per_customer=args.purchases_per_customer
    )
    print(f"Created {customers} customers and {purchases} purchases")


def cmd_stats(store: EntityStore, config: CompraRapidaConfig, args: argparse.Namespace) -> None:
    stats = store.get_stats()
    print(f"Total de Clientes:  {stats.customer_count}")
    print(f"Total de Compras:   {stats.purchase_count}")
    print(f"Faturamento Total:  {format_currency(stats.total_revenue, config.locale)}")
    print(f"Ticket Médio:       {format_currency(stats.average_ticket, config.locale)}")


def cmd_customers(store: EntityStore, config: CompraRapidaConfig, args: argparse.Namespace) -> None:
    customers = store.search_customers(args.search) if args.search else store.list_customers()
    for customer in customers:
        print(
            f"{customer.customer_id}  {customer.name:<40}  "
            f"{format_cpf(customer.cpf)}  {format_phone(customer.phone)}"
        )
    print(f"{len(customers)} cliente(s)")


def cmd_purchases(store: EntityStore, config: CompraRapidaConfig, args: argparse.Namespace) -> None:
    purchases = store.search_purchases(args.search) if args.search else store.list_purchases()
    for purchase in purchases:
        print(
            f"{purchase.purchase_id}  {format_date(purchase.purchase_date, config.locale)}  "
            f"{format_currency(purchase.total_amount, config.locale):>14}  "
            f"{purchase.payment_method.label:<8}  {purchase.customer_name}"
        )
    print(f"{len(purchases)} compra(s)")


COMMANDS = {
    "init-db": cmd_init_db,
    "seed": cmd_seed,
    "stats": cmd_stats,
    "customers": cmd_customers,
    "purchases": cmd_purchases,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Manage the compra-rapida store")
    parser.add_argument(
        "--backend",
        type=str,
        choices=BACKENDS,
        default=None,
        help="Storage backend (default: STORE_BACKEND or embedded)",
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help="Directory for the embedded backend files (default: DATA_DIR or ./data)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Log level (default: LOG_LEVEL or INFO)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("init-db", help="Create PostgreSQL tables")

    seed = subparsers.add_parser("seed", help="Create sample customers and purchases")
    seed.add_argument("--customers", type=int, default=20, help="Customers to create (default: 20)")
    seed.add_argument(
        "--purchases-per-customer",
        type=int,
        default=3,
        help="Maximum purchases per customer (default: 3)",
    )
    seed.add_argument("--seed", type=int, default=None, help="Random seed for reproducibility")

    subparsers.add_parser("stats", help="Show dashboard figures")

    customers = subparsers.add_parser("customers", help="List customers")
    customers.add_argument("--search", type=str, default="", help="Filter by name, CPF or phone")

    purchases = subparsers.add_parser("purchases", help="List purchases")
    purchases.add_argument("--search", type=str, default="", help="Filter by customer or payment method")

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    config = CompraRapidaConfig.from_env()
    if args.backend:
        config.backend = args.backend
    if args.data_dir:
        config.embedded.data_dir = args.data_dir
    if args.log_level:
        config.log_level = args.log_level
    setup_logging(level=config.log_level, format_type=config.log_format)

    try:
        with create_store(config) as store:
            COMMANDS[args.command](store, config, args)
    except CompraRapidaError as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        if getattr(e, "retryable", False):
            print("The store is unavailable right now; try again later.", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
