"""Storefront database management CLI.

Usage:
    PROTEAN_ENV=production python src/manage.py setup-db   # Create all tables
    PROTEAN_ENV=production python src/manage.py drop-db    # Drop all tables
"""

import argparse
import sys

from rich.console import Console

console = Console()


def _domain():
    from storefront.domain import storefront

    storefront.init()
    return storefront


def setup_databases():
    from storefront.utils.db import setup_db

    console.print("Initializing storefront domain...")
    providers = setup_db(_domain())
    if not providers:
        console.print("[yellow]No SQL providers configured for this environment; nothing to create.[/yellow]")
        return
    console.print(f"[green]Schema ready[/green] on providers: {', '.join(providers)}")


def drop_databases():
    from storefront.utils.db import drop_db

    console.print("Initializing storefront domain...")
    providers = drop_db(_domain())
    if not providers:
        console.print("[yellow]No SQL providers configured for this environment; nothing to drop.[/yellow]")
        return
    console.print(f"[red]Schema dropped[/red] on providers: {', '.join(providers)}")


def main():
    parser = argparse.ArgumentParser(description="Storefront database management")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_databases()
    elif args.command == "drop-db":
        drop_databases()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
