#!/usr/bin/env python3
"""
Purchase-order intake — CLI entry point.

Usage examples:
  python main.py check acme                          # Load warehouses + suppliers for a company
  python main.py check acme --csv                    # Same, from data/*.csv
  python main.py suppliers acme                      # Print the supplier directory
  python main.py suppliers acme --query nordic       # Filter by name, contact or email
  python main.py create acme --supplier "Nordic Packaging" --order-date 2024-01-10
  python main.py create acme --supplier sup-1001 --warehouse wh-1 --expected-date 2024-02-01 --status OPEN
"""
import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import click

from config import Config
from models.purchase_order import PURCHASE_ORDER_STATUSES
from models.supplier import Supplier
from intake.api_client import InventoryApiClient
from intake.context import ContextBinding
from intake.controller import IntakeController
from intake.csv_source import CsvReferenceData
from intake.supplier_search import filter_suppliers


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
        datefmt="%H:%M:%S",
    )
    # Quieten noisy third-party loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def _open_intake(config: Config, company: str, use_csv: bool) -> AsyncIterator[IntakeController]:
    """Mount an intake controller for company and wait for its reference data."""
    async with InventoryApiClient.from_config(config) as api:
        reference = CsvReferenceData.from_config(config) if use_csv else api
        binding = ContextBinding()
        async with IntakeController(binding, reference, api, config=config) as intake:
            binding.bind(company)
            await intake.wait_until_settled()
            yield intake


def _resolve_supplier(intake: IntakeController, text: str) -> Optional[Supplier]:
    """Turn --supplier into one supplier: id, unique substring match, exact name, then fuzzy."""
    search = intake.search
    by_id = search.find(text)
    if by_id:
        return by_id
    matches = filter_suppliers(search.suppliers, text)
    if len(matches) == 1:
        return matches[0]
    exact = [s for s in matches if s.name.lower() == text.strip().lower()]
    if len(exact) == 1:
        return exact[0]
    return search.best_match(text)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Purchase-order intake — load reference data and create purchase orders."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    _setup_logging(verbose)


# --------------------------------------------------------------------
# check command
# --------------------------------------------------------------------

@cli.command()
@click.argument("company")
@click.option("--csv", "use_csv", is_flag=True, help="Read reference data from CSV files")
@click.pass_context
def check(ctx: click.Context, company: str, use_csv: bool) -> None:
    """Verify that warehouses and suppliers load for COMPANY."""
    config = Config()

    async def run():
        async with _open_intake(config, company, use_csv) as intake:
            return intake.snapshot()

    view = asyncio.run(run())

    click.echo("\n=== Intake Setup Check ===\n")
    source = f"{config.warehouses_csv.parent}/ (CSV)" if use_csv else config.api_base_url
    click.echo(f"  Reference data:  {source}")
    click.echo(f"  Company:         {company}")
    click.echo()
    for label, items, error in [
        ("Warehouses", view.warehouses, view.loader_errors.warehouse),
        ("Suppliers", view.suppliers, view.loader_errors.supplier),
    ]:
        if error:
            click.echo(f"  {label:<14} ✗  {error}")
        else:
            tick = "✓" if items else "✗"
            click.echo(f"  {label:<14} {tick}  ({len(items)} loaded)")
            if ctx.obj.get("verbose"):
                for item in items:
                    click.echo(f"      {item.id:<12} {item.name}")
    click.echo()

    if view.form_disabled:
        click.echo("  → Purchase orders cannot be created until both lists load with data.")
        sys.exit(1)
    click.echo("  ✓ Ready to create purchase orders")


# --------------------------------------------------------------------
# suppliers command
# --------------------------------------------------------------------

@cli.command()
@click.argument("company")
@click.option("--query", "-q", default="", help="Filter by name, contact name or email")
@click.option("--csv", "use_csv", is_flag=True, help="Read reference data from CSV files")
def suppliers(company: str, query: str, use_csv: bool) -> None:
    """List the supplier directory for COMPANY."""
    config = Config()

    async def run():
        async with _open_intake(config, company, use_csv) as intake:
            intake.set_supplier_query(query)
            return intake.snapshot()

    view = asyncio.run(run())

    if view.loader_errors.supplier:
        click.echo(f"Error: {view.loader_errors.supplier}", err=True)
        sys.exit(1)
    if not view.filtered_suppliers:
        click.echo("No suppliers found.")
        return
    for s in view.filtered_suppliers:
        contact = " / ".join(f for f in (s.contact_name, s.email) if f)
        click.echo(f"  {s.id:<12} {s.name:<32} {contact}")


# --------------------------------------------------------------------
# create command
# --------------------------------------------------------------------

@cli.command()
@click.argument("company")
@click.option("--supplier", "-s", "supplier_text", required=True, help="Supplier id or name")
@click.option("--warehouse", "-w", default=None, help="Warehouse id (default: first warehouse)")
@click.option("--order-date", default=None, help="Order date YYYY-MM-DD (default: today)")
@click.option("--expected-date", default=None, help="Expected arrival YYYY-MM-DD")
@click.option("--status", type=click.Choice(PURCHASE_ORDER_STATUSES, case_sensitive=False),
              default=None, help="Initial status (default: DEFAULT_ORDER_STATUS or DRAFT)")
@click.option("--csv", "use_csv", is_flag=True, help="Read reference data from CSV files")
def create(
    company: str,
    supplier_text: str,
    warehouse: str | None,
    order_date: str | None,
    expected_date: str | None,
    status: str | None,
    use_csv: bool,
) -> None:
    """Create a purchase order for COMPANY."""
    config = Config()

    async def run():
        async with _open_intake(config, company, use_csv) as intake:
            view = intake.snapshot()
            for error in (view.loader_errors.warehouse, view.loader_errors.supplier):
                if error:
                    return None, error

            supplier = _resolve_supplier(intake, supplier_text)
            if supplier is not None:
                intake.pick_supplier(supplier.id)
            else:
                intake.set_supplier_query(supplier_text)

            if warehouse:
                intake.set_warehouse(warehouse)
            if order_date is not None:
                intake.set_order_date(order_date)
            if expected_date is not None:
                intake.set_expected_date(expected_date)
            if status:
                intake.set_status(status.upper())

            order_id = await intake.submit()
            return order_id, intake.snapshot().submit_error

    try:
        order_id, error = asyncio.run(run())
    except ValueError as e:
        # Malformed dates are rejected when assigned to the draft
        click.echo(f"✗ Invalid input: {e}", err=True)
        sys.exit(1)

    if order_id is None:
        click.echo(f"✗ {error}", err=True)
        sys.exit(1)
    click.echo(f"✓ Created purchase order {order_id}")


if __name__ == "__main__":
    cli()
