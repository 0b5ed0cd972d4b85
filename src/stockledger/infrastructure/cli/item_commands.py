"""CLI commands for inventory items."""

from __future__ import annotations

import click

from stockledger.application.add_item import AddItemHandler, parse_category
from stockledger.application.adjust_stock import AdjustStockHandler
from stockledger.application.dto import InventoryLineDTO
from stockledger.application.receive_purchase import ReceivePurchaseHandler
from stockledger.application.record_production import RecordProductionHandler
from stockledger.application.show_inventory import ShowInventoryHandler
from stockledger.application.show_low_stock import ShowLowStockHandler
from stockledger.domain.exceptions import DomainException
from stockledger.domain.model.inventory import ConsumptionType, ItemCategory
from stockledger.infrastructure.bootstrap import Container

_CATEGORIES = [c.value for c in ItemCategory]


def _display_lines(lines: list[InventoryLineDTO]) -> None:
    click.echo(
        f"{'ID':<9} {'Item':<24} {'Stock':>8} {'Reserved':>9} {'Min':>6} "
        f"{'Status':<11} {'Value':>14}"
    )
    click.echo("-" * 87)
    for line in lines:
        click.echo(
            f"{line.item_id:<9} {line.item_name:<24} {line.current_stock:>8} "
            f"{line.reserved:>9} {line.min_stock:>6} {line.status:<11} {line.value:>14}"
        )


@click.command("add")
@click.option("--name", required=True, help="Item name.")
@click.option("--category", required=True, type=click.Choice(_CATEGORIES), help="Item category.")
@click.option("--unit", default="units", show_default=True, help="Unit of measure.")
@click.option("--stock", "current_stock", default=0, type=int, help="Opening stock.")
@click.option("--min-stock", default=0, type=int, help="Reorder threshold.")
@click.option("--max-stock", default=0, type=int, help="Storage capacity (0 = none).")
@click.option("--cost", "cost_per_unit", default="0", help="Cost per unit (e.g. 245.50).")
@click.option("--production-cost", default=None, help="Finished products only.")
@click.option("--selling-price", default=None, help="Finished products only.")
@click.option("--supplier", default="", help="Default supplier.")
@click.option("--location", default="", help="Storage location.")
@click.pass_obj
def item_add(container: Container, name: str, category: str, **fields) -> None:
    """Add a new inventory item."""
    handler = AddItemHandler(
        inventory_repo=container.inventory_repo,
        classifier=container.classifier,
        events=container.events,
        clock=container.clock,
    )

    try:
        line = handler.handle(name=name, category=category, **fields)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Item {line.item_id} '{line.item_name}' added (status={line.status})")


@click.command("list")
@click.option("--category", default=None, type=click.Choice(_CATEGORIES), help="Only this category.")
@click.pass_obj
def item_list(container: Container, category: str | None) -> None:
    """Show current stock levels."""
    handler = ShowInventoryHandler(container.inventory_repo, container.query_cache)
    selected = parse_category(category) if category else None

    try:
        view = handler.handle(selected)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not view.lines:
        click.echo("No inventory items found.")
        return
    _display_lines(view.lines)
    click.echo(f"\nTotal value: {view.total_value}")


@click.command("low-stock")
@click.pass_obj
def item_low_stock(container: Container) -> None:
    """List items at or below their reorder threshold."""
    handler = ShowLowStockHandler(
        container.inventory_repo, container.classifier, container.query_cache
    )
    lines = handler.handle()

    if not lines:
        click.echo("No items are low on stock.")
        return

    click.echo(f"{'ID':<9} {'Item':<24} {'Stock':>8} {'Min':>6} {'Status':<11}")
    click.echo("-" * 62)
    for line in lines:
        status = line.computed_status
        if line.diverged:
            status = f"{line.computed_status} (stored: {line.stored_status})"
        click.echo(
            f"{line.item_id:<9} {line.item_name:<24} {line.current_stock:>8} "
            f"{line.min_stock:>6} {status}"
        )


@click.command("receive")
@click.option("--id", "item_id", required=True, help="Item ID.")
@click.option("--quantity", required=True, type=int, help="Quantity received.")
@click.option("--rate", required=True, help="Purchase rate per unit.")
@click.option("--supplier", default="", help="Supplier (defaults to the item's).")
@click.pass_obj
def item_receive(container: Container, item_id: str, quantity: int, rate: str, supplier: str) -> None:
    """Record a purchase delivery."""
    handler = ReceivePurchaseHandler(container.stock_mutator(), container.events)

    try:
        line = handler.handle(item_id, quantity, rate, supplier)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Received {quantity} {line.unit} of {line.item_name} — stock now {line.current_stock}")


@click.command("adjust")
@click.option("--id", "item_id", required=True, help="Item ID.")
@click.option("--delta", required=True, type=int, help="Signed change, e.g. -5 or 12.")
@click.option("--waste", is_flag=True, default=False, help="Record a write-down as waste.")
@click.pass_obj
def item_adjust(container: Container, item_id: str, delta: int, waste: bool) -> None:
    """Correct stock after a count."""
    handler = AdjustStockHandler(container.stock_mutator(), container.events)
    kind = ConsumptionType.WASTE if waste else ConsumptionType.ADJUSTMENT

    try:
        line = handler.handle(item_id, delta, kind)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"{line.item_name} adjusted by {delta:+d} — stock now {line.current_stock}")


@click.command("produce")
@click.option("--id", "item_id", required=True, help="Finished product ID.")
@click.option("--quantity", required=True, type=int, help="Quantity produced.")
@click.option("--job-card", required=True, help="Job card the batch came from.")
@click.pass_obj
def item_produce(container: Container, item_id: str, quantity: int, job_card: str) -> None:
    """Add finished products from a completed job card."""
    handler = RecordProductionHandler(container.stock_mutator(), container.events)

    try:
        line = handler.handle(item_id, quantity, job_card)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Added {quantity} {line.unit} of {line.item_name} — stock now {line.current_stock}")
