"""CLI commands for order reservations."""

from __future__ import annotations

import click

from stockledger.application.consume_materials import ConsumeMaterialsHandler
from stockledger.application.dto import InventoryLineDTO, MaterialSpec
from stockledger.application.release_reservation import ReleaseReservationHandler
from stockledger.application.reserve_materials import ReserveMaterialsHandler
from stockledger.application.show_reservations import ShowReservationsHandler
from stockledger.domain.exceptions import DomainException
from stockledger.infrastructure.bootstrap import Container


def _parse_materials(raw: str) -> list[MaterialSpec]:
    """Parse 'RM-0001:30,RM-0002:5' into MaterialSpec list."""
    specs: list[MaterialSpec] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid material format '{pair}'. Expected 'ItemId:Quantity'."
            )
        item_id, qty_str = pair.rsplit(":", 1)
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid quantity '{qty_str}' for item '{item_id}'."
            )
        specs.append(MaterialSpec(item_id=item_id.strip(), quantity=qty))
    return specs


def _display_stock(lines: list[InventoryLineDTO]) -> None:
    for line in lines:
        click.echo(
            f"  {line.item_id:<9} {line.item_name:<24} "
            f"stock={line.current_stock} reserved={line.reserved}"
        )


@click.command("reserve")
@click.option("--order", "order_id", required=True, help="Binding advice / order id.")
@click.option("--materials", required=True, help="Materials as 'ItemId:Qty,ItemId:Qty'.")
@click.pass_obj
def reservation_reserve(container: Container, order_id: str, materials: str) -> None:
    """Reserve materials for an approved order."""
    specs = _parse_materials(materials)
    handler = ReserveMaterialsHandler(container.reservation_manager(), container.events)

    try:
        lines = handler.handle(order_id, specs)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {order_id}: materials reserved.")
    _display_stock(lines)


@click.command("release")
@click.option("--order", "order_id", required=True, help="Binding advice / order id.")
@click.pass_obj
def reservation_release(container: Container, order_id: str) -> None:
    """Release everything reserved for a cancelled order."""
    handler = ReleaseReservationHandler(container.reservation_manager(), container.events)

    try:
        lines = handler.handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not lines:
        click.echo(f"Order {order_id}: nothing reserved.")
        return
    click.echo(f"Order {order_id}: reservations released.")
    _display_stock(lines)


@click.command("consume")
@click.option("--order", "order_id", required=True, help="Binding advice / order id.")
@click.option("--materials", required=True, help="Materials as 'ItemId:Qty,ItemId:Qty'.")
@click.pass_obj
def reservation_consume(container: Container, order_id: str, materials: str) -> None:
    """Record consumption of reserved materials after production."""
    specs = _parse_materials(materials)
    handler = ConsumeMaterialsHandler(container.consumption_recorder(), container.events)

    try:
        lines = handler.handle(order_id, specs)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {order_id}: materials consumed.")
    _display_stock(lines)


@click.command("show")
@click.option("--order", "order_id", required=True, help="Binding advice / order id.")
@click.pass_obj
def reservation_show(container: Container, order_id: str) -> None:
    """Show what an order currently has reserved."""
    handler = ShowReservationsHandler(container.reservation_manager())
    lines = handler.handle(order_id)

    if not lines:
        click.echo(f"Order {order_id}: nothing reserved.")
        return

    click.echo(f"Order {order_id} holds:")
    for line in lines:
        click.echo(
            f"  {line.item_id:<9} {line.item_name:<24} "
            f"{line.quantity} {line.unit} (since {line.reserved_on})"
        )
