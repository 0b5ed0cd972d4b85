import click

from stockledger.infrastructure.bootstrap import build_container
from stockledger.infrastructure.cli.item_commands import (
    item_add,
    item_adjust,
    item_list,
    item_low_stock,
    item_produce,
    item_receive,
)
from stockledger.infrastructure.cli.reservation_commands import (
    reservation_consume,
    reservation_release,
    reservation_reserve,
    reservation_show,
)


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """stockledger — material reservation and consumption ledger"""
    if ctx.obj is None:
        ctx.obj = build_container()


@cli.group()
def item() -> None:
    """Manage inventory items."""


@cli.group()
def reservation() -> None:
    """Reserve, release and consume materials for orders."""


# Register subcommands
item.add_command(item_add)
item.add_command(item_adjust)
item.add_command(item_list)
item.add_command(item_low_stock)
item.add_command(item_produce)
item.add_command(item_receive)
reservation.add_command(reservation_consume)
reservation.add_command(reservation_release)
reservation.add_command(reservation_reserve)
reservation.add_command(reservation_show)
