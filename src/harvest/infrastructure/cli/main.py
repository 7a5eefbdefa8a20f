import click

from harvest.infrastructure.cli.cart_commands import (
    cart_add,
    cart_clear,
    cart_remove,
    cart_show,
    cart_update,
)
from harvest.infrastructure.cli.checkout_commands import checkout_cod, checkout_pay
from harvest.infrastructure.cli.payment_commands import payment_callback
from harvest.infrastructure.logging_config import setup_logging


@click.group()
@click.option("-v", "--verbose", count=True, help="-v for INFO, -vv for DEBUG logging.")
def cli(verbose: int) -> None:
    """Harvest: marketplace cart, checkout and payment"""
    setup_logging({0: "WARNING", 1: "INFO"}.get(verbose, "DEBUG"))


@cli.group()
def cart() -> None:
    """Manage the cart."""


@cli.group()
def checkout() -> None:
    """Place orders from the cart."""


@cli.group()
def payment() -> None:
    """Handle payment gateway returns."""


# Register subcommands
cart.add_command(cart_add)
cart.add_command(cart_clear)
cart.add_command(cart_remove)
cart.add_command(cart_show)
cart.add_command(cart_update)
checkout.add_command(checkout_cod)
checkout.add_command(checkout_pay)
payment.add_command(payment_callback)
