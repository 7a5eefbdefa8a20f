"""CLI commands for the cart."""

from __future__ import annotations

import click

from harvest.application.cart_store import CartStore
from harvest.domain.exceptions import DomainException
from harvest.domain.model.product import ProductRef
from harvest.domain.model.value_objects import Money
from harvest.infrastructure.bootstrap import cart_store, settings


def _display_cart(store: CartStore) -> None:
    lines = store.snapshot()
    if not lines:
        click.echo("Your cart is empty.")
        return

    click.echo(f"  {'ID':<26} {'Product':<20} {'Qty':>5} {'Price':>12} {'Total':>12}")
    click.echo(f"  {'-'*79}")
    for line in lines:
        click.echo(
            f"  {line.product_id:<26} {line.product.name:<20} {line.quantity:>5} "
            f"{str(line.product.price):>12} {str(line.line_total):>12}"
        )
    click.echo(f"  {'-'*79}")
    totals = store.totals()
    click.echo(f"  {'Items':<47} {totals.total_items:>5}")
    click.echo(f"  {'Cart Total':<47} {str(totals.total_price):>31}")


@click.command("add")
@click.option("--id", "product_id", required=True, help="Product ID.")
@click.option("--name", required=True, help="Product name.")
@click.option("--price", required=True, help="Unit price (e.g. 80).")
@click.option("--stock", required=True, type=int, help="Units currently in stock.")
@click.option("--qty", "quantity", default=1, show_default=True, type=int, help="Units to add.")
def cart_add(product_id: str, name: str, price: str, stock: int, quantity: int) -> None:
    """Add a product to the cart."""
    store = cart_store(settings())

    try:
        product = ProductRef(id=product_id, name=name, price=Money.of(price), available_stock=stock)
        requested = store.quantity_of(product_id) + quantity
        effective = store.add_item(product, quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if effective < requested:
        click.echo(f"Maximum available quantity is {stock}; {name} set to {effective}.")
    else:
        click.echo(f"{name} x{effective} in cart.")


@click.command("remove")
@click.option("--id", "product_id", required=True, help="Product ID.")
def cart_remove(product_id: str) -> None:
    """Remove a product from the cart."""
    store = cart_store(settings())
    if not store.contains(product_id):
        raise click.ClickException(f"Product '{product_id}' is not in your cart")

    store.remove_item(product_id)
    click.echo(f"Removed {product_id}.")


@click.command("update")
@click.option("--id", "product_id", required=True, help="Product ID.")
@click.option("--qty", "quantity", required=True, type=int, help="New quantity (0 removes).")
def cart_update(product_id: str, quantity: int) -> None:
    """Change the quantity of a product in the cart."""
    store = cart_store(settings())
    if not store.contains(product_id):
        raise click.ClickException(f"Product '{product_id}' is not in your cart")

    effective = store.update_quantity(product_id, quantity)
    if effective == 0:
        click.echo(f"Removed {product_id}.")
    elif effective < quantity:
        click.echo(f"Maximum available quantity is {effective}; quantity set to {effective}.")
    else:
        click.echo(f"Quantity set to {effective}.")


@click.command("show")
def cart_show() -> None:
    """Show the cart and its totals."""
    _display_cart(cart_store(settings()))


@click.command("clear")
def cart_clear() -> None:
    """Empty the cart."""
    cart_store(settings()).clear()
    click.echo("Cart cleared.")
