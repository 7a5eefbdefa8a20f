"""CLI commands for placing orders."""

from __future__ import annotations

import click

from harvest.domain.model.order import DeliveryAddress, OrderError
from harvest.infrastructure.bootstrap import (
    cart_store,
    checkout_handler,
    navigator,
    order_gateway,
    settings,
)


def _address_options(command):
    """Shared --province/--city/--street/--phone options.

    Missing values fall back to the address saved by the last order.
    """
    for name in ("phone", "street", "city", "province"):
        command = click.option(f"--{name}", default=None, help=f"Delivery {name}.")(command)
    return command


def _resolve_address(saved: DeliveryAddress | None, **given: str | None) -> DeliveryAddress:
    def pick(name: str) -> str:
        value = given.get(name)
        if value is None and saved is not None:
            value = getattr(saved, name)
        return value or ""

    return DeliveryAddress(
        province=pick("province"), city=pick("city"), street=pick("street"), phone=pick("phone")
    )


def _fail(error: OrderError) -> None:
    details = "".join(f"\n  {field}: {msg}" for field, msg in error.field_errors.items())
    raise click.ClickException(f"[{error.kind.value}] {error.message}{details}")


@click.command("cod")
@_address_options
def checkout_cod(province, city, street, phone) -> None:
    """Place a cash-on-delivery order for the whole cart."""
    config = settings()
    store = cart_store(config)
    with order_gateway(config) as gateway:
        handler = checkout_handler(config, store, gateway, navigator(config))
        address = _resolve_address(
            handler.saved_address(), province=province, city=city, street=street, phone=phone
        )
        result = handler.place_cash_on_delivery(address)

    if not result.succeeded:
        _fail(result.error)
    click.echo(f"Order placed successfully! Order ID: {result.order_id}")


@click.command("pay")
@_address_options
@click.option("--no-browser", is_flag=True, default=False, help="Write the redirect page without opening it.")
def checkout_pay(province, city, street, phone, no_browser: bool) -> None:
    """Create the order and redirect to eSewa to pay for it."""
    config = settings()
    store = cart_store(config)
    nav = navigator(config, launch=not no_browser)
    with order_gateway(config) as gateway:
        handler = checkout_handler(config, store, gateway, nav)
        address = _resolve_address(
            handler.saved_address(), province=province, city=city, street=street, phone=phone
        )
        initiation = handler.start_online_payment(address)

    if not initiation.redirected:
        _fail(initiation.order.error)

    request = initiation.payment_request
    click.echo(f"Order {initiation.order.order_id} created; awaiting payment.")
    click.echo(f"Transaction: {request.transaction_uuid}  Amount: {request.total_amount}")
    click.echo(f"Redirect page: {config.data_dir / 'payment_redirect.html'}")
