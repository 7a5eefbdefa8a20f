"""CLI commands for the payment gateway's return navigation."""

from __future__ import annotations

import click

from harvest.domain.model.payment import CallbackResultKind
from harvest.infrastructure.bootstrap import (
    cart_store,
    navigator,
    payment_callback_processor,
    settings,
)


@click.command("callback")
@click.argument("url")
def payment_callback(url: str) -> None:
    """Process the URL the gateway redirected back to."""
    config = settings()
    store = cart_store(config)
    processor = payment_callback_processor(config, store, navigator(config, launch=False))

    result = processor.process(url)

    if result.kind is CallbackResultKind.NO_CALLBACK:
        raise click.ClickException("No payment response found in the URL")

    if result.callback is not None:
        click.echo(f"Transaction: {result.callback.transaction_uuid}")
    if not result.trusted:
        click.echo("Warning: this payment response is NOT verified.")
    if result.clean_url:
        click.echo(f"Continue at: {result.clean_url}")

    if not result.succeeded:
        raise click.ClickException(result.message)
    click.echo(result.message)
