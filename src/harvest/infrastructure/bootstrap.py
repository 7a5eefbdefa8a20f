"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from harvest.application.cart_store import CartStore
from harvest.application.checkout import CheckoutHandler
from harvest.application.payment_callback import PaymentCallbackProcessor
from harvest.application.payment_request_builder import PaymentRequestBuilder
from harvest.infrastructure.config import Settings
from harvest.infrastructure.http.http_order_gateway import HttpOrderGateway
from harvest.infrastructure.persistence.json_address_book import JsonAddressBook
from harvest.infrastructure.persistence.json_cart_repository import JsonCartRepository
from harvest.infrastructure.persistence.json_transaction_ledger import JsonTransactionLedger
from harvest.infrastructure.web.html_form_navigator import HtmlFormNavigator


def settings() -> Settings:
    return Settings.from_env()


def cart_store(config: Settings) -> CartStore:
    store = CartStore(JsonCartRepository(config.data_dir / "cart.json"))
    store.load()
    return store


def navigator(config: Settings, launch: bool = True) -> HtmlFormNavigator:
    return HtmlFormNavigator(config.data_dir / "payment_redirect.html", launch=launch)


def order_gateway(config: Settings) -> HttpOrderGateway:
    return HttpOrderGateway(
        base_url=config.api_base,
        token=config.api_token,
        timeout=config.http_timeout,
    )


def payment_request_builder(
    config: Settings, nav: HtmlFormNavigator
) -> PaymentRequestBuilder:
    return PaymentRequestBuilder(
        secret=config.esewa_secret,
        product_code=config.esewa_product_code,
        form_url=config.esewa_form_url,
        success_url=config.success_url,
        failure_url=config.failure_url,
        navigator=nav,
    )


def checkout_handler(
    config: Settings,
    store: CartStore,
    gateway: HttpOrderGateway,
    nav: HtmlFormNavigator,
) -> CheckoutHandler:
    return CheckoutHandler(
        cart_store=store,
        order_gateway=gateway,
        payment_builder=payment_request_builder(config, nav),
        address_book=JsonAddressBook(config.data_dir / "address.json"),
    )


def payment_callback_processor(
    config: Settings, store: CartStore, nav: HtmlFormNavigator
) -> PaymentCallbackProcessor:
    return PaymentCallbackProcessor(
        cart_store=store,
        secret=config.esewa_secret,
        navigator=nav,
        allow_unsigned_callbacks=config.allow_unsigned_callbacks,
        ledger=JsonTransactionLedger(config.data_dir / "transactions.json"),
    )
