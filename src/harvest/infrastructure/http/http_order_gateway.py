"""REST implementation of OrderGateway on top of httpx.

Every failure is classified by status class and returned as a
PlaceOrderResult; nothing raised by httpx escapes ``place_order``.
"""

from __future__ import annotations

import logging

import httpx

from harvest.domain.gateway.order_gateway import OrderGateway
from harvest.domain.model.order import OrderErrorKind, OrderRequest, PlaceOrderResult

log = logging.getLogger(__name__)

ORDERS_PATH = "/orders"


class HttpOrderGateway(OrderGateway):
    """Client for the marketplace backend's ``POST /orders``."""

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._token = token
        self._client = httpx.Client(
            base_url=base_url,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> HttpOrderGateway:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # --- OrderGateway interface -----------------------------------------------

    def place_order(self, request: OrderRequest) -> PlaceOrderResult:
        field_errors = request.invalid_product_ids()
        if field_errors:
            return PlaceOrderResult.failed(
                OrderErrorKind.VALIDATION,
                "Some products in your cart have invalid identifiers",
                field_errors=field_errors,
            )

        try:
            response = self._client.post(
                ORDERS_PATH, json=request.to_payload(), headers=self._headers()
            )
        except httpx.TimeoutException as exc:
            log.error("Order submission timed out: %s", exc)
            return PlaceOrderResult.failed(
                OrderErrorKind.CONNECTIVITY,
                "The server took too long to respond. Please check your connection and try again.",
            )
        except httpx.TransportError as exc:
            log.error("Order submission failed to reach the server: %s", exc)
            return PlaceOrderResult.failed(
                OrderErrorKind.CONNECTIVITY,
                "Could not reach the server. Please check your connection and try again.",
            )

        return self._interpret(response)

    # --- Internal helpers -----------------------------------------------------

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def _interpret(self, response: httpx.Response) -> PlaceOrderResult:
        status = response.status_code
        body = _json_or_none(response)

        if response.is_success:
            order_id = body.get("orderId") if isinstance(body, dict) else None
            if not order_id:
                log.error("Order accepted (HTTP %d) but no orderId in response", status)
                return PlaceOrderResult.failed(
                    OrderErrorKind.SERVER,
                    "The server did not return an order number. Please try again.",
                    status_code=status,
                )
            log.info("Order %s placed", order_id)
            return PlaceOrderResult.ok(str(order_id))

        message = _server_message(body)
        if status in (401, 403):
            log.warning("Order submission rejected for authentication (HTTP %d)", status)
            return PlaceOrderResult.failed(
                OrderErrorKind.AUTH,
                message or "Please log in again to place your order.",
                status_code=status,
            )
        if 400 <= status < 500:
            log.warning("Order submission rejected as invalid (HTTP %d): %s", status, message)
            return PlaceOrderResult.failed(
                OrderErrorKind.VALIDATION,
                message or "The order was rejected. Please review your cart and address.",
                field_errors=_server_field_errors(body),
                status_code=status,
            )

        log.error("Order submission failed with HTTP %d: %s", status, message)
        return PlaceOrderResult.failed(
            OrderErrorKind.SERVER,
            "Failed to place order. Please try again.",
            status_code=status,
        )


def _json_or_none(response: httpx.Response) -> object | None:
    try:
        return response.json()
    except ValueError:
        return None


def _server_message(body: object | None) -> str | None:
    if isinstance(body, dict):
        message = body.get("message") or body.get("error")
        if isinstance(message, str) and message.strip():
            return message
    return None


def _server_field_errors(body: object | None) -> dict[str, str]:
    """Pick up ``{"errors": {field: message}}`` when the backend sends it."""
    if isinstance(body, dict) and isinstance(body.get("errors"), dict):
        return {str(k): str(v) for k, v in body["errors"].items()}
    return {}
