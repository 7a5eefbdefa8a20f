"""Application service: process the payment gateway's return navigation.

One call to ``process(url)`` walks a single returned navigation through

    extract -> decode -> verify -> apply (once) -> clean up the URL

and always returns a CallbackResult; nothing in the pipeline raises to
the caller. Only a verified COMPLETE clears the cart.

Applied terminal transactions are remembered in memory and, when a
TransactionLedger is given, across runs. The short latch is taken only
when a verified outcome is about to be applied.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from harvest.application.cart_store import CartStore
from harvest.application.idempotency_latch import IdempotencyLatch
from harvest.domain.exceptions import CorruptLedgerError, InvalidCallbackError
from harvest.domain.gateway.navigator import Navigator
from harvest.domain.model.payment import (
    CallbackResult,
    CallbackResultKind,
    PaymentCallback,
    PaymentOutcome,
)
from harvest.domain.repository.transaction_ledger import TransactionLedger
from harvest.domain.service.callback_parsing import (
    decode_callback,
    extract_encoded_response,
    extract_status_flag,
    strip_callback_params,
)
from harvest.domain.service.signature import verify

log = logging.getLogger(__name__)

OUTCOME_MESSAGES: dict[PaymentOutcome, str] = {
    PaymentOutcome.COMPLETE: "Payment successful! Your order has been placed.",
    PaymentOutcome.PENDING: (
        "Your payment is still pending at eSewa. Your cart has been kept; "
        "we will update the order once the payment completes."
    ),
    PaymentOutcome.CANCELED: "Payment was cancelled. Your cart has been kept so you can try again.",
    PaymentOutcome.NOT_FOUND: (
        "The payment session expired or could not be found. Please try again."
    ),
    PaymentOutcome.AMBIGUOUS: (
        "The payment is in an uncertain state. Please contact support before paying again."
    ),
    PaymentOutcome.FULL_REFUND: "This payment has been fully refunded.",
    PaymentOutcome.PARTIAL_REFUND: (
        "This payment has been partially refunded. Please contact support for details."
    ),
}

VERIFICATION_FAILED_MESSAGE = (
    "We could not verify the payment response. Your cart has not been changed. "
    "Please contact support with your transaction reference."
)
INVALID_RESPONSE_MESSAGE = "We could not read the payment response. Please try again."
UNSIGNED_REJECTED_MESSAGE = (
    "The payment gateway returned an unsigned response that cannot be trusted. "
    "Your cart has not been changed. Please contact support."
)
UNSIGNED_SUCCESS_MESSAGE = "Payment reported successful. Your order has been placed."
UNSIGNED_FAILURE_MESSAGE = "Payment failed. Your cart has been kept so you can try again."
DUPLICATE_MESSAGE = "This payment response has already been processed."
LEDGER_UNAVAILABLE_MESSAGE = (
    "We could not check whether this payment was already applied. "
    "Your cart has not been changed. Please contact support."
)


class PaymentCallbackProcessor:

    def __init__(
        self,
        cart_store: CartStore,
        secret: str,
        navigator: Navigator,
        latch: IdempotencyLatch | None = None,
        allow_unsigned_callbacks: bool = False,
        ledger: TransactionLedger | None = None,
    ) -> None:
        self._cart_store = cart_store
        self._secret = secret
        self._navigator = navigator
        self._latch = latch or IdempotencyLatch()
        self._allow_unsigned = allow_unsigned_callbacks
        self._ledger = ledger
        self._applied_transactions: set[str] = set()

    def process(self, url: str) -> CallbackResult:
        token = extract_encoded_response(url)
        status_flag = extract_status_flag(url) if token is None else None

        if token is None and status_flag is None:
            return CallbackResult(kind=CallbackResultKind.NO_CALLBACK, message="")

        if token is not None:
            result = self._apply_signed(token)
        else:
            result = self._apply_unsigned(status_flag)

        if result.kind is CallbackResultKind.DUPLICATE:
            return result
        return self._finish(url, result)

    # --- Signed responses -----------------------------------------------------

    def _apply_signed(self, token: str) -> CallbackResult:
        try:
            callback = decode_callback(token)
        except InvalidCallbackError as exc:
            log.warning("Rejecting undecodable payment response: %s", exc)
            return CallbackResult(
                kind=CallbackResultKind.INVALID_RESPONSE, message=INVALID_RESPONSE_MESSAGE
            )

        if not verify(callback.signature, callback.fields, self._secret, callback.signed_fields):
            log.warning(
                "Payment response signature mismatch for transaction %s (claimed status %s)",
                callback.transaction_uuid,
                callback.status,
            )
            return CallbackResult(
                kind=CallbackResultKind.VERIFICATION_FAILED,
                message=VERIFICATION_FAILED_MESSAGE,
                callback=callback,
                trusted=False,
            )

        outcome = callback.outcome
        if outcome is None:
            log.warning(
                "Verified payment response has unknown status %r for transaction %s",
                callback.status,
                callback.transaction_uuid,
            )
            return CallbackResult(
                kind=CallbackResultKind.INVALID_RESPONSE,
                message=INVALID_RESPONSE_MESSAGE,
                callback=callback,
            )

        try:
            already_applied = self._already_applied(callback.transaction_uuid)
        except CorruptLedgerError as exc:
            log.error("Cannot check transaction %s: %s", callback.transaction_uuid, exc)
            return CallbackResult(
                kind=CallbackResultKind.LEDGER_UNAVAILABLE,
                message=LEDGER_UNAVAILABLE_MESSAGE,
                outcome=outcome,
                callback=callback,
            )

        if already_applied:
            log.info("Transaction %s was already applied", callback.transaction_uuid)
            return self._duplicate(outcome, callback)

        if not self._latch.try_acquire():
            log.info(
                "Ignoring payment callback for %s while the latch is held",
                callback.transaction_uuid,
            )
            return self._duplicate(outcome, callback)

        return self._apply_outcome(callback, outcome)

    def _apply_outcome(self, callback: PaymentCallback, outcome: PaymentOutcome) -> CallbackResult:
        if outcome is PaymentOutcome.COMPLETE:
            self._cart_store.clear()
            self._remember(callback.transaction_uuid)
            log.info(
                "Payment %s completed (code %s, amount %s); cart cleared",
                callback.transaction_uuid,
                callback.transaction_code,
                callback.total_amount,
            )
            return CallbackResult(
                kind=CallbackResultKind.SUCCESS,
                message=OUTCOME_MESSAGES[outcome],
                outcome=outcome,
                callback=callback,
                cart_cleared=True,
            )

        if outcome.is_terminal:
            self._remember(callback.transaction_uuid)
        log.info("Payment %s ended with status %s", callback.transaction_uuid, outcome.value)
        return CallbackResult(
            kind=CallbackResultKind.PAYMENT_NOT_COMPLETED,
            message=OUTCOME_MESSAGES[outcome],
            outcome=outcome,
            callback=callback,
        )

    # --- Applied transactions -------------------------------------------------

    def _already_applied(self, transaction_uuid: str) -> bool:
        if transaction_uuid in self._applied_transactions:
            return True
        return self._ledger is not None and self._ledger.contains(transaction_uuid)

    def _remember(self, transaction_uuid: str) -> None:
        self._applied_transactions.add(transaction_uuid)
        if self._ledger is None:
            return
        try:
            self._ledger.record(transaction_uuid)
        except OSError:
            log.exception("Could not record applied transaction %s", transaction_uuid)

    @staticmethod
    def _duplicate(outcome: PaymentOutcome, callback: PaymentCallback) -> CallbackResult:
        return CallbackResult(
            kind=CallbackResultKind.DUPLICATE,
            message=DUPLICATE_MESSAGE,
            outcome=outcome,
            callback=callback,
        )

    # --- Unsigned fallback ----------------------------------------------------

    def _apply_unsigned(self, status_flag: str) -> CallbackResult:
        if not self._allow_unsigned:
            log.warning("Rejecting unsigned payment callback (status=%s)", status_flag)
            return CallbackResult(
                kind=CallbackResultKind.VERIFICATION_FAILED,
                message=UNSIGNED_REJECTED_MESSAGE,
                trusted=False,
            )

        if not self._latch.try_acquire():
            log.info("Ignoring unsigned payment callback while the latch is held")
            return CallbackResult(kind=CallbackResultKind.DUPLICATE, message=DUPLICATE_MESSAGE)

        if status_flag == "success":
            log.warning("Accepting UNSIGNED payment success; this result is not verified")
            self._cart_store.clear()
            return CallbackResult(
                kind=CallbackResultKind.UNSIGNED_SUCCESS,
                message=UNSIGNED_SUCCESS_MESSAGE,
                cart_cleared=True,
                trusted=False,
            )

        return CallbackResult(
            kind=CallbackResultKind.UNSIGNED_FAILURE,
            message=UNSIGNED_FAILURE_MESSAGE,
            trusted=False,
        )

    # --- Cleanup --------------------------------------------------------------

    def _finish(self, url: str, result: CallbackResult) -> CallbackResult:
        clean_url = strip_callback_params(url)
        self._navigator.replace_url(clean_url)
        return replace(result, clean_url=clean_url)
