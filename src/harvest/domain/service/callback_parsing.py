"""Domain service: reading the gateway's return URL.

The gateway appends its base64 JSON response to the success/failure URL,
but not always well-formed. Observed shapes include::

    /payment/success?data=eyJ0cmFuc2...
    /payment/success?response=eyJ0cmFuc2...
    /payment/success?status=success?data=eyJ0cmFuc2...      (second '?')
    /payment/success?status=success%3Fdata%3DeyJ0cmFuc2...%3D%3D

so extraction falls back through three layers before giving up.
"""

from __future__ import annotations

import base64
import binascii
import json
import re
from urllib.parse import parse_qsl, unquote, urlencode, urlsplit, urlunsplit

from harvest.domain.exceptions import InvalidCallbackError
from harvest.domain.model.payment import PaymentCallback

CALLBACK_PARAM_KEYS = ("data", "response", "encodedResponse", "payload")
STATUS_PARAM = "status"

_EMBEDDED_TOKEN = re.compile(r"(?:^|[^A-Za-z0-9_])data=([^&#?\s]+)")
_RAW_TOKEN = re.compile(r"(?:^|[^A-Za-z0-9_])data=([A-Za-z0-9+/_\-]+(?:=|%3[dD]){0,2})")
_ENCODED_PADDING = re.compile(r"%3[dD]")
_TRAILING_DELIMITERS = "&#?"


def extract_encoded_response(url: str) -> str | None:
    """Find the encoded gateway response in *url*, or None."""
    parts = urlsplit(url)
    params = parse_qsl(parts.query, keep_blank_values=True)

    # 1. Well-formed: one of the expected parameter names.
    by_key = dict(params)
    for key in CALLBACK_PARAM_KEYS:
        token = _clean_token(by_key.get(key, ""))
        if token:
            return token

    # 2. Embedded in another parameter's value (status=success?data=...).
    for _, value in params:
        match = _EMBEDDED_TOKEN.search(value.replace(" ", "+"))
        if match:
            token = _clean_token(match.group(1))
            if token:
                return token

    # 3. Anywhere in the percent-decoded URL.
    match = _RAW_TOKEN.search(unquote(url))
    if match:
        return _clean_token(match.group(1))
    return None


def extract_status_flag(url: str) -> str | None:
    """Return ``"success"`` or ``"failure"`` for a bare ``?status=`` return."""
    for key, value in parse_qsl(urlsplit(url).query, keep_blank_values=True):
        if key != STATUS_PARAM:
            continue
        flag = value.split("?", 1)[0].strip().lower()
        if flag in ("success", "failure"):
            return flag
    return None


def strip_callback_params(url: str) -> str:
    """Drop every payment-callback parameter from *url*, keeping the rest."""
    parts = urlsplit(url)
    kept = [
        (key, value)
        for key, value in parse_qsl(parts.query, keep_blank_values=True)
        if key not in CALLBACK_PARAM_KEYS
        and key != STATUS_PARAM
        and not _EMBEDDED_TOKEN.search(value)
        and not _RAW_TOKEN.search(unquote(f"{key}={value}"))
    ]
    fragment = "" if "data=" in parts.fragment else parts.fragment
    return urlunsplit(parts._replace(query=urlencode(kept), fragment=fragment))


def decode_callback(token: str) -> PaymentCallback:
    """Decode a (possibly URL-safe, possibly unpadded) base64 JSON response.

    Numbers are kept as the literal text the gateway sent so signature
    reconstruction sees exactly the signed bytes.

    Raises InvalidCallbackError on any decoding or shape failure.
    """
    normalized = (
        token.strip().replace(" ", "+").replace("-", "+").replace("_", "/").rstrip("=")
    )
    normalized += "=" * (-len(normalized) % 4)
    try:
        decoded = base64.b64decode(normalized, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidCallbackError("Payment response is not valid base64") from exc

    try:
        raw = json.loads(decoded.decode("utf-8"), parse_float=str, parse_int=str)
    except (UnicodeDecodeError, ValueError) as exc:
        raise InvalidCallbackError("Payment response is not valid JSON") from exc

    return PaymentCallback.from_mapping(raw)


def _clean_token(token: str) -> str | None:
    # parse_qsl turns an unencoded '+' into a space.
    token = token.strip().replace(" ", "+")
    token = _ENCODED_PADDING.sub("=", token)
    token = token.rstrip(_TRAILING_DELIMITERS)
    return token or None
