"""Domain service: gateway message signing.

The gateway authenticates both directions with HMAC-SHA256 over a
canonical message ``name1=value1,name2=value2,...`` whose field order is
given explicitly by ``signed_field_names``. The digest travels base64
encoded.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
from typing import Mapping, Sequence


def build_signed_message(fields: Mapping[str, object], field_names: Sequence[str]) -> str:
    """Join the named fields, in the given order, into the signed message.

    Raises KeyError if a named field is absent.
    """
    return ",".join(f"{name}={fields[name]}" for name in field_names)


def compute_signature(message: str, secret: str) -> str:
    digest = hmac.new(
        secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha256
    ).digest()
    return base64.b64encode(digest).decode("ascii")


def sign(
    fields: Mapping[str, object],
    secret: str,
    field_names: Sequence[str] | None = None,
) -> str:
    """Signature over *field_names* (defaults to every field, in mapping order)."""
    names = list(field_names) if field_names is not None else list(fields)
    return compute_signature(build_signed_message(fields, names), secret)


def verify(
    signature: str,
    fields: Mapping[str, object],
    secret: str,
    field_names: Sequence[str] | None = None,
) -> bool:
    """True only if *signature* matches the recomputed one.

    A named field missing from *fields* or an empty field list can never
    verify.
    """
    names = list(field_names) if field_names is not None else list(fields)
    if not names or not signature:
        return False
    try:
        expected = sign(fields, secret, names)
    except KeyError:
        return False
    return hmac.compare_digest(expected.encode("ascii"), signature.strip().encode("ascii", "replace"))
