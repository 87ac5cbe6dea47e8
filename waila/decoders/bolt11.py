"""
BOLT11 Lightning invoice decoder.

Grammar, tagged fields and signature checks come from the `bolt11` package;
this module maps its result onto Bolt11Invoice.

Rules enforced on top of the library:
- hrp is `ln` + currency (bc, tb, tbs, bcrt, sb) + optional amount; the
  currency picks the network and the compatible set.
- the string is all lowercase or all uppercase.
- payment hash and payment secret are required; exactly one of
  description / description hash.
- the payee is known, either from the `n` field or recovered from the
  signature.
"""

from __future__ import annotations

import re

import bolt11 as bolt11_lib

from ..errors import FormatError
from ..models import Bolt11Invoice, FormatFamily, OnchainAddress, RouteHop
from ..networks import BOLT11_COMPATIBLE, BOLT11_CURRENCIES
from . import address

FAMILY = FormatFamily.BOLT11

_HRP = re.compile(r"(bcrt|tbs|bc|tb|sb)(?:[1-9][0-9]*[munp]?)?", re.ASCII)


def looks_like(text: str) -> bool:
    lowered = text.lower()
    if not lowered.startswith("ln"):
        return False
    return _HRP.fullmatch(lowered.rsplit("1", 1)[0][2:]) is not None


def _fail(message: str) -> FormatError:
    return FormatError(FAMILY.value, message)


def _fallbacks(decoded) -> tuple[OnchainAddress, ...]:
    fallback = decoded.fallback
    if fallback is None:
        return ()
    try:
        return (address.parse(fallback.address),)
    except FormatError:
        return ()


def _route_hints(decoded) -> tuple[tuple[RouteHop, ...], ...]:
    return tuple(
        tuple(
            RouteHop(
                pubkey=route.public_key,
                short_channel_id=route.short_channel_id,
                fee_base_msat=int(route.base_fee),
                fee_proportional_millionths=route.ppm_fee,
                cltv_expiry_delta=route.cltv_expiry_delta,
            )
            for route in hint.routes
        )
        for hint in decoded.route_hints or ()
    )


def _fields(decoded) -> dict:
    amount = decoded.amount_msat
    expiry = decoded.expiry
    min_final_cltv = decoded.min_final_cltv_expiry
    return {
        "timestamp": decoded.date,
        "amount_msats": int(amount) if amount is not None else None,
        "payment_hash": decoded.payment_hash,
        "payment_secret": decoded.payment_secret,
        "description": decoded.description,
        "description_hash": decoded.description_hash,
        "payee": decoded.payee,
        "expiry": expiry if expiry is not None else 3600,
        "min_final_cltv_expiry": min_final_cltv if min_final_cltv is not None else 18,
        "fallback_addresses": _fallbacks(decoded),
        "route_hints": _route_hints(decoded),
    }


def parse(text: str) -> Bolt11Invoice:
    if not isinstance(text, str) or not text:
        raise _fail("invoice must be a non-empty string")
    if text != text.lower() and text != text.upper():
        raise _fail("mixed-case invoice")

    encoded = text.lower()
    if "1" not in encoded or not encoded.startswith("ln"):
        raise _fail("missing invoice prefix")
    m = _HRP.fullmatch(encoded.rsplit("1", 1)[0][2:])
    if m is None:
        raise _fail(f"unrecognized invoice prefix {encoded.rsplit('1', 1)[0]!r}")
    currency = m.group(1)

    # bolt11 raises its own exception types as well as ValueError and bitstring errors
    try:
        fields = _fields(bolt11_lib.decode(encoded))
    except Exception as exc:
        raise _fail(f"invalid invoice: {exc}") from None

    if not fields["payment_hash"]:
        raise _fail("missing payment hash")
    if not fields["payment_secret"]:
        raise _fail("missing payment secret")
    if (fields["description"] is None) == (fields["description_hash"] is None):
        raise _fail("invoice must carry exactly one description or description hash")
    if not fields["payee"]:
        raise _fail("could not recover payee from signature")

    return Bolt11Invoice(
        encoded=encoded,
        currency=currency,
        network=BOLT11_CURRENCIES[currency],
        compatible=BOLT11_COMPATIBLE[currency],
        **fields,
    )
