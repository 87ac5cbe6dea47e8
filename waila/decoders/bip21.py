"""
BIP21 `bitcoin:` URI decoder (the container format).

Rules:
- scheme matched case-insensitively; an on-chain address is required.
- keys are matched case-insensitively, keys and values are percent-decoded.
- `amount` is decimal BTC with at most 8 fractional digits.
- known parameters may appear once; unknown `req-` parameters are rejected.
- `pj` must be https (http only for .onion hosts); `pjos` is 0/1 and
  requires `pj`.
- `lightning`, `lno` and `b12` are kept as raw strings. Whether they decode
  is the composite resolver's business, not this module's.
"""

from __future__ import annotations

import re
from decimal import Decimal
from urllib.parse import unquote, urlsplit

from ..errors import FormatError
from ..models import FormatFamily, PaymentUri
from . import address as address_decoder

FAMILY = FormatFamily.BIP21

_BITCOIN_PREFIX = "bitcoin:"

_AMOUNT = re.compile(r"(?:[0-9]+(?:\.[0-9]{0,8})?|\.[0-9]{1,8})")
_MAX_BTC = Decimal(21_000_000)

_KNOWN = frozenset({"amount", "label", "message", "lightning", "lno", "b12", "pj", "pjos"})


def looks_like(text: str) -> bool:
    return text[: len(_BITCOIN_PREFIX)].lower() == _BITCOIN_PREFIX


def _fail(message: str) -> FormatError:
    return FormatError(FAMILY.value, message)


def _percent_decode(value: str) -> str:
    try:
        return unquote(value, errors="strict")
    except UnicodeDecodeError:
        raise _fail("parameter is not valid UTF-8 once percent-decoded") from None


def _query_pairs(query: str) -> list[tuple[str, str]]:
    pairs = []
    for pair in query.split("&"):
        if not pair:
            continue
        k, _, v = pair.partition("=")
        pairs.append((_percent_decode(k), _percent_decode(v)))
    return pairs


def _parse_amount(value: str) -> Decimal:
    if not _AMOUNT.fullmatch(value):
        raise _fail(f"invalid amount {value!r}")
    amount = Decimal(value)
    if amount > _MAX_BTC:
        raise _fail("amount exceeds the 21 million BTC supply")
    return amount


def _check_payjoin_endpoint(value: str) -> str:
    try:
        parts = urlsplit(value)
    except ValueError:
        raise _fail("payjoin endpoint is not a URL") from None
    host = (parts.hostname or "").lower()
    if not host:
        raise _fail("payjoin endpoint is not a URL")
    if parts.scheme == "https" or (parts.scheme == "http" and host.endswith(".onion")):
        return value
    raise _fail("payjoin endpoint must be https (or http on .onion)")


def parse(text: str) -> PaymentUri:
    if not isinstance(text, str) or not looks_like(text):
        raise _fail("missing 'bitcoin:' scheme")

    rest = text[len(_BITCOIN_PREFIX) :]
    addr_part, _, query = rest.partition("?")
    if not addr_part:
        raise _fail("URI has no address")
    try:
        addr = address_decoder.parse(_percent_decode(addr_part))
    except FormatError as exc:
        raise _fail(f"invalid address: {exc.reason}") from None

    seen = set()
    amount: Decimal | None = None
    label = message = lightning = offer_param = pj = None
    pjos: bool | None = None
    extras: list[tuple[str, str]] = []

    for raw_key, value in _query_pairs(query):
        key = raw_key.lower()
        if key in _KNOWN:
            # lno and b12 name the same slot
            slot = "b12" if key == "lno" else key
            if slot in seen:
                raise _fail(f"duplicate parameter {key!r}")
            seen.add(slot)

        if key == "amount":
            amount = _parse_amount(value)
        elif key == "label":
            label = value
        elif key == "message":
            message = value
        elif key == "lightning":
            lightning = value
        elif key in ("lno", "b12"):
            offer_param = value
        elif key == "pj":
            pj = _check_payjoin_endpoint(value)
        elif key == "pjos":
            if value not in ("0", "1"):
                raise _fail("pjos must be 0 or 1")
            pjos = value == "1"
        elif key.startswith("req-"):
            raise _fail(f"unsupported required parameter {raw_key!r}")
        else:
            extras.append((raw_key, value))

    if pjos is not None and pj is None:
        raise _fail("pjos given without a pj endpoint")

    return PaymentUri(
        encoded=text,
        address=addr,
        amount_btc=amount,
        label=label,
        message=message,
        lightning=lightning,
        offer_param=offer_param,
        payjoin_endpoint=pj,
        payjoin_output_substitution=pjos,
        extras=tuple(extras),
    )
