"""
BOLT12 offer (`lno`) and refund (`lnr`) decoder.

Both are checksum-less bech32 strings wrapping a TLV stream.

Rules:
- TLV types strictly increasing; BigSize and tu64 minimally encoded.
- unknown even types are rejected, unknown odd types ignored.
- offers: only offer-range types; amount requires a description, currency
  requires an amount; at least one of issuer_id / paths.
- refunds: payer metadata, amount and payer_id are required; offer fields
  other than description, expiry, paths and issuer are rejected.
"""

from __future__ import annotations

from typing import Callable, Iterator

from ..errors import FormatError
from ..models import BlindedPath, FormatFamily, Offer, Refund
from ..networks import Network, network_for_chain_hash
from . import _bech32
from .node import validate_point

OFFER_HRP = "lno"
REFUND_HRP = "lnr"

# offer TLVs
_OFFER_CHAINS = 2
_OFFER_METADATA = 4
_OFFER_CURRENCY = 6
_OFFER_AMOUNT = 8
_OFFER_DESCRIPTION = 10
_OFFER_FEATURES = 12
_OFFER_ABSOLUTE_EXPIRY = 14
_OFFER_PATHS = 16
_OFFER_ISSUER = 18
_OFFER_QUANTITY_MAX = 20
_OFFER_ISSUER_ID = 22

# invoice_request TLVs used by refunds
_INVREQ_METADATA = 0
_INVREQ_CHAIN = 80
_INVREQ_AMOUNT = 82
_INVREQ_FEATURES = 84
_INVREQ_QUANTITY = 86
_INVREQ_PAYER_ID = 88
_INVREQ_PAYER_NOTE = 89
_INVREQ_PATHS = 90

_OFFER_TYPES = frozenset(range(2, 23, 2))
_REFUND_OFFER_FIELDS = frozenset({_OFFER_DESCRIPTION, _OFFER_ABSOLUTE_EXPIRY, _OFFER_PATHS, _OFFER_ISSUER})
_REFUND_INVREQ_FIELDS = frozenset(
    {_INVREQ_METADATA, _INVREQ_CHAIN, _INVREQ_AMOUNT, _INVREQ_FEATURES, _INVREQ_QUANTITY, _INVREQ_PAYER_ID, _INVREQ_PAYER_NOTE, _INVREQ_PATHS}
)


def _in_offer_range(t: int) -> bool:
    return 1 <= t <= 79 or 1_000_000_000 <= t <= 1_999_999_999


def _in_refund_range(t: int) -> bool:
    return 0 <= t <= 159 or 1_000_000_000 <= t <= 2_999_999_999


# ---------------------------------------------------------------------------
# Primitive readers
# ---------------------------------------------------------------------------


class _Reader:
    def __init__(self, data: bytes, fail: Callable[[str], FormatError]) -> None:
        self.data = data
        self.pos = 0
        self.fail = fail

    def remaining(self) -> int:
        return len(self.data) - self.pos

    def take(self, n: int) -> bytes:
        if n < 0 or self.pos + n > len(self.data):
            raise self.fail("truncated TLV stream")
        out = self.data[self.pos : self.pos + n]
        self.pos += n
        return out

    def bigsize(self) -> int:
        first = self.take(1)[0]
        if first < 0xFD:
            return first
        width, minimum = {0xFD: (2, 0xFD), 0xFE: (4, 0x10000), 0xFF: (8, 0x100000000)}[first]
        value = int.from_bytes(self.take(width), "big")
        if value < minimum:
            raise self.fail("non-minimal BigSize encoding")
        return value


def _records(data: bytes, fail: Callable[[str], FormatError]) -> Iterator[tuple[int, bytes]]:
    r = _Reader(data, fail)
    last: int | None = None
    while r.remaining():
        t = r.bigsize()
        if last is not None and t <= last:
            raise fail("TLV types must be strictly increasing")
        last = t
        length = r.bigsize()
        yield t, r.take(length)


def _tu64(value: bytes, fail: Callable[[str], FormatError]) -> int:
    if len(value) > 8:
        raise fail("tu64 longer than 8 bytes")
    if value and value[0] == 0:
        raise fail("tu64 not minimally encoded")
    return int.from_bytes(value, "big")


def _utf8(value: bytes, fail: Callable[[str], FormatError]) -> str:
    try:
        return value.decode("utf-8")
    except UnicodeDecodeError:
        raise fail("field is not valid UTF-8") from None


def _point(value: bytes, fail: Callable[[str], FormatError]) -> str:
    if len(value) != 33:
        raise fail("public key must be 33 bytes")
    try:
        return validate_point(value)
    except ValueError:
        raise fail("invalid public key") from None


def _chain(value: bytes, fail: Callable[[str], FormatError]) -> Network:
    net = network_for_chain_hash(value)
    if net is None:
        raise fail("unknown chain hash")
    return net


def _paths(value: bytes, fail: Callable[[str], FormatError]) -> tuple[BlindedPath, ...]:
    r = _Reader(value, fail)
    out: list[BlindedPath] = []
    while r.remaining():
        lead = r.take(1)
        if lead[0] in (0, 1):
            intro = (lead + r.take(8)).hex()  # short channel id + direction
        elif lead[0] in (2, 3):
            intro = _point(lead + r.take(32), fail)
        else:
            raise fail("invalid blinded path introduction node")
        path_key = _point(r.take(33), fail)
        num_hops = r.take(1)[0]
        if num_hops == 0:
            raise fail("blinded path without hops")
        for _ in range(num_hops):
            r.take(33)  # blinded node id
            enclen = int.from_bytes(r.take(2), "big")
            r.take(enclen)
        out.append(BlindedPath(introduction_node=intro, path_key=path_key, num_hops=num_hops))
    if not out:
        raise fail("empty blinded path list")
    return tuple(out)


def _tlv_bytes(text: str, hrp: str, fail: Callable[[str], FormatError]) -> bytes:
    if not isinstance(text, str) or not text:
        raise fail("must be a non-empty string")
    try:
        got_hrp, values = _bech32.decode_unchecked(text)
        data = _bech32.values_to_bytes(values)
    except ValueError as exc:
        raise fail(str(exc)) from None
    if got_hrp != hrp:
        raise fail(f"expected hrp {hrp!r}, got {got_hrp!r}")
    if not data:
        raise fail("empty TLV stream")
    return data


def _canonical(text: str) -> str:
    if "+" in text:
        chunks = text.split("+")
        text = chunks[0] + "".join(chunk.lstrip() for chunk in chunks[1:])
    return text.lower()


# ---------------------------------------------------------------------------
# Offers
# ---------------------------------------------------------------------------


def looks_like_offer(text: str) -> bool:
    return text.lower().startswith(OFFER_HRP + "1")


def parse_offer(text: str) -> Offer:
    def fail(message: str) -> FormatError:
        return FormatError(FormatFamily.BOLT12_OFFER.value, message)

    data = _tlv_bytes(text, OFFER_HRP, fail)
    fields: dict[str, object] = {}

    for t, value in _records(data, fail):
        if not _in_offer_range(t):
            raise fail(f"TLV type {t} not allowed in an offer")
        if t == _OFFER_CHAINS:
            if not value or len(value) % 32:
                raise fail("offer_chains must be a non-empty list of 32-byte hashes")
            fields["chains"] = tuple(_chain(value[i : i + 32], fail) for i in range(0, len(value), 32))
        elif t == _OFFER_METADATA:
            fields["metadata"] = value
        elif t == _OFFER_CURRENCY:
            if len(value) != 3:
                raise fail("offer_currency must be 3 bytes")
            fields["currency"] = _utf8(value, fail)
        elif t == _OFFER_AMOUNT:
            fields["amount"] = _tu64(value, fail)
        elif t == _OFFER_DESCRIPTION:
            fields["description"] = _utf8(value, fail)
        elif t == _OFFER_FEATURES:
            fields["features"] = int.from_bytes(value, "big")
        elif t == _OFFER_ABSOLUTE_EXPIRY:
            fields["absolute_expiry"] = _tu64(value, fail)
        elif t == _OFFER_PATHS:
            fields["paths"] = _paths(value, fail)
        elif t == _OFFER_ISSUER:
            fields["issuer"] = _utf8(value, fail)
        elif t == _OFFER_QUANTITY_MAX:
            fields["quantity_max"] = _tu64(value, fail)
        elif t == _OFFER_ISSUER_ID:
            fields["issuer_id"] = _point(value, fail)
        elif t % 2 == 0:
            raise fail(f"unknown even TLV type {t}")

    if "currency" in fields and "amount" not in fields:
        raise fail("offer_currency without offer_amount")
    if "amount" in fields and "description" not in fields:
        raise fail("offer_amount without offer_description")
    if "issuer_id" not in fields and "paths" not in fields:
        raise fail("offer needs an issuer_id or blinded paths")

    return Offer(encoded=_canonical(text), **fields)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Refunds
# ---------------------------------------------------------------------------


def looks_like_refund(text: str) -> bool:
    return text.lower().startswith(REFUND_HRP + "1")


def parse_refund(text: str) -> Refund:
    def fail(message: str) -> FormatError:
        return FormatError(FormatFamily.BOLT12_REFUND.value, message)

    data = _tlv_bytes(text, REFUND_HRP, fail)
    fields: dict[str, object] = {}

    for t, value in _records(data, fail):
        if not _in_refund_range(t):
            raise fail(f"TLV type {t} not allowed in a refund")
        if t in _OFFER_TYPES and t not in _REFUND_OFFER_FIELDS:
            raise fail(f"refund must not set offer field {t}")
        if t == _INVREQ_METADATA:
            fields["metadata"] = value
        elif t == _OFFER_DESCRIPTION:
            fields["description"] = _utf8(value, fail)
        elif t == _OFFER_ABSOLUTE_EXPIRY:
            fields["absolute_expiry"] = _tu64(value, fail)
        elif t == _OFFER_PATHS:
            fields["paths"] = _paths(value, fail)
        elif t == _OFFER_ISSUER:
            fields["issuer"] = _utf8(value, fail)
        elif t == _INVREQ_CHAIN:
            if len(value) != 32:
                raise fail("invreq_chain must be 32 bytes")
            fields["chain"] = _chain(value, fail)
        elif t == _INVREQ_AMOUNT:
            fields["amount_msats"] = _tu64(value, fail)
        elif t == _INVREQ_FEATURES:
            fields["features"] = int.from_bytes(value, "big")
        elif t == _INVREQ_QUANTITY:
            fields["quantity"] = _tu64(value, fail)
        elif t == _INVREQ_PAYER_ID:
            fields["payer_id"] = _point(value, fail)
        elif t == _INVREQ_PAYER_NOTE:
            fields["payer_note"] = _utf8(value, fail)
        elif t in _REFUND_INVREQ_FIELDS:
            pass  # invreq_paths: accepted, not exposed
        elif t % 2 == 0:
            raise fail(f"unknown even TLV type {t}")

    for required in ("metadata", "amount_msats", "payer_id"):
        if required not in fields:
            raise fail(f"refund missing {required}")

    return Refund(encoded=_canonical(text), **fields)  # type: ignore[arg-type]
