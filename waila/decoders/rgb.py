"""
RGB asset-transfer invoice decoder.

Shape:
    rgb:<contract>/<interface>[/<operation>[/<assignment>]]/[<amount>+]<beneficiary>[?<params>]

- `~` stands for "any" in the contract and interface positions.
- a contract id is base58 and decodes to 32 bytes.
- amount is a decimal count of asset units.
- known params: `expiry` (unix seconds), `endpoints` (comma separated),
  `network` / `chain` (network name). Others are kept as extras.
"""

from __future__ import annotations

import re
from urllib.parse import parse_qsl

import base58

from ..errors import FormatError
from ..models import FormatFamily, RgbInvoice
from ..networks import Network, parse_network

FAMILY = FormatFamily.RGB

_RGB_PREFIX = "rgb:"
_ANY = "~"

_IDENT = re.compile(r"[A-Za-z][A-Za-z0-9_]*")
_BENEFICIARY = re.compile(r"[A-Za-z0-9:_\-]+")
_DIGITS = re.compile(r"[0-9]+")


def looks_like(text: str) -> bool:
    return text[: len(_RGB_PREFIX)].lower() == _RGB_PREFIX


def _fail(message: str) -> FormatError:
    return FormatError(FAMILY.value, message)


def _contract(segment: str) -> str | None:
    if segment == _ANY:
        return None
    if segment != segment.strip():
        raise _fail("contract id must not carry whitespace")
    try:
        raw = base58.b58decode(segment)
    except ValueError:
        raise _fail("contract id is not base58") from None
    if len(raw) != 32:
        raise _fail("contract id must decode to 32 bytes")
    return segment


def _ident(segment: str, what: str) -> str | None:
    if segment == _ANY:
        return None
    if not _IDENT.fullmatch(segment):
        raise _fail(f"invalid {what} {segment!r}")
    return segment


def parse(text: str) -> RgbInvoice:
    if not isinstance(text, str) or not looks_like(text):
        raise _fail("missing 'rgb:' scheme")

    path, _, query = text[len(_RGB_PREFIX) :].partition("?")
    segments = path.split("/")
    if not 3 <= len(segments) <= 5:
        raise _fail("expected contract/interface/.../beneficiary")

    contract_id = _contract(segments[0])
    interface = _ident(segments[1], "interface")
    extras: list[tuple[str, str]] = []
    operation = None
    if len(segments) >= 4:
        operation = _ident(segments[2], "operation")
    if len(segments) == 5:
        extras.append(("assignment", _ident(segments[3], "assignment") or _ANY))

    amount = None
    beneficiary = segments[-1]
    if "+" in beneficiary:
        amount_text, _, beneficiary = beneficiary.partition("+")
        if not _DIGITS.fullmatch(amount_text):
            raise _fail(f"invalid amount {amount_text!r}")
        amount = int(amount_text)
    if not _BENEFICIARY.fullmatch(beneficiary):
        raise _fail("invalid beneficiary")

    chain: Network | None = None
    expiry = None
    endpoints: tuple[str, ...] = ()
    for k, v in parse_qsl(query, keep_blank_values=True):
        if k in ("network", "chain"):
            try:
                chain = parse_network(v)
            except ValueError as exc:
                raise _fail(str(exc)) from None
        elif k == "expiry":
            if not _DIGITS.fullmatch(v):
                raise _fail("expiry must be a unix timestamp")
            expiry = int(v)
        elif k == "endpoints":
            endpoints = tuple(e for e in v.split(",") if e)
        else:
            extras.append((k, v))

    return RgbInvoice(
        encoded=text,
        contract_id=contract_id,
        interface=interface,
        beneficiary=beneficiary,
        operation=operation,
        amount=amount,
        chain=chain,
        expiry=expiry,
        endpoints=endpoints,
        extras=tuple(extras),
    )
