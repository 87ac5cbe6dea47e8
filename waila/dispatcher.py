"""
Format dispatcher: the entry point that turns a string into a PaymentRecord.

Precedence (most specific grammar first):
    bip21 > [scheme prefixes] > node pubkey > on-chain address > bolt11 >
    bolt12 offer > bolt12 refund > lnurl > lightning address >
    nostr key > rgb > fedimint invite > cashu token > nostr wallet auth

Scheme prefixes (`lightning:`, `lnurl:`, `lnurlp:`, `nostr:`, `fedimint:`)
are matched case-insensitively and restrict the candidates to the
families the scheme can carry.

The first decoder to accept wins. If none does, the first family whose
coarse shape matched is reported as MalformedFormat; otherwise the input
is NoMatchingFormat. Input is never trimmed or otherwise rewritten.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Sequence

from .config import DEFAULT_CAPABILITIES, Capabilities
from .decoders import address, bip21, bolt11, bolt12, ecash, lnurl, node, nostr, rgb
from .errors import DecodeError, FormatError, MalformedFormat, NoMatchingFormat
from .models import FormatFamily
from .record import SLOT_FOR, PaymentRecord
from .resolver import resolve, with_network

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FormatDecoder:
    family: FormatFamily
    looks_like: Callable[[str], bool]
    parse: Callable[[str], Any]


DECODERS: dict[FormatFamily, FormatDecoder] = {
    d.family: d
    for d in (
        FormatDecoder(FormatFamily.BIP21, bip21.looks_like, bip21.parse),
        FormatDecoder(FormatFamily.NODE_PUBKEY, node.looks_like, node.parse),
        FormatDecoder(FormatFamily.ONCHAIN, address.looks_like, address.parse),
        FormatDecoder(FormatFamily.BOLT11, bolt11.looks_like, bolt11.parse),
        FormatDecoder(FormatFamily.BOLT12_OFFER, bolt12.looks_like_offer, bolt12.parse_offer),
        FormatDecoder(FormatFamily.BOLT12_REFUND, bolt12.looks_like_refund, bolt12.parse_refund),
        FormatDecoder(FormatFamily.LNURL, lnurl.looks_like_lnurl, lnurl.parse_lnurl),
        FormatDecoder(FormatFamily.LIGHTNING_ADDRESS, lnurl.looks_like_lightning_address, lnurl.parse_lightning_address),
        FormatDecoder(FormatFamily.NOSTR_PUBKEY, nostr.looks_like, nostr.parse),
        FormatDecoder(FormatFamily.RGB, rgb.looks_like, rgb.parse),
        FormatDecoder(FormatFamily.FEDIMINT_INVITE, ecash.looks_like_fedimint, ecash.parse_fedimint),
        FormatDecoder(FormatFamily.CASHU_TOKEN, ecash.looks_like_cashu, ecash.parse_cashu),
        FormatDecoder(FormatFamily.WALLET_AUTH, nostr.looks_like_wallet_auth, nostr.parse_wallet_auth),
    )
}

PRECEDENCE: tuple[FormatFamily, ...] = (
    FormatFamily.BIP21,
    FormatFamily.NODE_PUBKEY,
    FormatFamily.ONCHAIN,
    FormatFamily.BOLT11,
    FormatFamily.BOLT12_OFFER,
    FormatFamily.BOLT12_REFUND,
    FormatFamily.LNURL,
    FormatFamily.LIGHTNING_ADDRESS,
    FormatFamily.NOSTR_PUBKEY,
    FormatFamily.RGB,
    FormatFamily.FEDIMINT_INVITE,
    FormatFamily.CASHU_TOKEN,
    FormatFamily.WALLET_AUTH,
)

# Embedded container values never nest another container.
EMBEDDED_PRECEDENCE: tuple[FormatFamily, ...] = tuple(f for f in PRECEDENCE if f is not FormatFamily.BIP21)

SCHEME_PREFIXES: tuple[tuple[str, tuple[FormatFamily, ...]], ...] = (
    (
        "lightning:",
        (
            FormatFamily.BOLT11,
            FormatFamily.LNURL,
            FormatFamily.LIGHTNING_ADDRESS,
            FormatFamily.BOLT12_OFFER,
            FormatFamily.BOLT12_REFUND,
        ),
    ),
    ("lnurl:", (FormatFamily.LNURL, FormatFamily.LIGHTNING_ADDRESS)),
    ("lnurlp:", (FormatFamily.LNURL, FormatFamily.LIGHTNING_ADDRESS)),
    ("nostr:", (FormatFamily.NOSTR_PUBKEY,)),
    ("fedimint:", (FormatFamily.FEDIMINT_INVITE,)),
)

if set(DECODERS) != set(FormatFamily) or set(PRECEDENCE) != set(FormatFamily):
    raise RuntimeError("dispatcher must cover every FormatFamily exactly")


def _split_scheme(text: str) -> tuple[str, tuple[FormatFamily, ...]] | None:
    lower = text.lower()
    for prefix, families in SCHEME_PREFIXES:
        if lower.startswith(prefix):
            body = text[len(prefix) :]
            if body.startswith("//"):
                # LUD-17 URL such as lnurlp://host/path: the scheme is part of it
                return text, (FormatFamily.LNURL,)
            return body, families
    return None


def first_accepting(
    text: str,
    families: Sequence[FormatFamily],
    capabilities: Capabilities,
) -> tuple[FormatFamily, Any]:
    """
    Run the decoders for `families` in order and return the first success.

    Raises MalformedFormat or NoMatchingFormat when nothing accepts.
    """
    malformed: FormatError | None = None
    for family in families:
        if not capabilities.allows(family):
            continue
        decoder = DECODERS[family]
        try:
            sub = decoder.parse(text)
        except FormatError as exc:
            if malformed is None and decoder.looks_like(text):
                malformed = exc
            continue
        logger.debug("input accepted as %s", family.value)
        return family, sub

    if malformed is not None:
        raise MalformedFormat(malformed.family, malformed.reason)
    raise NoMatchingFormat()


def decode(text: str, *, capabilities: Capabilities | None = None) -> PaymentRecord:
    """
    Classify and decode a payment string.

    Raises DecodeError (NoMatchingFormat, MalformedFormat or
    InconsistentNetwork). Never returns a partial record.
    """
    if not isinstance(text, str):
        raise TypeError("input must be a string")
    caps = capabilities if capabilities is not None else DEFAULT_CAPABILITIES

    scheme = _split_scheme(text)
    if scheme is not None:
        body, families = scheme
        try:
            family, sub = first_accepting(body, families, caps)
        except NoMatchingFormat:
            # the scheme prefix itself is the shape that matched
            raise MalformedFormat(families[0].value, "unrecognized payload after scheme prefix") from None
    else:
        family, sub = first_accepting(text, PRECEDENCE, caps)

    if family is FormatFamily.BIP21:
        return resolve(sub, lambda value: first_accepting(value, EMBEDDED_PRECEDENCE, caps))
    return with_network(PaymentRecord(family=family, **{SLOT_FOR[family]: sub}))


def try_decode(text: str, *, capabilities: Capabilities | None = None) -> PaymentRecord | None:
    """decode(), returning None instead of raising DecodeError."""
    try:
        return decode(text, capabilities=capabilities)
    except DecodeError as exc:
        logger.debug("decode failed: %s", exc)
        return None
