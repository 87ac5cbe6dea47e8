"""
Composite resolver for BIP21 containers.

The container's embedded parameters are decoded with the same dispatcher
(minus the container family, so recursion stops after one level) and
merged into the record:

    lightning -> invoice or offer
    lno / b12 -> offer

A value that fails to decode, or decodes to something other than what its
parameter may carry, is dropped and logged at debug level. The URI itself
still decodes. Network inference runs last over the container address and
every merged sub-record.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Callable, Iterator

from .errors import DecodeError, EmbeddedDecodeIgnored
from .inference import infer_network
from .models import FormatFamily, PaymentUri
from .record import SLOT_FOR, PaymentRecord

logger = logging.getLogger(__name__)

Dispatch = Callable[[str], tuple[FormatFamily, Any]]

EMBEDDED_FAMILIES: dict[str, tuple[FormatFamily, ...]] = {
    "lightning": (FormatFamily.BOLT11, FormatFamily.BOLT12_OFFER),
    "b12": (FormatFamily.BOLT12_OFFER,),
}


def _embedded_values(uri: PaymentUri) -> Iterator[tuple[str, str]]:
    if uri.lightning is not None:
        yield "lightning", uri.lightning
    if uri.offer_param is not None:
        yield "b12", uri.offer_param


def decode_embedded(param: str, value: str, dispatch: Dispatch) -> tuple[FormatFamily, Any]:
    """Decode one embedded value, or raise EmbeddedDecodeIgnored."""
    try:
        family, sub = dispatch(value)
    except DecodeError as exc:
        raise EmbeddedDecodeIgnored(FormatFamily.BIP21.value, f"{param}: {exc}") from None
    if family not in EMBEDDED_FAMILIES[param]:
        raise EmbeddedDecodeIgnored(FormatFamily.BIP21.value, f"{param}: unexpected {family.value}")
    return family, sub


def with_network(record: PaymentRecord) -> PaymentRecord:
    return replace(record, network=infer_network(record.network_contributions()))


def resolve(uri: PaymentUri, dispatch: Dispatch) -> PaymentRecord:
    slots: dict[str, Any] = {"uri": uri}
    for param, value in _embedded_values(uri):
        try:
            family, sub = decode_embedded(param, value, dispatch)
        except EmbeddedDecodeIgnored as exc:
            logger.debug("ignoring embedded parameter: %s", exc.reason)
            continue
        # lightning= is read first; a later offer does not replace it
        slots.setdefault(SLOT_FOR[family], sub)
    return with_network(PaymentRecord(family=FormatFamily.BIP21, **slots))
