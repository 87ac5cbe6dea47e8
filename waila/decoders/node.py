"""
Raw Lightning node public key: 66 hex characters encoding a compressed
secp256k1 point that is actually on the curve.
"""

from __future__ import annotations

import re

from coincurve import PublicKey

from ..errors import FormatError
from ..models import FormatFamily, NodePubkey

FAMILY = FormatFamily.NODE_PUBKEY

_HEX66 = re.compile(r"0[23][0-9a-fA-F]{64}")


def looks_like(text: str) -> bool:
    return bool(_HEX66.fullmatch(text))


def validate_point(raw: bytes) -> str:
    """Return the canonical compressed hex of a serialized point, or raise ValueError."""
    return PublicKey(raw).format(compressed=True).hex()


def parse(text: str) -> NodePubkey:
    if not isinstance(text, str) or not looks_like(text):
        raise FormatError(FAMILY.value, "node public key must be 66 hex characters starting with 02/03")
    try:
        canonical = validate_point(bytes.fromhex(text))
    except ValueError:
        raise FormatError(FAMILY.value, "not a valid secp256k1 point") from None
    return NodePubkey(encoded=canonical)
