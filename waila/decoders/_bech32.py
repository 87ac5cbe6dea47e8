"""
Bech32 helpers on top of the `bech32` package.

The packaged reference implementation caps strings at 90 characters and
predates bech32m (BIP350). BOLT12 strings, LNURLs and fedimint invites
are longer than that and taproot addresses need bech32m, so the splitting
and constant check live here while the alphabet, polymod and bit
conversion come from the package.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Sequence

import bech32

CHARSET: str = bech32.CHARSET

_BECH32_CONST = 1
_BECH32M_CONST = 0x2BC830A3


class Encoding(str, Enum):
    BECH32 = "bech32"
    BECH32M = "bech32m"


_CONST_FOR = {Encoding.BECH32: _BECH32_CONST, Encoding.BECH32M: _BECH32M_CONST}


def _polymod(hrp: str, values: Sequence[int]) -> int:
    return bech32.bech32_polymod(bech32.bech32_hrp_expand(hrp) + list(values))


def _normalize_case(text: str) -> str:
    if any(ord(c) < 33 or ord(c) > 126 for c in text):
        raise ValueError("bech32 string contains invalid characters")
    if text.lower() != text and text.upper() != text:
        raise ValueError("bech32 string has mixed case")
    return text.lower()


def _to_values(data_part: str) -> list[int]:
    values = []
    for c in data_part:
        v = CHARSET.find(c)
        if v < 0:
            raise ValueError(f"invalid bech32 character {c!r}")
        values.append(v)
    return values


def decode(text: str, *, max_length: int | None = None) -> tuple[str, list[int], Encoding]:
    """
    Decode a checksummed bech32/bech32m string of any length.

    Returns (hrp, data_values_without_checksum, encoding).
    Raises ValueError on any malformation.
    """
    if not isinstance(text, str):
        raise TypeError("bech32 input must be a string")
    s = _normalize_case(text)
    if max_length is not None and len(s) > max_length:
        raise ValueError("bech32 string too long")

    pos = s.rfind("1")
    if pos < 1 or pos + 7 > len(s):
        raise ValueError("bech32 separator missing or checksum too short")

    hrp = s[:pos]
    values = _to_values(s[pos + 1 :])

    const = _polymod(hrp, values)
    if const == _BECH32_CONST:
        enc = Encoding.BECH32
    elif const == _BECH32M_CONST:
        enc = Encoding.BECH32M
    else:
        raise ValueError("bech32 checksum mismatch")
    return hrp, values[:-6], enc


def decode_unchecked(text: str) -> tuple[str, list[int]]:
    """
    Split a checksum-less bech32 string (BOLT12 style).

    A `+` followed by optional whitespace joins continuation chunks.
    """
    if not isinstance(text, str):
        raise TypeError("bech32 input must be a string")
    if "+" in text:
        chunks = text.split("+")
        if any(not chunk.strip() for chunk in chunks):
            raise ValueError("empty continuation chunk")
        text = chunks[0] + "".join(chunk.lstrip() for chunk in chunks[1:])
    s = _normalize_case(text)
    pos = s.rfind("1")
    if pos < 1 or pos + 1 >= len(s):
        raise ValueError("bech32 separator missing")
    return s[:pos], _to_values(s[pos + 1 :])


def encode(hrp: str, values: Sequence[int], encoding: Encoding = Encoding.BECH32) -> str:
    const = _CONST_FOR[encoding]
    pm = _polymod(hrp, list(values) + [0] * 6) ^ const
    checksum = [(pm >> 5 * (5 - i)) & 31 for i in range(6)]
    return hrp + "1" + "".join(CHARSET[v] for v in list(values) + checksum)


def values_to_bytes(values: Iterable[int]) -> bytes:
    """Strict 5->8 conversion: padding must be short and zero."""
    out = bech32.convertbits(list(values), 5, 8, False)
    if out is None:
        raise ValueError("invalid bech32 padding")
    return bytes(out)


def bytes_to_values(data: bytes) -> list[int]:
    out = bech32.convertbits(list(data), 8, 5, True)
    if out is None:
        raise ValueError("invalid data for bech32")
    return out
