"""
On-chain address decoder (base58check and segwit bech32/bech32m).

Rules:
- base58check: 21 bytes (version + hash160); version picks network and kind.
- segwit: hrp bc / tb / bcrt, witness version 0 uses bech32, 1..16 use
  bech32m (BIP350), program length 2..40, v0 programs are 20 or 32 bytes.
- Fail-closed: anything else raises FormatError.
"""

from __future__ import annotations

import base58

from ..errors import FormatError
from ..models import AddressKind, FormatFamily, OnchainAddress
from ..networks import (
    BASE58_TEST_FAMILY,
    MAINNET_ONLY,
    REGTEST_ONLY,
    SEGWIT_HRP,
    TESTNET_FAMILY,
    Network,
)
from . import _bech32

FAMILY = FormatFamily.ONCHAIN

_BASE58_VERSION_MAP = {
    0x00: (Network.BITCOIN, AddressKind.P2PKH, MAINNET_ONLY),
    0x05: (Network.BITCOIN, AddressKind.P2SH, MAINNET_ONLY),
    0x6F: (Network.TESTNET, AddressKind.P2PKH, BASE58_TEST_FAMILY),
    0xC4: (Network.TESTNET, AddressKind.P2SH, BASE58_TEST_FAMILY),
}

_SEGWIT_COMPATIBLE = {
    Network.BITCOIN: MAINNET_ONLY,
    Network.TESTNET: TESTNET_FAMILY,
    Network.REGTEST: REGTEST_ONLY,
}

_SEGWIT_PREFIXES: tuple[str, ...] = tuple(f"{hrp}1" for hrp in SEGWIT_HRP)


def looks_like(text: str) -> bool:
    return text.lower().startswith(_SEGWIT_PREFIXES)


def _fail(message: str) -> FormatError:
    return FormatError(FAMILY.value, message)


def _parse_base58(text: str) -> OnchainAddress:
    if text != text.strip():
        raise _fail("address must not carry surrounding whitespace")
    try:
        raw = base58.b58decode_check(text)
    except ValueError:
        raise _fail("invalid base58check encoding") from None

    if len(raw) != 21:
        raise _fail("base58 payload must be 21 bytes")

    entry = _BASE58_VERSION_MAP.get(raw[0])
    if entry is None:
        raise _fail(f"unknown base58 version byte {raw[0]:#04x}")

    network, kind, compatible = entry
    return OnchainAddress(
        encoded=text,
        network=network,
        kind=kind,
        payload=bytes(raw[1:]),
        compatible=compatible,
    )


def _parse_segwit(text: str) -> OnchainAddress:
    try:
        hrp, values, encoding = _bech32.decode(text, max_length=90)
    except ValueError as exc:
        raise _fail(str(exc)) from None

    network = SEGWIT_HRP.get(hrp)
    if network is None:
        raise _fail(f"unknown segwit hrp {hrp!r}")
    if not values:
        raise _fail("missing witness version")

    version = values[0]
    if version > 16:
        raise _fail("invalid witness version")
    try:
        program = _bech32.values_to_bytes(values[1:])
    except ValueError as exc:
        raise _fail(str(exc)) from None

    if not 2 <= len(program) <= 40:
        raise _fail("invalid witness program length")
    if version == 0 and len(program) not in (20, 32):
        raise _fail("v0 witness program must be 20 or 32 bytes")

    expected = _bech32.Encoding.BECH32 if version == 0 else _bech32.Encoding.BECH32M
    if encoding is not expected:
        raise _fail(f"witness v{version} must use {expected.value}")

    if version == 0:
        kind = AddressKind.P2WPKH if len(program) == 20 else AddressKind.P2WSH
    elif version == 1 and len(program) == 32:
        kind = AddressKind.P2TR
    else:
        kind = AddressKind.WITNESS_UNKNOWN

    return OnchainAddress(
        encoded=text.lower(),
        network=network,
        kind=kind,
        payload=program,
        witness_version=version,
        compatible=_SEGWIT_COMPATIBLE[network],
    )


def parse(text: str) -> OnchainAddress:
    if not isinstance(text, str) or not text:
        raise _fail("address must be a non-empty string")
    if looks_like(text):
        return _parse_segwit(text)
    return _parse_base58(text)
