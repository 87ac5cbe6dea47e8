"""
Nostr identity keys and Nostr Wallet Auth URIs.

Identity keys are 32-byte x-only secp256k1 keys, given either as 64 hex
characters or as a bech32 `npub`. Both forms must name a point on the
curve.

Wallet auth (`nostr+walletauth://<pubkey>?relay=...&secret=...`) needs at
least one relay, a secret and a non-empty set of required commands.
Commands are space separated.
"""

from __future__ import annotations

import re
from urllib.parse import parse_qsl

from coincurve import PublicKey

from ..errors import FormatError
from ..models import FormatFamily, NostrPubkey, WalletAuthUri
from . import _bech32

FAMILY = FormatFamily.NOSTR_PUBKEY
WALLET_AUTH_FAMILY = FormatFamily.WALLET_AUTH

NPUB_HRP = "npub"
WALLET_AUTH_SCHEME = "nostr+walletauth://"

_HEX64 = re.compile(r"[0-9a-fA-F]{64}")


def _fail(message: str) -> FormatError:
    return FormatError(FAMILY.value, message)


def _x_only(raw: bytes) -> str:
    if len(raw) != 32:
        raise ValueError("x-only key must be 32 bytes")
    PublicKey(b"\x02" + raw)
    return raw.hex()


def to_npub(hex_key: str) -> str:
    return _bech32.encode(NPUB_HRP, _bech32.bytes_to_values(bytes.fromhex(hex_key)))


# ---------------------------------------------------------------------------
# Identity keys
# ---------------------------------------------------------------------------


def looks_like(text: str) -> bool:
    return bool(_HEX64.fullmatch(text)) or text.lower().startswith(NPUB_HRP + "1")


def parse(text: str) -> NostrPubkey:
    if not isinstance(text, str) or not text:
        raise _fail("key must be a non-empty string")

    if _HEX64.fullmatch(text):
        raw = bytes.fromhex(text)
    else:
        try:
            hrp, values, encoding = _bech32.decode(text)
            raw = _bech32.values_to_bytes(values)
        except ValueError as exc:
            raise _fail(str(exc)) from None
        if hrp != NPUB_HRP or encoding is not _bech32.Encoding.BECH32:
            raise _fail("not an npub")

    try:
        hex_key = _x_only(raw)
    except ValueError:
        raise _fail("not a valid x-only public key") from None
    return NostrPubkey(hex=hex_key, npub=to_npub(hex_key))


# ---------------------------------------------------------------------------
# Wallet auth
# ---------------------------------------------------------------------------


def looks_like_wallet_auth(text: str) -> bool:
    return text[: len(WALLET_AUTH_SCHEME)].lower() == WALLET_AUTH_SCHEME


def _commands(value: str | None) -> list[str]:
    if not value:
        return []
    return [c for c in value.split(" ") if c]


def parse_wallet_auth(text: str) -> WalletAuthUri:
    def fail(message: str) -> FormatError:
        return FormatError(WALLET_AUTH_FAMILY.value, message)

    if not isinstance(text, str) or not looks_like_wallet_auth(text):
        raise fail(f"missing {WALLET_AUTH_SCHEME!r} scheme")

    rest = text[len(WALLET_AUTH_SCHEME) :]
    key, _, query = rest.partition("?")
    if not _HEX64.fullmatch(key):
        raise fail("app public key must be 64 hex characters")
    try:
        pubkey = _x_only(bytes.fromhex(key))
    except ValueError:
        raise fail("app public key is not a valid x-only key") from None

    relays: list[str] = []
    params = {}
    for k, v in parse_qsl(query, keep_blank_values=True):
        if k == "relay":
            relays.append(v)
        elif k in params:
            raise fail(f"duplicate parameter {k!r}")
        else:
            params[k] = v

    if not relays:
        raise fail("at least one relay is required")
    secret = params.get("secret")
    if not secret:
        raise fail("secret is required")
    required = _commands(params.get("required_commands"))
    if not required:
        raise fail("required_commands must not be empty")

    identity = params.get("identity")
    if identity is not None:
        if not _HEX64.fullmatch(identity):
            raise fail("identity must be 64 hex characters")
        identity = identity.lower()

    return WalletAuthUri(
        encoded=text,
        pubkey=pubkey,
        relays=tuple(relays),
        secret=secret,
        required_commands=tuple(required),
        optional_commands=tuple(_commands(params.get("optional_commands"))),
        budget=params.get("budget") or None,
        identity=identity,
    )
