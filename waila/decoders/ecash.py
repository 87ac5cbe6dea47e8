"""
Ecash formats: Fedimint federation invite codes and Cashu V3 tokens.

Fedimint invite:
- bech32m with hrp `fed1`, any length, non-empty payload.

Cashu V3:
- `cashuA` followed by base64url (padding optional) of a UTF-8 JSON object
  {"token": [{"mint": str, "proofs": [{"amount": int, ...}, ...]}, ...],
   "unit": str?, "memo": str?}
- every entry needs a mint and at least one proof with a non-negative
  integer amount.
"""

from __future__ import annotations

import base64
import binascii
import json
from typing import Any

from ..errors import FormatError
from ..models import CashuToken, FedimintInvite, FormatFamily
from . import _bech32

FEDIMINT_FAMILY = FormatFamily.FEDIMINT_INVITE
CASHU_FAMILY = FormatFamily.CASHU_TOKEN

FEDIMINT_HRP = "fed1"
CASHU_V3_PREFIX = "cashuA"


def _b64url_decode(token: str) -> bytes:
    padding = "=" * (-len(token) % 4)
    return base64.urlsafe_b64decode(token + padding)


# ---------------------------------------------------------------------------
# Fedimint
# ---------------------------------------------------------------------------


def looks_like_fedimint(text: str) -> bool:
    return text.lower().startswith(FEDIMINT_HRP + "1")


def parse_fedimint(text: str) -> FedimintInvite:
    def fail(message: str) -> FormatError:
        return FormatError(FEDIMINT_FAMILY.value, message)

    if not isinstance(text, str) or not text:
        raise fail("invite code must be a non-empty string")
    try:
        hrp, values, encoding = _bech32.decode(text)
        raw = _bech32.values_to_bytes(values)
    except ValueError as exc:
        raise fail(str(exc)) from None
    if hrp != FEDIMINT_HRP:
        raise fail(f"expected hrp {FEDIMINT_HRP!r}, got {hrp!r}")
    if encoding is not _bech32.Encoding.BECH32M:
        raise fail("invite code must use bech32m")
    if not raw:
        raise fail("empty invite code")
    return FedimintInvite(encoded=text.lower())


# ---------------------------------------------------------------------------
# Cashu
# ---------------------------------------------------------------------------


def looks_like_cashu(text: str) -> bool:
    return text.startswith(CASHU_V3_PREFIX)


def _amount(proof: Any) -> int:
    if not isinstance(proof, dict):
        raise ValueError("proof must be an object")
    amount = proof.get("amount")
    if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
        raise ValueError("proof amount must be a non-negative integer")
    return amount


def parse_cashu(text: str) -> CashuToken:
    def fail(message: str) -> FormatError:
        return FormatError(CASHU_FAMILY.value, message)

    if not isinstance(text, str) or not looks_like_cashu(text):
        raise fail(f"missing {CASHU_V3_PREFIX!r} prefix")

    try:
        obj = json.loads(_b64url_decode(text[len(CASHU_V3_PREFIX) :]).decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, ValueError):
        raise fail("token payload is not base64url JSON") from None

    if not isinstance(obj, dict):
        raise fail("token payload must be a JSON object")
    entries = obj.get("token")
    if not isinstance(entries, list) or not entries:
        raise fail("token list must be non-empty")

    mints: list[str] = []
    total = 0
    proof_count = 0
    for entry in entries:
        if not isinstance(entry, dict):
            raise fail("token entry must be an object")
        mint = entry.get("mint")
        proofs = entry.get("proofs")
        if not isinstance(mint, str) or not mint:
            raise fail("token entry is missing its mint")
        if not isinstance(proofs, list) or not proofs:
            raise fail("token entry has no proofs")
        try:
            total += sum(_amount(p) for p in proofs)
        except ValueError as exc:
            raise fail(str(exc)) from None
        proof_count += len(proofs)
        if mint not in mints:
            mints.append(mint)

    unit = obj.get("unit")
    memo = obj.get("memo")
    return CashuToken(
        encoded=text,
        mints=tuple(mints),
        amount=total,
        unit=unit if isinstance(unit, str) else None,
        memo=memo if isinstance(memo, str) else None,
        proof_count=proof_count,
    )
