"""
Canonical JSON form of a PaymentRecord.

Rules:
- only populated slots are written, plus "family", "source" and (when
  known) "network".
- bytes become lowercase hex, Decimals their string form, enums their value.
- deterministic: sorted keys, compact separators, UTF-8 kept as is.

from_json re-decodes "source", so a round trip reproduces exactly what
decode() would produce for the same string.
"""

from __future__ import annotations

import json
from dataclasses import fields, is_dataclass
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Any, Mapping

from .models import FormatFamily

if TYPE_CHECKING:
    from .config import Capabilities
    from .record import PaymentRecord

_HEADER_FIELDS = ("family", "network")


def canonical_json(obj: Mapping[str, Any]) -> str:
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def to_plain(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return {
            f.name: to_plain(getattr(value, f.name))
            for f in fields(value)
            if getattr(value, f.name) is not None
        }
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, bytes):
        return value.hex()
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (set, frozenset)):
        return sorted(to_plain(v) for v in value)
    if isinstance(value, (tuple, list)):
        return [to_plain(v) for v in value]
    return value


def record_to_dict(record: "PaymentRecord") -> dict[str, Any]:
    out: dict[str, Any] = {"family": record.family.value, "source": record.source}
    if record.network is not None:
        out["network"] = record.network.value
    for f in fields(record):
        if f.name in _HEADER_FIELDS:
            continue
        value = getattr(record, f.name)
        if value is not None:
            out[f.name] = to_plain(value)
    return out


def from_json(text: str, *, capabilities: "Capabilities" | None = None) -> "PaymentRecord":
    """
    Rebuild a record from its canonical JSON.

    Raises ValueError on malformed JSON or a family mismatch, and DecodeError
    if the source string no longer decodes.
    """
    # dispatcher -> record -> serialization, so import at call time
    from .dispatcher import decode

    try:
        obj = json.loads(text)
    except ValueError as exc:
        raise ValueError("Failed to decode record JSON.") from exc
    if not isinstance(obj, dict):
        raise ValueError("Record JSON must be an object.")

    source = obj.get("source")
    if not isinstance(source, str):
        raise ValueError("Record JSON missing 'source'.")
    try:
        family = FormatFamily(obj.get("family"))
    except ValueError:
        raise ValueError(f"Unknown family: {obj.get('family')!r}") from None

    record = decode(source, capabilities=capabilities)
    if record.family is not family:
        raise ValueError(f"Source decodes as {record.family.value}, not {family.value}")
    return record
