"""
Format-family capability selection for waila.

Design goals:
- Behaves like a build-time feature set: computed once, at import, into a
  frozen value. Nothing mutates it afterwards.
- Every family is enabled unless listed in WAILA_DISABLED_FAMILIES
  (comma-separated FormatFamily values, e.g. "rgb,cashu_token").
- Unknown names fail loudly (ConfigError) instead of being ignored.
- Callers wanting a different set pass an explicit Capabilities to decode().
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Iterable

from .errors import ConfigError
from .models import FormatFamily

ENV_DISABLED_FAMILIES = "WAILA_DISABLED_FAMILIES"


@dataclass(frozen=True)
class Capabilities:
    enabled: frozenset[FormatFamily] = frozenset(FormatFamily)

    def allows(self, family: FormatFamily) -> bool:
        return family in self.enabled

    def without(self, *families: FormatFamily) -> "Capabilities":
        return Capabilities(enabled=self.enabled - frozenset(families))

    @classmethod
    def only(cls, families: Iterable[FormatFamily]) -> "Capabilities":
        return cls(enabled=frozenset(families))


def parse_family_list(raw: str | None) -> frozenset[FormatFamily]:
    """
    Parse a comma-separated family list.

    - names are trimmed and lowercased
    - empty entries are skipped
    - unknown names raise ConfigError
    """
    if raw is None:
        return frozenset()
    out = set()
    for part in raw.split(","):
        name = part.strip().lower()
        if not name:
            continue
        try:
            out.add(FormatFamily(name))
        except ValueError:
            raise ConfigError(f"Unknown format family in {ENV_DISABLED_FAMILIES}: {name!r}") from None
    return frozenset(out)


def capabilities_from_env() -> Capabilities:
    disabled = parse_family_list(os.getenv(ENV_DISABLED_FAMILIES))
    return Capabilities(enabled=frozenset(FormatFamily) - disabled)


DEFAULT_CAPABILITIES: Capabilities = capabilities_from_env()
