"""
Error taxonomy for waila.

Every error is a ValueError subclass, so callers that treat "bad input"
as ValueError keep working.

- FormatError: raised by a single format decoder (internal to the pipeline).
- DecodeError: the only error family `decode()` surfaces. Its `kind` tells
  which stage failed:
    - NoMatchingFormat: nothing recognized the input.
    - MalformedFormat: a format's prefix/scheme matched but its grammar
      or checksum did not.
    - InconsistentNetwork: two contributing sub-records disagree.
"""

from __future__ import annotations

from typing import Iterable


class FormatError(ValueError):
    """A format decoder rejected its input."""

    def __init__(self, family: str, message: str) -> None:
        super().__init__(f"{family}: {message}")
        self.family = family
        self.reason = message


class EmbeddedDecodeIgnored(FormatError):
    """
    Internal signal: an optional embedded container field failed to decode.

    Caught by the composite resolver and never surfaced by decode().
    """


class ConfigError(RuntimeError):
    pass


class DecodeError(ValueError):
    kind = "decode_error"


class NoMatchingFormat(DecodeError):
    kind = "no_matching_format"

    def __init__(self) -> None:
        super().__init__("Input did not match any supported payment format.")


class MalformedFormat(DecodeError):
    kind = "malformed_format"

    def __init__(self, family: str, reason: str | None = None) -> None:
        msg = f"Input looks like {family} but failed to parse"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)
        self.family = family
        self.reason = reason


class InconsistentNetwork(DecodeError):
    kind = "inconsistent_network"

    def __init__(self, networks: Iterable[str]) -> None:
        self.networks: tuple[str, ...] = tuple(sorted(set(networks)))
        super().__init__(f"Sub-records disagree on network: {', '.join(self.networks)}")
