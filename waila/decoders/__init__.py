"""
Per-format decoders for waila.

Each module exposes `parse(text)` (or `parse_<family>` where one module
covers two families) returning an immutable sub-record, raising
waila.errors.FormatError on failure, plus a coarse `looks_like*` shape test
used to report which format an input was meant to be.
"""

__all__: list[str] = [
    "address",
    "bip21",
    "bolt11",
    "bolt12",
    "ecash",
    "lnurl",
    "node",
    "nostr",
    "rgb",
]
