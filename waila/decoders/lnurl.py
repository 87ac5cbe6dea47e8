"""
LNURL and Lightning Address decoders.

LNURL:
- bech32 with hrp `lnurl` (no length cap), payload is a UTF-8 URL.
- LUD-17 scheme URLs (`lnurlp://`, `lnurlw://`, `lnurlc://`, `keyauth://`)
  are accepted and rewritten to their https form.
- the URL must be https, or http on a .onion host.

Lightning Address (LUD-16):
- `user@domain`, exactly one `@`.
- user limited to a-z 0-9 - _ . ; domain must be a syntactically valid
  host name.

Nothing here touches the network. The locator a wallet would fetch is
computed, never requested.
"""

from __future__ import annotations

import re
from urllib.parse import parse_qsl, urlsplit

from ..errors import FormatError
from ..models import FormatFamily, LightningAddress, LnUrl
from . import _bech32

LNURL_FAMILY = FormatFamily.LNURL
ADDRESS_FAMILY = FormatFamily.LIGHTNING_ADDRESS

LNURL_HRP = "lnurl"

_LUD17_SCHEMES = ("lnurlp://", "lnurlw://", "lnurlc://", "keyauth://")

_WELL_KNOWN_PAY = "/.well-known/lnurlp/"

_USER = re.compile(r"[a-z0-9\-_.]+")
_LABEL = re.compile(r"(?!-)[a-z0-9-]{1,63}(?<!-)")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _lnurl_fail(message: str) -> FormatError:
    return FormatError(LNURL_FAMILY.value, message)


def _address_fail(message: str) -> FormatError:
    return FormatError(ADDRESS_FAMILY.value, message)


def normalize_domain(domain: str) -> str:
    """
    Domain normalization rule:
    - lowercase
    - trimmed
    - no scheme, path, port or userinfo
    - dot-separated labels of letters, digits and inner hyphens
    """
    if not isinstance(domain, str):
        raise TypeError("domain must be a string")
    d = domain.strip().lower()
    if not d:
        raise ValueError("domain must be non-empty")
    if "://" in d:
        raise ValueError("domain must not include scheme")
    if "/" in d:
        raise ValueError("domain must not include path")
    labels = d.split(".")
    if len(labels) < 2 or len(d) > 253:
        raise ValueError("domain must have at least two labels")
    if not all(_LABEL.fullmatch(label) for label in labels):
        raise ValueError("domain has an invalid label")
    return d


def _check_url(url: str) -> str:
    try:
        parts = urlsplit(url)
    except ValueError:
        raise _lnurl_fail("LNURL is not a URL") from None
    host = (parts.hostname or "").lower()
    if not host:
        raise _lnurl_fail("LNURL does not contain a host")
    if parts.scheme == "https" or (parts.scheme == "http" and host.endswith(".onion")):
        return url
    raise _lnurl_fail("LNURL must be https (or http on .onion)")


def lnurl_from_url(url: str) -> LnUrl:
    """Bech32-encode a locator as an LNURL."""
    values = _bech32.bytes_to_values(url.encode("utf-8"))
    return LnUrl(encoded=_bech32.encode(LNURL_HRP, values), url=url)


def _lud17_to_https(text: str) -> str:
    _, _, rest = text.partition("://")
    web = "http" if rest.split("/", 1)[0].lower().endswith(".onion") else "https"
    return f"{web}://{rest}"


# ---------------------------------------------------------------------------
# LNURL
# ---------------------------------------------------------------------------


def looks_like_lnurl(text: str) -> bool:
    lower = text.lower()
    return lower.startswith(LNURL_HRP + "1") or lower.startswith(_LUD17_SCHEMES)


def parse_lnurl(text: str) -> LnUrl:
    if not isinstance(text, str) or not text:
        raise _lnurl_fail("LNURL must be a non-empty string")

    if text.lower().startswith(_LUD17_SCHEMES):
        return lnurl_from_url(_check_url(_lud17_to_https(text)))

    try:
        hrp, values, encoding = _bech32.decode(text)
        raw = _bech32.values_to_bytes(values)
    except ValueError as exc:
        raise _lnurl_fail(str(exc)) from None
    if hrp != LNURL_HRP:
        raise _lnurl_fail(f"expected hrp {LNURL_HRP!r}, got {hrp!r}")
    if encoding is not _bech32.Encoding.BECH32:
        raise _lnurl_fail("LNURL must use bech32")
    try:
        url = raw.decode("utf-8")
    except UnicodeDecodeError:
        raise _lnurl_fail("LNURL payload is not UTF-8") from None

    return LnUrl(encoded=text.lower(), url=_check_url(url))


def is_lnurl_auth(lnurl: LnUrl) -> bool:
    """LUD-04: an auth LNURL carries `tag=login`."""
    query = urlsplit(lnurl.url).query
    return any(k == "tag" and v == "login" for k, v in parse_qsl(query))


def lightning_address_of(lnurl: LnUrl) -> LightningAddress | None:
    """The lightning address an LNURL-pay well-known locator stands for, if any."""
    parts = urlsplit(lnurl.url)
    if not parts.path.startswith(_WELL_KNOWN_PAY) or parts.query:
        return None
    user = parts.path[len(_WELL_KNOWN_PAY) :]
    try:
        return parse_lightning_address(f"{user}@{parts.hostname}")
    except FormatError:
        return None


# ---------------------------------------------------------------------------
# Lightning Address
# ---------------------------------------------------------------------------


def looks_like_lightning_address(text: str) -> bool:
    return text.count("@") == 1 and not text.startswith("@") and not text.endswith("@")


def parse_lightning_address(text: str) -> LightningAddress:
    if not isinstance(text, str) or text.count("@") != 1:
        raise _address_fail("lightning address must contain exactly one '@'")
    user, domain = text.split("@")
    if domain != domain.strip():
        raise _address_fail("domain must not carry surrounding whitespace")
    user = user.lower()
    if not _USER.fullmatch(user):
        raise _address_fail("invalid username")
    try:
        domain = normalize_domain(domain)
    except ValueError as exc:
        raise _address_fail(str(exc)) from None
    return LightningAddress(user=user, domain=domain)
