"""
Core data models for waila.

These describe the decoded form of every supported payment string:
- the closed set of format families
- one immutable sub-record per family (each keeps its canonical string form)

Sub-records carry no decoding logic; the decoders in waila.decoders build
them and waila.record combines them.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from .networks import Network


class FormatFamily(str, Enum):
    BIP21 = "bip21"
    NODE_PUBKEY = "node_pubkey"
    ONCHAIN = "onchain"
    BOLT11 = "bolt11"
    BOLT12_OFFER = "bolt12_offer"
    BOLT12_REFUND = "bolt12_refund"
    LNURL = "lnurl"
    LIGHTNING_ADDRESS = "lightning_address"
    NOSTR_PUBKEY = "nostr_pubkey"
    RGB = "rgb"
    FEDIMINT_INVITE = "fedimint_invite"
    CASHU_TOKEN = "cashu_token"
    WALLET_AUTH = "nostr_wallet_auth"


class AddressKind(str, Enum):
    P2PKH = "p2pkh"
    P2SH = "p2sh"
    P2WPKH = "p2wpkh"
    P2WSH = "p2wsh"
    P2TR = "p2tr"
    WITNESS_UNKNOWN = "witness_unknown"


# ---------------------------------------------------------------------------
# On-chain
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OnchainAddress:
    """
    A structurally valid on-chain address.

    `network` is the nominal network of the encoding; `compatible` lists
    every network the same string is valid on (test networks share prefixes).
    """
    encoded: str
    network: Network
    kind: AddressKind
    payload: bytes  # hash160 for base58 kinds, witness program for segwit
    witness_version: int | None = None
    compatible: frozenset[Network] = frozenset()

    def __str__(self) -> str:
        return self.encoded


@dataclass(frozen=True)
class PaymentUri:
    """
    A BIP21 `bitcoin:` URI with its parameters percent-decoded.

    `lightning` and `offer_param` hold the raw embedded strings; the
    composite resolver decides whether they become sub-records.
    """
    encoded: str
    address: OnchainAddress
    amount_btc: Decimal | None = None
    label: str | None = None
    message: str | None = None
    lightning: str | None = None
    offer_param: str | None = None
    payjoin_endpoint: str | None = None
    payjoin_output_substitution: bool | None = None  # raw `pjos` flag, True disables substitution
    extras: tuple[tuple[str, str], ...] = ()

    @property
    def amount_sats(self) -> int | None:
        if self.amount_btc is None:
            return None
        return int(self.amount_btc * 100_000_000)

    @property
    def amount_msats(self) -> int | None:
        sats = self.amount_sats
        return None if sats is None else sats * 1000

    @property
    def disable_output_substitution(self) -> bool:
        return bool(self.payjoin_output_substitution)

    def __str__(self) -> str:
        return self.encoded


# ---------------------------------------------------------------------------
# Lightning
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RouteHop:
    pubkey: str
    short_channel_id: str  # block x tx x output, e.g. "66051x263430x1800"
    fee_base_msat: int
    fee_proportional_millionths: int
    cltv_expiry_delta: int


@dataclass(frozen=True)
class Bolt11Invoice:
    encoded: str
    currency: str
    network: Network
    timestamp: int
    payment_hash: str
    payee: str  # hex, either from the `n` field or recovered from the signature
    amount_msats: int | None = None
    payment_secret: str | None = None
    description: str | None = None
    description_hash: str | None = None
    expiry: int = 3600
    min_final_cltv_expiry: int = 18
    fallback_addresses: tuple[OnchainAddress, ...] = ()
    route_hints: tuple[tuple[RouteHop, ...], ...] = ()
    compatible: frozenset[Network] = frozenset()

    @property
    def expires_at(self) -> int:
        return self.timestamp + self.expiry

    def is_expired(self, now: int) -> bool:
        return now > self.expires_at

    def __str__(self) -> str:
        return self.encoded


@dataclass(frozen=True)
class BlindedPath:
    introduction_node: str  # hex pubkey, or hex sciddir
    path_key: str
    num_hops: int


@dataclass(frozen=True)
class Offer:
    encoded: str
    chains: tuple[Network, ...] = ()
    metadata: bytes | None = None
    currency: str | None = None
    amount: int | None = None
    description: str | None = None
    features: int = 0
    absolute_expiry: int | None = None
    paths: tuple[BlindedPath, ...] = ()
    issuer: str | None = None
    quantity_max: int | None = None
    issuer_id: str | None = None

    @property
    def amount_msats(self) -> int | None:
        """Bitcoin-denominated amount; None for fiat-denominated offers."""
        if self.currency is not None:
            return None
        return self.amount

    @property
    def network(self) -> Network:
        # no offer_chains means bitcoin only
        return self.chains[0] if self.chains else Network.BITCOIN

    @property
    def supported_networks(self) -> frozenset[Network]:
        return frozenset(self.chains) if self.chains else frozenset({Network.BITCOIN})

    def __str__(self) -> str:
        return self.encoded


@dataclass(frozen=True)
class Refund:
    encoded: str
    payer_id: str
    amount_msats: int
    description: str | None = None
    metadata: bytes | None = None
    chain: Network = Network.BITCOIN
    absolute_expiry: int | None = None
    issuer: str | None = None
    quantity: int | None = None
    payer_note: str | None = None
    features: int = 0
    paths: tuple[BlindedPath, ...] = ()

    def __str__(self) -> str:
        return self.encoded


@dataclass(frozen=True)
class NodePubkey:
    encoded: str  # 33-byte compressed point, lowercase hex

    def __str__(self) -> str:
        return self.encoded


@dataclass(frozen=True)
class LnUrl:
    """
    An LNURL: `encoded` is the lowercase bech32 form, `url` the locator.
    """
    encoded: str
    url: str

    def __str__(self) -> str:
        return self.encoded


@dataclass(frozen=True)
class LightningAddress:
    user: str
    domain: str

    @property
    def lnurlp_url(self) -> str:
        scheme = "http" if self.domain.endswith(".onion") else "https"
        return f"{scheme}://{self.domain}/.well-known/lnurlp/{self.user}"

    def __str__(self) -> str:
        return f"{self.user}@{self.domain}"


# ---------------------------------------------------------------------------
# Identity, assets, ecash
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NostrPubkey:
    """A Nostr x-only public key (32 bytes)."""
    hex: str
    npub: str

    def __str__(self) -> str:
        return self.npub


@dataclass(frozen=True)
class WalletAuthUri:
    """A Nostr Wallet Auth (`nostr+walletauth://`) connection request."""
    encoded: str
    pubkey: str
    relays: tuple[str, ...]
    secret: str
    required_commands: tuple[str, ...]
    optional_commands: tuple[str, ...] = ()
    budget: str | None = None
    identity: str | None = None

    def __str__(self) -> str:
        return self.encoded


@dataclass(frozen=True)
class RgbInvoice:
    encoded: str
    contract_id: str | None
    interface: str | None
    beneficiary: str
    operation: str | None = None
    amount: int | None = None  # asset units, not sats
    chain: Network | None = None
    expiry: int | None = None
    endpoints: tuple[str, ...] = ()
    extras: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        return self.encoded


@dataclass(frozen=True)
class FedimintInvite:
    encoded: str

    def __str__(self) -> str:
        return self.encoded


@dataclass(frozen=True)
class CashuToken:
    encoded: str
    mints: tuple[str, ...]
    amount: int  # in `unit`, sats when unit is None
    unit: str | None = None
    memo: str | None = None
    proof_count: int = 0

    def __str__(self) -> str:
        return self.encoded
