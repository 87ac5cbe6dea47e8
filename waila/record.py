"""
The unified payment record.

One optional slot per sub-record type plus the detected top-level family
and the network inference settled on. Several slots are populated together
only through a BIP21 container (an address and its embedded invoice).

Accessors are plain projections over the slots; they never decode.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from . import serialization
from .decoders.lnurl import is_lnurl_auth, lightning_address_of, lnurl_from_url
from .inference import NetworkContribution, compatible_networks
from .models import (
    Bolt11Invoice,
    CashuToken,
    FedimintInvite,
    FormatFamily,
    LightningAddress,
    LnUrl,
    NodePubkey,
    NostrPubkey,
    Offer,
    OnchainAddress,
    PaymentUri,
    Refund,
    RgbInvoice,
    RouteHop,
    WalletAuthUri,
)
from .networks import Network

# Slot holding the top-level sub-record of each family.
SLOT_FOR: dict[FormatFamily, str] = {
    FormatFamily.BIP21: "uri",
    FormatFamily.NODE_PUBKEY: "node",
    FormatFamily.ONCHAIN: "onchain",
    FormatFamily.BOLT11: "invoice",
    FormatFamily.BOLT12_OFFER: "offer",
    FormatFamily.BOLT12_REFUND: "refund",
    FormatFamily.LNURL: "lnurl_record",
    FormatFamily.LIGHTNING_ADDRESS: "ln_address",
    FormatFamily.NOSTR_PUBKEY: "identity",
    FormatFamily.RGB: "asset",
    FormatFamily.FEDIMINT_INVITE: "fedimint",
    FormatFamily.CASHU_TOKEN: "cashu",
    FormatFamily.WALLET_AUTH: "wallet_auth",
}

_MSAT_PER_BTC = Decimal(100_000_000_000)


@dataclass(frozen=True)
class PaymentRecord:
    """
    Decoded form of one input string.

    Build records through waila.decode(); constructing one by hand skips
    network inference.
    """
    family: FormatFamily
    network: Network | None = None

    uri: PaymentUri | None = None
    onchain: OnchainAddress | None = None
    invoice: Bolt11Invoice | None = None
    offer: Offer | None = None
    refund: Refund | None = None
    node: NodePubkey | None = None
    lnurl_record: LnUrl | None = None
    ln_address: LightningAddress | None = None
    identity: NostrPubkey | None = None
    asset: RgbInvoice | None = None
    fedimint: FedimintInvite | None = None
    cashu: CashuToken | None = None
    wallet_auth: WalletAuthUri | None = None

    # ------------------------------------------------------------------
    # Source / network
    # ------------------------------------------------------------------

    @property
    def source(self) -> str:
        """Canonical string of the top-level sub-record."""
        return str(getattr(self, SLOT_FOR[self.family]))

    def network_contributions(self) -> list[NetworkContribution]:
        out = []
        addr = self.uri.address if self.uri is not None else self.onchain
        if addr is not None:
            out.append(NetworkContribution(FormatFamily.ONCHAIN.value, addr.network, addr.compatible))
        if self.invoice is not None:
            out.append(NetworkContribution(FormatFamily.BOLT11.value, self.invoice.network, self.invoice.compatible))
        if self.offer is not None:
            out.append(NetworkContribution(FormatFamily.BOLT12_OFFER.value, self.offer.network, self.offer.supported_networks))
        if self.refund is not None:
            out.append(NetworkContribution(FormatFamily.BOLT12_REFUND.value, self.refund.chain))
        if self.asset is not None and self.asset.chain is not None:
            out.append(NetworkContribution(FormatFamily.RGB.value, self.asset.chain))
        return out

    def valid_for_network(self, network: Network) -> bool | None:
        """None when nothing in the record pins a network."""
        compatible: frozenset[Network] | None = compatible_networks(self.network_contributions())
        if compatible is None:
            return None
        return network in compatible

    # ------------------------------------------------------------------
    # Address / amounts
    # ------------------------------------------------------------------

    @property
    def address(self) -> OnchainAddress | None:
        if self.uri is not None:
            return self.uri.address
        if self.onchain is not None:
            return self.onchain
        if self.invoice is not None and self.invoice.fallback_addresses:
            return self.invoice.fallback_addresses[0]
        return None

    @property
    def uri_amount_msats(self) -> int | None:
        return self.uri.amount_msats if self.uri is not None else None

    @property
    def payment_amount_msats(self) -> int | None:
        if self.invoice is not None and self.invoice.amount_msats is not None:
            return self.invoice.amount_msats
        if self.offer is not None and self.offer.amount_msats is not None:
            return self.offer.amount_msats
        if self.refund is not None:
            return self.refund.amount_msats
        if self.cashu is not None:
            if self.cashu.unit in (None, "sat"):
                return self.cashu.amount * 1000
            if self.cashu.unit == "msat":
                return self.cashu.amount
        return None

    @property
    def amount_msats(self) -> int | None:
        payment = self.payment_amount_msats
        return payment if payment is not None else self.uri_amount_msats

    @property
    def amount_sats(self) -> int | None:
        msats = self.amount_msats
        return None if msats is None else msats // 1000

    @property
    def amount_btc(self) -> Decimal | None:
        msats = self.amount_msats
        return None if msats is None else Decimal(msats) / _MSAT_PER_BTC

    # ------------------------------------------------------------------
    # Memo
    # ------------------------------------------------------------------

    @property
    def label(self) -> str | None:
        return self.uri.label if self.uri is not None else None

    @property
    def message(self) -> str | None:
        return self.uri.message if self.uri is not None else None

    @property
    def memo(self) -> str | None:
        if self.message is not None:
            return self.message
        if self.label is not None:
            return self.label
        for owner in (self.invoice, self.offer, self.refund):
            if owner is not None and owner.description is not None:
                return owner.description
        return None

    # ------------------------------------------------------------------
    # Lightning
    # ------------------------------------------------------------------

    @property
    def node_pubkey(self) -> str | None:
        if self.node is not None:
            return self.node.encoded
        if self.invoice is not None:
            return self.invoice.payee
        return None

    @property
    def lnurl(self) -> LnUrl | None:
        if self.lnurl_record is not None:
            return self.lnurl_record
        if self.ln_address is not None:
            return lnurl_from_url(self.ln_address.lnurlp_url)
        return None

    @property
    def is_lnurl_auth(self) -> bool:
        lnurl = self.lnurl
        return lnurl is not None and is_lnurl_auth(lnurl)

    @property
    def lightning_address(self) -> LightningAddress | None:
        if self.ln_address is not None:
            return self.ln_address
        if self.lnurl_record is not None:
            return lightning_address_of(self.lnurl_record)
        return None

    @property
    def payment_hash(self) -> str | None:
        return self.invoice.payment_hash if self.invoice is not None else None

    @property
    def expiry(self) -> int | None:
        """Relative invoice expiry in seconds."""
        return self.invoice.expiry if self.invoice is not None else None

    @property
    def expires_at(self) -> int | None:
        if self.invoice is not None:
            return self.invoice.expires_at
        if self.offer is not None:
            return self.offer.absolute_expiry
        if self.refund is not None:
            return self.refund.absolute_expiry
        return None

    @property
    def min_final_cltv_expiry(self) -> int | None:
        return self.invoice.min_final_cltv_expiry if self.invoice is not None else None

    @property
    def route_hints(self) -> tuple[tuple[RouteHop, ...], ...]:
        return self.invoice.route_hints if self.invoice is not None else ()

    # ------------------------------------------------------------------
    # Payjoin
    # ------------------------------------------------------------------

    @property
    def payjoin_endpoint(self) -> str | None:
        return self.uri.payjoin_endpoint if self.uri is not None else None

    @property
    def payjoin_supported(self) -> bool:
        return self.payjoin_endpoint is not None

    @property
    def disable_output_substitution(self) -> bool:
        return self.uri is not None and self.uri.disable_output_substitution

    # ------------------------------------------------------------------
    # Other families
    # ------------------------------------------------------------------

    @property
    def identity_pubkey(self) -> NostrPubkey | None:
        return self.identity

    @property
    def asset_invoice(self) -> RgbInvoice | None:
        return self.asset

    @property
    def fedimint_invite_code(self) -> str | None:
        return self.fedimint.encoded if self.fedimint is not None else None

    @property
    def cashu_token(self) -> CashuToken | None:
        return self.cashu

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return serialization.record_to_dict(self)

    def to_json(self) -> str:
        return serialization.canonical_json(self.to_dict())
