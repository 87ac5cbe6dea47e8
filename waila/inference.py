"""
Network inference.

Every populated sub-record that knows its network contributes a
(network, compatible set) pair. An address cannot tell testnet3, testnet4
and signet apart, so its compatible set is wider than its nominal network.

Rules:
- no contributions: network unknown (None).
- two contributions agree when either network lies in the other's
  compatible set; the narrower contribution wins.
- otherwise InconsistentNetwork.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .errors import InconsistentNetwork
from .networks import Network


@dataclass(frozen=True)
class NetworkContribution:
    source: str
    network: Network
    compatible: frozenset[Network] = frozenset()

    def __post_init__(self) -> None:
        # the nominal network is always compatible with itself
        object.__setattr__(self, "compatible", frozenset(self.compatible) | {self.network})


def _agree(a: NetworkContribution, b: NetworkContribution) -> bool:
    return a.network in b.compatible or b.network in a.compatible


def _narrow(a: NetworkContribution, b: NetworkContribution) -> NetworkContribution:
    compatible = a.compatible & b.compatible
    winner, other = (b, a) if len(b.compatible) < len(a.compatible) else (a, b)
    network = winner.network if winner.network in compatible else other.network
    return NetworkContribution(source=winner.source, network=network, compatible=compatible)


def reconcile(contributions: Iterable[NetworkContribution]) -> NetworkContribution | None:
    """Fold contributions into one, or raise InconsistentNetwork."""
    agreed: NetworkContribution | None = None
    seen: list[Network] = []
    for c in contributions:
        seen.append(c.network)
        if agreed is None:
            agreed = c
            continue
        if not _agree(agreed, c):
            raise InconsistentNetwork(n.value for n in seen)
        agreed = _narrow(agreed, c)
    return agreed


def infer_network(contributions: Iterable[NetworkContribution]) -> Network | None:
    agreed = reconcile(contributions)
    return agreed.network if agreed is not None else None


def compatible_networks(contributions: Iterable[NetworkContribution]) -> frozenset[Network] | None:
    agreed = reconcile(contributions)
    return agreed.compatible if agreed is not None else None
