import pytest

from waila.errors import InconsistentNetwork
from waila.inference import NetworkContribution, compatible_networks, infer_network
from waila.networks import MAINNET_ONLY, TESTNET_FAMILY, Network


def _addr(network: Network, compatible) -> NetworkContribution:
    return NetworkContribution("onchain", network, compatible)


def test_no_contributions_is_unknown() -> None:
    assert infer_network([]) is None
    assert compatible_networks([]) is None


def test_single_contribution_is_adopted() -> None:
    assert infer_network([NetworkContribution("bolt11", Network.SIGNET)]) is Network.SIGNET


def test_same_network_twice_agrees() -> None:
    contributions = [_addr(Network.BITCOIN, MAINNET_ONLY), NetworkContribution("bolt11", Network.BITCOIN)]
    assert infer_network(contributions) is Network.BITCOIN


def test_testnet_address_narrows_to_signet_invoice() -> None:
    contributions = [_addr(Network.TESTNET, TESTNET_FAMILY), NetworkContribution("bolt11", Network.SIGNET)]
    assert infer_network(contributions) is Network.SIGNET
    assert compatible_networks(contributions) == frozenset({Network.SIGNET})


def test_order_of_contributions_does_not_matter() -> None:
    a = _addr(Network.TESTNET, TESTNET_FAMILY)
    b = NetworkContribution("bolt11", Network.SIGNET)
    assert infer_network([a, b]) is infer_network([b, a])


def test_mainnet_and_signet_disagree() -> None:
    contributions = [_addr(Network.BITCOIN, MAINNET_ONLY), NetworkContribution("bolt11", Network.SIGNET)]
    with pytest.raises(InconsistentNetwork) as info:
        infer_network(contributions)
    assert info.value.networks == ("bitcoin", "signet")


def test_contribution_always_includes_its_own_network() -> None:
    c = NetworkContribution("offer", Network.REGTEST, frozenset())
    assert c.compatible == frozenset({Network.REGTEST})
