import pytest

from waila.networks import (
    CHAIN_HASHES,
    Network,
    chain_hash_for,
    network_for_chain_hash,
    parse_network,
)


def test_parse_network_accepts_values_and_aliases() -> None:
    assert parse_network("bitcoin") is Network.BITCOIN
    assert parse_network(" Mainnet ") is Network.BITCOIN
    assert parse_network("testnet3") is Network.TESTNET
    assert parse_network("SIGNET") is Network.SIGNET


def test_parse_network_rejects_unknown() -> None:
    with pytest.raises(ValueError):
        parse_network("litecoin")


def test_parse_network_type_error() -> None:
    with pytest.raises(TypeError):
        parse_network(1)  # type: ignore[arg-type]


def test_chain_hashes_are_internal_byte_order() -> None:
    h = chain_hash_for(Network.BITCOIN)
    assert len(h) == 32
    # genesis hash displays with leading zeros, so internal order ends with them
    assert h.endswith(b"\x00\x00\x00\x00")
    assert network_for_chain_hash(h) is Network.BITCOIN


def test_every_network_has_a_chain_hash() -> None:
    assert set(CHAIN_HASHES.values()) == set(Network)
    for net in Network:
        assert network_for_chain_hash(chain_hash_for(net)) is net


def test_unknown_chain_hash() -> None:
    assert network_for_chain_hash(b"\x01" * 32) is None
