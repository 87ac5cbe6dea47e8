"""
Network parameter tables.

Names follow the common bitcoin naming ("bitcoin" is mainnet). Address
encodings cannot tell the test networks apart, so an address contributes a
*compatible set* alongside its nominal network; see waila.inference.
"""

from __future__ import annotations

from enum import Enum


class Network(str, Enum):
    BITCOIN = "bitcoin"
    TESTNET = "testnet"
    TESTNET4 = "testnet4"
    SIGNET = "signet"
    REGTEST = "regtest"


# Address-level compatibility.
MAINNET_ONLY: frozenset[Network] = frozenset({Network.BITCOIN})
TESTNET_FAMILY: frozenset[Network] = frozenset({Network.TESTNET, Network.TESTNET4, Network.SIGNET})
BASE58_TEST_FAMILY: frozenset[Network] = TESTNET_FAMILY | {Network.REGTEST}
REGTEST_ONLY: frozenset[Network] = frozenset({Network.REGTEST})

# Segwit human-readable parts.
SEGWIT_HRP: dict[str, Network] = {
    "bc": Network.BITCOIN,
    "tb": Network.TESTNET,
    "bcrt": Network.REGTEST,
}

# BOLT11 currency prefixes.
BOLT11_CURRENCIES: dict[str, Network] = {
    "bcrt": Network.REGTEST,
    "tbs": Network.SIGNET,
    "bc": Network.BITCOIN,
    "tb": Network.TESTNET,
    "sb": Network.REGTEST,  # simnet, treated as regtest
}

# An invoice on `tb` may be paid on testnet3 or testnet4.
BOLT11_COMPATIBLE: dict[str, frozenset[Network]] = {
    "bcrt": REGTEST_ONLY,
    "tbs": frozenset({Network.SIGNET}),
    "bc": MAINNET_ONLY,
    "tb": frozenset({Network.TESTNET, Network.TESTNET4}),
    "sb": REGTEST_ONLY,
}

# Genesis block hashes as displayed by block explorers.
_GENESIS_DISPLAY: dict[Network, str] = {
    Network.BITCOIN: "000000000019d6689c085ae165831e934ff763ae46a2a6c172b3f1b60a8ce26f",
    Network.TESTNET: "000000000933ea01ad0ee984209779baaec3ced90fa3f408719526f8d77f4943",
    Network.TESTNET4: "00000000da84f2bafbbc53dee25a72ae507ff4914b867c565be350b0da8bf043",
    Network.SIGNET: "00000008819873e925422c1ff0f99f7cc9bbb232af63a077a480a3633bee1ef6",
    Network.REGTEST: "0f9188f13cb7b2c71f2a335e3a4fc328bf5beb436012afca590b1a11466e2206",
}

# BOLT12 carries chain hashes in internal (little-endian) byte order.
CHAIN_HASHES: dict[bytes, Network] = {
    bytes.fromhex(h)[::-1]: net for net, h in _GENESIS_DISPLAY.items()
}


def chain_hash_for(network: Network) -> bytes:
    return bytes.fromhex(_GENESIS_DISPLAY[network])[::-1]


def network_for_chain_hash(chain: bytes) -> Network | None:
    return CHAIN_HASHES.get(bytes(chain))


def parse_network(name: str) -> Network:
    """
    Map a network name to a Network.

    Accepts the enum values plus the aliases other tools use
    ("mainnet", "main", "testnet3").
    """
    if not isinstance(name, str):
        raise TypeError("network name must be a string")
    n = name.strip().lower()
    aliases = {"main": "bitcoin", "mainnet": "bitcoin", "testnet3": "testnet", "test": "testnet"}
    n = aliases.get(n, n)
    try:
        return Network(n)
    except ValueError:
        raise ValueError(f"Unknown network: {name!r}") from None
