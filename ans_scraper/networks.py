"""
Supported networks and the chain-registry directory.
"""

from dataclasses import dataclass

from ans_scraper.exceptions import UnknownNetworkError


@dataclass(frozen=True)
class NetworkInfo:
    """Identity of a target network."""
    chain_id: str
    chain_name: str
    ans_prefix: str
    lcd_url: str
    is_testnet: bool = False


PHOENIX_1 = NetworkInfo(
    chain_id="phoenix-1",
    chain_name="terra2",
    ans_prefix="terra2",
    lcd_url="https://phoenix-lcd.terra.dev",
)

PISCO_1 = NetworkInfo(
    chain_id="pisco-1",
    chain_name="terra2",
    ans_prefix="terra2",
    lcd_url="https://pisco-lcd.terra.dev",
    is_testnet=True,
)

NETWORKS: dict[str, NetworkInfo] = {
    PHOENIX_1.chain_id: PHOENIX_1,
    PISCO_1.chain_id: PISCO_1,
}

# Chain-registry directory scanned when resolving IBC denoms. Order matters:
# the first chain whose list claims a base denom wins.
KNOWN_CHAINS: tuple[str, ...] = (
    "agoric",
    "akash",
    "axelar",
    "canto",
    "carbon",
    "chihuahua",
    "comdex",
    "cosmoshub",
    "crescent",
    "evmos",
    "gravitybridge",
    "injective",
    "juno",
    "kava",
    "kujira",
    "migaloo",
    "neutron",
    "noble",
    "osmosis",
    "persistence",
    "quicksilver",
    "secretnetwork",
    "sei",
    "sommelier",
    "stargaze",
    "stride",
    "terra",
    "terra2",
    "umee",
)


def parse_network(network_id: str) -> NetworkInfo:
    """
    Look up a network by chain id.

    Raises:
        UnknownNetworkError: If the chain id is not supported
    """
    try:
        return NETWORKS[network_id]
    except KeyError:
        raise UnknownNetworkError(
            message=f"Network {network_id!r} not supported",
            chain=network_id,
            supported_networks=sorted(NETWORKS),
        ) from None
