from ape import networks

from flashvotes.constants import LOCAL_BLOCKCHAIN_ENVIRONMENTS, OPTIMISM, SUPPORTED_NETWORKS
from flashvotes.exceptions import UnsupportedNetwork


def is_local_network() -> bool:
    return networks.provider.network.name in LOCAL_BLOCKCHAIN_ENVIRONMENTS


def network_id_from_choice(ecosystem_name: str, network_name: str) -> str:
    """
    Maps an ape ecosystem/network pair onto a row of the address table,
    e.g. ethereum:sepolia -> sepolia, optimism:mainnet -> optimism.
    """
    if ecosystem_name == OPTIMISM and network_name == "mainnet":
        return OPTIMISM
    if ecosystem_name == "ethereum" and network_name in SUPPORTED_NETWORKS:
        return network_name
    raise UnsupportedNetwork(
        f"No address table for {ecosystem_name}:{network_name}; "
        f"supported networks are {', '.join(SUPPORTED_NETWORKS)}."
    )


def active_network_id() -> str:
    """Returns the address table network of the connected ape provider."""
    network = networks.provider.network
    return network_id_from_choice(network.ecosystem.name, network.name)
