from pathlib import Path
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional

from eth_typing import ChecksumAddress
from eth_utils import is_address, to_checksum_address

from flashvotes.constants import DEFAULT_PARAMS_FILEPATH, SUPPORTED_NETWORKS
from flashvotes.exceptions import UnknownSymbol, UnsupportedNetwork
from flashvotes.utils import _load_yaml

Symbol = str
NetworkId = str

# symbol -> network -> address (None when the symbol is absent on that network)
Locations = Mapping[Symbol, Mapping[NetworkId, Optional[ChecksumAddress]]]


def _normalize_address(symbol: Symbol, network: NetworkId, value) -> Optional[ChecksumAddress]:
    """Empty and null entries are absent; anything else must be a valid address."""
    if value is None or value == "":
        return None
    if not is_address(value):
        raise ValueError(f"Invalid address '{value}' for {symbol} on {network}.")
    return to_checksum_address(value)


def parse_locations(raw_locations: Dict) -> Locations:
    """Validates and normalizes an address table loaded from a params file."""
    if not isinstance(raw_locations, dict) or not raw_locations:
        raise ValueError("Malformed 'locations' table in params file.")

    locations = dict()
    for symbol, addresses in raw_locations.items():
        if not isinstance(addresses, dict):
            raise ValueError(f"Malformed 'locations' entry for {symbol}.")
        unknown = set(addresses) - set(SUPPORTED_NETWORKS)
        if unknown:
            raise UnsupportedNetwork(
                f"Address table for {symbol} lists unsupported network(s): "
                f"{', '.join(sorted(unknown))}"
            )
        # a network missing from a row is as absent as an explicit null
        locations[symbol] = MappingProxyType(
            {
                network: _normalize_address(symbol, network, addresses.get(network))
                for network in SUPPORTED_NETWORKS
            }
        )
    return MappingProxyType(locations)


def load_locations(filepath: Path = DEFAULT_PARAMS_FILEPATH) -> Locations:
    """Loads the address table from the 'locations' section of a params file."""
    config = _load_yaml(filepath)
    return parse_locations(config.get("locations"))


def _check_network(network: NetworkId) -> None:
    if network not in SUPPORTED_NETWORKS:
        raise UnsupportedNetwork(
            f"Unsupported network '{network}'; "
            f"expected one of {', '.join(SUPPORTED_NETWORKS)}."
        )


def resolve(symbol: Symbol, network: NetworkId, locations: Locations) -> Optional[ChecksumAddress]:
    """
    Returns the address of a symbol on a network, or None when the symbol
    is not deployed there. Unknown networks and symbols raise.
    """
    _check_network(network)
    try:
        row = locations[symbol]
    except KeyError:
        raise UnknownSymbol(f"'{symbol}' is not in the address table.")
    return row[network]


class AddressRegistry:
    """Static address table bound to the single network of one orchestration run."""

    def __init__(self, network: NetworkId, locations: Locations):
        _check_network(network)
        self._network = network
        self._locations = locations

    @classmethod
    def from_yaml(cls, network: NetworkId, filepath: Path = DEFAULT_PARAMS_FILEPATH):
        return cls(network=network, locations=load_locations(filepath))

    @property
    def network(self) -> NetworkId:
        return self._network

    @property
    def symbols(self) -> List[Symbol]:
        return list(self._locations)

    def __contains__(self, symbol: Symbol) -> bool:
        return symbol in self._locations

    def resolve(self, symbol: Symbol) -> Optional[ChecksumAddress]:
        return resolve(symbol, self._network, self._locations)

    def __repr__(self) -> str:
        return f"AddressRegistry(network={self._network!r}, symbols={self.symbols!r})"
