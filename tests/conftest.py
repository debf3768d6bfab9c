import itertools
from types import SimpleNamespace

import pytest
from eth_utils import to_checksum_address

from flashvotes.constants import GOERLI
from flashvotes.exceptions import UnknownContract
from flashvotes.params import ConstructorParameters, Deployer
from flashvotes.registry import AddressRegistry, load_locations
from flashvotes.verify import Verifier

# Common constants
WETH_ON_GOERLI = "0xB4FBF271143F4FBf7B91A5ded31805e42b2208d6"
VOTES_ON_GOERLI = "0xA237b3cC022F70B45AFdbe62EdF9C12ac36932F8"
TREASURY = "0xa98f5FE3645aE950AB92f12E3b4322bA96DC5a22"
AUCTION_DURATION = 300
RESERVE_PRICE = 10000000000000
VOTES_URI = "ipfs://QmPMc4tcBsMqLRuCQtPmPe84bpSjrC3Ky7t3JWuHXYB4aS/0"
FLASH_VOTES_URI = "ipfs://QmPMc4tcBsMqLRuCQtPmPe84bpSjrC3Ky7t3JWuHXYB4aS/1"


def _abi(name, *inputs):
    return SimpleNamespace(
        name=name,
        inputs=[SimpleNamespace(name=arg_name, type=arg_type) for arg_name, arg_type in inputs],
    )


CONSTRUCTOR_ABIS = {
    "Votes": _abi("constructor"),
    "Auction": _abi(
        "constructor",
        ("_weth", "address"),
        ("_votes", "address"),
        ("_treasury", "address"),
        ("_duration", "uint256"),
        ("_reservePrice", "uint256"),
        ("_votesURI", "string"),
        ("_flashVotesURI", "string"),
    ),
    "Questions": _abi("constructor", ("_votesAddress", "address")),
}

GRANT_ROLE_ABI = _abi("grantRole", ("role", "bytes32"), ("account", "address"))


class FakeMethod:
    def __init__(self, contract, name, abis):
        self.contract = contract
        self.name = name
        self.abis = abis

    def __str__(self):
        return self.name

    def __call__(self, *args, sender=None):
        chain = self.contract.chain
        if self.name in chain.failures:
            raise chain.failures[self.name]
        chain.transactions.append(
            SimpleNamespace(
                contract_name=self.contract.contract_type.name,
                address=self.contract.address,
                method=self.name,
                args=args,
                sender=sender,
            )
        )
        return SimpleNamespace(txn_hash=f"0x{len(chain.transactions):064x}")


class FakeInstance:
    def __init__(self, container, address):
        self.chain = container.chain
        self.contract_type = container.contract_type
        self.address = address

    @property
    def grantRole(self):
        return FakeMethod(self, "grantRole", [GRANT_ROLE_ABI])


class FakeContainer:
    def __init__(self, name, chain):
        self.chain = chain
        self.contract_type = SimpleNamespace(name=name)
        self.constructor = SimpleNamespace(abi=CONSTRUCTOR_ABIS[name])

    def at(self, address):
        return FakeInstance(self, address)


class FakeChain:
    """In-memory stand-in for the compiled project and the chain it deploys to."""

    def __init__(self):
        self.deployments = list()
        self.transactions = list()
        self.failures = dict()  # contract or method name -> exception to raise
        self._addresses = itertools.count(0x1000)

    def get_container(self, name):
        if name not in CONSTRUCTOR_ABIS:
            raise UnknownContract(f"No contract found with name '{name}'.")
        return FakeContainer(name, self)

    def next_address(self):
        return to_checksum_address(f"0x{next(self._addresses):040x}")

    def deployments_of(self, name):
        return [d for d in self.deployments if d.contract_name == name]


class FakeAccount:
    def __init__(self, chain):
        self.chain = chain
        self.address = to_checksum_address("0x" + "de" * 20)
        self.autosign = None

    def set_autosign(self, enabled):
        self.autosign = enabled

    def deploy(self, container, *args, publish=False):
        name = container.contract_type.name
        if name in self.chain.failures:
            raise self.chain.failures[name]
        address = self.chain.next_address()
        self.chain.deployments.append(
            SimpleNamespace(contract_name=name, address=address, args=list(args), publish=publish)
        )
        return SimpleNamespace(address=address, contract_type=container.contract_type)


class FakeExplorer:
    def __init__(self):
        self.published = list()
        self.failures = dict()  # address -> exception to raise

    def publish_contract(self, address):
        if address in self.failures:
            raise self.failures[address]
        self.published.append(address)


# Fixtures
@pytest.fixture
def fake_chain():
    return FakeChain()


@pytest.fixture
def deployer_account(fake_chain):
    return FakeAccount(fake_chain)


@pytest.fixture
def deployer(deployer_account, fake_chain):
    return Deployer(
        account=deployer_account, autosign=True, get_container=fake_chain.get_container
    )


@pytest.fixture(scope="session")
def locations():
    return load_locations()


@pytest.fixture
def registry(locations):
    return AddressRegistry(network=GOERLI, locations=locations)


@pytest.fixture
def parameters():
    return ConstructorParameters.from_yaml()


@pytest.fixture
def explorer():
    return FakeExplorer()


@pytest.fixture
def verifier(explorer):
    return Verifier(explorer=explorer)
