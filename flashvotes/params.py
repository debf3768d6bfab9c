import typing
from abc import ABC, abstractmethod
from collections import OrderedDict
from pathlib import Path
from typing import Any, Callable, Dict, List, NamedTuple, Optional

from ape.api import AccountAPI, ReceiptAPI
from ape.cli.choices import select_account
from ape.contracts.base import ContractContainer, ContractTransactionHandler
from ape.exceptions import ApeException, ContractLogicError
from ape.utils import ZERO_ADDRESS
from eth_typing import ChecksumAddress
from eth_utils import to_checksum_address
from web3.auto import w3

from flashvotes.confirm import _confirm_resolution, _continue
from flashvotes.constants import DEFAULT_PARAMS_FILEPATH
from flashvotes.exceptions import (
    ArgumentMismatch,
    DeploymentReverted,
    RoleGrantFailed,
    SubmissionFailed,
    UnresolvedAddress,
)
from flashvotes.registry import AddressRegistry
from flashvotes.utils import _load_yaml, get_contract_container

CONTRACT_CONSTRUCTOR_PARAMETER_KEY = "constructor"


class AddressBook:
    """
    Addresses known to a single orchestration run, keyed by contract name.

    A contract reference resolves to, in order: an explicit override, the
    address deployed earlier in this run, the registry entry for the active
    network. Placeholder contracts (still to be deployed, used for pre-flight
    validation) resolve to the zero address until they are recorded.
    """

    def __init__(
        self,
        registry: AddressRegistry,
        overrides: Optional[Dict[str, ChecksumAddress]] = None,
        placeholders: Optional[typing.Iterable[str]] = None,
    ):
        self.registry = registry
        self.overrides = {
            name: to_checksum_address(address) for name, address in (overrides or {}).items()
        }
        self.placeholders = set(placeholders or ())
        self._deployed = OrderedDict()

    def record(self, contract_name: str, address: ChecksumAddress) -> None:
        self._deployed[contract_name] = address

    @property
    def deployed(self) -> Dict[str, ChecksumAddress]:
        return dict(self._deployed)

    def registry_address(self, symbol: str) -> ChecksumAddress:
        address = self.registry.resolve(symbol)
        if address is None:
            raise UnresolvedAddress(
                f"{symbol} has no address on {self.registry.network}."
            )
        return address

    def address_of(self, contract_name: str) -> ChecksumAddress:
        if contract_name in self.overrides:
            return self.overrides[contract_name]
        if contract_name in self._deployed:
            return self._deployed[contract_name]
        if contract_name in self.placeholders:
            return ZERO_ADDRESS
        if contract_name in self.registry:
            return self.registry_address(contract_name)
        raise UnresolvedAddress(
            f"{contract_name} was not deployed in this run and has no override or "
            f"registry address on {self.registry.network}."
        )


class VariableContext:
    def __init__(
        self,
        contract_names: List[str],
        contract_name: str,
        constants: typing.Dict[str, Any] = None,
        symbols: List[str] = None,
    ):
        self.contract_names = contract_names or list()
        self.contract_name = contract_name
        self.constants = constants or dict()
        self.symbols = symbols or list()


# Variables


class Variable(ABC):
    VARIABLE_PREFIX = "$"

    @abstractmethod
    def resolve(self, book: AddressBook) -> Any:
        raise NotImplementedError

    @classmethod
    def is_variable(cls, param: Any) -> bool:
        """Returns True if the param is a variable."""
        result = isinstance(param, str) and param.startswith(cls.VARIABLE_PREFIX)
        return result


class Constant(Variable):
    def __init__(self, constant_name: str, context: VariableContext):
        try:
            self.constant_value = context.constants[constant_name]
        except KeyError:
            raise ConstructorParameters.Invalid(
                f"Constant '{constant_name}' not found in deployment file."
            )

    @classmethod
    def is_constant(cls, value: str) -> bool:
        """Returns True if the variable is a deployment constant."""
        return value.isupper()

    def resolve(self, book: AddressBook) -> Any:
        return self.constant_value


class RegistryAddress(Variable):
    """Address of a pre-existing contract taken from the address table."""

    def __init__(self, symbol: str):
        self.symbol = symbol

    def resolve(self, book: AddressBook) -> ChecksumAddress:
        return book.registry_address(self.symbol)


class ContractAddress(Variable):
    """Forward reference to the address of another contract in the pipeline."""

    def __init__(self, contract_name: str, context: VariableContext):
        if contract_name not in context.contract_names:
            raise ConstructorParameters.Invalid(f"Contract name {contract_name} not found")

        position = context.contract_names.index(contract_name)
        if position >= context.contract_names.index(context.contract_name):
            raise ConstructorParameters.Invalid(
                f"{context.contract_name} references {contract_name}, "
                f"which must be listed before it."
            )
        self.contract_name = contract_name

    def resolve(self, book: AddressBook) -> ChecksumAddress:
        return book.address_of(self.contract_name)


def _resolve_param(value: Any, book: AddressBook) -> Any:
    """Resolves a single parameter value or a list of parameter values."""
    if isinstance(value, list):
        return [_resolve_param(v, book) for v in value]

    if isinstance(value, Variable):
        return value.resolve(book)

    return value  # literally a value


def _resolve_params(parameters: OrderedDict, book: AddressBook) -> OrderedDict:
    resolved_parameters = OrderedDict()
    for name, value in parameters.items():
        resolved_parameters[name] = _resolve_param(value, book)

    return resolved_parameters


def _variable_from_value(variable: str, context: VariableContext) -> Variable:
    variable = variable[len(Variable.VARIABLE_PREFIX) :]
    if variable in context.contract_names:
        return ContractAddress(variable, context)
    elif variable in context.symbols:
        return RegistryAddress(variable)
    elif Constant.is_constant(variable):
        return Constant(variable, context)
    raise ConstructorParameters.Invalid(f"Variable ${variable} is not resolvable")


def _process_raw_value(value: Any, variable_context: VariableContext) -> Any:
    if isinstance(value, list):
        return [_process_raw_value(v, variable_context) for v in value]

    if Variable.is_variable(value):
        value = _variable_from_value(value, variable_context)

    return value


def _process_raw_values(values: Dict, variable_context: VariableContext) -> OrderedDict:
    processed_parameters = OrderedDict()
    for name, value in values.items():
        processed_parameters[name] = _process_raw_value(value, variable_context)

    return processed_parameters


def _contract_references(value: Any) -> typing.Set[str]:
    if isinstance(value, list):
        references = set()
        for v in value:
            references |= _contract_references(v)
        return references
    if isinstance(value, ContractAddress):
        return {value.contract_name}
    return set()


def _get_contract_names(config: typing.Dict) -> List[str]:
    contract_names = list()
    for contract_info in config["contracts"]:
        if isinstance(contract_info, str):
            contract_names.append(contract_info)
        elif isinstance(contract_info, dict):
            contract_names.extend(list(contract_info.keys()))
        else:
            raise ConstructorParameters.Invalid("Malformed constructor parameters YAML.")

    return contract_names


def _validate_method_args(
    method_abis: List[Any], args: typing.Sequence[Any]
) -> typing.Dict[str, Any]:
    """Validates the transaction arguments against the function ABI."""
    if len(method_abis) == 0:
        raise ArgumentMismatch("No method abis provided for validation of args")

    abis_matching_args_length = [abi for abi in method_abis if len(abi.inputs) == len(args)]
    for abi in abis_matching_args_length:
        named_args = {}
        for arg, abi_input in zip(args, abi.inputs):
            if not w3.is_encodable(abi_input.type, arg):
                break
            named_args[abi_input.name] = arg
        else:
            return named_args
    raise ArgumentMismatch(
        f"Could not find ABI for '{method_abis[0].name}' with {len(args)} arg(s) and given type(s)"
    )


def _validate_constructor_abi_inputs(
    contract_name: str,
    abi_inputs: List[Any],
    resolved_parameters: OrderedDict,
) -> None:
    """Validates the constructor parameters against the constructor ABI."""
    if len(resolved_parameters) != len(abi_inputs):
        raise ArgumentMismatch(
            f"Constructor parameters length mismatch - "
            f"{contract_name} ABI requires {len(abi_inputs)}, Got {len(resolved_parameters)}."
        )
    if not abi_inputs:
        return  # no constructor parameters

    codex = enumerate(zip(abi_inputs, resolved_parameters.items()), start=0)
    for position, (abi_input, resolved_input) in codex:
        name, value = resolved_input
        # validate name
        if abi_input.name != name:
            raise ArgumentMismatch(
                f"{contract_name} constructor parameter '{name}' at position {position} does not "
                f"match the expected ABI name '{abi_input.name}'."
            )

        # validate value type
        if not w3.is_encodable(abi_input.type, value):
            raise ArgumentMismatch(
                f"Constructor param name '{name}' at position {position} has a value '{value}' "
                f"whose type does not match expected ABI type '{abi_input.type}'"
            )


class DeploymentSpec(NamedTuple):
    """A contract to deploy and its (possibly unresolved) constructor parameters."""

    contract_name: str
    constructor_params: OrderedDict

    @property
    def depends_on(self) -> typing.Set[str]:
        """Names of the pipeline contracts whose addresses this deployment needs."""
        return _contract_references(list(self.constructor_params.values()))

    def resolve(self, book: AddressBook) -> OrderedDict:
        return _resolve_params(self.constructor_params, book)


class DeploymentResult(NamedTuple):
    """A confirmed deployment and the constructor parameters it was created with."""

    contract_name: str
    address: ChecksumAddress
    constructor_params: OrderedDict

    @property
    def constructor_args(self) -> typing.Tuple[Any, ...]:
        return tuple(self.constructor_params.values())


class ConstructorParameters:
    """Represents the constructor parameters for a set of contracts."""

    class Invalid(ArgumentMismatch):
        """Raised when the constructor parameters are invalid"""

    def __init__(self, specs: OrderedDict, constants: Optional[Dict[str, Any]] = None):
        self.specs = specs
        self.constants = constants or dict()

    @classmethod
    def from_config(cls, config: typing.Dict) -> "ConstructorParameters":
        """Loads the constructor parameters from a parsed params file."""
        print("Processing contract constructor parameters...")
        validate_config(config)
        contract_names = _get_contract_names(config)
        constants = config.get("constants") or dict()
        symbols = list(config.get("locations") or dict())

        specs = OrderedDict()
        for contract_info in config["contracts"]:
            if isinstance(contract_info, str):
                contract_name, contract_data = contract_info, dict()
            elif isinstance(contract_info, dict) and len(contract_info) == 1:
                contract_name = list(contract_info.keys())[0]  # only one entry
                contract_data = contract_info[contract_name] or dict()
            else:
                raise cls.Invalid("Malformed constructor parameters YAML.")

            context = VariableContext(
                contract_names=contract_names,
                contract_name=contract_name,
                constants=constants,
                symbols=symbols,
            )
            parameter_values = cls._process_parameters(contract_data, context)
            specs[contract_name] = DeploymentSpec(contract_name, parameter_values)

        return cls(specs=specs, constants=constants)

    @classmethod
    def from_yaml(cls, filepath: Path = DEFAULT_PARAMS_FILEPATH) -> "ConstructorParameters":
        return cls.from_config(_load_yaml(filepath))

    @classmethod
    def _process_parameters(cls, contract_data, context: VariableContext) -> OrderedDict:
        if not isinstance(contract_data, dict):
            raise cls.Invalid(f"Malformed constructor parameter config for {context.contract_name}.")
        raw_values = contract_data.get(CONTRACT_CONSTRUCTOR_PARAMETER_KEY) or dict()
        if not isinstance(raw_values, dict):
            raise cls.Invalid(f"Malformed constructor parameter config for {context.contract_name}.")
        return _process_raw_values(raw_values, context)

    @property
    def contract_names(self) -> List[str]:
        return list(self.specs)

    def get(self, contract_name: str) -> DeploymentSpec:
        try:
            return self.specs[contract_name]
        except KeyError:
            raise self.Invalid(f"No deployment parameters for {contract_name}.")

    def resolve(self, contract_name: str, book: AddressBook) -> OrderedDict:
        """Resolves the constructor parameters for a single contract."""
        return self.get(contract_name).resolve(book)


def validate_config(config: typing.Dict) -> None:
    print("Validating parameters YAML...")
    if not isinstance(config, dict):
        raise ConstructorParameters.Invalid("Malformed parameters YAML.")
    if not config.get("contracts"):
        raise ConstructorParameters.Invalid("Constructor parameters file missing 'contracts' field.")
    if not config.get("locations"):
        raise ConstructorParameters.Invalid("Constructor parameters file missing 'locations' field.")


class Transactor:
    """
    Represents an ape account plus validated/annotated transaction execution.
    """

    def __init__(self, account: typing.Optional[AccountAPI] = None, autosign: bool = False):
        if account is None:
            self._account = select_account()
        else:
            self._account = account
        if autosign:
            print("WARNING: Autosign is enabled. Transactions will be signed automatically.")
        self._autosign = autosign
        self._account.set_autosign(autosign)

    def get_account(self) -> AccountAPI:
        """Returns the transactor account."""
        return self._account

    def transact(self, method: ContractTransactionHandler, *args) -> ReceiptAPI:
        named_args = _validate_method_args(method_abis=method.abis, args=args)
        base_message = (
            f"\nTransacting {method.contract.contract_type.name}"
            f"[{method.contract.address[:10]}].{method}"
        )
        if named_args:
            pretty_args = "\n\t".join(f"{k}={v}" for k, v in named_args.items())
            message = f"{base_message} with arguments:\n\t{pretty_args}"
        else:
            message = f"{base_message} with no arguments"
        print(message)
        if not self._autosign:
            _continue()

        return method(*args, sender=self._account)


class Deployer(Transactor):
    """
    Deploys single contracts from an ape account: resolves and validates
    constructor parameters, submits, and waits for the receipt.
    Every call deploys a new instance.
    """

    def __init__(
        self,
        account: typing.Optional[AccountAPI] = None,
        autosign: bool = False,
        get_container: Callable[[str], ContractContainer] = get_contract_container,
    ):
        super().__init__(account, autosign)
        self._get_container = get_container

    def validate(self, spec: DeploymentSpec, book: AddressBook) -> None:
        """Checks a deployment's parameters against the constructor ABI without deploying."""
        container = self._get_container(spec.contract_name)
        _validate_constructor_abi_inputs(
            contract_name=spec.contract_name,
            abi_inputs=container.constructor.abi.inputs,
            resolved_parameters=spec.resolve(book),
        )

    def deploy(self, spec: DeploymentSpec, book: AddressBook) -> DeploymentResult:
        contract_name = spec.contract_name
        container = self._get_container(contract_name)
        resolved_params = spec.resolve(book)
        _validate_constructor_abi_inputs(
            contract_name=contract_name,
            abi_inputs=container.constructor.abi.inputs,
            resolved_parameters=resolved_params,
        )
        if not self._autosign:
            _confirm_resolution(resolved_params, contract_name)

        print(f"\nDeploying {contract_name}...")
        try:
            instance = self._account.deploy(container, *resolved_params.values(), publish=False)
        except ContractLogicError as e:
            raise DeploymentReverted(contract_name, e) from e
        except ApeException as e:
            raise SubmissionFailed(contract_name, e) from e

        address = to_checksum_address(instance.address)
        print(f"'{contract_name}' deployed to: {address}")
        return DeploymentResult(
            contract_name=contract_name,
            address=address,
            constructor_params=resolved_params,
        )

    def grant_role(
        self,
        contract_name: str,
        contract_address: ChecksumAddress,
        role: bytes,
        grantee: ChecksumAddress,
    ) -> ReceiptAPI:
        """Grants an access-control role on a deployed contract."""
        container = self._get_container(contract_name)
        try:
            instance = container.at(contract_address)
            return self.transact(instance.grantRole, role, grantee)
        except ApeException as e:
            raise RoleGrantFailed(
                f"grantRole on {contract_name} at {contract_address} failed: {e}"
            ) from e
