from collections import OrderedDict

from ape.utils import ZERO_ADDRESS


def _ask(question: str) -> None:
    """Aborts the process unless the operator answers yes."""
    answer = input(f"{question} Y/N? ")
    if answer.lower().strip() == "n":
        print("Aborting deployment!")
        exit(-1)


def _continue() -> None:
    _ask("Continue")


def _confirm_resolution(resolved_params: OrderedDict, contract_name: str) -> None:
    """Asks the user to confirm the resolved constructor parameters for a single contract."""
    if len(resolved_params) == 0:
        print(f"\n(i) No constructor parameters for {contract_name}")
        _ask(f"Deploy {contract_name}")
        return

    print(f"\nConstructor parameters for {contract_name}")
    zero_address_params = list()
    for name, resolved_value in resolved_params.items():
        print(f"\t{name}={resolved_value}")
        if resolved_value == ZERO_ADDRESS:
            zero_address_params.append(name)
    _ask(f"Deploy {contract_name}")
    if zero_address_params:
        _ask(f"Zero Address detected for {', '.join(zero_address_params)}; Continue?")
