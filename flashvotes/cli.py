from pathlib import Path
from typing import List, Optional

import click
from ape import networks
from ape.api import AccountAPI
from eth_typing import ChecksumAddress

from flashvotes.constants import DEFAULT_PARAMS_FILEPATH, VOTES
from flashvotes.exceptions import DeploymentError, OrchestrationFailed
from flashvotes.networks import active_network_id, is_local_network
from flashvotes.orchestrator import DeploymentReport, Orchestrator
from flashvotes.params import ConstructorParameters, Deployer
from flashvotes.registry import AddressRegistry
from flashvotes.utils import check_plugins
from flashvotes.verify import Verifier


def _print_deployment_info(deployer: Deployer, network_id: str, params_filepath: Path, verify: bool):
    print(
        f"Account: {deployer.get_account().address}",
        f"Config: {params_filepath}",
        f"Locations: {network_id}",
        f"Verify: {verify}",
        f"Ecosystem: {networks.provider.network.ecosystem.name}",
        f"Network: {networks.provider.network.name}",
        f"Chain ID: {networks.provider.network.chain_id}",
        sep="\n",
    )


def run_deployment(
    account: AccountAPI,
    contract_names: Optional[List[str]] = None,
    locations: Optional[str] = None,
    params_filepath: Path = DEFAULT_PARAMS_FILEPATH,
    votes_address: Optional[ChecksumAddress] = None,
    verify: Optional[bool] = None,
    autosign: bool = False,
) -> DeploymentReport:
    """
    Runs the deployment pipeline on the connected network and prints the report.
    Exits with status 1 when a deployment or role grant stage fails.
    """
    if verify is None:
        verify = not is_local_network()

    try:
        check_plugins(verify=verify)
        network_id = locations or active_network_id()
        click.echo(f"{network_id} will be used for contract locations.")
        registry = AddressRegistry.from_yaml(network=network_id, filepath=params_filepath)
        parameters = ConstructorParameters.from_yaml(params_filepath)
    except DeploymentError as e:
        raise click.ClickException(str(e))

    deployer = Deployer(account=account, autosign=autosign)
    _print_deployment_info(deployer, network_id, params_filepath, verify)

    orchestrator = Orchestrator(
        deployer=deployer,
        registry=registry,
        parameters=parameters,
        verifier=Verifier.from_provider(enabled=verify),
        overrides={VOTES: votes_address} if votes_address else None,
        contract_names=contract_names,
    )
    try:
        report = orchestrator.run()
    except OrchestrationFailed as e:
        e.report.display()
        click.secho(f"\nDeployment failed: {e}", fg="red", err=True)
        raise click.exceptions.Exit(1)
    except (KeyboardInterrupt, SystemExit):
        orchestrator.report.display()
        raise

    report.display()
    return report
