#!/usr/bin/python3

import click
from ape.cli import ConnectedProviderCommand, account_option, network_option

from flashvotes.constants import MINTER_ROLE, VOTES
from flashvotes.exceptions import RoleGrantFailed
from flashvotes.options import autosign_option
from flashvotes.params import Deployer
from flashvotes.types import ChecksumAddress
from flashvotes.utils import check_plugins, role_hash


@click.command(cls=ConnectedProviderCommand)
@network_option(required=True)
@account_option()
@click.option(
    "--votes-address",
    "-v",
    help="Votes contract to grant the role on",
    type=ChecksumAddress(),
    required=True,
)
@click.option(
    "--grant-address",
    "-g",
    help="Address to grant MINTER_ROLE to, typically the Auction",
    type=ChecksumAddress(),
    required=True,
)
@autosign_option
def cli(network, account, votes_address, grant_address, auto):
    """Grants MINTER_ROLE on an existing Votes contract."""
    check_plugins(verify=False)
    click.echo(f"Connected to {network.name} network.")
    deployer = Deployer(account=account, autosign=auto)
    try:
        deployer.grant_role(
            contract_name=VOTES,
            contract_address=votes_address,
            role=role_hash(MINTER_ROLE),
            grantee=grant_address,  # <- new minter
        )
    except RoleGrantFailed as e:
        raise click.ClickException(str(e))


if __name__ == "__main__":
    cli()
