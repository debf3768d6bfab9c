#!/usr/bin/python3

import click
from ape.cli import ConnectedProviderCommand, account_option, network_option

from flashvotes.cli import run_deployment
from flashvotes.constants import VOTES
from flashvotes.options import autosign_option, locations_option, params_filepath_option


@click.command(cls=ConnectedProviderCommand)
@network_option(required=True)
@account_option()
@locations_option
@params_filepath_option
@autosign_option
def cli(network, account, locations, params_filepath, auto):
    """Deploys a standalone Votes contract."""
    run_deployment(
        account=account,
        contract_names=[VOTES],
        locations=locations,
        params_filepath=params_filepath,
        verify=False,
        autosign=auto,
    )


if __name__ == "__main__":
    cli()
