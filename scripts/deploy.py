#!/usr/bin/python3

import click
from ape.cli import ConnectedProviderCommand, account_option, network_option

from flashvotes.cli import run_deployment
from flashvotes.options import (
    autosign_option,
    locations_option,
    params_filepath_option,
    verify_option,
    votes_address_option,
)


@click.command(cls=ConnectedProviderCommand)
@network_option(required=True)
@account_option()
@locations_option
@params_filepath_option
@votes_address_option
@verify_option
@autosign_option
def cli(network, account, locations, params_filepath, votes_address, verify, auto):
    """
    Deploys Votes, Auction and Questions, and grants the Auction MINTER_ROLE on Votes.

    ape run deploy --network ethereum:sepolia:infura --account <ALIAS>

    With --votes-address, Auction and Questions (and the role grant) use that
    Votes contract instead of the one deployed in this run.
    """
    run_deployment(
        account=account,
        locations=locations,
        params_filepath=params_filepath,
        votes_address=votes_address,
        verify=verify,
        autosign=auto,
    )


if __name__ == "__main__":
    cli()
