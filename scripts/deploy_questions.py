#!/usr/bin/python3

import click
from ape.cli import ConnectedProviderCommand, account_option, network_option

from flashvotes.cli import run_deployment
from flashvotes.constants import QUESTIONS
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
    Deploys Questions against an existing Votes contract.

    Votes is --votes-address when given, otherwise the address table entry.
    """
    run_deployment(
        account=account,
        contract_names=[QUESTIONS],
        locations=locations,
        params_filepath=params_filepath,
        votes_address=votes_address,
        verify=verify,
        autosign=auto,
    )


if __name__ == "__main__":
    cli()
