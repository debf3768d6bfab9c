from pathlib import Path

import click

from flashvotes.constants import DEFAULT_PARAMS_FILEPATH, SUPPORTED_NETWORKS
from flashvotes.types import ChecksumAddress

locations_option = click.option(
    "--locations",
    "-l",
    help="Address table network; inferred from the connected network when omitted.",
    type=click.Choice(SUPPORTED_NETWORKS),
    required=False,
)

params_filepath_option = click.option(
    "--params-filepath",
    "-p",
    help="Constructor parameters YAML.",
    type=click.Path(dir_okay=False, exists=True, path_type=Path),
    default=DEFAULT_PARAMS_FILEPATH,
    show_default=True,
)

votes_address_option = click.option(
    "--votes-address",
    "-v",
    help="Wire an existing Votes contract instead of the registry or freshly deployed one.",
    type=ChecksumAddress(),
    required=False,
)

verify_option = click.option(
    "--verify/--no-verify",
    help="Publish sources to the block explorer; defaults to on for live networks.",
    default=None,
)

autosign_option = click.option(
    "--auto",
    help="Automatically sign transactions.",
    is_flag=True,
)
