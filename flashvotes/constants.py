from pathlib import Path

import flashvotes

#
# Filesystem
#

DEPLOYMENT_DIR = Path(flashvotes.__file__).parent
CONSTRUCTOR_PARAMS_DIR = DEPLOYMENT_DIR / "constructor_params"
DEFAULT_PARAMS_FILEPATH = CONSTRUCTOR_PARAMS_DIR / "flashvotes.yml"

#
# Networks (rows of the address table)
#

GOERLI = "goerli"
SEPOLIA = "sepolia"
OPTIMISM = "optimism"

SUPPORTED_NETWORKS = [GOERLI, SEPOLIA, OPTIMISM]

LOCAL_BLOCKCHAIN_ENVIRONMENTS = ["local"]

#
# Contracts
#

VOTES = "Votes"
AUCTION = "Auction"
QUESTIONS = "Questions"

# deployment order
PIPELINE_CONTRACTS = [VOTES, AUCTION, QUESTIONS]

WETH = "WETH"

MINTER_ROLE = "MINTER_ROLE"
