from enum import Enum
from typing import Any, NamedTuple, Optional

import click
from ape import networks
from ape.api import ExplorerAPI

from flashvotes.exceptions import VerificationFailed
from flashvotes.params import DeploymentResult


class VerificationStatus(Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    FAILED = "failed"


class VerificationResult(NamedTuple):
    contract_name: str
    address: str
    status: VerificationStatus
    error: Optional[VerificationFailed] = None

    @property
    def ok(self) -> bool:
        return self.status is VerificationStatus.VERIFIED


class Verifier:
    """
    Publishes deployed contract sources to a block explorer.

    Verification is best-effort: every outcome, including a service failure,
    is returned as a VerificationResult and never raised.
    """

    def __init__(self, explorer: Optional[ExplorerAPI], enabled: bool = True):
        self.explorer = explorer
        self.enabled = enabled and explorer is not None

    @classmethod
    def from_provider(cls, enabled: bool = True) -> "Verifier":
        return cls(explorer=networks.provider.network.explorer, enabled=enabled)

    def verify(self, deployment: DeploymentResult) -> VerificationResult:
        if not self.enabled:
            return VerificationResult(
                contract_name=deployment.contract_name,
                address=deployment.address,
                status=VerificationStatus.PENDING,
            )

        print(f"(i) Verifying {deployment.contract_name}...")
        try:
            # the explorer recovers constructor arguments from the creation transaction
            self.explorer.publish_contract(deployment.address)
        except Exception as e:
            error = VerificationFailed(
                f"Verification of {deployment.contract_name} at {deployment.address} "
                f"with arguments {_format_args(deployment.constructor_args)} failed: {e}"
            )
            error.__cause__ = e
            click.secho(f"WARNING: {error}", fg="yellow", err=True)
            return VerificationResult(
                contract_name=deployment.contract_name,
                address=deployment.address,
                status=VerificationStatus.FAILED,
                error=error,
            )

        return VerificationResult(
            contract_name=deployment.contract_name,
            address=deployment.address,
            status=VerificationStatus.VERIFIED,
        )


def _format_args(args: Any) -> str:
    return "[" + ", ".join(str(arg) for arg in args) + "]"
