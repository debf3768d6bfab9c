from collections import OrderedDict
from enum import Enum
from typing import Dict, List, NamedTuple, Optional

import click
from eth_typing import ChecksumAddress

from flashvotes.constants import AUCTION, MINTER_ROLE, PIPELINE_CONTRACTS, QUESTIONS, VOTES
from flashvotes.exceptions import (
    DeploymentError,
    OrchestrationFailed,
    RoleGrantFailed,
    SubmissionFailed,
    UnknownContract,
)
from flashvotes.params import AddressBook, ConstructorParameters, Deployer, DeploymentResult
from flashvotes.registry import AddressRegistry
from flashvotes.utils import role_hash
from flashvotes.verify import VerificationResult, VerificationStatus, Verifier


class Stage(Enum):
    INIT = "init"
    DEPLOY_VOTES = "deploy-votes"
    DEPLOY_AUCTION = "deploy-auction"
    GRANT_ROLE = "grant-role"
    VERIFY_AUCTION = "verify-auction"
    DEPLOY_QUESTIONS = "deploy-questions"
    VERIFY_QUESTIONS = "verify-questions"
    DONE = "done"


DEPLOY_STAGES = {
    VOTES: Stage.DEPLOY_VOTES,
    AUCTION: Stage.DEPLOY_AUCTION,
    QUESTIONS: Stage.DEPLOY_QUESTIONS,
}

VERIFY_STAGES = {
    AUCTION: Stage.VERIFY_AUCTION,
    QUESTIONS: Stage.VERIFY_QUESTIONS,
}


class Outcome(Enum):
    SUCCESS = "success"
    PARTIAL = "partial"  # some contracts are live, a later fatal stage failed
    FAILED = "failed"


class ContractReport(NamedTuple):
    contract_name: str
    address: Optional[ChecksumAddress] = None
    deployed: bool = False
    verification: VerificationStatus = VerificationStatus.PENDING


class DeploymentReport:
    """One row per contract of the run: what is live on-chain and what is verified."""

    def __init__(self, network: str, contract_names: List[str]):
        self.network = network
        self.rows = OrderedDict((name, ContractReport(name)) for name in contract_names)
        self.stage = Stage.INIT
        self.failed_stage: Optional[Stage] = None
        self.error: Optional[Exception] = None

    def deployed(self, result: DeploymentResult) -> None:
        self.rows[result.contract_name] = self.rows[result.contract_name]._replace(
            address=result.address, deployed=True
        )

    def verified(self, result: VerificationResult) -> None:
        self.rows[result.contract_name] = self.rows[result.contract_name]._replace(
            verification=result.status
        )

    def fail(self, stage: Stage, error: Exception) -> None:
        self.failed_stage = stage
        self.error = error

    @property
    def live(self) -> Dict[str, ChecksumAddress]:
        """Contracts deployed on-chain in this run, whether or not the run succeeded."""
        return {row.contract_name: row.address for row in self.rows.values() if row.deployed}

    @property
    def outcome(self) -> Outcome:
        if self.failed_stage is None:
            return Outcome.SUCCESS
        return Outcome.PARTIAL if self.live else Outcome.FAILED

    def display(self) -> None:
        color = {Outcome.SUCCESS: "green", Outcome.PARTIAL: "yellow", Outcome.FAILED: "red"}
        click.secho(
            f"\nDeployment report ({self.network}): {self.outcome.value.upper()}",
            fg=color[self.outcome],
        )
        for row in self.rows.values():
            status = "deployed" if row.deployed else "not deployed"
            click.secho(
                f"    {row.contract_name:<10} {row.address or '-':<42} "
                f"{status:<12} verification: {row.verification.value}",
                fg="cyan" if row.deployed else None,
            )
        if self.failed_stage is not None:
            click.secho(f"    halted at stage '{self.failed_stage.value}'", fg="red")


class Orchestrator:
    """
    Deploys Votes, Auction and Questions in order on the registry's network,
    wiring Votes into the later constructors and granting the Auction
    MINTER_ROLE on Votes.

    Deployment and role grant failures are fatal and raise OrchestrationFailed
    (carrying the report of what is already live); verification failures are
    recorded and the run continues. The report of the latest run stays on
    `self.report`, also when the run is interrupted.
    """

    def __init__(
        self,
        deployer: Deployer,
        registry: AddressRegistry,
        parameters: ConstructorParameters,
        verifier: Verifier,
        overrides: Optional[Dict[str, ChecksumAddress]] = None,
        contract_names: Optional[List[str]] = None,
    ):
        contract_names = contract_names or list(PIPELINE_CONTRACTS)
        unknown = [name for name in contract_names if name not in PIPELINE_CONTRACTS]
        if unknown:
            raise UnknownContract(f"Unknown pipeline contract(s): {', '.join(unknown)}")

        self.deployer = deployer
        self.registry = registry
        self.parameters = parameters
        self.verifier = verifier
        self.overrides = dict(overrides or {})
        # pipeline order, whatever order they were selected in
        self.contract_names = [name for name in PIPELINE_CONTRACTS if name in contract_names]
        self.report: Optional[DeploymentReport] = None

    def run(self) -> DeploymentReport:
        report = DeploymentReport(network=self.registry.network, contract_names=self.contract_names)
        self.report = report
        book = AddressBook(registry=self.registry, overrides=self.overrides)

        try:
            self._preflight(report)
            for contract_name in self.contract_names:
                result = self._deploy(contract_name, book, report)
                if contract_name == AUCTION:
                    self._grant_minter_role(result, book, report)
                if contract_name in VERIFY_STAGES:
                    self._verify(result, report)
        except (KeyboardInterrupt, SystemExit) as e:
            # interrupted, or the operator declined a prompt
            report.fail(report.stage, e)
            raise

        report.stage = Stage.DONE
        return report

    def _abort(self, report: DeploymentReport, contract_name: str, error: DeploymentError):
        report.fail(report.stage, error)
        raise OrchestrationFailed(
            stage=report.stage, contract_name=contract_name, cause=error, report=report
        ) from error

    def _preflight(self, report: DeploymentReport) -> None:
        """Validates every selected constructor against its ABI before anything is deployed."""
        print(f"Validating deployments on {self.registry.network}...")
        book = AddressBook(
            registry=self.registry, overrides=self.overrides, placeholders=self.contract_names
        )
        for contract_name in self.contract_names:
            try:
                self.deployer.validate(self.parameters.get(contract_name), book)
            except DeploymentError as e:
                self._abort(report, contract_name, e)

    def _deploy(
        self, contract_name: str, book: AddressBook, report: DeploymentReport
    ) -> DeploymentResult:
        report.stage = DEPLOY_STAGES[contract_name]
        spec = self.parameters.get(contract_name)
        try:
            result = self.deployer.deploy(spec, book)
        except DeploymentError as e:
            self._abort(report, contract_name, e)
        except Exception as e:
            # non-ape transport errors, receipt timeouts
            self._abort(report, contract_name, SubmissionFailed(contract_name, e))

        book.record(result.contract_name, result.address)
        report.deployed(result)
        return result

    def _grant_minter_role(
        self, auction: DeploymentResult, book: AddressBook, report: DeploymentReport
    ) -> None:
        report.stage = Stage.GRANT_ROLE
        try:
            # the Votes instance the Auction was wired to, override included
            votes_address = book.address_of(VOTES)
            print(f"\nGranting {MINTER_ROLE} on {VOTES} to {AUCTION} at {auction.address}")
            self.deployer.grant_role(
                contract_name=VOTES,
                contract_address=votes_address,
                role=role_hash(MINTER_ROLE),
                grantee=auction.address,
            )
        except DeploymentError as e:
            self._abort(report, VOTES, e)
        except Exception as e:
            self._abort(report, VOTES, RoleGrantFailed(f"grantRole on {VOTES} failed: {e}"))

    def _verify(self, deployment: DeploymentResult, report: DeploymentReport) -> None:
        report.stage = VERIFY_STAGES[deployment.contract_name]
        result = self.verifier.verify(deployment)
        report.verified(result)
