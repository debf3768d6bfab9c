"""Exceptions raised while provisioning the Votes, Auction and Questions contracts."""


class DeploymentError(Exception):
    """Base exception for deployment-related errors."""


class UnsupportedNetwork(DeploymentError, ValueError):
    """Raised when a network has no row in the address table."""


class UnknownSymbol(DeploymentError, KeyError):
    """Raised when a symbol is not part of the address table."""


class UnknownContract(DeploymentError, ValueError):
    """Raised when a contract name does not resolve to a compiled contract."""


class ArgumentMismatch(DeploymentError, ValueError):
    """Raised when constructor or method arguments do not match the ABI."""


class UnresolvedAddress(ArgumentMismatch):
    """Raised when a contract reference has no override, deployment or registry entry."""


class DeploymentReverted(DeploymentError):
    """Raised when a deployment transaction was mined but construction reverted."""

    def __init__(self, contract_name: str, cause: Exception):
        self.contract_name = contract_name
        self.cause = cause
        super().__init__(f"{contract_name} deployment reverted: {cause}")


class SubmissionFailed(DeploymentError):
    """Raised when a transaction could not be submitted or confirmed."""

    def __init__(self, contract_name: str, cause: Exception):
        self.contract_name = contract_name
        self.cause = cause
        super().__init__(f"{contract_name} transaction failed before confirmation: {cause}")


class RoleGrantFailed(DeploymentError):
    """Raised when a role grant transaction fails."""


class VerificationFailed(DeploymentError):
    """Captured (never raised past the verifier) when explorer verification fails."""


class OrchestrationFailed(DeploymentError):
    """
    Raised by the orchestrator when a fatal stage halts the pipeline.
    The attached report lists every contract that is live on-chain.
    """

    def __init__(self, stage, contract_name: str, cause: Exception, report=None):
        self.stage = stage
        self.contract_name = contract_name
        self.cause = cause
        self.report = report
        stage_name = getattr(stage, "value", stage)
        super().__init__(f"Stage '{stage_name}' failed for {contract_name}: {cause}")
