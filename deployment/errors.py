"""
Deployment Errors
Failure kinds surfaced by the deployment flow
"""

from typing import Optional


class DeploymentError(Exception):
    """Base class for every failure of a single deployment attempt"""

    def __init__(self, message: str, contract_name: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.contract_name = contract_name

    def __str__(self) -> str:
        return self.message


class NoSignerAvailable(DeploymentError):
    """Network context has no usable signing credentials"""


class UnknownContract(DeploymentError):
    """No compiled artifact matches the requested contract name"""

    def __init__(self, contract_name: str, reason: Optional[str] = None):
        message = f"Unknown contract '{contract_name}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, contract_name)


class SubmissionRejected(DeploymentError):
    """Network refused the contract-creation transaction"""


class ConfirmationFailed(DeploymentError):
    """Transaction was sent but the contract never became live"""

    def __init__(
        self,
        message: str,
        contract_name: Optional[str] = None,
        tx_hash: Optional[str] = None
    ):
        super().__init__(message, contract_name)
        self.tx_hash = tx_hash
