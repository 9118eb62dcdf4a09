"""
Deployment Package
Resolves a signer and contract factory, deploys, and reports the outcome
"""

from .errors import (
    DeploymentError,
    NoSignerAvailable,
    UnknownContract,
    SubmissionRejected,
    ConfirmationFailed
)
from .models import DeploymentConfig, DeploymentResult, DeploymentState, DeployedContract
from .signer_resolver import SignerResolver, SigningIdentity
from .contract_manager import ContractFactory, ContractManager
from .executor import DeploymentExecutor
from .orchestrator import DeploymentOrchestrator
from .reporter import OutcomeReporter

__all__ = [
    'DeploymentError',
    'NoSignerAvailable',
    'UnknownContract',
    'SubmissionRejected',
    'ConfirmationFailed',
    'DeploymentConfig',
    'DeploymentResult',
    'DeploymentState',
    'DeployedContract',
    'SignerResolver',
    'SigningIdentity',
    'ContractFactory',
    'ContractManager',
    'DeploymentExecutor',
    'DeploymentOrchestrator',
    'OutcomeReporter'
]
