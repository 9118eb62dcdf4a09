"""
Deployment Models
Transient value objects passed between the deployment stages
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from blockchain.network_config import NetworkContext
from .errors import DeploymentError


DEFAULT_CONFIRMATION_TIMEOUT = 300
DEFAULT_POLL_INTERVAL = 2.0
DEFAULT_GAS_LIMIT = 3000000
DEFAULT_GAS_LIMIT_BUFFER = 1.2


class DeploymentState(Enum):
    SUBMITTING = "submitting"
    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"


@dataclass(frozen=True)
class DeploymentConfig:
    """
    Everything one deployment run needs, passed in explicitly

    confirmation_timeout of None waits for the receipt indefinitely.
    """
    network: NetworkContext
    artifacts_dir: Path = Path("artifacts")
    confirmation_timeout: Optional[float] = DEFAULT_CONFIRMATION_TIMEOUT
    poll_interval: float = DEFAULT_POLL_INTERVAL
    gas_limit_buffer: float = DEFAULT_GAS_LIMIT_BUFFER
    default_gas_limit: int = DEFAULT_GAS_LIMIT


@dataclass(frozen=True)
class DeploymentResult:
    """Outcome of one deployment: an address or an error, never both"""
    contract_name: str
    address: Optional[str] = None
    error: Optional[DeploymentError] = None
    tx_hash: Optional[str] = None
    deployer: Optional[str] = None

    def __post_init__(self):
        if (self.address is None) == (self.error is None):
            raise ValueError("DeploymentResult needs exactly one of address or error")

    @classmethod
    def success(
        cls,
        contract_name: str,
        address: str,
        tx_hash: Optional[str] = None,
        deployer: Optional[str] = None
    ) -> "DeploymentResult":
        return cls(contract_name, address=address, tx_hash=tx_hash, deployer=deployer)

    @classmethod
    def failure(
        cls,
        contract_name: str,
        error: DeploymentError,
        deployer: Optional[str] = None
    ) -> "DeploymentResult":
        return cls(
            contract_name,
            error=error,
            tx_hash=getattr(error, 'tx_hash', None),
            deployer=deployer
        )

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class DeployedContract:
    """Confirmed deployment as observed on-chain"""
    contract_name: str
    address: str
    tx_hash: str
    block_number: Optional[int] = None
    gas_used: Optional[int] = None
