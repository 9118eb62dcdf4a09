"""
Deployment Orchestrator
Signer -> factory -> executor, producing exactly one DeploymentResult per run
"""

from typing import Optional, Sequence
from web3 import Web3
from loguru import logger

from blockchain.transaction_builder import TransactionBuilder
from utils.gas_calculator import GasCalculator

from .contract_manager import ContractManager
from .errors import DeploymentError
from .executor import DeploymentExecutor
from .models import DeploymentConfig, DeploymentResult
from .signer_resolver import SignerResolver


class DeploymentOrchestrator:
    """
    Deploys contracts by name on one network

    Collaborators are built from the config unless passed in, so tests can
    swap in fakes for the node or any stage.
    """

    def __init__(
        self,
        config: DeploymentConfig,
        w3: Optional[Web3] = None,
        signer_resolver: Optional[SignerResolver] = None,
        contract_manager: Optional[ContractManager] = None,
        executor: Optional[DeploymentExecutor] = None
    ):
        """
        Initialize Deployment Orchestrator

        Args:
            config: Explicit deployment configuration
            w3: Web3 instance (None = connect to config.network)
        """
        self.config = config
        self.w3 = w3 if w3 is not None else config.network.connect()

        self.signer_resolver = signer_resolver or SignerResolver(self.w3)
        self.contract_manager = contract_manager or ContractManager(self.w3, config.artifacts_dir)

        if executor is None:
            gas_calculator = GasCalculator(
                self.w3,
                gas_limit_buffer=config.gas_limit_buffer,
                default_gas_limit=config.default_gas_limit
            )
            executor = DeploymentExecutor(
                self.w3,
                TransactionBuilder(self.w3, gas_calculator),
                confirmation_timeout=config.confirmation_timeout,
                poll_interval=config.poll_interval
            )
        self.executor = executor

    async def deploy(self, contract_name: str, constructor_args: Sequence = ()) -> DeploymentResult:
        """
        Deploy a contract by name

        Args:
            contract_name: Artifact name, e.g. "VaultETH"
            constructor_args: Positional constructor arguments

        Returns:
            DeploymentResult holding either the address or the error
        """
        logger.info(f"Deploying {contract_name} to {self.config.network.name}...")
        deployer = None

        try:
            signer = self.signer_resolver.resolve(self.config.network)
            deployer = signer.address

            factory = self.contract_manager.get_contract_factory(
                contract_name, signer, self.config.network
            )

            deployed = await self.executor.deploy(factory, constructor_args)

        except DeploymentError as e:
            if e.contract_name is None:
                e.contract_name = contract_name
            logger.debug(f"{contract_name} deployment failed with {type(e).__name__}")
            return DeploymentResult.failure(contract_name, e, deployer=deployer)

        return DeploymentResult.success(
            contract_name,
            deployed.address,
            tx_hash=deployed.tx_hash,
            deployer=deployer
        )
