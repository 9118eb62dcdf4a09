"""
Deployment Executor
Submits the contract-creation transaction and waits until the contract is live
"""

import asyncio
from typing import Dict, Optional, Sequence
from web3 import Web3
from web3.exceptions import TransactionNotFound, Web3Exception
from loguru import logger

from blockchain.transaction_builder import TransactionBuilder
from .contract_manager import ContractFactory
from .errors import ConfirmationFailed, SubmissionRejected
from .models import DeployedContract, DeploymentState


# Errors web3 / eth_account raise for node rejections, bad input and transport failures
RPC_ERRORS = (ValueError, OSError, Web3Exception)


class DeploymentExecutor:
    """
    Runs a single deployment attempt

    SUBMITTING -> PENDING -> CONFIRMED, or FAILED from either of the first
    two. There is no retry: a rejected or unconfirmed deployment is final.

    Receipt polls are blocking HTTP calls that the confirmation timeout cannot
    interrupt, so a stalled poll can overrun it by up to the provider's
    request timeout (see NetworkContext.connect).
    """

    def __init__(
        self,
        w3: Web3,
        tx_builder: TransactionBuilder,
        confirmation_timeout: Optional[float] = 300,
        poll_interval: float = 2.0
    ):
        """
        Initialize Deployment Executor

        Args:
            w3: Web3 instance
            tx_builder: Builds the deployment transaction
            confirmation_timeout: Seconds to wait for the receipt (None = forever)
            poll_interval: Seconds between receipt polls
        """
        self.w3 = w3
        self.tx_builder = tx_builder
        self.confirmation_timeout = confirmation_timeout
        self.poll_interval = poll_interval

        self.state: Optional[DeploymentState] = None

    async def deploy(self, factory: ContractFactory, constructor_args: Sequence = ()) -> DeployedContract:
        """
        Deploy a contract and wait for it to be live

        Args:
            factory: Contract factory bound to the deployer
            constructor_args: Positional constructor arguments

        Returns:
            DeployedContract with the checksummed address
        """
        name = factory.contract_name

        self._transition(DeploymentState.SUBMITTING, name)
        tx_hash = self._submit(factory, constructor_args)
        tx_hex = Web3.to_hex(tx_hash)

        self._transition(DeploymentState.PENDING, name)
        logger.info(f"Transaction sent: {tx_hex}")
        logger.info("Waiting for confirmation...")

        try:
            receipt = await asyncio.wait_for(
                self._wait_for_receipt(tx_hash),
                timeout=self.confirmation_timeout
            )
        except asyncio.TimeoutError:
            raise self._confirmation_failed(
                f"{name} deployment not confirmed within {self.confirmation_timeout}s",
                name, tx_hex
            )
        except RPC_ERRORS as e:
            raise self._confirmation_failed(
                f"{name} deployment confirmation failed: {e}", name, tx_hex
            ) from e

        address = self._verify_receipt(receipt, name, tx_hex)

        self._transition(DeploymentState.CONFIRMED, name)
        logger.success(f"Gas used: {receipt.get('gasUsed')}")

        return DeployedContract(
            contract_name=name,
            address=address,
            tx_hash=tx_hex,
            block_number=receipt.get('blockNumber'),
            gas_used=receipt.get('gasUsed')
        )

    def _submit(self, factory: ContractFactory, constructor_args: Sequence) -> bytes:
        """Build, sign and send; any node-side refusal becomes SubmissionRejected"""
        signer = factory.signer

        try:
            transaction = factory.get_deploy_transaction(self.tx_builder, constructor_args)

            if signer.is_local:
                logger.info("Signing transaction...")
                signed_tx = signer.sign_transaction(transaction)
                logger.info("Sending deployment transaction...")
                return self.w3.eth.send_raw_transaction(signed_tx.raw_transaction)

            logger.info("Sending deployment transaction via node account...")
            return self.w3.eth.send_transaction(transaction)

        except RPC_ERRORS as e:
            self._transition(DeploymentState.FAILED, factory.contract_name)
            raise SubmissionRejected(
                f"{factory.contract_name} deployment rejected: {e}",
                factory.contract_name
            ) from e

    async def _wait_for_receipt(self, tx_hash: bytes) -> Dict:
        while True:
            try:
                receipt = self.w3.eth.get_transaction_receipt(tx_hash)
            except TransactionNotFound:
                receipt = None

            if receipt is not None:
                return receipt

            await asyncio.sleep(self.poll_interval)

    def _verify_receipt(self, receipt: Dict, name: str, tx_hex: str) -> str:
        """Mined is not enough: the transaction must succeed and leave code behind"""
        if receipt.get('status') != 1:
            raise self._confirmation_failed(
                f"{name} deployment reverted in block {receipt.get('blockNumber')}",
                name, tx_hex
            )

        contract_address = receipt.get('contractAddress')
        if not contract_address:
            raise self._confirmation_failed(
                f"{name} deployment receipt has no contract address", name, tx_hex
            )

        address = Web3.to_checksum_address(contract_address)

        try:
            code = self.w3.eth.get_code(address)
        except RPC_ERRORS as e:
            raise self._confirmation_failed(
                f"Could not read code at {address}: {e}", name, tx_hex
            ) from e

        if not code:
            raise self._confirmation_failed(
                f"No contract code at {address} after confirmation", name, tx_hex
            )

        return address

    def _confirmation_failed(self, message: str, name: str, tx_hex: str) -> ConfirmationFailed:
        self._transition(DeploymentState.FAILED, name)
        logger.error(f"Transaction hash: {tx_hex}")
        return ConfirmationFailed(message, name, tx_hex)

    def _transition(self, state: DeploymentState, name: str):
        logger.debug(f"{name}: {self.state.value if self.state else 'start'} -> {state.value}")
        self.state = state
