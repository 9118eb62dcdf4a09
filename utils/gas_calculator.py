"""
Gas Calculator
Gas price and gas limit selection for contract-creation transactions
"""

from decimal import Decimal
from typing import Optional
from web3 import Web3
from loguru import logger


class GasCalculator:
    """
    Picks gas settings for deployments

    Networks with a configured gas price use it as-is, others take the node's
    current quote. Gas limits come from estimation plus a buffer.
    """

    def __init__(self, w3: Web3, gas_limit_buffer: float = 1.2, default_gas_limit: int = 3000000):
        """
        Initialize Gas Calculator

        Args:
            w3: Web3 instance
            gas_limit_buffer: Multiplier applied to the gas estimate
            default_gas_limit: Limit used when estimation fails
        """
        if gas_limit_buffer < 1:
            raise ValueError(f"gas_limit_buffer must be >= 1, got {gas_limit_buffer}")

        self.w3 = w3
        self.gas_limit_buffer = gas_limit_buffer
        self.default_gas_limit = default_gas_limit

    def get_gas_price(self, configured_gas_price: Optional[int] = None) -> int:
        """
        Get gas price for the deployment

        Args:
            configured_gas_price: Fixed price from the network config (wei)

        Returns:
            Gas price in wei
        """
        if configured_gas_price:
            gas_price = int(configured_gas_price)
        else:
            gas_price = int(self.w3.eth.gas_price)

        logger.info(f"Gas price: {Web3.from_wei(gas_price, 'gwei')} gwei")
        return gas_price

    def apply_buffer(self, gas_estimate: int) -> int:
        """Scale an estimate by the buffer, never below the estimate itself"""
        return max(int(gas_estimate), int(gas_estimate * self.gas_limit_buffer))

    def estimate_gas_limit(self, constructor, sender: str) -> int:
        """
        Estimate gas for a constructor call

        Args:
            constructor: Bound web3 ContractConstructor
            sender: Deployer address

        Returns:
            Gas limit with buffer, or the default limit if estimation fails
        """
        try:
            gas_estimate = constructor.estimate_gas({'from': sender})
            gas_limit = self.apply_buffer(gas_estimate)
        except Exception as e:
            logger.warning(f"Gas estimation failed: {e}, using default")
            gas_limit = self.default_gas_limit

        logger.info(f"Gas limit: {gas_limit}")
        return gas_limit

    @staticmethod
    def deployment_cost(gas_limit: int, gas_price: int) -> Decimal:
        """Upper bound of the deployment fee in ether"""
        return Decimal(Web3.from_wei(gas_limit * gas_price, 'ether'))
