"""
Transaction Builder
Constructs contract-creation transactions
"""

from typing import Dict, Optional, Sequence
from web3 import Web3
from loguru import logger

from utils.gas_calculator import GasCalculator


class TransactionBuilder:
    """
    Builds deployment transactions for a compiled contract
    """

    def __init__(self, w3: Web3, gas_calculator: GasCalculator):
        """
        Initialize Transaction Builder

        Args:
            w3: Web3 instance
            gas_calculator: Source of gas price and gas limit
        """
        self.w3 = w3
        self.gas_calculator = gas_calculator

    def build_deployment_tx(
        self,
        contract,
        sender: str,
        constructor_args: Sequence = (),
        chain_id: Optional[int] = None,
        gas_price: Optional[int] = None
    ) -> Dict:
        """
        Build transaction for contract creation

        Args:
            contract: web3 contract class carrying abi and bytecode
            sender: Deployer address
            constructor_args: Positional constructor arguments
            chain_id: Network chain ID (None = ask the node)
            gas_price: Fixed gas price in wei (None = ask the node)

        Returns:
            Transaction dict ready for signing
        """
        constructor = contract.constructor(*constructor_args)

        nonce = self.w3.eth.get_transaction_count(sender, 'pending')
        gas_limit = self.gas_calculator.estimate_gas_limit(constructor, sender)
        price = self.gas_calculator.get_gas_price(gas_price)

        if chain_id is None:
            chain_id = self.w3.eth.chain_id

        transaction = constructor.build_transaction({
            'from': sender,
            'nonce': nonce,
            'gas': gas_limit,
            'gasPrice': price,
            'chainId': chain_id
        })

        cost = self.gas_calculator.deployment_cost(gas_limit, price)
        logger.info(f"Estimated deployment cost: {cost} (native units)")
        logger.debug(f"Deployment tx nonce={nonce} chainId={chain_id}")

        return transaction
