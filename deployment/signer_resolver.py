"""
Signer Resolver
Picks the signing identity for a deployment from the network context
"""

from dataclasses import dataclass, field
from typing import Dict, Optional
from web3 import Web3
from eth_account import Account
from eth_account.signers.local import LocalAccount
from loguru import logger

from blockchain.network_config import NetworkContext
from .errors import NoSignerAvailable


@dataclass(frozen=True)
class SigningIdentity:
    """
    Address allowed to send the deployment

    account is None when the key lives on the node (unlocked dev accounts).
    """
    address: str
    account: Optional[LocalAccount] = field(default=None, repr=False, compare=False)

    @property
    def is_local(self) -> bool:
        return self.account is not None

    def sign_transaction(self, transaction: Dict):
        """Sign a transaction with the local key"""
        if self.account is None:
            raise ValueError(f"{self.address} is node-managed and cannot sign locally")
        return self.account.sign_transaction(transaction)


class SignerResolver:
    """
    Resolves the first available signer for a network

    Configured private keys win. Networks flagged for node accounts
    fall back to eth_accounts.
    """

    def __init__(self, w3: Web3):
        self.w3 = w3

    def resolve(self, network: NetworkContext) -> SigningIdentity:
        """
        Get the deployer identity

        Args:
            network: Active network context

        Returns:
            SigningIdentity for the first configured credential
        """
        if network.private_keys:
            identity = self._from_private_key(network)
        elif network.use_node_accounts:
            identity = self._from_node_accounts(network)
        else:
            raise NoSignerAvailable(
                f"No signing credentials configured for network '{network.name}'"
            )

        logger.info(f"Deploying contracts with the account: {identity.address}")
        return identity

    def _from_private_key(self, network: NetworkContext) -> SigningIdentity:
        try:
            account = Account.from_key(network.private_keys[0])
        except Exception as e:
            # never echo the key itself
            raise NoSignerAvailable(
                f"Invalid private key configured for network '{network.name}': "
                f"{type(e).__name__}"
            ) from e

        return SigningIdentity(address=account.address, account=account)

    def _from_node_accounts(self, network: NetworkContext) -> SigningIdentity:
        try:
            accounts = self.w3.eth.accounts
        except Exception as e:
            raise NoSignerAvailable(
                f"Could not list accounts on network '{network.name}': {e}"
            ) from e

        if not accounts:
            raise NoSignerAvailable(f"Node for network '{network.name}' exposes no accounts")

        return SigningIdentity(address=Web3.to_checksum_address(accounts[0]))
