"""
Blockchain Interaction Package
Handles network configuration and deployment transaction building
"""

from .network_config import NetworkConfigError, NetworkContext, NetworkRegistry
from .transaction_builder import TransactionBuilder

__all__ = ['NetworkConfigError', 'NetworkContext', 'NetworkRegistry', 'TransactionBuilder']
