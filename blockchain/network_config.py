"""
Network Configuration
Resolves a network name to RPC endpoint, chain ID, gas price and credentials
"""

import os
import json
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from string import Template
from typing import Dict, Mapping, Optional, Tuple
from web3 import Web3
from loguru import logger
from dotenv import load_dotenv

load_dotenv()


DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "networks.json"

# Seconds a single RPC request may block before the provider gives up
DEFAULT_REQUEST_TIMEOUT = 30


class NetworkConfigError(Exception):
    """Network registry could not produce a network context"""


@dataclass(frozen=True)
class NetworkContext:
    """
    Active chain for one deployment run

    private_keys holds raw hex keys in configured order: keys read from the
    environment first, then the network's default development keys. When it
    is empty and use_node_accounts is set, the node's unlocked accounts are
    used instead.
    """
    name: str
    rpc_url: str
    chain_id: Optional[int] = None
    gas_price: Optional[int] = None
    private_keys: Tuple[str, ...] = field(default=(), repr=False)
    use_node_accounts: bool = False

    def connect(self, request_timeout: float = DEFAULT_REQUEST_TIMEOUT) -> Web3:
        """Create a Web3 instance for this network's RPC endpoint"""
        logger.debug(f"Connecting to {self.name} at {self.rpc_url}")
        return Web3(Web3.HTTPProvider(
            self.rpc_url,
            request_kwargs={'timeout': request_timeout}
        ))


class NetworkRegistry:
    """
    Network definitions loaded from config/networks.json

    Each entry looks like:
        "bscTestnet": {
            "url": "https://data-seed-prebsc-1-s1.binance.org:8545/",
            "url_env": "BSC_TESTNET_RPC_URL",
            "chain_id": 97,
            "gas_price": 20000000000,
            "accounts_env": ["PRIVATE_KEY"]
        }
    """

    def __init__(self, config: Dict, environ: Optional[Mapping[str, str]] = None):
        """
        Initialize Network Registry

        Args:
            config: Parsed networks configuration
            environ: Environment to resolve credentials from (default os.environ)
        """
        if 'networks' not in config:
            raise NetworkConfigError("Network configuration has no 'networks' section")

        self.networks = config['networks']
        self.default_network = config.get('default_network', 'hardhat')
        self.environ = os.environ if environ is None else environ

        logger.debug(f"Network registry loaded with {len(self.networks)} networks")

    @classmethod
    def from_file(
        cls,
        path: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None
    ) -> "NetworkRegistry":
        """Load registry from a JSON config file"""
        config_path = Path(path) if path else DEFAULT_CONFIG_PATH

        try:
            with open(config_path, 'r') as f:
                config = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise NetworkConfigError(f"Cannot read network config {config_path}: {e}") from e

        return cls(config, environ)

    def names(self):
        return sorted(self.networks)

    def get(self, name: Optional[str] = None) -> NetworkContext:
        """
        Build the context for a network

        Args:
            name: Network name (None = default network)

        Returns:
            NetworkContext
        """
        network_name = name or self.default_network

        if network_name not in self.networks:
            raise NetworkConfigError(
                f"Unknown network '{network_name}' (available: {', '.join(self.names())})"
            )

        entry = self.networks[network_name]

        return NetworkContext(
            name=network_name,
            rpc_url=self._resolve_url(network_name, entry),
            chain_id=entry.get('chain_id'),
            gas_price=entry.get('gas_price'),
            private_keys=self._resolve_keys(entry),
            use_node_accounts=entry.get('accounts') == 'remote'
        )

    def _resolve_url(self, network_name: str, entry: Dict) -> str:
        url_env = entry.get('url_env')
        if url_env and self.environ.get(url_env):
            return self.environ[url_env]

        url = entry.get('url')
        if not url:
            raise NetworkConfigError(f"Network '{network_name}' has no RPC url")

        # ${INFURA_KEY} style references, missing variables become empty
        return Template(url).safe_substitute(defaultdict(str, self.environ))

    def _resolve_keys(self, entry: Dict) -> Tuple[str, ...]:
        keys = []

        for env_name in entry.get('accounts_env', []):
            value = (self.environ.get(env_name) or '').strip()
            if value:
                keys.append(value)
            else:
                logger.debug(f"{env_name} not set")

        # well-known development keys, signing stays offline
        keys.extend(entry.get('default_accounts', []))

        return tuple(keys)
