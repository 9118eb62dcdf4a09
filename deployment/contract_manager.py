"""
Contract Manager
Resolves compiled contract artifacts into deployable factories
"""

import re
import json
from pathlib import Path
from typing import Dict, List, Optional, Sequence
from web3 import Web3
from loguru import logger

from blockchain.network_config import NetworkContext
from blockchain.transaction_builder import TransactionBuilder
from .errors import UnknownContract
from .signer_resolver import SigningIdentity


CONTRACT_NAME_PATTERN = re.compile(r'^[A-Za-z_$][A-Za-z0-9_$]*$')

# Solidity library placeholders left in unlinked bytecode
LINK_PLACEHOLDER_PATTERN = re.compile(r'__\$[0-9a-fA-F]{34}\$__')


class ContractFactory:
    """
    A compiled contract bound to a signer, ready to be deployed
    """

    def __init__(
        self,
        w3: Web3,
        contract_name: str,
        abi: List[Dict],
        bytecode: str,
        signer: SigningIdentity,
        network: NetworkContext,
        artifact_path: Optional[Path] = None
    ):
        self.w3 = w3
        self.contract_name = contract_name
        self.abi = abi
        self.bytecode = bytecode
        self.signer = signer
        self.network = network
        self.artifact_path = artifact_path

        self.contract = w3.eth.contract(abi=abi, bytecode=bytecode)

    def get_deploy_transaction(
        self,
        tx_builder: TransactionBuilder,
        constructor_args: Sequence = ()
    ) -> Dict:
        """Build the unsigned contract-creation transaction"""
        return tx_builder.build_deployment_tx(
            self.contract,
            self.signer.address,
            constructor_args,
            chain_id=self.network.chain_id,
            gas_price=self.network.gas_price
        )

    def __repr__(self) -> str:
        return f"ContractFactory({self.contract_name!r}, signer={self.signer.address})"


class ContractManager:
    """
    Looks up Hardhat-style build artifacts

    Artifacts live at artifacts/<source path>/<Name>.json and carry
    contractName, abi and bytecode. Names are either bare ("VaultETH") or
    fully qualified ("contracts/Vault.sol:VaultETH").
    """

    def __init__(self, w3: Web3, artifacts_dir: Path = Path("artifacts")):
        """
        Initialize Contract Manager

        Args:
            w3: Web3 instance
            artifacts_dir: Root of the compiler's artifact tree
        """
        self.w3 = w3
        self.artifacts_dir = Path(artifacts_dir)

    def get_contract_factory(self, contract_name: str, signer: SigningIdentity, network: NetworkContext) -> ContractFactory:
        """
        Resolve a contract by name and bind it to the signer

        Args:
            contract_name: Bare or fully qualified contract name
            signer: Deployer identity
            network: Active network context

        Returns:
            ContractFactory
        """
        artifact_path = self.find_artifact(contract_name)
        artifact = self._load_artifact(contract_name, artifact_path)

        bytecode = artifact['bytecode']

        if LINK_PLACEHOLDER_PATTERN.search(bytecode):
            raise UnknownContract(contract_name, "bytecode has unlinked library references")

        factory = ContractFactory(
            self.w3,
            artifact['contractName'],
            artifact['abi'],
            bytecode,
            signer,
            network,
            artifact_path
        )

        logger.success(f"{artifact['contractName']} artifact loaded from {artifact_path}")
        return factory

    def find_artifact(self, contract_name: str) -> Path:
        """Locate the artifact file for a contract name"""
        source_name, name = self._split_name(contract_name)

        if not self.artifacts_dir.is_dir():
            raise UnknownContract(
                contract_name,
                f"artifacts directory {self.artifacts_dir} not found (compile the contracts first)"
            )

        if source_name:
            candidates = [self.artifacts_dir / source_name / f"{name}.json"]
            candidates = [path for path in candidates if path.is_file()]
        else:
            candidates = [
                path for path in sorted(self.artifacts_dir.rglob(f"{name}.json"))
                if 'build-info' not in path.parts
            ]

        if not candidates:
            available = ', '.join(self.available_contracts()) or 'none'
            raise UnknownContract(
                contract_name,
                f"no artifact found in {self.artifacts_dir} (available: {available})"
            )

        if len(candidates) > 1:
            options = ', '.join(
                f"{path.parent.relative_to(self.artifacts_dir).as_posix()}:{name}"
                for path in candidates
            )
            raise UnknownContract(
                contract_name,
                f"multiple artifacts match, use a fully qualified name ({options})"
            )

        return candidates[0]

    def available_contracts(self) -> List[str]:
        """Names of all contract artifacts under the artifacts directory"""
        if not self.artifacts_dir.is_dir():
            return []

        names = []
        for path in sorted(self.artifacts_dir.rglob("*.json")):
            if 'build-info' in path.parts or path.name.endswith('.dbg.json'):
                continue
            if path.parent.name.endswith('.sol'):
                names.append(path.stem)

        return names

    def _split_name(self, contract_name: str):
        if ':' in contract_name:
            source_name, _, name = contract_name.rpartition(':')
            source_path = Path(source_name)
            if not source_name or source_path.is_absolute() or '..' in source_path.parts:
                raise UnknownContract(contract_name, "invalid fully qualified name")
        else:
            source_name, name = None, contract_name

        if not CONTRACT_NAME_PATTERN.match(name):
            raise UnknownContract(contract_name, "not a valid contract name")

        return source_name, name

    def _load_artifact(self, contract_name: str, artifact_path: Path) -> Dict:
        try:
            with open(artifact_path, 'r') as f:
                artifact = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise UnknownContract(contract_name, f"unreadable artifact {artifact_path}: {e}") from e

        if not isinstance(artifact, dict):
            raise UnknownContract(contract_name, f"malformed artifact {artifact_path}")

        _, name = self._split_name(contract_name)
        if artifact.get('contractName') != name:
            raise UnknownContract(
                contract_name,
                f"artifact {artifact_path} is for '{artifact.get('contractName')}'"
            )

        if not isinstance(artifact.get('abi'), list):
            raise UnknownContract(contract_name, f"artifact {artifact_path} has no abi")

        bytecode = artifact.get('bytecode')
        if not isinstance(bytecode, str) or bytecode in ('', '0x'):
            raise UnknownContract(
                contract_name,
                "artifact has no bytecode (abstract contract or interface)"
            )

        return artifact
