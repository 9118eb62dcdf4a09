"""
Shared fixtures: a fake Web3 node, Hardhat-style artifacts and network contexts
"""

import json

import pytest
from unittest.mock import Mock
from hexbytes import HexBytes
from web3.datastructures import AttributeDict

from blockchain.network_config import NetworkContext
from deployment.models import DeploymentConfig


# Hardhat node default account #0
DEPLOYER_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
DEPLOYER_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"

VAULT_ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
TX_HASH = HexBytes("0x" + "ab" * 32)

VAULT_BYTECODE = "0x6080604052348015600f57600080fd5b50603f80601d6000396000f3fe6080604052600080fdfea164736f6c6343000812000a"
VAULT_RUNTIME = "0x6080604052600080fdfea164736f6c6343000812000a"
VAULT_ABI = [
    {"inputs": [], "stateMutability": "nonpayable", "type": "constructor"},
    {
        "inputs": [],
        "name": "deposit",
        "outputs": [],
        "stateMutability": "payable",
        "type": "function"
    }
]


def write_artifact(root, source, name, abi=None, bytecode=VAULT_BYTECODE):
    """Write artifacts/<source>/<name>.json the way Hardhat lays it out"""
    directory = root / source
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{name}.json"
    path.write_text(json.dumps({
        "_format": "hh-sol-artifact-1",
        "contractName": name,
        "sourceName": source,
        "abi": VAULT_ABI if abi is None else abi,
        "bytecode": bytecode,
        "deployedBytecode": VAULT_RUNTIME,
        "linkReferences": {},
        "deployedLinkReferences": {}
    }))
    return path


def make_receipt(status=1, contract_address=VAULT_ADDRESS, block_number=1):
    return AttributeDict({
        'transactionHash': TX_HASH,
        'blockNumber': block_number,
        'status': status,
        'contractAddress': contract_address,
        'gasUsed': 91234
    })


@pytest.fixture
def artifacts_dir(tmp_path):
    """Artifact tree with VaultETH, DontBuyThisToken and an interface"""
    root = tmp_path / "artifacts"
    write_artifact(root, "contracts/Vault.sol", "VaultETH")
    write_artifact(root, "contracts/DBTT.sol", "DontBuyThisToken")
    write_artifact(root, "contracts/interfaces/IVault.sol", "IVault", bytecode="0x")
    (root / "build-info").mkdir()
    (root / "build-info" / "VaultETH.json").write_text("{}")
    (root / "contracts/Vault.sol/VaultETH.dbg.json").write_text('{"buildInfo": "../../build-info/x.json"}')
    return root


@pytest.fixture
def w3():
    """Mock Web3 node that accepts and confirms a deployment in one block"""
    w3 = Mock()
    w3.eth.accounts = [DEPLOYER_ADDRESS]
    w3.eth.gas_price = 20_000_000_000
    w3.eth.chain_id = 31337
    w3.eth.get_transaction_count.return_value = 0

    constructor = w3.eth.contract.return_value.constructor.return_value
    constructor.estimate_gas.return_value = 100000
    constructor.build_transaction.side_effect = lambda params: {
        **params,
        'data': VAULT_BYTECODE,
        'value': 0
    }

    w3.eth.send_raw_transaction.return_value = TX_HASH
    w3.eth.send_transaction.return_value = TX_HASH
    w3.eth.get_transaction_receipt.return_value = make_receipt()
    w3.eth.get_code.return_value = HexBytes(VAULT_RUNTIME)
    return w3


@pytest.fixture
def network():
    """Remote network with one configured private key"""
    return NetworkContext(
        name="bscTestnet",
        rpc_url="https://data-seed-prebsc-1-s1.binance.org:8545/",
        chain_id=97,
        gas_price=20_000_000_000,
        private_keys=(DEPLOYER_KEY,)
    )


@pytest.fixture
def local_network():
    """Local dev node whose accounts are unlocked on the node"""
    return NetworkContext(
        name="localhost",
        rpc_url="http://127.0.0.1:8545",
        chain_id=31337,
        use_node_accounts=True
    )


@pytest.fixture
def config(network, artifacts_dir):
    return DeploymentConfig(
        network=network,
        artifacts_dir=artifacts_dir,
        confirmation_timeout=0.5,
        poll_interval=0.01
    )
