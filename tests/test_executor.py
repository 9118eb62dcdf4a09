"""
Deployment Executor Tests
Submission, confirmation polling and the failure transitions
"""

import pytest
from hexbytes import HexBytes
from web3.exceptions import TransactionNotFound

from blockchain.transaction_builder import TransactionBuilder
from deployment.contract_manager import ContractManager
from deployment.errors import ConfirmationFailed, SubmissionRejected
from deployment.executor import DeploymentExecutor
from deployment.models import DeploymentState
from deployment.signer_resolver import SignerResolver
from utils.gas_calculator import GasCalculator
from tests.conftest import DEPLOYER_ADDRESS, VAULT_ADDRESS, make_receipt


def make_executor(w3, timeout=0.5, poll_interval=0.01):
    return DeploymentExecutor(
        w3,
        TransactionBuilder(w3, GasCalculator(w3)),
        confirmation_timeout=timeout,
        poll_interval=poll_interval
    )


def make_factory(w3, network, artifacts_dir, name="VaultETH"):
    signer = SignerResolver(w3).resolve(network)
    return ContractManager(w3, artifacts_dir).get_contract_factory(name, signer, network)


class TestSubmission:
    """Test SUBMITTING stage"""

    @pytest.mark.asyncio
    async def test_signed_locally_and_sent_raw(self, w3, network, artifacts_dir):
        """Private-key signer signs client-side and uses eth_sendRawTransaction"""
        executor = make_executor(w3)
        deployed = await executor.deploy(make_factory(w3, network, artifacts_dir))

        assert deployed.address == VAULT_ADDRESS
        assert deployed.tx_hash == '0x' + 'ab' * 32
        assert executor.state == DeploymentState.CONFIRMED

        w3.eth.send_raw_transaction.assert_called_once()
        raw = w3.eth.send_raw_transaction.call_args[0][0]
        assert isinstance(raw, (bytes, HexBytes)) and len(raw) > 0
        w3.eth.send_transaction.assert_not_called()

    @pytest.mark.asyncio
    async def test_transaction_fields(self, w3, network, artifacts_dir):
        """Nonce from pending count, gas from estimate + 20%, network gas price and chain"""
        await make_executor(w3).deploy(make_factory(w3, network, artifacts_dir))

        w3.eth.get_transaction_count.assert_called_once_with(DEPLOYER_ADDRESS, 'pending')
        constructor = w3.eth.contract.return_value.constructor.return_value
        constructor.build_transaction.assert_called_once_with({
            'from': DEPLOYER_ADDRESS,
            'nonce': 0,
            'gas': 120000,
            'gasPrice': 20_000_000_000,
            'chainId': 97
        })

    @pytest.mark.asyncio
    async def test_constructor_args_forwarded(self, w3, network, artifacts_dir):
        await make_executor(w3).deploy(
            make_factory(w3, network, artifacts_dir),
            ["Vault", 18]
        )

        w3.eth.contract.return_value.constructor.assert_called_once_with("Vault", 18)

    @pytest.mark.asyncio
    async def test_node_account_uses_send_transaction(self, w3, local_network, artifacts_dir):
        """Unlocked node accounts leave signing to the node"""
        await make_executor(w3).deploy(make_factory(w3, local_network, artifacts_dir))

        w3.eth.send_transaction.assert_called_once()
        assert w3.eth.send_transaction.call_args[0][0]['from'] == DEPLOYER_ADDRESS
        w3.eth.send_raw_transaction.assert_not_called()

    @pytest.mark.asyncio
    async def test_insufficient_funds_rejected(self, w3, network, artifacts_dir):
        w3.eth.send_raw_transaction.side_effect = ValueError({
            'code': -32000,
            'message': 'insufficient funds for gas * price + value'
        })
        executor = make_executor(w3)

        with pytest.raises(SubmissionRejected, match="insufficient funds") as exc_info:
            await executor.deploy(make_factory(w3, network, artifacts_dir))

        assert exc_info.value.contract_name == "VaultETH"
        assert executor.state == DeploymentState.FAILED
        w3.eth.get_transaction_receipt.assert_not_called()

    @pytest.mark.asyncio
    async def test_nonce_conflict_rejected(self, w3, network, artifacts_dir):
        w3.eth.send_raw_transaction.side_effect = ValueError({'code': -32000, 'message': 'nonce too low'})

        with pytest.raises(SubmissionRejected, match="nonce too low"):
            await make_executor(w3).deploy(make_factory(w3, network, artifacts_dir))

    @pytest.mark.asyncio
    async def test_unreachable_node_rejected(self, w3, network, artifacts_dir):
        w3.eth.get_transaction_count.side_effect = ConnectionError("connection refused")

        with pytest.raises(SubmissionRejected, match="connection refused"):
            await make_executor(w3).deploy(make_factory(w3, network, artifacts_dir))

        w3.eth.send_raw_transaction.assert_not_called()

    @pytest.mark.asyncio
    async def test_gas_estimation_failure_uses_default(self, w3, network, artifacts_dir):
        constructor = w3.eth.contract.return_value.constructor.return_value
        constructor.estimate_gas.side_effect = ValueError("execution reverted")

        await make_executor(w3).deploy(make_factory(w3, network, artifacts_dir))

        assert constructor.build_transaction.call_args[0][0]['gas'] == 3000000


class TestConfirmation:
    """Test PENDING stage"""

    @pytest.mark.asyncio
    async def test_waits_until_mined(self, w3, network, artifacts_dir):
        """Receipt polling keeps going while the transaction is unknown or pending"""
        w3.eth.get_transaction_receipt.side_effect = [
            TransactionNotFound("not found"),
            None,
            make_receipt(block_number=7)
        ]

        deployed = await make_executor(w3).deploy(make_factory(w3, network, artifacts_dir))

        assert w3.eth.get_transaction_receipt.call_count == 3
        assert deployed.block_number == 7
        assert deployed.gas_used == 91234
        w3.eth.get_code.assert_called_once_with(VAULT_ADDRESS)

    @pytest.mark.asyncio
    async def test_never_confirmed(self, w3, network, artifacts_dir):
        w3.eth.get_transaction_receipt.side_effect = TransactionNotFound("not found")
        executor = make_executor(w3, timeout=0.05)

        with pytest.raises(ConfirmationFailed, match="not confirmed within") as exc_info:
            await executor.deploy(make_factory(w3, network, artifacts_dir))

        assert exc_info.value.tx_hash is not None
        assert executor.state == DeploymentState.FAILED

    @pytest.mark.asyncio
    async def test_reverted_on_chain(self, w3, network, artifacts_dir):
        w3.eth.get_transaction_receipt.return_value = make_receipt(status=0, contract_address=None)

        with pytest.raises(ConfirmationFailed, match="reverted"):
            await make_executor(w3).deploy(make_factory(w3, network, artifacts_dir))

        w3.eth.get_code.assert_not_called()

    @pytest.mark.asyncio
    async def test_receipt_without_contract_address(self, w3, network, artifacts_dir):
        w3.eth.get_transaction_receipt.return_value = make_receipt(contract_address=None)

        with pytest.raises(ConfirmationFailed, match="no contract address"):
            await make_executor(w3).deploy(make_factory(w3, network, artifacts_dir))

    @pytest.mark.asyncio
    async def test_no_code_at_address(self, w3, network, artifacts_dir):
        """A mined receipt is not enough, code must be observable"""
        w3.eth.get_code.return_value = HexBytes(b'')

        with pytest.raises(ConfirmationFailed, match="No contract code"):
            await make_executor(w3).deploy(make_factory(w3, network, artifacts_dir))

    @pytest.mark.asyncio
    async def test_rpc_error_while_polling(self, w3, network, artifacts_dir):
        w3.eth.get_transaction_receipt.side_effect = ConnectionError("connection reset")

        with pytest.raises(ConfirmationFailed, match="connection reset"):
            await make_executor(w3).deploy(make_factory(w3, network, artifacts_dir))

    @pytest.mark.asyncio
    async def test_lowercase_address_checksummed(self, w3, network, artifacts_dir):
        w3.eth.get_transaction_receipt.return_value = make_receipt(contract_address=VAULT_ADDRESS.lower())

        deployed = await make_executor(w3).deploy(make_factory(w3, network, artifacts_dir))

        assert deployed.address == VAULT_ADDRESS
