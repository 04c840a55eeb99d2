"""Unit tests for the chain client facade and error classification."""

import asyncio
from unittest.mock import AsyncMock, Mock

import pytest
from aiohttp import ClientConnectionError
from web3.exceptions import ContractLogicError, TimeExhausted

from tokenfleet.chain.client import ChainClient, classify_chain_error
from tokenfleet.errors import (
    InsufficientFunds,
    TransactionFailed,
    TransportError,
)
from tokenfleet.models.deployment import (
    CompiledArtifact,
    DeployedContract,
    SigningIdentity,
)

TX_HASH_BYTES = bytes.fromhex("ab" * 32)
TX_HASH = "0x" + "ab" * 32
CONTRACT_ADDRESS = "0x" + "c" * 40


async def _value(value):
    return value


def _signing_identity() -> SigningIdentity:
    account = Mock()
    account.sign_transaction.return_value = Mock(raw_transaction=b"signed")
    return SigningIdentity(address="0x" + "1" * 40, account=account)


def _mock_w3(receipt=None) -> Mock:
    w3 = Mock()
    w3.eth.get_balance = AsyncMock(return_value=5 * 10 ** 17)
    w3.eth.get_transaction_count = AsyncMock(return_value=7)
    w3.eth.send_raw_transaction = AsyncMock(return_value=TX_HASH_BYTES)
    w3.eth.wait_for_transaction_receipt = AsyncMock(return_value=receipt or {
        "status": 1,
        "contractAddress": CONTRACT_ADDRESS,
        "blockNumber": 12,
        "gasUsed": 21000,
    })

    contract = Mock()
    contract.constructor.return_value.build_transaction = AsyncMock(return_value={"data": "0x"})
    contract.functions.transfer.return_value.build_transaction = AsyncMock(return_value={"data": "0x"})
    contract.functions.decimals.return_value.call = AsyncMock(return_value=6)
    w3.eth.contract.return_value = contract
    return w3


class TestClassifyChainError:
    """Test suite for mapping web3 errors onto the deployment taxonomy."""

    def test_timeout_is_transport_error(self) -> None:
        error = classify_chain_error(TimeExhausted("not mined"), "deploy")
        assert isinstance(error, TransportError)
        assert error.timed_out is True

    def test_connection_error_is_transport_error(self) -> None:
        error = classify_chain_error(ClientConnectionError("refused"), "deploy")
        assert isinstance(error, TransportError)
        assert error.timed_out is False

    def test_funds_rejection_is_insufficient_funds(self) -> None:
        error = classify_chain_error(
            ValueError("insufficient funds for gas * price + value"), "deploy"
        )
        assert isinstance(error, InsufficientFunds)

    def test_revert_is_transaction_failed(self) -> None:
        error = classify_chain_error(ContractLogicError("execution reverted: paused"), "transfer")
        assert isinstance(error, TransactionFailed)
        assert "paused" in error.reason

    def test_out_of_gas_is_transaction_failed(self) -> None:
        error = classify_chain_error(ValueError("out of gas"), "deploy")
        assert isinstance(error, TransactionFailed)
        assert error.reason == "out of gas"

    def test_unknown_error_is_transaction_failed(self) -> None:
        error = classify_chain_error(RuntimeError("nonce too low"), "deploy")
        assert isinstance(error, TransactionFailed)
        assert error.context["error_type"] == "RuntimeError"

    def test_deployment_errors_pass_through(self) -> None:
        original = InsufficientFunds("low")
        assert classify_chain_error(original, "deploy") is original


class TestChainClient:
    """Test suite for ChainClient operations against a mocked AsyncWeb3."""

    def test_get_balance(self) -> None:
        identity = _signing_identity()
        client = ChainClient(_mock_w3(), [identity])

        assert asyncio.run(client.get_balance(identity)) == 5 * 10 ** 17

    def test_get_balance_failure_is_transport_error(self) -> None:
        w3 = _mock_w3()
        w3.eth.get_balance = AsyncMock(side_effect=OSError("unreachable"))
        identity = _signing_identity()
        client = ChainClient(w3, [identity])

        with pytest.raises(TransportError):
            asyncio.run(client.get_balance(identity))

    def test_deploy_returns_contract(self) -> None:
        """Deployment signs, sends and waits for the receipt."""
        w3 = _mock_w3()
        identity = _signing_identity()
        client = ChainClient(w3, [identity], confirmation_timeout=30.0)
        artifact = CompiledArtifact(abi=[], bytecode="0x6080")

        async def scenario():
            w3.eth.chain_id = _value(1337)
            return await client.deploy(identity, artifact, ("Nova Coin", "NVA", 1000))

        contract = asyncio.run(scenario())

        assert contract.address == CONTRACT_ADDRESS
        assert contract.tx_hash == TX_HASH
        assert contract.identity is identity

        w3.eth.contract.assert_called_once_with(abi=[], bytecode="0x6080")
        w3.eth.contract.return_value.constructor.assert_called_once_with("Nova Coin", "NVA", 1000)
        params = w3.eth.contract.return_value.constructor.return_value.build_transaction.call_args[0][0]
        assert params == {"from": identity.address, "nonce": 7, "chainId": 1337}
        identity.account.sign_transaction.assert_called_once_with({"data": "0x"})
        w3.eth.send_raw_transaction.assert_awaited_once_with(b"signed")
        w3.eth.wait_for_transaction_receipt.assert_awaited_once_with(TX_HASH, timeout=30.0)

    def test_gas_limit_added_to_params(self) -> None:
        w3 = _mock_w3()
        identity = _signing_identity()
        client = ChainClient(w3, [identity], gas_limit=3_000_000)

        async def scenario():
            w3.eth.chain_id = _value(1)
            await client.deploy(identity, CompiledArtifact(abi=[], bytecode="0x00"), ())

        asyncio.run(scenario())

        params = w3.eth.contract.return_value.constructor.return_value.build_transaction.call_args[0][0]
        assert params["gas"] == 3_000_000

    def test_confirmation_deadline_is_transport_error(self) -> None:
        w3 = _mock_w3()
        w3.eth.wait_for_transaction_receipt = AsyncMock(side_effect=TimeExhausted("timeout"))
        identity = _signing_identity()
        client = ChainClient(w3, [identity])

        async def scenario():
            w3.eth.chain_id = _value(1)
            await client.deploy(identity, CompiledArtifact(abi=[], bytecode="0x00"), ())

        with pytest.raises(TransportError) as exc_info:
            asyncio.run(scenario())

        assert exc_info.value.timed_out is True

    def test_reverted_receipt_is_transaction_failed(self) -> None:
        w3 = _mock_w3(receipt={"status": 0, "contractAddress": None})
        identity = _signing_identity()
        client = ChainClient(w3, [identity])

        async def scenario():
            w3.eth.chain_id = _value(1)
            await client.deploy(identity, CompiledArtifact(abi=[], bytecode="0x00"), ())

        with pytest.raises(TransactionFailed) as exc_info:
            asyncio.run(scenario())

        assert exc_info.value.tx_hash == TX_HASH

    def test_missing_signer_is_transaction_failed(self) -> None:
        w3 = _mock_w3()
        identity = SigningIdentity(address="0x" + "1" * 40)
        client = ChainClient(w3, [identity])

        async def scenario():
            w3.eth.chain_id = _value(1)
            await client.deploy(identity, CompiledArtifact(abi=[], bytecode="0x00"), ())

        with pytest.raises(TransactionFailed):
            asyncio.run(scenario())

        w3.eth.send_raw_transaction.assert_not_awaited()

    def test_call_returns_confirmation(self) -> None:
        w3 = _mock_w3()
        identity = _signing_identity()
        client = ChainClient(w3, [identity])
        contract = DeployedContract(address=CONTRACT_ADDRESS, abi=[], identity=identity)

        async def scenario():
            w3.eth.chain_id = _value(1)
            return await client.call(contract, identity, "transfer", ["0x" + "2" * 40, 10])

        confirmation = asyncio.run(scenario())

        assert confirmation.tx_hash == TX_HASH
        assert confirmation.block_number == 12
        assert confirmation.gas_used == 21000
        w3.eth.contract.return_value.functions.transfer.assert_called_once_with("0x" + "2" * 40, 10)

    def test_decimals_read_from_contract(self) -> None:
        w3 = _mock_w3()
        identity = _signing_identity()
        client = ChainClient(w3, [identity])
        contract = DeployedContract(
            address=CONTRACT_ADDRESS,
            abi=[{"type": "function", "name": "decimals"}],
            identity=identity,
        )

        assert asyncio.run(client.decimals(contract)) == 6

    def test_decimals_default_without_abi_entry(self) -> None:
        w3 = _mock_w3()
        identity = _signing_identity()
        client = ChainClient(w3, [identity])
        contract = DeployedContract(address=CONTRACT_ADDRESS, abi=[], identity=identity)

        assert asyncio.run(client.decimals(contract)) == 18
        w3.eth.contract.assert_not_called()
