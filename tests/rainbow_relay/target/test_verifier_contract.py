"""Tests for the web3 verifier contract client."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest
from hexbytes import HexBytes
from web3.exceptions import (
    BadFunctionCallOutput,
    ContractLogicError,
    TimeExhausted,
    Web3Exception,
    Web3RPCError,
)

from rainbow_relay.errors import TargetChainError, TransactionRejected, TransportError
from rainbow_relay.target import TX_GAS_LIMIT, ClientHeadState, TxReceipt, VerifierContractClient
from rainbow_relay.types import Bytes32

CONTRACT_ADDRESS = "0x5fbdb2315678afecb367f032d93f642f64180aa3"
RELAY_ADDRESS = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"

LAST_STRUCT_ABI: list[dict[str, Any]] = [
    {
        "type": "function",
        "name": "last",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [
            {"name": "height", "type": "uint64"},
            {"name": "epochId", "type": "bytes32"},
            {"name": "nextEpochId", "type": "bytes32"},
            {"name": "submitter", "type": "address"},
            {"name": "validAfter", "type": "uint256"},
            {"name": "hash", "type": "bytes32"},
        ],
    },
]

LAST_TUPLE_ABI: list[dict[str, Any]] = [
    {
        "type": "function",
        "name": "last",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [
            {
                "name": "",
                "type": "tuple",
                "components": [
                    {"name": "validAfter", "type": "uint256"},
                    {"name": "height", "type": "uint64"},
                ],
            }
        ],
    },
]


def make_client(
    abi: list[dict[str, Any]] | None = None,
) -> tuple[VerifierContractClient, MagicMock]:
    """Client over a mocked web3 instance; returns the client and the contract function mock."""
    w3 = MagicMock()
    w3.eth.get_transaction_count = AsyncMock(return_value=7)
    w3.eth.send_raw_transaction = AsyncMock(return_value=HexBytes(b"\xaa" * 32))
    w3.eth.wait_for_transaction_receipt = AsyncMock(
        return_value={
            "transactionHash": HexBytes(b"\xaa" * 32),
            "status": 1,
            "blockNumber": 42,
            "gasUsed": 250_000,
        }
    )
    w3.eth.get_block = AsyncMock(return_value={"timestamp": 1_700_000_000})

    fn = MagicMock()
    fn.call = AsyncMock(return_value=None)
    fn.build_transaction = AsyncMock(return_value={"to": CONTRACT_ADDRESS})
    w3.eth.contract.return_value.get_function_by_name.return_value.return_value = fn

    account = MagicMock()
    account.address = RELAY_ADDRESS
    account.sign_transaction.return_value.raw_transaction = b"signed"

    client = VerifierContractClient(
        w3, contract_address=CONTRACT_ADDRESS, abi=abi or LAST_STRUCT_ABI, account=account
    )
    return client, fn


class TestReads:
    """View calls and their typed results."""

    async def test_head_from_struct_getter(self) -> None:
        client, fn = make_client()
        fn.call.return_value = (
            120,
            b"\x01" * 32,
            b"\x02" * 32,
            RELAY_ADDRESS,
            1_700_000_600,
            b"\x03" * 32,
        )

        head = await client.head()

        assert head == ClientHeadState(height=120, valid_after=1_700_000_600)

    async def test_head_from_tuple_output(self) -> None:
        client, fn = make_client(LAST_TUPLE_ABI)
        fn.call.return_value = (1_700_000_600, 120)

        head = await client.head()

        assert head.height == 120
        assert head.valid_after == 1_700_000_600

    async def test_block_hash(self) -> None:
        client, fn = make_client()
        fn.call.return_value = b"\x05" * 32

        assert await client.block_hash(120) == Bytes32(b"\x05" * 32)

    async def test_current_chain_time(self) -> None:
        client, _ = make_client()
        assert await client.current_chain_time() == 1_700_000_000

    async def test_address_is_relay_account(self) -> None:
        client, _ = make_client()
        assert client.address == RELAY_ADDRESS

    async def test_connection_error_is_transport_error(self) -> None:
        client, fn = make_client()
        fn.call.side_effect = aiohttp.ClientConnectionError("refused")

        with pytest.raises(TransportError, match="cannot reach target chain node"):
            await client.is_initialized()

    @pytest.mark.parametrize(
        "error",
        [
            Web3RPCError("header not found"),
            BadFunctionCallOutput("Could not decode contract function call"),
        ],
    )
    async def test_node_error_on_view_call_is_transport_error(self, error: Exception) -> None:
        client, fn = make_client()
        fn.call.side_effect = error

        with pytest.raises(TransportError, match="initialized"):
            await client.is_initialized()

    async def test_node_error_on_latest_block_is_transport_error(self) -> None:
        client, _ = make_client()
        client._w3.eth.get_block.side_effect = Web3RPCError("rate limited")

        with pytest.raises(TransportError, match="rate limited"):
            await client.current_chain_time()

    async def test_view_revert_is_target_chain_error(self) -> None:
        client, fn = make_client()
        fn.call.side_effect = ContractLogicError("execution reverted")

        with pytest.raises(TargetChainError, match="reverted"):
            await client.head()

    async def test_unrecognized_web3_error_is_relay_error(self) -> None:
        client, fn = make_client()
        fn.call.side_effect = Web3Exception("provider misconfigured")

        with pytest.raises(TargetChainError, match="provider misconfigured"):
            await client.block_hash(120)


class TestWrites:
    """Simulate, sign, send, and wait."""

    async def test_add_block_success(self) -> None:
        client, fn = make_client()

        receipt = await client.add_light_client_block(b"\x01\x02")

        assert receipt == TxReceipt(tx_hash="0x" + "aa" * 32, block_number=42, gas_used=250_000)
        fn.build_transaction.assert_awaited_once()
        params = fn.build_transaction.await_args.args[0]
        assert params["gas"] == TX_GAS_LIMIT
        assert params["nonce"] == 7
        assert params["from"] == RELAY_ADDRESS

    async def test_deposit_sends_value(self) -> None:
        client, fn = make_client()

        await client.deposit(10**17)

        params = fn.build_transaction.await_args.args[0]
        assert params["value"] == 10**17

    async def test_simulation_revert_is_rejected_before_sending(self) -> None:
        client, fn = make_client()
        fn.call.side_effect = ContractLogicError("execution reverted: Epoch id is not valid")

        with pytest.raises(TransactionRejected, match="Epoch id is not valid"):
            await client.add_light_client_block(b"\x01")

        fn.build_transaction.assert_not_awaited()

    async def test_reverted_receipt(self) -> None:
        client, _ = make_client()
        client._w3.eth.wait_for_transaction_receipt.return_value = {
            "transactionHash": HexBytes(b"\xbb" * 32),
            "status": 0,
            "blockNumber": 43,
            "gasUsed": TX_GAS_LIMIT,
        }

        with pytest.raises(TransactionRejected) as exc_info:
            await client.init_with_block(b"\x01")

        assert exc_info.value.tx_hash == "0x" + "bb" * 32

    async def test_receipt_timeout_is_transport_error(self) -> None:
        client, _ = make_client()
        client._w3.eth.wait_for_transaction_receipt.side_effect = TimeExhausted("not mined")

        with pytest.raises(TransportError, match="timed out"):
            await client.add_light_client_block(b"\x01")

    async def test_node_error_on_send_is_rejected(self) -> None:
        client, _ = make_client()
        client._w3.eth.send_raw_transaction.side_effect = Web3RPCError("nonce too low")

        with pytest.raises(TransactionRejected, match="nonce too low"):
            await client.add_light_client_block(b"\x01")
