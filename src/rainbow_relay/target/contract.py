"""
Verifier contract client built on web3.

Transactions are signed locally with the relay's key and sent raw, so the
target node never holds the credential. Every write is first simulated with
`eth_call`: a revert then surfaces with its reason before any gas is spent.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import aiohttp
from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import AsyncWeb3
from web3.exceptions import (
    BadFunctionCallOutput,
    ContractLogicError,
    TimeExhausted,
    Web3Exception,
    Web3RPCError,
)

from rainbow_relay.errors import TargetChainError, TransactionRejected, TransportError
from rainbow_relay.types import Bytes32

from .interface import ClientHeadState, TxReceipt

logger = logging.getLogger(__name__)

TX_GAS_LIMIT = 1_000_000
"""Gas limit attached to every relay transaction."""

RECEIPT_TIMEOUT = 300.0
"""Seconds to wait for a transaction to be mined."""

_CONNECTION_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError, OSError)
"""Exceptions that mean the node could not be reached."""

T = TypeVar("T")


class VerifierContractClient:
    """
    Target chain client for the light-client verifier contract.

    The contract exposes:

    - `initialized()`, `last()`, `blockHashes(uint256)`: head state
    - `LOCK_ETH_AMOUNT()`, `balanceOf(address)`: stake state
    - `initWithBlock(bytes)`, `deposit()`, `addLightClientBlock(bytes)`: writes
    """

    def __init__(
        self,
        w3: AsyncWeb3,
        *,
        contract_address: str,
        abi: list[dict[str, Any]],
        account: LocalAccount,
    ) -> None:
        self._w3 = w3
        self._abi = abi
        self._account = account
        self._contract = w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(contract_address), abi=abi
        )

    @classmethod
    def connect(
        cls,
        node_url: str,
        *,
        contract_address: str,
        abi: list[dict[str, Any]],
        private_key: str,
    ) -> VerifierContractClient:
        """Create a client talking to `node_url` and signing with `private_key`."""
        w3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(node_url))
        return cls(
            w3,
            contract_address=contract_address,
            abi=abi,
            account=Account.from_key(private_key),
        )

    @property
    def address(self) -> str:
        """The checksummed address of the relay account."""
        return self._account.address

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def is_initialized(self) -> bool:
        return bool(await self._call("initialized"))

    async def head(self) -> ClientHeadState:
        outputs = self._named_outputs("last", await self._call("last"))
        return ClientHeadState(height=outputs["height"], valid_after=outputs["validAfter"])

    async def block_hash(self, height: int) -> Bytes32:
        return Bytes32(await self._call("blockHashes", int(height)))

    async def required_stake_amount(self) -> int:
        return int(await self._call("LOCK_ETH_AMOUNT"))

    async def stake_balance_of(self, address: str) -> int:
        return int(await self._call("balanceOf", AsyncWeb3.to_checksum_address(address)))

    async def current_chain_time(self) -> int:
        latest = await self._guard("get latest block", lambda: self._w3.eth.get_block("latest"))
        return int(latest["timestamp"])

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def init_with_block(self, data: bytes) -> TxReceipt:
        return await self._transact("initWithBlock", data)

    async def deposit(self, amount: int) -> TxReceipt:
        return await self._transact("deposit", value=amount)

    async def add_light_client_block(self, data: bytes) -> TxReceipt:
        return await self._transact("addLightClientBlock", data)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    async def _call(self, fn_name: str, *args: Any) -> Any:
        """Run a view function against the latest block."""
        fn = self._contract.get_function_by_name(fn_name)(*args)
        return await self._guard(fn_name, lambda: fn.call({"from": self.address}))

    async def _transact(self, fn_name: str, *args: Any, value: int = 0) -> TxReceipt:
        """Simulate, sign, send, and wait for a contract transaction."""
        fn = self._contract.get_function_by_name(fn_name)(*args)
        params: dict[str, Any] = {"from": self.address, "value": value}

        # A revert in simulation carries the reason; a revert on-chain does not.
        await self._guard(fn_name, lambda: fn.call(params), write=True)

        async def send() -> Any:
            nonce = await self._w3.eth.get_transaction_count(self.address, "pending")
            tx = await fn.build_transaction(params | {"gas": TX_GAS_LIMIT, "nonce": nonce})
            signed = self._account.sign_transaction(tx)
            tx_hash = await self._w3.eth.send_raw_transaction(signed.raw_transaction)
            logger.info("Sent %s transaction %s", fn_name, tx_hash.to_0x_hex())
            return await self._w3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=RECEIPT_TIMEOUT
            )

        receipt = await self._guard(fn_name, send, write=True)
        tx_hash = receipt["transactionHash"].to_0x_hex()
        if receipt["status"] != 1:
            raise TransactionRejected(f"{fn_name} reverted on-chain", tx_hash=tx_hash)

        logger.info(
            "%s mined in block %d (gas used %d)",
            fn_name,
            receipt["blockNumber"],
            receipt["gasUsed"],
        )
        return TxReceipt(
            tx_hash=tx_hash,
            block_number=receipt["blockNumber"],
            gas_used=receipt["gasUsed"],
        )

    async def _guard(
        self, what: str, action: Callable[[], Awaitable[T]], *, write: bool = False
    ) -> T:
        """
        Run `action`, translating web3 failures into relay errors.

        Node errors on a write mean the submission was refused. On a read
        they are transient, as is an empty return from a node still syncing.
        """
        try:
            return await action()
        except ContractLogicError as exc:
            if write:
                raise TransactionRejected(f"{what}: {exc}") from exc
            raise TargetChainError(f"{what} reverted: {exc}") from exc
        except TimeExhausted as exc:
            raise TransportError(f"{what}: timed out waiting for receipt: {exc}") from exc
        except BadFunctionCallOutput as exc:
            raise TransportError(f"{what}: empty or undecodable return: {exc}") from exc
        except Web3RPCError as exc:
            if write:
                raise TransactionRejected(f"{what}: {exc}") from exc
            raise TransportError(f"{what}: {exc}") from exc
        except _CONNECTION_ERRORS as exc:
            raise TransportError(f"{what}: cannot reach target chain node: {exc}") from exc
        except Web3Exception as exc:
            raise TargetChainError(f"{what}: {exc}") from exc

    def _named_outputs(self, fn_name: str, values: Any) -> dict[str, Any]:
        """
        Map a view function's positional return values to their ABI names.

        Public struct getters return a tuple of members; a function returning
        the struct as a single tuple output is unpacked the same way.
        """
        entry = next(
            item
            for item in self._abi
            if item.get("type") == "function" and item.get("name") == fn_name
        )
        outputs = entry["outputs"]
        if len(outputs) == 1 and outputs[0].get("components"):
            outputs = outputs[0]["components"]
        if not isinstance(values, (list, tuple)):
            values = (values,)
        return {output["name"]: value for output, value in zip(outputs, values, strict=True)}
