"""Read/write view of the verifier contract that the relay depends on."""

from __future__ import annotations

from typing import Protocol

from rainbow_relay.types import Bytes32, RelayModel, Uint64


class ClientHeadState(RelayModel):
    """The verifier's current head, as stored by the contract."""

    height: Uint64
    """Height of the latest accepted light-client block."""

    valid_after: Uint64
    """Target-chain timestamp after which a new block is accepted."""


class TxReceipt(RelayModel):
    """Outcome of a mined transaction."""

    tx_hash: str
    block_number: int
    gas_used: int


class TargetChainClient(Protocol):
    """
    Protocol for the verifier contract on the target chain.

    Reads raise `TransportError` on network failures. Writes wait for the
    transaction to be mined and raise `TransactionRejected` on revert.
    """

    @property
    def address(self) -> str:
        """The relay's identity on the target chain."""
        ...

    async def is_initialized(self) -> bool:
        """Whether the contract has been bootstrapped with a first block."""
        ...

    async def init_with_block(self, data: bytes) -> TxReceipt:
        """Bootstrap the contract with an encoded light-client block."""
        ...

    async def head(self) -> ClientHeadState:
        """Return the current verified head."""
        ...

    async def block_hash(self, height: int) -> Bytes32:
        """Return the hash the contract stores for the block at `height`."""
        ...

    async def required_stake_amount(self) -> int:
        """Return the fixed deposit a submitter must lock, in wei."""
        ...

    async def stake_balance_of(self, address: str) -> int:
        """Return the stake `address` has locked in the contract, in wei."""
        ...

    async def deposit(self, amount: int) -> TxReceipt:
        """Lock `amount` wei as the relay's stake."""
        ...

    async def add_light_client_block(self, data: bytes) -> TxReceipt:
        """Submit an encoded light-client block on top of the current head."""
        ...

    async def current_chain_time(self) -> int:
        """Return the timestamp of the latest target-chain block."""
        ...
