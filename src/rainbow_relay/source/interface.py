"""Read-only view of the source chain that the relay depends on."""

from __future__ import annotations

from typing import Protocol

from rainbow_relay.lightclient import LightClientBlock
from rainbow_relay.types import CryptoHash, RelayModel, Uint64


class SyncInfo(RelayModel):
    """The sync section of a node's status report."""

    latest_block_height: Uint64
    latest_block_hash: CryptoHash


class NodeStatus(RelayModel):
    """Subset of the `status` RPC result the relay reads."""

    chain_id: str = ""
    sync_info: SyncInfo

    @property
    def latest_height(self) -> Uint64:
        """Height of the node's latest block."""
        return self.sync_info.latest_block_height


class BlockHeaderView(RelayModel):
    """Subset of a block header the relay reads."""

    height: Uint64
    hash: CryptoHash
    last_final_block: CryptoHash
    """Hash of the latest final block, as seen from this block."""


class BlockView(RelayModel):
    """Subset of the `block` RPC result the relay reads."""

    header: BlockHeaderView


class SourceChainReader(Protocol):
    """
    Protocol for source-chain queries.

    Implementations raise `TransportError` for network failures.
    """

    async def status(self) -> NodeStatus:
        """Return the node's current status."""
        ...

    async def block(self, height: int) -> BlockView:
        """Return the block at `height`."""
        ...

    async def next_light_client_block(self, after_hash: CryptoHash) -> LightClientBlock | None:
        """
        Return the next light-client block proof after the block `after_hash`.

        Returns `None` when the node has not produced that proof yet.
        """
        ...
