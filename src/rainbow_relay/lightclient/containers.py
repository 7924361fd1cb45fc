"""
Light-client block containers.

A light-client block is the compact proof the source chain produces for
external verifiers: a finalized block's header summary, the validator set
for the next epoch, and the approvals that finalize it.

The field order of every container here is the verifier contract's decoding
order. Do not reorder fields.
"""

from __future__ import annotations

from typing import Any

from pydantic import field_validator

from rainbow_relay.types import BorshString, BorshVec, Bytes32, Container, Uint64, Uint128

from .keys import PublicKey, Signature


class BlockHeaderInnerLite(Container):
    """
    The lite part of a block header that a light client hashes.

    Width on the wire: 8 + 4 * 32 + 8 + 2 * 32 = 208 bytes.
    """

    height: Uint64
    """Height of the block."""

    epoch_id: Bytes32
    """Epoch this block belongs to."""

    next_epoch_id: Bytes32
    """Epoch that follows, whose producers are `next_bps`."""

    prev_state_root: Bytes32
    """State root before applying the block."""

    outcome_root: Bytes32
    """Root of the execution outcomes of the previous block."""

    timestamp: Uint64
    """Block timestamp in nanoseconds."""

    next_bp_hash: Bytes32
    """Hash of the next epoch's block producer set."""

    block_merkle_root: Bytes32
    """Merkle root of all block hashes up to this block."""


class ValidatorStake(Container):
    """One entry of the next epoch's block producer set."""

    account_id: BorshString
    """Validator account identifier."""

    public_key: PublicKey
    """Curve-tagged public key."""

    stake: Uint128
    """Stake weight, in the source chain's smallest unit."""


class ValidatorStakes(BorshVec):
    """Ordered block producer set."""

    ELEMENT_TYPE = ValidatorStake


class ApprovalSignatures(BorshVec):
    """Ordered approval slots; a slot is empty when that producer did not sign."""

    ELEMENT_TYPE = Signature | None


class LightClientBlock(Container):
    """
    A finalized light-client block as served by `next_light_client_block`.

    Wire layout (little-endian):

    - prev_block_hash             32
    - next_block_inner_hash       32
    - inner_lite                 208
    - inner_rest_hash             32
    - next_bps                     1 (presence) + 4 (count) + entries
    - approvals_after_next         4 (count) + slots
    """

    prev_block_hash: Bytes32
    next_block_inner_hash: Bytes32
    inner_lite: BlockHeaderInnerLite
    inner_rest_hash: Bytes32

    next_bps: ValidatorStakes | None = ValidatorStakes()
    """
    Next epoch's producers.

    The source may omit the set; it is then treated as empty. The presence
    byte is always written, so the field never holds `None` after validation.
    """

    approvals_after_next: ApprovalSignatures = ApprovalSignatures()

    @field_validator("next_bps", mode="before")
    @classmethod
    def _absent_producers_are_empty(cls, value: Any) -> Any:
        return ValidatorStakes() if value is None else value

    @property
    def height(self) -> Uint64:
        """Height of the block, from its lite header."""
        return self.inner_lite.height
