"""
Canonical encoding of light-client blocks for the verifier contract.

The contract decodes submissions with Borsh. Any deviation in field order,
width, or tag either fails the contract's decode or, worse, decodes into a
different block. Encoding is a pure function of the block record.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from rainbow_relay.errors import MalformedBlockError
from rainbow_relay.types import BorshError

from .containers import LightClientBlock

HASH_LENGTH = 32
"""Width of every hash in the block."""

INNER_LITE_LENGTH = 8 + 4 * HASH_LENGTH + 8 + 2 * HASH_LENGTH
"""Width of the encoded lite header."""

FIXED_HEADER_LENGTH = 2 * HASH_LENGTH + INNER_LITE_LENGTH + HASH_LENGTH
"""Bytes before the producer set: two hashes, the lite header, the rest hash."""

EMPTY_BLOCK_LENGTH = FIXED_HEADER_LENGTH + 1 + 4 + 4
"""Encoded size of a block with no producers and no approvals (313 bytes)."""


def parse_light_client_block(payload: Mapping[str, Any]) -> LightClientBlock:
    """
    Build a block from a `next_light_client_block` RPC result.

    Hashes and key material are decoded from their textual base58 form here,
    so a block that parses is a block that encodes.

    Raises:
        MalformedBlockError: If a field is missing, not valid base58, of the
            wrong width, or carries an unknown key prefix.
    """
    try:
        return LightClientBlock.model_validate(payload)
    except (ValidationError, BorshError) as e:
        raise MalformedBlockError(f"Malformed light client block: {e}") from e


def encode_light_client_block(block: LightClientBlock) -> bytes:
    """
    Encode a block into the byte layout the verifier contract expects.

    Args:
        block: A validated light-client block.

    Returns:
        The canonical Borsh encoding.
    """
    return block.encode_bytes()


def decode_light_client_block(data: bytes) -> LightClientBlock:
    """
    Decode bytes produced by `encode_light_client_block`.

    The relay never needs this on its hot path; it exists for diagnostics
    and to check encodings against the contract's decoder.

    Raises:
        MalformedBlockError: If the bytes are truncated, carry trailing data,
            or contain an invalid tag or presence byte.
    """
    try:
        return LightClientBlock.decode_bytes(data)
    except (ValidationError, BorshError) as e:
        raise MalformedBlockError(f"Cannot decode light client block: {e}") from e
