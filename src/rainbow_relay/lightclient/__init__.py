"""Light-client block model and its canonical encoding."""

from .containers import (
    ApprovalSignatures,
    BlockHeaderInnerLite,
    LightClientBlock,
    ValidatorStake,
    ValidatorStakes,
)
from .encoder import (
    EMPTY_BLOCK_LENGTH,
    FIXED_HEADER_LENGTH,
    decode_light_client_block,
    encode_light_client_block,
    parse_light_client_block,
)
from .keys import KeyType, PublicKey, Signature

__all__ = [
    # Containers
    "LightClientBlock",
    "BlockHeaderInnerLite",
    "ValidatorStake",
    "ValidatorStakes",
    "ApprovalSignatures",
    # Keys
    "KeyType",
    "PublicKey",
    "Signature",
    # Encoding
    "encode_light_client_block",
    "decode_light_client_block",
    "parse_light_client_block",
    "FIXED_HEADER_LENGTH",
    "EMPTY_BLOCK_LENGTH",
]
