"""Reusable Borsh wire types for the relay."""

from .base import RelayModel
from .borsh_base import BorshModel, BorshType
from .byte_arrays import (
    ZERO_HASH,
    BaseBytes,
    Bytes32,
    Bytes64,
    Bytes65,
    CryptoHash,
    from_base58,
    to_base58,
)
from .collections import BorshVec
from .container import Container
from .exceptions import (
    BorshDecodeError,
    BorshError,
    BorshOverflowError,
    BorshStreamError,
    BorshTypeError,
    BorshValueError,
)
from .string import BorshString
from .uint import BaseUint, Uint8, Uint32, Uint64, Uint128

__all__ = [
    # Core types
    "Uint8",
    "Uint32",
    "Uint64",
    "Uint128",
    "BaseUint",
    "BaseBytes",
    "Bytes32",
    "Bytes64",
    "Bytes65",
    "CryptoHash",
    "ZERO_HASH",
    "BorshString",
    "BorshVec",
    "Container",
    "BorshType",
    "BorshModel",
    "RelayModel",
    # Base58 helpers
    "from_base58",
    "to_base58",
    # Exceptions
    "BorshError",
    "BorshTypeError",
    "BorshValueError",
    "BorshOverflowError",
    "BorshDecodeError",
    "BorshStreamError",
]
