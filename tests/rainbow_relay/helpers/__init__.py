"""Test helpers for rainbow_relay unit tests."""

from __future__ import annotations

from .builders import (
    make_block,
    make_block_payload,
    make_bytes32,
    make_ed25519_key,
    make_ed25519_signature,
    make_hash,
    make_secp256k1_key,
    make_secp256k1_signature,
    make_validator,
)
from .mocks import RELAY_ADDRESS, FakeSourceChain, FakeTargetChain

__all__ = [
    # Builders
    "make_block",
    "make_block_payload",
    "make_bytes32",
    "make_ed25519_key",
    "make_ed25519_signature",
    "make_hash",
    "make_secp256k1_key",
    "make_secp256k1_signature",
    "make_validator",
    # Mocks
    "FakeSourceChain",
    "FakeTargetChain",
    "RELAY_ADDRESS",
]
