"""
Fixed-length byte array Borsh types.

Borsh writes a fixed-length array as its raw bytes with no length prefix.
Source-chain RPC renders hashes as base58 strings, so the types accept that
form on input and render it back on JSON serialization.
"""

from __future__ import annotations

from typing import IO, Any, ClassVar, Iterable, SupportsIndex

import base58
from pydantic.annotated_handlers import GetCoreSchemaHandler
from pydantic_core import core_schema
from typing_extensions import Self

from .borsh_base import BorshType, read_exact
from .exceptions import BorshTypeError, BorshValueError


def from_base58(text: str) -> bytes:
    """
    Decode a base58 string (Bitcoin alphabet) to raw bytes.

    Raises:
        BorshValueError: If the string contains characters outside the alphabet.
    """
    try:
        return base58.b58decode(text)
    except ValueError as e:
        raise BorshValueError(f"Invalid base58 string {text!r}: {e}") from e


def to_base58(data: bytes) -> str:
    """Encode raw bytes as a base58 string (Bitcoin alphabet)."""
    return base58.b58encode(data).decode("ascii")


def _coerce_to_bytes(value: Any) -> bytes:
    """
    Coerce a variety of inputs to raw bytes.

    Accepts:
      - `bytes` / `bytearray` (returned as immutable `bytes`)
      - Hex strings with a '0x' prefix (as returned by EVM nodes)
      - Base58 strings (as returned by the source chain's RPC)
      - Iterables of integers in [0, 255]
    """
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str):
        # '0' is not in the base58 alphabet, so the prefix is unambiguous.
        if value.startswith("0x"):
            return bytes.fromhex(value[2:])
        return from_base58(value)
    if isinstance(value, Iterable):
        return bytes(bytearray(value))
    raise BorshTypeError(f"Cannot convert {type(value).__name__} to bytes")


class BaseBytes(bytes, BorshType):
    """
    A base class for fixed-length byte types that inherits from `bytes`.

    Subclasses set:
      - `LENGTH`: exact number of bytes the instance must contain.
    """

    LENGTH: ClassVar[int]
    """The exact number of bytes (overridden by subclasses)."""

    def __new__(cls, value: Any = b"") -> Self:
        """
        Create and validate a new Bytes instance.

        Raises:
            BorshValueError: If the resulting byte length differs from `LENGTH`.
        """
        if not hasattr(cls, "LENGTH"):
            raise BorshTypeError(f"{cls.__name__} must define LENGTH")

        b = _coerce_to_bytes(value)
        if len(b) != cls.LENGTH:
            raise BorshValueError(
                f"{cls.__name__} expects exactly {cls.LENGTH} bytes, got {len(b)}"
            )
        return super().__new__(cls, b)

    @classmethod
    def zero(cls) -> Self:
        """Create a new instance filled with zero bytes."""
        return cls(b"\x00" * cls.LENGTH)

    def serialize(self, stream: IO[bytes]) -> int:
        """Write the raw bytes to `stream`."""
        return stream.write(self)

    @classmethod
    def deserialize(cls, stream: IO[bytes]) -> Self:
        """Read exactly `LENGTH` bytes from `stream`."""
        return cls(read_exact(stream, cls.LENGTH, cls.__name__))

    def to_base58(self) -> str:
        """Render the value the way the source chain prints hashes."""
        return to_base58(self)

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        """
        Hook into Pydantic's validation system.

        1. If the input is already an instance of the class, accept it.
        2. Otherwise coerce bytes or a base58/hex string to the exact LENGTH.
        3. For JSON serialization, render the value as base58.
        """

        def validate(value: Any) -> BaseBytes:
            try:
                return cls(value)
            except (BorshTypeError, BorshValueError) as e:
                raise ValueError(str(e)) from e

        return core_schema.union_schema(
            [
                core_schema.is_instance_schema(cls),
                core_schema.no_info_plain_validator_function(validate),
            ],
            serialization=core_schema.plain_serializer_function_ser_schema(
                lambda x: x.to_base58(), when_used="json"
            ),
        )

    def __repr__(self) -> str:
        """Return a string representation of the bytes."""
        return f"{type(self).__name__}({self.to_base58()})"

    def __hash__(self) -> int:
        """Return the hash of the bytes."""
        return hash((type(self), bytes(self)))

    def hex(self, sep: str | bytes | None = None, bytes_per_sep: SupportsIndex = 1) -> str:
        """Return the hexadecimal string representation of the underlying bytes."""
        return bytes(self).hex() if sep is None else bytes(self).hex(sep, bytes_per_sep)


class Bytes32(BaseBytes):
    """Fixed-size byte array of exactly 32 bytes: block hashes, roots, ed25519 keys."""

    LENGTH = 32


class Bytes64(BaseBytes):
    """Fixed-size byte array of exactly 64 bytes: ed25519 signatures, secp256k1 keys."""

    LENGTH = 64


class Bytes65(BaseBytes):
    """Fixed-size byte array of exactly 65 bytes: recoverable secp256k1 signatures."""

    LENGTH = 65


CryptoHash = Bytes32
"""A source-chain hash (sha256 digest), base58-encoded in RPC responses."""

ZERO_HASH: Bytes32 = Bytes32.zero()
"""The 32-byte zero hash."""
