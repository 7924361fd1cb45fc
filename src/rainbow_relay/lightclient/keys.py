"""
Curve-tagged public keys and signatures.

The source chain prints key material as `"<curve>:<base58 payload>"`, for
example `"ed25519:6E8sCci9badyRkXb3JoRpBj5p8C6Tw41ELDZoiihKEtp"`. On the wire
the same value is a one-byte curve tag followed by the raw payload, whose
width is fixed by the curve.
"""

from __future__ import annotations

from enum import IntEnum
from typing import IO, Any, ClassVar

from pydantic import model_serializer, model_validator
from typing_extensions import Self

from rainbow_relay.types import (
    BaseBytes,
    BorshDecodeError,
    BorshModel,
    BorshValueError,
    Bytes32,
    Bytes64,
    Bytes65,
    Uint8,
    from_base58,
    to_base58,
)
from rainbow_relay.types.borsh_base import read_exact


class KeyType(IntEnum):
    """Signature curve, with its wire tag as the value."""

    ED25519 = 0
    SECP256K1 = 1

    @property
    def prefix(self) -> str:
        """The textual prefix used in RPC responses."""
        return self.name.lower()

    @classmethod
    def from_prefix(cls, prefix: str) -> KeyType:
        """
        Look up a curve by its textual prefix.

        Raises:
            BorshValueError: If the prefix names no known curve.
        """
        for key_type in cls:
            if key_type.prefix == prefix:
                return key_type
        raise BorshValueError(f"Unknown key type prefix {prefix!r}")


class TaggedKeyMaterial(BorshModel):
    """
    Common shape of curve-tagged key material.

    Subclasses set `PAYLOAD_TYPES`, mapping each curve to the fixed-width
    byte type of its payload.
    """

    PAYLOAD_TYPES: ClassVar[dict[KeyType, type[BaseBytes]]]
    """Payload byte type per curve."""

    key_type: KeyType
    """The curve the material belongs to."""

    data: BaseBytes
    """The raw payload, already decoded from base58."""

    @model_validator(mode="before")
    @classmethod
    def _coerce_payload(cls, value: Any) -> Any:
        """
        Accept the `"<curve>:<base58>"` form used by RPC responses, and coerce
        the payload to the byte type of its curve.
        """
        if isinstance(value, str):
            prefix, sep, payload = value.partition(":")
            if not sep:
                raise BorshValueError(f"{cls.__name__} {value!r} has no curve prefix")
            value = {"key_type": KeyType.from_prefix(prefix), "data": from_base58(payload)}
        if not isinstance(value, dict) or "key_type" not in value or "data" not in value:
            return value
        key_type = KeyType(value["key_type"])
        return {"key_type": key_type, "data": cls.PAYLOAD_TYPES[key_type](value["data"])}

    def serialize(self, stream: IO[bytes]) -> int:
        """Write the curve tag, then the raw payload."""
        return Uint8(self.key_type).serialize(stream) + self.data.serialize(stream)

    @classmethod
    def deserialize(cls, stream: IO[bytes]) -> Self:
        """Read the curve tag, then a payload of the width that curve requires."""
        tag = int.from_bytes(read_exact(stream, 1, cls.__name__), "little")
        try:
            key_type = KeyType(tag)
        except ValueError as e:
            raise BorshDecodeError(cls.__name__, f"unknown curve tag {tag}") from e
        return cls(key_type=key_type, data=cls.PAYLOAD_TYPES[key_type].deserialize(stream))

    @model_serializer
    def _serialize_text(self) -> str:
        return str(self)

    def __str__(self) -> str:
        """Render in the `"<curve>:<base58>"` form."""
        return f"{self.key_type.prefix}:{to_base58(self.data)}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self})"


class PublicKey(TaggedKeyMaterial):
    """A validator's public key."""

    PAYLOAD_TYPES = {KeyType.ED25519: Bytes32, KeyType.SECP256K1: Bytes64}


class Signature(TaggedKeyMaterial):
    """An approval signature over the next block."""

    PAYLOAD_TYPES = {KeyType.ED25519: Bytes64, KeyType.SECP256K1: Bytes65}
