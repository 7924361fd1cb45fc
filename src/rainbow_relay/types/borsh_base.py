"""Base classes and interfaces for all Borsh types."""

from __future__ import annotations

import io
import types
from abc import ABC, abstractmethod
from typing import IO, Any, Union, get_args, get_origin

from typing_extensions import Self

from .base import RelayModel
from .exceptions import BorshDecodeError, BorshStreamError, BorshTypeError

OPTION_NONE: bytes = b"\x00"
"""Presence byte written for an absent optional value."""

OPTION_SOME: bytes = b"\x01"
"""Presence byte written before a present optional value."""


class BorshType(ABC):
    """
    Abstract base class for all Borsh types.

    Borsh values are written back-to-back with no offsets or padding. A reader
    therefore consumes exactly the bytes of one value from a shared stream and
    leaves the stream positioned at the next value.
    """

    @abstractmethod
    def serialize(self, stream: IO[bytes]) -> int:
        """
        Serializes the object and writes it to a binary stream.

        Args:
            stream (IO[bytes]): The stream to write the serialized data to.

        Returns:
            int: The number of bytes written.
        """
        ...

    @classmethod
    @abstractmethod
    def deserialize(cls, stream: IO[bytes]) -> Self:
        """
        Deserializes one object from the current position of a binary stream.

        Args:
            stream (IO[bytes]): The stream to read from.

        Returns:
            Self: An instance of the class.
        """
        ...

    def encode_bytes(self) -> bytes:
        """
        Serializes the Borsh object to a byte string.

        Returns:
            bytes: The serialized byte string.
        """
        with io.BytesIO() as stream:
            self.serialize(stream)
            return stream.getvalue()

    @classmethod
    def decode_bytes(cls, data: bytes) -> Self:
        """
        Deserializes a byte string into a Borsh object.

        The whole input must be consumed; trailing bytes are an error.

        Args:
            data (bytes): The byte string to deserialize.

        Returns:
            Self: An instance of the class.
        """
        with io.BytesIO(data) as stream:
            value = cls.deserialize(stream)
            trailing = len(data) - stream.tell()
        if trailing:
            raise BorshDecodeError(cls.__name__, f"{trailing} trailing bytes after value")
        return value


def read_exact(stream: IO[bytes], size: int, type_name: str) -> bytes:
    """Read exactly `size` bytes or raise `BorshStreamError`."""
    data = stream.read(size)
    if len(data) != size:
        raise BorshStreamError(type_name, expected_bytes=size, actual_bytes=len(data))
    return data


def unwrap_optional(annotation: Any) -> tuple[type[BorshType], bool]:
    """
    Split an `X | None` annotation into `(X, True)`; other annotations give `(X, False)`.

    Only a single non-None member is allowed: Borsh has no anonymous unions.
    """
    if get_origin(annotation) in (Union, types.UnionType):
        members = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(members) != 1 or len(members) == len(get_args(annotation)):
            raise BorshTypeError(f"Unsupported union annotation {annotation!r}")
        return members[0], True
    return annotation, False


def serialize_value(annotation: Any, value: Any, stream: IO[bytes]) -> int:
    """Serialize `value` as the Borsh type named by `annotation`, handling options."""
    _, optional = unwrap_optional(annotation)
    if not optional:
        return value.serialize(stream)
    if value is None:
        stream.write(OPTION_NONE)
        return 1
    stream.write(OPTION_SOME)
    return 1 + value.serialize(stream)


def deserialize_value(annotation: Any, stream: IO[bytes]) -> Any:
    """Read one value of the Borsh type named by `annotation`, handling options."""
    inner, optional = unwrap_optional(annotation)
    if optional:
        flag = read_exact(stream, 1, f"Option[{inner.__name__}]")
        if flag == OPTION_NONE:
            return None
        if flag != OPTION_SOME:
            raise BorshDecodeError(f"Option[{inner.__name__}]", f"invalid presence byte {flag!r}")
    return inner.deserialize(stream)


class BorshModel(RelayModel, BorshType):
    """
    Base class for Borsh types that use Pydantic validation.

    This combines RelayModel (Pydantic validation + immutability) with Borsh serialization.
    Use this for containers and composite types. For simple types that need special
    inheritance (like int or bytes), use BorshType directly.
    """

    def __repr__(self) -> str:
        """String representation showing the class name and fields."""
        field_strs = [f"{name}={getattr(self, name)!r}" for name in type(self).model_fields]
        return f"{self.__class__.__name__}({' '.join(field_strs)})"
