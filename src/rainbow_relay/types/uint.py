"""Unsigned integer Borsh types."""

from __future__ import annotations

from typing import IO, Any, ClassVar, Literal, SupportsIndex, SupportsInt

from pydantic import GetCoreSchemaHandler, GetJsonSchemaHandler
from pydantic.json_schema import JsonSchemaValue
from pydantic_core import core_schema
from typing_extensions import Self

from .borsh_base import BorshType, read_exact
from .exceptions import BorshOverflowError, BorshTypeError


class BaseUint(int, BorshType):
    """
    A base class for custom unsigned integer types that inherits from `int`.

    Borsh writes unsigned integers little-endian at their full natural width.
    """

    BITS: ClassVar[int]
    """The number of bits in the integer (overridden by subclasses)."""

    def __new__(cls, value: SupportsInt | str) -> Self:
        """
        Create and validate a new Uint instance.

        Decimal strings are accepted because JSON-RPC nodes send values wider
        than 53 bits (stakes, nanosecond timestamps) as strings.

        Raises:
            BorshTypeError: If `value` is a bool, a float, or a non-decimal string.
            BorshOverflowError: If `value` is outside the allowed range [0, 2**BITS - 1].
        """
        if isinstance(value, bool):
            raise BorshTypeError(f"{cls.__name__} does not accept bool")
        if isinstance(value, float):
            raise BorshTypeError(f"{cls.__name__} does not accept float, got {value!r}")
        if isinstance(value, str):
            if not value.isdecimal():
                raise BorshTypeError(f"{cls.__name__} expects a decimal string, got {value!r}")
            int_value = int(value)
        else:
            int_value = int(value)
        if not (0 <= int_value < (2**cls.BITS)):
            raise BorshOverflowError(int_value, cls.__name__, max_value=2**cls.BITS - 1)
        return super().__new__(cls, int_value)

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        """Hook into Pydantic's validation system."""

        def validate(value: Any) -> BaseUint:
            """Pydantic validation function that calls the class constructor."""
            try:
                return cls(value)
            except (BorshTypeError, BorshOverflowError, TypeError) as e:
                raise ValueError(str(e)) from e

        return core_schema.no_info_plain_validator_function(
            validate,
            serialization=core_schema.plain_serializer_function_ser_schema(
                lambda instance: int(instance)
            ),
        )

    @classmethod
    def __get_pydantic_json_schema__(
        cls, core_schema: core_schema.CoreSchema, handler: GetJsonSchemaHandler
    ) -> JsonSchemaValue:
        """Hook into Pydantic's JSON Schema generation system."""
        return {"type": "integer", "minimum": 0, "format": f"uint{cls.BITS}"}

    @classmethod
    def byte_length(cls) -> int:
        """Number of bytes this integer occupies on the wire."""
        return cls.BITS // 8

    def to_bytes(
        self,
        length: SupportsIndex | None = None,
        byteorder: Literal["little", "big"] = "little",
        *,
        signed: bool = False,
    ) -> bytes:
        """
        Return an array of bytes representing the integer.

        Defaults to little-endian and a fixed length based on `BITS`.
        """
        actual_length = self.byte_length() if length is None else int(length)
        return super().to_bytes(length=actual_length, byteorder=byteorder, signed=signed)

    def serialize(self, stream: IO[bytes]) -> int:
        """Write the integer little-endian at its natural width."""
        return stream.write(self.to_bytes())

    @classmethod
    def deserialize(cls, stream: IO[bytes]) -> Self:
        """Read one little-endian integer of this width."""
        data = read_exact(stream, cls.byte_length(), cls.__name__)
        return cls(int.from_bytes(data, "little"))

    def __repr__(self) -> str:
        """Return the official string representation of the object."""
        return f"{type(self).__name__}({int(self)})"

    def __str__(self) -> str:
        """Return the informal string representation of the object."""
        return str(int(self))


class Uint8(BaseUint):
    """An 8-bit unsigned integer, used for presence flags and curve tags."""

    BITS = 8


class Uint32(BaseUint):
    """A 32-bit unsigned integer, used for sequence and string length prefixes."""

    BITS = 32


class Uint64(BaseUint):
    """A 64-bit unsigned integer, used for heights and timestamps."""

    BITS = 64


class Uint128(BaseUint):
    """A 128-bit unsigned integer, used for validator stakes."""

    BITS = 128
