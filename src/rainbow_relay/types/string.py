"""Length-prefixed UTF-8 string Borsh type."""

from __future__ import annotations

from typing import IO, Any

from pydantic import GetCoreSchemaHandler
from pydantic_core import core_schema
from typing_extensions import Self

from .borsh_base import BorshType, read_exact
from .exceptions import BorshDecodeError, BorshTypeError
from .uint import Uint32


class BorshString(str, BorshType):
    """
    A string written as a u32 little-endian byte length followed by its UTF-8 bytes.

    The prefix counts encoded bytes, not characters.
    """

    def __new__(cls, value: Any) -> Self:
        """Create a new string, rejecting non-string input."""
        if not isinstance(value, str):
            raise BorshTypeError(f"{cls.__name__} expects str, got {type(value).__name__}")
        return super().__new__(cls, value)

    def serialize(self, stream: IO[bytes]) -> int:
        """Write the length prefix and the UTF-8 payload."""
        encoded = self.encode("utf-8")
        written = Uint32(len(encoded)).serialize(stream)
        return written + stream.write(encoded)

    @classmethod
    def deserialize(cls, stream: IO[bytes]) -> Self:
        """Read a length prefix, then that many UTF-8 bytes."""
        length = int(Uint32.deserialize(stream))
        payload = read_exact(stream, length, cls.__name__)
        try:
            return cls(payload.decode("utf-8"))
        except UnicodeDecodeError as e:
            raise BorshDecodeError(cls.__name__, f"invalid UTF-8: {e}") from e

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        """Validate as a plain string, then wrap in the class."""
        return core_schema.no_info_after_validator_function(cls, core_schema.str_schema())
