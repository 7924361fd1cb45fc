"""Exception hierarchy for the Borsh type system."""

from __future__ import annotations


class BorshError(Exception):
    """
    Base exception for all Borsh-related errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


class BorshTypeError(BorshError):
    """Raised when a Borsh type is incorrectly defined or a value has the wrong type."""


class BorshValueError(BorshError, ValueError):
    """
    Raised when a value is invalid for a Borsh operation, even if the type is correct.

    Examples: an integer that does not fit its width, a hash of the wrong length,
    or a key whose textual prefix names no known curve.
    """


class BorshOverflowError(BorshValueError):
    """
    Raised when a numeric value is outside the valid range.

    Attributes:
        value: The value that caused the overflow.
        type_name: The Borsh type that couldn't hold the value.
        max_value: The maximum allowed value (inclusive).
    """

    def __init__(self, value: int, type_name: str, *, max_value: int) -> None:
        self.value = value
        self.type_name = type_name
        self.max_value = max_value

        super().__init__(f"{value} is out of range for {type_name} (valid range: [0, {max_value}])")


class BorshDecodeError(BorshError):
    """
    Raised when decoding Borsh bytes to a value fails.

    Attributes:
        type_name: The type being decoded.
        detail: Description of what went wrong.
    """

    def __init__(self, type_name: str, detail: str) -> None:
        self.type_name = type_name
        self.detail = detail

        super().__init__(f"Failed to decode {type_name}: {detail}")


class BorshStreamError(BorshDecodeError):
    """
    Raised when the input stream ends before a value is fully read.

    Attributes:
        expected_bytes: Number of bytes the reader needed.
        actual_bytes: Number of bytes that were available.
    """

    def __init__(self, type_name: str, *, expected_bytes: int, actual_bytes: int) -> None:
        self.expected_bytes = expected_bytes
        self.actual_bytes = actual_bytes

        super().__init__(
            type_name,
            f"stream ended prematurely: needed {expected_bytes} bytes, got {actual_bytes}",
        )
