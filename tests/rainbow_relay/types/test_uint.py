"""Unsigned Integer Type Tests."""

from __future__ import annotations

import io
from typing import Any

import pytest
from hypothesis import given
from hypothesis import strategies as st
from pydantic import ValidationError, create_model

from rainbow_relay.types import (
    BaseUint,
    BorshOverflowError,
    BorshStreamError,
    BorshTypeError,
    Uint8,
    Uint32,
    Uint64,
    Uint128,
)

ALL_UINT_TYPES = (Uint8, Uint32, Uint64, Uint128)
"""A collection of all Uint types to test against."""


@pytest.mark.parametrize("uint_class", ALL_UINT_TYPES)
def test_pydantic_validation_accepts_valid_int(uint_class: type[BaseUint]) -> None:
    """Tests that Pydantic validation correctly accepts a valid integer."""
    model = create_model("Model", value=(uint_class, ...))

    instance: Any = model(value=10)
    assert isinstance(instance.value, uint_class)
    assert instance.value == uint_class(10)


@pytest.mark.parametrize("uint_class", ALL_UINT_TYPES)
def test_pydantic_validation_accepts_decimal_string(uint_class: type[BaseUint]) -> None:
    """RPC nodes send wide integers as decimal strings."""
    model = create_model("Model", value=(uint_class, ...))

    instance: Any = model(value="42")
    assert instance.value == 42
    assert isinstance(instance.value, uint_class)


@pytest.mark.parametrize("uint_class", ALL_UINT_TYPES)
@pytest.mark.parametrize(
    "invalid_value", [True, False, "-1", "0x10", "1.5", None, -1, 1.5, 2.0]
)
def test_pydantic_validation_rejects_invalid_values(
    uint_class: type[BaseUint], invalid_value: Any
) -> None:
    """Bools, floats, negative numbers, non-decimal strings, and None are rejected."""
    model = create_model("Model", value=(uint_class, ...))

    with pytest.raises(ValidationError):
        model(value=invalid_value)


@pytest.mark.parametrize("uint_class", ALL_UINT_TYPES)
def test_bool_is_rejected(uint_class: type[BaseUint]) -> None:
    """A bool is an int subclass but never a valid integer value."""
    with pytest.raises(BorshTypeError):
        uint_class(True)


@pytest.mark.parametrize("uint_class", ALL_UINT_TYPES)
@pytest.mark.parametrize("value", [1.5, 2.0, float("nan")])
def test_float_is_rejected(uint_class: type[BaseUint], value: float) -> None:
    """Floats are never truncated to an integer."""
    with pytest.raises(BorshTypeError, match="float"):
        uint_class(value)


@pytest.mark.parametrize("uint_class", ALL_UINT_TYPES)
def test_bounds(uint_class: type[BaseUint]) -> None:
    """The range is exactly [0, 2**BITS - 1]."""
    assert uint_class(0) == 0
    assert uint_class(2**uint_class.BITS - 1) == 2**uint_class.BITS - 1

    with pytest.raises(BorshOverflowError) as exc_info:
        uint_class(2**uint_class.BITS)
    assert exc_info.value.max_value == 2**uint_class.BITS - 1

    with pytest.raises(BorshOverflowError):
        uint_class(-1)


@pytest.mark.parametrize(
    "uint_class, value, expected",
    [
        (Uint8, 1, b"\x01"),
        (Uint32, 1, b"\x01\x00\x00\x00"),
        (Uint32, 0x01020304, b"\x04\x03\x02\x01"),
        (Uint64, 100, b"\x64" + b"\x00" * 7),
        (Uint128, 1, b"\x01" + b"\x00" * 15),
        (Uint128, 2**128 - 1, b"\xff" * 16),
    ],
)
def test_encoding_is_little_endian_at_full_width(
    uint_class: type[BaseUint], value: int, expected: bytes
) -> None:
    """Integers are written little-endian at their natural width."""
    assert uint_class(value).encode_bytes() == expected
    assert uint_class.decode_bytes(expected) == value


@pytest.mark.parametrize("uint_class", ALL_UINT_TYPES)
def test_serialize_reports_bytes_written(uint_class: type[BaseUint]) -> None:
    """`serialize` returns the number of bytes it wrote."""
    stream = io.BytesIO()
    assert uint_class(7).serialize(stream) == uint_class.byte_length()
    assert len(stream.getvalue()) == uint_class.byte_length()


def test_deserialize_short_stream_raises() -> None:
    """A truncated integer is a stream error, not a smaller number."""
    with pytest.raises(BorshStreamError) as exc_info:
        Uint64.decode_bytes(b"\x01\x02\x03")
    assert exc_info.value.expected_bytes == 8
    assert exc_info.value.actual_bytes == 3


@given(st.integers(min_value=0, max_value=2**128 - 1))
def test_uint128_decode_inverts_encode(value: int) -> None:
    """Decoding an encoded u128 recovers the value."""
    assert Uint128.decode_bytes(Uint128(value).encode_bytes()) == value


def test_repr_and_str() -> None:
    """`repr` names the type; `str` is the plain number."""
    assert repr(Uint64(5)) == "Uint64(5)"
    assert str(Uint64(5)) == "5"
