"""Tests for fixed-length byte arrays and base58 helpers."""

from __future__ import annotations

import io
from typing import Any

import pytest
from hypothesis import given
from hypothesis import strategies as st
from pydantic import ValidationError, create_model

from rainbow_relay.types import (
    ZERO_HASH,
    BaseBytes,
    BorshStreamError,
    BorshValueError,
    Bytes32,
    Bytes64,
    Bytes65,
    from_base58,
    to_base58,
)


class TestBase58:
    """Base58 text form used by the source chain's RPC."""

    def test_known_vector(self) -> None:
        """A leading zero byte is the character `1`."""
        assert to_base58(b"\x00\x01") == "12"
        assert from_base58("12") == b"\x00\x01"

    def test_zero_hash_renders_as_ones(self) -> None:
        """Every leading zero byte maps to one `1`."""
        assert ZERO_HASH.to_base58() == "1" * 32

    def test_invalid_character_raises(self) -> None:
        """`0`, `O`, `I`, and `l` are outside the alphabet."""
        with pytest.raises(BorshValueError):
            from_base58("0OIl")

    @given(st.binary(min_size=0, max_size=80))
    def test_decode_inverts_encode(self, data: bytes) -> None:
        """`from_base58(to_base58(b)) == b` for any byte string."""
        assert from_base58(to_base58(data)) == data

    @given(st.binary(min_size=32, max_size=32))
    def test_text_round_trip(self, data: bytes) -> None:
        """`to_base58(from_base58(s)) == s` for canonical strings."""
        text = to_base58(data)
        assert to_base58(from_base58(text)) == text


class TestFixedLength:
    """Exact-width construction and coercion."""

    @pytest.mark.parametrize("cls", [Bytes32, Bytes64, Bytes65])
    def test_exact_length_accepted(self, cls: type[BaseBytes]) -> None:
        value = cls(b"\x07" * cls.LENGTH)
        assert len(value) == cls.LENGTH
        assert isinstance(value, bytes)

    @pytest.mark.parametrize("cls", [Bytes32, Bytes64, Bytes65])
    @pytest.mark.parametrize("delta", [-1, 1])
    def test_wrong_length_rejected(self, cls: type[BaseBytes], delta: int) -> None:
        with pytest.raises(BorshValueError, match=f"exactly {cls.LENGTH} bytes"):
            cls(b"\x07" * (cls.LENGTH + delta))

    def test_accepts_base58_and_hex(self) -> None:
        raw = bytes(range(32))
        assert Bytes32(to_base58(raw)) == raw
        assert Bytes32("0x" + raw.hex()) == raw

    def test_zero(self) -> None:
        assert Bytes32.zero() == b"\x00" * 32
        assert Bytes65.zero() == b"\x00" * 65

    def test_hex_has_no_prefix(self) -> None:
        assert Bytes32(b"\xab" * 32).hex() == "ab" * 32

    def test_repr_uses_base58(self) -> None:
        assert repr(ZERO_HASH) == f"Bytes32({'1' * 32})"


class TestBorshEncoding:
    """Fixed arrays are written raw, with no length prefix."""

    def test_encoding_is_raw(self) -> None:
        raw = bytes(range(64))
        assert Bytes64(raw).encode_bytes() == raw

    def test_deserialize_reads_exactly_length(self) -> None:
        stream = io.BytesIO(b"\x01" * 32 + b"\x02")
        assert Bytes32.deserialize(stream) == b"\x01" * 32
        assert stream.read() == b"\x02"

    def test_truncated_input_raises(self) -> None:
        with pytest.raises(BorshStreamError):
            Bytes65.decode_bytes(b"\x00" * 64)


class TestPydantic:
    """Validation and JSON rendering inside models."""

    def test_validates_base58_string(self) -> None:
        model = create_model("Model", value=(Bytes32, ...))
        instance: Any = model(value=to_base58(b"\x05" * 32))
        assert isinstance(instance.value, Bytes32)
        assert instance.value == b"\x05" * 32

    def test_wrong_length_is_validation_error(self) -> None:
        model = create_model("Model", value=(Bytes32, ...))
        with pytest.raises(ValidationError):
            model(value=to_base58(b"\x05" * 31))

    def test_json_renders_base58(self) -> None:
        model = create_model("Model", value=(Bytes32, ...))
        instance: Any = model(value=b"\x05" * 32)
        assert instance.model_dump(mode="json") == {"value": to_base58(b"\x05" * 32)}
