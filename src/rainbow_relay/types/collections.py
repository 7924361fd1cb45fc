"""Variable-length sequence Borsh type."""

from __future__ import annotations

from functools import cache
from typing import IO, Any, ClassVar, Iterator, Sequence

from pydantic import Field, TypeAdapter, ValidationError, field_validator, model_validator
from typing_extensions import Self

from .borsh_base import BorshModel, deserialize_value, serialize_value
from .exceptions import BorshTypeError
from .uint import Uint32


@cache
def _element_adapter(element_type: Any) -> TypeAdapter[Any]:
    """Build (once per element type) the adapter used to coerce raw elements."""
    return TypeAdapter(element_type)


class BorshVec(BorshModel):
    """
    Variable-length, immutable Borsh sequence.

    Wire format: a u32 little-endian element count followed by the elements
    back-to-back. An empty sequence still writes its zero count.

    Subclasses must define:
        ELEMENT_TYPE: The type of each element. May be `X | None` for
            sequences of optional values, which write a presence byte per slot.

    Example:
        class ApprovalSignatures(BorshVec):
            ELEMENT_TYPE = Signature | None

    Instances also validate from a bare list, so a JSON array can be fed
    straight into a container field declared with a `BorshVec` subclass.
    """

    ELEMENT_TYPE: ClassVar[Any]
    """The type of elements in this sequence."""

    data: Sequence[Any] = Field(default_factory=tuple)
    """
    The immutable sequence of elements.

    Accepts lists or tuples on input; stored as a tuple after validation.
    """

    @model_validator(mode="before")
    @classmethod
    def _wrap_bare_sequence(cls, value: Any) -> Any:
        """Accept `[...]` as shorthand for `{"data": [...]}`."""
        if isinstance(value, (list, tuple)):
            return {"data": value}
        return value

    @field_validator("data", mode="before")
    @classmethod
    def _validate_elements(cls, value: Any) -> tuple[Any, ...]:
        """Validate and convert input to a tuple of typed elements."""
        if not hasattr(cls, "ELEMENT_TYPE"):
            raise BorshTypeError(f"{cls.__name__} must define ELEMENT_TYPE")
        if isinstance(value, (str, bytes)) or not hasattr(value, "__iter__"):
            raise BorshTypeError(f"Expected iterable, got {type(value).__name__}")

        adapter = _element_adapter(cls.ELEMENT_TYPE)
        typed_values = []
        for index, element in enumerate(value):
            try:
                typed_values.append(adapter.validate_python(element))
            except ValidationError as e:
                raise ValueError(f"{cls.__name__}[{index}]: {e}") from e
        return tuple(typed_values)

    def serialize(self, stream: IO[bytes]) -> int:
        """Write the element count, then each element."""
        written = Uint32(len(self.data)).serialize(stream)
        for element in self.data:
            written += serialize_value(self.ELEMENT_TYPE, element, stream)
        return written

    @classmethod
    def deserialize(cls, stream: IO[bytes]) -> Self:
        """Read the element count, then that many elements."""
        count = int(Uint32.deserialize(stream))
        elements = [deserialize_value(cls.ELEMENT_TYPE, stream) for _ in range(count)]
        return cls(data=elements)

    def __len__(self) -> int:
        """Return the number of elements."""
        return len(self.data)

    def __iter__(self) -> Iterator[Any]:  # type: ignore[override]
        """Iterate over the elements."""
        return iter(self.data)

    def __getitem__(self, index: int) -> Any:
        """Access an element by index."""
        return self.data[index]

    def __repr__(self) -> str:
        """String representation showing the class name and data."""
        return f"{self.__class__.__name__}(data={list(self.data)!r})"
