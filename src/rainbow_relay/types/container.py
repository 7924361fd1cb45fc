"""
Borsh Container Type: Ordered heterogeneous collections with named fields.

Containers are the primary way to define structured wire data. A container
serializes its fields in definition order with nothing in between: no
offsets, no padding, no field tags. The field declaration order therefore IS
the wire format, and reordering two fields is a breaking change.
"""

from __future__ import annotations

from typing import IO

from typing_extensions import Self

from .borsh_base import BorshModel, deserialize_value, serialize_value


class Container(BorshModel):
    """
    Borsh Container: A strict, ordered collection of heterogeneous named fields.

    Key properties:
    - Fields are serialized in definition order
    - Fields annotated `X | None` are written as a presence byte plus the value
    - Inherits Pydantic validation for type safety

    Example:
        >>> class Header(Container):
        ...     height: Uint64
        ...     prev_hash: Bytes32
        ...     producers: ValidatorStakes | None

    Serialization format:
        [field_1][field_2]...[field_n]
    """

    def serialize(self, stream: IO[bytes]) -> int:
        """
        Serialize each field in definition order.

        Args:
            stream: Binary stream to write serialized bytes to.

        Returns:
            Number of bytes written to the stream.
        """
        return sum(
            serialize_value(field_info.annotation, getattr(self, field_name), stream)
            for field_name, field_info in type(self).model_fields.items()
        )

    @classmethod
    def deserialize(cls, stream: IO[bytes]) -> Self:
        """
        Deserialize a container by reading each field in definition order.

        Args:
            stream: Binary stream positioned at the first field.

        Returns:
            New container instance with deserialized values.
        """
        fields = {
            field_name: deserialize_value(field_info.annotation, stream)
            for field_name, field_info in cls.model_fields.items()
        }
        return cls(**fields)
