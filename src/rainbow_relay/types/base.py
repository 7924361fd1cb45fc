"""Reusable base model for relay data types."""

from pydantic import BaseModel, ConfigDict


class RelayModel(BaseModel):
    """
    An immutable pydantic base model.

    Field names match the snake_case keys used by the source chain's JSON-RPC,
    so no alias generator is applied. Unknown keys are ignored because nodes
    add informational fields (e.g. `timestamp_nanosec`) that the relay does not use.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        validate_default=True,
        arbitrary_types_allowed=True,
        extra="ignore",
        frozen=True,
    )
