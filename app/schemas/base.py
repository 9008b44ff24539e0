"""
Base Pydantic schemas and common types.
"""
from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    model_config = ConfigDict(
        populate_by_name=True,
        use_enum_values=True,
    )


class UpstreamRecord(BaseModel):
    """
    Base for records received from the upstream order system.

    Upstream payloads are camelCase, loosely typed (numbers where strings
    are expected) and carry many fields we never read.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="ignore",
        frozen=True,
    )
