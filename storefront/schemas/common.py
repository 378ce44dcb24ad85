"""
Shared schema configuration.

API payloads use camelCase field names; snake_case names are accepted on
input as well.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class CamelResponse(CamelModel):
    """Base response schema populated from ORM objects."""

    model_config = ConfigDict(from_attributes=True)
