"""Shared pydantic configuration for engine results."""

from __future__ import annotations

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Result model that serialises with camelCase keys."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        use_enum_values = True


__all__ = ["CamelModel"]
