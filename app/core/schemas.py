"""Shared pydantic base models."""
from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Model serialized with camelCase keys; snake_case accepted on input."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True
