"""Shared schema base classes for API payloads."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ORMModel(BaseModel):
    """Base model that reads attributes from SQLAlchemy rows."""

    model_config = ConfigDict(from_attributes=True)


class CamelModel(BaseModel):
    """Base model exposing camelCase JSON while keeping snake_case attributes."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
