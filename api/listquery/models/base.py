"""Shared base model for request and response bodies."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base model whose JSON form uses camelCase keys.

    Python code reads and writes snake_case attributes; FastAPI serializes
    response models by alias, so clients always see camelCase.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
