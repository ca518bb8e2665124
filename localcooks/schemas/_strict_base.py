"""Strict schema baselines with forbidden extras by default.

The web client speaks camelCase; models accept either the camelCase alias or
the Python field name, and FastAPI serializes responses by alias.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class StrictModel(BaseModel):
    """Neutral strict base for response DTOs."""

    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class StrictRequestModel(StrictModel):
    """Request DTO base that always forbids unexpected fields."""
