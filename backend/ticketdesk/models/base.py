"""Pydantic base class shared by all persisted models.

Python attributes are snake_case; the stored JSON document and the HTTP
surface use camelCase field names (userId, createdAt, expiresAt, ...).
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        # Older documents store numeric user and ticket ids
        coerce_numbers_to_str=True,
    )

    def to_json_dict(self) -> dict:
        """Serialize to a JSON-ready dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)
