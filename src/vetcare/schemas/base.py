"""
Shared Pydantic configuration for request and response schemas.

Clients speak camelCase (``firstName``, ``timeSlot``); Python code uses
snake_case. Both spellings are accepted on input and responses are
serialized with camelCase aliases.
"""

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class InputSchema(BaseModel):
    """Base class for create and update payloads."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )


class ResponseSchema(BaseModel):
    """Base class for client-facing DTOs."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    def to_response(self) -> Dict[str, Any]:
        """Serialize with camelCase keys and JSON-compatible values."""
        return self.model_dump(by_alias=True, mode="json")
