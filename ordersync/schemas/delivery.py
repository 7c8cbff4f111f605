"""
ordersync — Delivery info schemas
"""
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class DeliveryUpdateRequest(BaseModel):
    """Partial update; only the fields sent are merged."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str | None = Field(None, max_length=200)
    phone_number: str | None = Field(None, max_length=40)
    email: str | None = Field(None, max_length=200)
    address: str | None = Field(None, max_length=500)
    city: str | None = Field(None, max_length=200)
    zip_code: str | None = Field(None, max_length=20)
    delivery_instructions: str | None = Field(None, max_length=500)

    def to_updates(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_unset=True)


class DeliveryValidationResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    is_valid: bool
    errors: dict[str, str]
