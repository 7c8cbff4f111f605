"""
ordersync — Cart request/response schemas
"""
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class AddToCartRequest(BaseModel):
    """Either a full item payload or the id of a menu item to look up."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    item: dict[str, Any] | None = None
    menu_item_id: str | None = Field(None, examples=["latte"])
    quantity: int = Field(1, ge=1, le=99)
    selected_size: str | None = Field(None, examples=["large"])
    selected_options: list[Any] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_one_source(self) -> "AddToCartRequest":
        if (self.item is None) == (self.menu_item_id is None):
            raise ValueError("Provide exactly one of 'item' or 'menuItemId'")
        return self


class UpdateCartItemRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    quantity: int | None = Field(None, ge=0, le=99)
    selected_options: list[Any] | None = None

    def to_updates(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_unset=True)


class CartResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    items: list[dict[str, Any]]
    total: float
    item_count: int
