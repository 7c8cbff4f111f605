"""
ordersync — Cart entry model

Cart snapshots are persisted as a JSON list of camelCase objects. The
repository works on those plain dicts; CartEntry only builds new ones.
"""
import logging
import math
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)


def cart_entry_id(name: str, selected_size: str | None) -> str:
    """Content-addressed merge key: same name and size → same entry."""
    return f"{name}{selected_size or ''}"


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def as_text(value: Any, default: str = "") -> str:
    """Stored JSON may carry numbers where text is expected."""
    return default if value is None or value == "" else str(value)


def resolve_price(price: Any, selected_size: str | None = None) -> float:
    """Price for a size from a size→price map, a scalar price, or 0."""
    if isinstance(price, Mapping):
        if selected_size and is_number(price.get(selected_size)):
            return price[selected_size]
        for value in price.values():
            if is_number(value):
                return value
    elif is_number(price):
        return price
    logger.error("Invalid price structure %r, defaulting to 0", price)
    return 0


def as_item_dict(item: Any) -> dict[str, Any]:
    if isinstance(item, BaseModel):
        return item.model_dump()
    if isinstance(item, Mapping):
        return dict(item)
    return {"name": "Unknown Item", "price": 0, "type": "unknown"}


class CartEntry(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    name: str
    type: str = "unknown"
    image: str | None = None
    price: float = 0
    quantity: int = 1
    selected_size: str | None = None
    selected_options: list[Any] = Field(default_factory=list)

    @classmethod
    def from_item(
        cls,
        item: Any,
        quantity: int = 1,
        selected_size: str | None = None,
        selected_options: list[Any] | None = None,
    ) -> "CartEntry":
        data = as_item_dict(item)
        name = as_text(data.get("name"), "Unknown Item")
        selected_size = as_text(selected_size) or None
        return cls(
            id=cart_entry_id(name, selected_size),
            name=name,
            type=as_text(data.get("type"), "unknown"),
            image=as_text(data.get("image")) or None,
            price=resolve_price(data.get("price"), selected_size),
            quantity=quantity,
            selected_size=selected_size,
            selected_options=list(selected_options or []),
        )

    def to_storage(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)
