"""
ordersync — Menu models

Raw service shape:
    { "drink_of_the_day": {...} | null,
      "full_menu": { "menu": [...], "addons": [...] } }
"""
import time
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field

from ordersync.models.cart import as_text


def parse_price(price: Any) -> dict[str, float]:
    if isinstance(price, bool):
        return {"default": 0}
    if isinstance(price, (int, float)):
        return {"default": price}
    if isinstance(price, Mapping):
        return dict(price)
    if isinstance(price, str):
        try:
            return {"default": float(price)}
        except ValueError:
            return {"default": 0}
    return {"default": 0}


class MenuItem(BaseModel):
    id: str = "unknown-item"
    name: str = "Unknown Item"
    type: str = "drink"
    description: str = ""
    taste: str = ""
    price: dict[str, Any] = Field(default_factory=lambda: {"default": 0})
    image: str | None = None
    options: list[Any] = Field(default_factory=list)

    @classmethod
    def from_raw(cls, data: Mapping[str, Any]) -> "MenuItem":
        options = data.get("options")
        return cls(
            id=str(data.get("id") or data.get("name") or "unknown-item"),
            name=as_text(data.get("name"), "Unknown Item"),
            type=as_text(data.get("type"), "drink"),
            description=as_text(data.get("description")),
            taste=as_text(data.get("taste")),
            price=parse_price(data.get("price")),
            image=as_text(data.get("image")) or None,
            options=list(options) if isinstance(options, list) else [],
        )

    def get_price(self, size: str = "default") -> float:
        if size == "default" and "regular" in self.price:
            return self.price["regular"]
        return self.price.get(size) or self.price.get("default") or 0

    def available_sizes(self) -> list[str]:
        return [key for key in self.price if key != "default"]

    def to_raw(self) -> dict[str, Any]:
        return self.model_dump()


def _parse_items(values: Any) -> list[MenuItem]:
    if not isinstance(values, list):
        return []
    return [MenuItem.from_raw(v) for v in values if isinstance(v, Mapping)]


class Menu(BaseModel):
    drink_of_the_day: MenuItem | None = None
    menu_items: list[MenuItem] = Field(default_factory=list)
    addons: list[MenuItem] = Field(default_factory=list)

    @classmethod
    def build(cls, data: "Menu | Mapping[str, Any] | None") -> "Menu":
        """Wrap raw service data. An existing Menu is returned unchanged."""
        if isinstance(data, Menu):
            return data
        data = data or {}
        full_menu = data.get("full_menu")
        if not isinstance(full_menu, Mapping):
            full_menu = {}
        drink = data.get("drink_of_the_day")
        return cls(
            drink_of_the_day=MenuItem.from_raw(drink) if isinstance(drink, Mapping) else None,
            menu_items=_parse_items(full_menu.get("menu")),
            addons=_parse_items(full_menu.get("addons")),
        )

    def all_items(self) -> list[MenuItem]:
        items = list(self.menu_items)
        if self.drink_of_the_day:
            items.insert(0, self.drink_of_the_day)
        return items

    def items_by_type(self, item_type: str) -> list[MenuItem]:
        return [item for item in self.all_items() if item.type == item_type]

    def find_item_by_id(self, item_id: str) -> MenuItem | None:
        return next((item for item in self.all_items() if item.id == item_id), None)

    def find_item_by_name(self, name: str) -> MenuItem | None:
        return next((item for item in self.all_items() if item.name == name), None)

    def to_raw(self) -> dict[str, Any]:
        return {
            "drink_of_the_day": self.drink_of_the_day.to_raw() if self.drink_of_the_day else None,
            "full_menu": {
                "menu": [item.to_raw() for item in self.menu_items],
                "addons": [addon.to_raw() for addon in self.addons],
            },
        }


class CacheEntry(BaseModel):
    """Menu cache slot: raw payload plus fetch time (UNIX seconds)."""

    payload: dict[str, Any]
    fetchedAt: float

    @classmethod
    def now(cls, payload: Mapping[str, Any]) -> "CacheEntry":
        return cls(payload=dict(payload), fetchedAt=time.time())

    def age_seconds(self, now: float | None = None) -> float:
        return max(0.0, (now if now is not None else time.time()) - self.fetchedAt)


class CacheInfo(BaseModel):
    has_cache: bool
    is_expired: bool
    age_seconds: float = 0
