"""
ordersync — Cart repository (serialized mutation queue)

Mutations issued against one CartRepository run strictly FIFO through its
MutationQueue. Each one re-reads the snapshot, applies its change and
persists before returning, so a failed write never blocks the operations
queued behind it.
"""
import logging
from typing import Any

from ordersync.core.serial import MutationQueue, serialized
from ordersync.core.storage import CART_DATA_KEY, KeyValueStore, read_json, write_json
from ordersync.models.cart import CartEntry, is_number

logger = logging.getLogger(__name__)


class CartRepository:
    def __init__(self, store: KeyValueStore):
        self.store = store
        self._queue = MutationQueue("cart")

    async def get_cart_items(self) -> list[dict[str, Any]]:
        cart = await read_json(self.store, CART_DATA_KEY, default=[])
        if not isinstance(cart, list):
            logger.warning("Cart snapshot is not a list, treating as empty")
            return []
        return [entry for entry in cart if isinstance(entry, dict)]

    async def _save(self, cart: list[dict[str, Any]]) -> None:
        await write_json(self.store, CART_DATA_KEY, cart)

    @serialized()
    async def add_to_cart(
        self,
        item: Any,
        quantity: int = 1,
        selected_size: str | None = None,
        selected_options: list[Any] | None = None,
    ) -> list[dict[str, Any]]:
        new_entry = CartEntry.from_item(item, quantity, selected_size, selected_options)
        cart = await self.get_cart_items()

        existing = next((entry for entry in cart if entry.get("id") == new_entry.id), None)
        if existing is not None:
            current = existing.get("quantity")
            existing["quantity"] = (current if is_number(current) else 0) + quantity
            logger.debug("Merged %s into existing cart entry, quantity=%s", new_entry.id, existing["quantity"])
        else:
            cart.append(new_entry.to_storage())
            logger.debug("Added cart entry %s", new_entry.id)

        await self._save(cart)
        return cart

    @serialized()
    async def remove_from_cart(self, item_id: str) -> list[dict[str, Any]]:
        cart = [entry for entry in await self.get_cart_items() if entry.get("id") != item_id]
        await self._save(cart)
        return cart

    @serialized()
    async def update_cart_item(self, item_id: str, updates: dict[str, Any]) -> list[dict[str, Any]]:
        """Shallow-merge `updates` into one entry. Zero quantities are left for the caller to prune."""
        cart = await self.get_cart_items()
        for index, entry in enumerate(cart):
            if entry.get("id") == item_id:
                cart[index] = {**entry, **updates}
                await self._save(cart)
                break
        return cart

    @serialized()
    async def remove_ordered_items(self, ordered: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Take the ordered quantities out of the cart; anything added since stays."""
        ordered_quantities: dict[Any, float] = {}
        for entry in ordered:
            item_id, quantity = entry.get("id"), entry.get("quantity")
            ordered_quantities[item_id] = ordered_quantities.get(item_id, 0) + (quantity if is_number(quantity) else 0)

        cart = []
        for entry in await self.get_cart_items():
            if entry.get("id") not in ordered_quantities:
                cart.append(entry)
                continue
            current = entry.get("quantity")
            remaining = (current if is_number(current) else 0) - ordered_quantities.pop(entry.get("id"))
            if remaining > 0:
                cart.append({**entry, "quantity": remaining})

        await self._save(cart)
        return cart

    @serialized()
    async def clear_cart(self) -> bool:
        await self._save([])
        return True

    async def get_cart_total(self) -> float:
        total = 0.0
        for entry in await self.get_cart_items():
            price = entry.get("price")
            quantity = entry.get("quantity")
            if is_number(price) and is_number(quantity):
                total += price * quantity
        return round(total, 2)

    async def get_item_count(self) -> int:
        return sum(
            int(entry["quantity"])
            for entry in await self.get_cart_items()
            if is_number(entry.get("quantity"))
        )

