"""
ordersync — Order aggregate

Status transitions:
  pending   → confirmed | failed
  failed    → pending           (manual retry)
  confirmed → cancelled
"""
import re
import uuid
from collections.abc import Mapping
from enum import Enum as PyEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ordersync.core.errors import OrderStateError
from ordersync.models.cart import as_text, is_number
from ordersync.models.delivery import DeliveryInfo, utc_now_iso


class OrderStatus(str, PyEnum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"
    CANCELLED = "cancelled"


ALLOWED_TRANSITIONS: dict[OrderStatus, set[OrderStatus]] = {
    OrderStatus.PENDING:   {OrderStatus.CONFIRMED, OrderStatus.FAILED},
    OrderStatus.FAILED:    {OrderStatus.PENDING},
    OrderStatus.CONFIRMED: {OrderStatus.CANCELLED},
    OrderStatus.CANCELLED: set(),
}


def _money(value: float) -> float:
    return round(value, 2)


class OrderItem(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = "unknown"
    name: str = "Unknown Item"
    price: float = 0
    quantity: int = 1
    selected_size: str | None = None
    selected_options: list[Any] = Field(default_factory=list)
    image: str | None = None

    @classmethod
    def from_cart_entry(cls, entry: Mapping[str, Any]) -> "OrderItem":
        price = entry.get("price")
        quantity = entry.get("quantity")
        return cls(
            id=str(entry.get("id") or "unknown"),
            name=as_text(entry.get("name"), "Unknown Item"),
            price=price if is_number(price) else 0,
            quantity=int(quantity) if is_number(quantity) and quantity else 1,
            selected_size=as_text(entry.get("selectedSize")) or None,
            selected_options=list(entry.get("selectedOptions") or []),
            image=as_text(entry.get("image")) or None,
        )

    @property
    def line_total(self) -> float:
        return _money(self.price * self.quantity)


class Order(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str | None = None
    local_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    order_number: str | None = None
    customer_id: str | None = None
    customer_name: str = ""
    customer_phone: str = ""
    customer_email: str = ""

    items: list[OrderItem] = Field(default_factory=list)
    subtotal: float = 0
    tax: float = 0
    delivery_fee: float = 0
    discount: float = 0
    total: float = 0

    delivery_info: dict[str, Any] = Field(default_factory=dict)
    delivery_date: str | None = None
    delivery_time: str | None = None
    delivery_instructions: str = ""

    status: OrderStatus = OrderStatus.PENDING
    payment_status: str = "pending"
    payment_method: str = "cash_on_delivery"

    created_at: str = Field(default_factory=utc_now_iso)
    updated_at: str = Field(default_factory=utc_now_iso)
    estimated_delivery_time: str | None = None

    notes: str = ""
    currency: str = "USD"

    @classmethod
    def from_cart_and_delivery(
        cls,
        cart_items: Any,
        delivery_info: DeliveryInfo | Mapping[str, Any] | None,
        customer_info: Mapping[str, Any] | None = None,
        tax_rate: float = 0.08,
        delivery_fee: float = 5.00,
        currency: str = "USD",
    ) -> "Order":
        if not isinstance(cart_items, list):
            cart_items = []
        if isinstance(delivery_info, DeliveryInfo):
            delivery = delivery_info.to_storage()
        else:
            delivery = dict(delivery_info or {})
        customer = dict(customer_info or {})

        order = cls(
            id=None,
            items=[OrderItem.from_cart_entry(e) for e in cart_items if isinstance(e, Mapping)],
            delivery_info=delivery,
            delivery_instructions=as_text(delivery.get("deliveryInstructions")),
            customer_name=as_text(customer.get("name") or delivery.get("name")),
            customer_phone=as_text(customer.get("phone") or delivery.get("phoneNumber")),
            customer_email=as_text(customer.get("email") or delivery.get("email")),
            currency=currency,
        )
        order.id = order.local_id
        return order.recalculate(tax_rate=tax_rate, delivery_fee=delivery_fee)

    @classmethod
    def from_storage(cls, data: Mapping[str, Any]) -> "Order":
        return cls.model_validate(data)

    def to_storage(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")

    # ── Pricing ──────────────────────────────────────────────────────────────
    def recalculate(self, tax_rate: float = 0.08, delivery_fee: float = 5.00) -> "Order":
        self.delivery_fee = delivery_fee
        self.subtotal = _money(sum(item.price * item.quantity for item in self.items))
        self.tax = _money(self.subtotal * tax_rate)
        self.total = _money(self.subtotal + self.tax + self.delivery_fee - self.discount)
        return self

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    def formatted_phone(self) -> str:
        return re.sub(r"[^\d+]", "", self.customer_phone)

    def matches(self, key: str) -> bool:
        return key in (self.id, self.local_id, self.order_number)

    # ── Status management ────────────────────────────────────────────────────
    def transition(self, new_status: OrderStatus) -> "Order":
        if new_status != self.status and new_status not in ALLOWED_TRANSITIONS[self.status]:
            raise OrderStateError(
                f"Cannot move order {self.local_id} from '{self.status.value}' to '{new_status.value}'."
            )
        self.status = new_status
        self.updated_at = utc_now_iso()
        return self

    def mark_confirmed(
        self,
        order_number: str | None,
        order_id: str | None,
        estimated_delivery_time: str | None,
    ) -> "Order":
        self.order_number = order_number
        self.id = order_id or order_number or self.id
        self.estimated_delivery_time = estimated_delivery_time
        return self.transition(OrderStatus.CONFIRMED)

    def mark_failed(self, reason: str) -> "Order":
        self.notes = reason
        return self.transition(OrderStatus.FAILED)
