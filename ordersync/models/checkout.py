"""
ordersync — Checkout wire models and the result envelope
"""
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ordersync.models.delivery import utc_now_iso
from ordersync.models.order import Order


class CheckoutRequest(BaseModel):
    """JSON body POSTed to the checkout endpoint."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    order_id: str | None = None
    customer_info: dict[str, str]
    items: list[dict[str, Any]]
    pricing: dict[str, float]
    delivery_info: dict[str, Any]
    order_details: dict[str, Any]
    timestamp: str = Field(default_factory=utc_now_iso)
    platform: str = "mobile_app"
    version: str = "1.0"

    @classmethod
    def from_order(cls, order: Order) -> "CheckoutRequest":
        delivery = order.delivery_info
        return cls(
            order_id=order.id,
            customer_info={
                "name": order.customer_name,
                "phone": order.formatted_phone(),
                "email": order.customer_email,
            },
            items=[
                {
                    "id": item.id,
                    "name": item.name,
                    "price": item.price,
                    "quantity": item.quantity,
                    "selectedSize": item.selected_size,
                    "selectedOptions": item.selected_options,
                    "total": item.line_total,
                }
                for item in order.items
            ],
            pricing={
                "subtotal": order.subtotal,
                "tax": order.tax,
                "deliveryFee": order.delivery_fee,
                "discount": order.discount,
                "total": order.total,
            },
            delivery_info={
                "address": delivery.get("address") or "",
                "city": delivery.get("city") or "",
                "state": delivery.get("state") or "",
                "zipCode": delivery.get("zipCode") or "",
                "country": delivery.get("country") or "US",
                "latitude": delivery.get("latitude"),
                "longitude": delivery.get("longitude"),
                "instructions": order.delivery_instructions,
            },
            order_details={
                "paymentMethod": order.payment_method,
                "requestedDeliveryDate": order.delivery_date,
                "requestedDeliveryTime": order.delivery_time,
                "notes": order.notes,
                "currency": order.currency,
            },
        )

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


def _first(data: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if data.get(key):
            return data[key]
    return None


class CheckoutResponse(BaseModel):
    """Service reply, normalised across camelCase and snake_case variants."""

    success: bool = True
    message: str = ""
    order_number: str | None = None
    order_id: str | None = None
    confirmation_number: str | None = None
    estimated_delivery_time: str | None = None
    tracking_url: str | None = None
    error: str | None = None
    error_code: str | None = None
    http_status: int = 200
    raw: dict[str, Any] = Field(default_factory=dict, exclude=True)

    @classmethod
    def from_json(cls, data: Mapping[str, Any], http_status: int = 200) -> "CheckoutResponse":
        def as_str(value: Any) -> str | None:
            return str(value) if value is not None else None

        return cls(
            success=data.get("success") is not False,
            message=str(data.get("message") or ""),
            order_number=as_str(_first(data, "order_number", "orderNumber")),
            order_id=as_str(_first(data, "order_id", "orderId")),
            confirmation_number=as_str(_first(data, "confirmation_number", "confirmationNumber")),
            estimated_delivery_time=as_str(
                _first(data, "estimated_delivery_time", "estimatedDeliveryTime")
            ),
            tracking_url=as_str(_first(data, "tracking_url", "trackingUrl")),
            error=as_str(data.get("error") or None),
            error_code=as_str(_first(data, "error_code", "errorCode")),
            http_status=http_status,
            raw=dict(data),
        )

    def is_success(self) -> bool:
        # A reply without any order reference cannot be reconciled locally.
        return self.success and not self.error and bool(
            self.order_number or self.order_id or self.confirmation_number
        )

    def error_message(self) -> str:
        return self.error or self.message or "Unknown error occurred"

    @property
    def reference(self) -> str | None:
        return self.order_number or self.confirmation_number or self.order_id


class ApiResponse(BaseModel):
    """Uniform result envelope handed back to callers."""

    success: bool
    data: Any = None
    message: str = ""
    status_code: int = 200
    error_code: str | None = None
    timestamp: str = Field(default_factory=utc_now_iso)

    @classmethod
    def ok(cls, data: Any = None, message: str = "Request successful") -> "ApiResponse":
        return cls(success=True, data=data, message=message, status_code=200)

    @classmethod
    def error(
        cls,
        message: str,
        status_code: int = 500,
        data: Any = None,
        error_code: str | None = None,
    ) -> "ApiResponse":
        return cls(success=False, data=data, message=message, status_code=status_code, error_code=error_code)
