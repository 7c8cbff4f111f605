"""
ordersync — Checkout and order schemas
"""
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CustomerInfo(BaseModel):
    name: str | None = Field(None, max_length=200)
    phone: str | None = Field(None, max_length=40)
    email: str | None = Field(None, max_length=200)


class CheckoutBody(BaseModel):
    """
    Cart items default to the stored cart and delivery info to the saved
    profile, so an empty body checks out whatever the user has on file.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    cart_items: list[dict[str, Any]] | None = None
    delivery_info: dict[str, Any] | None = None
    customer_info: CustomerInfo | None = None
    clear_cart_on_success: bool = True


class RetryOrderBody(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    order: dict[str, Any]
    max_attempts: int | None = Field(None, ge=1, le=10)


class CancelOrderBody(BaseModel):
    reason: str = Field("", max_length=500)
