"""
ordersync — Delivery and order validation

Pure and synchronous, no IO. Field-level checks return a per-field error map;
order-level checks return every violated rule so the checkout pipeline can
report them all in one message.
"""
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel

# +, digits, spaces, hyphens and parentheses, e.g. "+1 (555) 010-0000"
PHONE_FIELD_RE = re.compile(r"^\+?[\d\s\-()]+$")
# 7–15 characters once whitespace is stripped, optional leading + and country digit
ORDER_PHONE_RE = re.compile(r"^\+?[1-9]?[\d\-()]{7,15}$")
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


@dataclass
class ValidationResult:
    is_valid: bool
    errors: dict[str, str] = field(default_factory=dict)


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _as_mapping(data: Any) -> Mapping[str, Any]:
    if isinstance(data, BaseModel):
        return data.model_dump(by_alias=True)
    if isinstance(data, Mapping):
        return data
    return {}


def is_valid_phone(phone: Any) -> bool:
    return bool(PHONE_FIELD_RE.match(_text(phone)))


def is_valid_email(email: Any) -> bool:
    return bool(EMAIL_RE.match(_text(email)))


def format_phone(phone: str) -> str:
    return re.sub(r"[^\d+]", "", phone or "")


def validate_delivery_info(info: Any) -> ValidationResult:
    """Check a DeliveryInfo (model or camelCase mapping). Errors are keyed by wire field name."""
    data = _as_mapping(info)
    errors: dict[str, str] = {}

    if not _text(data.get("name")):
        errors["name"] = "Name is required"

    phone = _text(data.get("phoneNumber"))
    if not phone:
        errors["phoneNumber"] = "Phone number is required"
    elif not is_valid_phone(phone):
        errors["phoneNumber"] = "Please enter a valid phone number"

    email = _text(data.get("email"))
    if not email:
        errors["email"] = "Email is required"
    elif not is_valid_email(email):
        errors["email"] = "Please enter a valid email address"

    if not _text(data.get("address")):
        errors["address"] = "Address is required"

    return ValidationResult(is_valid=not errors, errors=errors)


def validate_order(order: Any) -> list[str]:
    """Every violated aggregate rule, in a stable order. Empty list means valid."""
    data = _as_mapping(order)
    errors: list[str] = []

    if not _text(data.get("customerName")):
        errors.append("Customer name is required")

    phone = _text(data.get("customerPhone"))
    if not phone:
        errors.append("Customer phone is required")
    elif not ORDER_PHONE_RE.match(re.sub(r"\s", "", phone)):
        errors.append("Please enter a valid phone number (7-15 digits)")

    items = data.get("items")
    if not items:
        errors.append("Order must contain at least one item")

    delivery = data.get("deliveryInfo")
    if not isinstance(delivery, Mapping) or not _text(delivery.get("address")):
        errors.append("Delivery address is required")

    total = data.get("total")
    if not isinstance(total, (int, float)) or isinstance(total, bool) or total <= 0:
        errors.append("Order total must be greater than zero")

    return errors
