"""
ordersync — Delivery info model
"""
import re
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class DeliveryInfo(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = "delivery_info_default"
    name: str = ""
    phone_number: str = ""
    email: str = ""
    address: str = ""
    city: str = ""
    zip_code: str = ""
    delivery_instructions: str = ""
    is_default: bool = True
    created_at: str = Field(default_factory=utc_now_iso)
    updated_at: str = Field(default_factory=utc_now_iso)

    def formatted_phone_number(self) -> str:
        return re.sub(r"[^\d+]", "", self.phone_number)

    def formatted_address(self) -> str:
        parts = [self.address, self.city, self.zip_code]
        return ", ".join(part for part in parts if part.strip())

    def display_name(self) -> str:
        return self.name.strip() or "No name provided"

    def to_storage(self) -> dict:
        return self.model_dump(by_alias=True)
